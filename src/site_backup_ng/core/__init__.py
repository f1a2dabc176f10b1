"""Command logic for backup-all, independent of the CLI and transport."""
