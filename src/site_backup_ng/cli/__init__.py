"""Command-line interface for site-backup-ng."""
