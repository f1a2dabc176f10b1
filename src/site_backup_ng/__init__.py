"""site-backup-ng: site_backup_ng/__init__.py."""

__version__ = "0.1.0"
