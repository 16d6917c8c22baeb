"""Core utilities for folio."""

from folio.core.backup import (
    DEFAULT_KEEP_COUNT,
    DEFAULT_KEEP_DAYS,
    BackupInfo,
    create_backup,
    list_backups,
    rollback_database,
    safe_write_json,
)
from folio.core.config import get_paths, get_site_root
from folio.core.errors import (
    AuthFailure,
    BootstrapUnavailable,
    FolioError,
    NotFound,
    Outcome,
    PermissionDenied,
    StorageUnavailable,
)

__all__ = [
    # Backup
    "create_backup",
    "safe_write_json",
    "list_backups",
    "rollback_database",
    "BackupInfo",
    "DEFAULT_KEEP_COUNT",
    "DEFAULT_KEEP_DAYS",
    # Config
    "get_site_root",
    "get_paths",
    # Errors
    "FolioError",
    "NotFound",
    "BootstrapUnavailable",
    "StorageUnavailable",
    "AuthFailure",
    "PermissionDenied",
    "Outcome",
]
