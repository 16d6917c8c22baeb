"""
Backup and atomic JSON writes for the projects database.

Every write of a database file first snapshots the previous version into a
timestamped backup, then replaces the file atomically. Old snapshots are
rotated by count and age.
"""

from __future__ import annotations

import contextlib
import json
import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

DEFAULT_KEEP_COUNT = 10
DEFAULT_KEEP_DAYS = 30
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S_%f"
TIMESTAMP_PATTERN = re.compile(r"_(\d{8}_\d{6}_\d{6})\.")
BACKUP_NAME_PATTERN = re.compile(r"(.+)_\d{8}_\d{6}_\d{6}\.json$")


@dataclass
class BackupInfo:
    """A backup file on disk."""

    path: Path
    timestamp: datetime
    size_bytes: int
    db_name: str

    @property
    def age_days(self) -> float:
        return (datetime.now() - self.timestamp).total_seconds() / 86400

    @property
    def size_human(self) -> str:
        if self.size_bytes < 1024:
            return f"{self.size_bytes} B"
        elif self.size_bytes < 1024 * 1024:
            return f"{self.size_bytes / 1024:.1f} KB"
        else:
            return f"{self.size_bytes / (1024 * 1024):.1f} MB"


def parse_backup_timestamp(filename: str) -> datetime | None:
    """Extract the timestamp from a name like 'projects_db_20260101_120000_000001.json'."""
    match = TIMESTAMP_PATTERN.search(filename)
    if match:
        try:
            return datetime.strptime(match.group(1), TIMESTAMP_FORMAT)
        except ValueError:
            return None
    return None


def list_backups(backup_dir: Path, db_name: str | None = None) -> list[BackupInfo]:
    """List backups in a directory, newest first.

    Args:
        backup_dir: Directory containing backups
        db_name: Optional filter by database name (e.g., 'projects_db')
    """
    backup_dir = Path(backup_dir)
    if not backup_dir.exists():
        return []

    pattern = f"{db_name}_*.json" if db_name else "*.json"
    backups = []

    for path in backup_dir.glob(pattern):
        timestamp = parse_backup_timestamp(path.name)
        name_match = BACKUP_NAME_PATTERN.match(path.name)
        if timestamp is None or name_match is None:
            continue
        if db_name and name_match.group(1) != db_name:
            continue
        backups.append(
            BackupInfo(
                path=path,
                timestamp=timestamp,
                size_bytes=path.stat().st_size,
                db_name=name_match.group(1),
            )
        )

    return sorted(backups, key=lambda b: b.timestamp, reverse=True)


def create_backup(file_path: Path, backup_dir: Path | None = None) -> Path:
    """Copy *file_path* to a timestamped backup.

    Args:
        file_path: File to back up
        backup_dir: Destination (defaults to file_path.parent / 'backups')

    Returns:
        Path to the backup file

    Raises:
        FileNotFoundError: If file_path doesn't exist
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Cannot backup non-existent file: {file_path}")

    if backup_dir is None:
        backup_dir = file_path.parent / "backups"

    backup_dir = Path(backup_dir)
    backup_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)
    backup_path = backup_dir / f"{file_path.stem}_{timestamp}{file_path.suffix}"
    shutil.copy2(file_path, backup_path)

    return backup_path


def cleanup_old_backups(
    backup_dir: Path,
    db_name: str,
    keep_last: int = DEFAULT_KEEP_COUNT,
    keep_days: int | None = None,
) -> list[Path]:
    """Remove old backups of *db_name*.

    The newest ``keep_last`` backups always survive. Beyond those, a backup is
    removed when it is older than ``keep_days`` (or unconditionally when
    ``keep_days`` is None).

    Returns:
        Removed backup paths
    """
    cutoff = datetime.now() - timedelta(days=keep_days) if keep_days is not None else None

    removed = []
    for i, info in enumerate(list_backups(backup_dir, db_name)):
        if i < keep_last:
            continue
        if cutoff is None or info.timestamp < cutoff:
            info.path.unlink()
            removed.append(info.path)

    return removed


def rollback_database(db_path: Path, backup_dir: Path, backup_index: int = 0) -> Path:
    """Restore a database file from one of its backups.

    The current file is itself backed up before being replaced, so a rollback
    can be undone by rolling back again.

    Args:
        db_path: Database file to restore
        backup_dir: Directory containing backups
        backup_index: 0 = most recent backup, 1 = the one before, ...

    Returns:
        Path to the backup that was restored

    Raises:
        FileNotFoundError: If no suitable backup exists
    """
    db_name = db_path.stem
    backups = list_backups(backup_dir, db_name)

    if not backups:
        raise FileNotFoundError(f"No backups found for {db_name}")

    if backup_index >= len(backups):
        raise FileNotFoundError(
            f"Backup index {backup_index} out of range (only {len(backups)} backups)"
        )

    chosen = backups[backup_index]

    if db_path.exists():
        create_backup(db_path, backup_dir)

    shutil.copy2(chosen.path, db_path)

    return chosen.path


def safe_write_json(
    file_path: Path,
    data: Any,
    create_backup_first: bool = True,
    backup_dir: Path | None = None,
    keep_backups: int = DEFAULT_KEEP_COUNT,
    keep_days: int | None = DEFAULT_KEEP_DAYS,
) -> Path | None:
    """Write JSON atomically, backing up the previous file first.

    Returns:
        Path to the backup file if one was created, None otherwise

    Raises:
        ValueError: If data cannot be serialized to JSON
        OSError: If the file cannot be written
    """
    file_path = Path(file_path)
    backup_path = None

    # Serialize before touching the disk
    try:
        json_str = json.dumps(data, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Cannot serialize data to JSON: {e}") from e

    if create_backup_first and file_path.exists():
        backup_path = create_backup(file_path, backup_dir)
        cleanup_old_backups(
            backup_dir or (file_path.parent / "backups"),
            file_path.stem,
            keep_backups,
            keep_days,
        )

    file_path.parent.mkdir(parents=True, exist_ok=True)
    temp_fd, temp_path = tempfile.mkstemp(
        suffix=".json",
        prefix=f".{file_path.name}.",
        dir=file_path.parent,
        text=True,
    )

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            f.write(json_str)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        Path(temp_path).replace(file_path)
    except Exception as e:
        with contextlib.suppress(OSError):
            Path(temp_path).unlink()
        raise OSError(f"Failed to write {file_path}: {e}") from e

    return backup_path
