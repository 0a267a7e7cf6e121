# ABOUTME: Backup utilities for platform configuration files.
# ABOUTME: Snapshots a platform's backup paths with a manifest, keeps the last 5 per platform.
import hashlib
import json
import logging
import re
import shutil
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from aix import __version__
from aix.paths import aix_config_dir
from aix.utils.fileutil import atomic_write_json

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1
MANIFEST_FILE = "manifest.json"
MAX_BACKUPS_PER_PLATFORM = 5

# ABOUTME: Backup directory names look like 20260108T143022 (optionally -N on collision)
_BACKUP_DIR_PATTERN = re.compile(r"^(\d{8}T\d{6})(-\d+)?$")


class Backupable(Protocol):
    @property
    def name(self) -> str:
        ...

    def backup_paths(self) -> list[Path]:
        ...


def get_backup_dir() -> Path:
    """Get the default backup directory path.

    ABOUTME: Returns <aix config dir>/backups
    ABOUTME: Does not create the directory

    Examples:
        >>> get_backup_dir()
        PosixPath('/Users/user/.config/aix/backups')
    """
    return aix_config_dir() / "backups"


def _sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _new_backup_dir(platform_dir: Path) -> Path:
    stamp = datetime.now().strftime("%Y%m%dT%H%M%S")
    candidate = platform_dir / stamp
    counter = 1
    while candidate.exists():
        candidate = platform_dir / f"{stamp}-{counter}"
        counter += 1
    candidate.mkdir(parents=True)
    return candidate


def create_backup(platform: str, sources: list[Path], backup_root: Path | None = None) -> Path | None:
    """Snapshot the given files and directories for one platform.

    ABOUTME: Layout: <backup_root>/<platform>/<YYYYMMDDTHHMMSS>/<n>/<basename>
    ABOUTME: Uses shutil.copy2()/copytree() to preserve file metadata
    ABOUTME: Writes manifest.json with a sha256 per copied file
    ABOUTME: Sources that do not exist are skipped; returns None if nothing existed

    Args:
        platform: Platform id used as the sub-directory name
        sources: Files and directories to copy
        backup_root: Root backup directory (default: get_backup_dir())

    Returns:
        Path to the created backup directory, or None

    Raises:
        OSError: If copying fails
    """
    existing = [p for p in sources if p.exists()]
    if not existing:
        return None

    root = backup_root if backup_root is not None else get_backup_dir()
    platform_dir = root / platform
    backup_dir = _new_backup_dir(platform_dir)

    files: list[dict[str, Any]] = []
    for index, source in enumerate(existing):
        dest = backup_dir / str(index) / source.name
        dest.parent.mkdir(parents=True, exist_ok=True)
        if source.is_dir():
            shutil.copytree(source, dest)
            copied = sorted(p for p in dest.rglob("*") if p.is_file())
        else:
            shutil.copy2(source, dest)
            copied = [dest]
        for path in copied:
            original = source / path.relative_to(dest) if source.is_dir() else source
            files.append({
                "source": str(original),
                "relative": path.relative_to(backup_dir).as_posix(),
                "sha256": _sha256(path),
            })

    manifest = {
        "version": MANIFEST_VERSION,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "platform": platform,
        "aix_version": __version__,
        "files": files,
    }
    atomic_write_json(backup_dir / MANIFEST_FILE, manifest)

    cleanup_old_backups(platform_dir)
    logger.debug(f"Backed up {len(files)} file(s) for {platform} to {backup_dir}")
    return backup_dir


def read_manifest(backup_dir: Path) -> dict[str, Any]:
    with open(backup_dir / MANIFEST_FILE, encoding="utf-8") as f:
        return json.load(f)


def cleanup_old_backups(platform_dir: Path, max_backups: int = MAX_BACKUPS_PER_PLATFORM) -> list[Path]:
    """Remove old backups of one platform, keeping only the most recent.

    ABOUTME: Sorts backup directories by timestamp descending (newest first)
    ABOUTME: Logs warnings on errors but does not raise exceptions

    Args:
        platform_dir: Directory containing one platform's backups
        max_backups: Maximum backups to keep (default 5)

    Returns:
        List of paths that were deleted
    """
    deleted: list[Path] = []

    if not platform_dir.exists():
        return deleted

    backups: list[tuple[str, int, Path]] = []
    for entry in platform_dir.iterdir():
        if not entry.is_dir():
            continue
        match = _BACKUP_DIR_PATTERN.match(entry.name)
        if not match:
            continue
        suffix = int(match.group(2)[1:]) if match.group(2) else 0
        backups.append((match.group(1), suffix, entry))

    backups.sort(key=lambda x: (x[0], x[1]), reverse=True)

    for _, _, path in backups[max_backups:]:
        try:
            shutil.rmtree(path)
            deleted.append(path)
            logger.debug(f"Deleted old backup: {path}")
        except OSError as e:
            logger.warning(f"Failed to delete old backup {path}: {e}")

    return deleted


# Platforms already backed up by this process
_session_lock = threading.Lock()
_backed_up: set[str] = set()


def ensure_backed_up(platform: Backupable, backup_root: Path | None = None) -> Path | None:
    """Back up a platform once per process before its first modification.

    ABOUTME: Later calls for the same platform are no-ops
    ABOUTME: A failed backup is not recorded, so the next call retries
    """
    with _session_lock:
        if platform.name in _backed_up:
            return None
        result = create_backup(platform.name, platform.backup_paths(), backup_root)
        _backed_up.add(platform.name)
        return result


def reset_backup_session() -> None:
    """Forget which platforms were backed up (used by tests)."""
    with _session_lock:
        _backed_up.clear()
