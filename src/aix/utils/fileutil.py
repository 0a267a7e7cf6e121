# ABOUTME: Atomic file writes and bounded file reads.
# ABOUTME: Writers go through a temp file in the target directory and an os.replace().
import json
import os
import tempfile
from pathlib import Path
from typing import Any, cast

# ABOUTME: Artifact files above this size are refused on read
MAX_FILE_SIZE = 1 << 20

DIR_MODE = 0o755
FILE_MODE = 0o644


def atomic_write(path: Path, data: str | bytes, mode: int = FILE_MODE) -> None:
    """Write data to path so readers see either the old or new file.

    ABOUTME: Creates parent directories (0755) when missing
    ABOUTME: Temp file lives next to the target so the rename stays on one filesystem
    ABOUTME: The temp file is removed if anything fails before the rename

    Args:
        path: Destination file
        data: Text (encoded as UTF-8) or bytes to write
        mode: Permission bits applied to the new file

    Raises:
        OSError: If the directory, temp file, write or rename fails
    """
    payload = data.encode("utf-8") if isinstance(data, str) else data

    path.parent.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=".aix-atomic-", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def atomic_write_json(path: Path, data: Any) -> None:
    """Atomically write JSON with 2-space indentation and a trailing newline.

    ABOUTME: Key order is preserved so unknown fields stay where they were
    """
    text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    atomic_write(path, text)


def read_json_file(path: Path) -> dict[str, Any]:
    """Read JSON file with error handling.

    ABOUTME: Returns empty dict if file doesn't exist
    ABOUTME: Raises ValueError for invalid JSON or a non-object document
    """
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            result = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e

    if result is None:
        return {}
    if not isinstance(result, dict):
        raise ValueError(f"Invalid JSON in {path}: top-level value must be an object")
    return cast(dict[str, Any], result)


def read_text_limited(path: Path, limit: int = MAX_FILE_SIZE) -> str:
    """Read a UTF-8 text file, refusing files larger than limit bytes.

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If the file exceeds the size limit
    """
    size = path.stat().st_size
    if size > limit:
        raise ValueError(f"{path} is too large ({size} bytes, limit {limit})")
    return path.read_text(encoding="utf-8")
