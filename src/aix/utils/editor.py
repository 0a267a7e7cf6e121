# ABOUTME: Opens files in the user's editor
# ABOUTME: Resolution order: $EDITOR, $VISUAL, nano, vi
import os
import shlex
import shutil
import subprocess
from pathlib import Path

from aix.errors import AixError


def detect_editor() -> str:
    """Return the editor command line to use."""
    editor = os.environ.get("EDITOR")
    if editor:
        return editor
    visual = os.environ.get("VISUAL")
    if visual:
        return visual
    if shutil.which("nano"):
        return "nano"
    return "vi"


def open_in_editor(path: Path) -> None:
    """Run the editor on path and wait for it to exit.

    ABOUTME: The editor value may carry arguments, e.g. "code --wait"

    Raises:
        AixError: If the editor cannot be found or exits non-zero
    """
    parts = shlex.split(detect_editor())
    if not parts:
        raise AixError("no editor found")

    executable = shutil.which(parts[0])
    if executable is None:
        raise AixError(f"editor executable '{parts[0]}' not found")

    print(f"Opening {path} with {parts[0]}...")
    result = subprocess.run([executable, *parts[1:], os.fspath(path)], check=False)
    if result.returncode != 0:
        raise AixError(f"editor exited with status {result.returncode}")
