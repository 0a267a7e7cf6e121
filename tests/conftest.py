# ABOUTME: Shared fixtures for the aix test suite
# ABOUTME: Every test runs with HOME, XDG dirs and AIX_CONFIG_DIR inside tmp_path
from collections.abc import Iterator
from pathlib import Path

import pytest

from aix.utils.backup import reset_backup_session

REVIEW_COMMAND = "---\nname: review\ndescription: Review code changes\n---\n\nReview the code.\n"


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Redirect every user-level location into tmp_path."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
    monkeypatch.setenv("AIX_CONFIG_DIR", str(tmp_path / "aix-config"))
    reset_backup_session()
    yield home
    reset_backup_session()


@pytest.fixture
def installed_platforms(isolated_home: Path) -> Path:
    """Make claude, opencode and gemini look installed."""
    (isolated_home / ".claude").mkdir()
    (isolated_home / ".config" / "opencode").mkdir(parents=True)
    (isolated_home / ".gemini").mkdir()
    return isolated_home


@pytest.fixture
def review_command_dir(tmp_path: Path) -> Path:
    """A directory holding command.md for the "review" command."""
    directory = tmp_path / "my-cmd"
    directory.mkdir()
    (directory / "command.md").write_text(REVIEW_COMMAND)
    return directory
