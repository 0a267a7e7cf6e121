# ABOUTME: Tests for backup utilities.
# ABOUTME: Covers create_backup, get_backup_dir, cleanup_old_backups and ensure_backed_up.
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from aix import __version__
from aix.utils.backup import (
    MANIFEST_FILE,
    cleanup_old_backups,
    create_backup,
    ensure_backed_up,
    get_backup_dir,
    read_manifest,
)


class FakePlatform:
    def __init__(self, name: str, paths: list[Path]) -> None:
        self.name = name
        self._paths = paths

    def backup_paths(self) -> list[Path]:
        return self._paths


class TestGetBackupDir:
    """Tests for get_backup_dir function."""

    def test_returns_path_object(self):
        """Test that get_backup_dir returns a Path object."""
        assert isinstance(get_backup_dir(), Path)

    def test_backup_dir_location(self, tmp_path):
        """Test that backup dir lives under the aix config dir."""
        assert get_backup_dir() == tmp_path / "aix-config" / "backups"


class TestCreateBackup:
    """Tests for create_backup function."""

    def test_missing_sources_return_none(self, tmp_path):
        """Test that nothing is created when no source exists."""
        assert create_backup("claude", [tmp_path / "none.json"], tmp_path / "backups") is None
        assert not (tmp_path / "backups").exists()

    def test_copies_files_and_directories(self, tmp_path):
        """Test that files and directory trees are copied."""
        config = tmp_path / "settings.json"
        config.write_text('{"a": 1}')
        commands = tmp_path / "commands"
        commands.mkdir()
        (commands / "review.md").write_text("Review")

        backup_dir = create_backup("gemini", [config, commands], tmp_path / "backups")

        assert backup_dir is not None
        assert backup_dir.parent == tmp_path / "backups" / "gemini"
        assert (backup_dir / "0" / "settings.json").read_text() == '{"a": 1}'
        assert (backup_dir / "1" / "commands" / "review.md").read_text() == "Review"

    def test_manifest_records_files(self, tmp_path):
        """Test that the manifest lists each file with its sha256."""
        config = tmp_path / "opencode.json"
        config.write_text("{}")

        backup_dir = create_backup("opencode", [config], tmp_path / "backups")
        manifest = read_manifest(backup_dir)

        assert manifest["version"] == 1
        assert manifest["platform"] == "opencode"
        assert manifest["aix_version"] == __version__
        assert manifest["files"] == [{
            "source": str(config),
            "relative": "0/opencode.json",
            "sha256": "44136fa355b3678a1146ad16f7e8649e94fb4fc21fe77e8310c060f61caaff8a",
        }]
        assert json.loads((backup_dir / MANIFEST_FILE).read_text()) == manifest

    def test_same_second_backups_do_not_collide(self, tmp_path):
        """Test that a second backup in the same second gets a suffix."""
        source = tmp_path / "a.json"
        source.write_text("{}")
        with patch("aix.utils.backup.datetime") as mock_dt:
            mock_dt.now.return_value.strftime.return_value = "20260101T000000"
            mock_dt.now.return_value.isoformat.return_value = "2026-01-01T00:00:00+00:00"
            first = create_backup("claude", [source], tmp_path / "backups")
            second = create_backup("claude", [source], tmp_path / "backups")
        assert first.name == "20260101T000000"
        assert second.name == "20260101T000000-1"


class TestCleanupOldBackups:
    """Tests for cleanup_old_backups function."""

    def test_keeps_five_newest(self, tmp_path):
        """Test that only the five most recent backups remain."""
        platform_dir = tmp_path / "claude"
        for day in range(1, 8):
            (platform_dir / f"2026010{day}T120000").mkdir(parents=True)

        deleted = cleanup_old_backups(platform_dir)

        assert sorted(p.name for p in deleted) == ["20260101T120000", "20260102T120000"]
        assert len(list(platform_dir.iterdir())) == 5

    def test_ignores_unrelated_entries(self, tmp_path):
        """Test that non-backup entries are never deleted."""
        platform_dir = tmp_path / "claude"
        (platform_dir / "keep-me").mkdir(parents=True)
        (platform_dir / "20260101T120000").mkdir()
        assert cleanup_old_backups(platform_dir, max_backups=0) == [platform_dir / "20260101T120000"]
        assert (platform_dir / "keep-me").exists()

    def test_missing_dir(self, tmp_path):
        """Test that a missing platform dir deletes nothing."""
        assert cleanup_old_backups(tmp_path / "none") == []


class TestEnsureBackedUp:
    """Tests for ensure_backed_up function."""

    def test_backs_up_once_per_session(self, tmp_path):
        """Test that the second call for a platform is a no-op."""
        source = tmp_path / "x.json"
        source.write_text("{}")
        platform = FakePlatform("claude", [source])

        assert ensure_backed_up(platform, tmp_path / "backups") is not None
        assert ensure_backed_up(platform, tmp_path / "backups") is None
        assert len(list((tmp_path / "backups" / "claude").iterdir())) == 1

    def test_failed_backup_is_retried(self, tmp_path):
        """Test that a failing backup is attempted again on the next call."""
        source = tmp_path / "x.json"
        source.write_text("{}")
        platform = FakePlatform("claude", [source])

        with patch("aix.utils.backup.shutil.copy2", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                ensure_backed_up(platform, tmp_path / "backups")
        assert ensure_backed_up(platform, tmp_path / "backups") is not None
