# ABOUTME: Tests for the git wrapper: URL validation, name derivation and subprocess calls
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from aix.errors import GitError, InvalidGitURLError
from aix.utils import git


class TestValidateUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/acme/tools.git",
            "ssh://git@github.com/acme/tools.git",
            "git@github.com:acme/tools.git",
            "file:///srv/repos/tools",
        ],
    )
    def test_accepts(self, url):
        """Test that supported URL forms are accepted."""
        git.validate_url(url)
        assert git.is_url(url)

    @pytest.mark.parametrize(
        "url,fragment",
        [
            ("", "empty"),
            ("--upload-pack=evil", "cannot start with '-'"),
            ("ext::sh -c evil", "ext::"),
            ("github.com/acme/tools", "missing protocol"),
            ("ftp://host/repo.git", "unsupported protocol"),
        ],
    )
    def test_rejects(self, url, fragment):
        """Test that dangerous or malformed URLs are rejected."""
        with pytest.raises(InvalidGitURLError, match=fragment):
            git.validate_url(url)
        assert not git.is_url(url)


class TestLooksLikeGitUrl:
    def test_classification(self):
        """Test the cheap URL heuristic used for install routing."""
        assert git.looks_like_git_url("git@github.com:a/b.git")
        assert git.looks_like_git_url("https://github.com/a/b")
        assert git.looks_like_git_url("b.git")
        assert not git.looks_like_git_url("./my-cmd")
        assert not git.looks_like_git_url("review")


class TestDeriveRepoName:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("https://github.com/acme/Team-Commands.git", "team-commands"),
            ("git@github.com:acme/tools.git", "tools"),
            ("https://example.com/repos/prompts/", "prompts"),
        ],
    )
    def test_derive(self, url, expected):
        """Test that the last path segment becomes the name."""
        assert git.derive_repo_name(url) == expected


class TestSubprocess:
    def test_clone_invocation(self, tmp_path):
        """Test that clone runs a shallow git clone."""
        with patch("aix.utils.git.subprocess.run", return_value=MagicMock(returncode=0)) as mock_run:
            git.clone("https://github.com/acme/tools.git", tmp_path / "tools")
        args = mock_run.call_args[0][0]
        assert args == ["git", "clone", "--depth=1", "https://github.com/acme/tools.git", str(tmp_path / "tools")]

    def test_clone_validates_before_running(self, tmp_path):
        """Test that no subprocess starts for an invalid URL."""
        with patch("aix.utils.git.subprocess.run") as mock_run:
            with pytest.raises(InvalidGitURLError):
                git.clone("-oProxyCommand=x", tmp_path)
        mock_run.assert_not_called()

    def test_failure_raises_git_error(self, tmp_path):
        """Test that a non-zero exit becomes GitError with stderr."""
        failed = MagicMock(returncode=128, stderr="fatal: repository not found\n", stdout="")
        with patch("aix.utils.git.subprocess.run", return_value=failed):
            with pytest.raises(GitError, match="git clone failed: fatal: repository not found"):
                git.clone("https://github.com/acme/missing.git", tmp_path / "m")

    def test_missing_git_executable(self):
        """Test that a missing git binary raises GitError."""
        with patch("aix.utils.git.subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(GitError, match="not found"):
                git.pull(Path("/repo"))

    def test_pull_invocation(self):
        """Test that pull is a fast-forward pull inside the clone."""
        with patch("aix.utils.git.subprocess.run", return_value=MagicMock(returncode=0)) as mock_run:
            git.pull(Path("/cache/tools"))
        assert mock_run.call_args[0][0] == ["git", "-C", "/cache/tools", "pull", "--ff-only"]
