# ABOUTME: Thin wrapper around the git executable
# ABOUTME: URLs are validated before any subprocess is started
import os
import re
import subprocess
from pathlib import Path
from urllib.parse import urlparse

from aix.errors import GitError, InvalidGitURLError

ALLOWED_SCHEMES = ("http", "https", "ssh", "git", "file")

# ABOUTME: scp-style remotes such as git@github.com:user/repo.git
_SCP_LIKE = re.compile(r"^[\w-]+@[\w.-]+:[\w./-]+\.git$")


def looks_like_git_url(source: str) -> bool:
    """Cheap syntactic test used to route install sources.

    Examples:
        >>> looks_like_git_url("git@github.com:user/repo.git")
        True
        >>> looks_like_git_url("./my-cmd")
        False
    """
    return source.startswith("git@") or "://" in source or source.endswith(".git")


def validate_url(url: str) -> None:
    """Reject URLs that could be abused as git options or transports.

    Raises:
        InvalidGitURLError: For empty, option-like, ext:: or unsupported URLs
    """
    if not url:
        raise InvalidGitURLError("git URL cannot be empty")
    if url.startswith("-"):
        raise InvalidGitURLError(f"git URL cannot start with '-': {url}")
    if url.startswith("ext::"):
        raise InvalidGitURLError(f"ext:: protocol is not allowed: {url}")
    if _SCP_LIKE.match(url):
        return

    scheme = urlparse(url).scheme
    if not scheme:
        raise InvalidGitURLError(f"missing protocol scheme in git URL: {url}")
    if scheme not in ALLOWED_SCHEMES:
        raise InvalidGitURLError(f"unsupported protocol scheme '{scheme}' in git URL: {url}")


def is_url(url: str) -> bool:
    try:
        validate_url(url)
    except InvalidGitURLError:
        return False
    return True


def _run(action: str, args: list[str]) -> None:
    try:
        proc = subprocess.run(args, capture_output=True, text=True, check=False)
    except FileNotFoundError as e:
        raise GitError("git executable not found in PATH") from e
    if proc.returncode != 0:
        detail = proc.stderr.strip() or proc.stdout.strip()
        raise GitError(f"git {action} failed: {detail}")


def clone(url: str, dest: Path, depth: int = 1) -> None:
    """Shallow-clone url into dest.

    Raises:
        InvalidGitURLError: If url fails validation
        GitError: If git exits non-zero
    """
    validate_url(url)
    _run("clone", ["git", "clone", f"--depth={depth}", url, os.fspath(dest)])


def pull(repo_path: Path) -> None:
    """Fast-forward an existing clone."""
    _run("pull", ["git", "-C", os.fspath(repo_path), "pull", "--ff-only"])


def derive_repo_name(url: str) -> str:
    """Repository name from a URL: last path segment, no .git, lowercased.

    Examples:
        >>> derive_repo_name("git@github.com:acme/Team-Commands.git")
        'team-commands'
    """
    if url.startswith("git@") and ":" in url:
        url = url.rsplit(":", 1)[1]
    name = url.rstrip("/").rsplit("/", 1)[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return name.lower()
