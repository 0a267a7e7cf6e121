# Filesystem locations for aix and the platforms it manages
import os
from pathlib import Path

# ABOUTME: Closed set of platform ids, in the order platforms are reported
PLATFORM_CLAUDE = "claude"
PLATFORM_OPENCODE = "opencode"
PLATFORM_GEMINI = "gemini"
PLATFORM_NAMES: tuple[str, ...] = (PLATFORM_CLAUDE, PLATFORM_OPENCODE, PLATFORM_GEMINI)

APP_NAME = "aix"


def is_valid_platform(name: str) -> bool:
    return name in PLATFORM_NAMES


def home_dir() -> Path:
    return Path.home()


def config_home() -> Path:
    """$XDG_CONFIG_HOME, defaulting to ~/.config."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return home_dir() / ".config"


def cache_home() -> Path:
    """$XDG_CACHE_HOME, defaulting to ~/.cache."""
    xdg = os.environ.get("XDG_CACHE_HOME")
    if xdg:
        return Path(xdg)
    return home_dir() / ".cache"


def aix_config_dir() -> Path:
    """Directory holding aix's own config.yaml and backups.

    ABOUTME: $AIX_CONFIG_DIR wins over the XDG location
    """
    override = os.environ.get("AIX_CONFIG_DIR")
    if override:
        return Path(override)
    return config_home() / APP_NAME


def repos_cache_dir() -> Path:
    """Directory where repository clones are kept."""
    return cache_home() / APP_NAME / "repos"


class PlatformPaths:
    """Locations of one platform's artifacts for a scope and project root.

    ABOUTME: Subclasses set the directory names and override base_dir()
    ABOUTME: Every accessor returns None when the location cannot be resolved,
    ABOUTME: e.g. project scope without a project root

    The scope is one of "user", "project" or "local" ("default" is resolved
    by the adapter before paths are built).
    """

    commands_subdir = "commands"
    skills_subdir = "skills"
    agents_subdir = "agents"
    mcp_filename = ".mcp.json"
    instructions_filename = "AGENTS.md"

    def __init__(self, scope: str, project_root: str | Path | None = None) -> None:
        self.scope = scope
        self.project_root = Path(project_root) if project_root else None

    def user_dir(self) -> Path:
        raise NotImplementedError

    def project_dir(self, root: Path) -> Path:
        raise NotImplementedError

    def base_dir(self) -> Path | None:
        if self.scope == "user":
            return self.user_dir()
        if self.scope in ("project", "local"):
            root = self.project_root
            if root is None and self.scope == "local":
                root = Path.cwd()
            if root is None:
                return None
            return self.project_dir(root)
        return None

    def _sub(self, name: str) -> Path | None:
        base = self.base_dir()
        if base is None:
            return None
        return base / name

    def command_dir(self) -> Path | None:
        return self._sub(self.commands_subdir)

    def skill_dir(self) -> Path | None:
        return self._sub(self.skills_subdir)

    def agent_dir(self) -> Path | None:
        return self._sub(self.agents_subdir)

    def mcp_config_path(self) -> Path | None:
        return self._sub(self.mcp_filename)

    def instructions_path(self) -> Path | None:
        if self.scope == "user":
            return self.user_dir() / self.instructions_filename
        if self.project_root is None:
            return None
        return self.project_root / self.instructions_filename
