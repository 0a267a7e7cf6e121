# Configuration loading and saving for aix
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from aix.errors import ConfigError
from aix.paths import PLATFORM_NAMES, aix_config_dir, is_valid_platform
from aix.utils.fileutil import atomic_write

CONFIG_VERSION = 1
CONFIG_FILENAME = "config.yaml"


@dataclass
class RepoConfig:
    """A registered repository and its local clone."""
    url: str
    name: str
    path: str
    added_at: str = ""


@dataclass
class Config:
    """aix configuration loaded from config.yaml.

    ABOUTME: default_platforms limits which detected platforms are targeted
    ABOUTME: repos uses the repository name as key for easy lookup
    """
    version: int = CONFIG_VERSION
    default_platforms: list[str] = field(default_factory=lambda: list(PLATFORM_NAMES))
    repos: dict[str, RepoConfig] = field(default_factory=dict)

    def validate(self) -> None:
        if self.version != CONFIG_VERSION:
            raise ConfigError(f"unsupported config version: {self.version}")
        for platform in self.default_platforms:
            if not is_valid_platform(platform):
                raise ConfigError(f"invalid default platform: {platform}")


def get_config_path() -> Path:
    """Return the path to the aix config file.

    ABOUTME: Returns <aix config dir>/config.yaml
    ABOUTME: File may not exist yet; load_config() falls back to defaults
    """
    return aix_config_dir() / CONFIG_FILENAME


def _repo_from_dict(name: str, data: Any) -> RepoConfig:
    if not isinstance(data, dict):
        raise ConfigError(f"repository '{name}' must be a mapping")
    if not data.get("url") or not data.get("path"):
        raise ConfigError(f"repository '{name}' is missing 'url' or 'path'")
    return RepoConfig(
        url=str(data["url"]),
        name=str(data.get("name") or name),
        path=str(data["path"]),
        added_at=str(data.get("added_at") or ""),
    )


def load_config(path: Path | None = None) -> Config:
    """Load and validate the aix config.

    ABOUTME: A missing file yields the defaults
    ABOUTME: Fail-fast on parse errors with clear error messages

    Args:
        path: Config file (default: get_config_path())

    Returns:
        Parsed Config object

    Raises:
        ConfigError: If the YAML is malformed or fails validation
    """
    config_path = path if path is not None else get_config_path()
    if not config_path.exists():
        return Config()

    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"reading config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {config_path} must contain a mapping")

    repos_data = data.get("repos") or {}
    if not isinstance(repos_data, dict):
        raise ConfigError("'repos' must be a mapping")

    config = Config(
        version=data.get("version", CONFIG_VERSION),
        default_platforms=list(data.get("default_platforms") or PLATFORM_NAMES),
        repos={name: _repo_from_dict(name, repo) for name, repo in repos_data.items()},
    )
    config.validate()
    return config


def save_config(config: Config, path: Path | None = None) -> None:
    """Write the config atomically as YAML."""
    config_path = path if path is not None else get_config_path()
    data = {
        "version": config.version,
        "default_platforms": list(config.default_platforms),
        "repos": {
            name: {
                "url": repo.url,
                "name": repo.name,
                "path": repo.path,
                "added_at": repo.added_at,
            }
            for name, repo in sorted(config.repos.items())
        },
    }
    atomic_write(config_path, yaml.safe_dump(data, sort_keys=False, default_flow_style=False))
