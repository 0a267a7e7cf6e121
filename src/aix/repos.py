# Repository management and the resource index built from repository clones
from __future__ import annotations

import json
import logging
import shutil
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from aix import frontmatter
from aix.config import Config, RepoConfig, get_config_path, load_config, save_config
from aix.errors import (
    GitError,
    InvalidRepoNameError,
    NoReposConfiguredError,
    RepoExistsError,
    RepoNotFoundError,
)
from aix.names import NAME_PATTERN
from aix.paths import repos_cache_dir
from aix.utils import git
from aix.utils.fileutil import read_text_limited

logger = logging.getLogger(__name__)

ResourceType = Literal["skill", "command", "agent", "mcp"]
RESOURCE_TYPES: tuple[str, ...] = ("skill", "command", "agent", "mcp")


@dataclass(frozen=True)
class Resource:
    """An installable artifact found inside a repository clone.

    ABOUTME: path is relative to the repository root
    """
    name: str
    type: str
    repo_name: str
    repo_path: str
    path: str
    description: str = ""
    repo_url: str = ""

    @property
    def source_path(self) -> Path:
        return Path(self.repo_path) / self.path

    def to_dict(self) -> dict[str, str]:
        data = asdict(self)
        data.pop("repo_path")
        return data


class RepoManager:
    """Registers repositories in the aix config and keeps their clones.

    ABOUTME: Clones live under the cache dir, one directory per repository name
    ABOUTME: Config is persisted before cached data is deleted
    """

    def __init__(self, config_path: Path | None = None, cache_dir: Path | None = None) -> None:
        self.config_path = config_path if config_path is not None else get_config_path()
        self.cache_dir = cache_dir if cache_dir is not None else repos_cache_dir()

    def _load(self) -> Config:
        return load_config(self.config_path)

    def _save(self, config: Config) -> None:
        save_config(config, self.config_path)

    def add(self, url: str, name: str | None = None) -> RepoConfig:
        """Clone a repository and register it.

        Raises:
            InvalidGitURLError: If url is not an acceptable git URL
            InvalidRepoNameError: If the (derived) name breaks the grammar
            RepoExistsError: If the name is already registered
            GitError: If cloning fails
        """
        git.validate_url(url)

        repo_name = name or git.derive_repo_name(url)
        if not NAME_PATTERN.match(repo_name):
            raise InvalidRepoNameError(
                f"name '{repo_name}' must be lowercase alphanumeric with hyphens, starting with a letter"
            )

        config = self._load()
        existing = config.repos.get(repo_name)
        if existing is not None:
            raise RepoExistsError(
                f"name '{repo_name}' is already used by {existing.url}; "
                f"use --name to specify an alternate name"
            )

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        dest = self.cache_dir / repo_name
        try:
            git.clone(url, dest)
        except GitError:
            shutil.rmtree(dest, ignore_errors=True)
            raise

        repo = RepoConfig(
            url=url,
            name=repo_name,
            path=str(dest),
            added_at=datetime.now(timezone.utc).isoformat(),
        )
        config.repos[repo_name] = repo
        try:
            self._save(config)
        except OSError:
            shutil.rmtree(dest, ignore_errors=True)
            raise
        return repo

    def list(self) -> list[RepoConfig]:
        return sorted(self._load().repos.values(), key=lambda r: r.name)

    def get(self, name: str) -> RepoConfig:
        repo = self._load().repos.get(name)
        if repo is None:
            raise RepoNotFoundError(f"repository '{name}' not found")
        return repo

    def remove(self, name: str) -> None:
        config = self._load()
        repo = config.repos.pop(name, None)
        if repo is None:
            raise RepoNotFoundError(f"repository '{name}' not found")
        self._save(config)
        try:
            shutil.rmtree(repo.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Config updated but failed to remove cached directory {repo.path}: {e}")

    def update(self, name: str | None = None) -> list[RepoConfig]:
        """git pull one repository, or all of them when name is None."""
        repos = [self.get(name)] if name else self.list()
        for repo in repos:
            git.pull(Path(repo.path))
        return repos


# Repository scanning


def _header(path: Path) -> dict:
    with open(path, encoding="utf-8") as f:
        return frontmatter.parse_header(f, path=str(path))


def _describe_mcp(data: dict) -> str:
    if data.get("url"):
        return f"Remote MCP server at {data['url']}"
    command = data.get("command")
    if isinstance(command, list):
        command = " ".join(str(part) for part in command)
    if command:
        args = " ".join(str(a) for a in data.get("args") or [])
        return f"{command} {args}".strip()
    return ""


def _scan_skills(repo: RepoConfig, root: Path) -> list[Resource]:
    resources: list[Resource] = []
    skills_dir = root / "skills"
    if not skills_dir.is_dir():
        return resources
    for entry in sorted(skills_dir.iterdir()):
        skill_file = entry / "SKILL.md"
        if not skill_file.is_file():
            continue
        try:
            meta, _ = frontmatter.must_parse(read_text_limited(skill_file), path=str(skill_file))
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping skill {entry.name} in {repo.name}: {e}")
            continue
        resources.append(Resource(
            name=str(meta.get("name") or entry.name),
            type="skill",
            repo_name=repo.name,
            repo_path=repo.path,
            path=f"skills/{entry.name}",
            description=str(meta.get("description") or ""),
            repo_url=repo.url,
        ))
    return resources


def _scan_markdown(repo: RepoConfig, root: Path, kind: str, subdir: str, dir_file: str) -> list[Resource]:
    """Commands and agents: <subdir>/<name>.md or <subdir>/<name>/<dir_file>."""
    resources: list[Resource] = []
    base = root / subdir
    if not base.is_dir():
        return resources
    for entry in sorted(base.iterdir()):
        if entry.name.startswith((".", "_")):
            continue
        if entry.is_dir():
            target = entry / dir_file
            name = entry.name
            rel = f"{subdir}/{entry.name}"
        elif entry.name.endswith(".md"):
            target = entry
            name = entry.name[: -len(".md")]
            rel = f"{subdir}/{entry.name}"
        else:
            continue
        if not target.is_file():
            continue
        try:
            meta = _header(target)
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping {kind} {name} in {repo.name}: {e}")
            continue
        resources.append(Resource(
            name=name,
            type=kind,
            repo_name=repo.name,
            repo_path=repo.path,
            path=rel,
            description=str(meta.get("description") or ""),
            repo_url=repo.url,
        ))
    return resources


def _scan_mcp(repo: RepoConfig, root: Path) -> list[Resource]:
    resources: list[Resource] = []
    mcp_dir = root / "mcp"
    if not mcp_dir.is_dir():
        return resources
    for entry in sorted(mcp_dir.iterdir()):
        if not entry.is_file() or not entry.name.endswith(".json"):
            continue
        try:
            data = json.loads(read_text_limited(entry))
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping MCP server {entry.name} in {repo.name}: {e}")
            continue
        resources.append(Resource(
            name=entry.name[: -len(".json")],
            type="mcp",
            repo_name=repo.name,
            repo_path=repo.path,
            path=f"mcp/{entry.name}",
            description=_describe_mcp(data) if isinstance(data, dict) else "",
            repo_url=repo.url,
        ))
    return resources


def scan_repo(repo: RepoConfig) -> list[Resource]:
    """All skills, commands, agents and MCP servers in one clone."""
    root = Path(repo.path)
    if not root.is_dir():
        logger.warning(f"Repository {repo.name} has no clone at {root}")
        return []
    return [
        *_scan_skills(repo, root),
        *_scan_markdown(repo, root, "command", "commands", "command.md"),
        *_scan_markdown(repo, root, "agent", "agents", "AGENT.md"),
        *_scan_mcp(repo, root),
    ]


def scan_all(repos: list[RepoConfig]) -> list[Resource]:
    resources: list[Resource] = []
    for repo in repos:
        resources.extend(scan_repo(repo))
    return resources


def find_by_name(name: str, resource_type: str, manager: RepoManager | None = None) -> list[Resource]:
    """Resources of one type named exactly name across every repository.

    Raises:
        NoReposConfiguredError: If no repository is registered
    """
    mgr = manager or RepoManager()
    repos = mgr.list()
    if not repos:
        raise NoReposConfiguredError()
    return [r for r in scan_all(repos) if r.name == name and r.type == resource_type]


def resources_in_repo(repo_name: str, resource_type: str, manager: RepoManager | None = None) -> list[Resource]:
    mgr = manager or RepoManager()
    repo = mgr.get(repo_name)
    return [r for r in scan_repo(repo) if r.type == resource_type]


def search(
    query: str,
    resource_type: str | None = None,
    repo_name: str | None = None,
    manager: RepoManager | None = None,
) -> list[Resource]:
    """Case-insensitive substring search over names and descriptions.

    ABOUTME: An empty query matches everything
    """
    mgr = manager or RepoManager()
    repos = [mgr.get(repo_name)] if repo_name else mgr.list()
    if not repos:
        raise NoReposConfiguredError()

    needle = query.lower()
    matches = [
        r for r in scan_all(repos)
        if (resource_type is None or r.type == resource_type)
        and (needle in r.name.lower() or needle in r.description.lower())
    ]
    return sorted(matches, key=lambda r: (r.name, r.repo_name))
