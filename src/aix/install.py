# Install dispatcher: resolves a source string and installs an artifact to platforms
import json
import logging
import os
import shutil
import sys
import tempfile
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from aix import frontmatter
from aix.errors import (
    AixError,
    ConflictError,
    InvalidInputError,
    NoReposConfiguredError,
    ResourceNotFoundError,
    ValidationFailedError,
)
from aix.models import Agent, Command, MCPServer, Skill
from aix.names import infer_name
from aix.platforms import BasePlatform
from aix.platforms.claude import MCP_SERVERS_KEY, ClaudeMCPTranslator
from aix.registry import Registry
from aix.repos import RepoManager, Resource, find_by_name, resources_in_repo
from aix.utils import git
from aix.utils.backup import ensure_backed_up
from aix.utils.fileutil import read_text_limited
from aix.utils.validation import (
    ValidationResult,
    validate_agent,
    validate_command,
    validate_mcp_server,
    validate_skill,
)

logger = logging.getLogger(__name__)


def looks_like_path(source: str) -> bool:
    """True for ./x, ../x, /x or anything containing a path separator.

    Examples:
        >>> looks_like_path("./my-cmd/")
        True
        >>> looks_like_path("review")
        False
    """
    if source.startswith(("./", "../", "/")):
        return True
    if os.sep in source:
        return True
    return os.altsep is not None and os.altsep in source


def might_be_path(source: str, kind: str) -> bool:
    """True if the user probably meant a file but forgot --file."""
    lower = source.lower()
    if kind == "mcp":
        if lower.endswith(".json"):
            return True
    elif lower.endswith(".md"):
        return True
    return "\\" in source


def _first_markdown(directory: Path, preferred: str) -> Path | None:
    """preferred if present, else the first non-underscore .md file by name."""
    candidate = directory / preferred
    if candidate.is_file():
        return candidate
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.is_file() and entry.name.endswith(".md") and not entry.name.startswith("_"):
            return entry
    return None


def copy_to_scratch(resource: Resource) -> tuple[Path, Path]:
    """Copy a repository resource into a fresh scratch directory.

    ABOUTME: Directory resources keep their directory name inside the scratch dir
    ABOUTME: Flat files are copied to the scratch root

    Returns:
        Tuple of (scratch root to delete, path to install from)
    """
    source = resource.source_path
    if not source.exists():
        raise ResourceNotFoundError(f"{resource.type} '{resource.name}' missing from cache: {source}")

    scratch = Path(tempfile.mkdtemp(prefix="aix-install-"))
    try:
        if source.is_dir():
            target = scratch / source.name
            shutil.copytree(source, target)
            return scratch, target
        shutil.copy2(source, scratch / source.name)
        return scratch, scratch
    except OSError:
        shutil.rmtree(scratch, ignore_errors=True)
        raise


def select_resource(
    query: str,
    matches: list[Resource],
    prompt: Callable[[str], str] = input,
    interactive: bool | None = None,
) -> Resource:
    """Pick one of several repository matches.

    ABOUTME: An empty answer selects the first candidate
    ABOUTME: Without a terminal on stdin the first candidate is taken silently

    Raises:
        InvalidInputError: If the answer is not a number in range
        AixError: If input ends before an answer is given
    """
    if not matches:
        raise ResourceNotFoundError(f"no resources to select for '{query}'")
    if len(matches) == 1:
        return matches[0]
    if interactive is None:
        interactive = sys.stdin.isatty()
    if not interactive:
        return matches[0]

    print(f"Multiple resources found for '{query}':")
    for index, resource in enumerate(matches, start=1):
        line = f"  [{index}] {resource.name} ({resource.repo_name})"
        if resource.description:
            line += f" - {resource.description}"
        print(line)

    try:
        answer = prompt("Select [1]: ").strip()
    except EOFError as e:
        raise AixError("selection cancelled") from e

    if not answer:
        return matches[0]
    try:
        choice = int(answer)
    except ValueError as e:
        raise InvalidInputError(f"invalid selection: '{answer}' is not a number") from e
    if choice < 1 or choice > len(matches):
        raise InvalidInputError(f"invalid selection: {choice} is out of range [1-{len(matches)}]")
    return matches[choice - 1]


def _report(result: ValidationResult, label: str) -> None:
    """Raise on validation errors, print warnings otherwise."""
    if result.has_errors:
        raise ValidationFailedError(f"{label} validation failed", result.errors, result.warnings)
    for warning in result.warnings:
        print(f"  ⚠ {warning.message}")


class Installer:
    """Classifies an install source and installs from git, a repository or a path.

    ABOUTME: Subclasses implement install_local() for one artifact kind
    ABOUTME: All targets are checked for conflicts before anything is written
    ABOUTME: Each target is backed up once per process before its first write
    """

    kind = "artifact"
    noun = "artifact"
    label = "Artifact"
    # Resource type in the repository index
    resource_type = ""

    def __init__(
        self,
        registry: Registry,
        platforms: Iterable[str] | None = None,
        force: bool = False,
        defaults: Iterable[str] | None = None,
        repo_manager: RepoManager | None = None,
        prompt: Callable[[str], str] = input,
        interactive: bool | None = None,
    ) -> None:
        self.registry = registry
        self.platforms = list(platforms) if platforms else None
        self.force = force
        self.defaults = list(defaults) if defaults is not None else None
        self.repo_manager = repo_manager
        self.prompt = prompt
        self.interactive = interactive

    def targets(self) -> list[BasePlatform]:
        return self.registry.resolve_platforms(self.platforms, self.defaults)

    def install(self, source: str, force_file: bool = False) -> int:
        """Install from a source string; returns the number of target platforms.

        Raises:
            ResourceNotFoundError: If the source matches nothing
            ConflictError: If a target already has the artifact and force is off
            ValidationFailedError: If the artifact does not validate
        """
        if force_file:
            if git.looks_like_git_url(source):
                return self.install_from_git(source)
            return self.install_local(Path(source))

        if git.looks_like_git_url(source):
            return self.install_from_git(source)
        if looks_like_path(source):
            return self.install_local(Path(source))

        repos_configured = True
        try:
            matches = find_by_name(source, self.resource_type, self.repo_manager)
        except NoReposConfiguredError:
            repos_configured = False
            matches = []

        if matches:
            return self.install_from_repo(source, matches)

        if might_be_path(source, self.kind) and os.path.exists(source):
            raise ResourceNotFoundError(
                f"{self.noun} '{source}' not found in repositories, but a local file exists at that path.\n"
                f"Did you mean: aix {self.kind} install --file {source}"
            )

        if os.path.exists(source):
            return self.install_local(Path(source))

        if not repos_configured:
            raise NoReposConfiguredError(
                f"{self.noun} '{source}' not found: no repositories configured. "
                f"Run 'aix repo add <url>' to add one"
            )
        raise ResourceNotFoundError(f"{self.noun} '{source}' not found in any configured repository")

    def install_from_git(self, url: str) -> int:
        print("Cloning repository...")
        scratch = Path(tempfile.mkdtemp(prefix=f"aix-{self.kind}-"))
        try:
            git.clone(url, scratch, depth=1)
            return self.install_local(scratch)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)

    def install_from_repo(self, query: str, matches: list[Resource]) -> int:
        selected = select_resource(query, matches, self.prompt, self.interactive)
        scratch, path = copy_to_scratch(selected)
        try:
            print(f"Installing from repository: {selected.repo_name}")
            return self.install_local(path)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)

    def install_all_from_repo(self, repo_name: str) -> int:
        """Install every resource of this kind from one repository.

        ABOUTME: Keeps going after a failure and raises once at the end

        Returns:
            Number of resources installed
        """
        matches = resources_in_repo(repo_name, self.resource_type, self.repo_manager)
        if not matches:
            print(f"No {self.kind}s found in repository '{repo_name}'")
            return 0

        print(f"Found {len(matches)} {self.kind}(s) in repository '{repo_name}'. Installing...")
        installed = 0
        for resource in matches:
            print()
            print(f"Installing {resource.name}...")
            try:
                self.install_from_repo(resource.name, [resource])
            except (AixError, OSError, ValueError) as e:
                print(f"Failed to install {resource.name}: {e}", file=sys.stderr)
            else:
                installed += 1

        print()
        print(f"Successfully installed {installed}/{len(matches)} {self.kind}(s) from '{repo_name}'.")
        if installed < len(matches):
            raise AixError(f"some {self.kind}s failed to install")
        return installed

    def install_local(self, path: Path) -> int:
        raise NotImplementedError

    def deploy(
        self,
        name: str,
        exists: Callable[[BasePlatform], bool],
        write: Callable[[BasePlatform], None],
        targets: list[BasePlatform] | None = None,
    ) -> int:
        """Conflict-check every target, then back up and write each in order."""
        platforms = targets if targets is not None else self.targets()
        if not self.force:
            for platform in platforms:
                if exists(platform):
                    raise ConflictError(
                        f"{self.noun} '{name}' already exists on {platform.display_name} "
                        f"(use --force to overwrite)"
                    )

        for platform in platforms:
            backup_dir = ensure_backed_up(platform)
            if backup_dir is not None:
                logger.debug(f"Backed up {platform.name} to {backup_dir}")
            write(platform)
            print(f"Installed '{name}' to {platform.display_name}")

        print(f"✓ {self.label} '{name}' installed to {len(platforms)} platform(s)")
        return len(platforms)


def find_command_file(path: Path) -> Path:
    """The command file for a path: the file itself, or command.md / first .md in a directory."""
    if not path.exists():
        raise ResourceNotFoundError(f"command source not found: {path}")
    if path.is_dir():
        found = _first_markdown(path, "command.md")
        if found is None:
            raise ResourceNotFoundError(
                f"no command file found in {path} (expected command.md or any .md file)"
            )
        return found
    return path


def load_command(path: Path) -> Command:
    """Parse a command; a missing name is inferred from the file or its directory."""
    command_file = find_command_file(path)
    meta, body = frontmatter.parse(read_text_limited(command_file), path=str(command_file))
    command = Command.from_metadata(meta, body)
    if not command.name:
        if command_file.name == "command.md":
            command.name = command_file.resolve().parent.name
        else:
            command.name = infer_name(command_file)
    return command


def load_skill(path: Path) -> tuple[Skill, Path]:
    """Parse <path>/SKILL.md (or path itself); returns the skill and its directory."""
    skill_file = path if path.name == "SKILL.md" else path / "SKILL.md"
    if not skill_file.is_file():
        raise ResourceNotFoundError(f"SKILL.md not found at {path}")
    meta, body = frontmatter.must_parse(read_text_limited(skill_file), path=str(skill_file))
    return Skill.from_metadata(meta, body), skill_file.parent


def load_agent(path: Path) -> Agent:
    if not path.exists():
        raise ResourceNotFoundError(f"agent source not found: {path}")
    agent_file = _first_markdown(path, "AGENT.md") if path.is_dir() else path
    if agent_file is None:
        raise ResourceNotFoundError(f"no AGENT.md found in {path}")
    meta, body = frontmatter.parse(read_text_limited(agent_file), path=str(agent_file))
    agent = Agent.from_metadata(meta, body)
    if not agent.name and agent_file.name != "AGENT.md":
        agent.name = infer_name(agent_file)
    return agent


class CommandInstaller(Installer):
    kind = "command"
    label = "Command"
    noun = "command"
    resource_type = "command"

    def install_local(self, path: Path) -> int:
        command = load_command(path)
        print("Validating command...")
        _report(validate_command(command), "Command")

        targets = self.targets()
        for platform in targets:
            platform.validate_variables(command.instructions)

        return self.deploy(
            command.name,
            lambda p: p.commands.exists(command.name),
            lambda p: p.install_command(p.to_platform_command(command)),
            targets,
        )


class SkillInstaller(Installer):
    kind = "skill"
    label = "Skill"
    noun = "skill"
    resource_type = "skill"

    def install_local(self, path: Path) -> int:
        skill, _ = load_skill(path)
        print("Validating skill...")
        _report(validate_skill(skill), "Skill")

        return self.deploy(
            skill.name,
            lambda p: p.skills.exists(skill.name),
            lambda p: p.install_skill(skill),
        )


class AgentInstaller(Installer):
    kind = "agent"
    label = "Agent"
    noun = "agent"
    resource_type = "agent"

    def install_local(self, path: Path) -> int:
        agent = load_agent(path)
        print("Validating agent...")
        _report(validate_agent(agent), "Agent")

        return self.deploy(
            agent.name,
            lambda p: p.agents.exists(agent.name),
            lambda p: p.install_agent(agent),
        )


def load_servers(path: Path) -> list[MCPServer]:
    """Read MCP servers from a JSON file.

    ABOUTME: Accepts a single canonical server object or an {"mcpServers": {...}} document
    ABOUTME: A single server is named by its "name" key or the file stem
    """
    content = read_text_limited(path)
    try:
        data: Any = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"MCP server file {path} must contain a JSON object")

    translator = ClaudeMCPTranslator()
    if MCP_SERVERS_KEY in data:
        return list(translator.to_canonical(data).servers.values())

    fields = dict(data)
    name = str(fields.pop("name", "") or path.name[: -len(".json")])
    return [translator.server_from_dict(name, fields)]


class MCPInstaller(Installer):
    kind = "mcp"
    label = "MCP server"
    noun = "MCP server"
    resource_type = "mcp"

    def resolve_file(self, path: Path) -> Path:
        if not path.exists():
            raise ResourceNotFoundError(f"MCP server file not found: {path}")
        if path.is_file():
            if not path.name.lower().endswith(".json"):
                raise InvalidInputError(f"expected .json file, got: {path}")
            return path

        search_dir = path / "mcp" if (path / "mcp").is_dir() else path
        candidates = sorted(
            (p for p in search_dir.iterdir() if p.is_file() and p.name.endswith(".json")),
            key=lambda p: p.name,
        )
        if not candidates:
            raise ResourceNotFoundError(f"no MCP server configurations (*.json) found in {search_dir}")
        if len(candidates) == 1:
            return candidates[0]

        options = [
            Resource(name=p.name[: -len(".json")], type="mcp", repo_name=path.name,
                     repo_path=str(search_dir), path=p.name)
            for p in candidates
        ]
        chosen = select_resource(path.name, options, self.prompt, self.interactive)
        return chosen.source_path

    def install_local(self, path: Path) -> int:
        server_file = self.resolve_file(path)
        print("Validating MCP server configuration...")
        servers = load_servers(server_file)
        for server in servers:
            _report(validate_mcp_server(server), "MCP server")

        targets = self.targets()
        if not self.force:
            for platform in targets:
                existing = platform.mcp.load().servers
                for server in servers:
                    if server.name in existing:
                        raise ConflictError(
                            f"MCP server '{server.name}' already exists on {platform.display_name} "
                            f"(use --force to overwrite)"
                        )

        installed = 0
        for server in servers:
            installed = self.deploy(
                server.name,
                lambda p, s=server: s.name in p.mcp.load().servers,
                lambda p, s=server: p.add_mcp_server(s),
                targets,
            )
        return installed


INSTALLERS: dict[str, type[Installer]] = {
    "command": CommandInstaller,
    "skill": SkillInstaller,
    "agent": AgentInstaller,
    "mcp": MCPInstaller,
}
