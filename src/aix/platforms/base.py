# Platform adapter base: artifact managers shared by every platform
import dataclasses
import logging
import re
import shutil
from pathlib import Path
from typing import Any, Callable, Generic, TypeVar

from aix import frontmatter
from aix.errors import (
    AgentNotFoundError,
    AixError,
    CommandNotFoundError,
    InvalidAgentError,
    InvalidCommandError,
    InvalidInputError,
    InvalidMCPServerError,
    InvalidSkillError,
    MCPServerNotFoundError,
    NotFoundError,
    SkillNotFoundError,
    UnsupportedVariableError,
)
from aix.models import (
    VAR_ARGUMENTS,
    VAR_SELECTION,
    Agent,
    Command,
    MCPConfig,
    MCPServer,
    MCPTranslator,
    Skill,
)
from aix.paths import PlatformPaths
from aix.utils.fileutil import atomic_write, atomic_write_json, read_json_file, read_text_limited

logger = logging.getLogger(__name__)

R = TypeVar("R", Command, Skill, Agent)

# ABOUTME: Matches $UPPER_CASE variable references in instructions
VARIABLE_PATTERN = re.compile(r"\$[A-Z][A-Z_]+\b")


def string_list(value: Any, field_name: str) -> list[str]:
    """Coerce a JSON list of strings, treating null as empty."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"'{field_name}' must be a list")
    return [str(item) for item in value]


def string_map(value: Any, field_name: str) -> dict[str, str]:
    """Coerce a JSON object of strings, treating null as empty."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"'{field_name}' must be an object")
    return {str(k): str(v) for k, v in value.items()}


def split_servers(data: dict[str, Any], key: str) -> tuple[dict[str, Any], dict[str, Any]]:
    """Separate the servers section from the rest of a config document.

    ABOUTME: A missing or null servers section becomes an empty dict
    ABOUTME: Every other top-level key is returned untouched as unknown fields

    Returns:
        Tuple of (raw servers mapping, unknown top-level fields)
    """
    unknown = {k: v for k, v in data.items() if k != key}
    servers = data.get(key)
    if servers is None:
        return {}, unknown
    if not isinstance(servers, dict):
        raise ValueError(f"'{key}' must be an object")
    return servers, unknown


def merge_unknown(unknown: dict[str, Any], key: str, value: Any) -> dict[str, Any]:
    """Rebuild a config document; the known key overrides an unknown one."""
    result = dict(unknown)
    result[key] = value
    return result


class MarkdownManager(Generic[R]):
    """CRUD over a directory of <name>.md files.

    ABOUTME: The filename is the authoritative artifact name
    ABOUTME: Records with empty metadata are written as a bare body
    ABOUTME: List() reads only headers and returns records sorted by name
    """

    record_cls: type
    not_found: type[NotFoundError] = NotFoundError
    invalid: type[InvalidInputError] = InvalidInputError
    kind = "artifact"
    ext = ".md"
    # Frontmatter keys never written; name comes from the filename
    omit_keys: tuple[str, ...] = ("name",)

    def __init__(self, directory: Callable[[], Path | None]) -> None:
        self._directory = directory

    def path_for(self, name: str) -> Path | None:
        directory = self._directory()
        if not name or directory is None:
            return None
        return directory / f"{name}{self.ext}"

    def _entries(self) -> list[Path]:
        directory = self._directory()
        if directory is None or not directory.is_dir():
            return []
        return sorted(
            entry for entry in directory.iterdir()
            if entry.is_file() and entry.name.endswith(self.ext)
        )

    def names(self) -> list[str]:
        return sorted(entry.name[: -len(self.ext)] for entry in self._entries())

    def exists(self, name: str) -> bool:
        path = self.path_for(name)
        return path is not None and path.is_file()

    def read_header(self, path: Path) -> dict[str, Any]:
        with open(path, encoding="utf-8") as f:
            return frontmatter.parse_header(f, path=str(path))

    def list(self) -> list[R]:
        records: list[R] = []
        for entry in self._entries():
            record = self.record_cls.from_metadata(self.read_header(entry))
            record.name = entry.name[: -len(self.ext)]
            records.append(record)
        return sorted(records, key=lambda r: r.name)

    def decode(self, content: str, path: Path) -> R:
        meta, body = frontmatter.parse(content, path=str(path))
        return self.record_cls.from_metadata(meta, body)

    def encode(self, record: R) -> str:
        meta = {k: v for k, v in record.to_metadata().items() if k not in self.omit_keys}
        body = record.instructions
        if not meta:
            return body if body.endswith("\n") else body + "\n"
        return frontmatter.format(meta, body)

    def get(self, name: str) -> R:
        if not name:
            raise self.invalid(f"invalid {self.kind}: name required")
        path = self.path_for(name)
        if path is None:
            raise self.not_found(f"{self.kind} '{name}' not found")
        try:
            content = read_text_limited(path)
        except FileNotFoundError as e:
            raise self.not_found(f"{self.kind} '{name}' not found") from e
        record = self.decode(content, path)
        record.name = name
        return record

    def install(self, record: R | None) -> None:
        if record is None or not record.name:
            raise self.invalid(f"invalid {self.kind}: name required")
        path = self.path_for(record.name)
        if path is None:
            raise AixError(f"{self.kind} directory is not resolvable for this scope")
        atomic_write(path, self.encode(record))
        logger.debug(f"Wrote {self.kind} '{record.name}' to {path}")

    def uninstall(self, name: str) -> None:
        """Remove an artifact; a missing file is not an error."""
        if not name:
            raise self.invalid(f"invalid {self.kind}: name required")
        path = self.path_for(name)
        if path is None:
            return
        path.unlink(missing_ok=True)


class CommandManager(MarkdownManager[Command]):
    record_cls = Command
    not_found = CommandNotFoundError
    invalid = InvalidCommandError
    kind = "command"


class AgentManager(MarkdownManager[Agent]):
    record_cls = Agent
    not_found = AgentNotFoundError
    invalid = InvalidAgentError
    kind = "agent"


class SkillManager(MarkdownManager[Skill]):
    """CRUD over <skill-dir>/<name>/SKILL.md.

    ABOUTME: The directory name is the skill name; it is also written into SKILL.md frontmatter
    ABOUTME: Uninstall removes the whole skill directory; an empty name is a no-op
    """

    record_cls = Skill
    not_found = SkillNotFoundError
    invalid = InvalidSkillError
    kind = "skill"
    omit_keys = ()
    filename = "SKILL.md"

    def path_for(self, name: str) -> Path | None:
        directory = self._directory()
        if not name or directory is None:
            return None
        return directory / name / self.filename

    def _entries(self) -> list[Path]:
        directory = self._directory()
        if directory is None or not directory.is_dir():
            return []
        return sorted(
            entry / self.filename for entry in directory.iterdir()
            if entry.is_dir() and (entry / self.filename).is_file()
        )

    def names(self) -> list[str]:
        return sorted(entry.parent.name for entry in self._entries())

    def list(self) -> list[Skill]:
        records: list[Skill] = []
        for entry in self._entries():
            record = Skill.from_metadata(self.read_header(entry))
            record.name = entry.parent.name
            records.append(record)
        return sorted(records, key=lambda r: r.name)

    def get(self, name: str) -> Skill:
        if not name:
            raise self.invalid("invalid skill: name required")
        path = self.path_for(name)
        if path is None:
            raise self.not_found(f"skill '{name}' not found")
        try:
            content = read_text_limited(path)
        except FileNotFoundError as e:
            raise self.not_found(f"skill '{name}' not found") from e
        skill = self.decode(content, path)
        skill.name = name
        return skill

    def encode(self, record: Skill) -> str:
        return frontmatter.format(record.to_metadata(), record.instructions)

    def uninstall(self, name: str) -> None:
        if not name:
            return
        path = self.path_for(name)
        if path is None:
            return
        if path.parent.is_dir():
            shutil.rmtree(path.parent)


class MCPManager:
    """CRUD over the MCP servers stored in one JSON config file.

    ABOUTME: The translator maps the platform's JSON schema to MCPConfig
    ABOUTME: Top-level keys aix does not own survive every load/save cycle
    ABOUTME: With project_key set, the file maps absolute project paths to configs
    ABOUTME: and only this project's entry is read or replaced
    """

    def __init__(
        self,
        config_path: Callable[[], Path | None],
        translator: MCPTranslator,
        project_key: Callable[[], str] | None = None,
    ) -> None:
        self._config_path = config_path
        self.translator = translator
        self._project_key = project_key

    def _path(self) -> Path:
        path = self._config_path()
        if path is None:
            raise AixError("MCP config path not configured")
        return path

    def load(self) -> MCPConfig:
        """Load the config; a missing file yields an empty config."""
        data = read_json_file(self._path())
        if self._project_key is not None:
            section = data.get(self._project_key())
            if not isinstance(section, dict):
                return MCPConfig()
            data = section
        return self.translator.to_canonical(data)

    def save(self, config: MCPConfig) -> None:
        path = self._path()
        document = self.translator.from_canonical(config)
        if self._project_key is not None:
            # Re-read so sibling project entries are written back untouched
            outer = read_json_file(path)
            outer[self._project_key()] = document
            document = outer
        atomic_write_json(path, document)

    def list(self) -> list[MCPServer]:
        config = self.load()
        return sorted(config.servers.values(), key=lambda s: s.name)

    def get(self, name: str) -> MCPServer:
        config = self.load()
        if name not in config.servers:
            raise MCPServerNotFoundError(f"MCP server '{name}' not found")
        return config.servers[name]

    def add(self, server: MCPServer | None) -> None:
        """Add or replace a server entry."""
        if server is None or not server.name:
            raise InvalidMCPServerError("invalid MCP server: name required")
        config = self.load()
        config.servers[server.name] = server
        self.save(config)

    def remove(self, name: str) -> None:
        """Remove a server entry; removing a missing server is a no-op."""
        config = self.load()
        if name not in config.servers:
            return
        del config.servers[name]
        self.save(config)

    def _set_disabled(self, name: str, disabled: bool) -> None:
        config = self.load()
        if name not in config.servers:
            raise MCPServerNotFoundError(f"MCP server '{name}' not found")
        config.servers[name] = dataclasses.replace(config.servers[name], disabled=disabled)
        self.save(config)

    def enable(self, name: str) -> None:
        self._set_disabled(name, False)

    def disable(self, name: str) -> None:
        self._set_disabled(name, True)


class BasePlatform:
    """Shared implementation of the PlatformAdapter protocol.

    ABOUTME: Subclasses provide paths_cls, an MCP translator and identity
    ABOUTME: Variable maps translate canonical $VARS into the platform syntax
    """

    name = ""
    display_name = ""
    paths_cls: type[PlatformPaths] = PlatformPaths
    command_manager_cls: type[MarkdownManager[Command]] = CommandManager

    # canonical variable -> platform syntax
    platform_variables: dict[str, str] = {
        VAR_ARGUMENTS: VAR_ARGUMENTS,
        VAR_SELECTION: VAR_SELECTION,
    }
    # platform syntax -> canonical variable
    canonical_variables: dict[str, str] = {}

    def __init__(self, scope: str = "default", project_root: str | Path | None = None) -> None:
        self.scope = self.resolve_scope(scope)
        self.project_root = Path(project_root) if project_root else None
        self.paths = self.paths_cls(self.scope, self.project_root)
        self.commands = self.command_manager_cls(self.paths.command_dir)
        self.skills = SkillManager(self.paths.skill_dir)
        self.agents = AgentManager(self.paths.agent_dir)
        self.mcp = self.build_mcp_manager()

    def resolve_scope(self, scope: str) -> str:
        """Map "default" to user scope; local only has meaning for some platforms."""
        if scope == "default":
            return "user"
        if scope == "local":
            return "project"
        return scope

    def build_mcp_manager(self) -> MCPManager:
        raise NotImplementedError

    def is_available(self) -> bool:
        """A platform is available when its user config directory exists."""
        return self.paths.user_dir().is_dir()

    def backup_paths(self) -> list[Path]:
        candidates = [
            self.paths.command_dir(),
            self.paths.skill_dir(),
            self.paths.agent_dir(),
            self.paths.mcp_config_path(),
            self.paths.instructions_path(),
        ]
        return [p for p in candidates if p is not None]

    # Variable translation

    def translate_variables(self, content: str) -> str:
        for canonical, platform in self.platform_variables.items():
            content = content.replace(canonical, platform)
        return content

    def translate_to_canonical(self, content: str) -> str:
        for platform, canonical in self.canonical_variables.items():
            content = content.replace(platform, canonical)
        return content

    def validate_variables(self, content: str) -> None:
        """Raise UnsupportedVariableError listing unknown $VARS once each."""
        unsupported: list[str] = []
        for var in VARIABLE_PATTERN.findall(content):
            if var not in self.platform_variables and var not in unsupported:
                unsupported.append(var)
        if unsupported:
            raise UnsupportedVariableError(f"unsupported variable: {', '.join(unsupported)}")

    def to_platform_command(self, command: Command) -> Command:
        """Copy a canonical command into this platform's dialect."""
        return dataclasses.replace(
            command,
            allowed_tools=list(command.allowed_tools),
            hooks=list(command.hooks),
            instructions=self.translate_variables(command.instructions),
        )

    # Commands

    def list_commands(self) -> list[Command]:
        return self.commands.list()

    def get_command(self, name: str) -> Command:
        command = self.commands.get(name)
        command.instructions = self.translate_to_canonical(command.instructions)
        return command

    def install_command(self, command: Command) -> None:
        self.commands.install(command)

    def uninstall_command(self, name: str) -> None:
        self.commands.uninstall(name)

    # Skills

    def list_skills(self) -> list[Skill]:
        return self.skills.list()

    def get_skill(self, name: str) -> Skill:
        return self.skills.get(name)

    def install_skill(self, skill: Skill) -> None:
        self.skills.install(skill)

    def uninstall_skill(self, name: str) -> None:
        self.skills.uninstall(name)

    # Agents

    def list_agents(self) -> list[Agent]:
        return self.agents.list()

    def get_agent(self, name: str) -> Agent:
        return self.agents.get(name)

    def install_agent(self, agent: Agent) -> None:
        self.agents.install(agent)

    def uninstall_agent(self, name: str) -> None:
        self.agents.uninstall(name)

    # MCP servers

    def list_mcp_servers(self) -> list[MCPServer]:
        return self.mcp.list()

    def get_mcp_server(self, name: str) -> MCPServer:
        return self.mcp.get(name)

    def add_mcp_server(self, server: MCPServer) -> None:
        self.mcp.add(server)

    def remove_mcp_server(self, name: str) -> None:
        self.mcp.remove(name)

    def enable_mcp_server(self, name: str) -> None:
        self.mcp.enable(name)

    def disable_mcp_server(self, name: str) -> None:
        self.mcp.disable(name)
