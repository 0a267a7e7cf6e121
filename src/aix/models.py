# Core data models for aix
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Protocol, runtime_checkable

# ABOUTME: Which configuration location an operation targets
# ABOUTME: "default" lets each platform pick its preferred scope
Scope = Literal["user", "project", "local", "default"]
SCOPES: tuple[str, ...] = ("user", "project", "local", "default")

Transport = Literal["stdio", "sse", "http", ""]

# ABOUTME: Canonical variables understood by every platform
VAR_ARGUMENTS = "$ARGUMENTS"
VAR_SELECTION = "$SELECTION"


def parse_tool_list(value: Any) -> list[str]:
    """Normalize a tool list from YAML.

    ABOUTME: Accepts a space-delimited string or a list of strings
    ABOUTME: Returns an empty list for None or empty input

    Examples:
        >>> parse_tool_list("Read Write Bash(git:*)")
        ['Read', 'Write', 'Bash(git:*)']
        >>> parse_tool_list(["Read", "Write"])
        ['Read', 'Write']
    """
    if value is None or value == "":
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, list):
        return [str(item) for item in value]
    raise ValueError(f"tool list must be a string or list of strings, got {type(value).__name__}")


def parse_compatibility(value: Any) -> dict[str, str]:
    """Normalize skill compatibility from YAML.

    ABOUTME: Accepts {platform: constraint} or ["platform constraint", ...]
    ABOUTME: List entries without a constraint map to an empty string
    """
    if not value:
        return {}
    if isinstance(value, dict):
        return {str(k): "" if v is None else str(v) for k, v in value.items()}
    if isinstance(value, list):
        result: dict[str, str] = {}
        for entry in value:
            parts = str(entry).split(None, 1)
            if not parts:
                continue
            result[parts[0]] = parts[1] if len(parts) > 1 else ""
        return result
    raise ValueError(f"compatibility must be a mapping or list, got {type(value).__name__}")


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _opt_bool(value: Any) -> bool | None:
    if value is None:
        return None
    return bool(value)


def _emit(record: Any, keys: dict[str, str]) -> dict[str, Any]:
    """Build ordered frontmatter metadata from a record, skipping empty values."""
    meta: dict[str, Any] = {}
    for f in fields(record):
        key = keys.get(f.name)
        if key is None:
            continue
        value = getattr(record, f.name)
        if value is None or value == "" or value == [] or value == {}:
            continue
        meta[key] = value
    return meta


# Frontmatter key for each record attribute; instructions is the body
COMMAND_KEYS = {
    "name": "name",
    "description": "description",
    "model": "model",
    "agent": "agent",
    "argument_hint": "argument-hint",
    "disable_model_invocation": "disable-model-invocation",
    "user_invocable": "user-invocable",
    "allowed_tools": "allowed-tools",
    "context": "context",
    "hooks": "hooks",
}

SKILL_KEYS = {
    "name": "name",
    "description": "description",
    "version": "version",
    "author": "author",
    "license": "license",
    "tools": "tools",
    "allowed_tools": "allowed-tools",
    "triggers": "triggers",
    "compatibility": "compatibility",
    "metadata": "metadata",
}

AGENT_KEYS = {
    "name": "name",
    "description": "description",
    "model": "model",
    "mode": "mode",
    "temperature": "temperature",
}


@dataclass
class Command:
    """Canonical slash command.

    ABOUTME: Instructions hold the markdown body, everything else is frontmatter
    ABOUTME: Optional booleans stay None when unset so they are never emitted
    """
    name: str = ""
    description: str = ""
    model: str = ""
    agent: str = ""
    argument_hint: str = ""
    disable_model_invocation: bool | None = None
    user_invocable: bool | None = None
    allowed_tools: list[str] = field(default_factory=list)
    context: str = ""
    hooks: list[str] = field(default_factory=list)
    instructions: str = ""

    @classmethod
    def from_metadata(cls, meta: dict[str, Any], body: str = "") -> "Command":
        hooks = meta.get("hooks") or []
        return cls(
            name=_str(meta.get("name")),
            description=_str(meta.get("description")),
            model=_str(meta.get("model")),
            agent=_str(meta.get("agent")),
            argument_hint=_str(meta.get("argument-hint")),
            disable_model_invocation=_opt_bool(meta.get("disable-model-invocation")),
            user_invocable=_opt_bool(meta.get("user-invocable")),
            allowed_tools=parse_tool_list(meta.get("allowed-tools")),
            context=_str(meta.get("context")),
            hooks=[str(h) for h in hooks] if isinstance(hooks, list) else [str(hooks)],
            instructions=body,
        )

    def to_metadata(self) -> dict[str, Any]:
        return _emit(self, COMMAND_KEYS)


@dataclass
class Skill:
    """Canonical skill, stored as <skill-dir>/<name>/SKILL.md."""
    name: str = ""
    description: str = ""
    version: str = ""
    author: str = ""
    license: str = ""
    tools: list[str] = field(default_factory=list)
    allowed_tools: list[str] = field(default_factory=list)
    triggers: list[str] = field(default_factory=list)
    compatibility: dict[str, str] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
    instructions: str = ""

    @classmethod
    def from_metadata(cls, meta: dict[str, Any], body: str = "") -> "Skill":
        triggers = meta.get("triggers") or []
        extra = meta.get("metadata") or {}
        if not isinstance(extra, dict):
            raise ValueError("metadata must be a mapping")
        return cls(
            name=_str(meta.get("name")),
            description=_str(meta.get("description")),
            version=_str(meta.get("version")),
            author=_str(meta.get("author")),
            license=_str(meta.get("license")),
            tools=parse_tool_list(meta.get("tools")),
            allowed_tools=parse_tool_list(meta.get("allowed-tools")),
            triggers=[str(t) for t in triggers] if isinstance(triggers, list) else [str(triggers)],
            compatibility=parse_compatibility(meta.get("compatibility")),
            metadata=dict(extra),
            instructions=body,
        )

    def to_metadata(self) -> dict[str, Any]:
        return _emit(self, SKILL_KEYS)


@dataclass
class Agent:
    """Canonical agent, stored as <agent-dir>/<name>.md."""
    name: str = ""
    description: str = ""
    model: str = ""
    mode: str = ""
    temperature: float | None = None
    instructions: str = ""

    @classmethod
    def from_metadata(cls, meta: dict[str, Any], body: str = "") -> "Agent":
        temperature = meta.get("temperature")
        return cls(
            name=_str(meta.get("name")),
            description=_str(meta.get("description")),
            model=_str(meta.get("model")),
            mode=_str(meta.get("mode")),
            temperature=None if temperature is None else float(temperature),
            instructions=body,
        )

    def to_metadata(self) -> dict[str, Any]:
        return _emit(self, AGENT_KEYS)


@dataclass(frozen=True)
class MCPServer:
    """Immutable canonical MCP server configuration.

    ABOUTME: Uses frozen dataclass to prevent accidental mutation
    ABOUTME: name mirrors the key in MCPConfig.servers and is never serialized
    ABOUTME: Empty transport means "infer from url / command"
    """
    name: str
    transport: Transport = ""
    command: str = ""
    args: list[str] = field(default_factory=list)
    url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    env: dict[str, str] = field(default_factory=dict)
    disabled: bool = False
    platforms: list[str] = field(default_factory=list)

    @property
    def effective_transport(self) -> Literal["stdio", "sse", "http"]:
        """Explicit transport, or sse when only a url is set, else stdio."""
        if self.transport:
            return self.transport
        if self.url and not self.command:
            return "sse"
        return "stdio"

    @property
    def is_remote(self) -> bool:
        return self.effective_transport in ("sse", "http")


@dataclass
class MCPConfig:
    """MCP servers of one config file plus top-level keys aix does not own.

    ABOUTME: unknown_fields is filled on load and written back untouched on save
    """
    servers: dict[str, MCPServer] = field(default_factory=dict)
    unknown_fields: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class MCPTranslator(Protocol):
    """Converts between canonical MCPConfig and one platform's JSON schema."""

    @property
    def platform(self) -> str:
        ...

    def to_canonical(self, data: dict[str, Any]) -> MCPConfig:
        ...

    def from_canonical(self, config: MCPConfig) -> dict[str, Any]:
        ...


@runtime_checkable
class PlatformAdapter(Protocol):
    """Protocol for platform-specific artifact adapters.

    ABOUTME: Defines interface all platform adapters must implement
    ABOUTME: Uses @runtime_checkable for isinstance() support
    """

    @property
    def name(self) -> str:
        """Short platform id from the closed set."""
        ...

    @property
    def display_name(self) -> str:
        """Human-readable platform name."""
        ...

    @property
    def scope(self) -> str:
        ...

    def is_available(self) -> bool:
        ...

    def backup_paths(self) -> list[Path]:
        ...

    def translate_variables(self, content: str) -> str:
        ...

    def translate_to_canonical(self, content: str) -> str:
        ...

    def validate_variables(self, content: str) -> None:
        ...

    def to_platform_command(self, command: Command) -> Command:
        ...

    def list_commands(self) -> list[Command]:
        ...

    def get_command(self, name: str) -> Command:
        ...

    def install_command(self, command: Command) -> None:
        ...

    def uninstall_command(self, name: str) -> None:
        ...

    def list_skills(self) -> list[Skill]:
        ...

    def get_skill(self, name: str) -> Skill:
        ...

    def install_skill(self, skill: Skill) -> None:
        ...

    def uninstall_skill(self, name: str) -> None:
        ...

    def list_agents(self) -> list[Agent]:
        ...

    def get_agent(self, name: str) -> Agent:
        ...

    def install_agent(self, agent: Agent) -> None:
        ...

    def uninstall_agent(self, name: str) -> None:
        ...

    def list_mcp_servers(self) -> list[MCPServer]:
        ...

    def get_mcp_server(self, name: str) -> MCPServer:
        ...

    def add_mcp_server(self, server: MCPServer) -> None:
        ...

    def remove_mcp_server(self, name: str) -> None:
        ...

    def enable_mcp_server(self, name: str) -> None:
        ...

    def disable_mcp_server(self, name: str) -> None:
        ...
