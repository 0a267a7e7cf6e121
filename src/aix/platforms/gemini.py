# Gemini CLI platform adapter
import logging
from pathlib import Path
from typing import Any

import tomli

from aix.models import VAR_ARGUMENTS, VAR_SELECTION, Command, MCPConfig, MCPServer
from aix.paths import PLATFORM_GEMINI, PlatformPaths, home_dir
from aix.platforms.base import (
    BasePlatform,
    CommandManager,
    MCPManager,
    string_list,
    string_map,
)
from aix.utils.toml_writer import dumps_simple

logger = logging.getLogger(__name__)

MCP_KEY = "mcp"
SERVERS_KEY = "servers"


class GeminiPaths(PlatformPaths):
    """Gemini CLI layout.

    ABOUTME: user -> ~/.gemini, project -> <root>/.gemini
    ABOUTME: Commands are TOML files; MCP servers live in settings.json
    """

    mcp_filename = "settings.json"
    instructions_filename = "GEMINI.md"

    def user_dir(self) -> Path:
        return home_dir() / ".gemini"

    def project_dir(self, root: Path) -> Path:
        return root / ".gemini"


class TOMLCommandManager(CommandManager):
    """Commands stored as <name>.toml with "description" and "prompt" keys."""

    ext = ".toml"

    def _load(self, content: str, path: Path) -> dict[str, Any]:
        try:
            return tomli.loads(content)
        except tomli.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {path}: {e}") from e

    def read_header(self, path: Path) -> dict[str, Any]:
        data = self._load(path.read_text(encoding="utf-8"), path)
        return {"description": data.get("description", "")}

    def decode(self, content: str, path: Path) -> Command:
        data = self._load(content, path)
        return Command(
            description=str(data.get("description", "")),
            instructions=str(data.get("prompt", "")),
        )

    def encode(self, record: Command) -> str:
        return dumps_simple({
            "description": record.description,
            "prompt": record.instructions,
        })


class GeminiMCPTranslator:
    """Gemini settings.json MCP schema <-> canonical.

    ABOUTME: Servers sit under {"mcp": {"servers": {...}}} with a positive "enabled"
    ABOUTME: No "platforms" field; it is dropped with a warning
    """

    platform = PLATFORM_GEMINI

    def to_canonical(self, data: dict[str, Any]) -> MCPConfig:
        unknown = {k: v for k, v in data.items() if k != MCP_KEY}
        section = data.get(MCP_KEY) or {}
        if not isinstance(section, dict):
            raise ValueError(f"'{MCP_KEY}' must be an object")
        raw_servers = section.get(SERVERS_KEY) or {}
        if not isinstance(raw_servers, dict):
            raise ValueError(f"'{MCP_KEY}.{SERVERS_KEY}' must be an object")

        servers: dict[str, MCPServer] = {}
        for name, raw in raw_servers.items():
            if not isinstance(raw, dict):
                raise ValueError(f"Server '{name}' must be an object")
            url = raw.get("url") or ""
            servers[name] = MCPServer(
                name=name,
                transport="sse" if url else "stdio",
                command=raw.get("command") or "",
                args=string_list(raw.get("args"), "args"),
                url=url,
                headers=string_map(raw.get("headers"), "headers"),
                env=string_map(raw.get("env"), "env"),
                disabled=not raw.get("enabled", True),
            )
        return MCPConfig(servers=servers, unknown_fields=unknown)

    def from_canonical(self, config: MCPConfig) -> dict[str, Any]:
        servers: dict[str, Any] = {}
        for name in sorted(config.servers):
            server = config.servers[name]
            if server.platforms:
                logger.warning(
                    f"Gemini CLI does not support 'platforms'; dropping "
                    f"{server.platforms} from server '{name}'"
                )
            entry: dict[str, Any] = {}
            if server.command:
                entry["command"] = server.command
            if server.args:
                entry["args"] = list(server.args)
            if server.url:
                entry["url"] = server.url
            if server.env:
                entry["env"] = dict(server.env)
            if server.headers:
                entry["headers"] = dict(server.headers)
            entry["enabled"] = not server.disabled
            servers[name] = entry

        result = dict(config.unknown_fields)
        result[MCP_KEY] = {SERVERS_KEY: servers}
        return result


class GeminiPlatform(BasePlatform):
    """Adapter for Gemini CLI (~/.gemini).

    ABOUTME: Translates $ARGUMENTS / $SELECTION into {{argument}} / {{selection}}
    ABOUTME: Commands keep only description and prompt
    """

    name = PLATFORM_GEMINI
    display_name = "Gemini CLI"
    paths_cls = GeminiPaths
    command_manager_cls = TOMLCommandManager

    platform_variables = {
        VAR_ARGUMENTS: "{{argument}}",
        VAR_SELECTION: "{{selection}}",
    }
    canonical_variables = {
        "{{argument}}": VAR_ARGUMENTS,
        "{{args}}": VAR_ARGUMENTS,
        "{{selection}}": VAR_SELECTION,
    }

    def build_mcp_manager(self) -> MCPManager:
        return MCPManager(self.paths.mcp_config_path, GeminiMCPTranslator())

    def to_platform_command(self, command: Command) -> Command:
        return Command(
            name=command.name,
            description=command.description,
            instructions=self.translate_variables(command.instructions),
        )
