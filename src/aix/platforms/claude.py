# Claude Code platform adapter
import os
from pathlib import Path
from typing import Any

from aix.models import MCPConfig, MCPServer
from aix.paths import PLATFORM_CLAUDE, PlatformPaths, home_dir
from aix.platforms.base import (
    BasePlatform,
    MCPManager,
    merge_unknown,
    split_servers,
    string_list,
    string_map,
)

MCP_SERVERS_KEY = "mcpServers"


class ClaudePaths(PlatformPaths):
    """Claude Code layout.

    ABOUTME: user -> ~/.claude, project -> <root>/.claude, local -> <root or cwd>/.claude
    ABOUTME: Local-scope MCP servers live in ~/.claude.json keyed by project path
    """

    instructions_filename = "CLAUDE.md"

    def user_dir(self) -> Path:
        return home_dir() / ".claude"

    def project_dir(self, root: Path) -> Path:
        return root / ".claude"

    def mcp_config_path(self) -> Path | None:
        if self.scope == "local":
            return home_dir() / ".claude.json"
        return super().mcp_config_path()


class ClaudeMCPTranslator:
    """Claude Code MCP schema <-> canonical.

    ABOUTME: Field names match the canonical schema; "type" is only written for remote servers
    ABOUTME: "http" and "sse" types are kept as distinct transports
    """

    platform = PLATFORM_CLAUDE

    def to_canonical(self, data: dict[str, Any]) -> MCPConfig:
        raw_servers, unknown = split_servers(data, MCP_SERVERS_KEY)
        servers = {
            name: self.server_from_dict(name, raw)
            for name, raw in raw_servers.items()
        }
        return MCPConfig(servers=servers, unknown_fields=unknown)

    def from_canonical(self, config: MCPConfig) -> dict[str, Any]:
        servers = {
            name: self.server_to_dict(config.servers[name])
            for name in sorted(config.servers)
        }
        return merge_unknown(config.unknown_fields, MCP_SERVERS_KEY, servers)

    def server_from_dict(self, name: str, data: Any) -> MCPServer:
        if not isinstance(data, dict):
            raise ValueError(f"Server '{name}' must be an object")

        server_type = data.get("type") or data.get("transport") or ""
        command = data.get("command") or ""
        url = data.get("url") or ""
        if server_type in ("http", "sse"):
            transport = server_type
        elif server_type == "stdio":
            transport = "stdio"
        elif url and not command:
            transport = "sse"
        else:
            transport = "stdio"

        return MCPServer(
            name=name,
            transport=transport,
            command=command,
            args=string_list(data.get("args"), "args"),
            url=url,
            headers=string_map(data.get("headers"), "headers"),
            env=string_map(data.get("env"), "env"),
            disabled=bool(data.get("disabled", False)),
            platforms=string_list(data.get("platforms"), "platforms"),
        )

    def server_to_dict(self, server: MCPServer) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if server.is_remote:
            result["type"] = server.effective_transport
        if server.command:
            result["command"] = server.command
        if server.args:
            result["args"] = list(server.args)
        if server.url:
            result["url"] = server.url
        if server.headers:
            result["headers"] = dict(server.headers)
        if server.env:
            result["env"] = dict(server.env)
        if server.disabled:
            result["disabled"] = True
        if server.platforms:
            result["platforms"] = list(server.platforms)
        return result


class ClaudePlatform(BasePlatform):
    """Adapter for Claude Code (~/.claude).

    ABOUTME: Commands/agents are markdown files, skills are <name>/SKILL.md
    ABOUTME: Supports the local scope for MCP servers
    """

    name = PLATFORM_CLAUDE
    display_name = "Claude Code"
    paths_cls = ClaudePaths

    def resolve_scope(self, scope: str) -> str:
        return "user" if scope == "default" else scope

    def build_mcp_manager(self) -> MCPManager:
        project_key = self._project_key if self.scope == "local" else None
        return MCPManager(self.paths.mcp_config_path, ClaudeMCPTranslator(), project_key)

    def _project_key(self) -> str:
        root = self.project_root if self.project_root is not None else Path.cwd()
        return os.path.abspath(root)
