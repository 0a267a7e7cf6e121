# OpenCode platform adapter
import dataclasses
import logging
from pathlib import Path
from typing import Any

from aix.models import Command, MCPConfig, MCPServer
from aix.paths import PLATFORM_OPENCODE, PlatformPaths, config_home
from aix.platforms.base import (
    BasePlatform,
    MCPManager,
    merge_unknown,
    split_servers,
    string_list,
    string_map,
)

logger = logging.getLogger(__name__)

MCP_KEY = "mcp"


class OpenCodePaths(PlatformPaths):
    """OpenCode layout.

    ABOUTME: user -> ~/.config/opencode, project -> the project root itself
    ABOUTME: Skill and agent directories are singular; MCP shares opencode.json
    """

    skills_subdir = "skill"
    agents_subdir = "agent"
    mcp_filename = "opencode.json"
    instructions_filename = "AGENTS.md"

    def user_dir(self) -> Path:
        return config_home() / "opencode"

    def project_dir(self, root: Path) -> Path:
        return root


class OpenCodeMCPTranslator:
    """OpenCode MCP schema <-> canonical.

    ABOUTME: "command" is one list [command, *args]; "environment" replaces "env"
    ABOUTME: "type" is local/remote; "enabled": false is written only when disabled
    ABOUTME: OpenCode has no per-OS "platforms" field, so it is dropped with a warning
    """

    platform = PLATFORM_OPENCODE

    def to_canonical(self, data: dict[str, Any]) -> MCPConfig:
        raw_servers, unknown = split_servers(data, MCP_KEY)
        servers = {
            name: self._server_from_dict(name, raw)
            for name, raw in raw_servers.items()
        }
        return MCPConfig(servers=servers, unknown_fields=unknown)

    def from_canonical(self, config: MCPConfig) -> dict[str, Any]:
        servers = {
            name: self._server_to_dict(config.servers[name])
            for name in sorted(config.servers)
        }
        return merge_unknown(config.unknown_fields, MCP_KEY, servers)

    def _server_from_dict(self, name: str, data: Any) -> MCPServer:
        if not isinstance(data, dict):
            raise ValueError(f"Server '{name}' must be an object")

        raw_command = data.get("command")
        if isinstance(raw_command, str):
            command, args = raw_command, []
        else:
            parts = string_list(raw_command, "command")
            command, args = (parts[0], parts[1:]) if parts else ("", [])

        url = data.get("url") or ""
        server_type = data.get("type")
        if server_type == "remote":
            transport = "sse"
        elif server_type == "local":
            transport = "stdio"
        elif url and not command:
            transport = "sse"
        else:
            transport = "stdio"

        # enabled is optional: only an explicit false disables the server
        enabled = data.get("enabled")

        return MCPServer(
            name=name,
            transport=transport,
            command=command,
            args=args,
            url=url,
            headers=string_map(data.get("headers"), "headers"),
            env=string_map(data.get("environment"), "environment"),
            disabled=enabled is False,
        )

    def _server_to_dict(self, server: MCPServer) -> dict[str, Any]:
        if server.platforms:
            logger.warning(
                f"OpenCode does not support 'platforms'; dropping "
                f"{server.platforms} from server '{server.name}'"
            )

        result: dict[str, Any] = {}
        if server.command:
            result["command"] = [server.command, *server.args]
        if server.url:
            result["url"] = server.url
        result["type"] = "remote" if server.is_remote else "local"
        if server.env:
            result["environment"] = dict(server.env)
        if server.headers:
            result["headers"] = dict(server.headers)
        if server.disabled:
            result["enabled"] = False
        return result


class OpenCodePlatform(BasePlatform):
    """Adapter for OpenCode (~/.config/opencode).

    ABOUTME: MCP servers are kept under the "mcp" key of opencode.json
    ABOUTME: Claude-only command fields are stripped on install
    """

    name = PLATFORM_OPENCODE
    display_name = "OpenCode"
    paths_cls = OpenCodePaths

    def build_mcp_manager(self) -> MCPManager:
        return MCPManager(self.paths.mcp_config_path, OpenCodeMCPTranslator())

    def to_platform_command(self, command: Command) -> Command:
        return dataclasses.replace(
            command,
            argument_hint="",
            disable_model_invocation=None,
            user_invocable=None,
            allowed_tools=[],
            context="",
            hooks=[],
            instructions=self.translate_variables(command.instructions),
        )
