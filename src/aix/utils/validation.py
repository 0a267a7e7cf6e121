# ABOUTME: Validation of artifact names, commands, skills, agents and MCP servers
# ABOUTME: Validators collect issues into a result instead of raising
import os
import re
from dataclasses import dataclass, field
from typing import Literal

from aix.models import Agent, Command, MCPServer, Skill
from aix.names import MAX_NAME_LENGTH, NAME_PATTERN, infer_name

VALID_OS_PLATFORMS = ("darwin", "linux", "windows")
VALID_TRANSPORTS = ("stdio", "sse", "http", "")

# ABOUTME: Tool entries look like Name or Name(argument)
_TOOL_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*(\(.*\))?$")


@dataclass(frozen=True)
class Issue:
    """A validation error or warning.

    ABOUTME: Uses frozen dataclass for immutability
    ABOUTME: Severity level distinguishes between blocking errors and warnings
    """
    field: str
    message: str
    severity: Literal["error", "warning"] = "error"
    value: str = ""

    def __str__(self) -> str:
        prefix = f"{self.field}: " if self.field else ""
        if self.value:
            return f"{prefix}{self.message} (got {self.value!r})"
        return f"{prefix}{self.message}"


@dataclass
class ValidationResult:
    errors: list[Issue] = field(default_factory=list)
    warnings: list[Issue] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def error(self, field_name: str, message: str, value: str = "") -> None:
        self.errors.append(Issue(field_name, message, "error", value))

    def warning(self, field_name: str, message: str, value: str = "") -> None:
        self.warnings.append(Issue(field_name, message, "warning", value))


def name_problem(name: str) -> str | None:
    """Describe why a non-empty name breaks the grammar, or None if it is valid.

    Examples:
        >>> name_problem("review")
        >>> name_problem("INVALID-NAME")
        'name must be lowercase'
    """
    if len(name) > MAX_NAME_LENGTH:
        return f"name exceeds maximum length of {MAX_NAME_LENGTH} characters"
    return _grammar_problem(name)


def _grammar_problem(name: str) -> str | None:
    if NAME_PATTERN.match(name):
        return None
    if name.startswith("-") or name.endswith("-"):
        return "name cannot start or end with a hyphen"
    if "--" in name:
        return "name cannot contain consecutive hyphens"
    if name.lower() != name:
        return "name must be lowercase"
    return "name must start with a letter, be lowercase alphanumeric with single hyphens between segments"


def validate_name(name: str, result: ValidationResult, path: str | None = None) -> None:
    """Check a name against the grammar; infer it from path when missing.

    ABOUTME: Too long and malformed are reported separately
    """
    if not name:
        if not path:
            result.error("name", "name is required when path is not provided for inference")
            return
        inferred = infer_name(path)
        if not inferred or inferred == ".":
            result.error("name", "name is required and could not be inferred from path", path)
            return
        name = inferred

    if len(name) > MAX_NAME_LENGTH:
        result.error("name", f"name exceeds maximum length of {MAX_NAME_LENGTH} characters", name)
    problem = _grammar_problem(name)
    if problem:
        result.error("name", problem, name)


def validate_command(command: Command, path: str | None = None) -> ValidationResult:
    """Validate a command; the name may be inferred from its file path."""
    result = ValidationResult()
    validate_name(command.name, result, path)
    return result


def validate_skill(skill: Skill, skill_dir: str | None = None, strict: bool = False) -> ValidationResult:
    """Validate a skill.

    Args:
        skill: Parsed skill
        skill_dir: Directory holding SKILL.md; when given the name must match it
        strict: Also check allowed-tools syntax

    Returns:
        ValidationResult with any errors/warnings
    """
    result = ValidationResult()

    if not skill.name:
        result.error("name", "name is required")
    else:
        problem = name_problem(skill.name)
        if problem:
            result.error("name", problem, skill.name)
        if skill_dir:
            dir_name = os.path.basename(os.path.normpath(skill_dir))
            if dir_name != skill.name:
                result.error("name", f"skill name must match directory name '{dir_name}'", skill.name)

    if not skill.description.strip():
        result.error("description", "description is required")

    if strict:
        for tool in skill.allowed_tools:
            if not _TOOL_PATTERN.match(tool):
                result.error("allowed-tools", "invalid tool entry", tool)

    return result


def validate_agent(agent: Agent, strict: bool = False) -> ValidationResult:
    result = ValidationResult()
    if not agent.name:
        result.error("name", "name is required")
    else:
        problem = name_problem(agent.name)
        if problem:
            result.error("name", problem, agent.name)
    if strict and not agent.description:
        result.warning("description", "description is recommended for agent discoverability")
    if not agent.instructions.strip() and not agent.name:
        result.error("instructions", "agent file is empty (no frontmatter and no body content)")
    return result


def validate_mcp_server(server: MCPServer) -> ValidationResult:
    """Validate an MCP server configuration.

    ABOUTME: stdio needs a command, sse and http need a url, both set is only a warning
    ABOUTME: platforms restricts by OS: darwin, linux, windows
    """
    result = ValidationResult()

    if not server.name:
        result.error("name", "server name is required")

    if server.transport not in VALID_TRANSPORTS:
        result.error("transport", "transport must be 'stdio', 'sse', 'http', or empty", server.transport)

    if server.transport == "stdio" and not server.command:
        result.error("command", "stdio transport requires command")
    elif server.transport in ("sse", "http") and not server.url:
        result.error("url", f"{server.transport} transport requires URL")
    elif not server.transport and not server.command and not server.url:
        result.error("command/url", "server must have command (for local) or URL (for remote)")

    if server.command and server.url:
        if server.transport == "stdio":
            note = "transport=stdio means command will be used"
        elif server.transport in ("sse", "http"):
            note = f"transport={server.transport} means URL will be used"
        else:
            note = "without explicit transport, command takes precedence"
        result.warning("", f"server has both command and URL; {note}")

    for platform in server.platforms:
        if platform not in VALID_OS_PLATFORMS:
            result.error(
                "platforms",
                f"invalid platform: {platform} (valid: {', '.join(VALID_OS_PLATFORMS)})",
                platform,
            )

    if any(not key for key in server.env):
        result.error("env", "environment variable key cannot be empty")
    if any(not key for key in server.headers):
        result.error("headers", "header key cannot be empty")

    return result
