# CLI interface for aix
import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any

from aix import __version__, frontmatter
from aix.config import load_config
from aix.errors import (
    AixError,
    ConfigError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
    ValidationFailedError,
)
from aix.install import INSTALLERS, load_agent, load_command, load_servers, load_skill
from aix.models import SCOPES, MCPServer
from aix.names import sanitize_default_name
from aix.paths import PLATFORM_NAMES
from aix.platforms import BasePlatform
from aix.platforms.claude import ClaudeMCPTranslator
from aix.registry import Registry, new_registry
from aix.repos import RepoManager, search
from aix.utils.backup import ensure_backed_up
from aix.utils.editor import open_in_editor
from aix.utils.fileutil import atomic_write
from aix.utils.validation import (
    ValidationResult,
    name_problem,
    validate_agent,
    validate_command,
    validate_mcp_server,
    validate_skill,
)

logger = logging.getLogger(__name__)

# ABOUTME: Exit codes
# 0 = success, 1 = validation or user error, 2 = config error, 3 = fatal
EXIT_SUCCESS = 0
EXIT_VALIDATION = 1
EXIT_CONFIG_ERROR = 2
EXIT_FATAL = 3

KINDS = ("command", "skill", "agent", "mcp")
LABELS = {"command": "Command", "skill": "Skill", "agent": "Agent", "mcp": "MCP server"}
NOUNS = {"command": "command", "skill": "skill", "agent": "agent", "mcp": "MCP server"}

SECRET_MARKERS = ("TOKEN", "SECRET", "KEY", "PASSWORD", "CREDENTIAL", "AUTH")
SHOW_PREVIEW_LINES = 20


# Helpers


def _project_root(scope: str) -> Path | None:
    return Path.cwd() if scope in ("project", "local") else None


def _registry(args: argparse.Namespace) -> Registry:
    scope = getattr(args, "scope", None) or "default"
    return new_registry(scope, _project_root(scope))


def _targets(args: argparse.Namespace) -> list[BasePlatform]:
    """Platforms selected by --platform, else available defaults from config."""
    config = load_config()
    return _registry(args).resolve_platforms(args.platform, config.default_platforms)


def _is_interactive() -> bool:
    return sys.stdin.isatty()


def _ask(question: str, default: str = "") -> str:
    if not _is_interactive():
        return default
    suffix = f" [{default}]" if default else ""
    answer = input(f"{question}{suffix}: ").strip()
    return answer or default


def _confirm(question: str) -> bool:
    try:
        answer = input(f"{question} [y/N]: ").strip().lower()
    except EOFError:
        return False
    return answer in ("y", "yes")


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _print_issues(result: ValidationResult | ValidationFailedError) -> None:
    if result.errors:
        print("Errors:")
        for issue in result.errors:
            print(f"  - {issue}")
    if result.warnings:
        print("Warnings:")
        for issue in result.warnings:
            print(f"  - {issue}")


def mask_secret(key: str, value: str, show: bool = False) -> str:
    """Mask values whose key looks like a credential.

    Examples:
        >>> mask_secret("GITHUB_TOKEN", "ghp_abcdef1234")
        '****1234'
        >>> mask_secret("DEBUG", "1")
        '1'
    """
    if show or not any(marker in key.upper() for marker in SECRET_MARKERS):
        return value
    if len(value) <= 4:
        return "****"
    return "****" + value[-4:]


def _masked(server: MCPServer, show: bool) -> MCPServer:
    return dataclasses.replace(
        server,
        env={k: mask_secret(k, v, show) for k, v in server.env.items()},
        headers={k: mask_secret(k, v, show) for k, v in server.headers.items()},
    )


def _parse_pairs(values: list[str] | None, flag: str) -> dict[str, str]:
    """Parse repeated KEY=VALUE flags."""
    result: dict[str, str] = {}
    for pair in values or []:
        if "=" not in pair:
            raise InvalidInputError(f"{flag} expects KEY=VALUE, got '{pair}'")
        key, value = pair.split("=", 1)
        result[key.strip()] = value
    return result


# Per-kind artifact access


def _list_artifacts(platform: BasePlatform, kind: str) -> list[Any]:
    if kind == "command":
        return platform.list_commands()
    if kind == "skill":
        return platform.list_skills()
    if kind == "agent":
        return platform.list_agents()
    return platform.list_mcp_servers()


def _get_artifact(platform: BasePlatform, kind: str, name: str) -> Any:
    if kind == "command":
        return platform.get_command(name)
    if kind == "skill":
        return platform.get_skill(name)
    if kind == "agent":
        return platform.get_agent(name)
    return platform.get_mcp_server(name)


def _has_artifact(platform: BasePlatform, kind: str, name: str) -> bool:
    if kind == "command":
        return platform.commands.exists(name)
    if kind == "skill":
        return platform.skills.exists(name)
    if kind == "agent":
        return platform.agents.exists(name)
    return name in platform.mcp.load().servers


def _uninstall_artifact(platform: BasePlatform, kind: str, name: str) -> None:
    if kind == "command":
        platform.uninstall_command(name)
    elif kind == "skill":
        platform.uninstall_skill(name)
    elif kind == "agent":
        platform.uninstall_agent(name)
    else:
        platform.remove_mcp_server(name)


def _artifact_path(platform: BasePlatform, kind: str, name: str) -> Path | None:
    if kind == "command":
        return platform.commands.path_for(name)
    if kind == "skill":
        return platform.skills.path_for(name)
    if kind == "agent":
        return platform.agents.path_for(name)
    return platform.paths.mcp_config_path()


def _holders(args: argparse.Namespace, name: str) -> list[BasePlatform]:
    """Target platforms that currently hold the named artifact.

    Raises:
        NotFoundError: If no target holds it
    """
    holders = [p for p in _targets(args) if _has_artifact(p, args.group, name)]
    if not holders:
        raise NotFoundError(f"{NOUNS[args.group]} '{name}' not found on any platform")
    return holders


def _to_dict(kind: str, record: Any, show_secrets: bool = False) -> dict[str, Any]:
    if kind == "mcp":
        server = _masked(record, show_secrets)
        return {"name": server.name, **ClaudeMCPTranslator().server_to_dict(server)}
    return {"name": record.name, **record.to_metadata()}


# Artifact commands


def cmd_install(args: argparse.Namespace) -> int:
    """Execute install command.

    ABOUTME: Source may be a git URL, a path, or a name looked up in repositories
    ABOUTME: --all-from-repo installs every artifact of this kind from one repository
    """
    config = load_config()
    installer = INSTALLERS[args.group](
        _registry(args),
        platforms=args.platform,
        force=args.force,
        defaults=config.default_platforms,
    )

    if args.all_from_repo:
        installer.install_all_from_repo(args.all_from_repo)
        return EXIT_SUCCESS

    if not args.source:
        print("Error: a source is required (or use --all-from-repo)", file=sys.stderr)
        return EXIT_VALIDATION

    installer.install(args.source, force_file=args.file)
    return EXIT_SUCCESS


def cmd_list(args: argparse.Namespace) -> int:
    """Execute list command.

    ABOUTME: Lists artifacts per target platform, sorted by name
    """
    kind = args.group
    results: dict[str, list[Any]] = {}
    platforms = _targets(args)
    for platform in platforms:
        results[platform.name] = _list_artifacts(platform, kind)

    if args.json:
        _print_json({
            name: [_to_dict(kind, r, getattr(args, "show_secrets", False)) for r in records]
            for name, records in results.items()
        })
        return EXIT_SUCCESS

    for platform in platforms:
        records = results[platform.name]
        print(f"{platform.display_name}:")
        if not records:
            print(f"  (no {NOUNS[kind]}s installed)")
        for record in records:
            if kind == "mcp":
                status = " [disabled]" if record.disabled else ""
                target = record.url if record.is_remote else " ".join([record.command, *record.args])
                print(f"  {record.name:<24} {record.effective_transport:<6} {target}{status}")
            else:
                print(f"  {record.name:<24} {record.description}")
        print()

    total = sum(len(records) for records in results.values())
    print(f"Total: {total} {NOUNS[kind]}(s)")
    return EXIT_SUCCESS


def _print_instructions(text: str, full: bool) -> None:
    lines = text.rstrip("\n").splitlines()
    if full or len(lines) <= SHOW_PREVIEW_LINES:
        print("\n".join(lines))
        return
    print("\n".join(lines[:SHOW_PREVIEW_LINES]))
    print(f"... ({len(lines) - SHOW_PREVIEW_LINES} more lines, use --full to see all)")


def _print_server(server: MCPServer) -> None:
    print(f"  Transport: {server.effective_transport}")
    if server.command:
        print(f"  Command: {server.command}")
    if server.args:
        print(f"  Args: {' '.join(server.args)}")
    if server.url:
        print(f"  URL: {server.url}")
    if server.env:
        print("  Env:")
        for key, value in sorted(server.env.items()):
            print(f"    {key}={value}")
    if server.headers:
        print("  Headers:")
        for key, value in sorted(server.headers.items()):
            print(f"    {key}: {value}")
    if server.platforms:
        print(f"  Platforms: {', '.join(server.platforms)}")
    print(f"  Status: {'disabled' if server.disabled else 'enabled'}")


def cmd_show(args: argparse.Namespace) -> int:
    """Execute show command.

    ABOUTME: Shows the artifact as installed on each platform holding it
    ABOUTME: MCP secrets are masked unless --show-secrets
    """
    kind = args.group
    show_secrets = getattr(args, "show_secrets", False)
    found: list[tuple[BasePlatform, Any]] = []
    for platform in _targets(args):
        try:
            found.append((platform, _get_artifact(platform, kind, args.name)))
        except NotFoundError:
            continue
    if not found:
        raise NotFoundError(f"{NOUNS[kind]} '{args.name}' not found on any platform")

    if args.json:
        data = []
        for platform, record in found:
            entry = _to_dict(kind, record, show_secrets)
            entry["platform"] = platform.name
            if kind != "mcp":
                entry["instructions"] = record.instructions
            data.append(entry)
        _print_json(data)
        return EXIT_SUCCESS

    record = found[0][1]
    print(f"{LABELS[kind]}: {record.name}")
    print(f"Installed on: {', '.join(p.display_name for p, _ in found)}")
    if kind == "mcp":
        _print_server(_masked(record, show_secrets))
        return EXIT_SUCCESS

    for key, value in record.to_metadata().items():
        if key == "name":
            continue
        print(f"{key}: {value}")
    if record.instructions.strip():
        print()
        print("Instructions:")
        _print_instructions(record.instructions, args.full)
    return EXIT_SUCCESS


def cmd_edit(args: argparse.Namespace) -> int:
    """Open the first installed copy of an artifact in $EDITOR."""
    platform = _holders(args, args.name)[0]
    path = _artifact_path(platform, args.group, args.name)
    if path is None:
        raise NotFoundError(f"{NOUNS[args.group]} '{args.name}' has no file for this scope")
    ensure_backed_up(platform)
    open_in_editor(path)
    return EXIT_SUCCESS


def cmd_remove(args: argparse.Namespace) -> int:
    """Execute remove command.

    ABOUTME: Asks for confirmation unless --force, backs up, then uninstalls everywhere
    """
    kind = args.group
    holders = _holders(args, args.name)
    names = ", ".join(p.display_name for p in holders)
    print(f"{LABELS[kind]} '{args.name}' will be removed from: {names}")
    if not args.force and not _confirm("Continue?"):
        print("Cancelled.")
        return EXIT_SUCCESS

    for platform in holders:
        ensure_backed_up(platform)
        _uninstall_artifact(platform, kind, args.name)
        logger.debug(f"Removed {kind} '{args.name}' from {platform.name}")

    print(f"✓ {LABELS[kind]} '{args.name}' removed from {len(holders)} platform(s)")
    return EXIT_SUCCESS


def cmd_search(args: argparse.Namespace) -> int:
    """Search configured repositories for artifacts of this kind."""
    results = search(args.query or "", args.group, args.repo)
    if args.json:
        _print_json([r.to_dict() for r in results])
        return EXIT_SUCCESS
    if not results:
        print(f"No {NOUNS[args.group]}s found matching '{args.query or ''}'")
        return EXIT_SUCCESS
    for resource in results:
        line = f"  {resource.name} ({resource.repo_name})"
        if resource.description:
            line += f" - {resource.description}"
        print(line)
    print()
    print(f"Found {len(results)} {NOUNS[args.group]}(s)")
    return EXIT_SUCCESS


# Validation


def _validate_path(kind: str, path: Path, strict: bool) -> list[tuple[str, ValidationResult]]:
    if kind == "command":
        command = load_command(path)
        return [("/" + command.name, validate_command(command))]
    if kind == "skill":
        skill, skill_dir = load_skill(path)
        return [(skill.name, validate_skill(skill, str(skill_dir), strict))]
    if kind == "agent":
        agent = load_agent(path)
        return [(agent.name, validate_agent(agent, strict))]
    files = sorted(path.glob("*.json")) if path.is_dir() else [path]
    return [
        (server.name, validate_mcp_server(server))
        for server_file in files
        for server in load_servers(server_file)
    ]


def cmd_validate(args: argparse.Namespace) -> int:
    """Execute validate command.

    ABOUTME: Parses and validates a local artifact without installing it
    ABOUTME: Prints "Errors:" / "Warnings:" sections and exits 1 on errors
    """
    kind = args.group
    path = Path(args.path)
    if not path.exists():
        raise NotFoundError(f"path not found: {path}")

    checks = _validate_path(kind, path, args.strict)

    failed = any(result.has_errors for _, result in checks)
    if args.json:
        _print_json([
            {
                "name": name,
                "valid": not result.has_errors,
                "errors": [str(issue) for issue in result.errors],
                "warnings": [str(issue) for issue in result.warnings],
            }
            for name, result in checks
        ])
        return EXIT_VALIDATION if failed else EXIT_SUCCESS

    for name, result in checks:
        if result.has_errors:
            print(f"✗ {LABELS[kind]} '{name}' is invalid")
        else:
            print(f"✓ {LABELS[kind]} '{name}' is valid")
        _print_issues(result)
    return EXIT_VALIDATION if failed else EXIT_SUCCESS


# Scaffolding

COMMAND_TEMPLATE = """# {title}

Describe what this command should do.

$ARGUMENTS
"""

SKILL_TEMPLATE = """# {title}

Explain when this skill applies and the steps to follow.
"""

AGENT_TEMPLATE = """You are {title}.

Describe the agent's responsibilities and how it should work.
"""

INIT_FILES = {"command": "command.md", "skill": "SKILL.md", "agent": "AGENT.md"}
INIT_TEMPLATES = {"command": COMMAND_TEMPLATE, "skill": SKILL_TEMPLATE, "agent": AGENT_TEMPLATE}


def cmd_init(args: argparse.Namespace) -> int:
    """Execute init command.

    ABOUTME: Scaffolds command.md, SKILL.md or AGENT.md in <path> (default ./<name>)
    ABOUTME: Missing values are prompted for when stdin is a terminal
    """
    kind = args.group
    fallback = f"new-{kind}"
    default_name = sanitize_default_name(Path(args.path).resolve().name, fallback) if args.path else fallback

    name = args.name or _ask("Name", default_name)
    problem = name_problem(name)
    if problem:
        raise InvalidInputError(f"invalid {kind} name '{name}': {problem}")

    description = args.description if args.description is not None else _ask("Description")
    directory = Path(args.path) if args.path else Path.cwd() / name
    target = directory / INIT_FILES[kind]
    if target.exists() and not args.force:
        raise ConflictError(f"{target} already exists (use --force to overwrite)")

    meta: dict[str, Any] = {"name": name}
    if description:
        meta["description"] = description
    model = getattr(args, "model", None)
    if model:
        meta["model"] = model

    title = name.replace("-", " ").title()
    atomic_write(target, frontmatter.format(meta, INIT_TEMPLATES[kind].format(title=title)))
    print(f"✓ Created {target}")
    print(f"  Next: aix {kind} validate {directory}")
    return EXIT_SUCCESS


# MCP-specific commands


def cmd_mcp_add(args: argparse.Namespace) -> int:
    """Execute mcp add command.

    ABOUTME: Builds a canonical server from flags and writes it to every target
    """
    server = MCPServer(
        name=args.name,
        transport=args.transport or "",
        command=args.command or "",
        args=list(args.arg or []),
        url=args.url or "",
        headers=_parse_pairs(args.header, "--header"),
        env=_parse_pairs(args.env, "--env"),
        disabled=args.disabled,
        platforms=list(args.os or []),
    )
    result = validate_mcp_server(server)
    if result.has_errors:
        raise ValidationFailedError("MCP server validation failed", result.errors, result.warnings)
    for warning in result.warnings:
        print(f"  ⚠ {warning.message}")

    targets = _targets(args)
    if not args.force:
        for platform in targets:
            if server.name in platform.mcp.load().servers:
                raise ConflictError(
                    f"MCP server '{server.name}' already exists on {platform.display_name} "
                    f"(use --force to overwrite)"
                )

    for platform in targets:
        ensure_backed_up(platform)
        platform.add_mcp_server(server)
        print(f"Added '{server.name}' to {platform.display_name}")

    print(f"✓ MCP server '{server.name}' added to {len(targets)} platform(s)")
    return EXIT_SUCCESS


def cmd_mcp_toggle(args: argparse.Namespace) -> int:
    """Execute mcp enable / mcp disable."""
    enable = args.action == "enable"
    holders = _holders(args, args.name)
    for platform in holders:
        ensure_backed_up(platform)
        if enable:
            platform.enable_mcp_server(args.name)
        else:
            platform.disable_mcp_server(args.name)
    state = "enabled" if enable else "disabled"
    print(f"✓ MCP server '{args.name}' {state} on {len(holders)} platform(s)")
    return EXIT_SUCCESS


# Repository commands


def cmd_repo(args: argparse.Namespace) -> int:
    """Execute repo add/list/remove/update."""
    manager = RepoManager()

    if args.action == "add":
        print(f"Cloning {args.url}...")
        repo = manager.add(args.url, args.name)
        print(f"✓ Repository '{repo.name}' added ({repo.path})")
    elif args.action == "list":
        repos = manager.list()
        if args.json:
            _print_json([dataclasses.asdict(r) for r in repos])
        elif not repos:
            print("No repositories configured. Run 'aix repo add <url>' to add one.")
        else:
            for repo in repos:
                print(f"  {repo.name:<24} {repo.url}")
    elif args.action == "remove":
        manager.remove(args.name)
        print(f"✓ Repository '{args.name}' removed")
    elif args.action == "update":
        updated = manager.update(args.name)
        for repo in updated:
            print(f"  {repo.name} updated")
        print(f"✓ Updated {len(updated)} repository(ies)")
    return EXIT_SUCCESS


# Parser


def _add_target_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--platform", "-p",
        action="append",
        choices=PLATFORM_NAMES,
        help="Limit to a platform (repeatable)"
    )
    parser.add_argument(
        "--scope",
        choices=SCOPES,
        default="default",
        help="Configuration scope to target"
    )


def _add_kind_group(subparsers: Any, kind: str) -> None:
    noun = NOUNS[kind]
    group = subparsers.add_parser(kind, help=f"Manage {noun}s")
    actions = group.add_subparsers(dest="action", required=True, help="Available actions")

    if kind != "mcp":
        init_parser = actions.add_parser("init", help=f"Scaffold a new {noun}")
        init_parser.add_argument("path", nargs="?", help="Directory to create the files in")
        init_parser.add_argument("--name", help=f"{LABELS[kind]} name")
        init_parser.add_argument("--description", help="Short description")
        if kind in ("command", "agent"):
            init_parser.add_argument("--model", help="Model to use")
        init_parser.add_argument("--force", "-f", action="store_true", help="Overwrite existing files")

    install_parser = actions.add_parser("install", help=f"Install a {noun} from a path, git URL or repository")
    install_parser.add_argument("source", nargs="?", help="Path, git URL or name")
    install_parser.add_argument("--file", action="store_true", help="Treat source as a path or URL")
    install_parser.add_argument("--force", "-f", action="store_true", help="Overwrite existing")
    install_parser.add_argument("--all-from-repo", metavar="REPO", help=f"Install every {noun} in a repository")
    _add_target_options(install_parser)

    list_parser = actions.add_parser("list", help=f"List installed {noun}s")
    list_parser.add_argument("--json", action="store_true", help="Output JSON")
    _add_target_options(list_parser)

    show_parser = actions.add_parser("show", help=f"Show an installed {noun}")
    show_parser.add_argument("name")
    show_parser.add_argument("--json", action="store_true", help="Output JSON")
    show_parser.add_argument("--full", action="store_true", help="Do not truncate instructions")
    _add_target_options(show_parser)

    if kind == "mcp":
        for parser in (list_parser, show_parser):
            parser.add_argument("--show-secrets", action="store_true", help="Do not mask secret values")

    edit_parser = actions.add_parser("edit", help=f"Open an installed {noun} in $EDITOR")
    edit_parser.add_argument("name")
    _add_target_options(edit_parser)

    validate_parser = actions.add_parser("validate", help=f"Validate a local {noun}")
    validate_parser.add_argument("path")
    validate_parser.add_argument("--strict", action="store_true", help="Enable strict checks")
    validate_parser.add_argument("--json", action="store_true", help="Output JSON")

    remove_parser = actions.add_parser("remove", help=f"Remove an installed {noun}")
    remove_parser.add_argument("name")
    remove_parser.add_argument("--force", "-f", action="store_true", help="Do not ask for confirmation")
    _add_target_options(remove_parser)

    search_parser = actions.add_parser("search", help=f"Search repositories for {noun}s")
    search_parser.add_argument("query", nargs="?", default="")
    search_parser.add_argument("--repo", help="Limit to one repository")
    search_parser.add_argument("--json", action="store_true", help="Output JSON")

    if kind == "mcp":
        add_parser = actions.add_parser("add", help="Add an MCP server")
        add_parser.add_argument("name", help="Name of the MCP server")
        add_parser.add_argument("--command", help="Command to run (stdio)")
        add_parser.add_argument("--arg", action="append", help="Command argument (repeatable)")
        add_parser.add_argument("--url", help="Server URL (sse)")
        add_parser.add_argument("--transport", choices=["stdio", "sse", "http"], help="Transport")
        add_parser.add_argument("--env", action="append", metavar="KEY=VALUE", help="Environment variable")
        add_parser.add_argument("--header", action="append", metavar="KEY=VALUE", help="HTTP header")
        add_parser.add_argument("--os", action="append", metavar="OS",
                                help="Restrict to an OS: darwin, linux, windows (repeatable)")
        add_parser.add_argument("--disabled", action="store_true", help="Add the server disabled")
        add_parser.add_argument("--force", "-f", action="store_true", help="Overwrite existing")
        _add_target_options(add_parser)

        for action in ("enable", "disable"):
            toggle_parser = actions.add_parser(action, help=f"{action.capitalize()} an MCP server")
            toggle_parser.add_argument("name")
            _add_target_options(toggle_parser)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aix",
        description="Manage commands, skills, agents and MCP servers across AI coding assistants"
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"aix v{__version__}"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="group", help="Available commands")
    for kind in KINDS:
        _add_kind_group(subparsers, kind)

    repo_parser = subparsers.add_parser("repo", help="Manage artifact repositories")
    repo_actions = repo_parser.add_subparsers(dest="action", required=True, help="Available actions")
    repo_add = repo_actions.add_parser("add", help="Clone and register a repository")
    repo_add.add_argument("url")
    repo_add.add_argument("--name", help="Override the derived repository name")
    repo_list = repo_actions.add_parser("list", help="List registered repositories")
    repo_list.add_argument("--json", action="store_true", help="Output JSON")
    repo_remove = repo_actions.add_parser("remove", help="Unregister a repository and delete its clone")
    repo_remove.add_argument("name")
    repo_update = repo_actions.add_parser("update", help="Pull the latest changes")
    repo_update.add_argument("name", nargs="?")

    return parser


def _dispatch(args: argparse.Namespace) -> int:
    action = args.action
    if args.group == "repo":
        return cmd_repo(args)
    elif action == "init":
        return cmd_init(args)
    elif action == "install":
        return cmd_install(args)
    elif action == "list":
        return cmd_list(args)
    elif action == "show":
        return cmd_show(args)
    elif action == "edit":
        return cmd_edit(args)
    elif action == "validate":
        return cmd_validate(args)
    elif action == "remove":
        return cmd_remove(args)
    elif action == "search":
        return cmd_search(args)
    elif action == "add":
        return cmd_mcp_add(args)
    elif action in ("enable", "disable"):
        return cmd_mcp_toggle(args)
    raise AixError(f"unknown action '{action}'")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Parses args and dispatches to appropriate command
    ABOUTME: Errors are reported as one "Error: ..." line on stderr
    ABOUTME: Returns exit code for sys.exit()
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    if not args.group:
        parser.print_help()
        return EXIT_SUCCESS

    try:
        return _dispatch(args)
    except ValidationFailedError as e:
        _print_issues(e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_VALIDATION
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except (AixError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_VALIDATION
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FATAL
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
