# ABOUTME: Tests for install source routing and the per-kind installers
# ABOUTME: Platforms live under the isolated HOME; git is patched
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from aix.errors import (
    AixError,
    ConflictError,
    InvalidInputError,
    NoReposConfiguredError,
    ResourceNotFoundError,
    UnsupportedVariableError,
    ValidationFailedError,
)
from aix.install import (
    AgentInstaller,
    CommandInstaller,
    MCPInstaller,
    SkillInstaller,
    load_command,
    load_servers,
    looks_like_path,
    might_be_path,
    select_resource,
)
from aix.registry import new_registry
from aix.repos import RepoManager, Resource

REVIEW_COMMAND = "---\nname: review\ndescription: Review code changes\n---\n\nReview the code.\n"


def resource(name: str, repo: str, description: str = "") -> Resource:
    return Resource(name=name, type="command", repo_name=repo, repo_path="/r", path=f"commands/{name}.md",
                    description=description)


@pytest.fixture
def repo_manager(tmp_path: Path) -> RepoManager:
    def fake_clone(url, dest, depth=1):
        commands = dest / "commands"
        commands.mkdir(parents=True)
        (commands / "review.md").write_text(REVIEW_COMMAND)
        (commands / "lint.md").write_text("---\ndescription: Lint\n---\nLint $ARGUMENTS\n")

    manager = RepoManager(config_path=tmp_path / "aix-config" / "config.yaml", cache_dir=tmp_path / "cache")
    with patch("aix.utils.git.clone", side_effect=fake_clone):
        manager.add("https://github.com/acme/team.git")
    return manager


class TestSourceClassification:
    def test_looks_like_path(self):
        """Test the explicit path prefixes and separators."""
        assert looks_like_path("./my-cmd/")
        assert looks_like_path("../x")
        assert looks_like_path("/abs/path")
        assert looks_like_path("dir/file.md")
        assert not looks_like_path("review")

    def test_might_be_path(self):
        """Test the per-kind extension hints."""
        assert might_be_path("review.md", "command")
        assert might_be_path("REVIEW.MD", "skill")
        assert might_be_path("github.json", "mcp")
        assert not might_be_path("github.json", "command")
        assert not might_be_path("review.md", "mcp")
        assert might_be_path("dir\\file", "agent")


class TestSelectResource:
    def test_single_match(self):
        """Test that one match is returned without prompting."""
        only = resource("review", "a")
        assert select_resource("review", [only], prompt=lambda _: pytest.fail("prompted")) is only

    def test_non_interactive_takes_first(self):
        """Test that without a terminal the first match is used."""
        first, second = resource("review", "a"), resource("review", "b")
        assert select_resource("review", [first, second], interactive=False) is first

    def test_prompt_selection(self, capsys):
        """Test that the numbered menu is printed and the answer honored."""
        first, second = resource("review", "a", "First"), resource("review", "b")
        chosen = select_resource("review", [first, second], prompt=lambda _: "2", interactive=True)
        assert chosen is second
        out = capsys.readouterr().out
        assert "Multiple resources found for 'review':" in out
        assert "  [1] review (a) - First" in out
        assert "  [2] review (b)\n" in out

    def test_empty_answer_defaults_to_first(self):
        """Test that pressing enter selects the first entry."""
        first, second = resource("review", "a"), resource("review", "b")
        assert select_resource("review", [first, second], prompt=lambda _: "", interactive=True) is first

    @pytest.mark.parametrize("answer", ["abc", "0", "3"])
    def test_invalid_answers(self, answer):
        """Test that non-numbers and out-of-range numbers are rejected."""
        matches = [resource("review", "a"), resource("review", "b")]
        with pytest.raises(InvalidInputError):
            select_resource("review", matches, prompt=lambda _: answer, interactive=True)

    def test_eof_cancels(self):
        """Test that EOF on the prompt cancels the selection."""
        def eof(_):
            raise EOFError

        with pytest.raises(AixError, match="cancelled"):
            select_resource("review", [resource("review", "a"), resource("review", "b")], prompt=eof, interactive=True)


class TestLoadCommand:
    def test_name_from_command_md_directory(self, tmp_path):
        """Test that command.md without a name uses its directory name."""
        directory = tmp_path / "deploy"
        directory.mkdir()
        (directory / "command.md").write_text("Deploy it.\n")
        assert load_command(directory).name == "deploy"

    def test_first_markdown_sorted_skipping_underscore(self, tmp_path):
        """Test the sorted fallback when no command.md exists."""
        (tmp_path / "_draft.md").write_text("draft")
        (tmp_path / "zeta.md").write_text("zeta")
        (tmp_path / "beta.md").write_text("beta")
        (tmp_path / "alpha.MD").write_text("not markdown")
        assert load_command(tmp_path).name == "beta"

    def test_no_markdown(self, tmp_path):
        """Test that a directory without .md files is an error."""
        with pytest.raises(ResourceNotFoundError, match="no command file"):
            load_command(tmp_path)


class TestCommandInstaller:
    """Tests for CommandInstaller."""

    def test_install_from_directory(self, installed_platforms, review_command_dir, capsys):
        """Test that ./my-cmd/ installs review to every detected platform."""
        count = CommandInstaller(new_registry()).install(str(review_command_dir) + "/")

        assert count == 3
        home = installed_platforms
        assert (home / ".claude" / "commands" / "review.md").is_file()
        assert (home / ".config" / "opencode" / "commands" / "review.md").is_file()
        assert (home / ".gemini" / "commands" / "review.toml").is_file()
        out = capsys.readouterr().out
        assert "Installed 'review' to Claude Code" in out
        assert "✓ Command 'review' installed to 3 platform(s)" in out

    def test_conflict_writes_nothing(self, installed_platforms, review_command_dir):
        """Test that an existing command on one platform blocks every write."""
        existing = installed_platforms / ".config" / "opencode" / "commands" / "review.md"
        existing.parent.mkdir(parents=True)
        existing.write_text("old\n")

        with pytest.raises(ConflictError, match="already exists on OpenCode"):
            CommandInstaller(new_registry()).install(str(review_command_dir))

        assert not (installed_platforms / ".claude" / "commands" / "review.md").exists()
        assert existing.read_text() == "old\n"

    def test_force_overwrites(self, installed_platforms, review_command_dir):
        """Test that --force replaces the existing command."""
        existing = installed_platforms / ".claude" / "commands" / "review.md"
        existing.parent.mkdir(parents=True)
        existing.write_text("old\n")

        CommandInstaller(new_registry(), platforms=["claude"], force=True).install(str(review_command_dir))

        assert "Review the code." in existing.read_text()

    def test_platform_filter(self, installed_platforms, review_command_dir):
        """Test that --platform limits the targets."""
        assert CommandInstaller(new_registry(), platforms=["gemini"]).install(str(review_command_dir)) == 1
        assert not (installed_platforms / ".claude" / "commands").exists()

    def test_unsupported_variable_blocks_install(self, installed_platforms, tmp_path):
        """Test that an unknown variable fails before anything is written."""
        source = tmp_path / "weird.md"
        source.write_text("Use $CLIPBOARD please\n")
        with pytest.raises(UnsupportedVariableError):
            CommandInstaller(new_registry()).install(str(source))
        assert not (installed_platforms / ".claude" / "commands").exists()

    def test_invalid_name(self, installed_platforms, tmp_path):
        """Test that a malformed name fails validation."""
        source = tmp_path / "bad.md"
        source.write_text("---\nname: INVALID-NAME\n---\nbody\n")
        with pytest.raises(ValidationFailedError) as exc_info:
            CommandInstaller(new_registry()).install(str(source))
        assert "must be lowercase" in str(exc_info.value.errors[0])

    def test_backup_taken_before_first_write(self, installed_platforms, review_command_dir, tmp_path):
        """Test that existing platform files are backed up before installing."""
        (installed_platforms / ".claude" / "CLAUDE.md").write_text("memory")
        CommandInstaller(new_registry(), platforms=["claude"]).install(str(review_command_dir))
        backups = list((tmp_path / "aix-config" / "backups" / "claude").iterdir())
        assert len(backups) == 1
        assert (backups[0] / "0" / "CLAUDE.md").read_text() == "memory"

    def test_no_repos_configured(self, installed_platforms):
        """Test that an unknown bare name explains how to add a repository."""
        with pytest.raises(NoReposConfiguredError, match="aix repo add"):
            CommandInstaller(new_registry()).install("review")

    def test_local_file_hint(self, installed_platforms, tmp_path, monkeypatch):
        """Test that a bare filename that exists locally suggests --file."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "review.md").write_text(REVIEW_COMMAND)
        with pytest.raises(ResourceNotFoundError, match="--file review.md"):
            CommandInstaller(new_registry()).install("review.md")

    def test_force_file_installs_bare_filename(self, installed_platforms, tmp_path, monkeypatch):
        """Test that --file skips repository lookup."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "review.md").write_text(REVIEW_COMMAND)
        assert CommandInstaller(new_registry(), platforms=["claude"]).install("review.md", force_file=True) == 1

    def test_install_from_repository(self, installed_platforms, repo_manager, capsys):
        """Test that a bare name is found in a configured repository."""
        installer = CommandInstaller(new_registry(), platforms=["claude"], repo_manager=repo_manager)
        assert installer.install("review") == 1
        assert "Installing from repository: team" in capsys.readouterr().out
        assert (installed_platforms / ".claude" / "commands" / "review.md").is_file()

    def test_unknown_name_with_repos(self, installed_platforms, repo_manager):
        """Test that a name missing from every repository is reported."""
        installer = CommandInstaller(new_registry(), repo_manager=repo_manager)
        with pytest.raises(ResourceNotFoundError, match="not found in any configured repository"):
            installer.install("missing")

    def test_install_all_from_repo(self, installed_platforms, repo_manager, capsys):
        """Test that every command in a repository is installed."""
        installer = CommandInstaller(new_registry(), platforms=["opencode"], repo_manager=repo_manager)
        assert installer.install_all_from_repo("team") == 2
        assert "Successfully installed 2/2 command(s) from 'team'." in capsys.readouterr().out

    def test_install_all_reports_failures(self, installed_platforms, repo_manager, capsys):
        """Test that failures are collected and raised after the loop."""
        existing = installed_platforms / ".claude" / "commands" / "lint.md"
        existing.parent.mkdir(parents=True)
        existing.write_text("old")
        installer = CommandInstaller(new_registry(), platforms=["claude"], repo_manager=repo_manager)
        with pytest.raises(AixError, match="failed to install"):
            installer.install_all_from_repo("team")
        captured = capsys.readouterr()
        assert "Failed to install lint" in captured.err
        assert "Successfully installed 1/2" in captured.out

    def test_install_from_git_cleans_scratch(self, installed_platforms):
        """Test that a git URL is cloned to a scratch dir that is removed afterwards."""
        clones: list[Path] = []

        def fake_clone(url, dest, depth=1):
            clones.append(dest)
            (dest / "command.md").write_text(REVIEW_COMMAND)

        with patch("aix.utils.git.clone", side_effect=fake_clone):
            CommandInstaller(new_registry(), platforms=["claude"]).install("https://github.com/acme/review.git")

        assert not clones[0].exists()
        assert (installed_platforms / ".claude" / "commands" / "review.md").is_file()


class TestSkillInstaller:
    def test_install_skill_directory(self, installed_platforms, tmp_path, capsys):
        """Test that a skill directory installs as <name>/SKILL.md."""
        source = tmp_path / "src-skill"
        source.mkdir()
        (source / "SKILL.md").write_text("---\nname: pdf\ndescription: PDF tools\n---\nUse it.\n")

        SkillInstaller(new_registry(), platforms=["claude", "opencode"]).install(str(source))

        assert (installed_platforms / ".claude" / "skills" / "pdf" / "SKILL.md").is_file()
        assert (installed_platforms / ".config" / "opencode" / "skill" / "pdf" / "SKILL.md").is_file()
        assert "✓ Skill 'pdf' installed to 2 platform(s)" in capsys.readouterr().out

    def test_missing_description(self, installed_platforms, tmp_path):
        """Test that skills need a description."""
        (tmp_path / "SKILL.md").write_text("---\nname: pdf\n---\nbody\n")
        with pytest.raises(ValidationFailedError):
            SkillInstaller(new_registry()).install(str(tmp_path))


class TestAgentInstaller:
    def test_install_agent_file(self, installed_platforms, tmp_path):
        """Test that an agent file installs with its inferred name."""
        source = tmp_path / "helper.md"
        source.write_text("---\ndescription: Helps\n---\nHelp.\n")
        AgentInstaller(new_registry(), platforms=["claude"]).install(str(source))
        assert (installed_platforms / ".claude" / "agents" / "helper.md").is_file()


class TestMCPInstaller:
    def test_load_single_server_named_by_stem(self, tmp_path):
        """Test that a canonical server file is named after its stem."""
        path = tmp_path / "github.json"
        path.write_text('{"command": "npx", "args": ["-y", "gh"]}')
        [server] = load_servers(path)
        assert (server.name, server.command, server.args) == ("github", "npx", ["-y", "gh"])

    def test_load_mcp_servers_document(self, tmp_path):
        """Test that an mcpServers document yields every server."""
        path = tmp_path / "bundle.json"
        path.write_text(json.dumps({"mcpServers": {"a": {"command": "a"}, "b": {"url": "https://b"}}}))
        assert sorted(s.name for s in load_servers(path)) == ["a", "b"]

    def test_load_invalid_json(self, tmp_path):
        """Test that malformed JSON is reported with the path."""
        path = tmp_path / "bad.json"
        path.write_text("{oops")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_servers(path)

    def test_install_server_everywhere(self, installed_platforms, tmp_path):
        """Test that an MCP server lands in each platform's config."""
        source = tmp_path / "github.json"
        source.write_text('{"command": "npx", "args": ["-y", "gh"]}')

        assert MCPInstaller(new_registry()).install(str(source)) == 3

        claude = json.loads((installed_platforms / ".claude" / ".mcp.json").read_text())
        assert claude["mcpServers"]["github"] == {"command": "npx", "args": ["-y", "gh"]}
        opencode = json.loads((installed_platforms / ".config" / "opencode" / "opencode.json").read_text())
        assert opencode["mcp"]["github"]["command"] == ["npx", "-y", "gh"]

    def test_conflict_checked_for_every_server_first(self, installed_platforms, tmp_path):
        """Test that no server is written when any server conflicts."""
        (installed_platforms / ".claude" / ".mcp.json").write_text('{"mcpServers": {"b": {"command": "old"}}}')
        source = tmp_path / "bundle.json"
        source.write_text(json.dumps({"mcpServers": {"a": {"command": "a"}, "b": {"command": "b"}}}))

        with pytest.raises(ConflictError, match="'b' already exists on Claude Code"):
            MCPInstaller(new_registry(), platforms=["claude"]).install(str(source))

        data = json.loads((installed_platforms / ".claude" / ".mcp.json").read_text())
        assert data == {"mcpServers": {"b": {"command": "old"}}}

    def test_directory_with_mcp_subdir(self, installed_platforms, tmp_path):
        """Test that a directory's mcp/ folder is searched."""
        (tmp_path / "repo" / "mcp").mkdir(parents=True)
        (tmp_path / "repo" / "mcp" / "echo.json").write_text('{"command": "echo"}')
        MCPInstaller(new_registry(), platforms=["gemini"]).install(str(tmp_path / "repo"))
        settings = json.loads((installed_platforms / ".gemini" / "settings.json").read_text())
        assert settings["mcp"]["servers"]["echo"]["command"] == "echo"

    def test_non_json_file_rejected(self, installed_platforms, tmp_path):
        """Test that a non-JSON file is refused."""
        source = tmp_path / "server.yaml"
        source.write_text("command: echo\n")
        with pytest.raises(InvalidInputError):
            MCPInstaller(new_registry()).install(str(source))
