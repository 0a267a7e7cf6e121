# ABOUTME: Tests for the markdown-file artifact managers shared by every platform
# ABOUTME: Exercises CommandManager, AgentManager and SkillManager against tmp dirs
from pathlib import Path

import pytest

from aix.errors import (
    AixError,
    CommandNotFoundError,
    InvalidCommandError,
    InvalidSkillError,
    SkillNotFoundError,
)
from aix.models import Agent, Command, Skill
from aix.platforms.base import AgentManager, CommandManager, SkillManager


@pytest.fixture
def commands(tmp_path: Path) -> CommandManager:
    return CommandManager(lambda: tmp_path / "commands")


class TestCommandManager:
    """Tests for CommandManager."""

    def test_list_missing_directory_is_empty(self, commands):
        """Test that a missing directory lists nothing."""
        assert commands.list() == []

    def test_install_omits_name_from_frontmatter(self, commands, tmp_path):
        """Test that the filename, not frontmatter, carries the name."""
        commands.install(Command(name="review", description="Review", instructions="Body\n"))
        text = (tmp_path / "commands" / "review.md").read_text()
        assert text == "---\ndescription: Review\n---\n\nBody\n"

    def test_install_without_metadata_writes_bare_body(self, commands, tmp_path):
        """Test that a command with no metadata has no frontmatter block."""
        commands.install(Command(name="plain", instructions="Just do it"))
        assert (tmp_path / "commands" / "plain.md").read_text() == "Just do it\n"

    def test_list_sorted_and_named_by_file(self, commands, tmp_path):
        """Test that list uses filenames and sorts by name."""
        directory = tmp_path / "commands"
        directory.mkdir()
        (directory / "zeta.md").write_text("---\nname: other\ndescription: Z\n---\nbody\n")
        (directory / "alpha.md").write_text("no frontmatter\n")
        (directory / "notes.txt").write_text("ignored")

        listed = commands.list()
        assert [c.name for c in listed] == ["alpha", "zeta"]
        assert listed[1].description == "Z"
        assert listed[1].instructions == ""

    def test_get_reads_body(self, commands):
        """Test that get returns instructions and the requested name."""
        commands.install(Command(name="review", description="d", instructions="Body\n"))
        command = commands.get("review")
        assert (command.name, command.instructions) == ("review", "Body\n")

    def test_get_missing_raises(self, commands):
        """Test that a missing command raises CommandNotFoundError."""
        with pytest.raises(CommandNotFoundError):
            commands.get("missing")

    def test_empty_name_is_invalid(self, commands):
        """Test that empty names are rejected for get, install and uninstall."""
        with pytest.raises(InvalidCommandError):
            commands.get("")
        with pytest.raises(InvalidCommandError):
            commands.install(Command())
        with pytest.raises(InvalidCommandError):
            commands.install(None)
        with pytest.raises(InvalidCommandError):
            commands.uninstall("")

    def test_uninstall_missing_is_noop(self, commands):
        """Test that removing a missing command does not raise."""
        commands.uninstall("missing")

    def test_uninstall_twice_leaves_command_gone(self, commands, tmp_path):
        """Test that a second uninstall succeeds and the command stays missing."""
        commands.install(Command(name="review", description="d", instructions="Body\n"))
        commands.uninstall("review")
        commands.uninstall("review")

        assert not (tmp_path / "commands" / "review.md").exists()
        with pytest.raises(CommandNotFoundError):
            commands.get("review")

    def test_unresolvable_directory(self):
        """Test that install fails when the directory cannot be resolved."""
        manager = CommandManager(lambda: None)
        assert manager.list() == []
        with pytest.raises(AixError, match="not resolvable"):
            manager.install(Command(name="x"))


class TestAgentManager:
    """Tests for AgentManager."""

    def test_install_omits_name_from_frontmatter(self, tmp_path):
        """Test that agents, like commands, are named by their file."""
        agents = AgentManager(lambda: tmp_path / "agents")
        agents.install(Agent(name="reviewer", description="Reviews code", instructions="You review code.\n"))

        text = (tmp_path / "agents" / "reviewer.md").read_text()
        assert text == "---\ndescription: Reviews code\n---\n\nYou review code.\n"
        assert agents.get("reviewer").name == "reviewer"


class TestSkillManager:
    """Tests for SkillManager."""

    def test_install_list_get(self, tmp_path):
        """Test the <name>/SKILL.md layout end to end."""
        skills = SkillManager(lambda: tmp_path / "skills")
        skills.install(Skill(name="pdf", description="PDF tools", instructions="Use it.\n"))

        assert skills.names() == ["pdf"]
        skill = skills.get("pdf")
        assert (skill.name, skill.description, skill.instructions) == ("pdf", "PDF tools", "Use it.\n")

    def test_list_ignores_directories_without_skill_md(self, tmp_path):
        """Test that stray directories are skipped."""
        (tmp_path / "skills" / "empty").mkdir(parents=True)
        assert SkillManager(lambda: tmp_path / "skills").list() == []

    def test_missing_skill_raises(self, tmp_path):
        """Test that get on a missing skill raises SkillNotFoundError."""
        with pytest.raises(SkillNotFoundError):
            SkillManager(lambda: tmp_path / "skills").get("nope")

    def test_empty_name(self, tmp_path):
        """Test that get rejects an empty name but uninstall ignores it."""
        skills = SkillManager(lambda: tmp_path / "skills")
        with pytest.raises(InvalidSkillError):
            skills.get("")
        skills.uninstall("")

    def test_directory_name_wins_over_frontmatter_name(self, tmp_path):
        """Test that a skill is listed and fetched under its directory name."""
        skill_dir = tmp_path / "skills" / "bar"
        skill_dir.mkdir(parents=True)
        (skill_dir / "SKILL.md").write_text("---\nname: foo\ndescription: Mismatched\n---\n\nBody\n")
        skills = SkillManager(lambda: tmp_path / "skills")

        assert [s.name for s in skills.list()] == ["bar"]
        assert skills.get("bar").name == "bar"
        assert skills.get("bar").description == "Mismatched"
        with pytest.raises(SkillNotFoundError):
            skills.get("foo")

    def test_uninstall_twice_leaves_skill_gone(self, tmp_path):
        """Test that a second uninstall succeeds and the skill stays missing."""
        skills = SkillManager(lambda: tmp_path / "skills")
        skills.install(Skill(name="pdf", description="PDF tools", instructions="Use it.\n"))
        skills.uninstall("pdf")
        skills.uninstall("pdf")

        assert not (tmp_path / "skills" / "pdf").exists()
        with pytest.raises(SkillNotFoundError):
            skills.get("pdf")
