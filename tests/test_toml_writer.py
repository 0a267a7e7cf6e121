# Tests for minimal TOML writer utility
import pytest
import tomli

from aix.utils.toml_writer import _format_string, dumps_simple


def test_dumps_simple_basic() -> None:
    """Test basic single-line values."""
    text = dumps_simple({"description": "Review code changes"})
    assert text == 'description = "Review code changes"\n'


def test_dumps_simple_multiline_prompt() -> None:
    """Test that values with newlines use multi-line strings."""
    text = dumps_simple({"description": "Review", "prompt": "Line one\nLine {{argument}}\n"})
    assert 'prompt = """\nLine one\nLine {{argument}}\n"""' in text
    assert tomli.loads(text)["prompt"] == "Line one\nLine {{argument}}\n"


def test_dumps_simple_skips_empty() -> None:
    """Test that empty and None values are skipped."""
    assert dumps_simple({"description": "", "prompt": None, "x": "y"}) == 'x = "y"\n'


def test_dumps_simple_rejects_non_strings() -> None:
    """Test that only string values are accepted."""
    with pytest.raises(TypeError):
        dumps_simple({"count": 3})


def test_escaping_quotes_and_backslashes() -> None:
    """Test that quotes, backslashes and tabs are escaped."""
    assert _format_string('say "hi" \\ now\t') == '"say \\"hi\\" \\\\ now\\t"'


def test_control_characters_parse_back() -> None:
    """Test that escaped control characters survive a TOML parse."""
    value = 'quote " slash \\ bell \x07\r\nnext "line"\n'
    assert tomli.loads(dumps_simple({"prompt": value}))["prompt"] == value
