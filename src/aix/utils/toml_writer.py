# Minimal TOML writer for Gemini command files
from typing import Any

# ABOUTME: Control characters that must be escaped inside TOML basic strings
_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\f": "\\f",
    "\r": "\\r",
}


def dumps_simple(data: dict[str, Any]) -> str:
    """Render a flat table of string values as TOML.

    ABOUTME: Minimal TOML writer handling only our subset (top-level string keys)
    ABOUTME: Values containing newlines become multi-line basic strings
    ABOUTME: Empty values are skipped

    Args:
        data: Mapping of bare keys to string values

    Returns:
        TOML document text with a trailing newline

    Example output:
        description = "Review code changes"
        prompt = \"\"\"
        Review the code.
        Focus on {{argument}}.
        \"\"\"
    """
    lines: list[str] = []

    for key, value in data.items():
        if value is None or value == "":
            continue
        if not isinstance(value, str):
            raise TypeError(f"TOML value for '{key}' must be a string, got {type(value).__name__}")

        if "\n" in value:
            lines.append(f"{key} = {_format_multiline(value)}")
        else:
            lines.append(f"{key} = {_format_string(value)}")

    return "\n".join(lines) + "\n"


def _escape(text: str, keep_newlines: bool) -> str:
    out: list[str] = []
    for ch in text:
        if ch == "\n" and keep_newlines:
            out.append(ch)
        elif ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch == "\n":
            out.append("\\n")
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    return "".join(out)


def _format_string(value: str) -> str:
    """Format a single-line basic string.

    ABOUTME: Escapes quotes, backslashes and control characters
    """
    return '"' + _escape(value, keep_newlines=False) + '"'


def _format_multiline(value: str) -> str:
    """Format a multi-line basic string.

    ABOUTME: The newline right after the opening quotes is trimmed by TOML
    ABOUTME: parsers, so the value round-trips exactly
    """
    return '"""\n' + _escape(value, keep_newlines=True) + '"""'
