# YAML frontmatter parsing and formatting for markdown artifacts
# ABOUTME: A document may open with a "---" line, a YAML mapping, and a closing "---" line
# ABOUTME: Accepts LF and CRLF delimiters on input, always emits LF
import io
from typing import Any, TextIO

import yaml

from aix.errors import InvalidYAMLError, MissingCloseError, MissingFrontmatterError

DELIMITER = "---"

Source = str | TextIO


def _read_all(source: Source) -> str:
    if isinstance(source, str):
        return source
    return source.read()


def _is_delimiter(line: str) -> bool:
    return line.rstrip("\r\n") == DELIMITER


def _opens_frontmatter(content: str) -> bool:
    return content.startswith(DELIMITER + "\n") or content.startswith(DELIMITER + "\r\n")


def _load_yaml(text: str, path: str | None = None) -> dict[str, Any]:
    """Decode the YAML block into a mapping.

    ABOUTME: Empty block yields an empty dict
    ABOUTME: Anything other than a mapping at top level is invalid
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise InvalidYAMLError(f"invalid YAML in frontmatter: {e}", path=path) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidYAMLError("frontmatter must be a YAML mapping", path=path)
    return data


def _split(content: str) -> tuple[str, str] | None:
    """Split content into (yaml_text, body).

    Returns None when the opening delimiter has no matching close. The
    closing delimiter is only recognized at the start of a line, and one
    blank separator line after it is consumed.
    """
    start = content.index("\n") + 1
    pos = start
    while True:
        end = content.find("\n", pos)
        line = content[pos:] if end == -1 else content[pos:end]
        if _is_delimiter(line):
            yaml_text = content[start:pos]
            body = "" if end == -1 else content[end + 1:]
            if body.startswith("\r\n"):
                body = body[2:]
            elif body.startswith("\n"):
                body = body[1:]
            return yaml_text, body
        if end == -1:
            return None
        pos = end + 1


def _parse(source: Source, required: bool, path: str | None) -> tuple[dict[str, Any], str]:
    content = _read_all(source)

    if not _opens_frontmatter(content):
        if required:
            raise MissingFrontmatterError(path=path)
        return {}, content

    parts = _split(content)
    if parts is None:
        if required:
            raise MissingCloseError(path=path)
        return {}, content

    yaml_text, body = parts
    return _load_yaml(yaml_text, path), body


def parse(source: Source, path: str | None = None) -> tuple[dict[str, Any], str]:
    """Parse optional frontmatter.

    ABOUTME: Content without an opening delimiter is returned whole as the body
    ABOUTME: An unterminated block is also treated as "no frontmatter"

    Args:
        source: Document text or a readable text stream
        path: Optional file path used in error messages

    Returns:
        Tuple of (metadata mapping, body text)

    Raises:
        InvalidYAMLError: If the frontmatter block is not a valid YAML mapping

    Examples:
        >>> parse("---\\nname: review\\n---\\n\\nReview the code.\\n")
        ({'name': 'review'}, 'Review the code.\\n')
    """
    return _parse(source, required=False, path=path)


def must_parse(source: Source, path: str | None = None) -> tuple[dict[str, Any], str]:
    """Parse mandatory frontmatter.

    Raises:
        MissingFrontmatterError: If the content does not open with a delimiter
        MissingCloseError: If the closing delimiter is absent
        InvalidYAMLError: If the frontmatter block is not a valid YAML mapping
    """
    return _parse(source, required=True, path=path)


def parse_header(source: Source, path: str | None = None) -> dict[str, Any]:
    """Read only the frontmatter block and return its metadata.

    ABOUTME: Stops reading at the closing delimiter so bodies are never loaded
    ABOUTME: Missing or unterminated frontmatter yields an empty dict
    """
    stream = io.StringIO(source) if isinstance(source, str) else source

    first = stream.readline()
    if not first.endswith("\n") or not _is_delimiter(first):
        return {}

    lines: list[str] = []
    for line in iter(stream.readline, ""):
        if _is_delimiter(line):
            return _load_yaml("".join(lines), path)
        lines.append(line)
    return {}


def dump_yaml(metadata: dict[str, Any]) -> str:
    """Encode metadata as block-style YAML with two-space indentation."""
    return yaml.safe_dump(
        metadata,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        indent=2,
    )


def format(metadata: dict[str, Any], body: str) -> str:
    """Render metadata and body as a frontmatter document.

    ABOUTME: Layout is "---", YAML, "---", a blank line, then the body
    ABOUTME: Body always ends with a newline; an empty body drops the blank line

    Examples:
        >>> format({"name": "review"}, "Review the code.")
        '---\\nname: review\\n---\\n\\nReview the code.\\n'
        >>> format({"name": "review"}, "")
        '---\\nname: review\\n---\\n'
    """
    parts = [DELIMITER, "\n"]
    if metadata:
        parts.append(dump_yaml(metadata))
    parts.extend([DELIMITER, "\n"])

    if body:
        parts.append("\n")
        parts.append(body)
        if not body.endswith("\n"):
            parts.append("\n")

    return "".join(parts)
