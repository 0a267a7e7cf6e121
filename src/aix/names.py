# Artifact name inference and sanitizing
import os
import re

# ABOUTME: Lowercase alphanumeric segments joined by single hyphens, starting with a letter
NAME_PATTERN = re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*$")
MAX_NAME_LENGTH = 64

DEFAULT_COMMAND_NAME = "new-command"

_DISALLOWED = re.compile(r"[^a-z0-9-]+")


def infer_name(path: str | os.PathLike[str]) -> str:
    """Derive an artifact name from a file path.

    ABOUTME: Takes the basename and strips a trailing ".md"
    ABOUTME: Case is preserved; validation decides whether it is acceptable

    Examples:
        >>> infer_name("/tmp/commands/review.md")
        'review'
        >>> infer_name("Deploy.md")
        'Deploy'
        >>> infer_name(".md")
        ''
    """
    base = os.path.basename(os.fspath(path).rstrip("/\\"))
    if base.endswith(".md"):
        base = base[: -len(".md")]
    return base


def is_valid_name(name: str) -> bool:
    return len(name) <= MAX_NAME_LENGTH and NAME_PATTERN.match(name) is not None


def sanitize_default_name(text: str, fallback: str = DEFAULT_COMMAND_NAME) -> str:
    """Turn arbitrary text into a usable default artifact name.

    Lowercases, collapses every run of disallowed characters into one
    hyphen and trims hyphens from both ends. Falls back to fallback
    ("new-command" unless given) when nothing valid remains.

    Examples:
        >>> sanitize_default_name("My Cool Command!")
        'my-cool-command'
        >>> sanitize_default_name("!!!")
        'new-command'
    """
    sanitized = _DISALLOWED.sub("-", text.lower()).strip("-")
    sanitized = re.sub(r"-{2,}", "-", sanitized)
    if not sanitized or not is_valid_name(sanitized):
        return fallback
    return sanitized
