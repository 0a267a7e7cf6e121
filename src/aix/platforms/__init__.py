# Platform adapter classes
from pathlib import Path

from aix.errors import UnknownPlatformError
from aix.models import PlatformAdapter
from aix.platforms.base import BasePlatform
from aix.platforms.claude import ClaudePlatform
from aix.platforms.gemini import GeminiPlatform
from aix.platforms.opencode import OpenCodePlatform

# Adapter classes in closed-set order
ALL_PLATFORMS: list[type[BasePlatform]] = [
    ClaudePlatform,
    OpenCodePlatform,
    GeminiPlatform,
]

PLATFORM_CLASSES: dict[str, type[BasePlatform]] = {cls.name: cls for cls in ALL_PLATFORMS}

__all__ = [
    "PlatformAdapter",
    "BasePlatform",
    "ClaudePlatform",
    "OpenCodePlatform",
    "GeminiPlatform",
    "ALL_PLATFORMS",
    "PLATFORM_CLASSES",
    "create_platform",
]


def create_platform(
    name: str,
    scope: str = "default",
    project_root: str | Path | None = None,
) -> BasePlatform:
    """Instantiate the adapter for a platform id.

    ABOUTME: Raises UnknownPlatformError for ids outside the closed set
    """
    try:
        cls = PLATFORM_CLASSES[name]
    except KeyError as e:
        valid = ", ".join(PLATFORM_CLASSES)
        raise UnknownPlatformError(f"unknown platform '{name}' (valid: {valid})") from e
    return cls(scope=scope, project_root=project_root)
