# ABOUTME: Utility modules for aix
# ABOUTME: Exports atomic file writes, backup, and validation functions

from aix.utils.backup import create_backup, ensure_backed_up, get_backup_dir, reset_backup_session
from aix.utils.fileutil import atomic_write, atomic_write_json, read_json_file
from aix.utils.validation import (
    Issue,
    ValidationResult,
    validate_agent,
    validate_command,
    validate_mcp_server,
    validate_skill,
)

__all__ = [
    "atomic_write",
    "atomic_write_json",
    "read_json_file",
    "Issue",
    "ValidationResult",
    "validate_agent",
    "validate_command",
    "validate_mcp_server",
    "validate_skill",
    "create_backup",
    "ensure_backed_up",
    "get_backup_dir",
    "reset_backup_session",
]
