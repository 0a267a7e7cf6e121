# aix - manage AI assistant commands, skills, agents and MCP servers
# ABOUTME: Version information
__version__ = "0.1.0"

# ABOUTME: Export core data models and errors
from aix.config import Config, get_config_path, load_config, save_config
from aix.errors import AixError, ConflictError, NotFoundError
from aix.models import Agent, Command, MCPConfig, MCPServer, PlatformAdapter, Skill

# ABOUTME: Export the platform registry
from aix.registry import Registry, new_registry

__all__ = [
    "__version__",
    "Agent",
    "AixError",
    "Command",
    "Config",
    "ConflictError",
    "MCPConfig",
    "MCPServer",
    "NotFoundError",
    "PlatformAdapter",
    "Registry",
    "Skill",
    "get_config_path",
    "load_config",
    "new_registry",
    "save_config",
]
