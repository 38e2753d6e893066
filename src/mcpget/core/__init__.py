"""Core: settings and paths, logging, name schemes, errors."""

from .config import ConfigPaths, Settings, default_paths, load_settings, platform_family
from .errors import ConfigWriteError, McpGetError, PromptCancelled
from .log import setup_logging
from .naming import display_name, registry_filename, server_key

__all__ = [
    "ConfigPaths",
    "ConfigWriteError",
    "McpGetError",
    "PromptCancelled",
    "Settings",
    "default_paths",
    "display_name",
    "load_settings",
    "platform_family",
    "registry_filename",
    "server_key",
    "setup_logging",
]
