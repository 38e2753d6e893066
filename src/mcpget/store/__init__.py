"""Store: host config (installed servers) and user preferences."""

from .config_store import (
    SERVERS_KEY,
    ConfigStore,
    HostConfig,
    Preferences,
    launch_command,
    server_entry,
)

__all__ = [
    "SERVERS_KEY",
    "ConfigStore",
    "HostConfig",
    "Preferences",
    "launch_command",
    "server_entry",
]
