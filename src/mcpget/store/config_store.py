"""Host config and preferences persistence.

Reads never raise: a missing or unparsable document degrades to an empty
default. Writes raise ``ConfigWriteError`` so a failed persist is never
reported as success.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from mcpget.core.jsonio import read_json_object, write_json
from mcpget.core.naming import server_key
from mcpget.registry.models import DEFAULT_RUNTIME

if TYPE_CHECKING:
    from mcpget.core.config import ConfigPaths
    from mcpget.registry.models import Package

logger = logging.getLogger(__name__)

SERVERS_KEY = "mcpServers"


@dataclass
class HostConfig:
    """The host application's config document.

    ``data`` is the whole JSON object so unrelated top-level fields survive
    a read/modify/write cycle; ``data["mcpServers"]`` is always a dict.
    """

    data: dict[str, Any] = field(default_factory=lambda: {SERVERS_KEY: {}})

    def __post_init__(self) -> None:
        if not isinstance(self.data.get(SERVERS_KEY), dict):
            self.data[SERVERS_KEY] = {}

    @property
    def servers(self) -> dict[str, dict]:
        return self.data[SERVERS_KEY]


@dataclass
class Preferences:
    allow_analytics: bool | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> Preferences:
        extra = {k: v for k, v in data.items() if k != "allowAnalytics"}
        value = data.get("allowAnalytics")
        return cls(allow_analytics=value if isinstance(value, bool) else None, extra=extra)

    def to_dict(self) -> dict:
        out = dict(self.extra)
        if self.allow_analytics is not None:
            out["allowAnalytics"] = self.allow_analytics
        return out


def launch_command(pkg: Package) -> tuple[str, list[str]]:
    """Pick the launcher command and args for a package's runtime."""
    runtime = pkg.runtime or DEFAULT_RUNTIME
    if runtime == "go":
        return "go", ["run", f"{pkg.name}@{pkg.version or 'latest'}"]
    spec = f"{pkg.name}@{pkg.version}" if pkg.version else pkg.name
    if runtime == "python":
        return "uvx", [spec]
    return "npx", ["-y", spec]


def server_entry(pkg: Package, env_vars: dict[str, str] | None = None) -> dict:
    command, args = launch_command(pkg)
    entry: dict[str, Any] = {
        "runtime": pkg.runtime or DEFAULT_RUNTIME,
        "command": command,
        "args": args,
    }
    if env_vars:
        entry["env"] = dict(env_vars)
    return entry


class ConfigStore:
    """Installed-server map and user preferences, persisted on every mutation."""

    def __init__(self, paths: ConfigPaths):
        self.paths = paths

    @property
    def config_path(self) -> Path:
        return self.paths.config_file

    @property
    def preferences_path(self) -> Path:
        return self.paths.preferences_file

    # ── config ──

    def read_config(self) -> HostConfig:
        data = read_json_object(self.config_path)
        return HostConfig(data) if data is not None else HostConfig()

    def write_config(self, config: HostConfig) -> None:
        write_json(self.config_path, config.data)

    # ── preferences ──

    def read_preferences(self) -> Preferences:
        data = read_json_object(self.preferences_path)
        return Preferences.from_dict(data) if data is not None else Preferences()

    def write_preferences(self, prefs: Preferences) -> None:
        write_json(self.preferences_path, prefs.to_dict())

    # ── servers ──

    def is_package_installed(self, name: str) -> bool:
        return server_key(name) in self.read_config().servers

    def find_server_key(self, name: str, servers: dict[str, dict] | None = None) -> str | None:
        """Return the config key holding *name*, probing normalized then raw form.

        Hand-edited configs may use the raw name as key.
        """
        if servers is None:
            servers = self.read_config().servers
        key = server_key(name)
        if key in servers:
            return key
        if name in servers:
            return name
        return None

    def install_package(self, pkg: Package, env_vars: dict[str, str] | None = None) -> str:
        """Write (or overwrite) the entry for *pkg*. Returns the config key."""
        config = self.read_config()
        key = server_key(pkg.name)
        if pkg.name != key:
            # drop a hand-edited raw-name entry so the package has one key
            config.servers.pop(pkg.name, None)
        config.servers[key] = server_entry(pkg, env_vars)
        self.write_config(config)
        logger.debug("wrote server %s to %s", key, self.config_path)
        return key

    def uninstall_package(self, name: str) -> bool:
        """Remove every entry for *name*, normalized and raw key alike.

        False (and no write) if not installed.
        """
        config = self.read_config()
        keys = [k for k in dict.fromkeys((server_key(name), name)) if k in config.servers]
        if not keys:
            return False
        for key in keys:
            del config.servers[key]
        self.write_config(config)
        logger.debug("removed server %s from %s", ", ".join(keys), self.config_path)
        return True
