"""Configuration: platform paths, env overrides, settings."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

DATA_DIR = Path(__file__).resolve().parent.parent / "data"

HOST_APP_DIR = "Claude"
HOST_CONFIG_NAME = "claude_desktop_config.json"
PREFERENCES_NAME = "preferences.json"


@dataclass(frozen=True)
class ConfigPaths:
    """Every on-disk location the tool touches."""

    config_file: Path
    preferences_file: Path
    registry_dir: Path = DATA_DIR / "packages"
    registry_list: Path = DATA_DIR / "package-list.json"


def platform_family(platform: str | None = None) -> str:
    """Collapse ``sys.platform`` into win32 / darwin / linux."""
    platform = platform or sys.platform
    if platform.startswith("win") or platform == "cygwin":
        return "win32"
    if platform == "darwin":
        return "darwin"
    return "linux"


def default_paths(
    platform: str | None = None,
    env: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> ConfigPaths:
    """Compute the default paths for a platform family.

    Only the linux family honours ``XDG_CONFIG_HOME``.
    """
    env = os.environ if env is None else env
    home = home or Path.home()
    family = platform_family(platform)

    if family == "win32":
        app_data = Path(env.get("APPDATA") or home / "AppData" / "Roaming")
        return ConfigPaths(
            config_file=app_data / HOST_APP_DIR / HOST_CONFIG_NAME,
            preferences_file=app_data / "mcp-get" / PREFERENCES_NAME,
        )
    if family == "darwin":
        return ConfigPaths(
            config_file=home / "Library" / "Application Support" / HOST_APP_DIR / HOST_CONFIG_NAME,
            preferences_file=home / ".mcp-get" / PREFERENCES_NAME,
        )
    config_dir = Path(env.get("XDG_CONFIG_HOME") or home / ".config")
    return ConfigPaths(
        config_file=config_dir / HOST_APP_DIR / HOST_CONFIG_NAME,
        preferences_file=home / ".mcp-get" / PREFERENCES_NAME,
    )


@dataclass
class Settings:
    paths: ConfigPaths
    platform: str = field(default_factory=platform_family)
    verbose: bool = False
    ci: bool = False
    telemetry_url: str = ""


def _apply_env(paths: ConfigPaths, env: Mapping[str, str]) -> ConfigPaths:
    overrides: dict[str, Path] = {}
    if value := env.get("MCP_GET_CONFIG"):
        overrides["config_file"] = Path(value).expanduser()
    if value := env.get("MCP_GET_PREFERENCES"):
        overrides["preferences_file"] = Path(value).expanduser()
    if value := env.get("MCP_GET_REGISTRY_DIR"):
        overrides["registry_dir"] = Path(value).expanduser()
    if value := env.get("MCP_GET_REGISTRY_LIST"):
        overrides["registry_list"] = Path(value).expanduser()
    if not overrides:
        return paths
    return ConfigPaths(
        config_file=overrides.get("config_file", paths.config_file),
        preferences_file=overrides.get("preferences_file", paths.preferences_file),
        registry_dir=overrides.get("registry_dir", paths.registry_dir),
        registry_list=overrides.get("registry_list", paths.registry_list),
    )


def load_settings(verbose: bool = False, config_file: str | None = None) -> Settings:
    """Load settings with priority: CLI args > env > .env > defaults."""
    load_dotenv()
    env = os.environ

    family = platform_family()
    paths = _apply_env(default_paths(family, env), env)
    if config_file:
        paths = ConfigPaths(
            config_file=Path(config_file).expanduser(),
            preferences_file=paths.preferences_file,
            registry_dir=paths.registry_dir,
            registry_list=paths.registry_list,
        )

    return Settings(
        paths=paths,
        platform=family,
        verbose=verbose,
        ci=bool(env.get("CI")),
        telemetry_url=env.get("MCP_GET_TELEMETRY_URL", ""),
    )
