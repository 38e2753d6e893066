"""Package resolver: merge the registry with installed state.

Every registry package appears exactly once. Installed servers are matched
to registry packages by raw name first, then by config key. Installed
servers with no registry match appear as unverified placeholders.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mcpget.core.naming import display_name, server_key

from .models import DEFAULT_RUNTIME, Package, ResolvedPackage, unverified_package

if TYPE_CHECKING:
    from mcpget.store.config_store import ConfigStore

    from .loader import RegistryLoader

logger = logging.getLogger(__name__)


def _build_index(packages: list[Package]) -> tuple[dict[str, Package], dict[str, Package]]:
    """Raw-name and config-key lookup tables, built once per resolution."""
    by_name: dict[str, Package] = {}
    by_key: dict[str, Package] = {}
    for pkg in packages:
        by_name.setdefault(pkg.name, pkg)
        by_key.setdefault(server_key(pkg.name), pkg)
    return by_name, by_key


def _match(key: str, by_name: dict[str, Package], by_key: dict[str, Package]) -> Package | None:
    # raw equality is unambiguous, so it wins over a normalized match
    return by_name.get(key) or by_key.get(key)


def _orphan_names(orphans: list[str], taken: set[str]) -> dict[str, str]:
    """Pick a unique display name per unmatched server key.

    The de-normalized key is preferred; when it collides with a registry
    name or another orphan's display name, the raw key is used instead.
    """
    candidates = {key: display_name(key) for key in orphans}
    counts: dict[str, int] = {}
    for name in candidates.values():
        counts[name] = counts.get(name, 0) + 1
    return {
        key: name if counts[name] == 1 and name not in taken else key
        for key, name in candidates.items()
    }


class PackageResolver:
    def __init__(self, loader: RegistryLoader, store: ConfigStore):
        self.loader = loader
        self.store = store

    def resolve_packages(self) -> list[ResolvedPackage]:
        """Every registry package plus every installed server, deduplicated by name.

        Never raises for missing or malformed files; logs and returns what it can.
        """
        try:
            packages = self.loader.load_all()
            servers = self.store.read_config().servers
        except Exception:
            logger.exception("error resolving packages")
            return []

        by_name, by_key = _build_index(packages)
        resolved: dict[str, ResolvedPackage] = {}
        for pkg in by_name.values():
            resolved[pkg.name] = pkg.resolved(is_installed=False, is_verified=True)

        orphans: list[str] = []
        for key, entry in servers.items():
            pkg = _match(key, by_name, by_key)
            if pkg is None:
                orphans.append(key)
                continue
            entry_runtime = entry.get("runtime", "") if isinstance(entry, dict) else ""
            resolved[pkg.name] = pkg.resolved(
                is_installed=True,
                is_verified=True,
                runtime=pkg.runtime or entry_runtime or DEFAULT_RUNTIME,
            )

        for key, name in _orphan_names(orphans, set(resolved)).items():
            entry = servers[key]
            runtime = entry.get("runtime", "") if isinstance(entry, dict) else ""
            resolved[name] = unverified_package(name, runtime=runtime)
            logger.debug("server %s has no registry entry", key)

        return list(resolved.values())

    def resolve_package(self, name: str) -> ResolvedPackage | None:
        """Resolve a single name. None when it is neither registered nor installed."""
        try:
            packages = self.loader.load_all()
            servers = self.store.read_config().servers
        except Exception:
            logger.exception("error resolving package %s", name)
            return None

        by_name, by_key = _build_index(packages)
        pkg = _match(name, by_name, by_key) or by_key.get(server_key(name))

        if pkg is None:
            key = self.store.find_server_key(name, servers)
            if key is None:
                return None
            entry = servers[key]
            runtime = entry.get("runtime", "") if isinstance(entry, dict) else ""
            return unverified_package(name, runtime=runtime)

        key = self.store.find_server_key(pkg.name, servers)
        if key is None:
            return pkg.resolved(is_installed=False, is_verified=True)
        entry = servers[key]
        entry_runtime = entry.get("runtime", "") if isinstance(entry, dict) else ""
        return pkg.resolved(
            is_installed=True,
            is_verified=True,
            runtime=pkg.runtime or entry_runtime,
        )

    def installed_packages(self) -> list[ResolvedPackage]:
        return [p for p in self.resolve_packages() if p.is_installed]
