"""Registry loader: per-package documents or a consolidated package list."""

from __future__ import annotations

import logging
from pathlib import Path

from mcpget.core.errors import ConfigWriteError
from mcpget.core.jsonio import read_json, write_json
from mcpget.core.naming import registry_filename

from .models import Package
from .validation import find_key_collisions

logger = logging.getLogger(__name__)


class RegistryLoader:
    """Loads the static package catalog.

    A directory of per-package documents wins; the single list document is
    used only when the directory does not exist. Malformed documents are
    skipped with a warning.
    """

    def __init__(self, registry_dir: Path, registry_list: Path):
        self.registry_dir = registry_dir
        self.registry_list = registry_list

    def _package_path(self, name: str) -> Path:
        # registry-file scheme (double hyphen), not the config-key scheme
        return self.registry_dir / registry_filename(name)

    def _load_dir(self) -> list[Package]:
        packages: list[Package] = []
        for path in sorted(self.registry_dir.glob("*.json")):
            if not path.is_file() or path.name == self.registry_list.name:
                continue
            data = read_json(path)
            if data is None:
                continue
            pkg = Package.from_dict(data)
            if pkg is None:
                logger.warning("skipping %s: not a package document", path.name)
                continue
            packages.append(pkg)
        return packages

    def _load_list(self) -> list[Package]:
        data = read_json(self.registry_list)
        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning("ignoring %s: not a JSON array", self.registry_list)
            return []
        packages: list[Package] = []
        for i, entry in enumerate(data):
            pkg = Package.from_dict(entry)
            if pkg is None:
                logger.warning("skipping entry %d in %s: no name", i, self.registry_list.name)
                continue
            packages.append(pkg)
        return packages

    def load_all(self) -> list[Package]:
        if self.registry_dir.is_dir():
            packages = self._load_dir()
        elif self.registry_list.exists():
            packages = self._load_list()
        else:
            logger.warning("no package registry found at %s", self.registry_dir)
            return []
        for key, names in find_key_collisions(packages).items():
            logger.warning("registry names %s share config key %r", ", ".join(names), key)
        return packages

    def load_package(self, name: str) -> Package | None:
        path = self._package_path(name)
        if path.is_file():
            data = read_json(path)
            return Package.from_dict(data) if data is not None else None
        for pkg in self._load_list():
            if pkg.name == name:
                return pkg
        return None

    def search(self, query: str) -> list[Package]:
        """Case-insensitive substring match on name, description and vendor."""
        q = query.lower()
        return [
            p
            for p in self.load_all()
            if q in p.name.lower() or q in p.description.lower() or q in p.vendor.lower()
        ]

    def save_package(self, pkg: Package) -> Path:
        path = self._package_path(pkg.name)
        write_json(path, pkg.to_dict())
        return path

    def remove_package(self, name: str) -> bool:
        path = self._package_path(name)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise ConfigWriteError(path, str(e)) from e
        return True
