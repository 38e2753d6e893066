"""Registry validation: document schema, filenames, config-key collisions."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from mcpget.core.jsonio import read_json
from mcpget.core.naming import registry_filename, server_key

from .models import RUNTIMES, Package

REQUIRED_FIELDS = ("name", "description", "vendor", "sourceUrl", "homepage", "license", "runtime")
_URL_RE = re.compile(r"^https?://")


def validate_package(data: Any) -> list[str]:
    """Check one package document. Returns a list of error strings."""
    if not isinstance(data, dict):
        return ["package document must be a JSON object"]

    errors: list[str] = []
    for key in REQUIRED_FIELDS:
        if not data.get(key):
            errors.append(f"missing required field: {key}")

    for key in ("name", "description", "vendor", "license"):
        if key in data and not isinstance(data[key], str):
            errors.append(f"{key} must be a string")

    for key in ("sourceUrl", "homepage"):
        value = data.get(key)
        if not value:
            continue
        if not isinstance(value, str):
            errors.append(f"{key} must be a string")
        elif not _URL_RE.match(value):
            errors.append(f"{key} must start with http:// or https://")

    runtime = data.get("runtime")
    if runtime and runtime not in RUNTIMES:
        errors.append(f"runtime must be one of {', '.join(RUNTIMES)}")

    if "version" in data and not isinstance(data["version"], str):
        errors.append("version must be a string")

    env = data.get("environmentVariables")
    if env is not None:
        if not isinstance(env, dict):
            errors.append("environmentVariables must be an object")
        else:
            for var, spec in env.items():
                prefix = f"environmentVariables.{var}"
                if not isinstance(spec, dict):
                    errors.append(f"{prefix} must be an object")
                    continue
                if not spec.get("description"):
                    errors.append(f"{prefix} missing required field: description")
                elif not isinstance(spec["description"], str):
                    errors.append(f"{prefix}.description must be a string")
                if "required" not in spec:
                    errors.append(f"{prefix} missing required field: required")
                elif not isinstance(spec["required"], bool):
                    errors.append(f"{prefix}.required must be a boolean")
                if "argName" in spec and not isinstance(spec["argName"], str):
                    errors.append(f"{prefix}.argName must be a string")

    return errors


def find_key_collisions(packages: list[Package]) -> dict[str, list[str]]:
    """Group registry names whose config keys collide.

    ``foo/bar`` and ``foo-bar`` both map to the key ``foo-bar``.
    """
    by_key: dict[str, list[str]] = {}
    for pkg in packages:
        names = by_key.setdefault(server_key(pkg.name), [])
        if pkg.name not in names:
            names.append(pkg.name)
    return {k: v for k, v in by_key.items() if len(v) > 1}


def validate_registry(registry_dir: Path) -> dict[str, list[str]]:
    """Validate every per-package document in *registry_dir*.

    Returns ``{filename: [errors]}`` for files with problems only.
    """
    results: dict[str, list[str]] = {}
    packages: list[Package] = []

    if not registry_dir.is_dir():
        return {str(registry_dir): ["registry directory not found"]}

    for path in sorted(registry_dir.glob("*.json")):
        if path.name == "package-list.json":
            continue
        data = read_json(path)
        if data is None:
            results[path.name] = ["invalid JSON"]
            continue
        errors = validate_package(data)
        pkg = Package.from_dict(data)
        if pkg is not None:
            packages.append(pkg)
            expected = registry_filename(pkg.name)
            if path.name != expected:
                errors.append(f"filename should be {expected}")
        if errors:
            results[path.name] = errors

    for key, names in find_key_collisions(packages).items():
        for name in names:
            others = ", ".join(n for n in names if n != name)
            results.setdefault(registry_filename(name), []).append(
                f"config key {key!r} collides with {others}"
            )

    return results
