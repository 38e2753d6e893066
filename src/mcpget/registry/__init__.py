"""Registry: package models, catalog loading, validation, resolution."""

from .loader import RegistryLoader
from .models import (
    DEFAULT_RUNTIME,
    RUNTIMES,
    EnvVarSpec,
    Package,
    ResolvedPackage,
    unverified_package,
)
from .resolver import PackageResolver
from .validation import find_key_collisions, validate_package, validate_registry

__all__ = [
    "DEFAULT_RUNTIME",
    "RUNTIMES",
    "EnvVarSpec",
    "Package",
    "PackageResolver",
    "RegistryLoader",
    "ResolvedPackage",
    "find_key_collisions",
    "unverified_package",
    "validate_package",
    "validate_registry",
]
