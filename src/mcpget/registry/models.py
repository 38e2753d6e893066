"""Registry data models: EnvVarSpec, Package, ResolvedPackage."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

RUNTIMES = ("node", "python", "go")
DEFAULT_RUNTIME = "node"


@dataclass
class EnvVarSpec:
    """One entry of a package's ``environmentVariables`` map."""

    description: str = ""
    required: bool = False
    arg_name: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> EnvVarSpec:
        if not isinstance(data, dict):
            return cls()
        return cls(
            description=str(data.get("description", "") or ""),
            required=data.get("required") is True,
            arg_name=str(data.get("argName", "") or ""),
        )

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"description": self.description, "required": self.required}
        if self.arg_name:
            out["argName"] = self.arg_name
        return out


@dataclass
class Package:
    """A registry entry. Parsed from a package document."""

    name: str
    description: str = ""
    vendor: str = ""
    source_url: str = ""
    homepage: str = ""
    license: str = ""
    runtime: str = ""
    version: str = ""
    environment_variables: dict[str, EnvVarSpec] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> Package | None:
        """Build a Package from a registry document. None if it has no name."""
        if not isinstance(data, dict):
            return None
        name = data.get("name", "")
        if not name or not isinstance(name, str):
            return None
        env = data.get("environmentVariables") or {}
        if not isinstance(env, dict):
            env = {}
        return cls(
            name=name,
            description=str(data.get("description", "") or ""),
            vendor=str(data.get("vendor", "") or ""),
            source_url=str(data.get("sourceUrl", "") or ""),
            homepage=str(data.get("homepage", "") or ""),
            license=str(data.get("license", "") or ""),
            runtime=str(data.get("runtime", "") or ""),
            version=str(data.get("version", "") or ""),
            environment_variables={k: EnvVarSpec.from_dict(v) for k, v in env.items()},
        )

    def to_dict(self) -> dict:
        out: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "vendor": self.vendor,
            "sourceUrl": self.source_url,
            "homepage": self.homepage,
            "license": self.license,
            "runtime": self.runtime,
        }
        if self.version:
            out["version"] = self.version
        if self.environment_variables:
            out["environmentVariables"] = {
                k: v.to_dict() for k, v in self.environment_variables.items()
            }
        return out

    def resolved(self, is_installed: bool, is_verified: bool, runtime: str = "") -> ResolvedPackage:
        values = {f.name: getattr(self, f.name) for f in fields(Package)}
        values["runtime"] = runtime or self.runtime or DEFAULT_RUNTIME
        return ResolvedPackage(**values, is_installed=is_installed, is_verified=is_verified)


@dataclass
class ResolvedPackage(Package):
    """A Package plus install state. Computed per call, never persisted."""

    is_installed: bool = False
    is_verified: bool = True


def unverified_package(name: str, runtime: str = "", description: str = "") -> ResolvedPackage:
    """Placeholder for an installed server with no registry entry."""
    return ResolvedPackage(
        name=name,
        description=description or "Installed package (not in package list)",
        vendor="Unknown",
        source_url="",
        homepage="",
        license="Unknown",
        runtime=runtime or DEFAULT_RUNTIME,
        is_installed=True,
        is_verified=False,
    )
