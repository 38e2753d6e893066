"""Shared fixtures: temp paths, stores, registry builders, a scripted prompter."""

import io
import json

import pytest
from rich.console import Console

from mcpget.core.config import ConfigPaths
from mcpget.core.errors import PromptCancelled
from mcpget.core.naming import registry_filename
from mcpget.registry.loader import RegistryLoader
from mcpget.registry.resolver import PackageResolver
from mcpget.store.config_store import ConfigStore


class FakePrompter:
    """Answers prompts from a script, in order.

    Put ``PromptCancelled`` in the script to simulate Ctrl-C. Running out of
    answers fails the test with the unexpected question.
    """

    def __init__(self, answers=()):
        self.answers = list(answers)
        self.asked: list[tuple[str, str]] = []

    def _next(self, kind, message):
        self.asked.append((kind, message))
        if not self.answers:
            raise AssertionError(f"unexpected {kind} prompt: {message}")
        answer = self.answers.pop(0)
        if answer is PromptCancelled:
            raise PromptCancelled()
        return answer

    def confirm(self, message, default=True):
        return self._next("confirm", message)

    def select(self, message, choices, default=None):
        answer = self._next("select", message)
        assert answer in [value for value, _ in choices], f"{answer!r} not offered"
        return answer

    def text(self, message, validate=None, default=""):
        return self._next("text", message)

    def pick_package(self, packages, message=""):
        answer = self._next("pick", message)
        if answer is None:
            return None
        return next(p for p in packages if p.name == answer)

    def messages(self, kind=None):
        return [m for k, m in self.asked if kind is None or k == kind]


class FakeRunner:
    def __init__(self, binaries=("uvx", "npx"), restart_ok=True, restart_error=None):
        self.binaries = set(binaries)
        self.restart_ok = restart_ok
        self.restart_error = restart_error
        self.restarts = 0
        self.uv_installs = 0

    def has_binary(self, name, version_flag="--version"):
        return name in self.binaries

    def install_uv(self):
        self.uv_installs += 1
        self.binaries.add("uvx")
        return True

    def restart_host_app(self):
        self.restarts += 1
        if self.restart_error:
            raise self.restart_error
        return self.restart_ok


class RecordingTelemetry:
    def __init__(self, error=None):
        self.reported: list[str] = []
        self.error = error

    def report_install(self, package_name):
        if self.error:
            raise self.error
        self.reported.append(package_name)


def write_package(registry_dir, name, **fields):
    """Write a registry document for *name* and return its dict."""
    data = {
        "name": name,
        "description": fields.pop("description", f"{name} server"),
        "vendor": fields.pop("vendor", "Acme"),
        "sourceUrl": fields.pop("sourceUrl", "https://example.com/src"),
        "homepage": fields.pop("homepage", "https://example.com"),
        "license": fields.pop("license", "MIT"),
        "runtime": fields.pop("runtime", "node"),
    }
    data.update(fields)
    registry_dir.mkdir(parents=True, exist_ok=True)
    (registry_dir / registry_filename(name)).write_text(json.dumps(data, indent=2))
    return data


def write_servers(config_file, servers, **extra):
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps({**extra, "mcpServers": servers}, indent=2))


@pytest.fixture
def paths(tmp_path):
    return ConfigPaths(
        config_file=tmp_path / "Claude" / "claude_desktop_config.json",
        preferences_file=tmp_path / ".mcp-get" / "preferences.json",
        registry_dir=tmp_path / "registry",
        registry_list=tmp_path / "package-list.json",
    )


@pytest.fixture
def store(paths):
    return ConfigStore(paths)


@pytest.fixture
def loader(paths):
    return RegistryLoader(paths.registry_dir, paths.registry_list)


@pytest.fixture
def resolver(loader, store):
    return PackageResolver(loader, store)


@pytest.fixture
def out():
    """A console whose output the test can read back via ``out.export_text()``."""
    return Console(file=io.StringIO(), record=True, width=120)
