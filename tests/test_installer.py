"""Tests for the install / uninstall state machine."""

import json
from unittest.mock import patch

import pytest
from conftest import FakePrompter, FakeRunner, RecordingTelemetry, write_package, write_servers

from mcpget.core.errors import ConfigWriteError, PromptCancelled
from mcpget.install.installer import RESTART_QUESTION, UV_QUESTION, Installer, InstallState, Outcome
from mcpget.registry.models import Package
from mcpget.store.config_store import Preferences


@pytest.fixture
def make_installer(store, loader, out):
    def _make(answers=(), runner=None, telemetry=None, ci=False, environ=None):
        prompter = FakePrompter(answers)
        installer = Installer(
            store,
            loader,
            prompter,
            runner=runner or FakeRunner(),
            telemetry=telemetry or RecordingTelemetry(),
            ci=ci,
            environ=environ or {},
            out=out,
        )
        return installer, prompter

    return _make


@pytest.fixture
def consented(store):
    store.write_preferences(Preferences(allow_analytics=True))


class TestInstall:
    def test_plain_node_install(self, make_installer, store, paths, consented):
        write_package(paths.registry_dir, "pkg-a", runtime="node")
        installer, _ = make_installer()
        result = installer.install(Package(name="pkg-a", runtime="node"), restart=False)
        assert result.outcome is Outcome.INSTALLED
        assert result.key == "pkg-a"
        assert installer.state is InstallState.DONE
        assert json.loads(paths.config_file.read_text())["mcpServers"]["pkg-a"] == {
            "runtime": "node",
            "command": "npx",
            "args": ["-y", "pkg-a"],
        }

    def test_env_from_environment_bulk_accept(self, make_installer, store, paths, consented):
        write_package(
            paths.registry_dir,
            "@acme/search",
            environmentVariables={"API_KEY": {"description": "key", "required": True}},
        )
        installer, _ = make_installer([True], environ={"API_KEY": "sk-abc"})
        result = installer.install(Package(name="@acme/search"), restart=False)
        assert result.env == {"API_KEY": "sk-abc"}
        entry = store.read_config().servers["@acme-search"]
        assert entry["env"]["API_KEY"] == "sk-abc"

    def test_registry_env_declarations_win(self, make_installer, store, paths, consented):
        write_package(
            paths.registry_dir,
            "pkg",
            environmentVariables={"TOKEN": {"description": "t", "required": False}},
        )
        installer, prompter = make_installer([False])
        installer.install(Package(name="pkg"), restart=False)
        assert prompter.messages() == ["Configure TOKEN (optional): t?"]

    def test_unregistered_package_installs(self, make_installer, store, consented):
        installer, prompter = make_installer()
        result = installer.install(Package(name="custom", runtime="go"), restart=False)
        assert result.ok
        assert store.read_config().servers["custom"]["args"] == ["run", "custom@latest"]
        assert prompter.asked == []

    def test_cancel_during_env_leaves_config_untouched(self, make_installer, store, paths):
        write_servers(paths.config_file, {"other": {"command": "x"}})
        before = paths.config_file.read_text()
        write_package(
            paths.registry_dir,
            "pkg",
            environmentVariables={"K": {"description": "k", "required": True}},
        )
        installer, _ = make_installer([PromptCancelled])
        result = installer.install(Package(name="pkg"))
        assert result.outcome is Outcome.CANCELLED
        assert paths.config_file.read_text() == before

    def test_write_failure_propagates(self, make_installer, store, consented):
        installer, _ = make_installer()
        with patch.object(store, "install_package", side_effect=ConfigWriteError("c", "ro")):
            with pytest.raises(ConfigWriteError):
                installer.install(Package(name="pkg"), restart=False)
        assert installer.state is InstallState.ERROR

    def test_telemetry_failure_does_not_fail_install(self, make_installer, store, consented):
        sink = RecordingTelemetry(error=OSError("offline"))
        installer, _ = make_installer(telemetry=sink)
        result = installer.install(Package(name="pkg"), restart=False)
        assert result.outcome is Outcome.INSTALLED
        assert store.is_package_installed("pkg")

    def test_first_install_asks_for_analytics(self, make_installer, store):
        sink = RecordingTelemetry()
        installer, prompter = make_installer([True], telemetry=sink)
        installer.install(Package(name="pkg"), restart=False)
        assert sink.reported == ["pkg"]
        assert store.read_preferences().allow_analytics is True

    def test_ci_never_prompts(self, make_installer, store):
        runner = FakeRunner()
        installer, prompter = make_installer(runner=runner, ci=True)
        result = installer.install(Package(name="pkg"))
        assert result.outcome is Outcome.INSTALLED
        assert prompter.asked == []
        assert runner.restarts == 0


class TestLauncherCheck:
    def test_missing_uvx_offers_install(self, make_installer, consented):
        runner = FakeRunner(binaries=())
        installer, prompter = make_installer([True], runner=runner)
        installer.install(Package(name="py-pkg", runtime="python"), restart=False)
        assert prompter.messages()[0] == UV_QUESTION
        assert runner.uv_installs == 1

    def test_declining_uv_still_installs(self, make_installer, store, consented):
        runner = FakeRunner(binaries=())
        installer, _ = make_installer([False], runner=runner)
        result = installer.install(Package(name="py-pkg", runtime="python"), restart=False)
        assert result.outcome is Outcome.INSTALLED
        assert store.read_config().servers["py-pkg"]["command"] == "uvx"
        assert runner.uv_installs == 0

    def test_node_needs_no_check(self, make_installer, consented):
        installer, prompter = make_installer(runner=FakeRunner(binaries=()))
        installer.install(Package(name="n", runtime="node"), restart=False)
        assert prompter.asked == []


class TestRestart:
    def test_prompted_restart(self, make_installer, consented):
        runner = FakeRunner()
        installer, prompter = make_installer([True], runner=runner)
        result = installer.install(Package(name="pkg"))
        assert prompter.messages() == [RESTART_QUESTION]
        assert result.restarted is True
        assert runner.restarts == 1

    def test_restart_failure_is_soft(self, make_installer, store, consented):
        runner = FakeRunner(restart_error=OSError("no such app"))
        installer, _ = make_installer(runner=runner)
        result = installer.install(Package(name="pkg"), restart=True)
        assert result.outcome is Outcome.INSTALLED
        assert result.restarted is False
        assert store.is_package_installed("pkg")

    def test_cancel_at_restart_prompt_keeps_install(self, make_installer, store, consented):
        installer, _ = make_installer([PromptCancelled])
        result = installer.install(Package(name="pkg"))
        assert result.outcome is Outcome.INSTALLED
        assert store.is_package_installed("pkg")


class TestUninstall:
    def test_not_installed_is_success(self, make_installer, paths, out):
        installer, _ = make_installer()
        result = installer.uninstall("ghost")
        assert result.outcome is Outcome.NOT_INSTALLED
        assert result.ok
        assert not paths.config_file.exists()
        assert "Package ghost is not installed." in out.export_text()

    def test_uninstall_removes_entry(self, make_installer, store, consented):
        installer, _ = make_installer()
        installer.install(Package(name="@scope/pkg"), restart=False)
        result = installer.uninstall("@scope/pkg", restart=False)
        assert result.outcome is Outcome.UNINSTALLED
        assert result.key == "@scope-pkg"
        assert store.read_config().servers == {}

    def test_confirmation_declined(self, make_installer, store, paths):
        write_servers(paths.config_file, {"pkg": {"command": "npx"}})
        installer, prompter = make_installer([False])
        result = installer.uninstall("pkg", confirm=True)
        assert result.outcome is Outcome.CANCELLED
        assert prompter.messages() == ["Are you sure you want to uninstall pkg?"]
        assert store.is_package_installed("pkg")

    def test_confirmation_accepted(self, make_installer, store, paths):
        write_servers(paths.config_file, {"pkg": {"command": "npx"}})
        installer, _ = make_installer([True])
        result = installer.uninstall("pkg", confirm=True, restart=False)
        assert result.outcome is Outcome.UNINSTALLED

    def test_write_failure_propagates(self, make_installer, store, paths):
        write_servers(paths.config_file, {"pkg": {}})
        installer, _ = make_installer()
        with patch.object(store, "uninstall_package", side_effect=ConfigWriteError("c", "ro")):
            with pytest.raises(ConfigWriteError):
                installer.uninstall("pkg", restart=False)
        assert installer.state is InstallState.ERROR

    def test_legacy_raw_key_gone_after_reinstall_and_uninstall(
        self, make_installer, store, resolver, paths, consented
    ):
        write_package(paths.registry_dir, "@scope/pkg")
        write_servers(paths.config_file, {"@scope/pkg": {"command": "npx"}})
        installer, _ = make_installer()
        installer.install(Package(name="@scope/pkg"), restart=False)
        assert list(store.read_config().servers) == ["@scope-pkg"]
        result = installer.uninstall("@scope/pkg", restart=False)
        assert result.outcome is Outcome.UNINSTALLED
        assert store.read_config().servers == {}
        assert resolver.resolve_package("@scope/pkg").is_installed is False
