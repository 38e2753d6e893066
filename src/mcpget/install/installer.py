"""Install / uninstall state machine.

install:   idle -> checking-runtime -> collecting-env -> writing-config
           -> reporting -> prompting-restart -> done
uninstall: idle -> writing-config -> prompting-restart -> done

Writing the config is the only step whose failure propagates
(``ConfigWriteError``). Cancelling a prompt before that step leaves the
persisted state untouched. Telemetry and restart failures are logged and
do not change the outcome.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from rich.console import Console

from mcpget.core.errors import ConfigWriteError, PromptCancelled

from .envvars import EnvVarCollector
from .runner import ProcessRunner
from .telemetry import NullTelemetry, report_install

if TYPE_CHECKING:
    from mcpget.registry.loader import RegistryLoader
    from mcpget.registry.models import EnvVarSpec, Package
    from mcpget.store.config_store import ConfigStore
    from mcpget.tui.prompts import Prompter

    from .telemetry import TelemetrySink

logger = logging.getLogger(__name__)
console = Console()

RESTART_QUESTION = "Would you like to restart the Claude desktop app to apply changes?"
UV_QUESTION = "UV package manager is required for Python MCP servers. Would you like to install it?"

# runtime -> launcher binary that must be on PATH
LAUNCHERS = {"python": "uvx"}


class InstallState(str, Enum):
    IDLE = "idle"
    CHECKING_RUNTIME = "checking-runtime"
    COLLECTING_ENV = "collecting-env"
    WRITING_CONFIG = "writing-config"
    REPORTING = "reporting"
    PROMPTING_RESTART = "prompting-restart"
    DONE = "done"
    ERROR = "error"


class Outcome(str, Enum):
    INSTALLED = "installed"
    UNINSTALLED = "uninstalled"
    NOT_INSTALLED = "not-installed"
    NOT_FOUND = "not-found"
    CANCELLED = "cancelled"


@dataclass
class ActionResult:
    outcome: Outcome
    name: str
    key: str = ""
    env: dict[str, str] = field(default_factory=dict)
    restarted: bool = False

    @property
    def ok(self) -> bool:
        return self.outcome in (Outcome.INSTALLED, Outcome.UNINSTALLED, Outcome.NOT_INSTALLED)


class Installer:
    def __init__(
        self,
        store: ConfigStore,
        loader: RegistryLoader,
        prompter: Prompter,
        runner: ProcessRunner | None = None,
        telemetry: TelemetrySink | None = None,
        ci: bool = False,
        environ: Mapping[str, str] | None = None,
        out: Console | None = None,
    ):
        self.store = store
        self.loader = loader
        self.prompter = prompter
        self.runner = runner or ProcessRunner()
        self.telemetry = telemetry or NullTelemetry()
        self.ci = ci
        self.console = out or console
        self.collector = EnvVarCollector(prompter, store.config_path, environ, self.console)
        self.state = InstallState.IDLE

    def _enter(self, state: InstallState) -> None:
        logger.debug("%s -> %s", self.state.value, state.value)
        self.state = state

    # ── install ──

    def declared_env(self, pkg: Package) -> dict[str, EnvVarSpec]:
        """Variables declared by the registry entry, else by *pkg* itself."""
        entry = self.loader.load_package(pkg.name)
        source = entry if entry is not None else pkg
        return dict(source.environment_variables)

    def _check_launcher(self, pkg: Package) -> None:
        binary = LAUNCHERS.get(pkg.runtime)
        if binary is None or self.runner.has_binary(binary):
            return
        self.console.print(f"[yellow]{binary} not found on PATH[/yellow]")
        if self.ci:
            return
        if self.prompter.confirm(UV_QUESTION, default=True):
            self.console.print("Installing uv package manager...")
            if self.runner.install_uv():
                self.console.print("[green]uv installed[/green]")
                return
            self.console.print("[yellow]Failed to install uv.[/yellow]")
        self.console.print("You can install it manually from https://astral.sh/uv", style="dim")

    def install(self, pkg: Package, restart: bool | None = None) -> ActionResult:
        """Install *pkg* into the host config.

        Raises ConfigWriteError if the config cannot be persisted.
        """
        self.state = InstallState.IDLE
        try:
            self._enter(InstallState.CHECKING_RUNTIME)
            self._check_launcher(pkg)

            self._enter(InstallState.COLLECTING_ENV)
            env = self.collector.collect(self.declared_env(pkg))
        except PromptCancelled:
            self._enter(InstallState.DONE)
            return ActionResult(Outcome.CANCELLED, pkg.name)

        self._enter(InstallState.WRITING_CONFIG)
        try:
            key = self.store.install_package(pkg, env)
        except ConfigWriteError:
            self._enter(InstallState.ERROR)
            raise
        self.console.print("Updated Claude desktop configuration")

        self._enter(InstallState.REPORTING)
        self._report(pkg)

        self._enter(InstallState.PROMPTING_RESTART)
        restarted = self._maybe_restart(restart)

        self._enter(InstallState.DONE)
        return ActionResult(Outcome.INSTALLED, pkg.name, key=key, env=env or {}, restarted=restarted)

    def _report(self, pkg: Package) -> None:
        try:
            report_install(self.telemetry, self.store, self.prompter, pkg.name, self.ci)
        except PromptCancelled:
            logger.debug("analytics question skipped")
        except Exception as e:
            logger.debug("telemetry error ignored: %s", e)

    # ── uninstall ──

    def uninstall(
        self, name: str, restart: bool | None = None, confirm: bool = False
    ) -> ActionResult:
        """Remove *name* from the host config.

        Not being installed is a successful no-op. Raises ConfigWriteError
        if the config cannot be persisted.
        """
        self.state = InstallState.IDLE
        key = self.store.find_server_key(name)
        if key is None:
            self.console.print(f"Package {name} is not installed.", style="yellow")
            self._enter(InstallState.DONE)
            return ActionResult(Outcome.NOT_INSTALLED, name)

        if confirm:
            try:
                proceed = self.prompter.confirm(
                    f"Are you sure you want to uninstall {name}?", default=False
                )
            except PromptCancelled:
                proceed = False
            if not proceed:
                self._enter(InstallState.DONE)
                return ActionResult(Outcome.CANCELLED, name, key=key)

        self._enter(InstallState.WRITING_CONFIG)
        try:
            self.store.uninstall_package(name)
        except ConfigWriteError:
            self._enter(InstallState.ERROR)
            raise
        self.console.print(f"\nUninstalled {name}")

        self._enter(InstallState.PROMPTING_RESTART)
        restarted = self._maybe_restart(restart)

        self._enter(InstallState.DONE)
        return ActionResult(Outcome.UNINSTALLED, name, key=key, restarted=restarted)

    # ── restart ──

    def _maybe_restart(self, restart: bool | None) -> bool:
        if restart is None:
            if self.ci:
                return False
            try:
                restart = self.prompter.confirm(RESTART_QUESTION, default=True)
            except PromptCancelled:
                return False
        if not restart:
            self.console.print(
                "Note: restart the Claude desktop app for the changes to take effect.",
                style="dim",
            )
            return False

        self.console.print("Restarting Claude desktop app...")
        try:
            ok = self.runner.restart_host_app()
        except Exception as e:
            logger.warning("restart failed: %s", e)
            ok = False
        if ok:
            self.console.print("Claude desktop app has been restarted.")
        else:
            self.console.print("[yellow]Failed to restart Claude desktop app.[/yellow]")
        return ok
