"""Interactive package browser.

An explicit state machine instead of "show detail -> act -> show detail"
recursion:

  select --pick--> detail --install/uninstall/open--> detail
  detail --back--> select          detail --exit--> done
  select --no pick / cancel--> done

In the installed-only view an uninstall returns to the list.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING

import click
from rich.console import Console

from mcpget.core.errors import ConfigWriteError, PromptCancelled

from .display import print_list_header, print_package_details

if TYPE_CHECKING:
    from mcpget.install.installer import Installer
    from mcpget.registry.models import ResolvedPackage
    from mcpget.registry.resolver import PackageResolver

    from .prompts import Prompter

console = Console()


class BrowserState(str, Enum):
    SELECT = "select"
    DETAIL = "detail"
    DONE = "done"


class Action(str, Enum):
    INSTALL = "install"
    UNINSTALL = "uninstall"
    OPEN = "open"
    BACK = "back"
    EXIT = "exit"


TRANSITIONS: dict[Action, BrowserState] = {
    Action.INSTALL: BrowserState.DETAIL,
    Action.UNINSTALL: BrowserState.DETAIL,
    Action.OPEN: BrowserState.DETAIL,
    Action.BACK: BrowserState.SELECT,
    Action.EXIT: BrowserState.DONE,
}


def next_state(action: Action, installed_only: bool = False) -> BrowserState:
    if action is Action.UNINSTALL and installed_only:
        return BrowserState.SELECT
    return TRANSITIONS[action]


def actions_for(pkg: ResolvedPackage) -> list[tuple[str, str]]:
    choices: list[tuple[str, str]] = []
    if pkg.is_installed:
        choices.append((Action.UNINSTALL.value, "Uninstall this package"))
    else:
        choices.append((Action.INSTALL.value, "Install this package"))
    if pkg.source_url:
        choices.append((Action.OPEN.value, "Open source URL"))
    choices.append((Action.BACK.value, "Back to package list"))
    choices.append((Action.EXIT.value, "Exit"))
    return choices


class PackageBrowser:
    def __init__(
        self,
        resolver: PackageResolver,
        installer: Installer,
        prompter: Prompter,
        installed_only: bool = False,
        launcher: Callable[[str], object] = click.launch,
        out: Console | None = None,
    ):
        self.resolver = resolver
        self.installer = installer
        self.prompter = prompter
        self.installed_only = installed_only
        self.launcher = launcher
        self.console = out or console
        self.state = BrowserState.SELECT
        self.current: ResolvedPackage | None = None

    def packages(self) -> list[ResolvedPackage]:
        packages = self.resolver.resolve_packages()
        if self.installed_only:
            packages = [p for p in packages if p.is_installed]
        return sorted(packages, key=lambda p: p.name.lower())

    def run(self) -> None:
        self.state = BrowserState.SELECT
        while self.state is not BrowserState.DONE:
            try:
                if self.state is BrowserState.SELECT:
                    self._select()
                else:
                    self._detail()
            except PromptCancelled:
                self.state = BrowserState.DONE

    def _select(self) -> None:
        packages = self.packages()
        if not packages:
            if self.installed_only:
                self.console.print("\nNo MCP servers are currently installed.", style="yellow")
            else:
                self.console.print("\nNo packages available.", style="yellow")
            self.state = BrowserState.DONE
            return
        print_list_header(len(packages), installed=self.installed_only, out=self.console)
        self.current = self.prompter.pick_package(packages)
        self.state = BrowserState.DONE if self.current is None else BrowserState.DETAIL

    def _detail(self) -> None:
        pkg = self.current
        if pkg is None:
            self.state = BrowserState.SELECT
            return
        print_package_details(pkg, out=self.console)
        action = Action(self.prompter.select("What would you like to do?", actions_for(pkg)))
        self.current = self.perform(action, pkg)
        self.state = next_state(action, self.installed_only)

    def perform(self, action: Action, pkg: ResolvedPackage) -> ResolvedPackage:
        """Run one action and return the refreshed package."""
        if action is Action.INSTALL:
            self.console.print(f"\nPreparing to install {pkg.name}...", style="cyan")
            try:
                self.installer.install(pkg)
            except ConfigWriteError as e:
                self.console.print(f"Failed to install {pkg.name}: {e.reason}", style="bold red")
            return self._refresh(pkg)

        if action is Action.UNINSTALL:
            from mcpget.install.installer import Outcome

            try:
                result = self.installer.uninstall(pkg.name, confirm=True)
            except ConfigWriteError as e:
                self.console.print(f"Failed to uninstall {pkg.name}: {e.reason}", style="bold red")
                return pkg
            if result.outcome is Outcome.CANCELLED:
                self.console.print("Uninstallation cancelled.")
            return self._refresh(pkg)

        if action is Action.OPEN:
            if pkg.source_url:
                self.launcher(pkg.source_url)
                self.console.print(f"\nOpened {pkg.source_url} in your browser", style="green")
            else:
                self.console.print("\nNo source URL available for this package", style="yellow")
        return pkg

    def _refresh(self, pkg: ResolvedPackage) -> ResolvedPackage:
        fresh = self.resolver.resolve_package(pkg.name)
        if fresh is not None:
            return fresh
        return dataclasses.replace(pkg, is_installed=False)
