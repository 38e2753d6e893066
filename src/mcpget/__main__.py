"""CLI entry point: click command group over the resolver and installer."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

import click
from rich.console import Console

from . import __version__
from .core.config import Settings, load_settings
from .core.errors import ConfigWriteError, PromptCancelled
from .core.log import setup_logging
from .install import Installer, Outcome, ProcessRunner, make_sink, set_analytics
from .registry import RUNTIMES, Package, PackageResolver, RegistryLoader, validate_registry
from .store import ConfigStore
from .tui import ConsolePrompter, PackageBrowser, Prompter, filter_packages
from .tui.display import print_list_header, print_package_details, print_package_table

console = Console()

EXIT_FAILED = 1
EXIT_NOT_FOUND = 2
EXIT_CANCELLED = 3


@dataclass
class App:
    settings: Settings
    store: ConfigStore
    loader: RegistryLoader
    resolver: PackageResolver
    prompter: Prompter
    installer: Installer


def _app(ctx: click.Context) -> App:
    """Build (once per invocation) the services a command needs."""
    obj = ctx.ensure_object(dict)
    if "app" in obj:
        return obj["app"]
    settings = load_settings(verbose=obj.get("verbose", False))
    store = ConfigStore(settings.paths)
    loader = RegistryLoader(settings.paths.registry_dir, settings.paths.registry_list)
    prompter = obj.get("prompter") or ConsolePrompter(console)
    installer = Installer(
        store,
        loader,
        prompter,
        runner=obj.get("runner") or ProcessRunner(settings.platform),
        telemetry=make_sink(settings.telemetry_url),
        ci=settings.ci,
        out=console,
    )
    app = App(settings, store, loader, PackageResolver(loader, store), prompter, installer)
    obj["app"] = app
    return app


def _interactive(app: App, plain: bool) -> bool:
    return not plain and not app.settings.ci and sys.stdin.isatty()


# ── Group ───────────────────────────────────────────────────────────


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging on stderr")
@click.version_option(__version__, prog_name="mcp-get")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """mcp-get: install and manage MCP servers for the Claude desktop app."""
    ctx.ensure_object(dict)["verbose"] = verbose
    setup_logging(verbose)


# ── Browsing ────────────────────────────────────────────────────────


@cli.command("list")
@click.option("--plain", is_flag=True, help="Print a table instead of the interactive browser")
@click.pass_context
def list_cmd(ctx: click.Context, plain: bool):
    """Browse every available package."""
    app = _app(ctx)
    if _interactive(app, plain):
        PackageBrowser(app.resolver, app.installer, app.prompter, out=console).run()
        return
    packages = sorted(app.resolver.resolve_packages(), key=lambda p: p.name.lower())
    print_list_header(len(packages), out=console)
    print_package_table(packages, show_status=True, out=console)


@cli.command("installed")
@click.option("--plain", is_flag=True, help="Print a table instead of the interactive browser")
@click.pass_context
def installed_cmd(ctx: click.Context, plain: bool):
    """Browse installed packages."""
    app = _app(ctx)
    if _interactive(app, plain):
        PackageBrowser(
            app.resolver, app.installer, app.prompter, installed_only=True, out=console
        ).run()
        return
    packages = sorted(app.resolver.installed_packages(), key=lambda p: p.name.lower())
    if not packages:
        console.print("No MCP servers are currently installed.", style="yellow")
        return
    print_list_header(len(packages), installed=True, out=console)
    print_package_table(packages, out=console)


@cli.command("search")
@click.argument("query")
@click.pass_context
def search_cmd(ctx: click.Context, query: str):
    """Search packages by name, description or vendor."""
    app = _app(ctx)
    matches = filter_packages(app.resolver.resolve_packages(), query)
    if not matches:
        console.print(f"No packages match {query!r}.", style="yellow")
        return
    matches.sort(key=lambda p: p.name.lower())
    console.print(f"Found {len(matches)} matching packages", style="dim")
    print_package_table(matches, show_status=True, out=console)


@cli.command("info")
@click.argument("name")
@click.pass_context
def info_cmd(ctx: click.Context, name: str):
    """Show the details of one package."""
    app = _app(ctx)
    pkg = app.resolver.resolve_package(name)
    if pkg is None:
        console.print(f"Package {name} not found.", style="bold red")
        ctx.exit(EXIT_NOT_FOUND)
    print_package_details(pkg, out=console)


# ── Install / uninstall ─────────────────────────────────────────────


def _unlisted_package(app: App, name: str) -> Package | None:
    """Offer to install a package that is not in the registry."""
    if app.settings.ci:
        return None
    console.print(f"Package {name} is not in the curated package list.", style="yellow")
    console.print("Unverified packages may not work as expected.", style="dim")
    if not app.prompter.confirm(f"Install {name} anyway?", default=False):
        return None
    runtime = app.prompter.select(
        "Which runtime does this package use?",
        [(r, r) for r in RUNTIMES],
        default="node",
    )
    return Package(name=name, runtime=runtime)


@cli.command("install")
@click.argument("name")
@click.option(
    "--restart/--no-restart",
    default=None,
    help="Restart the Claude desktop app afterwards (asks when omitted)",
)
@click.pass_context
def install_cmd(ctx: click.Context, name: str, restart: bool | None):
    """Install a package into the Claude desktop config."""
    app = _app(ctx)
    try:
        pkg = app.resolver.resolve_package(name)
        if pkg is None:
            pkg = _unlisted_package(app, name)
            if pkg is None:
                console.print(f"Package {name} not found.", style="bold red")
                ctx.exit(EXIT_NOT_FOUND)
        result = app.installer.install(pkg, restart=restart)
    except PromptCancelled:
        result = None
    except ConfigWriteError as e:
        console.print(f"Failed to install {name} due to {e.reason}", style="bold red")
        ctx.exit(EXIT_FAILED)

    if result is None or result.outcome is Outcome.CANCELLED:
        console.print(f"Installation of {name} cancelled.", style="yellow")
        ctx.exit(EXIT_CANCELLED)
    console.print(f"\nSuccessfully installed {name}", style="bold green")


@cli.command("uninstall")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.option(
    "--restart/--no-restart",
    default=None,
    help="Restart the Claude desktop app afterwards (asks when omitted)",
)
@click.pass_context
def uninstall_cmd(ctx: click.Context, name: str, yes: bool, restart: bool | None):
    """Remove a package from the Claude desktop config."""
    app = _app(ctx)
    try:
        confirm = not (yes or app.settings.ci)
        result = app.installer.uninstall(name, restart=restart, confirm=confirm)
    except ConfigWriteError as e:
        console.print(f"Failed to uninstall {name} due to {e.reason}", style="bold red")
        ctx.exit(EXIT_FAILED)

    if result.outcome is Outcome.CANCELLED:
        console.print("Uninstallation cancelled.", style="yellow")
        ctx.exit(EXIT_CANCELLED)


# ── Maintenance ─────────────────────────────────────────────────────


@cli.command("validate")
@click.argument("path", required=False, type=click.Path(file_okay=False))
@click.pass_context
def validate_cmd(ctx: click.Context, path: str | None):
    """Validate the per-package registry documents."""
    app = _app(ctx)
    registry_dir = Path(path) if path else app.settings.paths.registry_dir
    results = validate_registry(registry_dir)
    if not results:
        count = len(list(registry_dir.glob("*.json")))
        console.print(f"All {count} package files are valid.", style="green")
        return
    for filename, errors in sorted(results.items()):
        console.print(f"\n[bold red]{filename}[/bold red]")
        for error in errors:
            console.print(f"  - {error}", markup=False)
    console.print(f"\n{len(results)} file(s) with errors.", style="bold red")
    ctx.exit(EXIT_FAILED)


@cli.command("analytics")
@click.argument("state", required=False, type=click.Choice(["on", "off"]))
@click.pass_context
def analytics_cmd(ctx: click.Context, state: str | None):
    """Show or change the anonymous analytics preference."""
    app = _app(ctx)
    if state is None:
        allowed = app.store.read_preferences().allow_analytics
        label = "not set" if allowed is None else ("enabled" if allowed else "disabled")
        console.print(f"Anonymous analytics: {label}")
        return
    try:
        set_analytics(app.store, state == "on")
    except ConfigWriteError as e:
        console.print(f"Failed to save preference due to {e.reason}", style="bold red")
        ctx.exit(EXIT_FAILED)
    console.print(f"Anonymous analytics {'enabled' if state == 'on' else 'disabled'}.")


@cli.command("config-path")
@click.pass_context
def config_path_cmd(ctx: click.Context):
    """Print the files mcp-get reads and writes."""
    paths = _app(ctx).settings.paths
    console.print(f"config:      {paths.config_file}", markup=False, highlight=False)
    console.print(f"preferences: {paths.preferences_file}", markup=False, highlight=False)
    console.print(f"registry:    {paths.registry_dir}", markup=False, highlight=False)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
