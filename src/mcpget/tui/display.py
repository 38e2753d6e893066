"""Rich rendering for package lists and package details."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from mcpget.registry.models import Package, ResolvedPackage

console = Console()

DESCRIPTION_WIDTH = 47


def _short(text: str, width: int = DESCRIPTION_WIDTH) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def print_list_header(count: int, installed: bool = False, out: Console | None = None) -> None:
    out = out or console
    title = "Installed Packages" if installed else "Available Packages"
    noun = "installed packages" if installed else "packages"
    out.print(f"\n[bold cyan]{title}[/bold cyan]")
    out.print(f"Found {count} {noun}\n", style="dim")


def package_table(packages: Sequence[Package], show_status: bool = False) -> Table:
    table = Table(box=None, pad_edge=False, header_style="bold")
    if show_status:
        table.add_column("", width=1)
    table.add_column("Name", no_wrap=True)
    table.add_column("Description")
    table.add_column("Vendor", style="dim")
    table.add_column("License", style="dim")
    for pkg in packages:
        row = [pkg.name, _short(pkg.description), pkg.vendor, pkg.license]
        if show_status:
            installed = getattr(pkg, "is_installed", False)
            row.insert(0, "[green]✓[/green]" if installed else "")
        table.add_row(*row)
    return table


def print_package_table(
    packages: Sequence[Package], show_status: bool = False, out: Console | None = None
) -> None:
    (out or console).print(package_table(packages, show_status))


def package_details(pkg: Package | ResolvedPackage) -> Panel:
    body = Text()
    rows = [
        ("Description", pkg.description),
        ("Vendor", pkg.vendor),
        ("License", pkg.license),
        ("Runtime", pkg.runtime),
        ("Version", pkg.version),
        ("Homepage", pkg.homepage),
        ("Source", pkg.source_url),
    ]
    for label, value in rows:
        if value:
            body.append(f"{label + ':':<13}", style="yellow")
            body.append(f"{value}\n")

    if pkg.environment_variables:
        body.append("\nEnvironment variables:\n", style="yellow")
        for key, spec in pkg.environment_variables.items():
            flag = "required" if spec.required else "optional"
            body.append(f"  {key}", style="bold")
            body.append(f" ({flag}) {spec.description}\n")

    status = getattr(pkg, "is_installed", None)
    if status is not None:
        body.append("\n")
        body.append("installed" if status else "not installed", style="green" if status else "dim")
        if not getattr(pkg, "is_verified", True):
            body.append("  unverified (not in package list)", style="red")

    body.rstrip()
    return Panel(body, title=Text(pkg.name, style="bold green"), width=80)


def print_package_details(pkg: Package, out: Console | None = None) -> None:
    (out or console).print(package_details(pkg))
