"""Interactive prompt provider.

``Prompter`` is the abstract "ask the user" capability the installer and
browser depend on. ``ConsolePrompter`` implements it with prompt_toolkit
and rich. Ctrl-C / EOF surface as ``PromptCancelled``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Protocol

from prompt_toolkit import prompt as pt_prompt
from prompt_toolkit.completion import FuzzyWordCompleter
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.validation import ValidationError, Validator
from rich.console import Console

from mcpget.core.errors import PromptCancelled

if TYPE_CHECKING:
    from mcpget.registry.models import ResolvedPackage

console = Console()

# Returns an error message, or None when the input is acceptable.
TextCheck = Callable[[str], str | None]


class Prompter(Protocol):
    def confirm(self, message: str, default: bool = True) -> bool: ...

    def select(
        self, message: str, choices: Sequence[tuple[str, str]], default: str | None = None
    ) -> str: ...

    def text(self, message: str, validate: TextCheck | None = None, default: str = "") -> str: ...

    def pick_package(
        self, packages: Sequence[ResolvedPackage], message: str = ""
    ) -> ResolvedPackage | None: ...


def required_value(label: str) -> TextCheck:
    def _check(value: str) -> str | None:
        return None if value.strip() else f"{label} is required"

    return _check


class _CheckValidator(Validator):
    def __init__(self, check: TextCheck):
        self.check = check

    def validate(self, document) -> None:
        error = self.check(document.text)
        if error:
            raise ValidationError(message=error, cursor_position=len(document.text))


def _ask(message, **kwargs) -> str:
    try:
        return pt_prompt(message, **kwargs)
    except (KeyboardInterrupt, EOFError) as e:
        raise PromptCancelled() from e


class ConsolePrompter:
    """prompt_toolkit-backed prompts, rendered like the rest of the CLI."""

    def __init__(self, out: Console | None = None):
        self.console = out or console

    def confirm(self, message: str, default: bool = True) -> bool:
        hint = "Y/n" if default else "y/N"
        while True:
            raw = _ask(HTML(f"<b>{_escape(message)}</b> [{hint}] ")).strip().lower()
            if not raw:
                return default
            if raw in ("y", "yes"):
                return True
            if raw in ("n", "no"):
                return False
            self.console.print("please answer y or n", style="dim")

    def select(
        self, message: str, choices: Sequence[tuple[str, str]], default: str | None = None
    ) -> str:
        if not choices:
            raise ValueError("select() needs at least one choice")
        self.console.print(f"\n[bold]{message}[/bold]")
        default_idx = 1
        for i, (value, label) in enumerate(choices, 1):
            if value == default:
                default_idx = i
            self.console.print(f"  [cyan]{i}.[/cyan] {label}")
        while True:
            raw = _ask(HTML(f"<b>Your choice</b> [{default_idx}]: ")).strip()
            if not raw:
                return choices[default_idx - 1][0]
            if raw.isdigit() and 1 <= int(raw) <= len(choices):
                return choices[int(raw) - 1][0]
            for value, label in choices:
                if raw.lower() in (value.lower(), label.lower()):
                    return value
            self.console.print(f"enter a number between 1 and {len(choices)}", style="dim")

    def text(self, message: str, validate: TextCheck | None = None, default: str = "") -> str:
        kwargs: dict = {"default": default}
        if validate is not None:
            kwargs["validator"] = _CheckValidator(validate)
            kwargs["validate_while_typing"] = False
        return _ask(HTML(f"<b>{_escape(message)}</b> "), **kwargs)

    def pick_package(
        self, packages: Sequence[ResolvedPackage], message: str = ""
    ) -> ResolvedPackage | None:
        """Fuzzy-complete a package name. Empty input means no selection."""
        if not packages:
            return None
        by_name = {p.name: p for p in packages}
        completer = FuzzyWordCompleter(
            list(by_name),
            meta_dict={p.name: p.description[:60] for p in packages},
        )
        while True:
            raw = _ask(
                HTML(f"<b>{_escape(message or 'Search and select a package:')}</b> "),
                completer=completer,
                complete_while_typing=True,
            ).strip()
            if not raw:
                return None
            if raw in by_name:
                return by_name[raw]
            matches = filter_packages(packages, raw)
            if len(matches) == 1:
                return matches[0]
            if not matches:
                self.console.print(f"no package matches {raw!r}", style="dim")
            else:
                names = ", ".join(p.name for p in matches[:5])
                self.console.print(f"{len(matches)} matches: {names}...", style="dim")


def filter_packages(packages: Sequence[ResolvedPackage], query: str) -> list[ResolvedPackage]:
    """Case-insensitive match of every query word against name, description, vendor."""
    words = query.lower().split()
    result = []
    for p in packages:
        haystack = f"{p.name} {p.description} {p.vendor}".lower()
        if all(w in haystack for w in words):
            result.append(p)
    return result


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
