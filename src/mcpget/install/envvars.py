"""Environment variable collection for a package install."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console

from mcpget.tui.prompts import required_value

if TYPE_CHECKING:
    from mcpget.registry.models import EnvVarSpec
    from mcpget.tui.prompts import Prompter

logger = logging.getLogger(__name__)
console = Console()


class EnvVarCollector:
    """Resolve a package's declared variables from the environment or the user.

    ``collect`` returns the chosen values, or None when nothing was set.
    A required variable left unset is a warning, not a failure.
    ``PromptCancelled`` from the prompter propagates untouched.
    """

    def __init__(
        self,
        prompter: Prompter,
        config_path: Path,
        environ: Mapping[str, str] | None = None,
        out: Console | None = None,
    ):
        self.prompter = prompter
        self.config_path = config_path
        self.environ = os.environ if environ is None else environ
        self.console = out or console

    def detected(self, declared: Mapping[str, EnvVarSpec]) -> dict[str, str]:
        return {k: self.environ[k] for k in declared if self.environ.get(k)}

    def collect(self, declared: Mapping[str, EnvVarSpec]) -> dict[str, str] | None:
        if not declared:
            return None

        found = self.detected(declared)
        has_all_required = all(k in found for k, spec in declared.items() if spec.required)

        if has_all_required and found:
            if self.prompter.confirm(
                "Found all required environment variables. Use them automatically?",
                default=True,
            ):
                return found

        values: dict[str, str] = {}
        missing: list[str] = []
        for key, spec in declared.items():
            if key in found:
                if self.prompter.confirm(
                    f"Found {key} in your environment. Use it?", default=True
                ):
                    values[key] = found[key]
                    continue

            label = f"{key} (required)" if spec.required else f"{key} (optional)"
            question = f"Configure {label}?"
            if spec.description:
                question = f"Configure {label}: {spec.description}?"
            if not self.prompter.confirm(question, default=spec.required):
                if spec.required:
                    missing.append(key)
                continue

            value = self.prompter.text(
                f"Enter {spec.description or key}:",
                validate=required_value(key) if spec.required else None,
            )
            if value:
                values[key] = value

        if missing:
            self.console.print(
                f"\n[yellow]Note:[/yellow] required variables not configured: {', '.join(missing)}"
            )
            self.console.print("You can set them later by editing the config file at:")
            self.console.print(str(self.config_path), style="bold")
            logger.debug("install proceeds without %s", missing)
        elif not values:
            self.console.print("\nNo environment variables were configured.", style="dim")

        return values or None
