"""Terminal UI: prompts, rendering, and the interactive package browser."""

from .browser import Action, BrowserState, PackageBrowser, actions_for, next_state
from .display import package_details, package_table, print_package_details, print_package_table
from .prompts import ConsolePrompter, Prompter, filter_packages, required_value

__all__ = [
    "Action",
    "BrowserState",
    "ConsolePrompter",
    "PackageBrowser",
    "Prompter",
    "actions_for",
    "filter_packages",
    "next_state",
    "package_details",
    "package_table",
    "print_package_details",
    "print_package_table",
    "required_value",
]
