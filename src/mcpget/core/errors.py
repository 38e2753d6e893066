"""Exception types shared across the store, installer and CLI."""

from __future__ import annotations

from pathlib import Path


class McpGetError(Exception):
    pass


class ConfigWriteError(McpGetError):
    """A config or preferences document could not be persisted."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"could not write {path}: {reason}")
        self.path = path
        self.reason = reason


class PromptCancelled(McpGetError):
    """The user aborted an interactive prompt (Ctrl-C / EOF)."""
