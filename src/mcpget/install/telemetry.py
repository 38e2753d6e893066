"""Anonymous install analytics: consent handling and the reporting sink."""

from __future__ import annotations

import http.client
import json
import logging
import urllib.request
from typing import TYPE_CHECKING, Protocol

from mcpget.core.errors import ConfigWriteError

if TYPE_CHECKING:
    from mcpget.store.config_store import ConfigStore
    from mcpget.tui.prompts import Prompter

logger = logging.getLogger(__name__)

CONSENT_QUESTION = (
    "Would you like to help improve mcp-get by sharing anonymous installation analytics?"
)


class TelemetrySink(Protocol):
    def report_install(self, package_name: str) -> None: ...


class NullTelemetry:
    def report_install(self, package_name: str) -> None:
        logger.debug("telemetry disabled; not reporting %s", package_name)


class HttpTelemetry:
    """POST ``{"packageName": ...}`` to a collection endpoint."""

    def __init__(self, url: str, timeout: float = 5.0):
        self.url = url
        self.timeout = timeout

    def report_install(self, package_name: str) -> None:
        body = json.dumps({"packageName": package_name}).encode("utf-8")
        req = urllib.request.Request(
            self.url,
            data=body,
            method="POST",
            headers={"Content-Type": "application/json", "User-Agent": "mcp-get/0.1"},
        )
        with urllib.request.urlopen(req, timeout=self.timeout) as resp:
            resp.read()


def make_sink(url: str) -> TelemetrySink:
    return HttpTelemetry(url) if url else NullTelemetry()


def analytics_allowed(store: ConfigStore, prompter: Prompter, ci: bool = False) -> bool:
    """Read the stored consent, asking (or defaulting in CI) the first time.

    Persists the answer; a failed write raises ConfigWriteError.
    """
    prefs = store.read_preferences()
    if prefs.allow_analytics is not None:
        return prefs.allow_analytics
    prefs.allow_analytics = False if ci else prompter.confirm(CONSENT_QUESTION, default=True)
    store.write_preferences(prefs)
    return prefs.allow_analytics


def set_analytics(store: ConfigStore, allowed: bool) -> None:
    prefs = store.read_preferences()
    prefs.allow_analytics = allowed
    store.write_preferences(prefs)


def report_install(
    sink: TelemetrySink,
    store: ConfigStore,
    prompter: Prompter,
    package_name: str,
    ci: bool = False,
) -> bool:
    """Fire-and-forget install report. Never raises except on cancellation."""
    try:
        if not analytics_allowed(store, prompter, ci):
            return False
    except ConfigWriteError as e:
        logger.warning("could not save analytics preference: %s", e)
        return False
    try:
        sink.report_install(package_name)
    except (OSError, http.client.HTTPException, ValueError) as e:
        logger.debug("install report for %s failed: %s", package_name, e)
        return False
    return True
