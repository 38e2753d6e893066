"""Install: env-var collection, process runner, telemetry, install state machine."""

from .envvars import EnvVarCollector
from .installer import ActionResult, Installer, InstallState, Outcome
from .runner import ProcessRunner
from .telemetry import HttpTelemetry, NullTelemetry, analytics_allowed, make_sink, set_analytics

__all__ = [
    "ActionResult",
    "EnvVarCollector",
    "HttpTelemetry",
    "InstallState",
    "Installer",
    "NullTelemetry",
    "Outcome",
    "ProcessRunner",
    "analytics_allowed",
    "make_sink",
    "set_analytics",
]
