"""External process capability: launcher checks, uv install, host app restart.

Every failure here is soft: methods return False and log.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

logger = logging.getLogger(__name__)

HOST_APP = "Claude"

UV_INSTALL = {
    "win32": 'powershell -ExecutionPolicy ByPass -c "irm https://astral.sh/uv/install.ps1 | iex"',
    "darwin": "curl -LsSf https://astral.sh/uv/install.sh | sh",
    "linux": "curl -LsSf https://astral.sh/uv/install.sh | sh",
}

# platform family -> (stop command, start command); strings run through the shell
RESTART_COMMANDS: dict[str, tuple[list[str] | str, list[str] | str]] = {
    "win32": (["taskkill", "/F", "/IM", f"{HOST_APP}.exe"], f'start "" "{HOST_APP}.exe"'),
    "darwin": (["killall", HOST_APP], ["open", "-a", HOST_APP]),
    "linux": (["pkill", "-f", HOST_APP.lower()], [HOST_APP.lower()]),
}


class ProcessRunner:
    def __init__(self, platform: str = "linux", restart_delay: float = 2.0):
        self.platform = platform
        self.restart_delay = restart_delay

    def has_binary(self, name: str, version_flag: str = "--version") -> bool:
        """True if *name* is on PATH and answers its version flag."""
        if shutil.which(name) is None:
            return False
        try:
            result = subprocess.run(
                [name, version_flag],
                capture_output=True,
                text=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("%s %s failed: %s", name, version_flag, e)
            return False
        return result.returncode == 0

    def run(self, command: list[str] | str) -> bool:
        try:
            result = subprocess.run(
                command,
                shell=isinstance(command, str),
                capture_output=True,
                text=True,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("command failed: %s", e)
            return False
        if result.returncode != 0:
            logger.debug("command %r exited %d: %s", command, result.returncode, result.stderr)
        return result.returncode == 0

    def spawn(self, command: list[str] | str) -> bool:
        """Start a detached process without waiting for it."""
        try:
            subprocess.Popen(
                command,
                shell=isinstance(command, str),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=self.platform != "win32",
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("could not start %r: %s", command, e)
            return False
        return True

    def install_uv(self) -> bool:
        return self.run(UV_INSTALL.get(self.platform, UV_INSTALL["linux"]))

    def restart_host_app(self) -> bool:
        """Stop the host app, wait, start it again. True if the start succeeded."""
        stop, start = RESTART_COMMANDS.get(self.platform, RESTART_COMMANDS["linux"])
        if not self.run(stop):
            # not running is fine; it is started below either way
            logger.debug("%s was not stopped (maybe not running)", HOST_APP)
        if self.restart_delay:
            time.sleep(self.restart_delay)
        return self.spawn(start)
