"""JSON document helpers shared by the config store and the registry."""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any

from .errors import ConfigWriteError

logger = logging.getLogger(__name__)


def read_json(path: Path) -> Any:
    """Parse *path*. None if missing or unreadable (logged)."""
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        logger.warning("ignoring unreadable %s: %s", path, e)
        return None


def read_json_object(path: Path) -> dict | None:
    data = read_json(path)
    if data is not None and not isinstance(data, dict):
        logger.warning("ignoring %s: top level is not a JSON object", path)
        return None
    return data


def dump_json(data: Any) -> str:
    """Stable 2-space serialization used for every document this tool writes."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def write_json(path: Path, data: Any) -> None:
    """Write via temp file + rename beside the real target.

    A symlinked *path* is followed so the link survives, and an existing
    file keeps its permission bits. Raises ConfigWriteError on any I/O or
    serialization failure.
    """
    try:
        text = dump_json(data)
        target = path.resolve()
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            if target.exists():
                shutil.copymode(target, tmp)
            os.replace(tmp, target)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
    except (OSError, TypeError, ValueError) as e:
        raise ConfigWriteError(path, str(e)) from e
