"""Package name transforms.

Two independent schemes exist and must not be interchanged:

- config keys (``server_key``): every ``/`` becomes ``-``. Used as the key
  under ``mcpServers`` in the host config.
- registry filenames (``registry_filename``): leading ``@`` dropped, every
  ``/`` becomes ``--``. Used to locate per-package registry documents.
"""

from __future__ import annotations

SEPARATOR = "/"


def server_key(name: str) -> str:
    """Config-key scheme: ``@scope/pkg`` -> ``@scope-pkg``."""
    return name.replace(SEPARATOR, "-")


def display_name(key: str) -> str:
    """Best-effort reverse of ``server_key`` for display only.

    Not an inverse: ``foo-bar`` may have been ``foo-bar`` or ``foo/bar``.
    Never use the result for lookups.
    """
    return key.replace("-", SEPARATOR)


def registry_filename(name: str) -> str:
    """Registry-file scheme: ``@scope/pkg`` -> ``scope--pkg.json``."""
    stem = name[1:] if name.startswith("@") else name
    return stem.replace(SEPARATOR, "--") + ".json"
