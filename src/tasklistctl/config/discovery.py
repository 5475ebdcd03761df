"""Locating ``tasklistctl.toml``.

The directory holding the config file becomes the workspace root, and a
relative database path resolves against it. An explicit path in
``TASKLISTCTL_CONFIG`` wins over the search.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "tasklistctl.toml"
CONFIG_ENV_VAR = "TASKLISTCTL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Nearest ``tasklistctl.toml`` at or above *start* (the cwd by default).

    When ``TASKLISTCTL_CONFIG`` is set only that file is considered; a
    missing file there gives None rather than falling back to the search.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent
