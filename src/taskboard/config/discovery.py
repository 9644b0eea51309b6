"""Locating and reading ``taskboard.toml``.

A team keeps one ``taskboard.toml`` at the root of the directory it shares,
next to the ``.taskboard/`` folder that holds the SQLite database. Any
command run below that root finds the file by walking up, so boards stay
reachable from nested project folders.

``TASKBOARD_CONFIG`` names a file directly and turns the walk off; the
``--config`` flag bypasses discovery entirely.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from taskboard.config.models import TaskboardConfig

CONFIG_FILENAME = "taskboard.toml"
CONFIG_ENV_VAR = "TASKBOARD_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the ``taskboard.toml`` governing *start* (default: cwd), if any.

    A ``TASKBOARD_CONFIG`` pointing at a missing file yields ``None`` rather
    than falling back to the walk.
    """
    pinned = os.environ.get(CONFIG_ENV_VAR)
    if pinned:
        path = Path(pinned)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None, cwd: Path | None = None) -> TaskboardConfig:
    """Parse the board settings file into a :class:`TaskboardConfig`.

    Sections left out of the file keep their defaults; with no file at all
    every section does.
    """
    path = path if path is not None else find_config(cwd)
    if path is None:
        return TaskboardConfig()
    data: dict[str, Any] = tomllib.loads(path.read_text(encoding="utf-8"))
    return TaskboardConfig.model_validate(data)
