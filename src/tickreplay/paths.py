from __future__ import annotations

import os
from pathlib import Path

from platformdirs import PlatformDirs

APP_NAME = "tickreplay"
RUNTIME_DIR_ENV = "TICKREPLAY_RUNTIME_DIR"


def default_runtime_dir() -> Path:
    """Return the directory replays, config and logs are written under.

    `TICKREPLAY_RUNTIME_DIR` wins when set; otherwise the per-user data dir.
    """

    override = os.environ.get(RUNTIME_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return Path(PlatformDirs(appname=APP_NAME, appauthor=False).user_data_dir)
