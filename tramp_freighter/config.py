"""Runtime configuration read from the environment.

Save location defaults to the platform data directory:
  Linux:   ~/.local/share/tramp_freighter/trampFreighterSave.json
  macOS:   ~/Library/Application Support/tramp_freighter/trampFreighterSave.json
  Windows: C:/Users/.../AppData/Local/tramp_freighter/trampFreighterSave.json
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from platformdirs import user_data_dir

from .constants import SAVE_DEBOUNCE_MS, SAVE_KEY

APP_NAME = "tramp_freighter"

SAVE_DIR = Path(os.environ.get("TRAMP_FREIGHTER_SAVE_DIR", "") or user_data_dir(APP_NAME))
SAVE_FILE = SAVE_DIR / f"{SAVE_KEY}.json"

SAVE_DEBOUNCE = int(os.environ.get("TRAMP_FREIGHTER_SAVE_DEBOUNCE_MS", str(SAVE_DEBOUNCE_MS)))

LOG_LEVEL = os.environ.get("TRAMP_FREIGHTER_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int | None = None) -> None:
    """Install a basic handler for embedding applications and scripts."""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
