from __future__ import annotations

import os
from pathlib import Path

APP_NAME = "notevault"
APP_HOME = Path(os.environ.get("NOTEVAULT_HOME") or Path.home() / f".{APP_NAME}")
LOG_DIR = APP_HOME / "logs"
LOG_PATH = LOG_DIR / f"{APP_NAME}.log"

DEFAULT_BASE_PATH = APP_HOME / "vaults"

NOTE_SUFFIX = ".md"
INDEX_DIR_NAME = ".index"

# number of content tokens used for ids of untitled notes
ID_TOKEN_COUNT = 3
