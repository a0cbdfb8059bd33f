from __future__ import annotations

from pathlib import Path

ORGPILOT_HOME = (Path("~/.orgpilot")).expanduser()
CONFIG_PATH = ORGPILOT_HOME / "orgpilot.yml"
COOKIE_JAR_PATH = ORGPILOT_HOME / "cookies.txt"
LOCAL_STORAGE_PATH = ORGPILOT_HOME / "local_storage.json"
TUI_LOG_PATH = ORGPILOT_HOME / "orgpilot-tui.log"
