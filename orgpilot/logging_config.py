"""OrgPilot logging configuration.

Loggers are plain standard-library module loggers (`logging.getLogger(__name__)`)
under the `orgpilot` namespace. `setup_logging` attaches the handlers once per
process; the level comes from `ORGPILOT_LOG_LEVEL` and an optional log file
from `ORGPILOT_LOG_FILE`.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_HANDLER_MARKER = "_orgpilot_handler"


def setup_logging(level: Optional[str] = None, log_file: Optional[Path] = None) -> None:
    """Configure OrgPilot logging.

    Args:
        level: Optional override for `ORGPILOT_LOG_LEVEL`.
        log_file: Optional override for `ORGPILOT_LOG_FILE`. When set, logs go
            only to the file (used by the TUI so output does not tear the screen).
    """
    if level:
        os.environ["ORGPILOT_LOG_LEVEL"] = level

    level_name = os.getenv("ORGPILOT_LOG_LEVEL", "INFO").upper()
    resolved_level = logging.getLevelName(level_name)
    if not isinstance(resolved_level, int):
        resolved_level = logging.INFO

    file_path = log_file or (Path(os.environ["ORGPILOT_LOG_FILE"]) if os.getenv("ORGPILOT_LOG_FILE") else None)

    logger = logging.getLogger("orgpilot")
    logger.setLevel(resolved_level)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    handler: logging.Handler
    if file_path is not None:
        file_path.expanduser().parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(file_path.expanduser(), encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    setattr(handler, _HANDLER_MARKER, True)
    logger.addHandler(handler)
    logger.propagate = False
