from __future__ import annotations
import logging
import os
import sys
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


APP_NAME = "StudySync"

logger = logging.getLogger(__name__)


def get_data_dir() -> Path:
    """
    Resolve the directory used for storing local app data.
    Uses an environment override when provided, otherwise falls back to a
    per-OS user data location.
    """
    override = os.environ.get("STUDYSYNC_DATA_DIR")
    if override:
        base = Path(override).expanduser()
    else:
        home = Path.home()
        platform = sys.platform
        if platform == "darwin":
            base = home / "Library" / "Application Support" / APP_NAME
        elif platform.startswith("win"):
            roaming = os.environ.get("APPDATA")
            base = Path(roaming) / APP_NAME if roaming else home / "AppData" / "Roaming" / APP_NAME
        else:
            base = home / ".local" / "share" / "studysync"

    base.mkdir(parents=True, exist_ok=True)
    return base


def get_timezone() -> tzinfo:
    name = os.environ.get("STUDYSYNC_TIMEZONE")
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone %r, using local time", name)
    local = datetime.now().astimezone().tzinfo
    return local or timezone.utc


def get_log_level() -> str:
    return os.environ.get("STUDYSYNC_LOG_LEVEL", "INFO").upper()
