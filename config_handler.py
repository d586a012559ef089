# Filename: config_handler.py
import json
import math
import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent
CONFIG_FILE_PATH = Path(os.environ.get("DEBUG_NINJA_CONFIG", PROJECT_ROOT / "config.json"))

DEFAULT_SETTINGS = {
    "default_tmp_dir": "/tmp",
    "log_file": "debug_ninja_log.txt",
    # Seconds before a single probe is killed; None waits forever.
    "probe_timeout": None,
    "sample_interval": 1,
    "sample_count": 5,
}


def _as_number(value, integer=False):
    """float/int from a number or numeric string; None when it is not one."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    if number.is_integer():
        return int(number)
    return None if integer else number


def _validated(settings: dict) -> dict:
    timeout = settings.get("probe_timeout")
    if timeout is not None:
        timeout = _as_number(timeout)
        settings["probe_timeout"] = timeout if timeout is not None and timeout > 0 else None

    interval = _as_number(settings.get("sample_interval"))
    settings["sample_interval"] = interval if interval is not None and interval >= 0 \
        else DEFAULT_SETTINGS["sample_interval"]
    count = _as_number(settings.get("sample_count"), integer=True)
    settings["sample_count"] = count if count is not None and count > 0 else DEFAULT_SETTINGS["sample_count"]

    if not isinstance(settings.get("default_tmp_dir"), str) or not settings["default_tmp_dir"]:
        settings["default_tmp_dir"] = DEFAULT_SETTINGS["default_tmp_dir"]
    if settings.get("log_file") is not None and not isinstance(settings["log_file"], str):
        settings["log_file"] = DEFAULT_SETTINGS["log_file"]
    return settings


def load_settings() -> dict:
    """Return DEFAULT_SETTINGS overlaid with whatever config.json provides, with bad values reset."""
    settings = dict(DEFAULT_SETTINGS)
    if not CONFIG_FILE_PATH.is_file():
        return settings
    try:
        with CONFIG_FILE_PATH.open("r", encoding="utf-8") as f:
            loaded = json.load(f)
    except (OSError, json.JSONDecodeError):
        return settings
    if isinstance(loaded, dict):
        settings.update(loaded)
    return _validated(settings)
