"""User settings stored as JSON under ~/.prayertime."""

import json
import logging
import os

from prayer_times.prayer_api import CalculationMethod

logger = logging.getLogger(__name__)

CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".prayertime")
SETTINGS_FILE = os.path.join(CONFIG_DIR, "settings.json")

DEFAULT_SETTINGS = {
    "method": "MWL",
    "use_ip_location": True,
    "timeout": 10,
    "log_level": "WARNING",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# bool is an int subclass, so timeout excludes it explicitly
_VALIDATORS = {
    "method": lambda v: isinstance(v, str),
    "use_ip_location": lambda v: isinstance(v, bool),
    "timeout": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool) and v > 0,
    "log_level": lambda v: isinstance(v, str) and v.upper() in LOG_LEVELS,
}


def load_settings() -> dict:
    """
    Load settings, merged over DEFAULT_SETTINGS.

    A missing file yields the defaults; an unreadable one is logged and
    also yields the defaults. A known key with a value of the wrong type
    or range keeps its default, with a logged warning.
    """
    settings = dict(DEFAULT_SETTINGS)
    if not os.path.isfile(SETTINGS_FILE):
        return settings
    try:
        with open(SETTINGS_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", SETTINGS_FILE, exc)
        return settings
    if not isinstance(data, dict):
        logger.warning("Ignoring settings file %s: expected a JSON object", SETTINGS_FILE)
        return settings
    for key, value in data.items():
        if key in _VALIDATORS and not _VALIDATORS[key](value):
            logger.warning("Ignoring invalid %s=%r in %s, using %r", key, value, SETTINGS_FILE, settings[key])
            continue
        settings[key] = value
    return settings


def save_settings(settings: dict) -> None:
    os.makedirs(CONFIG_DIR, exist_ok=True)
    with open(SETTINGS_FILE, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=2)


def get_method(settings: dict) -> CalculationMethod:
    """Return the configured calculation method, MWL if the name is unknown."""
    name = settings.get("method", DEFAULT_SETTINGS["method"])
    try:
        return CalculationMethod.from_name(name)
    except ValueError:
        logger.warning("Unknown calculation method %r, using MWL", name)
        return CalculationMethod.MWL
