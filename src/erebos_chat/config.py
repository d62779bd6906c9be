"""Environment-driven settings and platform-aware data paths."""

import os
import sys
from pathlib import Path

DEFAULT_SUMMARY_TRIGGER = 20
DEFAULT_SUMMARY_KEEP_RECENT = 10
DEFAULT_TOAST_LIFETIME = 3.0  # seconds

SETTINGS_KEY = "erebos_settings"
CHARACTERS_KEY = "erebos_characters"
SESSIONS_KEY = "erebos_sessions"


def get_data_path() -> Path:
    """Return the directory where chat documents are stored."""
    env = os.environ.get("EREBOS_DATA_PATH")
    if env:
        return Path(env)

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "Erebos"
    elif sys.platform == "win32":
        return Path(os.environ.get("APPDATA", "")) / "Erebos"
    else:  # Linux
        return Path.home() / ".local" / "share" / "erebos"


def _int_env(name: str, default: int) -> int:
    value = os.environ.get(name, "").strip()
    return int(value) if value else default


def get_summary_trigger() -> int:
    """Message count above which older history gets summarized."""
    return _int_env("EREBOS_SUMMARY_TRIGGER", DEFAULT_SUMMARY_TRIGGER)


def get_summary_keep_recent() -> int:
    """Number of most recent messages left out of each summary."""
    return _int_env("EREBOS_SUMMARY_KEEP_RECENT", DEFAULT_SUMMARY_KEEP_RECENT)


def get_toast_lifetime() -> float:
    value = os.environ.get("EREBOS_TOAST_LIFETIME", "").strip()
    return float(value) if value else DEFAULT_TOAST_LIFETIME


def get_generator_path() -> str | None:
    """Return the ``module:attribute`` path of the generator factory, if set."""
    return os.environ.get("EREBOS_GENERATOR") or None


def get_summarizer_path() -> str | None:
    return os.environ.get("EREBOS_SUMMARIZER") or None
