"""Builder constants: file patterns and watch settings."""

from __future__ import annotations

import os

SCRIPTS_PATH_PATTERN = "**/*.sma"
INCLUDE_PATH_PATTERN = "**/*.inc"
ASSETS_PATH_PATTERN = "**/*.*"

SCRIPT_EXTENSION = ".sma"

WATCH_INTERVAL_ENV_VAR = "AMXXPACK_WATCH_INTERVAL"
DEFAULT_WATCH_INTERVAL = 0.3
"""Seconds a file must stay quiet before its watch action runs."""


def get_watch_interval() -> float:
    """Get the watch debounce interval from the environment.

    Returns:
        Value of AMXXPACK_WATCH_INTERVAL in seconds, or DEFAULT_WATCH_INTERVAL
        if unset or not a non-negative number.
    """
    raw = os.environ.get(WATCH_INTERVAL_ENV_VAR)
    if raw is None:
        return DEFAULT_WATCH_INTERVAL

    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_WATCH_INTERVAL

    return value if value >= 0 else DEFAULT_WATCH_INTERVAL
