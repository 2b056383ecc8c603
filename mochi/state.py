"""Persist face settings (layout sizes, blink and wink timing) across restarts."""

import json
import logging
from pathlib import Path

log = logging.getLogger("mochi-face")

_STATE_FILE = "settings.json"


def _state_path(path: str | None = None) -> Path:
    return Path(path or _STATE_FILE)


def load_settings(path: str | None = None) -> dict:
    """Load persisted settings from disk. Returns empty dict if missing or corrupt."""
    state_path = _state_path(path)
    if not state_path.exists():
        return {}
    try:
        with open(state_path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        log.warning(f"Could not load settings file: {e}")
        return {}
    if not isinstance(data, dict):
        log.warning(f"Ignoring settings file {state_path}: not a JSON object")
        return {}
    log.info(f"Loaded persisted settings: {data}")
    return data


def save_settings(settings: dict, path: str | None = None):
    """Snapshot the current settings to disk."""
    try:
        with open(_state_path(path), "w") as f:
            json.dump(settings, f, indent=2, sort_keys=True)
    except OSError as e:
        log.warning(f"Could not save settings file: {e}")


def apply_settings(settings: dict, dispatcher):
    """Replay previously saved settings through a CommandDispatcher."""
    if not settings:
        return

    for key, value in settings.items():
        try:
            value = int(value)
        except (TypeError, ValueError):
            log.warning(f"Skipping saved setting {key}={value!r}")
            continue
        dispatcher.apply_setting(key, value)
    log.info(f"Restored {len(settings)} settings")
