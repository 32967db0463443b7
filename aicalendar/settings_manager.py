"""
Run settings for the calendar generator.

Settings come from three layers, later ones winning: built-in defaults, an
optional JSON settings file, and environment variables. The AI backend
credentials only ever come from the environment or the settings file.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Optional, TypedDict

from aicalendar.logging_helper import Log


class SettingsSchema(TypedDict, total=False):
    api_key: str
    model: str
    disable_ai: bool
    use_stub: bool
    config_dir: str
    output_dir: str
    max_workers: int


DEFAULT_SETTINGS: SettingsSchema = {
    "api_key": "",
    "model": "",
    "disable_ai": False,
    "use_stub": False,
    "config_dir": "configs",
    "output_dir": "docs",
    "max_workers": 4,
}

ENV_VARS: Dict[str, str] = {
    "api_key": "AI_API_KEY",
    "model": "AI_MODEL",
    "disable_ai": "DISABLE_AI",
    "use_stub": "USE_STUB",
    "config_dir": "AICALENDAR_CONFIG_DIR",
    "output_dir": "AICALENDAR_OUTPUT_DIR",
    "max_workers": "AICALENDAR_MAX_WORKERS",
}

_TRUE_VALUES = ("1", "true", "yes", "on")


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def _read_settings_file(settings_file: Path) -> dict:
    """
    Read a JSON settings file, returning {} if anything fails.
    """
    if not settings_file.exists():
        Log.info(f"Settings file not found, using defaults: {settings_file}")
        return {}

    try:
        data = json.loads(settings_file.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Settings data is not a JSON object")
    except (OSError, ValueError) as err:
        Log.warn(f"Failed to read settings file ({settings_file}): {err}")
        return {}
    return data


def load_settings(settings_file: Optional[Path] = None) -> SettingsSchema:
    """
    Merge defaults, the optional settings file and environment variables.
    """
    merged: SettingsSchema = DEFAULT_SETTINGS.copy()

    if settings_file is not None:
        data = _read_settings_file(Path(settings_file))
        # Merge only known keys
        for key in DEFAULT_SETTINGS:
            if key in data:
                merged[key] = data[key]  # type: ignore[literal-required]

    for key, env_var in ENV_VARS.items():
        value = os.getenv(env_var)
        if value is not None and value != "":
            merged[key] = value  # type: ignore[literal-required]

    merged["disable_ai"] = _parse_bool(merged["disable_ai"])
    merged["use_stub"] = _parse_bool(merged["use_stub"])
    merged["max_workers"] = _validate_workers(merged["max_workers"])
    for key in ("config_dir", "output_dir"):
        merged[key] = _validate_path_setting(key, merged[key])  # type: ignore[literal-required]
    return merged


def _validate_path_setting(key: str, value) -> str:
    if not isinstance(value, str) or not value.strip():
        Log.warn(f"Invalid {key} value '{value}', defaulting to {DEFAULT_SETTINGS[key]}")  # type: ignore[literal-required]
        return DEFAULT_SETTINGS[key]  # type: ignore[literal-required]
    return value


def _validate_workers(value) -> int:
    try:
        workers = int(value)
        if workers < 1:
            raise ValueError("must be at least 1")
    except (TypeError, ValueError) as err:
        Log.warn(f"Invalid max_workers value '{value}' ({err}), defaulting to {DEFAULT_SETTINGS['max_workers']}")
        return DEFAULT_SETTINGS["max_workers"]
    return workers
