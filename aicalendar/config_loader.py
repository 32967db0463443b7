"""
Group configuration loading.

Each *.json file in the config directory describes one group:

    {
        "groupName": "Festivals",
        "aiProvider": "openai",
        "calendarItems": [
            {"name": "Diwali", "authorityUrl": "...", "additionalInfo": "..."}
        ]
    }

Files are read in sorted filename order so that the generation order of
subjects, and with it deduplication, is the same on every run.
"""

import json
from pathlib import Path
from typing import List

from aicalendar.errors import ConfigLoadError
from aicalendar.event_index import check_filenames
from aicalendar.event_models import Group, Subject
from aicalendar.logging_helper import Log


def _optional_str(value, field: str, source: Path):
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ConfigLoadError(f"{source.name}: '{field}' must be a string")
    return value


def parse_group(data: dict, source: Path) -> Group:
    """Build a Group from one decoded configuration document."""
    if not isinstance(data, dict):
        raise ConfigLoadError(f"{source.name}: top-level value must be an object")

    group_name = data.get("groupName")
    if not isinstance(group_name, str) or not group_name.strip():
        raise ConfigLoadError(f"{source.name}: missing 'groupName'")

    provider = data.get("aiProvider")
    if not isinstance(provider, str) or not provider.strip():
        raise ConfigLoadError(f"{source.name}: missing 'aiProvider'")

    items = data.get("calendarItems", [])
    if not isinstance(items, list):
        raise ConfigLoadError(f"{source.name}: 'calendarItems' must be a list")

    subjects = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ConfigLoadError(f"{source.name}: calendarItems[{index}] must be an object")
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ConfigLoadError(f"{source.name}: calendarItems[{index}] is missing 'name'")
        subjects.append(Subject(
            name=name.strip(),
            authority_url=_optional_str(item.get("authorityUrl"), "authorityUrl", source),
            additional_info=_optional_str(item.get("additionalInfo"), "additionalInfo", source),
        ))

    return Group(
        name=group_name.strip(),
        ai_provider=provider.strip().lower(),
        subjects=tuple(subjects),
    )


def load_groups(config_dir) -> List[Group]:
    """
    Load every group configuration in config_dir.

    Raises:
        ConfigLoadError: if the directory or any document cannot be loaded
    """
    Log.section("Config Loader")
    config_dir = Path(config_dir)
    if not config_dir.is_dir():
        raise ConfigLoadError(f"Config directory not found: {config_dir}")

    groups = []
    for path in sorted(config_dir.glob("*.json")):
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as err:
            raise ConfigLoadError(f"Failed to read {path}: {err}") from err
        group = parse_group(data, path)
        Log.info(f"Loaded group '{group.name}' ({len(group.subjects)} subjects, provider={group.ai_provider})")
        groups.append(group)

    check_filenames(groups)
    Log.kv({"stage": "config", "config_dir": str(config_dir), "groups": len(groups)})
    return groups
