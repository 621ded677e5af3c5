"""
FILE: later/core/preferences.py
PURPOSE: Persist small per-user preferences (current space)
EXPORTS:
  - get_current_space_id() -> Optional[str]
  - set_current_space_id(space_id) -> None
DEPENDENCIES:
  - json, logging (stdlib)
  - later.core.config (preferences file location)
NOTES:
  - Stored as JSON in preferences.json under the Later home directory
  - An unreadable file is treated as empty (logged at WARNING)
"""

import json
import logging
from typing import Optional

from .config import load_settings

logger = logging.getLogger(__name__)

CURRENT_SPACE_KEY = "current_space_id"


def _load() -> dict:
    path = load_settings().preferences_path
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Failed to read preferences %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def get_current_space_id() -> Optional[str]:
    value = _load().get(CURRENT_SPACE_KEY)
    return str(value) if value else None


def set_current_space_id(space_id: Optional[str]) -> None:
    """Remember the current space (None clears it)."""
    path = load_settings().preferences_path
    path.parent.mkdir(parents=True, exist_ok=True)

    data = _load()
    if space_id:
        data[CURRENT_SPACE_KEY] = space_id
    else:
        data.pop(CURRENT_SPACE_KEY, None)

    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
