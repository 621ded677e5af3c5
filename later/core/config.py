"""
FILE: later/core/config.py
PURPOSE: Load and validate application settings
EXPORTS:
  - Settings (pydantic model)
  - load_settings() -> Settings
  - DEFAULT_HOME
DEPENDENCIES:
  - pydantic (validation)
  - json, logging, os, pathlib (stdlib)
NOTES:
  - Precedence (highest first): environment variables, config.json in the
    Later home directory, defaults
  - Settings are re-read on every call so tests can repoint LATER_HOME
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError as PydanticValidationError, field_validator

from .constants import DEFAULT_ROLE, LOCAL_USER_ID, VALID_ROLES

logger = logging.getLogger(__name__)

DEFAULT_HOME = Path.home() / ".later"
CONFIG_FILENAME = "config.json"
DB_FILENAME = "later.db"
PREFERENCES_FILENAME = "preferences.json"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    home: Path
    db_path: Path
    role: str = DEFAULT_ROLE
    user_id: str = LOCAL_USER_ID
    log_level: str = "WARNING"

    @field_validator("role")
    @classmethod
    def role_must_be_known(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in VALID_ROLES:
            raise ValueError(f"role must be one of {list(VALID_ROLES)}")
        return v

    @field_validator("user_id")
    @classmethod
    def user_id_must_be_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("user_id must be a non-empty string")
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {list(LOG_LEVELS)}")
        return v

    @property
    def preferences_path(self) -> Path:
        return self.home / PREFERENCES_FILENAME


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                return data
            logger.warning("Ignoring %s: expected a JSON object", path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Failed to read config %s: %s", path, e)
    return {}


def _pick(env_key: str, file_values: dict, file_key: str, default: Optional[str]) -> Optional[str]:
    value = os.environ.get(env_key)
    if value:
        return value
    value = file_values.get(file_key)
    if value is not None:
        return str(value)
    return default


def load_settings() -> Settings:
    """
    Load settings with validation.

    Returns:
        Validated Settings

    Raises:
        pydantic.ValidationError: If any value is invalid (logged first)
    """
    home = Path(os.environ.get("LATER_HOME") or DEFAULT_HOME).expanduser()
    file_values = _read_json_file(home / CONFIG_FILENAME)

    db_path_text = _pick("LATER_DB_PATH", file_values, "db_path", None)
    db_path = Path(db_path_text).expanduser() if db_path_text else home / DB_FILENAME

    try:
        return Settings(
            home=home,
            db_path=db_path,
            role=_pick("LATER_ROLE", file_values, "role", DEFAULT_ROLE),
            user_id=_pick("LATER_USER_ID", file_values, "user_id", LOCAL_USER_ID),
            log_level=_pick("LATER_LOG_LEVEL", file_values, "log_level", "WARNING"),
        )
    except PydanticValidationError as e:
        logger.error("Invalid Later configuration: %s", e)
        raise
