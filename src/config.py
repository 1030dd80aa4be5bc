"""Configuration management"""
import logging
import os
from pathlib import Path
from typing import Optional

import pytz
from dotenv import load_dotenv

from src.exceptions import ConfigurationError

load_dotenv()

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Calendar-day convention for session events (IANA timezone)
ENGINE_TIMEZONE: str = os.getenv("ENGINE_TIMEZONE", "UTC")

# Reward catalog
# - empty (default): use the built-in product catalog
# - path: JSON list of {"rank", "min_value", "name", "brand", "icon"}
REWARD_CATALOG_PATH: Optional[Path] = (
    Path(os.getenv("REWARD_CATALOG_PATH")) if os.getenv("REWARD_CATALOG_PATH") else None
)

# Streaks: count several approved sessions on one calendar day once
COLLAPSE_SAME_DAY_SESSIONS: bool = os.getenv("COLLAPSE_SAME_DAY_SESSIONS", "true").lower() == "true"


# Validation
def validate_config() -> None:
    """Validate engine configuration"""
    if not isinstance(logging.getLevelName(LOG_LEVEL.upper()), int):
        raise ConfigurationError(f"Unknown LOG_LEVEL '{LOG_LEVEL}'", config_key="LOG_LEVEL")
    if ENGINE_TIMEZONE not in pytz.all_timezones_set:
        raise ConfigurationError(
            f"Invalid ENGINE_TIMEZONE '{ENGINE_TIMEZONE}'. "
            f"Please use an IANA timezone (e.g., 'Europe/Paris')",
            config_key="ENGINE_TIMEZONE"
        )
    if REWARD_CATALOG_PATH is not None and not REWARD_CATALOG_PATH.is_file():
        raise ConfigurationError(
            f"Reward catalog file not found: {REWARD_CATALOG_PATH}",
            config_key="REWARD_CATALOG_PATH"
        )
