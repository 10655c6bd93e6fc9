"""
Bot runtime configuration.

Resolution order (later wins):
1. dataclass defaults
2. shared/config/bot.json (optional)
3. environment variables (MATCHDAY_*, DISCORD_BOT_TOKEN), including
   anything python-dotenv loaded from .env

Design rules:
- Import-safe (no side effects)
- Bad values are logged and replaced with defaults, never fatal here
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from shared.logging.logger import get_logger
from shared.storage.paths import (
    ARCHIVE_FILE,
    DATA_DIR,
    MESSAGE_LOG_FILE,
    PACKAGED_LOCALES_DIR,
    ROSTER_FILE,
)

log = get_logger("shared.config.bot")

CONFIG_PATH = Path(__file__).parent / "bot.json"

DEFAULT_LANGUAGE = "en"

# Environment variable -> settings field
ENV_OVERRIDES: Dict[str, str] = {
    "DISCORD_BOT_TOKEN": "token",
    "MATCHDAY_GUILD_ID": "guild_id",
    "MATCHDAY_LANGUAGE": "language",
    "MATCHDAY_DATA_DIR": "data_dir",
    "MATCHDAY_ROSTER_PATH": "roster_path",
    "MATCHDAY_ARCHIVE_PATH": "archive_path",
    "MATCHDAY_MESSAGE_LOG_PATH": "message_log_path",
    "MATCHDAY_LOCALES_DIR": "locales_dir",
}


BOT_CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "token": {"type": ["string", "null"]},
        "guild_id": {"type": ["integer", "string", "null"], "pattern": r"^\d*$"},
        "language": {"type": "string", "pattern": r"^[A-Za-z_-]+$"},
        "data_dir": {"type": "string"},
        "roster_path": {"type": "string"},
        "archive_path": {"type": "string"},
        "message_log_path": {"type": "string"},
        "locales_dir": {"type": "string"},
    },
}


@dataclass
class BotSettings:
    token: Optional[str] = None
    guild_id: Optional[int] = None
    language: str = DEFAULT_LANGUAGE
    data_dir: Path = field(default_factory=lambda: DATA_DIR)
    roster_path: Optional[Path] = None
    archive_path: Optional[Path] = None
    message_log_path: Optional[Path] = None
    locales_dir: Path = field(default_factory=lambda: PACKAGED_LOCALES_DIR)

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir)
        self.locales_dir = Path(self.locales_dir)
        self.roster_path = Path(self.roster_path) if self.roster_path else self.data_dir / ROSTER_FILE
        self.archive_path = Path(self.archive_path) if self.archive_path else self.data_dir / ARCHIVE_FILE
        self.message_log_path = (
            Path(self.message_log_path) if self.message_log_path else self.data_dir / MESSAGE_LOG_FILE
        )


# ----------------------------------------------------------------------
# Loading
# ----------------------------------------------------------------------

def load_config_file(path: Path = CONFIG_PATH) -> Dict[str, Any]:
    if not path.exists():
        log.info(f"bot.json not found at {path}; using defaults")
        return {}

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        log.warning(f"Failed to load bot.json ({e}); using defaults")
        return {}

    if not isinstance(data, dict):
        log.warning("bot.json root must be an object; using defaults")
        return {}
    return data


def _normalize_guild_id(value: Any) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        log.warning(f"Invalid guild_id {value!r}; slash commands will sync globally")
        return None


def _clean(raw: Mapping[str, Any]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}

    for key in ("token", "language"):
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            values[key] = value.strip()
        elif value is not None:
            log.warning(f"{key} must be a non-empty string; ignoring")

    for key in ("data_dir", "roster_path", "archive_path", "message_log_path", "locales_dir"):
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            values[key] = Path(value.strip())
        elif value is not None:
            log.warning(f"{key} must be a path string; ignoring")

    if "guild_id" in raw:
        values["guild_id"] = _normalize_guild_id(raw.get("guild_id"))

    return values


def load_bot_settings(
    raw: Optional[Dict[str, Any]] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
) -> BotSettings:
    raw = raw if raw is not None else load_config_file()
    env = env if env is not None else os.environ

    values = _clean(raw)

    overrides = {
        field_name: env[name]
        for name, field_name in ENV_OVERRIDES.items()
        if env.get(name)
    }
    values.update(_clean(overrides))

    settings = BotSettings(**values)
    log.debug(
        f"Bot settings resolved: language={settings.language}, "
        f"data_dir={settings.data_dir}, guild_id={settings.guild_id}"
    )
    return settings
