"""
Localized message catalog.

Messages are looked up by name and formatted with structured parameters;
the runtime never assembles user-facing copy itself. Catalog files live at
<locales_dir>/<language>.json and may nest one level deep, which is how
per-sport strings are stored:

    {"matchCancelled": "...", "soccer": {"name": "Soccer", "emoji": "⚽"}}

Nested values are addressed as "soccer.name".
"""

from __future__ import annotations

import json
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional

from shared.logging.logger import get_logger

log = get_logger("shared.localization")


class MessageCatalog:
    def __init__(self, messages: Dict[str, Any], *, language: str = "en"):
        if not isinstance(messages, dict):
            raise ValueError("Message catalog root must be a JSON object")
        self._messages = messages
        self._language = language
        self._cache: Dict[str, Optional[str]] = {}
        self._lock = Lock()

    @classmethod
    def from_directory(cls, locales_dir: Path | str, language: str) -> "MessageCatalog":
        path = Path(locales_dir) / f"{language}.json"
        if not path.exists():
            log.error(f"Localization file for {language} not found at {path}")
            raise FileNotFoundError(f"Localization file for {language} not found: {path}")

        try:
            messages = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            log.error(f"Error while loading localization file {path}: {e}")
            raise

        log.info(f"Loaded localization file {path}")
        return cls(messages, language=language)

    @property
    def language(self) -> str:
        return self._language

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _resolve(self, key: str) -> Optional[str]:
        with self._lock:
            if key in self._cache:
                return self._cache[key]

        value: Any = None
        if "." in key:
            parts = key.split(".")
            if len(parts) == 2:
                section = self._messages.get(parts[0])
                if isinstance(section, dict):
                    value = section.get(parts[1])
        else:
            value = self._messages.get(key)

        template = value if isinstance(value, str) else None
        with self._lock:
            self._cache[key] = template
        return template

    def has(self, key: str) -> bool:
        return self._resolve(key) is not None

    def get_optional(self, key: str, **params: Any) -> Optional[str]:
        template = self._resolve(key)
        if template is None:
            return None
        return self._format(key, template, params)

    def get(self, key: str, **params: Any) -> str:
        """
        Return the formatted message, or the key itself when it is unknown.
        """
        template = self._resolve(key)
        if template is None:
            log.warning(f"Localization key '{key}' not found; returning the key itself")
            return key
        return self._format(key, template, params)

    @staticmethod
    def _format(key: str, template: str, params: Dict[str, Any]) -> str:
        if not params:
            return template
        try:
            return template.format(**params)
        except (KeyError, IndexError, ValueError) as e:
            log.warning(f"Failed to format message '{key}': {e}")
            return template
