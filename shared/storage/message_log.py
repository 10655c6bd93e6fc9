"""
Inbound message audit log.

Append-only text log of every event the bot receives, one line per event:

    2026-01-04T18:22:10Z [User: alice (Alice Doe, ID:42)] Chat: 123 Message: /match

Writes are serialized by a lock. A failed write is logged and reported to the
caller as False; it never aborts the event being processed.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from shared.logging.logger import get_logger

log = get_logger("shared.message_log")


def _format_user(user: Dict[str, Any]) -> str:
    username = user.get("username") or "unknown"
    display = user.get("display_name") or ""
    user_id = user.get("id") or ""
    return f"{username} ({display}, ID:{user_id})"


class MessageLog:
    def __init__(self, path: Path | str):
        self._path = Path(path)
        self._lock = threading.Lock()

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            log.info(f"Message log initialized at {self._path}")
        except OSError as e:
            log.error(f"Failed to create message log directory for {self._path}: {e}")

    @property
    def path(self) -> Path:
        return self._path

    def append(
        self,
        *,
        chat_id: str,
        payload: str,
        user: Optional[Dict[str, Any]] = None,
        ts: Optional[datetime] = None,
    ) -> bool:
        stamp = (ts or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H:%M:%SZ")
        # Keep one event per line
        text = " ".join((payload or "").splitlines())
        line = f"{stamp} [User: {_format_user(user or {})}] Chat: {chat_id} Message: {text}"

        with self._lock:
            try:
                with self._path.open("a", encoding="utf-8") as handle:
                    handle.write(line + "\n")
            except OSError as e:
                log.error(f"Failed to write message log entry to {self._path}: {e}")
                return False

        log.debug(f"Logged message to file: {line}")
        return True
