"""Per-chat conversation session store."""

from __future__ import annotations

from threading import Lock
from typing import Dict, Optional

from core.match.models import MatchStage, Session
from shared.logging.logger import get_logger

log = get_logger("core.session_store")


class SessionStore:
    """
    Owns one mutable Session per chat identity.

    get_or_create() and clear() are atomic per call. Serializing events of
    the same chat is the dispatcher's responsibility.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._sessions: Dict[str, Session] = {}

    def get_or_create(self, chat_id: str) -> Session:
        with self._lock:
            session = self._sessions.get(chat_id)
            if session is None:
                log.debug(f"Creating new session for chat {chat_id}")
                session = Session(chat_id=chat_id, stage=MatchStage.START)
                self._sessions[chat_id] = session
        return session

    def get(self, chat_id: str) -> Optional[Session]:
        with self._lock:
            return self._sessions.get(chat_id)

    def clear(self, chat_id: str) -> None:
        with self._lock:
            removed = self._sessions.pop(chat_id, None)

        if removed is not None:
            log.info(f"Session cleared for chat {chat_id}; final stage was {removed.stage}")
        else:
            log.debug(f"Clear requested for chat {chat_id}, but no session was found")

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
