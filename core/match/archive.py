"""
Match archive.

Append-only history of confirmed matches, keyed by chat identity.

Every mutation is a read-modify-write of the full history executed inside
one lock scope, so two concurrent confirmations (or a confirmation racing an
undo) can never interleave their read and write phases.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional

from core.errors import ArchiveUnavailableError
from core.match.models import MatchRecord
from shared.logging.logger import get_logger
from shared.storage.json_document import JsonDocument, JsonDocumentError

log = get_logger("core.archive")

History = Dict[str, List[MatchRecord]]


class MatchArchive(ABC):
    """
    Storage-agnostic archive contract.

    Subclasses only provide whole-history load and save; ordering, undo and
    locking live here.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._last_timestamp: Optional[datetime] = None

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _read_history(self) -> History:
        raise NotImplementedError

    @abstractmethod
    def _write_history(self, history: History) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def next_timestamp(self) -> datetime:
        """
        Creation instant for a new record, strictly later than any instant
        previously handed out by this archive.
        """
        now = datetime.now(timezone.utc)
        with self._lock:
            if self._last_timestamp is not None and now <= self._last_timestamp:
                now = self._last_timestamp + timedelta(microseconds=1)
            self._last_timestamp = now
        return now

    def append(self, record: MatchRecord) -> None:
        with self._lock:
            history = self._read_history()
            history.setdefault(record.chat_id, []).append(record)
            self._write_history(history)

        log.info(
            f"Match archived for chat {record.chat_id}: {record.sport} "
            f"{record.team1} {record.score1}-{record.score2} {record.team2}"
        )

    def remove_most_recent_for_chat(self, chat_id: str) -> Optional[MatchRecord]:
        with self._lock:
            history = self._read_history()
            records = history.get(chat_id) or []
            if not records:
                log.info(f"Undo requested for chat {chat_id}, but it has no recorded matches")
                return None

            latest_idx = 0
            for idx, record in enumerate(records):
                if record.timestamp >= records[latest_idx].timestamp:
                    latest_idx = idx

            removed = records.pop(latest_idx)
            if not records:
                history.pop(chat_id, None)
            self._write_history(history)

        log.info(f"Undid match for chat {chat_id} recorded at {removed.timestamp.isoformat()}")
        return removed

    def all(self) -> List[MatchRecord]:
        with self._lock:
            history = self._read_history()
        flattened = [record for records in history.values() for record in records]
        flattened.sort(key=lambda r: r.timestamp)
        return flattened

    def for_chat(self, chat_id: str) -> List[MatchRecord]:
        with self._lock:
            return list(self._read_history().get(chat_id) or [])


class InMemoryMatchArchive(MatchArchive):
    """Process-local archive, used for tests and dry runs."""

    def __init__(self) -> None:
        super().__init__()
        self._history: History = {}

    def _read_history(self) -> History:
        return {chat_id: list(records) for chat_id, records in self._history.items()}

    def _write_history(self, history: History) -> None:
        self._history = {chat_id: list(records) for chat_id, records in history.items()}


class JsonMatchArchive(MatchArchive):
    """
    JSON-file archive.

    Document shape: {"<chat_id>": [<record>, ...], ...}. A missing file is an
    empty archive; a malformed file is reported as unavailable and is never
    overwritten.
    """

    def __init__(self, path: Path | str):
        super().__init__()
        self._document = JsonDocument(path, default={})

    @property
    def path(self) -> Path:
        return self._document.path

    def _read_history(self) -> History:
        try:
            raw = self._document.load()
        except JsonDocumentError as e:
            log.error(f"Match archive unreadable: {e}")
            raise ArchiveUnavailableError(str(e)) from e

        if not isinstance(raw, dict):
            raise ArchiveUnavailableError(
                f"Match archive root in {self.path} is not an object"
            )

        history: History = {}
        try:
            for chat_id, entries in raw.items():
                history[str(chat_id)] = [MatchRecord.from_document(e) for e in entries]
        except (KeyError, TypeError, ValueError) as e:
            log.error(f"Match archive {self.path} contains an invalid record: {e}")
            raise ArchiveUnavailableError(f"Invalid record in {self.path}: {e}") from e

        return history

    def _write_history(self, history: History) -> None:
        payload = {
            chat_id: [record.to_document() for record in records]
            for chat_id, records in history.items()
        }
        try:
            self._document.write(payload)
        except JsonDocumentError as e:
            log.error(f"Failed to persist match archive: {e}")
            raise ArchiveUnavailableError(str(e)) from e
