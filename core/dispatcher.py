"""
Chat dispatcher.

Single entry point for every inbound chat event, whatever the transport.

Responsibilities:
- write the event to the inbound message audit log
- decode the raw payload into an intent (exactly once)
- route commands, info lookups and conversation intents
- serialize events of the same chat (one asyncio.Lock per chat id)
- contain errors: nothing raised while handling one chat leaks into
  another, and the user always gets a reply

IMPORTANT:
- The state machine and the archive are synchronous; they run in a worker
  thread so file I/O never blocks the event loop.
- asyncio.CancelledError is never converted into a reply. A cancelled event
  keeps its chat locked until the worker thread has returned.
- A chat's lock is dropped once no event holds or waits for it.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Dict, Optional

from core.errors import InvalidSessionState
from core.match.intents import (
    Command,
    EventKind,
    InboundEvent,
    InfoRequested,
    Unknown,
    decode_intent,
)
from core.match.league import LeagueReports
from core.match.machine import ConversationStateMachine
from core.match.session_store import SessionStore
from core.match.views import ViewRequest
from shared.localization.catalog import MessageCatalog
from shared.logging.logger import get_logger
from shared.storage.message_log import MessageLog

log = get_logger("core.dispatcher")


class ChatDispatcher:
    def __init__(
        self,
        *,
        sessions: SessionStore,
        machine: ConversationStateMachine,
        reports: LeagueReports,
        catalog: MessageCatalog,
        message_log: Optional[MessageLog] = None,
    ):
        self._sessions = sessions
        self._machine = machine
        self._reports = reports
        self._catalog = catalog
        self._message_log = message_log
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    def _acquire_lock_slot(self, chat_id: str) -> asyncio.Lock:
        lock = self._locks.get(chat_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[chat_id] = lock
        self._lock_users[chat_id] = self._lock_users.get(chat_id, 0) + 1
        return lock

    def _release_lock_slot(self, chat_id: str) -> None:
        remaining = self._lock_users[chat_id] - 1
        if remaining:
            self._lock_users[chat_id] = remaining
            return
        # Nobody holds or waits for this chat any more
        del self._lock_users[chat_id]
        del self._locks[chat_id]

    @property
    def tracked_chats(self) -> int:
        """Chats with an event in flight or queued."""
        return len(self._locks)

    # ------------------------------------------------------------------
    # Async boundary
    # ------------------------------------------------------------------

    async def dispatch(self, event: InboundEvent) -> ViewRequest:
        chat_id = event.chat_id
        lock = self._acquire_lock_slot(chat_id)
        try:
            async with lock:
                view = await self._run(event)
        finally:
            self._release_lock_slot(chat_id)

        if event.kind is not EventKind.SELECTION:
            # Commands and text never carry a message to edit
            view = replace(
                view,
                text=view.text if view.text is not None else view.notice,
                notice=None if view.text is None else view.notice,
                edit=False,
            )
        return view

    async def _run(self, event: InboundEvent) -> ViewRequest:
        """Process one event in a worker thread; the caller holds the chat lock."""

        chat_id = event.chat_id
        worker = asyncio.ensure_future(asyncio.to_thread(self._process, event))

        try:
            return await asyncio.shield(worker)

        except asyncio.CancelledError:
            log.info(f"Event processing cancelled for chat {chat_id}; waiting for the worker")
            await self._drain(chat_id, worker)
            raise

        except InvalidSessionState as e:
            log.error(f"Invalid session state in chat {chat_id}: {e}")
            self._sessions.clear(chat_id)
            return ViewRequest(chat_id, self._catalog.get(e.message_key), edit=False)

        except Exception as e:
            log.exception(f"Unhandled error while processing {event.kind.value} event in chat {chat_id}: {e}")
            self._sessions.clear(chat_id)
            return ViewRequest(chat_id, self._catalog.get("generalError"), edit=False)

    async def _drain(self, chat_id: str, worker: asyncio.Future) -> None:
        """
        Wait for a cancelled event's worker thread to finish.

        The thread cannot be interrupted, so the chat lock stays held until
        it returns; further cancellations while waiting are logged only.
        """
        while not worker.done():
            try:
                await asyncio.wait([worker])
            except asyncio.CancelledError:
                log.info(f"Repeated cancellation for chat {chat_id}; still waiting for the worker")

        error = worker.exception()
        if error is not None:
            log.warning(f"Cancelled event in chat {chat_id} failed in the worker: {error}")
            self._sessions.clear(chat_id)

    # ------------------------------------------------------------------
    # Synchronous routing (worker thread)
    # ------------------------------------------------------------------

    def _audit(self, event: InboundEvent) -> None:
        if self._message_log is None:
            return
        self._message_log.append(chat_id=event.chat_id, payload=event.payload, user=event.user)

    def _process(self, event: InboundEvent) -> ViewRequest:
        self._audit(event)

        intent = decode_intent(event)
        chat_id = event.chat_id
        log.debug(f"Chat {chat_id}: {event.kind.value} {event.payload!r} -> {intent!r}")

        if isinstance(intent, Command):
            return self._command(chat_id, intent.name)

        if isinstance(intent, InfoRequested):
            return self._reports.sport_info(chat_id, intent.sport)

        session = self._sessions.get_or_create(chat_id)

        if isinstance(intent, Unknown):
            if event.kind is EventKind.SELECTION:
                return self._machine.reject(session, intent.raw)
            return self._machine.unrecognized(session)

        return self._machine.handle(session, intent)

    def _command(self, chat_id: str, name: str) -> ViewRequest:
        if name == "start":
            return ViewRequest(chat_id, self._catalog.get("start"), edit=False)
        if name == "help":
            return ViewRequest(chat_id, self._catalog.get("help"), edit=False)
        if name == "info":
            return self._reports.info_menu(chat_id)
        if name == "match":
            return self._machine.start_match(chat_id)
        if name == "undo":
            return self._reports.undo(chat_id)

        log.warning(f"Command /{name} has no handler")
        return ViewRequest(chat_id, self._catalog.get("unknownCommand"), edit=False)
