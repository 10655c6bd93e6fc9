"""Tests for core.dispatcher."""

import asyncio
import threading
import time

import pytest

from core.dispatcher import ChatDispatcher
from core.errors import ArchiveUnavailableError
from core.match.archive import InMemoryMatchArchive
from core.match.league import LeagueReports
from core.match.machine import ConversationStateMachine
from core.match.models import MatchStage
from core.match.views import ViewRequest
from shared.storage.message_log import MessageLog
from tests.conftest import command, selection, text

CHAT = "chat-1"


async def _send(dispatcher, *events):
    view = None
    for event in events:
        view = await dispatcher.dispatch(event)
    return view


def _registration(chat=CHAT):
    return [
        command(chat, "match"),
        selection(chat, "sport_soccer"),
        selection(chat, "team1_Reds"),
        selection(chat, "team2_Blues"),
        selection(chat, "score1_1"),
        selection(chat, "score1_done"),
        selection(chat, "score2_0"),
        selection(chat, "score2_done"),
        selection(chat, "scorer_A"),
    ]


class BrokenArchive(InMemoryMatchArchive):
    def _write_history(self, history):
        raise ArchiveUnavailableError("disk full")


class TestCommands:
    @pytest.mark.asyncio
    async def test_start_and_help(self, dispatcher, catalog):
        start = await dispatcher.dispatch(command(CHAT, "start"))
        assert start.text == catalog.get("start")
        assert start.edit is False

        help_view = await dispatcher.dispatch(command(CHAT, "help"))
        assert help_view.text == catalog.get("help")

    @pytest.mark.asyncio
    async def test_match_offers_sports(self, dispatcher, sessions):
        view = await dispatcher.dispatch(command(CHAT, "match"))
        assert [b.token for b in view.buttons()] == [
            "sport_soccer",
            "sport_basketball",
            "sport_padel",
        ]
        assert sessions.get(CHAT).stage is MatchStage.SPORT

    @pytest.mark.asyncio
    async def test_info_offers_info_tokens(self, dispatcher):
        view = await dispatcher.dispatch(command(CHAT, "info"))
        assert all(b.token.startswith("info_") for b in view.buttons())

    @pytest.mark.asyncio
    async def test_undo(self, dispatcher, archive, catalog):
        await _send(dispatcher, *_registration(), selection(CHAT, "confirm"))
        assert len(archive.all()) == 1

        undone = await dispatcher.dispatch(command(CHAT, "undo"))
        assert undone.text == catalog.get("matchUndone")
        assert archive.all() == []

        again = await dispatcher.dispatch(command(CHAT, "undo"))
        assert again.text == catalog.get("noMatchToUndo")


class TestRouting:
    @pytest.mark.asyncio
    async def test_registration_through_dispatcher(self, dispatcher, archive):
        view = await _send(dispatcher, *_registration())
        assert view.edit is True
        assert "Match confirmation" in view.text

        await dispatcher.dispatch(selection(CHAT, "confirm"))
        (record,) = archive.all()
        assert record.scorers_team1 == ("A",)

    @pytest.mark.asyncio
    async def test_info_lookup_leaves_session_alone(self, dispatcher, sessions):
        await _send(dispatcher, command(CHAT, "match"), selection(CHAT, "sport_soccer"))
        before = sessions.get(CHAT).rejected_events

        view = await dispatcher.dispatch(selection(CHAT, "info_soccer"))

        assert "Standings" in view.text
        assert sessions.get(CHAT).stage is MatchStage.TEAM1
        assert sessions.get(CHAT).rejected_events == before

    @pytest.mark.asyncio
    async def test_free_text_at_start(self, dispatcher, catalog):
        view = await dispatcher.dispatch(text(CHAT, "hello"))
        assert view.text == catalog.get("unknownCommand")

    @pytest.mark.asyncio
    async def test_free_text_mid_flow_becomes_a_message(self, dispatcher):
        await dispatcher.dispatch(command(CHAT, "match"))
        view = await dispatcher.dispatch(text(CHAT, "3-1 for the Reds"))

        assert view.text is not None
        assert "Sport" in view.text
        assert view.notice is None
        assert view.edit is False

    @pytest.mark.asyncio
    async def test_unknown_button_is_rejected(self, dispatcher, sessions):
        await dispatcher.dispatch(command(CHAT, "match"))
        view = await dispatcher.dispatch(selection(CHAT, "bogus"))
        assert view.text is None
        assert sessions.get(CHAT).rejected_events == 1

    @pytest.mark.asyncio
    async def test_chats_are_independent(self, dispatcher, sessions):
        await _send(dispatcher, command("a", "match"), selection("a", "sport_soccer"))
        await dispatcher.dispatch(command("b", "match"))

        assert sessions.get("a").stage is MatchStage.TEAM1
        assert sessions.get("b").stage is MatchStage.SPORT


class TestErrorContainment:
    @pytest.mark.asyncio
    async def test_archive_failure_reports_and_clears(self, sessions, roster, catalog):
        archive = BrokenArchive()
        reports = LeagueReports(archive=archive, roster=roster, catalog=catalog)
        machine = ConversationStateMachine(
            sessions=sessions, roster=roster, archive=archive, catalog=catalog, reports=reports
        )
        dispatcher = ChatDispatcher(
            sessions=sessions, machine=machine, reports=reports, catalog=catalog
        )

        await _send(dispatcher, *_registration())
        view = await dispatcher.dispatch(selection(CHAT, "confirm"))

        assert view.text == catalog.get("generalError")
        assert sessions.get(CHAT) is None
        assert archive.all() == []

    @pytest.mark.asyncio
    async def test_invalid_state_uses_its_message(self, dispatcher, sessions, catalog):
        await _send(dispatcher, command(CHAT, "match"), selection(CHAT, "sport_soccer"),
                    selection(CHAT, "team1_Reds"), selection(CHAT, "team2_Blues"))
        # Force an impossible stage: scorers before any score was entered
        sessions.get(CHAT).stage = MatchStage.SCORERS

        view = await dispatcher.dispatch(selection(CHAT, "scorer_A"))

        assert view.text == catalog.get("internalErrorIncompleteState")
        assert sessions.get(CHAT) is None

    @pytest.mark.asyncio
    async def test_audit_log_failure_does_not_fail_event(self, sessions, machine, reports, catalog, tmp_path):
        dispatcher = ChatDispatcher(
            sessions=sessions,
            machine=machine,
            reports=reports,
            catalog=catalog,
            message_log=MessageLog(tmp_path),  # a directory cannot be appended to
        )
        view = await dispatcher.dispatch(command(CHAT, "start"))
        assert view.text == catalog.get("start")


class TestAuditLog:
    @pytest.mark.asyncio
    async def test_every_event_is_logged(self, dispatcher, message_log):
        await dispatcher.dispatch(command(CHAT, "match"))
        await dispatcher.dispatch(selection(CHAT, "sport_soccer"))

        lines = message_log.path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert lines[0].endswith(f"Chat: {CHAT} Message: /match")
        assert lines[1].endswith("Message: sport_soccer")


class SlowMachine:
    """Stands in for the state machine and records overlapping calls per chat."""

    def __init__(self, delay=0.02):
        self.delay = delay
        self.active = {}
        self.max_active = {}
        self.order = []
        self.release = threading.Event()
        self.release.set()
        self._lock = threading.Lock()

    def handle(self, session, intent):
        chat = session.chat_id
        with self._lock:
            self.active[chat] = self.active.get(chat, 0) + 1
            self.max_active[chat] = max(self.max_active.get(chat, 0), self.active[chat])
        self.release.wait(timeout=5)
        time.sleep(self.delay)
        with self._lock:
            self.active[chat] -= 1
            self.order.append(intent.digit)
        return ViewRequest(chat, "ok")


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_same_chat_is_serialized(self, sessions, reports, catalog):
        machine = SlowMachine()
        dispatcher = ChatDispatcher(
            sessions=sessions, machine=machine, reports=reports, catalog=catalog
        )

        events = [selection(CHAT, f"score1_{d}") for d in range(1, 7)]
        await asyncio.gather(*(dispatcher.dispatch(e) for e in events))

        assert machine.max_active[CHAT] == 1
        assert machine.order == [1, 2, 3, 4, 5, 6]

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, sessions, reports, catalog):
        machine = SlowMachine(delay=0)
        machine.release.clear()
        dispatcher = ChatDispatcher(
            sessions=sessions, machine=machine, reports=reports, catalog=catalog
        )

        task = asyncio.create_task(dispatcher.dispatch(selection(CHAT, "score1_1")))
        await asyncio.sleep(0.05)
        task.cancel()
        await asyncio.sleep(0.05)

        # The worker is still running, so the event has not finished yet
        assert not task.done()

        machine.release.set()
        with pytest.raises(asyncio.CancelledError):
            await task

        # Cancellation is not an error: the session survives
        assert sessions.get(CHAT) is not None

    @pytest.mark.asyncio
    async def test_cancelled_event_keeps_chat_locked(self, sessions, reports, catalog):
        machine = SlowMachine(delay=0)
        machine.release.clear()
        dispatcher = ChatDispatcher(
            sessions=sessions, machine=machine, reports=reports, catalog=catalog
        )

        first = asyncio.create_task(dispatcher.dispatch(selection(CHAT, "score1_1")))
        await asyncio.sleep(0.05)
        first.cancel()

        second = asyncio.create_task(dispatcher.dispatch(selection(CHAT, "score1_2")))
        await asyncio.sleep(0.05)
        assert machine.order == []

        machine.release.set()
        results = await asyncio.gather(first, second, return_exceptions=True)

        assert isinstance(results[0], asyncio.CancelledError)
        assert results[1].text == "ok"
        assert machine.max_active[CHAT] == 1
        assert machine.order == [1, 2]

    @pytest.mark.asyncio
    async def test_idle_chat_locks_are_dropped(self, sessions, reports, catalog):
        machine = SlowMachine(delay=0.01)
        dispatcher = ChatDispatcher(
            sessions=sessions, machine=machine, reports=reports, catalog=catalog
        )

        pending = asyncio.gather(
            *(dispatcher.dispatch(selection(chat, "score1_1")) for chat in ("a", "b", "a"))
        )
        await asyncio.sleep(0)
        assert dispatcher.tracked_chats == 2

        await pending
        assert dispatcher.tracked_chats == 0
