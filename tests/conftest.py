"""Shared fixtures for the MatchDay test suite."""

import os
import tempfile

# Keep per-run log files out of the working tree
os.environ.setdefault("MATCHDAY_LOG_DIR", tempfile.mkdtemp(prefix="matchday-logs-"))
os.environ.setdefault("MATCHDAY_LOG_LEVEL", "WARNING")

import pytest

from core.dispatcher import ChatDispatcher
from core.match.archive import InMemoryMatchArchive
from core.match.intents import EventKind, InboundEvent, decode_selection
from core.match.league import LeagueReports
from core.match.machine import ConversationStateMachine
from core.match.session_store import SessionStore
from core.roster import RosterService
from shared.localization.catalog import MessageCatalog
from shared.storage.message_log import MessageLog
from shared.storage.paths import PACKAGED_LOCALES_DIR

ROSTER_ENTRIES = [
    {"name": "Reds", "sport": "Soccer", "players": ["A", "B"], "enableScorers": True},
    {"name": "Blues", "sport": "Soccer", "players": ["C"], "enableScorers": True},
    {"name": "Greens", "sport": "Soccer", "players": [], "enableScorers": True},
    {"name": "Hawks", "sport": "Basketball", "players": ["Ivo"], "enableScorers": False},
    {"name": "Owls", "sport": "Basketball", "players": None, "enableScorers": False},
    {"name": "Lonely", "sport": "Padel", "players": ["Zed"]},
]


@pytest.fixture
def roster():
    return RosterService(ROSTER_ENTRIES)


@pytest.fixture(scope="session")
def catalog():
    return MessageCatalog.from_directory(PACKAGED_LOCALES_DIR, "en")


@pytest.fixture
def archive():
    return InMemoryMatchArchive()


@pytest.fixture
def sessions():
    return SessionStore()


@pytest.fixture
def reports(archive, roster, catalog):
    return LeagueReports(archive=archive, roster=roster, catalog=catalog)


@pytest.fixture
def machine(sessions, roster, archive, catalog, reports):
    return ConversationStateMachine(
        sessions=sessions,
        roster=roster,
        archive=archive,
        catalog=catalog,
        reports=reports,
    )


@pytest.fixture
def message_log(tmp_path):
    return MessageLog(tmp_path / "log.txt")


@pytest.fixture
def dispatcher(sessions, machine, reports, catalog, message_log):
    return ChatDispatcher(
        sessions=sessions,
        machine=machine,
        reports=reports,
        catalog=catalog,
        message_log=message_log,
    )


@pytest.fixture
def press(machine, sessions):
    """Feed one button token for a chat straight into the machine."""

    def _press(chat_id, token):
        session = sessions.get_or_create(chat_id)
        return machine.handle(session, decode_selection(token))

    return _press


def selection(chat_id, token):
    return InboundEvent(chat_id=chat_id, kind=EventKind.SELECTION, payload=token)


def command(chat_id, name):
    return InboundEvent(chat_id=chat_id, kind=EventKind.COMMAND, payload=f"/{name}")


def text(chat_id, payload):
    return InboundEvent(chat_id=chat_id, kind=EventKind.TEXT, payload=payload)
