"""
Runtime context: builds and owns the services one bot process needs.

Transports receive a ready ChatDispatcher and never construct match
services themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.dispatcher import ChatDispatcher
from core.match.archive import JsonMatchArchive, MatchArchive
from core.match.league import LeagueReports
from core.match.machine import ConversationStateMachine
from core.match.session_store import SessionStore
from core.roster import RosterService
from shared.config.bot import BotSettings
from shared.localization.catalog import MessageCatalog
from shared.logging.logger import get_logger
from shared.storage.message_log import MessageLog

log = get_logger("core.context")


@dataclass
class MatchDayContext:
    settings: BotSettings
    catalog: MessageCatalog
    roster: RosterService
    archive: MatchArchive
    sessions: SessionStore
    reports: LeagueReports
    machine: ConversationStateMachine
    dispatcher: ChatDispatcher
    message_log: Optional[MessageLog] = None


def build_context(
    settings: BotSettings,
    *,
    archive: Optional[MatchArchive] = None,
    roster: Optional[RosterService] = None,
    catalog: Optional[MessageCatalog] = None,
    message_log: Optional[MessageLog] = None,
) -> MatchDayContext:
    """
    Wire the match services from settings.

    Explicit arguments replace the file-backed defaults. A missing locale
    file is fatal (FileNotFoundError); a missing roster yields an empty one.
    """

    catalog = catalog or MessageCatalog.from_directory(settings.locales_dir, settings.language)
    roster = roster if roster is not None else RosterService.from_file(settings.roster_path)
    archive = archive if archive is not None else JsonMatchArchive(settings.archive_path)
    message_log = message_log if message_log is not None else MessageLog(settings.message_log_path)

    sessions = SessionStore()
    reports = LeagueReports(archive=archive, roster=roster, catalog=catalog)
    machine = ConversationStateMachine(
        sessions=sessions,
        roster=roster,
        archive=archive,
        catalog=catalog,
        reports=reports,
    )
    dispatcher = ChatDispatcher(
        sessions=sessions,
        machine=machine,
        reports=reports,
        catalog=catalog,
        message_log=message_log,
    )

    log.info(
        f"Runtime context ready: {len(roster)} team(s), "
        f"{len(roster.sports())} sport(s), language={catalog.language}"
    )

    return MatchDayContext(
        settings=settings,
        catalog=catalog,
        roster=roster,
        archive=archive,
        sessions=sessions,
        reports=reports,
        machine=machine,
        dispatcher=dispatcher,
        message_log=message_log,
    )
