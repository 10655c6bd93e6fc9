"""
Discord Command Package

Centralizes registration for the match bot's Discord command surfaces.

IMPORTANT DESIGN RULES:
- No command registration on import
- No Discord client ownership
- Explicit setup() calls only
"""

from __future__ import annotations

from discord.ext import commands

from shared.logging.logger import get_logger

from services.discord.commands import match_commands
from services.discord.commands.match import MatchCommandHandler

log = get_logger("discord.commands", runtime="discord")


def setup(
    bot: commands.Bot,
    *,
    handler: MatchCommandHandler,
):
    """
    Register all Discord command surfaces.

    This function is called exactly once by the Discord client
    during startup.
    """

    match_commands.setup(bot, handler=handler)

    log.info("Discord command surfaces initialized")
