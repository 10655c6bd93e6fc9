"""
Discord Match Slash Command Registration

Thin registration layer that exposes the match bot's slash commands and
delegates ALL logic to MatchCommandHandler.

IMPORTANT DESIGN RULES:
- NO business logic
- NO persistence
- NO Discord client creation
"""

from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands

from shared.logging.logger import get_logger

from services.discord.commands.match import MatchCommandHandler

# NOTE: routed to Discord runtime log file
log = get_logger("discord.commands.match.register", runtime="discord")


# ==================================================
# Registration Entry Point
# ==================================================

def setup(
    bot: commands.Bot,
    *,
    handler: MatchCommandHandler,
):
    """
    Register the /start, /help, /info, /match and /undo slash commands.

    Called explicitly by the Discord client during startup.
    """

    # --------------------------------------------------
    # /start
    # --------------------------------------------------

    @app_commands.command(name="start", description="Show the welcome message")
    async def start(interaction: discord.Interaction):
        await handler.cmd(interaction, "start")

    # --------------------------------------------------
    # /help
    # --------------------------------------------------

    @app_commands.command(name="help", description="List the available commands")
    async def help_(interaction: discord.Interaction):
        await handler.cmd(interaction, "help")

    # --------------------------------------------------
    # /info
    # --------------------------------------------------

    @app_commands.command(name="info", description="Show standings and top scorers")
    async def info(interaction: discord.Interaction):
        await handler.cmd(interaction, "info")

    # --------------------------------------------------
    # /match
    # --------------------------------------------------

    @app_commands.command(name="match", description="Record a new match result")
    async def match(interaction: discord.Interaction):
        await handler.cmd(interaction, "match")

    # --------------------------------------------------
    # /undo
    # --------------------------------------------------

    @app_commands.command(
        name="undo",
        description="Remove the last match recorded in this channel",
    )
    async def undo(interaction: discord.Interaction):
        await handler.cmd(interaction, "undo")

    # --------------------------------------------------
    # Register Commands
    # --------------------------------------------------

    for command in (start, help_, info, match, undo):
        bot.tree.add_command(command)

    log.info("Discord match slash commands registered")
