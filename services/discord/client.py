"""
Discord Client

This module owns the Discord connection itself.
It is intentionally minimal and lifecycle-focused.

Responsibilities:
- connect to Discord
- handle ready / resume / disconnect events
- register the slash commands and the button-press listener
- expose a clean async run() / shutdown() contract

IMPORTANT:
- This client MUST be controlled by DiscordSupervisor
- This client MUST NOT create its own event loop
"""

from __future__ import annotations

import asyncio
from typing import Optional

import discord
from discord.ext import commands

from core.dispatcher import ChatDispatcher
from shared.config.bot import BotSettings
from shared.logging.logger import get_logger

from services.discord import commands as command_surfaces
from services.discord.commands.match import MatchCommandHandler
from services.discord.logging import DiscordLogAdapter

# NOTE: routed to Discord runtime log file
log = get_logger("discord.client", runtime="discord")


class DiscordClient:
    """
    Thin wrapper around discord.py Bot.

    This class provides:
    - async run() entrypoint
    - async shutdown()
    - lifecycle event logging
    - command surface wiring
    """

    def __init__(
        self,
        *,
        settings: BotSettings,
        dispatcher: ChatDispatcher,
        supervisor=None,
    ):
        if not settings.token:
            raise RuntimeError("DISCORD_BOT_TOKEN not found in environment or bot.json")

        log.info(f"Discord bot token present: {bool(settings.token)}")

        self._token: str = settings.token
        self._guild_id: Optional[int] = settings.guild_id
        self._bot: Optional[commands.Bot] = None
        self._ready_event = asyncio.Event()
        self._supervisor = supervisor

        self.logger = DiscordLogAdapter()
        self.handler = MatchCommandHandler(dispatcher=dispatcher, logger=self.logger)

    # --------------------------------------------------

    def _build_bot(self) -> commands.Bot:
        """
        Construct the discord.py Bot instance.

        NOTE:
        - Commands are registered here
        - No runtime ownership beyond Discord itself
        """

        intents = discord.Intents.default()
        intents.guilds = True
        intents.members = False
        intents.messages = True
        intents.message_content = False  # slash-command focused

        bot = commands.Bot(
            command_prefix="!",
            intents=intents,
            help_command=None,
        )

        # --------------------------------------------------
        # Command Registration
        # --------------------------------------------------

        command_surfaces.setup(bot, handler=self.handler)

        # --------------------------------------------------
        # Lifecycle Events
        # --------------------------------------------------

        @bot.event
        async def on_ready():
            log.info(
                f"Discord connected as {bot.user} "
                f"(id={bot.user.id}) "
                f"guilds={len(bot.guilds)}"
            )

            if self._supervisor is not None:
                self._supervisor.notify_connected()

            # Sync slash commands
            try:
                if self._guild_id:
                    guild = discord.Object(id=self._guild_id)
                    bot.tree.copy_global_to(guild=guild)
                    await bot.tree.sync(guild=guild)
                    log.info(f"Discord command tree synced to guild {self._guild_id}")
                else:
                    await bot.tree.sync()
                    log.info("Discord command tree synced")
            except discord.HTTPException as e:
                log.error(f"Failed to sync Discord commands: {e}")

            self._ready_event.set()

        @bot.event
        async def on_resumed():
            log.info("Discord connection resumed")
            if self._supervisor is not None:
                self._supervisor.notify_connected()

        @bot.event
        async def on_disconnect():
            log.warning("Discord connection lost")
            if self._supervisor is not None:
                self._supervisor.notify_disconnected()

        @bot.event
        async def on_interaction(interaction: discord.Interaction):
            # Slash commands are routed by the command tree
            if interaction.type is not discord.InteractionType.component:
                return
            await self.handler.on_component(interaction)

        @bot.event
        async def on_guild_join(guild: discord.Guild):
            log.info(
                f"Joined guild: {guild.name} "
                f"(id={guild.id}, members={guild.member_count})"
            )

        return bot

    # --------------------------------------------------

    async def run(self):
        """
        Start the Discord client and block until shutdown.
        """
        if self._bot is not None:
            raise RuntimeError("Discord client already running")

        log.info("Initializing Discord client")
        self.logger.log_startup()

        self._bot = self._build_bot()

        try:
            await self._bot.start(self._token)
        except asyncio.CancelledError:
            log.info("Discord client task cancelled")
            raise
        except Exception as e:
            log.error(f"Discord client crashed: {e}")
            raise
        finally:
            log.info("Discord client stopped")

    # --------------------------------------------------

    async def shutdown(self):
        """
        Gracefully close the Discord connection.
        """
        if not self._bot:
            return

        log.info("Closing Discord connection")
        self.logger.log_shutdown()

        try:
            await self._bot.close()
        except Exception as e:
            log.warning(f"Discord close error ignored: {e}")

        self._bot = None
        self._ready_event.clear()

    # --------------------------------------------------

    async def wait_ready(self):
        await self._ready_event.wait()

    @property
    def bot(self) -> Optional[commands.Bot]:
        """
        Expose bot instance (read-only) for supervisor hooks.
        """
        return self._bot
