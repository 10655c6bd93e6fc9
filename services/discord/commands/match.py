"""
Discord Match Commands (handler)

Translates Discord interactions into transport-neutral inbound events,
hands them to the ChatDispatcher and renders the resulting ViewRequest.

Responsibilities:
- map interactions to InboundEvents (chat identity = channel id)
- route slash commands and button presses to the dispatcher
- perform Discord I/O (responses) ONLY here

IMPORTANT:
- This module MUST NOT register commands on import
- This module MUST NOT contain match logic
"""

from __future__ import annotations

from typing import Any, Dict

import discord

from core.dispatcher import ChatDispatcher
from core.match.intents import EventKind, InboundEvent
from core.match.views import ViewRequest
from shared.logging.logger import get_logger
from services.discord.logging import DiscordLogAdapter
from services.discord.views import build_view, truncate_content

log = get_logger("discord.commands.match", runtime="discord")


def chat_id_of(interaction: discord.Interaction) -> str:
    return str(interaction.channel_id)


def user_of(interaction: discord.Interaction) -> Dict[str, Any]:
    user = interaction.user
    return {
        "username": getattr(user, "name", None),
        "display_name": getattr(user, "display_name", None),
        "id": str(user.id) if user is not None else None,
    }


class MatchCommandHandler:
    """
    Declarative handler for the match bot's Discord surfaces.

    This class does NOT register commands; match_commands.setup() wires the
    slash commands and the client wires the component listener.
    """

    def __init__(
        self,
        *,
        dispatcher: ChatDispatcher,
        logger: DiscordLogAdapter,
    ):
        self._dispatcher = dispatcher
        self._logger = logger

    # --------------------------------------------------
    # Inbound
    # --------------------------------------------------

    async def cmd(self, interaction: discord.Interaction, name: str):
        self._logger.log_command(
            command=name,
            guild_id=interaction.guild_id,
            channel_id=interaction.channel_id,
            user_id=interaction.user.id if interaction.user else None,
        )

        event = InboundEvent(
            chat_id=chat_id_of(interaction),
            kind=EventKind.COMMAND,
            payload=f"/{name}",
            user=user_of(interaction),
        )
        request = await self._dispatcher.dispatch(event)
        await self.respond(interaction, request)

    async def on_component(self, interaction: discord.Interaction):
        data = interaction.data or {}
        token = data.get("custom_id")
        if not token:
            log.debug("Component interaction without custom_id ignored")
            return

        self._logger.log_press(
            token=token,
            guild_id=interaction.guild_id,
            channel_id=interaction.channel_id,
            user_id=interaction.user.id if interaction.user else None,
        )

        event = InboundEvent(
            chat_id=chat_id_of(interaction),
            kind=EventKind.SELECTION,
            payload=token,
            user=user_of(interaction),
        )
        request = await self._dispatcher.dispatch(event)
        await self.respond(interaction, request)

    # --------------------------------------------------
    # Outbound
    # --------------------------------------------------

    async def respond(self, interaction: discord.Interaction, request: ViewRequest):
        """
        Render one ViewRequest as the interaction's response.

        - text is None: the notice alone, ephemeral
        - edit: replace the message that carried the pressed button
        - otherwise: a new message in the channel
        Notices that accompany text go out as ephemeral follow-ups.
        """
        content = truncate_content(request.text)
        view = build_view(request)

        try:
            if content is None:
                if request.notice:
                    await interaction.response.send_message(request.notice, ephemeral=True)
                else:
                    await interaction.response.defer()
                return

            if request.edit and interaction.message is not None:
                await interaction.response.edit_message(content=content, view=view)
            else:
                kwargs: Dict[str, Any] = {"content": content}
                if view is not None:
                    kwargs["view"] = view
                await interaction.response.send_message(**kwargs)

            if request.notice:
                await interaction.followup.send(request.notice, ephemeral=True)

        except discord.HTTPException as e:
            self._logger.log_response_failure(channel_id=interaction.channel_id, error=e)
