"""
Discord Logging Adapter

Normalizes Discord-originated events (slash commands, button presses,
response failures) into structured records on the Discord runtime log.

IMPORTANT:
- This module MUST NOT send network requests
- This module MUST NOT depend on discord.py objects directly
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from shared.logging.logger import get_logger

log = get_logger("discord.logging", runtime="discord")


class DiscordLogAdapter:
    """
    Structured logging for the Discord transport.

    Callers pass plain ids and strings; the adapter decides the level and
    the record shape.
    """

    # --------------------------------------------------
    # Structured Event Hooks
    # --------------------------------------------------

    def log_event(
        self,
        *,
        event: str,
        level: str = "info",
        guild_id: Optional[int] = None,
        user_id: Optional[int] = None,
        channel_id: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        payload = {
            "event": event,
            "guild_id": guild_id,
            "user_id": user_id,
            "channel_id": channel_id,
            "data": data or {},
        }

        if level == "debug":
            log.debug(f"Discord event: {payload}")
        elif level == "warning":
            log.warning(f"Discord event: {payload}")
        elif level == "error":
            log.error(f"Discord event: {payload}")
        else:
            log.info(f"Discord event: {payload}")

    # --------------------------------------------------
    # Convenience Helpers
    # --------------------------------------------------

    def log_startup(self):
        self.log_event(event="discord_startup")

    def log_shutdown(self):
        self.log_event(event="discord_shutdown")

    def log_command(
        self,
        *,
        command: str,
        guild_id: Optional[int],
        channel_id: Optional[int],
        user_id: Optional[int],
    ):
        """Log a slash command invocation."""
        self.log_event(
            event="discord_command",
            data={"command": command},
            guild_id=guild_id,
            channel_id=channel_id,
            user_id=user_id,
        )

    def log_press(
        self,
        *,
        token: str,
        guild_id: Optional[int],
        channel_id: Optional[int],
        user_id: Optional[int],
    ):
        """Log a button press; token-level detail goes to debug."""
        self.log_event(
            event="discord_button",
            level="debug",
            data={"token": token},
            guild_id=guild_id,
            channel_id=channel_id,
            user_id=user_id,
        )

    def log_response_failure(self, *, channel_id: Optional[int], error: Exception):
        self.log_event(
            event="discord_response_failed",
            level="error",
            channel_id=channel_id,
            data={"error": str(error)},
        )
