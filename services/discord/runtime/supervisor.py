"""
Discord Runtime Supervisor

Owns the lifecycle of the Discord runtime.

Responsibilities:
- start the Discord client task
- track connection state
- perform graceful shutdown

IMPORTANT:
- MUST be started by core.discord_app
- MUST NOT create its own event loop
- MUST NOT install signal handlers
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.dispatcher import ChatDispatcher
from shared.config.bot import BotSettings
from shared.logging.logger import get_logger
from services.discord.client import DiscordClient

# NOTE: routed to Discord runtime log file
log = get_logger("discord.supervisor", runtime="discord")


class DiscordSupervisor:
    """
    Owns the Discord runtime lifecycle.

    Contract:
    - start() is awaitable
    - shutdown() is idempotent
    """

    def __init__(self, *, settings: BotSettings, dispatcher: ChatDispatcher):
        self._settings = settings
        self._dispatcher = dispatcher
        self._client: Optional[DiscordClient] = None
        self._tasks: List[asyncio.Task] = []
        self._running: bool = False
        self._connected: bool = False
        self._connected_at: Optional[datetime] = None

    # --------------------------------------------------
    # Connection notifications (called by the client)
    # --------------------------------------------------

    def notify_connected(self):
        self._connected = True
        self._connected_at = datetime.now(timezone.utc)

    def notify_disconnected(self):
        self._connected = False

    # --------------------------------------------------
    # Lifecycle
    # --------------------------------------------------

    async def start(self):
        """
        Start the Discord runtime.
        """
        if self._running:
            log.warning("Discord supervisor already running")
            return

        log.info("Starting Discord supervisor")

        self._client = DiscordClient(
            settings=self._settings,
            dispatcher=self._dispatcher,
            supervisor=self,
        )

        client_task = asyncio.create_task(self._client.run())
        self._tasks.append(client_task)

        self._running = True
        log.info("Discord supervisor started")

    async def shutdown(self):
        """
        Gracefully shut down the Discord runtime.
        """
        if not self._running:
            return

        log.info("Shutting down Discord supervisor")
        self.notify_disconnected()

        # --------------------------------------------------
        # Stop Discord client first
        # --------------------------------------------------
        try:
            if self._client:
                await self._client.shutdown()
        except Exception as e:
            log.warning(f"Discord client shutdown error ignored: {e}")

        # --------------------------------------------------
        # Cancel remaining tasks
        # --------------------------------------------------
        for task in self._tasks:
            if not task.done():
                task.cancel()

        if self._tasks:
            await asyncio.gather(
                *self._tasks,
                return_exceptions=True
            )

        self._tasks.clear()
        self._client = None
        self._running = False

        log.info("Discord supervisor shutdown complete")

    # --------------------------------------------------
    # Read-only Introspection
    # --------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def task_count(self) -> int:
        return len(self._tasks)

    def snapshot(self) -> Dict[str, Any]:
        """
        Supervisor state snapshot for diagnostics.
        """
        return {
            "running": self._running,
            "connected": self._connected,
            "connected_at": self._connected_at.isoformat() if self._connected_at else None,
            "task_count": self.task_count,
        }
