"""
======================================================================
 MatchDay Runtime — Version v0.1.0 (Build 2026.10)
 Match registration bot for amateur sports leagues
======================================================================
"""

"""
Discord runtime entrypoint.

This module launches the match bot as an independent process. It owns:

- event loop creation
- settings and service wiring
- orderly startup and shutdown
- logging scope

IMPORTANT:
- A missing bot token is fatal here (and only here)
- All match logic lives behind the ChatDispatcher
"""

import asyncio
import signal
import sys

from dotenv import load_dotenv

from core.context import build_context
from runtime.version import as_string
from shared.config.bot import load_bot_settings
from shared.logging.logger import get_logger
from services.discord.runtime.supervisor import DiscordSupervisor

log = get_logger("core.discord_app")


# ----------------------------------------------------------------------
# MAIN ASYNC ENTRYPOINT
# ----------------------------------------------------------------------

async def main(stop_event: asyncio.Event):
    load_dotenv()

    log.info(f"{as_string()} booting")

    settings = load_bot_settings()
    if not settings.token:
        raise RuntimeError("DISCORD_BOT_TOKEN not found in environment or bot.json")

    context = build_context(settings)
    supervisor = DiscordSupervisor(settings=settings, dispatcher=context.dispatcher)

    # --------------------------------------------------
    # START DISCORD RUNTIME
    # --------------------------------------------------
    try:
        await supervisor.start()
        log.info("Discord supervisor started successfully")
    except Exception as e:
        log.error(f"Failed to start Discord supervisor: {e}")
        raise

    # --------------------------------------------------
    # BLOCK UNTIL SHUTDOWN SIGNAL
    # --------------------------------------------------
    await stop_event.wait()

    log.info("Discord shutdown initiated")

    # --------------------------------------------------
    # ORDERLY SHUTDOWN
    # --------------------------------------------------
    try:
        await supervisor.shutdown()
    except Exception as e:
        log.warning(f"Discord supervisor shutdown error ignored: {e}")

    log.info("Discord runtime stopped")


# ----------------------------------------------------------------------
# SIGNAL HANDLING (WINDOWS-SAFE)
# ----------------------------------------------------------------------

def _install_signal_handlers(
    loop: asyncio.AbstractEventLoop,
    stop_event: asyncio.Event,
):
    """
    Windows-safe Ctrl+C handler.
    Uses signal.signal + asyncio.Event to unwind cleanly.
    """

    def _handler(signum, frame):
        loop.call_soon_threadsafe(stop_event.set)

    try:
        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)
    except (ValueError, OSError) as e:
        log.warning(f"Signal handlers not installed: {e}")


# ----------------------------------------------------------------------
# ENTRYPOINT
# ----------------------------------------------------------------------

def run():
    stop_event = asyncio.Event()

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    _install_signal_handlers(loop, stop_event)

    try:
        loop.run_until_complete(main(stop_event))

    except KeyboardInterrupt:
        log.info("KeyboardInterrupt received, shutdown initiated")
        stop_event.set()

    finally:
        # --------------------------------------------------
        # CANCEL REMAINING TASKS (CLEANLY)
        # --------------------------------------------------
        pending = [t for t in asyncio.all_tasks(loop) if not t.done()]
        for task in pending:
            task.cancel()

        if pending:
            loop.run_until_complete(
                asyncio.gather(*pending, return_exceptions=True)
            )

        # --------------------------------------------------
        # FINAL LOOP CLEANUP
        # --------------------------------------------------
        loop.run_until_complete(loop.shutdown_asyncgens())

        asyncio.set_event_loop(None)
        loop.close()


if __name__ == "__main__":
    run()
    sys.exit(0)
