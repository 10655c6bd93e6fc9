"""
Discord rendering for transport-neutral view requests.

A ViewRequest's button grid becomes a discord.ui.View whose button
custom_ids are the machine tokens. Presses are routed by the client's
interaction listener, not by item callbacks, so buttons keep working after
a restart.

Discord limits: 5 buttons per row, 5 rows per message, 2000 characters of
message content. Oversized grids are repacked to fit; buttons are dropped,
with a warning, only past 25.
"""

from __future__ import annotations

from typing import List, Optional

import discord

from core.match.views import MAX_TOKEN_BYTES, Button, ViewRequest
from shared.logging.logger import get_logger

log = get_logger("discord.views", runtime="discord")

MAX_BUTTONS_PER_ROW = 5
MAX_ROWS = 5
MAX_LABEL_LENGTH = 80
MAX_CONTENT_LENGTH = 2000

# Stored views expire; the interaction listener still handles later presses
VIEW_TIMEOUT_SECONDS = 15 * 60


def _chunk(buttons: List[Button], size: int) -> List[List[Button]]:
    return [buttons[i : i + size] for i in range(0, len(buttons), size)]


def clamp_rows(request: ViewRequest) -> List[List[Button]]:
    """
    Fit a button grid into Discord's 5×5 component layout.

    A grid that already fits keeps its layout. Otherwise every row but the
    last is repacked five buttons per row, and the last row (skip, or
    confirm / cancel) always stays on its own row. Buttons are only
    dropped when more than 25 remain after repacking.
    """
    rows: List[List[Button]] = []
    for row in request.options:
        kept = [b for b in row if len(b.token.encode("utf-8")) <= MAX_TOKEN_BYTES]
        if len(kept) != len(row):
            log.warning(f"Dropped {len(row) - len(kept)} buttons with oversized tokens")
        if kept:
            rows.append(kept)

    if len(rows) <= MAX_ROWS and all(len(row) <= MAX_BUTTONS_PER_ROW for row in rows):
        return rows

    *body_rows, tail = rows
    tail_rows = _chunk(tail, MAX_BUTTONS_PER_ROW)[:MAX_ROWS]
    body = [button for row in body_rows for button in row]

    capacity = max(0, MAX_ROWS - len(tail_rows)) * MAX_BUTTONS_PER_ROW
    if len(body) > capacity:
        log.warning(
            f"View for chat {request.chat_id} has {len(body) + len(tail)} buttons; "
            f"dropping {len(body) - capacity} beyond the Discord limit"
        )
        body = body[:capacity]

    return _chunk(body, MAX_BUTTONS_PER_ROW) + tail_rows


def truncate_content(text: Optional[str]) -> Optional[str]:
    if text is None or len(text) <= MAX_CONTENT_LENGTH:
        return text
    log.warning(f"Message content of {len(text)} characters truncated to {MAX_CONTENT_LENGTH}")
    return text[: MAX_CONTENT_LENGTH - 1] + "…"


def build_view(request: ViewRequest) -> Optional[discord.ui.View]:
    rows = clamp_rows(request)
    if not rows:
        return None

    view = discord.ui.View(timeout=VIEW_TIMEOUT_SECONDS)
    for row_index, row in enumerate(rows):
        for button in row:
            view.add_item(
                discord.ui.Button(
                    label=button.label[:MAX_LABEL_LENGTH],
                    custom_id=button.token,
                    style=discord.ButtonStyle.secondary,
                    row=row_index,
                )
            )
    return view
