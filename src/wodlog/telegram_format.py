"""Telegram message formatting utilities."""

from datetime import date

import telegramify_markdown

from .core.calendar import WEEKDAY_HEADERS, DayCell, grid_rows
from .core.entries import WodEntry, format_entry_markdown

MAX_CHUNK = 4000


def render_entries(entries: list[WodEntry], empty_msg: str) -> str:
    """Markdown for a list of entries, separated by rules."""
    if not entries:
        return empty_msg
    return "\n\n---\n\n".join(format_entry_markdown(e) for e in entries)


def render_month(cells: list[DayCell], month: int, year: int) -> str:
    """Month grid as a fenced code block. `*` marks days with WODs, [] marks today."""
    lines = [" ".join(f"{h:>4}" for h in WEEKDAY_HEADERS)]
    for week in grid_rows(cells):
        row = []
        for cell in week:
            if not cell.is_current_month:
                row.append(f"{'.':>4}")
                continue
            text = f"[{cell.date.day}]" if cell.is_today else str(cell.date.day)
            row.append(f"{text}{'*' if cell.wod_count else ''}".rjust(4))
        lines.append(" ".join(row))
    title = date(year, month, 1).strftime("%B %Y")
    grid = "\n".join(lines)
    return f"*{title}*\n\n```\n{grid}\n```"


async def send_markdown(bot_or_msg, text: str, *, chat_id: int | None = None, reply_markup=None):
    """Send markdown text to Telegram, converting to MarkdownV2.

    bot_or_msg: a Bot instance (pass chat_id) or an Update.message (calls reply_text).
    The reply markup, if any, is attached to the last chunk.
    """
    converted = telegramify_markdown.markdownify(text)
    chunks = [converted[i : i + MAX_CHUNK] for i in range(0, len(converted), MAX_CHUNK)] or [converted]
    for i, chunk in enumerate(chunks):
        markup = reply_markup if i == len(chunks) - 1 else None
        if chat_id is not None:
            await bot_or_msg.send_message(chat_id=chat_id, text=chunk, parse_mode="MarkdownV2", reply_markup=markup)
        else:
            await bot_or_msg.reply_text(chunk, parse_mode="MarkdownV2", reply_markup=markup)
