"""Telegram command handlers."""

import logging
from datetime import date

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import ContextTypes, ConversationHandler

from .context import AppContext
from .core.ai_import import ImportPayload, guess_media_type, is_text_media_type
from .core.editor import EntryEditor
from .core.entries import format_entry_markdown
from .core.errors import NotAuthenticatedError
from .telegram_format import render_entries, render_month, send_markdown
from .telegram_states import ImportStates
from .workflows import import_into_editor, load_date_options, month_grid, save_editor

logger = logging.getLogger(__name__)


def _app(context: ContextTypes.DEFAULT_TYPE) -> AppContext:
    return context.application.bot_data["app"]


def _parse_date_arg(context: ContextTypes.DEFAULT_TYPE) -> str | None:
    """First command argument as an ISO date, today if absent, None if invalid."""
    if not context.args:
        return date.today().isoformat()
    try:
        return date.fromisoformat(context.args[0]).isoformat()
    except ValueError:
        return None


# ============== Simple Commands ==============


async def start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start command."""
    await update.message.reply_text(
        "Hey! I'm your WOD log.\n\n"
        "Commands:\n"
        "/today - Today's WODs\n"
        "/day YYYY-MM-DD - WODs on a date\n"
        "/month [YYYY-MM] - Month calendar\n"
        "/wod ID - Show one WOD\n"
        "/import [YYYY-MM-DD] - Create a WOD from text, a photo or a PDF\n"
        "/help - Show all commands"
    )


async def help_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /help command."""
    await update.message.reply_text(
        "wodlog commands\n\n"
        "/today - Today's WODs\n"
        "/day YYYY-MM-DD - WODs on a date\n"
        "/month [YYYY-MM] - Month calendar with WOD markers\n"
        "/wod ID - Show one WOD\n"
        "/import [YYYY-MM-DD] - AI import into a new WOD\n"
        "/cancel - Cancel current operation"
    )


async def today_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /today command."""
    app = _app(context)
    entries = app.store.list_by_date(date.today().isoformat())
    await send_markdown(update.message, render_entries(entries, "No WODs today."))


async def day_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /day command - list WODs on a date with buttons to open them."""
    date_iso = _parse_date_arg(context)
    if date_iso is None:
        await update.message.reply_text("Usage: /day YYYY-MM-DD")
        return

    options = load_date_options(_app(context).store, date_iso)
    keyboard = [[InlineKeyboardButton(e.title, callback_data=f"wod:{e.id}")] for e in options.entries]
    keyboard.append([InlineKeyboardButton("New WOD (/import)", callback_data=f"new:{date_iso}")])

    heading = date.fromisoformat(date_iso).strftime("%A, %B %d")
    summary = f"{len(options.entries)} WOD(s)" if options.entries else "No WODs"
    await update.message.reply_text(
        f"{heading}: {summary}",
        reply_markup=InlineKeyboardMarkup(keyboard),
    )


async def day_callback_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle taps on /day buttons."""
    query = update.callback_query
    await query.answer()

    if query.data.startswith("wod:"):
        entry = _app(context).store.get_by_id(query.data[4:])
        if entry is None:
            await query.edit_message_text("That WOD no longer exists.")
            return
        await send_markdown(query.message, format_entry_markdown(entry))
    elif query.data.startswith("new:"):
        await query.message.reply_text(f"Send /import {query.data[4:]} to create a WOD for that date.")


async def month_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /month command."""
    today = date.today()
    month, year = today.month, today.year
    if context.args:
        try:
            year_str, month_str = context.args[0].split("-")
            year, month = int(year_str), int(month_str)
            date(year, month, 1)
        except ValueError:
            await update.message.reply_text("Usage: /month YYYY-MM")
            return

    cells = month_grid(_app(context).store, month, year)
    await send_markdown(update.message, render_month(cells, month, year))


async def wod_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /wod command."""
    if not context.args:
        await update.message.reply_text("Usage: /wod ID")
        return
    entry = _app(context).store.get_by_id(context.args[0])
    if entry is None:
        await update.message.reply_text("No WOD with that id.")
        return
    await send_markdown(update.message, format_entry_markdown(entry))


# ============== Import Conversation ==============


async def import_start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Start the import conversation."""
    date_iso = _parse_date_arg(context)
    if date_iso is None:
        await update.message.reply_text("Usage: /import [YYYY-MM-DD]")
        return ConversationHandler.END

    if _app(context).current_user is None:
        await update.message.reply_text("Not signed in. Run `wodlog login` on the CLI.")
        return ConversationHandler.END

    context.user_data["editor"] = EntryEditor.for_new(date_iso)
    await update.message.reply_text(
        f"Send the workout for {date_iso}: paste text, a photo or a PDF.\n/cancel to stop."
    )
    return ImportStates.CONTENT


async def _payload_from_message(update: Update) -> tuple[ImportPayload, bool] | None:
    """Build an import payload from a text, photo or document message."""
    message = update.message
    if message.photo:
        tg_file = await message.photo[-1].get_file()
        data = bytes(await tg_file.download_as_bytearray())
        return ImportPayload(content=data, media_type="image/jpeg"), True

    if message.document:
        document = message.document
        media_type = guess_media_type(document.file_name or "", document.mime_type or "")
        tg_file = await document.get_file()
        data = bytes(await tg_file.download_as_bytearray())
        if is_text_media_type(media_type):
            return ImportPayload(content=data.decode("utf-8", errors="replace"), media_type=media_type), True
        return ImportPayload(content=data, media_type=media_type), True

    if message.text and message.text.strip():
        return ImportPayload.from_text(message.text), False

    return None


async def import_content_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Analyze the content and show a preview."""
    editor: EntryEditor | None = context.user_data.get("editor")
    if editor is None:
        return ConversationHandler.END

    built = await _payload_from_message(update)
    if built is None:
        await update.message.reply_text("Send text, a photo or a PDF.")
        return ImportStates.CONTENT
    payload, from_file = built

    await update.message.reply_text("Analyzing...")
    try:
        outcome = import_into_editor(_app(context), editor, payload, from_file=from_file)
    except NotAuthenticatedError as e:
        await update.message.reply_text(str(e))
        return ConversationHandler.END

    if outcome.notice:
        await update.message.reply_text(f"{outcome.notice}\nSend the content again or /cancel.")
        return ImportStates.CONTENT
    if not outcome.applied:
        return ConversationHandler.END

    keyboard = [
        [
            InlineKeyboardButton("Save", callback_data="import_save"),
            InlineKeyboardButton("Cancel", callback_data="import_cancel"),
        ]
    ]
    await send_markdown(
        update.message,
        format_entry_markdown(editor.build_entry()),
        reply_markup=InlineKeyboardMarkup(keyboard),
    )
    return ImportStates.CONFIRM


async def import_confirm_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle Save / Cancel on the preview."""
    query = update.callback_query
    await query.answer()
    editor: EntryEditor | None = context.user_data.get("editor")

    if editor is None or query.data == "import_cancel":
        return await _end_import(context, query.message, "Import cancelled.")

    try:
        saved = save_editor(editor, _app(context).store)
    except Exception as e:
        logger.error(f"Failed to save imported WOD: {e}")
        await query.message.reply_text(f"Could not save: {e}\nTap Save to retry or /cancel.")
        return ImportStates.CONFIRM

    context.user_data.pop("editor", None)
    await query.message.reply_text(f"Saved {saved.title} for {saved.date}.")
    return ConversationHandler.END


async def _end_import(context: ContextTypes.DEFAULT_TYPE, message, text: str):
    editor: EntryEditor | None = context.user_data.pop("editor", None)
    if editor is not None:
        editor.close()
    await message.reply_text(text)
    return ConversationHandler.END


async def import_cancel_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Cancel the import conversation. A late AI result is discarded."""
    return await _end_import(context, update.message, "Import cancelled.")
