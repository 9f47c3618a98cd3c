"""wodlog Telegram Bot."""

import logging

from telegram import Update
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ConversationHandler,
    MessageHandler,
    filters,
)

from .context import AppContext
from .telegram_handlers import (
    day_callback_handler,
    day_handler,
    help_handler,
    import_cancel_handler,
    import_confirm_handler,
    import_content_handler,
    import_start_handler,
    month_handler,
    start_handler,
    today_handler,
    wod_handler,
)
from .telegram_states import ImportStates

logger = logging.getLogger(__name__)


class AuthFilter(filters.BaseFilter):
    """Filter to only allow authorized users."""

    def __init__(self, allowed_users: list[int]):
        super().__init__()
        self.allowed_users = allowed_users

    def check_update(self, update: Update) -> bool:
        if not self.allowed_users:
            return True  # No restriction if no users configured
        user = update.effective_user
        if user is None:
            return False
        return user.id in self.allowed_users


def create_application(app_ctx: AppContext) -> Application:
    """Create and configure the Telegram bot application."""
    config = app_ctx.config

    if not config.telegram_bot_token:
        raise ValueError(
            "TELEGRAM_BOT_TOKEN not configured. "
            "Get a token from @BotFather on Telegram and add it to wodlog.conf"
        )

    app = Application.builder().token(config.telegram_bot_token).build()
    app.bot_data["app"] = app_ctx

    auth_filter = AuthFilter(config.telegram_allowed_users)

    app.add_handler(CommandHandler("start", start_handler, filters=auth_filter))
    app.add_handler(CommandHandler("help", help_handler, filters=auth_filter))
    app.add_handler(CommandHandler("today", today_handler, filters=auth_filter))
    app.add_handler(CommandHandler("day", day_handler, filters=auth_filter))
    app.add_handler(CommandHandler("month", month_handler, filters=auth_filter))
    app.add_handler(CommandHandler("wod", wod_handler, filters=auth_filter))

    content_filter = (filters.TEXT & ~filters.COMMAND) | filters.PHOTO | filters.Document.ALL
    import_conv = ConversationHandler(
        entry_points=[CommandHandler("import", import_start_handler, filters=auth_filter)],
        states={
            ImportStates.CONTENT: [
                MessageHandler(content_filter & auth_filter, import_content_handler),
            ],
            ImportStates.CONFIRM: [
                CallbackQueryHandler(import_confirm_handler, pattern="^import_"),
            ],
        },
        fallbacks=[CommandHandler("cancel", import_cancel_handler)],
        per_user=True,
    )
    app.add_handler(import_conv)

    app.add_handler(CallbackQueryHandler(day_callback_handler, pattern="^(wod|new):"))

    async def unauthorized_handler(update: Update, context):
        user = update.effective_user
        logger.warning(f"Unauthorized access attempt from user {user.id} ({user.username})")
        await update.message.reply_text(
            "Unauthorized. This bot is private.\n"
            "If you're the owner, add your Telegram user ID to TELEGRAM_ALLOWED_USERS in wodlog.conf"
        )

    if config.telegram_allowed_users:
        app.add_handler(
            MessageHandler(~auth_filter & filters.ALL, unauthorized_handler)
        )

    return app


def run_bot(app_ctx: AppContext):
    """Run the Telegram bot."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )

    app = create_application(app_ctx)

    if app_ctx.config.telegram_allowed_users:
        logger.info(f"Bot authorized for users: {app_ctx.config.telegram_allowed_users}")
    else:
        logger.warning("No TELEGRAM_ALLOWED_USERS configured - bot is open to anyone!")

    if app_ctx.current_user is None and app_ctx.uses_remote_store:
        logger.warning("Not signed in - run 'wodlog login' so the bot can read your WODs")

    logger.info("Starting wodlog Telegram bot...")

    app.run_polling(allowed_updates=Update.ALL_TYPES)
