"""taskcal Telegram Bot."""

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from telegram import Update, Bot
from telegram.ext import Application, CommandHandler, MessageHandler, filters
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from .config import Config, load_config
from .core.display import format_agenda
from .telegram_format import send_markdown
from .telegram_handlers import (
    start_handler,
    help_handler,
    today_handler,
    summary_handler,
    overdue_handler,
    done_handler,
    breakdown_handler,
)
from .workflows import get_store, load_agenda

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


def create_application(config: Config | None = None) -> Application:
    """Create and configure the Telegram bot application."""
    if config is None:
        config = load_config()

    if not config.telegram_bot_token:
        raise ValueError(
            "TELEGRAM_BOT_TOKEN not configured. "
            "Get a token from @BotFather on Telegram and add it to taskcal.conf"
        )

    app = Application.builder().token(config.telegram_bot_token).build()
    auth_filter = AuthFilter(config.telegram_allowed_users)

    commands = {
        "start": start_handler,
        "help": help_handler,
        "today": today_handler,
        "summary": summary_handler,
        "overdue": overdue_handler,
        "done": done_handler,
        "breakdown": breakdown_handler,
    }
    for name, handler in commands.items():
        app.add_handler(CommandHandler(name, handler, filters=auth_filter))

    async def unauthorized_handler(update: Update, context):
        user = update.effective_user
        logger.warning(f"Unauthorized access attempt from user {user.id} ({user.username})")
        await update.message.reply_text(
            "Unauthorized. This bot is private.\n"
            "If you're the owner, add your Telegram user ID to TELEGRAM_ALLOWED_USERS in taskcal.conf"
        )

    if config.telegram_allowed_users:
        app.add_handler(MessageHandler(~auth_filter & filters.ALL, unauthorized_handler))

    return app


def parse_time(value: str) -> tuple[int, int]:
    """Parse HH:MM into (hour, minute)."""
    hour, minute = map(int, value.split(":"))
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Time out of range: {value}")
    return hour, minute


def _timezone(config: Config) -> str:
    return config.timezone or "UTC"


def scheduler_today(config: Config) -> date:
    """Current day in the timezone the scheduler runs in."""
    return datetime.now(ZoneInfo(_timezone(config))).date()


def setup_scheduler(app: Application, config: Config | None = None) -> AsyncIOScheduler:
    """Set up the daily summary push."""
    if config is None:
        config = load_config()

    scheduler = AsyncIOScheduler(timezone=_timezone(config))

    if config.telegram_summary_time and config.telegram_allowed_users:
        try:
            hour, minute = parse_time(config.telegram_summary_time)
            scheduler.add_job(
                send_daily_summary,
                CronTrigger(hour=hour, minute=minute),
                args=[app.bot, config.telegram_allowed_users, config],
                id="daily_summary",
            )
            logger.info(f"Scheduled daily summary at {hour:02d}:{minute:02d}")
        except ValueError:
            logger.warning(f"Invalid summary time format: {config.telegram_summary_time}")

    return scheduler


async def send_daily_summary(bot: Bot, user_ids: list[int], config: Config):
    """Push today's agenda to all authorized users."""
    logger.info("Sending daily summary")
    agenda = await load_agenda(get_store(config), config, scheduler_today(config))
    text = format_agenda(agenda)

    for user_id in user_ids:
        try:
            await send_markdown(bot, text, chat_id=user_id)
        except Exception as e:
            logger.error(f"Failed to send summary to user {user_id}: {e}")


def run_bot():
    """Run the Telegram bot."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )

    config = load_config()
    app = create_application(config)
    scheduler = setup_scheduler(app, config)

    async def post_init(application: Application) -> None:
        """Start scheduler after event loop is running."""
        scheduler.start()
        logger.info("Scheduler started")

    app.post_init = post_init

    if config.telegram_allowed_users:
        logger.info(f"Bot authorized for users: {config.telegram_allowed_users}")
    else:
        logger.warning("No TELEGRAM_ALLOWED_USERS configured - bot is open to anyone!")

    logger.info("Starting taskcal Telegram bot...")
    app.run_polling(allowed_updates=Update.ALL_TYPES)
