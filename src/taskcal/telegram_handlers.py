"""Telegram command handlers."""

import logging
from datetime import date

from telegram import Update
from telegram.ext import ContextTypes

from .config import load_config
from .core.classify import filter_overdue, sort_by_due
from .core.display import format_agenda, format_summary, format_task_list
from .errors import TaskError
from .telegram_format import send_markdown
from .workflows import (
    get_orchestrator,
    get_store,
    load_agenda,
    propose_breakdown,
    replace_with_breakdown,
    toggle_complete,
    user_filter,
)

logger = logging.getLogger(__name__)

COMMANDS = (
    "/today - Agenda for today\n"
    "/summary - Counts for today\n"
    "/overdue - Overdue tasks\n"
    "/done <id> - Toggle a task's completed flag\n"
    "/breakdown <id> - Replace a task with subtasks\n"
    "/help - Show all commands"
)


# ============== Simple Commands ==============


async def start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start command."""
    await update.message.reply_text(f"Hey! I keep track of your dated tasks.\n\nCommands:\n{COMMANDS}")


async def help_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /help command."""
    await update.message.reply_text(f"taskcal commands\n\n{COMMANDS}")


async def today_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /today command - full agenda."""
    config = load_config()
    agenda = await load_agenda(get_store(config), config)
    await send_markdown(update.message, format_agenda(agenda))


async def summary_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /summary command - dashboard counts only."""
    config = load_config()
    agenda = await load_agenda(get_store(config), config)
    await send_markdown(update.message, "**Summary**\n\n" + format_summary(agenda.summary, agenda.due_soon_days))


async def overdue_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /overdue command."""
    config = load_config()
    today = date.today()
    tasks = await get_store(config).list(user_filter(config))
    overdue = sort_by_due(filter_overdue(tasks, today))
    await send_markdown(update.message, "**Overdue**\n\n" + format_task_list(overdue, today, "Nothing overdue."))


# ============== Task Commands ==============


async def done_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /done <id> command."""
    if not context.args:
        await update.message.reply_text("Usage: /done <task id>")
        return

    config = load_config()
    try:
        task = await toggle_complete(get_store(config), context.args[0])
    except TaskError as e:
        await update.message.reply_text(f"Error: {e}")
        return

    state = "completed" if task.completed else "reopened"
    await update.message.reply_text(f"{task.title}: {state}")


async def breakdown_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /breakdown <id> command - replaces the task with its subtasks."""
    if not context.args:
        await update.message.reply_text("Usage: /breakdown <task id>")
        return

    config = load_config()
    store = get_store(config)
    await update.message.reply_text("Breaking it down...")

    try:
        task, result = await propose_breakdown(store, get_orchestrator(config), context.args[0])
        created = await replace_with_breakdown(store, task, result)
    except TaskError as e:
        logger.error(f"Breakdown failed: {e}")
        await update.message.reply_text(f"Error: {e}")
        return

    lines = [f"**{task.title}** split into {len(created)} tasks", ""]
    lines.append(format_task_list(created, date.today()))
    if result.suggestions:
        lines.append("")
        lines.extend(f"- {tip}" for tip in result.suggestions)
    if result.from_fallback:
        lines.append("\n_Suggestion service unavailable, used the default plan._")
    await send_markdown(update.message, "\n".join(lines))
