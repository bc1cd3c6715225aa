"""taskcal CLI - date-based personal task tracker."""

import asyncio
import json
import logging
import sys
from datetime import date, datetime

import click

from .config import load_config
from .core.classify import tasks_in_range
from .core.display import format_agenda, format_task_line, schedule_badge
from .core.tasks import TaskDraft, TaskType
from .errors import TaskError
from .workflows import (
    add_task,
    edit_task,
    get_orchestrator,
    get_store,
    load_agenda,
    propose_breakdown,
    replace_with_breakdown,
    toggle_complete,
    user_filter,
)

DAY = click.DateTime(formats=["%Y-%m-%d"])
TASK_TYPES = click.Choice([t.value for t in TaskType])
PRIORITIES = click.Choice(["low", "medium", "high"])


def _run(coro):
    """Run a workflow coroutine, turning domain errors into exit code 1."""
    try:
        return asyncio.run(coro)
    except TaskError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _day(value: datetime | None) -> date:
    return value.date() if value else date.today()


def _show_tasks(tasks: list, as_json: bool, as_of: date, empty_msg: str = "No tasks.") -> None:
    """Shared task display logic."""
    if as_json:
        click.echo(json.dumps([t.to_record() for t in tasks], indent=2, ensure_ascii=False))
        return

    if not tasks:
        click.echo(empty_msg)
        return

    for task in tasks:
        click.echo(format_task_line(task, as_of))


@click.group()
@click.version_option(package_name="taskcal")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """taskcal - date-based personal task tracker."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.WARNING,
    )


@main.command()
@click.argument("title")
@click.option("--description", "-m", default="", help="Free-text description")
@click.option("--type", "task_type", type=TASK_TYPES, default="single", show_default=True)
@click.option("--start", type=DAY, default=None, help="Start date (YYYY-MM-DD), defaults to today")
@click.option("--due", type=DAY, default=None, help="Deadline for single tasks")
@click.option("--end", type=DAY, default=None, help="End date for period tasks")
@click.option("--priority", "-p", type=PRIORITIES, default="medium", show_default=True)
def add(title, description, task_type, start, due, end, priority):
    """Add a task."""
    config = load_config()
    draft = TaskDraft(
        title=title,
        description=description,
        task_type=task_type,
        start_date=_day(start),
        due_date=due,
        end_date=end,
        priority=priority,
        user_id=config.user_id or None,
    )
    task = _run(add_task(get_store(config), draft))
    click.echo(f"Added {task.id}: {task.title}")


@main.command("list")
@click.option("--date", "-d", "on_date", type=DAY, default=None, help="Only tasks on this date")
@click.option("--type", "task_type", type=TASK_TYPES, default=None)
@click.option("--overdue", is_flag=True, help="Only overdue tasks")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_tasks(on_date, task_type, overdue, as_json):
    """List tasks, newest first."""
    config = load_config()
    today = date.today()
    task_filter = user_filter(
        config,
        on_date=on_date.date() if on_date else None,
        task_type=TaskType(task_type) if task_type else None,
        only_overdue=overdue,
        as_of=today,
    )
    tasks = _run(get_store(config).list(task_filter))
    _show_tasks(tasks, as_json, _day(on_date))


@main.command("range")
@click.argument("start", type=DAY)
@click.argument("end", type=DAY)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def range_cmd(start, end, as_json):
    """List period tasks overlapping START..END."""
    config = load_config()
    tasks = _run(get_store(config).list(user_filter(config)))
    _show_tasks(tasks_in_range(tasks, start.date(), end.date()), as_json, date.today(), "No period tasks in range.")


@main.command()
@click.option("--date", "-d", "target_date", type=DAY, default=None, help="Reference date, defaults to today")
@click.option("--json", "as_json", is_flag=True, help="Output counts as JSON")
def summary(target_date, as_json):
    """Show the agenda and counts for a day."""
    config = load_config()
    agenda = _run(load_agenda(get_store(config), config, _day(target_date)))
    if as_json:
        click.echo(json.dumps(agenda.summary.to_dict(), indent=2))
    else:
        click.echo(format_agenda(agenda))


@main.command()
@click.argument("task_id")
@click.option("--title", default=None)
@click.option("--description", "-m", default=None)
@click.option("--type", "task_type", type=TASK_TYPES, default=None)
@click.option("--start", type=DAY, default=None)
@click.option("--due", type=DAY, default=None)
@click.option("--end", type=DAY, default=None)
@click.option("--priority", "-p", type=PRIORITIES, default=None)
def edit(task_id, title, description, task_type, start, due, end, priority):
    """Edit a task."""
    options = {
        "title": title,
        "description": description,
        "task_type": task_type,
        "start_date": start,
        "due_date": due,
        "end_date": end,
        "priority": priority,
    }
    changes = {k: v for k, v in options.items() if v is not None}
    if not changes:
        click.echo("Nothing to change.")
        return

    config = load_config()
    task = _run(edit_task(get_store(config), task_id, changes))
    click.echo(format_task_line(task, date.today()))


@main.command()
@click.argument("task_id")
def done(task_id):
    """Toggle a task's completed flag."""
    config = load_config()
    task = _run(toggle_complete(get_store(config), task_id))
    state = "completed" if task.completed else "reopened"
    click.echo(f"{task.title}: {state}")


@main.command()
@click.argument("task_id")
def delete(task_id):
    """Delete a task."""
    config = load_config()
    _run(get_store(config).delete(task_id))
    click.echo(f"Deleted {task_id}")


@main.command()
@click.argument("task_id")
@click.option("--apply", "apply_it", is_flag=True, help="Replace the task with the proposed subtasks")
@click.option("--stagger", is_flag=True, help="Give each subtask its own estimate-based dates")
@click.option("--json", "as_json", is_flag=True, help="Output the proposal as JSON")
def breakdown(task_id, apply_it, stagger, as_json):
    """Split a task into subtasks."""
    config = load_config()
    store = get_store(config)

    async def run():
        task, result = await propose_breakdown(store, get_orchestrator(config), task_id)
        created = await replace_with_breakdown(store, task, result, stagger=stagger) if apply_it else []
        return task, result, created

    task, result, created = _run(run())

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        source = "offline" if result.from_fallback else "suggested"
        badge = schedule_badge(task)
        click.echo(f"Breakdown of {task.title}{f' [{badge}]' if badge else ''} ({source}):\n")
        for i, sub in enumerate(result.subtasks, start=1):
            deps = f" after: {', '.join(sub.dependencies)}" if sub.dependencies else ""
            click.echo(f"{i}. {sub.title} [{sub.priority.value}, {sub.estimated_days}d]{deps}")
            if sub.description:
                click.echo(f"   {sub.description}")
        if result.suggestions:
            click.echo("\nTips:")
            for tip in result.suggestions:
                click.echo(f"  • {tip}")

    if created:
        click.echo(f"\n✓ Replaced {task.id} with {len(created)} tasks")


@main.command()
def tips():
    """Scheduling tips for open tasks."""
    config = load_config()
    store = get_store(config)

    async def run():
        tasks = [t for t in await store.list(user_filter(config)) if not t.completed]
        return await get_orchestrator(config).request_schedule_tips(tasks)

    for tip in _run(run()):
        click.echo(f"• {tip}")


@main.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def bot(debug: bool):
    """Run the Telegram bot."""
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        from .telegram_bot import run_bot
        click.echo("Starting taskcal Telegram bot...")
        click.echo("Press Ctrl+C to stop")
        run_bot()
    except ImportError as e:
        click.echo("Error: Missing dependencies. Run 'pip install python-telegram-bot apscheduler'", err=True)
        click.echo(f"Details: {e}", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nBot stopped.")


if __name__ == "__main__":
    main()
