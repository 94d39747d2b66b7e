"""Harmony CLI - Household chore coordination."""

import json
import logging
import sys
from datetime import date, timedelta

import click

from .config import Config, load_config
from .core.chores import DueStatus, UrgencyTier
from .core.dates import month_grid, week_days
from .core.occurrences import InvalidTransitionError, Occurrence, group_by_date
from .core.reports import format_report
from .workflows import OccurrenceNotFoundError, TaskNotFoundError, get_board, get_users

TIER_MARKERS = {
    UrgencyTier.CRITICAL: "!!!",
    UrgencyTier.HIGH: "!! ",
    UrgencyTier.MEDIUM: "!  ",
    UrgencyTier.LOW: "   ",
}


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--user", "user_id", default=None, help="Act as this user id (default: CURRENT_USER)")
@click.version_option()
@click.pass_context
def main(ctx, debug: bool, user_id: str | None):
    """Harmony - Household chore coordination."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    ctx.ensure_object(dict)
    ctx.obj["user_id"] = user_id


def _current_user(config: Config) -> str:
    ctx = click.get_current_context()
    return (ctx.obj or {}).get("user_id") or config.current_user


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _timer_bar(fraction: float, width: int = 10) -> str:
    filled = round(fraction * width)
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def _format_status(status: DueStatus, names: dict[str, str]) -> str:
    task = status.task
    done_by = f" by {names.get(task.completed_by, task.completed_by)}" if task.completed_by else ""
    return (
        f"{TIER_MARKERS[status.tier]} {_timer_bar(status.fraction)} {task.name}\n"
        f"      {status.label()} - every {task.frequency_days} days - "
        f"last done {task.completed_at().date().isoformat()}{done_by}  ({task.id})"
    )


def _format_occurrence(occ: Occurrence, names: dict[str, str], current_user: str) -> str:
    if occ.assigned_to:
        who = "me" if occ.assigned_to == current_user else names.get(occ.assigned_to, occ.assigned_to)
        assigned = f" [{who}]"
    else:
        assigned = ""
    return f"{occ.task_name}{assigned}  ({occ.id})"


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tasks(as_json: bool):
    """List recurring tasks with their timers."""
    config = load_config()
    board = get_board(config)
    statuses = board.due_statuses()

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "id": s.task.id,
                        "name": s.task.name,
                        "frequency": s.task.frequency_days,
                        "last_completed": s.task.completed_at().isoformat(),
                        "completed_by": s.task.completed_by,
                        "days_left": s.days_left,
                        "tier": s.tier.value,
                        "progress": s.fraction,
                    }
                    for s in statuses
                ],
                indent=2,
            )
        )
        return

    if not statuses:
        click.echo("No recurring tasks.")
        return

    names = get_users(config).names()
    for status in statuses:
        click.echo(_format_status(status, names))


@main.command()
@click.argument("name")
@click.option("--every", "frequency", default="3", show_default=True, help="Repeat every N days")
@click.option(
    "--first-due",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Day of the first occurrence (YYYY-MM-DD); defaults to done today",
)
def add(name: str, frequency: str, first_due):
    """Add a recurring task."""
    config = load_config()
    board = get_board(config)
    try:
        task = board.add_task(name, frequency, first_due=first_due.date() if first_due else None)
    except ValueError as e:
        _fail(str(e))
    click.echo(f"✓ Added {task.name!r} every {task.frequency_days} days ({task.id})")


@main.command()
@click.argument("task_id")
def delete(task_id: str):
    """Delete a recurring task."""
    config = load_config()
    board = get_board(config)
    try:
        board.delete_task(task_id)
    except TaskNotFoundError:
        _fail(f"no task with id {task_id}")
    click.echo(f"✓ Deleted {task_id}")


@main.command()
def regenerate():
    """Rebuild the calendar from the task list."""
    config = load_config()
    board = get_board(config)
    occurrences = board.regenerate()
    click.echo(f"✓ {len(occurrences)} occurrences over the next {board.horizon_days} days")


@main.command()
def seed():
    """Add a few demo chores to an empty household."""
    config = load_config()
    board = get_board(config)
    seeded = board.seed_demo_tasks()
    if not seeded:
        click.echo("Household already has chores, nothing seeded.")
        return
    for task in seeded:
        click.echo(f"✓ Added '{task.name}' every {task.frequency_days} days")


@main.group(invoke_without_command=True)
@click.pass_context
def calendar(ctx):
    """Show projected task occurrences."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(calendar_month)


def _parse_day(value) -> date:
    return value.date() if value else date.today()


@calendar.command("month")
@click.option("--date", "-d", "target", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Any day in the month to show (YYYY-MM-DD)")
def calendar_month(target=None):
    """Show a month grid."""
    config = load_config()
    board = get_board(config)
    board.refresh_if_stale()
    day = _parse_day(target)
    names = get_users(config).names()
    user = _current_user(config)

    grid = month_grid(day.year, day.month)
    first = date(day.year, day.month, 1)
    last = max(d for row in grid for d in row if d is not None)
    by_date = group_by_date(board.occurrences(first, last))

    click.echo(day.strftime("%B %Y").center(35))
    click.echo(" ".join(f"{w:>4}" for w in ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]))
    for row in grid:
        cells = []
        for cell in row:
            if cell is None:
                cells.append("    ")
            else:
                count = len(by_date.get(cell, []))
                cells.append(f"{cell.day:>2}" + (f"*{min(count, 9)}" if count else "  "))
        click.echo(" ".join(cells))

    for occ_date in sorted(by_date):
        click.echo(f"\n### {occ_date.strftime('%A, %B %d')}")
        for occ in by_date[occ_date]:
            click.echo(f"  {_format_occurrence(occ, names, user)}")


@calendar.command("week")
@click.option("--date", "-d", "target", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Any day in the week to show (YYYY-MM-DD)")
def calendar_week(target=None):
    """Show a Monday-start week."""
    config = load_config()
    board = get_board(config)
    board.refresh_if_stale()
    days = week_days(_parse_day(target))
    names = get_users(config).names()
    user = _current_user(config)
    by_date = group_by_date(board.occurrences(days[0], days[-1]))

    for i, day in enumerate(days):
        if i:
            click.echo()
        marker = " (today)" if day == date.today() else ""
        click.echo(f"### {day.strftime('%a %b %d')}{marker}")
        entries = by_date.get(day, [])
        if not entries:
            click.echo("  -")
        for occ in entries:
            click.echo(f"  {_format_occurrence(occ, names, user)}")


@calendar.command("list")
@click.option("--days", default=7, show_default=True, help="How many days ahead to list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def calendar_list(days: int, as_json: bool):
    """List upcoming occurrences."""
    config = load_config()
    board = get_board(config)
    board.refresh_if_stale()
    today = date.today()
    occurrences = board.occurrences(today, today + timedelta(days=days))

    if as_json:
        click.echo(json.dumps([o.to_record() for o in occurrences], indent=2))
        return

    if not occurrences:
        click.echo("No upcoming tasks.")
        return

    names = get_users(config).names()
    user = _current_user(config)
    for occ_date, entries in group_by_date(occurrences).items():
        click.echo(f"{occ_date.isoformat()}")
        for occ in entries:
            click.echo(f"  {_format_occurrence(occ, names, user)}")


def _run_transition(action, occurrence_id: str, *args):
    try:
        return action(occurrence_id, *args)
    except OccurrenceNotFoundError:
        _fail(f"no upcoming occurrence with id {occurrence_id}")
    except TaskNotFoundError as e:
        _fail(f"task {e.args[0]} no longer exists")
    except InvalidTransitionError as e:
        _fail(str(e))


@main.command("assign")
@click.argument("occurrence_id")
def assign_cmd(occurrence_id: str):
    """Assign an occurrence to yourself."""
    config = load_config()
    board = get_board(config)
    board.refresh_if_stale()
    occ = _run_transition(board.assign, occurrence_id, _current_user(config))
    click.echo(f"✓ {occ.task_name} on {occ.date.isoformat()} assigned")


@main.command("unassign")
@click.argument("occurrence_id")
def unassign_cmd(occurrence_id: str):
    """Return an occurrence to pending."""
    config = load_config()
    board = get_board(config)
    board.refresh_if_stale()
    occ = _run_transition(board.unassign, occurrence_id)
    click.echo(f"✓ {occ.task_name} on {occ.date.isoformat()} unassigned")


@main.command("toggle")
@click.argument("occurrence_id")
def toggle_cmd(occurrence_id: str):
    """Take an occurrence, or give it back if it is already yours."""
    config = load_config()
    board = get_board(config)
    board.refresh_if_stale()
    occ = _run_transition(board.toggle, occurrence_id, _current_user(config))
    state = "assigned" if occ.assigned_to else "unassigned"
    click.echo(f"✓ {occ.task_name} on {occ.date.isoformat()} {state}")


@main.command("complete")
@click.argument("occurrence_id")
def complete_cmd(occurrence_id: str):
    """Mark an occurrence done."""
    config = load_config()
    board = get_board(config)
    board.refresh_if_stale()
    task = _run_transition(board.complete, occurrence_id, _current_user(config))
    click.echo(f"✓ {task.name} done, next due {task.next_due().date().isoformat()}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def report(as_json: bool):
    """Household task report."""
    config = load_config()
    board = get_board(config)
    task_report = board.report()

    if as_json:
        click.echo(json.dumps(task_report.to_dict(), indent=2))
        return

    click.echo(format_report(task_report, get_users(config).names()))


@main.group(invoke_without_command=True)
@click.pass_context
def users(ctx):
    """Show household members."""
    if ctx.invoked_subcommand is not None:
        return
    config = load_config()
    current = _current_user(config)
    for user in get_users(config).list():
        marker = "*" if user.id == current else " "
        click.echo(f"{marker} {user.id:8} {user.name} ({user.color})")


@users.command("rename")
@click.argument("user_id")
@click.argument("name")
def users_rename(user_id: str, name: str):
    """Change a member's display name."""
    config = load_config()
    try:
        user = get_users(config).rename(user_id, name)
    except KeyError:
        _fail(f"unknown user {user_id}")
    except ValueError as e:
        _fail(str(e))
    click.echo(f"✓ {user.id} is now {user.name}")


if __name__ == "__main__":
    main()
