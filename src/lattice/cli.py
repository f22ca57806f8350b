"""Lattice CLI - task auto-scheduler."""

import json
import logging
import sys
from datetime import date, datetime

import click

from .adapters.file_calendar import FileCalendarAdapter
from .adapters.file_session import JsonSessionStore
from .adapters.google_calendar import GoogleCalendarAdapter
from .adapters.json_store import JsonTaskStore
from .adapters.memory_store import TaskNotFoundError
from .config import CONFIG_FILE, Config, load_config, save_selected_calendars
from .core.calendar import toggle_calendar
from .core.localtime import LocalCalendar
from .core.schedule import FixedEvent, PlacedTask
from .core.tasks import filter_active, recently_archived, sort_by_deadline
from .engine import Schedule, Scheduler
from .ports.calendar_repo import CalendarRepository


def _parse_time(value: str, config: Config) -> datetime:
    """Parse an ISO timestamp, assuming the configured zone when none is given."""
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"not an ISO timestamp: {value}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=config.zone())
    return dt


def _calendar_repo(config: Config) -> CalendarRepository:
    if config.google_config_folder:
        return GoogleCalendarAdapter(
            config_folder=config.google_config_folder,
            calendars=config.selected_calendars,
            timezone=config.timezone,
        )
    return FileCalendarAdapter(config.events_file, calendars=config.selected_calendars, tz=config.zone())


def _open_session(config: Config) -> tuple[Scheduler, JsonSessionStore]:
    sessions = JsonSessionStore(config.session_file)
    scheduler = Scheduler(
        JsonTaskStore(config.tasks_file),
        hours=config.active_hours_range(),
        tz=config.zone(),
        state=sessions.load(),
    )
    return scheduler, sessions


def _show_schedule(schedule: Schedule, titles: dict[str, str], as_json: bool) -> None:
    """Shared schedule display logic."""
    if as_json:
        rows = []
        for item in schedule.items:
            match item:
                case FixedEvent(event):
                    rows.append({"kind": "event", **event.to_dict()})
                case PlacedTask(task_id, start, end):
                    rows.append(
                        {
                            "kind": "task",
                            "task_id": task_id,
                            "title": titles.get(task_id, ""),
                            "start": start.isoformat(),
                            "end": end.isoformat(),
                        }
                    )
        click.echo(json.dumps({"items": rows, "can_undo": schedule.can_undo}, indent=2))
        return

    if not schedule.items:
        click.echo("Nothing scheduled.")
        return

    for item in schedule.items:
        match item:
            case FixedEvent(event):
                click.echo(f"  {event.format_time():11} {event.title}")
            case PlacedTask() as placed:
                click.echo(f"  {placed.format():11} [{placed.task_id}] {titles.get(placed.task_id, '?')}")
    if schedule.can_undo:
        click.echo("\n(undo available)")


@click.group()
@click.version_option()
@click.option("-v", "--verbose", is_flag=True, help="Log scheduling decisions")
def main(verbose: bool):
    """Lattice - Deadline-driven task scheduler."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("title")
@click.option("--minutes", default=60, show_default=True, type=click.IntRange(min=1), help="Duration")
@click.option("--due", required=True, help="Deadline, ISO format")
def add(title: str, minutes: int, due: str):
    """Add a task."""
    config = load_config()
    task = JsonTaskStore(config.tasks_file).create(title, minutes, _parse_time(due, config))
    click.echo(f"Added [{task.id}] {task.title}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tasks(as_json: bool):
    """List open tasks by deadline."""
    config = load_config()
    open_tasks = sort_by_deadline(filter_active(JsonTaskStore(config.tasks_file).list_tasks()))

    if as_json:
        click.echo(json.dumps([t.to_dict() for t in open_tasks], indent=2))
        return

    if not open_tasks:
        click.echo("No open tasks.")
        return

    for task in open_tasks:
        due = task.target_date.strftime("%a %d %b %H:%M")
        click.echo(f"[{task.id}] {task.title} ({task.duration_minutes} min, due {due})")


@main.command()
@click.argument("task_id")
def archive(task_id: str):
    """Archive a task."""
    config = load_config()
    scheduler, sessions = _open_session(config)
    try:
        scheduler.archive(task_id)
    except TaskNotFoundError:
        click.echo(f"Error: no task {task_id}", err=True)
        sys.exit(1)
    sessions.save(scheduler.state)
    click.echo(f"Archived {task_id}")


@main.command()
@click.argument("task_id")
def unarchive(task_id: str):
    """Move a task off the archive page back into the open list."""
    config = load_config()
    try:
        JsonTaskStore(config.tasks_file).set_archived(task_id, False)
    except TaskNotFoundError:
        click.echo(f"Error: no task {task_id}", err=True)
        sys.exit(1)
    click.echo(f"Restored {task_id}")


@main.command()
@click.argument("task_id")
def delete(task_id: str):
    """Delete a task; its placement is dropped on the next schedule."""
    config = load_config()
    try:
        JsonTaskStore(config.tasks_file).delete(task_id)
    except TaskNotFoundError:
        click.echo(f"Error: no task {task_id}", err=True)
        sys.exit(1)
    click.echo(f"Deleted {task_id}")


@main.command()
def archived():
    """Show tasks archived this week."""
    config = load_config()
    now = datetime.now(config.zone())
    recent = recently_archived(JsonTaskStore(config.tasks_file).list_tasks(), now, config.archive_days)

    if not recent:
        click.echo("No archived tasks this week.")
        return

    for task in recent:
        click.echo(f"[{task.id}] {task.title}")


@main.command()
@click.option("--date", "day", type=click.DateTime(formats=["%Y-%m-%d"]), default=None, help="First day (default: today)")
@click.option("--days", type=click.IntRange(min=1), default=None, help="Number of days to schedule")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def schedule(day: datetime | None, days: int | None, as_json: bool):
    """Place open tasks around calendar events."""
    config = load_config()
    tz = config.zone()
    now = datetime.now(tz)
    cal = LocalCalendar(tz)

    first: date = day.date() if day else now.date()
    range_start = cal.at_hour(datetime(first.year, first.month, first.day, tzinfo=tz), 0)
    range_end = cal.at_hour(range_start, 0, days=days or config.window_days)

    scheduler, sessions = _open_session(config)
    events = _calendar_repo(config).fetch_events(range_start, range_end)
    result = scheduler.recompute(events, range_start, range_end, now)
    sessions.save(scheduler.state)

    titles = {t.id: t.title for t in scheduler.store.list_tasks()}
    _show_schedule(result, titles, as_json)


@main.command()
@click.argument("slot")
@click.argument("task_id")
def swap(slot: str, task_id: str):
    """Show the next candidate at SLOT instead of TASK_ID."""
    config = load_config()
    scheduler, sessions = _open_session(config)
    scheduler.swap(_parse_time(slot, config), task_id)
    sessions.save(scheduler.state)
    click.echo(f"Swapped {task_id}; run 'lattice schedule' to reflow.")


@main.command()
@click.argument("slot")
@click.argument("task_id")
def block(slot: str, task_id: str):
    """Block the hour containing SLOT and move TASK_ID elsewhere."""
    config = load_config()
    scheduler, sessions = _open_session(config)
    scheduler.block(_parse_time(slot, config), task_id)
    sessions.save(scheduler.state)
    click.echo(f"Blocked {slot[:13]}:00; run 'lattice schedule' to reflow.")


@main.command()
def undo():
    """Undo the last swap, block or archive."""
    config = load_config()
    scheduler, sessions = _open_session(config)
    if not scheduler.can_undo:
        click.echo("Nothing to undo.")
        return

    ok = scheduler.undo()
    sessions.save(scheduler.state)
    if not ok:
        click.echo("Error: the task for that action no longer exists", err=True)
        sys.exit(1)
    click.echo("Undone.")


@main.command()
def reset():
    """Forget swaps, blocks, undo history and placements."""
    config = load_config()
    scheduler, sessions = _open_session(config)
    scheduler.reset()
    sessions.clear()
    click.echo("Session reset.")


@main.command()
@click.option("--toggle", "toggle_id", default=None, help="Calendar id to select or deselect")
def calendars(toggle_id: str | None):
    """List calendars, or toggle one in the selection."""
    config = load_config()

    if toggle_id:
        selected = toggle_calendar(config.selected_calendars, toggle_id)
        save_selected_calendars(selected, CONFIG_FILE)
        config.selected_calendars = selected

    if not config.google_config_folder:
        for cal_id in config.selected_calendars:
            click.echo(f"  * {cal_id}")
        return

    adapter = GoogleCalendarAdapter(config.google_config_folder, calendars=config.selected_calendars)
    entries = adapter.list_calendars()
    if not entries:
        click.echo("No calendars (missing token.json?)", err=True)
        sys.exit(1)

    for entry in entries:
        marker = "*" if entry.id in config.selected_calendars else " "
        primary = " (primary)" if entry.primary else ""
        click.echo(f"  {marker} {entry.summary}{primary} [{entry.id}]")


if __name__ == "__main__":
    main()
