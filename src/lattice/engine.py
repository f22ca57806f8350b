"""Scheduler controller - owns session state, recomputes and applies interactions.

Calls must be serialised against one instance. Interactions only record
intent; call recompute() afterwards to reflow the schedule.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo

from .core.calendar import BusyInterval, Event, busy_intervals, events_in_window, merge_intervals
from .core.localtime import ActiveHours, LocalCalendar
from .core.schedule import (
    FixedEvent,
    PlacedTask,
    ScheduleItem,
    find_stale_placements,
    placed_in_window,
    scan_gaps,
)
from .core.session import Block, SessionState, SwapOffset, Unarchive, UndoRecord
from .core.tasks import Task, sort_by_deadline
from .ports.task_store import TaskStore

logger = logging.getLogger(__name__)


@dataclass
class Schedule:
    """Result of one recompute: events first, then placed tasks."""

    items: list[ScheduleItem] = field(default_factory=list)
    can_undo: bool = False

    @property
    def events(self) -> list[Event]:
        return [i.event for i in self.items if isinstance(i, FixedEvent)]

    @property
    def placed(self) -> list[PlacedTask]:
        return [i for i in self.items if isinstance(i, PlacedTask)]

    def placement_of(self, task_id: str) -> PlacedTask | None:
        return next((p for p in self.placed if p.task_id == task_id), None)


class Scheduler:
    """
    Auto-scheduling engine for one user session.

    Holds the placement ledger, slot rotation offsets, blocked hours and the
    undo stack. Task storage is reached only through the injected TaskStore.
    """

    def __init__(
        self,
        store: TaskStore,
        hours: ActiveHours | None = None,
        tz: tzinfo | None = None,
        state: SessionState | None = None,
    ):
        self.store = store
        self.hours = (hours or ActiveHours()).clamped()
        self.tz = tz
        self.state = state or SessionState()
        self.schedule: Schedule | None = None

    @property
    def can_undo(self) -> bool:
        return bool(self.state.undo_stack)

    def _calendar(self, ref: datetime) -> LocalCalendar:
        return LocalCalendar(self.tz or ref.tzinfo)

    # ============== Recompute ==============

    def recompute(
        self,
        events: list[Event],
        range_start: datetime,
        range_end: datetime,
        now: datetime | None = None,
        tasks: list[Task] | None = None,
    ) -> Schedule:
        """
        Rebuild the schedule for `[range_start, range_end)`.

        Existing placements are kept unless invalidated; remaining tasks are
        placed greedily by deadline. `tasks` defaults to the store's snapshot.
        """
        if range_end <= range_start:
            raise ValueError(f"Window must end after it starts: {range_start} >= {range_end}")

        cal = self._calendar(range_start)
        if now is None:
            now = datetime.now(cal.tz)
        if tasks is None:
            tasks = self.store.list_tasks()

        ordered = sort_by_deadline(tasks)
        tasks_by_id = {t.id: t for t in ordered}
        placements = self.state.placements

        busy = merge_intervals(
            [BusyInterval(cal.instant(b.start), cal.instant(b.end)) for b in busy_intervals(events, range_start, range_end)]
        )

        stale = find_stale_placements(
            placements, tasks_by_id, busy, self.state.blocked_hours, self.hours, now, cal
        )
        for task_id in stale:
            logger.debug(f"Dropping stale placement for {task_id} at {placements[task_id].isoformat()}")
            del placements[task_id]

        sticky = placed_in_window(placements, ordered, range_start, range_end, cal)
        occupied = [
            BusyInterval(start, start + tasks_by_id[task_id].duration) for task_id, start in placements.items()
        ]
        used = {p.task_id for p in sticky}

        fresh = scan_gaps(
            ordered,
            busy,
            occupied,
            self.hours,
            range_start,
            range_end,
            now,
            placements,
            used,
            self.state.slot_offsets,
            self.state.blocked_hours,
            cal,
        )

        items: list[ScheduleItem] = [FixedEvent(e) for e in events_in_window(events, range_start, range_end)]
        items.extend(sticky)
        items.extend(fresh)
        logger.debug(f"Recomputed {len(sticky)} kept and {len(fresh)} new placements")

        self.schedule = Schedule(items, self.can_undo)
        return self.schedule

    # ============== Interactions ==============

    def _take_placement(self, slot: datetime, task_id: str) -> datetime:
        """Clear a task's placement, returning it (or the slot if it had none)."""
        cal = self._calendar(slot)
        prior = self.state.placements.pop(task_id, None)
        return prior if prior is not None else cal.instant(slot)

    def swap(self, slot: datetime, task_id: str) -> None:
        """Show the next eligible task at slot and reflow the displaced one."""
        key = self._calendar(slot).instant(slot)
        self.state.slot_offsets[key] = self.state.slot_offsets.get(key, 0) + 1
        prior = self._take_placement(slot, task_id)
        self.state.undo_stack.append(SwapOffset(slot, task_id, prior))
        logger.info(f"Swapped {task_id} out of {slot.isoformat()} (offset {self.state.slot_offsets[key]})")

    def block(self, slot: datetime, task_id: str) -> None:
        """Block the hour containing slot and reflow the task placed there."""
        cal = self._calendar(slot)
        self.state.blocked_hours.add(cal.hour_key(slot))
        prior = self._take_placement(slot, task_id)
        self.state.undo_stack.append(Block(slot, task_id, prior))
        logger.info(f"Blocked hour {cal.hour_start(slot).isoformat()} for {task_id}")

    def observe_archive(self, task_id: str) -> None:
        """Record that the caller archived a task so it can be undone."""
        self.state.undo_stack.append(Unarchive(task_id))
        logger.info(f"Archived {task_id}")

    def archive(self, task_id: str) -> None:
        """Ask the store to archive a task and record the undo."""
        self.store.set_archived(task_id, True)
        self.observe_archive(task_id)

    # ============== Undo ==============

    def undo(self) -> bool:
        """
        Revert the most recent interaction.

        Returns False when there is nothing to undo, or when the record's task
        is gone from the store; that record is dropped and nothing else changes.
        """
        if not self.state.undo_stack:
            return False

        record = self.state.undo_stack.pop()
        task = self.store.find_by_id(_task_id_of(record))
        if task is None:
            logger.warning(f"Cannot undo {type(record).__name__}: task {_task_id_of(record)} not found")
            return False

        match record:
            case SwapOffset(slot, task_id, prior):
                key = self._calendar(slot).instant(slot)
                offset = self.state.slot_offsets.get(key, 0) - 1
                if offset > 0:
                    self.state.slot_offsets[key] = offset
                else:
                    self.state.slot_offsets.pop(key, None)
                self._restore_placement(task, prior)
            case Block(slot, task_id, prior):
                self.state.blocked_hours.discard(self._calendar(slot).hour_key(slot))
                self._restore_placement(task, prior)
            case Unarchive(task_id):
                self.store.set_archived(task_id, False)

        logger.info(f"Undid {type(record).__name__} for {task.id}")
        return True

    def _restore_placement(self, task: Task, start: datetime) -> None:
        """Put a task back at start, evicting placements it would overlap."""
        end = start + task.duration
        for other_id, other_start in list(self.state.placements.items()):
            if other_id == task.id:
                continue
            other = self.store.find_by_id(other_id)
            if other is None:
                continue
            if other_start < end and other_start + other.duration > start:
                logger.debug(f"Evicting {other_id} to restore {task.id}")
                del self.state.placements[other_id]
        self.state.placements[task.id] = start

    # ============== Session ==============

    def reset(self) -> None:
        """Clear offsets, blocked hours, undo history and placements together."""
        self.state.clear()
        logger.info("Session state reset")

    def sign_out(self) -> None:
        """Reset the session and forget the last schedule."""
        self.reset()
        self.schedule = None


def _task_id_of(record: UndoRecord) -> str:
    match record:
        case SwapOffset(task_id=task_id) | Block(task_id=task_id) | Unarchive(task_id=task_id):
            return task_id
    raise TypeError(f"Unknown undo record: {record!r}")
