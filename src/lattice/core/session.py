"""Session-scoped interaction state and undo records."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class SwapOffset:
    """User asked for the next candidate at a slot."""

    slot: datetime
    task_id: str
    prior_placement: datetime


@dataclass(frozen=True)
class Block:
    """User blocked the hour containing a slot."""

    slot: datetime
    task_id: str
    prior_placement: datetime


@dataclass(frozen=True)
class Unarchive:
    """Reverse an archive by clearing the task's archived flag in the store."""

    task_id: str


UndoRecord = SwapOffset | Block | Unarchive


@dataclass
class SessionState:
    """
    Mutable state owned by one Scheduler.

    Offsets and placements are keyed by instant (see LocalCalendar.instant);
    blocked hours hold the instant of each blocked hour's start.
    """

    slot_offsets: dict[datetime, int] = field(default_factory=dict)
    blocked_hours: set[datetime] = field(default_factory=set)
    undo_stack: list[UndoRecord] = field(default_factory=list)
    placements: dict[str, datetime] = field(default_factory=dict)

    def clear(self) -> None:
        """Drop everything at once."""
        self.slot_offsets.clear()
        self.blocked_hours.clear()
        self.undo_stack.clear()
        self.placements.clear()

    def to_dict(self) -> dict:
        return {
            "slot_offsets": [[slot.isoformat(), n] for slot, n in self.slot_offsets.items()],
            "blocked_hours": sorted(h.isoformat() for h in self.blocked_hours),
            "undo_stack": [_record_to_dict(r) for r in self.undo_stack],
            "placements": {task_id: start.isoformat() for task_id, start in self.placements.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionState":
        return cls(
            slot_offsets={datetime.fromisoformat(s): int(n) for s, n in data.get("slot_offsets", [])},
            blocked_hours={datetime.fromisoformat(h) for h in data.get("blocked_hours", [])},
            undo_stack=[_record_from_dict(r) for r in data.get("undo_stack", [])],
            placements={k: datetime.fromisoformat(v) for k, v in data.get("placements", {}).items()},
        )


def _record_to_dict(record: UndoRecord) -> dict:
    match record:
        case SwapOffset(slot, task_id, prior):
            return {"kind": "swap", "slot": slot.isoformat(), "task_id": task_id, "prior": prior.isoformat()}
        case Block(slot, task_id, prior):
            return {"kind": "block", "slot": slot.isoformat(), "task_id": task_id, "prior": prior.isoformat()}
        case Unarchive(task_id):
            return {"kind": "unarchive", "task_id": task_id}
    raise TypeError(f"Unknown undo record: {record!r}")


def _record_from_dict(data: dict) -> UndoRecord:
    match data["kind"]:
        case "swap":
            return SwapOffset(
                datetime.fromisoformat(data["slot"]), data["task_id"], datetime.fromisoformat(data["prior"])
            )
        case "block":
            return Block(datetime.fromisoformat(data["slot"]), data["task_id"], datetime.fromisoformat(data["prior"]))
        case "unarchive":
            return Unarchive(data["task_id"])
    raise ValueError(f"Unknown undo record kind: {data['kind']!r}")
