"""Tests for the file-based and in-memory adapters."""

import json
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from lattice.adapters.file_calendar import FileCalendarAdapter
from lattice.adapters.file_session import JsonSessionStore
from lattice.adapters.json_store import JsonTaskStore
from lattice.adapters.memory_store import InMemoryTaskStore, TaskNotFoundError
from lattice.core.session import Block, SessionState, SwapOffset, Unarchive
from lattice.core.tasks import Task

TZ = ZoneInfo("America/Toronto")


@pytest.fixture
def due():
    return datetime(2025, 1, 15, 17, 0, tzinfo=TZ)


class TestInMemoryTaskStore:
    def test_set_archived_replaces_copy(self, due):
        store = InMemoryTaskStore([Task(id="a", title="A", duration_minutes=30, target_date=due)])
        store.set_archived("a", True)
        assert store.find_by_id("a").archived is True

    def test_set_archived_unknown_raises(self):
        with pytest.raises(TaskNotFoundError):
            InMemoryTaskStore().set_archived("nope", True)

    def test_find_missing_returns_none(self):
        assert InMemoryTaskStore().find_by_id("nope") is None


class TestJsonTaskStore:
    def test_missing_file_is_empty(self, tmp_path):
        assert JsonTaskStore(tmp_path / "tasks.json").list_tasks() == []

    def test_create_and_find(self, tmp_path, due):
        store = JsonTaskStore(tmp_path / "data" / "tasks.json")
        task = store.create("Write report", 90, due)

        assert store.find_by_id(task.id) == task
        assert [t.title for t in store.list_tasks()] == ["Write report"]
        assert store.find_by_id("other") is None

    def test_set_archived_persists(self, tmp_path, due):
        store = JsonTaskStore(tmp_path / "tasks.json")
        task = store.create("Write report", 90, due)

        store.set_archived(task.id, True)

        reloaded = JsonTaskStore(tmp_path / "tasks.json")
        assert reloaded.find_by_id(task.id).archived is True

    def test_set_archived_unknown_raises(self, tmp_path):
        store = JsonTaskStore(tmp_path / "tasks.json")
        with pytest.raises(TaskNotFoundError):
            store.set_archived("nope", True)

    def test_skips_malformed_entries(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text(
            json.dumps(
                [
                    {"id": "ok", "title": "Fine", "duration_minutes": 30, "target_date": "2025-01-15T12:00:00"},
                    {"id": "bad", "title": "No deadline"},
                    {"id": "zero", "duration_minutes": 0, "target_date": "2025-01-15T12:00:00"},
                ]
            )
        )
        assert [t.id for t in JsonTaskStore(path).list_tasks()] == ["ok"]

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "tasks.json"
        path.write_text("{not json")
        assert JsonTaskStore(path).list_tasks() == []

    def test_delete_removes_task(self, tmp_path, due):
        store = JsonTaskStore(tmp_path / "tasks.json")
        keep = store.create("Keep", 30, due)
        gone = store.create("Gone", 30, due)

        store.delete(gone.id)

        assert [t.id for t in store.list_tasks()] == [keep.id]
        assert store.find_by_id(gone.id) is None

    def test_delete_unknown_raises(self, tmp_path):
        with pytest.raises(TaskNotFoundError):
            JsonTaskStore(tmp_path / "tasks.json").delete("nope")


class TestJsonSessionStore:
    def test_missing_file_gives_empty_state(self, tmp_path):
        assert JsonSessionStore(tmp_path / "session.json").load() == SessionState()

    def test_round_trip(self, tmp_path):
        slot = datetime(2025, 1, 15, 9, 0, tzinfo=TZ)
        instant = datetime(2025, 1, 15, 14, 0, tzinfo=timezone.utc)
        state = SessionState(
            slot_offsets={instant: 2},
            blocked_hours={instant},
            undo_stack=[SwapOffset(slot, "a", instant), Block(slot, "b", instant), Unarchive("c")],
            placements={"a": instant},
        )
        sessions = JsonSessionStore(tmp_path / "session.json")

        sessions.save(state)
        loaded = sessions.load()

        assert loaded == state
        assert loaded.undo_stack[2] == Unarchive("c")

    def test_corrupt_file_gives_empty_state(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text('{"undo_stack": [{"kind": "teleport"}]}')
        assert JsonSessionStore(path).load() == SessionState()

    @pytest.mark.parametrize("content", ["[]", '{"undo_stack": ["swap"]}', '{"placements": []}'])
    def test_wrong_structure_gives_empty_state(self, tmp_path, content):
        path = tmp_path / "session.json"
        path.write_text(content)
        assert JsonSessionStore(path).load() == SessionState()

    def test_clear_removes_file(self, tmp_path):
        sessions = JsonSessionStore(tmp_path / "session.json")
        sessions.save(SessionState())
        sessions.clear()
        assert not sessions.path.exists()
        sessions.clear()


class TestFileCalendarAdapter:
    @pytest.fixture
    def events_file(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(
            json.dumps(
                [
                    {"id": "2", "title": "Lunch", "start": "2025-01-15T12:00:00-05:00", "end": "2025-01-15T13:00:00-05:00"},
                    {"id": "1", "title": "Standup", "start": "2025-01-15T09:00:00-05:00", "end": "2025-01-15T09:15:00-05:00"},
                    {
                        "id": "3",
                        "title": "Offsite",
                        "start": "2025-01-15T10:00:00-05:00",
                        "end": "2025-01-15T11:00:00-05:00",
                        "calendar": "work",
                    },
                    {"id": "4", "title": "Tomorrow", "start": "2025-01-16T09:00:00-05:00", "end": "2025-01-16T10:00:00-05:00"},
                    {"id": "5", "title": "Broken"},
                ]
            )
        )
        return path

    def test_filters_window_and_sorts(self, events_file):
        adapter = FileCalendarAdapter(events_file)
        events = adapter.fetch_events(datetime(2025, 1, 15, tzinfo=TZ), datetime(2025, 1, 16, tzinfo=TZ))
        assert [e.title for e in events] == ["Standup", "Offsite", "Lunch"]

    def test_filters_selected_calendars(self, events_file):
        adapter = FileCalendarAdapter(events_file, calendars=["primary"])
        events = adapter.fetch_events(datetime(2025, 1, 15, tzinfo=TZ), datetime(2025, 1, 16, tzinfo=TZ))
        assert [e.title for e in events] == ["Standup", "Lunch"]

    def test_missing_file(self, tmp_path):
        adapter = FileCalendarAdapter(tmp_path / "none.json")
        assert adapter.fetch_events(datetime(2025, 1, 15, tzinfo=TZ), datetime(2025, 1, 16, tzinfo=TZ)) == []

    def test_naive_times_use_configured_zone(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text(
            json.dumps([{"id": "1", "title": "Review", "start": "2025-01-15T10:00", "end": "2025-01-15T11:00"}])
        )
        adapter = FileCalendarAdapter(path, tz=TZ)

        events = adapter.fetch_events(datetime(2025, 1, 15, tzinfo=TZ), datetime(2025, 1, 16, tzinfo=TZ))

        assert [e.start for e in events] == [datetime(2025, 1, 15, 10, 0, tzinfo=TZ)]
        assert events[0].end == datetime(2025, 1, 15, 11, 0, tzinfo=TZ)
