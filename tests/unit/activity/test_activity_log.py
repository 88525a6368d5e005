"""Tests for gtdbot/activity/log.py

The activity log is an append-only per-user journal:
- Records are never rewritten, only appended
- Unreadable logs never block a task operation
- Export to JSON and CSV for analytics
"""

import csv
import io
import json
from datetime import date, datetime, timezone

import pytest

from gtdbot.activity import ActivityLog, EventType
from gtdbot.errors import StorageCorruptionError, ValidationError


# ─────────────────────────────────────────────────────────────────────────────
# Recording
# ─────────────────────────────────────────────────────────────────────────────


class TestRecord:
    """Tests for appending events."""

    def test_creates_log_file(self, activity_log, mock_user_id):
        activity_log.record(mock_user_id, EventType.INBOX_VIEWED, {"count": 0})

        path = activity_log.path_for(mock_user_id)
        assert path.name == "U1_log.json"
        assert json.loads(path.read_text()) == [
            {
                "timestamp": "2024-05-01T09:00:00.000Z",
                "userId": "U1",
                "eventType": "INBOX_VIEWED",
                "details": {"count": 0},
            }
        ]

    def test_appends_in_order(self, activity_log, clock, mock_user_id):
        activity_log.record(mock_user_id, EventType.INBOX_VIEWED, {"count": 0})
        clock.advance(seconds=1)
        activity_log.record(mock_user_id, EventType.HELP_VIEWED)

        entries = activity_log.read(mock_user_id)

        assert [e.event_type for e in entries] == ["INBOX_VIEWED", "HELP_VIEWED"]
        assert entries[0].occurred_at < entries[1].occurred_at

    def test_accepts_snake_case_payload(self, activity_log, mock_user_id):
        entry = activity_log.record(mock_user_id, "TASK_CAPTURED", {"task_id": 7, "content": "x"})

        assert entry.event_type == "TASK_CAPTURED"
        assert entry.details == {"taskId": 7, "content": "x"}

    def test_keeps_extra_payload_keys(self, activity_log, mock_user_id):
        entry = activity_log.record(mock_user_id, EventType.INBOX_VIEWED, {"count": 2, "source": "slack"})

        assert entry.details == {"count": 2, "source": "slack"}

    def test_mismatched_payload_still_recorded(self, activity_log, mock_user_id):
        """A payload that does not fit its type is stored unchanged."""
        activity_log.record(mock_user_id, EventType.TASK_CAPTURED, {"content": "no id"})

        (entry,) = activity_log.read(mock_user_id)
        assert entry.details == {"content": "no id"}

    def test_unknown_event_type_still_recorded(self, activity_log, mock_user_id):
        activity_log.record(mock_user_id, "CUSTOM_EVENT", {"a": 1})

        (entry,) = activity_log.read(mock_user_id)
        assert entry.event_type == "CUSTOM_EVENT"

    def test_non_json_extra_value_is_encoded(self, activity_log, mock_user_id):
        """Extra payload values JSON cannot hold natively are stored in their JSON form."""
        when = datetime(2024, 1, 1, tzinfo=timezone.utc)

        entry = activity_log.record(mock_user_id, EventType.INBOX_VIEWED, {"count": 1, "when": when})

        assert entry.details == {"count": 1, "when": "2024-01-01T00:00:00Z"}
        (stored,) = activity_log.read(mock_user_id)
        assert stored.details["when"] == "2024-01-01T00:00:00Z"

    def test_unencodable_unchecked_payload_still_recorded(self, activity_log, mock_user_id):
        """An unknown event with an arbitrary object payload must not raise."""
        marker = object()

        entry = activity_log.record(mock_user_id, "CUSTOM_EVENT", {"obj": marker, "at": date(2024, 1, 1)})

        (stored,) = activity_log.read(mock_user_id)
        assert stored.details == entry.details
        assert stored.details["at"] == "2024-01-01"
        assert stored.details["obj"] == str(marker)

    def test_failed_write_does_not_raise(self, activity_log, mock_user_id, monkeypatch):
        def broken_write(path, data):
            raise TypeError("not serializable")

        monkeypatch.setattr("gtdbot.activity.log.write_json_atomic", broken_write)

        entry = activity_log.record(mock_user_id, EventType.HELP_VIEWED)

        assert entry.event_type == "HELP_VIEWED"
        assert not activity_log.exists(mock_user_id)

    def test_users_are_isolated(self, activity_log, mock_user_id, other_user_id):
        activity_log.record(mock_user_id, EventType.HELP_VIEWED)

        assert activity_log.read(other_user_id) == []
        assert not activity_log.exists(other_user_id)

    def test_empty_actor_not_persisted(self, activity_log, temp_log_dir):
        entry = activity_log.record("", EventType.HELP_VIEWED)

        assert entry.event_type == "HELP_VIEWED"
        assert list(temp_log_dir.iterdir()) == []

    def test_creates_missing_log_dir(self, tmp_path, clock, mock_user_id):
        log = ActivityLog(tmp_path / "nested" / "logs", clock=clock)

        log.record(mock_user_id, EventType.HELP_VIEWED)

        assert log.exists(mock_user_id)


class TestCorruptLog:
    """An unreadable log must not block recording."""

    def test_corrupt_log_moved_aside(self, activity_log, mock_user_id):
        path = activity_log.path_for(mock_user_id)
        path.write_text("{broken")

        activity_log.record(mock_user_id, EventType.HELP_VIEWED)

        assert [e.event_type for e in activity_log.read(mock_user_id)] == ["HELP_VIEWED"]
        moved = path.with_name("U1_log.json.20240501T090000000000Z.corrupt")
        assert moved.read_text() == "{broken"

    def test_repeated_corruption_keeps_every_copy(self, activity_log, clock, temp_log_dir, mock_user_id):
        """A second quarantine must not overwrite the first one."""
        path = activity_log.path_for(mock_user_id)
        path.write_text("{first broken")
        activity_log.record(mock_user_id, EventType.HELP_VIEWED)
        path.write_text("{second broken")
        activity_log.record(mock_user_id, EventType.HELP_VIEWED)
        clock.advance(minutes=1)
        path.write_text("{third broken")
        activity_log.record(mock_user_id, EventType.HELP_VIEWED)

        quarantined = sorted(temp_log_dir.glob("U1_log.json.*.corrupt"))

        assert sorted(p.read_text() for p in quarantined) == [
            "{first broken",
            "{second broken",
            "{third broken",
        ]
        assert len(activity_log.read(mock_user_id)) == 1

    def test_non_array_log_moved_aside(self, activity_log, mock_user_id):
        activity_log.path_for(mock_user_id).write_text('{"not": "a list"}')

        activity_log.record(mock_user_id, EventType.HELP_VIEWED)

        assert len(activity_log.read(mock_user_id)) == 1

    def test_read_of_corrupt_log_is_empty(self, activity_log, mock_user_id):
        activity_log.path_for(mock_user_id).write_text("{broken")

        assert activity_log.read(mock_user_id) == []

    def test_task_operation_succeeds_with_corrupt_log(self, engine, repository, activity_log, mock_user_id):
        activity_log.path_for(mock_user_id).write_text("{broken")

        result = engine.capture(mock_user_id, "Buy milk")

        assert result["success"] is True
        assert len(repository.load(mock_user_id).inbox) == 1


# ─────────────────────────────────────────────────────────────────────────────
# Reading
# ─────────────────────────────────────────────────────────────────────────────


class TestQueries:
    """Tests for recent() and since()."""

    def test_recent_newest_first(self, activity_log, clock, mock_user_id):
        for count in range(5):
            activity_log.record(mock_user_id, EventType.INBOX_VIEWED, {"count": count})
            clock.advance(seconds=1)

        recent = activity_log.recent(mock_user_id, 3)

        assert [e.details["count"] for e in recent] == [4, 3, 2]

    def test_recent_zero_limit(self, activity_log, mock_user_id):
        activity_log.record(mock_user_id, EventType.HELP_VIEWED)

        assert activity_log.recent(mock_user_id, 0) == []

    def test_since_is_exclusive(self, activity_log, clock, mock_user_id):
        cutoff = clock()
        activity_log.record(mock_user_id, EventType.HELP_VIEWED)
        clock.advance(milliseconds=1)
        activity_log.record(mock_user_id, EventType.INBOX_VIEWED, {"count": 0})

        assert [e.event_type for e in activity_log.since(mock_user_id, cutoff)] == ["INBOX_VIEWED"]


# ─────────────────────────────────────────────────────────────────────────────
# Export
# ─────────────────────────────────────────────────────────────────────────────


class TestExport:
    """Tests for JSON and CSV export."""

    def test_no_log_returns_none(self, activity_log, mock_user_id):
        assert activity_log.export(mock_user_id, "json") is None
        assert activity_log.export(mock_user_id, "csv") is None

    def test_json_export(self, activity_log, mock_user_id):
        activity_log.record(mock_user_id, EventType.INBOX_VIEWED, {"count": 3})

        data = activity_log.export(mock_user_id, "json")

        assert data == [
            {
                "timestamp": "2024-05-01T09:00:00.000Z",
                "userId": "U1",
                "eventType": "INBOX_VIEWED",
                "details": {"count": 3},
            }
        ]

    def test_csv_export_one_row_per_entry(self, activity_log, mock_user_id):
        activity_log.record(mock_user_id, EventType.INBOX_VIEWED, {"count": 1})
        activity_log.record(mock_user_id, EventType.HELP_VIEWED)

        text = activity_log.export(mock_user_id, "csv")
        rows = list(csv.reader(io.StringIO(text)))

        assert text.startswith("timestamp,userId,eventType,details\n")
        assert rows[0] == ["timestamp", "userId", "eventType", "details"]
        assert len(rows) == 3
        assert rows[1][:3] == ["2024-05-01T09:00:00.000Z", "U1", "INBOX_VIEWED"]
        assert json.loads(rows[1][3]) == {"count": 1}

    def test_csv_escapes_quotes_and_commas(self, activity_log, mock_user_id):
        """Content with quotes, commas and newlines survives a CSV round trip."""
        content = 'Say "hi", then\nleave'
        activity_log.record(mock_user_id, EventType.TASK_CAPTURED, {"taskId": 1, "content": content})

        text = activity_log.export(mock_user_id, "csv")
        rows = list(csv.reader(io.StringIO(text)))

        assert len(rows) == 2
        assert json.loads(rows[1][3])["content"] == content

    def test_format_is_case_insensitive(self, activity_log, mock_user_id):
        activity_log.record(mock_user_id, EventType.HELP_VIEWED)

        assert activity_log.export(mock_user_id, "CSV").startswith("timestamp,")

    def test_unknown_format(self, activity_log, mock_user_id):
        activity_log.record(mock_user_id, EventType.HELP_VIEWED)

        with pytest.raises(ValidationError):
            activity_log.export(mock_user_id, "xml")

    def test_corrupt_log_raises(self, activity_log, mock_user_id):
        activity_log.path_for(mock_user_id).write_text("{broken")

        with pytest.raises(StorageCorruptionError):
            activity_log.export(mock_user_id, "json")
