"""
Tool: Activity Log Recorder
Purpose: Append-only per-user journal of GTD events

One JSON array per actor at ``<log_dir>/<actor>_log.json``. Every entry is
also emitted to the operational log stream (structlog ``activity_event``).

Recording is best-effort: the journal must never block a task operation.
- An existing log that cannot be parsed is moved aside to a new
  ``<name>.<timestamp>.corrupt`` file (earlier ones are never overwritten) and a
  fresh log is started.
- A failed write is logged with its traceback; the entry is still returned.

Usage:
    from gtdbot.activity import ActivityLog, EventType

    log = ActivityLog(Path("logs"))
    log.record("alice", EventType.TASK_CAPTURED, {"taskId": 1, "content": "Buy milk"})
    log.export("alice", "csv")
"""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

from gtdbot.activity.events import EventType, build_details
from gtdbot.errors import StorageCorruptionError, ValidationError
from gtdbot.jsonfile import read_json, user_key, write_json_atomic
from gtdbot.logging_config import get_logger
from gtdbot.timeutil import Clock, parse_iso, to_iso, utcnow

logger = get_logger(__name__)

EXPORT_FORMATS = ("json", "csv")
CSV_HEADER = "timestamp,userId,eventType,details"


@dataclass(frozen=True)
class LogEntry:
    """One immutable activity log record."""

    timestamp: str
    user_id: str
    event_type: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def occurred_at(self) -> Optional[datetime]:
        return parse_iso(self.timestamp)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "userId": self.user_id,
            "eventType": self.event_type,
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogEntry":
        details = data.get("details")
        return cls(
            timestamp=str(data.get("timestamp", "")),
            user_id=str(data.get("userId", "")),
            event_type=str(data.get("eventType", "")),
            details=details if isinstance(details, dict) else {},
        )


def _json_safe(details: Any) -> dict[str, Any]:
    """Plain JSON copy of an unchecked payload; values JSON cannot hold become strings."""
    if not isinstance(details, dict):
        return {}
    try:
        return json.loads(json.dumps(details, default=str, ensure_ascii=False))
    except ValueError:
        logger.warning("Activity payload is not JSON-encodable; details dropped")
        return {}


class ActivityLog:
    """Per-actor append-only event journal."""

    def __init__(self, log_dir: Path, clock: Optional[Clock] = None):
        self.log_dir = Path(log_dir)
        self._clock = clock or utcnow

    def path_for(self, actor_id: str) -> Path:
        return self.log_dir / f"{user_key(actor_id)}_log.json"

    # ---- writing ----

    def record(
        self,
        actor_id: str,
        event_type: Union[EventType, str],
        details: Optional[dict[str, Any]] = None,
    ) -> LogEntry:
        """
        Append an event to the actor's log.

        Args:
            actor_id: User id, or SYSTEM for process-level events
            event_type: One of EventType
            details: Payload for the event type (camelCase or snake_case keys)

        Returns:
            The recorded LogEntry (also when persisting it failed)
        """
        try:
            event_type = EventType(event_type)
            payload = build_details(event_type, details)
        except ValueError as e:
            # Unknown type or payload that does not fit: keep what we were given
            logger.warning(f"Unchecked activity payload for {event_type}: {e}")
            payload = _json_safe(details)

        entry = LogEntry(
            timestamp=to_iso(self._clock()),
            user_id=str(actor_id),
            event_type=event_type.value if isinstance(event_type, EventType) else str(event_type),
            details=payload,
        )

        logger.info(
            "activity_event",
            user_id=entry.user_id,
            event_type=entry.event_type,
            details=entry.details,
        )

        try:
            path = self.path_for(actor_id)
        except ValidationError:
            logger.warning(f"Activity event {entry.event_type} has no actor id; not persisted")
            return entry

        try:
            existing = self._load_for_append(path)
        except OSError:
            logger.exception(f"Could not read activity log {path}; entry not persisted")
            return entry

        existing.append(entry.to_dict())
        try:
            write_json_atomic(path, existing)
        except (OSError, TypeError, ValueError):
            logger.exception(f"Could not write activity log {path}; entry not persisted")

        return entry

    def _load_for_append(self, path: Path) -> list[dict[str, Any]]:
        if not path.exists():
            return []
        try:
            raw = read_json(path)
            if not isinstance(raw, list):
                raise StorageCorruptionError(path, "expected a JSON array")
            return raw
        except StorageCorruptionError as e:
            logger.warning(f"Activity log unreadable ({e.reason}); starting a fresh log at {path}")
            self._quarantine(path)
            return []

    def _quarantine(self, path: Path) -> None:
        """Move an unreadable log to a fresh ``<name>.<stamp>.corrupt`` file; earlier ones are kept."""
        stamp = self._clock().strftime("%Y%m%dT%H%M%S%fZ")
        target = path.with_name(f"{path.name}.{stamp}.corrupt")
        suffix = 1
        while target.exists():
            target = path.with_name(f"{path.name}.{stamp}-{suffix}.corrupt")
            suffix += 1
        try:
            path.replace(target)
        except OSError:
            logger.exception(f"Could not move corrupt activity log aside: {path}")

    # ---- reading ----

    def exists(self, actor_id: str) -> bool:
        return self.path_for(actor_id).exists()

    def read(self, actor_id: str) -> list[LogEntry]:
        """All entries for an actor, oldest first. Missing or unreadable logs read as empty."""
        path = self.path_for(actor_id)
        if not path.exists():
            return []
        try:
            return self._read_strict(path)
        except StorageCorruptionError as e:
            logger.warning(f"Activity log unreadable ({e.reason}): {path}")
            return []

    def _read_strict(self, path: Path) -> list[LogEntry]:
        raw = read_json(path)
        if not isinstance(raw, list):
            raise StorageCorruptionError(path, "expected a JSON array")
        return [LogEntry.from_dict(item) for item in raw if isinstance(item, dict)]

    def recent(self, actor_id: str, limit: int = 10) -> list[LogEntry]:
        """The latest ``limit`` entries, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self.read(actor_id)[-limit:]))

    def since(self, actor_id: str, cutoff: datetime) -> list[LogEntry]:
        """Entries strictly newer than ``cutoff``; entries with unparseable timestamps are skipped."""
        result = []
        for entry in self.read(actor_id):
            occurred = entry.occurred_at
            if occurred is not None and occurred > cutoff:
                result.append(entry)
        return result

    # ---- export ----

    def export(self, actor_id: str, format: str = "json") -> Union[list[dict[str, Any]], str, None]:
        """
        Export an actor's log for analytics.

        Args:
            actor_id: User whose log to export
            format: 'json' (list of dicts) or 'csv' (text, one row per entry)

        Returns:
            Exported data, or None if the actor has no log

        Raises:
            ValidationError: unknown format
            StorageCorruptionError: the log exists but cannot be parsed
        """
        fmt = (format or "").lower()
        if fmt not in EXPORT_FORMATS:
            raise ValidationError(f"Unknown export format: {format}. Use one of: {', '.join(EXPORT_FORMATS)}")

        path = self.path_for(actor_id)
        if not path.exists():
            return None

        entries = self._read_strict(path)

        if fmt == "json":
            return [entry.to_dict() for entry in entries]

        buf = io.StringIO()
        buf.write(CSV_HEADER + "\n")
        writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for entry in entries:
            writer.writerow(
                [
                    entry.timestamp,
                    entry.user_id,
                    entry.event_type,
                    json.dumps(entry.details, ensure_ascii=False),
                ]
            )
        return buf.getvalue()


__all__ = ["ActivityLog", "CSV_HEADER", "EXPORT_FORMATS", "LogEntry"]
