"""
Tool: Statistics Aggregator
Purpose: Rolling-window productivity counters from the activity log

Windowed counters (entries with timestamp > now - window):
    tasks_added      TASK_CAPTURED entries
    tasks_completed  TASK_PROCESSED entries whose newStatus is done
    inbox_processed  all TASK_PROCESSED entries

The "current" snapshot is not windowed: it reflects the task document at
call time.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional

from gtdbot.activity import ActivityLog, EventType
from gtdbot.errors import ValidationError
from gtdbot.tasks.models import TaskStatus
from gtdbot.tasks.store import TaskRepository
from gtdbot.timeutil import Clock, to_iso, utcnow


class StatsAggregator:
    """Derives counters from the activity log; holds no state of its own."""

    def __init__(
        self,
        repository: TaskRepository,
        activity: ActivityLog,
        clock: Optional[Clock] = None,
        window_days: int = 7,
    ):
        self.repository = repository
        self.activity = activity
        self._clock = clock or utcnow
        self.window_days = window_days

    def stats(self, user_id: str, window_days: Optional[int] = None) -> dict[str, Any]:
        """
        Productivity statistics for one user.

        Args:
            user_id: User whose log and tasks to read
            window_days: Size of the rolling window (defaults to the configured window)

        Returns:
            dict with windowed counters and the current collection sizes
        """
        window = self.window_days if window_days is None else window_days
        if window < 1:
            raise ValidationError("The statistics window must be at least one day.")

        now = self._clock()
        cutoff = now - timedelta(days=window)
        entries = self.activity.since(user_id, cutoff)

        tasks_added = sum(1 for e in entries if e.event_type == EventType.TASK_CAPTURED.value)
        processed = [e for e in entries if e.event_type == EventType.TASK_PROCESSED.value]
        tasks_completed = sum(1 for e in processed if e.details.get("newStatus") == TaskStatus.DONE.value)
        inbox_processed = len(processed)

        store = self.repository.load(user_id)
        current = {
            "inbox": len(store.inbox),
            "next_actions": len(store.next_actions),
            "projects": len(store.projects),
            "waiting": len(store.waiting),
            "someday": len(store.someday),
        }

        period = f"{window}days"
        self.activity.record(
            user_id,
            EventType.STATS_VIEWED,
            {
                "period": period,
                "tasksAdded": tasks_added,
                "tasksCompleted": tasks_completed,
                "inboxProcessed": inbox_processed,
            },
        )

        return {
            "success": True,
            "data": {
                "period": period,
                "window_days": window,
                "since": to_iso(cutoff),
                "tasks_added": tasks_added,
                "tasks_completed": tasks_completed,
                "inbox_processed": inbox_processed,
                "current": current,
            },
            "message": f"GTD Statistics (Last {window} Days)",
        }


__all__ = ["StatsAggregator"]
