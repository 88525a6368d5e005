"""
Tool: Weekly Review Reminder Hook
Purpose: Periodically note which users are due a weekly review reminder

No notification is delivered. Each run enumerates the users that have a task
document and records one WEEKLY_REMINDER_SCHEDULED event per user under the
SYSTEM actor. It is an extension point for a real notification path.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from gtdbot import SYSTEM_ACTOR
from gtdbot.activity import ActivityLog, EventType
from gtdbot.logging_config import get_logger
from gtdbot.tasks.store import TaskRepository

logger = get_logger(__name__)

DEFAULT_INTERVAL_HOURS = 24.0


class WeeklyReminderScheduler:
    """Recurring no-op reminder hook."""

    def __init__(
        self,
        repository: TaskRepository,
        activity: ActivityLog,
        interval_hours: float = DEFAULT_INTERVAL_HOURS,
    ):
        self.repository = repository
        self.activity = activity
        self.interval_seconds = interval_hours * 3600
        self.running = False
        self.runs = 0
        self._stop_event: Optional[asyncio.Event] = None

    def run_once(self) -> dict[str, Any]:
        """Record a scheduled reminder for every user with stored tasks."""
        user_ids = self.repository.list_user_ids()

        for user_id in user_ids:
            logger.info(f"Would send weekly review reminder to user {user_id}")
            self.activity.record(SYSTEM_ACTOR, EventType.WEEKLY_REMINDER_SCHEDULED, {"targetUserId": user_id})

        self.runs += 1
        return {"success": True, "data": {"users": user_ids, "count": len(user_ids)}}

    async def run_forever(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Run the hook every interval until ``stop_event`` is set or ``stop()`` is called."""
        stop_event = stop_event or asyncio.Event()
        self._stop_event = stop_event
        self.running = True
        logger.info(f"Weekly reminder hook started (every {self.interval_seconds / 3600:g}h)")

        while self.running and not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
            if not self.running or stop_event.is_set():
                break

            try:
                await asyncio.to_thread(self.run_once)
            except Exception:
                logger.exception("Weekly reminder run failed")

        self.running = False
        logger.info("Weekly reminder hook stopped")

    def stop(self) -> None:
        self.running = False
        if self._stop_event is not None:
            self._stop_event.set()


__all__ = ["DEFAULT_INTERVAL_HOURS", "WeeklyReminderScheduler"]
