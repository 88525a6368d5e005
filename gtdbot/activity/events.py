"""
Event types and typed payloads for the activity log.

Each event type has a pydantic model describing its ``details`` payload.
Fields are stored with camelCase keys (``taskId``, ``newStatus``); extra keys
are kept as-is so callers can attach context without a schema change.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EventType(str, Enum):
    """Activity log event types."""

    TASK_CAPTURED = "TASK_CAPTURED"
    TASK_PROCESSING = "TASK_PROCESSING"
    TASK_PROCESSED = "TASK_PROCESSED"
    INBOX_VIEWED = "INBOX_VIEWED"
    NEXT_ACTIONS_VIEWED = "NEXT_ACTIONS_VIEWED"
    PROJECTS_VIEWED = "PROJECTS_VIEWED"
    PROJECT_VIEWED = "PROJECT_VIEWED"
    WAITING_VIEWED = "WAITING_VIEWED"
    SOMEDAY_VIEWED = "SOMEDAY_VIEWED"
    COMPLETED_VIEWED = "COMPLETED_VIEWED"
    WEEKLY_REVIEW_STARTED = "WEEKLY_REVIEW_STARTED"
    STATS_VIEWED = "STATS_VIEWED"
    HELP_VIEWED = "HELP_VIEWED"
    UNKNOWN_COMMAND = "UNKNOWN_COMMAND"
    ERROR = "ERROR"
    WEEKLY_REMINDER_SCHEDULED = "WEEKLY_REMINDER_SCHEDULED"
    BOT_STARTED = "BOT_STARTED"


class EventDetails(BaseModel):
    model_config = ConfigDict(
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TaskCapturedDetails(EventDetails):
    task_id: int
    content: str


class TaskProcessingDetails(EventDetails):
    task_id: int
    content: str
    destination: str
    additional_info: str = ""


class TaskProcessedDetails(EventDetails):
    task_id: int
    old_status: str
    new_status: str
    destination: str


class CountDetails(EventDetails):
    count: int = Field(ge=0)


class ProjectsViewedDetails(CountDetails):
    project_names: list[str] = Field(default_factory=list)


class ProjectViewedDetails(EventDetails):
    project_name: str
    exists: bool
    task_count: int = Field(ge=0)


class CompletedViewedDetails(EventDetails):
    recent_count: int = Field(ge=0)
    total_count: int = Field(ge=0)


class WeeklyReviewDetails(EventDetails):
    inbox_count: int
    next_actions_count: int
    projects_count: int
    waiting_count: int
    someday_count: int


class StatsViewedDetails(EventDetails):
    period: str
    tasks_added: int
    tasks_completed: int
    inbox_processed: int


class UnknownCommandDetails(EventDetails):
    command: str
    full_message: str = ""


class ErrorDetails(EventDetails):
    command: str
    error: str
    stack: Optional[str] = None


class ReminderScheduledDetails(EventDetails):
    target_user_id: str


class BotStartedDetails(EventDetails):
    bot_username: str
    start_time: str


# Payload model per event type
EVENT_DETAILS: dict[EventType, type[EventDetails]] = {
    EventType.TASK_CAPTURED: TaskCapturedDetails,
    EventType.TASK_PROCESSING: TaskProcessingDetails,
    EventType.TASK_PROCESSED: TaskProcessedDetails,
    EventType.INBOX_VIEWED: CountDetails,
    EventType.NEXT_ACTIONS_VIEWED: CountDetails,
    EventType.PROJECTS_VIEWED: ProjectsViewedDetails,
    EventType.PROJECT_VIEWED: ProjectViewedDetails,
    EventType.WAITING_VIEWED: CountDetails,
    EventType.SOMEDAY_VIEWED: CountDetails,
    EventType.COMPLETED_VIEWED: CompletedViewedDetails,
    EventType.WEEKLY_REVIEW_STARTED: WeeklyReviewDetails,
    EventType.STATS_VIEWED: StatsViewedDetails,
    EventType.HELP_VIEWED: EventDetails,
    EventType.UNKNOWN_COMMAND: UnknownCommandDetails,
    EventType.ERROR: ErrorDetails,
    EventType.WEEKLY_REMINDER_SCHEDULED: ReminderScheduledDetails,
    EventType.BOT_STARTED: BotStartedDetails,
}


def build_details(event_type: EventType, details: dict[str, Any] | EventDetails | None) -> dict[str, Any]:
    """
    Validate a payload against its event type and return the stored form.

    Accepts either a model instance or a plain dict using camelCase or
    snake_case keys.

    Raises:
        pydantic.ValidationError: if the payload does not fit the event type
    """
    if isinstance(details, EventDetails):
        return details.to_payload()

    model_cls = EVENT_DETAILS[event_type]
    return model_cls.model_validate(details or {}).to_payload()


__all__ = [
    "EVENT_DETAILS",
    "EventDetails",
    "EventType",
    "build_details",
]
