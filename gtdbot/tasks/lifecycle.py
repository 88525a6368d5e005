"""
Tool: Task Lifecycle Engine
Purpose: Capture, list and process GTD tasks for one user at a time

Every operation loads the user's document, applies one change, saves the
whole document and records what happened in the activity log.

Processing moves one inbox item to its destination:
    nextaction -> next       (nextActions)
    project    -> project    (projects[<name>], name required)
    waiting    -> waiting    (waiting, optional waitingFor)
    someday    -> someday    (someday)
    done       -> done       (completed, completion time stamped)

Remaining inbox items renumber by one after a task is processed.

Invalid input raises ValidationError before anything is moved or logged.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from gtdbot.activity import ActivityLog, EventType, LogEntry
from gtdbot.errors import ValidationError
from gtdbot.tasks.models import DESTINATIONS, Task, TaskStatus, TaskStore
from gtdbot.tasks.store import TaskRepository
from gtdbot.timeutil import Clock, to_iso, utcnow

HELP_COMMANDS: list[tuple[str, str]] = [
    ("add [task]", "Capture a new task to inbox"),
    ("inbox", "View tasks in your inbox"),
    (
        "process [#] [destination] [info]",
        "Process inbox item to: nextaction, project, waiting, someday, or done",
    ),
    ("next", "View your next actions"),
    ("projects", "List all your projects"),
    ("project [name]", "View tasks in a specific project"),
    ("waiting", "View tasks waiting on others"),
    ("someday", "View someday/maybe list"),
    ("done", "View recently completed tasks"),
    ("weekly", "Start weekly review process"),
    ("logs", "View your recent activity logs"),
    ("stats", "View your productivity statistics"),
]

WEEKLY_REVIEW_STEPS: list[dict[str, Any]] = [
    {
        "name": "1. Get Clear",
        "items": ["Collect loose papers & materials", "Process all notes", "Check your inbox"],
    },
    {
        "name": "2. Get Current",
        "items": [
            "Review Next Actions lists",
            "Review Previous calendar data",
            "Review Upcoming calendar",
            "Review Waiting For list",
            "Review Project lists",
        ],
    },
    {
        "name": "3. Get Creative",
        "items": ["Review Someday/Maybe list", "Be creative & courageous"],
    },
]

_DESTINATION_MESSAGES = {
    "nextaction": 'Task moved to Next Actions: "{content}"',
    "project": 'Task added to project "{project}": "{content}"',
    "waiting": 'Task moved to Waiting: "{content}"',
    "someday": 'Task moved to Someday/Maybe: "{content}"',
    "done": 'Task completed: "{content}"',
}


def _numbered(tasks: list[Task]) -> list[dict[str, Any]]:
    return [{"position": i, **task.to_dict()} for i, task in enumerate(tasks, start=1)]


def _parse_position(raw: Union[int, str, None], inbox_size: int) -> int:
    """1-based inbox position, validated against the current inbox."""
    error = ValidationError("Please provide a valid inbox task number.")
    if isinstance(raw, bool):
        raise error
    if isinstance(raw, int):
        position = raw
    else:
        try:
            position = int(str(raw).strip())
        except (TypeError, ValueError):
            raise error from None
    if position < 1 or position > inbox_size:
        raise error
    return position


def summarize_entry(entry: LogEntry) -> str:
    """One-line description of an activity log entry."""
    if entry.event_type == EventType.TASK_CAPTURED.value:
        return f'Added task: "{entry.details.get("content", "")}"'
    if entry.event_type == EventType.TASK_PROCESSED.value:
        return f"Processed task from inbox to {entry.details.get('newStatus', '?')}"
    if "VIEWED" in entry.event_type:
        return f"Viewed {entry.event_type.replace('_VIEWED', '').lower().replace('_', ' ')}"
    return entry.event_type


class TaskLifecycle:
    """GTD operations over the per-user task document."""

    def __init__(
        self,
        repository: TaskRepository,
        activity: ActivityLog,
        clock: Optional[Clock] = None,
        completed_limit: int = 10,
        activity_limit: int = 10,
    ):
        self.repository = repository
        self.activity = activity
        self._clock = clock or utcnow
        self.completed_limit = completed_limit
        self.activity_limit = activity_limit

    def _next_task_id(self, store: TaskStore) -> int:
        candidate = int(self._clock().timestamp() * 1000)
        return max(candidate, store.max_task_id() + 1)

    # ---- capture ----

    def capture(self, user_id: str, content: Optional[str]) -> dict[str, Any]:
        """
        Capture a new task into the inbox.

        Args:
            user_id: Owner of the task
            content: Task description (trimmed, must not be empty)

        Returns:
            dict with the new task and the inbox size
        """
        content = (content or "").strip()
        if not content:
            raise ValidationError("Please provide a task description.")

        store = self.repository.load(user_id)
        task = Task(
            id=self._next_task_id(store),
            content=content,
            created=to_iso(self._clock()),
            status=TaskStatus.INBOX,
        )
        store.inbox.append(task)
        self.repository.save(user_id, store)

        self.activity.record(user_id, EventType.TASK_CAPTURED, {"taskId": task.id, "content": content})

        return {
            "success": True,
            "data": {"task": task.to_dict(), "inbox_count": len(store.inbox)},
            "message": f'Task captured: "{content}"',
        }

    # ---- views ----

    def _list_view(
        self, user_id: str, tasks_attr: str, event_type: EventType, empty_message: str, message: str
    ) -> dict[str, Any]:
        store = self.repository.load(user_id)
        tasks = getattr(store, tasks_attr)
        self.activity.record(user_id, event_type, {"count": len(tasks)})
        return {
            "success": True,
            "data": {"tasks": _numbered(tasks), "count": len(tasks)},
            "message": message if tasks else empty_message,
        }

    def list_inbox(self, user_id: str) -> dict[str, Any]:
        return self._list_view(
            user_id,
            "inbox",
            EventType.INBOX_VIEWED,
            "Your inbox is empty. Great job processing everything!",
            "Tasks waiting to be processed:",
        )

    def list_next_actions(self, user_id: str) -> dict[str, Any]:
        return self._list_view(
            user_id,
            "next_actions",
            EventType.NEXT_ACTIONS_VIEWED,
            "You have no next actions. Process some tasks from your inbox!",
            "Tasks you can do now:",
        )

    def list_waiting(self, user_id: str) -> dict[str, Any]:
        return self._list_view(
            user_id,
            "waiting",
            EventType.WAITING_VIEWED,
            "You have no tasks in the waiting list.",
            "Waiting For:",
        )

    def list_someday(self, user_id: str) -> dict[str, Any]:
        return self._list_view(
            user_id,
            "someday",
            EventType.SOMEDAY_VIEWED,
            "You have no tasks in the Someday/Maybe list.",
            "Someday/Maybe:",
        )

    def list_projects(self, user_id: str) -> dict[str, Any]:
        store = self.repository.load(user_id)
        names = list(store.projects.keys())

        self.activity.record(
            user_id, EventType.PROJECTS_VIEWED, {"count": len(names), "projectNames": names}
        )

        return {
            "success": True,
            "data": {
                "projects": [{"name": name, "task_count": len(store.projects[name])} for name in names],
                "count": len(names),
            },
            "message": "Projects:" if names else "You have no active projects.",
        }

    def list_project(self, user_id: str, name: Optional[str]) -> dict[str, Any]:
        """
        Tasks in one project, in insertion order.

        An unknown or empty project is not an error: the result is empty and
        flagged ``not-found``.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Please specify a project name.")

        store = self.repository.load(user_id)
        exists = name in store.projects
        tasks = store.projects.get(name, [])

        self.activity.record(
            user_id,
            EventType.PROJECT_VIEWED,
            {"projectName": name, "exists": exists, "taskCount": len(tasks)},
        )

        result: dict[str, Any] = {
            "success": True,
            "data": {"project": name, "exists": exists, "tasks": _numbered(tasks), "count": len(tasks)},
            "message": f"Project: {name}",
        }
        if not tasks:
            result["kind"] = "not-found"
            result["message"] = f'No tasks found for project "{name}".'
        return result

    def list_completed(self, user_id: str, limit: Optional[int] = None) -> dict[str, Any]:
        """Most recent completions, newest first."""
        limit = self.completed_limit if limit is None else limit
        if limit < 1:
            raise ValidationError("The number of completed tasks to show must be at least 1.")

        store = self.repository.load(user_id)
        recent = list(reversed(store.completed[-limit:]))

        self.activity.record(
            user_id,
            EventType.COMPLETED_VIEWED,
            {"recentCount": len(recent), "totalCount": len(store.completed)},
        )

        return {
            "success": True,
            "data": {"tasks": _numbered(recent), "count": len(recent), "total": len(store.completed)},
            "message": "Completed Tasks:" if recent else "You have no completed tasks yet.",
        }

    # ---- processing ----

    def process(
        self,
        user_id: str,
        inbox_index: Union[int, str, None],
        destination: Optional[str],
        info: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Move one inbox task to its destination.

        Args:
            user_id: Owner of the inbox
            inbox_index: 1-based inbox position
            destination: nextaction | project | waiting | someday | done
            info: Project name (required for project) or who the task waits on

        Returns:
            dict with the moved task and the remaining inbox size

        Raises:
            ValidationError: bad position, destination or missing project name;
                the inbox is left unchanged and nothing is logged
        """
        store = self.repository.load(user_id)

        position = _parse_position(inbox_index, len(store.inbox))

        destination = (destination or "").strip().lower()
        if destination not in DESTINATIONS:
            raise ValidationError(
                "Please specify where to move this task: nextaction, project, waiting, someday, or done"
            )

        info = (info or "").strip()
        if destination == "project" and not info:
            raise ValidationError("Please specify a project name.")

        task = store.inbox[position - 1]

        # Intent is recorded before the document changes
        self.activity.record(
            user_id,
            EventType.TASK_PROCESSING,
            {
                "taskId": task.id,
                "content": task.content,
                "destination": destination,
                "additionalInfo": info,
            },
        )

        new_status = DESTINATIONS[destination]
        store.move_task(
            task,
            new_status,
            project=info if new_status == TaskStatus.PROJECT else None,
            waiting_for=info if new_status == TaskStatus.WAITING else None,
            completed_at=to_iso(self._clock()) if new_status == TaskStatus.DONE else None,
        )
        self.repository.save(user_id, store)

        self.activity.record(
            user_id,
            EventType.TASK_PROCESSED,
            {
                "taskId": task.id,
                "oldStatus": TaskStatus.INBOX.value,
                "newStatus": task.status.value,
                "destination": destination,
            },
        )

        return {
            "success": True,
            "data": {
                "task": task.to_dict(),
                "destination": destination,
                "inbox_count": len(store.inbox),
            },
            "message": _DESTINATION_MESSAGES[destination].format(content=task.content, project=info),
        }

    # ---- review / activity / help ----

    def weekly_review(self, user_id: str) -> dict[str, Any]:
        """Read-only weekly review summary."""
        store = self.repository.load(user_id)
        counts = {
            "inboxCount": len(store.inbox),
            "nextActionsCount": len(store.next_actions),
            "projectsCount": len(store.projects),
            "waitingCount": len(store.waiting),
            "somedayCount": len(store.someday),
        }

        self.activity.record(user_id, EventType.WEEKLY_REVIEW_STARTED, counts)

        return {
            "success": True,
            "data": {"counts": counts, "steps": WEEKLY_REVIEW_STEPS},
            "message": "Follow these steps for your weekly review:",
        }

    def recent_activity(self, user_id: str, limit: Optional[int] = None) -> dict[str, Any]:
        """Latest activity log entries, newest first."""
        limit = self.activity_limit if limit is None else limit
        entries = self.activity.recent(user_id, limit)

        result: dict[str, Any] = {
            "success": True,
            "data": {
                "entries": [{**entry.to_dict(), "summary": summarize_entry(entry)} for entry in entries],
                "count": len(entries),
            },
            "message": f"Your recent GTD activity (last {len(entries)} events):",
        }
        if not entries:
            result["kind"] = "not-found"
            result["message"] = "No activity logs found."
        return result

    def help(self, user_id: str) -> dict[str, Any]:
        self.activity.record(user_id, EventType.HELP_VIEWED, {})
        return {
            "success": True,
            "data": {"commands": [{"usage": usage, "description": desc} for usage, desc in HELP_COMMANDS]},
            "message": "Getting Things Done productivity bot",
        }


__all__ = ["HELP_COMMANDS", "TaskLifecycle", "WEEKLY_REVIEW_STEPS", "summarize_entry"]
