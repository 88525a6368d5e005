"""
Task Models
Purpose: The per-user GTD document and the tasks it owns

A task lives in exactly one collection, and its ``status`` names that
collection. ``TaskStore.move_task`` is the only code path that changes a
task's status or relocates it.

Serialized form (camelCase keys) is the on-disk document:

    {"inbox": [...], "projects": {"Q3": [...]}, "contexts": {},
     "nextActions": [...], "waiting": [...], "someday": [...], "completed": [...]}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional

from gtdbot.errors import GTDError, ValidationError
from gtdbot.timeutil import to_iso, utcnow


class TaskStatus(str, Enum):
    """Lifecycle stage of a task. INBOX is the only initial stage, DONE is terminal."""

    INBOX = "inbox"
    NEXT = "next"
    PROJECT = "project"
    WAITING = "waiting"
    SOMEDAY = "someday"
    DONE = "done"


# Processing destination name -> resulting status
DESTINATIONS: dict[str, TaskStatus] = {
    "nextaction": TaskStatus.NEXT,
    "project": TaskStatus.PROJECT,
    "waiting": TaskStatus.WAITING,
    "someday": TaskStatus.SOMEDAY,
    "done": TaskStatus.DONE,
}


@dataclass
class Task:
    id: int
    content: str
    created: str
    status: TaskStatus = TaskStatus.INBOX
    project: Optional[str] = None
    waiting_for: Optional[str] = None
    completed: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "content": self.content,
            "created": self.created,
            "status": self.status.value,
        }
        if self.project is not None:
            d["project"] = self.project
        if self.waiting_for is not None:
            d["waitingFor"] = self.waiting_for
        if self.completed is not None:
            d["completed"] = self.completed
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """
        Raises:
            KeyError, TypeError, ValueError: if the record is malformed
        """
        if not isinstance(data, dict):
            raise TypeError(f"task record must be an object, got {type(data).__name__}")
        task_id = data["id"]
        if isinstance(task_id, bool) or not isinstance(task_id, int):
            raise TypeError(f"task id must be an integer, got {task_id!r}")
        content = data["content"]
        if not isinstance(content, str):
            raise TypeError("task content must be text")
        return cls(
            id=task_id,
            content=content,
            created=str(data["created"]),
            status=TaskStatus(data.get("status", TaskStatus.INBOX.value)),
            project=data.get("project"),
            waiting_for=data.get("waitingFor"),
            completed=data.get("completed"),
        )


def _task_list(raw: Any, name: str) -> list[Task]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise TypeError(f"'{name}' must be a list")
    return [Task.from_dict(item) for item in raw]


@dataclass
class TaskStore:
    """All task collections for one user."""

    inbox: list[Task] = field(default_factory=list)
    next_actions: list[Task] = field(default_factory=list)
    projects: dict[str, list[Task]] = field(default_factory=dict)
    waiting: list[Task] = field(default_factory=list)
    someday: list[Task] = field(default_factory=list)
    completed: list[Task] = field(default_factory=list)
    # Reserved: no operation populates contexts, it is carried through load/save untouched
    contexts: dict[str, Any] = field(default_factory=dict)

    def collection_for(self, status: TaskStatus, project: Optional[str] = None, create: bool = False) -> list[Task]:
        """
        The list that owns tasks of ``status``.

        For PROJECT the bucket named ``project`` is returned; with ``create``
        a missing bucket is added, otherwise an unattached empty list is
        returned.
        """
        if status == TaskStatus.PROJECT:
            if project is None:
                raise GTDError("A project task must name its project")
            if create:
                return self.projects.setdefault(project, [])
            return self.projects.get(project, [])

        return {
            TaskStatus.INBOX: self.inbox,
            TaskStatus.NEXT: self.next_actions,
            TaskStatus.WAITING: self.waiting,
            TaskStatus.SOMEDAY: self.someday,
            TaskStatus.DONE: self.completed,
        }[status]

    def all_tasks(self) -> Iterator[Task]:
        yield from self.inbox
        yield from self.next_actions
        for tasks in self.projects.values():
            yield from tasks
        yield from self.waiting
        yield from self.someday
        yield from self.completed

    def total_count(self) -> int:
        return sum(1 for _ in self.all_tasks())

    def max_task_id(self) -> int:
        return max((t.id for t in self.all_tasks()), default=0)

    def move_task(
        self,
        task: Task,
        new_status: TaskStatus,
        *,
        project: Optional[str] = None,
        waiting_for: Optional[str] = None,
        completed_at: Optional[str] = None,
    ) -> Task:
        """
        Relocate a task and update its status fields.

        All preconditions are checked before the task is detached, so a
        rejected move leaves the store untouched.

        Args:
            task: Task currently owned by this store
            new_status: Target stage (never INBOX)
            project: Project name, required for PROJECT
            waiting_for: Who/what the task waits on, optional for WAITING
            completed_at: Completion timestamp for DONE (defaults to now)

        Returns:
            The moved task

        Raises:
            ValidationError: the move is not allowed
            GTDError: the task is not where its status says it is
        """
        new_status = TaskStatus(new_status)
        if task.status == TaskStatus.DONE:
            raise ValidationError("Completed tasks cannot be moved.")
        if new_status == TaskStatus.INBOX:
            raise ValidationError("Tasks cannot be moved back to the inbox.")
        if new_status == TaskStatus.PROJECT and not (project and project.strip()):
            raise ValidationError("Please specify a project name.")

        source = self.collection_for(task.status, task.project)
        position = next((i for i, t in enumerate(source) if t is task), None)
        if position is None:
            raise GTDError(f"Task {task.id} is not in its '{task.status.value}' collection")

        source.pop(position)

        task.status = new_status
        task.project = project if new_status == TaskStatus.PROJECT else None
        task.waiting_for = (waiting_for or None) if new_status == TaskStatus.WAITING else None
        if new_status == TaskStatus.DONE:
            task.completed = completed_at or to_iso(utcnow())
        else:
            task.completed = None

        self.collection_for(new_status, task.project, create=True).append(task)
        return task

    def to_dict(self) -> dict[str, Any]:
        return {
            "inbox": [t.to_dict() for t in self.inbox],
            "projects": {name: [t.to_dict() for t in tasks] for name, tasks in self.projects.items()},
            "contexts": self.contexts,
            "nextActions": [t.to_dict() for t in self.next_actions],
            "waiting": [t.to_dict() for t in self.waiting],
            "someday": [t.to_dict() for t in self.someday],
            "completed": [t.to_dict() for t in self.completed],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TaskStore":
        """
        Raises:
            KeyError, TypeError, ValueError: if the document is malformed
        """
        if not isinstance(data, dict):
            raise TypeError(f"task document must be an object, got {type(data).__name__}")

        raw_projects = data.get("projects") or {}
        if not isinstance(raw_projects, dict):
            raise TypeError("'projects' must be an object")

        contexts = data.get("contexts") or {}
        if not isinstance(contexts, dict):
            raise TypeError("'contexts' must be an object")

        return cls(
            inbox=_task_list(data.get("inbox"), "inbox"),
            next_actions=_task_list(data.get("nextActions"), "nextActions"),
            projects={
                str(name): _task_list(tasks, f"projects.{name}") for name, tasks in raw_projects.items()
            },
            waiting=_task_list(data.get("waiting"), "waiting"),
            someday=_task_list(data.get("someday"), "someday"),
            completed=_task_list(data.get("completed"), "completed"),
            contexts=contexts,
        )


__all__ = ["DESTINATIONS", "Task", "TaskStatus", "TaskStore"]
