"""Task Engine - GTD capture and inbox processing

Philosophy:
    Everything lands in the inbox first. Processing the inbox is a
    decision per item: do it next, file it under a project, wait on
    someone, park it for someday, or mark it done.

Components:
    models.py: Task and TaskStore documents, the single move_task transition
    store.py: Per-user load/save of task documents
    lifecycle.py: Capture, list views, processing, weekly review
    stats.py: Rolling-window productivity counters

Usage:
    from gtdbot.tasks.lifecycle import TaskLifecycle

    engine = TaskLifecycle(repository, activity)
    engine.capture("alice", "Buy milk")
    engine.process("alice", 1, "nextaction")
"""

from gtdbot.tasks.models import DESTINATIONS, Task, TaskStatus, TaskStore

__all__ = ["DESTINATIONS", "Task", "TaskStatus", "TaskStore"]
