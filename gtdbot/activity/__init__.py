"""Activity Log - append-only per-user journal of GTD events

Components:
    events.py: Event types and the payload model for each
    log.py: Recorder (append, read back, export)

Every lifecycle transition and view is observed here. The Statistics
Aggregator reads these entries back; nothing in the core ever edits or
deletes them.
"""

from gtdbot.activity.events import EventType
from gtdbot.activity.log import ActivityLog, LogEntry

__all__ = ["ActivityLog", "EventType", "LogEntry"]
