"""
Tool: Command Dispatcher
Purpose: Route pre-parsed GTD commands to the engine and shape the outcome

The dispatcher is the error boundary: nothing raised by an operation escapes
``handle`` or ``dispatch``.

Outcome kinds:
    success          operation completed
    validation-error bad input; message tells the user how to fix it
    not-found        empty project or activity view (not a failure)
    unknown-command  logged as UNKNOWN_COMMAND, user pointed at help
    error            anything else; logged as ERROR, generic reply

Commands from the same user are serialized (one asyncio.Lock per user id,
dropped once no command holds or waits on it), so their load/save cycles
never interleave. Different users run in parallel.

Usage:
    dispatcher = build_dispatcher()
    result = await dispatcher.dispatch("alice", "process", ["1", "project", "Q3", "Launch"])
"""

from __future__ import annotations

import asyncio
import traceback
from collections.abc import Callable
from typing import Any, Optional

from gtdbot.activity import ActivityLog, EventType
from gtdbot.config import GTDConfig, load_config
from gtdbot.errors import UnknownCommandError, ValidationError
from gtdbot.logging_config import get_logger
from gtdbot.tasks.lifecycle import TaskLifecycle
from gtdbot.tasks.stats import StatsAggregator
from gtdbot.tasks.store import TaskRepository
from gtdbot.timeutil import Clock

logger = get_logger(__name__)

OUTCOME_KINDS = ("success", "validation-error", "not-found", "unknown-command", "error")

UNKNOWN_COMMAND_MESSAGE = "Unknown command. Type `help` to see available commands."
ERROR_MESSAGE = "There was an error executing that command."

CommandHandler = Callable[[str, list[str]], dict[str, Any]]


class CommandDispatcher:
    """Maps command names to engine operations for one process."""

    def __init__(self, engine: TaskLifecycle, stats: StatsAggregator, activity: ActivityLog):
        self.engine = engine
        self.stats = stats
        self.activity = activity
        self._handlers: dict[str, CommandHandler] = {}
        self._user_locks: dict[str, asyncio.Lock] = {}
        # Commands holding or waiting on each user lock
        self._lock_users: dict[str, int] = {}
        self._register_defaults()

    # ---- registry ----

    def register(self, name: str, handler: CommandHandler, aliases: Optional[list[str]] = None) -> None:
        for key in [name, *(aliases or [])]:
            self._handlers[key.lower()] = handler

    def resolve(self, command: str) -> CommandHandler:
        handler = self._handlers.get(command)
        if handler is None:
            raise UnknownCommandError(command)
        return handler

    @property
    def commands(self) -> list[str]:
        return sorted(self._handlers)

    def _register_defaults(self) -> None:
        engine = self.engine

        def process(user_id: str, argv: list[str]) -> dict[str, Any]:
            index = argv[0] if argv else None
            destination = argv[1] if len(argv) > 1 else None
            return engine.process(user_id, index, destination, " ".join(argv[2:]))

        self.register("capture", lambda u, argv: engine.capture(u, " ".join(argv)), aliases=["add"])
        self.register("inbox", lambda u, argv: engine.list_inbox(u))
        self.register("process", process)
        self.register("next", lambda u, argv: engine.list_next_actions(u))
        self.register("projects", lambda u, argv: engine.list_projects(u))
        self.register("project", lambda u, argv: engine.list_project(u, " ".join(argv)))
        self.register("waiting", lambda u, argv: engine.list_waiting(u))
        self.register("someday", lambda u, argv: engine.list_someday(u))
        self.register("done", lambda u, argv: engine.list_completed(u), aliases=["completed"])
        self.register("weekly", lambda u, argv: engine.weekly_review(u))
        self.register("logs", lambda u, argv: engine.recent_activity(u))
        self.register("stats", lambda u, argv: self.stats.stats(u))
        self.register("help", lambda u, argv: engine.help(u))

    # ---- dispatch ----

    def _get_user_lock(self, user_id: str) -> asyncio.Lock:
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._user_locks[user_id] = lock
        return lock

    async def dispatch(self, user_id: str, command: str, argv: Optional[list[str]] = None) -> dict[str, Any]:
        """
        Run one command, serialized with other commands from the same user.

        Args:
            user_id: Opaque platform user id
            command: Command name (case-insensitive)
            argv: Remaining message words

        Returns:
            Outcome dict (success, kind, command, data, message)
        """
        lock = self._get_user_lock(user_id)
        self._lock_users[user_id] = self._lock_users.get(user_id, 0) + 1
        try:
            async with lock:
                return await asyncio.to_thread(self.handle, user_id, command, argv)
        finally:
            self._release_user_lock(user_id)

    def _release_user_lock(self, user_id: str) -> None:
        remaining = self._lock_users.get(user_id, 1) - 1
        if remaining > 0:
            self._lock_users[user_id] = remaining
            return
        self._lock_users.pop(user_id, None)
        self._user_locks.pop(user_id, None)

    def handle(self, user_id: str, command: str, argv: Optional[list[str]] = None) -> dict[str, Any]:
        """Synchronous form of ``dispatch`` without per-user locking."""
        name = (command or "").strip().lower()
        args = [str(a) for a in (argv or [])]

        try:
            handler = self.resolve(name)
            result = handler(user_id, args)

        except UnknownCommandError:
            self.activity.record(
                user_id,
                EventType.UNKNOWN_COMMAND,
                {"command": name, "fullMessage": " ".join([command or "", *args]).strip()},
            )
            return self._outcome("unknown-command", name, success=False, message=UNKNOWN_COMMAND_MESSAGE)

        except ValidationError as e:
            return self._outcome("validation-error", name, success=False, message=str(e))

        except Exception as e:
            logger.exception(f"Error executing command '{name}'", user_id=user_id)
            self.activity.record(
                user_id,
                EventType.ERROR,
                {"command": name, "error": str(e), "stack": traceback.format_exc()},
            )
            return self._outcome("error", name, success=False, message=ERROR_MESSAGE)

        return self._outcome(
            result.get("kind", "success"),
            name,
            success=result.get("success", True),
            data=result.get("data"),
            message=result.get("message", ""),
        )

    @staticmethod
    def _outcome(
        kind: str,
        command: str,
        success: bool,
        data: Any = None,
        message: str = "",
    ) -> dict[str, Any]:
        return {
            "success": success,
            "kind": kind,
            "command": command,
            "data": data,
            "message": message,
        }


def build_dispatcher(config: Optional[GTDConfig] = None, clock: Optional[Clock] = None) -> CommandDispatcher:
    """Wire repository, activity log, engine and stats from configuration."""
    config = config or load_config()

    repository = TaskRepository(config.storage.resolved_data_dir())
    activity = ActivityLog(config.storage.resolved_log_dir(), clock=clock)
    engine = TaskLifecycle(
        repository,
        activity,
        clock=clock,
        completed_limit=config.views.completed_limit,
        activity_limit=config.views.activity_limit,
    )
    stats = StatsAggregator(repository, activity, clock=clock, window_days=config.stats.window_days)

    return CommandDispatcher(engine, stats, activity)


__all__ = ["CommandDispatcher", "OUTCOME_KINDS", "build_dispatcher"]
