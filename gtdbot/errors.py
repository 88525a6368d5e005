"""Error taxonomy shared by the store, the engine and the dispatcher."""

from __future__ import annotations


class GTDError(Exception):
    """Base class for errors raised by gtdbot."""


class ValidationError(GTDError):
    """Caller-supplied input failed a precondition.

    The message is written for the end user (it is shown as the corrective
    prompt).
    """


class StorageCorruptionError(GTDError):
    """A persisted document exists but cannot be read as structured data."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Corrupt document at {path}: {reason}")


class UnknownCommandError(GTDError):
    """The command name has no registered handler."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Unknown command: {command}")


__all__ = [
    "GTDError",
    "ValidationError",
    "StorageCorruptionError",
    "UnknownCommandError",
]
