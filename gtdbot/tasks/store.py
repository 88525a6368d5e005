"""
Tool: Task Repository
Purpose: Load and save one GTD document per user

Documents live at ``<data_dir>/<user>.json``. A missing document is the
normal first-use case and loads as an empty store. A document that exists
but cannot be parsed raises StorageCorruptionError rather than silently
becoming empty.

Usage:
    repo = TaskRepository(Path("data"))
    store = repo.load("alice")
    repo.save("alice", store)
"""

from __future__ import annotations

from pathlib import Path

from gtdbot.errors import StorageCorruptionError
from gtdbot.jsonfile import read_json, user_id_from_key, user_key, write_json_atomic
from gtdbot.logging_config import get_logger
from gtdbot.tasks.models import TaskStore

logger = get_logger(__name__)


class TaskRepository:
    """Per-user task documents under a storage root."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def path_for(self, user_id: str) -> Path:
        return self.data_dir / f"{user_key(user_id)}.json"

    def load(self, user_id: str) -> TaskStore:
        """
        Load a user's document.

        Returns:
            The persisted TaskStore, or an empty one if the user has none

        Raises:
            StorageCorruptionError: the document exists but is malformed
        """
        path = self.path_for(user_id)
        if not path.exists():
            return TaskStore()

        raw = read_json(path)
        try:
            return TaskStore.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            raise StorageCorruptionError(path, f"unexpected document shape: {e}") from e

    def save(self, user_id: str, store: TaskStore) -> None:
        """Atomically replace the user's document (last writer wins)."""
        path = self.path_for(user_id)
        write_json_atomic(path, store.to_dict())
        logger.debug(f"Saved task document {path.name} ({store.total_count()} tasks)")

    def list_user_ids(self) -> list[str]:
        """Users that have a stored task document."""
        if not self.data_dir.exists():
            return []
        return sorted(user_id_from_key(p.stem) for p in self.data_dir.glob("*.json") if p.is_file())


__all__ = ["TaskRepository"]
