"""
JSON document files keyed by user id.

Uses write-to-temp + rename so a crash mid-write never leaves a truncated
document behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any
from urllib.parse import quote, unquote

from gtdbot.errors import StorageCorruptionError, ValidationError


def user_key(user_id: str) -> str:
    """Encode an opaque user id into a single safe file name component."""
    if user_id is None or not str(user_id).strip():
        raise ValidationError("A user id is required.")
    return quote(str(user_id), safe="")


def user_id_from_key(key: str) -> str:
    return unquote(key)


def read_json(path: Path) -> Any:
    """
    Read a JSON document.

    Raises:
        FileNotFoundError: if the file does not exist
        StorageCorruptionError: if the file is not valid JSON
    """
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise StorageCorruptionError(path, str(e)) from e


def write_json_atomic(path: Path, data: Any) -> None:
    """Replace ``path`` with the JSON encoding of ``data``."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(
        suffix=".tmp",
        prefix=path.stem + "_",
        dir=path.parent,
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        os.replace(temp_path, path)
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


__all__ = ["read_json", "user_id_from_key", "user_key", "write_json_atomic"]
