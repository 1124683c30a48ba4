"""
src/utils/history_store.py
Key/value persistence for the accuracy history blob.

Stores only move a list of plain dicts around; the record schema belongs to
PredictionAccuracyRecord.to_dict / from_dict.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol

from src.utils import supabase_client as db
from src.utils.config import ACCURACY_HISTORY_KEY
from src.utils.logger import get_logger

log = get_logger("history_store")


class AccuracyHistoryStore(Protocol):
    def load(self) -> list[dict[str, Any]]: ...

    def save(self, history: list[dict[str, Any]]) -> None: ...

    def clear(self) -> None: ...


class InMemoryHistoryStore:
    def __init__(self, history: list[dict[str, Any]] | None = None):
        self._history = list(history or [])

    def load(self) -> list[dict[str, Any]]:
        return list(self._history)

    def save(self, history: list[dict[str, Any]]) -> None:
        self._history = list(history)

    def clear(self) -> None:
        self._history = []


class JsonFileHistoryStore:
    """History kept as one JSON array on disk."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Accuracy history at {self.path} is not a JSON array")
        return data

    def save(self, history: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(history, f, ensure_ascii=False, indent=2)
        tmp.replace(self.path)
        log.debug(f"Saved {len(history)} accuracy records → {self.path}")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


class SupabaseHistoryStore:
    """History kept under a single key of the Supabase kv_store table."""

    def __init__(self, key: str = ACCURACY_HISTORY_KEY):
        self.key = key

    def load(self) -> list[dict[str, Any]]:
        value = db.get_value(self.key)
        if value is None:
            return []
        if isinstance(value, str):
            value = json.loads(value)
        return list(value)

    def save(self, history: list[dict[str, Any]]) -> None:
        db.set_value(self.key, history)

    def clear(self) -> None:
        db.delete_value(self.key)
