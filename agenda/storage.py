# -*- coding: utf-8 -*-
"""Key-value storage ports for durable agenda state.

The store only needs ``get``/``set`` on string values. ``MemoryStorage`` backs
tests; ``JsonFileStorage`` keeps every key in a single JSON file on disk.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import typing as t
from pathlib import Path

from agenda.config import APP_VIEW_KEY

logger = logging.getLogger(__name__)

AppView = t.Literal[
    "login",
    "config",
    "dashboard",
    "planner",
    "exam_generator",
    "exam_corrector",
    "speech_generator",
    "calendar",
]
APP_VIEWS: tuple[str, ...] = t.get_args(AppView)
# Views that are never restored on reentry
TRANSIENT_VIEWS = frozenset({"login", "config"})


class KeyValueStorage(t.Protocol):
    """Synchronous string key-value store."""

    def get(self, key: str) -> t.Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    """In-process storage; contents are lost when the object is dropped."""

    def __init__(self, initial: t.Optional[dict[str, str]] = None) -> None:
        self.data: dict[str, str] = dict(initial or {})
        self.writes = 0

    def get(self, key: str) -> t.Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        self.data[key] = value


class JsonFileStorage:
    """Storage backed by one JSON object on disk.

    Each ``set`` rewrites the whole file through a temporary file and an atomic
    rename, so a crash mid-write leaves the previous contents in place.
    An unreadable file is treated as empty; the next ``set`` replaces it.
    """

    def __init__(self, path: t.Union[str, Path]) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError, RecursionError) as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: top level is not an object", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> t.Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise


def remember_view(storage: KeyValueStorage, view: str) -> bool:
    """Records the last active view so navigation can be restored on reentry.

    :param storage: Storage to write to.
    :param view: The view the user navigated to.
    :return: True if the view was recorded; login and config are skipped.
    """
    if view not in APP_VIEWS:
        raise ValueError(f"Unknown view: {view!r}")
    if view in TRANSIENT_VIEWS:
        return False
    storage.set(APP_VIEW_KEY, view)
    return True


def restore_view(storage: KeyValueStorage, default: str = "dashboard") -> str:
    """Returns the last recorded view, or ``default`` when none is usable."""
    view = storage.get(APP_VIEW_KEY)
    if view in APP_VIEWS and view not in TRANSIENT_VIEWS:
        return view
    return default
