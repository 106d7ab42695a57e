from __future__ import annotations

from collections import defaultdict
from contextlib import contextmanager
from threading import Lock
from typing import Iterator

GenerationKey = tuple[str, str, str]


class KeyedLockRegistry:
    """One lock per (school_id, academic_year, class_id), created on first use."""

    def __init__(self) -> None:
        self._locks: dict[GenerationKey, Lock] = defaultdict(Lock)
        self._lock = Lock()

    def get(self, key: GenerationKey) -> Lock:
        with self._lock:
            return self._locks[key]

    @contextmanager
    def hold(self, key: GenerationKey) -> Iterator[None]:
        lock = self.get(key)
        with lock:
            yield

    def clear(self) -> None:
        with self._lock:
            self._locks.clear()


_registry = KeyedLockRegistry()


def generation_lock(school_id: str, academic_year: str, class_id: str):
    return _registry.hold((school_id, academic_year, class_id))


def clear_generation_locks() -> None:
    _registry.clear()
