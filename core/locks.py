"""
Per-key mutual exclusion for plan and container mutations.

One ``threading.Lock`` exists per key while anybody holds or waits for it;
the entry is dropped once the last user releases it so that the registry does
not grow with every plan ever touched.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterable, Iterator
from uuid import UUID

# Guards the cross-plan "only one plan running" rule.
PLAN_START_LOCK_KEY = "plan-start"
# Guards cross-plan window validation on create and header edit.
PLAN_WINDOW_LOCK_KEY = "plan-window"


def plan_lock_key(plan_id: UUID) -> str:
    return f"plan:{plan_id}"


def container_lock_key(order_container_id: UUID) -> str:
    return f"container:{order_container_id}"


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class KeyedLockRegistry:
    """Serializes work per key while letting different keys run in parallel."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: Dict[Hashable, _Entry] = {}

    def _checkout(self, key: Hashable) -> _Entry:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = _Entry()
                self._entries[key] = entry
            entry.users += 1
            return entry

    def _checkin(self, key: Hashable, entry: _Entry) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0:
                self._entries.pop(key, None)

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        entry = self._checkout(key)
        entry.lock.acquire()
        try:
            yield
        finally:
            entry.lock.release()
            self._checkin(key, entry)

    @contextmanager
    def hold_many(self, keys: Iterable[Hashable]) -> Iterator[None]:
        # Sorted acquisition keeps two multi-key holders from deadlocking.
        ordered = sorted(set(keys), key=str)
        acquired = []
        try:
            for key in ordered:
                entry = self._checkout(key)
                entry.lock.acquire()
                acquired.append((key, entry))
            yield
        finally:
            for key, entry in reversed(acquired):
                entry.lock.release()
                self._checkin(key, entry)

    def active_keys(self) -> int:
        with self._guard:
            return len(self._entries)
