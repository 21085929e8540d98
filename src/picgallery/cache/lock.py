"""Per-key locking used to collapse concurrent thumbnail generation."""

from __future__ import annotations

import threading
from typing import Dict, Optional

from ..config import LOCK_TIMEOUT_SEC
from ..errors import LockTimeoutError


class _Slot:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class KeyLockTable:
    """A table of mutexes addressed by string keys.

    Unrelated keys never contend with each other. A slot is created on first
    use and dropped as soon as no thread holds or waits for it, so the table
    only grows with the number of keys that are currently in flight.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._slots: Dict[str, _Slot] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)

    def hold(self, key: str, *, timeout: Optional[float] = LOCK_TIMEOUT_SEC) -> "KeyLock":
        return KeyLock(self, key, timeout)

    def _checkout(self, key: str) -> _Slot:
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _Slot()
            slot.users += 1
            return slot

    def _checkin(self, key: str, slot: _Slot) -> None:
        with self._guard:
            slot.users -= 1
            if slot.users == 0 and self._slots.get(key) is slot:
                del self._slots[key]


class KeyLock:
    """Context manager acquiring one key of a :class:`KeyLockTable`."""

    def __init__(self, table: KeyLockTable, key: str, timeout: Optional[float]) -> None:
        self._table = table
        self.key = key
        self._timeout = timeout
        self._slot: Optional[_Slot] = None

    def acquire(self) -> None:
        slot = self._table._checkout(self.key)
        timeout = -1 if self._timeout is None else self._timeout
        if not slot.lock.acquire(timeout=timeout):
            self._table._checkin(self.key, slot)
            raise LockTimeoutError(f"Timed out waiting for thumbnail lock {self.key!r}")
        self._slot = slot

    def release(self) -> None:
        slot = self._slot
        if slot is None:
            return
        self._slot = None
        slot.lock.release()
        self._table._checkin(self.key, slot)

    def __enter__(self) -> "KeyLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
