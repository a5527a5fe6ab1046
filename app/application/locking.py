"""Per-key exclusive locks guarding the check-then-write region.

Conflict detection reads a participant's committed schedule and the write
happens afterwards; two commands touching the same participant must not
interleave inside that window. Keys are acquired in sorted order so
overlapping key sets cannot deadlock.

Locks are process-local.
"""
from __future__ import annotations
import threading
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional


def participant_key(user_id: str) -> str:
    return f"participant:{user_id}"


def meeting_key(meeting_id: str) -> str:
    return f"meeting:{meeting_id}"


class _Slot:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


class ScheduleLocks:
    """Reference-counted registry of named locks."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._slots: Dict[str, _Slot] = {}

    @contextmanager
    def hold(self, keys: Iterable[Optional[str]]) -> Iterator[List[str]]:
        ordered = sorted({key for key in keys if key})
        slots = [self._checkout(key) for key in ordered]
        acquired: List[_Slot] = []
        try:
            for slot in slots:
                slot.lock.acquire()
                acquired.append(slot)
            yield ordered
        finally:
            for slot in reversed(acquired):
                slot.lock.release()
            for key in ordered:
                self._checkin(key)

    def active_keys(self) -> List[str]:
        with self._guard:
            return sorted(self._slots)

    def _checkout(self, key: str) -> _Slot:
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _Slot()
            slot.holders += 1
            return slot

    def _checkin(self, key: str) -> None:
        with self._guard:
            slot = self._slots[key]
            slot.holders -= 1
            if slot.holders == 0:
                del self._slots[key]
