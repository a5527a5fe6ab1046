"""Conflict detection between meeting time ranges.

Intervals are half-open: ``[start, end)``. Two intervals overlap when
``s1 < e2 and s2 < e1``, so back-to-back meetings (one ends exactly when the
next starts) do not conflict.

Algorithm:
    1. The caller gathers the participant's committed intervals
       (organized meetings plus accepted invitations, excluding the
       meeting under evaluation)
    2. The candidate is compared against each one
    3. Any overlap is a conflict

Nothing here touches storage; callers pass the committed set explicitly.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List


@dataclass(frozen=True, slots=True)
class Interval:
    start: datetime
    end: datetime

    def overlaps(self, other: "Interval") -> bool:
        return self.start < other.end and other.start < self.end


def conflicts(candidate: Interval, existing: Iterable[Interval]) -> bool:
    """Return True if ``candidate`` overlaps any interval in ``existing``."""
    return any(candidate.overlaps(interval) for interval in existing)


def overlapping(candidate: Interval, existing: Iterable[Interval]) -> List[Interval]:
    """Return the intervals of ``existing`` that overlap ``candidate``, by start."""
    return sorted(
        (interval for interval in existing if candidate.overlaps(interval)),
        key=lambda interval: (interval.start, interval.end),
    )
