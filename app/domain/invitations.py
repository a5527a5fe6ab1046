"""Domain layer: attendee invitation state machine."""
from __future__ import annotations
import logging
from typing import Dict, FrozenSet, Iterable, List, Union

from app.domain.conflicts import Interval, overlapping
from app.domain.entities import AttendeeEntry, AttendeeStatus
from app.domain.errors import ConflictError, ValidationError

logger = logging.getLogger(__name__)

RESPONSE_STATUSES = (AttendeeStatus.ACCEPTED, AttendeeStatus.DECLINED)


def parse_response(status: Union[str, AttendeeStatus]) -> AttendeeStatus:
    """Coerce a raw response value; only accepted/declined are valid."""
    try:
        parsed = AttendeeStatus(status)
    except ValueError:
        parsed = None
    if parsed not in RESPONSE_STATUSES:
        raise ValidationError("Status must be either accepted or declined")
    return parsed


class InvitationStateMachine:
    """Governs attendee response transitions.

    There is no terminal state: an attendee may flip between accepted and
    declined indefinitely. Moving into ``accepted`` is guarded by a conflict
    check against the attendee's committed schedule; moving into ``declined``
    never is. Nothing moves back to ``pending``.
    """

    TRANSITIONS: Dict[AttendeeStatus, FrozenSet[AttendeeStatus]] = {
        AttendeeStatus.PENDING: frozenset({AttendeeStatus.ACCEPTED, AttendeeStatus.DECLINED}),
        AttendeeStatus.ACCEPTED: frozenset({AttendeeStatus.ACCEPTED, AttendeeStatus.DECLINED}),
        AttendeeStatus.DECLINED: frozenset({AttendeeStatus.ACCEPTED, AttendeeStatus.DECLINED}),
    }

    def can_transition(self, current: AttendeeStatus, target: AttendeeStatus) -> bool:
        return target in self.TRANSITIONS.get(current, frozenset())

    def transition(
        self,
        entry: AttendeeEntry,
        target: AttendeeStatus,
        candidate: Interval,
        committed: Iterable[Interval] = (),
    ) -> AttendeeEntry:
        """Move ``entry`` to ``target`` in place and return it.

        Raises ValidationError for an illegal transition and ConflictError if
        accepting would double-book the attendee; the entry is untouched in
        both cases.
        """
        if not self.can_transition(entry.status, target):
            raise ValidationError(f"Cannot move invitation from {entry.status.value} to {target.value}")

        if target is AttendeeStatus.ACCEPTED:
            clashes = overlapping(candidate, committed)
            if clashes:
                logger.warning(
                    f"Accept rejected for {entry.user_id}: {len(clashes)} overlapping meeting(s), "
                    f"first at {clashes[0].start.isoformat()}"
                )
                raise ConflictError(entry.user_id, message="Meeting conflicts with your existing schedule")

        entry.status = target
        return entry


def merge_roster(previous: Iterable[AttendeeEntry], user_ids: Iterable[str]) -> List[AttendeeEntry]:
    """Build the roster for ``user_ids`` from the previous entries.

    Retained users keep their status, dropped users lose their entry, new
    users start pending.
    """
    prior = {entry.user_id: entry.status for entry in previous}
    return [AttendeeEntry(user_id, prior.get(user_id, AttendeeStatus.PENDING)) for user_id in user_ids]
