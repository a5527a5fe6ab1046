"""Application layer: scheduling commands and queries.

SchedulingService owns the meeting lifecycle. Every command runs as one unit
of work (read, validate, check conflicts, write) inside ScheduleLocks so two
commands touching the same participant or meeting cannot interleave between
the conflict check and the write. Nothing is retried here; a caller that
retries re-runs the whole command.
"""
from __future__ import annotations
import dataclasses
import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple, Union

from app.application.locking import ScheduleLocks, meeting_key, participant_key
from app.domain.authorization import AuthorizationGuard
from app.domain.conflicts import Interval, overlapping
from app.domain.entities import AttendeeEntry, AttendeeStatus, Meeting, MeetingDraft, MeetingPatch
from app.domain.errors import AuthorizationError, ConflictError, NotFoundError, UnknownUserError, ValidationError
from app.domain.events import (
    EventDispatcher,
    InvitationResponded,
    MeetingCancelled,
    MeetingScheduled,
    MeetingUpdated,
)
from app.domain.invitations import InvitationStateMachine, merge_roster, parse_response
from app.infrastructure.repositories import MeetingRepository, UserDirectory
from utils.time import ensure_utc

logger = logging.getLogger(__name__)


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _require_title(title: Optional[str]) -> str:
    cleaned = _clean_text(title)
    if not cleaned:
        raise ValidationError("Meeting title is required")
    return cleaned


def _require_time_range(start: Optional[datetime], end: Optional[datetime]) -> Tuple[datetime, datetime]:
    if start is None or end is None:
        raise ValidationError("Start time and end time are required")
    start, end = ensure_utc(start), ensure_utc(end)
    if end <= start:
        raise ValidationError("End time must be after start time")
    return start, end


class SchedulingService:
    """Create, update, respond to, delete and read meetings for an actor.

    Collaborators are injected; the service keeps no state of its own
    beyond the lock registry it is handed.
    """

    def __init__(
        self,
        meetings: MeetingRepository,
        directory: UserDirectory,
        locks: Optional[ScheduleLocks] = None,
        guard: Optional[AuthorizationGuard] = None,
        invitations: Optional[InvitationStateMachine] = None,
        events: Optional[EventDispatcher] = None,
    ):
        self.meetings = meetings
        self.directory = directory
        self.locks = locks or ScheduleLocks()
        self.guard = guard or AuthorizationGuard()
        self.invitations = invitations or InvitationStateMachine()
        self.events = events

    # ------------------------------------------------------------------ commands

    def create(self, draft: MeetingDraft, actor_id: str) -> Meeting:
        title = _require_title(draft.title)
        start, end = _require_time_range(draft.start, draft.end)
        attendee_ids = self._resolve_attendees(draft.attendee_emails, organizer_id=actor_id)

        meeting = Meeting(
            title=title,
            description=_clean_text(draft.description),
            start=start,
            end=end,
            location=_clean_text(draft.location),
            organizer_id=actor_id,
            attendees=[AttendeeEntry(user_id) for user_id in attendee_ids],
        )

        keys = [participant_key(actor_id)] + [participant_key(uid) for uid in attendee_ids]
        with self.locks.hold(keys):
            self._ensure_free(actor_id, meeting.interval, actor_id=actor_id)
            for entry in meeting.attendees:
                self._ensure_free(entry.user_id, meeting.interval, actor_id=actor_id)
            saved = self.meetings.save(meeting)

        logger.info(f"✅ Meeting {saved.id} created by {actor_id} with {len(saved.attendees)} attendee(s)")
        self._publish(MeetingScheduled(saved))
        return saved

    def update(self, meeting_id: str, patch: MeetingPatch, actor_id: str) -> Meeting:
        current = self._load(meeting_id)
        self._authorize(self.guard.can_modify(current, actor_id), "Not authorized to update this meeting")

        roster = None
        if patch.attendee_emails is not None:
            roster = self._resolve_attendees(patch.attendee_emails, organizer_id=current.organizer_id)

        keys = [meeting_key(meeting_id), participant_key(current.organizer_id)]
        keys += [participant_key(uid) for uid in current.attendee_ids + (roster or [])]
        with self.locks.hold(keys):
            # Re-read inside the lock; the pre-lock copy only chose the keys
            meeting = self._load(meeting_id)
            self._authorize(self.guard.can_modify(meeting, actor_id), "Not authorized to update this meeting")

            title = _require_title(patch.title) if patch.title is not None else meeting.title
            start, end = _require_time_range(
                patch.start if patch.start is not None else meeting.start,
                patch.end if patch.end is not None else meeting.end,
            )
            attendees = meeting.attendees if roster is None else merge_roster(meeting.attendees, roster)
            removed = [uid for uid in meeting.attendee_ids if uid not in {a.user_id for a in attendees}]

            updated = dataclasses.replace(
                meeting,
                title=title,
                description=_clean_text(patch.description) if patch.description is not None else meeting.description,
                start=start,
                end=end,
                location=_clean_text(patch.location) if patch.location is not None else meeting.location,
                attendees=attendees,
            )
            # Previously accepted attendees are not re-validated against the new window
            self._ensure_free(updated.organizer_id, updated.interval, actor_id=actor_id, exclude_meeting_id=updated.id)
            saved = self.meetings.save(updated)

        logger.info(f"✏️ Meeting {saved.id} updated by {actor_id}; {len(removed)} attendee(s) removed")
        self._publish(MeetingUpdated(saved, removed))
        return saved

    def respond(self, meeting_id: str, actor_id: str, status: Union[str, AttendeeStatus]) -> Meeting:
        target = parse_response(status)

        with self.locks.hold([meeting_key(meeting_id), participant_key(actor_id)]):
            meeting = self._load(meeting_id)
            self._authorize(self.guard.can_respond(meeting, actor_id), "You are not an attendee of this meeting")

            committed: Iterable[Interval] = ()
            if target is AttendeeStatus.ACCEPTED:
                committed = self._committed_intervals(actor_id, exclude_meeting_id=meeting.id)
            self.invitations.transition(meeting.attendee(actor_id), target, meeting.interval, committed)
            saved = self.meetings.save(meeting)

        logger.info(f"Attendee {actor_id} {target.value} meeting {saved.id}")
        self._publish(InvitationResponded(saved, actor_id, target))
        return saved

    def delete(self, meeting_id: str, actor_id: str) -> None:
        with self.locks.hold([meeting_key(meeting_id)]):
            meeting = self._load(meeting_id)
            self._authorize(self.guard.can_modify(meeting, actor_id), "Not authorized to delete this meeting")
            self.meetings.delete_by_id(meeting.id)

        logger.info(f"🗑️ Meeting {meeting.id} deleted by {actor_id}")
        self._publish(MeetingCancelled(meeting))

    # ------------------------------------------------------------------ queries

    def get(self, meeting_id: str, actor_id: str) -> Meeting:
        meeting = self._load(meeting_id)
        self._authorize(self.guard.can_view(meeting, actor_id), "Not authorized to view this meeting")
        return meeting

    def list(self, actor_id: str) -> List[Meeting]:
        meetings = self.meetings.find_for_participant(actor_id)
        return sorted(meetings, key=lambda m: m.start)

    # ------------------------------------------------------------------ helpers

    def _load(self, meeting_id: str) -> Meeting:
        meeting = self.meetings.find_by_id(meeting_id)
        if meeting is None:
            raise NotFoundError()
        return meeting

    def _authorize(self, allowed: bool, message: str) -> None:
        if not allowed:
            raise AuthorizationError(message)

    def _resolve_attendees(self, emails: Iterable[str], organizer_id: str) -> List[str]:
        """Resolve e-mails to unique user ids in the order given, minus the organizer."""
        emails = list(emails or [])
        if not emails:
            return []
        try:
            users = self.directory.resolve_by_emails(emails)
        except UnknownUserError as e:
            logger.warning(f"Unresolved attendee e-mails: {e.emails}")
            raise ValidationError(f"One or more attendees do not exist: {', '.join(e.emails)}") from e
        return [uid for uid in dict.fromkeys(user.id for user in users) if uid != organizer_id]

    def _committed_intervals(self, participant_id: str, exclude_meeting_id: Optional[str] = None) -> List[Interval]:
        return [m.interval for m in self.meetings.find_committed(participant_id, exclude_meeting_id)]

    def _ensure_free(
        self,
        participant_id: str,
        candidate: Interval,
        actor_id: str,
        exclude_meeting_id: Optional[str] = None,
    ) -> None:
        clashes = overlapping(candidate, self._committed_intervals(participant_id, exclude_meeting_id))
        if not clashes:
            return
        logger.warning(
            f"Conflict for {participant_id}: [{candidate.start.isoformat()}, {candidate.end.isoformat()}) "
            f"overlaps {len(clashes)} committed meeting(s)"
        )
        if participant_id == actor_id:
            raise ConflictError(participant_id, message="Meeting conflicts with your existing schedule")
        user = self.directory.find_by_ids([participant_id]).get(participant_id)
        raise ConflictError(participant_id, user.display_name if user else None)

    def _publish(self, event) -> None:
        if self.events is not None:
            self.events.dispatch(event)
