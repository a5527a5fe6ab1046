"""Domain layer: meeting, attendee and user value objects."""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from app.domain.conflicts import Interval


class AttendeeStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


@dataclass(slots=True)
class User:
    id: str
    email: str
    name: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.email


@dataclass(slots=True)
class AttendeeEntry:
    user_id: str
    status: AttendeeStatus = AttendeeStatus.PENDING


@dataclass(slots=True)
class Meeting:
    """A scheduled meeting owned by its organizer.

    ``attendees`` is ordered and never contains the organizer.
    """
    title: str
    start: datetime
    end: datetime
    organizer_id: str
    attendees: List[AttendeeEntry] = field(default_factory=list)
    description: Optional[str] = None
    location: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)

    @property
    def attendee_ids(self) -> List[str]:
        return [entry.user_id for entry in self.attendees]

    def attendee(self, user_id: str) -> Optional[AttendeeEntry]:
        for entry in self.attendees:
            if entry.user_id == user_id:
                return entry
        return None

    def involves(self, user_id: str) -> bool:
        return self.organizer_id == user_id or self.attendee(user_id) is not None


@dataclass(slots=True)
class MeetingDraft:
    """Input for creating a meeting."""
    title: str
    start: datetime
    end: datetime
    description: Optional[str] = None
    location: Optional[str] = None
    attendee_emails: List[str] = field(default_factory=list)


@dataclass(slots=True)
class MeetingPatch:
    """Partial update; ``None`` means the field was not provided.

    An empty ``attendee_emails`` list clears the roster.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    location: Optional[str] = None
    attendee_emails: Optional[List[str]] = None
