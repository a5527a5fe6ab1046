"""Pydantic models for request/response bodies.

Adding explicit schemas improves validation, documentation and reduces
ad-hoc dict access complexity inside route handlers. Business rules (title,
time range, known attendees) are enforced by the scheduling service so
every caller gets the same errors.
"""
from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from app.domain.entities import AttendeeStatus, Meeting, MeetingDraft, MeetingPatch, User
from utils.time import iso_utc


class MeetingCreateRequest(BaseModel):
    title: str
    description: Optional[str] = None
    start_time: datetime = Field(description="ISO8601; naive values are treated as UTC")
    end_time: datetime
    location: Optional[str] = None
    attendees: List[str] = Field(default_factory=list, description="Attendee e-mail addresses")

    def to_draft(self) -> MeetingDraft:
        return MeetingDraft(
            title=self.title,
            description=self.description,
            start=self.start_time,
            end=self.end_time,
            location=self.location,
            attendee_emails=list(self.attendees),
        )


class MeetingUpdateRequest(BaseModel):
    """Every field optional; omitted fields are left unchanged."""
    title: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    attendees: Optional[List[str]] = None

    def to_patch(self) -> MeetingPatch:
        data = self.model_dump(exclude_unset=True)
        return MeetingPatch(
            title=data.get("title"),
            description=data.get("description"),
            start=data.get("start_time"),
            end=data.get("end_time"),
            location=data.get("location"),
            attendee_emails=data.get("attendees"),
        )


class RespondRequest(BaseModel):
    # Kept as a plain string so an invalid value surfaces as a scheduling ValidationError
    status: str


class UserSummary(BaseModel):
    id: str
    name: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "UserSummary":
        return cls(id=user.id, name=user.name, email=user.email)


class AttendeeResponse(BaseModel):
    user: UserSummary
    status: AttendeeStatus


class MeetingResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    start_time: str
    end_time: str
    location: Optional[str] = None
    organizer: UserSummary
    attendees: List[AttendeeResponse]
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_meeting(cls, meeting: Meeting, users: Dict[str, User]) -> "MeetingResponse":
        def summary(user_id: str) -> UserSummary:
            user = users.get(user_id)
            if user is None:
                return UserSummary(id=user_id, name="", email="")
            return UserSummary.from_user(user)

        return cls(
            id=meeting.id,
            title=meeting.title,
            description=meeting.description,
            start_time=iso_utc(meeting.start),
            end_time=iso_utc(meeting.end),
            location=meeting.location,
            organizer=summary(meeting.organizer_id),
            attendees=[AttendeeResponse(user=summary(a.user_id), status=a.status) for a in meeting.attendees],
            created_at=iso_utc(meeting.created_at) if meeting.created_at else None,
            updated_at=iso_utc(meeting.updated_at) if meeting.updated_at else None,
        )


class MeetingEnvelope(BaseModel):
    success: bool = True
    meeting: MeetingResponse


class MeetingListEnvelope(BaseModel):
    success: bool = True
    count: int
    meetings: List[MeetingResponse]


class UserSearchEnvelope(BaseModel):
    success: bool = True
    count: int
    users: List[UserSummary]


class SimpleSuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
