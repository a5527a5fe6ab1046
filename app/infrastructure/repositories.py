"""Infrastructure layer: Repository interfaces and implementations."""
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from app.domain.entities import AttendeeEntry, AttendeeStatus, Meeting, User
from app.domain.errors import UnknownUserError
from database.models import Meeting as MeetingRow, MeetingAttendee as AttendeeRow, User as UserRow
from utils.time import ensure_utc

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _parse_uuid(value) -> Optional[uuid.UUID]:
    """Return a UUID for ``value`` or None when it is not one."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class MeetingRepository(ABC):
    """Repository interface for Meeting persistence."""

    @abstractmethod
    def find_committed(self, participant_id: str, exclude_meeting_id: Optional[str] = None) -> List[Meeting]:
        """Meetings the participant organizes or has accepted, minus the excluded one."""
        pass

    @abstractmethod
    def find_for_participant(self, participant_id: str) -> List[Meeting]:
        """Meetings the participant organizes or is invited to, by start time."""
        pass

    @abstractmethod
    def find_by_id(self, meeting_id: str) -> Optional[Meeting]:
        pass

    @abstractmethod
    def save(self, meeting: Meeting) -> Meeting:
        """Insert or update a meeting and return the stored state."""
        pass

    @abstractmethod
    def delete_by_id(self, meeting_id: str) -> None:
        pass


class UserDirectory(ABC):
    """Read-only view of the identity system."""

    @abstractmethod
    def resolve_by_emails(self, emails: Iterable[str]) -> List[User]:
        """Resolve every e-mail or raise UnknownUserError naming the missing ones."""
        pass

    @abstractmethod
    def find_by_ids(self, user_ids: Iterable[str]) -> Dict[str, User]:
        pass

    @abstractmethod
    def search(self, query: str, exclude_user_id: Optional[str] = None) -> List[User]:
        """Case-insensitive substring match on name or e-mail."""
        pass


def _row_to_user(row: UserRow) -> User:
    return User(id=str(row.id), email=row.email, name=row.name)


def _row_to_meeting(row: MeetingRow) -> Meeting:
    return Meeting(
        id=str(row.id),
        title=row.title,
        description=row.description,
        start=ensure_utc(row.start_time),
        end=ensure_utc(row.end_time),
        location=row.location,
        organizer_id=str(row.organizer_id),
        attendees=[AttendeeEntry(str(a.user_id), AttendeeStatus(a.status)) for a in row.attendees],
        created_at=ensure_utc(row.created_at) if row.created_at else None,
        updated_at=ensure_utc(row.updated_at) if row.updated_at else None,
    )


class SqlAlchemyMeetingRepository(MeetingRepository):
    """SQLAlchemy implementation of MeetingRepository.

    Times are stored as UTC; SQLite drops tzinfo so rows are re-tagged on load.
    """

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(MeetingRow).options(selectinload(MeetingRow.attendees))

    def find_committed(self, participant_id: str, exclude_meeting_id: Optional[str] = None) -> List[Meeting]:
        pid = _parse_uuid(participant_id)
        if pid is None:
            return []
        accepted = select(AttendeeRow.meeting_id).where(
            AttendeeRow.user_id == pid,
            AttendeeRow.status == AttendeeStatus.ACCEPTED.value,
        )
        query = self._query().filter(or_(MeetingRow.organizer_id == pid, MeetingRow.id.in_(accepted)))
        excluded = _parse_uuid(exclude_meeting_id) if exclude_meeting_id else None
        if excluded is not None:
            query = query.filter(MeetingRow.id != excluded)
        return [_row_to_meeting(row) for row in query.all()]

    def find_for_participant(self, participant_id: str) -> List[Meeting]:
        pid = _parse_uuid(participant_id)
        if pid is None:
            return []
        invited = select(AttendeeRow.meeting_id).where(AttendeeRow.user_id == pid)
        rows = (
            self._query()
            .filter(or_(MeetingRow.organizer_id == pid, MeetingRow.id.in_(invited)))
            .order_by(MeetingRow.start_time, MeetingRow.created_at)
            .all()
        )
        return [_row_to_meeting(row) for row in rows]

    def find_by_id(self, meeting_id: str) -> Optional[Meeting]:
        row = self._get_row(meeting_id)
        return _row_to_meeting(row) if row else None

    def save(self, meeting: Meeting) -> Meeting:
        row = self._get_row(meeting.id) if meeting.id else None
        if row is None:
            row = MeetingRow(id=_parse_uuid(meeting.id) or uuid.uuid4())
            self.db.add(row)

        row.title = meeting.title
        row.description = meeting.description
        row.start_time = ensure_utc(meeting.start)
        row.end_time = ensure_utc(meeting.end)
        row.location = meeting.location
        row.organizer_id = _parse_uuid(meeting.organizer_id)

        # Reuse rows of retained attendees so (meeting_id, user_id) stays unique within a flush
        existing = {str(a.user_id): a for a in row.attendees}
        roster = []
        for position, entry in enumerate(meeting.attendees):
            attendee = existing.get(entry.user_id) or AttendeeRow(user_id=_parse_uuid(entry.user_id))
            attendee.status = entry.status.value
            attendee.position = position
            roster.append(attendee)
        row.attendees = roster

        self.db.commit()
        self.db.refresh(row)
        return _row_to_meeting(row)

    def delete_by_id(self, meeting_id: str) -> None:
        row = self._get_row(meeting_id)
        if row is None:
            return
        self.db.delete(row)
        self.db.commit()

    def _get_row(self, meeting_id: Optional[str]) -> Optional[MeetingRow]:
        mid = _parse_uuid(meeting_id)
        if mid is None:
            return None
        return self._query().filter(MeetingRow.id == mid).first()


class SqlAlchemyUserDirectory(UserDirectory):
    """SQLAlchemy implementation of UserDirectory over the users table."""

    def __init__(self, db: Session):
        self.db = db

    def resolve_by_emails(self, emails: Iterable[str]) -> List[User]:
        wanted = list(dict.fromkeys(normalize_email(e) for e in emails))
        if not wanted:
            return []
        rows = self.db.query(UserRow).filter(func.lower(UserRow.email).in_(wanted)).all()
        found = {normalize_email(row.email): row for row in rows}
        missing = [email for email in wanted if email not in found]
        if missing:
            raise UnknownUserError(missing)
        return [_row_to_user(found[email]) for email in wanted]

    def find_by_ids(self, user_ids: Iterable[str]) -> Dict[str, User]:
        ids = [uid for uid in (_parse_uuid(u) for u in user_ids) if uid is not None]
        if not ids:
            return {}
        rows = self.db.query(UserRow).filter(UserRow.id.in_(ids)).all()
        return {str(row.id): _row_to_user(row) for row in rows}

    def search(self, query: str, exclude_user_id: Optional[str] = None) -> List[User]:
        pattern = f"%{query.strip().lower()}%"
        q = self.db.query(UserRow).filter(
            or_(UserRow.email.ilike(pattern), UserRow.name.ilike(pattern))
        )
        excluded = _parse_uuid(exclude_user_id) if exclude_user_id else None
        if excluded is not None:
            q = q.filter(UserRow.id != excluded)
        return [_row_to_user(row) for row in q.order_by(UserRow.name).all()]
