"""
Unit tests for database models.
"""
import pytest
import uuid
from datetime import datetime, timedelta, timezone
from sqlalchemy.exc import IntegrityError

from database.models import User, Meeting, MeetingAttendee


def _meeting(organizer, start=None, hours=1, **kwargs):
    start = start or datetime(2030, 1, 15, 10, tzinfo=timezone.utc)
    return Meeting(
        title=kwargs.pop("title", "Planning"),
        start_time=start,
        end_time=start + timedelta(hours=hours),
        organizer_id=organizer.id,
        **kwargs,
    )


class TestUserModel:
    """Test User model functionality."""

    def test_create_user(self, test_db_session):
        user = User(name="Jane Doe", email="jane@example.com")
        test_db_session.add(user)
        test_db_session.commit()

        assert isinstance(user.id, uuid.UUID)
        assert user.created_at is not None

    def test_email_is_unique(self, test_db_session, alice):
        test_db_session.add(User(name="Other Alice", email="alice@example.com"))
        with pytest.raises(IntegrityError):
            test_db_session.commit()
        test_db_session.rollback()

    def test_name_required(self, test_db_session):
        test_db_session.add(User(email="nameless@example.com"))
        with pytest.raises(IntegrityError):
            test_db_session.commit()
        test_db_session.rollback()


class TestMeetingModel:
    """Test Meeting model functionality."""

    def test_create_meeting_with_attendees(self, test_db_session, alice, bob, carol):
        meeting = _meeting(alice, description="Quarterly", location="Room 2")
        meeting.attendees = [
            MeetingAttendee(user_id=bob.id, position=0),
            MeetingAttendee(user_id=carol.id, status="accepted", position=1),
        ]
        test_db_session.add(meeting)
        test_db_session.commit()
        test_db_session.refresh(meeting)

        assert isinstance(meeting.id, uuid.UUID)
        assert [a.user_id for a in meeting.attendees] == [bob.id, carol.id]
        assert meeting.attendees[0].status == "pending"
        assert meeting.created_at is not None

    def test_end_must_follow_start(self, test_db_session, alice):
        test_db_session.add(_meeting(alice, hours=0))
        with pytest.raises(IntegrityError):
            test_db_session.commit()
        test_db_session.rollback()

    def test_attendee_unique_per_meeting(self, test_db_session, alice, bob):
        meeting = _meeting(alice)
        meeting.attendees = [
            MeetingAttendee(user_id=bob.id, position=0),
            MeetingAttendee(user_id=bob.id, position=1),
        ]
        test_db_session.add(meeting)
        with pytest.raises(IntegrityError):
            test_db_session.commit()
        test_db_session.rollback()

    def test_deleting_meeting_removes_attendees(self, test_db_session, alice, bob):
        meeting = _meeting(alice)
        meeting.attendees = [MeetingAttendee(user_id=bob.id, position=0)]
        test_db_session.add(meeting)
        test_db_session.commit()

        test_db_session.delete(meeting)
        test_db_session.commit()

        assert test_db_session.query(MeetingAttendee).count() == 0
