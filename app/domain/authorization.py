"""Domain layer: who may do what to a meeting.

Pure predicates with no side effects; the scheduling service decides whether
a False answer becomes an AuthorizationError.
"""
from app.domain.entities import Meeting


class AuthorizationGuard:

    def can_modify(self, meeting: Meeting, actor_id: str) -> bool:
        """Only the organizer may update or delete."""
        return meeting.organizer_id == actor_id

    def can_view(self, meeting: Meeting, actor_id: str) -> bool:
        """Organizer or any invited attendee, whatever their response."""
        return meeting.involves(actor_id)

    def can_respond(self, meeting: Meeting, actor_id: str) -> bool:
        """Only users on the roster respond; the organizer is never on it."""
        return meeting.attendee(actor_id) is not None
