"""Domain layer: error taxonomy for scheduling commands.

Every error raised by the scheduling core derives from SchedulingError so the
HTTP layer can translate the whole family with a single handler.
"""
from typing import List, Optional


class SchedulingError(Exception):
    """Base class for errors surfaced to the caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SchedulingError):
    """Caller-correctable input problem (time range, title, e-mail, status)."""


class ConflictError(SchedulingError):
    """Candidate interval overlaps a participant's committed schedule."""

    def __init__(self, party_id: str, party_name: Optional[str] = None, message: Optional[str] = None):
        self.party_id = party_id
        self.party_name = party_name
        if message is None:
            message = f"Meeting conflicts with {party_name or party_id}'s schedule"
        super().__init__(message)


class AuthorizationError(SchedulingError):
    """Actor lacks the role required for the operation."""


class NotFoundError(SchedulingError):
    """Meeting id does not exist."""

    def __init__(self, message: str = "Meeting not found"):
        super().__init__(message)


class UnknownUserError(SchedulingError):
    """Raised by the user directory when e-mails cannot be resolved."""

    def __init__(self, emails: List[str]):
        self.emails = list(emails)
        super().__init__(f"Unknown users: {', '.join(self.emails)}")
