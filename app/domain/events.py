"""Domain layer: Domain events and event dispatcher."""
import logging
from abc import ABC
from typing import Protocol, List, Dict
from dataclasses import dataclass
from app.domain.entities import Meeting, AttendeeStatus

logger = logging.getLogger(__name__)


@dataclass
class DomainEvent(ABC):
    """Base class for domain events."""
    pass


@dataclass
class MeetingScheduled(DomainEvent):
    """Event fired when a meeting is created."""
    meeting: Meeting


@dataclass
class MeetingUpdated(DomainEvent):
    """Event fired when the organizer edits a meeting."""
    meeting: Meeting
    removed_attendee_ids: List[str]


@dataclass
class MeetingCancelled(DomainEvent):
    """Event fired when a meeting is deleted."""
    meeting: Meeting


@dataclass
class InvitationResponded(DomainEvent):
    """Event fired when an attendee accepts or declines."""
    meeting: Meeting
    attendee_id: str
    status: AttendeeStatus


class EventHandler(Protocol):
    """Interface for event handlers."""

    def handle(self, event: DomainEvent) -> None:
        """Handle the domain event."""
        pass


class EventDispatcher:
    """Simple event dispatcher for domain events."""

    def __init__(self):
        self._handlers: Dict[type, List[EventHandler]] = {}

    def register_handler(self, event_type: type, handler: EventHandler) -> None:
        """Register an event handler for a specific event type."""
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)

    def dispatch(self, event: DomainEvent) -> None:
        """Dispatch an event to all registered handlers."""
        event_type = type(event)
        if event_type in self._handlers:
            for handler in self._handlers[event_type]:
                handler.handle(event)


class LoggingEventHandler:
    """Records domain events in the application log."""

    def handle(self, event: DomainEvent) -> None:
        meeting = getattr(event, "meeting", None)
        if isinstance(event, InvitationResponded):
            logger.info(f"📨 {event.attendee_id} {event.status.value} '{meeting.title}' ({meeting.id})")
        elif meeting is not None:
            logger.info(f"📅 {type(event).__name__}: '{meeting.title}' ({meeting.id})")


def build_event_dispatcher() -> EventDispatcher:
    dispatcher = EventDispatcher()
    handler = LoggingEventHandler()
    for event_type in (MeetingScheduled, MeetingUpdated, MeetingCancelled, InvitationResponded):
        dispatcher.register_handler(event_type, handler)
    return dispatcher
