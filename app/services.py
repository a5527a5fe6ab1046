"""Process-wide collaborators shared by every request.

Repositories are per-request (they wrap the request's Session); the lock
registry and event dispatcher must be shared so locks actually exclude
concurrent requests.
"""
import logging
from sqlalchemy.orm import Session

from app.application.locking import ScheduleLocks
from app.application.scheduling_service import SchedulingService
from app.domain.events import build_event_dispatcher
from app.infrastructure.repositories import SqlAlchemyMeetingRepository, SqlAlchemyUserDirectory

logger = logging.getLogger(__name__)

schedule_locks = ScheduleLocks()
event_dispatcher = build_event_dispatcher()


def build_scheduling_service(db: Session) -> SchedulingService:
    return SchedulingService(
        meetings=SqlAlchemyMeetingRepository(db),
        directory=SqlAlchemyUserDirectory(db),
        locks=schedule_locks,
        events=event_dispatcher,
    )
