from fastapi import APIRouter, Depends
import logging
from typing import Iterable, List

from app.application.scheduling_service import SchedulingService
from app.dependencies import get_current_user_id, get_scheduling_service, get_user_directory
from app.domain.entities import Meeting
from app.infrastructure.repositories import UserDirectory
from app.schemas import (
    MeetingCreateRequest,
    MeetingEnvelope,
    MeetingListEnvelope,
    MeetingResponse,
    MeetingUpdateRequest,
    RespondRequest,
    SimpleSuccessResponse,
)

router = APIRouter(prefix="/api/meetings", tags=["meetings"])
logger = logging.getLogger(__name__)


def _present(meetings: Iterable[Meeting], directory: UserDirectory) -> List[MeetingResponse]:
    meetings = list(meetings)
    user_ids = {m.organizer_id for m in meetings}
    for m in meetings:
        user_ids.update(m.attendee_ids)
    users = directory.find_by_ids(user_ids)
    return [MeetingResponse.from_meeting(m, users) for m in meetings]


@router.post("", status_code=201, response_model=MeetingEnvelope)
@router.post("/", status_code=201, response_model=MeetingEnvelope, include_in_schema=False)
def create_meeting(
    payload: MeetingCreateRequest,
    actor_id: str = Depends(get_current_user_id),
    service: SchedulingService = Depends(get_scheduling_service),
    directory: UserDirectory = Depends(get_user_directory),
):
    meeting = service.create(payload.to_draft(), actor_id)
    return MeetingEnvelope(meeting=_present([meeting], directory)[0])


@router.get("", response_model=MeetingListEnvelope)
@router.get("/", response_model=MeetingListEnvelope, include_in_schema=False)
def list_meetings(
    actor_id: str = Depends(get_current_user_id),
    service: SchedulingService = Depends(get_scheduling_service),
    directory: UserDirectory = Depends(get_user_directory),
):
    meetings = _present(service.list(actor_id), directory)
    return MeetingListEnvelope(count=len(meetings), meetings=meetings)


@router.get("/{meeting_id}", response_model=MeetingEnvelope)
def get_meeting(
    meeting_id: str,
    actor_id: str = Depends(get_current_user_id),
    service: SchedulingService = Depends(get_scheduling_service),
    directory: UserDirectory = Depends(get_user_directory),
):
    meeting = service.get(meeting_id, actor_id)
    return MeetingEnvelope(meeting=_present([meeting], directory)[0])


@router.put("/{meeting_id}", response_model=MeetingEnvelope)
def update_meeting(
    meeting_id: str,
    payload: MeetingUpdateRequest,
    actor_id: str = Depends(get_current_user_id),
    service: SchedulingService = Depends(get_scheduling_service),
    directory: UserDirectory = Depends(get_user_directory),
):
    meeting = service.update(meeting_id, payload.to_patch(), actor_id)
    return MeetingEnvelope(meeting=_present([meeting], directory)[0])


@router.delete("/{meeting_id}", response_model=SimpleSuccessResponse)
def delete_meeting(
    meeting_id: str,
    actor_id: str = Depends(get_current_user_id),
    service: SchedulingService = Depends(get_scheduling_service),
):
    service.delete(meeting_id, actor_id)
    return SimpleSuccessResponse(message="Meeting deleted successfully")


@router.put("/{meeting_id}/respond", response_model=MeetingEnvelope)
def respond_to_meeting(
    meeting_id: str,
    payload: RespondRequest,
    actor_id: str = Depends(get_current_user_id),
    service: SchedulingService = Depends(get_scheduling_service),
    directory: UserDirectory = Depends(get_user_directory),
):
    meeting = service.respond(meeting_id, actor_id, payload.status)
    return MeetingEnvelope(meeting=_present([meeting], directory)[0])
