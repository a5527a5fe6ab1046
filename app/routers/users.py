from fastapi import APIRouter, Depends, HTTPException
import logging

from app.dependencies import get_current_user_id, get_user_directory
from app.infrastructure.repositories import UserDirectory
from app.schemas import UserSearchEnvelope, UserSummary

router = APIRouter(prefix="/api/users", tags=["users"])
logger = logging.getLogger(__name__)


@router.get("/search", response_model=UserSearchEnvelope)
def search_users(
    query: str = "",
    actor_id: str = Depends(get_current_user_id),
    directory: UserDirectory = Depends(get_user_directory),
):
    """Find teammates to invite by name or e-mail; the caller is excluded."""
    if not query.strip():
        raise HTTPException(status_code=400, detail="Search query is required")
    users = [UserSummary.from_user(u) for u in directory.search(query, exclude_user_id=actor_id)]
    return UserSearchEnvelope(count=len(users), users=users)
