"""Shared FastAPI dependencies (actor identity, service construction).

Centralizes cross-router logic to reduce duplication.
"""
import uuid
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app import services
from app.application.scheduling_service import SchedulingService
from app.config import get_settings
from app.infrastructure.repositories import SqlAlchemyUserDirectory, UserDirectory
from database.connection import get_db


def get_current_user_id(request: Request) -> str:
    """Return the already-authenticated actor id set by the auth gateway.

    Credentials are verified upstream; this only rejects requests that
    arrive without a well-formed identity.
    """
    header = get_settings().actor_header
    raw = (request.headers.get(header) or "").strip()
    if not raw:
        raise HTTPException(status_code=401, detail="Not authorized, no identity")
    try:
        return str(uuid.UUID(raw))
    except ValueError:
        raise HTTPException(status_code=401, detail="Not authorized, malformed identity")


def get_scheduling_service(db: Session = Depends(get_db)) -> SchedulingService:
    return services.build_scheduling_service(db)


def get_user_directory(db: Session = Depends(get_db)) -> UserDirectory:
    return SqlAlchemyUserDirectory(db)
