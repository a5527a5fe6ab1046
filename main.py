"""
Team Meeting Scheduler
FastAPI app exposing conflict-free meeting scheduling for teammates.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import uuid
from contextlib import asynccontextmanager
import logging

from app.config import get_settings
from app.domain.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    SchedulingError,
    ValidationError,
)
from database.connection import create_tables
from app.routers import all_routers

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("startup")

ERROR_STATUS = {
    ValidationError: 400,
    AuthorizationError: 403,
    NotFoundError: 404,
    ConflictError: 409,
}

@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover
    create_tables()
    logger.info(f"🚀 Team Meeting Scheduler started ({settings.environment})")
    yield
    logger.info("👋 Lifespan shutdown")

app = FastAPI(
    title="Team Meeting Scheduler",
    description="Propose and manage meetings with teammates without double-booking anyone",
    version="1.0.0",
    lifespan=lifespan,
)

def _include_routers(app: FastAPI):
    for router in all_routers:
        app.include_router(router)
        app.include_router(router, prefix="/v1")


@app.get("/")
async def root():
    return {"name": "Team Meeting Scheduler", "status": "running", "version": "1.0.0"}


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):  # pragma: no cover
    rid = str(uuid.uuid4())
    request.state.request_id = rid
    response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    return response


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    status_code = next((code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 400)
    content = {"success": False, "error": exc.message}
    if isinstance(exc, ConflictError):
        content["conflict"] = {"user_id": exc.party_id, "name": exc.party_name}
    logger.info(f"{request.method} {request.url.path} -> {status_code} {exc.__class__.__name__}")
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):  # pragma: no cover
    logger.exception("Unhandled error")
    return JSONResponse(status_code=500, content={
        "error": {"type": exc.__class__.__name__, "message": str(exc)},
        "request_id": getattr(request.state, "request_id", None)
    })

_include_routers(app)

if __name__ == "__main__":  # pragma: no cover
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port)
