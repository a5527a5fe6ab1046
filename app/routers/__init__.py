"""Aggregate FastAPI routers for inclusion in the application."""
from . import meetings, users, health

all_routers = [
    meetings.router,
    users.router,
    health.router,
]
