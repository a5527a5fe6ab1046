"""Time utilities: timezone-aware helpers replacing naive utcnow usage."""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional

__all__ = ["utc_now", "iso_utc", "ensure_utc"]

def utc_now() -> datetime:
    """Return an aware UTC datetime."""
    return datetime.now(timezone.utc)

def ensure_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime; naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)

def iso_utc(dt: Optional[datetime] = None) -> str:
    """Return ISO8601 string with Z suffix for given datetime (defaults to now)."""
    if dt is None:
        dt = utc_now()
    return ensure_utc(dt).isoformat().replace('+00:00', 'Z')
