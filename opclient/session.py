"""Session gate — validity checks and lease computation for op sessions."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from opclient.errors import SessionError
from opclient.models import Session

# Sits under the op tool's own 30 minute idle timeout
SESSION_LEASE = timedelta(minutes=29)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def new_session(token: str, now: datetime | None = None, lease: timedelta = SESSION_LEASE) -> Session:
    """Wrap a freshly issued token with its absolute expiration instant."""
    issued = now or _now()
    return Session(token=token, expires_at=issued + lease)


def is_valid(session: Session, now: datetime | None = None) -> bool:
    """True iff the session expires strictly after ``now``."""
    return session.expires_at > (now or _now())


def require_valid(session: Session) -> None:
    if not is_valid(session):
        raise SessionError("Session invalid")
