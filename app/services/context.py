"""Per-request identity passed explicitly into every core operation."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from app.services.errors import NotAuthenticatedError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RequestContext:
    """
    Authenticated caller plus the instant the request is evaluated at.

    `now` is fixed at construction so every window computed during one
    request agrees on what "today" is.
    """

    user_id: UUID
    now: datetime = field(default_factory=_utcnow)

    @classmethod
    def for_user(cls, user_id: Optional[UUID], now: Optional[datetime] = None) -> "RequestContext":
        if user_id is None:
            raise NotAuthenticatedError("Not authenticated")
        if now is None:
            return cls(user_id=user_id)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return cls(user_id=user_id, now=now)
