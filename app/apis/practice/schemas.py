from __future__ import annotations

from pydantic import BaseModel

from app.modules.alphabets.models import (
    PracticeSessionCreate,
    PracticeSessionRead,
    PracticeSessionUpdate,
    SessionType,
)


class NotFoundDetail(BaseModel):
    error: str = "not_found"
    resource: str
    id: int


__all__ = [
    "NotFoundDetail",
    "PracticeSessionCreate",
    "PracticeSessionRead",
    "PracticeSessionUpdate",
    "SessionType",
]
