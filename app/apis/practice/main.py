from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db.base import get_session
from app.core.db_services import PracticeSessionService
from app.core.errors import NotFoundError, ValidationFailure
from app.core.logging import get_logger
from .schemas import (
    NotFoundDetail,
    PracticeSessionCreate,
    PracticeSessionRead,
    PracticeSessionUpdate,
)


router = APIRouter()
logger = get_logger(__name__)


@router.post(
    f"/{settings.app.version}/practice-sessions",
    response_model=PracticeSessionRead,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": NotFoundDetail}},
    tags=["practice"],
)
async def create_practice_session(
    req: PracticeSessionCreate,
    session: AsyncSession = Depends(get_session),
) -> PracticeSessionRead:
    try:
        practice = await PracticeSessionService(session).create_session(
            alphabet_id=req.alphabet_id,
            session_type=req.session_type,
            total_cards=req.total_cards,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.to_detail())
    except ValidationFailure as e:
        raise HTTPException(status_code=422, detail=e.message)
    return PracticeSessionRead.model_validate(practice)


@router.patch(
    f"/{settings.app.version}/practice-sessions/{{session_id}}",
    response_model=Optional[PracticeSessionRead],
    tags=["practice"],
)
async def update_practice_session(
    session_id: int,
    req: PracticeSessionUpdate,
    session: AsyncSession = Depends(get_session),
) -> Optional[PracticeSessionRead]:
    """Apply the fields that were sent; null when there was nothing to update
    or the session does not exist."""
    try:
        practice = await PracticeSessionService(session).update_session(
            session_id, req.changes()
        )
    except ValidationFailure as e:
        logger.info(
            "Rejected update for session %s: %s",
            session_id,
            e.message,
            extra={"session_id": session_id},
        )
        raise HTTPException(status_code=422, detail=e.message)
    if practice is None:
        return None
    return PracticeSessionRead.model_validate(practice)
