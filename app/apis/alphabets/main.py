from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db.base import get_session
from app.core.db_services import CatalogService
from app.core.logging import get_logger
from app.modules.practice.sampler import LetterSampler
from .schemas import AlphabetRead, AlphabetType, LetterRead


router = APIRouter()
logger = get_logger(__name__)


async def get_sampler(session: AsyncSession = Depends(get_session)) -> LetterSampler:
    return LetterSampler(session)


@router.get(
    f"/{settings.app.version}/alphabets",
    response_model=list[AlphabetRead],
    tags=["alphabets"],
)
async def list_alphabets(
    session: AsyncSession = Depends(get_session),
) -> list[AlphabetRead]:
    rows = await CatalogService(session).list_alphabets()
    return [AlphabetRead.model_validate(a) for a in rows]


@router.get(
    f"/{settings.app.version}/alphabets/by-type/{{alphabet_type}}",
    response_model=Optional[AlphabetRead],
    tags=["alphabets"],
)
async def get_alphabet_by_type(
    alphabet_type: AlphabetType,
    session: AsyncSession = Depends(get_session),
) -> Optional[AlphabetRead]:
    """Alphabet of the given type, or null when none is stored."""
    alphabet = await CatalogService(session).get_alphabet_by_type(alphabet_type)
    if alphabet is None:
        return None
    return AlphabetRead.model_validate(alphabet)


@router.get(
    f"/{settings.app.version}/alphabets/{{alphabet_id}}/letters",
    response_model=list[LetterRead],
    tags=["letters"],
)
async def list_letters_by_alphabet(
    alphabet_id: int,
    session: AsyncSession = Depends(get_session),
) -> list[LetterRead]:
    rows = await CatalogService(session).list_letters_by_alphabet(alphabet_id)
    return [LetterRead.model_validate(letter) for letter in rows]


@router.get(
    f"/{settings.app.version}/alphabets/{{alphabet_id}}/letters/random",
    response_model=list[LetterRead],
    tags=["letters"],
)
async def sample_letters(
    alphabet_id: int,
    sampler: LetterSampler = Depends(get_sampler),
) -> list[LetterRead]:
    """All letters of the alphabet, shuffled for a practice round."""
    rows = await sampler.sample(alphabet_id)
    logger.debug(
        "Sampled %s letters", len(rows), extra={"alphabet_id": alphabet_id}
    )
    return [LetterRead.model_validate(letter) for letter in rows]


@router.get(
    f"/{settings.app.version}/letters/{{letter_id}}",
    response_model=Optional[LetterRead],
    tags=["letters"],
)
async def get_letter_by_id(
    letter_id: int,
    session: AsyncSession = Depends(get_session),
) -> Optional[LetterRead]:
    letter = await CatalogService(session).get_letter_by_id(letter_id)
    if letter is None:
        return None
    return LetterRead.model_validate(letter)
