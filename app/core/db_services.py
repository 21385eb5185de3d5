"""Database service classes for the alphabet catalog and practice sessions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.db.schemas.alphabets import (
    Alphabet,
    AlphabetType,
    Letter,
    PracticeSession,
    SessionType,
)
from app.core.errors import NotFoundError, ValidationFailure
from app.core.logging import get_logger


logger = get_logger(__name__)

UPDATABLE_SESSION_FIELDS = ("completed_cards", "correct_answers", "completed_at")


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class CatalogService:
    """Read access to alphabets and letters, plus the inserts used for seeding."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_alphabets(self) -> list[Alphabet]:
        result = await self.session.execute(select(Alphabet).order_by(Alphabet.id))
        return list(result.scalars().all())

    async def get_alphabet(self, alphabet_id: int) -> Optional[Alphabet]:
        result = await self.session.execute(
            select(Alphabet).where(Alphabet.id == alphabet_id)
        )
        return result.scalar_one_or_none()

    async def get_alphabet_by_type(
        self, alphabet_type: AlphabetType
    ) -> Optional[Alphabet]:
        """Return the first alphabet of the given type, or None when unused."""
        result = await self.session.execute(
            select(Alphabet)
            .where(Alphabet.type == alphabet_type)
            .order_by(Alphabet.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_letters_by_alphabet(self, alphabet_id: int) -> list[Letter]:
        """Letters of one alphabet in canonical order.

        Unknown or empty alphabets yield an empty list rather than an error.
        """
        result = await self.session.execute(
            select(Letter)
            .where(Letter.alphabet_id == alphabet_id)
            .order_by(Letter.order_position.asc(), Letter.id.asc())
        )
        return list(result.scalars().all())

    async def get_letter_by_id(self, letter_id: int) -> Optional[Letter]:
        result = await self.session.execute(select(Letter).where(Letter.id == letter_id))
        return result.scalar_one_or_none()

    async def create_alphabet(
        self,
        *,
        type: AlphabetType,
        name: str,
        total_letters: int,
        description: Optional[str] = None,
    ) -> Alphabet:
        """Create a new alphabet record."""
        if total_letters <= 0:
            raise ValidationFailure("total_letters must be a positive integer")
        alphabet = Alphabet(
            type=type,
            name=name,
            description=description,
            total_letters=total_letters,
        )
        self.session.add(alphabet)
        await self.session.commit()
        await self.session.refresh(alphabet)
        return alphabet

    async def create_letter(
        self,
        *,
        alphabet_id: int,
        letter: str,
        name: str,
        order_position: int,
        pronunciation: Optional[str] = None,
        pronunciation_guide: Optional[str] = None,
    ) -> Letter:
        """Create a letter inside an existing alphabet."""
        if order_position <= 0:
            raise ValidationFailure("order_position must be a positive integer")
        if await self.get_alphabet(alphabet_id) is None:
            raise NotFoundError("alphabet", alphabet_id)
        row = Letter(
            alphabet_id=alphabet_id,
            letter=letter,
            name=name,
            pronunciation=pronunciation,
            pronunciation_guide=pronunciation_guide,
            order_position=order_position,
        )
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        return row


class PracticeSessionService:
    """Lifecycle of practice sessions: created, progressed, completed."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.catalog = CatalogService(session)

    async def get_session(self, session_id: int) -> Optional[PracticeSession]:
        result = await self.session.execute(
            select(PracticeSession).where(PracticeSession.id == session_id)
        )
        return result.scalar_one_or_none()

    async def create_session(
        self,
        *,
        alphabet_id: int,
        session_type: SessionType,
        total_cards: int,
    ) -> PracticeSession:
        """Start a practice session against an existing alphabet.

        Raises NotFoundError carrying the alphabet id when it does not exist;
        nothing is persisted in that case.
        """
        if total_cards <= 0:
            raise ValidationFailure("total_cards must be a positive integer")
        if await self.catalog.get_alphabet(alphabet_id) is None:
            logger.warning(
                "Practice session rejected: alphabet %s not found",
                alphabet_id,
                extra={"alphabet_id": alphabet_id},
            )
            raise NotFoundError("alphabet", alphabet_id)

        practice = PracticeSession(
            alphabet_id=alphabet_id,
            session_type=session_type,
            total_cards=total_cards,
            completed_cards=0,
            correct_answers=0,
            started_at=utc_now(),
            completed_at=None,
        )
        self.session.add(practice)
        await self.session.commit()
        await self.session.refresh(practice)
        logger.info(
            "Practice session %s created (%s, %s cards)",
            practice.id,
            session_type.value,
            total_cards,
            extra={"alphabet_id": alphabet_id, "session_id": practice.id},
        )
        return practice

    async def update_session(
        self, session_id: int, changes: Mapping[str, Any]
    ) -> Optional[PracticeSession]:
        """Apply a partial update.

        Only keys present in ``changes`` are written, so ``completed_at=None``
        clears the completion time while an absent key leaves it alone. An
        empty mapping is a no-op and returns None without touching the store;
        an unknown id also returns None.
        """
        unknown = set(changes) - set(UPDATABLE_SESSION_FIELDS)
        if unknown:
            raise ValidationFailure(f"Unknown session fields: {', '.join(sorted(unknown))}")
        if not changes:
            return None

        practice = await self.get_session(session_id)
        if practice is None:
            return None

        completed_cards = changes.get("completed_cards", practice.completed_cards)
        correct_answers = changes.get("correct_answers", practice.correct_answers)
        _check_progress(practice, completed_cards, correct_answers)

        if "completed_cards" in changes:
            practice.completed_cards = completed_cards
        if "correct_answers" in changes:
            practice.correct_answers = correct_answers
        if "completed_at" in changes:
            practice.completed_at = to_naive_utc(changes["completed_at"])

        await self.session.commit()
        await self.session.refresh(practice)
        logger.info(
            "Practice session %s updated: completed=%s/%s correct=%s completed_at=%s",
            practice.id,
            practice.completed_cards,
            practice.total_cards,
            practice.correct_answers,
            practice.completed_at,
            extra={"alphabet_id": practice.alphabet_id, "session_id": practice.id},
        )
        return practice


def _check_progress(
    practice: PracticeSession, completed_cards: int, correct_answers: int
) -> None:
    if completed_cards < 0 or correct_answers < 0:
        raise ValidationFailure("Progress counters must be non-negative")
    if completed_cards < practice.completed_cards:
        raise ValidationFailure(
            f"completed_cards cannot decrease ({practice.completed_cards} -> {completed_cards})"
        )
    if correct_answers < practice.correct_answers:
        raise ValidationFailure(
            f"correct_answers cannot decrease ({practice.correct_answers} -> {correct_answers})"
        )
    if completed_cards > practice.total_cards:
        raise ValidationFailure(
            f"completed_cards ({completed_cards}) exceeds total_cards ({practice.total_cards})"
        )
    if correct_answers > completed_cards:
        raise ValidationFailure(
            f"correct_answers ({correct_answers}) exceeds completed_cards ({completed_cards})"
        )
