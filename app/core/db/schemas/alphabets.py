from __future__ import annotations

from datetime import datetime
from typing import Optional
from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
    Enum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db.base import Base
from app.modules.alphabets.models import AlphabetType, SessionType


def _enum_values(enum_cls) -> list[str]:
    return [m.value for m in enum_cls]


class Alphabet(Base):
    __tablename__ = "alphabets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    type: Mapped[AlphabetType] = mapped_column(
        Enum(AlphabetType, name="alphabet_type", values_callable=_enum_values),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Declared count; not checked against the stored letters
    total_letters: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    letters: Mapped[list["Letter"]] = relationship(
        "Letter", back_populates="alphabet", order_by="Letter.order_position"
    )
    practice_sessions: Mapped[list["PracticeSession"]] = relationship(
        "PracticeSession", back_populates="alphabet"
    )


class Letter(Base):
    __tablename__ = "letters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    alphabet_id: Mapped[int] = mapped_column(
        ForeignKey("alphabets.id"), nullable=False, index=True
    )
    letter: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    pronunciation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    pronunciation_guide: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_position: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )

    alphabet: Mapped["Alphabet"] = relationship("Alphabet", back_populates="letters")


class PracticeSession(Base):
    __tablename__ = "practice_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    alphabet_id: Mapped[int] = mapped_column(
        ForeignKey("alphabets.id"), nullable=False, index=True
    )
    session_type: Mapped[SessionType] = mapped_column(
        Enum(SessionType, name="session_type", values_callable=_enum_values),
        nullable=False,
    )
    total_cards: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_cards: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    correct_answers: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )
    # Null until the round ends; a value marks the session as completed
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    alphabet: Mapped["Alphabet"] = relationship(
        "Alphabet", back_populates="practice_sessions"
    )


__all__ = [
    "AlphabetType",
    "SessionType",
    "Alphabet",
    "Letter",
    "PracticeSession",
]
