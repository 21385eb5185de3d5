"""Pydantic models for alphabets, letters and practice sessions.

These are the wire shapes shared by the API handlers and the client. The
ORM models live under app.core.db.schemas.alphabets and reuse the enums
defined here.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AlphabetType(str, Enum):
    FRENCH = "french"
    POLISH = "polish"
    PORTUGUESE = "portuguese"
    GERMAN = "german"
    BELARUSIAN = "belarusian"
    GEORGIAN = "georgian"
    HEBREW = "hebrew"


class SessionType(str, Enum):
    FLASHCARD = "flashcard"
    QUIZ = "quiz"


class AlphabetRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: AlphabetType
    name: str
    description: Optional[str] = None
    total_letters: int
    created_at: datetime


class LetterRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    alphabet_id: int
    letter: str
    name: str
    pronunciation: Optional[str] = None
    pronunciation_guide: Optional[str] = None
    order_position: int
    created_at: datetime


class PracticeSessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    alphabet_id: int
    session_type: SessionType
    total_cards: int
    completed_cards: int = 0
    correct_answers: int = 0
    started_at: datetime
    completed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None


class PracticeSessionCreate(BaseModel):
    alphabet_id: int
    session_type: SessionType = SessionType.FLASHCARD
    total_cards: int = Field(..., gt=0, description="Number of cards in the round")


class PracticeSessionUpdate(BaseModel):
    """Partial update; only fields that were explicitly sent are applied."""

    completed_cards: Optional[int] = Field(None, ge=0)
    correct_answers: Optional[int] = Field(None, ge=0)
    completed_at: Optional[datetime] = None

    def changes(self) -> dict:
        data = self.model_dump(exclude_unset=True)
        # Counters are non-nullable; an explicit null for them means "unchanged"
        for key in ("completed_cards", "correct_answers"):
            if key in data and data[key] is None:
                data.pop(key)
        return data
