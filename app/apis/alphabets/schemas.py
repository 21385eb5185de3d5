from __future__ import annotations

from app.modules.alphabets.models import AlphabetRead, AlphabetType, LetterRead

__all__ = ["AlphabetRead", "AlphabetType", "LetterRead"]
