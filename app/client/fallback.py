"""Built-in data shown when the backend cannot be reached.

The controller only talks to the FallbackDataProvider protocol, so tests and
alternative front-ends can swap the dataset out.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from app.modules.alphabets.models import AlphabetRead, AlphabetType, LetterRead


FIXTURE_CREATED_AT = datetime(2024, 1, 1)

# Max letters used for an offline practice round
FALLBACK_PRACTICE_SIZE = 3


class FallbackDataProvider(Protocol):
    def alphabets(self) -> list[AlphabetRead]: ...

    def letters(self, alphabet_id: int) -> list[LetterRead]: ...


class BuiltinFallbackData:
    """A handful of alphabets with their first three letters."""

    def __init__(self) -> None:
        self._alphabets = [
            _alphabet(1, AlphabetType.FRENCH, "French Alphabet", "The standard French alphabet with 26 letters", 26),
            _alphabet(2, AlphabetType.GERMAN, "German Alphabet", "German alphabet including umlauts and ß", 30),
            _alphabet(3, AlphabetType.HEBREW, "Hebrew Alphabet", "The Hebrew alphabet with 22 letters", 22),
            _alphabet(4, AlphabetType.GEORGIAN, "Georgian Alphabet", "The Georgian Mkhedruli script with 33 letters", 33),
        ]
        rows = [
            (1, 1, "A", "A", "/a/", 'Like "ah"'),
            (2, 1, "B", "Bé", "/be/", 'Like "bay"'),
            (3, 1, "C", "Cé", "/se/", 'Like "say"'),
            (4, 2, "A", "A", "/aː/", 'Long "ah"'),
            (5, 2, "Ä", "Ä", "/ɛː/", 'Like "air"'),
            (6, 2, "B", "Be", "/beː/", 'Like "bay"'),
            (7, 3, "א", "Aleph", "silent", "Silent letter"),
            (8, 3, "ב", "Bet", "/b/ or /v/", "B or V sound"),
            (9, 3, "ג", "Gimel", "/g/", "G sound"),
            (10, 4, "ა", "An", "/a/", 'Like "ah"'),
            (11, 4, "ბ", "Ban", "/b/", "B sound"),
            (12, 4, "გ", "Gan", "/g/", "G sound"),
        ]
        self._letters: dict[int, list[LetterRead]] = {}
        for letter_id, alphabet_id, glyph, name, pron, guide in rows:
            bucket = self._letters.setdefault(alphabet_id, [])
            bucket.append(
                LetterRead(
                    id=letter_id,
                    alphabet_id=alphabet_id,
                    letter=glyph,
                    name=name,
                    pronunciation=pron,
                    pronunciation_guide=guide,
                    order_position=len(bucket) + 1,
                    created_at=FIXTURE_CREATED_AT,
                )
            )

    def alphabets(self) -> list[AlphabetRead]:
        return list(self._alphabets)

    def letters(self, alphabet_id: int) -> list[LetterRead]:
        return list(self._letters.get(alphabet_id, []))


class EmptyFallbackData:
    """Provider with no data; useful where offline demo content is unwanted."""

    def alphabets(self) -> list[AlphabetRead]:
        return []

    def letters(self, alphabet_id: int) -> list[LetterRead]:
        return []


def _alphabet(
    id: int, type: AlphabetType, name: str, description: str, total: int
) -> AlphabetRead:
    return AlphabetRead(
        id=id,
        type=type,
        name=name,
        description=description,
        total_letters=total,
        created_at=FIXTURE_CREATED_AT,
    )
