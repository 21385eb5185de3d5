"""Letter sampling for practice rounds.

The whole letter set of one alphabet is returned in a uniform random order;
the session's ``total_cards`` does not limit the sample. Shuffling happens in
the application (``random.Random.shuffle`` is Fisher-Yates) so the order is
portable across databases and reproducible when a seed is injected.
"""

from __future__ import annotations

import random
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.schemas.alphabets import Letter
from app.core.db_services import CatalogService


class LetterSampler:
    def __init__(
        self,
        session: AsyncSession,
        rng: Optional[Union[random.Random, int]] = None,
    ) -> None:
        self.catalog = CatalogService(session)
        if isinstance(rng, random.Random):
            self.rng = rng
        else:
            # None seeds from OS entropy
            self.rng = random.Random(rng)

    async def sample(self, alphabet_id: int) -> list[Letter]:
        letters = await self.catalog.list_letters_by_alphabet(alphabet_id)
        self.rng.shuffle(letters)
        return letters
