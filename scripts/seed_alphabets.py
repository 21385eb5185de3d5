"""Seed the database with the built-in alphabets and letters.

Alphabet types that are already stored are skipped, so the script can be
re-run safely.

Usage:
  uv run scripts/seed_alphabets.py
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Ensure project root is on sys.path so `app` package imports resolve
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.client.fallback import BuiltinFallbackData
from app.core.db import get_session
from app.core.db_services import CatalogService


async def main() -> int:
    data = BuiltinFallbackData()
    async for session in get_session():  # get_session is an async generator
        catalog = CatalogService(session)
        for fixture in data.alphabets():
            if await catalog.get_alphabet_by_type(fixture.type) is not None:
                print(f"- {fixture.type.value}: already present, skipped")
                continue
            alphabet = await catalog.create_alphabet(
                type=fixture.type,
                name=fixture.name,
                description=fixture.description,
                total_letters=fixture.total_letters,
            )
            letters = data.letters(fixture.id)
            for letter in letters:
                await catalog.create_letter(
                    alphabet_id=alphabet.id,
                    letter=letter.letter,
                    name=letter.name,
                    pronunciation=letter.pronunciation,
                    pronunciation_guide=letter.pronunciation_guide,
                    order_position=letter.order_position,
                )
            print(f"• {fixture.type.value}: alphabet {alphabet.id} with {len(letters)} letters")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
