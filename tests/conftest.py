from __future__ import annotations

import os
from collections.abc import AsyncIterator

# Must be set before app.core.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.db.base import Base, get_session
from app.core.db.schemas import Alphabet, AlphabetType, Letter
from app.core.db_services import CatalogService


@pytest_asyncio.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'alphabets.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture
def session_maker(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncIterator[AsyncSession]:
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def french(db_session) -> tuple[Alphabet, list[Letter]]:
    """French alphabet (26 declared) with A/B/C inserted out of order."""
    catalog = CatalogService(db_session)
    alphabet = await catalog.create_alphabet(
        type=AlphabetType.FRENCH,
        name="French Alphabet",
        description="Basic French alphabet",
        total_letters=26,
    )
    c = await catalog.create_letter(
        alphabet_id=alphabet.id, letter="C", name="Cé", order_position=3,
        pronunciation="/se/", pronunciation_guide='Like "say"',
    )
    a = await catalog.create_letter(
        alphabet_id=alphabet.id, letter="A", name="A", order_position=1,
        pronunciation="/a/", pronunciation_guide='Like "ah"',
    )
    b = await catalog.create_letter(
        alphabet_id=alphabet.id, letter="B", name="Bé", order_position=2,
    )
    return alphabet, [a, b, c]


@pytest_asyncio.fixture
async def http_client(session_maker) -> AsyncIterator[httpx.AsyncClient]:
    """ASGI client for the FastAPI app, bound to the per-test database."""
    from main import app

    async def _session_override() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _session_override
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
