"""Fixtures for service tests backed by a SQLite file database."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from resume_match_infra.db.session import create_session_factory, init_db
from tests.mocks.mock_tools import FakeEmbedder


@pytest.fixture
async def session_factory(tmp_path: Path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Session factory over a fresh database file.

    A file is used so every pooled connection sees committed data.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'service.db'}")
    await init_db(engine)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def embedder() -> FakeEmbedder:
    """Deterministic embedding provider shared by ingestion and chat."""
    return FakeEmbedder()
