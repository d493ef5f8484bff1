"""Tests for database repositories using SQLite."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from resume_match_core.exceptions import EmbeddingDimensionError
from resume_match_core.models.chat import ChatTurn
from resume_match_infra.db.models import (
    ApplicationModel,
    Base,
    JobModel,
    ResumeModel,
)
from resume_match_infra.db.repositories.application_repo import ApplicationRepository
from resume_match_infra.db.repositories.chat_repo import ChatRepository
from resume_match_infra.db.repositories.chunk_repo import (
    JobChunkRepository,
    ResumeChunkRepository,
)
from resume_match_infra.db.repositories.job_repo import JobRepository
from resume_match_infra.db.repositories.resume_repo import ResumeRepository
from resume_match_infra.db.repositories.user_repo import UserRepository
from resume_match_infra.db.session import create_session_factory


@pytest.fixture
async def session() -> AsyncSession:  # type: ignore[misc]
    """Create an in-memory SQLite session for testing."""
    engine = create_async_engine("sqlite+aiosqlite://", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = create_session_factory(engine)
    async with factory() as sess:
        yield sess  # type: ignore[misc]
    await engine.dispose()


async def _seed(session: AsyncSession) -> tuple[JobModel, ResumeModel]:
    """Create a recruiter job and a candidate resume."""
    users = UserRepository(session)
    recruiter = await users.upsert("rec-1", "recruiter")
    candidate = await users.upsert("cand-1", "candidate")
    job = await JobRepository(session).create(
        JobModel(recruiter_user_id=recruiter.id, job_key="k1", title="T", jd_text="jd")
    )
    resume = await ResumeRepository(session).create(
        ResumeModel(candidate_user_id=candidate.id, raw_text="resume", metadata_json={})
    )
    return job, resume


@pytest.mark.unit
class TestUserRepository:
    """Test UserRepository upsert."""

    async def test_upsert_creates_once(self, session: AsyncSession) -> None:
        """Upserting the same external id returns the same row."""
        repo = UserRepository(session)
        first = await repo.upsert("ext-1", "candidate")
        second = await repo.upsert("ext-1", "recruiter")
        assert first.id == second.id
        assert second.role == "candidate"

    async def test_get_by_external_id_missing(self, session: AsyncSession) -> None:
        """Unknown external ids return None."""
        assert await UserRepository(session).get_by_external_id("nobody") is None


@pytest.mark.unit
class TestJobRepository:
    """Test JobRepository lookups and uniqueness."""

    async def test_get_by_recruiter_and_key(self, session: AsyncSession) -> None:
        """A recruiter's job is found by key."""
        job, _ = await _seed(session)
        found = await JobRepository(session).get_by_recruiter_and_key(job.recruiter_user_id, "k1")
        assert found is not None
        assert found.id == job.id

    async def test_duplicate_key_rejected(self, session: AsyncSession) -> None:
        """The storage constraint rejects a second job with the same key."""
        job, _ = await _seed(session)
        with pytest.raises(IntegrityError):
            await JobRepository(session).create(
                JobModel(recruiter_user_id=job.recruiter_user_id, job_key="k1", jd_text="again")
            )


@pytest.mark.unit
class TestChunkRepositories:
    """Test chunk storage and nearest-neighbour queries."""

    async def test_add_and_get_in_order(self, session: AsyncSession) -> None:
        """Chunks are stored with contiguous indices."""
        job, _ = await _seed(session)
        repo = JobChunkRepository(session)
        await repo.add_chunks(job.id, ["a", "b", "c"], [[0.0, 0.0], [1.0, 0.0], [2.0, 0.0]])
        chunks = await repo.get_chunks_by_owner(job.id)
        assert [c.index for c in chunks] == [0, 1, 2]
        assert [c.content for c in chunks] == ["a", "b", "c"]
        assert chunks[1].embedding == [1.0, 0.0]
        assert chunks[0].owner_id == job.id

    async def test_mismatched_lengths_rejected(self, session: AsyncSession) -> None:
        """Every chunk needs exactly one embedding."""
        job, _ = await _seed(session)
        with pytest.raises(ValueError, match="2 chunks but 1 embeddings"):
            await JobChunkRepository(session).add_chunks(job.id, ["a", "b"], [[0.0]])

    async def test_nearest_chunks_scoped_and_ordered(self, session: AsyncSession) -> None:
        """Nearest query ranks only the owner's chunks by distance."""
        job, resume = await _seed(session)
        resumes = ResumeChunkRepository(session)
        await resumes.add_chunks(resume.id, ["far", "near", "mid"], [[9.0], [1.0], [3.0]])
        await JobChunkRepository(session).add_chunks(job.id, ["jd"], [[0.0]])

        hits = await resumes.nearest_chunks(resume.id, [0.0], k=2)
        assert [h.content for h in hits] == ["near", "mid"]
        assert hits[0].distance == pytest.approx(1.0)

    async def test_nearest_chunks_no_chunks(self, session: AsyncSession) -> None:
        """An owner without chunks yields no hits."""
        assert await JobChunkRepository(session).nearest_chunks("missing", [0.0], k=5) == []

    async def test_nearest_dimension_mismatch(self, session: AsyncSession) -> None:
        """Querying with another dimension fails fast."""
        job, _ = await _seed(session)
        repo = JobChunkRepository(session)
        await repo.add_chunks(job.id, ["a"], [[1.0, 2.0]])
        with pytest.raises(EmbeddingDimensionError):
            await repo.nearest_chunks(job.id, [1.0, 2.0, 3.0], k=5)


@pytest.mark.unit
class TestApplicationRepository:
    """Test application reads."""

    async def test_get_with_owners(self, session: AsyncSession) -> None:
        """The job and resume are loaded alongside the application."""
        job, resume = await _seed(session)
        app = await ApplicationRepository(session).create(
            ApplicationModel(job_id=job.id, resume_id=resume.id, match_score=70)
        )
        found = await ApplicationRepository(session).get_with_owners(app.id)
        assert found is not None
        assert found[1].id == job.id
        assert found[2].id == resume.id

    async def test_get_with_owners_missing(self, session: AsyncSession) -> None:
        """Unknown ids return None."""
        assert await ApplicationRepository(session).get_with_owners("nope") is None

    async def test_list_by_job_newest_first(self, session: AsyncSession) -> None:
        """Listing joins the candidate external id and sorts newest first."""
        job, resume = await _seed(session)
        repo = ApplicationRepository(session)
        base = datetime(2024, 1, 1, tzinfo=UTC)
        older = await repo.create(
            ApplicationModel(job_id=job.id, resume_id=resume.id, match_score=10, created_at=base)
        )
        newer = await repo.create(
            ApplicationModel(
                job_id=job.id,
                resume_id=resume.id,
                match_score=90,
                created_at=base + timedelta(days=1),
            )
        )
        rows = await repo.list_by_job(job.id)
        assert [a.id for a, _ in rows] == [newer.id, older.id]
        assert {ext for _, ext in rows} == {"cand-1"}


@pytest.mark.unit
class TestChatRepository:
    """Test chat turn ordering."""

    async def test_recent_newest_first_and_history_chronological(
        self, session: AsyncSession
    ) -> None:
        """Recent turns come newest first; history is chronological and paginated."""
        job, resume = await _seed(session)
        app = await ApplicationRepository(session).create(
            ApplicationModel(job_id=job.id, resume_id=resume.id, match_score=50)
        )
        same_time = datetime(2024, 1, 1, 12, 0)
        repo = ChatRepository(session)
        await repo.append_turns(
            app.id,
            [
                ChatTurn(role="user", content="q1", created_at=same_time),
                ChatTurn(role="assistant", content="a1", created_at=same_time),
                ChatTurn(role="user", content="q2", created_at=same_time + timedelta(minutes=1)),
            ],
        )

        recent = await repo.get_recent_turns(app.id, limit=2)
        assert [t.content for t in recent] == ["q2", "a1"]

        history = await repo.list_history(app.id)
        assert [t.content for t in history] == ["q1", "a1", "q2"]
        page = await repo.list_history(app.id, limit=1, offset=1)
        assert [t.content for t in page] == ["a1"]
