"""Job repository for database operations."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resume_match_infra.db.models import JobModel


class JobRepository:
    """CRUD operations for job descriptions."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize with an async session."""
        self._session = session

    async def get_by_id(self, job_id: str) -> JobModel | None:
        """Retrieve a job by ID."""
        return await self._session.get(JobModel, job_id)

    async def get_by_recruiter_and_key(
        self, recruiter_user_id: str, job_key: str
    ) -> JobModel | None:
        """Retrieve a recruiter's job by its key."""
        stmt = select(JobModel).where(
            JobModel.recruiter_user_id == recruiter_user_id,
            JobModel.job_key == job_key,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, model: JobModel) -> JobModel:
        """Create a job. The (recruiter, job_key) constraint rejects duplicates."""
        self._session.add(model)
        await self._session.flush()
        return model
