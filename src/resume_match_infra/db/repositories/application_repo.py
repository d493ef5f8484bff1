"""Application repository for database operations."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resume_match_infra.db.models import (
    ApplicationModel,
    JobModel,
    ResumeModel,
    UserModel,
)


class ApplicationRepository:
    """CRUD operations for applications."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize with an async session."""
        self._session = session

    async def create(self, model: ApplicationModel) -> ApplicationModel:
        """Create an application record."""
        self._session.add(model)
        await self._session.flush()
        return model

    async def get_by_id(self, application_id: str) -> ApplicationModel | None:
        """Retrieve an application by ID."""
        return await self._session.get(ApplicationModel, application_id)

    async def get_with_owners(
        self, application_id: str
    ) -> tuple[ApplicationModel, JobModel, ResumeModel] | None:
        """Retrieve an application with its job and resume for ownership checks."""
        stmt = (
            select(ApplicationModel, JobModel, ResumeModel)
            .join(JobModel, JobModel.id == ApplicationModel.job_id)
            .join(ResumeModel, ResumeModel.id == ApplicationModel.resume_id)
            .where(ApplicationModel.id == application_id)
        )
        result = await self._session.execute(stmt)
        row = result.one_or_none()
        if row is None:
            return None
        return row[0], row[1], row[2]

    async def list_by_job(self, job_id: str) -> list[tuple[ApplicationModel, str]]:
        """Applications for a job, newest first, with the candidate's external id."""
        stmt = (
            select(ApplicationModel, UserModel.external_id)
            .join(ResumeModel, ResumeModel.id == ApplicationModel.resume_id)
            .join(UserModel, UserModel.id == ResumeModel.candidate_user_id)
            .where(ApplicationModel.job_id == job_id)
            .order_by(ApplicationModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]
