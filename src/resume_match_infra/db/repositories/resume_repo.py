"""Resume repository for database operations."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from resume_match_infra.db.models import ResumeModel


class ResumeRepository:
    """CRUD operations for resumes."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize with an async session."""
        self._session = session

    async def get_by_id(self, resume_id: str) -> ResumeModel | None:
        """Retrieve a resume by ID."""
        return await self._session.get(ResumeModel, resume_id)

    async def create(self, model: ResumeModel) -> ResumeModel:
        """Create a resume record."""
        self._session.add(model)
        await self._session.flush()
        return model
