"""User repository for database operations."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resume_match_infra.db.models import UserModel


class UserRepository:
    """CRUD operations for recruiter and candidate users."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize with an async session."""
        self._session = session

    async def get_by_id(self, user_id: str) -> UserModel | None:
        """Retrieve a user by ID."""
        return await self._session.get(UserModel, user_id)

    async def get_by_external_id(self, external_id: str) -> UserModel | None:
        """Retrieve a user by identity-provider id."""
        stmt = select(UserModel).where(UserModel.external_id == external_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(self, external_id: str, role: str) -> UserModel:
        """Return the user with this external id, creating it with role if absent."""
        existing = await self.get_by_external_id(external_id)
        if existing:
            return existing
        model = UserModel(external_id=external_id, role=role)
        self._session.add(model)
        await self._session.flush()
        return model
