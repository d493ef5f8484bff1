"""Chat message repository for database operations."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resume_match_core.models.chat import ChatTurn
from resume_match_infra.db.models import ChatMessageModel


class ChatRepository:
    """Append-only storage of chat turns."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize with an async session."""
        self._session = session

    async def append_turns(self, application_id: str, turns: list[ChatTurn]) -> None:
        """Stage turns for one application in the given order."""
        self._session.add_all(
            [
                ChatMessageModel(
                    application_id=application_id,
                    role=turn.role,
                    content=turn.content,
                    created_at=turn.created_at,
                )
                for turn in turns
            ]
        )
        await self._session.flush()

    async def get_recent_turns(self, application_id: str, limit: int) -> list[ChatTurn]:
        """The latest turns, newest first."""
        stmt = (
            select(ChatMessageModel)
            .where(ChatMessageModel.application_id == application_id)
            .order_by(ChatMessageModel.created_at.desc(), ChatMessageModel.id.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_turn(row) for row in result.scalars().all()]

    async def list_history(
        self, application_id: str, limit: int = 50, offset: int = 0
    ) -> list[ChatTurn]:
        """Turns in chronological order with pagination."""
        stmt = (
            select(ChatMessageModel)
            .where(ChatMessageModel.application_id == application_id)
            .order_by(ChatMessageModel.created_at.asc(), ChatMessageModel.id.asc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        return [self._to_turn(row) for row in result.scalars().all()]

    @staticmethod
    def _to_turn(row: ChatMessageModel) -> ChatTurn:
        """Convert an ORM row into a domain turn."""
        return ChatTurn(role=row.role, content=row.content, created_at=row.created_at)  # type: ignore[arg-type]
