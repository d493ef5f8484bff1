"""Chat service: access-checked grounded Q&A with persisted turns."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from resume_match_agents.services.access import ensure_application_access
from resume_match_core.exceptions import NotFoundError, ValidationError
from resume_match_core.models.application import ChatHistory
from resume_match_core.models.chat import ChatAnswer, ChatTurn
from resume_match_infra.db.repositories.application_repo import ApplicationRepository
from resume_match_infra.db.repositories.chat_repo import ChatRepository
from resume_match_infra.db.repositories.chunk_repo import (
    JobChunkRepository,
    ResumeChunkRepository,
)
from resume_match_infra.db.session import read_session, unit_of_work

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from resume_match_agents.agents.chat_assembler import ChatAssemblerAgent
    from resume_match_core.config.settings import Settings
    from resume_match_core.models.application import AuthUser

logger = structlog.get_logger()


class ChatService:
    """Answer questions about one application and keep its conversation."""

    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
        assembler: ChatAssemblerAgent | None = None,
    ) -> None:
        """Initialize with settings, a session factory, and the chat assembler.

        History reads work without an assembler.
        """
        self.settings = settings
        self._session_factory = session_factory
        self._assembler = assembler

    async def chat(self, application_id: str, question: str, user: AuthUser) -> ChatAnswer:
        """Answer a question; the user and assistant turns are stored together."""
        question = question.strip() if question else ""
        if not question:
            raise ValidationError("Question cannot be empty")
        if self._assembler is None:
            msg = "chat requires a chat assembler"
            raise ValueError(msg)

        asked_at = datetime.now(UTC)
        async with read_session(self._session_factory) as session:
            found = await ApplicationRepository(session).get_with_owners(application_id)
            if found is None:
                raise NotFoundError("Application not found")
            _, job, resume = found
            await ensure_application_access(session, user, job, resume)

            recent = await ChatRepository(session).get_recent_turns(
                application_id, self.settings.chat_history_turns
            )
            history = list(reversed(recent))

            answer = await self._assembler.chat(
                question,
                job.id,
                resume.id,
                history,
                job_chunks=JobChunkRepository(session),
                resume_chunks=ResumeChunkRepository(session),
            )

        async with unit_of_work(self._session_factory) as session:
            await ChatRepository(session).append_turns(
                application_id,
                [
                    ChatTurn(role="user", content=question, created_at=asked_at),
                    ChatTurn(role="assistant", content=answer.answer, created_at=datetime.now(UTC)),
                ],
            )

        logger.info(
            "chat_completed",
            application_id=application_id,
            user=user.external_id,
            sources_count=len(answer.sources),
        )
        return answer

    async def get_history(
        self,
        application_id: str,
        user: AuthUser,
        limit: int = 50,
        offset: int = 0,
    ) -> ChatHistory:
        """Chronological turns of one application, paginated."""
        async with read_session(self._session_factory) as session:
            found = await ApplicationRepository(session).get_with_owners(application_id)
            if found is None:
                raise NotFoundError("Application not found")
            _, job, resume = found
            await ensure_application_access(session, user, job, resume)
            messages = await ChatRepository(session).list_history(application_id, limit, offset)

        return ChatHistory(application_id=application_id, messages=messages)
