"""Tests for ChatService."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from resume_match_agents.agents.chat_assembler import ChatAssemblerAgent
from resume_match_agents.services.applications import ApplicationService
from resume_match_agents.services.chat import ChatService
from resume_match_agents.tools.embedder import EmbeddingClient
from resume_match_core.exceptions import (
    AuthorizationError,
    NotFoundError,
    PersistenceError,
    ProviderError,
    ValidationError,
)
from resume_match_infra.db.models import ChatMessageModel
from resume_match_infra.db.repositories.chat_repo import ChatRepository
from tests.mocks.mock_factories import candidate, make_request, recruiter
from tests.mocks.mock_llm import FakeCompletionClient
from tests.mocks.mock_settings import make_settings
from tests.mocks.mock_tools import FakeEmbedder

Factory = async_sessionmaker[AsyncSession]


async def _create_application(session_factory: Factory, embedder: FakeEmbedder) -> str:
    """Ingest the sample JD and resume in keyword mode."""
    service = ApplicationService(
        make_settings(match_mode="keyword"),
        session_factory,
        embeddings=EmbeddingClient(embedder, dimension=4),
    )
    created = await service.create_application(make_request(), recruiter())
    return created.application_id


def _chat_service(
    session_factory: Factory,
    embedder: FakeEmbedder,
    llm: FakeCompletionClient | None = None,
) -> tuple[ChatService, FakeCompletionClient]:
    """Chat service over fakes."""
    settings = make_settings()
    llm = llm or FakeCompletionClient("They have 5+ years of Python.")
    assembler = ChatAssemblerAgent(settings, llm, EmbeddingClient(embedder, dimension=4))
    return ChatService(settings, session_factory, assembler), llm


async def _message_count(session_factory: Factory) -> int:
    """Stored chat turns across all applications."""
    async with session_factory() as session:
        result = await session.execute(select(func.count()).select_from(ChatMessageModel))
        return int(result.scalar_one())


@pytest.mark.unit
class TestChat:
    """Test grounded chat with persistence."""

    async def test_answer_with_sources_and_persisted_turns(
        self, session_factory: Factory, embedder: FakeEmbedder
    ) -> None:
        """The answer cites both corpora and both turns are stored in order."""
        app_id = await _create_application(session_factory, embedder)
        service, llm = _chat_service(session_factory, embedder)

        answer = await service.chat(app_id, "  How much Python experience?  ", recruiter())

        assert answer.answer == "They have 5+ years of Python."
        assert {s.type for s in answer.sources} == {"jd", "resume"}
        assert llm.call_count == 1

        history = await service.get_history(app_id, candidate())
        assert [(t.role, t.content) for t in history.messages] == [
            ("user", "How much Python experience?"),
            ("assistant", "They have 5+ years of Python."),
        ]

    async def test_prior_turns_sent_chronologically(
        self, session_factory: Factory, embedder: FakeEmbedder
    ) -> None:
        """Earlier exchanges are replayed oldest first before the new question."""
        app_id = await _create_application(session_factory, embedder)
        llm = FakeCompletionClient("first answer", "second answer")
        service, _ = _chat_service(session_factory, embedder, llm)

        await service.chat(app_id, "first question", recruiter())
        await service.chat(app_id, "second question", recruiter())

        messages = llm.calls[1]["messages"]
        assert [m["content"] for m in messages[1:]] == [  # type: ignore[index]
            "first question",
            "first answer",
            "second question",
        ]

    async def test_history_window_limited(
        self, session_factory: Factory, embedder: FakeEmbedder
    ) -> None:
        """Only the last eight stored turns reach the prompt."""
        app_id = await _create_application(session_factory, embedder)
        service, llm = _chat_service(session_factory, embedder)
        for i in range(6):
            await service.chat(app_id, f"question {i}", recruiter())

        messages = llm.calls[-1]["messages"]
        assert len(messages) == 1 + 8 + 1  # type: ignore[arg-type]
        assert messages[1]["content"] == "question 1"  # type: ignore[index]

    @pytest.mark.parametrize("question", ["", "   "])
    async def test_blank_question_no_provider_calls(
        self, session_factory: Factory, embedder: FakeEmbedder, question: str
    ) -> None:
        """Blank questions fail before embedding or completion."""
        app_id = await _create_application(session_factory, embedder)
        service, llm = _chat_service(session_factory, embedder)
        with pytest.raises(ValidationError):
            await service.chat(app_id, question, recruiter())
        assert embedder.text_calls == []
        assert llm.call_count == 0

    async def test_unknown_application(
        self, session_factory: Factory, embedder: FakeEmbedder
    ) -> None:
        """Unknown applications are not found."""
        service, llm = _chat_service(session_factory, embedder)
        with pytest.raises(NotFoundError):
            await service.chat("missing", "hello?", recruiter())
        assert llm.call_count == 0

    async def test_access_denied_before_provider_calls(
        self, session_factory: Factory, embedder: FakeEmbedder
    ) -> None:
        """Strangers are rejected without embedding or LLM cost."""
        app_id = await _create_application(session_factory, embedder)
        service, llm = _chat_service(session_factory, embedder)
        with pytest.raises(AuthorizationError):
            await service.chat(app_id, "hello?", candidate("cand-other"))
        assert embedder.text_calls == []
        assert llm.call_count == 0
        assert await _message_count(session_factory) == 0

    async def test_provider_failure_stores_nothing(
        self, session_factory: Factory, embedder: FakeEmbedder
    ) -> None:
        """A failed completion persists neither turn."""
        app_id = await _create_application(session_factory, embedder)
        service, _ = _chat_service(
            session_factory, embedder, FakeCompletionClient(ProviderError("down"))
        )
        with pytest.raises(ProviderError):
            await service.chat(app_id, "hello?", recruiter())
        assert await _message_count(session_factory) == 0

    async def test_turns_all_or_nothing(
        self, session_factory: Factory, embedder: FakeEmbedder
    ) -> None:
        """If storing the turns fails, no turn is kept."""
        app_id = await _create_application(session_factory, embedder)
        service, _ = _chat_service(session_factory, embedder)

        original = ChatRepository.append_turns

        async def _store_then_fail(self: ChatRepository, application_id: str, turns: list) -> None:  # type: ignore[type-arg]
            await original(self, application_id, turns)
            await self._session.execute(select(func.missing_function()))

        with patch.object(ChatRepository, "append_turns", _store_then_fail):
            with pytest.raises(PersistenceError):
                await service.chat(app_id, "hello?", recruiter())
        assert await _message_count(session_factory) == 0


@pytest.mark.unit
class TestHistory:
    """Test history reads."""

    async def test_history_pagination(
        self, session_factory: Factory, embedder: FakeEmbedder
    ) -> None:
        """limit and offset page through chronological turns."""
        app_id = await _create_application(session_factory, embedder)
        llm = FakeCompletionClient("a0", "a1")
        service, _ = _chat_service(session_factory, embedder, llm)
        await service.chat(app_id, "q0", recruiter())
        await service.chat(app_id, "q1", recruiter())

        page = await service.get_history(app_id, recruiter(), limit=2, offset=1)
        assert [t.content for t in page.messages] == ["a0", "q1"]
        assert page.application_id == app_id

    async def test_history_denied(self, session_factory: Factory, embedder: FakeEmbedder) -> None:
        """Only owners can read history."""
        app_id = await _create_application(session_factory, embedder)
        service, _ = _chat_service(session_factory, embedder)
        with pytest.raises(AuthorizationError):
            await service.get_history(app_id, recruiter("rec-other"))

    async def test_history_without_assembler(
        self, session_factory: Factory, embedder: FakeEmbedder
    ) -> None:
        """History reads do not need the chat assembler."""
        app_id = await _create_application(session_factory, embedder)
        service = ChatService(make_settings(), session_factory)
        history = await service.get_history(app_id, recruiter())
        assert history.messages == []
