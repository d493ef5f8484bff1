"""Chat assembler agent: grounded answers over JD and resume chunks."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import structlog

from resume_match_agents.agents.base import BaseAgent
from resume_match_agents.prompts.chat_assembler import (
    CHAT_ASSEMBLER_SYSTEM,
    NO_CONTEXT_PLACEHOLDER,
)
from resume_match_core.constants import MAX_SOURCE_EXCERPT_CHARS
from resume_match_core.exceptions import ProviderError, ValidationError
from resume_match_core.models.chat import (
    ChatAnswer,
    ChatSource,
    ChatTurn,
    CorpusType,
    RetrievedChunk,
)

if TYPE_CHECKING:
    from resume_match_agents.tools.embedder import EmbeddingClient
    from resume_match_core.config.settings import Settings
    from resume_match_core.interfaces.completion import CompletionClient
    from resume_match_core.interfaces.retriever import ChunkRetriever

logger = structlog.get_logger()


def make_excerpt(content: str, limit: int = MAX_SOURCE_EXCERPT_CHARS) -> str:
    """Cap content at limit characters, marking truncation with '...'."""
    if len(content) > limit:
        return content[:limit] + "..."
    return content


def merge_ranked(
    job_chunks: list[RetrievedChunk],
    resume_chunks: list[RetrievedChunk],
    k_total: int,
) -> list[tuple[CorpusType, RetrievedChunk]]:
    """Merge both corpora by ascending distance and keep the closest k_total.

    Ties keep JD chunks ahead of resume chunks.
    """
    tagged: list[tuple[CorpusType, RetrievedChunk]] = [
        *(("jd", chunk) for chunk in job_chunks),
        *(("resume", chunk) for chunk in resume_chunks),
    ]
    tagged.sort(key=lambda item: item[1].distance)
    return tagged[:k_total]


def build_context(ranked: list[tuple[CorpusType, RetrievedChunk]]) -> str:
    """Concatenate chunks as '[JD]: ...' / '[RESUME]: ...' blocks."""
    return "\n\n".join(f"[{corpus.upper()}]: {chunk.content}" for corpus, chunk in ranked)


class ChatAssemblerAgent(BaseAgent):
    """Retrieve, rank, prompt, and cite for one chat question."""

    agent_name = "chat_assembler"

    def __init__(
        self,
        settings: Settings,
        llm: CompletionClient,
        embeddings: EmbeddingClient,
    ) -> None:
        """Initialize with settings, completion client, and embedding client."""
        super().__init__(settings, llm)
        self._embeddings = embeddings

    async def chat(
        self,
        question: str,
        job_id: str,
        resume_id: str,
        history: list[ChatTurn],
        *,
        job_chunks: ChunkRetriever,
        resume_chunks: ChunkRetriever,
        k_per_corpus: int | None = None,
        k_total: int | None = None,
    ) -> ChatAnswer:
        """Answer a question from the nearest JD and resume chunks.

        history must be chronological; only its last turns are used.
        """
        question = question.strip() if question else ""
        if not question:
            raise ValidationError("Question cannot be empty")

        if k_per_corpus is None:
            k_per_corpus = self.settings.chat_k_per_corpus
        if k_total is None:
            k_total = self.settings.chat_k_total
        self._log_start({"job_id": job_id, "resume_id": resume_id})
        start = time.monotonic()

        query_vector = await self._embeddings.embed_one(question)
        jd_hits = await job_chunks.nearest_chunks(job_id, query_vector, k_per_corpus)
        resume_hits = await resume_chunks.nearest_chunks(resume_id, query_vector, k_per_corpus)
        ranked = merge_ranked(jd_hits, resume_hits, k_total)

        messages = self.build_messages(question, ranked, history)
        try:
            answer = await self._call_llm(
                messages=messages,
                model=self.settings.chat_model,
                temperature=self.settings.chat_temperature,
                max_tokens=self.settings.chat_max_tokens,
            )
        except ProviderError:
            raise
        except Exception as e:
            logger.error("chat_completion_failed", error=str(e))
            raise ProviderError("Chat service unavailable, try again later") from e

        sources = [
            ChatSource(type=corpus, chunk_id=chunk.id, excerpt=make_excerpt(chunk.content))
            for corpus, chunk in ranked
        ]
        self._log_end(
            time.monotonic() - start,
            {
                "jd_hits": len(jd_hits),
                "resume_hits": len(resume_hits),
                "sources_count": len(sources),
            },
        )
        return ChatAnswer(answer=answer, sources=sources)

    def build_messages(
        self,
        question: str,
        ranked: list[tuple[CorpusType, RetrievedChunk]],
        history: list[ChatTurn],
    ) -> list[dict[str, str]]:
        """System grounding block, recent history, then the question."""
        context = build_context(ranked) or NO_CONTEXT_PLACEHOLDER
        messages = [{"role": "system", "content": CHAT_ASSEMBLER_SYSTEM.format(context=context)}]

        window = self.settings.chat_history_turns
        recent = history[-window:] if window > 0 else []
        messages.extend({"role": turn.role, "content": turn.content} for turn in recent)
        messages.append({"role": "user", "content": question})
        return messages
