"""Chat turn, retrieval, and answer models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

ChatRole = Literal["user", "assistant", "system"]
CorpusType = Literal["jd", "resume"]


class ChatTurn(BaseModel):
    """A single persisted conversation turn for one application."""

    role: ChatRole = Field(description="Speaker of this turn")
    content: str = Field(description="Turn text")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="When the turn was stored"
    )


class RetrievedChunk(BaseModel):
    """A chunk returned by a nearest-neighbour query."""

    id: str = Field(description="Chunk identifier")
    content: str = Field(description="Chunk text")
    distance: float = Field(ge=0.0, description="Vector distance to the query")


class ChatSource(BaseModel):
    """Citation for a chunk used to ground an answer."""

    type: CorpusType = Field(description="Corpus the chunk came from")
    chunk_id: str = Field(description="Chunk identifier")
    excerpt: str = Field(description="Chunk text, capped at 200 chars")


class ChatAnswer(BaseModel):
    """Answer text with the sources it was grounded on."""

    answer: str = Field(description="Model answer")
    sources: list[ChatSource] = Field(default_factory=list, description="Cited chunks")
