"""Document chunk model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Chunk(BaseModel):
    """A bounded slice of one document paired with its embedding."""

    model_config = ConfigDict(frozen=True)

    id: str | None = Field(default=None, description="Storage identifier, once persisted")
    owner_id: str = Field(description="Job or resume the chunk belongs to")
    index: int = Field(ge=0, description="0-based position within the document")
    content: str = Field(min_length=1, description="Chunk text")
    embedding: list[float] = Field(description="Embedding vector")
