"""Abstract nearest-chunk retrieval interface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from resume_match_core.models.chat import RetrievedChunk


@runtime_checkable
class ChunkRetriever(Protocol):
    """Exact nearest-neighbour lookup over one document's chunks."""

    async def nearest_chunks(
        self, owner_id: str, query_vector: list[float], k: int
    ) -> list[RetrievedChunk]:
        """Return up to k chunks of owner_id ordered by ascending distance."""
        ...
