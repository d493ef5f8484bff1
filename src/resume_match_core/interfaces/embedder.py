"""Embedding provider interface used for chunk and question vectors."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbedderBase(Protocol):
    """Raw embedding backend.

    Backends may raise anything; EmbeddingClient turns failures and
    wrong-shaped replies into ProviderError.
    """

    async def embed_text(self, text: str) -> list[float]:
        """Vector for one question or chunk."""
        ...

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Vectors for all texts, in input order, from a single backend call."""
        ...
