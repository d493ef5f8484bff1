"""Text embedding: local (sentence-transformers) and Voyage API providers, plus a checked client."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import structlog

from resume_match_core.exceptions import ProviderError

if TYPE_CHECKING:
    from resume_match_core.config.settings import Settings
    from resume_match_core.interfaces.embedder import EmbedderBase

logger = structlog.get_logger()


class LocalEmbedder:
    """sentence-transformers embedder; runs on the local CPU/GPU, no API key.

    Vectors are unit-normalized, so L2 ranking of chunks matches cosine ranking.
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", batch_size: int = 32) -> None:
        """Initialize with a model name; the model loads on first use."""
        self._model_name = model_name
        self._batch_size = batch_size
        self._model: Any = None

    def _get_model(self) -> Any:  # noqa: ANN401
        """Load the sentence transformer once per embedder."""
        if self._model is None:
            from sentence_transformers import SentenceTransformer

            logger.info("embedding_model_loading", model=self._model_name)
            self._model = SentenceTransformer(self._model_name)
        return self._model

    async def embed_text(self, text: str) -> list[float]:
        """Embed one question."""
        model = self._get_model()
        embedding = await asyncio.to_thread(model.encode, text, normalize_embeddings=True)
        return [float(x) for x in embedding]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed document chunks in model batches, keeping input order."""
        if not texts:
            return []
        model = self._get_model()
        embeddings = await asyncio.to_thread(
            model.encode,
            texts,
            batch_size=self._batch_size,
            normalize_embeddings=True,
        )
        return [[float(x) for x in row] for row in embeddings]


class VoyageEmbedder:
    """Voyage AI embeddings via HTTP.

    Questions are sent as queries and chunks as documents, which is how
    Voyage expects retrieval pairs to be embedded.
    """

    API_URL = "https://api.voyageai.com/v1/embeddings"

    def __init__(self, api_key: str, model: str = "voyage-2", timeout: float = 60.0) -> None:
        """Initialize with a Voyage API key and model."""
        self._api_key = api_key
        self._model = model
        self._timeout = timeout

    async def embed_text(self, text: str) -> list[float]:
        """Embed one question."""
        results = await self._post([text], input_type="query")
        return results[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed document chunks with one request."""
        if not texts:
            return []
        return await self._post(texts, input_type="document")

    async def _post(self, texts: list[str], input_type: str) -> list[list[float]]:
        """Call the embeddings endpoint; rows are re-ordered by their index."""
        import httpx

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(
                self.API_URL,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json={"input": texts, "model": self._model, "input_type": input_type},
            )
            response.raise_for_status()
            data = response.json()["data"]
        rows = sorted(data, key=lambda item: item.get("index", 0))
        return [item["embedding"] for item in rows]


class EmbeddingClient:
    """Order-preserving embedding calls with shape checks.

    Upstream failures and shape mismatches surface as ProviderError.
    Retries are left to the caller.
    """

    def __init__(self, embedder: EmbedderBase, dimension: int | None = None) -> None:
        """Initialize with a provider and the expected vector dimension."""
        self._embedder = embedder
        self._dimension = dimension

    async def embed_one(self, text: str) -> list[float]:
        """Embed a single text."""
        try:
            vector = await self._embedder.embed_text(text)
        except Exception as e:
            logger.error("embedding_failed", count=1, error=str(e))
            raise ProviderError("Embedding service unavailable, try again later") from e
        self._check_dimension(vector)
        return vector

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Embed texts with one upstream call; result[i] belongs to texts[i]."""
        if not texts:
            return []
        try:
            vectors = await self._embedder.embed_batch(texts)
        except Exception as e:
            logger.error("embedding_failed", count=len(texts), error=str(e))
            raise ProviderError("Embedding service unavailable, try again later") from e

        if len(vectors) != len(texts):
            raise ProviderError(
                f"Embedding provider returned {len(vectors)} vectors for {len(texts)} texts"
            )
        for vector in vectors:
            self._check_dimension(vector)
        logger.debug("embedding_batch_complete", count=len(texts))
        return vectors

    def _check_dimension(self, vector: list[float]) -> None:
        """Reject vectors whose length differs from the configured dimension."""
        if not vector:
            raise ProviderError("Embedding provider returned an empty vector")
        if self._dimension is not None and len(vector) != self._dimension:
            raise ProviderError(
                f"Embedding dimension {len(vector)} does not match expected {self._dimension}"
            )


def build_embedder(settings: Settings) -> LocalEmbedder | VoyageEmbedder:
    """Create the embedding provider selected in settings."""
    if settings.embedding_provider == "voyage":
        assert settings.voyage_api_key is not None
        return VoyageEmbedder(
            api_key=settings.voyage_api_key.get_secret_value(),
            model=settings.voyage_model,
        )
    return LocalEmbedder(model_name=settings.embedding_model)


def build_embedding_client(settings: Settings) -> EmbeddingClient:
    """Create a checked embedding client from settings."""
    return EmbeddingClient(build_embedder(settings), dimension=settings.embedding_dimension)
