"""Chunk repositories with brute-force nearest-neighbour queries."""

from __future__ import annotations

import json

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from resume_match_core.models.chat import RetrievedChunk
from resume_match_core.models.chunk import Chunk
from resume_match_infra.db.models import JobChunkModel, ResumeChunkModel
from resume_match_infra.vector.similarity import find_k_nearest


class _ChunkRepository:
    """Shared chunk storage for one corpus table."""

    model: type[JobChunkModel] | type[ResumeChunkModel]
    owner_field: str

    def __init__(self, session: AsyncSession) -> None:
        """Initialize with an async session."""
        self._session = session

    async def add_chunks(
        self, owner_id: str, contents: list[str], embeddings: list[list[float]]
    ) -> list[Chunk]:
        """Store chunks for one document with contiguous indices from 0."""
        if len(contents) != len(embeddings):
            msg = f"{len(contents)} chunks but {len(embeddings)} embeddings"
            raise ValueError(msg)

        rows = [
            self.model(
                **{self.owner_field: owner_id},
                idx=idx,
                content=content,
                embedding_json=json.dumps(embedding),
            )
            for idx, (content, embedding) in enumerate(zip(contents, embeddings, strict=True))
        ]
        self._session.add_all(rows)
        await self._session.flush()
        return [self._to_chunk(row) for row in rows]

    async def get_chunks_by_owner(self, owner_id: str) -> list[Chunk]:
        """All chunks of one document in index order."""
        owner_column = getattr(self.model, self.owner_field)
        stmt = select(self.model).where(owner_column == owner_id).order_by(self.model.idx)
        result = await self._session.execute(stmt)
        return [self._to_chunk(row) for row in result.scalars().all()]

    async def nearest_chunks(
        self, owner_id: str, query_vector: list[float], k: int
    ) -> list[RetrievedChunk]:
        """Up to k chunks of one document, closest first."""
        owner_column = getattr(self.model, self.owner_field)
        stmt = select(self.model).where(owner_column == owner_id)
        result = await self._session.execute(stmt)
        rows = {row.id: row for row in result.scalars().all()}

        candidates = [(row_id, json.loads(row.embedding_json)) for row_id, row in rows.items()]
        nearest = find_k_nearest(query_vector, candidates, k=k)
        return [
            RetrievedChunk(id=row_id, content=rows[row_id].content, distance=distance)
            for row_id, distance in nearest
        ]

    def _to_chunk(self, row: JobChunkModel | ResumeChunkModel) -> Chunk:
        """Convert an ORM row into a domain chunk."""
        return Chunk(
            id=row.id,
            owner_id=getattr(row, self.owner_field),
            index=row.idx,
            content=row.content,
            embedding=json.loads(row.embedding_json),
        )


class JobChunkRepository(_ChunkRepository):
    """Chunks of job descriptions."""

    model = JobChunkModel
    owner_field = "job_id"


class ResumeChunkRepository(_ChunkRepository):
    """Chunks of resumes."""

    model = ResumeChunkModel
    owner_field = "resume_id"
