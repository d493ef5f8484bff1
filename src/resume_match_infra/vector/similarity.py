"""Brute-force vector distance for SQLite mode (no pgvector)."""

from __future__ import annotations

import numpy as np

from resume_match_core.exceptions import EmbeddingDimensionError


def l2_distance(vec_a: list[float], vec_b: list[float]) -> float:
    """Euclidean distance between two vectors of equal dimension."""
    if len(vec_a) != len(vec_b):
        raise EmbeddingDimensionError(
            f"Cannot compare vectors of dimension {len(vec_a)} and {len(vec_b)}"
        )
    a = np.array(vec_a, dtype=np.float32)
    b = np.array(vec_b, dtype=np.float32)
    return float(np.linalg.norm(a - b))


def find_k_nearest(
    query: list[float],
    candidates: list[tuple[str, list[float]]],
    k: int = 5,
) -> list[tuple[str, float]]:
    """Find the k candidates closest to the query by Euclidean distance.

    Args:
        query: The query embedding vector.
        candidates: List of (id, embedding) tuples.
        k: Number of results to return.

    Returns:
        List of (id, distance) tuples, sorted by distance ascending.

    Raises:
        EmbeddingDimensionError: If any candidate's dimension differs from the query's.
    """
    if not candidates or k <= 0:
        return []

    dimension = len(query)
    for candidate_id, embedding in candidates:
        if len(embedding) != dimension:
            raise EmbeddingDimensionError(
                f"Chunk {candidate_id} has dimension {len(embedding)}, query has {dimension}"
            )

    query_vec = np.array(query, dtype=np.float32)
    matrix = np.array([embedding for _, embedding in candidates], dtype=np.float32)
    distances = np.linalg.norm(matrix - query_vec, axis=1)

    order = np.argsort(distances, kind="stable")[:k]
    return [(candidates[i][0], float(distances[i])) for i in order]
