"""Public interface re-exports for resume_match_core."""

from resume_match_core.interfaces.completion import CompletionClient
from resume_match_core.interfaces.embedder import EmbedderBase
from resume_match_core.interfaces.retriever import ChunkRetriever

__all__ = [
    "ChunkRetriever",
    "CompletionClient",
    "EmbedderBase",
]
