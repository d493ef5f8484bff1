"""Overlapping text windows for embedding."""

from __future__ import annotations

import re

SENTENCE_SEARCH_CHARS = 100

_SENTENCE_END_RE = re.compile(r"[.!?]\s+")


def chunk_spans(
    text: str, target_chars: int = 1500, overlap_chars: int = 200
) -> list[tuple[int, int]]:
    """Return the (start, end) offsets of each raw window, before trimming.

    Precondition: overlap_chars < target_chars. A larger overlap is not
    rejected here; forward progress is still at least one character.
    """
    if len(text) <= target_chars:
        return [(0, len(text))]

    spans: list[tuple[int, int]] = []
    start = 0
    while start < len(text):
        end = start + target_chars
        if end < len(text):
            search_start = max(end - SENTENCE_SEARCH_CHARS, start)
            sentence_end = _SENTENCE_END_RE.search(text, search_start, end)
            if sentence_end is not None:
                end = sentence_end.start() + 1
            else:
                last_space = text.rfind(" ", 0, end + 1)
                if last_space > start:
                    end = last_space
        else:
            end = len(text)

        spans.append((start, end))
        if end >= len(text):
            break
        start = max(end - overlap_chars, start + 1)
    return spans


def chunk_text(text: str, target_chars: int = 1500, overlap_chars: int = 200) -> list[str]:
    """Split text into overlapping, trimmed, non-empty chunks.

    Short text (at most target_chars) is returned unchanged as a single chunk.
    Longer text is cut at a sentence end within the last 100 characters of
    each window, else at the nearest preceding space, else at the raw
    boundary. The next window starts overlap_chars before the cut.
    """
    if len(text) <= target_chars:
        return [text]

    chunks = (
        text[start:end].strip() for start, end in chunk_spans(text, target_chars, overlap_chars)
    )
    return [chunk for chunk in chunks if chunk]
