"""Skill-name normalization and coercion of model labels to closed enums."""

from __future__ import annotations

import re
import unicodedata

from resume_match_core.constants import (
    MAX_EVIDENCE_SNIPPET_CHARS,
    NORMALIZED_NAME_EXTRA_CHARS,
    SKILL_CATEGORIES,
    SKILL_IMPORTANCES,
)
from resume_match_core.models.skills import (
    DocumentType,
    ExtractedSkill,
    Importance,
    RawSkill,
    SkillCategory,
)

_FOLD_RE = re.compile(rf"[^\w\s{re.escape(NORMALIZED_NAME_EXTRA_CHARS)}]|_")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_skill_name(name: str) -> str:
    """Canonical lowercase key for a skill name.

    Diacritics are stripped, punctuation other than ``+ . # / & ( ) -`` is
    folded to spaces, and whitespace is collapsed.
    """
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    folded = _FOLD_RE.sub(" ", stripped.lower())
    return _WHITESPACE_RE.sub(" ", folded).strip()


def coerce_category(value: str | None) -> SkillCategory:
    """Map a free-form category label onto the closed set, defaulting to 'other'."""
    label = (value or "").strip().lower()
    if label in SKILL_CATEGORIES:
        return label  # type: ignore[return-value]
    return "other"


def coerce_importance(value: str | None, document_type: DocumentType) -> Importance | None:
    """Resume skills carry no importance; JD skills default to 'unspecified'."""
    if document_type == "resume":
        return None
    label = _WHITESPACE_RE.sub("_", (value or "").strip().lower()).replace("-", "_")
    if label in SKILL_IMPORTANCES:
        return label  # type: ignore[return-value]
    return "unspecified"


def clean_snippets(snippets: list[str]) -> list[str]:
    """Trim snippets, drop empty ones, and cap each at 280 characters."""
    cleaned: list[str] = []
    for snippet in snippets:
        text = snippet.strip()
        if text:
            cleaned.append(text[:MAX_EVIDENCE_SNIPPET_CHARS])
    return cleaned


def to_extracted_skill(raw: RawSkill, document_type: DocumentType) -> ExtractedSkill | None:
    """Coerce one raw model skill, or return None when it has no usable name."""
    name = raw.name.strip()
    if not name:
        return None
    normalized = normalize_skill_name(raw.normalized_name or name)
    if not normalized:
        normalized = normalize_skill_name(name)
    if not normalized:
        return None
    return ExtractedSkill(
        name=name,
        normalized_name=normalized,
        category=coerce_category(raw.category),
        importance=coerce_importance(raw.importance, document_type),
        evidence_snippets=clean_snippets(raw.evidence_snippets),
        source=document_type,
    )


def dedupe_skills(skills: list[ExtractedSkill]) -> list[ExtractedSkill]:
    """Keep the first skill for each normalized name."""
    seen: set[str] = set()
    unique: list[ExtractedSkill] = []
    for skill in skills:
        if skill.normalized_name in seen:
            continue
        seen.add(skill.normalized_name)
        unique.append(skill)
    return unique
