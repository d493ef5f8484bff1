"""Dictionary keyword matcher used by the keyword scoring mode."""

from __future__ import annotations

import re

from resume_match_core.constants import SKILL_DICTIONARY

_SKILL_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    (skill, re.compile(rf"(?<![\w]){re.escape(skill)}(?![\w])", re.IGNORECASE))
    for skill in SKILL_DICTIONARY
]

_EXPERIENCE_PATTERNS = [
    re.compile(r"(\d+)\+?\s*years?\s+(?:of\s+)?experience", re.IGNORECASE),
    re.compile(r"(\d+)\+?\s*years?\s+(?:in|with)", re.IGNORECASE),
    re.compile(r"experience\s+(?:of\s+)?(\d+)\+?\s*years?", re.IGNORECASE),
]


SENIORITY_SUFFIX = " level"


def _seniority_for_years(years: int) -> str:
    """Bucket a years-of-experience figure into a seniority keyword."""
    if years >= 5:
        return "senior level"
    if years >= 2:
        return "mid level"
    return "junior level"


def is_seniority_keyword(keyword: str) -> bool:
    """Whether a keyword is a derived seniority tag rather than a skill."""
    return keyword.endswith(SENIORITY_SUFFIX)


def extract_keywords(text: str) -> list[str]:
    """Return dictionary skills found in text, in dictionary order.

    Seniority keywords derived from "N years of experience" phrases follow
    the skills.
    """
    found: list[str] = [skill for skill, pattern in _SKILL_PATTERNS if pattern.search(text)]

    for pattern in _EXPERIENCE_PATTERNS:
        for match in pattern.finditer(text):
            level = _seniority_for_years(int(match.group(1)))
            if level not in found:
                found.append(level)
    return found
