"""Weighted skill match scoring, insights, and experience highlight."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable

from resume_match_agents.tools.keyword_skills import is_seniority_keyword
from resume_match_agents.tools.skill_normalizer import normalize_skill_name
from resume_match_core.constants import (
    IMPORTANCE_WEIGHTS,
    MAX_EXTRA_SKILLS_PREVIEW,
    MAX_HIGHLIGHT_STRENGTHS,
)
from resume_match_core.models.match import MatchResult, SkillMatchSummary
from resume_match_core.models.skills import ExtractedSkill

_YEARS_RE = re.compile(r"(\d+\+?)(?=\s*(?:years?|yrs))", re.IGNORECASE)


def _round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return int(math.floor(value + 0.5))


def _percentage(matched: int, total: int) -> int:
    """Matched share of total as a 0-100 integer, 0 when total is 0."""
    if total <= 0:
        return 0
    return max(0, min(100, _round_half_up(100 * matched / total)))


def _first_by_key(skills: Iterable[ExtractedSkill]) -> dict[str, ExtractedSkill]:
    """Index skills by normalized name, keeping the first occurrence."""
    by_key: dict[str, ExtractedSkill] = {}
    for skill in skills:
        by_key.setdefault(skill.normalized_name, skill)
    return by_key


def score_skills(
    jd_skills: list[ExtractedSkill], resume_skills: list[ExtractedSkill]
) -> SkillMatchSummary:
    """Score resume skills against JD skills, weighting must-haves double."""
    jd_map = _first_by_key(jd_skills)
    resume_map = _first_by_key(resume_skills)

    total_weight = 0
    matched_weight = 0
    strengths: list[str] = []
    gaps: list[str] = []
    for key, skill in jd_map.items():
        weight = IMPORTANCE_WEIGHTS.get(skill.importance or "unspecified", 1)
        total_weight += weight
        if key in resume_map:
            matched_weight += weight
            strengths.append(skill.name)
        else:
            gaps.append(skill.name)

    extra_skills = [skill.name for key, skill in resume_map.items() if key not in jd_map]

    return SkillMatchSummary(
        match_score=_percentage(matched_weight, total_weight),
        matched_count=len(strengths),
        matched_skills=strengths,
        strengths=strengths,
        gaps=gaps,
        extra_skills=extra_skills,
        jd_skills=[skill.name for skill in jd_map.values()],
        resume_skills=[skill.name for skill in resume_map.values()],
        mode="structured",
    )


def _unique_keywords(keywords: Iterable[str]) -> dict[str, str]:
    """Normalized key -> first display form, skipping empty keys."""
    unique: dict[str, str] = {}
    for keyword in keywords:
        key = normalize_skill_name(keyword)
        if key:
            unique.setdefault(key, keyword.strip())
    return unique


def score_keywords(jd_keywords: list[str], resume_keywords: list[str]) -> SkillMatchSummary:
    """Equal-weight fallback scoring over plain keyword lists.

    Strengths and gaps are single aggregated lines rather than per-skill lists.
    Seniority tags count toward the score but are left out of matched_skills,
    which feeds the experience highlight.
    """
    jd_map = _unique_keywords(jd_keywords)
    resume_map = _unique_keywords(resume_keywords)

    matched = [name for key, name in jd_map.items() if key in resume_map]
    missing = [name for key, name in jd_map.items() if key not in resume_map]
    extra = [name for key, name in resume_map.items() if key not in jd_map]

    return SkillMatchSummary(
        match_score=_percentage(len(matched), len(jd_map)),
        matched_count=len(matched),
        matched_skills=[name for name in matched if not is_seniority_keyword(name)],
        strengths=[f"Matches: {', '.join(matched)}"] if matched else [],
        gaps=[f"Missing: {', '.join(missing)}"] if missing else [],
        extra_skills=extra,
        jd_skills=list(jd_map.values()),
        resume_skills=list(resume_map.values()),
        mode="keyword",
    )


def build_insights(summary: SkillMatchSummary, notes: Iterable[str] = ()) -> list[str]:
    """Human-readable summary lines for a match."""
    if not summary.jd_skills:
        return ["No skills detected in job description", *notes]

    insights = [
        f"Matched {summary.matched_count}/{len(summary.jd_skills)} JD skills "
        f"({summary.match_score}%)"
    ]
    if summary.gaps:
        insights.append(f"Gaps: {', '.join(summary.gaps)}")
    if summary.extra_skills:
        preview = ", ".join(summary.extra_skills[:MAX_EXTRA_SKILLS_PREVIEW])
        insights.append(f"Extra resume skills: {preview}")
    insights.extend(notes)
    return insights


def build_experience_highlight(summary: SkillMatchSummary, resume_text: str) -> str | None:
    """One sentence combining stated years of experience with top strengths."""
    years_match = _YEARS_RE.search(resume_text or "")
    years = years_match.group(1) if years_match else None
    strengths_preview = ", ".join(summary.matched_skills[:MAX_HIGHLIGHT_STRENGTHS])

    if years and strengths_preview:
        return f"{years} years of experience across {strengths_preview}."
    if years:
        return f"{years} years of relevant experience."
    if strengths_preview:
        return f"Experience with {strengths_preview}."
    return None


def build_match_result(
    summary: SkillMatchSummary, resume_text: str, notes: Iterable[str] = ()
) -> MatchResult:
    """Assemble the persisted match snapshot from a summary."""
    return MatchResult(
        score=summary.match_score,
        strengths=summary.strengths,
        gaps=summary.gaps,
        extra_skills=summary.extra_skills,
        insights=build_insights(summary, notes),
        experience_highlight=build_experience_highlight(summary, resume_text),
    )
