"""Match summary and persisted match result models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class SkillMatchSummary(BaseModel):
    """Score and skill breakdown for one JD/resume pair.

    Both scoring modes produce this shape; skill lists hold display names.
    """

    match_score: int = Field(ge=0, le=100, description="Weighted match score 0-100")
    matched_count: int = Field(default=0, ge=0, description="JD skills found in the resume")
    matched_skills: list[str] = Field(
        default_factory=list, description="Display names of matched JD skills, in JD order"
    )
    strengths: list[str] = Field(default_factory=list, description="Matched JD skills")
    gaps: list[str] = Field(default_factory=list, description="Unmatched JD skills")
    extra_skills: list[str] = Field(
        default_factory=list, description="Resume skills the JD does not ask for"
    )
    jd_skills: list[str] = Field(default_factory=list, description="All JD skills")
    resume_skills: list[str] = Field(default_factory=list, description="All resume skills")
    mode: Literal["structured", "keyword"] = Field(
        default="structured", description="Scoring mode that produced this summary"
    )


class MatchResult(BaseModel):
    """Immutable match snapshot stored on an application."""

    score: int = Field(ge=0, le=100, description="Match score 0-100")
    strengths: list[str] = Field(default_factory=list)
    gaps: list[str] = Field(default_factory=list)
    extra_skills: list[str] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list, description="Human-readable summary lines")
    experience_highlight: str | None = Field(
        default=None, description="Years-of-experience sentence, if derivable"
    )
