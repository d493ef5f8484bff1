"""Skill extraction models: raw model reply, normalized skills, outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from resume_match_core.exceptions import ResumeMatchError

DocumentType = Literal["job_description", "resume"]
SkillCategory = Literal["hard", "soft", "tool", "technique", "domain", "other"]
Importance = Literal["must_have", "nice_to_have", "unspecified"]


class RawSkill(BaseModel):
    """A single skill as returned by the model, before coercion."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(default="", description="Display name as written in the document")
    normalized_name: str | None = Field(default=None, description="Model-suggested key")
    category: str | None = Field(default=None, description="Free-form category label")
    importance: str | None = Field(default=None, description="Free-form importance label")
    evidence_snippets: list[str] = Field(
        default_factory=list, description="Short quotes supporting the skill"
    )

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, value: object) -> str:
        """Treat missing or non-string names as empty."""
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @field_validator("normalized_name", "category", "importance", mode="before")
    @classmethod
    def coerce_optional_label(cls, value: object) -> str | None:
        """Drop labels that are not strings instead of failing the whole reply."""
        return value if isinstance(value, str) else None

    @field_validator("evidence_snippets", mode="before")
    @classmethod
    def coerce_snippets(cls, value: object) -> list[str]:
        """Accept a single string or a list with stray non-string items."""
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [item if isinstance(item, str) else str(item) for item in value if item is not None]
        return []


class ExtractionResponse(BaseModel):
    """Top-level JSON object the extraction prompt asks for."""

    model_config = ConfigDict(extra="ignore")

    document_type: str | None = Field(default=None, description="Echoed document type")
    skills: list[RawSkill] = Field(description="Extracted skills")


class ExtractedSkill(BaseModel):
    """A normalized, deduplicated skill claim from one document."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Display name")
    normalized_name: str = Field(min_length=1, description="Dedup and matching key")
    category: SkillCategory = Field(default="other", description="Closed skill category")
    importance: Importance | None = Field(
        default=None, description="JD necessity; always None for resume skills"
    )
    evidence_snippets: list[str] = Field(
        default_factory=list, description="Supporting quotes, each at most 280 chars"
    )
    source: DocumentType = Field(description="Document the skill was extracted from")


@dataclass
class ExtractionOutcome:
    """Tagged result of one extraction: skills, too little text, or failure."""

    kind: Literal["skills", "empty", "error"]
    document_type: DocumentType
    skills: list[ExtractedSkill] = field(default_factory=list)
    truncated: bool = False
    error: ResumeMatchError | None = None

    @classmethod
    def empty(cls, document_type: DocumentType) -> ExtractionOutcome:
        """Outcome for input too short to analyze."""
        return cls(kind="empty", document_type=document_type)

    @classmethod
    def success(
        cls,
        document_type: DocumentType,
        skills: list[ExtractedSkill],
        truncated: bool = False,
    ) -> ExtractionOutcome:
        """Outcome carrying extracted skills."""
        return cls(kind="skills", document_type=document_type, skills=skills, truncated=truncated)

    @classmethod
    def failure(cls, document_type: DocumentType, error: ResumeMatchError) -> ExtractionOutcome:
        """Outcome carrying the error that stopped extraction."""
        return cls(kind="error", document_type=document_type, error=error)

    @property
    def is_error(self) -> bool:
        """Whether extraction failed."""
        return self.kind == "error"

    def unwrap(self) -> list[ExtractedSkill]:
        """Return the skills, raising the carried error for failed outcomes."""
        if self.error is not None:
            raise self.error
        return self.skills
