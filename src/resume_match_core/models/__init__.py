"""Domain models for resume-match-agent."""

from resume_match_core.models.application import (
    ApplicationCreated,
    ApplicationRequest,
    ApplicationView,
    AuthUser,
    ChatHistory,
    JobApplicationSummary,
)
from resume_match_core.models.chat import (
    ChatAnswer,
    ChatSource,
    ChatTurn,
    RetrievedChunk,
)
from resume_match_core.models.chunk import Chunk
from resume_match_core.models.match import MatchResult, SkillMatchSummary
from resume_match_core.models.skills import (
    ExtractedSkill,
    ExtractionOutcome,
    ExtractionResponse,
    RawSkill,
)

__all__ = [
    "ApplicationCreated",
    "ApplicationRequest",
    "ApplicationView",
    "AuthUser",
    "ChatAnswer",
    "ChatHistory",
    "ChatSource",
    "ChatTurn",
    "Chunk",
    "ExtractedSkill",
    "ExtractionOutcome",
    "ExtractionResponse",
    "JobApplicationSummary",
    "MatchResult",
    "RawSkill",
    "SkillMatchSummary",
]
