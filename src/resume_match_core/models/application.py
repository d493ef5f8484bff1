"""Application request and view models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from resume_match_core.models.chat import ChatTurn
from resume_match_core.models.match import MatchResult

UserRole = Literal["recruiter", "candidate"]


class AuthUser(BaseModel):
    """Authenticated caller identity, resolved outside the core."""

    external_id: str = Field(min_length=1, description="Identity-provider user id")
    role: UserRole = Field(description="Caller role")


class ApplicationRequest(BaseModel):
    """Plain-text inputs for creating an application."""

    job_key: str = Field(default="", description="Recruiter-scoped job key")
    job_title: str | None = Field(default=None, description="Optional job title")
    candidate_user_id: str = Field(default="", description="Candidate external id")
    jd_text: str = Field(default="", description="Extracted job description text")
    resume_text: str = Field(default="", description="Extracted resume text")
    resume_filename: str | None = Field(default=None, description="Original resume filename")


class ApplicationCreated(BaseModel):
    """Result of a successful application creation."""

    application_id: str
    job_id: str
    match: MatchResult


class ApplicationView(BaseModel):
    """Read view of one application."""

    application_id: str
    job_key: str
    job_title: str | None = None
    match: MatchResult
    created_at: datetime


class JobApplicationSummary(BaseModel):
    """One row of a recruiter's applications-per-job listing."""

    application_id: str
    candidate_user_id: str
    match_score: int
    created_at: datetime


class ChatHistory(BaseModel):
    """Chronological chat history of one application."""

    application_id: str
    messages: list[ChatTurn] = Field(default_factory=list)
