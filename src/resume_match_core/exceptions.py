"""Custom exception hierarchy for resume-match-agent."""

from __future__ import annotations


class ResumeMatchError(Exception):
    """Base exception for all resume-match-agent errors."""

    status_code: int = 500


class ValidationError(ResumeMatchError):
    """Raised when caller input is missing, empty, or too short to analyze."""

    status_code = 400


class AuthorizationError(ResumeMatchError):
    """Raised when the acting user does not own the job or resume involved."""

    status_code = 403


class NotFoundError(ResumeMatchError):
    """Raised when a job, resume, or application id is unknown."""

    status_code = 404


class ProviderError(ResumeMatchError):
    """Raised when an embedding or completion provider fails or returns bad shape."""

    status_code = 502


class ExtractionError(ProviderError):
    """Raised when skill extraction fails after the single repair attempt."""


class MalformedOutputError(ResumeMatchError):
    """Raised when a model reply cannot be parsed into the expected JSON."""

    status_code = 502


class EmbeddingDimensionError(ResumeMatchError):
    """Raised when vectors of different dimensions are compared."""

    status_code = 500


class PersistenceError(ResumeMatchError):
    """Raised when a transaction fails; partial writes are rolled back first."""

    status_code = 500
