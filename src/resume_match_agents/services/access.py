"""Ownership checks shared by the application and chat services."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from resume_match_core.exceptions import AuthorizationError
from resume_match_infra.db.repositories.user_repo import UserRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from resume_match_core.models.application import AuthUser
    from resume_match_infra.db.models import JobModel, ResumeModel

logger = structlog.get_logger()


async def ensure_application_access(
    session: AsyncSession,
    user: AuthUser,
    job: JobModel,
    resume: ResumeModel,
) -> None:
    """Allow the recruiter who owns the job or the candidate who owns the resume."""
    caller = await UserRepository(session).get_by_external_id(user.external_id)
    allowed = caller is not None and (
        (user.role == "recruiter" and job.recruiter_user_id == caller.id)
        or (user.role == "candidate" and resume.candidate_user_id == caller.id)
    )
    if not allowed:
        logger.warning("access_denied", user=user.external_id, role=user.role, job_id=job.id)
        raise AuthorizationError("Access denied")
