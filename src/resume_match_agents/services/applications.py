"""Application ingestion and read service."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

import structlog

from resume_match_agents.services.access import ensure_application_access
from resume_match_agents.tools.chunker import chunk_text
from resume_match_agents.tools.keyword_skills import extract_keywords
from resume_match_agents.tools.match_scorer import (
    build_match_result,
    score_keywords,
    score_skills,
)
from resume_match_core.exceptions import (
    AuthorizationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from resume_match_core.models.application import (
    ApplicationCreated,
    ApplicationView,
    JobApplicationSummary,
)
from resume_match_core.models.match import MatchResult
from resume_match_infra.db.models import ApplicationModel, JobModel, ResumeModel
from resume_match_infra.db.repositories.application_repo import ApplicationRepository
from resume_match_infra.db.repositories.chunk_repo import (
    JobChunkRepository,
    ResumeChunkRepository,
)
from resume_match_infra.db.repositories.job_repo import JobRepository
from resume_match_infra.db.repositories.resume_repo import ResumeRepository
from resume_match_infra.db.repositories.user_repo import UserRepository
from resume_match_infra.db.session import read_session, unit_of_work

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from resume_match_agents.agents.skill_extractor import SkillExtractorAgent
    from resume_match_agents.tools.embedder import EmbeddingClient
    from resume_match_core.config.settings import Settings
    from resume_match_core.models.application import ApplicationRequest, AuthUser
    from resume_match_core.models.skills import ExtractionOutcome

logger = structlog.get_logger()

# Chunk texts and their embeddings, index-aligned
DocumentChunks = tuple[list[str], list[list[float]]]

KEYWORD_FALLBACK_NOTE = "Structured skill extraction unavailable; keyword matching used"


class ApplicationService:
    """Create applications and serve access-checked views of them."""

    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
        extractor: SkillExtractorAgent | None = None,
        embeddings: EmbeddingClient | None = None,
    ) -> None:
        """Initialize with settings and a session factory.

        Read-only callers may omit the extractor and embedding client.
        """
        self.settings = settings
        self._session_factory = session_factory
        self._extractor = extractor
        self._embeddings = embeddings

    async def create_application(
        self, request: ApplicationRequest, user: AuthUser
    ) -> ApplicationCreated:
        """Ingest a JD/resume pair and persist its match in one transaction.

        Embedding and skill extraction run before the transaction opens, so
        no database lock is held while providers respond. A failure at any
        later step rolls back every write, including users, the job and
        both chunk sets.
        """
        self._validate_request(request, user)
        start = time.monotonic()

        job_exists = await self._job_exists(user.external_id, request.job_key)
        jd_chunks = None if job_exists else await self._embed_document(request.jd_text)
        resume_chunks = await self._embed_document(request.resume_text)
        match = await self.compute_match(request.jd_text, request.resume_text)

        async with unit_of_work(self._session_factory) as session:
            users = UserRepository(session)
            candidate = await users.upsert(request.candidate_user_id, "candidate")
            recruiter = await users.upsert(user.external_id, "recruiter")

            job = await self._get_or_create_job(session, recruiter.id, request, jd_chunks)
            resume = await ResumeRepository(session).create(
                ResumeModel(
                    candidate_user_id=candidate.id,
                    raw_text=request.resume_text,
                    metadata_json={"filename": request.resume_filename},
                )
            )
            await ResumeChunkRepository(session).add_chunks(resume.id, *resume_chunks)

            application = await ApplicationRepository(session).create(
                ApplicationModel(
                    job_id=job.id,
                    resume_id=resume.id,
                    match_score=match.score,
                    strengths_json=match.strengths,
                    gaps_json=match.gaps,
                    extra_skills_json=match.extra_skills,
                    insights_json=match.insights,
                    experience_highlight=match.experience_highlight,
                )
            )

        logger.info(
            "application_created",
            application_id=application.id,
            job_id=job.id,
            match_score=match.score,
            duration_seconds=round(time.monotonic() - start, 2),
        )
        return ApplicationCreated(application_id=application.id, job_id=job.id, match=match)

    async def get_application(self, application_id: str, user: AuthUser) -> ApplicationView:
        """Return one application if the caller owns its job or resume."""
        async with read_session(self._session_factory) as session:
            found = await ApplicationRepository(session).get_with_owners(application_id)
            if found is None:
                raise NotFoundError("Application not found")
            application, job, resume = found
            await ensure_application_access(session, user, job, resume)

        return ApplicationView(
            application_id=application.id,
            job_key=job.job_key,
            job_title=job.title,
            match=MatchResult(
                score=application.match_score or 0,
                strengths=application.strengths_json or [],
                gaps=application.gaps_json or [],
                extra_skills=application.extra_skills_json or [],
                insights=application.insights_json or [],
                experience_highlight=application.experience_highlight,
            ),
            created_at=application.created_at,
        )

    async def list_job_applications(
        self, job_key: str, user: AuthUser
    ) -> list[JobApplicationSummary]:
        """Applications for one of the caller's jobs, newest first."""
        if user.role != "recruiter":
            raise AuthorizationError("Only recruiters can view job applications")

        async with read_session(self._session_factory) as session:
            recruiter = await UserRepository(session).get_by_external_id(user.external_id)
            job = None
            if recruiter is not None:
                job = await JobRepository(session).get_by_recruiter_and_key(recruiter.id, job_key)
            if job is None:
                raise NotFoundError("Job not found")
            rows = await ApplicationRepository(session).list_by_job(job.id)

        return [
            JobApplicationSummary(
                application_id=application.id,
                candidate_user_id=candidate_external_id,
                match_score=application.match_score or 0,
                created_at=application.created_at,
            )
            for application, candidate_external_id in rows
        ]

    async def compute_match(self, jd_text: str, resume_text: str) -> MatchResult:
        """Score a resume against a JD in the configured match mode."""
        if self.settings.match_mode == "keyword":
            return self._keyword_match(jd_text, resume_text)

        if self._extractor is None:
            msg = "structured matching requires a skill extractor"
            raise ValueError(msg)
        jd_outcome, resume_outcome = await asyncio.gather(
            self._extractor.run("job_description", jd_text),
            self._extractor.run("resume", resume_text),
        )
        failed = next((o for o in (jd_outcome, resume_outcome) if o.is_error), None)
        if failed is not None:
            if not self.settings.keyword_fallback_on_error:
                failed.unwrap()
            logger.warning(
                "structured_match_degraded",
                document_type=failed.document_type,
                error=str(failed.error),
            )
            return self._keyword_match(jd_text, resume_text, notes=[KEYWORD_FALLBACK_NOTE])

        summary = score_skills(jd_outcome.skills, resume_outcome.skills)
        notes = [
            _truncation_note(outcome, self.settings.extraction_max_chars)
            for outcome in (jd_outcome, resume_outcome)
            if outcome.truncated
        ]
        return build_match_result(summary, resume_text, notes)

    def _keyword_match(
        self, jd_text: str, resume_text: str, notes: list[str] | None = None
    ) -> MatchResult:
        """Dictionary keyword scoring."""
        summary = score_keywords(extract_keywords(jd_text), extract_keywords(resume_text))
        return build_match_result(summary, resume_text, notes or [])

    def _validate_request(self, request: ApplicationRequest, user: AuthUser) -> None:
        """Reject bad input before any provider or database work."""
        if user.role != "recruiter":
            raise AuthorizationError("Only recruiters can create applications")
        if not (
            request.job_key.strip()
            and request.candidate_user_id.strip()
            and request.jd_text.strip()
            and request.resume_text.strip()
        ):
            raise ValidationError("Missing required fields")

        min_chars = self.settings.min_document_chars
        if len(request.jd_text) < min_chars or len(request.resume_text) < min_chars:
            raise ValidationError("Extracted text too short for analysis")

    async def _job_exists(self, recruiter_external_id: str, job_key: str) -> bool:
        """Whether the recruiter already has a job under this key."""
        async with read_session(self._session_factory) as session:
            recruiter = await UserRepository(session).get_by_external_id(recruiter_external_id)
            if recruiter is None:
                return False
            job = await JobRepository(session).get_by_recruiter_and_key(recruiter.id, job_key)
            return job is not None

    async def _get_or_create_job(
        self,
        session: AsyncSession,
        recruiter_id: str,
        request: ApplicationRequest,
        jd_chunks: DocumentChunks | None,
    ) -> JobModel:
        """Reuse the recruiter's job for this key or create it with its chunks.

        A concurrent create of the same job fails on the (recruiter, job_key)
        unique constraint when the transaction flushes.
        """
        jobs = JobRepository(session)
        job = await jobs.get_by_recruiter_and_key(recruiter_id, request.job_key)
        if job is not None:
            logger.info("job_reused", job_id=job.id, job_key=request.job_key)
            return job
        if jd_chunks is None:
            raise PersistenceError("Job changed during application creation, try again")

        job = await jobs.create(
            JobModel(
                recruiter_user_id=recruiter_id,
                job_key=request.job_key,
                title=request.job_title,
                jd_text=request.jd_text,
            )
        )
        await JobChunkRepository(session).add_chunks(job.id, *jd_chunks)
        logger.info("job_created", job_id=job.id, chunk_count=len(jd_chunks[0]))
        return job

    async def _embed_document(self, text: str) -> DocumentChunks:
        """Chunk and embed one document; nothing is stored."""
        if self._embeddings is None:
            msg = "creating applications requires an embedding client"
            raise ValueError(msg)
        contents = chunk_text(
            text,
            target_chars=self.settings.chunk_target_chars,
            overlap_chars=self.settings.chunk_overlap_chars,
        )
        embeddings = await self._embeddings.embed_many(contents)
        return contents, embeddings


def _truncation_note(outcome: ExtractionOutcome, max_chars: int) -> str:
    """Insight line for a document cut short before extraction."""
    label = "Job description" if outcome.document_type == "job_description" else "Resume"
    return f"{label} truncated to first {max_chars} characters for skill extraction"
