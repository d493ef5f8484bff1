"""Skill extractor agent: structured skill claims from a JD or resume."""

from __future__ import annotations

import time

import structlog

from resume_match_agents.agents.base import BaseAgent
from resume_match_agents.prompts.skill_extractor import (
    DOCUMENT_LABELS,
    SKILL_EXTRACTOR_SYSTEM,
    SKILL_EXTRACTOR_USER,
)
from resume_match_agents.tools.skill_normalizer import dedupe_skills, to_extracted_skill
from resume_match_core.exceptions import ExtractionError, MalformedOutputError, ProviderError
from resume_match_core.models.skills import (
    DocumentType,
    ExtractedSkill,
    ExtractionOutcome,
    ExtractionResponse,
    RawSkill,
)

logger = structlog.get_logger()

EXTRACTION_MAX_TOKENS = 4096

# First request plus one re-ask carrying the validation error
EXTRACTION_ATTEMPTS = 2


class SkillExtractorAgent(BaseAgent):
    """Prompt the LLM for skills and normalize the reply."""

    agent_name = "skill_extractor"

    async def extract(self, document_type: DocumentType, text: str) -> list[ExtractedSkill]:
        """Return normalized skills; raises ExtractionError on failure."""
        outcome = await self.run(document_type, text)
        return outcome.unwrap()

    async def run(self, document_type: DocumentType, text: str) -> ExtractionOutcome:
        """Extract skills, reporting short input and failures as outcomes."""
        self._log_start({"document_type": document_type, "chars": len(text)})
        start = time.monotonic()

        trimmed = text.strip()
        if len(trimmed) < self.settings.extraction_min_chars:
            logger.info(
                "extraction_skipped_short_text",
                document_type=document_type,
                chars=len(trimmed),
            )
            return ExtractionOutcome.empty(document_type)

        max_chars = self.settings.extraction_max_chars
        truncated = len(trimmed) > max_chars
        if truncated:
            logger.warning(
                "extraction_input_truncated",
                document_type=document_type,
                original_chars=len(trimmed),
                kept_chars=max_chars,
            )

        try:
            response = await self._request_skills(document_type, trimmed[:max_chars])
        except (MalformedOutputError, ProviderError) as e:
            error = ExtractionError(f"Skill extraction failed for {document_type}: {e}")
            error.__cause__ = e
            logger.error(
                "extraction_failed",
                document_type=document_type,
                error_type=type(e).__name__,
                error=str(e),
            )
            return ExtractionOutcome.failure(document_type, error)

        skills = self.postprocess(response.skills, document_type)
        self._log_end(
            time.monotonic() - start,
            {"document_type": document_type, "skills_count": len(skills)},
        )
        return ExtractionOutcome.success(document_type, skills, truncated=truncated)

    def postprocess(
        self, raw_skills: list[RawSkill], document_type: DocumentType
    ) -> list[ExtractedSkill]:
        """Coerce, drop unnamed, dedupe by normalized name, and cap the count."""
        coerced = [to_extracted_skill(raw, document_type) for raw in raw_skills]
        skills = dedupe_skills([skill for skill in coerced if skill is not None])
        return skills[: self.settings.extraction_max_skills]

    async def _request_skills(
        self, document_type: DocumentType, document_text: str
    ) -> ExtractionResponse:
        """Ask for skills; an invalid reply is re-asked once before failing."""
        return await self._call_structured(
            messages=self._build_messages(document_type, document_text),
            model=self.settings.extraction_model,
            response_model=ExtractionResponse,
            temperature=0.0,
            max_tokens=EXTRACTION_MAX_TOKENS,
            max_retries=EXTRACTION_ATTEMPTS,
        )

    def _build_messages(
        self, document_type: DocumentType, document_text: str
    ) -> list[dict[str, str]]:
        """System instructions plus the document as the user turn."""
        system = SKILL_EXTRACTOR_SYSTEM.format(
            document_label=DOCUMENT_LABELS[document_type],
            document_type=document_type,
            max_skills=self.settings.extraction_max_skills,
        )
        user = SKILL_EXTRACTOR_USER.format(
            document_type=document_type,
            document_text=document_text,
        )
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ]
