"""Tests for Settings configuration."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from resume_match_core.config.settings import Settings


@pytest.mark.unit
class TestSettings:
    """Test Settings validation and defaults."""

    def test_default_settings(self) -> None:
        """Defaults match the documented limits."""
        with patch.dict(os.environ, {}, clear=True):
            s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.db_backend == "sqlite"
        assert s.embedding_provider == "local"
        assert s.embedding_dimension == 384
        assert s.chunk_target_chars == 1500
        assert s.chunk_overlap_chars == 200
        assert s.extraction_min_chars == 80
        assert s.extraction_max_chars == 9000
        assert s.extraction_max_skills == 30
        assert s.chat_k_per_corpus == 5
        assert s.chat_k_total == 8
        assert s.chat_history_turns == 8
        assert s.match_mode == "structured"
        assert s.anthropic_api_key is None

    def test_env_prefix(self) -> None:
        """Environment variables use the RM_ prefix."""
        env = {"RM_CHAT_K_TOTAL": "6", "RM_MATCH_MODE": "keyword"}
        with patch.dict(os.environ, env, clear=True):
            s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.chat_k_total == 6
        assert s.match_mode == "keyword"

    def test_postgres_backend_sets_database_url(self) -> None:
        """When db_backend=postgres, database_url is set from postgres_url."""
        with patch.dict(os.environ, {"RM_DB_BACKEND": "postgres"}, clear=True):
            s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.database_url == s.postgres_url
        assert "asyncpg" in s.database_url

    def test_voyage_without_key_raises(self) -> None:
        """Voyage provider without API key raises ValueError."""
        with patch.dict(os.environ, {"RM_EMBEDDING_PROVIDER": "voyage"}, clear=True):
            with pytest.raises(ValidationError, match="voyage_api_key required"):
                Settings(_env_file=None)  # type: ignore[call-arg]

    def test_voyage_with_key_sets_dimension(self) -> None:
        """Voyage provider sets embedding dimension to 1024."""
        env = {"RM_EMBEDDING_PROVIDER": "voyage", "RM_VOYAGE_API_KEY": "voyage-test"}
        with patch.dict(os.environ, env, clear=True):
            s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.embedding_dimension == 1024

    def test_overlap_must_be_smaller_than_target(self) -> None:
        """An overlap as large as the chunk is rejected."""
        env = {"RM_CHUNK_TARGET_CHARS": "500", "RM_CHUNK_OVERLAP_CHARS": "500"}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(ValidationError, match="chunk_overlap_chars"):
                Settings(_env_file=None)  # type: ignore[call-arg]

    def test_invalid_match_mode(self) -> None:
        """Unknown match modes are rejected."""
        with patch.dict(os.environ, {"RM_MATCH_MODE": "fuzzy"}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)  # type: ignore[call-arg]
