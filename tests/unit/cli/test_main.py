"""Tests for CLI entrypoint."""

from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from resume_match_agents.tools.embedder import EmbeddingClient
from resume_match_cli.main import app
from tests.mocks.mock_factories import SAMPLE_JD, SAMPLE_RESUME
from tests.mocks.mock_llm import FakeCompletionClient
from tests.mocks.mock_settings import make_real_settings
from tests.mocks.mock_tools import FakeEmbedder

runner = CliRunner()


@contextmanager
def _cli_env(tmp_path: Path, llm: FakeCompletionClient | None = None) -> Iterator[None]:
    """Real settings on a temp database with fake providers."""
    embedder = FakeEmbedder()
    with (
        patch(
            "resume_match_cli.main.Settings",
            side_effect=lambda: make_real_settings(tmp_path),
        ),
        patch("resume_match_cli.main.configure_logging"),
        patch(
            "resume_match_cli.main.build_embedding_client",
            side_effect=lambda _settings: EmbeddingClient(embedder, dimension=4),
        ),
        patch(
            "resume_match_cli.main.build_completion_client",
            return_value=llm or FakeCompletionClient("Strong Python background."),
        ),
    ):
        yield


def _apply(tmp_path: Path) -> tuple[str, str]:
    """Run the apply command in keyword mode; returns the application id and output."""
    jd = tmp_path / "jd.txt"
    resume = tmp_path / "resume.txt"
    jd.write_text(SAMPLE_JD)
    resume.write_text(SAMPLE_RESUME)
    result = runner.invoke(
        app,
        [
            "apply",
            str(jd),
            str(resume),
            "--job-key",
            "backend-2024",
            "--candidate",
            "cand-1",
            "--title",
            "Senior Backend Engineer",
            "--user",
            "rec-1",
            "--keyword",
        ],
    )
    assert result.exit_code == 0, result.output
    match = re.search(r"Application created: (\S+)", result.output)
    assert match is not None
    return match.group(1), result.output


@pytest.mark.unit
class TestVersionCommand:
    """Test the 'version' CLI command."""

    def test_version_output(self) -> None:
        """Version command prints version string."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "resume-match-agent v0.1.0" in result.output


@pytest.mark.unit
class TestApplyCommand:
    """Test the 'apply' CLI command."""

    def test_apply_prints_match(self, tmp_path: Path) -> None:
        """Keyword-mode apply prints the id and the score."""
        with _cli_env(tmp_path):
            _, output = _apply(tmp_path)
            listed = runner.invoke(app, ["applications", "backend-2024", "--user", "rec-1"])
        assert "Match score: 60%" in output
        assert "Matches: python, postgresql, aws" in output
        assert listed.exit_code == 0, listed.output
        assert "Applications for backend-2024" in listed.output

    def test_apply_missing_file(self, tmp_path: Path) -> None:
        """Nonexistent input files are rejected by argument parsing."""
        result = runner.invoke(
            app,
            [
                "apply",
                str(tmp_path / "nope.txt"),
                str(tmp_path / "nope2.txt"),
                "--job-key",
                "k",
                "--candidate",
                "c",
                "--user",
                "r",
            ],
        )
        assert result.exit_code != 0

    def test_short_text_exits_1(self, tmp_path: Path) -> None:
        """Domain validation errors exit with code 1."""
        jd = tmp_path / "jd.txt"
        resume = tmp_path / "resume.txt"
        jd.write_text("too short")
        resume.write_text(SAMPLE_RESUME)
        with _cli_env(tmp_path):
            result = runner.invoke(
                app,
                [
                    "apply",
                    str(jd),
                    str(resume),
                    "--job-key",
                    "k",
                    "--candidate",
                    "cand-1",
                    "--user",
                    "rec-1",
                    "--keyword",
                ],
            )
        assert result.exit_code == 1
        assert "too short" in result.output


@pytest.mark.unit
class TestReadCommands:
    """Test show, chat, and history."""

    def test_show_as_candidate(self, tmp_path: Path) -> None:
        """The candidate owner can view the match."""
        with _cli_env(tmp_path):
            app_id, _ = _apply(tmp_path)
            result = runner.invoke(app, ["show", app_id, "--user", "cand-1", "--role", "candidate"])
        assert result.exit_code == 0, result.output
        assert "Match score:" in result.output
        assert "backend-2024" in result.output

    def test_show_denied(self, tmp_path: Path) -> None:
        """Strangers get exit code 1."""
        with _cli_env(tmp_path):
            app_id, _ = _apply(tmp_path)
            result = runner.invoke(app, ["show", app_id, "--user", "rec-2"])
        assert result.exit_code == 1
        assert "Access denied" in result.output

    def test_invalid_role_exits_2(self, tmp_path: Path) -> None:
        """Unknown roles are rejected before touching the database."""
        with _cli_env(tmp_path):
            result = runner.invoke(app, ["show", "abc", "--user", "u", "--role", "admin"])
        assert result.exit_code == 2
        assert "unknown role" in result.output

    def test_chat_then_history(self, tmp_path: Path) -> None:
        """A chat turn shows up in history."""
        with _cli_env(tmp_path):
            app_id, _ = _apply(tmp_path)
            chatted = runner.invoke(app, ["chat", app_id, "Python?", "--user", "rec-1"])
            listed = runner.invoke(app, ["history", app_id, "--user", "rec-1"])
        assert chatted.exit_code == 0, chatted.output
        assert "Strong Python background." in chatted.output
        assert "Sources:" in chatted.output
        assert listed.exit_code == 0, listed.output
        assert "Python?" in listed.output
        assert "assistant" in listed.output

    def test_empty_history(self, tmp_path: Path) -> None:
        """History of an application without chat says so."""
        with _cli_env(tmp_path):
            app_id, _ = _apply(tmp_path)
            result = runner.invoke(app, ["history", app_id, "--user", "rec-1"])
        assert result.exit_code == 0
        assert "No messages yet" in result.output
