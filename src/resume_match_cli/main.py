"""CLI entrypoint using typer."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TypeVar

import structlog
import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from resume_match_agents.agents.chat_assembler import ChatAssemblerAgent
from resume_match_agents.agents.skill_extractor import SkillExtractorAgent
from resume_match_agents.observability import (
    bind_request_context,
    clear_request_context,
    configure_logging,
)
from resume_match_agents.services.applications import ApplicationService
from resume_match_agents.services.chat import ChatService
from resume_match_agents.tools.embedder import build_embedding_client
from resume_match_agents.tools.llm import build_completion_client
from resume_match_core.config.settings import Settings
from resume_match_core.exceptions import ResumeMatchError
from resume_match_core.models.application import (
    ApplicationRequest,
    AuthUser,
    UserRole,
)
from resume_match_core.models.match import MatchResult
from resume_match_infra.db.engine import create_engine
from resume_match_infra.db.session import create_session_factory, init_db

app = typer.Typer(
    name="resume-match",
    help="Resume to job description matching with grounded chat",
)
console = Console()
logger = structlog.get_logger()

T = TypeVar("T")

ROLE_HELP = "Caller role: recruiter or candidate"


@app.command()
def apply(
    jd_file: Path = typer.Argument(..., help="Plain-text job description", exists=True),
    resume_file: Path = typer.Argument(..., help="Plain-text resume", exists=True),
    job_key: str = typer.Option(..., "--job-key", help="Recruiter-scoped job key"),
    candidate: str = typer.Option(..., "--candidate", help="Candidate external user id"),
    title: str | None = typer.Option(None, "--title", help="Job title"),
    user: str = typer.Option(..., "--user", help="Recruiter external user id"),
    keyword: bool = typer.Option(False, "--keyword", help="Use dictionary keyword matching"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Create an application from a JD and a resume, and print its match."""
    settings = _load_settings(verbose)
    if keyword:
        settings.match_mode = "keyword"

    request = ApplicationRequest(
        job_key=job_key,
        job_title=title,
        candidate_user_id=candidate,
        jd_text=jd_file.read_text(encoding="utf-8"),
        resume_text=resume_file.read_text(encoding="utf-8"),
        resume_filename=resume_file.name,
    )
    caller = AuthUser(external_id=user, role="recruiter")

    async def _apply(session_factory: async_sessionmaker[AsyncSession]) -> None:
        extractor: SkillExtractorAgent | None = None
        if settings.match_mode == "structured":
            extractor = SkillExtractorAgent(settings, build_completion_client(settings))
        service = ApplicationService(
            settings,
            session_factory,
            extractor=extractor,
            embeddings=build_embedding_client(settings),
        )
        created = await service.create_application(request, caller)
        console.print(f"[bold green]Application created:[/bold green] {created.application_id}")
        console.print(f"  Job: {created.job_id}")
        _print_match(created.match)

    _run(settings, _apply, user=user)


@app.command()
def show(
    application_id: str = typer.Argument(..., help="Application id"),
    user: str = typer.Option(..., "--user", help="Caller external user id"),
    role: str = typer.Option("recruiter", "--role", help=ROLE_HELP),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Show one application's match."""
    settings = _load_settings(verbose)
    caller = _caller(user, role)

    async def _show(session_factory: async_sessionmaker[AsyncSession]) -> None:
        service = ApplicationService(settings, session_factory)
        view = await service.get_application(application_id, caller)
        title = f" ({view.job_title})" if view.job_title else ""
        console.print(f"[bold]Job:[/bold] {view.job_key}{title}")
        console.print(f"[dim]Created: {view.created_at:%Y-%m-%d %H:%M}[/dim]")
        _print_match(view.match)

    _run(settings, _show, user=user, application_id=application_id)


@app.command()
def applications(
    job_key: str = typer.Argument(..., help="Recruiter-scoped job key"),
    user: str = typer.Option(..., "--user", help="Recruiter external user id"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """List applications for one of your jobs, newest first."""
    settings = _load_settings(verbose)
    caller = AuthUser(external_id=user, role="recruiter")

    async def _list(session_factory: async_sessionmaker[AsyncSession]) -> None:
        service = ApplicationService(settings, session_factory)
        rows = await service.list_job_applications(job_key, caller)
        if not rows:
            console.print(f"[yellow]No applications for {job_key}[/yellow]")
            return

        table = Table(title=f"Applications for {job_key}")
        table.add_column("Application")
        table.add_column("Candidate")
        table.add_column("Score", justify="right")
        table.add_column("Created")
        for row in rows:
            table.add_row(
                row.application_id,
                row.candidate_user_id,
                str(row.match_score),
                f"{row.created_at:%Y-%m-%d %H:%M}",
            )
        console.print(table)

    _run(settings, _list, user=user)


@app.command()
def chat(
    application_id: str = typer.Argument(..., help="Application id"),
    question: str = typer.Argument(..., help="Question about the match"),
    user: str = typer.Option(..., "--user", help="Caller external user id"),
    role: str = typer.Option("recruiter", "--role", help=ROLE_HELP),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Ask a grounded question about an application."""
    settings = _load_settings(verbose)
    caller = _caller(user, role)

    async def _chat(session_factory: async_sessionmaker[AsyncSession]) -> None:
        assembler = ChatAssemblerAgent(
            settings,
            build_completion_client(settings),
            build_embedding_client(settings),
        )
        service = ChatService(settings, session_factory, assembler)
        answer = await service.chat(application_id, question, caller)
        console.print(answer.answer)
        if answer.sources:
            console.print("\n[bold]Sources:[/bold]")
            for source in answer.sources:
                console.print(f"  [{source.type}] {source.excerpt}", markup=False)

    _run(settings, _chat, user=user, application_id=application_id)


@app.command()
def history(
    application_id: str = typer.Argument(..., help="Application id"),
    user: str = typer.Option(..., "--user", help="Caller external user id"),
    role: str = typer.Option("recruiter", "--role", help=ROLE_HELP),
    limit: int = typer.Option(50, "--limit", min=1, help="Maximum turns to show"),
    offset: int = typer.Option(0, "--offset", min=0, help="Turns to skip"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Show the chat history of an application."""
    settings = _load_settings(verbose)
    caller = _caller(user, role)

    async def _history(session_factory: async_sessionmaker[AsyncSession]) -> None:
        service = ChatService(settings, session_factory)
        result = await service.get_history(application_id, caller, limit=limit, offset=offset)
        if not result.messages:
            console.print("[yellow]No messages yet[/yellow]")
            return
        for turn in result.messages:
            console.print(f"[bold]{turn.role}[/bold] [dim]{turn.created_at:%H:%M:%S}[/dim]")
            console.print(turn.content, markup=False)

    _run(settings, _history, user=user, application_id=application_id)


@app.command()
def version() -> None:
    """Show version."""
    console.print("resume-match-agent v0.1.0")


def _load_settings(verbose: bool) -> Settings:
    """Load settings from the environment and configure logging."""
    settings = Settings()  # type: ignore[call-arg]
    if verbose:
        settings.log_level = "DEBUG"
    configure_logging(settings)
    return settings


def _caller(user: str, role: str) -> AuthUser:
    """Build the caller identity, rejecting unknown roles."""
    if role not in ("recruiter", "candidate"):
        console.print(f"[red]Error:[/red] unknown role {role!r}")
        raise typer.Exit(code=2)
    checked_role: UserRole = "recruiter" if role == "recruiter" else "candidate"
    return AuthUser(external_id=user, role=checked_role)


def _print_match(match: MatchResult) -> None:
    """Render a match snapshot."""
    console.print(f"\n[bold]Match score:[/bold] {match.score}%")
    if match.experience_highlight:
        console.print(f"  {match.experience_highlight}")
    if match.strengths:
        console.print(f"[green]Strengths:[/green] {', '.join(match.strengths)}")
    if match.gaps:
        console.print(f"[yellow]Gaps:[/yellow] {', '.join(match.gaps)}")
    for insight in match.insights:
        console.print(f"  - {insight}")


def _run(
    settings: Settings,
    command: Callable[[async_sessionmaker[AsyncSession]], Awaitable[T]],
    **context: str,
) -> T:
    """Run one async command against the database, mapping domain errors to exit codes."""
    bind_request_context(**context)
    try:
        return asyncio.run(_with_database(settings, command))
    except ResumeMatchError as exc:
        logger.error("command_failed", error_type=type(exc).__name__, status_code=exc.status_code)
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    finally:
        clear_request_context()


async def _with_database(
    settings: Settings,
    command: Callable[[async_sessionmaker[AsyncSession]], Awaitable[T]],
) -> T:
    """Open the engine, create tables, run the command and dispose the engine."""
    async with _database(settings) as session_factory:
        return await command(session_factory)


@asynccontextmanager
async def _database(settings: Settings) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """Engine lifecycle for one CLI invocation."""
    engine = create_engine(settings)
    try:
        await init_db(engine)
        yield create_session_factory(engine)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    app()
