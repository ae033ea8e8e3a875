"""
Vigilant CLI - digital wellbeing from the terminal.

Usage:
    vigilant status                 # Today's usage, budget and lock state
    vigilant record 600             # Record 10 minutes of usage
    vigilant advise                 # Ask for a fresh fatigue advisory
    vigilant emergency              # Alert all guardians
    vigilant unlock                 # Override the API server's lock
    vigilant profile --limit 240    # Show or update the profile
    vigilant guardian-add "Ana"     # Register a guardian
    vigilant routine-add 22:30 Sleep
    vigilant run                    # Headless polling scheduler
    vigilant serve                  # REST API
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable
from typing import Annotated, TypeVar

import httpx
import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from config import Settings, get_settings
from src.core.domain import Guardian, IncidentStatus, LockState, OverrideActor, Profile, Role, RoutineItem
from src.core.engine import WellbeingEngine, build_engine
from src.core.scheduler import build_polling_scheduler
from src.db.database import get_engine, get_session_factory, init_db

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="vigilant",
    help="Vigilant - usage budget, fatigue advisories and emergency alerts",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


def configure_logging(settings: Settings, level: str | None = None) -> None:
    """Route loguru to stderr (and a rotating file when configured)."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level or settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level, rotation="10 MB", retention=5)


def _engine() -> WellbeingEngine:
    settings = get_settings()
    init_db(get_engine())
    return build_engine(settings, get_session_factory())


def _minutes(seconds: int) -> str:
    return f"{seconds // 60}m {seconds % 60:02d}s"


T = TypeVar("T")


async def _closing(engine: WellbeingEngine, awaitable: Awaitable[T]) -> T:
    try:
        return await awaitable
    finally:
        await engine.aclose()


def request_remote_unlock(
    base_url: str,
    actor: OverrideActor | str = OverrideActor.USER,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """
    Ask a running API server to clear its lock.

    Lock state lives in the server process, so an override has to go
    through it rather than through a fresh engine.

    Returns:
        The server's lock state after the request
    """
    with httpx.Client(base_url=base_url, timeout=10.0, transport=transport) as client:
        response = client.post("/api/lock/unlock", json={"actor": OverrideActor(actor).value})
        response.raise_for_status()
        return response.json()["lock_state"]


# =============================================================================
# Usage Commands
# =============================================================================


@app.command()
def status() -> None:
    """Show today's usage against the daily budget."""
    engine = _engine()
    snapshot = engine.status()
    profile = engine.profiles.get()

    table = Table(title=f"Vigilant - {profile.name} ({profile.role.label})", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Used today", _minutes(snapshot.total_seconds))
    table.add_row("Daily limit", _minutes(snapshot.limit_seconds))
    table.add_row("Remaining", _minutes(snapshot.remaining_seconds))
    locked = snapshot.lock_state is LockState.LOCKED
    table.add_row("Access", "[red]LOCKED[/]" if locked else "[green]unlocked[/]")
    if engine.assessments is not None and (latest := engine.assessments.latest()):
        table.add_row("Last fatigue score", f"{latest.score}%")
    console.print(table)


@app.command()
def record(
    seconds: Annotated[int, typer.Argument(help="Usage duration in seconds")],
    app_name: Annotated[str | None, typer.Option("--app", "-a", help="Source label")] = None,
) -> None:
    """Record a slice of usage and evaluate the lock."""
    engine = _engine()
    snapshot = engine.record_usage(seconds, app_name)
    console.print(f"Total today: [bold]{_minutes(snapshot.total_seconds)}[/] of {_minutes(snapshot.limit_seconds)}")
    if snapshot.lock_state is LockState.LOCKED:
        console.print(Panel("[bold red]Daily limit exceeded - access locked[/]", border_style="red"))


@app.command()
def advise() -> None:
    """Request a fresh fatigue advisory."""
    engine = _engine()
    result = asyncio.run(_closing(engine, engine.refresh_advisory()))
    color = "red" if result.score > 70 else "green"
    console.print(
        Panel(
            f"[bold {color}]{result.score}%[/] fatigue\n{result.recommendation}",
            title=f"Advisory ({result.source.value})",
            border_style=color,
        )
    )


@app.command()
def emergency() -> None:
    """Send an emergency alert to every guardian."""
    engine = _engine()
    outcome = asyncio.run(_closing(engine, engine.trigger_emergency()))
    style = "green" if outcome.status is IncidentStatus.DISPATCHED else "yellow"
    console.print(f"[{style}]{outcome.summary()}[/]")
    if outcome.status in (IncidentStatus.FAILED, IncidentStatus.NO_GUARDIANS):
        raise typer.Exit(code=1)


@app.command()
def unlock(
    actor: Annotated[str, typer.Option("--actor", help="user or guardian")] = "user",
    url: Annotated[str | None, typer.Option("--url", help="API base URL")] = None,
) -> None:
    """Override the lock held by the running API server."""
    base_url = url or f"http://127.0.0.1:{get_settings().api_port}"
    try:
        who = OverrideActor(actor)
    except ValueError:
        console.print(f"[red]Unknown actor {actor!r}; use user or guardian[/]")
        raise typer.Exit(code=2)
    try:
        state = request_remote_unlock(base_url, who)
    except httpx.HTTPError as e:
        console.print(f"[red]Could not reach Vigilant API at {base_url}: {escape(str(e))}[/]")
        raise typer.Exit(code=1)
    console.print(f"Access is now [bold]{state}[/]")


# =============================================================================
# Collaborator Commands
# =============================================================================


@app.command()
def profile(
    name: Annotated[str | None, typer.Option("--name", "-n")] = None,
    role: Annotated[str | None, typer.Option("--role", "-r", help="student or it_worker")] = None,
    limit: Annotated[int | None, typer.Option("--limit", "-l", help="Daily limit in minutes")] = None,
) -> None:
    """Show the profile, or update the given fields."""
    engine = _engine()
    current = engine.profiles.get()
    if name is None and role is None and limit is None:
        console.print(f"{current.name} | {current.role.value} | {current.daily_limit_minutes} min/day")
        return
    try:
        updated = Profile(
            name=name or current.name,
            role=Role.parse(role) if role else current.role,
            daily_limit_minutes=limit if limit is not None else current.daily_limit_minutes,
        )
        engine.profiles.put(updated)
    except ValueError as e:
        console.print(f"[red]Invalid profile: {escape(str(e))}[/]")
        raise typer.Exit(code=2)
    console.print(f"[green]Saved[/] {updated.name} | {updated.role.value} | {updated.daily_limit_minutes} min/day")


@app.command("guardian-add")
def guardian_add(
    name: Annotated[str, typer.Argument()],
    phone: Annotated[str, typer.Option("--phone", "-p")] = "",
    email: Annotated[str, typer.Option("--email", "-e")] = "",
) -> None:
    """Register a guardian for emergency alerts."""
    guardian = _engine().guardians.add(Guardian(name=name, phone=phone, email=email))
    console.print(f"[green]Guardian added[/] #{guardian.id} {guardian.name}")


@app.command("routine-add")
def routine_add(
    time: Annotated[str, typer.Argument(help="HH:MM")],
    activity: Annotated[str, typer.Argument()],
) -> None:
    """Add an item to the daily routine."""
    try:
        item = _engine().routines.add(RoutineItem(time=time, activity=activity))
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/]")
        raise typer.Exit(code=2)
    console.print(f"[green]Routine added[/] {item.describe()}")


# =============================================================================
# Long-running Commands
# =============================================================================


@app.command()
def run() -> None:
    """Run the accrual and advisory cadences without the API."""
    settings = get_settings()
    engine = _engine()
    scheduler = build_polling_scheduler(engine, settings)
    console.print(
        f"[cyan]Accruing {settings.accrual_increment_seconds}s every {settings.accrual_interval_seconds}s, "
        f"advisory every {settings.advisory_interval_seconds}s. Ctrl+C to stop.[/]"
    )
    try:
        asyncio.run(_closing(engine, scheduler.run_forever()))
    except KeyboardInterrupt:
        console.print("Stopped.")


@app.command()
def serve(
    host: Annotated[str | None, typer.Option("--host")] = None,
    port: Annotated[int | None, typer.Option("--port")] = None,
) -> None:
    """Start the REST API."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower(),
    )


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    configure_logging(get_settings(), level="WARNING")
    app()


if __name__ == "__main__":
    main()
