"""Progress overview commands: status and PRs."""

import click

from ..db import ExerciseRepository, PREventRepository, SessionRepository
from ..services import InsightsService, XpService, calculate_momentum
from .base import (
    async_command,
    echo_info,
    ensure_initialized,
    format_local_time,
    format_table,
)


@click.command()
@click.pass_context
@async_command
async def status(ctx):
    """Show momentum, level and recent training."""
    db_path = await ensure_initialized(ctx)
    sessions = SessionRepository(db_path)

    momentum = calculate_momentum(await sessions.get_completed_sessions())
    if momentum.is_active:
        click.echo(f"Momentum: Active ({momentum.days_remaining} days left)")
    else:
        click.echo("Momentum: Paused")
    if momentum.last_session_date:
        click.echo(f"Last session: {format_local_time(momentum.last_session_date)}")

    progress = await XpService(db_path).get_level_progress()
    click.echo(
        f"Level {progress.level}: {progress.total_xp} XP "
        f"({progress.xp_to_next_level} to next level)"
    )

    active = await sessions.get_active()
    if active:
        started = format_local_time(active.started_at)
        click.echo(f"In progress: {active.display_name} since {started}")

    insights = await InsightsService(db_path).load()
    click.echo()
    click.echo(f"Sessions in the last {len(insights.weeks)} weeks: {insights.total}")
    for week in insights.weeks:
        click.echo(f"  {week.label}: {week.count}")


@click.command()
@click.argument("session_id", required=False)
@click.pass_context
@async_command
async def prs(ctx, session_id: str | None):
    """List personal records, for one session or all time."""
    db_path = await ensure_initialized(ctx)
    repo = PREventRepository(db_path)
    events = await repo.get_for_session(session_id) if session_id else await repo.list_all()

    if not events:
        echo_info("No personal records yet.")
        return

    exercises = await ExerciseRepository(db_path).get_by_ids(e.exercise_id for e in events)
    rows = []
    for event in events:
        exercise = exercises.get(event.exercise_id)
        rows.append(
            [
                format_local_time(event.detected_at),
                exercise.name if exercise else event.exercise_id,
                f"{event.previous_max:g} kg",
                f"{event.new_max:g} kg",
                f"+{event.improvement:g}",
            ]
        )
    click.echo(format_table(["Date", "Exercise", "Previous", "New", "Gain"], rows))
