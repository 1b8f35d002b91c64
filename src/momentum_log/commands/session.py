"""Training session commands."""

from pathlib import Path

import click
import questionary

from ..db import (
    ExerciseRepository,
    SessionExerciseRepository,
    SessionRepository,
    SetRepository,
)
from ..models import DistanceUnit, LogType, QuestId, Session, Set, SetKind
from ..services import AutosaveCoalescer, PrService, XpService, calculate_momentum
from ..utils.dates import utc_now_iso
from ..utils.set_format import format_set_display
from .base import (
    async_command,
    custom_style,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_local_time,
    get_settings,
    resolve_exercise,
)


async def _require_active(ctx: click.Context, db_path: Path) -> Session:
    session = await SessionRepository(db_path).get_active()
    if session is None:
        echo_error("No session in progress. Start one with 'momentum-log session start'.")
        ctx.exit(1)
    return session


async def _print_session(db_path: Path, session: Session) -> None:
    status = "in progress" if not session.is_completed else "completed"
    click.echo(f"{session.display_name} ({status}) {session.id}")
    click.echo(f"  Started: {format_local_time(session.started_at)}")
    if session.ended_at:
        click.echo(f"  Ended:   {format_local_time(session.ended_at)}")
    if session.notes:
        click.echo(f"  Notes:   {session.notes}")

    session_exercises = await SessionExerciseRepository(db_path).get_session_exercises(
        session.id
    )
    if not session_exercises:
        click.echo("  No exercises yet.")
        return

    exercises = await ExerciseRepository(db_path).get_by_ids(
        se.exercise_id for se in session_exercises
    )
    set_repo = SetRepository(db_path)
    for se in session_exercises:
        exercise = exercises.get(se.exercise_id)
        click.echo(f"  {se.order_index + 1}. {exercise.name if exercise else se.exercise_id}")
        for set_ in await set_repo.get_sets_for_session_exercise(se.id):
            click.echo(f"     Set {set_.set_index + 1}: {format_set_display(set_)}")


@click.group()
def session():
    """Start, log and finish training sessions."""
    pass


@session.command()
@click.option(
    "--quest",
    "-q",
    type=click.Choice([q.value for q in QuestId]),
    help="Session template",
)
@click.pass_context
@async_command
async def start(ctx, quest: str | None):
    """Start a new session."""
    db_path = await ensure_initialized(ctx)
    repo = SessionRepository(db_path)

    active = await repo.get_active()
    if active is not None:
        echo_warning(f"A session is already in progress ({active.id}).")
        ctx.exit(1)

    created = await repo.create(Session(quest_id=QuestId(quest) if quest else None))
    echo_success(f"Started {created.display_name} ({created.id})")


@session.command(name="add")
@click.argument("exercise")
@click.pass_context
@async_command
async def add_exercise(ctx, exercise: str):
    """Add an exercise to the current session."""
    db_path = await ensure_initialized(ctx)
    active = await _require_active(ctx, db_path)
    target = await resolve_exercise(ctx, db_path, exercise)

    se_repo = SessionExerciseRepository(db_path)
    se = await se_repo.append(active.id, target.id)
    echo_success(f"Added {target.name} as exercise {se.order_index + 1}")

    last = await se_repo.get_last_attempt(target.id, exclude_session_id=active.id)
    if last and last.sets:
        echo_info(f"Last time ({format_local_time(last.session.ended_at)}):")
        for set_ in last.sets:
            click.echo(f"  {format_set_display(set_)}")


@session.command(name="log")
@click.argument("exercise")
@click.option("--weight", "-w", type=float, help="Weight in kg")
@click.option("--reps", "-r", type=int, help="Repetitions")
@click.option("--rpe", type=click.FloatRange(1, 10), help="Rate of perceived exertion")
@click.option("--warmup", is_flag=True, help="Mark as a warm-up set")
@click.option("--duration", type=int, help="Duration in seconds (cardio/timed)")
@click.option("--distance", type=float, help="Distance (cardio)")
@click.option(
    "--unit",
    type=click.Choice([u.value for u in DistanceUnit]),
    default=DistanceUnit.KM.value,
    help="Distance unit",
)
@click.option("--incline", type=float, help="Incline percent (cardio)")
@click.pass_context
@async_command
async def log_set(
    ctx,
    exercise: str,
    weight: float | None,
    reps: int | None,
    rpe: float | None,
    warmup: bool,
    duration: int | None,
    distance: float | None,
    unit: str,
    incline: float | None,
):
    """Log a set for an exercise in the current session.

    The exercise is added to the session first if it is not there yet.
    """
    db_path = await ensure_initialized(ctx)
    active = await _require_active(ctx, db_path)
    target = await resolve_exercise(ctx, db_path, exercise)

    se_repo = SessionExerciseRepository(db_path)
    matching = [
        se
        for se in await se_repo.get_session_exercises(active.id)
        if se.exercise_id == target.id
    ]
    se = matching[-1] if matching else await se_repo.append(active.id, target.id)

    log_type = target.effective_log_type
    if log_type == LogType.STRENGTH:
        new_set = Set(
            session_exercise_id=se.id,
            set_index=0,
            kind=SetKind.STRENGTH,
            weight=weight,
            reps=reps,
            rpe=rpe,
            is_warmup=warmup or None,
        )
    else:
        new_set = Set(
            session_exercise_id=se.id,
            set_index=0,
            kind=SetKind(log_type.value),
            duration_sec=duration,
            distance=distance,
            distance_unit=DistanceUnit(unit) if distance is not None else None,
            incline=incline,
        )

    stored = await SetRepository(db_path).append(new_set)
    echo_success(f"{target.name} set {stored.set_index + 1}: {format_set_display(stored)}")


@session.command()
@click.argument("session_id", required=False)
@click.pass_context
@async_command
async def show(ctx, session_id: str | None):
    """Show a session (default: the current or most recent one)."""
    db_path = await ensure_initialized(ctx)
    repo = SessionRepository(db_path)

    if session_id:
        target = await repo.get(session_id)
    else:
        target = await repo.get_active()
        if target is None:
            completed = await repo.get_completed_sessions()
            target = completed[0] if completed else None

    if target is None:
        echo_info("No session found.")
        return

    await _print_session(db_path, target)


@session.command()
@click.option("--text", "-t", help="Set the notes without prompting")
@click.pass_context
@async_command
async def notes(ctx, text: str | None):
    """Write notes for the current session.

    Without --text, lines are read one at a time and saved in the background
    while you type. An empty line finishes.
    """
    db_path = await ensure_initialized(ctx)
    active = await _require_active(ctx, db_path)
    repo = SessionRepository(db_path)

    async def save(value: str) -> None:
        active.notes = value or None
        active.updated_at = utc_now_iso()
        await repo.update(active)

    saver = AutosaveCoalescer(save, delay=get_settings(ctx).autosave_delay)
    try:
        if text is not None:
            saver.schedule(text)
        else:
            lines = [active.notes] if active.notes else []
            while True:
                line = await questionary.text(
                    "Note (empty line to finish):", style=custom_style
                ).ask_async()
                if not line:
                    break
                lines.append(line)
                saver.schedule("\n".join(lines))
    finally:
        await saver.close()

    echo_success("Notes saved")


@session.command()
@click.pass_context
@async_command
async def finish(ctx):
    """Finish the current session and award XP."""
    db_path = await ensure_initialized(ctx)
    active = await _require_active(ctx, db_path)
    repo = SessionRepository(db_path)

    finished = await repo.finish(active.id)
    echo_success(f"Finished {finished.display_name}")

    result = await XpService(db_path).award_session_xp(finished.id)
    if result.awarded:
        b = result.breakdown
        click.echo(
            f"  +{b.session_xp} XP "
            f"(session {b.session_completion_xp}, {b.set_count} sets {b.set_xp}, "
            f"{b.pr_count} PRs {b.pr_xp})"
        )
        level = XpService.compute_level(result.new_total_xp)
        click.echo(f"  Total XP: {result.new_total_xp}  Level {level}")

    prs = await PrService(db_path).get_prs_for_session(finished.id)
    if prs:
        exercises = await ExerciseRepository(db_path).get_by_ids(p.exercise_id for p in prs)
        for pr in prs:
            exercise = exercises.get(pr.exercise_id)
            name = exercise.name if exercise else pr.exercise_id
            click.echo(f"  New PR: {name} {pr.previous_max:g} kg -> {pr.new_max:g} kg")

    momentum = calculate_momentum(await repo.get_completed_sessions())
    click.echo(f"  Momentum: {momentum.status.value} ({momentum.days_remaining} days left)")


@session.command()
@click.argument("session_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx, session_id: str, yes: bool):
    """Delete a session with all its sets and PRs."""
    db_path = await ensure_initialized(ctx)
    repo = SessionRepository(db_path)
    target = await repo.get(session_id)
    if target is None:
        echo_error(f"Session {session_id} not found")
        ctx.exit(1)

    if not yes and not await questionary.confirm(
        f"Delete {target.display_name} {target.id}?", default=False, style=custom_style
    ).ask_async():
        echo_info("Cancelled.")
        return

    await repo.delete(session_id)
    echo_success(f"Deleted session {session_id}")
