"""Exercise library commands."""

import click
import questionary

from ..db import ExerciseRepository
from ..errors import StorageError
from ..models import EquipmentType, Exercise, ExerciseCategory, LogType
from .base import (
    async_command,
    custom_style,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    resolve_exercise,
)


@click.group()
def exercises():
    """Manage the exercise library."""
    pass


@exercises.command(name="list")
@click.option("--search", "-s", help="Filter by name")
@click.pass_context
@async_command
async def list_exercises(ctx, search: str | None):
    """List exercises."""
    db_path = await ensure_initialized(ctx)
    repo = ExerciseRepository(db_path)
    items = await repo.search(search) if search else await repo.list_all()

    if not items:
        echo_info("No exercises found.")
        return

    rows = [
        [e.name, e.category.value, e.equipment_type.value, e.effective_log_type.value, e.id]
        for e in items
    ]
    click.echo(format_table(["Name", "Category", "Equipment", "Log", "ID"], rows))


@exercises.command(name="add")
@click.argument("name")
@click.option(
    "--category",
    "-c",
    type=click.Choice([c.value for c in ExerciseCategory]),
    help="Muscle-group category",
)
@click.option(
    "--equipment",
    "-e",
    type=click.Choice([e.value for e in EquipmentType]),
    help="Equipment type",
)
@click.option(
    "--log-type",
    type=click.Choice([t.value for t in LogType]),
    default=LogType.STRENGTH.value,
    help="How sets are logged",
)
@click.option("--notes", help="Free-form notes")
@click.pass_context
@async_command
async def add_exercise(
    ctx,
    name: str,
    category: str | None,
    equipment: str | None,
    log_type: str,
    notes: str | None,
):
    """Add an exercise to the library.

    Category and equipment are asked for interactively when omitted.
    """
    db_path = await ensure_initialized(ctx)

    if category is None:
        category = await questionary.select(
            "Category:",
            choices=[c.value for c in ExerciseCategory],
            style=custom_style,
        ).ask_async()
    if equipment is None:
        equipment = await questionary.select(
            "Equipment:",
            choices=[e.value for e in EquipmentType],
            style=custom_style,
        ).ask_async()
    if category is None or equipment is None:
        echo_info("Cancelled.")
        return

    exercise = Exercise(
        name=name,
        category=ExerciseCategory(category),
        equipment_type=EquipmentType(equipment),
        log_type=LogType(log_type),
        notes=notes,
    )
    await ExerciseRepository(db_path).add(exercise)
    echo_success(f"Added {exercise.name} ({exercise.id})")


@exercises.command(name="delete")
@click.argument("exercise")
@click.pass_context
@async_command
async def delete_exercise(ctx, exercise: str):
    """Delete an exercise that no session uses."""
    db_path = await ensure_initialized(ctx)
    target = await resolve_exercise(ctx, db_path, exercise)
    try:
        await ExerciseRepository(db_path).delete(target.id)
    except StorageError:
        echo_error(f"{target.name} is used by a session and cannot be deleted.")
        ctx.exit(1)
    echo_success(f"Deleted {target.name}")
