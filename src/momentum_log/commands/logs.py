"""Bodyweight and food log commands."""

from datetime import datetime

import click

from ..db import BodyweightRepository, FoodRepository
from ..models import BodyweightEntry, FoodEntry
from ..utils.dates import to_iso, utc_now_iso
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_local_time,
    format_table,
)


def _logged_at(ctx: click.Context, at: str | None) -> str:
    """Normalize an ``--at`` value to a UTC timestamp, defaulting to now."""
    if at is None:
        return utc_now_iso()
    try:
        # Naive values are local time
        return to_iso(datetime.fromisoformat(at.replace("Z", "+00:00")))
    except ValueError:
        echo_error(f"Invalid timestamp: {at}")
        ctx.exit(1)


@click.group()
def bodyweight():
    """Track bodyweight."""
    pass


@bodyweight.command(name="log")
@click.argument("kg", type=float)
@click.option("--note", "-n", help="Optional note")
@click.option("--at", help="When it was measured (ISO date/time, local unless Z)")
@click.pass_context
@async_command
async def log_bodyweight(ctx, kg: float, note: str | None, at: str | None):
    """Log a bodyweight measurement in kilograms."""
    db_path = await ensure_initialized(ctx)
    entry = BodyweightEntry(weight_kg=kg, logged_at=_logged_at(ctx, at), note=note)
    await BodyweightRepository(db_path).add(entry)
    echo_success(f"Logged {kg:g} kg on {entry.date}")


@bodyweight.command(name="list")
@click.option("--date", "-d", "day", help="Only entries from this local date (YYYY-MM-DD)")
@click.pass_context
@async_command
async def list_bodyweight(ctx, day: str | None):
    """List bodyweight entries, newest first."""
    db_path = await ensure_initialized(ctx)
    repo = BodyweightRepository(db_path)
    entries = await repo.list_for_date(day) if day else await repo.list_all()
    if not entries:
        echo_info("No bodyweight entries.")
        return
    rows = [
        [format_local_time(e.logged_at), f"{e.weight_kg:g} kg", e.note or "", e.id]
        for e in entries
    ]
    click.echo(format_table(["Logged", "Weight", "Note", "ID"], rows))


@bodyweight.command(name="delete")
@click.argument("entry_id")
@click.pass_context
@async_command
async def delete_bodyweight(ctx, entry_id: str):
    """Delete a bodyweight entry."""
    db_path = await ensure_initialized(ctx)
    repo = BodyweightRepository(db_path)
    if await repo.get(entry_id) is None:
        echo_error(f"Entry {entry_id} not found")
        ctx.exit(1)
    await repo.delete(entry_id)
    echo_success(f"Deleted entry {entry_id}")


@click.group()
def food():
    """Keep a simple food log."""
    pass


@food.command(name="log")
@click.argument("text")
@click.option("--note", "-n", help="Optional note")
@click.option("--at", help="When it was eaten (ISO date/time, local unless Z)")
@click.pass_context
@async_command
async def log_food(ctx, text: str, note: str | None, at: str | None):
    """Log something eaten or drunk."""
    db_path = await ensure_initialized(ctx)
    entry = FoodEntry(text=text, logged_at=_logged_at(ctx, at), note=note)
    await FoodRepository(db_path).add(entry)
    echo_success(f"Logged '{text}' on {entry.date}")


@food.command(name="list")
@click.option("--date", "-d", "day", help="Only entries from this local date (YYYY-MM-DD)")
@click.pass_context
@async_command
async def list_food(ctx, day: str | None):
    """List food entries, newest first."""
    db_path = await ensure_initialized(ctx)
    repo = FoodRepository(db_path)
    entries = await repo.list_for_date(day) if day else await repo.list_all()
    if not entries:
        echo_info("No food entries.")
        return
    rows = [[format_local_time(e.logged_at), e.text, e.note or "", e.id] for e in entries]
    click.echo(format_table(["Logged", "Food", "Note", "ID"], rows))


@food.command(name="delete")
@click.argument("entry_id")
@click.pass_context
@async_command
async def delete_food(ctx, entry_id: str):
    """Delete a food entry."""
    db_path = await ensure_initialized(ctx)
    repo = FoodRepository(db_path)
    if await repo.get(entry_id) is None:
        echo_error(f"Entry {entry_id} not found")
        ctx.exit(1)
    await repo.delete(entry_id)
    echo_success(f"Deleted entry {entry_id}")
