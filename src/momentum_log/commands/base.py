"""Shared CLI utilities."""

import asyncio
from functools import wraps
from pathlib import Path

import click
from questionary import Style

from ..config import Settings
from ..db import DatabaseInitializer, ExerciseRepository, get_db_path
from ..models import Exercise
from ..utils.dates import parse_iso

# Style for interactive prompts
custom_style = Style(
    [
        ("qmark", "fg:#673ab7 bold"),
        ("question", "bold"),
        ("answer", "fg:#f44336 bold"),
        ("pointer", "fg:#673ab7 bold"),
        ("highlighted", "fg:#673ab7 bold"),
        ("selected", "fg:#cc5454"),
        ("instruction", ""),
        ("text", ""),
    ]
)


def async_command(f):
    """Decorator to run async Click commands."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def get_settings(ctx: click.Context) -> Settings:
    """Settings loaded by the root command."""
    settings = ctx.find_object(Settings)
    if settings is None:
        settings = Settings.load()
        ctx.obj = settings
    return settings


def get_ctx_db_path(ctx: click.Context) -> Path:
    """Database path for the configured data directory."""
    return get_db_path(get_settings(ctx).data_dir)


async def ensure_initialized(ctx: click.Context) -> Path:
    """Ensure the database exists and is seeded, returning its path."""
    db_path = get_ctx_db_path(ctx)
    if not db_path.exists():
        echo_error("Not initialized. Run 'momentum-log init' first.")
        ctx.exit(1)
    await DatabaseInitializer(db_path).initialize()
    return db_path


async def resolve_exercise(ctx: click.Context, db_path: Path, name_or_id: str) -> Exercise:
    """Find an exercise by ID or case-insensitive name, or exit."""
    repo = ExerciseRepository(db_path)
    exercise = await repo.get(name_or_id)
    if exercise is not None:
        return exercise

    matches = await repo.search(name_or_id)
    exact = [e for e in matches if e.name.lower() == name_or_id.lower()]
    if exact:
        return exact[0]
    if len(matches) == 1:
        return matches[0]

    if matches:
        names = ", ".join(e.name for e in matches)
        echo_error(f"'{name_or_id}' matches several exercises: {names}")
    else:
        echo_error(f"No exercise named '{name_or_id}'")
    ctx.exit(1)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Format data as a simple table."""
    if not rows:
        return ""

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = ["".join(h.ljust(widths[i] + padding) for i, h in enumerate(headers))]
    lines.append("".join("-" * w + " " * padding for w in widths))
    for row in rows:
        lines.append(
            "".join(str(cell).ljust(widths[i] + padding) for i, cell in enumerate(row))
        )

    return "\n".join(line.rstrip() for line in lines)


def format_local_time(timestamp: str) -> str:
    """Render a stored UTC timestamp in local time."""
    return parse_iso(timestamp).astimezone().strftime("%Y-%m-%d %H:%M")
