"""Initialize the database command."""

import click

from ..config import SETTINGS_FILENAME
from ..db import DatabaseInitializer
from .base import async_command, echo_info, echo_success, get_ctx_db_path, get_settings


@click.command()
@click.pass_context
@async_command
async def init(ctx):
    """Create the data directory and database.

    A fresh database is seeded with a few default exercises. Running init
    again on an existing database changes nothing.
    """
    settings = get_settings(ctx)
    echo_info(f"Initializing momentum-log in {settings.data_dir}")

    db_path = get_ctx_db_path(ctx)
    seeded = await DatabaseInitializer(db_path).initialize()
    if seeded:
        echo_success("Database created with the default exercise library")
    else:
        echo_success("Database already initialized")

    if not (settings.data_dir / SETTINGS_FILENAME).exists():
        path = settings.save()
        echo_success(f"Settings written to {path}")

    click.echo()
    click.echo("Next steps:")
    click.echo("  momentum-log session start       # Start a session")
    click.echo('  momentum-log session log "Chest Press" --weight 40 --reps 10')
    click.echo("  momentum-log session finish      # Finish and earn XP")
