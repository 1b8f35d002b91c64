"""CLI entry point for momentum-log."""

import logging

import click

from . import __version__
from .commands import (
    bodyweight,
    exercises,
    export,
    food,
    import_backup,
    init,
    prs,
    session,
    status,
)
from .config import Settings


@click.group()
@click.version_option(version=__version__, prog_name="momentum-log")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    envvar="MOMENTUM_LOG_DATA_DIR",
    help="Directory holding the database and settings.yaml",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, data_dir: str | None, verbose: bool):
    """momentum-log: a local training log with momentum, XP and PRs.

    Example usage:

        # Create the database
        momentum-log init

        # Train
        momentum-log session start --quest upper
        momentum-log session log "Chest Press" --weight 40 --reps 10
        momentum-log session finish

        # Back up everything
        momentum-log export --output ~/backups
    """
    settings = Settings.load(data_dir)
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = settings


# Register commands
main.add_command(init)
main.add_command(status)
main.add_command(exercises)
main.add_command(session)
main.add_command(bodyweight)
main.add_command(food)
main.add_command(prs)
main.add_command(export)
main.add_command(import_backup)


def run():
    """Run the CLI (handles async event loop)."""
    main()


if __name__ == "__main__":
    run()
