"""Backup export and import commands."""

from pathlib import Path

import click
import questionary

from ..errors import BackupError, BackupImportError
from ..services import BackupService, get_import_summary, validate_import_payload
from .base import (
    async_command,
    custom_style,
    echo_error,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    get_settings,
)


@click.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False),
    help="Directory to write the backup to",
)
@click.pass_context
@async_command
async def export(ctx, output: str | None):
    """Export all data to a JSON backup file."""
    db_path = await ensure_initialized(ctx)
    settings = get_settings(ctx)
    directory = Path(output) if output else settings.backup_dir

    path = await BackupService(db_path).export_to_file(directory)
    echo_success(f"Backup written to {path}")


@click.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def import_backup(ctx, path: str, yes: bool):
    """Replace ALL data with the contents of a backup file.

    The file is validated before anything changes. If the import fails,
    existing data is left untouched.
    """
    db_path = await ensure_initialized(ctx)
    settings = get_settings(ctx)
    service = BackupService(db_path, max_import_bytes=settings.max_import_bytes)

    try:
        raw = service.read_file(Path(path))
    except BackupError as e:
        echo_error(str(e))
        ctx.exit(1)

    result = validate_import_payload(raw)
    if not result.valid:
        echo_error(result.error)
        ctx.exit(1)

    summary = get_import_summary(result.payload)
    echo_info(f"Backup from {summary.exported_at}")
    for name, count in summary.counts.items():
        click.echo(f"  {name}: {count}")
    if summary.counts.get("foodEntries"):
        echo_warning("Food entries in backups are not restored.")

    if not yes:
        confirmed = await questionary.confirm(
            "This replaces all current data. Continue?",
            default=False,
            style=custom_style,
        ).ask_async()
        if not confirmed:
            echo_info("Import cancelled.")
            return

    try:
        await service.import_from_payload(result.payload)
    except BackupImportError as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_success("Import complete")
