"""Backup export and import.

A backup is a single JSON document holding every table of the store:

    {"schemaVersion": 2, "exportedAt": "...", "data": {"exercises": [...], ...}}

Import validates the document before anything is touched, then replaces the
whole store in one transaction. If any insert fails the transaction is rolled
back and the existing data is left exactly as it was.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

from ..db.engine import get_db_path
from ..db.repositories import StoreRepository
from ..errors import BackupImportError, BackupReadError, BackupTooLargeError, StorageError
from ..models.backup import (
    ID_CHECKED_COLLECTIONS,
    OPTIONAL_COLLECTIONS,
    REQUIRED_COLLECTIONS,
    SCHEMA_VERSION,
    ExportPayload,
    StoreData,
)
from ..utils.dates import utc_now_iso

logger = logging.getLogger(__name__)

DEFAULT_MAX_IMPORT_BYTES = 20 * 1024 * 1024


def backup_filename(today: date | None = None) -> str:
    """Filename for a backup written on ``today`` (local date)."""
    today = today or date.today()
    return f"momentum-backup-{today.isoformat()}.json"


@dataclass
class ValidationResult:
    """Outcome of validating a backup document.

    On failure ``error`` is a readable reason; ``field`` and ``index`` point at
    the offending collection and record when the failure is record-level.
    """

    valid: bool
    error: str | None = None
    payload: ExportPayload | None = None
    field: str | None = None
    index: int | None = None

    @classmethod
    def failure(
        cls, error: str, field: str | None = None, index: int | None = None
    ) -> "ValidationResult":
        return cls(valid=False, error=error, field=field, index=index)


@dataclass
class ImportSummary:
    """What a backup document would restore."""

    exported_at: str
    counts: dict[str, int] = field(default_factory=dict)


def validate_import_payload(obj: Any) -> ValidationResult:
    """Check that ``obj`` is a restorable backup document.

    Pure: performs no I/O. Checks run in a fixed order and the first failure
    is reported.
    """
    if not isinstance(obj, dict):
        return ValidationResult.failure("Invalid backup file format.")

    for key in ("schemaVersion", "exportedAt", "data"):
        if key not in obj:
            return ValidationResult.failure(f"Missing {key} in backup file.", field=key)

    version = obj["schemaVersion"]
    if isinstance(version, bool) or version != SCHEMA_VERSION:
        return ValidationResult.failure(
            f"Schema version mismatch. Expected {SCHEMA_VERSION}, got {version}. "
            "This backup is not compatible with the current app version.",
            field="schemaVersion",
        )

    if not isinstance(obj["exportedAt"], str):
        return ValidationResult.failure(
            "Invalid exportedAt format in backup file.", field="exportedAt"
        )

    data = obj["data"]
    if not isinstance(data, dict):
        return ValidationResult.failure("Invalid data format in backup file.", field="data")

    for name in REQUIRED_COLLECTIONS:
        if name not in data:
            return ValidationResult.failure(f"Missing {name} in backup data.", field=name)
        if not isinstance(data[name], list):
            return ValidationResult.failure(
                f"{name} must be an array in backup data.", field=name
            )

    for name in OPTIONAL_COLLECTIONS:
        if name in data and not isinstance(data[name], list):
            return ValidationResult.failure(
                f"{name} must be an array in backup data.", field=name
            )

    for name in ID_CHECKED_COLLECTIONS:
        for i, record in enumerate(data[name]):
            if not isinstance(record, dict):
                return ValidationResult.failure(
                    f"Invalid record at {name}[{i}]: expected object.", field=name, index=i
                )
            if not isinstance(record.get("id"), str):
                return ValidationResult.failure(
                    f"Invalid record at {name}[{i}]: missing or invalid 'id' field.",
                    field=name,
                    index=i,
                )

    for i, record in enumerate(data["gamificationState"]):
        if not isinstance(record, dict):
            return ValidationResult.failure(
                f"Invalid record at gamificationState[{i}]: expected object.",
                field="gamificationState",
                index=i,
            )

    return ValidationResult(
        valid=True,
        payload=ExportPayload(
            schema_version=SCHEMA_VERSION,
            exported_at=obj["exportedAt"],
            data=data,
        ),
    )


def get_import_summary(payload: ExportPayload) -> ImportSummary:
    """Record counts of a validated payload, for a confirmation prompt."""
    counts = {
        name: len(payload.data.get(name) or [])
        for name in (
            "exercises",
            "sessions",
            "sets",
            "bodyweightEntries",
            "prEvents",
            "foodEntries",
        )
    }
    return ImportSummary(exported_at=payload.exported_at, counts=counts)


class BackupService:
    """Exports the store to a JSON document and restores it from one."""

    def __init__(
        self,
        db_path: Path | None = None,
        max_import_bytes: int = DEFAULT_MAX_IMPORT_BYTES,
    ):
        self.db_path = db_path or get_db_path()
        self.max_import_bytes = max_import_bytes
        self.store = StoreRepository(self.db_path)

    async def generate_export_payload(self) -> ExportPayload:
        """Snapshot every table into a backup document."""
        data = await self.store.get_all_data_for_export()
        return ExportPayload(
            schema_version=SCHEMA_VERSION,
            exported_at=utc_now_iso(),
            data=data.to_dict(),
        )

    async def export_to_file(self, directory: Path | None = None) -> Path:
        """Write a backup document into ``directory`` (default: cwd).

        Returns:
            Path of the written file, named ``momentum-backup-YYYY-MM-DD.json``.
        """
        directory = Path(directory) if directory else Path.cwd()
        directory.mkdir(parents=True, exist_ok=True)

        payload = await self.generate_export_payload()
        path = directory / backup_filename()
        path.write_text(json.dumps(payload.to_dict(), indent=2), encoding="utf-8")

        logger.info("Exported backup to %s", path)
        return path

    def read_file(self, path: Path) -> Any:
        """Read and parse a backup file.

        The size limit is checked before the file is opened.

        Raises:
            BackupTooLargeError: If the file exceeds ``max_import_bytes``.
            BackupReadError: If the file cannot be read or is not valid JSON.
        """
        path = Path(path)
        try:
            size = path.stat().st_size
        except OSError as e:
            raise BackupReadError("Failed to read file. Please try again.") from e

        if size > self.max_import_bytes:
            raise BackupTooLargeError(size, self.max_import_bytes)

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise BackupReadError("Failed to read file. Please try again.") from e

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise BackupReadError(
                "Invalid JSON file. Please select a valid backup file."
            ) from e

    async def import_from_payload(self, payload: ExportPayload) -> None:
        """Replace all data with the contents of a validated payload.

        ``foodEntries`` are not restored: the food table is cleared like every
        other table and left empty.

        Raises:
            BackupImportError: If the records cannot be stored. Nothing changed.
        """
        try:
            restorable = {
                name: records
                for name, records in payload.data.items()
                if name != "foodEntries"
            }
            data = StoreData.from_dict(restorable)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Rejected backup with malformed record: %s", e)
            raise BackupImportError(f"Backup contains a malformed record: {e}") from e

        try:
            await self.store.import_all_data(data)
        except StorageError as e:
            raise BackupImportError(
                f"Import failed and no data was changed: {e}"
            ) from e

        logger.info(
            "Imported backup from %s (%d sessions, %d sets)",
            payload.exported_at,
            len(data.sessions),
            len(data.sets),
        )
