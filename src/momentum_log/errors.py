"""Exception types raised by momentum-log.

Absence of data is never an exception (read paths return ``None`` or an empty
list) and routine precondition outcomes are result values. The classes here
cover the failures a caller has to tell apart to pick a recovery message.
"""


class MomentumLogError(Exception):
    """Base class for all momentum-log errors."""


class StorageError(MomentumLogError):
    """The database rejected a write. The transaction was rolled back."""


class BackupError(MomentumLogError):
    """Base class for problems with a backup file itself."""


class BackupReadError(BackupError):
    """The backup file could not be read or is not valid JSON."""


class BackupTooLargeError(BackupError):
    """The backup file exceeds the configured import size limit."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"File is too large ({size} bytes). "
            f"Maximum size is {limit // (1024 * 1024)} MB."
        )


class BackupImportError(StorageError):
    """Restoring a validated backup failed. Existing data is unchanged."""
