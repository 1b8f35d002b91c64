"""Utility helpers for momentum-log."""

from .dates import derive_local_date, local_date_of, utc_now_iso
from .ids import new_id

__all__ = [
    "derive_local_date",
    "local_date_of",
    "new_id",
    "utc_now_iso",
]
