"""Bodyweight and food log entries.

Both entries carry a ``date`` (local YYYY-MM-DD) that is a projection of
``logged_at``. It is exposed as a read-only property so it can never drift
from the timestamp; the repositories persist it alongside ``logged_at``.
"""

from dataclasses import dataclass, field

from ..utils.dates import derive_local_date, utc_now_iso
from ..utils.ids import new_id


@dataclass
class BodyweightEntry:
    """A bodyweight measurement."""

    weight_kg: float
    logged_at: str = field(default_factory=utc_now_iso)
    note: str | None = None
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str | None = None

    @property
    def date(self) -> str:
        return derive_local_date(self.logged_at)

    def to_dict(self) -> dict:
        """Convert to the backup wire format."""
        data = {
            "id": self.id,
            "date": self.date,
            "loggedAt": self.logged_at,
            "weightKg": self.weight_kg,
        }
        if self.note is not None:
            data["note"] = self.note
        data["createdAt"] = self.created_at
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "BodyweightEntry":
        """Create from the backup wire format. ``date`` is re-derived."""
        return cls(
            id=data["id"],
            logged_at=data["loggedAt"],
            weight_kg=data["weightKg"],
            note=data.get("note"),
            created_at=data["createdAt"],
            updated_at=data.get("updatedAt"),
        )


@dataclass
class FoodEntry:
    """A free-text record of something eaten or drunk."""

    text: str
    logged_at: str = field(default_factory=utc_now_iso)
    note: str | None = None
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str | None = None

    @property
    def date(self) -> str:
        return derive_local_date(self.logged_at)

    def to_dict(self) -> dict:
        """Convert to the backup wire format."""
        data = {
            "id": self.id,
            "date": self.date,
            "loggedAt": self.logged_at,
            "text": self.text,
        }
        if self.note is not None:
            data["note"] = self.note
        data["createdAt"] = self.created_at
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "FoodEntry":
        """Create from the backup wire format. ``date`` is re-derived."""
        return cls(
            id=data["id"],
            logged_at=data["loggedAt"],
            text=data["text"],
            note=data.get("note"),
            created_at=data["createdAt"],
            updated_at=data.get("updatedAt"),
        )
