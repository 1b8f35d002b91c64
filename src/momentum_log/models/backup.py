"""Backup document models."""

from dataclasses import dataclass, field

from .exercise import Exercise
from .gamification import GamificationState, PREvent
from .log_entries import BodyweightEntry, FoodEntry
from .session import Session, SessionExercise
from .set import Set

# Bump whenever the table set or required fields change
SCHEMA_VERSION = 2

# Wire collection name -> model class
COLLECTIONS = {
    "exercises": Exercise,
    "sessions": Session,
    "sessionExercises": SessionExercise,
    "sets": Set,
    "bodyweightEntries": BodyweightEntry,
    "foodEntries": FoodEntry,
    "gamificationState": GamificationState,
    "prEvents": PREvent,
}

REQUIRED_COLLECTIONS = (
    "exercises",
    "sessions",
    "sessionExercises",
    "sets",
    "bodyweightEntries",
    "gamificationState",
    "prEvents",
)

OPTIONAL_COLLECTIONS = ("foodEntries",)

# Collections whose records must carry a string id
ID_CHECKED_COLLECTIONS = (
    "exercises",
    "sessions",
    "sessionExercises",
    "sets",
    "bodyweightEntries",
    "prEvents",
)


@dataclass
class StoreData:
    """The full contents of the store, one list per table."""

    exercises: list[Exercise] = field(default_factory=list)
    sessions: list[Session] = field(default_factory=list)
    session_exercises: list[SessionExercise] = field(default_factory=list)
    sets: list[Set] = field(default_factory=list)
    bodyweight_entries: list[BodyweightEntry] = field(default_factory=list)
    food_entries: list[FoodEntry] = field(default_factory=list)
    gamification_state: list[GamificationState] = field(default_factory=list)
    pr_events: list[PREvent] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to the ``data`` section of a backup document."""
        return {
            "exercises": [e.to_dict() for e in self.exercises],
            "sessions": [s.to_dict() for s in self.sessions],
            "sessionExercises": [se.to_dict() for se in self.session_exercises],
            "sets": [s.to_dict() for s in self.sets],
            "bodyweightEntries": [b.to_dict() for b in self.bodyweight_entries],
            "foodEntries": [f.to_dict() for f in self.food_entries],
            "gamificationState": [g.to_dict() for g in self.gamification_state],
            "prEvents": [p.to_dict() for p in self.pr_events],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StoreData":
        """Create from the ``data`` section of a backup document.

        Missing collections become empty lists.
        """
        return cls(
            exercises=[Exercise.from_dict(d) for d in data.get("exercises") or []],
            sessions=[Session.from_dict(d) for d in data.get("sessions") or []],
            session_exercises=[
                SessionExercise.from_dict(d) for d in data.get("sessionExercises") or []
            ],
            sets=[Set.from_dict(d) for d in data.get("sets") or []],
            bodyweight_entries=[
                BodyweightEntry.from_dict(d) for d in data.get("bodyweightEntries") or []
            ],
            food_entries=[FoodEntry.from_dict(d) for d in data.get("foodEntries") or []],
            gamification_state=[
                GamificationState.from_dict(d) for d in data.get("gamificationState") or []
            ],
            pr_events=[PREvent.from_dict(d) for d in data.get("prEvents") or []],
        )


@dataclass
class ExportPayload:
    """A validated backup document."""

    schema_version: int
    exported_at: str
    data: dict  # wire-format collections

    def to_dict(self) -> dict:
        return {
            "schemaVersion": self.schema_version,
            "exportedAt": self.exported_at,
            "data": self.data,
        }
