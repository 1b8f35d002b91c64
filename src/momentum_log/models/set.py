"""Set model."""

from dataclasses import dataclass, field
from enum import Enum

from ..utils.dates import utc_now_iso
from ..utils.ids import new_id


class SetKind(str, Enum):
    """How a set was logged."""

    STRENGTH = "strength"
    CARDIO = "cardio"
    TIMED = "timed"


class DistanceUnit(str, Enum):
    KM = "km"
    MI = "mi"


@dataclass
class Set:
    """A single set within a session exercise.

    Numeric fields are optional so half-filled sets can be saved while the
    user is still typing. They are never validated or rejected.
    """

    session_exercise_id: str
    set_index: int
    kind: SetKind | None = None  # None is treated as strength
    weight: float | None = None  # kilograms
    reps: int | None = None
    rpe: float | None = None  # 1-10
    is_warmup: bool | None = None
    duration_sec: int | None = None
    distance: float | None = None
    distance_unit: DistanceUnit | None = None
    incline: float | None = None
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now_iso)

    @property
    def effective_kind(self) -> SetKind:
        return self.kind or SetKind.STRENGTH

    def to_dict(self) -> dict:
        """Convert to the backup wire format."""
        data = {
            "id": self.id,
            "sessionExerciseId": self.session_exercise_id,
            "setIndex": self.set_index,
        }
        optional = {
            "kind": self.kind.value if self.kind else None,
            "weight": self.weight,
            "reps": self.reps,
            "rpe": self.rpe,
            "isWarmup": self.is_warmup,
            "durationSec": self.duration_sec,
            "distance": self.distance,
            "distanceUnit": self.distance_unit.value if self.distance_unit else None,
            "incline": self.incline,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        data["createdAt"] = self.created_at
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Set":
        """Create from the backup wire format."""
        return cls(
            id=data["id"],
            session_exercise_id=data["sessionExerciseId"],
            set_index=int(data["setIndex"]),
            kind=SetKind(data["kind"]) if data.get("kind") else None,
            weight=data.get("weight"),
            reps=data.get("reps"),
            rpe=data.get("rpe"),
            is_warmup=data.get("isWarmup"),
            duration_sec=data.get("durationSec"),
            distance=data.get("distance"),
            distance_unit=DistanceUnit(data["distanceUnit"]) if data.get("distanceUnit") else None,
            incline=data.get("incline"),
            created_at=data["createdAt"],
        )
