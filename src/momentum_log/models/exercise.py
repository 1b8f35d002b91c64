"""Exercise library model."""

from dataclasses import dataclass, field
from enum import Enum

from ..utils.dates import utc_now_iso
from ..utils.ids import new_id


class ExerciseCategory(str, Enum):
    """Muscle-group category used for grouping and filtering."""

    FULL_BODY = "full-body"
    CHEST = "chest"
    BACK = "back"
    SHOULDERS = "shoulders"
    ARMS = "arms"
    LEGS = "legs"
    CORE = "core"
    CARDIO = "cardio"
    OTHER = "other"


class EquipmentType(str, Enum):
    """Equipment used for an exercise."""

    BARBELL = "barbell"
    DUMBBELL = "dumbbell"
    CABLE = "cable"
    MACHINE = "machine"
    BODYWEIGHT = "bodyweight"
    CARDIO = "cardio"
    OTHER = "other"


class LogType(str, Enum):
    """Which kind of set editor an exercise is logged with."""

    STRENGTH = "strength"
    CARDIO = "cardio"
    TIMED = "timed"


@dataclass
class Exercise:
    """An exercise in the library."""

    name: str
    category: ExerciseCategory
    equipment_type: EquipmentType
    log_type: LogType | None = None  # None is treated as strength
    notes: str | None = None
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)

    @property
    def effective_log_type(self) -> LogType:
        return self.log_type or LogType.STRENGTH

    def to_dict(self) -> dict:
        """Convert to the backup wire format."""
        data = {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "equipmentType": self.equipment_type.value,
        }
        if self.log_type is not None:
            data["logType"] = self.log_type.value
        if self.notes is not None:
            data["notes"] = self.notes
        data["createdAt"] = self.created_at
        data["updatedAt"] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Exercise":
        """Create from the backup wire format."""
        return cls(
            id=data["id"],
            name=data["name"],
            category=ExerciseCategory(data["category"]),
            equipment_type=EquipmentType(data["equipmentType"]),
            log_type=LogType(data["logType"]) if data.get("logType") else None,
            notes=data.get("notes"),
            created_at=data["createdAt"],
            updated_at=data.get("updatedAt", data["createdAt"]),
        )
