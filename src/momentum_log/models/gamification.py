"""Gamification state and PR events."""

from dataclasses import dataclass, field

from ..utils.dates import utc_now_iso
from ..utils.ids import new_id

# Fixed key of the single gamification state row
GAMIFICATION_STATE_ID = "default"

XP_PER_LEVEL = 1000


def compute_level(total_xp: int) -> int:
    """Level derived from total XP: ``floor(total_xp / 1000) + 1``."""
    return total_xp // XP_PER_LEVEL + 1


@dataclass
class GamificationState:
    """Cumulative XP. Exactly one row exists, keyed by ``GAMIFICATION_STATE_ID``."""

    total_xp: int = 0
    id: str = GAMIFICATION_STATE_ID

    @property
    def level(self) -> int:
        return compute_level(self.total_xp)

    def to_dict(self) -> dict:
        return {"id": self.id, "totalXp": self.total_xp}

    @classmethod
    def from_dict(cls, data: dict) -> "GamificationState":
        return cls(
            id=data.get("id", GAMIFICATION_STATE_ID),
            total_xp=int(data.get("totalXp", 0)),
        )


@dataclass
class PREvent:
    """A personal record: a strictly heavier top set than any earlier session.

    Immutable once stored. ``previous_max`` is always positive and
    ``new_max`` always exceeds it.
    """

    session_id: str
    exercise_id: str
    previous_max: float
    new_max: float
    detected_at: str = field(default_factory=utc_now_iso)
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        if self.previous_max <= 0:
            raise ValueError("previous_max must be greater than 0")
        if self.new_max <= self.previous_max:
            raise ValueError("new_max must be greater than previous_max")

    @property
    def improvement(self) -> float:
        return self.new_max - self.previous_max

    def to_dict(self) -> dict:
        """Convert to the backup wire format."""
        return {
            "id": self.id,
            "sessionId": self.session_id,
            "exerciseId": self.exercise_id,
            "previousMax": self.previous_max,
            "newMax": self.new_max,
            "detectedAt": self.detected_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PREvent":
        """Create from the backup wire format."""
        return cls(
            id=data["id"],
            session_id=data["sessionId"],
            exercise_id=data["exerciseId"],
            previous_max=data["previousMax"],
            new_max=data["newMax"],
            detected_at=data["detectedAt"],
        )
