"""Training session models."""

from dataclasses import dataclass, field
from enum import Enum

from ..utils.dates import utc_now_iso
from ..utils.ids import new_id
from .set import Set


class QuestId(str, Enum):
    """Session template identifiers. Cosmetic only."""

    QUICK = "quick"
    FULL_BODY = "full-body"
    UPPER = "upper"
    LOWER = "lower"


QUEST_NAMES = {
    QuestId.QUICK: "Quick Session",
    QuestId.FULL_BODY: "Full Body",
    QuestId.UPPER: "Upper Body",
    QuestId.LOWER: "Lower Body",
}


@dataclass
class Session:
    """A training session.

    A session without ``ended_at`` is in progress and never counts as
    completed for momentum, PR history or XP.
    """

    started_at: str = field(default_factory=utc_now_iso)
    ended_at: str | None = None
    quest_id: QuestId | None = None
    notes: str | None = None
    xp_awarded: bool | None = None
    id: str = field(default_factory=new_id)
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)

    @property
    def is_completed(self) -> bool:
        return self.ended_at is not None

    @property
    def display_name(self) -> str:
        if self.quest_id is not None:
            return QUEST_NAMES[self.quest_id]
        return "Session"

    def to_dict(self) -> dict:
        """Convert to the backup wire format."""
        data = {"id": self.id, "startedAt": self.started_at}
        if self.ended_at is not None:
            data["endedAt"] = self.ended_at
        if self.quest_id is not None:
            data["questId"] = self.quest_id.value
        if self.notes is not None:
            data["notes"] = self.notes
        data["createdAt"] = self.created_at
        data["updatedAt"] = self.updated_at
        if self.xp_awarded is not None:
            data["xpAwarded"] = self.xp_awarded
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        """Create from the backup wire format."""
        return cls(
            id=data["id"],
            started_at=data["startedAt"],
            ended_at=data.get("endedAt"),
            quest_id=QuestId(data["questId"]) if data.get("questId") else None,
            notes=data.get("notes"),
            xp_awarded=data.get("xpAwarded"),
            created_at=data["createdAt"],
            updated_at=data.get("updatedAt", data["createdAt"]),
        )


@dataclass
class SessionExercise:
    """An exercise performed within a session, with its position."""

    session_id: str
    exercise_id: str
    order_index: int
    notes: str | None = None
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        """Convert to the backup wire format."""
        data = {
            "id": self.id,
            "sessionId": self.session_id,
            "exerciseId": self.exercise_id,
            "orderIndex": self.order_index,
        }
        if self.notes is not None:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SessionExercise":
        """Create from the backup wire format."""
        return cls(
            id=data["id"],
            session_id=data["sessionId"],
            exercise_id=data["exerciseId"],
            order_index=int(data["orderIndex"]),
            notes=data.get("notes"),
        )


@dataclass
class LastAttempt:
    """The most recent completed performance of an exercise, shown as reference."""

    session: Session
    session_exercise: SessionExercise
    sets: list[Set] = field(default_factory=list)
