"""Data models for momentum-log."""

from .backup import SCHEMA_VERSION, ExportPayload, StoreData
from .exercise import EquipmentType, Exercise, ExerciseCategory, LogType
from .gamification import (
    GAMIFICATION_STATE_ID,
    GamificationState,
    PREvent,
    compute_level,
)
from .log_entries import BodyweightEntry, FoodEntry
from .session import QUEST_NAMES, LastAttempt, QuestId, Session, SessionExercise
from .set import DistanceUnit, Set, SetKind

__all__ = [
    "BodyweightEntry",
    "compute_level",
    "DistanceUnit",
    "EquipmentType",
    "Exercise",
    "ExportPayload",
    "ExerciseCategory",
    "FoodEntry",
    "GAMIFICATION_STATE_ID",
    "GamificationState",
    "LastAttempt",
    "LogType",
    "PREvent",
    "QUEST_NAMES",
    "QuestId",
    "SCHEMA_VERSION",
    "Session",
    "SessionExercise",
    "Set",
    "SetKind",
    "StoreData",
]
