"""Database layer for momentum-log."""

from .engine import connect, get_db_path, init_db, transaction
from .repositories import (
    BodyweightRepository,
    ExerciseRepository,
    FoodRepository,
    GamificationRepository,
    PREventRepository,
    SessionExerciseRepository,
    SessionRepository,
    SetRepository,
    StoreRepository,
)
from .seed import DatabaseInitializer, default_exercises

__all__ = [
    "BodyweightRepository",
    "connect",
    "DatabaseInitializer",
    "default_exercises",
    "ExerciseRepository",
    "FoodRepository",
    "GamificationRepository",
    "get_db_path",
    "init_db",
    "PREventRepository",
    "SessionExerciseRepository",
    "SessionRepository",
    "SetRepository",
    "StoreRepository",
    "transaction",
]
