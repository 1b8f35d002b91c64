"""Pytest configuration and fixtures."""

import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from momentum_log.db import (
    DatabaseInitializer,
    SessionExerciseRepository,
    SessionRepository,
    SetRepository,
    init_db,
)
from momentum_log.models import (
    EquipmentType,
    Exercise,
    ExerciseCategory,
    LogType,
    Session,
    Set,
)
from momentum_log.utils.dates import to_iso

CHEST_PRESS_ID = "seed-exercise-chest-press"
BICEP_CURL_ID = "seed-exercise-bicep-curl"


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
async def empty_db(temp_db_path):
    """A database with the schema but no rows."""
    await init_db(temp_db_path)
    return temp_db_path


@pytest.fixture
async def db_path(temp_db_path):
    """A freshly initialized and seeded database."""
    await DatabaseInitializer(temp_db_path).initialize()
    return temp_db_path


@pytest.fixture
def sample_exercise():
    """An exercise not in the default catalog."""
    return Exercise(
        name="Back Squat",
        category=ExerciseCategory.LEGS,
        equipment_type=EquipmentType.BARBELL,
        log_type=LogType.STRENGTH,
    )


@pytest.fixture
def build_session(db_path):
    """Factory for sessions with one exercise and a list of set weights.

    Sessions end ``days_ago`` days before now unless ``completed`` is False.
    """

    async def _build(
        exercise_id: str = CHEST_PRESS_ID,
        weights: list[float | None] | None = None,
        days_ago: int = 1,
        completed: bool = True,
    ) -> Session:
        ended = datetime.now().astimezone() - timedelta(days=days_ago)
        session = Session(
            started_at=to_iso(ended - timedelta(hours=1)),
            ended_at=to_iso(ended) if completed else None,
        )
        await SessionRepository(db_path).create(session)

        se = await SessionExerciseRepository(db_path).append(session.id, exercise_id)
        await SetRepository(db_path).bulk_add_sets(
            [
                Set(session_exercise_id=se.id, set_index=i, weight=w, reps=5)
                for i, w in enumerate(weights or [])
            ]
        )
        return session

    return _build
