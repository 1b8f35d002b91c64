"""First-run seeding of the default exercise catalog."""

import asyncio
import logging
from pathlib import Path

from ..models.exercise import EquipmentType, Exercise, ExerciseCategory, LogType
from ..models.gamification import GAMIFICATION_STATE_ID
from .engine import get_db_path, init_db, transaction

logger = logging.getLogger(__name__)


def default_exercises() -> list[Exercise]:
    """The catalog installed on a fresh database. IDs are fixed."""
    return [
        Exercise(
            id="seed-exercise-chest-press",
            name="Chest Press",
            category=ExerciseCategory.CHEST,
            equipment_type=EquipmentType.MACHINE,
            log_type=LogType.STRENGTH,
        ),
        Exercise(
            id="seed-exercise-bicep-curl",
            name="Bicep Curl",
            category=ExerciseCategory.ARMS,
            equipment_type=EquipmentType.DUMBBELL,
            log_type=LogType.STRENGTH,
        ),
        Exercise(
            id="seed-exercise-treadmill",
            name="Treadmill",
            category=ExerciseCategory.CARDIO,
            equipment_type=EquipmentType.CARDIO,
            log_type=LogType.CARDIO,
        ),
    ]


class DatabaseInitializer:
    """Creates the schema and seeds a fresh install exactly once.

    A database counts as fresh while the singleton gamification row is
    missing. Concurrent ``initialize()`` calls on one instance share a lock,
    and after the first success every later call returns immediately.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> bool:
        """Prepare the database.

        Returns:
            True if this call seeded the database, False otherwise.
        """
        if self._initialized:
            return False

        async with self._lock:
            if self._initialized:
                return False

            await init_db(self.db_path)
            seeded = await self._seed_if_fresh()
            self._initialized = True
            return seeded

    async def _seed_if_fresh(self) -> bool:
        exercises = default_exercises()
        async with transaction(self.db_path) as db:
            cursor = await db.execute(
                "SELECT 1 FROM gamification_state WHERE id = ?",
                (GAMIFICATION_STATE_ID,),
            )
            if await cursor.fetchone() is not None:
                logger.debug("Existing database found, skipping seed")
                return False

            await db.executemany(
                """
                INSERT OR IGNORE INTO exercises
                (id, name, category, equipment_type, log_type, notes, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        e.id,
                        e.name,
                        e.category.value,
                        e.equipment_type.value,
                        e.log_type.value,
                        e.notes,
                        e.created_at,
                        e.updated_at,
                    )
                    for e in exercises
                ],
            )
            await db.execute(
                "INSERT INTO gamification_state (id, total_xp) VALUES (?, 0)",
                (GAMIFICATION_STATE_ID,),
            )

        logger.info("Seeded %d default exercises", len(exercises))
        return True
