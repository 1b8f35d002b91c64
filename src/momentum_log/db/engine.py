"""Database engine setup and initialization."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from ..config import DATA_DIR
from ..errors import StorageError

logger = logging.getLogger(__name__)

DB_FILENAME = "momentum_log.db"

# Tables in dependency order: parents before children
TABLES = (
    "exercises",
    "sessions",
    "session_exercises",
    "sets",
    "bodyweight_entries",
    "food_entries",
    "gamification_state",
    "pr_events",
)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS exercises (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        category TEXT NOT NULL,
        equipment_type TEXT NOT NULL,
        log_type TEXT,
        notes TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sessions (
        id TEXT PRIMARY KEY,
        started_at TEXT NOT NULL,
        ended_at TEXT,
        quest_id TEXT,
        notes TEXT,
        xp_awarded INTEGER,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS session_exercises (
        id TEXT PRIMARY KEY,
        session_id TEXT NOT NULL,
        exercise_id TEXT NOT NULL,
        order_index INTEGER NOT NULL,
        notes TEXT,
        FOREIGN KEY (session_id) REFERENCES sessions(id) ON DELETE CASCADE,
        FOREIGN KEY (exercise_id) REFERENCES exercises(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS sets (
        id TEXT PRIMARY KEY,
        session_exercise_id TEXT NOT NULL,
        set_index INTEGER NOT NULL,
        kind TEXT,
        weight REAL,
        reps INTEGER,
        rpe REAL,
        is_warmup INTEGER,
        duration_sec INTEGER,
        distance REAL,
        distance_unit TEXT,
        incline REAL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (session_exercise_id) REFERENCES session_exercises(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS bodyweight_entries (
        id TEXT PRIMARY KEY,
        date TEXT NOT NULL,
        logged_at TEXT NOT NULL,
        weight_kg REAL NOT NULL,
        note TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS food_entries (
        id TEXT PRIMARY KEY,
        date TEXT NOT NULL,
        logged_at TEXT NOT NULL,
        text TEXT NOT NULL,
        note TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS gamification_state (
        id TEXT PRIMARY KEY,
        total_xp INTEGER NOT NULL DEFAULT 0 CHECK (total_xp >= 0)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS pr_events (
        id TEXT PRIMARY KEY,
        session_id TEXT NOT NULL,
        exercise_id TEXT NOT NULL,
        previous_max REAL NOT NULL CHECK (previous_max > 0),
        new_max REAL NOT NULL,
        detected_at TEXT NOT NULL,
        CHECK (new_max > previous_max),
        FOREIGN KEY (session_id) REFERENCES sessions(id) ON DELETE CASCADE,
        FOREIGN KEY (exercise_id) REFERENCES exercises(id)
    )
    """,
    # Index positions are unique; re-packing goes through negative placeholders
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_session_exercises_order
    ON session_exercises(session_id, order_index)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_session_exercises_exercise
    ON session_exercises(exercise_id)
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_sets_order
    ON sets(session_exercise_id, set_index)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_sessions_ended_at
    ON sessions(ended_at)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_exercises_name
    ON exercises(name)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_bodyweight_entries_date
    ON bodyweight_entries(date)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_bodyweight_entries_logged_at
    ON bodyweight_entries(logged_at)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_food_entries_date
    ON food_entries(date)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_food_entries_logged_at
    ON food_entries(logged_at)
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_pr_events_session_exercise
    ON pr_events(session_id, exercise_id)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_pr_events_exercise
    ON pr_events(exercise_id)
    """,
)


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = DATA_DIR
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / DB_FILENAME


@asynccontextmanager
async def connect(db_path: Path) -> AsyncIterator[aiosqlite.Connection]:
    """Open a connection with row access by name and foreign keys enforced."""
    async with aiosqlite.connect(db_path) as db:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys = ON")
        yield db


@asynccontextmanager
async def transaction(db_path: Path) -> AsyncIterator[aiosqlite.Connection]:
    """Run the enclosed statements as one write transaction.

    The transaction takes the write lock up front (``BEGIN IMMEDIATE``), so
    read-modify-write sequences inside it cannot interleave with another
    writer. Any error rolls everything back; database errors are re-raised
    as ``StorageError``.
    """
    async with connect(db_path) as db:
        try:
            await db.execute("BEGIN IMMEDIATE")
            yield db
            await db.commit()
        except aiosqlite.Error as e:
            await db.rollback()
            logger.exception("Transaction rolled back")
            raise StorageError(str(e)) from e
        except BaseException:
            await db.rollback()
            raise


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with connect(db_path) as db:
        for statement in _SCHEMA:
            await db.execute(statement)
        await db.commit()
