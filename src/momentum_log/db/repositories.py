"""Data access layer for momentum-log."""

from collections.abc import Iterable
from pathlib import Path

import aiosqlite

from ..models.backup import StoreData
from ..models.exercise import EquipmentType, Exercise, ExerciseCategory, LogType
from ..models.gamification import GAMIFICATION_STATE_ID, GamificationState, PREvent
from ..models.log_entries import BodyweightEntry, FoodEntry
from ..models.session import LastAttempt, QuestId, Session, SessionExercise
from ..models.set import DistanceUnit, Set, SetKind
from ..utils.dates import utc_now_iso
from .engine import connect, get_db_path, transaction

_INSERT_EXERCISE = """
    INSERT INTO exercises
    (id, name, category, equipment_type, log_type, notes, created_at, updated_at)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""

_INSERT_SESSION = """
    INSERT INTO sessions
    (id, started_at, ended_at, quest_id, notes, xp_awarded, created_at, updated_at)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""

_INSERT_SESSION_EXERCISE = """
    INSERT INTO session_exercises
    (id, session_id, exercise_id, order_index, notes)
    VALUES (?, ?, ?, ?, ?)
"""

_INSERT_SET = """
    INSERT INTO sets
    (id, session_exercise_id, set_index, kind, weight, reps, rpe, is_warmup,
     duration_sec, distance, distance_unit, incline, created_at)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

_INSERT_BODYWEIGHT = """
    INSERT INTO bodyweight_entries
    (id, date, logged_at, weight_kg, note, created_at, updated_at)
    VALUES (?, ?, ?, ?, ?, ?, ?)
"""

_INSERT_FOOD = """
    INSERT INTO food_entries
    (id, date, logged_at, text, note, created_at, updated_at)
    VALUES (?, ?, ?, ?, ?, ?, ?)
"""

_INSERT_GAMIFICATION = "INSERT INTO gamification_state (id, total_xp) VALUES (?, ?)"

_INSERT_PR_EVENT = """
    INSERT INTO pr_events
    (id, session_id, exercise_id, previous_max, new_max, detected_at)
    VALUES (?, ?, ?, ?, ?, ?)
"""


def _bool_or_none(value) -> bool | None:
    return None if value is None else bool(value)


def _exercise_params(exercise: Exercise) -> tuple:
    return (
        exercise.id,
        exercise.name,
        exercise.category.value,
        exercise.equipment_type.value,
        exercise.log_type.value if exercise.log_type else None,
        exercise.notes,
        exercise.created_at,
        exercise.updated_at,
    )


def _session_params(session: Session) -> tuple:
    return (
        session.id,
        session.started_at,
        session.ended_at,
        session.quest_id.value if session.quest_id else None,
        session.notes,
        session.xp_awarded,
        session.created_at,
        session.updated_at,
    )


def _session_exercise_params(se: SessionExercise) -> tuple:
    return (se.id, se.session_id, se.exercise_id, se.order_index, se.notes)


def _set_params(set_: Set) -> tuple:
    return (
        set_.id,
        set_.session_exercise_id,
        set_.set_index,
        set_.kind.value if set_.kind else None,
        set_.weight,
        set_.reps,
        set_.rpe,
        set_.is_warmup,
        set_.duration_sec,
        set_.distance,
        set_.distance_unit.value if set_.distance_unit else None,
        set_.incline,
        set_.created_at,
    )


def _bodyweight_params(entry: BodyweightEntry) -> tuple:
    return (
        entry.id,
        entry.date,
        entry.logged_at,
        entry.weight_kg,
        entry.note,
        entry.created_at,
        entry.updated_at,
    )


def _food_params(entry: FoodEntry) -> tuple:
    return (
        entry.id,
        entry.date,
        entry.logged_at,
        entry.text,
        entry.note,
        entry.created_at,
        entry.updated_at,
    )


def _pr_event_params(event: PREvent) -> tuple:
    return (
        event.id,
        event.session_id,
        event.exercise_id,
        event.previous_max,
        event.new_max,
        event.detected_at,
    )


def _row_to_exercise(row: aiosqlite.Row) -> Exercise:
    """Convert a database row to an Exercise."""
    return Exercise(
        id=row["id"],
        name=row["name"],
        category=ExerciseCategory(row["category"]),
        equipment_type=EquipmentType(row["equipment_type"]),
        log_type=LogType(row["log_type"]) if row["log_type"] else None,
        notes=row["notes"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_session(row: aiosqlite.Row) -> Session:
    """Convert a database row to a Session."""
    return Session(
        id=row["id"],
        started_at=row["started_at"],
        ended_at=row["ended_at"],
        quest_id=QuestId(row["quest_id"]) if row["quest_id"] else None,
        notes=row["notes"],
        xp_awarded=_bool_or_none(row["xp_awarded"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_session_exercise(row: aiosqlite.Row) -> SessionExercise:
    """Convert a database row to a SessionExercise."""
    return SessionExercise(
        id=row["id"],
        session_id=row["session_id"],
        exercise_id=row["exercise_id"],
        order_index=row["order_index"],
        notes=row["notes"],
    )


def _row_to_set(row: aiosqlite.Row) -> Set:
    """Convert a database row to a Set."""
    return Set(
        id=row["id"],
        session_exercise_id=row["session_exercise_id"],
        set_index=row["set_index"],
        kind=SetKind(row["kind"]) if row["kind"] else None,
        weight=row["weight"],
        reps=row["reps"],
        rpe=row["rpe"],
        is_warmup=_bool_or_none(row["is_warmup"]),
        duration_sec=row["duration_sec"],
        distance=row["distance"],
        distance_unit=DistanceUnit(row["distance_unit"]) if row["distance_unit"] else None,
        incline=row["incline"],
        created_at=row["created_at"],
    )


def _row_to_bodyweight(row: aiosqlite.Row) -> BodyweightEntry:
    """Convert a database row to a BodyweightEntry."""
    return BodyweightEntry(
        id=row["id"],
        logged_at=row["logged_at"],
        weight_kg=row["weight_kg"],
        note=row["note"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_food(row: aiosqlite.Row) -> FoodEntry:
    """Convert a database row to a FoodEntry."""
    return FoodEntry(
        id=row["id"],
        logged_at=row["logged_at"],
        text=row["text"],
        note=row["note"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_pr_event(row: aiosqlite.Row) -> PREvent:
    """Convert a database row to a PREvent."""
    return PREvent(
        id=row["id"],
        session_id=row["session_id"],
        exercise_id=row["exercise_id"],
        previous_max=row["previous_max"],
        new_max=row["new_max"],
        detected_at=row["detected_at"],
    )


async def _repack(
    db: aiosqlite.Connection,
    table: str,
    parent_column: str,
    index_column: str,
    parent_id: str,
    ordered_ids: list[str],
) -> None:
    """Rewrite a parent's child positions to 0..n-1 in the given order.

    Positions are first moved to negative placeholders so the unique
    (parent, position) index never sees a transient duplicate.
    """
    await db.execute(
        f"UPDATE {table} SET {index_column} = -1 - {index_column} WHERE {parent_column} = ?",
        (parent_id,),
    )
    await db.executemany(
        f"UPDATE {table} SET {index_column} = ? WHERE id = ?",
        [(position, row_id) for position, row_id in enumerate(ordered_ids)],
    )


class ExerciseRepository:
    """Repository for the exercise library."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def add(self, exercise: Exercise) -> Exercise:
        """Add a new exercise."""
        async with transaction(self.db_path) as db:
            await db.execute(_INSERT_EXERCISE, _exercise_params(exercise))
        return exercise

    async def get(self, exercise_id: str) -> Exercise | None:
        """Get an exercise by ID."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM exercises WHERE id = ?", (exercise_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return _row_to_exercise(row)

    async def list_all(self) -> list[Exercise]:
        """List all exercises ordered by name."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM exercises ORDER BY name COLLATE NOCASE"
            )
            rows = await cursor.fetchall()
            return [_row_to_exercise(row) for row in rows]

    async def get_by_ids(self, exercise_ids: Iterable[str]) -> dict[str, Exercise]:
        """Fetch many exercises in a single query, keyed by ID.

        Unknown IDs are simply absent from the result.
        """
        ids = list(dict.fromkeys(exercise_ids))
        if not ids:
            return {}
        placeholders = ", ".join("?" for _ in ids)
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                f"SELECT * FROM exercises WHERE id IN ({placeholders})", ids
            )
            rows = await cursor.fetchall()
            return {row["id"]: _row_to_exercise(row) for row in rows}

    async def search(self, query: str) -> list[Exercise]:
        """Search exercises by name (case-insensitive substring)."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM exercises
                WHERE name LIKE ?
                ORDER BY name COLLATE NOCASE
                """,
                (f"%{query}%",),
            )
            rows = await cursor.fetchall()
            return [_row_to_exercise(row) for row in rows]

    async def update(self, exercise: Exercise) -> None:
        """Update an existing exercise."""
        exercise.updated_at = utc_now_iso()
        async with transaction(self.db_path) as db:
            await db.execute(
                """
                UPDATE exercises SET
                    name = ?, category = ?, equipment_type = ?, log_type = ?,
                    notes = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    exercise.name,
                    exercise.category.value,
                    exercise.equipment_type.value,
                    exercise.log_type.value if exercise.log_type else None,
                    exercise.notes,
                    exercise.updated_at,
                    exercise.id,
                ),
            )

    async def delete(self, exercise_id: str) -> None:
        """Delete an exercise.

        Raises ``StorageError`` while any session still references it.
        """
        async with transaction(self.db_path) as db:
            await db.execute("DELETE FROM exercises WHERE id = ?", (exercise_id,))


class SessionRepository:
    """Repository for training sessions."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, session: Session | None = None) -> Session:
        """Create a new session (started now unless the given one says otherwise)."""
        session = session or Session()
        async with transaction(self.db_path) as db:
            await db.execute(_INSERT_SESSION, _session_params(session))
        return session

    async def get(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM sessions WHERE id = ?", (session_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return _row_to_session(row)

    async def get_active(self) -> Session | None:
        """Get the most recently started session that has not ended."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM sessions
                WHERE ended_at IS NULL
                ORDER BY started_at DESC
                LIMIT 1
                """
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return _row_to_session(row)

    async def get_completed_sessions(self) -> list[Session]:
        """All completed sessions, most recently ended first."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM sessions
                WHERE ended_at IS NOT NULL
                ORDER BY ended_at DESC
                """
            )
            rows = await cursor.fetchall()
            return [_row_to_session(row) for row in rows]

    async def get_completed_sessions_since(self, cutoff: str) -> list[Session]:
        """Completed sessions that ended at or after ``cutoff``, newest first."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM sessions
                WHERE ended_at IS NOT NULL AND ended_at >= ?
                ORDER BY ended_at DESC
                """,
                (cutoff,),
            )
            rows = await cursor.fetchall()
            return [_row_to_session(row) for row in rows]

    async def update(self, session: Session) -> None:
        """Update an existing session.

        ``xp_awarded`` never reverts once stored as true.
        """
        async with transaction(self.db_path) as db:
            await db.execute(
                """
                UPDATE sessions SET
                    started_at = ?, ended_at = ?, quest_id = ?, notes = ?,
                    xp_awarded = CASE WHEN xp_awarded = 1 THEN 1 ELSE ? END,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    session.started_at,
                    session.ended_at,
                    session.quest_id.value if session.quest_id else None,
                    session.notes,
                    session.xp_awarded,
                    session.updated_at,
                    session.id,
                ),
            )

    async def finish(self, session_id: str, ended_at: str | None = None) -> Session | None:
        """Mark a session as ended.

        A session that already has an end time keeps it. Returns the stored
        session, or None if it does not exist.
        """
        now = utc_now_iso()
        async with transaction(self.db_path) as db:
            await db.execute(
                """
                UPDATE sessions SET ended_at = ?, updated_at = ?
                WHERE id = ? AND ended_at IS NULL
                """,
                (ended_at or now, now, session_id),
            )
        return await self.get(session_id)

    async def delete(self, session_id: str) -> None:
        """Delete a session with its exercises, sets and PR events."""
        async with transaction(self.db_path) as db:
            await db.execute("DELETE FROM sessions WHERE id = ?", (session_id,))

    async def count_sets_for_session(self, session_id: str) -> int:
        """Count every set logged in a session, filled in or not."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT COUNT(*) FROM sets s
                JOIN session_exercises se ON se.id = s.session_exercise_id
                WHERE se.session_id = ?
                """,
                (session_id,),
            )
            row = await cursor.fetchone()
            return row[0]


class SessionExerciseRepository:
    """Repository for the ordered exercises within sessions."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def add(self, session_exercise: SessionExercise) -> SessionExercise:
        """Insert a session exercise at the position it already carries."""
        async with transaction(self.db_path) as db:
            await db.execute(
                _INSERT_SESSION_EXERCISE, _session_exercise_params(session_exercise)
            )
        return session_exercise

    async def append(
        self, session_id: str, exercise_id: str, notes: str | None = None
    ) -> SessionExercise:
        """Add an exercise to the end of a session."""
        async with transaction(self.db_path) as db:
            order_index = await self._next_order_index(db, session_id)
            session_exercise = SessionExercise(
                session_id=session_id,
                exercise_id=exercise_id,
                order_index=order_index,
                notes=notes,
            )
            await db.execute(
                _INSERT_SESSION_EXERCISE, _session_exercise_params(session_exercise)
            )
        return session_exercise

    async def get(self, session_exercise_id: str) -> SessionExercise | None:
        """Get a session exercise by ID."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM session_exercises WHERE id = ?", (session_exercise_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return _row_to_session_exercise(row)

    async def get_session_exercises(self, session_id: str) -> list[SessionExercise]:
        """Exercises of a session in order."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM session_exercises
                WHERE session_id = ?
                ORDER BY order_index
                """,
                (session_id,),
            )
            rows = await cursor.fetchall()
            return [_row_to_session_exercise(row) for row in rows]

    async def get_next_order_index(self, session_id: str) -> int:
        """Position for the next exercise: current max + 1, or 0."""
        async with connect(self.db_path) as db:
            return await self._next_order_index(db, session_id)

    async def update_notes(self, session_exercise_id: str, notes: str | None) -> None:
        async with transaction(self.db_path) as db:
            await db.execute(
                "UPDATE session_exercises SET notes = ? WHERE id = ?",
                (notes, session_exercise_id),
            )

    async def remove(self, session_exercise_id: str) -> None:
        """Remove an exercise (and its sets) from a session.

        The remaining exercises are re-packed to 0..n-1 in the same
        transaction.
        """
        async with transaction(self.db_path) as db:
            cursor = await db.execute(
                "SELECT session_id FROM session_exercises WHERE id = ?",
                (session_exercise_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return
            session_id = row["session_id"]
            await db.execute(
                "DELETE FROM session_exercises WHERE id = ?", (session_exercise_id,)
            )
            await self._reindex(db, session_id)

    async def update_session_exercise_order(self, updates: dict[str, int]) -> None:
        """Apply new positions and re-pack the affected sessions.

        ``updates`` maps session exercise ID to its requested position. Rows
        not mentioned keep their relative place; ties go to the moved row.
        Every affected session ends up numbered 0..n-1.
        """
        if not updates:
            return
        async with transaction(self.db_path) as db:
            placeholders = ", ".join("?" for _ in updates)
            cursor = await db.execute(
                f"""
                SELECT DISTINCT session_id FROM session_exercises
                WHERE id IN ({placeholders})
                """,
                list(updates),
            )
            session_ids = [row["session_id"] for row in await cursor.fetchall()]
            for session_id in session_ids:
                cursor = await db.execute(
                    """
                    SELECT id, order_index FROM session_exercises
                    WHERE session_id = ?
                    ORDER BY order_index
                    """,
                    (session_id,),
                )
                rows = await cursor.fetchall()
                ordered = sorted(
                    rows,
                    key=lambda r: (
                        updates.get(r["id"], r["order_index"]),
                        0 if r["id"] in updates else 1,
                    ),
                )
                await _repack(
                    db,
                    "session_exercises",
                    "session_id",
                    "order_index",
                    session_id,
                    [r["id"] for r in ordered],
                )

    async def get_last_attempt(
        self, exercise_id: str, exclude_session_id: str | None = None
    ) -> LastAttempt | None:
        """Sets from the most recent completed session that included the exercise."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT se.id AS se_id FROM session_exercises se
                JOIN sessions s ON s.id = se.session_id
                WHERE se.exercise_id = ?
                  AND s.ended_at IS NOT NULL
                  AND s.id != ?
                ORDER BY s.ended_at DESC, se.order_index DESC
                LIMIT 1
                """,
                (exercise_id, exclude_session_id or ""),
            )
            row = await cursor.fetchone()
            if row is None:
                return None

            cursor = await db.execute(
                "SELECT * FROM session_exercises WHERE id = ?", (row["se_id"],)
            )
            session_exercise = _row_to_session_exercise(await cursor.fetchone())
            cursor = await db.execute(
                "SELECT * FROM sessions WHERE id = ?", (session_exercise.session_id,)
            )
            session = _row_to_session(await cursor.fetchone())
            cursor = await db.execute(
                """
                SELECT * FROM sets WHERE session_exercise_id = ?
                ORDER BY set_index
                """,
                (session_exercise.id,),
            )
            sets = [_row_to_set(r) for r in await cursor.fetchall()]
            return LastAttempt(session=session, session_exercise=session_exercise, sets=sets)

    @staticmethod
    async def _next_order_index(db: aiosqlite.Connection, session_id: str) -> int:
        cursor = await db.execute(
            "SELECT MAX(order_index) FROM session_exercises WHERE session_id = ?",
            (session_id,),
        )
        row = await cursor.fetchone()
        return 0 if row[0] is None else row[0] + 1

    @staticmethod
    async def _reindex(db: aiosqlite.Connection, session_id: str) -> None:
        cursor = await db.execute(
            """
            SELECT id FROM session_exercises
            WHERE session_id = ?
            ORDER BY order_index
            """,
            (session_id,),
        )
        ordered_ids = [row["id"] for row in await cursor.fetchall()]
        await _repack(
            db, "session_exercises", "session_id", "order_index", session_id, ordered_ids
        )


class SetRepository:
    """Repository for sets."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def add(self, set_: Set) -> Set:
        """Insert a set at the position it already carries."""
        async with transaction(self.db_path) as db:
            await db.execute(_INSERT_SET, _set_params(set_))
        return set_

    async def append(self, set_: Set) -> Set:
        """Insert a set after the last set of its parent.

        ``set_.set_index`` is overwritten with the next free position.
        """
        async with transaction(self.db_path) as db:
            set_.set_index = await self._next_set_index(db, set_.session_exercise_id)
            await db.execute(_INSERT_SET, _set_params(set_))
        return set_

    async def bulk_add_sets(self, sets: list[Set]) -> None:
        """Insert many sets at once; either all are stored or none."""
        if not sets:
            return
        async with transaction(self.db_path) as db:
            await db.executemany(_INSERT_SET, [_set_params(s) for s in sets])

    async def get(self, set_id: str) -> Set | None:
        """Get a set by ID."""
        async with connect(self.db_path) as db:
            cursor = await db.execute("SELECT * FROM sets WHERE id = ?", (set_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return _row_to_set(row)

    async def get_sets_for_session_exercise(self, session_exercise_id: str) -> list[Set]:
        """Sets of one session exercise in order."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM sets
                WHERE session_exercise_id = ?
                ORDER BY set_index
                """,
                (session_exercise_id,),
            )
            rows = await cursor.fetchall()
            return [_row_to_set(row) for row in rows]

    async def get_sets_for_exercise_in_session(
        self, exercise_id: str, session_id: str
    ) -> list[Set]:
        """Weighted sets (weight > 0) of an exercise within one session."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT s.* FROM sets s
                JOIN session_exercises se ON se.id = s.session_exercise_id
                WHERE se.exercise_id = ? AND se.session_id = ? AND s.weight > 0
                ORDER BY se.order_index, s.set_index
                """,
                (exercise_id, session_id),
            )
            rows = await cursor.fetchall()
            return [_row_to_set(row) for row in rows]

    async def get_historical_sets_for_exercise(
        self, exercise_id: str, exclude_session_id: str
    ) -> list[Set]:
        """Weighted sets (weight > 0) of an exercise from other completed sessions."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT s.* FROM sets s
                JOIN session_exercises se ON se.id = s.session_exercise_id
                JOIN sessions ss ON ss.id = se.session_id
                WHERE se.exercise_id = ?
                  AND se.session_id != ?
                  AND ss.ended_at IS NOT NULL
                  AND s.weight > 0
                """,
                (exercise_id, exclude_session_id),
            )
            rows = await cursor.fetchall()
            return [_row_to_set(row) for row in rows]

    async def get_next_set_index(self, session_exercise_id: str) -> int:
        """Position for the next set: current max + 1, or 0."""
        async with connect(self.db_path) as db:
            return await self._next_set_index(db, session_exercise_id)

    async def update(self, set_: Set) -> None:
        """Update the logged values of a set. Its position is left alone."""
        async with transaction(self.db_path) as db:
            await db.execute(
                """
                UPDATE sets SET
                    kind = ?, weight = ?, reps = ?, rpe = ?, is_warmup = ?,
                    duration_sec = ?, distance = ?, distance_unit = ?, incline = ?
                WHERE id = ?
                """,
                (
                    set_.kind.value if set_.kind else None,
                    set_.weight,
                    set_.reps,
                    set_.rpe,
                    set_.is_warmup,
                    set_.duration_sec,
                    set_.distance,
                    set_.distance_unit.value if set_.distance_unit else None,
                    set_.incline,
                    set_.id,
                ),
            )

    async def delete(self, set_id: str) -> None:
        """Delete a set and re-pack its siblings in the same transaction."""
        async with transaction(self.db_path) as db:
            cursor = await db.execute(
                "SELECT session_exercise_id FROM sets WHERE id = ?", (set_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return
            await db.execute("DELETE FROM sets WHERE id = ?", (set_id,))
            await self._reindex(db, row["session_exercise_id"])

    async def reindex_sets(self, session_exercise_id: str) -> None:
        """Re-pack set positions of a session exercise to 0..n-1."""
        async with transaction(self.db_path) as db:
            await self._reindex(db, session_exercise_id)

    @staticmethod
    async def _next_set_index(db: aiosqlite.Connection, session_exercise_id: str) -> int:
        cursor = await db.execute(
            "SELECT MAX(set_index) FROM sets WHERE session_exercise_id = ?",
            (session_exercise_id,),
        )
        row = await cursor.fetchone()
        return 0 if row[0] is None else row[0] + 1

    @staticmethod
    async def _reindex(db: aiosqlite.Connection, session_exercise_id: str) -> None:
        cursor = await db.execute(
            """
            SELECT id FROM sets
            WHERE session_exercise_id = ?
            ORDER BY set_index
            """,
            (session_exercise_id,),
        )
        ordered_ids = [row["id"] for row in await cursor.fetchall()]
        await _repack(
            db, "sets", "session_exercise_id", "set_index", session_exercise_id, ordered_ids
        )


class BodyweightRepository:
    """Repository for bodyweight entries."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def add(self, entry: BodyweightEntry) -> BodyweightEntry:
        """Add a new entry."""
        async with transaction(self.db_path) as db:
            await db.execute(_INSERT_BODYWEIGHT, _bodyweight_params(entry))
        return entry

    async def get(self, entry_id: str) -> BodyweightEntry | None:
        """Get an entry by ID."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM bodyweight_entries WHERE id = ?", (entry_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return _row_to_bodyweight(row)

    async def list_all(self) -> list[BodyweightEntry]:
        """All entries, most recently logged first."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM bodyweight_entries ORDER BY logged_at DESC"
            )
            rows = await cursor.fetchall()
            return [_row_to_bodyweight(row) for row in rows]

    async def list_for_date(self, date: str) -> list[BodyweightEntry]:
        """Entries logged on a local calendar day (YYYY-MM-DD)."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM bodyweight_entries
                WHERE date = ?
                ORDER BY logged_at DESC
                """,
                (date,),
            )
            rows = await cursor.fetchall()
            return [_row_to_bodyweight(row) for row in rows]

    async def update(self, entry: BodyweightEntry) -> None:
        """Update an entry; its date is re-derived from ``logged_at``."""
        entry.updated_at = utc_now_iso()
        async with transaction(self.db_path) as db:
            await db.execute(
                """
                UPDATE bodyweight_entries SET
                    date = ?, logged_at = ?, weight_kg = ?, note = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    entry.date,
                    entry.logged_at,
                    entry.weight_kg,
                    entry.note,
                    entry.updated_at,
                    entry.id,
                ),
            )

    async def delete(self, entry_id: str) -> None:
        """Delete an entry."""
        async with transaction(self.db_path) as db:
            await db.execute("DELETE FROM bodyweight_entries WHERE id = ?", (entry_id,))

    async def restore(self, entry: BodyweightEntry) -> None:
        """Re-insert a previously deleted entry (undo)."""
        async with transaction(self.db_path) as db:
            await db.execute(
                _INSERT_BODYWEIGHT.replace("INSERT", "INSERT OR REPLACE", 1),
                _bodyweight_params(entry),
            )


class FoodRepository:
    """Repository for food entries."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def add(self, entry: FoodEntry) -> FoodEntry:
        """Add a new entry."""
        async with transaction(self.db_path) as db:
            await db.execute(_INSERT_FOOD, _food_params(entry))
        return entry

    async def get(self, entry_id: str) -> FoodEntry | None:
        """Get an entry by ID."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM food_entries WHERE id = ?", (entry_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return _row_to_food(row)

    async def list_all(self) -> list[FoodEntry]:
        """All entries, most recently logged first."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM food_entries ORDER BY logged_at DESC"
            )
            rows = await cursor.fetchall()
            return [_row_to_food(row) for row in rows]

    async def list_for_date(self, date: str) -> list[FoodEntry]:
        """Entries logged on a local calendar day (YYYY-MM-DD)."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM food_entries
                WHERE date = ?
                ORDER BY logged_at DESC
                """,
                (date,),
            )
            rows = await cursor.fetchall()
            return [_row_to_food(row) for row in rows]

    async def update(self, entry: FoodEntry) -> None:
        """Update an entry; its date is re-derived from ``logged_at``."""
        entry.updated_at = utc_now_iso()
        async with transaction(self.db_path) as db:
            await db.execute(
                """
                UPDATE food_entries SET
                    date = ?, logged_at = ?, text = ?, note = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    entry.date,
                    entry.logged_at,
                    entry.text,
                    entry.note,
                    entry.updated_at,
                    entry.id,
                ),
            )

    async def delete(self, entry_id: str) -> None:
        """Delete an entry."""
        async with transaction(self.db_path) as db:
            await db.execute("DELETE FROM food_entries WHERE id = ?", (entry_id,))

    async def restore(self, entry: FoodEntry) -> None:
        """Re-insert a previously deleted entry (undo)."""
        async with transaction(self.db_path) as db:
            await db.execute(
                _INSERT_FOOD.replace("INSERT", "INSERT OR REPLACE", 1),
                _food_params(entry),
            )


class GamificationRepository:
    """Repository for the singleton gamification state."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def get_state(self) -> GamificationState | None:
        """Get the gamification state, or None before seeding."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM gamification_state WHERE id = ?",
                (GAMIFICATION_STATE_ID,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return GamificationState(id=row["id"], total_xp=row["total_xp"])

    async def add_xp(self, delta: int) -> int:
        """Atomically add XP and return the new total."""
        if delta < 0:
            raise ValueError("XP can only increase")
        async with transaction(self.db_path) as db:
            return await self._increment(db, delta)

    async def award_session_xp(self, session_id: str, delta: int) -> int | None:
        """Add XP for a session and flag the session as awarded, atomically.

        The flag is claimed first inside the same transaction; if the session
        is missing, unfinished or already awarded nothing is written and None
        is returned. Otherwise returns the new total.
        """
        if delta < 0:
            raise ValueError("XP can only increase")
        async with transaction(self.db_path) as db:
            cursor = await db.execute(
                """
                UPDATE sessions SET xp_awarded = 1, updated_at = ?
                WHERE id = ?
                  AND ended_at IS NOT NULL
                  AND (xp_awarded IS NULL OR xp_awarded = 0)
                """,
                (utc_now_iso(), session_id),
            )
            if cursor.rowcount == 0:
                return None
            return await self._increment(db, delta)

    @staticmethod
    async def _increment(db: aiosqlite.Connection, delta: int) -> int:
        await db.execute(
            """
            INSERT INTO gamification_state (id, total_xp) VALUES (?, ?)
            ON CONFLICT(id) DO UPDATE SET total_xp = total_xp + excluded.total_xp
            """,
            (GAMIFICATION_STATE_ID, delta),
        )
        cursor = await db.execute(
            "SELECT total_xp FROM gamification_state WHERE id = ?",
            (GAMIFICATION_STATE_ID,),
        )
        row = await cursor.fetchone()
        return row["total_xp"]


class PREventRepository:
    """Repository for personal-record events."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def add_for_session(self, session_id: str, events: list[PREvent]) -> list[PREvent]:
        """Store a session's PR events in one batch, at most once.

        If events already exist for the session they are returned instead and
        nothing is written.
        """
        async with transaction(self.db_path) as db:
            existing = await self._for_session(db, session_id)
            if existing:
                return existing
            await db.executemany(_INSERT_PR_EVENT, [_pr_event_params(e) for e in events])
        return events

    async def get_for_session(self, session_id: str) -> list[PREvent]:
        """PR events achieved in a session."""
        async with connect(self.db_path) as db:
            return await self._for_session(db, session_id)

    async def get_for_exercise(self, exercise_id: str) -> list[PREvent]:
        """PR history of an exercise, newest first."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM pr_events
                WHERE exercise_id = ?
                ORDER BY detected_at DESC
                """,
                (exercise_id,),
            )
            rows = await cursor.fetchall()
            return [_row_to_pr_event(row) for row in rows]

    async def list_all(self) -> list[PREvent]:
        """All PR events, newest first."""
        async with connect(self.db_path) as db:
            cursor = await db.execute("SELECT * FROM pr_events ORDER BY detected_at DESC")
            rows = await cursor.fetchall()
            return [_row_to_pr_event(row) for row in rows]

    @staticmethod
    async def _for_session(db: aiosqlite.Connection, session_id: str) -> list[PREvent]:
        cursor = await db.execute(
            "SELECT * FROM pr_events WHERE session_id = ? ORDER BY rowid",
            (session_id,),
        )
        rows = await cursor.fetchall()
        return [_row_to_pr_event(row) for row in rows]


class StoreRepository:
    """Operations over the whole store: export snapshot, restore, reset."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def get_all_data_for_export(self) -> StoreData:
        """Read every table in one consistent snapshot, in insertion order."""
        async with transaction(self.db_path) as db:

            async def fetch(table: str, convert) -> list:
                cursor = await db.execute(f"SELECT * FROM {table} ORDER BY rowid")
                return [convert(row) for row in await cursor.fetchall()]

            return StoreData(
                exercises=await fetch("exercises", _row_to_exercise),
                sessions=await fetch("sessions", _row_to_session),
                session_exercises=await fetch("session_exercises", _row_to_session_exercise),
                sets=await fetch("sets", _row_to_set),
                bodyweight_entries=await fetch("bodyweight_entries", _row_to_bodyweight),
                food_entries=await fetch("food_entries", _row_to_food),
                gamification_state=await fetch(
                    "gamification_state",
                    lambda row: GamificationState(id=row["id"], total_xp=row["total_xp"]),
                ),
                pr_events=await fetch("pr_events", _row_to_pr_event),
            )

    async def import_all_data(self, data: StoreData) -> None:
        """Replace the entire store with ``data`` in a single transaction.

        If any insert fails the whole transaction is rolled back and the
        previous contents remain untouched. A payload without gamification
        state gets a zeroed singleton row.
        """
        gamification_state = data.gamification_state or [GamificationState()]
        async with transaction(self.db_path) as db:
            await self._clear(db)
            await db.executemany(_INSERT_EXERCISE, [_exercise_params(e) for e in data.exercises])
            await db.executemany(_INSERT_SESSION, [_session_params(s) for s in data.sessions])
            await db.executemany(
                _INSERT_SESSION_EXERCISE,
                [_session_exercise_params(se) for se in data.session_exercises],
            )
            await db.executemany(_INSERT_SET, [_set_params(s) for s in data.sets])
            await db.executemany(
                _INSERT_BODYWEIGHT, [_bodyweight_params(b) for b in data.bodyweight_entries]
            )
            await db.executemany(_INSERT_FOOD, [_food_params(f) for f in data.food_entries])
            await db.executemany(
                _INSERT_GAMIFICATION, [(g.id, g.total_xp) for g in gamification_state]
            )
            await db.executemany(_INSERT_PR_EVENT, [_pr_event_params(p) for p in data.pr_events])

    async def clear_all_stores(self) -> None:
        """Delete every row from every table, atomically."""
        async with transaction(self.db_path) as db:
            await self._clear(db)

    async def counts(self) -> dict[str, int]:
        """Row count per table."""
        async with connect(self.db_path) as db:
            result = {}
            for table in (
                "exercises",
                "sessions",
                "session_exercises",
                "sets",
                "bodyweight_entries",
                "food_entries",
                "gamification_state",
                "pr_events",
            ):
                cursor = await db.execute(f"SELECT COUNT(*) FROM {table}")
                row = await cursor.fetchone()
                result[table] = row[0]
            return result

    @staticmethod
    async def _clear(db: aiosqlite.Connection) -> None:
        # Children first so foreign keys never dangle mid-transaction
        for table in (
            "pr_events",
            "sets",
            "session_exercises",
            "sessions",
            "exercises",
            "bodyweight_entries",
            "food_entries",
            "gamification_state",
        ):
            await db.execute(f"DELETE FROM {table}")
