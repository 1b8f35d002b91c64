"""Personal-record detection.

A PR is a session's top weight for an exercise that strictly beats the best
weight from every other completed session. The first time an exercise is
logged with weight only sets a baseline. Only sets with weight > 0 count on
either side of the comparison.
"""

import logging
from pathlib import Path

from ..db.engine import get_db_path
from ..db.repositories import PREventRepository, SessionExerciseRepository, SetRepository
from ..models.gamification import PREvent
from ..utils.dates import utc_now_iso

logger = logging.getLogger(__name__)


class PrService:
    """Detects and looks up personal records."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()
        self.pr_events = PREventRepository(self.db_path)
        self.session_exercises = SessionExerciseRepository(self.db_path)
        self.sets = SetRepository(self.db_path)

    async def detect_session_prs(self, session_id: str) -> list[PREvent]:
        """Detect and store the PRs set in a session.

        Idempotent: once a session has PR events they are returned as they
        are and nothing is recomputed.

        Args:
            session_id: Session to inspect.

        Returns:
            The session's PR events; empty when nothing beat history.
        """
        existing = await self.pr_events.get_for_session(session_id)
        if existing:
            return existing

        session_exercises = await self.session_exercises.get_session_exercises(session_id)
        # An exercise may appear more than once in a session
        exercise_ids = list(dict.fromkeys(se.exercise_id for se in session_exercises))

        detected_at = utc_now_iso()
        detected: list[PREvent] = []
        for exercise_id in exercise_ids:
            current_max = await self.get_current_max_weight(exercise_id, session_id)
            if current_max is None:
                continue

            historical_max = await self.get_historical_max_weight(exercise_id, session_id)
            if historical_max is None:
                logger.debug("Baseline for exercise %s in session %s", exercise_id, session_id)
                continue

            if current_max > historical_max:
                detected.append(
                    PREvent(
                        session_id=session_id,
                        exercise_id=exercise_id,
                        previous_max=historical_max,
                        new_max=current_max,
                        detected_at=detected_at,
                    )
                )

        if not detected:
            return []

        stored = await self.pr_events.add_for_session(session_id, detected)
        if stored is detected:
            logger.info("Detected %d PR(s) in session %s", len(detected), session_id)
        return stored

    async def get_prs_for_session(self, session_id: str) -> list[PREvent]:
        """PR events already stored for a session."""
        return await self.pr_events.get_for_session(session_id)

    async def get_current_max_weight(self, exercise_id: str, session_id: str) -> float | None:
        """Top weight for an exercise in one session, or None without weighted sets."""
        sets = await self.sets.get_sets_for_exercise_in_session(exercise_id, session_id)
        if not sets:
            return None
        return max(s.weight for s in sets)

    async def get_historical_max_weight(
        self, exercise_id: str, exclude_session_id: str
    ) -> float | None:
        """Top weight for an exercise across other completed sessions, or None."""
        sets = await self.sets.get_historical_sets_for_exercise(exercise_id, exclude_session_id)
        if not sets:
            return None
        return max(s.weight for s in sets)
