"""Experience points and levels.

Each completed session earns XP once:

    100 for finishing + 5 per logged set + 50 per PR (at most 3 PRs count)

Every set counts, including ones left empty. Level is derived from the running
total and never stored.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..db.engine import get_db_path
from ..db.repositories import GamificationRepository, SessionRepository
from ..models.gamification import XP_PER_LEVEL, PREvent, compute_level
from .pr import PrService

logger = logging.getLogger(__name__)

XP_PER_SESSION = 100
XP_PER_SET = 5
XP_PER_PR = 50
MAX_PRS_FOR_XP = 3


class AwardOutcome(str, Enum):
    """Result of an award attempt. Only ``AWARDED`` changed anything."""

    AWARDED = "awarded"
    ALREADY_AWARDED = "already_awarded"
    SESSION_NOT_FOUND = "session_not_found"
    SESSION_NOT_COMPLETED = "session_not_completed"


@dataclass
class XpBreakdown:
    """How a session's XP is made up."""

    session_xp: int
    session_completion_xp: int
    set_xp: int
    pr_xp: int
    set_count: int
    pr_count: int
    prs: list[PREvent] = field(default_factory=list)


@dataclass
class XpAwardResult:
    outcome: AwardOutcome
    breakdown: XpBreakdown | None = None
    new_total_xp: int | None = None

    @property
    def awarded(self) -> bool:
        return self.outcome == AwardOutcome.AWARDED

    @property
    def session_xp(self) -> int:
        return self.breakdown.session_xp if self.breakdown else 0


@dataclass
class LevelProgress:
    total_xp: int
    level: int
    xp_into_level: int
    xp_to_next_level: int


def calculate_xp(set_count: int, pr_count: int) -> XpBreakdown:
    """Apply the XP formula to a set and PR count."""
    set_xp = XP_PER_SET * set_count
    pr_xp = XP_PER_PR * min(pr_count, MAX_PRS_FOR_XP)
    return XpBreakdown(
        session_xp=XP_PER_SESSION + set_xp + pr_xp,
        session_completion_xp=XP_PER_SESSION,
        set_xp=set_xp,
        pr_xp=pr_xp,
        set_count=set_count,
        pr_count=pr_count,
    )


def level_progress(total_xp: int) -> LevelProgress:
    into = total_xp % XP_PER_LEVEL
    return LevelProgress(
        total_xp=total_xp,
        level=compute_level(total_xp),
        xp_into_level=into,
        xp_to_next_level=XP_PER_LEVEL - into,
    )


class XpService:
    """Awards session XP and reports levels."""

    def __init__(self, db_path: Path | None = None, pr_service: PrService | None = None):
        self.db_path = db_path or get_db_path()
        self.sessions = SessionRepository(self.db_path)
        self.gamification = GamificationRepository(self.db_path)
        self.pr_service = pr_service or PrService(self.db_path)

    async def award_session_xp(self, session_id: str) -> XpAwardResult:
        """Award XP for a completed session, at most once.

        Safe to call on every finish: a session that already received XP
        yields ``ALREADY_AWARDED`` and nothing is written. PR detection runs
        first so PR bonuses are included.

        Returns:
            The outcome, with the breakdown and new total when awarded.
        """
        session = await self.sessions.get(session_id)
        if session is None:
            logger.warning("Cannot award XP: session %s not found", session_id)
            return XpAwardResult(AwardOutcome.SESSION_NOT_FOUND)
        if not session.is_completed:
            logger.warning("Cannot award XP for incomplete session %s", session_id)
            return XpAwardResult(AwardOutcome.SESSION_NOT_COMPLETED)
        if session.xp_awarded:
            return XpAwardResult(AwardOutcome.ALREADY_AWARDED)

        prs = await self.pr_service.detect_session_prs(session_id)
        set_count = await self.sessions.count_sets_for_session(session_id)
        breakdown = calculate_xp(set_count, len(prs))
        breakdown.prs = prs

        new_total = await self.gamification.award_session_xp(session_id, breakdown.session_xp)
        if new_total is None:
            # Another award for this session committed first
            return XpAwardResult(AwardOutcome.ALREADY_AWARDED)

        logger.info(
            "Awarded %d XP for session %s (total %d)",
            breakdown.session_xp,
            session_id,
            new_total,
        )
        return XpAwardResult(AwardOutcome.AWARDED, breakdown, new_total)

    async def calculate_session_xp(self, session_id: str) -> XpBreakdown | None:
        """Preview a session's XP without writing anything.

        Uses PR events already stored for the session. Returns None if the
        session does not exist.
        """
        session = await self.sessions.get(session_id)
        if session is None:
            return None

        prs = await self.pr_service.get_prs_for_session(session_id)
        set_count = await self.sessions.count_sets_for_session(session_id)
        breakdown = calculate_xp(set_count, len(prs))
        breakdown.prs = prs
        return breakdown

    async def get_total_xp(self) -> int:
        state = await self.gamification.get_state()
        return state.total_xp if state else 0

    async def get_level_progress(self) -> LevelProgress:
        """Current level and distance to the next one."""
        return level_progress(await self.get_total_xp())

    @staticmethod
    def compute_level(total_xp: int) -> int:
        return compute_level(total_xp)
