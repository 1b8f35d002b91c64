"""Momentum: whether the user has trained within the last week."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from enum import Enum

from ..models.session import Session
from ..utils.dates import local_date_of, parse_iso

MOMENTUM_WINDOW_DAYS = 7


class MomentumState(str, Enum):
    ACTIVE = "Active"
    PAUSED = "Paused"


@dataclass
class MomentumStatus:
    """Momentum derived from the most recent completed session."""

    status: MomentumState
    days_remaining: int  # 0-7
    last_session_date: str | None  # endedAt of the latest completed session

    @property
    def is_active(self) -> bool:
        return self.status == MomentumState.ACTIVE


def days_since(timestamp: str, today: date | None = None) -> int:
    """Whole local calendar days between ``timestamp`` and ``today``.

    Same local day is 0, yesterday is 1. Timestamps in the future count as 0.
    """
    today = today or date.today()
    return max(0, (today - local_date_of(timestamp)).days)


def calculate_momentum(
    sessions: Iterable[Session], today: date | None = None
) -> MomentumStatus:
    """Compute momentum from a set of sessions.

    In-progress sessions are ignored. Momentum is active while the latest
    completed session ended no more than seven local calendar days ago.

    Args:
        sessions: Any sessions; only those with ``ended_at`` count.
        today: Local date to measure from. Defaults to the current date.
    """
    completed = [s for s in sessions if s.ended_at is not None]
    if not completed:
        return MomentumStatus(MomentumState.PAUSED, 0, None)

    latest = max(completed, key=lambda s: parse_iso(s.ended_at))
    elapsed = days_since(latest.ended_at, today)

    if elapsed <= MOMENTUM_WINDOW_DAYS:
        return MomentumStatus(
            MomentumState.ACTIVE, MOMENTUM_WINDOW_DAYS - elapsed, latest.ended_at
        )
    return MomentumStatus(MomentumState.PAUSED, 0, latest.ended_at)
