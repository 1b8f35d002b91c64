"""Weekly training summaries."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path

from ..db.engine import get_db_path
from ..db.repositories import SessionRepository
from ..models.session import Session
from ..utils.dates import local_midnight, parse_iso, to_iso


@dataclass
class WeekCount:
    label: str
    start: datetime
    end: datetime
    count: int = 0


@dataclass
class WeeklyInsights:
    weeks: list[WeekCount] = field(default_factory=list)  # current week first
    total: int = 0


def week_label(weeks_ago: int) -> str:
    if weeks_ago == 0:
        return "This week"
    if weeks_ago == 1:
        return "Last week"
    return f"{weeks_ago} weeks ago"


def monday_of(day: date) -> date:
    return day - timedelta(days=day.weekday())


def week_windows(now: datetime | None = None, weeks: int = 4) -> list[WeekCount]:
    """Local Monday-to-Monday windows, the current week first."""
    if weeks < 1:
        raise ValueError("weeks must be at least 1")
    now = (now or datetime.now()).astimezone()
    this_monday = monday_of(now.date())

    windows = []
    for i in range(weeks):
        start_day = this_monday - timedelta(weeks=i)
        windows.append(
            WeekCount(
                label=week_label(i),
                start=local_midnight(start_day),
                end=local_midnight(start_day + timedelta(weeks=1)),
            )
        )
    return windows


def weekly_breakdown(
    sessions: Iterable[Session], now: datetime | None = None, weeks: int = 4
) -> WeeklyInsights:
    """Count completed sessions per week over the last ``weeks`` weeks.

    Weeks start on Monday at local midnight. A session belongs to the week in
    which it ended; sessions outside the window are ignored.
    """
    windows = week_windows(now, weeks)
    total = 0
    for session in sessions:
        if session.ended_at is None:
            continue
        ended = parse_iso(session.ended_at)
        for window in windows:
            if window.start <= ended < window.end:
                window.count += 1
                total += 1
                break
    return WeeklyInsights(weeks=windows, total=total)


def session_duration_minutes(session: Session) -> int | None:
    """Length of a completed session in minutes, at least 1."""
    if session.ended_at is None:
        return None
    elapsed = parse_iso(session.ended_at) - parse_iso(session.started_at)
    return max(1, round(elapsed.total_seconds() / 60))


class InsightsService:
    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()
        self.sessions = SessionRepository(self.db_path)

    async def load(self, now: datetime | None = None, weeks: int = 4) -> WeeklyInsights:
        """Weekly breakdown fed only by sessions inside the window."""
        windows = week_windows(now, weeks)
        cutoff = to_iso(windows[-1].start)
        sessions = await self.sessions.get_completed_sessions_since(cutoff)
        return weekly_breakdown(sessions, now, weeks)
