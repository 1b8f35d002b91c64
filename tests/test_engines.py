"""Tests for the momentum, PR and XP engines."""

import asyncio
from datetime import date, datetime, timedelta

import pytest

from momentum_log.db import (
    GamificationRepository,
    PREventRepository,
    SessionExerciseRepository,
    SessionRepository,
    SetRepository,
)
from momentum_log.models import Session, Set
from momentum_log.services.momentum import MomentumState, calculate_momentum, days_since
from momentum_log.services.pr import PrService
from momentum_log.services.xp import (
    AwardOutcome,
    XpService,
    calculate_xp,
    level_progress,
)
from momentum_log.utils.dates import to_iso

from .conftest import BICEP_CURL_ID, CHEST_PRESS_ID

TODAY = date(2026, 3, 15)


def _ended_on(day: date, hour: int = 18) -> Session:
    ended = to_iso(datetime(day.year, day.month, day.day, hour, 0))
    return Session(started_at=ended, ended_at=ended)


class TestMomentum:
    """Tests for calculate_momentum."""

    def test_no_sessions(self):
        """Test empty history is paused."""
        status = calculate_momentum([], today=TODAY)
        assert status.status == MomentumState.PAUSED
        assert status.days_remaining == 0
        assert status.last_session_date is None

    def test_same_day(self):
        """Test a session today leaves the full window."""
        status = calculate_momentum([_ended_on(TODAY)], today=TODAY)
        assert status.status == MomentumState.ACTIVE
        assert status.days_remaining == 7

    def test_exactly_seven_days(self):
        """Test seven calendar days ago is still active."""
        status = calculate_momentum([_ended_on(TODAY - timedelta(days=7))], today=TODAY)
        assert status.status == MomentumState.ACTIVE
        assert status.days_remaining == 0

    def test_eight_days(self):
        """Test eight calendar days ago is paused."""
        session = _ended_on(TODAY - timedelta(days=8))
        status = calculate_momentum([session], today=TODAY)
        assert status.status == MomentumState.PAUSED
        assert status.days_remaining == 0
        assert status.last_session_date == session.ended_at

    def test_calendar_days_not_hours(self):
        """Test late yesterday counts as one day even if under 24h ago."""
        yesterday_late = _ended_on(TODAY - timedelta(days=1), hour=23)
        assert days_since(yesterday_late.ended_at, today=TODAY) == 1

    def test_in_progress_sessions_ignored(self):
        """Test sessions without ended_at never count."""
        in_progress = Session(started_at=to_iso(datetime(2026, 3, 15, 9, 0)))
        old = _ended_on(TODAY - timedelta(days=10))
        status = calculate_momentum([in_progress, old], today=TODAY)
        assert status.status == MomentumState.PAUSED
        assert status.last_session_date == old.ended_at

    def test_latest_session_wins(self):
        """Test the most recent completed session is used regardless of order."""
        sessions = [
            _ended_on(TODAY - timedelta(days=9)),
            _ended_on(TODAY - timedelta(days=2)),
            _ended_on(TODAY - timedelta(days=5)),
        ]
        status = calculate_momentum(sessions, today=TODAY)
        assert status.days_remaining == 5

    def test_future_session_clamped(self):
        """Test a session dated after today counts as today."""
        status = calculate_momentum([_ended_on(TODAY + timedelta(days=1))], today=TODAY)
        assert status.days_remaining == 7


class TestPrDetection:
    """Tests for PrService."""

    async def test_baseline_is_not_pr(self, db_path, build_session):
        """Test the first weighted session for an exercise emits nothing."""
        session = await build_session(weights=[100])
        assert await PrService(db_path).detect_session_prs(session.id) == []

    async def test_equal_max_is_not_pr(self, db_path, build_session):
        """Test matching the historical max is not a PR."""
        await build_session(weights=[100], days_ago=3)
        session = await build_session(weights=[90, 100])
        assert await PrService(db_path).detect_session_prs(session.id) == []

    async def test_strictly_greater_is_pr(self, db_path, build_session):
        """Test beating the historical max by any amount is a PR."""
        await build_session(weights=[80, 100], days_ago=3)
        session = await build_session(weights=[100.5])

        prs = await PrService(db_path).detect_session_prs(session.id)

        assert len(prs) == 1
        assert prs[0].exercise_id == CHEST_PRESS_ID
        assert prs[0].previous_max == 100
        assert prs[0].new_max == 100.5

    async def test_detection_is_idempotent(self, db_path, build_session):
        """Test a second detection returns the same events without duplicates."""
        await build_session(weights=[100], days_ago=3)
        session = await build_session(weights=[110])
        service = PrService(db_path)

        first = await service.detect_session_prs(session.id)
        second = await service.detect_session_prs(session.id)

        assert first == second
        assert len(await PREventRepository(db_path).list_all()) == 1

    async def test_invalid_weights_ignored(self, db_path, build_session):
        """Test null, zero and negative weights never participate."""
        await build_session(weights=[None, 0, -20], days_ago=3)
        session = await build_session(weights=[10])
        assert await PrService(db_path).detect_session_prs(session.id) == []

    async def test_incomplete_history_ignored(self, db_path, build_session):
        """Test unfinished sessions are not history."""
        await build_session(weights=[100], completed=False)
        session = await build_session(weights=[120])
        assert await PrService(db_path).detect_session_prs(session.id) == []

    async def test_repeated_exercise_in_session(self, db_path, build_session):
        """Test an exercise logged twice in one session yields one PR."""
        await build_session(weights=[50], days_ago=3)
        session = await build_session(weights=[55])
        se = await SessionExerciseRepository(db_path).append(session.id, CHEST_PRESS_ID)
        await SetRepository(db_path).append(Set(session_exercise_id=se.id, set_index=0, weight=60))

        prs = await PrService(db_path).detect_session_prs(session.id)
        assert [(p.previous_max, p.new_max) for p in prs] == [(50, 60)]

    async def test_max_weight_helpers(self, db_path, build_session):
        """Test current and historical max lookups."""
        await build_session(weights=[70, 75], days_ago=3)
        session = await build_session(weights=[72])
        service = PrService(db_path)

        assert await service.get_current_max_weight(CHEST_PRESS_ID, session.id) == 72
        assert await service.get_historical_max_weight(CHEST_PRESS_ID, session.id) == 75
        assert await service.get_current_max_weight(BICEP_CURL_ID, session.id) is None


class TestXpFormula:
    """Tests for the XP formula and levels."""

    def test_formula(self):
        """Test 12 sets and one PR give 210 XP."""
        breakdown = calculate_xp(set_count=12, pr_count=1)
        assert breakdown.session_xp == 210
        assert breakdown.session_completion_xp == 100
        assert breakdown.set_xp == 60
        assert breakdown.pr_xp == 50

    def test_pr_bonus_capped(self):
        """Test at most three PRs earn a bonus."""
        assert calculate_xp(set_count=0, pr_count=5).pr_xp == 150

    def test_level_progress(self):
        """Test progress within a level."""
        progress = level_progress(2500)
        assert progress.level == 3
        assert progress.xp_into_level == 500
        assert progress.xp_to_next_level == 500


class TestXpAward:
    """Tests for XpService."""

    async def _session_with_pr(self, db_path, build_session):
        await build_session(weights=[100], days_ago=3)
        # 12 sets, one of which beats the previous best
        return await build_session(weights=[50] * 11 + [105])

    async def test_award(self, db_path, build_session):
        """Test XP, PR bonus and the awarded flag."""
        session = await self._session_with_pr(db_path, build_session)

        result = await XpService(db_path).award_session_xp(session.id)

        assert result.outcome == AwardOutcome.AWARDED
        assert result.breakdown.set_count == 12
        assert result.breakdown.pr_count == 1
        assert result.session_xp == 210
        assert result.new_total_xp == 210
        assert (await SessionRepository(db_path).get(session.id)).xp_awarded is True

    async def test_second_award_is_noop(self, db_path, build_session):
        """Test awarding twice adds XP once."""
        session = await self._session_with_pr(db_path, build_session)
        service = XpService(db_path)

        await service.award_session_xp(session.id)
        again = await service.award_session_xp(session.id)

        assert again.outcome == AwardOutcome.ALREADY_AWARDED
        assert not again.awarded
        assert (await GamificationRepository(db_path).get_state()).total_xp == 210

    async def test_concurrent_awards_add_once(self, db_path, build_session):
        """Test racing awards for one session add XP once."""
        session = await self._session_with_pr(db_path, build_session)
        service = XpService(db_path)

        results = await asyncio.gather(*(service.award_session_xp(session.id) for _ in range(4)))

        assert [r.outcome for r in results].count(AwardOutcome.AWARDED) == 1
        assert (await GamificationRepository(db_path).get_state()).total_xp == 210
        assert len(await PREventRepository(db_path).get_for_session(session.id)) == 1

    async def test_missing_session(self, db_path):
        """Test an unknown session is reported, not raised."""
        result = await XpService(db_path).award_session_xp("nope")
        assert result.outcome == AwardOutcome.SESSION_NOT_FOUND

    async def test_incomplete_session(self, db_path, build_session):
        """Test an in-progress session cannot be awarded."""
        session = await build_session(weights=[10], completed=False)
        result = await XpService(db_path).award_session_xp(session.id)
        assert result.outcome == AwardOutcome.SESSION_NOT_COMPLETED
        assert (await GamificationRepository(db_path).get_state()).total_xp == 0

    async def test_empty_sets_count(self, db_path, build_session):
        """Test empty sets still earn set XP."""
        session = await build_session(weights=[None, None, None])
        result = await XpService(db_path).award_session_xp(session.id)
        assert result.session_xp == 115

    async def test_preview_does_not_write(self, db_path, build_session):
        """Test calculate_session_xp leaves the store alone."""
        session = await build_session(weights=[10, 20])
        service = XpService(db_path)

        preview = await service.calculate_session_xp(session.id)

        assert preview.session_xp == 110
        assert (await GamificationRepository(db_path).get_state()).total_xp == 0
        assert not (await SessionRepository(db_path).get(session.id)).xp_awarded
        assert await service.calculate_session_xp("nope") is None

    async def test_level_after_awards(self, db_path, build_session):
        """Test level progress reads the running total."""
        await GamificationRepository(db_path).add_xp(990)
        session = await build_session(weights=[10])
        await XpService(db_path).award_session_xp(session.id)

        progress = await XpService(db_path).get_level_progress()
        assert progress.total_xp == 1095
        assert progress.level == 2


@pytest.mark.parametrize("total_xp, level", [(999, 1), (1000, 2), (2500, 3)])
def test_compute_level(total_xp, level):
    """Test the level formula through the service."""
    assert XpService.compute_level(total_xp) == level
