"""Tests for data models."""

import pytest

from momentum_log.models import (
    BodyweightEntry,
    DistanceUnit,
    EquipmentType,
    Exercise,
    ExerciseCategory,
    FoodEntry,
    GamificationState,
    LogType,
    PREvent,
    QuestId,
    Session,
    SessionExercise,
    Set,
    SetKind,
    StoreData,
    compute_level,
)
from momentum_log.utils.dates import build_iso_from_date_and_time, derive_local_date


class TestExercise:
    """Tests for Exercise model."""

    def test_exercise_to_dict(self):
        """Test exercise serialization uses camelCase keys."""
        exercise = Exercise(
            name="Bench Press",
            category=ExerciseCategory.CHEST,
            equipment_type=EquipmentType.BARBELL,
            log_type=LogType.STRENGTH,
        )
        data = exercise.to_dict()

        assert data["name"] == "Bench Press"
        assert data["category"] == "chest"
        assert data["equipmentType"] == "barbell"
        assert data["logType"] == "strength"
        assert "notes" not in data

    def test_exercise_from_dict(self):
        """Test exercise deserialization."""
        exercise = Exercise.from_dict(
            {
                "id": "ex-1",
                "name": "Row",
                "category": "back",
                "equipmentType": "cable",
                "createdAt": "2026-01-01T00:00:00.000Z",
                "updatedAt": "2026-01-01T00:00:00.000Z",
            }
        )

        assert exercise.id == "ex-1"
        assert exercise.category == ExerciseCategory.BACK
        assert exercise.log_type is None
        assert exercise.effective_log_type == LogType.STRENGTH


class TestSession:
    """Tests for Session model."""

    def test_in_progress_session(self):
        """Test a session without ended_at is not completed."""
        session = Session()
        assert not session.is_completed
        assert "endedAt" not in session.to_dict()
        assert "xpAwarded" not in session.to_dict()

    def test_display_name(self):
        """Test quest names and the fallback."""
        assert Session(quest_id=QuestId.UPPER).display_name == "Upper Body"
        assert Session().display_name == "Session"

    def test_round_trip(self):
        """Test wire form survives a round trip unchanged."""
        session = Session(
            started_at="2026-03-01T10:00:00.000Z",
            ended_at="2026-03-01T11:00:00.000Z",
            quest_id=QuestId.FULL_BODY,
            xp_awarded=True,
        )
        data = session.to_dict()
        assert Session.from_dict(data).to_dict() == data
        assert data["questId"] == "full-body"
        assert data["xpAwarded"] is True

    def test_session_exercise_wire_keys(self):
        """Test session exercise keys."""
        data = SessionExercise(session_id="s", exercise_id="e", order_index=2).to_dict()
        assert data["sessionId"] == "s"
        assert data["exerciseId"] == "e"
        assert data["orderIndex"] == 2


class TestSet:
    """Tests for Set model."""

    def test_kind_defaults_to_strength(self):
        """Test missing kind is treated as strength."""
        assert Set(session_exercise_id="se", set_index=0).effective_kind == SetKind.STRENGTH

    def test_empty_fields_omitted(self):
        """Test optional fields left empty are not written."""
        data = Set(session_exercise_id="se", set_index=0, weight=60.0).to_dict()
        assert data["weight"] == 60.0
        assert "reps" not in data
        assert "distanceUnit" not in data

    def test_cardio_from_dict(self):
        """Test cardio fields are read."""
        set_ = Set.from_dict(
            {
                "id": "set-1",
                "sessionExerciseId": "se",
                "setIndex": 0,
                "kind": "cardio",
                "durationSec": 600,
                "distance": 2.5,
                "distanceUnit": "mi",
                "createdAt": "2026-01-01T00:00:00.000Z",
            }
        )
        assert set_.kind == SetKind.CARDIO
        assert set_.distance_unit == DistanceUnit.MI
        assert set_.duration_sec == 600


class TestLogEntries:
    """Tests for bodyweight and food entries."""

    def test_date_follows_logged_at(self):
        """Test date is re-derived whenever logged_at changes."""
        first = build_iso_from_date_and_time("2026-03-01", "08:30")
        second = build_iso_from_date_and_time("2026-03-05", "21:15")

        entry = BodyweightEntry(weight_kg=80.0, logged_at=first)
        assert entry.date == "2026-03-01"

        entry.logged_at = second
        assert entry.date == "2026-03-05"

    def test_from_dict_ignores_stored_date(self):
        """Test a stale date in the wire form is recomputed."""
        logged_at = build_iso_from_date_and_time("2026-03-02", "12:00")
        entry = FoodEntry.from_dict(
            {
                "id": "f-1",
                "date": "1999-01-01",
                "loggedAt": logged_at,
                "text": "Oats",
                "createdAt": logged_at,
            }
        )
        assert entry.date == "2026-03-02"
        assert entry.to_dict()["date"] == "2026-03-02"

    def test_date_is_local(self):
        """Test date uses the local calendar."""
        logged_at = build_iso_from_date_and_time("2026-07-04", "23:59")
        assert derive_local_date(logged_at) == "2026-07-04"


class TestGamification:
    """Tests for gamification models."""

    @pytest.mark.parametrize(
        "total_xp, level",
        [(0, 1), (999, 1), (1000, 2), (2500, 3)],
    )
    def test_compute_level(self, total_xp, level):
        """Test level is floor(total / 1000) + 1."""
        assert compute_level(total_xp) == level
        assert GamificationState(total_xp=total_xp).level == level

    def test_state_wire_form(self):
        """Test the singleton keeps its fixed id."""
        assert GamificationState(total_xp=5).to_dict() == {"id": "default", "totalXp": 5}

    def test_pr_event_requires_improvement(self):
        """Test equal or lower maxima are rejected."""
        with pytest.raises(ValueError):
            PREvent(session_id="s", exercise_id="e", previous_max=100, new_max=100)
        with pytest.raises(ValueError):
            PREvent(session_id="s", exercise_id="e", previous_max=0, new_max=10)

    def test_pr_event_improvement(self):
        """Test improvement is the difference of maxima."""
        event = PREvent(session_id="s", exercise_id="e", previous_max=100, new_max=102.5)
        assert event.improvement == 2.5


class TestStoreData:
    """Tests for the backup data section."""

    def test_missing_collections_default_empty(self):
        """Test absent collections become empty lists."""
        data = StoreData.from_dict({"exercises": []})
        assert data.food_entries == []
        assert data.pr_events == []

    def test_to_dict_has_all_collections(self):
        """Test every collection is written."""
        assert set(StoreData().to_dict()) == {
            "exercises",
            "sessions",
            "sessionExercises",
            "sets",
            "bodyweightEntries",
            "foodEntries",
            "gamificationState",
            "prEvents",
        }
