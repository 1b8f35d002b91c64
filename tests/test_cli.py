"""Tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

from momentum_log.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cli(runner, tmp_path):
    """Invoke the CLI against a throwaway data directory."""
    data_dir = tmp_path / "data"

    def _invoke(*args):
        return runner.invoke(main, ["--data-dir", str(data_dir), *args])

    return _invoke


@pytest.fixture
def initialized(cli):
    result = cli("init")
    assert result.exit_code == 0, result.output
    return cli


class TestInit:
    """Tests for the init command."""

    def test_init_seeds_once(self, cli, tmp_path):
        """Test the first init seeds and the second changes nothing."""
        first = cli("init")
        assert first.exit_code == 0
        assert "Database created with the default exercise library" in first.output
        assert (tmp_path / "data" / "settings.yaml").exists()

        second = cli("init")
        assert second.exit_code == 0
        assert "Database already initialized" in second.output

    def test_commands_require_init(self, cli):
        """Test commands refuse to run on a missing database."""
        result = cli("status")
        assert result.exit_code == 1
        assert "Not initialized" in result.output


class TestExercisesCommand:
    """Tests for the exercises commands."""

    def test_list_default_library(self, initialized):
        """Test the seeded exercises are listed by name."""
        result = initialized("exercises", "list")
        assert result.exit_code == 0
        for name in ("Bicep Curl", "Chest Press", "Treadmill"):
            assert name in result.output

    def test_add_and_search(self, initialized):
        """Test adding a custom exercise with all options given."""
        result = initialized(
            "exercises", "add", "Back Squat", "--category", "legs", "--equipment", "barbell"
        )
        assert result.exit_code == 0
        assert "Added Back Squat" in result.output

        found = initialized("exercises", "list", "--search", "squat")
        assert "Back Squat" in found.output
        assert "Chest Press" not in found.output

    def test_delete_used_exercise_refused(self, initialized):
        """Test an exercise referenced by a session cannot be deleted."""
        initialized("session", "start")
        initialized("session", "add", "Bicep Curl")

        result = initialized("exercises", "delete", "Bicep Curl")
        assert result.exit_code == 1
        assert "cannot be deleted" in result.output


class TestSessionCommands:
    """Tests for the session workflow."""

    def test_full_session(self, initialized):
        """Test start, log and finish award XP and keep momentum active."""
        assert initialized("session", "start", "--quest", "upper").exit_code == 0

        logged = initialized("session", "log", "Chest Press", "-w", "40", "-r", "10")
        assert logged.exit_code == 0
        assert "40 kg × 10" in logged.output

        finished = initialized("session", "finish")
        assert finished.exit_code == 0
        assert "+105 XP" in finished.output
        assert "Total XP: 105  Level 1" in finished.output
        assert "Momentum: Active (7 days left)" in finished.output

        status = initialized("status")
        assert "Momentum: Active (7 days left)" in status.output
        assert "Level 1: 105 XP (895 to next level)" in status.output
        assert "Sessions in the last 4 weeks: 1" in status.output

    def test_cardio_set(self, initialized):
        """Test cardio exercises log duration and distance."""
        initialized("session", "start")
        result = initialized(
            "session", "log", "Treadmill", "--duration", "1230", "--distance", "3.2"
        )
        assert result.exit_code == 0
        assert "20:30 · 3.2 km" in result.output

    def test_notes_saved(self, initialized):
        """Test session notes are written through the autosave path."""
        initialized("session", "start")
        result = initialized("session", "notes", "--text", "Felt strong")
        assert result.exit_code == 0, result.output
        assert "Notes saved" in result.output

        shown = initialized("session", "show")
        assert "Notes:   Felt strong" in shown.output

    def test_second_start_refused(self, initialized):
        """Test only one session can be in progress."""
        initialized("session", "start")
        result = initialized("session", "start")
        assert result.exit_code == 1
        assert "already in progress" in result.output

    def test_log_without_session(self, initialized):
        """Test logging needs a session in progress."""
        result = initialized("session", "log", "Chest Press", "-w", "40", "-r", "5")
        assert result.exit_code == 1
        assert "No session in progress" in result.output

    def test_unknown_exercise(self, initialized):
        """Test an unknown exercise name is reported."""
        initialized("session", "start")
        result = initialized("session", "log", "Deadlift", "-w", "100", "-r", "5")
        assert result.exit_code == 1
        assert "No exercise named 'Deadlift'" in result.output

    def test_pr_reported(self, initialized):
        """Test beating a previous best is reported on finish."""
        initialized("session", "start")
        initialized("session", "log", "Chest Press", "-w", "40", "-r", "10")
        initialized("session", "finish")

        initialized("session", "start")
        initialized("session", "log", "Chest Press", "-w", "45", "-r", "8")
        finished = initialized("session", "finish")

        assert "+155 XP" in finished.output
        assert "New PR: Chest Press 40 kg -> 45 kg" in finished.output
        assert "Chest Press" in initialized("prs").output


class TestLogCommands:
    """Tests for bodyweight and food logging."""

    def test_bodyweight(self, initialized):
        """Test logging and listing bodyweight."""
        result = initialized("bodyweight", "log", "81.5", "--at", "2026-03-09T07:30")
        assert result.exit_code == 0
        assert "Logged 81.5 kg on 2026-03-09" in result.output

        listed = initialized("bodyweight", "list", "--date", "2026-03-09")
        assert "81.5 kg" in listed.output

    def test_invalid_timestamp(self, initialized):
        """Test a malformed --at value is rejected."""
        result = initialized("food", "log", "Toast", "--at", "yesterday")
        assert result.exit_code == 1
        assert "Invalid timestamp" in result.output

    def test_food(self, initialized):
        """Test logging and listing food."""
        result = initialized("food", "log", "Oats", "--at", "2026-03-09T08:00")
        assert "Logged 'Oats' on 2026-03-09" in result.output
        assert "Oats" in initialized("food", "list").output


class TestBackupCommands:
    """Tests for export and import."""

    def test_export_then_import(self, initialized, tmp_path):
        """Test a backup restores the store as it was."""
        backups = tmp_path / "backups"
        initialized("bodyweight", "log", "80")
        exported = initialized("export", "--output", str(backups))
        assert exported.exit_code == 0
        (backup_file,) = backups.glob("momentum-backup-*.json")

        initialized("bodyweight", "log", "82")
        imported = initialized("import", str(backup_file), "--yes")
        assert imported.exit_code == 0, imported.output
        assert "Import complete" in imported.output

        listed = initialized("bodyweight", "list").output
        assert "80 kg" in listed
        assert "82 kg" not in listed

    def test_import_rejects_other_schema(self, initialized, tmp_path):
        """Test an incompatible backup is refused before any change."""
        path = tmp_path / "old.json"
        path.write_text(
            json.dumps({"schemaVersion": 1, "exportedAt": "2025-01-01T00:00:00.000Z", "data": {}}),
            encoding="utf-8",
        )
        result = initialized("import", str(path), "--yes")
        assert result.exit_code == 1
        assert "Schema version mismatch" in result.output

    def test_import_rejects_bad_json(self, initialized, tmp_path):
        """Test a file that is not JSON is reported."""
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        result = initialized("import", str(path), "--yes")
        assert result.exit_code == 1
        assert "Invalid JSON file" in result.output
