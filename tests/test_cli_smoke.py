"""
Minimal smoke tests for the hardplan CLI.

Tests basic functionality:
- App runs without errors
- Program is generated and saved
- Workout logs update targets
- Schedule shift and block assessment rewrite the program
- Analysis commands print without errors
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from hardplan.cli.main import app
from hardplan.io.serializers import load_program

runner = CliRunner()


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Temporary directory holding a profile; no user exercise file."""
    monkeypatch.setenv("HARDPLAN_HOME", str(tmp_path))
    profile = {"training_age": "novice", "goal": "strength", "available_days": [2, 4, 6]}
    (tmp_path / "profile.json").write_text(json.dumps(profile))
    return tmp_path


def _generate(workdir: Path) -> Path:
    program_path = workdir / "program.json"
    result = runner.invoke(
        app,
        ["generate", str(workdir / "profile.json"), "--out", str(program_path), "--start", "2024-03-04"],
    )
    assert result.exit_code == 0, result.output
    return program_path


def _write_log(workdir: Path, logs) -> Path:
    path = workdir / "logs.json"
    path.write_text(json.dumps(logs))
    return path


BENCH_LOG = {
    "date_completed": "2024-03-05",
    "exercises": [
        {
            "exercise_id": "bench_press",
            "sets": [{"load": 135, "reps": 5, "rpe": 8}, {"load": 135, "reps": 5, "rpe": 8.5}],
        }
    ],
}


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "generate" in result.output

    def test_generate_saves_program(self, workdir):
        program_path = _generate(workdir)
        program = load_program(program_path)
        assert program.start_date == "2024-03-04"
        assert [s.day_of_week for s in program.weekly_schedule] == [2, 4, 6]

    def test_generate_with_assigned_blocks(self, workdir):
        blocks = {"2": {"name": "Press Day", "primary_muscles": ["chest"], "accessory_muscles": ["triceps"]}}
        (workdir / "blocks.json").write_text(json.dumps(blocks))
        program_path = workdir / "program.json"
        result = runner.invoke(
            app,
            [
                "generate",
                str(workdir / "profile.json"),
                "--blocks",
                str(workdir / "blocks.json"),
                "--out",
                str(program_path),
            ],
        )
        assert result.exit_code == 0, result.output
        monday = load_program(program_path).weekly_schedule[0]
        assert monday.name == "Press Day"

    def test_generate_bad_start_date(self, workdir):
        result = runner.invoke(app, ["generate", str(workdir / "profile.json"), "--start", "03/04/2024"])
        assert result.exit_code == 1

    def test_invalid_profile(self, workdir):
        (workdir / "bad.json").write_text(json.dumps({"training_age": "novice", "goal": "cardio"}))
        result = runner.invoke(app, ["generate", str(workdir / "bad.json")])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_missing_profile(self, workdir):
        result = runner.invoke(app, ["blocks", str(workdir / "absent.json")])
        assert result.exit_code == 1

    def test_blocks(self, workdir):
        result = runner.invoke(app, ["blocks", str(workdir / "profile.json")])
        assert result.exit_code == 0, result.output

    def test_validate_generated_program(self, workdir):
        program_path = _generate(workdir)
        result = runner.invoke(app, ["validate", str(program_path), str(workdir / "profile.json")])
        assert result.exit_code == 0, result.output

    def test_validate_duplicate_days_fails(self, workdir):
        program = {
            "start_date": "2024-03-04",
            "weekly_schedule": [
                {"day_of_week": 2, "name": "A", "exercises": []},
                {"day_of_week": 2, "name": "B", "exercises": []},
            ],
        }
        (workdir / "program.json").write_text(json.dumps(program))
        result = runner.invoke(app, ["validate", str(workdir / "program.json"), str(workdir / "profile.json")])
        assert result.exit_code == 1

    def test_log_updates_targets(self, workdir):
        program_path = _generate(workdir)
        log_path = _write_log(workdir, BENCH_LOG)

        result = runner.invoke(
            app,
            ["log", str(program_path), str(workdir / "profile.json"), str(log_path), "--today", "2024-03-06"],
        )
        assert result.exit_code == 0, result.output

        program = load_program(program_path)
        assert program.progression_data["bench_press"].current_load > 0
        bench_slots = [
            e for s in program.weekly_schedule for e in s.exercises if e.exercise_id == "bench_press"
        ]
        assert bench_slots and all(e.target_load > 0 for e in bench_slots)

    def test_log_batch_replays_in_date_order(self, workdir):
        """Sessions two days apart progress instead of counting as layoffs."""
        program_path = _generate(workdir)
        later = dict(BENCH_LOG, date_completed="2024-03-07")
        log_path = _write_log(workdir, [later, BENCH_LOG])

        result = runner.invoke(
            app,
            ["log", str(program_path), str(workdir / "profile.json"), str(log_path), "--today", "2024-03-08"],
        )
        assert result.exit_code == 0, result.output

        # anchor 135 -> 137.5 -> 140
        state = load_program(program_path).progression_data["bench_press"]
        assert state.current_load == 140.0
        assert state.consecutive_fails == 0

    def test_shift(self, workdir):
        program_path = _generate(workdir)
        result = runner.invoke(app, ["shift", str(program_path)])
        assert result.exit_code == 0, result.output

        program = load_program(program_path)
        assert program.start_date == "2024-03-05"
        assert [s.day_of_week for s in program.weekly_schedule] == [3, 5, 7]

    def test_assess_deload(self, workdir):
        program_path = _generate(workdir)
        result = runner.invoke(app, ["assess", str(program_path), "--decision", "deload"])
        assert result.exit_code == 0, result.output
        assert load_program(program_path).current_block_phase == "deload"

    def test_assess_rejects_unknown_decision(self, workdir):
        program_path = _generate(workdir)
        result = runner.invoke(app, ["assess", str(program_path), "--decision", "holiday"])
        assert result.exit_code == 1

    def test_session_short_on_time(self, workdir):
        program_path = _generate(workdir)
        result = runner.invoke(app, ["session", str(program_path), "2", "--short-on-time"])
        assert result.exit_code == 0, result.output

    def test_session_unknown_day(self, workdir):
        program_path = _generate(workdir)
        result = runner.invoke(app, ["session", str(program_path), "1"])
        assert result.exit_code == 1

    def test_volume(self, workdir):
        result = runner.invoke(app, ["volume", str(_write_log(workdir, [BENCH_LOG]))])
        assert result.exit_code == 0, result.output
        assert "chest" in result.output

    def test_progress(self, workdir):
        result = runner.invoke(app, ["progress", str(_write_log(workdir, BENCH_LOG)), "bench_press"])
        assert result.exit_code == 0, result.output

    def test_report(self, workdir):
        program_path = _generate(workdir)
        result = runner.invoke(app, ["report", str(program_path), str(_write_log(workdir, BENCH_LOG))])
        assert result.exit_code == 0, result.output
        assert "Main Lifts" in result.output
        assert "Warning" not in result.output

    def test_report_flags_slow_tempo(self, workdir):
        program_path = _generate(workdir)
        slow = {"load": 135, "reps": 5, "rpe": 8, "actual_tempo": {"eccentric": 6, "pause": 1, "concentric": 1}}
        log = dict(BENCH_LOG, exercises=[{"exercise_id": "bench_press", "sets": [slow, slow]}])
        result = runner.invoke(app, ["report", str(program_path), str(_write_log(workdir, log))])
        assert result.exit_code == 0, result.output
        assert "Warning" in result.output

    def test_substitutes(self, workdir):
        profile_path = workdir / "hypertrophy.json"
        profile_path.write_text(json.dumps({"training_age": "intermediate", "goal": "hypertrophy"}))
        result = runner.invoke(app, ["substitutes", "bench_press", str(profile_path)])
        assert result.exit_code == 0, result.output
        assert "Incline" in result.output

    def test_unknown_exercise(self, workdir):
        result = runner.invoke(app, ["substitutes", "nope", str(workdir / "profile.json")])
        assert result.exit_code == 1
        assert "Unknown exercise" in result.output
