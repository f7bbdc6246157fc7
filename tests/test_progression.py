"""
Unit tests for the progression strategies and router.

Expected values are hand-computed:
  rounding: round(value / increment) * increment, halves away from zero
  novice:   +increment (x2 lower body), 0.9 after two failures, 0.8 after >14 days
  wave:     base, base + 2*inc, base + 4*inc for weeks 1/2/3
  double:   reps +1 up to the top of the range, then +inc and back to the bottom
"""

from datetime import date

import pytest

from hardplan.core.catalog import ExerciseCatalog
from hardplan.core.models import (
    ActiveProgram,
    CompletedExercise,
    CompletedSet,
    Exercise,
    MuscleImpact,
    ProgressionState,
    ScheduledExercise,
    ScheduledSession,
    UserProfile,
    WorkoutLog,
)
from hardplan.core.progression import (
    ProgressionStrategy,
    apply_workout_log,
    calculate_next_state,
    replay_workout_logs,
    select_strategy,
)

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

SQUAT = Exercise(
    id="back_squat",
    name="Back Squat",
    pattern="squat",
    type="compound",
    equipment="barbell",
    primary_muscle="quads",
    secondary_muscles=[MuscleImpact("glutes", 0.5)],
    tier=1,
    is_competition_lift=True,
)
BENCH = Exercise(
    id="bench_press",
    name="Bench Press",
    pattern="push_horizontal",
    type="compound",
    equipment="barbell",
    primary_muscle="chest",
    tier=1,
    is_competition_lift=True,
)
CURL = Exercise(
    id="barbell_curl",
    name="Barbell Curl",
    pattern="isolation",
    type="isolation",
    equipment="barbell",
    primary_muscle="biceps",
    tier=3,
)

LOG_DATE = "2024-03-04"
TODAY = date(2024, 3, 4)


def _set(reps: int, target: int, load: float = 100.0, rpe: float = 8.0, tags=None) -> CompletedSet:
    return CompletedSet(
        set_number=1,
        target_load=load,
        target_reps=target,
        load=load,
        reps=reps,
        rpe=rpe,
        tags=list(tags or []),
    )


def _log(exercise_id: str, sets: list[CompletedSet], date_completed: str = LOG_DATE) -> WorkoutLog:
    return WorkoutLog(
        date_completed=date_completed,
        exercises=[CompletedExercise(exercise_id=exercise_id, sets=sets)],
    )


def _novice(increment: float = 2.5, today: date | None = TODAY) -> ProgressionStrategy:
    return ProgressionStrategy(kind="novice", increment=increment, today=today)


def _wave(week: int, blocks: int = 0, goal: str = "strength") -> ProgressionStrategy:
    return ProgressionStrategy(
        kind="intermediate",
        increment=2.5,
        goal=goal,
        current_week=week,
        blocks_without_deload=blocks,
    )


def _user(**kwargs) -> UserProfile:
    defaults = dict(training_age="novice", goal="strength")
    defaults.update(kwargs)
    return UserProfile(**defaults)


# ---------------------------------------------------------------------------
# Novice linear progression
# ---------------------------------------------------------------------------


class TestNoviceProgression:
    """Linear load increases with stall and hiatus resets."""

    def test_success_lower_body_adds_two_increments(self):
        # 135 + 2 * 2.5 = 140
        state = ProgressionState("back_squat", current_load=135.0)
        log = _log("back_squat", [_set(5, 5), _set(5, 5), _set(6, 5)])
        result = _novice().next_state(state, log, SQUAT)
        assert result.current_load == pytest.approx(140.0)
        assert result.consecutive_fails == 0

    def test_success_upper_body_adds_one_increment(self):
        state = ProgressionState("bench_press", current_load=135.0)
        result = _novice().next_state(state, _log("bench_press", [_set(5, 5)]), BENCH)
        assert result.current_load == pytest.approx(137.5)

    def test_single_failure_keeps_load(self):
        state = ProgressionState("back_squat", current_load=135.0)
        log = _log("back_squat", [_set(5, 5), _set(4, 5)])
        result = _novice().next_state(state, log, SQUAT)
        assert result.current_load == pytest.approx(135.0)
        assert result.consecutive_fails == 1
        assert result.reset_count == 0

    def test_second_failure_resets_load(self):
        # round(135 * 0.9 / 2.5) * 2.5 = round(48.6) * 2.5 = 122.5
        state = ProgressionState("back_squat", current_load=135.0, consecutive_fails=1)
        result = _novice().next_state(state, _log("back_squat", [_set(3, 5)]), SQUAT)
        assert result.current_load == pytest.approx(122.5)
        assert result.reset_count == 1
        assert result.consecutive_fails == 0

    def test_hiatus_overrides_success(self):
        # 19 days since the log: round(135 * 0.8 / 2.5) * 2.5 = 43 * 2.5 = 107.5
        state = ProgressionState("back_squat", current_load=135.0, consecutive_fails=1)
        log = _log("back_squat", [_set(5, 5)], date_completed="2024-03-01")
        result = _novice(today=date(2024, 3, 20)).next_state(state, log, SQUAT)
        assert result.current_load == pytest.approx(107.5)
        assert result.consecutive_fails == 0

    def test_exactly_fourteen_days_is_not_a_hiatus(self):
        state = ProgressionState("back_squat", current_load=135.0)
        log = _log("back_squat", [_set(5, 5)], date_completed="2024-03-01")
        result = _novice(today=date(2024, 3, 15)).next_state(state, log, SQUAT)
        assert result.current_load == pytest.approx(140.0)

    def test_unparseable_date_skips_hiatus_check(self):
        state = ProgressionState("back_squat", current_load=135.0)
        log = _log("back_squat", [_set(5, 5)], date_completed="last tuesday")
        result = _novice(today=date(2030, 1, 1)).next_state(state, log, SQUAT)
        assert result.current_load == pytest.approx(140.0)

    def test_internet_datetime_log_date(self):
        state = ProgressionState("back_squat", current_load=135.0)
        log = _log("back_squat", [_set(5, 5)], date_completed="2024-03-01T08:15:00.000Z")
        result = _novice(today=date(2024, 3, 20)).next_state(state, log, SQUAT)
        assert result.current_load == pytest.approx(107.5)

    def test_missing_exercise_is_noop(self):
        state = ProgressionState("back_squat", current_load=135.0)
        result = _novice().next_state(state, _log("bench_press", [_set(5, 5)]), SQUAT)
        assert result is state

    def test_zero_increment_skips_rounding(self):
        # 135 * 0.9 = 121.5 kept as-is
        state = ProgressionState("back_squat", current_load=135.0, consecutive_fails=1)
        result = _novice(increment=0.0).next_state(state, _log("back_squat", [_set(3, 5)]), SQUAT)
        assert result.current_load == pytest.approx(121.5)


# ---------------------------------------------------------------------------
# Intermediate wave loading
# ---------------------------------------------------------------------------


class TestWaveProgression:
    """Three-week wave driven by the program week."""

    @pytest.mark.parametrize(
        "week, load, reps",
        [(1, 185.0, 8), (2, 190.0, 7), (3, 195.0, 6)],
    )
    def test_wave_weeks(self, week, load, reps):
        state = ProgressionState("back_squat", current_load=185.0, base_load=185.0)
        result = _wave(week).next_state(state, _log("back_squat", [_set(5, 5)]), SQUAT)
        assert result.current_load == pytest.approx(load)
        assert result.current_rep_target == reps
        assert result.base_load == pytest.approx(185.0)

    def test_week_four_with_deload_due_resets(self):
        state = ProgressionState("back_squat", current_load=195.0, base_load=185.0)
        result = _wave(4, blocks=3).next_state(state, _log("back_squat", [_set(5, 5)]), SQUAT)
        assert result.current_load == pytest.approx(185.0)
        assert result.base_load == pytest.approx(185.0)
        assert result.current_rep_target == 8

    def test_week_four_raises_base(self):
        state = ProgressionState("back_squat", current_load=195.0, base_load=185.0)
        result = _wave(4, blocks=1).next_state(state, _log("back_squat", [_set(5, 5)]), SQUAT)
        assert result.base_load == pytest.approx(190.0)
        assert result.current_load == pytest.approx(190.0)

    def test_hypertrophy_reps(self):
        state = ProgressionState("back_squat", current_load=100.0, base_load=100.0)
        result = _wave(2, goal="hypertrophy").next_state(state, _log("back_squat", [_set(5, 5)]), SQUAT)
        assert result.current_rep_target == 10

    def test_failures_always_cleared(self):
        state = ProgressionState("back_squat", current_load=185.0, base_load=185.0, consecutive_fails=2)
        result = _wave(1).next_state(state, _log("back_squat", [_set(1, 8)]), SQUAT)
        assert result.consecutive_fails == 0

    def test_zero_base_falls_back_to_current_load(self):
        state = ProgressionState("back_squat", current_load=100.0)
        result = _wave(2).next_state(state, _log("back_squat", [_set(5, 5)]), SQUAT)
        assert result.current_load == pytest.approx(105.0)


# ---------------------------------------------------------------------------
# Double progression
# ---------------------------------------------------------------------------


class TestDoubleProgression:
    """Reps climb within the range, then load increases."""

    def _strategy(self) -> ProgressionStrategy:
        return ProgressionStrategy(kind="double_progression", increment=2.5, rep_range=(12, 15))

    def test_top_of_range_adds_load(self):
        state = ProgressionState("barbell_curl", current_load=15.0, current_rep_target=15)
        log = _log("barbell_curl", [_set(15, 15, load=15.0)] * 3)
        result = self._strategy().next_state(state, log, CURL)
        assert result.current_load == pytest.approx(17.5)
        assert result.current_rep_target == 12

    def test_below_top_caps_reps(self):
        state = ProgressionState("barbell_curl", current_load=15.0, current_rep_target=15)
        log = _log("barbell_curl", [_set(14, 15, load=15.0), _set(12, 15, load=15.0)])
        result = self._strategy().next_state(state, log, CURL)
        assert result.current_load == pytest.approx(15.0)
        assert result.current_rep_target == 15

    def test_reps_increase_by_one(self):
        state = ProgressionState("barbell_curl", current_load=15.0, current_rep_target=12)
        log = _log("barbell_curl", [_set(12, 12, load=15.0)])
        result = self._strategy().next_state(state, log, CURL)
        assert result.current_rep_target == 13

    def test_unseeded_target_starts_at_bottom(self):
        state = ProgressionState("barbell_curl", current_load=15.0)
        log = _log("barbell_curl", [_set(10, 12, load=15.0)])
        result = self._strategy().next_state(state, log, CURL)
        assert result.current_rep_target == 13

    def test_invalid_range_rejected(self):
        with pytest.raises(ValueError):
            ProgressionStrategy(kind="double_progression", increment=2.5, rep_range=(15, 12))


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------


class TestSelectStrategy:
    """Override, then isolation, then training age."""

    def test_override_wins(self):
        user = _user(progression_overrides={"back_squat": "double_progression"})
        strategy = select_strategy(SQUAT, user, ActiveProgram(start_date="2024-03-01"))
        assert strategy.kind == "double_progression"

    def test_isolation_uses_double_progression(self):
        strategy = select_strategy(CURL, _user(training_age="advanced"), ActiveProgram(start_date="2024-03-01"))
        assert strategy.kind == "double_progression"

    def test_novice_compound(self):
        strategy = select_strategy(SQUAT, _user(), ActiveProgram(start_date="2024-03-01"))
        assert strategy.kind == "novice"

    @pytest.mark.parametrize("age", ["intermediate", "advanced"])
    def test_trained_compound_uses_wave(self, age):
        program = ActiveProgram(start_date="2024-03-01", current_week=2, consecutive_blocks_without_deload=1)
        strategy = select_strategy(SQUAT, _user(training_age=age), program)
        assert strategy.kind == "intermediate"
        assert strategy.current_week == 2
        assert strategy.blocks_without_deload == 1

    def test_default_rep_range_and_increment(self):
        strategy = select_strategy(CURL, _user(min_plate_increment=1.25), ActiveProgram(start_date="2024-03-01"))
        assert strategy.rep_range == (8, 12)
        assert strategy.increment == pytest.approx(1.25)

    def test_caller_rep_range(self):
        strategy = select_strategy(CURL, _user(), ActiveProgram(start_date="2024-03-01"), rep_range=(10, 15))
        assert strategy.rep_range == (10, 15)


class TestCalculateNextState:
    """Routing plus recent-RPE bookkeeping."""

    def test_records_working_set_rpes(self):
        state = ProgressionState("bench_press", current_load=100.0, recent_rpes=[7.0])
        log = _log("bench_press", [_set(5, 5, rpe=6.0, tags=["warmup"]), _set(5, 5, rpe=8.5)])
        result = calculate_next_state(
            state, log, BENCH, _user(), ActiveProgram(start_date="2024-03-01"), today=TODAY
        )
        assert result.recent_rpes == [7.0, 8.5]
        assert result.current_load == pytest.approx(102.5)

    def test_keeps_last_ten_rpes(self):
        state = ProgressionState("bench_press", current_load=100.0, recent_rpes=[7.0] * 9)
        log = _log("bench_press", [_set(5, 5, rpe=8.0), _set(5, 5, rpe=9.0)])
        result = calculate_next_state(
            state, log, BENCH, _user(), ActiveProgram(start_date="2024-03-01"), today=TODAY
        )
        assert len(result.recent_rpes) == 10
        assert result.recent_rpes[-2:] == [8.0, 9.0]

    def test_missing_exercise_returns_current(self):
        state = ProgressionState("bench_press", current_load=100.0)
        result = calculate_next_state(
            state, _log("back_squat", [_set(5, 5)]), BENCH, _user(), ActiveProgram(start_date="2024-03-01")
        )
        assert result is state


class TestApplyWorkoutLog:
    """Whole-workout update feeding targets back into the schedule."""

    def _program(self) -> ActiveProgram:
        session = ScheduledSession(
            day_of_week=2,
            name="Full Body A",
            exercises=[
                ScheduledExercise("bench_press", 1, target_sets=3, target_reps=5),
                ScheduledExercise("barbell_curl", 2, target_sets=2, target_reps=8),
            ],
        )
        return ActiveProgram(
            start_date="2024-03-01",
            weekly_schedule=[session],
            progression_data={
                "bench_press": ProgressionState("bench_press", current_rep_target=5),
                "barbell_curl": ProgressionState("barbell_curl", current_rep_target=8),
            },
        )

    def test_zero_load_resolved_from_heaviest_set(self):
        # heaviest logged set 100 -> success -> 102.5
        log = _log("bench_press", [_set(5, 5, load=95.0), _set(5, 5, load=100.0)])
        catalog = ExerciseCatalog([BENCH, CURL])
        program = apply_workout_log(self._program(), log, _user(), catalog, today=TODAY)

        state = program.progression_data["bench_press"]
        assert state.current_load == pytest.approx(102.5)
        assert state.base_load == pytest.approx(100.0)
        slot = program.weekly_schedule[0].exercises[0]
        assert slot.target_load == pytest.approx(102.5)
        assert slot.target_reps == 5

    def test_accessory_rep_target_written_back(self):
        log = _log("barbell_curl", [_set(9, 8, load=20.0)])
        program = apply_workout_log(self._program(), log, _user(), ExerciseCatalog([BENCH, CURL]), today=TODAY)
        assert program.progression_data["barbell_curl"].current_rep_target == 9
        assert program.weekly_schedule[0].exercises[1].target_reps == 9

    def test_unknown_exercise_skipped(self):
        log = _log("mystery_lift", [_set(5, 5)])
        original = self._program()
        program = apply_workout_log(original, log, _user(), ExerciseCatalog([BENCH, CURL]), today=TODAY)
        assert "mystery_lift" not in program.progression_data
        assert program.progression_data == original.progression_data

    def test_state_created_on_first_encounter(self):
        log = _log("back_squat", [_set(5, 5, load=100.0)])
        program = apply_workout_log(self._program(), log, _user(), ExerciseCatalog([SQUAT]), today=TODAY)
        assert program.progression_data["back_squat"].current_load == pytest.approx(105.0)

    def test_input_program_not_mutated(self):
        original = self._program()
        apply_workout_log(original, _log("bench_press", [_set(5, 5)]), _user(), ExerciseCatalog([BENCH]), today=TODAY)
        assert original.progression_data["bench_press"].current_load == 0.0
        assert original.weekly_schedule[0].exercises[0].target_load == 0.0


class TestReplayWorkoutLogs:
    """Batches of logs applied in date order."""

    def _replay(self, logs: list[WorkoutLog], today: date) -> ProgressionState:
        program = replay_workout_logs(
            ActiveProgram(start_date="2024-03-01"), logs, _user(), ExerciseCatalog([SQUAT]), today=today
        )
        return program.progression_data["back_squat"]

    def test_close_sessions_progress(self):
        # 100 anchor -> 105 -> 110, logs given newest first
        logs = [
            _log("back_squat", [_set(5, 5)], date_completed="2024-03-06"),
            _log("back_squat", [_set(5, 5)], date_completed="2024-03-04"),
        ]
        assert self._replay(logs, date(2024, 3, 7)).current_load == pytest.approx(110.0)

    def test_gap_between_sessions_is_a_hiatus(self):
        # 03-01 judged on 03-20 (19 days): 100 * 0.8 = 80; then 80 + 5 = 85
        logs = [
            _log("back_squat", [_set(5, 5)], date_completed="2024-03-01"),
            _log("back_squat", [_set(5, 5)], date_completed="2024-03-20"),
        ]
        assert self._replay(logs, date(2024, 3, 21)).current_load == pytest.approx(85.0)

    def test_newest_log_judged_against_today(self):
        # 100 -> 105, then 03-04 judged on 03-25 (21 days): 105 * 0.8 = 84 -> 85
        logs = [
            _log("back_squat", [_set(5, 5)], date_completed="2024-03-01"),
            _log("back_squat", [_set(5, 5)], date_completed="2024-03-04"),
        ]
        assert self._replay(logs, date(2024, 3, 25)).current_load == pytest.approx(85.0)

    def test_skipped_logs_ignored(self):
        skipped = WorkoutLog(
            date_completed="2024-03-05",
            exercises=[CompletedExercise("back_squat", [_set(0, 5)])],
            status="skipped",
        )
        logs = [_log("back_squat", [_set(5, 5)], date_completed="2024-03-04"), skipped]
        state = self._replay(logs, date(2024, 3, 5))
        assert state.current_load == pytest.approx(105.0)
        assert state.consecutive_fails == 0
