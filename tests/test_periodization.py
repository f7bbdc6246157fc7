"""Tests for block periodization and the post-block assessment."""

import pytest

from hardplan.core.models import ActiveProgram, WorkoutLog
from hardplan.core.periodization import (
    PostBlockResponses,
    advance_week,
    completed_weeks,
    next_phase,
    should_trigger_post_block_assessment,
    start_next_block,
)


def _program(phase: str = "accumulation", week: int = 1, blocks: int = 0, start: str = "2024-03-04") -> ActiveProgram:
    return ActiveProgram(
        start_date=start,
        current_block_phase=phase,
        current_week=week,
        consecutive_blocks_without_deload=blocks,
    )


def _logs(*dates: str) -> list[WorkoutLog]:
    return [WorkoutLog(date_completed=d) for d in dates]


class TestPostBlockAssessment:
    """When a block has run its course."""

    def test_completed_weeks_from_log_dates(self):
        # 2024-03-04 -> 2024-03-25 is 21 days: 3 whole weeks, +1
        assert completed_weeks(_program(), _logs("2024-03-11", "2024-03-25")) == 4

    def test_week_counter_wins_when_larger(self):
        assert completed_weeks(_program(week=5), _logs("2024-03-05")) == 5

    def test_triggers_after_four_weeks(self):
        assert should_trigger_post_block_assessment(_program(), _logs("2024-03-25"))
        assert not should_trigger_post_block_assessment(_program(), _logs("2024-03-18"))

    def test_not_during_deload(self):
        assert not should_trigger_post_block_assessment(_program(phase="deload"), _logs("2024-04-30"))

    def test_unparseable_dates_never_trigger(self):
        assert not should_trigger_post_block_assessment(_program(start="soon", week=6), _logs("2024-04-30"))
        assert not should_trigger_post_block_assessment(_program(week=6), _logs("not a date"))
        assert not should_trigger_post_block_assessment(_program(week=6), [])

    def test_internet_datetime_dates(self):
        program = _program(start="2024-03-04T06:00:00Z")
        assert should_trigger_post_block_assessment(program, _logs("2024-03-25T18:30:00.000+01:00"))


class TestRecoveryResponses:
    """Self-reported recovery drives the next-block recommendation."""

    def test_defaults_are_ready(self):
        responses = PostBlockResponses()
        assert responses.recovery_risk_score == 0
        assert responses.readiness_label == "Ready to push"
        assert responses.recommended_decision(_program()) == "next_block"

    def test_one_flag(self):
        responses = PostBlockResponses(sleep_quality=5)
        assert responses.recovery_risk_score == 1
        assert responses.readiness_label == "Monitor fatigue"

    def test_two_flags_recommend_deload(self):
        responses = PostBlockResponses(stress_level=8, ache_level=7)
        assert responses.readiness_label == "High fatigue risk"
        assert responses.recommended_decision(_program()) == "deload"

    def test_too_many_blocks_recommend_deload(self):
        assert PostBlockResponses().recommended_decision(_program(blocks=3)) == "deload"


class TestBlockTransitions:
    """Week and phase counters."""

    def test_advance_week(self):
        assert advance_week(_program(week=2)).current_week == 3

    def test_phase_cycle(self):
        assert next_phase("introductory") == "accumulation"
        assert next_phase("realization") == "deload"
        assert next_phase("deload") == "accumulation"

    def test_next_block_counts(self):
        updated = start_next_block(_program(phase="accumulation", week=4, blocks=1), "next_block")
        assert updated.current_block_phase == "intensification"
        assert updated.current_week == 1
        assert updated.consecutive_blocks_without_deload == 2

    def test_deload_resets_counter(self):
        updated = start_next_block(_program(phase="intensification", week=4, blocks=2), "deload")
        assert updated.current_block_phase == "deload"
        assert updated.consecutive_blocks_without_deload == 0

    def test_rotating_into_deload_resets_counter(self):
        updated = start_next_block(_program(phase="realization", week=4, blocks=2), "next_block")
        assert updated.current_block_phase == "deload"
        assert updated.consecutive_blocks_without_deload == 0

    def test_leaving_deload(self):
        updated = start_next_block(_program(phase="deload", blocks=0), "next_block")
        assert updated.current_block_phase == "accumulation"
        assert updated.consecutive_blocks_without_deload == 0

    def test_unknown_decision(self):
        with pytest.raises(ValueError):
            start_next_block(_program(), "vacation")
