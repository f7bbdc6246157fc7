"""
Block periodization: week counters, phase rotation, post-block assessment.

Phase cycle:
    introductory → accumulation → intensification → realization → deload → accumulation

A block lasts BLOCK_LENGTH_WEEKS.  At its end the athlete answers a short
recovery check and either deloads or starts the next block.
"""

from dataclasses import dataclass, replace
from typing import Literal

from loguru import logger

from .config import (
    BLOCK_LENGTH_WEEKS,
    MANDATORY_DELOAD_BLOCKS,
    PHASE_CYCLE,
    RECOVERY_RISK_DELOAD_SCORE,
)
from .dates import parse_date
from .models import ActiveProgram, WorkoutLog

PostBlockDecision = Literal["deload", "next_block"]


@dataclass(frozen=True)
class PostBlockResponses:
    """Self-reported recovery markers on a 0–10 scale."""

    sleep_quality: float = 7.0
    stress_level: float = 5.0
    ache_level: float = 4.0

    @property
    def recovery_risk_score(self) -> int:
        """Count of red flags: poor sleep, high stress, high aches."""
        score = 0
        if self.sleep_quality < 6:
            score += 1
        if self.stress_level > 7:
            score += 1
        if self.ache_level > 6:
            score += 1
        return score

    @property
    def readiness_label(self) -> str:
        if self.recovery_risk_score == 0:
            return "Ready to push"
        if self.recovery_risk_score == 1:
            return "Monitor fatigue"
        return "High fatigue risk"

    def recommended_decision(self, program: ActiveProgram) -> PostBlockDecision:
        """Deload on high recovery risk or after too many blocks without one."""
        if self.recovery_risk_score >= RECOVERY_RISK_DELOAD_SCORE:
            return "deload"
        if program.consecutive_blocks_without_deload >= MANDATORY_DELOAD_BLOCKS:
            return "deload"
        return "next_block"


def completed_weeks(program: ActiveProgram, logs: list[WorkoutLog]) -> int:
    """
    Weeks completed in the current block.

    The larger of the program's week counter and the whole weeks elapsed
    from the start date to the latest parseable log date (plus one).
    """
    start = parse_date(program.start_date)
    log_dates = [d for d in (parse_date(log.date_completed) for log in logs) if d is not None]
    if start is None or not log_dates:
        return program.current_week
    week_delta = (max(log_dates) - start).days // 7
    return max(program.current_week, week_delta + 1)


def should_trigger_post_block_assessment(program: ActiveProgram, logs: list[WorkoutLog]) -> bool:
    """True once a non-deload block has run its full length."""
    if parse_date(program.start_date) is None:
        return False
    if not any(parse_date(log.date_completed) for log in logs):
        return False
    return completed_weeks(program, logs) >= BLOCK_LENGTH_WEEKS and program.current_block_phase != "deload"


def advance_week(program: ActiveProgram) -> ActiveProgram:
    """Move to the next training week within the block."""
    return replace(program, current_week=program.current_week + 1)


def next_phase(phase: str) -> str:
    return PHASE_CYCLE.get(phase, "accumulation")


def start_next_block(program: ActiveProgram, decision: PostBlockDecision) -> ActiveProgram:
    """
    Close the current block and open the next one at week 1.

    "deload" enters the deload phase and clears the blocks-without-deload
    counter; "next_block" rotates the phase and counts the finished block.
    Entering or leaving a deload clears the counter.
    """
    if decision == "deload":
        updated = replace(
            program,
            current_block_phase="deload",
            current_week=1,
            consecutive_blocks_without_deload=0,
        )
    elif decision == "next_block":
        phase = next_phase(program.current_block_phase)
        if phase == "deload" or program.current_block_phase == "deload":
            blocks = 0
        else:
            blocks = program.consecutive_blocks_without_deload + 1
        updated = replace(
            program,
            current_block_phase=phase,
            current_week=1,
            consecutive_blocks_without_deload=blocks,
        )
    else:
        raise ValueError(f"Unknown post-block decision: {decision!r}")

    logger.info(
        "Block transition",
        decision=decision,
        from_phase=program.current_block_phase,
        to_phase=updated.current_block_phase,
    )
    return updated
