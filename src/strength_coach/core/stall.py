"""
Plateau detection for a single exercise.

Input is the lifter's most recent sessions for one exercise, newest
first.  The newest and oldest e1RM are compared:

  change >= +tolerance  -> progressing (not stalled)
  change <= -tolerance  -> regressing (stalled, no fix type)
  otherwise flat        -> classify by average RPE and reps:
      avg RPE >= 9          deload
      avg reps <= 4         switch rep range
      avg reps 5..8         switch variation
      avg reps above 8      force a weight increase
"""

from typing import Final, Iterable, Mapping, Sequence

from .config import (
    DEFAULT_RPE,
    STALL_REP_RANGE_LOAD_FACTOR,
    STALL_SUGGESTED_REP_RANGE,
    StallThresholds,
)
from .e1rm import entry_e1rm
from .models import PrescriptionSpec, SessionHistoryEntry, StallFix, StallResult
from .plate_math import format_weight

VARIATIONS: Final[dict[str, tuple[str, ...]]] = {
    "Bench Press": ("Close Grip Bench", "Incline Bench Press", "Dumbbell Bench Press"),
    "Barbell Squat": ("Front Squat", "Pause Squat", "Box Squat"),
    "Deadlift": ("Deficit Deadlift", "Pause Deadlift", "Romanian Deadlift"),
    "Overhead Press": ("Push Press", "Seated Press", "Dumbbell Shoulder Press"),
    "Barbell Row": ("Pendlay Row", "Chest Supported Row", "T-Bar Row"),
    "Pull-ups": ("Weighted Pull-ups", "Wide Grip Pull-ups", "Chin-ups"),
}


def variation_suggestions(exercise_name: str) -> list[str]:
    """Curated variations for a lift, or [] when none are known."""
    key = exercise_name.strip().lower()
    for name, variations in VARIATIONS.items():
        if name.lower() == key:
            return list(variations)
    return []


def _average_rpe(sessions: Sequence[SessionHistoryEntry]) -> float:
    """Mean of the logged RPEs; DEFAULT_RPE when none were logged."""
    logged = [s.top_set_rpe for s in sessions if s.top_set_rpe is not None]
    if not logged:
        return DEFAULT_RPE
    return sum(logged) / len(logged)


def _average_reps(sessions: Sequence[SessionHistoryEntry]) -> int:
    """Mean top-set reps, rounded down."""
    return sum(s.top_set_reps for s in sessions) // len(sessions)


def e1rm_change_pct(sessions: Sequence[SessionHistoryEntry]) -> float:
    """
    Percent change in e1RM from the oldest to the newest session.

    Args:
        sessions: Entries ordered newest first

    Returns:
        Percent change (0.0 when fewer than two sessions or oldest e1RM is 0)
    """
    if len(sessions) < 2:
        return 0.0
    newest = entry_e1rm(sessions[0])
    oldest = entry_e1rm(sessions[-1])
    if oldest <= 0:
        return 0.0
    return (newest - oldest) / oldest * 100


def _reps_up_at_same_weight(sessions: Sequence[SessionHistoryEntry]) -> bool:
    newest, oldest = sessions[0], sessions[-1]
    return (
        abs(newest.top_set_weight - oldest.top_set_weight) < 1e-9
        and newest.top_set_reps > oldest.top_set_reps
    )


def _classify_flat(
    exercise_name: str,
    sessions: Sequence[SessionHistoryEntry],
    thresholds: StallThresholds,
    prescription: PrescriptionSpec | None = None,
) -> StallResult:
    """Pick a fix for a lift whose e1RM has not moved."""
    count = len(sessions)
    avg_rpe = _average_rpe(sessions)
    avg_reps = _average_reps(sessions)

    if avg_rpe >= thresholds.deload_rpe:
        target = sessions[0].top_set_weight * thresholds.deload_factor
        cut_pct = round((1 - thresholds.deload_factor) * 100)
        return StallResult(
            is_stalled=True,
            reason=(
                f"RPE consistently high ({avg_rpe:.1f}) with no progress "
                f"for {count} sessions"
            ),
            suggested_fix=(
                f"Take a micro-deload: reduce {exercise_name} weight by {cut_pct}% for one week"
            ),
            fix_type=StallFix.DELOAD,
            details=f"Target: {target:.1f}kg. Focus on technique and bar speed.",
        )

    if avg_reps <= thresholds.low_rep_max:
        low, high = STALL_SUGGESTED_REP_RANGE
        load_pct = round(STALL_REP_RANGE_LOAD_FACTOR * 100)
        target = sessions[0].top_set_weight * STALL_REP_RANGE_LOAD_FACTOR
        return StallResult(
            is_stalled=True,
            reason=(
                f"Stuck in low rep range ({avg_reps} avg) with no weight increases "
                f"for {count} sessions"
            ),
            suggested_fix=(
                f"Switch {exercise_name} to higher rep range ({low}-{high}) to build volume"
            ),
            fix_type=StallFix.REP_RANGE,
            details=(
                f"Use ~{load_pct}% of current weight ({format_weight(round(target, 1))}kg). "
                f"Focus on {low}-{high} reps for 2-3 weeks, then return to lower reps."
            ),
        )

    if avg_reps <= thresholds.mid_rep_max:
        variations = variation_suggestions(exercise_name)
        if variations:
            details = "Suggested: " + ", ".join(variations)
        else:
            details = "Swap to a similar movement pattern to break through plateau"
        return StallResult(
            is_stalled=True,
            reason=(
                f"No e1RM improvement in {count} sessions despite moderate RPE ({avg_rpe:.1f})"
            ),
            suggested_fix=f"Try a variation of {exercise_name} for 3-4 weeks",
            fix_type=StallFix.VARIATION,
            details=details,
        )

    details = "Add 2.5-5kg and accept fewer reps initially. "
    if prescription is not None:
        details += f"Rebuild to {prescription.rep_range} reps from there."
    else:
        details += "Rebuild from there."
    return StallResult(
        is_stalled=True,
        reason=(
            f"Rep count high ({avg_reps} avg) but weight not increasing "
            f"for {count} sessions"
        ),
        suggested_fix=f"Force a weight increase on {exercise_name}, even if reps drop",
        fix_type=StallFix.WEIGHT_JUMP,
        details=details,
    )


def analyze_stall(
    exercise_name: str,
    last_sessions: Sequence[SessionHistoryEntry],
    prescription: PrescriptionSpec | None = None,
    thresholds: StallThresholds | None = None,
) -> StallResult:
    """
    Diagnose whether an exercise has plateaued.

    Args:
        exercise_name: Name used in the suggestion text
        last_sessions: Recent entries for this exercise, newest first
        prescription: Current loading rule; when given, a weight jump
            names its rep range as the rebuild target
        thresholds: Classification constants (defaults from config.py)

    Returns:
        StallResult; not stalled when history is too short or improving
    """
    if thresholds is None:
        thresholds = StallThresholds()

    sessions = list(last_sessions)
    if len(sessions) < thresholds.min_sessions:
        return StallResult(
            is_stalled=False,
            details=(
                f"Need {thresholds.min_sessions} sessions for stall detection "
                f"(have {len(sessions)})"
            ),
        )

    change = e1rm_change_pct(sessions)

    if change >= thresholds.e1rm_tolerance_pct or _reps_up_at_same_weight(sessions):
        return StallResult(
            is_stalled=False,
            details=f"{exercise_name} progressing well ({change:+.1f}%)",
        )

    if change <= -thresholds.e1rm_tolerance_pct:
        newest = entry_e1rm(sessions[0])
        oldest = entry_e1rm(sessions[-1])
        return StallResult(
            is_stalled=True,
            reason="Regressing performance",
            suggested_fix=(
                f"Check recovery, sleep and nutrition before pushing {exercise_name} harder"
            ),
            details=(
                f"e1RM fell from {oldest:.1f}kg to {newest:.1f}kg "
                f"({change:.1f}%) over {len(sessions)} sessions"
            ),
        )

    return _classify_flat(exercise_name, sessions, thresholds, prescription)


def analyze_all(
    histories: Mapping[str, Sequence[SessionHistoryEntry]],
    thresholds: StallThresholds | None = None,
) -> dict[str, StallResult]:
    """Run analyze_stall for every exercise in a name -> sessions mapping."""
    return {
        name: analyze_stall(name, sessions, thresholds=thresholds)
        for name, sessions in histories.items()
    }


def stalled_exercises(
    histories: Mapping[str, Sequence[SessionHistoryEntry]],
    thresholds: StallThresholds | None = None,
) -> list[str]:
    """Names of stalled exercises, sorted alphabetically."""
    results = analyze_all(histories, thresholds)
    return sorted(name for name, result in results.items() if result.is_stalled)


def newest_first(entries: Iterable[SessionHistoryEntry]) -> list[SessionHistoryEntry]:
    """Order entries by date, newest first (stable for equal dates)."""
    return sorted(entries, key=lambda e: e.date, reverse=True)
