"""
Configuration constants for the strength coaching core.

All adjustable parameters are centralized here for easy tuning.
Stall-detection thresholds can additionally be overridden from
coach.yaml (see engine/config_loader.py).
"""

from dataclasses import dataclass, fields
from typing import Final

# =============================================================================
# E1RM ESTIMATION
# =============================================================================

EPLEY_DIVISOR: Final[float] = 30.0  # e1RM = w * (1 + reps / 30)
BRZYCKI_NUMERATOR: Final[float] = 36.0  # e1RM = w * 36 / (37 - reps)
BRZYCKI_REP_LIMIT: Final[int] = 37  # Formula singularity

# =============================================================================
# PLATE MATH
# =============================================================================

DEFAULT_BAR_WEIGHT_KG: Final[float] = 20.0
STANDARD_PLATES_KG: Final[tuple[float, ...]] = (25.0, 20.0, 15.0, 10.0, 5.0, 2.5, 1.25)
STANDARD_DUMBBELLS_KG: Final[tuple[float, ...]] = tuple(2.5 * i for i in range(1, 25))
LOAD_EPSILON: Final[float] = 1e-3  # Tolerance for float plate arithmetic

# Warmup ramps, as fractions of the top set weight
LIGHT_TOP_SET_BAR_RATIO: Final[float] = 1.5  # <= 1.5x bar: empty bar only
HEAVY_TOP_SET_BAR_RATIO: Final[float] = 5.0  # > 5x bar: long ramp
MODERATE_WARMUP_PERCENTAGES: Final[tuple[float, ...]] = (0.4, 0.6, 0.8)
HEAVY_WARMUP_PERCENTAGES: Final[tuple[float, ...]] = (0.4, 0.55, 0.7, 0.8, 0.9)
DUMBBELL_WARMUP_PERCENTAGES: Final[tuple[float, ...]] = (0.5, 0.75)

EMPTY_BAR_WARMUP_REPS: Final[int] = 10
LIGHT_WARMUP_REPS: Final[int] = 5  # Below 70% of the top set
HEAVY_WARMUP_REPS: Final[int] = 3
WARMUP_REP_SPLIT: Final[float] = 0.7
WARMUP_RPE_CAP: Final[float] = 6.0

# =============================================================================
# PROGRESSION
# =============================================================================

DEFAULT_RPE: Final[float] = 8.0  # Assumed when a session has no RPE logged
RPE_OVERSHOOT_TOLERANCE: Final[float] = 0.5  # RPE above cap + this -> hold weight
MAX_RPE_CAP: Final[float] = 10.0

WEIGHT_INCREMENTS_KG: Final[dict[str, float]] = {
    "barbell": 2.5,
    "dumbbell": 2.0,  # per dumbbell
    "machine": 2.5,
    "bodyweight": 2.5,  # added load (belt / vest)
}

MACHINE_START_KG: Final[float] = 5.0  # Lightest pin on a typical stack
BODYWEIGHT_START_KG: Final[float] = 0.0  # No added load

# =============================================================================
# READINESS ADJUSTMENTS
# =============================================================================

LOW_ENERGY_RPE_REDUCTION: Final[float] = 0.5
HIGH_ENERGY_RPE_INCREASE: Final[float] = 0.5
FATIGUED_RPE_THRESHOLD: Final[float] = 9.0  # Last RPE at/above this + missed reps
FATIGUED_WEIGHT_FACTOR: Final[float] = 0.95  # -5% load
SORE_BACKOFF_REDUCTION: Final[int] = 1

# =============================================================================
# SESSION DURATION
# =============================================================================

COMPOUND_SET_MINUTES: Final[float] = 3.0  # Including rest
ISOLATION_SET_MINUTES: Final[float] = 2.0

# =============================================================================
# SUBSTITUTION SCORING
# =============================================================================

PRIMARY_OVERLAP_WEIGHT: Final[float] = 3.0
SECONDARY_OVERLAP_WEIGHT: Final[float] = 1.0
PATTERN_MATCH_WEIGHT: Final[float] = 2.0
PREFERRED_SUBSTITUTE_BONUS: Final[float] = 1.5
DEFAULT_SUBSTITUTE_LIMIT: Final[int] = 3

# =============================================================================
# STALL DETECTION
# =============================================================================

STALL_MIN_SESSIONS: Final[int] = 3
STALL_E1RM_TOLERANCE_PCT: Final[float] = 1.0  # +-1% counts as flat
STALL_DELOAD_RPE: Final[float] = 9.0
STALL_LOW_REP_MAX: Final[int] = 4  # avg reps <= 4 -> change rep range
STALL_MID_REP_MAX: Final[int] = 8  # 5..8 -> variation, above -> weight jump
STALL_DELOAD_FACTOR: Final[float] = 0.92  # 8% reduction
STALL_REP_RANGE_LOAD_FACTOR: Final[float] = 0.85
STALL_SUGGESTED_REP_RANGE: Final[tuple[int, int]] = (6, 8)


@dataclass(frozen=True)
class StallThresholds:
    """
    Heuristic constants driving stall classification.

    Defaults mirror the module constants; overrides come from the
    ``stall_detection`` section of coach.yaml.
    """

    min_sessions: int = STALL_MIN_SESSIONS
    e1rm_tolerance_pct: float = STALL_E1RM_TOLERANCE_PCT
    deload_rpe: float = STALL_DELOAD_RPE
    low_rep_max: int = STALL_LOW_REP_MAX
    mid_rep_max: int = STALL_MID_REP_MAX
    deload_factor: float = STALL_DELOAD_FACTOR

    def __post_init__(self) -> None:
        if self.min_sessions < 1:
            raise ValueError("min_sessions must be at least 1")
        if self.e1rm_tolerance_pct < 0:
            raise ValueError("e1rm_tolerance_pct must be non-negative")
        if self.low_rep_max > self.mid_rep_max:
            raise ValueError("low_rep_max must not exceed mid_rep_max")
        if not 0 < self.deload_factor <= 1:
            raise ValueError("deload_factor must be in (0, 1]")


def stall_thresholds_from_dict(data: dict) -> StallThresholds:
    """
    Build StallThresholds from a raw config section.

    Keys are matched case-insensitively against field names so both
    ``MIN_SESSIONS`` and ``min_sessions`` work.  Unknown keys are ignored.
    """
    known = {f.name: f.type for f in fields(StallThresholds)}
    kwargs: dict = {}
    for key, value in data.items():
        name = str(key).lower()
        if name not in known:
            continue
        kwargs[name] = int(value) if known[name] in (int, "int") else float(value)
    return StallThresholds(**kwargs)


def load_stall_thresholds() -> StallThresholds:
    """
    Return stall thresholds with YAML overrides applied.

    Load order: module defaults, bundled coach.yaml, then
    ~/.strength-coach/coach.yaml.
    """
    from .engine.config_loader import load_model_config

    section = load_model_config().get("stall_detection", {})
    if not isinstance(section, dict):
        return StallThresholds()
    return stall_thresholds_from_dict(section)
