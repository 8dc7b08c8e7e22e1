"""
Estimated one-rep-max (e1RM) formulas.

All functions are pure and clamp degenerate inputs instead of raising.

  Epley   : e1RM = w × (1 + reps / 30)
  Brzycki : e1RM = w × 36 / (37 − reps)
"""

import math

from .config import BRZYCKI_NUMERATOR, BRZYCKI_REP_LIMIT, EPLEY_DIVISOR
from .models import SessionHistoryEntry


def calculate(weight: float, reps: int) -> float:
    """
    Estimate 1RM using the Epley formula.

    A single rep is its own 1RM, so reps == 1 returns weight exactly.

    Args:
        weight: Load lifted in kg
        reps: Reps performed

    Returns:
        Estimated 1RM in kg (0 for reps <= 0)
    """
    if reps <= 0:
        return 0.0
    if reps == 1:
        return float(weight)
    return weight * (1 + reps / EPLEY_DIVISOR)


def calculate_brzycki(weight: float, reps: int) -> float:
    """
    Estimate 1RM using the Brzycki formula.

    Outside 1..36 reps the formula is undefined, so weight is returned as-is.
    """
    if reps <= 0 or reps >= BRZYCKI_REP_LIMIT:
        return float(weight)
    if reps == 1:
        return float(weight)
    return weight * (BRZYCKI_NUMERATOR / (BRZYCKI_REP_LIMIT - reps))


def weight_for_reps(e1rm: float, reps: int) -> float:
    """
    Weight that yields the given e1RM at the given reps.

    Exact inverse of calculate(): calculate(weight_for_reps(e, r), r) == e.
    """
    if reps <= 0:
        return 0.0
    if reps == 1:
        return float(e1rm)
    return e1rm / (1 + reps / EPLEY_DIVISOR)


def percentage_of_1rm(weight: float, reps: int) -> float:
    """Return the set's load as a percentage of its own Epley estimate."""
    estimate = calculate(weight, reps)
    if estimate <= 0:
        return 0.0
    return weight / estimate * 100


def reps_at_percentage(percentage: float) -> int:
    """
    Approximate reps achievable at a given %1RM (inverse Epley).

    reps = floor(30 × (100 / pct − 1)), minimum 1.

    Args:
        percentage: Load as percent of 1RM, in (0, 100]

    Returns:
        Rep count (1 for out-of-range percentages)
    """
    if percentage <= 0 or percentage > 100:
        return 1
    reps = EPLEY_DIVISOR * (100.0 / percentage - 1.0)
    # Nudge so values like 4.9999999 from float division floor to 5
    return max(1, math.floor(reps + 1e-9))


def entry_e1rm(entry: SessionHistoryEntry) -> float:
    """
    e1RM of a history entry, recomputed from its top set.

    Falls back to the stored estimate when the top set has no reps.
    """
    estimate = calculate(entry.top_set_weight, entry.top_set_reps)
    return estimate if estimate > 0 else entry.e1rm
