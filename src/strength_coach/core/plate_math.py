"""
Barbell plate math and dumbbell rack helpers.

Plate decomposition is greedy (largest plate first).  For the standard
plate set this always finds a loading when one exists; for unusual plate
sets it can report a weight as unloadable even though another combination
would reach it.
"""

import math
from typing import Sequence

from .config import (
    DEFAULT_BAR_WEIGHT_KG,
    DUMBBELL_WARMUP_PERCENTAGES,
    HEAVY_TOP_SET_BAR_RATIO,
    HEAVY_WARMUP_PERCENTAGES,
    LIGHT_TOP_SET_BAR_RATIO,
    LOAD_EPSILON,
    MODERATE_WARMUP_PERCENTAGES,
    STANDARD_DUMBBELLS_KG,
    STANDARD_PLATES_KG,
)

STANDARD_PLATES = STANDARD_PLATES_KG
STANDARD_DUMBBELLS = STANDARD_DUMBBELLS_KG


def _clean(value: float) -> float:
    """Drop float noise from repeated plate arithmetic."""
    return round(value, 4)


def plates_per_side(
    target_weight: float,
    bar_weight: float = DEFAULT_BAR_WEIGHT_KG,
    available_plates: Sequence[float] = STANDARD_PLATES,
) -> list[float] | None:
    """
    Plates to load on each side of the bar to reach target_weight.

    Args:
        target_weight: Total weight including the bar
        bar_weight: Empty bar weight
        available_plates: Plate denominations (any order; each usable repeatedly)

    Returns:
        Descending list of plates for one side ([] = empty bar),
        or None if the weight is below the bar or not reachable.
    """
    per_side = (target_weight - bar_weight) / 2
    if per_side < -LOAD_EPSILON:
        return None

    remaining = max(0.0, per_side)
    plates: list[float] = []
    for plate in sorted({p for p in available_plates if p > 0}, reverse=True):
        while remaining >= plate - LOAD_EPSILON:
            plates.append(plate)
            remaining -= plate

    if abs(remaining) > LOAD_EPSILON:
        return None
    return plates


def format_weight(weight: float) -> str:
    """Compact number rendering: 25, 2.5, 1.25."""
    return f"{weight:g}"


def format_plates(plates: Sequence[float]) -> str:
    """Render a plate stack as "20 + 10 + 1.25" or "Empty bar"."""
    if not plates:
        return "Empty bar"
    return " + ".join(format_weight(p) for p in plates)


def loading_instruction(
    target_weight: float,
    bar_weight: float = DEFAULT_BAR_WEIGHT_KG,
    available_plates: Sequence[float] = STANDARD_PLATES,
) -> str:
    """Human-readable loading instruction for a target weight."""
    plates = plates_per_side(target_weight, bar_weight, available_plates)
    if plates is None:
        return f"Cannot load {format_weight(target_weight)}kg with available plates"
    if not plates:
        return f"Empty bar ({format_weight(bar_weight)}kg)"
    return f"{format_plates(plates)} each side"


def nearest_loadable(
    weight: float,
    bar_weight: float = DEFAULT_BAR_WEIGHT_KG,
    available_plates: Sequence[float] = STANDARD_PLATES,
) -> float:
    """
    Snap a weight to the nearest total reachable in smallest-plate steps.

    Step = 2 × smallest plate; halfway values round up; never below the bar.
    """
    positive = [p for p in available_plates if p > 0]
    if not positive:
        return float(bar_weight)
    increment = 2 * min(positive)
    steps = math.floor((weight - bar_weight) / increment + 0.5 + 1e-9)
    return _clean(bar_weight + max(0, steps) * increment)


def is_loadable(
    weight: float,
    bar_weight: float = DEFAULT_BAR_WEIGHT_KG,
    available_plates: Sequence[float] = STANDARD_PLATES,
) -> bool:
    return plates_per_side(weight, bar_weight, available_plates) is not None


def warmup_weights(
    top_set_weight: float,
    bar_weight: float = DEFAULT_BAR_WEIGHT_KG,
    available_plates: Sequence[float] = STANDARD_PLATES,
) -> list[float]:
    """
    Ascending warmup loads leading up to a top set.

    Light top sets (<= 1.5× bar) get just the empty bar; moderate ones a
    40/60/80% ramp after the bar; heavy ones (> 5× bar) a longer ramp.
    Every weight is loadable, unique, and strictly below the top set.

    Args:
        top_set_weight: Working weight the warmups lead to
        bar_weight: Empty bar weight
        available_plates: Plate denominations

    Returns:
        Sorted list of warmup weights (empty when top set <= bar)
    """
    if top_set_weight <= bar_weight + LOAD_EPSILON:
        return []

    warmups: list[float] = [float(bar_weight)]
    ratio = top_set_weight / bar_weight if bar_weight > 0 else math.inf
    if ratio <= LIGHT_TOP_SET_BAR_RATIO:
        return warmups

    percentages = (
        HEAVY_WARMUP_PERCENTAGES if ratio > HEAVY_TOP_SET_BAR_RATIO else MODERATE_WARMUP_PERCENTAGES
    )
    for pct in percentages:
        target = top_set_weight * pct
        if target <= bar_weight:
            continue
        loadable = nearest_loadable(target, bar_weight, available_plates)
        if loadable >= top_set_weight - LOAD_EPSILON:
            continue
        if any(abs(loadable - w) < LOAD_EPSILON for w in warmups):
            continue
        if not is_loadable(loadable, bar_weight, available_plates):
            continue
        warmups.append(loadable)

    return sorted(warmups)


# ---------------------------------------------------------------------------
# Dumbbells
# ---------------------------------------------------------------------------

def nearest_dumbbell(
    weight: float,
    available_dumbbells: Sequence[float] = STANDARD_DUMBBELLS,
) -> float | None:
    """Closest dumbbell by absolute distance; ties go to the heavier one."""
    closest: float | None = None
    smallest_diff = math.inf
    for db in sorted(available_dumbbells):
        diff = abs(db - weight)
        # <= lets the heavier of two equidistant dumbbells win
        if diff <= smallest_diff + 1e-9:
            smallest_diff = min(diff, smallest_diff)
            closest = db
        else:
            break
    return closest


def next_dumbbell_up(
    current: float,
    available_dumbbells: Sequence[float] = STANDARD_DUMBBELLS,
) -> float | None:
    """Lightest dumbbell heavier than current, or None at the top of the rack."""
    heavier = [db for db in available_dumbbells if db > current + 1e-9]
    return min(heavier) if heavier else None


def next_dumbbell_down(
    current: float,
    available_dumbbells: Sequence[float] = STANDARD_DUMBBELLS,
) -> float | None:
    """Heaviest dumbbell lighter than current, or None at the bottom of the rack."""
    lighter = [db for db in available_dumbbells if db < current - 1e-9]
    return max(lighter) if lighter else None


def dumbbell_warmups(
    top_set_weight: float,
    available_dumbbells: Sequence[float] = STANDARD_DUMBBELLS,
) -> list[float]:
    """50% / 75% warmups snapped to the rack, unique and below the top set."""
    warmups: list[float] = []
    for pct in DUMBBELL_WARMUP_PERCENTAGES:
        db = nearest_dumbbell(top_set_weight * pct, available_dumbbells)
        if db is None or db >= top_set_weight - 1e-9 or db in warmups:
            continue
        warmups.append(db)
    return sorted(warmups)
