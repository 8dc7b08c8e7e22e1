"""
Equipment- and pain-aware exercise substitution.

Candidates are other library exercises that share the source's movement
pattern or one of its primary muscles.  After filtering out anything the
lifter cannot perform (missing equipment, active pain flag) the rest are
scored:

  score = 3 × |primary ∩ primary|
        + 1 × |secondary ∩ secondary|
        + 2   if same movement pattern
        + 1.5 if a curated preferred alternative of the source

Bodyweight is always considered available.
"""

from types import MappingProxyType
from typing import Collection, Final, Iterable, Mapping, Sequence

from .config import (
    DEFAULT_SUBSTITUTE_LIMIT,
    PATTERN_MATCH_WEIGHT,
    PREFERRED_SUBSTITUTE_BONUS,
    PRIMARY_OVERLAP_WEIGHT,
    SECONDARY_OVERLAP_WEIGHT,
)
from .models import Equipment, Exercise, PainFlag, Substitution, SubstitutionReason
from .taxonomy import body_parts, pattern_muscles

# Hand-picked alternatives, in priority order.  Only used as a scoring bonus;
# muscles and pattern still decide whether something is a candidate.
PREFERRED_SUBSTITUTES: Final[Mapping[str, tuple[str, ...]]] = MappingProxyType({
    "Bench Press": ("Dumbbell Bench Press", "Floor Press", "Push-ups", "Machine Chest Press"),
    "Incline Bench Press": ("Incline Dumbbell Press", "Dumbbell Bench Press", "Push-ups"),
    "Dumbbell Bench Press": ("Bench Press", "Floor Press", "Push-ups", "Machine Chest Press"),
    "Overhead Press": ("Dumbbell Shoulder Press", "Push-ups"),
    "Dumbbell Shoulder Press": ("Overhead Press", "Lateral Raise"),
    "Pull-ups": ("Lat Pulldown", "Banded Pull-ups", "Inverted Row", "Chin-ups"),
    "Chin-ups": ("Pull-ups", "Lat Pulldown", "Banded Pull-ups", "Inverted Row"),
    "Lat Pulldown": ("Pull-ups", "Banded Pull-ups", "Inverted Row", "Chin-ups"),
    "Barbell Row": ("Dumbbell Row", "Chest Supported Row", "Cable Row", "Inverted Row"),
    "Dumbbell Row": ("Barbell Row", "Chest Supported Row", "Cable Row", "Inverted Row"),
    "Barbell Squat": ("Goblet Squat", "Leg Press", "Bulgarian Split Squat", "Front Squat"),
    "Front Squat": ("Goblet Squat", "Barbell Squat", "Leg Press", "Bulgarian Split Squat"),
    "Leg Press": ("Goblet Squat", "Barbell Squat", "Bulgarian Split Squat", "Hack Squat"),
    "Deadlift": ("Romanian Deadlift", "Dumbbell Romanian Deadlift"),
    "Romanian Deadlift": ("Dumbbell Romanian Deadlift", "Deadlift", "Leg Curl"),
    "Bulgarian Split Squat": ("Walking Lunges", "Goblet Squat"),
    "Barbell Curl": ("Dumbbell Curl", "Cable Curl", "Band Curl"),
    "Tricep Pushdown": ("Overhead Tricep Extension", "Diamond Push-ups", "Dips"),
    "Lateral Raise": ("Face Pull", "Rear Delt Fly"),
    "Leg Curl": ("Romanian Deadlift", "Dumbbell Romanian Deadlift"),
})


def _active_flags(pain_flags: Iterable[PainFlag]) -> list[PainFlag]:
    return [f for f in pain_flags if f.is_active]


def has_required_equipment(exercise: Exercise, available_equipment: Collection[Equipment]) -> bool:
    """True if everything the exercise needs (besides bodyweight) is available."""
    required = exercise.equipment_required - {Equipment.BODYWEIGHT}
    return required <= set(available_equipment)


def is_pain_flagged(exercise: Exercise, pain_flags: Iterable[PainFlag]) -> bool:
    """
    True if an active pain flag implicates the exercise.

    A flag matches when one of the exercise's primary muscles lies in the
    flagged body part, or when the flag names this exercise.
    """
    parts = body_parts(exercise.primary_muscles)
    for flag in _active_flags(pain_flags):
        if flag.body_part in parts:
            return True
        if flag.exercise_name is not None and flag.exercise_name.strip().lower() == exercise.name.lower():
            return True
    return False


def _source_primary(source: Exercise) -> frozenset:
    # Library entries without listed muscles fall back to their pattern's groups
    return source.primary_muscles or pattern_muscles(source.movement_pattern)


def substitution_score(source: Exercise, candidate: Exercise) -> float:
    """Similarity score of candidate as a replacement for source."""
    primary = len(_source_primary(source) & candidate.primary_muscles)
    secondary = len(source.secondary_muscles & candidate.secondary_muscles)
    score = PRIMARY_OVERLAP_WEIGHT * primary + SECONDARY_OVERLAP_WEIGHT * secondary
    if candidate.movement_pattern == source.movement_pattern:
        score += PATTERN_MATCH_WEIGHT
    if candidate.name in PREFERRED_SUBSTITUTES.get(source.name, ()):
        score += PREFERRED_SUBSTITUTE_BONUS
    return score


def _lookup(name: str, library: Sequence[Exercise]) -> Exercise | None:
    key = name.strip().lower()
    for exercise in library:
        if exercise.name.lower() == key:
            return exercise
    return None


def find_substitutes(
    exercise_name: str,
    available_equipment: Collection[Equipment],
    library: Sequence[Exercise],
    pain_flags: Iterable[PainFlag] = (),
    limit: int = DEFAULT_SUBSTITUTE_LIMIT,
) -> list[tuple[Exercise, float]]:
    """
    Rank performable alternatives for an exercise.

    Args:
        exercise_name: Exact library name of the exercise to replace
        available_equipment: Equipment the lifter has access to
        library: Canonical exercises; order breaks score ties
        pain_flags: Reported pain; resolved flags are ignored
        limit: Maximum number of results

    Returns:
        (Exercise, score) pairs, best first.  Empty when the source is
        unknown or nothing qualifies.
    """
    source = _lookup(exercise_name, library)
    if source is None or limit <= 0:
        return []

    flags = _active_flags(pain_flags)
    source_primary = _source_primary(source)

    scored: list[tuple[Exercise, float]] = []
    for candidate in library:
        if candidate.name.lower() == source.name.lower():
            continue
        shares_pattern = candidate.movement_pattern == source.movement_pattern
        shares_primary = bool(source_primary & candidate.primary_muscles)
        if not (shares_pattern or shares_primary):
            continue
        if not has_required_equipment(candidate, available_equipment):
            continue
        if is_pain_flagged(candidate, flags):
            continue
        scored.append((candidate, substitution_score(source, candidate)))

    # sorted() is stable, so library order breaks ties
    scored = sorted(scored, key=lambda pair: pair[1], reverse=True)
    return scored[:limit]


def get_best_substitute(
    exercise_name: str,
    available_equipment: Collection[Equipment],
    library: Sequence[Exercise],
    pain_flags: Iterable[PainFlag] = (),
) -> tuple[Exercise, float] | None:
    """Top-ranked substitute, or None."""
    ranked = find_substitutes(exercise_name, available_equipment, library, pain_flags, limit=1)
    return ranked[0] if ranked else None


def needs_substitution(
    exercise: Exercise,
    available_equipment: Collection[Equipment],
    pain_flags: Iterable[PainFlag] = (),
) -> SubstitutionReason | None:
    """
    Why an exercise cannot be performed as written, if at all.

    Equipment is checked before pain.  Bodyweight-only exercises never
    need an equipment substitution.
    """
    if not exercise.is_bodyweight_only and not has_required_equipment(exercise, available_equipment):
        return SubstitutionReason.EQUIPMENT_MISSING
    if is_pain_flagged(exercise, pain_flags):
        return SubstitutionReason.PAIN_FLAG
    return None


def resolve_substitution(
    exercise: Exercise,
    available_equipment: Collection[Equipment],
    library: Sequence[Exercise],
    pain_flags: Iterable[PainFlag] = (),
) -> Substitution | None:
    """
    Substitution record for an exercise that cannot be performed.

    Returns None when no substitution is needed or no alternative exists.
    """
    pain_flags = list(pain_flags)
    reason = needs_substitution(exercise, available_equipment, pain_flags)
    if reason is None:
        return None
    best = get_best_substitute(exercise.name, available_equipment, library, pain_flags)
    if best is None:
        return None
    return Substitution(
        original_exercise=exercise.name,
        substitute_exercise=best[0].name,
        reason=reason,
    )
