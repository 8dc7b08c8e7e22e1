"""
Exercise library registry.

The canonical library is loaded from the bundled
``src/strength_coach/exercises/*.yaml`` files at import time.  If nothing
can be loaded a RuntimeError is raised; the coach cannot match or
substitute exercises without a library.

User additions: place YAML files in ``~/.strength-coach/exercises/``.
"""

from ..models import Equipment, Exercise, MovementPattern, Muscle


def _build_library() -> tuple[Exercise, ...]:
    from .loader import load_exercises_from_yaml

    loaded = load_exercises_from_yaml()
    if not loaded:
        raise RuntimeError(
            "strength-coach: no exercises could be loaded from YAML. "
            "Check that src/strength_coach/exercises/*.yaml files are present and valid."
        )
    return tuple(loaded)


EXERCISE_LIBRARY: tuple[Exercise, ...] = _build_library()


def get_exercise(name: str) -> Exercise:
    """
    Return the library Exercise with the given name (case-insensitive).

    Raises:
        ValueError: If no exercise has that name
    """
    key = name.strip().lower()
    for exercise in EXERCISE_LIBRARY:
        if exercise.name.lower() == key:
            return exercise
    raise ValueError(f"Unknown exercise '{name}'. See `strength-coach exercises` for names.")


def exercises_for_pattern(pattern: MovementPattern) -> list[Exercise]:
    return [ex for ex in EXERCISE_LIBRARY if ex.movement_pattern == pattern]


def exercises_targeting(muscle: Muscle) -> list[Exercise]:
    """Exercises hitting a muscle as primary or secondary mover."""
    return [ex for ex in EXERCISE_LIBRARY if muscle in ex.all_muscles]


def available_exercises(equipment: set[Equipment]) -> list[Exercise]:
    """Exercises performable with the given equipment (bodyweight always available)."""
    usable = set(equipment) | {Equipment.BODYWEIGHT}
    return [ex for ex in EXERCISE_LIBRARY if ex.equipment_required <= usable]
