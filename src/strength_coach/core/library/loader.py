"""
YAML → Exercise loader.

Loads the canonical exercise library from the YAML files in the bundled
``src/strength_coach/exercises/`` directory.  Files are read in filename
order and each holds an ``exercises:`` list; the resulting library keeps
that order, which the matcher and substitution resolver use to break ties.

User additions: place YAML files with the same layout in
``~/.strength-coach/exercises/``.  A user entry whose name matches a
bundled exercise (case-insensitive) replaces it in place; any other
entry is appended.

Usage (called by registry.py):
    from .loader import load_exercises_from_yaml
    exercises = load_exercises_from_yaml()   # list, possibly empty
"""

from __future__ import annotations

import warnings
from pathlib import Path

from ..engine.config_loader import get_user_dir, load_yaml_file
from ..models import Equipment, Exercise, MovementPattern, Muscle

_REQUIRED_FIELDS: frozenset[str] = frozenset({"name", "movement_pattern"})


def _enum_list(values, enum_cls, field_name: str) -> list:
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    try:
        return [enum_cls(str(v).strip().lower()) for v in values]
    except ValueError as exc:
        raise ValueError(f"invalid {field_name}: {exc}") from exc


def exercise_from_dict(d: dict) -> Exercise:
    """Convert a raw dict (from YAML) to an Exercise.

    Raises ValueError if a required field is absent or a value is unknown.
    """
    missing = _REQUIRED_FIELDS - set(d)
    if missing:
        raise ValueError(f"Exercise missing fields: {sorted(missing)}")

    try:
        pattern = MovementPattern(str(d["movement_pattern"]).strip().lower())
    except ValueError as exc:
        raise ValueError(f"invalid movement_pattern: {exc}") from exc

    return Exercise(
        name=str(d["name"]).strip(),
        movement_pattern=pattern,
        primary_muscles=frozenset(_enum_list(d.get("primary_muscles"), Muscle, "primary_muscles")),
        secondary_muscles=frozenset(
            _enum_list(d.get("secondary_muscles"), Muscle, "secondary_muscles")
        ),
        equipment_required=frozenset(_enum_list(d.get("equipment"), Equipment, "equipment")),
        is_compound=bool(d.get("compound", True)),
    )


def _get_bundled_exercises_dir() -> Path | None:
    """Return path to the bundled exercises/ data directory, or None if not found."""
    # loader.py lives at src/strength_coach/core/library/loader.py
    # three levels up → src/strength_coach/
    candidate = Path(__file__).parent.parent.parent / "exercises"
    return candidate if candidate.is_dir() else None


def _get_user_exercises_dir() -> Path | None:
    """Return ~/.strength-coach/exercises/ if it exists, else None."""
    p = get_user_dir() / "exercises"
    return p if p.is_dir() else None


def load_exercise_file(path: Path) -> list[Exercise]:
    """
    Parse one library file.

    Invalid entries are skipped with a warning so one typo does not take
    down the whole library.
    """
    raw = load_yaml_file(path).get("exercises", [])
    if not isinstance(raw, list):
        warnings.warn(
            f"strength-coach: '{path.name}' has no exercises list; skipping",
            stacklevel=2,
        )
        return []

    exercises: list[Exercise] = []
    for idx, entry in enumerate(raw):
        if not isinstance(entry, dict):
            warnings.warn(
                f"strength-coach: skipping entry {idx} in '{path.name}' (not a mapping)",
                stacklevel=2,
            )
            continue
        try:
            exercises.append(exercise_from_dict(entry))
        except ValueError as exc:
            label = entry.get("name", f"entry {idx}")
            warnings.warn(
                f"strength-coach: skipping exercise '{label}' in '{path.name}': {exc}",
                stacklevel=2,
            )
    return exercises


def _merge_user(library: list[Exercise], additions: list[Exercise]) -> list[Exercise]:
    """Replace same-named exercises in place, append the rest."""
    result = list(library)
    index = {ex.name.lower(): i for i, ex in enumerate(result)}
    for ex in additions:
        key = ex.name.lower()
        if key in index:
            result[index[key]] = ex
        else:
            index[key] = len(result)
            result.append(ex)
    return result


def load_exercises_from_yaml(
    bundled_dir: Path | None = None,
    user_dir: Path | None = None,
) -> list[Exercise]:
    """Return the exercise library loaded from YAML files.

    Args:
        bundled_dir: Directory of library files (default: the packaged one)
        user_dir: Directory of user additions (default: ~/.strength-coach/exercises)

    Returns:
        Exercises in file order, duplicates by name dropped (first wins
        within the bundled set).
    """
    bundled_dir = bundled_dir if bundled_dir is not None else _get_bundled_exercises_dir()
    user_dir = user_dir if user_dir is not None else _get_user_exercises_dir()

    library: list[Exercise] = []
    seen: set[str] = set()
    if bundled_dir is not None:
        for path in sorted(bundled_dir.glob("*.yaml")):
            for ex in load_exercise_file(path):
                if ex.name.lower() in seen:
                    warnings.warn(
                        f"strength-coach: duplicate exercise '{ex.name}' in '{path.name}'",
                        stacklevel=2,
                    )
                    continue
                seen.add(ex.name.lower())
                library.append(ex)

    if user_dir is not None:
        for path in sorted(user_dir.glob("*.yaml")):
            library = _merge_user(library, load_exercise_file(path))

    return library
