"""
Canonical exercise library for strength-coach.

Exercises are defined in YAML and loaded once at import time.
"""

from .registry import (
    EXERCISE_LIBRARY,
    available_exercises,
    exercises_for_pattern,
    exercises_targeting,
    get_exercise,
)

__all__ = [
    "EXERCISE_LIBRARY",
    "available_exercises",
    "exercises_for_pattern",
    "exercises_targeting",
    "get_exercise",
]
