"""
Static muscle / movement taxonomy.

Read-only lookup tables shared by the substitution resolver and the
library loader.  Nothing here is mutated at runtime.
"""

from types import MappingProxyType
from typing import Final, Mapping

from .models import BodyPart, Muscle, MovementPattern

MOVEMENT_PATTERN_MUSCLES: Final[Mapping[MovementPattern, frozenset[Muscle]]] = MappingProxyType({
    MovementPattern.HORIZONTAL_PUSH: frozenset({Muscle.CHEST, Muscle.FRONT_DELT, Muscle.TRICEPS}),
    MovementPattern.VERTICAL_PUSH: frozenset({Muscle.FRONT_DELT, Muscle.SIDE_DELT, Muscle.TRICEPS}),
    MovementPattern.HORIZONTAL_PULL: frozenset(
        {Muscle.UPPER_BACK, Muscle.LATS, Muscle.REAR_DELT, Muscle.BICEPS}
    ),
    MovementPattern.VERTICAL_PULL: frozenset({Muscle.LATS, Muscle.UPPER_BACK, Muscle.BICEPS}),
    MovementPattern.SQUAT: frozenset({Muscle.QUADS, Muscle.GLUTES}),
    MovementPattern.HINGE: frozenset({Muscle.HAMSTRINGS, Muscle.GLUTES, Muscle.LOWER_BACK}),
    MovementPattern.LUNGE: frozenset({Muscle.QUADS, Muscle.GLUTES, Muscle.HAMSTRINGS}),
    MovementPattern.CARRY: frozenset({Muscle.CORE, Muscle.TRAPS, Muscle.FOREARMS}),
    MovementPattern.ISOLATION: frozenset(),
    MovementPattern.MOBILITY: frozenset(),
    MovementPattern.CARDIO: frozenset(),
})

MUSCLE_BODY_PART: Final[Mapping[Muscle, BodyPart]] = MappingProxyType({
    Muscle.CHEST: BodyPart.CHEST,
    Muscle.LATS: BodyPart.BACK,
    Muscle.UPPER_BACK: BodyPart.BACK,
    Muscle.LOWER_BACK: BodyPart.BACK,
    Muscle.FRONT_DELT: BodyPart.SHOULDERS,
    Muscle.SIDE_DELT: BodyPart.SHOULDERS,
    Muscle.REAR_DELT: BodyPart.SHOULDERS,
    Muscle.BICEPS: BodyPart.ARMS,
    Muscle.TRICEPS: BodyPart.ARMS,
    Muscle.FOREARMS: BodyPart.ARMS,
    Muscle.QUADS: BodyPart.LEGS,
    Muscle.HAMSTRINGS: BodyPart.LEGS,
    Muscle.GLUTES: BodyPart.LEGS,
    Muscle.CALVES: BodyPart.LEGS,
    Muscle.CORE: BodyPart.CORE,
    Muscle.TRAPS: BodyPart.CORE,
})


def body_parts(muscles: frozenset[Muscle]) -> frozenset[BodyPart]:
    """Return the set of body parts covered by the given muscles."""
    return frozenset(MUSCLE_BODY_PART[m] for m in muscles)


def pattern_muscles(pattern: MovementPattern) -> frozenset[Muscle]:
    """Return the primary muscle groups driven by a movement pattern."""
    return MOVEMENT_PATTERN_MUSCLES[pattern]
