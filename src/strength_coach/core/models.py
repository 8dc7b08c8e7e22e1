"""
Data models for strength-coach.

All core value objects consumed and produced by the coaching engine.
Every dataclass is frozen: instances are snapshots that can be shared
freely between callers and threads.  Closed variants (progression type,
readiness levels, stall fixes, ...) are str-valued Enums so they
serialize to their value.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ProgressionType(str, Enum):
    """How an exercise is loaded across its sets."""

    TOP_SET_BACKOFF = "top_set_backoff"
    DOUBLE_PROGRESSION = "double_progression"
    STRAIGHT_SETS = "straight_sets"


class EnergyLevel(str, Enum):
    LOW = "low"
    OK = "ok"
    HIGH = "high"


class SorenessLevel(str, Enum):
    NONE = "none"
    MILD = "mild"
    HIGH = "high"


class PainSeverity(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class StallFix(str, Enum):
    """Remedy category suggested for a stalled lift."""

    DELOAD = "deload"
    REP_RANGE = "rep_range"
    VARIATION = "variation"
    WEIGHT_JUMP = "weight_jump"

    @property
    def display_name(self) -> str:
        return _STALL_FIX_LABELS[self]


_STALL_FIX_LABELS: dict[StallFix, str] = {
    StallFix.DELOAD: "Deload Week",
    StallFix.REP_RANGE: "Change Rep Range",
    StallFix.VARIATION: "Switch Variation",
    StallFix.WEIGHT_JUMP: "Force Weight Increase",
}


class SubstitutionReason(str, Enum):
    EQUIPMENT_MISSING = "equipment_missing"
    PAIN_FLAG = "pain_flag"
    TIME_CONSTRAINT = "time_constraint"
    USER_PREFERENCE = "user_preference"


class MovementPattern(str, Enum):
    HORIZONTAL_PUSH = "horizontal_push"
    VERTICAL_PUSH = "vertical_push"
    HORIZONTAL_PULL = "horizontal_pull"
    VERTICAL_PULL = "vertical_pull"
    SQUAT = "squat"
    HINGE = "hinge"
    LUNGE = "lunge"
    CARRY = "carry"
    ISOLATION = "isolation"
    MOBILITY = "mobility"
    CARDIO = "cardio"


class Muscle(str, Enum):
    CHEST = "chest"
    LATS = "lats"
    UPPER_BACK = "upper_back"
    LOWER_BACK = "lower_back"
    FRONT_DELT = "front_delt"
    SIDE_DELT = "side_delt"
    REAR_DELT = "rear_delt"
    BICEPS = "biceps"
    TRICEPS = "triceps"
    FOREARMS = "forearms"
    QUADS = "quads"
    HAMSTRINGS = "hamstrings"
    GLUTES = "glutes"
    CALVES = "calves"
    CORE = "core"
    TRAPS = "traps"


class BodyPart(str, Enum):
    CHEST = "chest"
    BACK = "back"
    SHOULDERS = "shoulders"
    ARMS = "arms"
    LEGS = "legs"
    CORE = "core"


class Equipment(str, Enum):
    BARBELL = "barbell"
    DUMBBELL = "dumbbell"
    CABLE = "cable"
    MACHINE = "machine"
    PULL_UP_BAR = "pull_up_bar"
    BANDS = "bands"
    BODYWEIGHT = "bodyweight"
    RACK = "rack"
    BENCH = "bench"


class LoadClass(str, Enum):
    """Loading implement, which decides increments and starting loads."""

    BARBELL = "barbell"
    DUMBBELL = "dumbbell"
    MACHINE = "machine"
    BODYWEIGHT = "bodyweight"


def _validate_date(date_str: str) -> None:
    """Validate date string is ISO format YYYY-MM-DD."""
    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValueError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")
    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValueError(f"Invalid date: {date_str}") from e


@dataclass(frozen=True)
class SessionHistoryEntry:
    """
    Top-set snapshot of one past session for one exercise.

    ``e1rm`` is filled from the Epley estimate of the top set when the
    caller leaves it at 0.
    """

    date: str  # ISO format: YYYY-MM-DD
    top_set_weight: float
    top_set_reps: int
    top_set_rpe: float | None = None
    total_sets: int = 1
    e1rm: float = 0.0

    def __post_init__(self) -> None:
        """Validate entry data."""
        _validate_date(self.date)
        if self.top_set_weight < 0:
            raise ValueError("top_set_weight must be non-negative")
        if self.top_set_reps < 0:
            raise ValueError("top_set_reps must be non-negative")
        if self.total_sets < 0:
            raise ValueError("total_sets must be non-negative")
        if self.top_set_rpe is not None and not 0 <= self.top_set_rpe <= 10:
            raise ValueError(f"top_set_rpe must be within 0-10, got {self.top_set_rpe}")
        if self.e1rm <= 0:
            from .e1rm import calculate

            object.__setattr__(self, "e1rm", calculate(self.top_set_weight, self.top_set_reps))


@dataclass(frozen=True)
class PrescriptionSpec:
    """
    The loading rule for one exercise (not a specific day's numbers).

    ``backoff_load_drop_percent`` is a fraction: 0.10 means backoffs use
    90% of the top set weight.
    """

    progression_type: ProgressionType = ProgressionType.TOP_SET_BACKOFF
    rep_range_min: int = 4
    rep_range_max: int = 6
    rpe_cap: float = 8.0
    backoff_sets: int = 3
    backoff_rep_range_min: int = 6
    backoff_rep_range_max: int = 10
    backoff_load_drop_percent: float = 0.10
    working_sets: int = 3

    def __post_init__(self) -> None:
        """Validate prescription invariants."""
        if self.rep_range_min < 1:
            raise ValueError("rep_range_min must be at least 1")
        if self.rep_range_min > self.rep_range_max:
            raise ValueError(
                f"rep_range_min ({self.rep_range_min}) must not exceed "
                f"rep_range_max ({self.rep_range_max})"
            )
        if self.backoff_rep_range_min > self.backoff_rep_range_max:
            raise ValueError(
                f"backoff_rep_range_min ({self.backoff_rep_range_min}) must not exceed "
                f"backoff_rep_range_max ({self.backoff_rep_range_max})"
            )
        if not 0 < self.rpe_cap <= 10:
            raise ValueError(f"rpe_cap must be within (0, 10], got {self.rpe_cap}")
        if self.backoff_sets < 0:
            raise ValueError("backoff_sets must be non-negative")
        if self.working_sets < 0:
            raise ValueError("working_sets must be non-negative")
        if not 0 <= self.backoff_load_drop_percent < 1:
            raise ValueError("backoff_load_drop_percent must be a fraction in [0, 1)")

    @classmethod
    def default(cls) -> "PrescriptionSpec":
        return cls()

    @classmethod
    def strength(cls) -> "PrescriptionSpec":
        return cls(
            progression_type=ProgressionType.TOP_SET_BACKOFF,
            rep_range_min=3,
            rep_range_max=5,
            rpe_cap=8.0,
            backoff_sets=3,
            backoff_rep_range_min=5,
            backoff_rep_range_max=8,
            backoff_load_drop_percent=0.12,
            working_sets=1,
        )

    @classmethod
    def hypertrophy(cls) -> "PrescriptionSpec":
        return cls(
            progression_type=ProgressionType.DOUBLE_PROGRESSION,
            rep_range_min=8,
            rep_range_max=12,
            rpe_cap=8.5,
            backoff_sets=0,
            backoff_rep_range_min=8,
            backoff_rep_range_max=12,
            backoff_load_drop_percent=0.0,
            working_sets=3,
        )

    @property
    def rep_range(self) -> str:
        return f"{self.rep_range_min}-{self.rep_range_max}"


@dataclass(frozen=True)
class ReadinessState:
    """Today's self-reported readiness."""

    energy: EnergyLevel = EnergyLevel.OK
    soreness: SorenessLevel = SorenessLevel.NONE
    time_available_minutes: int = 60

    def __post_init__(self) -> None:
        if self.time_available_minutes < 0:
            raise ValueError("time_available_minutes must be non-negative")

    @classmethod
    def default(cls) -> "ReadinessState":
        return cls()

    @property
    def should_increase_intensity(self) -> bool:
        return self.energy == EnergyLevel.HIGH and self.soreness == SorenessLevel.NONE


@dataclass(frozen=True)
class PlannedSet:
    """A prescribed group of identical sets."""

    weight: float
    reps: int
    rpe_cap: float | None = None
    set_count: int = 1

    def __post_init__(self) -> None:
        """Validate planned set data."""
        if self.weight < 0:
            raise ValueError("weight must be non-negative")
        if self.reps < 0:
            raise ValueError("reps must be non-negative")
        if self.set_count < 0:
            raise ValueError("set_count must be non-negative")


@dataclass(frozen=True)
class ExercisePlan:
    """Today's prescription for one exercise."""

    exercise_name: str
    warmup_sets: tuple[PlannedSet, ...] = ()
    top_set: PlannedSet | None = None
    backoff_sets: tuple[PlannedSet, ...] = ()
    working_sets: tuple[PlannedSet, ...] = ()

    @property
    def total_sets(self) -> int:
        """Number of sets emitted, warmups included."""
        groups = [*self.warmup_sets, *self.backoff_sets, *self.working_sets]
        if self.top_set is not None:
            groups.append(self.top_set)
        return sum(s.set_count for s in groups)


@dataclass(frozen=True)
class GeneratedPlan:
    """Output of one generate_plan() call."""

    exercises: tuple[ExercisePlan, ...] = ()
    adjustments: tuple[str, ...] = ()
    reasoning: tuple[str, ...] = ()
    estimated_duration_minutes: int = 0


@dataclass(frozen=True)
class StallResult:
    """
    Plateau diagnosis for one exercise.

    Non-stalled results leave reason / suggested_fix / fix_type unset;
    ``details`` may still carry an explanation.
    """

    is_stalled: bool
    reason: str | None = None
    suggested_fix: str | None = None
    fix_type: StallFix | None = None
    details: str | None = None


@dataclass(frozen=True)
class Exercise:
    """A canonical library entry."""

    name: str
    movement_pattern: MovementPattern
    primary_muscles: frozenset[Muscle] = frozenset()
    secondary_muscles: frozenset[Muscle] = frozenset()
    equipment_required: frozenset[Equipment] = frozenset()
    is_compound: bool = True

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Exercise name must be non-empty")
        # Accept any iterable from callers but store frozensets
        object.__setattr__(self, "primary_muscles", frozenset(self.primary_muscles))
        object.__setattr__(self, "secondary_muscles", frozenset(self.secondary_muscles))
        object.__setattr__(self, "equipment_required", frozenset(self.equipment_required))

    @property
    def all_muscles(self) -> frozenset[Muscle]:
        return self.primary_muscles | self.secondary_muscles

    @property
    def is_bodyweight_only(self) -> bool:
        return self.equipment_required <= {Equipment.BODYWEIGHT}

    @property
    def load_class(self) -> LoadClass:
        """Loading implement inferred from required equipment."""
        if Equipment.BARBELL in self.equipment_required:
            return LoadClass.BARBELL
        if Equipment.DUMBBELL in self.equipment_required:
            return LoadClass.DUMBBELL
        if self.equipment_required & {Equipment.MACHINE, Equipment.CABLE}:
            return LoadClass.MACHINE
        return LoadClass.BODYWEIGHT


@dataclass(frozen=True)
class Substitution:
    original_exercise: str
    substitute_exercise: str
    reason: SubstitutionReason


@dataclass(frozen=True)
class PainFlag:
    """
    A reported pain area, optionally tied to a named exercise.

    Resolved flags are kept for history but no longer restrict planning.
    """

    body_part: BodyPart
    severity: PainSeverity = PainSeverity.MILD
    exercise_name: str | None = None
    is_resolved: bool = False

    @property
    def is_active(self) -> bool:
        return not self.is_resolved


@dataclass(frozen=True)
class TemplateExercise:
    """One slot of a workout template."""

    name: str
    prescription: PrescriptionSpec = field(default_factory=PrescriptionSpec)
    is_optional: bool = False
    load_class: LoadClass = LoadClass.BARBELL
    is_compound: bool = True

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("TemplateExercise name must be non-empty")

    @classmethod
    def from_exercise(
        cls,
        exercise: Exercise,
        prescription: PrescriptionSpec | None = None,
        is_optional: bool = False,
    ) -> "TemplateExercise":
        """Build a template slot from a library entry."""
        return cls(
            name=exercise.name,
            prescription=prescription if prescription is not None else PrescriptionSpec(),
            is_optional=is_optional,
            load_class=exercise.load_class,
            is_compound=exercise.is_compound,
        )


@dataclass(frozen=True)
class WorkoutTemplate:
    """Ordered list of exercises for one training day."""

    name: str
    exercises: tuple[TemplateExercise, ...] = ()
