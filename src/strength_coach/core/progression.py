"""
Daily plan generation.

For every exercise in a workout template the engine looks at the most
recent logged session and decides whether to add weight, add a rep, or
hold.  It then applies today's readiness, attaches warmups, estimates
the session length and drops optional exercises if the session would not
fit into the time available.

Weight decision (last = most recent session, RPE defaults to 8.0):

  no history                               -> start load, min reps
  last reps >= max and RPE <= cap          -> + increment, min reps
  last reps < min or RPE > cap + 0.5       -> same weight, min reps
  otherwise                                -> same weight, last reps + 1
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Sequence

from .config import (
    BODYWEIGHT_START_KG,
    COMPOUND_SET_MINUTES,
    DEFAULT_BAR_WEIGHT_KG,
    DEFAULT_RPE,
    EMPTY_BAR_WARMUP_REPS,
    FATIGUED_RPE_THRESHOLD,
    FATIGUED_WEIGHT_FACTOR,
    HEAVY_WARMUP_REPS,
    HIGH_ENERGY_RPE_INCREASE,
    ISOLATION_SET_MINUTES,
    LIGHT_WARMUP_REPS,
    LOAD_EPSILON,
    LOW_ENERGY_RPE_REDUCTION,
    MACHINE_START_KG,
    MAX_RPE_CAP,
    RPE_OVERSHOOT_TOLERANCE,
    SORE_BACKOFF_REDUCTION,
    WARMUP_REP_SPLIT,
    WARMUP_RPE_CAP,
    WEIGHT_INCREMENTS_KG,
)
from .models import (
    EnergyLevel,
    ExercisePlan,
    GeneratedPlan,
    LoadClass,
    PlannedSet,
    PrescriptionSpec,
    ProgressionType,
    ReadinessState,
    SessionHistoryEntry,
    SorenessLevel,
    TemplateExercise,
    WorkoutTemplate,
)
from .plate_math import (
    STANDARD_DUMBBELLS,
    STANDARD_PLATES,
    dumbbell_warmups,
    format_weight,
    nearest_dumbbell,
    nearest_loadable,
    next_dumbbell_up,
    warmup_weights,
)


class ProgressionState(str, Enum):
    """Outcome of comparing the last session with the prescription."""

    NO_HISTORY = "no_history"
    ADVANCE = "advance"
    MAINTAIN = "maintain"
    REGRESS = "regress"


@dataclass(frozen=True)
class ProgressionDecision:
    """Base target for today's top set or working sets, before readiness."""

    state: ProgressionState
    weight: float
    reps: int
    last: SessionHistoryEntry | None = None


@dataclass(frozen=True)
class LoadingSetup:
    """Equipment the lifter loads weights with."""

    bar_weight: float = DEFAULT_BAR_WEIGHT_KG
    available_plates: tuple[float, ...] = STANDARD_PLATES
    available_dumbbells: tuple[float, ...] = STANDARD_DUMBBELLS


# =============================================================================
# WEIGHT HELPERS
# =============================================================================


def starting_weight(load_class: LoadClass, setup: LoadingSetup | None = None) -> float:
    """Load used the first time an exercise is performed."""
    setup = setup or LoadingSetup()
    if load_class == LoadClass.BARBELL:
        return float(setup.bar_weight)
    if load_class == LoadClass.DUMBBELL:
        return float(min(setup.available_dumbbells)) if setup.available_dumbbells else 0.0
    if load_class == LoadClass.MACHINE:
        return MACHINE_START_KG
    return BODYWEIGHT_START_KG


def weight_increment(load_class: LoadClass) -> float:
    return WEIGHT_INCREMENTS_KG[load_class.value]


def snap_weight(weight: float, load_class: LoadClass, setup: LoadingSetup | None = None) -> float:
    """
    Round a computed weight to something the lifter can actually load.

    Barbell weights snap to the plate grid, dumbbells to the rack, and
    machine / added bodyweight loads to their increment.
    """
    setup = setup or LoadingSetup()
    if load_class == LoadClass.BARBELL:
        return nearest_loadable(weight, setup.bar_weight, setup.available_plates)
    if load_class == LoadClass.DUMBBELL:
        db = nearest_dumbbell(weight, setup.available_dumbbells)
        return db if db is not None else weight
    step = weight_increment(load_class)
    return round(max(0, math.floor(weight / step + 0.5)) * step, 4)


def advanced_weight(
    last_weight: float,
    load_class: LoadClass,
    setup: LoadingSetup | None = None,
) -> float:
    """
    Weight after one increment.

    Dumbbells go to the lightest rack dumbbell at or above last + increment
    (the heaviest one past the top of the rack).  With an empty rack the raw
    sum is returned.
    """
    target = round(last_weight + weight_increment(load_class), 4)
    if load_class != LoadClass.DUMBBELL:
        return target
    setup = setup or LoadingSetup()
    rack = setup.available_dumbbells
    if not rack:
        return target
    db = next_dumbbell_up(target - LOAD_EPSILON, rack)
    return db if db is not None else max(rack)


def latest_entry(entries: Sequence[SessionHistoryEntry]) -> SessionHistoryEntry | None:
    """Most recent entry by date (first one wins on equal dates)."""
    if not entries:
        return None
    return max(entries, key=lambda e: e.date)


# =============================================================================
# DECISION
# =============================================================================


def decide_progression(
    prescription: PrescriptionSpec,
    entries: Sequence[SessionHistoryEntry],
    load_class: LoadClass = LoadClass.BARBELL,
    setup: LoadingSetup | None = None,
) -> ProgressionDecision:
    """
    Pick today's base weight and reps from the most recent session.

    Args:
        prescription: Loading rule for the exercise
        entries: Logged sessions for the exercise (any order)
        load_class: Implement, decides start load and increment
        setup: Bar / plate / dumbbell availability

    Returns:
        ProgressionDecision with state, target weight and reps
    """
    last = latest_entry(entries)
    if last is None:
        return ProgressionDecision(
            state=ProgressionState.NO_HISTORY,
            weight=starting_weight(load_class, setup),
            reps=prescription.rep_range_min,
        )

    rpe = last.top_set_rpe if last.top_set_rpe is not None else DEFAULT_RPE

    if last.top_set_reps >= prescription.rep_range_max and rpe <= prescription.rpe_cap:
        return ProgressionDecision(
            state=ProgressionState.ADVANCE,
            weight=advanced_weight(last.top_set_weight, load_class, setup),
            reps=prescription.rep_range_min,
            last=last,
        )

    if (
        last.top_set_reps < prescription.rep_range_min
        or rpe > prescription.rpe_cap + RPE_OVERSHOOT_TOLERANCE
    ):
        return ProgressionDecision(
            state=ProgressionState.REGRESS,
            weight=last.top_set_weight,
            reps=prescription.rep_range_min,
            last=last,
        )

    return ProgressionDecision(
        state=ProgressionState.MAINTAIN,
        weight=last.top_set_weight,
        reps=min(last.top_set_reps + 1, prescription.rep_range_max),
        last=last,
    )


def _is_fatigued(decision: ProgressionDecision, prescription: PrescriptionSpec) -> bool:
    """Last session was a grind that still missed the rep target."""
    last = decision.last
    if last is None:
        return False
    rpe = last.top_set_rpe if last.top_set_rpe is not None else DEFAULT_RPE
    return rpe >= FATIGUED_RPE_THRESHOLD and last.top_set_reps < prescription.rep_range_min


def adjusted_rpe_cap(rpe_cap: float, readiness: ReadinessState) -> float:
    """RPE cap after energy adjustments."""
    if readiness.energy == EnergyLevel.LOW:
        return rpe_cap - LOW_ENERGY_RPE_REDUCTION
    if readiness.should_increase_intensity:
        return min(rpe_cap + HIGH_ENERGY_RPE_INCREASE, MAX_RPE_CAP)
    return rpe_cap


# =============================================================================
# SET CONSTRUCTION
# =============================================================================


def _warmup_reps(weight: float, top_weight: float, is_bar: bool) -> int:
    if is_bar:
        return EMPTY_BAR_WARMUP_REPS
    if weight < top_weight * WARMUP_REP_SPLIT:
        return LIGHT_WARMUP_REPS
    return HEAVY_WARMUP_REPS


def build_warmups(
    top_weight: float,
    load_class: LoadClass,
    is_compound: bool,
    setup: LoadingSetup | None = None,
) -> tuple[PlannedSet, ...]:
    """
    Warmup sets leading to the heaviest set of the day.

    Only compound barbell and dumbbell lifts get warmups.
    """
    if not is_compound:
        return ()
    setup = setup or LoadingSetup()

    if load_class == LoadClass.BARBELL:
        weights = warmup_weights(top_weight, setup.bar_weight, setup.available_plates)
        return tuple(
            PlannedSet(
                weight=w,
                reps=_warmup_reps(w, top_weight, abs(w - setup.bar_weight) < LOAD_EPSILON),
                rpe_cap=WARMUP_RPE_CAP,
            )
            for w in weights
        )

    if load_class == LoadClass.DUMBBELL:
        weights = dumbbell_warmups(top_weight, setup.available_dumbbells)
        return tuple(
            PlannedSet(weight=w, reps=_warmup_reps(w, top_weight, False), rpe_cap=WARMUP_RPE_CAP)
            for w in weights
        )

    return ()


def plan_exercise(
    template_exercise: TemplateExercise,
    entries: Sequence[SessionHistoryEntry],
    readiness: ReadinessState | None = None,
    setup: LoadingSetup | None = None,
) -> tuple[ExercisePlan, ProgressionDecision, bool]:
    """
    Build today's prescription for one template slot.

    Returns:
        (plan, base decision, whether a fatigue load cut was applied)
    """
    readiness = readiness or ReadinessState.default()
    setup = setup or LoadingSetup()
    prescription = template_exercise.prescription
    load_class = template_exercise.load_class

    decision = decide_progression(prescription, entries, load_class, setup)
    weight = decision.weight

    fatigue_cut = readiness.energy == EnergyLevel.LOW and _is_fatigued(decision, prescription)
    if fatigue_cut:
        weight = snap_weight(weight * FATIGUED_WEIGHT_FACTOR, load_class, setup)

    rpe_cap = adjusted_rpe_cap(prescription.rpe_cap, readiness)

    top_set: PlannedSet | None = None
    backoff_sets: tuple[PlannedSet, ...] = ()
    working_sets: tuple[PlannedSet, ...] = ()

    if prescription.progression_type == ProgressionType.TOP_SET_BACKOFF:
        top_set = PlannedSet(weight=weight, reps=decision.reps, rpe_cap=rpe_cap, set_count=1)
        backoff_count = prescription.backoff_sets
        if readiness.soreness == SorenessLevel.HIGH:
            backoff_count = max(0, backoff_count - SORE_BACKOFF_REDUCTION)
        if backoff_count > 0:
            backoff_weight = snap_weight(
                weight * (1 - prescription.backoff_load_drop_percent), load_class, setup
            )
            backoff_sets = (
                PlannedSet(
                    weight=backoff_weight,
                    reps=prescription.backoff_rep_range_min,
                    rpe_cap=rpe_cap,
                    set_count=backoff_count,
                ),
            )
    elif prescription.working_sets > 0:
        working_sets = (
            PlannedSet(
                weight=weight,
                reps=decision.reps,
                rpe_cap=rpe_cap,
                set_count=prescription.working_sets,
            ),
        )

    plan = ExercisePlan(
        exercise_name=template_exercise.name,
        warmup_sets=build_warmups(weight, load_class, template_exercise.is_compound, setup),
        top_set=top_set,
        backoff_sets=backoff_sets,
        working_sets=working_sets,
    )
    return plan, decision, fatigue_cut


def exercise_minutes(plan: ExercisePlan, is_compound: bool) -> float:
    per_set = COMPOUND_SET_MINUTES if is_compound else ISOLATION_SET_MINUTES
    return plan.total_sets * per_set


def estimate_duration(plans: Sequence[tuple[ExercisePlan, bool]]) -> int:
    """Session length in minutes from (plan, is_compound) pairs."""
    return round(sum(exercise_minutes(plan, compound) for plan, compound in plans))


# =============================================================================
# REASONING TEXT
# =============================================================================


def _describe_last(last: SessionHistoryEntry) -> str:
    text = f"last {format_weight(last.top_set_weight)}kg x {last.top_set_reps}"
    if last.top_set_rpe is not None:
        text += f" @ {format_weight(last.top_set_rpe)}"
    return text + f" on {last.date}"


def _describe_decision(name: str, decision: ProgressionDecision, plan: ExercisePlan) -> str:
    target = plan.top_set or (plan.working_sets[0] if plan.working_sets else None)
    target_text = (
        f"{format_weight(target.weight)}kg x {target.reps}" if target is not None else "no sets"
    )
    if decision.last is None:
        return f"{name}: no history, starting at {target_text}"
    actions = {
        ProgressionState.ADVANCE: "top of range hit, adding weight",
        ProgressionState.MAINTAIN: "in range, adding a rep",
        ProgressionState.REGRESS: "target missed or too hard, holding weight",
    }
    return f"{name}: {_describe_last(decision.last)}; {actions[decision.state]} -> {target_text}"


def _history_for(name: str, history: Mapping[str, Sequence[SessionHistoryEntry]]):
    if name in history:
        return history[name]
    key = name.strip().lower()
    for other, entries in history.items():
        if other.strip().lower() == key:
            return entries
    return ()


# =============================================================================
# PLAN GENERATION
# =============================================================================


def generate_plan(
    template: WorkoutTemplate,
    history: Mapping[str, Sequence[SessionHistoryEntry]],
    readiness: ReadinessState | None = None,
    setup: LoadingSetup | None = None,
) -> GeneratedPlan:
    """
    Produce today's full prescription for a workout template.

    Args:
        template: Ordered exercises with their prescriptions
        history: Exercise name -> logged sessions (any order)
        readiness: Today's readiness (defaults to ok / none / 60 min)
        setup: Bar, plates and dumbbells available

    Returns:
        GeneratedPlan with exercises in template order, readiness
        adjustments, per-exercise reasoning and a duration estimate
    """
    readiness = readiness or ReadinessState.default()
    setup = setup or LoadingSetup()

    adjustments: list[str] = []
    if readiness.energy == EnergyLevel.LOW:
        adjustments.append(
            f"Low energy: RPE caps reduced by {format_weight(LOW_ENERGY_RPE_REDUCTION)}"
        )
    if readiness.soreness == SorenessLevel.HIGH:
        adjustments.append(
            f"High soreness: backoff sets reduced by {SORE_BACKOFF_REDUCTION}"
        )
    if readiness.should_increase_intensity:
        adjustments.append(
            f"High energy: RPE caps raised by {format_weight(HIGH_ENERGY_RPE_INCREASE)}"
        )

    # (slot, plan, reasoning line, fatigue note or None)
    slots: list[tuple[TemplateExercise, ExercisePlan, str, str | None]] = []
    for template_exercise in template.exercises:
        entries = _history_for(template_exercise.name, history)
        plan, decision, fatigue_cut = plan_exercise(template_exercise, entries, readiness, setup)
        fatigue_note = None
        if fatigue_cut:
            fatigue_note = (
                f"{template_exercise.name}: load reduced "
                f"{round((1 - FATIGUED_WEIGHT_FACTOR) * 100)}% after a missed grinder"
            )
        reason = _describe_decision(template_exercise.name, decision, plan)
        slots.append((template_exercise, plan, reason, fatigue_note))

    def duration() -> int:
        return estimate_duration([(plan, slot.is_compound) for slot, plan, _, _ in slots])

    skipped: list[str] = []
    while duration() > readiness.time_available_minutes:
        optional_idx = [i for i, (slot, *_) in enumerate(slots) if slot.is_optional]
        if not optional_idx:
            break
        slot, *_ = slots.pop(optional_idx[-1])
        skipped.append(f"Skipped optional: {slot.name}")

    # only exercises still in the plan report their load cut
    adjustments.extend(note for *_, note in slots if note)

    estimate = duration()
    if estimate > readiness.time_available_minutes:
        adjustments.append(
            f"Estimated {estimate} min exceeds the {readiness.time_available_minutes} min "
            f"available; required exercises kept"
        )

    return GeneratedPlan(
        exercises=tuple(plan for _, plan, *_ in slots),
        adjustments=tuple(adjustments),
        reasoning=tuple([reason for _, _, reason, _ in slots] + skipped),
        estimated_duration_minutes=estimate,
    )
