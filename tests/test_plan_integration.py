"""
Integration tests for daily plan generation.

Each scenario builds a small template plus history and checks the whole
prescription: progression decision, readiness adjustments, warmups,
duration estimate and time-budget trimming.
"""

import pytest

from strength_coach.core.models import (
    EnergyLevel,
    LoadClass,
    PrescriptionSpec,
    ProgressionType,
    ReadinessState,
    SessionHistoryEntry,
    SorenessLevel,
    TemplateExercise,
    WorkoutTemplate,
)
from strength_coach.core.plate_math import STANDARD_DUMBBELLS
from strength_coach.core.progression import (
    LoadingSetup,
    ProgressionState,
    adjusted_rpe_cap,
    build_warmups,
    decide_progression,
    estimate_duration,
    generate_plan,
    plan_exercise,
    snap_weight,
    starting_weight,
)

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _entry(date: str, weight: float, reps: int, rpe: float | None = 8.0) -> SessionHistoryEntry:
    return SessionHistoryEntry(date=date, top_set_weight=weight, top_set_reps=reps, top_set_rpe=rpe)


def _slot(
    name: str,
    prescription: PrescriptionSpec | None = None,
    optional: bool = False,
    load_class: LoadClass = LoadClass.BARBELL,
    compound: bool = True,
) -> TemplateExercise:
    return TemplateExercise(
        name=name,
        prescription=prescription or PrescriptionSpec(),
        is_optional=optional,
        load_class=load_class,
        is_compound=compound,
    )


def _template(*slots: TemplateExercise) -> WorkoutTemplate:
    return WorkoutTemplate(name="Test Day", exercises=tuple(slots))


DEFAULT = PrescriptionSpec()  # 4-6 reps, RPE 8, 3 backoffs at -10%


# ===========================================================================
# Progression decision
# ===========================================================================

class TestDecideProgression:

    def test_no_history_starts_at_bar(self):
        d = decide_progression(DEFAULT, [])
        assert d.state == ProgressionState.NO_HISTORY
        assert d.weight == 20.0
        assert d.reps == 4
        assert d.last is None

    def test_top_of_range_adds_weight(self):
        d = decide_progression(DEFAULT, [_entry("2024-01-01", 100, 6, 8)])
        assert d.state == ProgressionState.ADVANCE
        assert d.weight == 102.5
        assert d.reps == 4

    def test_in_range_adds_rep(self):
        d = decide_progression(DEFAULT, [_entry("2024-01-01", 100, 5, 8)])
        assert d.state == ProgressionState.MAINTAIN
        assert (d.weight, d.reps) == (100, 6)

    def test_missed_reps_hold_weight(self):
        d = decide_progression(DEFAULT, [_entry("2024-01-01", 100, 3, 8)])
        assert d.state == ProgressionState.REGRESS
        assert (d.weight, d.reps) == (100, 4)

    def test_rpe_overshoot_holds_weight(self):
        # cap 8 + 0.5 tolerance < 9
        d = decide_progression(DEFAULT, [_entry("2024-01-01", 100, 5, 9)])
        assert d.state == ProgressionState.REGRESS

    def test_top_of_range_but_above_cap_maintains(self):
        # 8.5 > cap so no advance; 8.5 is within tolerance so no regress
        d = decide_progression(DEFAULT, [_entry("2024-01-01", 100, 6, 8.5)])
        assert d.state == ProgressionState.MAINTAIN
        assert d.reps == 6

    def test_missing_rpe_counts_as_eight(self):
        d = decide_progression(DEFAULT, [_entry("2024-01-01", 100, 6, None)])
        assert d.state == ProgressionState.ADVANCE

    def test_most_recent_entry_used_regardless_of_order(self):
        entries = [_entry("2024-01-10", 100, 6), _entry("2024-01-01", 90, 3)]
        assert decide_progression(DEFAULT, list(reversed(entries))).weight == 102.5

    def test_dumbbell_increment_snaps_up_to_rack(self):
        d = decide_progression(DEFAULT, [_entry("2024-01-01", 30, 6)], LoadClass.DUMBBELL)
        # 30 + 2 = 32 is not on the rack; next dumbbell up is 32.5
        assert d.weight == 32.5

    def test_dumbbell_increment_uses_custom_rack(self):
        setup = LoadingSetup(available_dumbbells=(10.0, 20.0, 30.0))
        d = decide_progression(DEFAULT, [_entry("2024-01-01", 20, 6)], LoadClass.DUMBBELL, setup)
        assert d.weight == 30.0

    def test_dumbbell_increment_at_top_of_rack(self):
        setup = LoadingSetup(available_dumbbells=(10.0, 20.0))
        d = decide_progression(DEFAULT, [_entry("2024-01-01", 20, 6)], LoadClass.DUMBBELL, setup)
        assert d.weight == 20.0

    def test_dumbbell_increment_without_rack(self):
        setup = LoadingSetup(available_dumbbells=())
        d = decide_progression(DEFAULT, [_entry("2024-01-01", 30, 6)], LoadClass.DUMBBELL, setup)
        assert d.weight == 32.0


class TestWeights:

    @pytest.mark.parametrize(
        "load_class, expected",
        [
            (LoadClass.BARBELL, 20.0),
            (LoadClass.DUMBBELL, 2.5),
            (LoadClass.MACHINE, 5.0),
            (LoadClass.BODYWEIGHT, 0.0),
        ],
    )
    def test_starting_weight(self, load_class, expected):
        assert starting_weight(load_class) == expected

    def test_starting_weight_custom_bar(self):
        assert starting_weight(LoadClass.BARBELL, LoadingSetup(bar_weight=15)) == 15.0

    def test_snap_weight(self):
        # 85.5 → (65.5 / 2.5 = 26.2) → 26 steps → 85
        assert snap_weight(85.5, LoadClass.BARBELL) == 85
        assert snap_weight(23.75, LoadClass.DUMBBELL) == 25
        # 51 / 2.5 = 20.4 → 50
        assert snap_weight(51, LoadClass.MACHINE) == 50

    def test_adjusted_rpe_cap(self):
        assert adjusted_rpe_cap(8.0, ReadinessState(energy=EnergyLevel.LOW)) == 7.5
        assert adjusted_rpe_cap(8.0, ReadinessState(energy=EnergyLevel.HIGH)) == 8.5
        assert adjusted_rpe_cap(10.0, ReadinessState(energy=EnergyLevel.HIGH)) == 10.0
        # soreness blocks the high-energy bump
        sore = ReadinessState(energy=EnergyLevel.HIGH, soreness=SorenessLevel.MILD)
        assert adjusted_rpe_cap(8.0, sore) == 8.0


# ===========================================================================
# Per-exercise plans
# ===========================================================================

class TestPlanExercise:

    def test_top_set_backoff(self):
        plan, decision, cut = plan_exercise(_slot("Bench Press"), [_entry("2024-01-01", 100, 5)])
        assert decision.state == ProgressionState.MAINTAIN
        assert cut is False
        assert (plan.top_set.weight, plan.top_set.reps, plan.top_set.rpe_cap) == (100, 6, 8.0)
        # 90 % of 100, 3 sets at the backoff minimum
        (backoff,) = plan.backoff_sets
        assert (backoff.weight, backoff.reps, backoff.set_count) == (90, 6, 3)
        assert plan.working_sets == ()
        # bar ×10, 40 ×5, 60 ×5, 80 ×3
        assert [(w.weight, w.reps) for w in plan.warmup_sets] == [(20, 10), (40, 5), (60, 5), (80, 3)]
        assert all(w.rpe_cap == 6.0 for w in plan.warmup_sets)
        assert plan.total_sets == 8

    def test_double_progression_dumbbell(self):
        slot = _slot("Goblet Squat", PrescriptionSpec.hypertrophy(), load_class=LoadClass.DUMBBELL)
        plan, decision, _ = plan_exercise(slot, [_entry("2024-01-01", 20, 10)])
        assert decision.state == ProgressionState.MAINTAIN
        assert plan.top_set is None
        (working,) = plan.working_sets
        assert (working.weight, working.reps, working.set_count) == (20, 11, 3)
        # 50 % → 10 (below 70 %: 5 reps), 75 % → 15 (3 reps)
        assert [(w.weight, w.reps) for w in plan.warmup_sets] == [(10, 5), (15, 3)]

    def test_double_progression_advance_lands_on_rack(self):
        slot = _slot("Goblet Squat", PrescriptionSpec.hypertrophy(), load_class=LoadClass.DUMBBELL)
        plan, decision, _ = plan_exercise(slot, [_entry("2024-01-01", 22.5, 12)])
        assert decision.state == ProgressionState.ADVANCE
        # 22.5 + 2 = 24.5 → 25
        (working,) = plan.working_sets
        assert (working.weight, working.reps) == (25, 8)
        assert working.weight in STANDARD_DUMBBELLS

    def test_straight_sets(self):
        rx = PrescriptionSpec(progression_type=ProgressionType.STRAIGHT_SETS, working_sets=4)
        plan, decision, _ = plan_exercise(_slot("Barbell Row", rx), [_entry("2024-01-01", 100, 6)])
        assert decision.state == ProgressionState.ADVANCE
        # no top set or backoffs even though the prescription carries backoff_sets=3
        assert plan.top_set is None
        assert plan.backoff_sets == ()
        (working,) = plan.working_sets
        assert (working.weight, working.reps, working.rpe_cap, working.set_count) == (102.5, 4, 8.0, 4)

    def test_isolation_has_no_warmups(self):
        slot = _slot(
            "Lateral Raise",
            PrescriptionSpec.hypertrophy(),
            load_class=LoadClass.DUMBBELL,
            compound=False,
        )
        plan, decision, _ = plan_exercise(slot, [])
        assert decision.state == ProgressionState.NO_HISTORY
        assert plan.warmup_sets == ()
        assert (plan.working_sets[0].weight, plan.working_sets[0].reps) == (2.5, 8)

    def test_machine_has_no_warmups(self):
        assert build_warmups(100, LoadClass.MACHINE, True) == ()

    def test_low_energy_fatigue_cut(self):
        readiness = ReadinessState(energy=EnergyLevel.LOW)
        plan, decision, cut = plan_exercise(
            _slot("Bench Press"), [_entry("2024-01-01", 100, 3, 9.5)], readiness
        )
        assert decision.state == ProgressionState.REGRESS
        assert cut is True
        # 100 × 0.95 = 95; backoff 95 × 0.9 = 85.5 → 85
        assert plan.top_set.weight == 95
        assert plan.top_set.rpe_cap == 7.5
        assert plan.backoff_sets[0].weight == 85

    def test_low_energy_without_grinder_keeps_load(self):
        readiness = ReadinessState(energy=EnergyLevel.LOW)
        plan, _, cut = plan_exercise(_slot("Bench Press"), [_entry("2024-01-01", 100, 5)], readiness)
        assert cut is False
        assert plan.top_set.weight == 100
        assert plan.top_set.rpe_cap == 7.5

    def test_high_soreness_trims_backoffs(self):
        readiness = ReadinessState(soreness=SorenessLevel.HIGH)
        plan, _, _ = plan_exercise(_slot("Bench Press"), [_entry("2024-01-01", 100, 5)], readiness)
        assert plan.backoff_sets[0].set_count == 2

    def test_high_soreness_can_remove_backoffs(self):
        readiness = ReadinessState(soreness=SorenessLevel.HIGH)
        slot = _slot("Bench Press", PrescriptionSpec(backoff_sets=1))
        plan, _, _ = plan_exercise(slot, [_entry("2024-01-01", 100, 5)], readiness)
        assert plan.backoff_sets == ()
        assert plan.top_set is not None


# ===========================================================================
# Whole plan
# ===========================================================================

class TestGeneratePlan:

    def test_single_exercise_duration(self):
        plan = generate_plan(
            _template(_slot("Bench Press")),
            {"Bench Press": [_entry("2024-01-01", 100, 5)]},
        )
        # 8 sets × 3 min
        assert plan.estimated_duration_minutes == 24
        assert plan.adjustments == ()
        assert plan.reasoning == (
            "Bench Press: last 100kg x 5 @ 8 on 2024-01-01; in range, adding a rep -> 100kg x 6",
        )

    def test_history_lookup_is_case_insensitive(self):
        plan = generate_plan(
            _template(_slot("Bench Press")),
            {"bench press": [_entry("2024-01-01", 100, 6)]},
        )
        assert plan.exercises[0].top_set.weight == 102.5

    def test_template_order_preserved(self):
        plan = generate_plan(
            _template(_slot("Barbell Squat"), _slot("Bench Press"), _slot("Deadlift")), {}
        )
        assert [e.exercise_name for e in plan.exercises] == ["Barbell Squat", "Bench Press", "Deadlift"]
        assert plan.reasoning[0] == "Barbell Squat: no history, starting at 20kg x 4"

    def test_optional_dropped_when_over_time(self):
        template = _template(_slot("Bench Press", optional=True), _slot("Barbell Squat"))
        history = {"Bench Press": [_entry("2024-01-01", 100, 5)]}
        readiness = ReadinessState(time_available_minutes=30)
        plan = generate_plan(template, history, readiness)
        # Bench 24 min + Squat (empty bar, 1 top + 3 backoff) 12 min = 36 > 30
        assert [e.exercise_name for e in plan.exercises] == ["Barbell Squat"]
        assert plan.estimated_duration_minutes == 12
        assert plan.reasoning[-1] == "Skipped optional: Bench Press"
        assert plan.adjustments == ()

    def test_last_optional_dropped_first(self):
        template = _template(
            _slot("Bench Press", optional=True),
            _slot("Barbell Squat"),
            _slot("Overhead Press", optional=True),
        )
        # 12 min each at the empty bar: 36 > 30 → drop Overhead Press only
        plan = generate_plan(template, {}, ReadinessState(time_available_minutes=30))
        assert [e.exercise_name for e in plan.exercises] == ["Bench Press", "Barbell Squat"]
        assert plan.estimated_duration_minutes == 24

    def test_required_exercises_never_dropped(self):
        plan = generate_plan(
            _template(_slot("Barbell Squat")), {}, ReadinessState(time_available_minutes=5)
        )
        assert len(plan.exercises) == 1
        assert plan.adjustments == (
            "Estimated 12 min exceeds the 5 min available; required exercises kept",
        )

    def test_readiness_adjustments(self):
        readiness = ReadinessState(energy=EnergyLevel.LOW, soreness=SorenessLevel.HIGH)
        plan = generate_plan(
            _template(_slot("Bench Press")),
            {"Bench Press": [_entry("2024-01-01", 100, 3, 9.5)]},
            readiness,
        )
        assert plan.adjustments == (
            "Low energy: RPE caps reduced by 0.5",
            "High soreness: backoff sets reduced by 1",
            "Bench Press: load reduced 5% after a missed grinder",
        )

    def test_dropped_optional_leaves_no_fatigue_note(self):
        template = _template(_slot("Barbell Squat"), _slot("Bench Press", optional=True))
        history = {"Bench Press": [_entry("2024-01-01", 100, 3, 9.5)]}
        readiness = ReadinessState(energy=EnergyLevel.LOW, time_available_minutes=20)
        plan = generate_plan(template, history, readiness)
        # Bench at 95: 4 warmups + top + 3 backoffs = 24 min; Squat 12 → 36 > 20
        assert [e.exercise_name for e in plan.exercises] == ["Barbell Squat"]
        assert plan.reasoning[-1] == "Skipped optional: Bench Press"
        assert plan.adjustments == ("Low energy: RPE caps reduced by 0.5",)

    def test_high_energy_adjustment(self):
        plan = generate_plan(
            _template(_slot("Bench Press")), {}, ReadinessState(energy=EnergyLevel.HIGH)
        )
        assert plan.adjustments == ("High energy: RPE caps raised by 0.5",)
        assert plan.exercises[0].top_set.rpe_cap == 8.5

    def test_estimate_duration_mixes_compound_and_isolation(self):
        compound, _, _ = plan_exercise(_slot("Bench Press"), [_entry("2024-01-01", 100, 5)])
        isolation, _, _ = plan_exercise(
            _slot("Lateral Raise", PrescriptionSpec.hypertrophy(), compound=False), []
        )
        # 8 × 3 + 3 × 2
        assert estimate_duration([(compound, True), (isolation, False)]) == 30

    def test_custom_bar(self):
        plan = generate_plan(
            _template(_slot("Bench Press")), {}, setup=LoadingSetup(bar_weight=15)
        )
        assert plan.exercises[0].top_set.weight == 15
