"""
YAML configuration, the exercise library and input parsing.

Loader tests point the loaders at tmp_path directories.
"""

import json
import textwrap

import pytest

from strength_coach.core.engine.config_loader import deep_merge, load_yaml_file
from strength_coach.core.library import (
    EXERCISE_LIBRARY,
    available_exercises,
    exercises_for_pattern,
    exercises_targeting,
    get_exercise,
)
from strength_coach.core.library.loader import exercise_from_dict, load_exercises_from_yaml
from strength_coach.core.models import (
    BodyPart,
    EnergyLevel,
    Equipment,
    LoadClass,
    MovementPattern,
    Muscle,
    PainSeverity,
    PrescriptionSpec,
    ProgressionType,
)
from strength_coach.core.progression import generate_plan
from strength_coach.io.serializers import (
    ValidationError,
    parse_dated_session,
    parse_equipment_list,
    parse_pain_flag,
    parse_session_string,
    parse_weight_list,
    plan_request_from_dict,
    plan_to_dict,
    prescription_from_dict,
    template_from_dict,
)


def _write(path, text: str):
    path.write_text(textwrap.dedent(text))
    return path


# ===========================================================================
# config_loader.py
# ===========================================================================

class TestConfigLoader:

    def test_deep_merge_is_non_destructive(self):
        base = {"a": {"x": 1, "y": 2}, "b": 1}
        merged = deep_merge(base, {"a": {"y": 3}, "c": 4})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
        assert base["a"]["y"] == 2

    def test_bad_yaml_warns_and_returns_empty(self, tmp_path):
        bad = _write(tmp_path / "bad.yaml", "stall_detection: [unclosed\n")
        with pytest.warns(UserWarning, match="ignoring"):
            assert load_yaml_file(bad) == {}

    def test_non_mapping_is_empty(self, tmp_path):
        assert load_yaml_file(_write(tmp_path / "list.yaml", "- 1\n- 2\n")) == {}


# ===========================================================================
# Exercise library
# ===========================================================================

class TestBundledLibrary:

    def test_names_unique_and_ordered(self):
        names = [ex.name.lower() for ex in EXERCISE_LIBRARY]
        assert len(names) == len(set(names))
        assert EXERCISE_LIBRARY[0].name == "Bench Press"

    def test_get_exercise_case_insensitive(self):
        assert get_exercise("  bench PRESS ").name == "Bench Press"

    def test_get_exercise_unknown(self):
        with pytest.raises(ValueError, match="Unknown exercise"):
            get_exercise("Underwater Basket Press")

    @pytest.mark.parametrize(
        "name, load_class",
        [
            ("Bench Press", LoadClass.BARBELL),
            ("Goblet Squat", LoadClass.DUMBBELL),
            ("Leg Press", LoadClass.MACHINE),
            ("Lat Pulldown", LoadClass.MACHINE),
            ("Pull-ups", LoadClass.BODYWEIGHT),
        ],
    )
    def test_load_class_from_equipment(self, name, load_class):
        assert get_exercise(name).load_class == load_class

    def test_isolation_flag(self):
        assert get_exercise("Lateral Raise").is_compound is False
        assert get_exercise("Deadlift").is_compound is True

    def test_queries(self):
        hinges = {ex.name for ex in exercises_for_pattern(MovementPattern.HINGE)}
        assert {"Deadlift", "Romanian Deadlift"} <= hinges
        assert get_exercise("Bench Press") in exercises_targeting(Muscle.TRICEPS)
        bodyweight = {ex.name for ex in available_exercises(set())}
        assert "Push-ups" in bodyweight
        assert "Bench Press" not in bodyweight


class TestLibraryLoader:

    def test_exercise_from_dict(self):
        ex = exercise_from_dict({
            "name": " Sled Push ",
            "movement_pattern": "CARRY",
            "primary_muscles": "quads",
            "equipment": ["machine"],
            "compound": True,
        })
        assert ex.name == "Sled Push"
        assert ex.movement_pattern == MovementPattern.CARRY
        assert ex.primary_muscles == frozenset({Muscle.QUADS})

    def test_exercise_from_dict_errors(self):
        with pytest.raises(ValueError, match="missing"):
            exercise_from_dict({"name": "No Pattern"})
        with pytest.raises(ValueError, match="primary_muscles"):
            exercise_from_dict({"name": "X", "movement_pattern": "squat", "primary_muscles": ["wings"]})

    def test_invalid_entries_skipped(self, tmp_path):
        bundled = tmp_path / "bundled"
        bundled.mkdir()
        _write(bundled / "a.yaml", """\
            exercises:
              - name: Bench Press
                movement_pattern: horizontal_push
                primary_muscles: [chest]
                equipment: [barbell]
              - name: Broken
                movement_pattern: teleport
              - name: Plank
                movement_pattern: isolation
                primary_muscles: [core]
                equipment: [bodyweight]
        """)
        with pytest.warns(UserWarning, match="Broken"):
            library = load_exercises_from_yaml(bundled, tmp_path / "missing")
        assert [ex.name for ex in library] == ["Bench Press", "Plank"]

    def test_files_read_in_name_order_and_duplicates_dropped(self, tmp_path):
        bundled = tmp_path / "bundled"
        bundled.mkdir()
        _write(bundled / "20_b.yaml", """\
            exercises:
              - {name: Deadlift, movement_pattern: hinge}
              - {name: bench press, movement_pattern: horizontal_push}
        """)
        _write(bundled / "10_a.yaml", """\
            exercises:
              - {name: Bench Press, movement_pattern: horizontal_push}
        """)
        with pytest.warns(UserWarning, match="duplicate"):
            library = load_exercises_from_yaml(bundled, tmp_path / "missing")
        assert [ex.name for ex in library] == ["Bench Press", "Deadlift"]

    def test_user_entries_replace_and_append(self, tmp_path):
        bundled = tmp_path / "bundled"
        user = tmp_path / "user"
        bundled.mkdir()
        user.mkdir()
        _write(bundled / "a.yaml", """\
            exercises:
              - {name: Bench Press, movement_pattern: horizontal_push, equipment: [barbell]}
              - {name: Deadlift, movement_pattern: hinge, equipment: [barbell]}
        """)
        _write(user / "mine.yaml", """\
            exercises:
              - {name: bench press, movement_pattern: horizontal_push, equipment: [machine]}
              - {name: Sled Push, movement_pattern: carry}
        """)
        library = load_exercises_from_yaml(bundled, user)
        assert [ex.name for ex in library] == ["bench press", "Deadlift", "Sled Push"]
        assert library[0].load_class == LoadClass.MACHINE


# ===========================================================================
# serializers.py
# ===========================================================================

class TestSessionParsing:

    def test_full_notation(self):
        entry = parse_session_string("100 x 5 @ 9.5 *4", "2024-01-01")
        assert (entry.top_set_weight, entry.top_set_reps, entry.top_set_rpe) == (100, 5, 9.5)
        assert entry.total_sets == 4
        assert entry.e1rm == pytest.approx(116.667, abs=1e-3)

    def test_without_rpe(self):
        entry = parse_session_string("102.5x3", "2024-01-01")
        assert entry.top_set_rpe is None
        assert entry.total_sets == 1

    @pytest.mark.parametrize("text", ["abc", "100x", "x5", "100x5@"])
    def test_malformed(self, text):
        with pytest.raises(ValidationError):
            parse_session_string(text, "2024-01-01")

    def test_rpe_out_of_range(self):
        with pytest.raises(ValidationError):
            parse_session_string("100x5@11", "2024-01-01")

    def test_dated(self):
        entry = parse_dated_session("2024-03-01:100x5@9")
        assert entry.date == "2024-03-01"
        assert entry.top_set_rpe == 9
        with pytest.raises(ValidationError):
            parse_dated_session("100x5")
        with pytest.raises(ValidationError):
            parse_dated_session("2024-13-01:100x5")


class TestListParsing:

    def test_weights(self):
        assert parse_weight_list("25, 20,10") == (25, 20, 10)
        with pytest.raises(ValidationError):
            parse_weight_list("25,-5")
        with pytest.raises(ValidationError):
            parse_weight_list("heavy")

    def test_equipment(self):
        assert parse_equipment_list("Dumbbell, bench") == {Equipment.DUMBBELL, Equipment.BENCH}
        with pytest.raises(ValidationError, match="equipment"):
            parse_equipment_list("trampoline")

    def test_pain_flag(self):
        flag = parse_pain_flag("back:severe")
        assert (flag.body_part, flag.severity) == (BodyPart.BACK, PainSeverity.SEVERE)
        assert parse_pain_flag("shoulders").severity == PainSeverity.MILD
        with pytest.raises(ValidationError):
            parse_pain_flag("elbow")


class TestPrescriptionParsing:

    def test_presets(self):
        assert prescription_from_dict(None) == PrescriptionSpec()
        assert prescription_from_dict("strength") == PrescriptionSpec.strength()
        assert prescription_from_dict({"preset": "hypertrophy"}).progression_type == (
            ProgressionType.DOUBLE_PROGRESSION
        )

    def test_overrides(self):
        rx = prescription_from_dict({"preset": "strength", "rpe_cap": 8.5, "backoff_sets": "2"})
        assert rx.rpe_cap == 8.5
        assert rx.backoff_sets == 2
        assert rx.rep_range_min == 3

    @pytest.mark.parametrize(
        "data",
        [
            "powerbuilding",
            {"rep_range_min": 8, "rep_range_max": 6},
            {"rpe_cap": 12},
            {"progression_type": "wave"},
        ],
    )
    def test_invalid(self, data):
        with pytest.raises(ValidationError):
            prescription_from_dict(data)


class TestTemplateParsing:

    def test_load_class_taken_from_library(self):
        template = template_from_dict({
            "name": "Legs",
            "exercises": [
                {"name": "goblet squat"},
                {"name": "Leg Extension", "optional": True},
                {"name": "Mystery Lift"},
                {"name": "Deadlift", "load_class": "machine"},
            ],
        })
        goblet, extension, mystery, deadlift = template.exercises
        assert goblet.load_class == LoadClass.DUMBBELL
        assert extension.is_optional is True
        assert extension.is_compound is False
        assert mystery.load_class == LoadClass.BARBELL
        assert deadlift.load_class == LoadClass.MACHINE

    def test_empty_template_rejected(self):
        with pytest.raises(ValidationError):
            template_from_dict({"name": "Nothing", "exercises": []})
        with pytest.raises(ValidationError):
            template_from_dict({"exercises": [{"optional": True}]})

    def test_plan_request_round_trip_to_json(self):
        template, history, readiness = plan_request_from_dict({
            "template": {"name": "Upper", "exercises": [{"name": "Bench Press"}]},
            "history": {
                "Bench Press": [
                    "2024-03-01:100x5@8",
                    {"date": "2024-02-26", "weight": 97.5, "reps": 5, "rpe": 8},
                ],
            },
            "readiness": {"energy": "HIGH", "time_available_minutes": 45},
        })
        assert readiness.energy == EnergyLevel.HIGH
        assert len(history["Bench Press"]) == 2
        out = plan_to_dict(generate_plan(template, history, readiness))
        # must be JSON-serialisable as-is
        decoded = json.loads(json.dumps(out))
        assert decoded["exercises"][0]["top_set"]["weight"] == 100
        assert decoded["exercises"][0]["top_set"]["reps"] == 6

    def test_plan_request_errors(self):
        with pytest.raises(ValidationError, match="template"):
            plan_request_from_dict({"history": {}})
        with pytest.raises(ValidationError, match="missing field"):
            plan_request_from_dict({
                "template": {"exercises": [{"name": "Bench Press"}]},
                "history": {"Bench Press": [{"date": "2024-01-01", "weight": 100}]},
            })
        with pytest.raises(ValidationError):
            plan_request_from_dict({
                "template": {"exercises": [{"name": "Bench Press"}]},
                "readiness": {"energy": "sleepy"},
            })
