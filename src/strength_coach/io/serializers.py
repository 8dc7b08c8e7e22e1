"""
Parsing and serialization for coaching inputs and results.

Converts between the core dataclasses and plain dicts (from YAML files or
for JSON output), and parses the compact set notation used on the
command line.
"""

import re
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from ..core.models import (
    BodyPart,
    EnergyLevel,
    Equipment,
    Exercise,
    ExercisePlan,
    GeneratedPlan,
    LoadClass,
    PainFlag,
    PainSeverity,
    PlannedSet,
    PrescriptionSpec,
    ProgressionType,
    ReadinessState,
    SessionHistoryEntry,
    SorenessLevel,
    StallResult,
    TemplateExercise,
    WorkoutTemplate,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


_PRESETS = {
    "default": PrescriptionSpec.default,
    "strength": PrescriptionSpec.strength,
    "hypertrophy": PrescriptionSpec.hypertrophy,
}

_PRESCRIPTION_INT_FIELDS = (
    "rep_range_min",
    "rep_range_max",
    "backoff_sets",
    "backoff_rep_range_min",
    "backoff_rep_range_max",
    "working_sets",
)
_PRESCRIPTION_FLOAT_FIELDS = ("rpe_cap", "backoff_load_drop_percent")

# 100x5, 100 x 5 @ 9.5, 102.5x3@8 *4  (weight x reps [@ rpe] [* total sets])
_SESSION_RE = re.compile(
    r"^\s*(?P<weight>\d+(?:\.\d+)?)\s*(?:kg)?\s*[xX×]\s*(?P<reps>\d+)"
    r"(?:\s*@\s*(?P<rpe>\d+(?:\.\d+)?))?"
    r"(?:\s*\*\s*(?P<sets>\d+))?\s*$"
)


def validate_date(date_str: str) -> str:
    """
    Validate and normalize date string to ISO format.

    Args:
        date_str: Date string to validate

    Returns:
        Normalized YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    date_str = date_str.strip()
    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def _enum_value(enum_cls, value: Any, name: str):
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {name}: {value!r}. Must be one of {valid}") from None


# =============================================================================
# PARSING
# =============================================================================


def parse_session_string(text: str, date: str) -> SessionHistoryEntry:
    """
    Parse a compact top-set string into a history entry.

    Format: ``WEIGHTxREPS[@RPE][*SETS]``

    Examples:
        "100x5"         → 100 kg × 5, no RPE
        "100 x 5 @ 9.5" → 100 kg × 5 at RPE 9.5
        "60x8@8*4"      → 60 kg × 8 at RPE 8, 4 sets that day

    Raises:
        ValidationError: If the string or date is malformed
    """
    m = _SESSION_RE.match(text)
    if m is None:
        raise ValidationError(
            f"Invalid session: {text!r}. Expected WEIGHTxREPS[@RPE][*SETS], e.g. 100x5@8.5"
        )
    date = validate_date(date)
    rpe = float(m.group("rpe")) if m.group("rpe") is not None else None
    sets = int(m.group("sets")) if m.group("sets") is not None else 1
    try:
        return SessionHistoryEntry(
            date=date,
            top_set_weight=float(m.group("weight")),
            top_set_reps=int(m.group("reps")),
            top_set_rpe=rpe,
            total_sets=sets,
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def parse_dated_session(text: str) -> SessionHistoryEntry:
    """
    Parse ``YYYY-MM-DD:WEIGHTxREPS[@RPE][*SETS]``.

    Example: "2024-03-01:100x5@9"
    """
    date, sep, rest = text.partition(":")
    if not sep:
        raise ValidationError(
            f"Invalid session: {text!r}. Expected YYYY-MM-DD:WEIGHTxREPS[@RPE]"
        )
    return parse_session_string(rest, date)


def parse_weight_list(text: str) -> tuple[float, ...]:
    """Parse "25,20,15" into positive weights."""
    try:
        weights = tuple(float(part) for part in text.split(",") if part.strip())
    except ValueError as e:
        raise ValidationError(f"Invalid weight list: {text!r}") from e
    if not weights or any(w <= 0 for w in weights):
        raise ValidationError(f"Weight list must contain positive numbers: {text!r}")
    return weights


def parse_equipment_list(text: str) -> set[Equipment]:
    """Parse "barbell,dumbbell,rack" into Equipment values."""
    return {
        _enum_value(Equipment, part, "equipment")
        for part in text.split(",")
        if part.strip()
    }


def parse_pain_flag(text: str) -> PainFlag:
    """
    Parse ``BODY_PART[:SEVERITY]`` into an active pain flag.

    Example: "shoulders", "back:severe"
    """
    part, _, severity = text.partition(":")
    return PainFlag(
        body_part=_enum_value(BodyPart, part, "body part"),
        severity=_enum_value(PainSeverity, severity or "mild", "severity"),
    )


# =============================================================================
# DICT → MODEL
# =============================================================================


def prescription_from_dict(data: dict[str, Any] | str | None) -> PrescriptionSpec:
    """
    Build a PrescriptionSpec from a preset name or a dict.

    A dict may name a ``preset`` and override any individual field:
        {"preset": "strength", "rpe_cap": 8.5}

    Raises:
        ValidationError: On unknown presets, progression types or bad ranges
    """
    if data is None:
        return PrescriptionSpec.default()
    if isinstance(data, str):
        data = {"preset": data}
    if not isinstance(data, dict):
        raise ValidationError(f"Invalid prescription: {data!r}")

    preset_name = str(data.get("preset", "default")).lower()
    if preset_name not in _PRESETS:
        raise ValidationError(
            f"Unknown prescription preset '{preset_name}'. Valid: {', '.join(_PRESETS)}"
        )
    base = _PRESETS[preset_name]()

    overrides: dict[str, Any] = {}
    if "progression_type" in data:
        overrides["progression_type"] = _enum_value(
            ProgressionType, data["progression_type"], "progression_type"
        )
    try:
        for key in _PRESCRIPTION_INT_FIELDS:
            if key in data:
                overrides[key] = int(data[key])
        for key in _PRESCRIPTION_FLOAT_FIELDS:
            if key in data:
                overrides[key] = float(data[key])
        return replace(base, **overrides)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid prescription: {e}") from e


def template_exercise_from_dict(data: dict[str, Any]) -> TemplateExercise:
    """
    Convert a template slot dict to a TemplateExercise.

    When ``load_class`` / ``compound`` are omitted they are taken from the
    library entry of the same name, falling back to barbell / compound.
    """
    if not isinstance(data, dict) or not str(data.get("name", "")).strip():
        raise ValidationError(f"Template exercise needs a name: {data!r}")
    name = str(data["name"]).strip()

    load_class: LoadClass = LoadClass.BARBELL
    is_compound = True
    from ..core.library import get_exercise

    try:
        known = get_exercise(name)
    except ValueError:
        known = None
    if known is not None:
        load_class = known.load_class
        is_compound = known.is_compound

    if "load_class" in data:
        load_class = _enum_value(LoadClass, data["load_class"], "load_class")
    if "compound" in data:
        is_compound = bool(data["compound"])

    return TemplateExercise(
        name=name,
        prescription=prescription_from_dict(data.get("prescription")),
        is_optional=bool(data.get("optional", False)),
        load_class=load_class,
        is_compound=is_compound,
    )


def template_from_dict(data: dict[str, Any]) -> WorkoutTemplate:
    """
    Convert a template dict (from YAML) to a WorkoutTemplate.

    Expected layout:
        name: Upper A
        exercises:
          - name: Bench Press
            prescription: strength
          - name: Lateral Raise
            optional: true
            prescription: {preset: hypertrophy}
    """
    if not isinstance(data, dict):
        raise ValidationError("Template must be a mapping")
    raw = data.get("exercises")
    if not isinstance(raw, list) or not raw:
        raise ValidationError("Template must list at least one exercise")
    return WorkoutTemplate(
        name=str(data.get("name", "Workout")),
        exercises=tuple(template_exercise_from_dict(item) for item in raw),
    )


def history_entry_from_dict(data: dict[str, Any] | str) -> SessionHistoryEntry:
    """
    Convert a history dict or a dated compact string to an entry.

    Dict keys: date, weight, reps, rpe (optional), sets (optional).
    """
    if isinstance(data, str):
        return parse_dated_session(data)
    if not isinstance(data, dict):
        raise ValidationError(f"Invalid history entry: {data!r}")
    try:
        return SessionHistoryEntry(
            date=validate_date(str(data["date"])),
            top_set_weight=float(data["weight"]),
            top_set_reps=int(data["reps"]),
            top_set_rpe=float(data["rpe"]) if data.get("rpe") is not None else None,
            total_sets=int(data.get("sets", 1)),
        )
    except KeyError as e:
        raise ValidationError(f"History entry missing field: {e.args[0]}") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid history entry {data!r}: {e}") from e


def history_from_dict(data: dict[str, Any] | None) -> dict[str, list[SessionHistoryEntry]]:
    """Convert ``{exercise name: [entries]}`` to history entries."""
    if not data:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("History must map exercise names to session lists")
    history: dict[str, list[SessionHistoryEntry]] = {}
    for name, entries in data.items():
        if not isinstance(entries, list):
            raise ValidationError(f"History for {name!r} must be a list")
        history[str(name)] = [history_entry_from_dict(e) for e in entries]
    return history


def readiness_from_dict(data: dict[str, Any] | None) -> ReadinessState:
    if not data:
        return ReadinessState.default()
    try:
        return ReadinessState(
            energy=_enum_value(EnergyLevel, data.get("energy", "ok"), "energy"),
            soreness=_enum_value(SorenessLevel, data.get("soreness", "none"), "soreness"),
            time_available_minutes=int(data.get("time_available_minutes", 60)),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid readiness: {e}") from e


# =============================================================================
# MODEL → DICT
# =============================================================================


def planned_set_to_dict(planned_set: PlannedSet) -> dict[str, Any]:
    """
    Convert PlannedSet to JSON-compatible dict.

    Args:
        planned_set: PlannedSet to convert

    Returns:
        Dict representation
    """
    return {
        "weight": planned_set.weight,
        "reps": planned_set.reps,
        "rpe_cap": planned_set.rpe_cap,
        "set_count": planned_set.set_count,
    }


def exercise_plan_to_dict(plan: ExercisePlan) -> dict[str, Any]:
    return {
        "exercise_name": plan.exercise_name,
        "warmup_sets": [planned_set_to_dict(s) for s in plan.warmup_sets],
        "top_set": planned_set_to_dict(plan.top_set) if plan.top_set is not None else None,
        "backoff_sets": [planned_set_to_dict(s) for s in plan.backoff_sets],
        "working_sets": [planned_set_to_dict(s) for s in plan.working_sets],
        "total_sets": plan.total_sets,
    }


def plan_to_dict(plan: GeneratedPlan) -> dict[str, Any]:
    """Convert GeneratedPlan to JSON-compatible dict."""
    return {
        "exercises": [exercise_plan_to_dict(e) for e in plan.exercises],
        "adjustments": list(plan.adjustments),
        "reasoning": list(plan.reasoning),
        "estimated_duration_minutes": plan.estimated_duration_minutes,
    }


def stall_result_to_dict(result: StallResult) -> dict[str, Any]:
    return {
        "is_stalled": result.is_stalled,
        "reason": result.reason,
        "suggested_fix": result.suggested_fix,
        "fix_type": result.fix_type.value if result.fix_type is not None else None,
        "details": result.details,
    }


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    """Convert Exercise to JSON-compatible dict (sets become sorted lists)."""
    return {
        "name": exercise.name,
        "movement_pattern": exercise.movement_pattern.value,
        "primary_muscles": sorted(m.value for m in exercise.primary_muscles),
        "secondary_muscles": sorted(m.value for m in exercise.secondary_muscles),
        "equipment": sorted(e.value for e in exercise.equipment_required),
        "compound": exercise.is_compound,
        "load_class": exercise.load_class.value,
    }


# =============================================================================
# PLAN FILES
# =============================================================================


def plan_request_from_dict(
    data: dict[str, Any],
) -> tuple[WorkoutTemplate, dict[str, list[SessionHistoryEntry]], ReadinessState]:
    """
    Split a plan file into template, history and readiness.

    Expected layout:
        template: {name: ..., exercises: [...]}
        history: {Bench Press: ["2024-03-01:100x5@8", ...]}
        readiness: {energy: ok, soreness: none, time_available_minutes: 60}
    """
    if not isinstance(data, dict):
        raise ValidationError("Plan file must be a mapping")
    if "template" not in data:
        raise ValidationError("Plan file is missing the 'template' section")
    return (
        template_from_dict(data["template"]),
        history_from_dict(data.get("history")),
        readiness_from_dict(data.get("readiness")),
    )


def load_plan_file(
    path: Path,
) -> tuple[WorkoutTemplate, dict[str, list[SessionHistoryEntry]], ReadinessState]:
    """
    Read a YAML plan file.

    Raises:
        ValidationError: If the file is missing, unparsable or malformed
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except FileNotFoundError as e:
        raise ValidationError(f"Plan file not found: {path}") from e
    except (OSError, yaml.YAMLError) as e:
        raise ValidationError(f"Cannot read plan file {path}: {e}") from e
    return plan_request_from_dict(data)
