"""Exercise library commands: exercises, match, substitute."""

import json
from typing import Annotated, Optional

import typer

from ...core.library import EXERCISE_LIBRARY, exercises_for_pattern, get_exercise
from ...core.matcher import match_names
from ...core.models import Equipment, MovementPattern
from ...core.substitution import find_substitutes, needs_substitution
from ...io.serializers import (
    ValidationError,
    exercise_to_dict,
    parse_equipment_list,
    parse_pain_flag,
)
from .. import views
from ..app import JsonOption, app


@app.command()
def exercises(
    pattern: Annotated[
        Optional[str],
        typer.Option("--pattern", help="Filter by movement pattern, e.g. squat, hinge"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    List the canonical exercise library.
    """
    if pattern is None:
        selected = list(EXERCISE_LIBRARY)
    else:
        try:
            selected = exercises_for_pattern(MovementPattern(pattern.strip().lower()))
        except ValueError:
            valid = ", ".join(p.value for p in MovementPattern)
            views.print_error(f"Unknown pattern '{pattern}'. Valid: {valid}")
            raise typer.Exit(1)

    if json_out:
        print(json.dumps([exercise_to_dict(ex) for ex in selected], indent=2))
        return

    views.console.print(views.format_exercise_table(selected))


@app.command()
def match(
    names: Annotated[list[str], typer.Argument(help="Free-text exercise names")],
    json_out: JsonOption = False,
) -> None:
    """
    Resolve free-text exercise names to library entries.
    """
    results = match_names(names, EXERCISE_LIBRARY)

    if json_out:
        print(json.dumps(
            {name: (ex.name if ex is not None else None) for name, ex in results.items()},
            indent=2,
        ))
        return

    for name, ex in results.items():
        if ex is None:
            views.console.print(f"[yellow]{name}[/yellow] → [dim]no match[/dim]")
        else:
            views.console.print(f"[cyan]{name}[/cyan] → [bold]{ex.name}[/bold]")


@app.command()
def substitute(
    name: Annotated[str, typer.Argument(help="Library exercise to replace")],
    equipment: Annotated[
        str,
        typer.Option(
            "--equipment", "-q",
            help="Comma-separated available equipment, e.g. dumbbell,bench",
        ),
    ] = ",".join(e.value for e in Equipment),
    pain: Annotated[
        Optional[list[str]],
        typer.Option("--pain", help="Pain area as BODY_PART[:SEVERITY]; repeatable"),
    ] = None,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", help="Maximum number of substitutes"),
    ] = 3,
    json_out: JsonOption = False,
) -> None:
    """
    Suggest substitutes given available equipment and pain flags.
    """
    try:
        source = get_exercise(name)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    try:
        available = parse_equipment_list(equipment)
        flags = [parse_pain_flag(p) for p in (pain or [])]
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    reason = needs_substitution(source, available, flags)
    ranked = find_substitutes(source.name, available, EXERCISE_LIBRARY, flags, limit=limit)

    if json_out:
        print(json.dumps({
            "exercise": source.name,
            "needs_substitution": reason.value if reason is not None else None,
            "substitutes": [
                {"name": ex.name, "score": score} for ex, score in ranked
            ],
        }, indent=2))
        return

    if reason is not None:
        views.print_warning(f"{source.name} cannot be performed as written ({reason.value})")
    if not ranked:
        views.print_info("No suitable substitutes found.")
        return
    views.console.print(views.format_substitutes_table(source.name, ranked))
