"""Lift arithmetic commands: e1rm, plates."""

import json
from typing import Annotated, Optional

import typer

from ...core.e1rm import calculate, calculate_brzycki, percentage_of_1rm, weight_for_reps
from ...core.plate_math import (
    STANDARD_PLATES,
    format_plates,
    format_weight,
    loading_instruction,
    nearest_loadable,
    plates_per_side,
    warmup_weights,
)
from ...io.serializers import ValidationError, parse_weight_list
from .. import views
from ..app import DEFAULT_BAR, BarWeightOption, JsonOption, app


@app.command()
def e1rm(
    weight: Annotated[float, typer.Argument(help="Weight lifted (kg)")],
    reps: Annotated[int, typer.Argument(help="Reps performed")],
    formula: Annotated[
        str,
        typer.Option("--formula", "-f", help="epley (default) or brzycki"),
    ] = "epley",
    json_out: JsonOption = False,
) -> None:
    """
    Estimate one-rep max from a set.
    """
    formula = formula.lower()
    if formula not in ("epley", "brzycki"):
        views.print_error(f"Unknown formula '{formula}'. Use epley or brzycki.")
        raise typer.Exit(1)
    if weight < 0:
        views.print_error("Weight must be non-negative")
        raise typer.Exit(1)

    estimate = calculate(weight, reps) if formula == "epley" else calculate_brzycki(weight, reps)

    if json_out:
        print(json.dumps({
            "weight": weight,
            "reps": reps,
            "formula": formula,
            "e1rm": round(estimate, 2),
            "percentage_of_1rm": round(percentage_of_1rm(weight, reps), 2),
            "rep_maxes": {
                str(r): round(weight_for_reps(estimate, r), 2) for r in range(1, 13)
            },
        }, indent=2))
        return

    views.console.print()
    views.console.print(
        f"[bold]{format_weight(weight)}kg x {reps}[/bold] → e1RM "
        f"[bold cyan]{estimate:.1f}kg[/bold cyan] ({formula})"
    )
    if estimate > 0:
        views.console.print(views.format_rep_table(estimate))
    views.console.print()


@app.command()
def plates(
    target: Annotated[float, typer.Argument(help="Total weight including the bar (kg)")],
    bar: BarWeightOption = DEFAULT_BAR,
    available: Annotated[
        Optional[str],
        typer.Option("--plates", help="Comma-separated plate sizes, e.g. 20,10,5,2.5"),
    ] = None,
    warmups: Annotated[
        bool,
        typer.Option("--warmups", "-w", help="Also show a warmup ramp to the target"),
    ] = False,
    json_out: JsonOption = False,
) -> None:
    """
    Show how to load a barbell for a target weight.
    """
    try:
        plate_set = parse_weight_list(available) if available else STANDARD_PLATES
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    per_side = plates_per_side(target, bar, plate_set)
    nearest = nearest_loadable(target, bar, plate_set)
    ramp = warmup_weights(target, bar, plate_set) if warmups else []

    if json_out:
        print(json.dumps({
            "target": target,
            "bar_weight": bar,
            "plates_per_side": per_side,
            "loadable": per_side is not None,
            "nearest_loadable": nearest,
            "instruction": loading_instruction(target, bar, plate_set),
            "warmups": [
                {"weight": w, "plates_per_side": plates_per_side(w, bar, plate_set)}
                for w in ramp
            ],
        }, indent=2))
        return

    views.console.print()
    views.console.print(f"[bold]{format_weight(target)}kg[/bold]: {loading_instruction(target, bar, plate_set)}")
    if per_side is None:
        views.print_info(
            f"Nearest loadable: {format_weight(nearest)}kg "
            f"({loading_instruction(nearest, bar, plate_set)})"
        )
    for w in ramp:
        side = plates_per_side(w, bar, plate_set) or []
        views.console.print(f"  [dim]warmup {format_weight(w):>6}kg  {format_plates(side)}[/dim]")
    views.console.print()
