"""Planning commands: plan, stall, weekly-review."""

import json
from dataclasses import replace
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.config import load_stall_thresholds
from ...core.models import EnergyLevel, SorenessLevel
from ...core.progression import LoadingSetup, generate_plan
from ...core.review import WeeklyReviewContext, generate_weekly_review
from ...core.stall import analyze_stall, newest_first
from ...io.serializers import (
    ValidationError,
    load_plan_file,
    parse_dated_session,
    plan_to_dict,
    stall_result_to_dict,
)
from .. import views
from ..app import DEFAULT_BAR, BarWeightOption, JsonOption, app


@app.command()
def plan(
    plan_file: Annotated[
        Path,
        typer.Argument(help="YAML file with template, history and optional readiness"),
    ],
    energy: Annotated[
        Optional[str],
        typer.Option("--energy", help="Override readiness energy: low, ok, high"),
    ] = None,
    soreness: Annotated[
        Optional[str],
        typer.Option("--soreness", help="Override readiness soreness: none, mild, high"),
    ] = None,
    time_available: Annotated[
        Optional[int],
        typer.Option("--time", "-t", help="Override minutes available"),
    ] = None,
    bar: BarWeightOption = DEFAULT_BAR,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show every set per exercise"),
    ] = False,
    json_out: JsonOption = False,
) -> None:
    """
    Generate today's plan from a workout template and history.
    """
    try:
        template, history, readiness = load_plan_file(plan_file)
        if energy is not None:
            readiness = replace(readiness, energy=EnergyLevel(energy.lower()))
        if soreness is not None:
            readiness = replace(readiness, soreness=SorenessLevel(soreness.lower()))
        if time_available is not None:
            readiness = replace(readiness, time_available_minutes=time_available)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    except ValueError as e:
        views.print_error(f"Invalid readiness option: {e}")
        raise typer.Exit(1)

    result = generate_plan(template, history, readiness, LoadingSetup(bar_weight=bar))

    if json_out:
        print(json.dumps(plan_to_dict(result), indent=2))
        return

    views.console.print()
    views.console.print(f"[bold cyan]{template.name}[/bold cyan]")
    if verbose:
        for ex in result.exercises:
            views.print_exercise_plan(ex)
        views.console.print()
    views.print_plan(result, bar_weight=bar)


@app.command()
def stall(
    exercise: Annotated[str, typer.Argument(help="Exercise name")],
    sessions: Annotated[
        list[str],
        typer.Option(
            "--session", "-s",
            help="Session as YYYY-MM-DD:WEIGHTxREPS[@RPE]; repeat for each session",
        ),
    ],
    json_out: JsonOption = False,
) -> None:
    """
    Check whether a lift has plateaued and what to do about it.
    """
    try:
        entries = newest_first(parse_dated_session(s) for s in sessions)
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    result = analyze_stall(exercise, entries, thresholds=load_stall_thresholds())

    if json_out:
        print(json.dumps(stall_result_to_dict(result), indent=2))
        return

    views.console.print()
    views.print_stall_result(exercise, result)
    views.console.print()


@app.command("weekly-review")
def weekly_review(
    workouts: Annotated[int, typer.Option("--workouts", "-w", help="Workouts completed")] = 0,
    volume: Annotated[float, typer.Option("--volume", help="Total volume in kg")] = 0.0,
    avg_duration: Annotated[
        int,
        typer.Option("--avg-duration", help="Average session length in minutes"),
    ] = 0,
    json_out: JsonOption = False,
) -> None:
    """
    Score and summarise a week of training.
    """
    try:
        context = WeeklyReviewContext(
            workout_count=workouts,
            total_volume=volume,
            average_duration_minutes=avg_duration,
        )
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    review = generate_weekly_review(context)

    if json_out:
        print(json.dumps({
            "summary": review.summary,
            "highlights": list(review.highlights),
            "areas_to_improve": list(review.areas_to_improve),
            "recommendation": review.recommendation,
            "consistency_score": review.consistency_score,
        }, indent=2))
        return

    views.print_weekly_review(review)
