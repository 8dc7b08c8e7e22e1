"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of coaching results.
"""

from rich.console import Console
from rich.table import Table

from ..core.models import Exercise, ExercisePlan, GeneratedPlan, PlannedSet, StallResult
from ..core.plate_math import format_weight, loading_instruction
from ..core.review import WeeklyReview

console = Console()


def _fmt_set(s: PlannedSet) -> str:
    text = f"{format_weight(s.weight)}kg x {s.reps}"
    if s.set_count > 1:
        text = f"{s.set_count} x ({text})"
    if s.rpe_cap is not None:
        text += f" @ RPE ≤{format_weight(s.rpe_cap)}"
    return text


def _fmt_warmups(sets: tuple[PlannedSet, ...]) -> str:
    if not sets:
        return "-"
    return ", ".join(f"{format_weight(s.weight)}x{s.reps}" for s in sets)


def format_plan_table(plan: GeneratedPlan) -> Table:
    """
    Create a Rich table for a generated plan.

    Args:
        plan: Plan to display

    Returns:
        Rich Table object
    """
    table = Table(title=f"Today's Plan (~{plan.estimated_duration_minutes} min)")

    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Exercise", style="cyan")
    table.add_column("Warmups", style="dim")
    table.add_column("Top / working", style="bold")
    table.add_column("Backoffs")
    table.add_column("Sets", justify="right")

    for i, ex in enumerate(plan.exercises, 1):
        main = ex.top_set if ex.top_set is not None else (ex.working_sets[0] if ex.working_sets else None)
        table.add_row(
            str(i),
            ex.exercise_name,
            _fmt_warmups(ex.warmup_sets),
            _fmt_set(main) if main is not None else "-",
            ", ".join(_fmt_set(s) for s in ex.backoff_sets) or "-",
            str(ex.total_sets),
        )

    return table


def print_plan(plan: GeneratedPlan, bar_weight: float | None = None) -> None:
    """
    Print a generated plan with adjustments and reasoning.

    Args:
        plan: Plan to display
        bar_weight: When given, loading instructions are shown for top sets
    """
    if not plan.exercises:
        console.print("[yellow]No exercises planned.[/yellow]")
        return

    console.print(format_plan_table(plan))

    if bar_weight is not None:
        for ex in plan.exercises:
            if ex.top_set is not None and ex.top_set.weight > bar_weight:
                console.print(
                    f"  [dim]{ex.exercise_name}:[/dim] "
                    f"{loading_instruction(ex.top_set.weight, bar_weight)}"
                )

    if plan.adjustments:
        console.print()
        console.print("[bold]Adjustments[/bold]")
        for line in plan.adjustments:
            console.print(f"  • {line}")

    if plan.reasoning:
        console.print()
        console.print("[bold]Reasoning[/bold]")
        for line in plan.reasoning:
            console.print(f"  [dim]{line}[/dim]")
    console.print()


def print_stall_result(exercise_name: str, result: StallResult) -> None:
    """Print a stall diagnosis."""
    if not result.is_stalled:
        console.print(f"[green]{exercise_name}: not stalled[/green]")
        if result.details:
            console.print(f"  [dim]{result.details}[/dim]")
        return

    label = result.fix_type.display_name if result.fix_type is not None else "Regression"
    console.print(f"[red]{exercise_name}: stalled[/red] ([bold]{label}[/bold])")
    if result.reason:
        console.print(f"  Reason: {result.reason}")
    if result.suggested_fix:
        console.print(f"  Fix:    {result.suggested_fix}")
    if result.details:
        console.print(f"  [dim]{result.details}[/dim]")


def format_exercise_table(exercises: list[Exercise], title: str = "Exercise Library") -> Table:
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Pattern", style="magenta")
    table.add_column("Primary")
    table.add_column("Equipment", style="green")
    table.add_column("Type", style="dim")

    for ex in exercises:
        table.add_row(
            ex.name,
            ex.movement_pattern.value,
            ", ".join(sorted(m.value for m in ex.primary_muscles)) or "-",
            ", ".join(sorted(e.value for e in ex.equipment_required)) or "-",
            "compound" if ex.is_compound else "isolation",
        )
    return table


def format_substitutes_table(source: str, ranked: list[tuple[Exercise, float]]) -> Table:
    table = Table(title=f"Substitutes for {source}")
    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Exercise", style="cyan")
    table.add_column("Score", justify="right", style="bold")
    table.add_column("Equipment", style="green")

    for i, (ex, score) in enumerate(ranked, 1):
        table.add_row(
            str(i),
            ex.name,
            f"{score:g}",
            ", ".join(sorted(e.value for e in ex.equipment_required)) or "-",
        )
    return table


def format_rep_table(e1rm: float, max_reps: int = 12) -> Table:
    """Rep-max table derived from an e1RM."""
    from ..core.e1rm import weight_for_reps

    table = Table(title=f"Estimated rep maxes (e1RM {e1rm:.1f}kg)")
    table.add_column("Reps", justify="right", style="cyan")
    table.add_column("Weight (kg)", justify="right", style="bold")
    table.add_column("% 1RM", justify="right", style="dim")

    for reps in range(1, max_reps + 1):
        w = weight_for_reps(e1rm, reps)
        pct = w / e1rm * 100 if e1rm > 0 else 0.0
        table.add_row(str(reps), f"{w:.1f}", f"{pct:.0f}%")
    return table


def print_weekly_review(review: WeeklyReview) -> None:
    console.print()
    console.print(f"[bold]Consistency:[/bold] {review.consistency_score}/10")
    console.print(review.summary)
    console.print()
    console.print("[bold green]Highlights[/bold green]")
    for line in review.highlights:
        console.print(f"  • {line}")
    console.print("[bold yellow]Areas to improve[/bold yellow]")
    for line in review.areas_to_improve:
        console.print(f"  • {line}")
    console.print()
    console.print(f"[bold]Next week:[/bold] {review.recommendation}")
    console.print()


def print_exercise_plan(plan: ExercisePlan) -> None:
    """Print a single exercise prescription line by line."""
    console.print(f"[bold cyan]{plan.exercise_name}[/bold cyan]")
    for s in plan.warmup_sets:
        console.print(f"  [dim]warmup  {_fmt_set(s)}[/dim]")
    if plan.top_set is not None:
        console.print(f"  top     {_fmt_set(plan.top_set)}")
    for s in plan.backoff_sets:
        console.print(f"  backoff {_fmt_set(s)}")
    for s in plan.working_sets:
        console.print(f"  working {_fmt_set(s)}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
