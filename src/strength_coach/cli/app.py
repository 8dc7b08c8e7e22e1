"""Shared Typer app object and shared option types."""

from typing import Annotated

import typer

from ..core.config import DEFAULT_BAR_WEIGHT_KG

# Shared --json option used across all commands
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

# Shared --bar option for barbell commands
BarWeightOption = Annotated[
    float,
    typer.Option("--bar", "-b", help="Empty bar weight in kg"),
]

DEFAULT_BAR = DEFAULT_BAR_WEIGHT_KG

app = typer.Typer(
    name="strength-coach",
    help="Offline strength coach: daily plans, stall detection, plate math and exercise matching.",
    no_args_is_help=True,
)
