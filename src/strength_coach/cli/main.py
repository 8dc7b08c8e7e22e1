"""
CLI entry point using Typer.

Provides commands for the coaching core:
- plan: Generate today's plan from a template file
- stall: Diagnose a plateau from recent sessions
- weekly-review: Score a week of training
- e1rm: Estimate one-rep max
- plates: Barbell loading and warmup ramp
- exercises: List the exercise library
- match: Resolve free-text exercise names
- substitute: Equipment / pain-aware alternatives
"""

from .app import app
from .commands import exercises, lifts, planning  # noqa: F401  (registers commands)

if __name__ == "__main__":
    app()
