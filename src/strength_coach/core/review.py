"""
Post-session insight and weekly review.

Rule-based summaries of completed training: a one-line takeaway after a
session and a scored review of the last week.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Final

# Consistency score by workouts completed in the week (5+ uses the last entry)
CONSISTENCY_SCORES: Final[tuple[tuple[int, str], ...]] = (
    (1, "No workouts recorded this period."),
    (3, "You completed 1 workout."),
    (5, "You completed 2 workouts."),
    (7, "You completed 3 workouts. Good consistency!"),
    (8, "You completed 4 workouts. Excellent consistency!"),
    (9, "You completed {count} workouts. Outstanding commitment!"),
)

HIGH_VOLUME_KG: Final[float] = 15000.0
ON_TRACK_VOLUME_KG: Final[float] = 10000.0
SOLID_VOLUME_KG: Final[float] = 8000.0
TARGET_WEEKLY_WORKOUTS: Final[int] = 3
FREQUENT_WEEKLY_WORKOUTS: Final[int] = 4
SHORT_SESSION_MINUTES: Final[int] = 40
MAX_PR_NAMES: Final[int] = 3


class InsightCategory(str, Enum):
    PROGRESS = "progress"
    FATIGUE = "fatigue"
    TECHNIQUE = "technique"
    VOLUME = "volume"


@dataclass(frozen=True)
class ExerciseSummary:
    """How one exercise went in a finished session."""

    name: str
    e1rm: float
    target_hit: bool = True
    previous_e1rm: float | None = None


@dataclass(frozen=True)
class Insight:
    insight: str
    action: str
    category: InsightCategory


@dataclass(frozen=True)
class WeeklyExerciseHighlight:
    exercise_name: str
    sessions: int
    best_e1rm: float
    previous_best_e1rm: float | None = None
    total_volume: float = 0.0

    @property
    def is_pr(self) -> bool:
        return self.previous_best_e1rm is not None and self.best_e1rm > self.previous_best_e1rm


@dataclass(frozen=True)
class WeeklyReviewContext:
    workout_count: int
    total_volume: float
    average_duration_minutes: int
    exercise_highlights: tuple[WeeklyExerciseHighlight, ...] = ()

    def __post_init__(self) -> None:
        if self.workout_count < 0:
            raise ValueError("workout_count must be non-negative")
        if self.total_volume < 0:
            raise ValueError("total_volume must be non-negative")


@dataclass(frozen=True)
class WeeklyReview:
    summary: str
    highlights: tuple[str, ...]
    areas_to_improve: tuple[str, ...]
    recommendation: str
    consistency_score: int  # 1-10


def generate_insight(exercises: list[ExerciseSummary]) -> Insight:
    """
    Single most relevant takeaway from a finished session.

    e1RM improvements and missed rep targets are collected in exercise
    order; the first one wins.  A generic message is returned otherwise.
    """
    insights: list[Insight] = []
    for exercise in exercises:
        prev = exercise.previous_e1rm
        if prev is not None and prev > 0 and exercise.e1rm > prev:
            improvement = (exercise.e1rm - prev) / prev * 100
            insights.append(Insight(
                insight=f"{exercise.name} e1RM improved by {improvement:.1f}%",
                action="Keep current progression, add weight next session",
                category=InsightCategory.PROGRESS,
            ))
        if not exercise.target_hit:
            insights.append(Insight(
                insight=f"{exercise.name} missed rep target",
                action="Keep weight the same, focus on hitting target reps next time",
                category=InsightCategory.FATIGUE,
            ))

    if not insights:
        return Insight(
            insight="Solid workout completed",
            action="Continue current program, small weight increases where possible",
            category=InsightCategory.PROGRESS,
        )
    return insights[0]


def consistency(workout_count: int) -> tuple[int, str]:
    """Score (1-10) and message for a week's workout count."""
    idx = min(max(workout_count, 0), len(CONSISTENCY_SCORES) - 1)
    score, message = CONSISTENCY_SCORES[idx]
    return score, message.format(count=workout_count)


def generate_weekly_review(context: WeeklyReviewContext) -> WeeklyReview:
    """
    Score and summarise a week of training.

    Args:
        context: Aggregated workouts, volume and per-exercise bests

    Returns:
        WeeklyReview with at least one highlight and one improvement area
    """
    count = context.workout_count
    prs = [h for h in context.exercise_highlights if h.is_pr]

    highlights: list[str] = []
    areas: list[str] = []

    if prs:
        names = ", ".join(h.exercise_name for h in prs[:MAX_PR_NAMES])
        highlights.append(f"Hit PRs on {names}")

    score, summary = consistency(count)

    if count >= FREQUENT_WEEKLY_WORKOUTS:
        highlights.append("Maintained excellent training frequency")

    if context.total_volume > HIGH_VOLUME_KG:
        highlights.append(f"High training volume ({int(context.total_volume // 1000)}k kg)")
    elif context.total_volume > SOLID_VOLUME_KG:
        highlights.append("Solid training volume this week")

    if count < TARGET_WEEKLY_WORKOUTS:
        areas.append("Try to fit in at least 3 sessions per week for optimal progress")
    if not prs and count >= 2:
        areas.append("Focus on progressive overload - aim for small weight or rep increases")
    if context.average_duration_minutes < SHORT_SESSION_MINUTES and count > 0:
        areas.append("Consider longer sessions to include more accessory work")

    if prs:
        summary += f" You set {len(prs)} personal record(s)."
    if context.total_volume > ON_TRACK_VOLUME_KG:
        summary += " Your volume is on track."
    elif count > 0:
        summary += " There's room to increase volume if recovery allows."

    if count < 2:
        recommendation = "Prioritize getting to the gym at least 3 times this week."
    elif not prs:
        recommendation = "Focus on adding 1 rep or 2.5kg to your main lifts this week."
    elif context.total_volume > HIGH_VOLUME_KG:
        recommendation = "Monitor fatigue levels and consider a lighter week if needed."
    else:
        recommendation = "Keep up the momentum! Stay consistent and trust the process."

    return WeeklyReview(
        summary=summary,
        highlights=tuple(highlights or ["Showed up and put in the work"]),
        areas_to_improve=tuple(areas or ["Keep pushing - you're on track"]),
        recommendation=recommendation,
        consistency_score=score,
    )
