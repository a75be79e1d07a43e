"""
Weekly workout generation and lookup.

A profile is turned into one workout per planned weekday of the user's
current ISO week. Each day gets up to four catalog exercises matching the
day's muscle focus, all sharing the sets/reps/rest chosen for the user's
goal and level.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .catalog import ExerciseCatalog
from .db import repo
from .db.models import ExerciseTemplate
from .profile import Goal, Level, Profile
from .schedule import WeekKey, Weekday, muscle_focus, plan_days, week_key, weekday_of
from .schemas import PlannedExercise, WeeklyWorkout

logger = logging.getLogger(__name__)

MAX_EXERCISES_PER_DAY = 4


@dataclass(frozen=True)
class TrainingParameters:
    sets: int
    reps: str
    rest: str


TRAINING_PARAMETERS: dict[tuple[Goal, Level], TrainingParameters] = {
    (Goal.GAIN_MUSCLE, Level.BEGINNER): TrainingParameters(3, "8-12", "90s"),
    (Goal.GAIN_MUSCLE, Level.INTERMEDIATE): TrainingParameters(4, "6-10", "90s"),
    (Goal.GAIN_MUSCLE, Level.ADVANCED): TrainingParameters(4, "6-10", "90s"),
    (Goal.LOSE_FAT, Level.BEGINNER): TrainingParameters(3, "12-15", "60s"),
    (Goal.LOSE_FAT, Level.INTERMEDIATE): TrainingParameters(4, "10-12", "60s"),
    (Goal.LOSE_FAT, Level.ADVANCED): TrainingParameters(4, "10-12", "60s"),
    (Goal.MAINTAIN, Level.BEGINNER): TrainingParameters(3, "10-12", "75s"),
    (Goal.MAINTAIN, Level.INTERMEDIATE): TrainingParameters(3, "10-12", "75s"),
    (Goal.MAINTAIN, Level.ADVANCED): TrainingParameters(3, "10-12", "75s"),
}

GOAL_LABELS = {
    Goal.LOSE_FAT: "Fat Burn",
    Goal.GAIN_MUSCLE: "Muscle Gain",
    Goal.MAINTAIN: "Maintenance",
}


class GenerationStatus(str, enum.Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    FAILED = "failed"


@dataclass
class GenerationResult:
    status: GenerationStatus
    week: WeekKey
    days: list[int] = field(default_factory=list)
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is not GenerationStatus.FAILED

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "iso_year": self.week.iso_year,
            "week": self.week.week,
            "days": self.days,
            "reason": self.reason,
        }


def training_parameters(goal: Goal, level: Level) -> TrainingParameters:
    return TRAINING_PARAMETERS[(goal, level)]


def workout_name(day: int, goal: Goal) -> str:
    return f"{GOAL_LABELS[goal]} - {Weekday(day).label}"


def select_exercises_for_day(
    templates: Sequence[ExerciseTemplate], day: int
) -> list[ExerciseTemplate]:
    """First templates, in catalog order, that hit any muscle in the day's focus."""
    focus = muscle_focus(day)
    picked = [t for t in templates if focus.intersection(m.lower() for m in t.target_muscles)]
    return picked[:MAX_EXERCISES_PER_DAY]


def plan_exercises(
    templates: Iterable[ExerciseTemplate], params: TrainingParameters
) -> list[PlannedExercise]:
    return [
        PlannedExercise(
            id=t.id,
            name=t.name,
            sets=params.sets,
            reps=params.reps,
            rest=params.rest,
            description=t.description or "",
            muscles=list(t.target_muscles),
            video_url=t.video_url,
            image_url=t.image_url,
        )
        for t in templates
    ]


def build_week(
    user_id: str,
    profile: Profile,
    templates: Sequence[ExerciseTemplate],
    week: WeekKey,
) -> list[dict[str, Any]]:
    """Workout rows for every planned day of ``week``, ready to upsert."""
    params = training_parameters(profile.goal, profile.level)
    rows = []
    for day in plan_days(profile.frequency):
        exercises = plan_exercises(select_exercises_for_day(templates, day), params)
        rows.append(
            {
                "user_id": user_id,
                "iso_year": week.iso_year,
                "week": week.week,
                "day": int(day),
                "name": workout_name(day, profile.goal),
                "exercises": [e.model_dump() for e in exercises],
            }
        )
    return rows


async def generate_weekly_workout(
    user_id: str,
    profile: Profile,
    *,
    now: datetime | None = None,
    regenerate: bool = False,
    catalog: ExerciseCatalog | None = None,
) -> GenerationResult:
    """
    Build and store the user's plan for the current week.

    Without ``regenerate`` an existing plan for the week is left as it is and
    reported as ``ALREADY_EXISTS``. Failures talking to the catalog or the
    store are logged and reported as ``FAILED``; the stored plan is then
    unchanged.
    """
    week = week_key(now, profile.timezone)
    try:
        if not regenerate:
            existing = await repo.get_week_workouts(user_id, week.iso_year, week.week)
            if existing:
                logger.info("Plan for user %s already exists for %s", user_id, week)
                return GenerationResult(
                    GenerationStatus.ALREADY_EXISTS, week, [w.day for w in existing]
                )

        catalog = catalog or ExerciseCatalog()
        templates = await catalog.query(profile.level, profile.location)
        rows = build_week(user_id, profile, templates, week)
        await repo.upsert_workouts(rows)
    except Exception as e:
        logger.exception("Failed to generate weekly workout for user %s: %s", user_id, e)
        return GenerationResult(GenerationStatus.FAILED, week, reason=str(e) or type(e).__name__)

    days = [row["day"] for row in rows]
    logger.info(
        "Generated plan for user %s week %s: goal=%s level=%s days=%s",
        user_id,
        week,
        profile.goal.value,
        profile.level.value,
        days,
    )
    return GenerationResult(GenerationStatus.CREATED, week, days)


async def get_todays_workout(
    user_id: str, *, tz: str = "UTC", now: datetime | None = None
) -> WeeklyWorkout | None:
    """The stored workout for today in ``tz``, or None on a rest day or before generation."""
    week = week_key(now, tz)
    day = weekday_of(now, tz)
    workout = await repo.get_workout(user_id, week.iso_year, week.week, int(day))
    if workout is None:
        logger.debug("No workout for user %s on %s day %d", user_id, week, day)
    return workout
