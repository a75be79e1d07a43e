"""
Service for the dashboard and the weekly progress summary.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Any

from ..db import repo
from ..goals import calculate_daily_goals
from ..profile import Profile
from ..schedule import WeekKey, local_date, week_key
from ..schemas import ProgressSummary, WeekProgress
from ..workout_generator import get_todays_workout
from .nutrition_service import NutritionService

CALORIE_TOLERANCE = 0.10
CONSISTENCY_THRESHOLD = 80


def _mean(values: list[int]) -> int:
    return round(sum(values) / len(values)) if values else 0


class ProgressService:
    """Aggregates goals, workouts and meals into summaries."""

    def __init__(self, nutrition: NutritionService | None = None):
        self.nutrition = nutrition or NutritionService()

    async def dashboard(self, profile: Profile, now: datetime | None = None) -> dict[str, Any]:
        goals = calculate_daily_goals(profile)
        workout = await get_todays_workout(profile.user_id, tz=profile.timezone, now=now)
        stats = await self.nutrition.daily_stats(
            profile.user_id, local_date(now, profile.timezone)
        )
        return {
            "name": profile.name,
            "calorie_goal": goals.calorie_goal,
            "protein_goal": goals.protein_goal,
            "calories_consumed": stats.total_calories,
            "protein_consumed": stats.total_protein,
            "nutrition_logged": stats.meals_logged > 0,
            "workout_completed": stats.workout_completed,
            "workout": workout.model_dump(mode="json") if workout else None,
        }

    async def weekly_progress(
        self, profile: Profile, weeks: int = 4, now: datetime | None = None
    ) -> ProgressSummary:
        """Summarise the last ``weeks`` ISO weeks, current week included."""
        user_id = profile.user_id
        current = week_key(now, profile.timezone)
        keys: list[WeekKey] = [current.shift(-offset) for offset in reversed(range(weeks))]
        start = keys[0].monday()
        end = current.monday() + timedelta(days=6)

        planned = await repo.get_workouts_between(user_id, keys[0], current)
        logs = await repo.get_daily_logs(user_id, start, end)
        meals = await repo.get_meals_between(user_id, start, end)

        planned_by_week: dict[WeekKey, int] = defaultdict(int)
        for workout in planned:
            planned_by_week[WeekKey(workout.iso_year, workout.week)] += 1

        completed_by_week: dict[WeekKey, int] = defaultdict(int)
        for log in logs:
            if log.workout_completed:
                completed_by_week[WeekKey.of_date(log.log_date)] += 1

        calories_by_day: dict[date, int] = defaultdict(int)
        for meal in meals:
            calories_by_day[meal.log_date] += meal.estimated_calories

        week_rows: list[WeekProgress] = []
        for key in keys:
            in_week = [
                kcal for day, kcal in calories_by_day.items() if WeekKey.of_date(day) == key
            ]
            week_rows.append(
                WeekProgress(
                    iso_year=key.iso_year,
                    week=key.week,
                    planned_sessions=planned_by_week.get(key, 0),
                    completed_sessions=completed_by_week.get(key, 0),
                    average_calories=_mean(in_week),
                )
            )

        total_planned = sum(w.planned_sessions for w in week_rows)
        total_completed = sum(w.completed_sessions for w in week_rows)
        consistency = (
            min(100, round(total_completed / total_planned * 100)) if total_planned else 0
        )

        calorie_goal = calculate_daily_goals(profile).calorie_goal
        on_target = sum(
            1
            for kcal in calories_by_day.values()
            if abs(kcal - calorie_goal) <= calorie_goal * CALORIE_TOLERANCE
        )

        achievements: list[str] = []
        if any(w.planned_sessions and w.completed_sessions >= w.planned_sessions for w in week_rows):
            achievements.append("First full week completed")
        if on_target:
            achievements.append(f"Calorie goal hit {on_target} days")
        if total_planned and consistency >= CONSISTENCY_THRESHOLD:
            achievements.append("Consistent training")

        logging.debug(
            "Progress for user %s: planned=%d completed=%d consistency=%d",
            user_id,
            total_planned,
            total_completed,
            consistency,
        )
        return ProgressSummary(
            weeks=week_rows,
            workout_frequency=round(total_completed / len(keys), 1) if keys else 0.0,
            average_calories=_mean(list(calories_by_day.values())),
            consistency_score=consistency,
            achievements=achievements,
        )
