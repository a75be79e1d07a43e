"""
Service for workout plan creation and tracking.
"""

import logging
from datetime import date, datetime

from ..db import repo
from ..schedule import local_date
from ..schemas import WeeklyWorkout
from ..workout_generator import GenerationResult, generate_weekly_workout, get_todays_workout


class WorkoutService:
    """Service for handling workout-related operations."""

    async def ensure_weekly_plan(
        self, user_id: str, regenerate: bool = False, now: datetime | None = None
    ) -> GenerationResult | None:
        """Generate this week's plan for a user. Returns None when the user has no profile."""
        profile = await repo.get_profile(user_id)
        if profile is None:
            logging.info("No profile for user %s; skipping plan generation", user_id)
            return None
        return await generate_weekly_workout(user_id, profile, now=now, regenerate=regenerate)

    async def todays_workout(
        self, user_id: str, now: datetime | None = None
    ) -> WeeklyWorkout | None:
        profile = await repo.get_profile(user_id)
        if profile is None:
            return None
        return await get_todays_workout(user_id, tz=profile.timezone, now=now)

    async def mark_exercise_complete(self, user_id: str, workout_id: int, exercise_id: str) -> bool:
        """
        Tick off one exercise of a planned workout.

        Returns False when the workout does not belong to the user or does not
        contain the exercise.
        """
        workout = await repo.get_workout_by_id(workout_id)
        if workout is None or workout.user_id != user_id:
            logging.warning("Workout %s not found for user %s", workout_id, user_id)
            return False
        if exercise_id not in {e.id for e in workout.exercises}:
            logging.warning("Exercise %s is not part of workout %s", exercise_id, workout_id)
            return False
        await repo.mark_exercise_complete(user_id, workout_id, exercise_id)
        return True

    async def finish_workout(
        self, user_id: str, tz: str = "UTC", now: datetime | None = None
    ) -> date:
        """Mark today's session as completed and return the local date recorded."""
        today = local_date(now, tz)
        await repo.set_workout_completed(user_id, today, True)
        logging.info("User %s finished the workout for %s", user_id, today)
        return today
