"""
Pydantic schemas shared by the repository, services and HTTP routes.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class PlannedExercise(BaseModel):
    """Snapshot of a catalog exercise with the sets/reps/rest assigned for one day."""

    id: str
    name: str
    sets: int
    reps: str
    rest: str
    description: str = ""
    muscles: list[str] = Field(default_factory=list)
    video_url: str | None = None
    image_url: str | None = None


class WeeklyWorkout(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    iso_year: int
    week: int
    day: int
    name: str
    exercises: list[PlannedExercise]
    created_at: datetime | None = None
    updated_at: datetime | None = None


class MealAnalysis(BaseModel):
    calories: int
    protein: float
    foods: list[str]
    confidence: float


class DailyStats(BaseModel):
    date: date
    total_calories: int
    total_protein: float
    meals_logged: int
    workout_completed: bool = False


class WeekProgress(BaseModel):
    iso_year: int
    week: int
    planned_sessions: int
    completed_sessions: int
    average_calories: int


class ProgressSummary(BaseModel):
    weeks: list[WeekProgress]
    workout_frequency: float
    average_calories: int
    consistency_score: int
    achievements: list[str]
