"""
Workout plan API routes.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from ...db import repo
from ...schedule import week_key
from ...services.workout_service import WorkoutService
from ...workout_generator import GenerationStatus

router = APIRouter()


class GenerateRequest(BaseModel):
    user_id: str
    regenerate: bool = False


class ExerciseCompleteRequest(BaseModel):
    user_id: str
    workout_id: int
    exercise_id: str


class FinishRequest(BaseModel):
    user_id: str


@router.post("/workout/generate")
async def generate_workout(req: GenerateRequest) -> dict[str, Any]:
    """Generate this week's plan unless one already exists (or ``regenerate`` is set)."""
    service = WorkoutService()
    result = await service.ensure_weekly_plan(req.user_id, regenerate=req.regenerate)
    if result is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return {
        "success": result.status is not GenerationStatus.FAILED,
        "result": result.as_dict(),
    }


@router.get("/workout/today")
async def todays_workout(user_id: str = Query(..., description="User ID")) -> dict[str, Any]:
    """Get today's workout, generating the week's plan first if it is missing."""
    try:
        profile = await repo.get_profile(user_id)
        if profile is None:
            raise HTTPException(status_code=404, detail="Profile not found")

        service = WorkoutService()
        result = await service.ensure_weekly_plan(user_id)
        workout = await service.todays_workout(user_id)
        completed: list[str] = []
        if workout is not None:
            completed = await repo.get_completed_exercises(workout.id)

        return {
            "success": True,
            "plan": result.as_dict() if result else None,
            "workout": workout.model_dump(mode="json") if workout else None,
            "completed_exercises": completed,
        }

    except HTTPException:
        raise
    except Exception as e:
        logging.exception("Failed to get today's workout: %s", e)
        return {"success": False, "error": str(e)}


@router.get("/workout/week")
async def week_workouts(user_id: str = Query(..., description="User ID")) -> dict[str, Any]:
    """Every planned day of the current week."""
    profile = await repo.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    key = week_key(None, profile.timezone)
    workouts = await repo.get_week_workouts(user_id, key.iso_year, key.week)
    return {
        "success": True,
        "iso_year": key.iso_year,
        "week": key.week,
        "workouts": [w.model_dump(mode="json") for w in workouts],
    }


@router.post("/workout/progress")
async def complete_exercise(req: ExerciseCompleteRequest) -> dict[str, Any]:
    """Mark one exercise of a workout as done."""
    service = WorkoutService()
    ok = await service.mark_exercise_complete(req.user_id, req.workout_id, req.exercise_id)
    if not ok:
        raise HTTPException(status_code=404, detail="Workout exercise not found")
    return {"success": True}


@router.post("/workout/finish")
async def finish_workout(req: FinishRequest) -> dict[str, Any]:
    """Mark today's workout as completed."""
    try:
        profile = await repo.get_profile(req.user_id)
        if profile is None:
            raise HTTPException(status_code=404, detail="Profile not found")

        day = await WorkoutService().finish_workout(req.user_id, tz=profile.timezone)
        return {"success": True, "date": day.isoformat(), "message": "Workout finished"}

    except HTTPException:
        raise
    except Exception as e:
        logging.exception("Failed to finish workout: %s", e)
        return {"success": False, "error": str(e)}
