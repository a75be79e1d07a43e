"""
Profile and daily goals API routes.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from ...config import SETTINGS
from ...db import repo
from ...goals import calculate_daily_goals
from ...profile import Goal, Level, Location, Profile, ProfileValidationError
from ...workout_generator import generate_weekly_workout

router = APIRouter()


class ProfileRequest(BaseModel):
    user_id: str
    name: str | None = None
    weight: float
    height: float
    age: int
    goal: Goal
    level: Level
    frequency: int
    location: Location
    timezone: str | None = None


class ProfileUpdateRequest(BaseModel):
    user_id: str
    name: str | None = None
    weight: float | None = None
    height: float | None = None
    age: int | None = None
    goal: Goal | None = None
    level: Level | None = None
    frequency: int | None = None
    location: Location | None = None
    timezone: str | None = None


class ProfileResponse(BaseModel):
    success: bool
    profile: dict[str, Any] | None = None
    plan: dict[str, Any] | None = None
    error: str | None = None


def _invalid(err: ProfileValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail=err.errors)


@router.get("/profile")
async def get_profile(user_id: str = Query(..., description="User ID")) -> ProfileResponse:
    """Get a user's profile."""
    profile = await repo.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ProfileResponse(success=True, profile=profile.model_dump(mode="json"))


@router.put("/profile")
async def put_profile(req: ProfileRequest) -> ProfileResponse:
    """Create or replace a profile and refresh this week's plan."""
    data = req.model_dump()
    data["timezone"] = req.timezone or SETTINGS.DEFAULT_TIMEZONE
    try:
        profile = Profile.build(data)
    except ProfileValidationError as err:
        raise _invalid(err) from err

    await repo.upsert_profile(profile)
    result = await generate_weekly_workout(profile.user_id, profile, regenerate=True)
    logging.info("Saved profile for user %s (plan %s)", profile.user_id, result.status.value)
    return ProfileResponse(
        success=True, profile=profile.model_dump(mode="json"), plan=result.as_dict()
    )


@router.patch("/profile")
async def patch_profile(req: ProfileUpdateRequest) -> ProfileResponse:
    """Apply a partial profile edit and refresh this week's plan."""
    changes = req.model_dump(exclude={"user_id"}, exclude_unset=True)
    try:
        profile = await repo.update_profile(req.user_id, changes)
    except ProfileValidationError as err:
        raise _invalid(err) from err
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")

    result = await generate_weekly_workout(profile.user_id, profile, regenerate=True)
    logging.info("Updated profile for user %s: %s", profile.user_id, sorted(changes))
    return ProfileResponse(
        success=True, profile=profile.model_dump(mode="json"), plan=result.as_dict()
    )


@router.get("/goals")
async def get_goals(user_id: str = Query(..., description="User ID")) -> dict[str, Any]:
    """Daily calorie and protein targets for a user."""
    profile = await repo.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    goals = calculate_daily_goals(profile)
    return {
        "success": True,
        "calorie_goal": goals.calorie_goal,
        "protein_goal": goals.protein_goal,
    }
