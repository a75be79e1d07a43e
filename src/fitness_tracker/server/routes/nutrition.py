"""
Meal logging API routes.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from ...config import SETTINGS
from ...db import repo
from ...schedule import local_date
from ...services.nutrition_service import NutritionService

router = APIRouter()


class MealRequest(BaseModel):
    user_id: str
    image_url: str = Field(..., min_length=1)


@router.post("/meals")
async def log_meal(req: MealRequest) -> dict[str, Any]:
    """Analyse a meal photo and store the estimate."""
    if not SETTINGS.FF_MEAL_VISION:
        raise HTTPException(status_code=503, detail="Meal analysis disabled")

    profile = await repo.get_profile(req.user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")

    try:
        meal_id, analysis = await NutritionService().log_meal(
            req.user_id, req.image_url, tz=profile.timezone
        )
    except Exception as e:
        logging.exception("Failed to log meal: %s", e)
        return {"success": False, "error": str(e)}

    return {"success": True, "meal_id": meal_id, "analysis": analysis.model_dump()}


@router.get("/meals/daily")
async def daily_stats(
    user_id: str = Query(..., description="User ID"),
    day: date | None = Query(None, description="Local date, defaults to today"),
) -> dict[str, Any]:
    """Meal totals for one day."""
    profile = await repo.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    stats = await NutritionService().daily_stats(user_id, day or local_date(None, profile.timezone))
    return {"success": True, "stats": stats.model_dump(mode="json")}
