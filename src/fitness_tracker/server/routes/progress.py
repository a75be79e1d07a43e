"""
Dashboard and progress API routes.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query

from ...db import repo
from ...services.progress_service import ProgressService

router = APIRouter()


@router.get("/dashboard")
async def dashboard(user_id: str = Query(..., description="User ID")) -> dict[str, Any]:
    """Today's goals, workout and nutrition at a glance."""
    profile = await repo.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    data = await ProgressService().dashboard(profile)
    return {"success": True, **data}


@router.get("/progress/weekly")
async def weekly_progress(
    user_id: str = Query(..., description="User ID"),
    weeks: int = Query(4, ge=1, le=52, description="Number of weeks to summarise"),
) -> dict[str, Any]:
    """Training consistency and calorie averages over recent weeks."""
    profile = await repo.get_profile(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    summary = await ProgressService().weekly_progress(profile, weeks=weeks)
    return {"success": True, "progress": summary.model_dump()}
