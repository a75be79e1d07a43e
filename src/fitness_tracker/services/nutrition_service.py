"""
Service for meal logging and daily nutrition totals.
"""

from __future__ import annotations

import logging
import random
from datetime import date, datetime

from ..db import repo
from ..schedule import local_date
from ..schemas import DailyStats, MealAnalysis
from .vision_service import VisionService

# Per typical portion: (calories, protein g, display name)
FOOD_ESTIMATES: dict[str, tuple[int, float, str]] = {
    "chicken": (165, 31, "Chicken"),
    "rice": (130, 2.7, "Rice"),
    "potato": (77, 2, "Potato"),
    "salad": (25, 1.5, "Salad"),
    "egg": (155, 13, "Egg"),
    "fish": (120, 25, "Fish"),
    "meat": (250, 30, "Meat"),
    "beef": (250, 30, "Meat"),
    "pasta": (157, 5.8, "Pasta"),
    "bread": (79, 2.7, "Bread"),
    "cheese": (113, 7, "Cheese"),
    "yogurt": (61, 3.5, "Yogurt"),
    "fruit": (52, 0.5, "Fruit"),
    "vegetable": (30, 2, "Vegetables"),
    "soup": (50, 3, "Soup"),
}

UNKNOWN_MEAL = "Unidentified meal"
ESTIMATE_CONFIDENCE = 0.8


def estimate_meal(description: str, rng: random.Random | None = None) -> MealAnalysis:
    """
    Rough nutrition estimate from a free-text meal description.

    Each recognised food contributes one portion scaled by a random factor in
    [0.75, 1.25]. Nothing recognised yields a generic 200-599 kcal guess.
    """
    rng = rng or random.Random()
    text = (description or "").lower()
    foods: list[str] = []
    calories = 0
    protein = 0.0

    for keyword, (kcal, prot, name) in FOOD_ESTIMATES.items():
        if keyword in text and name not in foods:
            foods.append(name)
            portion = rng.random() * 0.5 + 0.75
            calories += round(kcal * portion)
            protein += round(prot * portion * 10) / 10

    if not foods:
        foods.append(UNKNOWN_MEAL)
        calories = rng.randrange(200, 600)
        protein = float(rng.randrange(10, 40))

    return MealAnalysis(
        calories=calories,
        protein=round(protein, 1),
        foods=foods,
        confidence=ESTIMATE_CONFIDENCE,
    )


class NutritionService:
    """Service for meal photos and daily nutrition statistics."""

    def __init__(self, vision: VisionService | None = None, rng: random.Random | None = None):
        self.vision = vision or VisionService()
        self.rng = rng

    async def analyze_meal_image(self, image_url: str) -> MealAnalysis:
        description = await self.vision.describe_meal(image_url)
        analysis = estimate_meal(description, self.rng)
        logging.info(
            "Meal analysed: foods=%s kcal=%s protein=%s",
            analysis.foods,
            analysis.calories,
            analysis.protein,
        )
        return analysis

    async def log_meal(
        self, user_id: str, image_url: str, tz: str = "UTC", now: datetime | None = None
    ) -> tuple[int, MealAnalysis]:
        """Analyse a meal photo and store it. Returns the meal id and the analysis."""
        analysis = await self.analyze_meal_image(image_url)
        meal = await repo.add_meal(
            user_id=user_id,
            day=local_date(now, tz),
            image_url=image_url,
            calories=analysis.calories,
            protein=analysis.protein,
            foods=analysis.foods,
        )
        return meal.id, analysis

    async def daily_stats(self, user_id: str, day: date) -> DailyStats:
        meals = await repo.get_meals_for_day(user_id, day)
        logs = await repo.get_daily_logs(user_id, day, day)
        return DailyStats(
            date=day,
            total_calories=sum(m.estimated_calories for m in meals),
            total_protein=round(sum(m.estimated_protein for m in meals), 1),
            meals_logged=len(meals),
            workout_completed=any(log.workout_completed for log in logs),
        )
