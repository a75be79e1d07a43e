"""
Services layer for fitness tracker business logic.
"""

from .nutrition_service import NutritionService
from .progress_service import ProgressService
from .vision_service import VisionService
from .workout_service import WorkoutService

__all__ = ["NutritionService", "ProgressService", "VisionService", "WorkoutService"]
