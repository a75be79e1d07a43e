"""Daily nutrition targets derived from a profile."""

import logging
import math
from dataclasses import dataclass

from .profile import Goal, Profile

logger = logging.getLogger(__name__)

ACTIVITY_MULTIPLIER = 1.2
DEFICIT_KCAL = 500
SURPLUS_KCAL = 300
PROTEIN_G_PER_KG = {
    Goal.GAIN_MUSCLE: 2.2,
    Goal.LOSE_FAT: 1.8,
    Goal.MAINTAIN: 1.8,
}
CALORIE_ADJUSTMENT = {
    Goal.LOSE_FAT: -DEFICIT_KCAL,
    Goal.GAIN_MUSCLE: SURPLUS_KCAL,
    Goal.MAINTAIN: 0,
}


@dataclass(frozen=True)
class DailyGoals:
    calorie_goal: int
    protein_goal: int


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def basal_metabolic_rate(profile: Profile) -> float:
    """Mifflin-St Jeor BMR with the male constant; no sex term is modelled."""
    return 10 * profile.weight + 6.25 * profile.height - 5 * profile.age + 5


def calculate_daily_goals(profile: Profile) -> DailyGoals:
    maintenance = basal_metabolic_rate(profile) * ACTIVITY_MULTIPLIER
    calories = _round_half_up(maintenance + CALORIE_ADJUSTMENT[profile.goal])
    protein = _round_half_up(profile.weight * PROTEIN_G_PER_KG[profile.goal])
    logger.debug(
        "Daily goals for %s: goal=%s calories=%s protein=%s",
        profile.user_id,
        profile.goal.value,
        calories,
        protein,
    )
    return DailyGoals(calorie_goal=calories, protein_goal=protein)
