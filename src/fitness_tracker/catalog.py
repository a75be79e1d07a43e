"""
Exercise catalog: the pool of templates the workout generator picks from.
The catalog ships as bundled JSON and is seeded into the database on startup.
"""

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .config import SETTINGS
from .db import repo
from .db.models import ExerciseTemplate
from .profile import Level, Location

DATA_FILE = Path(__file__).parent / "data" / "exercises.json"


def is_equipment_compatible(
    required: Iterable[str], location: Location, gym_equipment: Iterable[str]
) -> bool:
    """
    Home workouts only use templates needing no equipment; gym workouts may use
    anything the configured gym provides.
    """
    needed = {item.lower() for item in required}
    if not needed:
        return True
    if location is Location.HOME:
        return False
    return needed <= {item.lower() for item in gym_equipment}


class ExerciseCatalog:
    """Read access to exercise templates filtered for a profile."""

    def __init__(self, gym_equipment: Iterable[str] | None = None):
        self.gym_equipment = list(
            gym_equipment if gym_equipment is not None else SETTINGS.GYM_EQUIPMENT
        )

    async def query(self, difficulty: Level, location: Location) -> list[ExerciseTemplate]:
        """Templates of ``difficulty`` usable at ``location``, in catalog order."""
        templates = await repo.query_exercises(difficulty)
        usable = [
            t
            for t in templates
            if is_equipment_compatible(t.required_equipment, location, self.gym_equipment)
        ]
        logging.debug(
            "Catalog query difficulty=%s location=%s: %d of %d templates usable",
            difficulty.value,
            location.value,
            len(usable),
            len(templates),
        )
        return usable


def load_bundled_exercises(data_file: Path = DATA_FILE) -> list[dict[str, Any]]:
    """Load catalog rows from the bundled JSON file, numbering them in file order."""
    with open(data_file, encoding="utf-8") as f:
        items = json.load(f)
    rows = []
    for position, item in enumerate(items):
        rows.append(
            {
                "id": item["id"],
                "position": position,
                "name": item["name"],
                "difficulty": Level(item["difficulty"]),
                "required_equipment": [e.lower() for e in item.get("required_equipment", [])],
                "target_muscles": [m.lower() for m in item.get("target_muscles", [])],
                "description": item.get("description", ""),
                "video_url": item.get("video_url"),
                "image_url": item.get("image_url"),
            }
        )
    return rows


async def seed_catalog(force: bool = False) -> int:
    """
    Write the bundled exercises into the catalog table.

    Skips seeding when the catalog already has entries unless ``force`` is set.
    Returns the number of rows written.
    """
    if not force and await repo.count_exercises() > 0:
        logging.info("Exercise catalog already seeded")
        return 0
    rows = load_bundled_exercises()
    written = await repo.upsert_exercises(rows)
    logging.info("Seeded exercise catalog with %d exercises", written)
    return written
