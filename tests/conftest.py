import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("FF_ADMIN_ALERTS", "false")

import pytest
import pytest_asyncio

from fitness_tracker.db import repo
from fitness_tracker.profile import Goal, Level, Location, Profile


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory database for each test."""
    await repo.close_db()
    await repo.init_db("sqlite+aiosqlite:///:memory:")
    try:
        yield repo
    finally:
        await repo.close_db()


@pytest.fixture
def make_profile():
    def _make(**overrides) -> Profile:
        data = {
            "user_id": "user-1",
            "name": "Ana",
            "weight": 70.0,
            "height": 175.0,
            "age": 30,
            "goal": Goal.MAINTAIN,
            "level": Level.BEGINNER,
            "frequency": 3,
            "location": Location.GYM,
            "timezone": "UTC",
        }
        data.update(overrides)
        return Profile.build(data)

    return _make
