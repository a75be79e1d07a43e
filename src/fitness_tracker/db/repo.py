"""
Async SQLAlchemy repository for fitness tracker database operations.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, date, datetime
from functools import wraps
from typing import Any, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..config import SETTINGS
from ..profile import Level, Profile
from ..schedule import WeekKey
from ..schemas import WeeklyWorkout
from .models import (
    Base,
    DailyLog,
    ExerciseTemplate,
    Meal,
    UserProfile,
    Workout,
    WorkoutProgress,
)

_engine: AsyncEngine | None = None
_session: async_sessionmaker[AsyncSession] | None = None

# Type variable for the retry decorator
F = TypeVar("F", bound=Callable[..., Any])


def retry_on_connection_error(max_retries: int = 3, delay: float = 0.1):
    """
    Decorator to retry database reads on connection errors.
    Useful for handling transient connection issues.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            for attempt in range(max_retries):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    transient = any(
                        keyword in str(e).lower()
                        for keyword in [
                            "connection",
                            "server closed",
                            "operationalerror",
                            "timeout",
                        ]
                    )
                    if not transient or attempt == max_retries - 1:
                        raise
                    # Exponential backoff
                    wait_time = delay * (2**attempt)
                    logging.warning(
                        "Database connection error on attempt %d/%d, retrying in %.2fs: %s",
                        attempt + 1,
                        max_retries,
                        wait_time,
                        e,
                    )
                    await asyncio.sleep(wait_time)
            raise RuntimeError("Retry mechanism failed unexpectedly")

        return wrapper  # type: ignore

    return decorator


def _prepare_url(url: str) -> tuple[str, dict]:
    """Return sanitized DB URL and connect args.

    Extracts common SSL query parameters and passes them as ``connect_args``.
    ``ssl=false`` becomes ``sslmode=disable``.
    """

    url_obj = make_url(url)
    query = dict(url_obj.query)
    connect_args: dict[str, object] = {}

    # SSL normalization
    sslmode = query.pop("sslmode", None)
    ssl_val = query.pop("ssl", None)
    if ssl_val is not None:
        sslmode = "disable" if str(ssl_val).lower() in {"0", "false", "off", "no"} else "require"
    driver = url_obj.drivername or ""
    if sslmode:
        if driver.startswith("postgresql+asyncpg"):
            # asyncpg spells it ``ssl``
            connect_args["ssl"] = sslmode
        else:
            connect_args["sslmode"] = sslmode

    # PgBouncer-friendly settings by driver
    if driver.startswith("postgresql+psycopg"):
        connect_args.setdefault("prepare_threshold", 0)  # psycopg3
    elif driver.startswith("postgresql+asyncpg"):
        connect_args.setdefault("statement_cache_size", 0)  # asyncpg

    url_obj = url_obj.set(query=query)
    return url_obj.render_as_string(hide_password=False), connect_args


async def init_db(url: str | None = None) -> None:
    """
    Initialize the async database engine and sessionmaker, and create tables if needed.
    """
    global _engine, _session
    if _engine:
        return
    url = url or SETTINGS.DATABASE_URL
    if not url:
        logging.error("DATABASE_URL is required for DB initialization.")
        raise RuntimeError("DATABASE_URL is required")
    db_url, connect_args = _prepare_url(url)
    engine_kwargs: dict[str, Any] = {"echo": False, "connect_args": connect_args}
    if not make_url(db_url).drivername.startswith("sqlite"):
        engine_kwargs.update(
            pool_pre_ping=True,
            pool_recycle=3600,  # Recycle connections every hour
            pool_timeout=30,  # Wait up to 30 seconds for available connection
            max_overflow=10,  # Allow up to 10 additional connections beyond pool_size
            pool_size=20,  # Maintain up to 20 connections in the pool
        )
    _engine = create_async_engine(db_url, **engine_kwargs)
    _session = async_sessionmaker(_engine, expire_on_commit=False)
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def get_session() -> async_sessionmaker[AsyncSession]:
    """
    Get the async sessionmaker. Raises if DB is not initialized.
    """
    if not _session:
        raise RuntimeError("DB not initialized; call init_db() first")
    return _session


def get_engine() -> AsyncEngine:
    if not _engine:
        raise RuntimeError("DB not initialized; call init_db() first")
    return _engine


async def close_db() -> None:
    """Dispose of the database engine and reset session state."""

    global _engine, _session
    if _engine:
        await _engine.dispose()
    _engine = None
    _session = None


def _insert(model: type[Base]):
    """Dialect-specific INSERT supporting ``ON CONFLICT``."""
    dialect = get_engine().dialect.name
    if dialect == "postgresql":
        return pg_insert(model)
    if dialect == "sqlite":
        return sqlite_insert(model)
    raise RuntimeError(f"Upsert is not supported for dialect {dialect!r}")


# ---- Profiles ---------------------------------------------------------------


def _to_profile(row: UserProfile) -> Profile:
    return Profile.build(
        {
            "user_id": row.user_id,
            "name": row.name,
            "weight": row.weight_kg,
            "height": row.height_cm,
            "age": row.age,
            "goal": row.goal,
            "level": row.level,
            "frequency": row.frequency,
            "location": row.location,
            "timezone": row.timezone,
        }
    )


@retry_on_connection_error(max_retries=3, delay=0.1)
async def get_profile(user_id: str) -> Profile | None:
    """
    Get a user's profile, or None when the user has not completed signup.
    """
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(select(UserProfile).where(UserProfile.user_id == user_id))
        row = res.scalar_one_or_none()
        return _to_profile(row) if row else None


async def upsert_profile(profile: Profile) -> Profile:
    """Insert or replace the stored profile for ``profile.user_id``."""
    values = {
        "user_id": profile.user_id,
        "name": profile.name,
        "weight_kg": profile.weight,
        "height_cm": profile.height,
        "age": profile.age,
        "goal": profile.goal,
        "level": profile.level,
        "frequency": profile.frequency,
        "location": profile.location,
        "timezone": profile.timezone,
    }
    stmt = _insert(UserProfile).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[UserProfile.user_id],
        set_={**{k: v for k, v in values.items() if k != "user_id"}, "updated_at": datetime.now(UTC)},
    )
    sessmaker = get_session()
    async with sessmaker() as s:
        await s.execute(stmt)
        await s.commit()
    return profile


async def update_profile(user_id: str, changes: dict[str, Any]) -> Profile | None:
    """
    Apply a partial update to a stored profile.

    The merged profile is validated before anything is written; returns None
    when the user has no profile yet.
    """
    current = await get_profile(user_id)
    if current is None:
        return None
    updated = current.with_changes(changes)
    return await upsert_profile(updated)


# ---- Exercise catalog -------------------------------------------------------


@retry_on_connection_error(max_retries=3, delay=0.1)
async def query_exercises(difficulty: Level) -> list[ExerciseTemplate]:
    """Catalog entries of one difficulty, in catalog order."""
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(ExerciseTemplate)
            .where(ExerciseTemplate.difficulty == difficulty)
            .order_by(ExerciseTemplate.position, ExerciseTemplate.id)
        )
        return list(res.scalars().all())


async def upsert_exercises(items: Iterable[dict[str, Any]]) -> int:
    """Insert or refresh catalog entries keyed by id. Returns the number written."""
    rows = list(items)
    if not rows:
        return 0
    sessmaker = get_session()
    async with sessmaker() as s:
        for values in rows:
            stmt = _insert(ExerciseTemplate).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[ExerciseTemplate.id],
                set_={k: v for k, v in values.items() if k != "id"},
            )
            await s.execute(stmt)
        await s.commit()
    return len(rows)


async def count_exercises() -> int:
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(select(func.count(ExerciseTemplate.id)))
        return res.scalar() or 0


# ---- Workouts ---------------------------------------------------------------


async def upsert_workouts(rows: list[dict[str, Any]]) -> None:
    """
    Upsert planned workouts keyed by (user_id, iso_year, week, day).

    The rows are the complete plan for every week they touch: stored days of
    those weeks missing from ``rows`` are removed along with their progress.
    All writes happen in one transaction; an error leaves the previous plan
    untouched.
    """
    if not rows:
        return
    planned: dict[tuple[str, int, int], set[int]] = {}
    for values in rows:
        key = (values["user_id"], values["iso_year"], values["week"])
        planned.setdefault(key, set()).add(values["day"])

    now = datetime.now(UTC)
    sessmaker = get_session()
    async with sessmaker() as s:
        for (user_id, iso_year, week), days in planned.items():
            stale = select(Workout.id).where(
                Workout.user_id == user_id,
                Workout.iso_year == iso_year,
                Workout.week == week,
                Workout.day.not_in(sorted(days)),
            )
            await s.execute(delete(WorkoutProgress).where(WorkoutProgress.workout_id.in_(stale)))
            await s.execute(delete(Workout).where(Workout.id.in_(stale)))
        for values in rows:
            stmt = _insert(Workout).values(**values, updated_at=now)
            stmt = stmt.on_conflict_do_update(
                index_elements=[Workout.user_id, Workout.iso_year, Workout.week, Workout.day],
                set_={
                    "name": stmt.excluded.name,
                    "exercises": stmt.excluded.exercises,
                    "updated_at": now,
                },
            )
            await s.execute(stmt)
        await s.commit()


@retry_on_connection_error(max_retries=3, delay=0.1)
async def get_workout(user_id: str, iso_year: int, week: int, day: int) -> WeeklyWorkout | None:
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(Workout).where(
                Workout.user_id == user_id,
                Workout.iso_year == iso_year,
                Workout.week == week,
                Workout.day == day,
            )
        )
        row = res.scalar_one_or_none()
        return WeeklyWorkout.model_validate(row) if row else None


@retry_on_connection_error(max_retries=3, delay=0.1)
async def get_week_workouts(user_id: str, iso_year: int, week: int) -> list[WeeklyWorkout]:
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(Workout)
            .where(
                Workout.user_id == user_id,
                Workout.iso_year == iso_year,
                Workout.week == week,
            )
            .order_by(Workout.day)
        )
        return [WeeklyWorkout.model_validate(r) for r in res.scalars().all()]


@retry_on_connection_error(max_retries=3, delay=0.1)
async def get_workouts_between(
    user_id: str, start: WeekKey, end: WeekKey
) -> list[WeeklyWorkout]:
    """Planned workouts from week ``start`` to week ``end`` inclusive."""
    ordinal = Workout.iso_year * 100 + Workout.week
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(Workout)
            .where(
                Workout.user_id == user_id,
                ordinal.between(
                    start.iso_year * 100 + start.week, end.iso_year * 100 + end.week
                ),
            )
            .order_by(Workout.iso_year, Workout.week, Workout.day)
        )
        return [WeeklyWorkout.model_validate(r) for r in res.scalars().all()]


async def get_workout_by_id(workout_id: int) -> WeeklyWorkout | None:
    sessmaker = get_session()
    async with sessmaker() as s:
        row = await s.get(Workout, workout_id)
        return WeeklyWorkout.model_validate(row) if row else None


# ---- Progress ---------------------------------------------------------------


async def mark_exercise_complete(user_id: str, workout_id: int, exercise_id: str) -> None:
    """Record that an exercise was done; repeating the call is a no-op."""
    stmt = _insert(WorkoutProgress).values(
        user_id=user_id, workout_id=workout_id, exercise_id=exercise_id
    )
    stmt = stmt.on_conflict_do_nothing(
        index_elements=[WorkoutProgress.workout_id, WorkoutProgress.exercise_id]
    )
    sessmaker = get_session()
    async with sessmaker() as s:
        await s.execute(stmt)
        await s.commit()


@retry_on_connection_error(max_retries=3, delay=0.1)
async def get_completed_exercises(workout_id: int) -> list[str]:
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(WorkoutProgress.exercise_id)
            .where(WorkoutProgress.workout_id == workout_id)
            .order_by(WorkoutProgress.id)
        )
        return list(res.scalars().all())


async def set_workout_completed(user_id: str, day: date, completed: bool = True) -> None:
    now = datetime.now(UTC)
    stmt = _insert(DailyLog).values(
        user_id=user_id, log_date=day, workout_completed=completed, updated_at=now
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[DailyLog.user_id, DailyLog.log_date],
        set_={"workout_completed": completed, "updated_at": now},
    )
    sessmaker = get_session()
    async with sessmaker() as s:
        await s.execute(stmt)
        await s.commit()


@retry_on_connection_error(max_retries=3, delay=0.1)
async def get_daily_logs(user_id: str, start: date, end: date) -> list[DailyLog]:
    """Daily logs with ``start <= date <= end``."""
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(DailyLog)
            .where(
                DailyLog.user_id == user_id,
                DailyLog.log_date >= start,
                DailyLog.log_date <= end,
            )
            .order_by(DailyLog.log_date)
        )
        return list(res.scalars().all())


# ---- Meals ------------------------------------------------------------------


async def add_meal(
    user_id: str,
    day: date,
    image_url: str,
    calories: int,
    protein: float,
    foods: list[str],
) -> Meal:
    sessmaker = get_session()
    async with sessmaker() as s:
        meal = Meal(
            user_id=user_id,
            log_date=day,
            image_url=image_url,
            estimated_calories=calories,
            estimated_protein=protein,
            foods=foods,
        )
        s.add(meal)
        await s.commit()
        await s.refresh(meal)
        return meal


@retry_on_connection_error(max_retries=3, delay=0.1)
async def get_meals_between(user_id: str, start: date, end: date) -> list[Meal]:
    """Meals with ``start <= date <= end``, oldest first."""
    sessmaker = get_session()
    async with sessmaker() as s:
        res = await s.execute(
            select(Meal)
            .where(Meal.user_id == user_id, Meal.log_date >= start, Meal.log_date <= end)
            .order_by(Meal.log_date, Meal.id)
        )
        return list(res.scalars().all())


async def get_meals_for_day(user_id: str, day: date) -> list[Meal]:
    return await get_meals_between(user_id, day, day)
