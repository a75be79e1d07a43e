"""
SQLAlchemy ORM models for the fitness tracker database tables.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy import (
    Enum as SAEnum,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from ..profile import Goal, Level, Location


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def _enum(enum_cls: type, name: str) -> SAEnum:
    return SAEnum(
        enum_cls,
        name=name,
        native_enum=False,  # SQLite has no native enums
        create_constraint=True,
        validate_strings=True,
        values_callable=lambda e: [m.value for m in e],
    )


class UserProfile(Base):
    """Profile row, one per authenticated user."""

    __tablename__ = "profiles"
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    weight_kg: Mapped[float] = mapped_column(Float)
    height_cm: Mapped[float] = mapped_column(Float)
    age: Mapped[int] = mapped_column(Integer)
    goal: Mapped[Goal] = mapped_column(_enum(Goal, "goal_type"))
    level: Mapped[Level] = mapped_column(_enum(Level, "level_type"))
    frequency: Mapped[int] = mapped_column(Integer)
    location: Mapped[Location] = mapped_column(_enum(Location, "location_type"))
    timezone: Mapped[str] = mapped_column(String(64), default="UTC")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    def __repr__(self) -> str:
        return f"<UserProfile user_id={self.user_id} goal={self.goal} level={self.level}>"


class ExerciseTemplate(Base):
    """Catalog entry describing one exercise independent of any user's plan."""

    __tablename__ = "exercises"
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, index=True)
    name: Mapped[str] = mapped_column(String(120))
    difficulty: Mapped[Level] = mapped_column(_enum(Level, "exercise_level_type"), index=True)
    required_equipment: Mapped[list[str]] = mapped_column(JSON, default=list)
    target_muscles: Mapped[list[str]] = mapped_column(JSON, default=list)
    description: Mapped[str] = mapped_column(Text, default="")
    video_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<ExerciseTemplate id={self.id} name={self.name} difficulty={self.difficulty}>"


class Workout(Base):
    """One planned training day for a user in an ISO week."""

    __tablename__ = "workouts"
    __table_args__ = (
        UniqueConstraint("user_id", "iso_year", "week", "day", name="uq_workouts_user_week_day"),
    )
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    iso_year: Mapped[int] = mapped_column(Integer)
    week: Mapped[int] = mapped_column(Integer)
    day: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(String(120))
    exercises: Mapped[list[dict[str, Any]]] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    progress: Mapped[list[WorkoutProgress]] = relationship(
        "WorkoutProgress", back_populates="workout", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Workout id={self.id} user_id={self.user_id} "
            f"week={self.iso_year}-W{self.week:02d} day={self.day}>"
        )


class WorkoutProgress(Base):
    """An exercise the user ticked off within a planned workout."""

    __tablename__ = "workout_progress"
    __table_args__ = (
        UniqueConstraint("workout_id", "exercise_id", name="uq_progress_workout_exercise"),
    )
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    workout_id: Mapped[int] = mapped_column(ForeignKey("workouts.id"), index=True)
    exercise_id: Mapped[str] = mapped_column(String(64))
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    workout: Mapped[Workout] = relationship("Workout", back_populates="progress")


class DailyLog(Base):
    """Per-day completion flag."""

    __tablename__ = "daily_logs"
    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    log_date: Mapped[date] = mapped_column("date", Date, primary_key=True)
    workout_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )


class Meal(Base):
    """A meal logged from a photo, with estimated nutrition."""

    __tablename__ = "meals"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    log_date: Mapped[date] = mapped_column("date", Date, index=True)
    image_url: Mapped[str] = mapped_column(String(512))
    estimated_calories: Mapped[int] = mapped_column(Integer)
    estimated_protein: Mapped[float] = mapped_column(Float)
    foods: Mapped[list[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<Meal id={self.id} user_id={self.user_id} kcal={self.estimated_calories}>"
