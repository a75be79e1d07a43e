"""
User profile model and the enumerations shared by the planning code.

Profiles are validated when they are built; anything that reaches the goal
calculator or the workout generator has finite, positive measurements.
"""

from __future__ import annotations

import enum
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class Goal(str, enum.Enum):
    """Training objective."""

    LOSE_FAT = "lose_fat"
    GAIN_MUSCLE = "gain_muscle"
    MAINTAIN = "maintain"


class Level(str, enum.Enum):
    """Training experience tier."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Location(str, enum.Enum):
    """Where the user trains."""

    GYM = "gym"
    HOME = "home"


class ProfileValidationError(ValueError):
    """Raised when profile data is missing, out of range or not a number."""

    def __init__(self, errors: list[dict[str, Any]]):
        self.errors = errors
        fields = ", ".join(".".join(str(p) for p in e.get("loc", ())) or "?" for e in errors)
        super().__init__(f"Invalid profile: {fields}")


class Profile(BaseModel):
    """Immutable snapshot of the attributes every planning computation reads."""

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    user_id: str = Field(..., min_length=1, max_length=64)
    name: str | None = Field(None, max_length=120)
    weight: float = Field(..., gt=0, allow_inf_nan=False, description="Body weight in kg")
    height: float = Field(..., gt=0, allow_inf_nan=False, description="Height in cm")
    age: int = Field(..., gt=0, description="Age in years")
    goal: Goal
    level: Level
    frequency: int = Field(..., ge=3, le=6, description="Training sessions per week")
    location: Location
    timezone: str = Field("UTC", description="IANA timezone name")

    @field_validator("timezone")
    @classmethod
    def timezone_known(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as err:
            raise ValueError(f"unknown timezone {v!r}") from err
        return v

    @classmethod
    def build(cls, data: dict[str, Any]) -> Profile:
        """Validate raw data into a profile, raising ``ProfileValidationError``."""
        try:
            return cls.model_validate(data)
        except ValidationError as err:
            raise ProfileValidationError(
                err.errors(include_url=False, include_context=False, include_input=False)
            ) from err

    def with_changes(self, changes: dict[str, Any]) -> Profile:
        """
        Return a re-validated copy with ``changes`` applied.

        Every key present is applied, so ``None`` clears an optional field.
        """
        merged = self.model_dump()
        merged.update(changes)
        merged["user_id"] = self.user_id
        return Profile.build(merged)
