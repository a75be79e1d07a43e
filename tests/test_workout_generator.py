from datetime import UTC, datetime

import pytest

from fitness_tracker.catalog import seed_catalog
from fitness_tracker.db.models import ExerciseTemplate
from fitness_tracker.profile import Goal, Level
from fitness_tracker.schedule import WeekKey, Weekday
from fitness_tracker.workout_generator import (
    MAX_EXERCISES_PER_DAY,
    GenerationStatus,
    TrainingParameters,
    build_week,
    generate_weekly_workout,
    get_todays_workout,
    select_exercises_for_day,
    training_parameters,
    workout_name,
)

# Wednesday of 2024-W01
WEDNESDAY = datetime(2024, 1, 3, 12, tzinfo=UTC)


def _template(id_: str, muscles: list[str], position: int = 0) -> ExerciseTemplate:
    return ExerciseTemplate(
        id=id_,
        position=position,
        name=id_.replace("-", " ").title(),
        difficulty=Level.BEGINNER,
        required_equipment=[],
        target_muscles=muscles,
        description="",
    )


@pytest.mark.parametrize(
    "goal,level,expected",
    [
        (Goal.GAIN_MUSCLE, Level.BEGINNER, TrainingParameters(3, "8-12", "90s")),
        (Goal.GAIN_MUSCLE, Level.ADVANCED, TrainingParameters(4, "6-10", "90s")),
        (Goal.LOSE_FAT, Level.BEGINNER, TrainingParameters(3, "12-15", "60s")),
        (Goal.LOSE_FAT, Level.INTERMEDIATE, TrainingParameters(4, "10-12", "60s")),
        (Goal.MAINTAIN, Level.ADVANCED, TrainingParameters(3, "10-12", "75s")),
    ],
)
def test_training_parameters(goal, level, expected):
    assert training_parameters(goal, level) == expected


def test_every_goal_and_level_has_parameters():
    for goal in Goal:
        for level in Level:
            assert training_parameters(goal, level).sets in (3, 4)


def test_workout_name():
    assert workout_name(Weekday.MONDAY, Goal.MAINTAIN) == "Maintenance - Monday"
    assert workout_name(5, Goal.LOSE_FAT) == "Fat Burn - Friday"


def test_select_exercises_keeps_catalog_order_and_limit():
    templates = [_template(f"chest-{i}", ["chest"], i) for i in range(6)]
    templates.insert(2, _template("row", ["back"]))

    picked = select_exercises_for_day(templates, Weekday.MONDAY)

    assert len(picked) == MAX_EXERCISES_PER_DAY
    assert [t.id for t in picked] == ["chest-0", "chest-1", "chest-2", "chest-3"]


def test_select_exercises_rest_day_uses_default_focus():
    templates = [_template("squat", ["legs"]), _template("row", ["back"])]
    assert [t.id for t in select_exercises_for_day(templates, Weekday.TUESDAY)] == ["row"]


def test_select_exercises_can_be_empty():
    assert select_exercises_for_day([_template("squat", ["legs"])], Weekday.MONDAY) == []


def test_build_week_shares_parameters(make_profile):
    profile = make_profile(goal=Goal.GAIN_MUSCLE, frequency=4)
    templates = [_template("push-up", ["chest"]), _template("row", ["back"])]

    rows = build_week("user-1", profile, templates, WeekKey(2024, 1))

    assert [r["day"] for r in rows] == [1, 2, 4, 5]
    for row in rows:
        assert (row["iso_year"], row["week"]) == (2024, 1)
        for ex in row["exercises"]:
            assert (ex["sets"], ex["reps"], ex["rest"]) == (3, "8-12", "90s")


@pytest.mark.asyncio
async def test_generate_and_fetch_today(db, make_profile):
    await seed_catalog()
    profile = make_profile()

    result = await generate_weekly_workout("user-1", profile, now=WEDNESDAY)

    assert result.status is GenerationStatus.CREATED
    assert result.week == WeekKey(2024, 1)
    assert result.days == [1, 3, 5]

    today = await get_todays_workout("user-1", now=WEDNESDAY)
    assert today is not None
    assert today.name == "Maintenance - Wednesday"
    assert [e.id for e in today.exercises] == [
        "superman",
        "towel-row",
        "lat-pulldown",
        "dumbbell-curl",
    ]
    assert all((e.sets, e.reps, e.rest) == (3, "10-12", "75s") for e in today.exercises)


@pytest.mark.asyncio
async def test_home_plan_has_no_equipment(db, make_profile):
    await seed_catalog()
    profile = make_profile(location="home", level="advanced", frequency=6)

    result = await generate_weekly_workout("user-1", profile, now=WEDNESDAY)
    week = await db.get_week_workouts("user-1", 2024, 1)

    assert result.ok
    assert [w.day for w in week] == [1, 2, 3, 4, 5, 6]
    catalog = {t.id: t for t in await db.query_exercises(Level.ADVANCED)}
    for workout in week:
        assert workout.exercises
        assert all(not catalog[e.id].required_equipment for e in workout.exercises)


@pytest.mark.asyncio
async def test_existing_plan_is_kept(db, make_profile):
    await seed_catalog()
    profile = make_profile()
    await generate_weekly_workout("user-1", profile, now=WEDNESDAY)

    again = await generate_weekly_workout(
        "user-1", profile.with_changes({"goal": "lose_fat"}), now=WEDNESDAY
    )

    assert again.status is GenerationStatus.ALREADY_EXISTS
    assert again.days == [1, 3, 5]
    today = await get_todays_workout("user-1", now=WEDNESDAY)
    assert today.name == "Maintenance - Wednesday"


@pytest.mark.asyncio
async def test_regenerate_replaces_in_place(db, make_profile):
    await seed_catalog()
    profile = make_profile()
    await generate_weekly_workout("user-1", profile, now=WEDNESDAY)
    before = {w.day: w.id for w in await db.get_week_workouts("user-1", 2024, 1)}

    result = await generate_weekly_workout(
        "user-1", profile.with_changes({"goal": "gain_muscle"}), now=WEDNESDAY, regenerate=True
    )
    after = await db.get_week_workouts("user-1", 2024, 1)

    assert result.status is GenerationStatus.CREATED
    assert {w.day: w.id for w in after} == before
    assert all(w.name.startswith("Muscle Gain") for w in after)


@pytest.mark.asyncio
async def test_other_weeks_are_separate(db, make_profile):
    await seed_catalog()
    profile = make_profile()
    await generate_weekly_workout("user-1", profile, now=WEDNESDAY)

    result = await generate_weekly_workout(
        "user-1", profile, now=datetime(2024, 1, 10, 12, tzinfo=UTC)
    )

    assert result.status is GenerationStatus.CREATED
    assert result.week == WeekKey(2024, 2)


class _BrokenCatalog:
    async def query(self, difficulty, location):
        raise RuntimeError("catalog down")


@pytest.mark.asyncio
async def test_failure_is_reported_and_nothing_stored(db, make_profile):
    result = await generate_weekly_workout(
        "user-1", make_profile(), now=WEDNESDAY, catalog=_BrokenCatalog()
    )

    assert result.status is GenerationStatus.FAILED
    assert not result.ok
    assert result.reason == "catalog down"
    assert result.as_dict()["status"] == "failed"
    assert await db.get_week_workouts("user-1", 2024, 1) == []


@pytest.mark.asyncio
async def test_no_workout_on_rest_day_or_before_generation(db, make_profile):
    assert await get_todays_workout("user-1", now=WEDNESDAY) is None

    await seed_catalog()
    await generate_weekly_workout("user-1", make_profile(), now=WEDNESDAY)

    thursday = datetime(2024, 1, 4, 12, tzinfo=UTC)
    assert await get_todays_workout("user-1", now=thursday) is None


@pytest.mark.asyncio
async def test_regenerate_with_fewer_days_drops_unplanned_days(db, make_profile):
    await seed_catalog()
    profile = make_profile(frequency=6)
    await generate_weekly_workout("user-1", profile, now=WEDNESDAY)
    before = {w.day: w for w in await db.get_week_workouts("user-1", 2024, 1)}
    await db.mark_exercise_complete("user-1", before[1].id, before[1].exercises[0].id)
    await db.mark_exercise_complete("user-1", before[2].id, before[2].exercises[0].id)

    result = await generate_weekly_workout(
        "user-1", profile.with_changes({"frequency": 3}), now=WEDNESDAY, regenerate=True
    )
    after = await db.get_week_workouts("user-1", 2024, 1)

    assert result.days == [1, 3, 5]
    assert [w.day for w in after] == [1, 3, 5]
    assert {w.day: w.id for w in after} == {d: before[d].id for d in (1, 3, 5)}
    assert await db.get_completed_exercises(before[1].id) == [before[1].exercises[0].id]
    assert await db.get_completed_exercises(before[2].id) == []

    tuesday = datetime(2024, 1, 2, 12, tzinfo=UTC)
    assert await get_todays_workout("user-1", now=tuesday) is None
