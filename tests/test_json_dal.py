import json
from datetime import date

from conftest import CATALOG, make_workout, ppl_history
from foundry_lab.config import settings
from foundry_lab.core.models import MovementMemory, PlannedBlock, WeeklyPlan, WeeklyTargets
from foundry_lab.core.plan_builder import build_week
from foundry_lab.core.taxonomy import BlockType, MovementPattern
from foundry_lab.data_access.json_dal import JsonDal


def write_catalog(rows):
    path = settings.exercise_catalog_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(rows), encoding="utf-8")


def test_json_dal_roundtrip():
    dal = JsonDal()

    history = ppl_history(date(2024, 1, 1), count=4)
    for workout in history:
        dal.save_workout(workout)
    # saving the same id again replaces it
    dal.save_workout(make_workout(0, "Push Day", date(2024, 1, 1), [CATALOG[2]], sets=5))

    workouts = dal.list_workouts(10)
    assert [w.id for w in workouts] == ["w3", "w2", "w1", "w0"]
    assert len(workouts[-1].sets) == 5
    assert workouts[1].sets[0].exercise.movement_pattern == MovementPattern.SQUAT
    assert [w.id for w in dal.list_workouts(2)] == ["w3", "w2"]
    assert [w.id for w in dal.list_workouts(10, since=date(2024, 1, 5))] == ["w3", "w2"]

    assert dal.get_movement_memory("3") is None
    dal.save_movement_memory(MovementMemory(exercise_id="3", last_weight=82.5, last_reps=8, confidence="high"))
    memory = dal.get_movement_memory("3")
    assert memory.last_weight == 82.5
    assert memory.confidence == "high"


def test_catalog_lookup():
    write_catalog([
        {"id": 1, "name": "Barbell Back Squat", "category": "Legs", "movement_pattern": "squat"},
        {"id": 2, "name": "Goblet Squat", "muscle_group": "Legs", "movement_pattern": "squat"},
        {"id": 3, "name": "Cable Fly", "muscle_group": "Chest"},
        {"name": "No id"},
        {"id": 4, "name": "Mystery", "movement_pattern": "teleport"},
    ])
    dal = JsonDal()

    assert [e.name for e in dal.load_catalog()] == ["Barbell Back Squat", "Goblet Squat", "Cable Fly"]
    assert dal.find_exercise(movement_pattern=MovementPattern.SQUAT).id == "1"
    assert dal.find_exercise(movement_pattern=MovementPattern.SQUAT, excluding=["1"]).name == "Goblet Squat"
    assert dal.find_exercise(name="cable fly").muscle_group == "Chest"
    assert dal.find_exercise(muscle_groups=["chest"]).id == "3"
    assert dal.find_exercise(muscle_groups=["Back"]) is None


def test_malformed_files_fall_back_to_defaults():
    settings.workouts_path.parent.mkdir(parents=True, exist_ok=True)
    settings.workouts_path.write_text("{not json", encoding="utf-8")
    assert JsonDal().list_workouts(5) == []
    assert JsonDal().load_catalog() == []


def test_plans_and_timelines_are_written(memory_dal):
    dal = JsonDal()
    plan, _ = build_week(memory_dal, WeeklyTargets(), date(2025, 3, 3))
    dal.save_weekly_plan(plan)

    saved = settings.plans_path / "week_2025-03-03.json"
    loaded = WeeklyPlan.model_validate_json(saved.read_text(encoding="utf-8"))
    assert loaded.model_dump() == plan.model_dump()

    block = PlannedBlock(
        name="Hypertrophy",
        block_type=BlockType.HYPERTROPHY,
        planned_start_date=date(2025, 1, 6),
        duration_weeks=4,
        sequence_order=0,
    )
    dal.save_timeline([block], date(2025, 1, 6))
    rows = json.loads((settings.plans_path / "timeline_2025-01-06.json").read_text(encoding="utf-8"))
    assert rows[0]["block_type"] == "hypertrophy"
    assert rows[0]["planned_start_date"] == "2025-01-06"
