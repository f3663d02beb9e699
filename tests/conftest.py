from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

import pytest

from foundry_lab.config import settings
from foundry_lab.core.models import Exercise, MovementMemory, PlannedBlock, WeeklyPlan, Workout, WorkoutSet
from foundry_lab.core.taxonomy import MovementPattern
from foundry_lab.data_access.dal import DataAccessLayer

M = MovementPattern

CATALOG = [
    Exercise(id="1", name="Barbell Back Squat", muscle_group="Legs", movement_pattern=M.SQUAT),
    Exercise(id="2", name="Romanian Deadlift", muscle_group="Legs", movement_pattern=M.HINGE),
    Exercise(id="3", name="Barbell Bench Press", muscle_group="Chest", movement_pattern=M.HORIZONTAL_PUSH),
    Exercise(id="4", name="Overhead Press", muscle_group="Shoulders", movement_pattern=M.VERTICAL_PUSH),
    Exercise(id="5", name="Barbell Row", muscle_group="Back", movement_pattern=M.HORIZONTAL_PULL),
    Exercise(id="6", name="Lat Pulldown", muscle_group="Back", movement_pattern=M.VERTICAL_PULL),
    Exercise(id="7", name="Plank", muscle_group="Core", movement_pattern=M.CORE),
    Exercise(id="8", name="Farmer's Walk", muscle_group="Core", movement_pattern=M.CARRY),
    Exercise(id="9", name="Cable Fly", muscle_group="Chest"),
    Exercise(id="10", name="Triceps Pushdown", muscle_group="Triceps"),
    Exercise(id="11", name="Biceps Curl", muscle_group="Biceps"),
    Exercise(id="12", name="Leg Extension", muscle_group="Legs"),
    Exercise(id="13", name="Hip Thrust", muscle_group="Glutes", movement_pattern=M.HINGE),
    Exercise(id="14", name="Lateral Raise", muscle_group="Shoulders"),
]


class InMemoryDal(DataAccessLayer):
    def __init__(
        self,
        catalog: Sequence[Exercise] = CATALOG,
        workouts: Optional[List[Workout]] = None,
        memory: Optional[Dict[str, MovementMemory]] = None,
    ):
        self.catalog = list(catalog)
        self.workouts = list(workouts or [])
        self.memory = dict(memory or {})
        self.saved_plans: List[WeeklyPlan] = []
        self.saved_timelines: List[List[PlannedBlock]] = []

    def find_exercise(self, movement_pattern=None, name=None, muscle_groups=None, excluding=()):
        groups = {g.lower() for g in muscle_groups} if muscle_groups else None
        for exercise in self.catalog:
            if exercise.id in excluding:
                continue
            if name is not None and exercise.name.lower() != name.lower():
                continue
            if movement_pattern is not None and exercise.movement_pattern != movement_pattern:
                continue
            if groups is not None and exercise.muscle_group.lower() not in groups:
                continue
            return exercise
        return None

    def list_workouts(self, limit: int, since: Optional[date] = None) -> List[Workout]:
        done = [w for w in self.workouts if w.date_completed and (since is None or w.date_completed >= since)]
        return sorted(done, key=lambda w: w.date_completed, reverse=True)[:limit]

    def save_workout(self, workout: Workout) -> None:
        self.workouts = [w for w in self.workouts if w.id != workout.id] + [workout]

    def get_movement_memory(self, exercise_id: str) -> Optional[MovementMemory]:
        return self.memory.get(exercise_id)

    def save_weekly_plan(self, plan: WeeklyPlan) -> None:
        self.saved_plans.append(plan)

    def save_timeline(self, blocks: List[PlannedBlock], start_date: date) -> None:
        self.saved_timelines.append(blocks)


def make_workout(idx: int, focus: str, day: date, exercises: Sequence[Exercise], sets: int = 3,
                 reps: int = 10, weight: Optional[float] = 60.0, warmups: int = 0) -> Workout:
    rows: List[WorkoutSet] = []
    for exercise in exercises:
        rows.extend(WorkoutSet(exercise=exercise, actual_reps=12, actual_weight=20.0, is_warmup=True) for _ in range(warmups))
        rows.extend(WorkoutSet(exercise=exercise, actual_reps=reps, actual_weight=weight) for _ in range(sets))
    return Workout(id=f"w{idx}", focus=focus, date_completed=day, duration_minutes=55, sets=rows)


def ppl_history(start: date, count: int = 8, every: int = 2) -> List[Workout]:
    """Push / Pull / Leg days in strict rotation, one session every `every` days."""
    by_focus = {
        "Push Day": [CATALOG[2], CATALOG[3], CATALOG[9]],
        "Pull Day": [CATALOG[4], CATALOG[5], CATALOG[10]],
        "Leg Day": [CATALOG[0], CATALOG[1], CATALOG[11]],
    }
    focuses = list(by_focus)
    return [
        make_workout(i, focuses[i % 3], start + timedelta(days=i * every), by_focus[focuses[i % 3]])
        for i in range(count)
    ]


@pytest.fixture(autouse=True)
def isolated_project_root(tmp_path, monkeypatch):
    # Redirect settings paths (logs, knowledge files) to the temp directory
    monkeypatch.setattr(settings, "PROJECT_ROOT", tmp_path)
    return tmp_path


@pytest.fixture
def memory_dal():
    return InMemoryDal()
