"""JSON file-based implementation of the Data Access Layer."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from foundry_lab.config import settings
from foundry_lab.core.models import Exercise, MovementMemory, PlannedBlock, WeeklyPlan, Workout
from foundry_lab.core.taxonomy import MovementPattern
from foundry_lab.infra import log_utils
from .dal import DataAccessLayer


class JsonDal(DataAccessLayer):
    """Data Access Layer that persists data to JSON files on disk."""

    def _read_json(self, path: Path, default: Any) -> Any:
        if not path.exists():
            return default
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            log_utils.log_message(f"[JsonDal] Could not read {path}: {e}", "ERROR")
            return default

    def _write_json(self, path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)

    # --- Exercise Catalog ----------------------------------------------------
    def _row_to_exercise(self, row: Dict[str, Any]) -> Optional[Exercise]:
        pattern = row.get("movement_pattern")
        try:
            return Exercise(
                id=str(row["id"]),
                name=row.get("name") or f"Exercise #{row['id']}",
                muscle_group=row.get("muscle_group") or row.get("category") or "Other",
                movement_pattern=MovementPattern(pattern) if pattern else None,
                modality=row.get("modality") or "Strength",
                equipment=row.get("equipment") or [],
            )
        except (KeyError, ValueError, ValidationError) as e:
            log_utils.log_message(f"[JsonDal] Skipping malformed catalog row {row!r}: {e}", "WARN")
            return None

    def load_catalog(self) -> List[Exercise]:
        rows = self._read_json(settings.exercise_catalog_path, [])
        exercises = (self._row_to_exercise(r) for r in rows if isinstance(r, dict))
        return [e for e in exercises if e is not None]

    def find_exercise(
        self,
        movement_pattern: Optional[MovementPattern] = None,
        name: Optional[str] = None,
        muscle_groups: Optional[Sequence[str]] = None,
        excluding: Sequence[str] = (),
    ) -> Optional[Exercise]:
        wanted_groups = {g.lower() for g in muscle_groups} if muscle_groups else None
        excluded = set(excluding)
        for exercise in self.load_catalog():
            if exercise.id in excluded:
                continue
            if name is not None and exercise.name.lower() != name.lower():
                continue
            if movement_pattern is not None and exercise.movement_pattern != movement_pattern:
                continue
            if wanted_groups is not None and exercise.muscle_group.lower() not in wanted_groups:
                continue
            return exercise
        return None

    # --- Workout History -----------------------------------------------------
    def _load_workouts(self) -> List[Workout]:
        out: List[Workout] = []
        for row in self._read_json(settings.workouts_path, []):
            try:
                out.append(Workout.model_validate(row))
            except ValidationError as e:
                log_utils.log_message(f"[JsonDal] Skipping malformed workout: {e}", "WARN")
        return out

    def list_workouts(self, limit: int, since: Optional[date] = None) -> List[Workout]:
        completed = [w for w in self._load_workouts() if w.date_completed is not None]
        if since is not None:
            completed = [w for w in completed if w.date_completed >= since]
        completed.sort(key=lambda w: w.date_completed, reverse=True)
        return completed[:limit]

    def save_workout(self, workout: Workout) -> None:
        workouts = [w for w in self._load_workouts() if w.id != workout.id]
        workouts.append(workout)
        self._write_json(settings.workouts_path, [w.model_dump(mode="json") for w in workouts])

    # --- Movement Memory -----------------------------------------------------
    def get_movement_memory(self, exercise_id: str) -> Optional[MovementMemory]:
        memory = self._read_json(settings.movement_memory_path, {})
        entry = memory.get(str(exercise_id)) if isinstance(memory, dict) else None
        if not entry:
            return None
        return MovementMemory(exercise_id=str(exercise_id), **entry)

    def save_movement_memory(self, memory: MovementMemory) -> None:
        data = self._read_json(settings.movement_memory_path, {})
        data[memory.exercise_id] = memory.model_dump(mode="json", exclude={"exercise_id"})
        self._write_json(settings.movement_memory_path, data)

    # --- Plan Persistence ----------------------------------------------------
    def save_weekly_plan(self, plan: WeeklyPlan) -> None:
        """Write the weekly plan to disk under plans_path."""
        path = settings.plans_path / f"week_{plan.week_of.isoformat()}.json"
        self._write_json(path, plan.model_dump(mode="json"))

    def save_timeline(self, blocks: List[PlannedBlock], start_date: date) -> None:
        path = settings.plans_path / f"timeline_{start_date.isoformat()}.json"
        self._write_json(path, [b.model_dump(mode="json") for b in blocks])
