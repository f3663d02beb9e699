import json
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from foundry_lab.config import settings
from foundry_lab.core.models import Exercise, MovementMemory, PlannedBlock, WeeklyPlan, Workout, WorkoutSet
from foundry_lab.core.taxonomy import MovementPattern
from foundry_lab.data_access.dal import DataAccessLayer
from foundry_lab.infra import log_utils

_pool: Optional[ConnectionPool] = None


def get_pool() -> ConnectionPool:
    """Single process-wide pool, opened on first use."""
    global _pool
    if _pool is None:
        if not settings.DATABASE_URL:
            raise RuntimeError("DATABASE_URL is not configured")
        _pool = ConnectionPool(
            conninfo=settings.DATABASE_URL,
            min_size=1,
            max_size=3,
            kwargs={"row_factory": dict_row},
            open=True,
        )
    return _pool


def _row_to_exercise(row: Dict[str, Any], prefix: str = "") -> Exercise:
    pattern = row.get(f"{prefix}movement_pattern")
    return Exercise(
        id=str(row[f"{prefix}id"]),
        name=row[f"{prefix}name"],
        muscle_group=row.get(f"{prefix}muscle_group") or "Other",
        movement_pattern=MovementPattern(pattern) if pattern else None,
        modality=row.get(f"{prefix}modality") or "Strength",
    )


class PostgresDal(DataAccessLayer):
    """
    A Data Access Layer implementation that uses a PostgreSQL database as the backend.
    This class fulfills the contract defined by the DataAccessLayer ABC.
    """

    def __init__(self, pool: Optional[ConnectionPool] = None):
        self.pool = pool or get_pool()

    def find_exercise(
        self,
        movement_pattern: Optional[MovementPattern] = None,
        name: Optional[str] = None,
        muscle_groups: Optional[Sequence[str]] = None,
        excluding: Sequence[str] = (),
    ) -> Optional[Exercise]:
        clauses: List[str] = []
        params: List[Any] = []
        if movement_pattern is not None:
            clauses.append("movement_pattern = %s")
            params.append(MovementPattern(movement_pattern).value)
        if name is not None:
            clauses.append("lower(name) = lower(%s)")
            params.append(name)
        if muscle_groups:
            clauses.append("lower(muscle_group) = ANY(%s)")
            params.append([g.lower() for g in muscle_groups])
        if excluding:
            clauses.append("NOT (id = ANY(%s))")
            params.append(list(excluding))

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT id, name, muscle_group, movement_pattern, modality FROM exercises {where} ORDER BY id LIMIT 1;",
                    params,
                )
                row = cur.fetchone()
        return _row_to_exercise(row) if row else None

    def list_workouts(self, limit: int, since: Optional[date] = None) -> List[Workout]:
        """Loads completed workouts with their sets, newest first."""
        log_utils.log_message(f"[PostgresDal] Loading up to {limit} workouts")
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT id, focus, normalized_focus, date_completed, duration_minutes
                    FROM workouts
                    WHERE date_completed IS NOT NULL AND (%s::date IS NULL OR date_completed >= %s::date)
                    ORDER BY date_completed DESC
                    LIMIT %s;
                    """,
                    (since, since, limit),
                )
                workouts = {row["id"]: Workout(**row) for row in cur.fetchall()}
                if not workouts:
                    return []

                cur.execute(
                    """
                    SELECT s.workout_id, s.actual_reps, s.actual_weight, s.actual_rpe, s.is_warmup,
                           e.id AS ex_id, e.name AS ex_name, e.muscle_group AS ex_muscle_group,
                           e.movement_pattern AS ex_movement_pattern, e.modality AS ex_modality
                    FROM workout_sets s JOIN exercises e ON e.id = s.exercise_id
                    WHERE s.workout_id = ANY(%s)
                    ORDER BY s.workout_id, s.set_index;
                    """,
                    (list(workouts.keys()),),
                )
                for row in cur.fetchall():
                    workouts[row["workout_id"]].sets.append(
                        WorkoutSet(
                            exercise=_row_to_exercise(row, prefix="ex_"),
                            actual_reps=row["actual_reps"],
                            actual_weight=float(row["actual_weight"]) if row["actual_weight"] is not None else None,
                            actual_rpe=float(row["actual_rpe"]) if row["actual_rpe"] is not None else None,
                            is_warmup=row["is_warmup"],
                        )
                    )
        return list(workouts.values())

    def save_workout(self, workout: Workout) -> None:
        log_utils.log_message(f"[PostgresDal] Saving workout {workout.id}")
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO workouts (id, focus, normalized_focus, date_completed, duration_minutes)
                    VALUES (%s, %s, %s, %s, %s)
                    ON CONFLICT (id) DO UPDATE SET
                        focus = EXCLUDED.focus, normalized_focus = EXCLUDED.normalized_focus,
                        date_completed = EXCLUDED.date_completed, duration_minutes = EXCLUDED.duration_minutes;
                    """,
                    (workout.id, workout.focus, workout.normalized_focus, workout.date_completed, workout.duration_minutes),
                )
                cur.execute("DELETE FROM workout_sets WHERE workout_id = %s;", (workout.id,))
                for idx, s in enumerate(workout.sets):
                    ex = s.exercise
                    cur.execute(
                        """
                        INSERT INTO exercises (id, name, muscle_group, movement_pattern, modality)
                        VALUES (%s, %s, %s, %s, %s)
                        ON CONFLICT (id) DO NOTHING;
                        """,
                        (ex.id, ex.name, ex.muscle_group, ex.movement_pattern.value if ex.movement_pattern else None, ex.modality),
                    )
                    cur.execute(
                        """
                        INSERT INTO workout_sets (workout_id, set_index, exercise_id, actual_reps, actual_weight, actual_rpe, is_warmup)
                        VALUES (%s, %s, %s, %s, %s, %s, %s);
                        """,
                        (workout.id, idx, ex.id, s.actual_reps, s.actual_weight, s.actual_rpe, s.is_warmup),
                    )

    def get_movement_memory(self, exercise_id: str) -> Optional[MovementMemory]:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT exercise_id, last_weight, last_reps, confidence FROM movement_memory WHERE exercise_id = %s;",
                    (str(exercise_id),),
                )
                row = cur.fetchone()
        if row is None:
            return None
        return MovementMemory(
            exercise_id=row["exercise_id"],
            last_weight=float(row["last_weight"]) if row["last_weight"] is not None else None,
            last_reps=row["last_reps"],
            confidence=row["confidence"] or "low",
        )

    def save_weekly_plan(self, plan: WeeklyPlan) -> None:
        log_utils.log_message(f"[PostgresDal] Saving weekly plan for {plan.week_of.isoformat()}")
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO weekly_plans (week_of, plan) VALUES (%s, %s)
                    ON CONFLICT (week_of) DO UPDATE SET plan = EXCLUDED.plan;
                    """,
                    (plan.week_of, json.dumps(plan.model_dump(mode="json"))),
                )

    def save_timeline(self, blocks: List[PlannedBlock], start_date: date) -> None:
        log_utils.log_message(f"[PostgresDal] Saving {len(blocks)} planned blocks from {start_date.isoformat()}")
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM planned_blocks WHERE timeline_start = %s;", (start_date,))
                for block in blocks:
                    cur.execute(
                        """
                        INSERT INTO planned_blocks (
                            timeline_start, sequence_order, name, block_type, planned_start_date,
                            duration_weeks, volume_level, intensity_level, depends_on_competition,
                            flagged_competitions, description
                        ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s);
                        """,
                        (
                            start_date,
                            block.sequence_order,
                            block.name,
                            block.block_type.value,
                            block.planned_start_date,
                            block.duration_weeks,
                            block.volume_level.value,
                            block.intensity_level.value,
                            block.depends_on_competition,
                            json.dumps(block.flagged_competitions),
                            block.description,
                        ),
                    )
