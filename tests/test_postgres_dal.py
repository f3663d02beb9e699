"""Tests for the Postgres DAL implementation.

These tests require a running PostgreSQL instance. If the environment variable
`TEST_DATABASE_URL` is not set, the tests will be skipped. The tests mirror the
JSON DAL round-trip to ensure functional parity.
"""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path

import pytest

from conftest import CATALOG, ppl_history
from foundry_lab.core.models import PlannedBlock, WeeklyTargets
from foundry_lab.core.plan_builder import build_week
from foundry_lab.core.taxonomy import BlockType, MovementPattern

TEST_DB_URL = os.getenv("TEST_DATABASE_URL")

pytestmark = pytest.mark.skipif(not TEST_DB_URL, reason="TEST_DATABASE_URL not configured")

SCHEMA = Path(__file__).resolve().parent.parent / "init-db" / "schema.sql"
TABLES = "planned_blocks, weekly_plans, movement_memory, workout_sets, workouts, exercises"


@pytest.fixture
def pg_dal():
    import psycopg
    from psycopg.rows import dict_row
    from psycopg_pool import ConnectionPool

    from foundry_lab.data_access.postgres_dal import PostgresDal

    with psycopg.connect(TEST_DB_URL, autocommit=True) as conn:
        conn.execute(SCHEMA.read_text())
        conn.execute(f"TRUNCATE {TABLES} RESTART IDENTITY CASCADE;")

    pool = ConnectionPool(conninfo=TEST_DB_URL, min_size=1, max_size=2, kwargs={"row_factory": dict_row}, open=True)
    try:
        yield PostgresDal(pool)
    finally:
        pool.close()


def test_postgres_dal_roundtrip(pg_dal):
    history = ppl_history(date(2024, 1, 1), count=4)
    for workout in history:
        pg_dal.save_workout(workout)

    workouts = pg_dal.list_workouts(10)
    assert [w.id for w in workouts] == ["w3", "w2", "w1", "w0"]
    assert len(workouts[0].sets) == len(history[3].sets)
    assert workouts[0].sets[0].exercise.name == history[3].sets[0].exercise.name
    assert workouts[0].sets[0].actual_weight == 60.0
    assert [w.id for w in pg_dal.list_workouts(10, since=date(2024, 1, 5))] == ["w3", "w2"]

    # exercises logged with a workout become part of the catalog
    assert pg_dal.find_exercise(movement_pattern=MovementPattern.SQUAT).name == CATALOG[0].name
    assert pg_dal.find_exercise(name="barbell row").id == CATALOG[4].id
    assert pg_dal.find_exercise(muscle_groups=["Chest"], excluding=[CATALOG[2].id]) is None
    assert pg_dal.get_movement_memory(CATALOG[2].id) is None


def test_postgres_dal_persists_plans(pg_dal, memory_dal):
    import psycopg

    plan, _ = build_week(memory_dal, WeeklyTargets(), date(2025, 3, 3))
    pg_dal.save_weekly_plan(plan)
    pg_dal.save_weekly_plan(plan)

    block = PlannedBlock(name="Hypertrophy", block_type=BlockType.HYPERTROPHY, planned_start_date=date(2025, 1, 6), duration_weeks=4)
    pg_dal.save_timeline([block], date(2025, 1, 6))
    pg_dal.save_timeline([block], date(2025, 1, 6))

    with psycopg.connect(TEST_DB_URL) as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT plan FROM weekly_plans WHERE week_of = %s;", (date(2025, 3, 3),))
            rows = cur.fetchall()
            assert len(rows) == 1
            assert rows[0][0]["week_of"] == "2025-03-03"

            cur.execute("SELECT block_type FROM planned_blocks WHERE timeline_start = %s;", (date(2025, 1, 6),))
            assert cur.fetchall() == [("hypertrophy",)]
