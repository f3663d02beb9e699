"""
Command-line interface for the FoundryLab planner.

Sub-commands:
- week: allocate and enrich one training week around an optional running schedule.
- block: generate a multi-week lifting block.
- timeline: lay out the annual block timeline for a season with competitions.
- program: infer a structured program (and the next rotation day) from history.

Results are printed as JSON on stdout. The DAL is chosen the same way for
every command: PostgreSQL in production when a DATABASE_URL is configured,
otherwise the JSON files under PROJECT_ROOT/knowledge.
"""
import argparse
import json
import sys
from datetime import date
from typing import List, Optional

import psycopg

from foundry_lab.config import settings
from foundry_lab.core.models import (
    BlockConfig,
    CardioRange,
    Competition,
    RunningSchedule,
    SessionRange,
    TimelineConfig,
    WeeklyTargets,
)
from foundry_lab.core.orchestrator import Orchestrator
from foundry_lab.core.taxonomy import DayOfWeek, EventPriority, ExperienceLevel, RunType, TrainingGoal, TrainingPhase
from foundry_lab.data_access.dal import DataAccessLayer
from foundry_lab.data_access.json_dal import JsonDal
from foundry_lab.data_access.postgres_dal import PostgresDal
from foundry_lab.infra import log_utils


def build_dal() -> DataAccessLayer:
    if settings.DATABASE_URL and settings.ENVIRONMENT == "production":
        try:
            return PostgresDal()
        except (RuntimeError, psycopg.Error) as e:
            log_utils.log_message(f"Postgres DAL init failed: {e}. Falling back to JSON.", "WARN")
    return JsonDal()


def parse_range(text: str) -> SessionRange:
    """'3-4' or '3' -> SessionRange."""
    low, _, high = text.partition("-")
    return SessionRange(min=int(low), max=int(high or low))


def parse_runs(text: Optional[str]) -> Optional[RunningSchedule]:
    """'tuesday:tempo,saturday:long_run' -> RunningSchedule."""
    if not text:
        return None
    days: List[DayOfWeek] = []
    types: List[RunType] = []
    for item in text.split(","):
        day, _, run_type = item.strip().partition(":")
        days.append(DayOfWeek(day.lower()))
        types.append(RunType(run_type or RunType.EASY_RUN.value))
    return RunningSchedule(days=days, types=types)


def parse_competition(text: str) -> Competition:
    """'name:YYYY-MM-DD[:priority]' -> Competition."""
    parts = text.split(":")
    if len(parts) < 2:
        raise argparse.ArgumentTypeError(f"Expected name:YYYY-MM-DD[:priority], got {text!r}")
    name, event_date = parts[0], date.fromisoformat(parts[1])
    priority = EventPriority(parts[2]) if len(parts) > 2 else EventPriority.PRIMARY
    return Competition(id=f"{name.lower().replace(' ', '-')}-{event_date.isoformat()}", name=name, event_date=event_date, priority=priority)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate FoundryLab training plans.")
    sub = parser.add_subparsers(dest="command", required=True)

    week = sub.add_parser("week", help="Plan one training week.")
    week.add_argument("--hypertrophy", type=parse_range, default=parse_range("3-4"), help="Lift sessions, e.g. 3-4.")
    week.add_argument("--strength", type=parse_range, default=None, help="Strength sessions among the lifts.")
    week.add_argument("--zone2", type=parse_range, default=parse_range("2-3"), help="Zone 2 sessions, e.g. 2-3.")
    week.add_argument("--zone2-minutes", type=int, default=30)
    week.add_argument("--tempo", type=int, default=0)
    week.add_argument("--intervals", type=int, default=0)
    week.add_argument("--rest-days", type=int, default=1)
    week.add_argument("--available", type=str, default=None, help="Comma-separated days, default all.")
    week.add_argument("--runs", type=str, default=None, help="Fixed runs, e.g. tuesday:tempo,saturday:long_run.")
    week.add_argument("--week-start", type=date.fromisoformat, default=None)
    week.add_argument("--goal", type=TrainingGoal, choices=list(TrainingGoal), default=TrainingGoal.HYPERTROPHY)
    week.add_argument("--phase", type=TrainingPhase, choices=list(TrainingPhase), default=TrainingPhase.ACCUMULATION)

    block = sub.add_parser("block", help="Generate a multi-week block.")
    block.add_argument("--goal", type=TrainingGoal, choices=list(TrainingGoal), default=TrainingGoal.HYPERTROPHY)
    block.add_argument("--weeks", type=int, default=4)
    block.add_argument("--days", type=int, default=4)
    block.add_argument("--experience", type=ExperienceLevel, choices=list(ExperienceLevel), default=ExperienceLevel.INTERMEDIATE)
    block.add_argument("--phase", type=TrainingPhase, choices=list(TrainingPhase), default=None)
    block.add_argument("--session-minutes", type=int, default=None)
    block.add_argument("--start-date", type=date.fromisoformat, default=None)

    timeline = sub.add_parser("timeline", help="Lay out the annual block timeline.")
    timeline.add_argument("--start-date", type=date.fromisoformat, required=True)
    timeline.add_argument("--end-date", type=date.fromisoformat, required=True)
    timeline.add_argument("--goal", type=TrainingGoal, choices=list(TrainingGoal), default=TrainingGoal.GENERAL)
    timeline.add_argument("--competition", type=parse_competition, action="append", default=[])
    timeline.add_argument("--deload-frequency", type=int, default=settings.DEFAULT_DELOAD_FREQUENCY)
    timeline.add_argument("--block-weeks", type=int, default=settings.DEFAULT_BLOCK_WEEKS)

    program = sub.add_parser("program", help="Infer a program from logged workouts.")
    program.add_argument("--today", type=date.fromisoformat, default=None)
    return parser


def run(args: argparse.Namespace, orchestrator: Orchestrator) -> dict:
    if args.command == "week":
        available = [DayOfWeek(d.strip().lower()) for d in args.available.split(",")] if args.available else list(DayOfWeek)
        targets = WeeklyTargets(
            hypertrophy_sessions=args.hypertrophy,
            strength_sessions=args.strength,
            zone2_sessions=CardioRange(min=args.zone2.min, max=args.zone2.max, duration_minutes=args.zone2_minutes),
            tempo_sessions=args.tempo,
            interval_sessions=args.intervals,
            rest_days=args.rest_days,
            available_days=available,
        )
        plan, warnings = orchestrator.allocate_week_sessions(
            targets, parse_runs(args.runs), args.week_start, goal=args.goal, phase=args.phase
        )
        return {"plan": plan.model_dump(mode="json"), "warnings": warnings}

    if args.command == "block":
        config = BlockConfig(
            goal=args.goal,
            duration_weeks=args.weeks,
            days_per_week=args.days,
            experience=args.experience,
            phase=args.phase,
            session_duration_minutes=args.session_minutes,
        )
        block = orchestrator.generate_block(config, args.start_date or date.today())
        return block.model_dump(mode="json")

    if args.command == "timeline":
        config = TimelineConfig(
            start_date=args.start_date,
            end_date=args.end_date,
            goal=args.goal,
            competitions=args.competition,
            deload_frequency=args.deload_frequency,
            block_length_weeks=args.block_weeks,
        )
        blocks = orchestrator.generate_annual_timeline(config)
        return {"blocks": [b.model_dump(mode="json") for b in blocks]}

    result = orchestrator.pattern_to_program()
    suggestion = orchestrator.next_in_rotation(args.today or date.today())
    return {
        "result": result.model_dump(mode="json"),
        "workouts_remaining": result.workouts_remaining,
        "days_remaining": result.days_remaining,
        "next_in_rotation": suggestion.model_dump(mode="json") if suggestion else None,
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Parses CLI arguments and prints the requested plan as JSON."""
    args = build_parser().parse_args(argv)
    log_utils.log_message(f"Planner CLI invoked for '{args.command}'.", "INFO")

    orchestrator = Orchestrator(build_dal())
    output = run(args, orchestrator)
    json.dump(output, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
