"""Week and block plan builder.

Turns allocated days into concrete lifting sessions: exercises come from the
DAL, sets and reps from the prescription generator, load text from movement
memory. Also assembles multi-week blocks from a split and a periodization
template.
"""

from datetime import date, timedelta
from statistics import mean
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from foundry_lab.core import prescription
from foundry_lab.core.allocation import allocate
from foundry_lab.core.models import (
    BlockConfig,
    Exercise,
    GeneratedBlock,
    GeneratedExercise,
    GeneratedWeek,
    GeneratedWorkout,
    PhaseConfig,
    PlannedDay,
    PlannedExercise,
    RunningSchedule,
    SplitDay,
    WeeklyPlan,
    WeeklyTargets,
)
from foundry_lab.core.splits import (
    MOVEMENT_PATTERN_EXERCISES,
    lifting_rotation,
    phase_for_week,
    select_periodization,
    select_split,
)
from foundry_lab.core.taxonomy import (
    COMPOUND_PATTERNS,
    LIFT_SESSION_TYPES,
    ExperienceLevel,
    MovementPattern,
    TrainingGoal,
    TrainingPhase,
)
from foundry_lab.data_access.dal import DataAccessLayer
from foundry_lab.infra import log_utils

class Selection(NamedTuple):
    exercise: Exercise
    pattern: Optional[MovementPattern]
    is_compound: bool
    is_primary: bool


GOAL_NAMES: Dict[TrainingGoal, str] = {
    TrainingGoal.STRENGTH: "Strength",
    TrainingGoal.HYPERTROPHY: "Hypertrophy",
    TrainingGoal.POWERLIFTING: "Powerlifting",
    TrainingGoal.BODYBUILDING: "Bodybuilding",
    TrainingGoal.ATHLETIC: "Athletic Performance",
    TrainingGoal.GENERAL: "General Fitness",
}


# --- Exercise selection -------------------------------------------------------

def _is_averse(name: str, aversions: Iterable[str]) -> bool:
    lowered = name.lower()
    return any(a.lower() in lowered for a in aversions if a)


def select_exercise_for_pattern(
    dal: DataAccessLayer,
    pattern: MovementPattern,
    aversions: Sequence[str] = (),
    excluding: Sequence[str] = (),
    preferred: Sequence[str] = (),
) -> Optional[Exercise]:
    """
    Resolve a movement pattern to a catalog exercise.

    Tries the caller's preferred names, then the pattern's preferred names in
    order (skipping aversions), then any exercise tagged with the pattern,
    then the pattern's muscle groups.
    """
    entry = MOVEMENT_PATTERN_EXERCISES[MovementPattern(pattern)]
    candidates = list(preferred) + entry["preferred"]

    for name in candidates:
        if _is_averse(name, aversions):
            continue
        found = dal.find_exercise(name=name, excluding=excluding)
        if found is not None:
            return found

    for kwargs in ({"movement_pattern": pattern}, {"muscle_groups": entry["muscle_groups"]}):
        found = dal.find_exercise(excluding=excluding, **kwargs)
        if found is not None and not _is_averse(found.name, aversions):
            return found
    return None


def _select_day_exercises(
    dal: DataAccessLayer,
    split_day: SplitDay,
    aversions: Sequence[str],
    preferred: Sequence[str] = (),
) -> List[Selection]:
    """Primary movements first, then accessory slots filled by muscle group."""
    chosen: List[Selection] = []
    used: List[str] = []

    for pattern in split_day.primary_movements:
        exercise = select_exercise_for_pattern(dal, pattern, aversions, used, preferred)
        if exercise is None:
            log_utils.log_message(f"[plan_builder] No exercise found for {pattern.value} on {split_day.name}", "WARN")
            continue
        used.append(exercise.id)
        chosen.append(Selection(exercise, pattern, pattern in COMPOUND_PATTERNS, True))

    for slot in range(split_day.accessory_slots):
        group = split_day.muscle_groups[slot % len(split_day.muscle_groups)] if split_day.muscle_groups else None
        if group is None:
            break
        exercise = dal.find_exercise(muscle_groups=[group], excluding=used)
        if exercise is None or _is_averse(exercise.name, aversions):
            log_utils.log_message(f"[plan_builder] No accessory found for {group} on {split_day.name}", "WARN")
            continue
        used.append(exercise.id)
        chosen.append(Selection(exercise, exercise.movement_pattern, False, False))

    return chosen


def _substitutes(pattern: Optional[MovementPattern], chosen: Exercise, aversions: Sequence[str]) -> List[str]:
    if pattern is None:
        return []
    names = MOVEMENT_PATTERN_EXERCISES[pattern]["preferred"]
    return [n for n in names if n.lower() != chosen.name.lower() and not _is_averse(n, aversions)][:2]


# --- Weekly plan --------------------------------------------------------------

def _phase_config(phase: TrainingPhase, goal: TrainingGoal, experience: ExperienceLevel) -> PhaseConfig:
    config = BlockConfig(goal=goal, experience=experience, phase=phase, duration_weeks=1)
    return select_periodization(config).phases[0]


def enrich_lifting_day(
    dal: DataAccessLayer,
    day: PlannedDay,
    split_day: SplitDay,
    phase: PhaseConfig,
    experience: ExperienceLevel,
    week_in_phase: int = 1,
    aversions: Sequence[str] = (),
) -> PlannedDay:
    """Return a copy of a lifting day with prescribed exercises attached."""
    exercises: List[PlannedExercise] = []
    for exercise, pattern, is_compound, _ in _select_day_exercises(dal, split_day, aversions):
        sets = prescription.generate_sets(phase, is_compound, experience, week_in_phase)
        working = [s for s in sets if not s.is_warmup]
        memory = dal.get_movement_memory(exercise.id)
        warmups = len(sets) - len(working)
        note = f"Target RPE {working[0].target_rpe}, tempo {working[0].tempo}"
        if warmups:
            note += f", {warmups} warm-up set{'s' if warmups > 1 else ''} first"
        exercises.append(
            PlannedExercise(
                exercise_id=exercise.id,
                exercise_name=exercise.name,
                sets=len(working),
                reps=prescription.format_rep_range(phase),
                load_guidance=prescription.load_guidance(memory, working[0].target_reps),
                progression_note=note,
                substitute_options=_substitutes(pattern, exercise, aversions),
            )
        )
    return day.model_copy(update={"exercises": exercises})


def build_week(
    dal: DataAccessLayer,
    targets: WeeklyTargets,
    week_start: date,
    running_schedule: Optional[RunningSchedule] = None,
    phase: TrainingPhase = TrainingPhase.ACCUMULATION,
    goal: TrainingGoal = TrainingGoal.HYPERTROPHY,
    experience: ExperienceLevel = ExperienceLevel.INTERMEDIATE,
    week_in_phase: int = 1,
    aversions: Sequence[str] = (),
) -> Tuple[WeeklyPlan, List[str]]:
    """Allocate a week and fill its lifting days with exercises."""
    result = allocate(targets, running_schedule, goal)
    lift_days = [d for d in result.days if d.session_type in LIFT_SESSION_TYPES]
    split_days = {s.name: s for s in lifting_rotation(len(lift_days), goal)}
    phase_config = _phase_config(phase, goal, experience)

    days: List[PlannedDay] = []
    for day in result.days:
        split_day = split_days.get(day.focus)
        if day.session_type in LIFT_SESSION_TYPES and split_day is not None:
            day = enrich_lifting_day(dal, day, split_day, phase_config, experience, week_in_phase, aversions)
        days.append(day)

    plan = WeeklyPlan(
        week_of=week_start,
        phase=phase,
        days=days,
        rationale=result.rationale,
        targets=targets,
    )
    log_utils.log_message(f"[plan_builder] Built week of {week_start.isoformat()} with {len(lift_days)} lifting days")
    return plan, result.warnings


def swap_days(plan: WeeklyPlan, index1: int, index2: int) -> WeeklyPlan:
    """Exchange two days' content, keeping each slot's day number and name."""
    if index1 == index2:
        return plan
    first, second = plan.days[index1], plan.days[index2]
    keep = ("day_number", "day_name")

    new_first = second.model_copy(update={**{k: getattr(first, k) for k in keep}, "is_locked": True})
    new_second = first.model_copy(update={**{k: getattr(second, k) for k in keep}, "is_locked": True})

    days = list(plan.days)
    days[index1], days[index2] = new_first, new_second
    return plan.model_copy(
        update={
            "days": days,
            "adjustments_applied": plan.adjustments_applied + [f"Swapped {first.day_name} and {second.day_name}"],
        }
    )


# --- Multi-week block ---------------------------------------------------------

def _generate_workout(
    split_day: SplitDay,
    selections: List[Selection],
    phase: PhaseConfig,
    config: BlockConfig,
    week_in_phase: int,
) -> GeneratedWorkout:
    exercises = [
        GeneratedExercise(
            exercise_id=exercise.id,
            exercise_name=exercise.name,
            muscle_group=exercise.muscle_group,
            movement_pattern=pattern,
            sets=prescription.generate_sets(phase, is_compound, config.experience, week_in_phase),
            notes="Main lift" if is_compound else None,
        )
        for exercise, pattern, is_compound, _ in selections
    ]
    primaries = sum(1 for s in selections if s.is_primary)

    duration = prescription.estimate_workout_duration(exercises)
    limit = config.session_duration_minutes
    # trim accessories from the end until the session fits
    while limit and duration > limit and len(exercises) > primaries:
        exercises.pop()
        duration = prescription.estimate_workout_duration(exercises)

    return GeneratedWorkout(
        day_number=split_day.day_number,
        name=split_day.name,
        focus=split_day.focus,
        exercises=exercises,
        estimated_duration=duration,
    )


def build_block(
    dal: DataAccessLayer,
    config: BlockConfig,
    start_date: date,
    aversions: Sequence[str] = (),
) -> GeneratedBlock:
    """
    Construct a multi-week training block.

    Exercises are chosen once per split day and kept for the whole block;
    sets, reps and RPE evolve week by week with the template's phases. A
    block longer than its template repeats the template.
    """
    split = select_split(config)
    template = select_periodization(config)
    selections = {
        d.day_number: _select_day_exercises(dal, d, aversions, config.focus_lifts)
        for d in split.days
    }

    weeks: List[GeneratedWeek] = []
    for week_number in range(1, config.duration_weeks + 1):
        template_week = (week_number - 1) % template.duration_weeks + 1
        phase, week_in_phase = phase_for_week(template, template_week)
        workouts = [
            _generate_workout(d, selections[d.day_number], phase, config, week_in_phase)
            for d in split.days
        ]
        working = [s for w in workouts for e in w.exercises for s in e.sets if not s.is_warmup]
        weeks.append(
            GeneratedWeek(
                week_number=week_number,
                phase=phase.phase,
                theme=prescription.week_theme(phase.phase, week_in_phase, phase.weeks),
                workouts=workouts,
                total_volume=len(working),
                rpe_min=phase.rpe_min,
                rpe_max=phase.rpe_max,
            )
        )

    def _avg_rpe(week: GeneratedWeek) -> float:
        rpes = [s.target_rpe for w in week.workouts for e in w.exercises for s in e.sets if not s.is_warmup]
        return round(mean(rpes), 1) if rpes else 0.0

    block = GeneratedBlock(
        name=f"{config.duration_weeks}-Week {GOAL_NAMES[config.goal]} Block",
        description=template.description,
        goal=config.goal,
        start_date=start_date,
        duration_weeks=config.duration_weeks,
        split_name=split.name,
        template_id=template.id,
        weeks=weeks,
        volume_progression=[w.total_volume for w in weeks],
        intensity_progression=[_avg_rpe(w) for w in weeks],
    )
    log_utils.log_message(
        f"[plan_builder] Built {block.name} ({split.name}, {template.id}) starting {start_date.isoformat()}"
    )
    return block


def week_start_for(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())
