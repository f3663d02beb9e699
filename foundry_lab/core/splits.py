"""Training split, periodization template and exercise-pattern tables."""

from typing import Dict, List, Optional

from foundry_lab.core.models import BlockConfig, PeriodizationTemplate, PhaseConfig, SplitDay, TrainingSplit
from foundry_lab.core.taxonomy import ExperienceLevel, MovementPattern, TrainingGoal, TrainingPhase

M = MovementPattern
LEG_DOMINANT_KEYWORDS = ("full body", "legs", "lower", "squat", "deadlift")


def is_leg_dominant(name: str) -> bool:
    lowered = name.lower()
    return any(keyword in lowered for keyword in LEG_DOMINANT_KEYWORDS)


def _day(name: str, focus: str, muscle_groups: List[str], movements: List[MovementPattern], accessory_slots: int = 2) -> SplitDay:
    # day_number is assigned when a split is assembled
    return SplitDay(
        day_number=0,
        name=name,
        focus=focus,
        muscle_groups=muscle_groups,
        primary_movements=movements,
        accessory_slots=accessory_slots,
        is_leg_dominant=is_leg_dominant(name),
    )


# --- Split days --------------------------------------------------------------

FULL_BODY_A = _day("Full Body A", "Squat Day", ["Legs", "Chest", "Back", "Core"], [M.SQUAT, M.HORIZONTAL_PUSH, M.HORIZONTAL_PULL])
FULL_BODY_B = _day("Full Body B", "Hinge Day", ["Shoulders", "Back", "Legs", "Core"], [M.VERTICAL_PUSH, M.VERTICAL_PULL, M.HINGE])
FULL_BODY = _day("Full Body", "Full Body", ["Legs", "Chest", "Back", "Core"], [M.SQUAT, M.HORIZONTAL_PUSH, M.HORIZONTAL_PULL])

PUSH = _day("Push", "Chest & Shoulders", ["Chest", "Shoulders", "Triceps"], [M.HORIZONTAL_PUSH, M.VERTICAL_PUSH], 3)
PULL = _day("Pull", "Back Width", ["Back", "Biceps", "Rear Delts"], [M.VERTICAL_PULL, M.HORIZONTAL_PULL], 3)
LEGS = _day("Legs", "Quad Focus", ["Legs", "Glutes", "Calves"], [M.SQUAT, M.HINGE], 3)

UPPER_A = _day("Upper A", "Upper Push Focus", ["Chest", "Shoulders", "Triceps", "Back"], [M.HORIZONTAL_PUSH, M.HORIZONTAL_PULL, M.VERTICAL_PUSH])
LOWER_A = _day("Lower A", "Squat Focus", ["Legs", "Glutes", "Core"], [M.SQUAT, M.HINGE, M.CORE])
UPPER_B = _day("Upper B", "Upper Pull Focus", ["Back", "Biceps", "Shoulders", "Chest"], [M.HORIZONTAL_PULL, M.VERTICAL_PULL, M.HORIZONTAL_PUSH])
LOWER_B = _day("Lower B", "Hinge Focus", ["Legs", "Glutes", "Hamstrings", "Core"], [M.HINGE, M.SQUAT, M.CARRY])

UPPER = _day("Upper", "Upper Body", ["Chest", "Back", "Shoulders", "Arms"], [M.HORIZONTAL_PUSH, M.HORIZONTAL_PULL, M.VERTICAL_PUSH, M.VERTICAL_PULL])
ARMS_SHOULDERS = _day("Arms & Shoulders", "Arms & Delts", ["Shoulders", "Biceps", "Triceps"], [M.VERTICAL_PUSH, M.VERTICAL_PULL], 3)

SQUAT_DAY = _day("Squat", "Competition Squat", ["Legs", "Glutes", "Core"], [M.SQUAT], 3)
BENCH_DAY = _day("Bench", "Competition Bench", ["Chest", "Shoulders", "Triceps"], [M.HORIZONTAL_PUSH], 3)
DEADLIFT_DAY = _day("Deadlift", "Competition Deadlift", ["Back", "Legs", "Glutes"], [M.HINGE], 3)
ACCESSORIES_DAY = _day("Accessories", "Weak Point Training", ["Full Body"], [M.SQUAT, M.HORIZONTAL_PUSH, M.HORIZONTAL_PULL], 4)

HYBRID_ROTATION = [PUSH, PULL, LEGS, UPPER, ARMS_SHOULDERS, FULL_BODY, FULL_BODY_B]


def _split(split_id: str, name: str, days: List[SplitDay]) -> TrainingSplit:
    numbered = [d.model_copy(update={"day_number": idx + 1}) for idx, d in enumerate(days)]
    return TrainingSplit(id=split_id, name=name, days_per_week=len(numbered), days=numbered)


def _rotation_for(days_per_week: int) -> TrainingSplit:
    if days_per_week <= 2:
        return _split(f"full-body-{days_per_week}", f"Full Body ({days_per_week} days)", [FULL_BODY_A, FULL_BODY_B][:days_per_week])
    if days_per_week == 3:
        return _split("push-pull-legs-3", "Push/Pull/Legs (3 days)", [PUSH, PULL, LEGS])
    if days_per_week == 4:
        return _split("upper-lower-4", "Upper/Lower (4 days)", [UPPER_A, LOWER_A, UPPER_B, LOWER_B])
    return _split(f"hybrid-{days_per_week}", f"Hybrid ({days_per_week} days)", HYBRID_ROTATION[:days_per_week])


def select_split(config: BlockConfig) -> TrainingSplit:
    """Pick the split for a days-per-week count, refined by goal."""
    if config.goal == TrainingGoal.POWERLIFTING and config.days_per_week == 4:
        return _split("powerlifting-4", "Powerlifting (4 days)", [SQUAT_DAY, BENCH_DAY, DEADLIFT_DAY, ACCESSORIES_DAY])
    return _rotation_for(config.days_per_week)


def lifting_rotation(days: int, goal: TrainingGoal = TrainingGoal.HYPERTROPHY) -> List[SplitDay]:
    """Ordered lifting days for a week with `days` lifting sessions."""
    if days <= 0:
        return []
    return select_split(BlockConfig(goal=goal, days_per_week=min(days, 7))).days


# --- Periodization templates -----------------------------------------------

def _phase(phase: TrainingPhase, weeks: int, volume: float, intensity: float, reps: tuple, rpe: tuple) -> PhaseConfig:
    return PhaseConfig(
        phase=phase,
        weeks=weeks,
        volume_multiplier=volume,
        intensity_multiplier=intensity,
        rep_range_min=reps[0],
        rep_range_max=reps[1],
        rpe_min=rpe[0],
        rpe_max=rpe[1],
    )


P = TrainingPhase
E = ExperienceLevel

PERIODIZATION_TEMPLATES: List[PeriodizationTemplate] = [
    PeriodizationTemplate(
        id="strength-6week",
        name="6-Week Strength Block",
        description="Classic strength periodization with volume accumulation, intensity peak, and deload.",
        goal=TrainingGoal.STRENGTH,
        duration_weeks=6,
        suitable_for=[E.INTERMEDIATE, E.ADVANCED],
        phases=[
            _phase(P.ACCUMULATION, 3, 1.0, 0.75, (5, 8), (7, 8)),
            _phase(P.INTENSIFICATION, 2, 0.85, 0.9, (3, 5), (8, 9)),
            _phase(P.DELOAD, 1, 0.5, 0.7, (5, 8), (6, 7)),
        ],
    ),
    PeriodizationTemplate(
        id="hypertrophy-8week",
        name="8-Week Hypertrophy Block",
        description="High volume muscle building with progressive overload and strategic deloads.",
        goal=TrainingGoal.HYPERTROPHY,
        duration_weeks=8,
        suitable_for=[E.BEGINNER, E.INTERMEDIATE, E.ADVANCED],
        phases=[
            _phase(P.ACCUMULATION, 4, 1.1, 0.7, (8, 12), (7, 8)),
            _phase(P.INTENSIFICATION, 3, 1.0, 0.8, (6, 10), (8, 9)),
            _phase(P.DELOAD, 1, 0.5, 0.65, (10, 15), (5, 6)),
        ],
    ),
    PeriodizationTemplate(
        id="powerlifting-12week",
        name="12-Week Powerlifting Prep",
        description="Competition preparation with peaking protocol for squat, bench, and deadlift.",
        goal=TrainingGoal.POWERLIFTING,
        duration_weeks=12,
        suitable_for=[E.INTERMEDIATE, E.ADVANCED],
        phases=[
            _phase(P.ACCUMULATION, 5, 1.0, 0.7, (5, 8), (7, 8)),
            _phase(P.INTENSIFICATION, 4, 0.8, 0.85, (3, 5), (8, 9)),
            _phase(P.REALIZATION, 2, 0.6, 0.95, (1, 3), (9, 10)),
            _phase(P.DELOAD, 1, 0.3, 0.6, (3, 5), (5, 6)),
        ],
    ),
    PeriodizationTemplate(
        id="athletic-4week",
        name="4-Week Athletic Block",
        description="Balanced strength and power development for athletic performance.",
        goal=TrainingGoal.ATHLETIC,
        duration_weeks=4,
        suitable_for=[E.BEGINNER, E.INTERMEDIATE, E.ADVANCED],
        phases=[
            _phase(P.ACCUMULATION, 2, 0.9, 0.75, (5, 8), (7, 8)),
            _phase(P.INTENSIFICATION, 1, 0.8, 0.85, (3, 6), (8, 9)),
            _phase(P.DELOAD, 1, 0.5, 0.7, (5, 8), (6, 7)),
        ],
    ),
    PeriodizationTemplate(
        id="beginner-4week",
        name="4-Week Foundation Block",
        description="Perfect for beginners - learn movements and build base strength.",
        goal=TrainingGoal.GENERAL,
        duration_weeks=4,
        suitable_for=[E.BEGINNER],
        phases=[
            _phase(P.ACCUMULATION, 3, 0.8, 0.65, (8, 12), (6, 7)),
            _phase(P.DELOAD, 1, 0.5, 0.6, (10, 15), (5, 6)),
        ],
    ),
]

TEMPLATES_BY_ID: Dict[str, PeriodizationTemplate] = {t.id: t for t in PERIODIZATION_TEMPLATES}


def _narrow_to_phase(template: PeriodizationTemplate, phase: TrainingPhase, weeks: int) -> PeriodizationTemplate:
    candidates = [template] + [t for t in PERIODIZATION_TEMPLATES if t.id != template.id]
    match: Optional[PhaseConfig] = None
    for candidate in candidates:
        match = next((p for p in candidate.phases if p.phase == phase), None)
        if match is not None:
            break
    if match is None:
        return template

    return template.model_copy(
        update={
            "id": f"{template.id}-{phase.value}",
            "name": f"{weeks}-Week {phase.value.capitalize()} Block",
            "duration_weeks": weeks,
            "phases": [match.model_copy(update={"weeks": weeks})],
        }
    )


def select_periodization(config: BlockConfig) -> PeriodizationTemplate:
    """
    Goal and experience match first, preferring the requested duration; then
    any template for the goal; then the beginner foundation block.
    """
    compatible = [
        t for t in PERIODIZATION_TEMPLATES
        if t.goal == config.goal and config.experience in t.suitable_for
    ]
    if compatible:
        template = next((t for t in compatible if t.duration_weeks == config.duration_weeks), compatible[0])
    else:
        goal_match = [t for t in PERIODIZATION_TEMPLATES if t.goal == config.goal]
        template = goal_match[0] if goal_match else TEMPLATES_BY_ID["beginner-4week"]

    if config.phase is not None:
        return _narrow_to_phase(template, TrainingPhase(config.phase), config.duration_weeks)
    return template


def phase_for_week(template: PeriodizationTemplate, week_number: int) -> tuple:
    """Return (phase config, week in phase) for a 1-based week, clamping to the last phase."""
    remaining = week_number
    for phase in template.phases:
        if remaining <= phase.weeks:
            return phase, remaining
        remaining -= phase.weeks
    last = template.phases[-1]
    return last, min(last.weeks, remaining)


# --- Movement patterns -------------------------------------------------------

MOVEMENT_PATTERN_EXERCISES: Dict[MovementPattern, Dict[str, List[str]]] = {
    M.SQUAT: {
        "muscle_groups": ["Legs", "Glutes"],
        "preferred": ["Barbell Back Squat", "Barbell Front Squat", "Goblet Squat", "Leg Press", "Bulgarian Split Squat"],
    },
    M.HINGE: {
        "muscle_groups": ["Back", "Legs", "Glutes"],
        "preferred": ["Conventional Deadlift", "Romanian Deadlift", "Sumo Deadlift", "Trap Bar Deadlift", "Hip Thrust"],
    },
    M.HORIZONTAL_PUSH: {
        "muscle_groups": ["Chest", "Shoulders", "Triceps"],
        "preferred": ["Barbell Bench Press", "Dumbbell Bench Press", "Incline Bench Press", "Dumbbell Press", "Push-Up"],
    },
    M.HORIZONTAL_PULL: {
        "muscle_groups": ["Back", "Biceps"],
        "preferred": ["Barbell Row", "Dumbbell Row", "Cable Row", "T-Bar Row", "Chest Supported Row"],
    },
    M.VERTICAL_PUSH: {
        "muscle_groups": ["Shoulders", "Triceps"],
        "preferred": ["Overhead Press", "Dumbbell Shoulder Press", "Arnold Press", "Push Press", "Landmine Press"],
    },
    M.VERTICAL_PULL: {
        "muscle_groups": ["Back", "Biceps"],
        "preferred": ["Pull-Up", "Lat Pulldown", "Chin-Up", "Cable Pulldown", "Assisted Pull-Up"],
    },
    M.CARRY: {
        "muscle_groups": ["Core", "Full Body"],
        "preferred": ["Farmer's Walk", "Suitcase Carry", "Overhead Carry", "Trap Bar Carry"],
    },
    M.CORE: {
        "muscle_groups": ["Core"],
        "preferred": ["Plank", "Dead Bug", "Ab Wheel Rollout", "Hanging Leg Raise", "Cable Crunch", "Pallof Press"],
    },
}
