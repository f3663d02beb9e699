"""Vocabulary shared by the planner: session kinds, days, focuses and phases."""

from enum import Enum
from typing import Dict, List


class SessionType(str, Enum):
    """Primary session kind resolved for a day."""

    REST = "rest"
    HYPERTROPHY = "hypertrophy"
    STRENGTH = "strength"
    ZONE2 = "zone2"
    TEMPO = "tempo"
    INTERVALS = "intervals"
    LONG_RUN = "long_run"
    EASY_RUN = "easy_run"


class RunType(str, Enum):
    """Run types accepted from an external running schedule."""

    EASY_RUN = "easy_run"
    TEMPO = "tempo"
    INTERVALS = "intervals"
    LONG_RUN = "long_run"
    RECOVERY = "recovery"


class DayOfWeek(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class FocusLabel(str, Enum):
    """Closed vocabulary that free-text workout focuses are normalized into."""

    PUSH = "push"
    PULL = "pull"
    LEGS = "legs"
    UPPER = "upper"
    LOWER = "lower"
    FULL_BODY = "full_body"
    ARMS = "arms"
    SHOULDERS = "shoulders"
    CORE = "core"
    CONDITIONING = "conditioning"


class TrainingGoal(str, Enum):
    STRENGTH = "strength"
    HYPERTROPHY = "hypertrophy"
    POWERLIFTING = "powerlifting"
    ATHLETIC = "athletic"
    GENERAL = "general"
    BODYBUILDING = "bodybuilding"


class ExperienceLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class TrainingPhase(str, Enum):
    ACCUMULATION = "accumulation"
    INTENSIFICATION = "intensification"
    REALIZATION = "realization"
    DELOAD = "deload"
    MAINTENANCE = "maintenance"


class BlockType(str, Enum):
    ACCUMULATION = "accumulation"
    INTENSIFICATION = "intensification"
    REALIZATION = "realization"
    PEAKING = "peaking"
    DELOAD = "deload"
    TRANSITION = "transition"
    BASE_BUILDING = "base_building"
    HYPERTROPHY = "hypertrophy"
    STRENGTH = "strength"
    POWER = "power"


class VolumeLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class EventPriority(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    TUNE_UP = "tune_up"


class MovementPattern(str, Enum):
    SQUAT = "squat"
    HINGE = "hinge"
    HORIZONTAL_PUSH = "horizontal_push"
    HORIZONTAL_PULL = "horizontal_pull"
    VERTICAL_PUSH = "vertical_push"
    VERTICAL_PULL = "vertical_pull"
    CARRY = "carry"
    CORE = "core"


class PatternType(str, Enum):
    TRAINING_SPLIT = "training_split"
    EXERCISE_PAIRING = "exercise_pairing"
    TRAINING_DAY = "training_day"


class SplitType(str, Enum):
    PPL = "ppl"
    UPPER_LOWER = "upper_lower"
    FULL_BODY = "full_body"
    BRO_SPLIT = "bro_split"
    CUSTOM = "custom"


# Monday = 1 ... Sunday = 7
DAY_ORDER: List[DayOfWeek] = list(DayOfWeek)
DAY_NUMBERS: Dict[DayOfWeek, int] = {day: idx + 1 for idx, day in enumerate(DAY_ORDER)}

HARD_RUN_TYPES = frozenset({RunType.TEMPO, RunType.INTERVALS, RunType.LONG_RUN})
HARD_SESSION_TYPES = frozenset({SessionType.TEMPO, SessionType.INTERVALS, SessionType.LONG_RUN})
LIFT_SESSION_TYPES = frozenset({SessionType.HYPERTROPHY, SessionType.STRENGTH})

RUN_TYPE_TO_SESSION: Dict[RunType, SessionType] = {
    RunType.EASY_RUN: SessionType.EASY_RUN,
    RunType.TEMPO: SessionType.TEMPO,
    RunType.INTERVALS: SessionType.INTERVALS,
    RunType.LONG_RUN: SessionType.LONG_RUN,
    RunType.RECOVERY: SessionType.EASY_RUN,
}

PRIORITY_RANK: Dict[EventPriority, int] = {
    EventPriority.PRIMARY: 0,
    EventPriority.SECONDARY: 1,
    EventPriority.TUNE_UP: 2,
}

COMPOUND_PATTERNS = frozenset({
    MovementPattern.SQUAT,
    MovementPattern.HINGE,
    MovementPattern.HORIZONTAL_PUSH,
    MovementPattern.VERTICAL_PUSH,
})


def is_hard_run(run_type: RunType) -> bool:
    """Tempo, intervals and long runs need a recovery buffer on adjacent days."""
    return RunType(run_type) in HARD_RUN_TYPES


def run_type_to_session(run_type: RunType) -> SessionType:
    return RUN_TYPE_TO_SESSION[RunType(run_type)]


def day_name(day: DayOfWeek) -> str:
    return DayOfWeek(day).value.capitalize()
