"""Set, rep and load prescription for a single exercise slot.

Everything in here is pure: the functions take a phase configuration and a
few scalars and return new values. History and persistence stay with the
callers.
"""

from typing import Dict, List, Optional

from foundry_lab.core.models import GeneratedExercise, GeneratedSet, MovementMemory, PhaseConfig
from foundry_lab.core.taxonomy import ExperienceLevel, TrainingPhase

WARMUP_REST_SECONDS = 60
MIN_WORKING_SETS = 2
MAX_WORKING_SETS = 6

# (reps, rpe) per warm-up set
COMPOUND_WARMUPS = [(10, 4.0), (5, 5.0)]
ACCESSORY_WARMUPS = [(12, 4.0)]

BASE_WORKING_SETS: Dict[ExperienceLevel, Dict[bool, int]] = {
    ExperienceLevel.BEGINNER: {True: 3, False: 2},
    ExperienceLevel.INTERMEDIATE: {True: 4, False: 3},
    ExperienceLevel.ADVANCED: {True: 5, False: 3},
}

PROGRESS_RATE: Dict[ExperienceLevel, float] = {
    ExperienceLevel.BEGINNER: 0.05,
    ExperienceLevel.INTERMEDIATE: 0.025,
    ExperienceLevel.ADVANCED: 0.015,
}


def rest_seconds_for(rep_range_max: int) -> int:
    if rep_range_max <= 5:
        return 180
    if rep_range_max <= 8:
        return 120
    return 90


def tempo_cue(rep_range_max: int) -> str:
    """Controlled eccentrics for volume work, explosive concentrics for heavy work."""
    return "3-0-1-0" if rep_range_max > 8 else "2-0-X-0"


def target_rpe(phase: PhaseConfig, week_in_phase: int) -> float:
    """RPE climbs half a point per week within the phase, capped at the ceiling."""
    week_in_phase = max(1, week_in_phase)
    rpe = min(phase.rpe_max, phase.rpe_min + 0.5 * (week_in_phase - 1))
    return round(rpe, 1)


def working_set_count(phase: PhaseConfig, is_compound: bool, experience: ExperienceLevel) -> int:
    base = BASE_WORKING_SETS[ExperienceLevel(experience)][bool(is_compound)]
    scaled = int(round(base * phase.volume_multiplier))
    return max(MIN_WORKING_SETS, min(MAX_WORKING_SETS, scaled))


def generate_sets(
    phase: PhaseConfig,
    is_compound: bool,
    experience: ExperienceLevel,
    week_in_phase: int,
) -> List[GeneratedSet]:
    """
    Build warm-up and working sets for one exercise.

    Compound lifts get two ramp-up sets, accessories one. Working sets share
    the same reps, RPE, rest and tempo cue.
    """
    warmups = COMPOUND_WARMUPS if is_compound else ACCESSORY_WARMUPS
    sets: List[GeneratedSet] = []

    for reps, rpe in warmups:
        sets.append(
            GeneratedSet(
                set_number=len(sets) + 1,
                target_reps=reps,
                target_rpe=rpe,
                is_warmup=True,
                rest_seconds=WARMUP_REST_SECONDS,
            )
        )

    reps = phase.rep_range_min + (phase.rep_range_max - phase.rep_range_min) // 2
    rpe = target_rpe(phase, week_in_phase)
    rest = rest_seconds_for(phase.rep_range_max)
    tempo = tempo_cue(phase.rep_range_max)

    for _ in range(working_set_count(phase, is_compound, experience)):
        sets.append(
            GeneratedSet(
                set_number=len(sets) + 1,
                target_reps=reps,
                target_rpe=rpe,
                is_warmup=False,
                rest_seconds=rest,
                tempo=tempo,
            )
        )

    return sets


def progressive_overload(week_number: int, phase: PhaseConfig, experience: ExperienceLevel) -> Dict[str, float]:
    """Volume / intensity multipliers for a week inside its phase."""
    week_in_phase = week_number % phase.weeks or phase.weeks
    rate = PROGRESS_RATE[ExperienceLevel(experience)]
    return {
        "volume_adjustment": round(1 + (week_in_phase - 1) * rate, 4),
        "intensity_adjustment": round(1 + (week_in_phase - 1) * rate * 0.5, 4),
    }


def week_theme(phase: TrainingPhase, week_in_phase: int, total_weeks_in_phase: int) -> str:
    phase = TrainingPhase(phase)
    if phase == TrainingPhase.DELOAD:
        return "Recovery & Adaptation"
    if phase == TrainingPhase.MAINTENANCE:
        return "Maintaining Gains"

    names = {
        TrainingPhase.ACCUMULATION: ("Volume Foundation", "Volume Building", "Volume Peak"),
        TrainingPhase.INTENSIFICATION: ("Intensity Introduction", "Intensity Ramp", "Intensity Peak"),
        TrainingPhase.REALIZATION: ("Peak Preparation", "Peak Performance", "Test Week"),
    }
    first, middle, last = names[phase]
    if week_in_phase == 1:
        return first
    if week_in_phase == total_weeks_in_phase:
        return last
    return middle


def estimate_workout_duration(exercises: List[GeneratedExercise]) -> int:
    """Minutes: a 5 minute general warm-up plus set time and rest."""
    total = 5.0
    for exercise in exercises:
        for s in exercise.sets:
            total += (0.5 if s.is_warmup else 1.0) + s.rest_seconds / 60
    return int(round(total))


def format_rep_range(phase: PhaseConfig) -> str:
    if phase.rep_range_min == phase.rep_range_max:
        return str(phase.rep_range_min)
    return f"{phase.rep_range_min}-{phase.rep_range_max}"


def _format_kg(weight: float) -> str:
    rounded = round(weight * 2) / 2  # nearest 0.5 kg
    return f"{rounded:g} kg"


def load_guidance(memory: Optional[MovementMemory], target_reps: int) -> str:
    """Human-readable load suggestion from the last logged working set."""
    if memory is None or memory.last_weight is None:
        return "Start with comfortable weight"

    weight = memory.last_weight
    last_reps = memory.last_reps

    if last_reps is None or abs(last_reps - target_reps) <= 2:
        if memory.confidence == "high":
            return f"{_format_kg(weight)} (+2.5 if easy last time)"
        return f"~{_format_kg(weight)}"

    if target_reps < last_reps:
        return f"~{_format_kg(weight * 1.05)} (fewer reps, go heavier)"
    return f"~{_format_kg(weight * 0.92)} (more reps, go lighter)"
