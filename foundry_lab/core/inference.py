"""Reconstruct a structured program from logged workouts.

Once the history is long enough and a training split has been detected with
enough confidence, each split day is rebuilt from the sessions that share its
focus: the exercises the user keeps coming back to, with their typical sets,
reps and loads.
"""

import math
from collections import defaultdict
from datetime import date
from statistics import mean
from typing import Dict, List, Optional, Sequence

from foundry_lab.config import settings
from foundry_lab.core.focus import display_label
from foundry_lab.core.models import (
    DetectedPattern,
    InferredExercise,
    InferredProgram,
    InferredWorkoutDay,
    PatternToProgramResult,
    RotationSuggestion,
    Workout,
)
from foundry_lab.core.patterns import completed_workouts, matches_pattern, training_split, workout_focus_key
from foundry_lab.core.taxonomy import FocusLabel, PatternType, SplitType

DEFAULT_DURATION = 60
RECENT_FOR_ROTATION = 10


def _plural(count: int, noun: str) -> str:
    return f"{count} more {noun}{'' if count == 1 else 's'}"


def _label_key(workout: Workout, split_type: str) -> str:
    key = workout_focus_key(workout)
    if split_type == SplitType.UPPER_LOWER.value and key == FocusLabel.LEGS.value:
        return FocusLabel.LOWER.value
    return key


def infer_exercises(matching: Sequence[Workout]) -> List[InferredExercise]:
    """Habitual exercises across sessions that share one focus."""
    if not matching:
        return []

    stats: Dict[str, Dict] = {}
    for workout in matching:
        per_session: Dict[str, int] = defaultdict(int)
        for s in workout.sets:
            if s.is_warmup:
                continue
            ex_id = s.exercise.id
            entry = stats.setdefault(ex_id, {"exercise": s.exercise, "sessions": 0, "sets": [], "reps": [], "weights": [], "last": None})
            per_session[ex_id] += 1
            if s.actual_reps is not None:
                entry["reps"].append(s.actual_reps)
            if s.actual_weight is not None:
                entry["weights"].append(s.actual_weight)

        for ex_id, set_count in per_session.items():
            entry = stats[ex_id]
            entry["sessions"] += 1
            entry["sets"].append(set_count)
            if entry["last"] is None or workout.date_completed > entry["last"]:
                entry["last"] = workout.date_completed

    total = len(matching)
    inferred: List[InferredExercise] = []
    for entry in stats.values():
        frequency = entry["sessions"] / total
        if frequency < settings.EXERCISE_FREQUENCY_THRESHOLD:
            continue
        reps = entry["reps"]
        if reps:
            low, high = min(reps), max(reps)
            rep_text = str(low) if low == high else f"{low}-{high}"
        else:
            rep_text = "8-12"
        inferred.append(
            InferredExercise(
                exercise=entry["exercise"],
                frequency=round(frequency, 4),
                typical_sets=int(round(mean(entry["sets"]))),
                typical_reps=rep_text,
                typical_weight=round(mean(entry["weights"]), 1) if entry["weights"] else None,
                last_performed=entry["last"],
            )
        )

    inferred.sort(key=lambda e: (-e.frequency, e.exercise.name))
    return inferred[: settings.MAX_EXERCISES_PER_DAY]


def _build_day(day_number: int, label: str, display: str, workouts: Sequence[Workout], split_type: str) -> InferredWorkoutDay:
    matching = [w for w in workouts if _label_key(w, split_type) == label]
    exercises = infer_exercises(matching)
    durations = [w.duration_minutes for w in matching if w.duration_minutes is not None]
    muscle_groups: List[str] = []
    for e in exercises:
        if e.exercise.muscle_group not in muscle_groups:
            muscle_groups.append(e.exercise.muscle_group)
    return InferredWorkoutDay(
        day_number=day_number,
        focus=display,
        muscle_groups=muscle_groups,
        exercises=exercises,
        typical_duration=int(round(mean(durations))) if durations else DEFAULT_DURATION,
    )


def _build_program(split: DetectedPattern, workouts: List[Workout]) -> InferredProgram:
    labels: List[str] = split.data.get("labels", [])
    displays: List[str] = split.data.get("splits") or [display_label(label) for label in labels]
    split_type = split.data.get("split_type", SplitType.CUSTOM.value)
    days_per_week = split.data.get("days_per_week") or float(len(labels))

    days = [
        _build_day(idx + 1, label, displays[idx], workouts, split_type)
        for idx, label in enumerate(labels)
    ]

    span = (workouts[0].date_completed - workouts[-1].date_completed).days
    all_exercises = sorted((e for d in days for e in d.exercises), key=lambda e: -e.frequency)
    avg_per_day = round(sum(len(d.exercises) for d in days) / len(days)) if days else 0

    highlights: List[str] = []
    if all_exercises:
        highlights.append(f"Your staples: {', '.join(e.exercise.name for e in all_exercises[:3])}")
        highlights.append(f"Typically {round(mean(e.typical_sets for e in all_exercises))} sets per exercise")
    if days_per_week:
        highlights.append(f"Training {days_per_week}x per week")

    return InferredProgram(
        split_name=split.name,
        split_type=SplitType(split_type),
        days_per_week=days_per_week,
        rotation_length=len(labels),
        workout_days=days,
        confidence=split.confidence,
        workouts_analyzed=len(workouts),
        weeks_of_data=math.ceil(span / 7),
        summary=f"You're running a {split.name} split with {avg_per_day} exercises per session.",
        highlights=highlights,
    )


def infer_program(patterns: Sequence[DetectedPattern], history: Sequence[Workout]) -> PatternToProgramResult:
    """
    Gate on sample size and split confidence, then rebuild the program.

    Never raises for thin data; the result says what is still missing.
    """
    workouts = completed_workouts(history)[: settings.HISTORY_WINDOW]
    days_tracking = (workouts[0].date_completed - workouts[-1].date_completed).days if workouts else 0
    progress = {
        "workouts_logged": len(workouts),
        "workouts_needed": settings.MIN_WORKOUTS_FOR_INFERENCE,
        "days_tracking": days_tracking,
        "days_needed": settings.MIN_DAYS_TRACKING,
    }

    if len(workouts) < settings.MIN_WORKOUTS_FOR_INFERENCE:
        missing = settings.MIN_WORKOUTS_FOR_INFERENCE - len(workouts)
        return PatternToProgramResult(
            is_ready=False,
            ready_reason=f"Log {_plural(missing, 'workout')} to unlock program suggestions",
            **progress,
        )
    if days_tracking < settings.MIN_DAYS_TRACKING:
        missing = settings.MIN_DAYS_TRACKING - days_tracking
        return PatternToProgramResult(
            is_ready=False,
            ready_reason=f"Keep training for {_plural(missing, 'day')} so your rotation can settle",
            **progress,
        )

    split = training_split(patterns)
    if split is None or split.confidence < settings.MIN_CONFIDENCE_TO_OFFER:
        return PatternToProgramResult(
            is_ready=False,
            ready_reason="No consistent training split detected yet",
            **progress,
        )

    program = _build_program(split, workouts)
    return PatternToProgramResult(
        is_ready=True,
        ready_reason=f"Your last {len(workouts)} workouts follow a consistent {split.name} pattern",
        inferred_program=program,
        **progress,
    )


def next_in_rotation(
    pattern: Optional[DetectedPattern], history: Sequence[Workout], today: date
) -> Optional[RotationSuggestion]:
    """Suggest which split day to train next."""
    if pattern is None or pattern.type != PatternType.TRAINING_SPLIT:
        return None
    if pattern.confidence < settings.MIN_SPLIT_CONFIDENCE:
        return None

    labels: List[str] = pattern.data.get("labels", [])
    displays: List[str] = pattern.data.get("splits") or [display_label(label) for label in labels]
    if not labels:
        return None
    split_type = pattern.data.get("split_type", SplitType.CUSTOM.value)

    done = completed_workouts(history)
    days_since: Dict[str, int] = {}
    for workout in done[:RECENT_FOR_ROTATION]:
        if not matches_pattern(workout, pattern):
            continue
        key = _label_key(workout, split_type)
        days_since.setdefault(key, (today - workout.date_completed).days)
    logged_earlier = {_label_key(w, split_type) for w in done[RECENT_FOR_ROTATION:] if matches_pattern(w, pattern)}

    chosen: Optional[int] = None
    reason = ""
    best = -1
    for idx, label in enumerate(labels):
        if label not in days_since:
            chosen = idx
            if label in logged_earlier:
                reason = f"{displays[idx]} isn't in your last {RECENT_FOR_ROTATION} sessions"
            else:
                reason = f"You haven't logged a {displays[idx]} session yet"
            break
        if days_since[label] >= settings.MIN_RECOVERY_DAYS and days_since[label] > best:
            best = days_since[label]
            chosen, reason = idx, f"Last {displays[idx]} was {best} days ago"

    if chosen is None:
        chosen = max(range(len(labels)), key=lambda i: days_since[labels[i]])
        days = days_since[labels[chosen]]
        reason = f"{displays[chosen]} was your least recent session ({days} day{'' if days == 1 else 's'} ago)"

    if pattern.confidence >= 0.8 and len(days_since) >= len(labels) - 1:
        confidence = "high"
    elif pattern.confidence >= 0.6:
        confidence = "medium"
    else:
        confidence = "low"

    return RotationSuggestion(
        next_focus=displays[chosen],
        reason=reason,
        days_since_last=days_since.get(labels[chosen]),
        confidence=confidence,
        split_name=pattern.name,
        rotation_position=chosen + 1,
        rotation_total=len(labels),
    )
