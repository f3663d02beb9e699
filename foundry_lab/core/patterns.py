"""Detect recurring training patterns in workout history.

Three kinds of pattern are reported: the training split (which rotation of
session focuses the user follows), exercise pairings (exercises that keep
showing up in the same session) and preferred training weekdays.
"""

from collections import Counter
from itertools import combinations
from typing import Dict, List, Optional, Sequence

from foundry_lab.config import settings
from foundry_lab.core.focus import display_label, focus_key
from foundry_lab.core.models import DetectedPattern, Workout
from foundry_lab.core.taxonomy import FocusLabel, PatternType, SplitType

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# Every shape is scored; the best wins and earlier entries win ties.
SPLIT_SHAPES = [
    {
        "name": "Push/Pull/Legs",
        "type": SplitType.PPL,
        "labels": [FocusLabel.PUSH, FocusLabel.PULL, FocusLabel.LEGS],
        "aliases": {},
    },
    {
        "name": "Upper/Lower",
        "type": SplitType.UPPER_LOWER,
        "labels": [FocusLabel.UPPER, FocusLabel.LOWER],
        "aliases": {FocusLabel.LEGS.value: FocusLabel.LOWER.value},
    },
    {
        "name": "Body Part Split",
        "type": SplitType.BRO_SPLIT,
        "labels": [FocusLabel.PUSH, FocusLabel.PULL, FocusLabel.LEGS, FocusLabel.SHOULDERS, FocusLabel.ARMS],
        "aliases": {},
    },
    {
        "name": "Full Body",
        "type": SplitType.FULL_BODY,
        "labels": [FocusLabel.FULL_BODY],
        "aliases": {},
    },
]

CUSTOM_SPLIT_PENALTY = 0.75
MAX_CUSTOM_LABELS = 4


def workout_focus_key(workout: Workout) -> str:
    return workout.normalized_focus or focus_key(workout.focus)


def completed_workouts(history: Sequence[Workout]) -> List[Workout]:
    """Completed sessions only, most recent first."""
    done = [w for w in history if w.date_completed is not None]
    return sorted(done, key=lambda w: w.date_completed, reverse=True)


def estimate_days_per_week(workouts: Sequence[Workout]) -> float:
    done = completed_workouts(workouts)
    if len(done) < 2:
        return 0.0
    span = max(1, (done[0].date_completed - done[-1].date_completed).days)
    return round(len(done) / (span / 7), 1)


def split_confidence(counts: Dict[str, int], labels: Sequence[str], total: int) -> float:
    """coverage x share x (0.7 + 0.3 x balance) for one candidate split."""
    if total == 0 or not labels:
        return 0.0
    per_label = [counts.get(label, 0) for label in labels]
    coverage = sum(1 for c in per_label if c > 0) / len(labels)
    share = sum(per_label) / total
    balance = min(per_label) / max(per_label) if max(per_label) else 0.0
    return round(coverage * share * (0.7 + 0.3 * balance), 4)


def detect_training_split(workouts: Sequence[Workout]) -> Optional[DetectedPattern]:
    done = completed_workouts(workouts)
    if len(done) < settings.MIN_WORKOUTS_FOR_SPLIT:
        return None

    recent = done[: settings.SPLIT_WINDOW]
    raw_counts = Counter(workout_focus_key(w) for w in recent)
    total = len(recent)

    scored = []
    for shape in SPLIT_SHAPES:
        counts: Dict[str, int] = Counter()
        for key, count in raw_counts.items():
            counts[shape["aliases"].get(key, key)] += count
        labels = [label.value for label in shape["labels"]]
        scored.append((shape["name"], shape["type"], labels, split_confidence(counts, labels, total)))

    chosen = max(scored, key=lambda s: s[3])
    if chosen[3] < settings.MIN_SPLIT_CONFIDENCE:
        chosen = None
        top = [key for key, count in raw_counts.most_common(MAX_CUSTOM_LABELS) if count >= 2]
        if len(top) >= 2:
            confidence = round(split_confidence(raw_counts, top, total) * CUSTOM_SPLIT_PENALTY, 4)
            chosen = ("Custom Split", SplitType.CUSTOM, top, confidence)

    if chosen is None or chosen[3] < settings.MIN_SPLIT_CONFIDENCE:
        return None

    name, split_type, labels, confidence = chosen
    days_per_week = estimate_days_per_week(done)
    return DetectedPattern(
        type=PatternType.TRAINING_SPLIT,
        name=name,
        confidence=min(1.0, confidence),
        data={
            "splits": [display_label(label) for label in labels],
            "labels": labels,
            "split_type": split_type.value,
            "days_per_week": days_per_week,
            "focus_distribution": dict(raw_counts),
        },
        description=f"You train {name} approximately {days_per_week} days/week",
    )


def detect_exercise_pairings(workouts: Sequence[Workout]) -> List[DetectedPattern]:
    if len(workouts) < 5:
        return []

    appearances: Counter = Counter()
    together: Counter = Counter()
    for workout in workouts:
        names = sorted({e.name for e in workout.exercises()})
        appearances.update(names)
        together.update(combinations(names, 2))

    patterns: List[DetectedPattern] = []
    for (first, second), count in sorted(together.items()):
        if count < 3:
            continue
        rate = count / min(appearances[first], appearances[second])
        if rate < 0.6:
            continue
        patterns.append(
            DetectedPattern(
                type=PatternType.EXERCISE_PAIRING,
                name=f"{first} + {second}",
                confidence=min(1.0, round(rate, 4)),
                data={"exercises": [first, second], "co_occurrence": count, "co_occurrence_rate": round(rate, 4)},
                description=f"You typically pair {first} with {second}",
            )
        )

    patterns.sort(key=lambda p: p.confidence, reverse=True)
    return patterns[:5]


def detect_training_days(workouts: Sequence[Workout]) -> Optional[DetectedPattern]:
    if len(workouts) < 8:
        return None

    day_counts = Counter(w.date_completed.weekday() for w in workouts if w.date_completed)
    total = len(workouts)
    preferred = [(day, c) for day, c in day_counts.most_common() if c / total >= 0.1][:4]
    if not preferred:
        return None

    names = [WEEKDAY_NAMES[day] for day, _ in preferred]
    return DetectedPattern(
        type=PatternType.TRAINING_DAY,
        name="Training Schedule",
        confidence=min(1.0, round(sum(c for _, c in preferred) / total, 4)),
        data={
            "preferred_days": names,
            "day_distribution": {WEEKDAY_NAMES[day]: c for day, c in sorted(day_counts.items())},
        },
        description=f"You typically train on {', '.join(names)}",
    )


def detect_patterns(history: Sequence[Workout]) -> List[DetectedPattern]:
    """All patterns found in the history; empty below the minimum sample."""
    done = completed_workouts(history)
    if len(done) < settings.MIN_WORKOUTS_FOR_PATTERNS:
        return []

    patterns: List[DetectedPattern] = []
    split = detect_training_split(done)
    if split is not None:
        patterns.append(split)
    patterns.extend(detect_exercise_pairings(done))
    days = detect_training_days(done)
    if days is not None:
        patterns.append(days)
    return patterns


def training_split(patterns: Sequence[DetectedPattern]) -> Optional[DetectedPattern]:
    return next((p for p in patterns if p.type == PatternType.TRAINING_SPLIT), None)


def matches_pattern(workout: Workout, pattern: DetectedPattern) -> bool:
    if pattern.type != PatternType.TRAINING_SPLIT:
        return False
    key = workout_focus_key(workout)
    if pattern.data.get("split_type") == SplitType.UPPER_LOWER.value and key == FocusLabel.LEGS.value:
        key = FocusLabel.LOWER.value
    return key in pattern.data.get("labels", [])
