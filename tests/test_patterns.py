from datetime import date, timedelta

import pytest

from conftest import CATALOG, make_workout, ppl_history
from foundry_lab.core.focus import FOCUS_RULES, clean_focus, display_label, focus_key, normalize_focus
from foundry_lab.core.patterns import (
    detect_exercise_pairings,
    detect_patterns,
    detect_training_days,
    detect_training_split,
    split_confidence,
    training_split,
)
from foundry_lab.core.taxonomy import FocusLabel, PatternType, SplitType

START = date(2025, 3, 3)  # a Monday


@pytest.mark.parametrize(
    "text, label",
    [
        ("Push Day", FocusLabel.PUSH),
        ("Chest & Triceps", FocusLabel.PUSH),
        ("PULL (heavy)", FocusLabel.PULL),
        ("Leg Day", FocusLabel.LEGS),
        ("Upper Push", FocusLabel.UPPER),
        ("Lower Body - Squat", FocusLabel.LOWER),
        ("full-body", FocusLabel.FULL_BODY),
        ("Full Body Legs", FocusLabel.FULL_BODY),
        ("Back and Biceps", FocusLabel.PULL),
        ("Arms", FocusLabel.ARMS),
        ("Delts", FocusLabel.SHOULDERS),
        ("Abs", FocusLabel.CORE),
        ("HIIT Circuit", FocusLabel.CONDITIONING),
    ],
)
def test_focus_rules(text, label):
    assert normalize_focus(text) == label


def test_rule_order_is_visible():
    labels = [label for _, label in FOCUS_RULES]
    assert labels.index(FocusLabel.FULL_BODY) < labels.index(FocusLabel.UPPER) < labels.index(FocusLabel.PUSH)
    assert labels.index(FocusLabel.PULL) < labels.index(FocusLabel.LEGS)


def test_unmatched_focus_falls_back_to_cleaned_text():
    assert normalize_focus("Yoga Flow") is None
    assert focus_key("  Yoga   Flow (easy) ") == "yoga flow"
    assert clean_focus("Chest/Back") == "chest + back"
    assert display_label("full_body") == "Full Body"


def test_too_few_sessions_detects_nothing():
    assert detect_patterns(ppl_history(START, count=3)) == []


def test_push_pull_legs_rotation_is_detected():
    history = ppl_history(START, count=8, every=2)
    patterns = detect_patterns(history)
    split = training_split(patterns)

    assert split is not None
    assert split.type == PatternType.TRAINING_SPLIT
    assert split.data["split_type"] == SplitType.PPL.value
    assert split.data["labels"] == ["push", "pull", "legs"]
    assert split.data["splits"] == ["Push", "Pull", "Legs"]
    assert split.confidence >= 0.6
    assert split.data["days_per_week"] == 4.0


def test_occasional_extra_sessions_keep_push_pull_legs():
    history = ppl_history(START, count=18, every=2)
    history.append(make_workout(18, "Shoulders", START + timedelta(days=36), [CATALOG[3]]))
    history.append(make_workout(19, "Arms", START + timedelta(days=38), [CATALOG[9]]))

    split = detect_training_split(history)
    assert split.data["split_type"] == SplitType.PPL.value
    assert split.data["labels"] == ["push", "pull", "legs"]
    assert split.confidence == 0.9


def test_body_part_split_is_detected():
    focuses = ["Push", "Pull", "Legs", "Shoulders", "Arms"]
    history = [make_workout(i, focuses[i % 5], START + timedelta(days=i), [CATALOG[2]]) for i in range(10)]

    split = detect_training_split(history)
    assert split.data["split_type"] == SplitType.BRO_SPLIT.value
    assert split.confidence == 1.0


def test_upper_lower_counts_legs_as_lower():
    upper, lower = [CATALOG[2], CATALOG[4]], [CATALOG[0], CATALOG[1]]
    history = [
        make_workout(i, ["Upper", "Leg Day"][i % 2], START + timedelta(days=i * 2), [upper, lower][i % 2])
        for i in range(8)
    ]
    split = training_split(detect_patterns(history))
    assert split.data["split_type"] == SplitType.UPPER_LOWER.value
    assert split.confidence == 1.0


def test_unbalanced_custom_split_is_penalized():
    counts = {"push": 4, "yoga": 4}
    assert split_confidence(counts, ["push", "yoga"], 8) == 1.0
    history = [
        make_workout(i, ["Push", "Yoga"][i % 2], START + timedelta(days=i), [CATALOG[2]])
        for i in range(8)
    ]
    split = training_split(detect_patterns(history))
    assert split.data["split_type"] == SplitType.CUSTOM.value
    assert split.confidence == 0.75


def test_exercise_pairings():
    history = ppl_history(START, count=9)
    pairs = detect_exercise_pairings(history)
    assert pairs
    assert all(p.data["co_occurrence"] >= 3 for p in pairs)
    assert len(pairs) <= 5
    assert detect_exercise_pairings(history[:4]) == []


def test_training_days():
    # Monday / Wednesday / Friday for three weeks
    days = [START + timedelta(days=w * 7 + d) for w in range(3) for d in (0, 2, 4)]
    history = [make_workout(i, "Full Body", day, [CATALOG[0]]) for i, day in enumerate(days)]
    pattern = detect_training_days(history)
    assert pattern.data["preferred_days"] == ["Monday", "Wednesday", "Friday"]
    assert pattern.confidence == 1.0
