from datetime import date, timedelta

from conftest import CATALOG, make_workout, ppl_history
from foundry_lab.config import settings
from foundry_lab.core.inference import infer_exercises, infer_program, next_in_rotation
from foundry_lab.core.models import DetectedPattern, Workout, WorkoutSet
from foundry_lab.core.patterns import detect_patterns, training_split
from foundry_lab.core.taxonomy import PatternType, SplitType

START = date(2025, 3, 3)

BENCH, OHP, ROW, PULLDOWN, SQUAT, RDL = CATALOG[2], CATALOG[3], CATALOG[4], CATALOG[5], CATALOG[0], CATALOG[1]
FLY, PUSHDOWN = CATALOG[8], CATALOG[9]


def ppl_pattern(confidence: float = 0.9) -> DetectedPattern:
    return DetectedPattern(
        type=PatternType.TRAINING_SPLIT,
        name="Push/Pull/Legs",
        confidence=confidence,
        data={
            "splits": ["Push", "Pull", "Legs"],
            "labels": ["push", "pull", "legs"],
            "split_type": SplitType.PPL.value,
            "days_per_week": 3.0,
        },
    )


def test_fewer_than_six_workouts_is_not_ready():
    history = ppl_history(START, count=5, every=3)
    result = infer_program(detect_patterns(history), history)
    assert result.is_ready is False
    assert result.inferred_program is None
    assert result.workouts_logged == 5
    assert result.workouts_remaining == 1
    assert "1 more workout " in result.ready_reason


def test_enough_workouts_but_too_few_days_is_not_ready():
    history = ppl_history(START, count=7, every=1)
    result = infer_program(detect_patterns(history), history)
    assert result.is_ready is False
    assert result.days_tracking == 6
    assert result.days_remaining == 4


def test_both_thresholds_met_is_ready():
    history = ppl_history(START, count=8, every=2)
    result = infer_program(detect_patterns(history), history)
    assert result.is_ready is True
    program = result.inferred_program
    assert program.split_type == SplitType.PPL
    assert [d.focus for d in program.workout_days] == ["Push", "Pull", "Legs"]
    assert program.rotation_length == 3
    assert program.workouts_analyzed == 8
    assert program.weeks_of_data == 2
    assert program.summary.startswith("You're running a Push/Pull/Legs split")
    assert any(h.startswith("Your staples:") for h in program.highlights)

    push = program.workout_days[0]
    assert [e.exercise.name for e in push.exercises][:2] == ["Barbell Bench Press", "Overhead Press"]
    assert push.exercises[0].typical_sets == 3
    assert push.exercises[0].typical_reps == "10"
    assert push.exercises[0].typical_weight == 60.0
    assert push.typical_duration == 55
    assert "Chest" in push.muscle_groups


def test_no_split_is_not_ready():
    history = ppl_history(START, count=8, every=2)
    result = infer_program([], history)
    assert result.is_ready is False
    assert result.ready_reason == "No consistent training split detected yet"


def test_frequency_threshold_is_inclusive():
    sessions = []
    for i in range(10):
        exercises = [BENCH]
        if i < 2:
            exercises.append(FLY)
        if i < 3:
            exercises.append(PUSHDOWN)
        sessions.append(make_workout(i, "Push", START + timedelta(days=i * 3), exercises))

    names = [e.exercise.name for e in infer_exercises(sessions)]
    assert "Cable Fly" not in names
    assert "Triceps Pushdown" in names
    assert names[0] == "Barbell Bench Press"


def test_warmups_are_ignored_for_sets_reps_and_loads():
    sessions = [
        make_workout(0, "Push", START, [BENCH], sets=3, reps=8, weight=80.0, warmups=2),
        make_workout(1, "Push", START + timedelta(days=3), [BENCH], sets=4, reps=6, weight=90.0, warmups=2),
    ]
    bench = infer_exercises(sessions)[0]
    assert bench.typical_sets == 4  # mean of 3 and 4
    assert bench.typical_reps == "6-8"
    assert bench.typical_weight == round((80.0 * 3 + 90.0 * 4) / 7, 1)
    assert bench.last_performed == START + timedelta(days=3)


def test_exercises_without_loads_have_no_typical_weight():
    sessions = [make_workout(i, "Push", START + timedelta(days=i), [BENCH], weight=None) for i in range(2)]
    assert infer_exercises(sessions)[0].typical_weight is None


def test_top_exercises_are_capped(monkeypatch):
    monkeypatch.setattr(settings, "MAX_EXERCISES_PER_DAY", 2)
    sessions = [make_workout(i, "Push", START + timedelta(days=i), [BENCH, OHP, FLY]) for i in range(3)]
    assert len(infer_exercises(sessions)) == 2


def test_rotation_cold_start_wins():
    history = [
        make_workout(0, "Push", START, [BENCH]),
        make_workout(1, "Pull", START + timedelta(days=2), [ROW]),
    ]
    suggestion = next_in_rotation(ppl_pattern(), history, START + timedelta(days=4))
    assert suggestion.next_focus == "Legs"
    assert suggestion.reason == "You haven't logged a Legs session yet"
    assert suggestion.days_since_last is None
    assert (suggestion.rotation_position, suggestion.rotation_total) == (3, 3)
    assert suggestion.confidence == "high"


def test_rotation_flags_a_day_dropped_from_recent_sessions():
    history = [make_workout(0, "Legs", START, [SQUAT])]
    history += [
        make_workout(i, ["Push", "Pull"][i % 2], START + timedelta(days=i), [[BENCH], [ROW]][i % 2])
        for i in range(1, 11)
    ]
    suggestion = next_in_rotation(ppl_pattern(), history, START + timedelta(days=12))
    assert suggestion.next_focus == "Legs"
    assert suggestion.reason == "Legs isn't in your last 10 sessions"
    assert suggestion.days_since_last is None


def test_rotation_picks_most_overdue():
    today = START + timedelta(days=10)
    history = [
        make_workout(0, "Push", today - timedelta(days=5), [BENCH]),
        make_workout(1, "Pull", today - timedelta(days=3), [ROW]),
        make_workout(2, "Legs", today - timedelta(days=1), [SQUAT]),
    ]
    suggestion = next_in_rotation(ppl_pattern(), history, today)
    assert suggestion.next_focus == "Push"
    assert suggestion.reason == "Last Push was 5 days ago"
    assert suggestion.days_since_last == 5


def test_rotation_falls_back_to_least_recent():
    today = START + timedelta(days=10)
    history = [
        make_workout(0, "Push", today - timedelta(days=1), [BENCH]),
        make_workout(1, "Pull", today - timedelta(days=1), [ROW]),
        make_workout(2, "Legs", today, [SQUAT]),
    ]
    suggestion = next_in_rotation(ppl_pattern(confidence=0.65), history, today)
    assert suggestion.next_focus == "Push"
    assert suggestion.reason == "Push was your least recent session (1 day ago)"
    assert suggestion.confidence == "medium"


def test_rotation_needs_a_confident_split():
    assert next_in_rotation(None, [], START) is None
    assert next_in_rotation(ppl_pattern(confidence=0.4), [], START) is None


def test_rotation_from_detected_pattern():
    history = ppl_history(START, count=8, every=2)
    today = history[-1].date_completed + timedelta(days=1)
    split = training_split(detect_patterns(history))
    suggestion = next_in_rotation(split, history, today)
    # Pull was yesterday, Push three days ago, Legs five
    assert suggestion.next_focus == "Legs"
    assert suggestion.days_since_last == 5


def test_incomplete_workouts_are_ignored():
    history = ppl_history(START, count=8, every=2)
    history.append(Workout(id="planned", focus="Push Day", sets=[WorkoutSet(exercise=BENCH, actual_reps=5)]))
    result = infer_program(detect_patterns(history), history)
    assert result.workouts_logged == 8
