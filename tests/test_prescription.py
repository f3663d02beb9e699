from foundry_lab.core import prescription
from foundry_lab.core.models import MovementMemory
from foundry_lab.core.splits import TEMPLATES_BY_ID
from foundry_lab.core.taxonomy import ExperienceLevel, TrainingPhase

HYPERTROPHY_ACC = TEMPLATES_BY_ID["hypertrophy-8week"].phases[0]
HYPERTROPHY_DELOAD = TEMPLATES_BY_ID["hypertrophy-8week"].phases[2]
PEAK = TEMPLATES_BY_ID["powerlifting-12week"].phases[2]


def test_compound_sets_for_intermediate_accumulation():
    sets = prescription.generate_sets(HYPERTROPHY_ACC, True, ExperienceLevel.INTERMEDIATE, 1)
    warmups = [s for s in sets if s.is_warmup]
    working = [s for s in sets if not s.is_warmup]

    assert [(s.target_reps, s.target_rpe) for s in warmups] == [(10, 4.0), (5, 5.0)]
    assert all(s.rest_seconds == 60 for s in warmups)
    assert len(working) == 4
    assert {s.target_reps for s in working} == {10}
    assert {s.target_rpe for s in working} == {7.0}
    assert {s.rest_seconds for s in working} == {90}
    assert {s.tempo for s in working} == {"3-0-1-0"}
    assert [s.set_number for s in sets] == list(range(1, len(sets) + 1))


def test_accessory_gets_a_single_warmup():
    sets = prescription.generate_sets(HYPERTROPHY_ACC, False, ExperienceLevel.BEGINNER, 1)
    assert [s.target_reps for s in sets if s.is_warmup] == [12]
    assert len([s for s in sets if not s.is_warmup]) == 2


def test_rpe_climbs_weekly_and_is_capped():
    week2 = prescription.generate_sets(HYPERTROPHY_ACC, True, ExperienceLevel.INTERMEDIATE, 2)
    week4 = prescription.generate_sets(HYPERTROPHY_ACC, True, ExperienceLevel.INTERMEDIATE, 4)
    assert week2[-1].target_rpe == 7.5
    assert week4[-1].target_rpe == 8.0


def test_working_sets_are_clamped():
    deload = prescription.generate_sets(HYPERTROPHY_DELOAD, True, ExperienceLevel.BEGINNER, 1)
    assert len([s for s in deload if not s.is_warmup]) == 2


def test_heavy_phase_uses_long_rest_and_low_reps():
    sets = prescription.generate_sets(PEAK, True, ExperienceLevel.ADVANCED, 1)
    working = [s for s in sets if not s.is_warmup]
    assert len(working) == 3
    assert working[0].target_reps == 2
    assert working[0].rest_seconds == 180
    assert working[0].tempo == "2-0-X-0"


def test_rest_thresholds():
    assert prescription.rest_seconds_for(5) == 180
    assert prescription.rest_seconds_for(8) == 120
    assert prescription.rest_seconds_for(9) == 90


def test_progressive_overload_by_experience():
    beginner = prescription.progressive_overload(2, HYPERTROPHY_ACC, ExperienceLevel.BEGINNER)
    advanced = prescription.progressive_overload(2, HYPERTROPHY_ACC, ExperienceLevel.ADVANCED)
    assert beginner == {"volume_adjustment": 1.05, "intensity_adjustment": 1.025}
    assert advanced["volume_adjustment"] < beginner["volume_adjustment"]
    assert prescription.progressive_overload(1, HYPERTROPHY_ACC, ExperienceLevel.BEGINNER)["volume_adjustment"] == 1.0


def test_week_themes():
    assert prescription.week_theme(TrainingPhase.ACCUMULATION, 1, 4) == "Volume Foundation"
    assert prescription.week_theme(TrainingPhase.ACCUMULATION, 2, 4) == "Volume Building"
    assert prescription.week_theme(TrainingPhase.ACCUMULATION, 4, 4) == "Volume Peak"
    assert prescription.week_theme(TrainingPhase.DELOAD, 1, 1) == "Recovery & Adaptation"


def test_load_guidance():
    assert prescription.load_guidance(None, 10) == "Start with comfortable weight"

    high = MovementMemory(exercise_id="1", last_weight=100.0, last_reps=10, confidence="high")
    assert prescription.load_guidance(high, 10) == "100 kg (+2.5 if easy last time)"
    assert prescription.load_guidance(high, 5) == "~105 kg (fewer reps, go heavier)"
    assert prescription.load_guidance(high, 15) == "~92 kg (more reps, go lighter)"

    low = MovementMemory(exercise_id="1", last_weight=62.3, last_reps=9)
    assert prescription.load_guidance(low, 10) == "~62.5 kg"


def test_rep_range_formatting():
    assert prescription.format_rep_range(HYPERTROPHY_ACC) == "8-12"
    assert prescription.format_rep_range(PEAK.model_copy(update={"rep_range_max": 1})) == "1"
