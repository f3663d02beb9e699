"""Pydantic models for weekly plans, blocks, timelines and inferred programs."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from foundry_lab.config import settings
from foundry_lab.core.taxonomy import (
    DAY_ORDER,
    BlockType,
    DayOfWeek,
    EventPriority,
    ExperienceLevel,
    MovementPattern,
    PatternType,
    RunType,
    SessionType,
    SplitType,
    TrainingGoal,
    TrainingPhase,
    VolumeLevel,
)


# --- Weekly targets & running schedule ---------------------------------------

class SessionRange(BaseModel):
    """Min/max session count for one trainable category."""

    min: int = Field(0, ge=0)
    max: int = Field(0, ge=0)

    @model_validator(mode="after")
    def _max_not_below_min(self) -> "SessionRange":
        if self.max < self.min:
            self.max = self.min
        return self

    @property
    def midpoint(self) -> int:
        """Midpoint of the range, rounded up."""
        return (self.min + self.max + 1) // 2


class CardioRange(SessionRange):
    duration_minutes: int = Field(30, ge=0)


class WeeklyTargets(BaseModel):
    """What the user wants out of a week."""

    hypertrophy_sessions: SessionRange = Field(default_factory=lambda: SessionRange(min=3, max=4))
    strength_sessions: Optional[SessionRange] = None
    zone2_sessions: CardioRange = Field(default_factory=lambda: CardioRange(min=2, max=3, duration_minutes=30))
    tempo_sessions: int = Field(0, ge=0)
    interval_sessions: int = Field(0, ge=0)
    rest_days: int = Field(1, ge=0, le=7)
    available_days: List[DayOfWeek] = Field(default_factory=lambda: list(DAY_ORDER))

    def minimum_sessions(self) -> int:
        total = self.hypertrophy_sessions.min + self.zone2_sessions.min
        total += self.tempo_sessions + self.interval_sessions
        if self.strength_sessions is not None:
            total += self.strength_sessions.min
        return total

    def validate_capacity(self) -> List[str]:
        """Advisory warnings when the targets cannot fit the available days."""
        warnings: List[str] = []
        available = len(set(self.available_days))
        if self.rest_days > available:
            warnings.append(
                f"{self.rest_days} rest days requested but only {available} days available"
            )
        needed = self.rest_days + self.minimum_sessions()
        if needed > available:
            warnings.append(
                f"Targets need {needed} days (rest + minimum sessions) but only {available} are available"
            )
        return warnings


class RunningSchedule(BaseModel):
    """Externally supplied runs for the week; the allocator routes around them."""

    model_config = ConfigDict(frozen=True)

    days: List[DayOfWeek] = Field(default_factory=list)
    types: List[RunType] = Field(default_factory=list)  # matched to days by index
    weekly_mileage: Optional[float] = None

    def as_mapping(self) -> Dict[DayOfWeek, RunType]:
        mapping: Dict[DayOfWeek, RunType] = {}
        for idx, day in enumerate(self.days):
            if day in mapping:
                continue
            if idx < len(self.types):
                mapping[day] = self.types[idx]
            elif self.types:
                mapping[day] = self.types[0]
            else:
                mapping[day] = RunType.EASY_RUN
        return mapping


# --- Weekly plan output ------------------------------------------------------

class PlannedExercise(BaseModel):
    exercise_id: str
    exercise_name: str
    sets: int
    reps: str  # "8-10" or "5"
    load_guidance: Optional[str] = None
    progression_note: Optional[str] = None
    substitute_options: List[str] = Field(default_factory=list)


class PlannedDay(BaseModel):
    day_number: int = Field(ge=1, le=7)  # Monday = 1
    day_name: str
    is_rest_day: bool
    session_type: SessionType
    focus: str
    secondary_session: Optional[SessionType] = None
    notes: str = ""
    estimated_duration: int = 0  # minutes
    exercises: List[PlannedExercise] = Field(default_factory=list)
    is_locked: bool = False


class WeeklyPlan(BaseModel):
    week_of: date
    phase: TrainingPhase = TrainingPhase.ACCUMULATION
    days: List[PlannedDay]
    rationale: str = ""
    adjustments_applied: List[str] = Field(default_factory=list)
    targets: Optional[WeeklyTargets] = None

    @model_validator(mode="after")
    def _seven_days(self) -> "WeeklyPlan":
        if len(self.days) != 7:
            raise ValueError(f"A weekly plan needs exactly 7 days, got {len(self.days)}")
        return self


class AllocationResult(BaseModel):
    days: List[PlannedDay]
    rationale: str
    warnings: List[str] = Field(default_factory=list)


# --- Prescription, splits & templates ------------------------------------------

class GeneratedSet(BaseModel):
    set_number: int
    target_reps: int
    target_rpe: float
    is_warmup: bool
    rest_seconds: int
    tempo: Optional[str] = None  # eccentric-pause-concentric-pause


class PhaseConfig(BaseModel):
    """One multi-week segment of a periodization template."""

    model_config = ConfigDict(frozen=True)

    phase: TrainingPhase
    weeks: int = Field(ge=1)
    volume_multiplier: float
    intensity_multiplier: float
    rep_range_min: int = Field(ge=1)
    rep_range_max: int = Field(ge=1)
    rpe_min: float
    rpe_max: float


class BlockConfig(BaseModel):
    goal: TrainingGoal = TrainingGoal.HYPERTROPHY
    duration_weeks: int = Field(4, ge=1)
    days_per_week: int = Field(4, ge=1, le=7)
    experience: ExperienceLevel = ExperienceLevel.INTERMEDIATE
    phase: Optional[TrainingPhase] = None
    focus_lifts: List[str] = Field(default_factory=list)
    session_duration_minutes: Optional[int] = None


class SplitDay(BaseModel):
    day_number: int
    name: str
    focus: str
    muscle_groups: List[str]
    primary_movements: List[MovementPattern]
    accessory_slots: int = 2
    is_leg_dominant: bool = False


class TrainingSplit(BaseModel):
    id: str
    name: str
    days_per_week: int
    days: List[SplitDay]


class PeriodizationTemplate(BaseModel):
    id: str
    name: str
    description: str
    goal: TrainingGoal
    duration_weeks: int
    phases: List[PhaseConfig]
    suitable_for: List[ExperienceLevel]


class GeneratedExercise(BaseModel):
    exercise_id: str
    exercise_name: str
    muscle_group: Optional[str] = None
    movement_pattern: Optional[MovementPattern] = None
    sets: List[GeneratedSet]
    notes: Optional[str] = None


class GeneratedWorkout(BaseModel):
    day_number: int
    name: str
    focus: str
    exercises: List[GeneratedExercise] = Field(default_factory=list)
    estimated_duration: int = 0


class GeneratedWeek(BaseModel):
    week_number: int
    phase: TrainingPhase
    theme: str
    workouts: List[GeneratedWorkout] = Field(default_factory=list)
    total_volume: int = 0  # working sets
    rpe_min: float
    rpe_max: float


class GeneratedBlock(BaseModel):
    name: str
    description: str
    goal: TrainingGoal
    start_date: date
    duration_weeks: int
    split_name: str
    template_id: str
    weeks: List[GeneratedWeek] = Field(default_factory=list)
    volume_progression: List[int] = Field(default_factory=list)
    intensity_progression: List[float] = Field(default_factory=list)


# --- Annual periodization ------------------------------------------------------

class Competition(BaseModel):
    id: str
    name: str
    event_date: date
    priority: EventPriority = EventPriority.PRIMARY


class PlannedBlock(BaseModel):
    name: str
    block_type: BlockType
    planned_start_date: date
    duration_weeks: int = Field(ge=1)
    sequence_order: int = 0
    volume_level: VolumeLevel = VolumeLevel.MODERATE
    intensity_level: VolumeLevel = VolumeLevel.MODERATE
    depends_on_competition: Optional[str] = None
    flagged_competitions: List[str] = Field(default_factory=list)
    description: Optional[str] = None

    @property
    def end_date(self) -> date:
        """First day after the block."""
        return self.planned_start_date + timedelta(weeks=self.duration_weeks)


class BlockRecommendation(BaseModel):
    block_type: BlockType
    duration_weeks: int
    reasoning: str
    confidence: float
    volume_level: VolumeLevel
    intensity_level: VolumeLevel
    primary_focus: str


class RecommendationContext(BaseModel):
    current_phase: Optional[TrainingPhase] = None
    weeks_in_phase: int = 0
    next_competition: Optional[Competition] = None
    recent_blocks: List[PlannedBlock] = Field(default_factory=list)
    goal: TrainingGoal = TrainingGoal.GENERAL
    today: date


class TimelineConfig(BaseModel):
    start_date: date
    end_date: date
    goal: TrainingGoal = TrainingGoal.GENERAL
    competitions: List[Competition] = Field(default_factory=list)
    deload_frequency: int = Field(default_factory=lambda: settings.DEFAULT_DELOAD_FREQUENCY, ge=1)
    block_length_weeks: int = Field(default_factory=lambda: settings.DEFAULT_BLOCK_WEEKS, ge=1)


# --- Historical logs -------------------------------------------------------------

class Exercise(BaseModel):
    id: str
    name: str
    muscle_group: str = "Other"
    movement_pattern: Optional[MovementPattern] = None
    modality: str = "Strength"
    equipment: List[str] = Field(default_factory=list)


class WorkoutSet(BaseModel):
    exercise: Exercise
    actual_reps: Optional[int] = None
    actual_weight: Optional[float] = None
    actual_rpe: Optional[float] = None
    is_warmup: bool = False


class Workout(BaseModel):
    id: str
    focus: str = ""
    normalized_focus: Optional[str] = None
    date_completed: Optional[date] = None
    duration_minutes: Optional[int] = None
    sets: List[WorkoutSet] = Field(default_factory=list)

    def exercises(self) -> List[Exercise]:
        """Distinct exercises in the order they were first logged."""
        seen: Dict[str, Exercise] = {}
        for s in self.sets:
            seen.setdefault(s.exercise.id, s.exercise)
        return list(seen.values())


class MovementMemory(BaseModel):
    exercise_id: str
    last_weight: Optional[float] = None
    last_reps: Optional[int] = None
    confidence: str = "low"


# --- Patterns & inference ----------------------------------------------------------

class DetectedPattern(BaseModel):
    type: PatternType
    name: str
    confidence: float = Field(ge=0.0, le=1.0)
    data: Dict[str, Any] = Field(default_factory=dict)
    description: str = ""


class InferredExercise(BaseModel):
    exercise: Exercise
    frequency: float = Field(ge=0.0, le=1.0)
    typical_sets: int
    typical_reps: str
    typical_weight: Optional[float] = None
    last_performed: Optional[date] = None


class InferredWorkoutDay(BaseModel):
    day_number: int
    focus: str
    muscle_groups: List[str] = Field(default_factory=list)
    exercises: List[InferredExercise] = Field(default_factory=list)
    typical_duration: int = 60


class InferredProgram(BaseModel):
    split_name: str
    split_type: SplitType
    days_per_week: float
    rotation_length: int
    workout_days: List[InferredWorkoutDay]
    confidence: float
    workouts_analyzed: int
    weeks_of_data: int
    summary: str
    highlights: List[str] = Field(default_factory=list)


class PatternToProgramResult(BaseModel):
    is_ready: bool
    ready_reason: str
    inferred_program: Optional[InferredProgram] = None
    workouts_logged: int = 0
    workouts_needed: int = 0
    days_tracking: int = 0
    days_needed: int = 0

    @property
    def workouts_remaining(self) -> int:
        return max(0, self.workouts_needed - self.workouts_logged)

    @property
    def days_remaining(self) -> int:
        return max(0, self.days_needed - self.days_tracking)


class RotationSuggestion(BaseModel):
    next_focus: str
    reason: str
    days_since_last: Optional[int] = None
    confidence: str = "low"  # high | medium | low
    split_name: Optional[str] = None
    rotation_position: int
    rotation_total: int
