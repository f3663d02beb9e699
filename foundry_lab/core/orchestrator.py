from datetime import date
from typing import List, Optional, Sequence, Tuple

from foundry_lab.config import settings
from foundry_lab.core import inference, patterns, periodization, plan_builder
from foundry_lab.core.models import (
    BlockConfig,
    BlockRecommendation,
    DetectedPattern,
    GeneratedBlock,
    PatternToProgramResult,
    PlannedBlock,
    RecommendationContext,
    RotationSuggestion,
    RunningSchedule,
    TimelineConfig,
    WeeklyPlan,
    WeeklyTargets,
)
from foundry_lab.core.taxonomy import ExperienceLevel, TrainingGoal, TrainingPhase
from foundry_lab.data_access.dal import DataAccessLayer
from foundry_lab.infra import log_utils


class Orchestrator:
    """
    Entry point for planning operations.

    Reads history and the exercise catalog through the injected DAL, runs the
    pure planners and persists what they produce. The orchestrator doesn't
    know which storage backend it is talking to.
    """

    def __init__(self, dal: DataAccessLayer, aversions: Sequence[str] = ()):
        self.dal = dal
        self.aversions = list(aversions)

    # --- Weekly plan ---
    def allocate_week_sessions(
        self,
        targets: WeeklyTargets,
        running_schedule: Optional[RunningSchedule] = None,
        week_start: Optional[date] = None,
        goal: TrainingGoal = TrainingGoal.HYPERTROPHY,
        phase: TrainingPhase = TrainingPhase.ACCUMULATION,
        experience: ExperienceLevel = ExperienceLevel.INTERMEDIATE,
    ) -> Tuple[WeeklyPlan, List[str]]:
        """Build, enrich and save the plan for one week."""
        week_start = plan_builder.week_start_for(week_start or date.today())
        plan, warnings = plan_builder.build_week(
            self.dal,
            targets,
            week_start,
            running_schedule=running_schedule,
            phase=phase,
            goal=goal,
            experience=experience,
            aversions=self.aversions,
        )
        self.dal.save_weekly_plan(plan)
        log_utils.log_message(
            f"[orchestrator] Week of {week_start.isoformat()} planned with {len(warnings)} warning(s)"
        )
        return plan, warnings

    # --- Blocks & periodization ---
    def generate_block(self, config: BlockConfig, start_date: date) -> GeneratedBlock:
        return plan_builder.build_block(self.dal, config, start_date, self.aversions)

    def generate_block_recommendations(self, context: RecommendationContext) -> List[BlockRecommendation]:
        recommendations = periodization.recommend_blocks(context)
        if recommendations:
            top = recommendations[0]
            log_utils.log_message(
                f"[orchestrator] Recommending {top.block_type.value} for {top.duration_weeks} weeks ({top.confidence})"
            )
        return recommendations

    def generate_annual_timeline(self, config: TimelineConfig) -> List[PlannedBlock]:
        """Lay out the season's blocks and save them."""
        blocks = periodization.generate_timeline(config)
        self.dal.save_timeline(blocks, config.start_date)
        log_utils.log_message(
            f"[orchestrator] Timeline {config.start_date.isoformat()} to {config.end_date.isoformat()}: {len(blocks)} blocks"
        )
        return blocks

    # --- History-driven ---
    def _history(self):
        return self.dal.list_workouts(settings.HISTORY_WINDOW)

    def detected_patterns(self) -> List[DetectedPattern]:
        return patterns.detect_patterns(self._history())

    def pattern_to_program(self) -> PatternToProgramResult:
        history = self._history()
        result = inference.infer_program(patterns.detect_patterns(history), history)
        if not result.is_ready:
            log_utils.log_message(f"[orchestrator] Program not inferred: {result.ready_reason}")
        return result

    def next_in_rotation(self, today: date) -> Optional[RotationSuggestion]:
        history = self._history()
        split = patterns.training_split(patterns.detect_patterns(history))
        return inference.next_in_rotation(split, history, today)
