from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional, Sequence

from foundry_lab.core.models import Exercise, MovementMemory, PlannedBlock, WeeklyPlan, Workout
from foundry_lab.core.taxonomy import MovementPattern


class DataAccessLayer(ABC):
    """
    Abstract Base Class for a Data Access Layer.
    Defines the contract the planner uses to read the exercise catalog and
    training history and to persist generated plans, so the core can run
    against any storage backend (JSON, DB, etc.) through one interface.
    """

    @abstractmethod
    def find_exercise(
        self,
        movement_pattern: Optional[MovementPattern] = None,
        name: Optional[str] = None,
        muscle_groups: Optional[Sequence[str]] = None,
        excluding: Sequence[str] = (),
    ) -> Optional[Exercise]:
        """
        Returns the first catalog exercise matching every given criterion.

        Args:
            movement_pattern: Required movement pattern, if any.
            name: Case-insensitive exact exercise name, if any.
            muscle_groups: Accepted primary muscle groups, if any.
            excluding: Exercise ids that must not be returned.
        """
        pass

    @abstractmethod
    def list_workouts(self, limit: int, since: Optional[date] = None) -> List[Workout]:
        """Completed workouts, most recent first."""
        pass

    @abstractmethod
    def save_workout(self, workout: Workout) -> None:
        """Stores (or replaces) a logged workout."""
        pass

    @abstractmethod
    def get_movement_memory(self, exercise_id: str) -> Optional[MovementMemory]:
        """Last known working weight / reps for an exercise, or None."""
        pass

    @abstractmethod
    def save_weekly_plan(self, plan: WeeklyPlan) -> None:
        """Persists a generated weekly plan."""
        pass

    @abstractmethod
    def save_timeline(self, blocks: List[PlannedBlock], start_date: date) -> None:
        """Persists an annual block timeline starting at start_date."""
        pass
