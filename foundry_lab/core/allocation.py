"""Weekly session allocator.

Assigns rest, running, zone 2 and lifting sessions to the seven days of a
week. Placement runs in a fixed order and each step only writes to days that
earlier steps left free:

    1. fixed running schedule
    2. rest days
    3. tempo / interval sessions
    4. zone 2 cardio
    5. lifting rotation
    6. anything left over becomes rest

Infeasible targets never raise; they come back as warning strings next to
the best-effort plan. Weeks do not wrap, so Sunday and Monday are not
neighbours.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from foundry_lab.core.models import AllocationResult, PlannedDay, RunningSchedule, WeeklyTargets
from foundry_lab.core.splits import is_leg_dominant, lifting_rotation
from foundry_lab.core.taxonomy import (
    DAY_NUMBERS,
    DAY_ORDER,
    HARD_SESSION_TYPES,
    DayOfWeek,
    SessionType,
    TrainingGoal,
    day_name,
    is_hard_run,
    run_type_to_session,
)
from foundry_lab.infra import log_utils

PREFERRED_REST_DAYS = [DayOfWeek.SUNDAY, DayOfWeek.SATURDAY, DayOfWeek.MONDAY]

RUN_FOCUS: Dict[SessionType, str] = {
    SessionType.ZONE2: "Zone 2 Cardio",
    SessionType.TEMPO: "Tempo Run",
    SessionType.INTERVALS: "Intervals",
    SessionType.LONG_RUN: "Long Run",
    SessionType.EASY_RUN: "Easy Run",
}

RUN_DURATION: Dict[SessionType, int] = {
    SessionType.TEMPO: 45,
    SessionType.INTERVALS: 40,
    SessionType.LONG_RUN: 90,
    SessionType.EASY_RUN: 30,
}

LIFT_DURATION = 60
LEG_NEAR_HARD_RUN_WARNING = "{day}: Leg day scheduled near hard run - consider swapping"
SWAP_WARNING = "Moving legs to this day puts it near a hard run. Consider adjusting intensity."


@dataclass
class DaySlot:
    day_number: int
    day: DayOfWeek
    is_available: bool
    is_rest_day: bool = False
    run_session: Optional[SessionType] = None
    lift_session: Optional[SessionType] = None
    is_near_hard_run: bool = False
    focus: Optional[str] = None
    is_leg_day: bool = False

    @property
    def is_free(self) -> bool:
        return self.is_available and not self.is_rest_day and self.run_session is None

    @property
    def is_hard_for_legs(self) -> bool:
        """Next to a hard run, or a hard run day itself (long runs can carry a lift)."""
        return self.is_near_hard_run or self.run_session in HARD_SESSION_TYPES


def _flag_neighbours(slots: List[DaySlot], index: int) -> None:
    if index > 0:
        slots[index - 1].is_near_hard_run = True
    if index < len(slots) - 1:
        slots[index + 1].is_near_hard_run = True


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def _place_fixed_runs(slots: List[DaySlot], schedule: RunningSchedule, rationale: List[str], warnings: List[str]) -> None:
    mapping = schedule.as_mapping()
    if not mapping:
        return

    for idx, slot in enumerate(slots):
        run_type = mapping.get(slot.day)
        if run_type is None:
            continue
        slot.run_session = run_type_to_session(run_type)
        if is_hard_run(run_type):
            _flag_neighbours(slots, idx)

    for first, second in zip(slots, slots[1:]):
        if first.run_session in HARD_SESSION_TYPES and second.run_session in HARD_SESSION_TYPES:
            warnings.append(
                f"{day_name(first.day)} and {day_name(second.day)}: back-to-back hard runs in your running schedule"
            )

    rationale.append(f"Placed {_plural(len(mapping), 'running session')} from your schedule")


def _place_rest_days(slots: List[DaySlot], wanted: int, rationale: List[str]) -> None:
    by_day = {slot.day: slot for slot in slots}
    placed = 0

    for day in PREFERRED_REST_DAYS:
        if placed >= wanted:
            break
        slot = by_day[day]
        if slot.run_session is None and not slot.is_rest_day:
            slot.is_rest_day = True
            placed += 1

    for slot in slots:
        if placed >= wanted:
            break
        if slot.run_session is None and not slot.is_rest_day:
            slot.is_rest_day = True
            placed += 1

    if placed:
        rationale.append(f"Scheduled {_plural(placed, 'rest day')}")


def _place_hard_sessions(
    slots: List[DaySlot], session: SessionType, wanted: int, label: str, warnings: List[str]
) -> int:
    placed = 0
    for idx, slot in enumerate(slots):
        if placed >= wanted:
            break
        if slot.is_free and not slot.is_near_hard_run:
            slot.run_session = session
            _flag_neighbours(slots, idx)
            placed += 1

    if placed < wanted:
        warnings.append(f"Only {placed}/{wanted} {label} sessions could be scheduled without back-to-back hard days")
    return placed


def _place_zone2(slots: List[DaySlot], targets: WeeklyTargets, rationale: List[str], warnings: List[str]) -> None:
    wanted = targets.zone2_sessions.midpoint
    placed = 0
    for slot in slots:
        if placed >= wanted:
            break
        if slot.is_free:
            slot.run_session = SessionType.ZONE2
            placed += 1

    if placed:
        rationale.append(f"Added {_plural(placed, 'zone 2 cardio session')}")
    if placed < targets.zone2_sessions.min:
        warnings.append(f"Only {placed}/{targets.zone2_sessions.min} minimum zone 2 sessions could be scheduled")


def _place_lifts(
    slots: List[DaySlot],
    targets: WeeklyTargets,
    goal: TrainingGoal,
    rationale: List[str],
    warnings: List[str],
) -> None:
    liftable = [
        slot for slot in slots
        if slot.is_available
        and not slot.is_rest_day
        and slot.run_session not in (SessionType.TEMPO, SessionType.INTERVALS)
    ]
    count = min(targets.hypertrophy_sessions.midpoint, len(liftable))
    rotation = lifting_rotation(count, goal)
    lift_days = liftable[:count]
    focuses = [(day.name, day.is_leg_dominant) for day in rotation]
    spare = liftable[count:]

    for i in range(count):
        is_leg, slot = focuses[i][1], lift_days[i]
        if not (is_leg and slot.is_hard_for_legs):
            continue

        swap_with = next(
            (j for j in range(i + 1, count) if not lift_days[j].is_hard_for_legs and not focuses[j][1]),
            None,
        )
        if swap_with is not None:
            focuses[i], focuses[swap_with] = focuses[swap_with], focuses[i]
            continue

        relocate = next((s for s in spare if not s.is_hard_for_legs), None)
        if relocate is not None:
            spare.remove(relocate)
            lift_days[i] = relocate
            continue

        warnings.append(LEG_NEAR_HARD_RUN_WARNING.format(day=day_name(slot.day)))

    strength_count = targets.strength_sessions.midpoint if targets.strength_sessions else 0
    # relocation can leave lift days out of calendar order
    placed = sorted(zip(lift_days, focuses), key=lambda pair: pair[0].day_number)
    for i, (slot, focus) in enumerate(placed):
        slot.lift_session = SessionType.STRENGTH if i < strength_count else SessionType.HYPERTROPHY
        slot.focus, slot.is_leg_day = focus

    if count:
        rationale.append(f"Scheduled {_plural(count, 'lifting session')}")
    if count < targets.hypertrophy_sessions.min:
        warnings.append(f"Only {count}/{targets.hypertrophy_sessions.min} minimum lifting sessions could be scheduled")


def _session_type(slot: DaySlot) -> SessionType:
    if slot.is_rest_day:
        return SessionType.REST
    if slot.lift_session:
        return slot.lift_session
    if slot.run_session:
        return slot.run_session
    return SessionType.REST


def _focus(slot: DaySlot) -> str:
    if slot.is_rest_day:
        return "Rest & Recovery"
    if slot.focus:
        return slot.focus
    if slot.run_session:
        return RUN_FOCUS[slot.run_session]
    return "Training"


def _notes(slot: DaySlot) -> str:
    notes = []
    if slot.lift_session and slot.run_session:
        if slot.run_session == SessionType.ZONE2:
            notes.append("Can combine lifting + zone 2 or split AM/PM")
        else:
            notes.append("Prioritize the harder session based on your goals")
    if slot.is_hard_for_legs and slot.is_leg_day:
        notes.append("Consider lighter leg volume due to nearby hard run")
    return ". ".join(notes)


def _duration(slot: DaySlot, targets: WeeklyTargets) -> int:
    if slot.is_rest_day:
        return 0
    minutes = LIFT_DURATION if slot.lift_session else 0
    if slot.run_session == SessionType.ZONE2:
        minutes += targets.zone2_sessions.duration_minutes
    elif slot.run_session is not None:
        minutes += RUN_DURATION[slot.run_session]
    return minutes


def _to_planned_day(slot: DaySlot, targets: WeeklyTargets) -> PlannedDay:
    session_type = _session_type(slot)
    secondary = slot.run_session if slot.lift_session and slot.run_session else None
    return PlannedDay(
        day_number=slot.day_number,
        day_name=day_name(slot.day),
        is_rest_day=session_type == SessionType.REST,
        session_type=session_type,
        focus=_focus(slot),
        secondary_session=secondary,
        notes=_notes(slot),
        estimated_duration=_duration(slot, targets),
    )


def _post_checks(slots: List[DaySlot], targets: WeeklyTargets, warnings: List[str]) -> None:
    rest_count = sum(1 for slot in slots if slot.is_rest_day)
    if rest_count != targets.rest_days:
        warnings.append(f"Plan has {_plural(rest_count, 'rest day')} but {targets.rest_days} requested")

    for idx, slot in enumerate(slots):
        if not (slot.lift_session and slot.is_leg_day):
            continue
        window = slots[max(0, idx - 1): idx + 2]
        if any(s.run_session in HARD_SESSION_TYPES for s in window):
            message = LEG_NEAR_HARD_RUN_WARNING.format(day=day_name(slot.day))
            if message not in warnings:
                warnings.append(message)


def allocate(
    targets: WeeklyTargets,
    running_schedule: Optional[RunningSchedule] = None,
    goal: TrainingGoal = TrainingGoal.HYPERTROPHY,
) -> AllocationResult:
    """Allocate a week of sessions. Deterministic for identical inputs."""
    available = set(targets.available_days)
    slots = [
        DaySlot(day_number=idx + 1, day=day, is_available=day in available)
        for idx, day in enumerate(DAY_ORDER)
    ]
    rationale: List[str] = []
    warnings: List[str] = list(targets.validate_capacity())

    if running_schedule is not None:
        _place_fixed_runs(slots, running_schedule, rationale, warnings)

    _place_rest_days(slots, targets.rest_days, rationale)

    tempo = _place_hard_sessions(slots, SessionType.TEMPO, targets.tempo_sessions, "tempo", warnings)
    intervals = _place_hard_sessions(slots, SessionType.INTERVALS, targets.interval_sessions, "interval", warnings)
    if tempo or intervals:
        rationale.append(f"Added {_plural(tempo + intervals, 'hard cardio session')} with recovery buffers")

    _place_zone2(slots, targets, rationale, warnings)
    _place_lifts(slots, targets, goal, rationale, warnings)

    for slot in slots:
        if slot.run_session is None and slot.lift_session is None:
            slot.is_rest_day = True

    _post_checks(slots, targets, warnings)

    for warning in warnings:
        log_utils.log_message(f"[allocation] {warning}", "WARN")

    return AllocationResult(
        days=[_to_planned_day(slot, targets) for slot in slots],
        rationale=(". ".join(rationale) + ".") if rationale else "No sessions scheduled.",
        warnings=warnings,
    )


def _is_leg_focus(day: PlannedDay) -> bool:
    lowered = day.focus.lower()
    return "leg" in lowered or "lower" in lowered or is_leg_dominant(day.focus)


def can_swap_days(
    day1: PlannedDay, day2: PlannedDay, running_schedule: Optional[RunningSchedule] = None
) -> Tuple[bool, Optional[str]]:
    """Swaps are always allowed; moving legs next to a hard run earns a warning."""
    if day1.is_rest_day != day2.is_rest_day or running_schedule is None:
        return True, None

    hard_days = [DAY_NUMBERS[day] for day, run in running_schedule.as_mapping().items() if is_hard_run(run)]
    for hard_day in hard_days:
        if _is_leg_focus(day1) and abs(day2.day_number - hard_day) <= 1:
            return True, SWAP_WARNING
        if _is_leg_focus(day2) and abs(day1.day_number - hard_day) <= 1:
            return True, SWAP_WARNING
    return True, None
