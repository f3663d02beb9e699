"""Annual periodization: block recommendations and multi-month timelines."""

import math
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from foundry_lab.core.models import (
    BlockRecommendation,
    Competition,
    PlannedBlock,
    RecommendationContext,
    TimelineConfig,
)
from foundry_lab.core.taxonomy import (
    PRIORITY_RANK,
    BlockType,
    TrainingGoal,
    TrainingPhase,
    VolumeLevel,
)
from foundry_lab.infra import log_utils

B = BlockType
V = VolumeLevel

PHASE_SEQUENCES: Dict[TrainingGoal, List[BlockType]] = {
    TrainingGoal.STRENGTH: [B.ACCUMULATION, B.INTENSIFICATION, B.REALIZATION, B.DELOAD],
    TrainingGoal.HYPERTROPHY: [B.HYPERTROPHY, B.HYPERTROPHY, B.STRENGTH, B.DELOAD],
    TrainingGoal.POWERLIFTING: [B.ACCUMULATION, B.INTENSIFICATION, B.REALIZATION, B.PEAKING, B.TRANSITION],
    TrainingGoal.ATHLETIC: [B.BASE_BUILDING, B.STRENGTH, B.POWER, B.DELOAD],
    TrainingGoal.GENERAL: [B.HYPERTROPHY, B.STRENGTH, B.DELOAD],
    TrainingGoal.BODYBUILDING: [B.HYPERTROPHY, B.HYPERTROPHY, B.HYPERTROPHY, B.DELOAD],
}

BLOCK_CHARACTERISTICS: Dict[BlockType, Dict] = {
    B.ACCUMULATION: {
        "name": "Accumulation",
        "description": "Build work capacity and muscle with higher volume",
        "typical_duration": 4, "volume": V.HIGH, "intensity": V.MODERATE,
    },
    B.INTENSIFICATION: {
        "name": "Intensification",
        "description": "Increase intensity while managing volume",
        "typical_duration": 4, "volume": V.MODERATE, "intensity": V.HIGH,
    },
    B.REALIZATION: {
        "name": "Realization",
        "description": "Express strength gains with heavy singles/doubles",
        "typical_duration": 3, "volume": V.LOW, "intensity": V.VERY_HIGH,
    },
    B.PEAKING: {
        "name": "Peaking",
        "description": "Final preparation for competition",
        "typical_duration": 2, "volume": V.LOW, "intensity": V.VERY_HIGH,
    },
    B.DELOAD: {
        "name": "Deload",
        "description": "Recovery week with reduced volume and intensity",
        "typical_duration": 1, "volume": V.LOW, "intensity": V.LOW,
    },
    B.TRANSITION: {
        "name": "Transition",
        "description": "Active recovery between training cycles",
        "typical_duration": 2, "volume": V.LOW, "intensity": V.LOW,
    },
    B.BASE_BUILDING: {
        "name": "Base Building",
        "description": "Establish movement patterns and general conditioning",
        "typical_duration": 4, "volume": V.MODERATE, "intensity": V.LOW,
    },
    B.HYPERTROPHY: {
        "name": "Hypertrophy",
        "description": "Maximize muscle growth with moderate-high volume",
        "typical_duration": 4, "volume": V.VERY_HIGH, "intensity": V.MODERATE,
    },
    B.STRENGTH: {
        "name": "Strength",
        "description": "Build maximal strength with heavy compounds",
        "typical_duration": 4, "volume": V.MODERATE, "intensity": V.HIGH,
    },
    B.POWER: {
        "name": "Power",
        "description": "Develop explosive strength and speed",
        "typical_duration": 3, "volume": V.LOW, "intensity": V.MODERATE,
    },
}

PHASE_TO_BLOCK: Dict[TrainingPhase, BlockType] = {
    TrainingPhase.ACCUMULATION: B.ACCUMULATION,
    TrainingPhase.INTENSIFICATION: B.INTENSIFICATION,
    TrainingPhase.REALIZATION: B.REALIZATION,
    TrainingPhase.DELOAD: B.DELOAD,
    TrainingPhase.MAINTENANCE: B.BASE_BUILDING,
}

# Block types that never trigger or receive an inserted deload.
RECOVERY_TYPES = frozenset({B.DELOAD, B.TRANSITION})


def weeks_until(today: date, target: date) -> int:
    """Whole weeks from today to target, rounded up."""
    return math.ceil((target - today).days / 7)


# --- Recommendations ------------------------------------------------------------

def _recommendation(block_type: BlockType, weeks: int, reasoning: str, confidence: float, focus: str,
                    volume: Optional[VolumeLevel] = None, intensity: Optional[VolumeLevel] = None) -> BlockRecommendation:
    info = BLOCK_CHARACTERISTICS[block_type]
    return BlockRecommendation(
        block_type=block_type,
        duration_weeks=max(1, weeks),
        reasoning=reasoning,
        confidence=confidence,
        volume_level=volume or info["volume"],
        intensity_level=intensity or info["intensity"],
        primary_focus=focus,
    )


def _competition_prep(weeks_to_comp: int) -> List[BlockRecommendation]:
    if weeks_to_comp <= 2:
        return [_recommendation(
            B.PEAKING, weeks_to_comp,
            f"Competition in {weeks_to_comp} weeks - time for final peaking phase",
            0.95, "Peak strength expression",
        )]
    if weeks_to_comp <= 4:
        return [_recommendation(
            B.REALIZATION, min(3, weeks_to_comp - 1),
            f"{weeks_to_comp} weeks out - realize your strength gains",
            0.9, "Heavy singles and competition prep",
        )]
    if weeks_to_comp <= 8:
        return [_recommendation(
            B.INTENSIFICATION, 4,
            f"{weeks_to_comp} weeks out - build intensity toward competition",
            0.85, "Increase working weights",
        )]
    if weeks_to_comp <= 12:
        return [_recommendation(
            B.ACCUMULATION, 4,
            f"{weeks_to_comp} weeks out - build volume base for competition prep",
            0.8, "Build work capacity",
        )]
    return [_recommendation(
        B.HYPERTROPHY, 4,
        f"{weeks_to_comp} weeks until competition - time to build muscle and work capacity",
        0.75, "Build muscle mass and GPP", volume=V.HIGH,
    )]


def _phase_progression(current_phase: Optional[TrainingPhase], weeks_in_phase: int, goal: TrainingGoal) -> List[BlockRecommendation]:
    sequence = PHASE_SEQUENCES.get(goal, PHASE_SEQUENCES[TrainingGoal.GENERAL])
    current_block = PHASE_TO_BLOCK[current_phase] if current_phase else None
    current_index = sequence.index(current_block) if current_block in sequence else -1
    next_block = sequence[(current_index + 1) % len(sequence)]
    next_info = BLOCK_CHARACTERISTICS[next_block]

    typical = BLOCK_CHARACTERISTICS[current_block]["typical_duration"] if current_block else 4
    if current_phase is None or weeks_in_phase >= typical:
        reasoning = (
            f"After {weeks_in_phase} weeks of {current_phase.value}, progress to {next_info['name']}"
            if current_phase else f"Start with {next_info['name']} phase for {goal.value} goal"
        )
        return [_recommendation(next_block, next_info["typical_duration"], reasoning, 0.85, next_info["description"])]

    current_info = BLOCK_CHARACTERISTICS[current_block]
    remaining = typical - weeks_in_phase
    return [_recommendation(
        current_block, remaining,
        f"Continue {current_info['name']} - {remaining} weeks remaining",
        0.7, current_info["description"],
    )]


def _alternatives(goal: TrainingGoal, current_phase: Optional[TrainingPhase]) -> List[BlockRecommendation]:
    out: List[BlockRecommendation] = []
    if current_phase != TrainingPhase.DELOAD:
        out.append(_recommendation(B.DELOAD, 1, "Take a recovery week if feeling fatigued", 0.5, "Recovery and regeneration"))
    if goal in (TrainingGoal.STRENGTH, TrainingGoal.POWERLIFTING):
        out.append(_recommendation(
            B.HYPERTROPHY, 4, "Build muscle mass to support future strength", 0.4, "Muscle growth", volume=V.HIGH,
        ))
    if goal in (TrainingGoal.HYPERTROPHY, TrainingGoal.BODYBUILDING):
        out.append(_recommendation(
            B.STRENGTH, 4, "Build strength to lift heavier in future hypertrophy work", 0.4, "Neural adaptations",
        ))
    return out


def recommend_blocks(context: RecommendationContext) -> List[BlockRecommendation]:
    """Top three next-block suggestions, most confident first."""
    recommendations: List[BlockRecommendation] = []
    comp = context.next_competition
    weeks_to_comp = weeks_until(context.today, comp.event_date) if comp else None

    if weeks_to_comp is not None and weeks_to_comp > 0:
        recommendations.extend(_competition_prep(weeks_to_comp))
    else:
        recommendations.extend(_phase_progression(context.current_phase, context.weeks_in_phase, context.goal))

    if len(recommendations) < 3:
        recommendations.extend(_alternatives(context.goal, context.current_phase))

    # stable sort keeps insertion order among equal confidences
    recommendations.sort(key=lambda r: r.confidence, reverse=True)
    return recommendations[:3]


# --- Timeline ---------------------------------------------------------------------

def _segment(block_type: BlockType, weeks: int, name: Optional[str] = None, competition: Optional[Competition] = None) -> Dict:
    return {
        "type": block_type,
        "weeks": weeks,
        "name": name or BLOCK_CHARACTERISTICS[block_type]["name"],
        "competition": competition,
    }


def _prep_phases(weeks_available: int) -> List[Tuple[BlockType, int]]:
    if weeks_available >= 12:
        return [(B.ACCUMULATION, 4), (B.INTENSIFICATION, 4), (B.REALIZATION, 3), (B.PEAKING, 1)]
    if weeks_available >= 8:
        return [(B.ACCUMULATION, 3), (B.INTENSIFICATION, 3), (B.PEAKING, 2)]
    if weeks_available >= 4:
        return [(B.INTENSIFICATION, 2), (B.PEAKING, 2)]
    return [(B.PEAKING, weeks_available)]


class _GeneralCycle:
    """Walks the goal's phase sequence across every general-training gap."""

    def __init__(self, goal: TrainingGoal, block_length: int):
        self.sequence = PHASE_SEQUENCES.get(goal, PHASE_SEQUENCES[TrainingGoal.GENERAL])
        self.block_length = block_length
        self.index = 0

    def fill(self, weeks: int) -> List[Dict]:
        out: List[Dict] = []
        while weeks > 0:
            block_type = self.sequence[self.index % len(self.sequence)]
            length = 1 if block_type in RECOVERY_TYPES else self.block_length
            length = min(length, weeks)
            out.append(_segment(block_type, length))
            weeks -= length
            self.index += 1
        return out


def _group_competitions(competitions: List[Competition], window_days: int) -> List[List[Competition]]:
    groups: List[List[Competition]] = []
    for comp in competitions:
        if groups and (comp.event_date - groups[-1][0].event_date).days < window_days:
            groups[-1].append(comp)
        else:
            groups.append([comp])
    return groups


def _apply_deload_cadence(segments: List[Dict], deload_frequency: int) -> List[Dict]:
    """Insert a one-week deload before a non-peaking block once enough loading blocks have passed."""
    out: List[Dict] = []
    loading = 0
    for seg in segments:
        block_type = seg["type"]
        if block_type in RECOVERY_TYPES:
            loading = 0
            out.append(seg)
            continue
        if block_type != B.PEAKING and loading >= deload_frequency:
            out.append(_segment(B.DELOAD, 1, "Deload Week"))
            loading = 0
            if seg["weeks"] > 1:
                seg = {**seg, "weeks": seg["weeks"] - 1}
            else:
                continue
        out.append(seg)
        if block_type != B.PEAKING:
            loading += 1
    return out


def _truncate(segments: List[Dict], total_weeks: int) -> List[Dict]:
    out: List[Dict] = []
    used = 0
    for seg in segments:
        if used >= total_weeks:
            break
        weeks = min(seg["weeks"], total_weeks - used)
        out.append({**seg, "weeks": weeks})
        used += weeks
    return out


def _to_blocks(segments: List[Dict], start_date: date) -> List[PlannedBlock]:
    blocks: List[PlannedBlock] = []
    cursor = start_date
    for order, seg in enumerate(segments):
        info = BLOCK_CHARACTERISTICS[seg["type"]]
        comp = seg["competition"]
        blocks.append(
            PlannedBlock(
                name=seg["name"],
                block_type=seg["type"],
                planned_start_date=cursor,
                duration_weeks=seg["weeks"],
                sequence_order=order,
                volume_level=info["volume"],
                intensity_level=info["intensity"],
                depends_on_competition=comp.id if comp else None,
                flagged_competitions=list(seg.get("flagged", [])),
                description=info["description"],
            )
        )
        cursor += timedelta(weeks=seg["weeks"])
    return blocks


def _carve_tune_up(segments: List[Dict], week_index: int, loser: Competition) -> List[Dict]:
    """Replace the week at week_index with a one-week tune-up peaking block."""
    out: List[Dict] = []
    start = 0
    for seg in segments:
        end = start + seg["weeks"]
        if start <= week_index < end:
            if seg["type"] in (B.PEAKING, B.TRANSITION):
                # the anchored competition's own peak / recovery week stays intact
                return segments
            before, after = week_index - start, end - week_index - 1
            if before:
                out.append({**seg, "weeks": before})
            tune_up = _segment(B.PEAKING, 1, f"{loser.name} - Tune-up", loser)
            out.append(tune_up)
            if after:
                out.append({**seg, "weeks": after})
        else:
            out.append(seg)
        start = end
    return out


def generate_timeline(config: TimelineConfig) -> List[PlannedBlock]:
    """
    Lay out training blocks from start_date to end_date.

    Each competition in the horizon gets a prep run ending on its week and a
    one-week transition afterwards; gaps are filled by cycling the goal's
    phase sequence. Competitions that land in the same block window are
    resolved by priority; the winner anchors the prep, the others are flagged
    on it and get a one-week tune-up where the calendar allows.
    """
    start, end = config.start_date, config.end_date
    total_weeks = max(0, (end - start).days // 7)
    if total_weeks == 0:
        log_utils.log_message(f"[periodization] Horizon {start} to {end} is shorter than a week", "WARN")
        return []

    comps = sorted(
        (c for c in config.competitions if start <= c.event_date <= end),
        key=lambda c: (c.event_date, PRIORITY_RANK[c.priority]),
    )
    groups = _group_competitions(comps, config.block_length_weeks * 7)
    general = _GeneralCycle(config.goal, config.block_length_weeks)

    segments: List[Dict] = []
    cursor_week = 0
    anchored: List[Tuple[Competition, List[Competition], int]] = []  # winner, losers, transition week

    for group in groups:
        winner = min(group, key=lambda c: (PRIORITY_RANK[c.priority], c.event_date))
        losers = [c for c in group if c is not winner]
        weeks_available = math.ceil(((winner.event_date - start).days - cursor_week * 7) / 7)
        if weeks_available <= 0:
            log_utils.log_message(
                f"[periodization] {winner.name} falls inside an earlier competition's recovery; skipping its prep",
                "WARN",
            )
            continue

        prep = _prep_phases(weeks_available)
        lead_in = weeks_available - sum(weeks for _, weeks in prep)
        segments.extend(general.fill(lead_in))
        flagged = [c.id for c in losers]
        for block_type, weeks in prep:
            seg = _segment(block_type, weeks, f"{winner.name} - {BLOCK_CHARACTERISTICS[block_type]['name']}", winner)
            seg["flagged"] = flagged
            segments.append(seg)
        segments.append(_segment(B.TRANSITION, 1, f"Post-{winner.name} Transition", winner))

        cursor_week += weeks_available + 1
        anchored.append((winner, losers, cursor_week - 1))

    if cursor_week < total_weeks:
        segments.extend(general.fill(total_weeks - cursor_week))

    segments = _truncate(_apply_deload_cadence(segments, config.deload_frequency), total_weeks)

    for winner, losers, transition_week in anchored:
        for loser in losers:
            week_index = (loser.event_date - start).days // 7
            if loser.event_date > winner.event_date:
                week_index = max(week_index, transition_week + 1)
            if week_index >= total_weeks:
                log_utils.log_message(f"[periodization] No room for a {loser.name} tune-up before {end}", "WARN")
                continue
            segments = _carve_tune_up(segments, week_index, loser)

    blocks = _to_blocks(segments, start)
    log_utils.log_message(
        f"[periodization] Generated {len(blocks)} blocks over {total_weeks} weeks with {len(comps)} competitions"
    )
    return blocks
