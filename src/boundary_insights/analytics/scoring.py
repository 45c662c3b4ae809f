"""
Relationship health and interaction compatibility scoring.

Health score (0-100, relationship level):
    base = green_ratio * 100 - red_ratio * 50
    minus 15 per high-severity red flag
    minus 30 * (energy drains / total)
    clamped to [0, 100]; 50 when there are no interactions.

Compatibility score (0-100, single interaction against a baseline):
    0.4 * communication alignment + 0.3 * validation match + 0.3 * trigger impact
Any missing input for a sub-score makes that sub-score a neutral 50.
"""

import logging
import math
from typing import Iterable, List, Optional, Sequence

from boundary_insights.models import (
    BaselineProfile,
    CompatibilityBreakdown,
    InteractionEvent,
    Severity,
)

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 50

GREEN_WEIGHT = 100
RED_WEIGHT = 50
HIGH_SEVERITY_PENALTY = 15
ENERGY_DRAIN_PENALTY = 30
ENERGY_DRAIN_DROP = 2

ALIGNMENT_TOP_WEIGHT = 10
ALIGNMENT_RANK_STEP = 2
TRIGGER_PENALTY = 25

# In tenths: 0.4 alignment, 0.3 validation, 0.3 trigger impact
COMPATIBILITY_WEIGHTS = {"alignment": 4, "validation": 3, "trigger_impact": 3}

HEALTH_CATEGORIES = [
    (80, "Thriving"),
    (60, "Stable"),
    (40, "Concerning"),
    (0, "Toxic"),
]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def is_energy_drain(event: InteractionEvent) -> bool:
    """An interaction that cost at least two points of energy."""
    return event.energy_after <= event.energy_before - ENERGY_DRAIN_DROP


def energy_drain_fraction(events: Sequence[InteractionEvent]) -> float:
    if not events:
        return 0.0
    return sum(1 for e in events if is_energy_drain(e)) / len(events)


def average_energy_drop(events: Sequence[InteractionEvent]) -> float:
    if not events:
        return 0.0
    return round(sum(e.energy_before - e.energy_after for e in events) / len(events), 1)


def health_score(events: Iterable[InteractionEvent]) -> int:
    """
    Compute the relationship health score for a set of interactions.

    Args:
        events: Interactions to score (order does not matter)

    Returns:
        Integer score in [0, 100]; 50 when there is nothing to score
    """
    events = list(events)
    total = len(events)
    if total == 0:
        return NEUTRAL_SCORE

    red = [e for e in events if e.is_red]
    green_ratio = (total - len(red)) / total
    red_ratio = len(red) / total

    score = green_ratio * GREEN_WEIGHT - red_ratio * RED_WEIGHT
    score -= HIGH_SEVERITY_PENALTY * sum(1 for e in red if e.severity == Severity.HIGH)
    score -= ENERGY_DRAIN_PENALTY * energy_drain_fraction(events)

    return round_half_up(clamp(score))


def event_health(event: InteractionEvent) -> int:
    """Health of a single interaction under the same formula."""
    return health_score([event])


def health_category(score: int) -> str:
    for threshold, label in HEALTH_CATEGORIES:
        if score >= threshold:
            return label
    return HEALTH_CATEGORIES[-1][1]


def _normalize(values: Iterable[str]) -> List[str]:
    return [v.strip().lower() for v in values if v and v.strip()]


def communication_alignment(
    observed_style: Optional[str], preferred_styles: Optional[Sequence[str]]
) -> float:
    """Score how highly the observed style ranks in the user's preferences."""
    ranking = _normalize(preferred_styles or [])
    if not ranking or not observed_style or not observed_style.strip():
        return float(NEUTRAL_SCORE)

    style = observed_style.strip().lower()
    if style not in ranking:
        return 0.0

    weight = max(0, ALIGNMENT_TOP_WEIGHT - ALIGNMENT_RANK_STEP * ranking.index(style))
    return float(weight * 100 / ALIGNMENT_TOP_WEIGHT)


def validation_match(
    received: Optional[Sequence[str]], desired: Optional[Sequence[str]]
) -> float:
    """Fraction of the needed validation types that were actually received."""
    needed = set(_normalize(desired or []))
    if not needed or received is None:
        return float(NEUTRAL_SCORE)
    got = set(_normalize(received))
    return len(needed & got) / len(needed) * 100


def trigger_impact(
    encountered: Optional[Sequence[str]], known_triggers: Optional[Sequence[str]]
) -> float:
    """100 minus 25 points per known trigger that came up, floored at 0."""
    known = set(_normalize(known_triggers or []))
    if not known or encountered is None:
        return float(NEUTRAL_SCORE)
    hits = len(known & set(_normalize(encountered)))
    return float(max(0, 100 - TRIGGER_PENALTY * hits))


def compatibility_breakdown(
    event: InteractionEvent, baseline: Optional[BaselineProfile]
) -> CompatibilityBreakdown:
    """
    Score a single interaction against the user's baseline profile.

    A missing baseline degrades every sub-score to neutral rather than failing.
    """
    baseline = baseline or BaselineProfile()

    alignment = communication_alignment(event.communication_style, baseline.communication_styles)
    validation = validation_match(event.validation_received, baseline.validation_types)
    impact = trigger_impact(event.triggers_encountered, baseline.known_triggers)

    overall = (
        alignment * COMPATIBILITY_WEIGHTS["alignment"]
        + validation * COMPATIBILITY_WEIGHTS["validation"]
        + impact * COMPATIBILITY_WEIGHTS["trigger_impact"]
    ) / 10

    return CompatibilityBreakdown(
        communication_alignment=round(alignment, 1),
        validation_match=round(validation, 1),
        trigger_impact=round(impact, 1),
        overall=round_half_up(clamp(overall)),
    )


def compatibility_score(event: InteractionEvent, baseline: Optional[BaselineProfile]) -> int:
    return compatibility_breakdown(event, baseline).overall
