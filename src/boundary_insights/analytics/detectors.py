"""
Behavioral pattern detectors.

Each detector is a pure function of an InsightWindow and returns at most one
PatternInsight. The battery is a closed set keyed by DetectorKind; detectors
never consult each other.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from boundary_insights.analytics.scoring import (
    average_energy_drop,
    energy_drain_fraction,
    is_energy_drain,
    round_half_up,
)
from boundary_insights.models import InsightType, InteractionEvent, PatternInsight, Severity

logger = logging.getLogger(__name__)

ESCALATION_SPAN = timedelta(days=7)
ESCALATION_MIN_RECENT = 2
COMMUNICATION_CATEGORY = "communication"
COMMUNICATION_MIN_FLAGS = 3
ENERGY_DRAIN_THRESHOLD = 0.6
CONTEXT_SHARE_THRESHOLD = 0.6
CONTEXT_CONFIDENCE_CAP = 90
CYCLE_MIN_COUNT = 2
CYCLE_CONFIDENCE_STEP = 20
CYCLE_CONFIDENCE_CAP = 80


class DetectorKind(str, Enum):
    ESCALATION = "escalation"
    COMMUNICATION = "communication-pattern"
    ENERGY_DRAIN = "energy-drain"
    POSITIVE_TREND = "positive-trend"
    CONTEXT_TRIGGER = "context-trigger"
    BEHAVIORAL_CYCLE = "behavioral-cycle"


class Context(str, Enum):
    """Coarse social setting of a red flag, in tie-break order."""

    PRIVATE = "private"
    PUBLIC = "public"
    FAMILY = "family"


CONTEXT_LABELS = {
    Context.PRIVATE: ("in private", "when you're alone"),
    Context.PUBLIC: ("in public", "in public settings"),
    Context.FAMILY: ("around family", "around family members"),
}


@dataclass(frozen=True)
class InsightWindow:
    """Interactions inside the analysis window, oldest first, and the reference time."""

    interactions: Tuple[InteractionEvent, ...]
    now: datetime
    red: Tuple[InteractionEvent, ...] = field(init=False)
    green: Tuple[InteractionEvent, ...] = field(init=False)

    def __post_init__(self):
        ordered = tuple(sorted(self.interactions, key=lambda e: e.timestamp))
        object.__setattr__(self, "interactions", ordered)
        object.__setattr__(self, "red", tuple(e for e in ordered if e.is_red))
        object.__setattr__(self, "green", tuple(e for e in ordered if not e.is_red))


@dataclass(frozen=True)
class ContextShare:
    context: Context
    count: int
    total: int

    @property
    def percentage(self) -> int:
        return round_half_up(self.count * 100 / self.total) if self.total else 0


def most_common_category(events: Tuple[InteractionEvent, ...]) -> str:
    if not events:
        return "General"
    return Counter(e.category for e in events).most_common(1)[0][0]


def classify_context(location: str, witnesses: str = "") -> List[Context]:
    """Every coarse context an interaction's setting falls into."""
    location = (location or "").lower()
    witnesses = (witnesses or "").lower()
    contexts = []
    if "private" in location or "home" in location or "alone" in witnesses:
        contexts.append(Context.PRIVATE)
    if "public" in location or "others" in witnesses or "friends" in witnesses:
        contexts.append(Context.PUBLIC)
    if "family" in location or "family" in witnesses:
        contexts.append(Context.FAMILY)
    return contexts


def dominant_context(red: Tuple[InteractionEvent, ...]) -> Optional[ContextShare]:
    """The context holding at least 60% of red flags, if any."""
    if not red:
        return None
    counts = Counter()
    for event in red:
        counts.update(classify_context(event.location, event.witnesses))
    if not counts:
        return None
    order = list(Context)
    context, count = sorted(counts.items(), key=lambda kv: (-kv[1], order.index(kv[0])))[0]
    if count < len(red) * CONTEXT_SHARE_THRESHOLD:
        return None
    return ContextShare(context=context, count=count, total=len(red))


def escalation_counts(window: InsightWindow) -> Tuple[int, int]:
    """Red flags in the last seven days and in the seven days before that."""
    recent_start = window.now - ESCALATION_SPAN
    prior_start = recent_start - ESCALATION_SPAN
    recent = sum(1 for e in window.red if recent_start < e.timestamp <= window.now)
    prior = sum(1 for e in window.red if prior_start <= e.timestamp <= recent_start)
    return recent, prior


def count_cycles(window: InsightWindow) -> int:
    """Non-overlapping red, green, red runs in chronological order."""
    flags = [e.is_red for e in window.interactions]
    cycles = 0
    i = 0
    while i + 2 < len(flags):
        if flags[i] and not flags[i + 1] and flags[i + 2]:
            cycles += 1
            i += 3
        else:
            i += 1
    return cycles


def detect_escalation(window: InsightWindow) -> Optional[PatternInsight]:
    recent, prior = escalation_counts(window)
    if not (recent > prior and recent > ESCALATION_MIN_RECENT):
        return None

    recent_red = tuple(
        e for e in window.red if e.timestamp > window.now - ESCALATION_SPAN
    )
    increase = round_half_up((recent - prior) / max(prior, 1) * 100)
    return PatternInsight(
        id=DetectorKind.ESCALATION.value,
        type=InsightType.WARNING,
        severity=Severity.HIGH,
        confidence=85,
        title="Escalating Boundary Violations",
        description=f"Red flag incidents have increased {increase}% in the past week",
        recommendations=[
            "Consider having a direct conversation about boundaries",
            "Document these incidents for future reference",
            "Evaluate if this relationship is becoming unsafe",
            "Reach out to trusted friends or therapist for support",
        ],
        supporting_data=[
            f"{recent} violations this week vs {prior} last week",
            f"Most common: {most_common_category(recent_red)}",
        ],
    )


def detect_communication_pattern(window: InsightWindow) -> Optional[PatternInsight]:
    flags = [e for e in window.red if e.category.strip().lower() == COMMUNICATION_CATEGORY]
    if len(flags) < COMMUNICATION_MIN_FLAGS:
        return None
    return PatternInsight(
        id=DetectorKind.COMMUNICATION.value,
        type=InsightType.TREND,
        severity=Severity.MEDIUM,
        confidence=90,
        title="Persistent Communication Problems",
        description="This person consistently struggles with respectful communication",
        recommendations=[
            "Set clear communication boundaries before important conversations",
            'Use "I" statements to express your needs',
            "Consider ending conversations when they become disrespectful",
            'Practice phrases: "I need you to listen" or "Let me finish my thought"',
        ],
        supporting_data=[
            f"{len(flags)} communication violations recorded",
            "Pattern: Interrupting, dismissing, or talking over you",
        ],
    )


def detect_energy_drain(window: InsightWindow) -> Optional[PatternInsight]:
    fraction = energy_drain_fraction(window.interactions)
    if fraction <= ENERGY_DRAIN_THRESHOLD:
        return None
    drains = [e for e in window.interactions if is_energy_drain(e)]
    return PatternInsight(
        id=DetectorKind.ENERGY_DRAIN.value,
        type=InsightType.WARNING,
        severity=Severity.HIGH,
        confidence=80,
        title="Consistently Draining Your Energy",
        description=f"{round_half_up(fraction * 100)}% of interactions leave you feeling drained",
        recommendations=[
            "Limit time spent with this person",
            "Plan recovery time after interactions",
            "Notice what topics or situations drain you most",
            "Consider if this relationship is worth the energy cost",
        ],
        supporting_data=[
            f"Average energy drop: {average_energy_drop(drains)} points",
            f"{len(drains)} of {len(window.interactions)} interactions drained you",
        ],
    )


def detect_positive_trend(window: InsightWindow) -> Optional[PatternInsight]:
    if len(window.green) <= len(window.red):
        return None
    return PatternInsight(
        id=DetectorKind.POSITIVE_TREND.value,
        type=InsightType.IMPROVEMENT,
        severity=Severity.LOW,
        confidence=75,
        title="Relationship Showing Positive Signs",
        description="More positive interactions than concerning ones recently",
        recommendations=[
            "Acknowledge and appreciate the positive changes",
            "Continue setting clear boundaries",
            "Notice what leads to their best behavior",
            "Stay consistent with your standards",
        ],
        supporting_data=[
            f"{len(window.green)} positive vs {len(window.red)} concerning interactions",
            f"Strong areas: {most_common_category(window.green)}",
        ],
    )


def detect_context_trigger(window: InsightWindow) -> Optional[PatternInsight]:
    share = dominant_context(window.red)
    if share is None:
        return None
    label, phrase = CONTEXT_LABELS[share.context]
    return PatternInsight(
        id=DetectorKind.CONTEXT_TRIGGER.value,
        type=InsightType.TRIGGER,
        severity=Severity.MEDIUM,
        confidence=min(share.percentage, CONTEXT_CONFIDENCE_CAP),
        title=f"Violations Often Happen {label.title()}",
        description=f"{share.percentage}% of violations occur {phrase}",
        recommendations=[
            f"Be extra vigilant {label}",
            "Have an exit strategy ready for these situations",
            "Consider avoiding this context when possible",
            "Prepare boundary-setting phrases in advance",
        ],
        supporting_data=[
            f"{share.count} out of {share.total} violations in this context",
            "This suggests their behavior changes based on audience",
        ],
    )


def detect_behavioral_cycle(window: InsightWindow) -> Optional[PatternInsight]:
    cycles = count_cycles(window)
    if cycles < CYCLE_MIN_COUNT:
        return None
    return PatternInsight(
        id=DetectorKind.BEHAVIORAL_CYCLE.value,
        type=InsightType.CYCLE,
        severity=Severity.MEDIUM,
        confidence=min(CYCLE_CONFIDENCE_CAP, cycles * CYCLE_CONFIDENCE_STEP),
        title="Repeating Behavioral Cycle Detected",
        description="Pattern of violations followed by good behavior, then violations again",
        recommendations=[
            "Document the cycle pattern to stay aware",
            "Interrupt the cycle by changing your response",
            "Don't expect permanent change without consistent effort from them",
            'Protect yourself during the "difficult" phases',
        ],
        supporting_data=[
            f"{cycles} cycles detected in recent interactions",
            "This pattern may indicate manipulation or lack of lasting change",
        ],
    )


DETECTORS: Dict[DetectorKind, Callable[[InsightWindow], Optional[PatternInsight]]] = {
    DetectorKind.ESCALATION: detect_escalation,
    DetectorKind.COMMUNICATION: detect_communication_pattern,
    DetectorKind.ENERGY_DRAIN: detect_energy_drain,
    DetectorKind.POSITIVE_TREND: detect_positive_trend,
    DetectorKind.CONTEXT_TRIGGER: detect_context_trigger,
    DetectorKind.BEHAVIORAL_CYCLE: detect_behavioral_cycle,
}


def run_detectors(window: InsightWindow) -> List[PatternInsight]:
    """Run the whole battery; each detector sees the same window."""
    found = []
    for kind, detector in DETECTORS.items():
        insight = detector(window)
        if insight is not None:
            logger.debug(f"Detector {kind.value} fired with confidence {insight.confidence}")
            found.append(insight)
    return found
