"""
Proactive warnings ahead of an interaction.

Warning evaluators are a closed set keyed by WarningKind. They reuse the
insight detectors' rules and add the situational context the user is about
to walk into. Dismissal is caller-owned: the caller passes the ids it has
dismissed and those alerts are left out. An alert id embeds a fingerprint of
the evidence behind it, so a dismissed alert comes back once the pattern
changes.
"""

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from boundary_insights.analytics.detectors import (
    COMMUNICATION_CATEGORY,
    COMMUNICATION_MIN_FLAGS,
    ENERGY_DRAIN_THRESHOLD,
    InsightWindow,
    classify_context,
    dominant_context,
    escalation_counts,
)
from boundary_insights.analytics.insights import MIN_INTERACTIONS, select_window, window_cutoff
from boundary_insights.analytics.scoring import energy_drain_fraction, is_energy_drain
from boundary_insights.models import (
    AlertSeverity,
    AlertType,
    AnalysisWindow,
    BoundaryEvent,
    InteractionEvent,
    Reaction,
    SituationalContext,
    WarningAlert,
    WarningReport,
)

logger = logging.getLogger(__name__)

CONTEXT_MIN_MATCHES = 2
RECOVERY_ENERGY_FLOOR = 4
RECOVERY_MIN_COUNT = 2
BOUNDARY_MIN_EVIDENCE = 2
BOUNDARY_CATEGORY = "boundary violation"
PUSHBACK_REACTIONS = {
    Reaction.PUSHED_BACK,
    Reaction.ANGRY,
    Reaction.GUILT_TRIPPED,
    Reaction.SILENT_TREATMENT,
}

STATUS_ALERTS = "alerts"
STATUS_CLEAR = "no_immediate_concerns"
CLEAR_MESSAGE = (
    "No Immediate Concerns. Recent interactions show no concerning patterns. "
    "Stay aware and trust your instincts."
)

SEVERITY_RANK = {
    AlertSeverity.CRITICAL: 4,
    AlertSeverity.HIGH: 3,
    AlertSeverity.MEDIUM: 2,
    AlertSeverity.LOW: 1,
}

EXIT_STRATEGIES = [
    "Say you have an urgent call to take",
    "Mention you need to leave for another commitment",
    'Use the "bathroom break" to reassess the situation',
]


class WarningKind(str, Enum):
    ESCALATION = "escalation"
    CONTEXT = "context"
    COMMUNICATION = "communication-pattern"
    ENERGY_DRAIN = "energy-drain"
    RECOVERY = "recovery"
    BOUNDARY_TESTING = "boundary-testing"


@dataclass(frozen=True)
class WarningInputs:
    """Everything an evaluator may look at."""

    window: InsightWindow
    boundaries: Tuple[BoundaryEvent, ...] = ()
    context: Optional[SituationalContext] = None


def fingerprint(kind: WarningKind, *evidence) -> str:
    digest = hashlib.blake2b(digest_size=4)
    digest.update(":".join([kind.value] + [str(e) for e in evidence]).encode())
    return f"{kind.value}:{digest.hexdigest()}"


def evaluate_escalation(inputs: WarningInputs) -> Optional[WarningAlert]:
    recent, prior = escalation_counts(inputs.window)
    if not (recent > prior and recent > 2):
        return None
    return WarningAlert(
        id=fingerprint(WarningKind.ESCALATION, recent, prior),
        type=AlertType.ESCALATION,
        severity=AlertSeverity.HIGH,
        confidence=90,
        title="Escalating Pattern Detected",
        description=(
            f"{recent} concerning incidents in the past week. "
            "This relationship may be becoming unsafe."
        ),
        triggers=["Multiple violations", "Increasing frequency", "Pattern escalation"],
        recommendations=[
            "Consider limiting contact with this person",
            "Document all interactions for safety",
            "Reach out to trusted friends or professionals",
            "Have an exit strategy ready for future interactions",
        ],
        suggested_phrases=[
            '"I need some space to think about this."',
            '"We can continue this conversation later."',
            "\"I'm not comfortable with this topic right now.\"",
        ],
        exit_strategies=list(EXIT_STRATEGIES),
        timeframe="Immediate attention needed",
    )


def _matches_context(event: InteractionEvent, context: SituationalContext) -> bool:
    location = (context.location or "").strip().lower()
    topic = (context.topic or "").strip().lower()
    if location and location in event.location.lower():
        return True
    if topic and topic in (event.category.strip().lower(), (event.topic or "").strip().lower()):
        return True
    return False


def evaluate_context(inputs: WarningInputs) -> Optional[WarningAlert]:
    context = inputs.context
    if context is None or not (context.location or context.topic):
        return None

    matches = sum(1 for e in inputs.window.red if _matches_context(e, context))
    if matches >= CONTEXT_MIN_MATCHES:
        confidence = 75
        description = f"Similar contexts have led to boundary violations {matches} times before."
    else:
        share = dominant_context(inputs.window.red)
        if share is None or share.context not in classify_context(context.location or ""):
            return None
        confidence = min(share.percentage, 90)
        description = (
            f"{share.percentage}% of past violations happened in a {share.context.value} "
            "setting like the one you are planning."
        )
        matches = share.count

    triggers = []
    if context.location:
        triggers.append(f"Location: {context.location}")
    if context.topic:
        triggers.append(f"Topic: {context.topic}")

    return WarningAlert(
        id=fingerprint(WarningKind.CONTEXT, context.location, context.topic, matches),
        type=AlertType.CONTEXT,
        severity=AlertSeverity.MEDIUM,
        confidence=confidence,
        title="High-Risk Situation",
        description=description,
        triggers=triggers,
        recommendations=[
            "Set clear expectations before the conversation starts",
            "Keep the interaction brief and focused",
            "Have your boundaries ready to state clearly",
            "Trust your instincts if something feels off",
        ],
        suggested_phrases=[
            "\"Let's keep this conversation focused.\"",
            "\"I'd prefer to discuss this briefly.\"",
            '"I need us to stay on topic."',
        ],
        exit_strategies=list(EXIT_STRATEGIES),
        timeframe="Before next interaction",
    )


def evaluate_communication(inputs: WarningInputs) -> Optional[WarningAlert]:
    flags = sum(
        1 for e in inputs.window.red if e.category.strip().lower() == COMMUNICATION_CATEGORY
    )
    if flags < COMMUNICATION_MIN_FLAGS:
        return None
    return WarningAlert(
        id=fingerprint(WarningKind.COMMUNICATION, flags),
        type=AlertType.PATTERN,
        severity=AlertSeverity.MEDIUM,
        confidence=85,
        title="Communication Red Flags",
        description="This person consistently interrupts, dismisses, or talks over you.",
        triggers=["Interrupting", "Not listening", "Dismissive behavior"],
        recommendations=[
            "Use assertive language to reclaim your speaking time",
            "Set communication ground rules upfront",
            "Practice phrases to stop interruptions",
            "Consider whether this person respects your voice",
        ],
        suggested_phrases=[
            "\"Excuse me, I wasn't finished.\"",
            '"Please let me complete my thought."',
            "\"I need you to listen to what I'm saying.\"",
            '"Hold on, I was still talking."',
        ],
        timeframe="Next conversation",
    )


def evaluate_energy_drain(inputs: WarningInputs) -> Optional[WarningAlert]:
    events = inputs.window.interactions
    if energy_drain_fraction(events) <= ENERGY_DRAIN_THRESHOLD:
        return None
    drains = sum(1 for e in events if is_energy_drain(e))
    return WarningAlert(
        id=fingerprint(WarningKind.ENERGY_DRAIN, drains, len(events)),
        type=AlertType.PATTERN,
        severity=AlertSeverity.HIGH,
        confidence=80,
        title="Severe Energy Drain Pattern",
        description="Most interactions with this person leave you significantly drained.",
        triggers=["Consistent energy loss", "Emotional exhaustion", "Physical symptoms"],
        recommendations=[
            "Limit interaction time to protect your energy",
            "Schedule recovery time after seeing them",
            "Consider if this relationship is worth the energy cost",
            "Notice what specific behaviors drain you most",
        ],
        timeframe="Ongoing pattern management",
    )


def evaluate_recovery(inputs: WarningInputs) -> Optional[WarningAlert]:
    slow = sum(1 for e in inputs.window.interactions if e.energy_after < RECOVERY_ENERGY_FLOOR)
    if slow < RECOVERY_MIN_COUNT:
        return None
    return WarningAlert(
        id=fingerprint(WarningKind.RECOVERY, slow),
        type=AlertType.RECOVERY,
        severity=AlertSeverity.MEDIUM,
        confidence=70,
        title="Slow Recovery Pattern",
        description="You're taking longer to feel normal after interactions with this person.",
        triggers=["Extended recovery time", "Lingering emotional impact", "Disrupted well-being"],
        recommendations=[
            "Build in longer buffer time after seeing them",
            "Practice self-care rituals that help you recover",
            "Notice what helps you bounce back faster",
            "Consider reducing frequency of contact",
        ],
        timeframe="After each interaction",
    )


def evaluate_boundary_testing(inputs: WarningInputs) -> Optional[WarningAlert]:
    flagged = sum(
        1 for e in inputs.window.red if e.category.strip().lower() == BOUNDARY_CATEGORY
    )
    tested = sum(1 for e in inputs.window.interactions if e.boundary_tested)
    pushback = sum(1 for b in inputs.boundaries if b.reaction in PUSHBACK_REACTIONS)
    if flagged + tested + pushback < BOUNDARY_MIN_EVIDENCE:
        return None
    return WarningAlert(
        id=fingerprint(WarningKind.BOUNDARY_TESTING, flagged, tested, pushback),
        type=AlertType.BOUNDARY,
        severity=AlertSeverity.HIGH,
        confidence=95,
        title="Boundary Testing Detected",
        description="This person repeatedly tests or ignores your stated boundaries.",
        triggers=['Ignoring "no"', "Pushing after boundaries set", "Minimizing your limits"],
        recommendations=[
            "Be prepared to enforce consequences immediately",
            "State boundaries clearly and don't explain or justify",
            "Remove yourself if boundaries continue to be violated",
            "Document boundary violations for future reference",
        ],
        suggested_phrases=[
            '"I already gave you my answer."',
            "\"I won't be discussing this further.\"",
            "\"My boundary hasn't changed.\"",
            '"This conversation is over."',
        ],
        exit_strategies=[
            "End the conversation immediately",
            "Leave the location if necessary",
            "Block communication channels temporarily",
            "Involve others if you feel unsafe",
        ],
        timeframe="Immediate boundary enforcement needed",
    )


EVALUATORS: Dict[WarningKind, Callable[[WarningInputs], Optional[WarningAlert]]] = {
    WarningKind.ESCALATION: evaluate_escalation,
    WarningKind.CONTEXT: evaluate_context,
    WarningKind.COMMUNICATION: evaluate_communication,
    WarningKind.ENERGY_DRAIN: evaluate_energy_drain,
    WarningKind.RECOVERY: evaluate_recovery,
    WarningKind.BOUNDARY_TESTING: evaluate_boundary_testing,
}


def collect_alerts(inputs: WarningInputs) -> List[WarningAlert]:
    alerts = [a for a in (evaluate(inputs) for evaluate in EVALUATORS.values()) if a]
    return sorted(alerts, key=lambda a: (-SEVERITY_RANK[a.severity], -a.confidence))


def clear_report(dismissed_count: int = 0) -> WarningReport:
    return WarningReport(status=STATUS_CLEAR, message=CLEAR_MESSAGE, dismissed_count=dismissed_count)


def evaluate_warnings(
    interactions: Iterable[InteractionEvent],
    now: datetime,
    window: Union[AnalysisWindow, str] = AnalysisWindow.MONTH,
    boundaries: Sequence[BoundaryEvent] = (),
    context: Optional[SituationalContext] = None,
    dismissed: Iterable[str] = (),
    min_interactions: Optional[int] = None,
) -> WarningReport:
    """
    Evaluate every warning against the recency window and planned context.

    Args:
        interactions: Interaction history (any order)
        now: Reference time the window ends at
        window: week, month or quarter
        boundaries: Boundary events; only those inside the window count
        context: Planned location/topic, if known
        dismissed: Alert ids the caller has dismissed
        min_interactions: Below this many windowed interactions nothing is raised

    Returns:
        WarningReport whose status is "no_immediate_concerns" when nothing is left
    """
    selected = select_window(interactions, now, window)
    minimum = MIN_INTERACTIONS if min_interactions is None else min_interactions
    alerts: List[WarningAlert] = []

    if len(selected.interactions) >= minimum:
        cutoff = window_cutoff(now, window)
        inputs = WarningInputs(
            window=selected,
            boundaries=tuple(b for b in boundaries if cutoff <= b.timestamp <= now),
            context=context,
        )
        alerts = collect_alerts(inputs)

    excluded = set(dismissed)
    visible = [a for a in alerts if a.id not in excluded]
    dismissed_count = len(alerts) - len(visible)

    if not visible:
        return clear_report(dismissed_count)

    logger.debug(f"{len(visible)} warnings active, {dismissed_count} dismissed")
    return WarningReport(
        status=STATUS_ALERTS,
        message=f"{len(visible)} active warning{'s' if len(visible) != 1 else ''}",
        alerts=visible,
        dismissed_count=dismissed_count,
    )
