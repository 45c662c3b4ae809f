"""
Analytics facade.

``compute_analytics`` is the single call the tool layer (or any other
caller) makes: it validates the raw records, fixes the reference time and
runs every analyzer over the same snapshot. It holds no state between calls.
"""

import logging
from datetime import datetime
from typing import Any, Iterable, List, Optional, Union

from boundary_insights.analytics.boundaries import analyze_boundaries
from boundary_insights.analytics.insights import generate_insights, select_window
from boundary_insights.analytics.scoring import (
    compatibility_breakdown,
    health_category,
    health_score,
)
from boundary_insights.analytics.time_patterns import analyze_time_patterns
from boundary_insights.analytics.triggers import analyze_triggers
from boundary_insights.analytics.warnings import clear_report, evaluate_warnings
from boundary_insights.intake import check_reference_time, coerce_optional, coerce_records
from boundary_insights.models import (
    AnalysisWindow,
    AnalyticsResult,
    BaselineProfile,
    BoundaryEvent,
    InteractionEvent,
    SituationalContext,
    TriggerObservation,
)

logger = logging.getLogger(__name__)


def reference_time(*collections: Iterable[Any]) -> Optional[datetime]:
    """Latest timestamp across the supplied records, or None when there are none."""
    stamps = [record.timestamp for records in collections for record in records]
    return max(stamps) if stamps else None


def compute_analytics(
    interactions: Iterable[Any],
    boundaries: Iterable[Any] = (),
    triggers: Iterable[Any] = (),
    baseline: Optional[Any] = None,
    context: Optional[Any] = None,
    dismissed: Iterable[str] = (),
    now: Optional[datetime] = None,
    window: Union[AnalysisWindow, str] = AnalysisWindow.MONTH,
    min_interactions: Optional[int] = None,
) -> AnalyticsResult:
    """
    Derive every score, insight, report and warning for one relationship.

    Args:
        interactions: InteractionEvent records or dicts
        boundaries: BoundaryEvent records or dicts
        triggers: TriggerObservation records or dicts
        baseline: Optional BaselineProfile (or dict) for compatibility scoring
        context: Optional SituationalContext (or dict) for proactive warnings
        dismissed: Alert ids the caller has dismissed
        now: Reference time; defaults to the latest supplied timestamp
        window: Recency window for health, insights and warnings
        min_interactions: Minimum windowed interactions before insights or
            warnings are reported

    Returns:
        AnalyticsResult; malformed records are counted in ``skipped_records``

    Raises:
        AnalyticsInputError: If a collection is not a list of records, or if
            ``now`` disagrees with the records on carrying a timezone
    """
    window = AnalysisWindow(window)

    interaction_intake = coerce_records(interactions, InteractionEvent, "interaction")
    boundary_intake = coerce_records(
        boundaries, BoundaryEvent, "boundary", aware=interaction_intake.aware
    )
    trigger_intake = coerce_records(
        triggers, TriggerObservation, "trigger", aware=boundary_intake.aware
    )
    check_reference_time(now, trigger_intake.aware)
    profile = coerce_optional(baseline, BaselineProfile, "baseline")
    situation = coerce_optional(context, SituationalContext, "context")

    events = interaction_intake.records
    boundary_events = boundary_intake.records
    observations = trigger_intake.records

    if now is None:
        now = reference_time(events, boundary_events, observations)

    relationship_id = events[0].relationship_id if events else ""

    if now is None:
        windowed: List[InteractionEvent] = []
        history = events
        boundary_history = boundary_events
        trigger_history = observations
    else:
        windowed = list(select_window(events, now, window).interactions)
        history = [e for e in events if e.timestamp <= now]
        boundary_history = [b for b in boundary_events if b.timestamp <= now]
        trigger_history = [t for t in observations if t.timestamp <= now]

    score = health_score(windowed)

    compatibility = None
    if profile is not None and windowed:
        compatibility = compatibility_breakdown(windowed[-1], profile)

    if now is None:
        insights = []
        warnings = clear_report()
    else:
        insights = generate_insights(windowed, now, window, min_interactions)
        warnings = evaluate_warnings(
            windowed,
            now,
            window,
            boundaries=boundary_history,
            context=situation,
            dismissed=dismissed,
            min_interactions=min_interactions,
        )

    result = AnalyticsResult(
        relationship_id=relationship_id,
        reference_time=now,
        window=window,
        interactions_analyzed=len(windowed),
        health_score=score,
        health_category=health_category(score),
        compatibility=compatibility,
        insights=insights,
        trigger_report=analyze_triggers(trigger_history),
        time_report=analyze_time_patterns(history),
        boundary_report=analyze_boundaries(boundary_history),
        warnings=warnings,
        skipped_records={
            "interactions": interaction_intake.skipped,
            "boundaries": boundary_intake.skipped,
            "triggers": trigger_intake.skipped,
        },
    )

    logger.info(
        f"Analyzed {len(windowed)} of {len(events)} interactions ({window.value} window): "
        f"health {score}, {len(insights)} insights, {len(warnings.alerts)} warnings"
    )
    return result
