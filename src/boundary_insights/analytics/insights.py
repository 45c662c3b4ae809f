"""Windowed insight generation and ranking."""

import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Union

from boundary_insights.analytics.detectors import InsightWindow, run_detectors
from boundary_insights.models import (
    WINDOW_DAYS,
    AnalysisWindow,
    InteractionEvent,
    PatternInsight,
    Severity,
)

logger = logging.getLogger(__name__)

MIN_INTERACTIONS = 3

SEVERITY_WEIGHT = {Severity.HIGH: 3, Severity.MEDIUM: 2, Severity.LOW: 1}


def window_cutoff(now: datetime, window: Union[AnalysisWindow, str]) -> datetime:
    return now - timedelta(days=WINDOW_DAYS[AnalysisWindow(window)])


def select_window(
    interactions: Iterable[InteractionEvent],
    now: datetime,
    window: Union[AnalysisWindow, str] = AnalysisWindow.MONTH,
) -> InsightWindow:
    """Interactions with ``cutoff <= timestamp <= now``."""
    cutoff = window_cutoff(now, window)
    selected = tuple(e for e in interactions if cutoff <= e.timestamp <= now)
    return InsightWindow(interactions=selected, now=now)


def rank_insights(insights: Iterable[PatternInsight]) -> List[PatternInsight]:
    """Severity weight first, then confidence, both descending."""
    return sorted(insights, key=lambda i: (-SEVERITY_WEIGHT[i.severity], -i.confidence))


def generate_insights(
    interactions: Iterable[InteractionEvent],
    now: datetime,
    window: Union[AnalysisWindow, str] = AnalysisWindow.MONTH,
    min_interactions: Optional[int] = None,
) -> List[PatternInsight]:
    """
    Run the detector battery over a recency window.

    Args:
        interactions: Interaction history (any order)
        now: Reference time the window ends at
        window: week, month or quarter
        min_interactions: Below this many windowed interactions nothing is reported

    Returns:
        Insights ranked by severity then confidence
    """
    selected = select_window(interactions, now, window)
    minimum = MIN_INTERACTIONS if min_interactions is None else min_interactions
    if len(selected.interactions) < minimum:
        logger.debug(
            f"Only {len(selected.interactions)} interactions in {AnalysisWindow(window).value} window, no insights"
        )
        return []
    return rank_insights(run_detectors(selected))
