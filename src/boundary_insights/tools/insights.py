"""Pattern insight and proactive warning tools."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from .base import analyze_payload

logger = logging.getLogger(__name__)


async def pattern_insights_tool(
    interactions: List[Any],
    now: Optional[datetime] = None,
    window: Optional[str] = None,
    redact: bool = True,
) -> Dict[str, Any]:
    """
    Rank the behavioral patterns detected in the recent window.

    Detects escalation, communication problems, energy drain, positive
    trends, context triggers and repeating cycles. Fewer than three
    interactions in the window yields no insights.

    Returns:
        Dict with health score and insights ordered by severity then confidence
    """
    result = await analyze_payload(
        {"interactions": interactions, "now": now, "window": window, "redact": redact},
        "insight_error",
    )
    if "error" in result:
        return result

    return {
        "relationship_id": result["relationship_id"],
        "reference_time": result["reference_time"],
        "window": result["window"],
        "interactions_analyzed": result["interactions_analyzed"],
        "health_score": result["health_score"],
        "health_category": result["health_category"],
        "insights": result["insights"],
    }


async def proactive_warnings_tool(
    interactions: List[Any],
    boundaries: Optional[List[Any]] = None,
    context: Optional[Dict[str, Any]] = None,
    dismissed: Optional[List[str]] = None,
    now: Optional[datetime] = None,
    window: Optional[str] = None,
    redact: bool = True,
) -> Dict[str, Any]:
    """
    Warnings ahead of a planned interaction.

    Dismissed alert ids are excluded until the evidence behind them changes.
    """
    result = await analyze_payload(
        {
            "interactions": interactions,
            "boundaries": boundaries or [],
            "context": context,
            "dismissed": dismissed or [],
            "now": now,
            "window": window,
            "redact": redact,
        },
        "warning_error",
    )
    if "error" in result:
        return result

    return {
        "relationship_id": result["relationship_id"],
        "reference_time": result["reference_time"],
        **result["warnings"],
    }
