"""Trigger and time/location pattern tools."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from .base import analyze_payload

logger = logging.getLogger(__name__)


async def trigger_patterns_tool(
    triggers: List[Any],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Per-trigger violation rates, high-risk triggers and improving triggers.

    Returns:
        Dict with the trigger report (top three most problematic first)
    """
    result = await analyze_payload(
        {"triggers": triggers, "now": now, "redact": False}, "trigger_error"
    )
    if "error" in result:
        return result
    return {"reference_time": result["reference_time"], **result["trigger_report"]}


async def time_patterns_tool(
    interactions: List[Any],
    boundaries: Optional[List[Any]] = None,
    now: Optional[datetime] = None,
    redact: bool = True,
) -> Dict[str, Any]:
    """
    When and where violations happen.

    Includes time of day, weekday, hour and location buckets, the weekly
    trend and boundary reactions.
    """
    result = await analyze_payload(
        {
            "interactions": interactions,
            "boundaries": boundaries or [],
            "now": now,
            "redact": redact,
        },
        "time_pattern_error",
    )
    if "error" in result:
        return result
    return {
        "relationship_id": result["relationship_id"],
        "reference_time": result["reference_time"],
        "time_report": result["time_report"],
        "boundary_report": result["boundary_report"],
    }
