"""
Analytics tools: the full analysis for one relationship and a side-by-side
comparison across several.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import numpy as np
from pydantic import ValidationError

from ..config import get_config
from ..models import RelationshipBatchInput
from ..privacy import hash_relationship_id
from .base import analyze_payload, create_error_response

logger = logging.getLogger(__name__)

COMPARISON_METRICS = [
    "health_score",
    "interactions_analyzed",
    "insight_count",
    "warning_count",
    "average_violation_rate",
]


async def compute_analytics_tool(
    interactions: List[Any],
    boundaries: Optional[List[Any]] = None,
    triggers: Optional[List[Any]] = None,
    baseline: Optional[Dict[str, Any]] = None,
    context: Optional[Dict[str, Any]] = None,
    dismissed: Optional[List[str]] = None,
    now: Optional[datetime] = None,
    window: Optional[str] = None,
    redact: bool = True,
) -> Dict[str, Any]:
    """
    Compute every score, report, insight and warning for one relationship.

    Args:
        interactions: Logged interactions (green/red flags with energy and context)
        boundaries: Boundary-setting events with the counterpart's reaction
        triggers: Trigger observations
        baseline: Preferred communication styles, needed validation, known triggers
        context: Planned location/topic for proactive warnings
        dismissed: Alert ids the user has dismissed
        now: Reference time (defaults to the latest supplied timestamp)
        window: "week", "month" or "quarter" (defaults to configuration)
        redact: Whether to hash identifiers and scrub free text

    Returns:
        Dict with the complete analytics result
    """
    return await analyze_payload(
        {
            "interactions": interactions,
            "boundaries": boundaries or [],
            "triggers": triggers or [],
            "baseline": baseline,
            "context": context,
            "dismissed": dismissed or [],
            "now": now,
            "window": window,
            "redact": redact,
        },
        "analysis_error",
    )


async def compare_relationships_tool(
    relationships: Dict[str, Dict[str, Any]],
    window: Optional[str] = None,
    redact: bool = True,
) -> Dict[str, Any]:
    """
    Compare several relationships on health, insights, warnings and trigger risk.

    Each relationship is analyzed independently in a worker thread; at most
    ``performance.max_concurrent_analyses`` run at the same time.

    Args:
        relationships: Relationship id -> payload shaped like compute_analytics_tool's
        window: Analysis window applied to every relationship
        redact: Whether to hash relationship ids in the output

    Returns:
        Dict containing per-relationship summaries, a comparison matrix and a ranking
    """
    try:
        batch = RelationshipBatchInput.model_validate(
            {
                "relationships": relationships,
                "window": window or get_config().analysis.default_window,
                "redact": redact,
            }
        )
    except ValidationError as e:
        logger.error(f"Invalid comparison input: {e}")
        return create_error_response(e, "invalid_input")

    try:
        config = get_config()
        if not batch.relationships:
            return {"error": "No relationships provided for comparison", "error_type": "invalid_input"}

        limit = config.performance.max_relationships_per_call
        if len(batch.relationships) > limit:
            return {
                "error": f"Maximum {limit} relationships allowed for comparison",
                "error_type": "invalid_input",
            }

        semaphore = asyncio.Semaphore(max(1, config.performance.max_concurrent_analyses))

        async def analyze_one(payload: Dict[str, Any]) -> Dict[str, Any]:
            async with semaphore:
                return await analyze_payload(
                    {**payload, "window": batch.window.value, "redact": False},
                    "comparison_error",
                )

        names = list(batch.relationships)
        results = await asyncio.gather(
            *(analyze_one(batch.relationships[name]) for name in names),
            return_exceptions=True,
        )

        summaries = {}
        errored = []
        for name, result in zip(names, results):
            if isinstance(result, Exception) or "error" in result:
                errored.append(name)
            else:
                summaries[name] = _summarize(result)

        if not summaries:
            return {"error": "No valid data available for comparison", "error_type": "comparison_error"}

        matrix = _comparison_matrix(summaries)
        ranking = sorted(summaries, key=lambda n: (-summaries[n]["health_score"], n))

        def label(name: str) -> str:
            return hash_relationship_id(name) if config.should_redact(batch.redact) else name

        result = {
            "window": batch.window.value,
            "relationships_analyzed": len(summaries),
            "relationships_errored": len(errored),
            "relationships": {label(n): s for n, s in summaries.items()},
            "comparative_matrix": matrix,
            "ranking": [label(n) for n in ranking],
            "healthiest_relationship": label(ranking[0]),
            "most_concerning_relationship": label(ranking[-1]),
        }
        if errored:
            result["relationships_with_errors"] = [label(n) for n in errored]

        logger.info(f"Compared {len(summaries)} relationships ({len(errored)} errored)")
        return result

    except Exception as e:
        logger.error(f"Error in relationship comparison: {e}")
        return create_error_response(e, "comparison_error")


def _summarize(result: Dict[str, Any]) -> Dict[str, Any]:
    """Headline numbers for one relationship's analytics."""
    return {
        "health_score": result["health_score"],
        "health_category": result["health_category"],
        "interactions_analyzed": result["interactions_analyzed"],
        "insight_count": len(result["insights"]),
        "warning_count": len(result["warnings"]["alerts"]),
        "average_violation_rate": result["trigger_report"]["average_violation_rate"],
        "top_insight": result["insights"][0]["title"] if result["insights"] else None,
        "riskiest_time": result["time_report"]["riskiest_time"],
    }


def _comparison_matrix(summaries: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Spread of each metric across the compared relationships."""
    matrix = {}
    for metric in COMPARISON_METRICS:
        values = np.array([s[metric] for s in summaries.values()], dtype=float)
        matrix[metric] = {
            "mean": round(float(np.mean(values)), 2),
            "std": round(float(np.std(values)), 2),
            "min": float(np.min(values)),
            "max": float(np.max(values)),
            "range": float(np.max(values) - np.min(values)),
        }
    return matrix
