"""
Base functionality for MCP tools.

This module provides the shared plumbing every tool goes through: parsing
the call payload, running the synchronous engine off the event loop and
shaping errors.
"""

import asyncio
import logging
from typing import Any, Dict

from pydantic import ValidationError

from ..analytics import compute_analytics
from ..config import get_config
from ..intake import AnalyticsInputError
from ..models import AnalyticsInput, AnalyticsResult
from ..privacy import sanitize_result

logger = logging.getLogger(__name__)


def create_error_response(error: Exception, error_type: str = "unknown_error") -> Dict[str, Any]:
    """
    Create a standardized error response.

    Args:
        error: The exception that occurred
        error_type: Type of error for categorization

    Returns:
        Dict containing error information
    """
    return {"error": str(error), "error_type": error_type}


def build_input(payload: Dict[str, Any]) -> AnalyticsInput:
    """Validate a tool payload, filling the window from configuration when absent."""
    if not payload.get("window"):
        payload = {**payload, "window": get_config().analysis.default_window}
    return AnalyticsInput.model_validate(payload)


async def run_analysis(params: AnalyticsInput) -> AnalyticsResult:
    """Run the engine in a worker thread."""
    return await asyncio.to_thread(
        compute_analytics,
        params.interactions,
        boundaries=params.boundaries,
        triggers=params.triggers,
        baseline=params.baseline,
        context=params.context,
        dismissed=params.dismissed,
        now=params.now,
        window=params.window,
        min_interactions=get_config().analysis.min_interactions,
    )


async def analyze_payload(payload: Dict[str, Any], error_type: str) -> Dict[str, Any]:
    """
    Validate, analyze and serialize one call.

    Args:
        payload: AnalyticsInput-shaped dictionary
        error_type: Error category reported for unexpected failures

    Returns:
        The sanitized, JSON-ready analytics result, or an error dict
    """
    try:
        params = build_input(payload)
        result = await run_analysis(params)
        return sanitize_result(result.model_dump(mode="json"), params.redact)
    except (ValidationError, AnalyticsInputError) as e:
        logger.error(f"Invalid analytics input: {e}")
        return create_error_response(e, "invalid_input")
    except Exception as e:
        logger.error(f"Error computing analytics: {e}")
        return create_error_response(e, error_type)
