#!/usr/bin/env python3
"""
Boundary Insights MCP Server.

Exposes the wellness and risk analytics engine as MCP tools over stdio.
The server is stateless: every call carries the event snapshot to analyze.
"""

import logging
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

# MCP SDK imports
from mcp.server.fastmcp import FastMCP

# Local imports
from boundary_insights.config import Config, get_config
from boundary_insights.tools import (
    compare_relationships_tool,
    compute_analytics_tool,
    pattern_insights_tool,
    proactive_warnings_tool,
    time_patterns_tool,
    trigger_patterns_tool,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("Boundary Insights")

# Global instances
config: Optional[Config] = None


# ===== ANALYTICS TOOLS =====


@mcp.tool()
async def bi_compute_analytics(
    interactions: List[Any],
    boundaries: Optional[List[Any]] = None,
    triggers: Optional[List[Any]] = None,
    baseline: Optional[Dict[str, Any]] = None,
    context: Optional[Dict[str, Any]] = None,
    dismissed: Optional[List[str]] = None,
    now: Optional[datetime] = None,
    window: Optional[str] = None,
    redact: bool = True,
):
    """
    Full analysis for one relationship.

    Returns health and compatibility scores, ranked pattern insights,
    trigger and time/location risk reports, boundary reactions and
    proactive warnings.
    """
    return await compute_analytics_tool(
        interactions, boundaries, triggers, baseline, context, dismissed, now, window, redact
    )


@mcp.tool()
async def bi_pattern_insights(
    interactions: List[Any],
    now: Optional[datetime] = None,
    window: Optional[str] = None,
    redact: bool = True,
):
    """Ranked behavioral pattern insights over a week, month or quarter."""
    return await pattern_insights_tool(interactions, now, window, redact)


@mcp.tool()
async def bi_proactive_warnings(
    interactions: List[Any],
    boundaries: Optional[List[Any]] = None,
    context: Optional[Dict[str, Any]] = None,
    dismissed: Optional[List[str]] = None,
    now: Optional[datetime] = None,
    window: Optional[str] = None,
    redact: bool = True,
):
    """
    Warnings ahead of a planned interaction.

    Pass the planned location/topic as context. Alerts carry suggested
    phrases and exit strategies; dismissed alert ids are excluded.
    """
    return await proactive_warnings_tool(
        interactions, boundaries, context, dismissed, now, window, redact
    )


# ===== PATTERN TOOLS =====


@mcp.tool()
async def bi_trigger_patterns(
    triggers: List[Any],
    now: Optional[datetime] = None,
):
    """Per-trigger violation rates with high-risk and improving triggers."""
    return await trigger_patterns_tool(triggers, now)


@mcp.tool()
async def bi_time_patterns(
    interactions: List[Any],
    boundaries: Optional[List[Any]] = None,
    now: Optional[datetime] = None,
    redact: bool = True,
):
    """Violation rates by time of day, weekday, hour, location and week."""
    return await time_patterns_tool(interactions, boundaries, now, redact)


@mcp.tool()
async def bi_compare_relationships(
    relationships: Dict[str, Dict[str, Any]],
    window: Optional[str] = None,
    redact: bool = True,
):
    """Compare several relationships side by side, healthiest first."""
    return await compare_relationships_tool(relationships, window, redact)


# ===== SERVER LIFECYCLE =====


def startup():
    """Load configuration and apply the configured log level."""
    global config

    logger.info("Starting Boundary Insights MCP Server...")

    config = get_config()
    logging.getLogger().setLevel(config.server.log_level)
    logger.info(f"Loaded configuration: {config.analysis}, {config.privacy}, {config.performance}")

    logger.info("Server startup complete")


def main():
    """Main entry point for the server."""
    try:
        startup()

        # Run the MCP server
        logger.info("Starting MCP server on stdio transport...")
        mcp.run(transport="stdio")
    except KeyboardInterrupt:
        logger.info("Server interrupted by user")
    except Exception as e:
        logger.error(f"Server error: {e}", exc_info=True)
    finally:
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()
