"""
MCP Tools for Boundary Insights.

This package contains all tool implementations for the MCP server. Tools are
async, return plain JSON-ready dicts and report failures as
``{"error": ..., "error_type": ...}`` rather than raising.
"""

from .analytics import compare_relationships_tool, compute_analytics_tool
from .insights import pattern_insights_tool, proactive_warnings_tool
from .patterns import time_patterns_tool, trigger_patterns_tool

__all__ = [
    "compare_relationships_tool",
    "compute_analytics_tool",
    "pattern_insights_tool",
    "proactive_warnings_tool",
    "time_patterns_tool",
    "trigger_patterns_tool",
]
