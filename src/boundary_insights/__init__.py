"""
Boundary Insights - wellness and risk analytics over logged relationship events.

The analytics engine lives in ``boundary_insights.analytics``; the MCP server
in ``boundary_insights.main`` exposes it as tools.
"""

__version__ = "1.0.0"
