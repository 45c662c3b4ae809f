"""
Wellness and risk analytics engine.

Pure, synchronous derivations over caller-supplied event snapshots: health
and compatibility scores, trigger and time/location risk reports, ranked
pattern insights and proactive warnings.
"""

from boundary_insights.analytics.boundaries import analyze_boundaries
from boundary_insights.analytics.detectors import DETECTORS, DetectorKind, InsightWindow
from boundary_insights.analytics.engine import compute_analytics
from boundary_insights.analytics.insights import generate_insights, select_window
from boundary_insights.analytics.scoring import (
    compatibility_breakdown,
    compatibility_score,
    health_category,
    health_score,
)
from boundary_insights.analytics.time_patterns import analyze_time_patterns
from boundary_insights.analytics.triggers import TriggerStats, analyze_triggers
from boundary_insights.analytics.warnings import EVALUATORS, WarningKind, evaluate_warnings

__all__ = [
    "DETECTORS",
    "EVALUATORS",
    "DetectorKind",
    "InsightWindow",
    "TriggerStats",
    "WarningKind",
    "analyze_boundaries",
    "analyze_time_patterns",
    "analyze_triggers",
    "compatibility_breakdown",
    "compatibility_score",
    "compute_analytics",
    "evaluate_warnings",
    "generate_insights",
    "health_category",
    "health_score",
    "select_window",
]
