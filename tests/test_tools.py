"""Tests for the async MCP tool functions."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from boundary_insights.tools import (
    compare_relationships_tool,
    compute_analytics_tool,
    pattern_insights_tool,
    proactive_warnings_tool,
    time_patterns_tool,
    trigger_patterns_tool,
)
from boundary_insights.tools.base import create_error_response


@pytest.fixture
def troubled_payload(troubled_history, as_dicts):
    return as_dicts(troubled_history)


@pytest.fixture
def calm_payload(calm_history, as_dicts):
    return as_dicts(calm_history)


@pytest.mark.asyncio
async def test_compute_analytics_tool(troubled_payload):
    """Full analysis returns every section and hashes the relationship id."""
    result = await compute_analytics_tool(troubled_payload, redact=True)

    assert "error" not in result
    for key in ("health_score", "insights", "trigger_report", "time_report", "boundary_report", "warnings"):
        assert key in result
    assert result["relationship_id"].startswith("hash:")
    assert result["window"] == "month"
    assert result["health_score"] == 0


@pytest.mark.asyncio
async def test_compute_analytics_tool_without_redaction(troubled_payload):
    result = await compute_analytics_tool(troubled_payload, redact=False)
    assert result["relationship_id"] == "rel-alex"


@pytest.mark.asyncio
async def test_default_window_from_config(troubled_payload, test_config):
    test_config.analysis.default_window = "week"
    result = await compute_analytics_tool(troubled_payload)
    assert result["window"] == "week"


@pytest.mark.asyncio
async def test_invalid_window_is_reported(troubled_payload):
    result = await compute_analytics_tool(troubled_payload, window="decade")
    assert result["error_type"] == "invalid_input"


@pytest.mark.asyncio
async def test_malformed_records_are_counted(troubled_payload):
    payload = troubled_payload + [{"flag_type": "red"}]
    result = await compute_analytics_tool(payload)
    assert result["skipped_records"]["interactions"] == 1


@pytest.mark.asyncio
async def test_non_object_records_are_counted(troubled_payload):
    result = await compute_analytics_tool(troubled_payload + ["garbage", None, 7], redact=False)

    assert "error" not in result
    assert result["skipped_records"]["interactions"] == 3
    assert result["interactions_analyzed"] == 6


@pytest.mark.asyncio
async def test_timezone_mismatched_record_is_counted(troubled_payload):
    stray = {"timestamp": "2024-06-10T10:00:00+00:00", "flag_type": "red"}
    result = await compute_analytics_tool(troubled_payload + [stray])
    assert result["skipped_records"]["interactions"] == 1

    mismatched_now = await compute_analytics_tool(troubled_payload, now="2024-06-14T12:00:00+00:00")
    assert mismatched_now["error_type"] == "invalid_input"


@pytest.mark.asyncio
async def test_minimum_interactions_from_config(troubled_payload, test_config):
    test_config.analysis.min_interactions = 7
    result = await compute_analytics_tool(troubled_payload)
    assert result["insights"] == []
    assert result["warnings"]["status"] == "no_immediate_concerns"


@pytest.mark.asyncio
async def test_pattern_insights_tool(troubled_payload):
    result = await pattern_insights_tool(troubled_payload, now="2024-06-14T12:00:00")

    assert result["interactions_analyzed"] == 6
    assert [i["id"] for i in result["insights"]][0] == "escalation"
    for insight in result["insights"]:
        assert 0 <= insight["confidence"] <= 100


@pytest.mark.asyncio
async def test_proactive_warnings_tool(troubled_payload):
    first = await proactive_warnings_tool(troubled_payload)
    assert first["status"] == "alerts"

    ids = [a["id"] for a in first["alerts"]]
    second = await proactive_warnings_tool(troubled_payload, dismissed=ids)
    assert second["status"] == "no_immediate_concerns"
    assert second["dismissed_count"] == len(ids)


@pytest.mark.asyncio
async def test_proactive_warnings_redacts_context(troubled_payload):
    context = {"location": "12 Main Street Home"}
    result = await proactive_warnings_tool(troubled_payload, context=context, redact=True)

    alert = next(a for a in result["alerts"] if a["type"] == "context")
    assert "[ADDRESS REDACTED]" in alert["triggers"][0]
    assert "Main Street" not in alert["triggers"][0]


@pytest.mark.asyncio
async def test_single_match_is_not_a_context_alert(calm_payload):
    context = {"location": "Office", "topic": "Communication"}
    result = await proactive_warnings_tool(calm_payload, context=context)
    assert result["status"] == "no_immediate_concerns"


@pytest.mark.asyncio
async def test_trigger_patterns_tool():
    triggers = [
        {"trigger": "money", "boundary_violated": i < 8, "timestamp": f"2024-06-{i + 1:02d}T10:00:00"}
        for i in range(10)
    ]
    result = await trigger_patterns_tool(triggers)

    assert result["total_triggers"] == 1
    assert result["most_problematic"][0]["violation_rate"] == 80
    assert result["high_risk"] == ["money"]


@pytest.mark.asyncio
async def test_time_patterns_tool(troubled_payload):
    result = await time_patterns_tool(troubled_payload)
    assert result["time_report"]["riskiest_location"] == "Home"
    assert result["boundary_report"]["total_events"] == 0


@pytest.mark.asyncio
async def test_time_patterns_redacts_locations(troubled_payload):
    payload = [{**record, "location": "12 Main Street"} for record in troubled_payload]
    result = await time_patterns_tool(payload, redact=True)

    report = result["time_report"]
    assert report["riskiest_location"] == "[ADDRESS REDACTED]"
    assert all("Main Street" not in bucket["key"] for bucket in report["locations"])


@pytest.mark.asyncio
async def test_compare_relationships_tool(troubled_payload, calm_payload):
    result = await compare_relationships_tool(
        {
            "alex": {"interactions": troubled_payload},
            "sam": {"interactions": calm_payload},
        },
        redact=False,
    )

    assert result["relationships_analyzed"] == 2
    assert result["ranking"] == ["sam", "alex"]
    assert result["healthiest_relationship"] == "sam"
    matrix = result["comparative_matrix"]
    for metric_data in matrix.values():
        for stat in ("mean", "std", "min", "max", "range"):
            assert stat in metric_data
    assert matrix["health_score"]["max"] == 90


@pytest.mark.asyncio
async def test_compare_relationships_redacts_names(troubled_payload, calm_payload):
    result = await compare_relationships_tool(
        {"alex": {"interactions": troubled_payload}, "sam": {"interactions": calm_payload}}
    )
    assert all(name.startswith("hash:") for name in result["ranking"])


@pytest.mark.asyncio
async def test_compare_relationships_reports_errors(calm_payload):
    result = await compare_relationships_tool(
        {"sam": {"interactions": calm_payload}, "broken": {"interactions": "nope"}},
        redact=False,
    )
    assert result["relationships_analyzed"] == 1
    assert result["relationships_with_errors"] == ["broken"]


@pytest.mark.asyncio
async def test_compare_relationships_limits(calm_payload, test_config):
    assert (await compare_relationships_tool({}))["error_type"] == "invalid_input"

    test_config.performance.max_relationships_per_call = 1
    result = await compare_relationships_tool(
        {"a": {"interactions": calm_payload}, "b": {"interactions": calm_payload}}
    )
    assert result["error_type"] == "invalid_input"


def test_create_error_response():
    response = create_error_response(ValueError("bad"), "invalid_input")
    assert response == {"error": "bad", "error_type": "invalid_input"}
