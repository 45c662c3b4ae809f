"""Tests for proactive warnings."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from boundary_insights.analytics.warnings import (
    EVALUATORS,
    WarningKind,
    evaluate_warnings,
)
from boundary_insights.models import AlertSeverity, AlertType, SituationalContext


class TestWarningReport:
    def test_no_immediate_concerns(self, calm_history, now):
        report = evaluate_warnings(calm_history, now)
        assert report.status == "no_immediate_concerns"
        assert report.alerts == []
        assert "No Immediate Concerns" in report.message

    def test_too_few_interactions(self, interaction, now):
        events = [interaction(flag="red", category="Boundary Violation") for _ in range(2)]
        report = evaluate_warnings(events, now)
        assert report.status == "no_immediate_concerns"

    def test_minimum_interactions_is_configurable(self, troubled_history, now):
        assert evaluate_warnings(troubled_history, now, min_interactions=7).status == "no_immediate_concerns"
        assert evaluate_warnings(troubled_history, now, min_interactions=6).status == "alerts"

    def test_troubled_history_alerts(self, troubled_history, now):
        report = evaluate_warnings(troubled_history, now)
        kinds = [a.id.split(":")[0] for a in report.alerts]

        assert report.status == "alerts"
        assert kinds == [
            "boundary-testing",
            "escalation",
            "energy-drain",
            "communication-pattern",
            "recovery",
        ]

    def test_high_severity_alerts_carry_phrases(self, troubled_history, now):
        report = evaluate_warnings(troubled_history, now)
        by_type = {a.type: a for a in report.alerts}

        for alert_type in (AlertType.ESCALATION, AlertType.BOUNDARY):
            alert = by_type[alert_type]
            assert alert.suggested_phrases
            assert alert.exit_strategies

        assert by_type[AlertType.BOUNDARY].confidence == 95
        assert by_type[AlertType.BOUNDARY].severity == AlertSeverity.HIGH


class TestDismissal:
    def test_dismissed_alert_is_excluded(self, troubled_history, now):
        first = evaluate_warnings(troubled_history, now)
        escalation = next(a for a in first.alerts if a.type == AlertType.ESCALATION)

        second = evaluate_warnings(troubled_history, now, dismissed={escalation.id})
        assert escalation.id not in [a.id for a in second.alerts]
        assert second.dismissed_count == 1
        assert len(second.alerts) == len(first.alerts) - 1

    def test_alert_resurfaces_when_pattern_changes(self, troubled_history, interaction, now):
        first = evaluate_warnings(troubled_history, now)
        escalation = next(a for a in first.alerts if a.type == AlertType.ESCALATION)

        worse = troubled_history + [interaction(days_ago=0.5, flag="red")]
        later = evaluate_warnings(worse, now, dismissed={escalation.id})
        resurfaced = next(a for a in later.alerts if a.type == AlertType.ESCALATION)
        assert resurfaced.id != escalation.id

    def test_everything_dismissed(self, troubled_history, now):
        first = evaluate_warnings(troubled_history, now)
        report = evaluate_warnings(troubled_history, now, dismissed=[a.id for a in first.alerts])
        assert report.status == "no_immediate_concerns"
        assert report.dismissed_count == len(first.alerts)


class TestContextWarning:
    def test_planned_location_matches_history(self, interaction, now):
        events = [interaction(days_ago=d, flag="red", location="Mom's House") for d in (3, 12)]
        events += [interaction(days_ago=d) for d in (1, 2, 5)]
        context = SituationalContext(location="mom's house", topic="holidays")

        report = evaluate_warnings(events, now, context=context)
        alert = next(a for a in report.alerts if a.type == AlertType.CONTEXT)

        assert alert.confidence == 75
        assert alert.triggers == ["Location: mom's house", "Topic: holidays"]
        assert alert.suggested_phrases
        assert alert.exit_strategies

    def test_planned_topic_matches_category(self, interaction, now):
        events = [interaction(days_ago=d, flag="red", category="Money") for d in (3, 4)]
        events.append(interaction(days_ago=1))
        report = evaluate_warnings(events, now, context=SituationalContext(topic="money"))
        assert any(a.type == AlertType.CONTEXT for a in report.alerts)

    def test_dominant_setting_matches_plan(self, interaction, now):
        events = [interaction(days_ago=d, flag="red", location="Home", witnesses="alone") for d in (2, 9)]
        events += [interaction(days_ago=1), interaction(days_ago=4)]
        report = evaluate_warnings(events, now, context=SituationalContext(location="their home"))
        alert = next(a for a in report.alerts if a.type == AlertType.CONTEXT)
        assert alert.confidence == 90

    def test_no_context_no_alert(self, interaction, now):
        events = [interaction(days_ago=d, flag="red", location="Bar") for d in (1, 2, 3)]
        report = evaluate_warnings(events, now)
        assert all(a.type != AlertType.CONTEXT for a in report.alerts)


class TestBoundaryTesting:
    def test_pushback_reactions_count(self, interaction, boundary, now):
        events = [interaction(days_ago=d) for d in (1, 2, 3)]
        boundaries = [boundary("guilt-tripped", days_ago=2), boundary("angry", days_ago=6)]
        report = evaluate_warnings(events, now, boundaries=boundaries)
        assert any(a.type == AlertType.BOUNDARY for a in report.alerts)

    def test_accepted_boundaries_do_not_count(self, interaction, boundary, now):
        events = [interaction(days_ago=d) for d in (1, 2, 3)]
        boundaries = [boundary("accepted", days_ago=2), boundary("respect-shown", days_ago=6)]
        report = evaluate_warnings(events, now, boundaries=boundaries)
        assert report.status == "no_immediate_concerns"

    def test_boundary_tested_interactions_count(self, interaction, now):
        events = [interaction(days_ago=d, boundary_tested=True) for d in (1, 2)]
        events.append(interaction(days_ago=3))
        report = evaluate_warnings(events, now)
        assert [a.type for a in report.alerts] == [AlertType.BOUNDARY]


def test_recovery_warning(interaction, now):
    events = [interaction(days_ago=d, energy_before=4, energy_after=3) for d in (1, 2)]
    events.append(interaction(days_ago=3))
    report = evaluate_warnings(events, now)
    assert [a.type for a in report.alerts] == [AlertType.RECOVERY]


def test_evaluator_set_is_closed():
    assert set(EVALUATORS) == set(WarningKind)
