"""Tests for the behavioral pattern detectors."""

import sys
from datetime import timedelta
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from boundary_insights.analytics.detectors import (
    DETECTORS,
    Context,
    DetectorKind,
    InsightWindow,
    classify_context,
    count_cycles,
    detect_behavioral_cycle,
    detect_communication_pattern,
    detect_context_trigger,
    detect_energy_drain,
    detect_escalation,
    detect_positive_trend,
    dominant_context,
    escalation_counts,
)
from boundary_insights.models import InsightType, Severity


def window_of(events, now):
    return InsightWindow(interactions=tuple(events), now=now)


class TestEscalation:
    def test_fires_when_recent_exceeds_prior(self, interaction, now):
        events = [interaction(days_ago=d, flag="red") for d in (1, 2, 3)]
        events.append(interaction(days_ago=10, flag="red"))
        insight = detect_escalation(window_of(events, now))

        assert insight is not None
        assert insight.severity == Severity.HIGH
        assert insight.confidence == 85
        assert insight.type == InsightType.WARNING
        assert "3 violations this week vs 1 last week" in insight.supporting_data

    def test_equal_counts_do_not_fire(self, interaction, now):
        events = [interaction(days_ago=d, flag="red") for d in (1, 2, 8, 9)]
        assert detect_escalation(window_of(events, now)) is None

    def test_needs_more_than_two_recent(self, interaction, now):
        events = [interaction(days_ago=d, flag="red") for d in (1, 2)]
        assert detect_escalation(window_of(events, now)) is None

    def test_seven_day_boundary_belongs_to_prior(self, interaction, now):
        events = [
            interaction(flag="red", timestamp=now - timedelta(days=7)),
            interaction(flag="red", timestamp=now - timedelta(days=7) + timedelta(seconds=1)),
        ]
        assert escalation_counts(window_of(events, now)) == (1, 1)


class TestCommunicationPattern:
    def test_three_communication_flags(self, interaction, now):
        events = [interaction(days_ago=d, flag="red", category="Communication") for d in range(3)]
        insight = detect_communication_pattern(window_of(events, now))
        assert insight.severity == Severity.MEDIUM
        assert insight.confidence == 90

    def test_green_flags_do_not_count(self, interaction, now):
        events = [interaction(flag="red", category="Communication") for _ in range(2)]
        events.append(interaction(flag="green", category="Communication"))
        assert detect_communication_pattern(window_of(events, now)) is None


class TestEnergyDrain:
    def test_majority_drained(self, interaction, now):
        events = [interaction(energy_before=8, energy_after=5) for _ in range(4)]
        events.append(interaction())
        insight = detect_energy_drain(window_of(events, now))
        assert insight.severity == Severity.HIGH
        assert insight.confidence == 80
        assert insight.description.startswith("80%")

    def test_percentage_rounds_half_up(self, interaction, now):
        events = [interaction(energy_before=8, energy_after=5) for _ in range(5)]
        events += [interaction() for _ in range(3)]
        insight = detect_energy_drain(window_of(events, now))
        assert insight.description.startswith("63%")

    def test_exactly_sixty_percent_does_not_fire(self, interaction, now):
        events = [interaction(energy_before=8, energy_after=5) for _ in range(3)]
        events += [interaction(), interaction()]
        assert detect_energy_drain(window_of(events, now)) is None


class TestPositiveTrend:
    def test_more_green_than_red(self, interaction, now):
        events = [interaction(), interaction(), interaction(flag="red")]
        insight = detect_positive_trend(window_of(events, now))
        assert insight.type == InsightType.IMPROVEMENT
        assert insight.severity == Severity.LOW
        assert insight.confidence == 75

    def test_tie_does_not_fire(self, interaction, now):
        events = [interaction(), interaction(flag="red")]
        assert detect_positive_trend(window_of(events, now)) is None


class TestContextTrigger:
    def test_seventy_percent_private(self, interaction, now):
        events = [interaction(flag="red", location="Home") for _ in range(7)]
        events += [interaction(flag="red", location="Office") for _ in range(3)]
        insight = detect_context_trigger(window_of(events, now))

        assert insight is not None
        assert insight.confidence == 70
        assert insight.severity == Severity.MEDIUM
        assert "70% of violations occur when you're alone" == insight.description

    def test_percentage_rounds_half_up(self, interaction, now):
        events = [interaction(flag="red", location="Home") for _ in range(5)]
        events += [interaction(flag="red", location="Office") for _ in range(3)]
        insight = detect_context_trigger(window_of(events, now))

        assert insight.confidence == 63
        assert insight.description == "63% of violations occur when you're alone"

    def test_fifty_percent_does_not_fire(self, interaction, now):
        events = [interaction(flag="red", location="Home") for _ in range(5)]
        events += [interaction(flag="red", location="Office") for _ in range(5)]
        assert detect_context_trigger(window_of(events, now)) is None

    def test_confidence_is_capped(self, interaction, now):
        events = [interaction(flag="red", location="public park") for _ in range(4)]
        insight = detect_context_trigger(window_of(events, now))
        assert insight.confidence == 90

    def test_witnesses_classify_context(self):
        assert classify_context("", "just friends") == [Context.PUBLIC]
        assert classify_context("Family dinner at home", "") == [Context.PRIVATE, Context.FAMILY]
        assert classify_context("Office", "coworkers") == []

    def test_ties_prefer_private(self, interaction):
        events = tuple(interaction(flag="red", location="home", witnesses="others") for _ in range(3))
        assert dominant_context(events).context == Context.PRIVATE


class TestBehavioralCycle:
    def test_two_cycles(self, interaction, now):
        flags = ["red", "green", "red", "red", "green", "red"]
        events = [interaction(days_ago=10 - i, flag=f) for i, f in enumerate(flags)]
        window = window_of(events, now)

        assert count_cycles(window) == 2
        insight = detect_behavioral_cycle(window)
        assert insight.type == InsightType.CYCLE
        assert insight.confidence == 40

    def test_triples_do_not_overlap(self, interaction, now):
        flags = ["red", "green", "red", "green", "red"]
        events = [interaction(days_ago=10 - i, flag=f) for i, f in enumerate(flags)]
        window = window_of(events, now)
        assert count_cycles(window) == 1
        assert detect_behavioral_cycle(window) is None

    def test_uses_chronological_order(self, interaction, now):
        flags = ["red", "green", "red", "red", "green", "red"]
        events = [interaction(days_ago=10 - i, flag=f) for i, f in enumerate(flags)]
        assert count_cycles(window_of(reversed(events), now)) == 2

    def test_confidence_caps_at_eighty(self, interaction, now):
        flags = ["red", "green", "red"] * 5
        events = [interaction(days_ago=20 - i, flag=f) for i, f in enumerate(flags)]
        assert detect_behavioral_cycle(window_of(events, now)).confidence == 80


def test_battery_is_closed():
    assert set(DETECTORS) == set(DetectorKind)
    assert len(DETECTORS) == 6


@pytest.mark.parametrize("kind", list(DetectorKind))
def test_detectors_are_silent_on_empty_window(kind, now):
    assert DETECTORS[kind](InsightWindow(interactions=(), now=now)) is None
