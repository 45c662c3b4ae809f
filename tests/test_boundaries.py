"""Tests for the boundary reaction report."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from boundary_insights.analytics.boundaries import analyze_boundaries
from boundary_insights.models import Reaction


def test_empty_report():
    report = analyze_boundaries([])
    assert report.total_events == 0
    assert report.most_common_reaction is None


def test_reaction_shares_round_half_up(boundary):
    events = [boundary("angry", days_ago=d) for d in range(7)]
    events.append(boundary("accepted", boundary_type="set-limit"))
    report = analyze_boundaries(events)

    assert [(s.reaction, s.percentage) for s in report.reactions] == [
        (Reaction.ANGRY, 88),
        (Reaction.ACCEPTED, 13),
    ]
    assert report.respect_rate == 12.5
    assert report.pushback_rate == 87.5
    assert report.most_common_reaction == Reaction.ANGRY
    assert report.by_boundary_type == {"said-no": {"angry": 7}, "set-limit": {"accepted": 1}}


def test_count_ties_follow_reaction_order(boundary):
    report = analyze_boundaries([boundary("silent-treatment"), boundary("accepted")])
    assert report.most_common_reaction == Reaction.ACCEPTED
