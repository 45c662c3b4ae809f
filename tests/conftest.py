"""Pytest configuration and fixtures for Boundary Insights tests."""

import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from boundary_insights import config as config_module
from boundary_insights.config import Config
from boundary_insights.models import (
    BoundaryEvent,
    FlagType,
    InteractionEvent,
    TriggerObservation,
)

# Friday noon; every fixture timestamp is relative to this
NOW = datetime(2024, 6, 14, 12, 0)


def make_interaction(days_ago: float = 0, flag: str = "green", **fields) -> InteractionEvent:
    """Build an interaction ``days_ago`` days before NOW."""
    fields.setdefault("relationship_id", "rel-alex")
    return InteractionEvent(
        timestamp=fields.pop("timestamp", NOW - timedelta(days=days_ago)),
        flag_type=FlagType(flag),
        **fields,
    )


def make_trigger(label: str = "money", days_ago: float = 0, violated: bool = False, **fields):
    return TriggerObservation(
        trigger=label,
        boundary_violated=violated,
        timestamp=fields.pop("timestamp", NOW - timedelta(days=days_ago)),
        **fields,
    )


def make_boundary(reaction: str = "accepted", days_ago: float = 0, **fields) -> BoundaryEvent:
    fields.setdefault("boundary_type", "said-no")
    return BoundaryEvent(
        timestamp=fields.pop("timestamp", NOW - timedelta(days=days_ago)),
        reaction=reaction,
        **fields,
    )


@pytest.fixture
def now():
    """The fixed reference time."""
    return NOW


@pytest.fixture
def interaction():
    """Factory for interaction events."""
    return make_interaction


@pytest.fixture
def trigger():
    """Factory for trigger observations."""
    return make_trigger


@pytest.fixture
def boundary():
    """Factory for boundary events."""
    return make_boundary


@pytest.fixture(autouse=True)
def test_config():
    """Install a deterministic global configuration for every test."""
    config = Config(session_salt=b"test_salt_12345")
    previous = config_module._config
    config_module._config = config
    yield config
    config_module._config = previous


@pytest.fixture
def calm_history():
    """A month of mostly positive, low-cost interactions."""
    events = []
    for day in range(0, 28, 2):
        events.append(
            make_interaction(
                days_ago=day,
                flag="green",
                category="Quality Time",
                energy_before=6,
                energy_after=7,
                location="Cafe",
            )
        )
    events.append(make_interaction(days_ago=5, flag="red", category="Communication"))
    return events


@pytest.fixture
def troubled_history():
    """A relationship that is escalating, draining and testing boundaries."""
    events = [
        make_interaction(
            days_ago=10,
            flag="red",
            category="Communication",
            severity="medium",
            energy_before=7,
            energy_after=4,
            location="Home",
            witnesses="alone",
        ),
        make_interaction(days_ago=9, flag="green", category="Support", location="Park"),
    ]
    for day in (1, 2, 3, 4):
        events.append(
            make_interaction(
                days_ago=day,
                flag="red",
                category="Communication" if day % 2 else "Boundary Violation",
                severity="high",
                energy_before=8,
                energy_after=3,
                location="Home",
                witnesses="alone",
            )
        )
    return events


@pytest.fixture
def as_dicts():
    """Serialize records the way a caller would hand them over."""

    def convert(records):
        return [r.model_dump(mode="json") for r in records]

    return convert
