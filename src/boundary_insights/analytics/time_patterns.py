"""
Time and location risk analysis.

Buckets interactions by time of day, weekday, hour, location and week, and
reports how often each bucket ended in a boundary violation. An interaction
counts as a violation when ``boundary_tested`` is set, otherwise when it was
flagged red.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from boundary_insights.analytics.aggregates import AggregateCache, fold
from boundary_insights.analytics.scoring import event_health
from boundary_insights.analytics.timeutils import WEEKDAYS, time_of_day_for_hour, week_start
from boundary_insights.models import (
    InteractionEvent,
    LocationBucket,
    TimeBucket,
    TimeOfDay,
    TimeRiskReport,
    WeekTrend,
)

logger = logging.getLogger(__name__)

TOP_LOCATIONS = 8
UNKNOWN_LOCATION = "Unknown"
TREND_LOOKBACK = 3


def is_violation(event: InteractionEvent) -> bool:
    if event.boundary_tested is not None:
        return event.boundary_tested
    return event.is_red


def time_bucket(event: InteractionEvent) -> TimeOfDay:
    return event.time_of_day or time_of_day_for_hour(event.timestamp.hour)


def location_key(event: InteractionEvent) -> str:
    return event.location if event.location.strip() else UNKNOWN_LOCATION


@dataclass(frozen=True)
class BucketStats:
    """Running totals for one bucket key."""

    key: str
    total: int = 0
    violations: int = 0
    health_sum: int = 0
    energy_sum: int = 0

    @classmethod
    def empty(cls, key: str) -> "BucketStats":
        return cls(key=key)

    def add(self, event: InteractionEvent) -> "BucketStats":
        return BucketStats(
            key=self.key,
            total=self.total + 1,
            violations=self.violations + (1 if is_violation(event) else 0),
            health_sum=self.health_sum + event_health(event),
            energy_sum=self.energy_sum + event.energy_delta,
        )

    @property
    def violation_rate(self) -> float:
        return 100.0 * self.violations / self.total if self.total else 0.0

    @property
    def average_health(self) -> float:
        return self.health_sum / self.total if self.total else 0.0

    @property
    def average_energy(self) -> float:
        return self.energy_sum / self.total if self.total else 0.0

    def to_bucket(self, model=TimeBucket):
        return model(
            key=self.key,
            total=self.total,
            violations=self.violations,
            violation_rate=round(self.violation_rate, 1),
            average_health=round(self.average_health, 1),
            average_energy=round(self.average_energy, 1),
        )


def add_event(stats: BucketStats, event: InteractionEvent) -> BucketStats:
    return stats.add(event)


def bucket_by(events: Iterable[InteractionEvent], key_fn) -> Dict[str, BucketStats]:
    return fold(events, key_fn, BucketStats.empty, add_event)


def location_cache() -> AggregateCache:
    """Incrementally maintained location buckets."""
    return AggregateCache(location_key, BucketStats.empty, add_event)


def _riskiest_first(buckets: Iterable[BucketStats]) -> List[BucketStats]:
    return sorted(buckets, key=lambda b: (-b.violation_rate, -b.total, b.key))


def rank_locations(buckets: Dict[str, BucketStats]) -> List[LocationBucket]:
    ranked = _riskiest_first(b for b in buckets.values() if b.total)
    return [b.to_bucket(LocationBucket) for b in ranked[:TOP_LOCATIONS]]


def recent_trend(rates: Sequence[float]) -> str:
    """Compare the latest weekly rate with the one three buckets back."""
    if len(rates) < TREND_LOOKBACK:
        return "stable"
    latest, earlier = rates[-1], rates[-TREND_LOOKBACK]
    if latest > earlier:
        return "increasing"
    if latest < earlier:
        return "decreasing"
    return "stable"


def trend_slope(rates: Sequence[float]) -> float:
    """Least-squares slope of weekly violation rate, in points per week."""
    if len(rates) < 2:
        return 0.0
    x = np.arange(len(rates))
    slope, _intercept = np.polyfit(x, np.array(rates, dtype=float), 1)
    return round(float(slope), 2)


def analyze_time_patterns(events: Sequence[InteractionEvent]) -> TimeRiskReport:
    """
    Build the time and location risk report.

    Args:
        events: Interactions to analyze, in any order

    Returns:
        TimeRiskReport; every list is empty when there are no events
    """
    if not events:
        return TimeRiskReport()

    by_time = bucket_by(events, lambda e: time_bucket(e).value)
    by_day = bucket_by(events, lambda e: WEEKDAYS[e.timestamp.weekday()])
    by_hour = bucket_by(events, lambda e: f"{e.timestamp.hour:02d}")
    by_location = bucket_by(events, location_key)
    by_week = bucket_by(events, lambda e: week_start(e.timestamp).isoformat())

    time_buckets = [by_time[t.value] for t in TimeOfDay if t.value in by_time]
    day_buckets = [by_day[d] for d in WEEKDAYS if d in by_day]
    week_buckets = [by_week[k] for k in sorted(by_week)]

    weekly = [
        WeekTrend(
            week_start=b.key,
            total=b.total,
            violation_rate=round(b.violation_rate, 1),
            average_health=round(b.average_health, 1),
            average_energy=round(b.average_energy, 1),
        )
        for b in week_buckets
    ]
    rates = [b.violation_rate for b in week_buckets]

    ranked_times = _riskiest_first(time_buckets)
    ranked_days = _riskiest_first(day_buckets)
    locations = rank_locations(by_location)

    safest: Optional[str] = None
    if ranked_times:
        safest = sorted(time_buckets, key=lambda b: (b.violation_rate, -b.total, b.key))[0].key

    report = TimeRiskReport(
        time_of_day=[b.to_bucket() for b in time_buckets],
        day_of_week=[b.to_bucket() for b in day_buckets],
        hourly=[by_hour[k].to_bucket() for k in sorted(by_hour)],
        locations=locations,
        weekly_trend=weekly,
        recent_trend=recent_trend(rates),
        trend_slope=trend_slope(rates),
        riskiest_time=ranked_times[0].key if ranked_times else None,
        safest_time=safest,
        riskiest_day=ranked_days[0].key if ranked_days else None,
        riskiest_location=locations[0].key if locations else None,
    )
    logger.debug(
        f"Time report over {len(events)} interactions, {len(weekly)} weeks, trend {report.recent_trend}"
    )
    return report
