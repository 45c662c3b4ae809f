"""
Trigger pattern analysis.

Each trigger label owns an immutable TriggerStats accumulator. ``add`` folds
in one observation; ``merge`` combines two accumulators for the same label
and is associative and commutative, so folding a batch, folding it in a
different order, or applying observations one at a time through the
aggregate cache all land on the same value.

    violation_rate = 100 * violations / occurrences   (0 with no occurrences)
    high risk      = violation_rate > 70
    improving      = last (up to) three weekly violation checkpoints strictly
                     decreasing, with at least two checkpoints
"""

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple

from boundary_insights.analytics.aggregates import AggregateCache, fold
from boundary_insights.analytics.timeutils import week_start
from boundary_insights.models import (
    TriggerCategory,
    TriggerObservation,
    TriggerPatternSummary,
    TriggerReport,
)

logger = logging.getLogger(__name__)

HIGH_RISK_RATE = 70
HEADLINE_COUNT = 3
CHECKPOINT_WINDOW = 3
MIN_CHECKPOINTS = 2

Counts = Tuple[Tuple[str, int], ...]


def _merge_counts(left: Counts, right: Counts) -> Counts:
    merged = Counter(dict(left))
    merged.update(dict(right))
    return tuple(sorted(merged.items()))


def _tally(values: Iterable[Optional[str]]) -> Counts:
    return tuple(sorted(Counter(v.strip() for v in values if v and v.strip()).items()))


def trigger_key(observation: TriggerObservation) -> str:
    return observation.trigger.strip()


@dataclass(frozen=True)
class TriggerStats:
    """Cumulative statistics for one trigger label."""

    label: str
    category: TriggerCategory = TriggerCategory.TOPIC
    occurrences: int = 0
    violations: int = 0
    severity_sum: int = 0
    factor_counts: Counts = ()
    reaction_counts: Counts = ()
    response_counts: Counts = ()
    last_seen: Optional[datetime] = None
    # (week start, violations that week) for every week the trigger was seen
    weekly_violations: Tuple[Tuple[date, int], ...] = ()

    @classmethod
    def empty(cls, label: str) -> "TriggerStats":
        return cls(label=label)

    @classmethod
    def of(cls, observation: TriggerObservation) -> "TriggerStats":
        violated = 1 if observation.boundary_violated else 0
        return cls(
            label=trigger_key(observation),
            category=observation.category,
            occurrences=1,
            violations=violated,
            severity_sum=observation.severity,
            factor_counts=_tally(observation.contextual_factors),
            reaction_counts=_tally([observation.user_reaction]),
            response_counts=_tally([observation.effective_response]),
            last_seen=observation.timestamp,
            weekly_violations=((week_start(observation.timestamp), violated),),
        )

    def add(self, observation: TriggerObservation) -> "TriggerStats":
        return self.merge(TriggerStats.of(observation))

    def merge(self, other: "TriggerStats") -> "TriggerStats":
        if other.occurrences == 0:
            return self
        if self.occurrences == 0:
            return other

        # Category follows the most recent observation; ties resolve by value
        latest = max(
            (self, other), key=lambda s: (s.last_seen, s.category.value)
        )

        weeks = Counter(dict(self.weekly_violations))
        weeks.update(dict(other.weekly_violations))

        return TriggerStats(
            label=self.label,
            category=latest.category,
            occurrences=self.occurrences + other.occurrences,
            violations=self.violations + other.violations,
            severity_sum=self.severity_sum + other.severity_sum,
            factor_counts=_merge_counts(self.factor_counts, other.factor_counts),
            reaction_counts=_merge_counts(self.reaction_counts, other.reaction_counts),
            response_counts=_merge_counts(self.response_counts, other.response_counts),
            last_seen=latest.last_seen,
            weekly_violations=tuple(sorted(weeks.items())),
        )

    @property
    def violation_rate(self) -> float:
        if self.occurrences == 0:
            return 0.0
        return 100.0 * self.violations / self.occurrences

    @property
    def average_severity(self) -> float:
        if self.occurrences == 0:
            return 0.0
        return self.severity_sum / self.occurrences

    @property
    def checkpoints(self) -> List[int]:
        return [count for _, count in self.weekly_violations]

    @property
    def high_risk(self) -> bool:
        return self.violation_rate > HIGH_RISK_RATE

    @property
    def improving(self) -> bool:
        recent = self.checkpoints[-CHECKPOINT_WINDOW:]
        if len(recent) < MIN_CHECKPOINTS:
            return False
        return all(earlier > later for earlier, later in zip(recent, recent[1:]))


def add_observation(stats: TriggerStats, observation: TriggerObservation) -> TriggerStats:
    return stats.add(observation)


def build_trigger_stats(observations: Iterable[TriggerObservation]) -> Dict[str, TriggerStats]:
    """Fold a full observation set into per-label statistics."""
    return fold(observations, trigger_key, TriggerStats.empty, add_observation)


def trigger_cache() -> AggregateCache:
    """An incrementally maintained per-label cache with the same fold."""
    return AggregateCache(trigger_key, TriggerStats.empty, add_observation)


def summarize(stats: TriggerStats) -> TriggerPatternSummary:
    return TriggerPatternSummary(
        trigger=stats.label,
        category=stats.category,
        occurrences=stats.occurrences,
        violations=stats.violations,
        violation_rate=round(stats.violation_rate, 1),
        average_severity=round(stats.average_severity, 1),
        high_risk=stats.high_risk,
        improving=stats.improving,
        contextual_factors=dict(sorted(stats.factor_counts, key=lambda x: (-x[1], x[0]))),
        user_reactions=dict(stats.reaction_counts),
        effective_responses=dict(stats.response_counts),
        last_seen=stats.last_seen,
    )


def rank_triggers(stats: Iterable[TriggerStats]) -> List[TriggerStats]:
    """Most problematic first: violation rate, then occurrences."""
    return sorted(stats, key=lambda s: (-s.violation_rate, -s.occurrences, s.label))


def build_trigger_report(stats_by_label: Dict[str, TriggerStats]) -> TriggerReport:
    """
    Turn per-label statistics into the headline trigger report.

    Args:
        stats_by_label: Output of build_trigger_stats or a cache snapshot

    Returns:
        TriggerReport with the top three risks, high-risk and improving labels
    """
    ranked = rank_triggers(s for s in stats_by_label.values() if s.occurrences > 0)
    summaries = [summarize(s) for s in ranked]

    average_rate = (
        sum(s.violation_rate for s in ranked) / len(ranked) if ranked else 0.0
    )

    report = TriggerReport(
        total_triggers=len(ranked),
        average_violation_rate=round(average_rate, 1),
        most_problematic=summaries[:HEADLINE_COUNT],
        high_risk=[s.trigger for s in summaries if s.high_risk],
        improving=[s.trigger for s in summaries if s.improving],
        patterns=summaries,
    )
    logger.debug(
        f"Trigger report: {report.total_triggers} triggers, {len(report.high_risk)} high risk"
    )
    return report


def analyze_triggers(observations: Iterable[TriggerObservation]) -> TriggerReport:
    return build_trigger_report(build_trigger_stats(observations))
