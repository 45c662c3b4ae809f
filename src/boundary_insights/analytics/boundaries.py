"""How the other person responds when boundaries are set."""

import logging
from collections import Counter, defaultdict
from typing import Dict, Sequence

from boundary_insights.analytics.scoring import round_half_up
from boundary_insights.models import BoundaryEvent, BoundaryReport, Reaction, ReactionShare

logger = logging.getLogger(__name__)

RESPECTFUL = {Reaction.ACCEPTED, Reaction.RESPECT_SHOWN}
PUSHBACK = {
    Reaction.PUSHED_BACK,
    Reaction.ANGRY,
    Reaction.GUILT_TRIPPED,
    Reaction.SILENT_TREATMENT,
}


def analyze_boundaries(events: Sequence[BoundaryEvent]) -> BoundaryReport:
    """Reaction distribution, respect rate and per-type breakdown."""
    total = len(events)
    if total == 0:
        return BoundaryReport(total_events=0)

    counts = Counter(e.reaction for e in events)
    # Reaction enum order breaks count ties
    order = list(Reaction)
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], order.index(kv[0])))

    shares = [
        ReactionShare(reaction=reaction, count=count, percentage=round_half_up(count * 100 / total))
        for reaction, count in ranked
    ]

    by_type: Dict[str, Dict[str, int]] = defaultdict(dict)
    for event in events:
        reactions = by_type[event.boundary_type]
        reactions[event.reaction.value] = reactions.get(event.reaction.value, 0) + 1

    respected = sum(counts[r] for r in RESPECTFUL)
    pushed = sum(counts[r] for r in PUSHBACK)

    return BoundaryReport(
        total_events=total,
        reactions=shares,
        respect_rate=round(respected * 100 / total, 1),
        pushback_rate=round(pushed * 100 / total, 1),
        most_common_reaction=ranked[0][0],
        by_boundary_type={k: dict(sorted(v.items())) for k, v in sorted(by_type.items())},
    )
