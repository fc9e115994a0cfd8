"""Service for aggregating interaction outcomes into summary statistics."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from marathon_tracker.domain.models import (
    Marathon,
    MarathonStats,
    MarathonStatus,
    Outcome,
    StatisticsSnapshot,
)


def compute(marathons: Iterable[Marathon]) -> StatisticsSnapshot:
    """Build a StatisticsSnapshot in a single pass over all points.

    Pending points are not counted anywhere. ``participants_estimate`` assumes
    one group per marathon.
    """
    marathons = list(marathons)
    overall: Counter[Outcome] = Counter()
    per_marathon: list[MarathonStats] = []

    for marathon in marathons:
        outcomes: Counter[Outcome] = Counter()
        for area in marathon.areas:
            for point in area.house_numbers:
                if point.status != Outcome.PENDING:
                    outcomes[point.status] += 1
        overall.update(outcomes)
        per_marathon.append(
            MarathonStats(
                marathon_id=marathon.id,
                marathon_name=marathon.name,
                outcomes=dict(outcomes),
                houses_visited=sum(outcomes.values()),
            )
        )

    return StatisticsSnapshot(
        total_marathons=len(marathons),
        total_completed_marathons=sum(
            1 for m in marathons if m.status == MarathonStatus.PAST
        ),
        participants_estimate=len(marathons),
        overall_outcomes=dict(overall),
        saved_count=overall.get(Outcome.SAVED, 0),
        marathon_stats=per_marathon,
    )
