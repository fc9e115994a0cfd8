"""Tests for the statistics aggregator."""

from __future__ import annotations

from marathon_tracker.domain.models import (
    Area,
    InteractionPoint,
    Marathon,
    MarathonStatus,
    Outcome,
)
from marathon_tracker.repos.seed import load_seed
from marathon_tracker.services.statistics import compute


def _marathon(marathon_id: str, statuses: list[Outcome], **overrides) -> Marathon:
    points = [
        InteractionPoint(id=f"{marathon_id}-p{i}", address=f"{i} Test St", status=s)
        for i, s in enumerate(statuses)
    ]
    defaults = dict(
        id=marathon_id,
        name=f"Marathon {marathon_id}",
        date="2024-01-01",
        status=MarathonStatus.CURRENT,
        areas=[Area(id=f"{marathon_id}-a", name="Area", house_numbers=points)],
    )
    defaults.update(overrides)
    return Marathon(**defaults)


def test_seed_marathon_one_counts_rung_bell_only():
    marathon_one = [m for m in load_seed() if m.id == "marathon-1"]

    stats = compute(marathon_one)

    assert stats.marathon_stats[0].houses_visited == 1
    assert stats.marathon_stats[0].outcomes == {Outcome.RUNG_BELL: 1}
    assert stats.overall_outcomes == {Outcome.RUNG_BELL: 1}


def test_seed_totals():
    stats = compute(load_seed())

    assert stats.total_marathons == 3
    assert stats.total_completed_marathons == 1
    assert stats.participants_estimate == 3
    assert stats.saved_count == 1
    assert [s.marathon_id for s in stats.marathon_stats] == [
        "marathon-1",
        "marathon-2",
        "marathon-3",
    ]


def test_pending_points_never_counted():
    stats = compute([_marathon("m", [Outcome.PENDING, Outcome.PENDING])])

    assert stats.overall_outcomes == {}
    assert stats.marathon_stats[0].houses_visited == 0
    assert stats.marathon_stats[0].outcomes == {}
    assert stats.saved_count == 0


def test_overall_sum_equals_sum_of_visited():
    marathons = [
        _marathon("a", [Outcome.SAVED, Outcome.PENDING, Outcome.NOT_HOME]),
        _marathon("b", [Outcome.SAVED, Outcome.FOLLOW_UP], status=MarathonStatus.PAST),
        _marathon("c", []),
    ]

    stats = compute(marathons)

    assert sum(stats.overall_outcomes.values()) == sum(
        s.houses_visited for s in stats.marathon_stats
    )
    assert stats.overall_outcomes[Outcome.SAVED] == 2
    assert stats.saved_count == 2
    assert stats.total_completed_marathons == 1


def test_empty_input():
    stats = compute([])
    assert stats.total_marathons == 0
    assert stats.participants_estimate == 0
    assert stats.marathon_stats == []


def test_compute_is_repeatable():
    marathons = load_seed()
    assert compute(marathons) == compute(marathons)
