"""Tests for the in-memory marathon store."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import pytest

from marathon_tracker.domain.models import (
    Area,
    InteractionPatch,
    InteractionPoint,
    Marathon,
    MarathonStatus,
    Outcome,
)
from marathon_tracker.repos.memory import MarathonStore, merge_patch
from marathon_tracker.repos.seed import load_seed

_NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock():
    return _Clock(_NOW)


@pytest.fixture()
def store(clock):
    s = MarathonStore(clock=clock)
    s.load(load_seed())
    return s


def _dump(store: MarathonStore) -> list[dict]:
    return [m.model_dump() for m in store.list_all()]


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def test_list_all_keeps_seed_order(store):
    assert [m.id for m in store.list_all()] == ["marathon-1", "marathon-2", "marathon-3"]


def test_list_upcoming_requires_admin_prepared(store):
    store.load(
        load_seed()
        + [
            Marathon(
                id="marathon-4",
                name="Unprepared",
                date="2024-09-01",
                status=MarathonStatus.UPCOMING,
                admin_prepared=False,
            )
        ]
    )
    assert [m.id for m in store.list_upcoming()] == ["marathon-2"]


def test_find_current_prefers_current_then_upcoming(store):
    assert store.find_current().id == "marathon-1"

    store.load([m for m in load_seed() if m.status != MarathonStatus.CURRENT])
    assert store.find_current().id == "marathon-2"

    store.load([m for m in load_seed() if m.status == MarathonStatus.PAST])
    assert store.find_current().id == "marathon-3"

    store.clear()
    assert store.find_current() is None


def test_get_point_resolves_three_level_key(store):
    point = store.get_point("marathon-1", "area-1a", "hn-3")
    assert point.status == Outcome.RUNG_BELL
    assert store.get_point("marathon-1", "area-1b", "hn-3") is None


# ---------------------------------------------------------------------------
# update_point
# ---------------------------------------------------------------------------


def test_update_saved_with_contact(store, clock):
    """Logging SAVED with a contact name stamps the interaction time."""
    before = store.get_point("marathon-1", "area-1a", "hn-1")
    assert before.last_interaction_time is None

    updated = store.update_point(
        "marathon-1",
        "area-1a",
        "hn-1",
        InteractionPatch(status=Outcome.SAVED, contact_name="Jane"),
    )

    reread = store.get_point("marathon-1", "area-1a", "hn-1")
    assert reread == updated
    assert reread.status == Outcome.SAVED
    assert reread.contact_name == "Jane"
    assert reread.last_interaction_time == _NOW


def test_update_later_interaction_is_more_recent(store, clock):
    first = store.update_point(
        "marathon-1", "area-1a", "hn-2", InteractionPatch(status=Outcome.NOT_HOME)
    )
    clock.now = _NOW + timedelta(minutes=5)
    second = store.update_point(
        "marathon-1", "area-1a", "hn-2", InteractionPatch(status=Outcome.RUNG_BELL)
    )
    assert second.last_interaction_time > first.last_interaction_time


def test_update_leaves_unset_fields_alone(store):
    before = store.get_point("marathon-1", "area-1a", "hn-3")

    updated = store.update_point(
        "marathon-1", "area-1a", "hn-3", InteractionPatch(address="103A Main St")
    )

    assert updated.address == "103A Main St"
    assert updated.status == before.status
    assert updated.notes == before.notes
    # No status in the patch, so the interaction time is untouched
    assert updated.last_interaction_time == before.last_interaction_time


def test_update_clears_contact_for_non_contact_outcome(store):
    store.update_point(
        "marathon-3",
        "area-3a",
        "hn-8",
        InteractionPatch(status=Outcome.NOT_HOME, contact_email="john@example.com"),
    )
    point = store.get_point("marathon-3", "area-3a", "hn-8")
    assert point.status == Outcome.NOT_HOME
    assert point.contact_name is None
    assert point.contact_phone is None
    assert point.contact_email is None


def test_update_keeps_contact_for_follow_up(store):
    store.update_point(
        "marathon-3",
        "area-3a",
        "hn-8",
        InteractionPatch(status=Outcome.FOLLOW_UP, notes="Call back Sunday"),
    )
    point = store.get_point("marathon-3", "area-3a", "hn-8")
    assert point.contact_name == "John Doe"
    assert point.contact_phone == "555-1234"
    assert point.notes == "Call back Sunday"


def test_update_preserves_sibling_order(store):
    store.update_point(
        "marathon-1", "area-1a", "hn-2", InteractionPatch(status=Outcome.SAVED)
    )
    marathon = store.get("marathon-1")
    assert [a.id for a in marathon.areas] == ["area-1a", "area-1b"]
    assert [p.id for p in marathon.areas[0].house_numbers] == ["hn-1", "hn-2", "hn-3"]


def test_update_does_not_touch_other_marathons(store):
    others_before = [m for m in store.list_all() if m.id != "marathon-1"]

    store.update_point(
        "marathon-1", "area-1a", "hn-1", InteractionPatch(status=Outcome.SAVED)
    )

    others_after = [m for m in store.list_all() if m.id != "marathon-1"]
    assert others_after == others_before
    assert all(a is b for a, b in zip(others_after, others_before))


def test_update_does_not_change_earlier_snapshot(store):
    snapshot = store.get("marathon-1")
    store.update_point(
        "marathon-1", "area-1a", "hn-1", InteractionPatch(status=Outcome.SAVED)
    )
    assert snapshot.areas[0].house_numbers[0].status == Outcome.PENDING


@pytest.mark.parametrize(
    "key",
    [
        ("marathon-x", "area-1a", "hn-1"),
        ("marathon-1", "area-x", "hn-1"),
        ("marathon-1", "area-1a", "hn-x"),
        ("marathon-2", "area-1a", "hn-1"),
    ],
)
def test_update_with_unknown_ids_is_noop(store, key):
    before = _dump(store)
    revision = store.revision

    result = store.update_point(*key, InteractionPatch(status=Outcome.SAVED))

    assert result is None
    assert _dump(store) == before
    assert store.revision == revision


def test_merge_patch_ignores_none_fields():
    point = load_seed()[2].areas[0].house_numbers[1]
    merged = merge_patch(point, InteractionPatch(), _NOW)
    assert merged == point


def test_reload_does_not_share_objects(store):
    store.update_point(
        "marathon-1", "area-1a", "hn-1", InteractionPatch(status=Outcome.SAVED)
    )
    store.load(load_seed())
    assert store.get_point("marathon-1", "area-1a", "hn-1").status == Outcome.PENDING


def test_load_rejects_repeated_ids(store):
    before = _dump(store)
    duplicated = load_seed() + [load_seed()[0]]

    with pytest.raises(ValueError, match="marathon-1"):
        store.load(duplicated)

    assert _dump(store) == before


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


def test_concurrent_updates_to_one_marathon_are_all_kept():
    """Parallel updates to sibling points must not overwrite each other."""
    points = [
        InteractionPoint(id=f"p{i}", address=f"{i} Busy St") for i in range(64)
    ]
    marathon = Marathon(
        id="m",
        name="Busy",
        date="2024-05-15",
        status=MarathonStatus.CURRENT,
        areas=[Area(id="a", name="Block", house_numbers=points)],
    )
    store = MarathonStore()

    for _round in range(20):
        store.load([marathon])
        barrier = threading.Barrier(len(points))

        def worker(point_id: str, barrier: threading.Barrier) -> None:
            barrier.wait()
            store.update_point("m", "a", point_id, InteractionPatch(status=Outcome.SAVED))

        threads = [threading.Thread(target=worker, args=(p.id, barrier)) for p in points]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        statuses = [p.status for p in store.get_area("m", "a").house_numbers]
        assert statuses.count(Outcome.SAVED) == len(points)
