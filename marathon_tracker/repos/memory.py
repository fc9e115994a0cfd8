"""In-memory repositories for marathons and the activity log."""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Callable, Iterable

from marathon_tracker.domain.models import (
    CONTACT_OUTCOMES,
    ActivityEntry,
    Area,
    InteractionPatch,
    InteractionPoint,
    Marathon,
    MarathonStatus,
)

logger = logging.getLogger(__name__)

_CONTACT_FIELDS = ("contact_name", "contact_phone", "contact_email")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def merge_patch(
    point: InteractionPoint, patch: InteractionPatch, now: datetime
) -> InteractionPoint:
    """Return a new version of *point* with the patch fields merged in.

    Supplying a status counts as logging an interaction and stamps
    ``last_interaction_time``. Contact details survive only for outcomes in
    ``CONTACT_OUTCOMES``.
    """
    changes = patch.changes()
    if "status" in changes:
        changes["last_interaction_time"] = now

    merged = point.model_copy(update=changes)
    if merged.status not in CONTACT_OUTCOMES:
        merged = merged.model_copy(update=dict.fromkeys(_CONTACT_FIELDS))
    return merged


class MarathonStore:
    """Dict-backed store for Marathon trees, keyed by id.

    Marathons, areas and points are frozen models. An update builds new
    versions along the path to the changed point and swaps the marathon in,
    so snapshots handed out earlier never change underneath their holder.

    Writes hold ``_lock`` for the whole read-modify-write; routes run in a
    threadpool, so two updates to the same marathon may arrive together.
    Reads take the current dict without locking, since writers only ever
    swap values or the whole dict.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store: dict[str, Marathon] = {}
        self._clock = clock
        self._lock = threading.Lock()
        self.revision = 0

    def load(self, marathons: Iterable[Marathon]) -> None:
        """Replace the contents. Raises ``ValueError`` on repeated ids."""
        loaded: dict[str, Marathon] = {}
        for marathon in marathons:
            if marathon.id in loaded:
                raise ValueError(f"Duplicate marathon id {marathon.id!r}")
            loaded[marathon.id] = marathon
        with self._lock:
            self._store = loaded
            self.revision += 1

    def clear(self) -> None:
        with self._lock:
            self._store = {}
            self.revision += 1

    def __len__(self) -> int:
        return len(self._store)

    # -- reads -------------------------------------------------------------

    def get(self, marathon_id: str | None) -> Marathon | None:
        if marathon_id is None:
            return None
        return self._store.get(marathon_id)

    def list_all(self) -> list[Marathon]:
        return list(self._store.values())

    def list_upcoming(self) -> list[Marathon]:
        """Only admin-prepared marathons are surfaced as upcoming."""
        return [
            m
            for m in self._store.values()
            if m.status == MarathonStatus.UPCOMING and m.admin_prepared
        ]

    def find_current(self) -> Marathon | None:
        """Pick the marathon the dashboard opens on."""
        marathons = self.list_all()
        for status in (MarathonStatus.CURRENT, MarathonStatus.UPCOMING):
            for marathon in marathons:
                if marathon.status == status:
                    return marathon
        return marathons[0] if marathons else None

    def get_area(self, marathon_id: str | None, area_id: str | None) -> Area | None:
        marathon = self.get(marathon_id)
        if marathon is None:
            return None
        return next((a for a in marathon.areas if a.id == area_id), None)

    def get_point(
        self, marathon_id: str, area_id: str, point_id: str
    ) -> InteractionPoint | None:
        area = self.get_area(marathon_id, area_id)
        if area is None:
            return None
        return next((p for p in area.house_numbers if p.id == point_id), None)

    def find_marathon_for_area(self, area_id: str | None) -> Marathon | None:
        return next((m for m in self._store.values() if m.has_area(area_id)), None)

    # -- writes ------------------------------------------------------------

    def update_point(
        self,
        marathon_id: str,
        area_id: str,
        point_id: str,
        patch: InteractionPatch,
    ) -> InteractionPoint | None:
        """Merge *patch* into a point and return its new version.

        Returns ``None`` without touching anything when the marathon, area or
        point does not exist.
        """
        with self._lock:
            marathon = self._store.get(marathon_id)
            if marathon is None:
                logger.warning("Update skipped: unknown marathon %s", marathon_id)
                return None

            area_idx = next(
                (i for i, a in enumerate(marathon.areas) if a.id == area_id), None
            )
            if area_idx is None:
                logger.warning(
                    "Update skipped: unknown area %s in marathon %s",
                    area_id,
                    marathon_id,
                )
                return None
            area = marathon.areas[area_idx]

            point_idx = next(
                (i for i, p in enumerate(area.house_numbers) if p.id == point_id),
                None,
            )
            if point_idx is None:
                logger.warning(
                    "Update skipped: unknown point %s in area %s", point_id, area_id
                )
                return None

            updated = merge_patch(area.house_numbers[point_idx], patch, self._clock())

            points = list(area.house_numbers)
            points[point_idx] = updated
            areas = list(marathon.areas)
            areas[area_idx] = area.model_copy(update={"house_numbers": tuple(points)})
            self._store[marathon_id] = marathon.model_copy(
                update={"areas": tuple(areas)}
            )
            self.revision += 1

        logger.info(
            "Point %s in %s/%s is now %s",
            point_id,
            marathon_id,
            area_id,
            updated.status,
        )
        return updated


class ActivityRepository:
    """Bounded store for ActivityEntry instances; the oldest entries drop off."""

    DEFAULT_LIMIT = 1000

    def __init__(self, limit: int = DEFAULT_LIMIT) -> None:
        self._entries: deque[ActivityEntry] = deque(maxlen=limit)
        self._lock = threading.Lock()

    @property
    def limit(self) -> int:
        return self._entries.maxlen

    def add(self, entry: ActivityEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def list_all(self) -> list[ActivityEntry]:
        with self._lock:
            return list(self._entries)

    def list_for_marathon(self, marathon_id: str) -> list[ActivityEntry]:
        return sorted(
            [e for e in self.list_all() if e.marathon_id == marathon_id],
            key=lambda e: e.timestamp,
        )

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
