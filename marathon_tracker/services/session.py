"""Viewer-local session state: selected marathon/area and the group's engagement."""

from __future__ import annotations

import logging

from marathon_tracker.domain.bus import EventBus
from marathon_tracker.domain.events import (
    EngagementEnded,
    EngagementRejected,
    EngagementStarted,
)
from marathon_tracker.domain.models import (
    Area,
    EngagementResult,
    Group,
    InteractionPoint,
    Marathon,
    Outcome,
    SessionView,
)
from marathon_tracker.repos.memory import MarathonStore

logger = logging.getLogger(__name__)


class SessionState:
    """Tracks what the viewer is looking at and where their group is working.

    Only ids are held; ``selected_marathon`` and ``selected_area`` are looked
    up in the store on every read so they always reflect its latest version.

    A group is either idle (``active_area_id is None``) or engaged in exactly
    one area. It becomes engaged through ``start_engagement`` and idle again
    through ``end_engagement`` or by selecting a marathon that does not
    contain the engaged area.
    """

    def __init__(
        self,
        store: MarathonStore,
        bus: EventBus,
        group: Group | None = None,
    ) -> None:
        self.store = store
        self.bus = bus
        self._active_group = group
        self._marathon_id: str | None = None
        self._area_key: tuple[str, str] | None = None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def selected_marathon(self) -> Marathon | None:
        return self.store.get(self._marathon_id)

    @property
    def selected_area(self) -> Area | None:
        if self._area_key is None:
            return None
        return self.store.get_area(*self._area_key)

    @property
    def active_group(self) -> Group | None:
        return self._active_group

    def view(self) -> SessionView:
        return SessionView(
            selected_marathon=self.selected_marathon,
            selected_area=self.selected_area,
            active_group=self.active_group,
        )

    def last_interaction(self) -> InteractionPoint | None:
        """Most recently visited point in the selected area, if any."""
        area = self.selected_area
        if area is None:
            return None
        visited = [
            p
            for p in area.house_numbers
            if p.status != Outcome.PENDING and p.last_interaction_time is not None
        ]
        return max(visited, key=lambda p: p.last_interaction_time, default=None)

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def select_marathon(self, marathon_id: str | None) -> bool:
        """Switch the selected marathon and drop the selected area.

        An engagement in an area outside the new marathon is ended. Returns
        ``False`` (and changes nothing) for an unknown id.
        """
        marathon = self.store.get(marathon_id)
        if marathon_id is not None and marathon is None:
            logger.warning("Cannot select unknown marathon %s", marathon_id)
            return False

        self._marathon_id = marathon_id
        self._area_key = None

        group = self._active_group
        if group is not None and group.active_area_id is not None:
            if marathon is None or not marathon.has_area(group.active_area_id):
                logger.info(
                    "Group %s left area %s by switching marathon",
                    group.id,
                    group.active_area_id,
                )
                self._set_active_area(None)
        return True

    def select_area(self, area_id: str | None) -> bool:
        if area_id is None:
            self._area_key = None
            return True
        if self.store.get_area(self._marathon_id, area_id) is None:
            logger.warning(
                "Cannot select area %s outside marathon %s", area_id, self._marathon_id
            )
            return False
        self._area_key = (self._marathon_id, area_id)
        return True

    def start_engagement(
        self, marathon_id: str, area_id: str, group_id: str
    ) -> EngagementResult:
        group = self._active_group
        if group is None:
            result = EngagementResult.NO_ACTIVE_GROUP
        elif group.id != group_id:
            result = EngagementResult.GROUP_MISMATCH
        elif self.store.get_area(marathon_id, area_id) is None:
            result = EngagementResult.NOT_FOUND
        else:
            result = EngagementResult.STARTED

        if result != EngagementResult.STARTED:
            logger.warning(
                "Group %s cannot start in area %s of %s: %s",
                group_id,
                area_id,
                marathon_id,
                result,
            )
            self.bus.publish(
                EngagementRejected(
                    group_id=group_id,
                    marathon_id=marathon_id,
                    area_id=area_id,
                    reason=result.value,
                )
            )
            return result

        self._set_active_area(area_id)
        self._area_key = (marathon_id, area_id)
        logger.info(
            "Group %s started in area %s of marathon %s", group_id, area_id, marathon_id
        )
        self.bus.publish(
            EngagementStarted(group_id=group_id, marathon_id=marathon_id, area_id=area_id)
        )
        return result

    def end_engagement(self, last_point_id: str | None = None) -> bool:
        """Set the active group idle. ``last_point_id`` is only reported."""
        group = self._active_group
        if group is None:
            logger.warning("No active group, nothing to end")
            return False

        area_id = group.active_area_id
        marathon = self.store.find_marathon_for_area(area_id)
        self._set_active_area(None)
        logger.info(
            "Group %s ended in area %s (last point: %s)", group.id, area_id, last_point_id
        )
        self.bus.publish(
            EngagementEnded(
                group_id=group.id,
                marathon_id=marathon.id if marathon else None,
                area_id=area_id,
                last_point_id=last_point_id,
            )
        )
        return True

    def reset(self) -> None:
        """Forget all selections and open the default marathon."""
        self._marathon_id = None
        self._area_key = None
        self._set_active_area(None)
        current = self.store.find_current()
        if current is not None:
            self.select_marathon(current.id)

    def _set_active_area(self, area_id: str | None) -> None:
        if self._active_group is not None:
            self._active_group = self._active_group.model_copy(
                update={"active_area_id": area_id}
            )
