"""Domain event handlers: wired up at application startup."""

from __future__ import annotations

import logging

from marathon_tracker.domain.bus import EventBus
from marathon_tracker.domain.events import (
    EngagementEnded,
    EngagementRejected,
    EngagementStarted,
    InteractionLogged,
    SeedLoaded,
)
from marathon_tracker.domain.models import ActivityEntry, ActivityType
from marathon_tracker.repos.memory import ActivityRepository

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Records every domain event published on the bus in the activity log."""

    def __init__(self, bus: EventBus, activity_repo: ActivityRepository) -> None:
        self.bus = bus
        self.activity_repo = activity_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(SeedLoaded, self.on_seed_loaded)
        self.bus.subscribe(InteractionLogged, self.on_interaction_logged)
        self.bus.subscribe(EngagementStarted, self.on_engagement_started)
        self.bus.subscribe(EngagementEnded, self.on_engagement_ended)
        self.bus.subscribe(EngagementRejected, self.on_engagement_rejected)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_seed_loaded(self, event: SeedLoaded) -> None:
        # A reload starts a fresh log; entries would point at discarded state.
        self.activity_repo.clear()
        self.activity_repo.add(
            ActivityEntry(
                type=ActivityType.SEED_LOADED,
                payload={"marathon_count": event.marathon_count},
            )
        )

    def on_interaction_logged(self, event: InteractionLogged) -> None:
        self.activity_repo.add(
            ActivityEntry(
                type=ActivityType.INTERACTION_LOGGED,
                marathon_id=event.marathon_id,
                payload={
                    "area_id": event.area_id,
                    "point_id": event.point_id,
                    "status": event.status.value,
                },
            )
        )

    def on_engagement_started(self, event: EngagementStarted) -> None:
        self.activity_repo.add(
            ActivityEntry(
                type=ActivityType.ENGAGEMENT_STARTED,
                marathon_id=event.marathon_id,
                payload={"group_id": event.group_id, "area_id": event.area_id},
            )
        )

    def on_engagement_ended(self, event: EngagementEnded) -> None:
        self.activity_repo.add(
            ActivityEntry(
                type=ActivityType.ENGAGEMENT_ENDED,
                marathon_id=event.marathon_id,
                payload={
                    "group_id": event.group_id,
                    "area_id": event.area_id,
                    "last_point_id": event.last_point_id,
                },
            )
        )

    def on_engagement_rejected(self, event: EngagementRejected) -> None:
        logger.debug("Recording rejected engagement for group %s", event.group_id)
        self.activity_repo.add(
            ActivityEntry(
                type=ActivityType.ENGAGEMENT_REJECTED,
                marathon_id=event.marathon_id,
                payload={
                    "group_id": event.group_id,
                    "area_id": event.area_id,
                    "reason": event.reason,
                },
            )
        )
