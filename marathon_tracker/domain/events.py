"""Domain events emitted while a marathon is being worked."""

from __future__ import annotations

from pydantic import BaseModel

from marathon_tracker.domain.models import Outcome


class SeedLoaded(BaseModel):
    """Fired when the store has been (re-)filled from seed data."""

    marathon_count: int


class InteractionLogged(BaseModel):
    """Fired after an interaction point was updated."""

    marathon_id: str
    area_id: str
    point_id: str
    status: Outcome


class EngagementStarted(BaseModel):
    """Fired when a group starts working an area."""

    group_id: str
    marathon_id: str
    area_id: str


class EngagementEnded(BaseModel):
    """Fired when a group stops working its area."""

    group_id: str
    marathon_id: str | None = None
    area_id: str | None = None
    last_point_id: str | None = None


class EngagementRejected(BaseModel):
    """Fired when a start request fails the group identity check or lookup."""

    group_id: str
    marathon_id: str
    area_id: str
    reason: str
