"""Domain models for the outreach marathon tracker."""

from __future__ import annotations

import uuid
from datetime import date as CalendarDate, datetime, timezone
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class MarathonStatus(StrEnum):
    UPCOMING = "UPCOMING"
    CURRENT = "CURRENT"
    PAST = "PAST"


class Outcome(StrEnum):
    PENDING = "PENDING"
    SAVED = "SAVED"
    NO_INTEREST = "NO_INTEREST"
    FOLLOW_UP = "FOLLOW_UP"
    NOT_HOME = "NOT_HOME"
    RUNG_BELL = "RUNG_BELL"


# Contact details are only kept for these outcomes.
CONTACT_OUTCOMES = frozenset({Outcome.SAVED, Outcome.FOLLOW_UP})


class ActivityType(StrEnum):
    SEED_LOADED = "seed_loaded"
    INTERACTION_LOGGED = "interaction_logged"
    ENGAGEMENT_STARTED = "engagement_started"
    ENGAGEMENT_ENDED = "engagement_ended"
    ENGAGEMENT_REJECTED = "engagement_rejected"


class EngagementResult(StrEnum):
    STARTED = "started"
    NO_ACTIVE_GROUP = "no_active_group"
    GROUP_MISMATCH = "group_mismatch"
    NOT_FOUND = "not_found"


class InitStatus(StrEnum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float
    address: str | None = None


class InteractionPoint(BaseModel):
    """A single house (or flat, or shop) that can be visited."""

    model_config = ConfigDict(frozen=True)

    id: str
    address: str
    status: Outcome = Outcome.PENDING
    notes: str | None = None
    contact_name: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    last_interaction_time: datetime | None = None


class Area(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    house_numbers: tuple[InteractionPoint, ...] = ()
    start_point: GeoPoint | None = None


class Marathon(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    date: CalendarDate
    status: MarathonStatus
    admin_prepared: bool = False
    areas: tuple[Area, ...] = ()
    meeting_point: GeoPoint | None = None

    def has_area(self, area_id: str | None) -> bool:
        return any(area.id == area_id for area in self.areas)


class Group(BaseModel):
    id: str
    name: str
    active_area_id: str | None = None


class ActivityEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    timestamp: datetime = Field(default_factory=_utcnow)
    type: ActivityType
    marathon_id: str | None = None
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Derived statistics
# ---------------------------------------------------------------------------


class MarathonStats(BaseModel):
    marathon_id: str
    marathon_name: str
    outcomes: dict[Outcome, int] = Field(default_factory=dict)
    houses_visited: int = 0


class StatisticsSnapshot(BaseModel):
    total_marathons: int
    total_completed_marathons: int
    participants_estimate: int
    overall_outcomes: dict[Outcome, int] = Field(default_factory=dict)
    saved_count: int = 0
    marathon_stats: list[MarathonStats] = Field(default_factory=list)


class InitializationResult(BaseModel):
    status: InitStatus = InitStatus.PENDING
    marathon_count: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == InitStatus.READY


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class InteractionPatch(BaseModel):
    """Partial update for an InteractionPoint. ``None`` means "leave as is"."""

    model_config = ConfigDict(extra="forbid")

    address: str | None = None
    status: Outcome | None = None
    notes: str | None = None
    contact_name: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)


class SelectMarathonRequest(BaseModel):
    marathon_id: str | None = None


class SelectAreaRequest(BaseModel):
    area_id: str | None = None


class StartEngagementRequest(BaseModel):
    marathon_id: str
    area_id: str
    group_id: str


class EndEngagementRequest(BaseModel):
    last_point_id: str | None = None


class SessionView(BaseModel):
    selected_marathon: Marathon | None = None
    selected_area: Area | None = None
    active_group: Group | None = None
