"""FastAPI application: entry point for the marathon tracker service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request

from marathon_tracker.config import Settings, get_settings
from marathon_tracker.domain.bus import EventBus
from marathon_tracker.domain.events import InteractionLogged
from marathon_tracker.domain.handlers import HandlerRegistry
from marathon_tracker.domain.models import (
    ActivityEntry,
    EndEngagementRequest,
    EngagementResult,
    Group,
    InitializationResult,
    InitStatus,
    InteractionPatch,
    InteractionPoint,
    Marathon,
    SelectAreaRequest,
    SelectMarathonRequest,
    SessionView,
    StartEngagementRequest,
    StatisticsSnapshot,
)
from marathon_tracker.logging_config import setup_logging
from marathon_tracker.repos.memory import ActivityRepository, MarathonStore
from marathon_tracker.services.bootstrap import initialize, reset_to_seed
from marathon_tracker.services.session import SessionState
from marathon_tracker.services.statistics import compute

logger = logging.getLogger(__name__)


class Tracker:
    """Everything one running service instance owns, wired together."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.bus = EventBus()
        self.store = MarathonStore()
        self.activity_repo = ActivityRepository(limit=settings.activity_limit)
        self.handlers = HandlerRegistry(bus=self.bus, activity_repo=self.activity_repo)
        self.session = SessionState(
            store=self.store,
            bus=self.bus,
            group=Group(id=settings.group_id, name=settings.group_name),
        )
        self.init_result = InitializationResult()

    async def initialize(self) -> InitializationResult:
        self.init_result = await initialize(
            self.store, self.session, self.bus, self.settings.seed_path
        )
        return self.init_result

    async def reset(self) -> InitializationResult:
        # Data routes answer 503 while the store is being refilled
        self.init_result = InitializationResult(status=InitStatus.PENDING)
        self.init_result = await reset_to_seed(
            self.store, self.session, self.bus, self.settings.seed_path
        )
        return self.init_result


# ── Dependencies ──────────────────────────────────────────────────────


def get_tracker(request: Request) -> Tracker:
    return request.app.state.tracker


def ready_tracker(tracker: Tracker = Depends(get_tracker)) -> Tracker:
    """Block data access until initialization has succeeded."""
    result = tracker.init_result
    if result.status != InitStatus.READY:
        raise HTTPException(
            status_code=503,
            detail=result.error or "Marathon data is not loaded yet",
        )
    return tracker


# ── Routes ────────────────────────────────────────────────────────────

router = APIRouter()


@router.get("/health", response_model=InitializationResult)
def health(tracker: Tracker = Depends(get_tracker)) -> InitializationResult:
    """Report whether marathon data is loaded."""
    return tracker.init_result


@router.post("/reset", response_model=InitializationResult)
async def reset(tracker: Tracker = Depends(get_tracker)) -> InitializationResult:
    """Discard all state and reload the seed data."""
    result = await tracker.reset()
    if not result.ok:
        raise HTTPException(status_code=503, detail=result.error)
    return result


@router.get("/marathons", response_model=list[Marathon])
def list_marathons(tracker: Tracker = Depends(ready_tracker)) -> list[Marathon]:
    return tracker.store.list_all()


@router.get("/marathons/upcoming", response_model=list[Marathon])
def list_upcoming(tracker: Tracker = Depends(ready_tracker)) -> list[Marathon]:
    """Upcoming marathons that an admin has prepared."""
    return tracker.store.list_upcoming()


@router.get("/marathons/{marathon_id}", response_model=Marathon)
def get_marathon(
    marathon_id: str, tracker: Tracker = Depends(ready_tracker)
) -> Marathon:
    marathon = tracker.store.get(marathon_id)
    if marathon is None:
        raise HTTPException(status_code=404, detail="Marathon not found")
    return marathon


@router.patch(
    "/marathons/{marathon_id}/areas/{area_id}/points/{point_id}",
    response_model=InteractionPoint,
)
def log_interaction(
    marathon_id: str,
    area_id: str,
    point_id: str,
    patch: InteractionPatch,
    tracker: Tracker = Depends(ready_tracker),
) -> InteractionPoint:
    """Record the outcome of visiting a house."""
    if not patch.changes():
        raise HTTPException(status_code=422, detail="Patch contains no changes")

    updated = tracker.store.update_point(marathon_id, area_id, point_id, patch)
    if updated is None:
        raise HTTPException(status_code=404, detail="Interaction point not found")

    tracker.bus.publish(
        InteractionLogged(
            marathon_id=marathon_id,
            area_id=area_id,
            point_id=point_id,
            status=updated.status,
        )
    )
    return updated


@router.get("/session", response_model=SessionView)
def get_session(tracker: Tracker = Depends(ready_tracker)) -> SessionView:
    return tracker.session.view()


@router.post("/session/marathon", response_model=SessionView)
def select_marathon(
    body: SelectMarathonRequest, tracker: Tracker = Depends(ready_tracker)
) -> SessionView:
    if not tracker.session.select_marathon(body.marathon_id):
        raise HTTPException(status_code=404, detail="Marathon not found")
    return tracker.session.view()


@router.post("/session/area", response_model=SessionView)
def select_area(
    body: SelectAreaRequest, tracker: Tracker = Depends(ready_tracker)
) -> SessionView:
    if not tracker.session.select_area(body.area_id):
        raise HTTPException(
            status_code=404, detail="Area not found in selected marathon"
        )
    return tracker.session.view()


@router.get("/session/last-interaction", response_model=InteractionPoint | None)
def last_interaction(
    tracker: Tracker = Depends(ready_tracker),
) -> InteractionPoint | None:
    """The house most recently visited in the selected area, if any."""
    return tracker.session.last_interaction()


@router.post("/engagements/start", response_model=SessionView)
def start_engagement(
    body: StartEngagementRequest, tracker: Tracker = Depends(ready_tracker)
) -> SessionView:
    result = tracker.session.start_engagement(
        body.marathon_id, body.area_id, body.group_id
    )
    if result == EngagementResult.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Area not found")
    if result != EngagementResult.STARTED:
        raise HTTPException(status_code=403, detail=f"Cannot start: {result}")
    return tracker.session.view()


@router.post("/engagements/end", response_model=SessionView)
def end_engagement(
    body: EndEngagementRequest, tracker: Tracker = Depends(ready_tracker)
) -> SessionView:
    if not tracker.session.end_engagement(body.last_point_id):
        raise HTTPException(status_code=409, detail="No active group")
    return tracker.session.view()


@router.get("/statistics", response_model=StatisticsSnapshot)
def statistics(tracker: Tracker = Depends(ready_tracker)) -> StatisticsSnapshot:
    return compute(tracker.store.list_all())


@router.get("/activity", response_model=list[ActivityEntry])
def list_activity(
    marathon_id: str | None = None, tracker: Tracker = Depends(ready_tracker)
) -> list[ActivityEntry]:
    if marathon_id is not None:
        return tracker.activity_repo.list_for_marathon(marathon_id)
    return tracker.activity_repo.list_all()


# ── Application factory ───────────────────────────────────────────────


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build a FastAPI app with its own, freshly wired Tracker."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        result = await app.state.tracker.initialize()
        if not result.ok:
            # Keep serving so the client can see the error and retry via /reset
            logger.error("Startup initialization failed: %s", result.error)
        yield

    app = FastAPI(title="Marathon Tracker", lifespan=lifespan)
    app.state.tracker = Tracker(settings)
    app.include_router(router)
    return app


app = create_app()
