"""One-shot asynchronous initialization of the marathon store."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from marathon_tracker.domain.bus import EventBus
from marathon_tracker.domain.events import SeedLoaded
from marathon_tracker.domain.models import InitializationResult, InitStatus
from marathon_tracker.repos.memory import MarathonStore
from marathon_tracker.repos.seed import load_seed
from marathon_tracker.services.session import SessionState

logger = logging.getLogger(__name__)


async def initialize(
    store: MarathonStore,
    session: SessionState,
    bus: EventBus,
    seed_path: str | Path | None = None,
) -> InitializationResult:
    """Load seed data into *store* and point *session* at the default marathon.

    Failures are returned, not raised: the store is left empty and the result
    carries the reason so the caller can offer a retry.
    """
    try:
        marathons = await asyncio.to_thread(load_seed, seed_path)
        store.load(marathons)
    except (OSError, ValueError) as exc:
        # ValueError covers json.JSONDecodeError, pydantic.ValidationError and
        # repeated marathon ids
        logger.exception("Failed to load marathon data")
        store.clear()
        session.reset()
        return InitializationResult(
            status=InitStatus.FAILED,
            error=f"Failed to load marathon data: {exc}",
        )

    session.reset()
    bus.publish(SeedLoaded(marathon_count=len(marathons)))
    logger.info("Loaded %d marathons", len(marathons))
    return InitializationResult(status=InitStatus.READY, marathon_count=len(marathons))


async def reset_to_seed(
    store: MarathonStore,
    session: SessionState,
    bus: EventBus,
    seed_path: str | Path | None = None,
) -> InitializationResult:
    """Retry action: discard all state and initialize again from scratch."""
    logger.info("Resetting marathon data to seed")
    store.clear()
    return await initialize(store, session, bus, seed_path)
