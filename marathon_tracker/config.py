"""Environment configuration.

Values come from the process environment, optionally pre-populated from a
``.env`` file (searched from the working directory) via python-dotenv:

    TRACKER_SEED_PATH   JSON seed file; the built-in catalog is used when unset
    TRACKER_LOG_LEVEL   root log level (default INFO)
    TRACKER_GROUP_ID    id of the viewer's group (default group-default)
    TRACKER_GROUP_NAME  display name of the viewer's group
    TRACKER_ACTIVITY_LIMIT  activity log entries kept before the oldest drop
                            off (default 1000)
"""

from __future__ import annotations

import logging
import os

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from marathon_tracker.repos.memory import ActivityRepository
from marathon_tracker.repos.seed import DEFAULT_GROUP_ID, DEFAULT_GROUP_NAME

_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseModel):
    seed_path: str | None = None
    log_level: str = "INFO"
    group_id: str = DEFAULT_GROUP_ID
    group_name: str = DEFAULT_GROUP_NAME
    activity_limit: int = Field(default=ActivityRepository.DEFAULT_LIMIT, gt=0)


def get_settings() -> Settings:
    """Read settings from the environment (after loading ``.env``)."""
    load_dotenv(find_dotenv(usecwd=True))

    log_level = os.environ.get("TRACKER_LOG_LEVEL", "INFO").upper()
    if log_level not in _VALID_LEVELS:
        logging.warning(
            f"Log level '{log_level}' is invalid. Expected one of "
            f"{sorted(_VALID_LEVELS)}. Defaulting to INFO."
        )
        log_level = "INFO"

    raw_limit = os.environ.get("TRACKER_ACTIVITY_LIMIT", "")
    activity_limit = ActivityRepository.DEFAULT_LIMIT
    if raw_limit:
        if raw_limit.isdigit() and int(raw_limit) > 0:
            activity_limit = int(raw_limit)
        else:
            logging.warning(
                f"Activity limit '{raw_limit}' is not a positive integer. "
                f"Defaulting to {activity_limit}."
            )

    return Settings(
        seed_path=os.environ.get("TRACKER_SEED_PATH") or None,
        log_level=log_level,
        group_id=os.environ.get("TRACKER_GROUP_ID", DEFAULT_GROUP_ID),
        group_name=os.environ.get("TRACKER_GROUP_NAME", DEFAULT_GROUP_NAME),
        activity_limit=activity_limit,
    )


__all__ = ["Settings", "get_settings"]
