"""Seed catalog for the marathon store.

The built-in catalog is plain data in the same shape the JSON seed files use,
so both paths go through the same validation in ``load_seed``.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path

from marathon_tracker.domain.models import Marathon

logger = logging.getLogger(__name__)

DEFAULT_GROUP_ID = "group-default"
DEFAULT_GROUP_NAME = "Default Group Alpha"

SEED_MARATHONS: list[dict] = [
    {
        "id": "marathon-1",
        "name": "Spring Outreach 2024",
        "date": "2024-05-15",
        "status": "CURRENT",
        "admin_prepared": True,
        "areas": [
            {
                "id": "area-1a",
                "name": "Downtown District",
                "start_point": {
                    "lat": 40.7128,
                    "lng": -74.0060,
                    "address": "123 Main St, Downtown",
                },
                "house_numbers": [
                    {"id": "hn-1", "address": "101 Main St", "status": "PENDING"},
                    {"id": "hn-2", "address": "102 Main St", "status": "PENDING"},
                    {
                        "id": "hn-3",
                        "address": "103 Main St",
                        "status": "RUNG_BELL",
                        "notes": "Rang bell, no answer at 2 PM",
                        "last_interaction_time": "2024-05-15T14:00:00Z",
                    },
                ],
            },
            {
                "id": "area-1b",
                "name": "Suburban Heights",
                "start_point": {
                    "lat": 40.7500,
                    "lng": -73.9800,
                    "address": "456 Oak Ave, Suburbs",
                },
                "house_numbers": [
                    {"id": "hn-4", "address": "201 Oak Ave", "status": "PENDING"},
                    {"id": "hn-5", "address": "202 Oak Ave", "status": "PENDING"},
                ],
            },
        ],
        "meeting_point": {
            "lat": 40.7300,
            "lng": -73.9900,
            "address": "Central Park South Entrance",
        },
    },
    {
        "id": "marathon-2",
        "name": "Summer Evangelism Drive",
        "date": "2024-07-20",
        "status": "UPCOMING",
        "admin_prepared": True,
        "areas": [
            {
                "id": "area-2a",
                "name": "Riverside Community",
                "house_numbers": [
                    {"id": "hn-6", "address": "301 River Rd", "status": "PENDING"},
                    {"id": "hn-7", "address": "302 River Rd", "status": "PENDING"},
                ],
            },
        ],
    },
    {
        "id": "marathon-3",
        "name": "Winter Hope Campaign",
        "date": "2023-12-10",
        "status": "PAST",
        "admin_prepared": True,
        "areas": [
            {
                "id": "area-3a",
                "name": "Old Town",
                "house_numbers": [
                    {
                        "id": "hn-8",
                        "address": "701 Historic Ln",
                        "status": "SAVED",
                        "contact_name": "John Doe",
                        "contact_phone": "555-1234",
                    },
                    {
                        "id": "hn-9",
                        "address": "702 Historic Ln",
                        "status": "FOLLOW_UP",
                        "notes": "Requested a Bible study",
                    },
                    {
                        "id": "hn-10",
                        "address": "703 Historic Ln",
                        "status": "NO_INTEREST",
                        "notes": "Politely declined literature.",
                    },
                ],
            },
        ],
    },
]


def load_seed(path: str | Path | None = None) -> list[Marathon]:
    """Return a fresh list of marathons from *path*, or the built-in catalog.

    Every call builds new model objects, so nothing is shared between loads.
    Raises ``OSError``, ``json.JSONDecodeError`` or
    ``pydantic.ValidationError`` when the seed cannot be read or is malformed.
    """
    if path is None:
        raw = copy.deepcopy(SEED_MARATHONS)
    else:
        logger.info("Reading seed data from %s", path)
        raw = json.loads(Path(path).read_text(encoding="utf-8"))

    if not isinstance(raw, list):
        raise ValueError("Seed data must be a list of marathons")
    return [Marathon.model_validate(item) for item in raw]
