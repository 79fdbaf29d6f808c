"""Seed station list: the stations the server ships with."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SEED: list[dict[str, Any]] = [
    {
        "id": "liquid_radio",
        "title": "Liquid Radio",
        "description": "Drum and bass, liquid funk and chill.",
        "source": [
            {"src": "https://stream.liquidradio.pro/liquidradio.mp3", "type": "audio/mpeg"},
        ],
    },
]


def load_seed(stations_file: str = "") -> list[Any]:
    """Return the raw seed records.

    Reads *stations_file* (a JSON array) when given, else the built-in list.
    An unreadable or malformed file yields an empty list; records are not
    validated here.
    """
    if not stations_file:
        return [dict(record) for record in DEFAULT_SEED]

    path = Path(stations_file)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Could not read seed stations from %s: %s", path, exc)
        return []

    if not isinstance(data, list):
        logger.error("Seed file %s must contain a JSON array, got %s", path, type(data).__name__)
        return []
    logger.info("Loaded %d seed station record(s) from %s", len(data), path)
    return data
