"""Station registry utilities: pure logic, no I/O.

A registry is a plain ``list[Station]`` owned by the caller.  Every
function takes it explicitly and **mutates it in place**; nothing here keeps
a reference to it.

Provides:
- Lookup by id (case-insensitive)
- Validated add / update / idempotent remove
- Silent merge of externally sourced records (stored snapshot)
- Seeding from raw records and snapshot serialization
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from radio_core.errors import DuplicateStation, NotFound, ValidationFailure
from radio_core.models import Station, construct_station, normalize_id

logger = logging.getLogger(__name__)

NOT_FOUND = -1


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def find_index(registry: Sequence[Station], station_id: str) -> int:
    """Index of the station with *station_id*, or ``NOT_FOUND`` (-1)."""
    key = normalize_id(station_id)
    for index, station in enumerate(registry):
        if normalize_id(station.id) == key:
            return index
    return NOT_FOUND


def get_station(registry: Sequence[Station], station_id: str) -> Station:
    """Return the station with *station_id* or raise ``NotFound``."""
    index = find_index(registry, station_id)
    if index == NOT_FOUND:
        raise NotFound(station_id)
    return registry[index]


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

def add(
    registry: List[Station],
    station_id: str,
    title: str,
    description: str,
    source: Sequence[Any],
) -> Station:
    """Validate and append a new station.

    Raises ``DuplicateStation`` if the id is taken (checked first), or the
    ``ValidationFailure`` from construction.  The registry is untouched on
    failure.
    """
    if find_index(registry, station_id) != NOT_FOUND:
        raise DuplicateStation(station_id)
    station = construct_station(station_id, title, description, source)
    registry.append(station)
    return station


def add_station(registry: List[Station], station: Station) -> Station:
    """Append an already constructed station, rejecting duplicate ids."""
    if find_index(registry, station.id) != NOT_FOUND:
        raise DuplicateStation(station.id)
    registry.append(station)
    return station


def add_from_external_record(
    registry: List[Station],
    record: Any,
    log: Optional[logging.Logger] = None,
) -> Optional[Station]:
    """Merge one stored / external record, discarding it on any problem.

    Duplicates are expected when merging two lists and are dropped quietly
    (debug level).  Malformed records are dropped with a warning.  Returns
    the merged station, or ``None`` if the record was discarded.
    """
    log = log or logger
    try:
        station = Station.from_serialized(record)
    except ValidationFailure as exc:
        log.warning("Discarding malformed station record %r: %s", record, exc)
        return None

    try:
        return add_station(registry, station)
    except DuplicateStation:
        log.debug("Discarding duplicate station record '%s'", station.id)
        return None


def remove(registry: List[Station], station_id: str) -> bool:
    """Remove the station with *station_id*.  No-op if absent."""
    index = find_index(registry, station_id)
    if index == NOT_FOUND:
        return False
    del registry[index]
    return True


def update(registry: List[Station], station_id: str, replacement: Station) -> Station:
    """Replace the station with *station_id* in place, keeping its position.

    Raises ``NotFound`` if *station_id* is absent, ``DuplicateStation`` if the
    replacement's id belongs to a different entry.
    """
    if not isinstance(replacement, Station):
        raise ValidationFailure("Replacement must be a validated station")
    index = find_index(registry, station_id)
    if index == NOT_FOUND:
        raise NotFound(station_id)
    other = find_index(registry, replacement.id)
    if other not in (NOT_FOUND, index):
        raise DuplicateStation(replacement.id)
    registry[index] = replacement
    return replacement


# ---------------------------------------------------------------------------
# Seeding / serialization
# ---------------------------------------------------------------------------

def seed_registry(
    records: Iterable[Any],
    log: Optional[logging.Logger] = None,
) -> Tuple[List[Station], List[Any]]:
    """Build a fresh registry from seed records.

    Returns
    -------
    (registry, failed_records)
    """
    log = log or logger
    registry: List[Station] = []
    failed: List[Any] = []
    for record in records:
        try:
            add_station(registry, Station.from_serialized(record))
        except (ValidationFailure, DuplicateStation):
            failed.append(record)
    if failed:
        log.error("Some stations failed to parse: %r", failed)
    return registry, failed


def serialize_registry(registry: Sequence[Station]) -> str:
    """JSON text of the whole registry, in order."""
    return json.dumps([station.to_serialized() for station in registry])
