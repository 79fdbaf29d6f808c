"""Persistence synchronizer: mirrors the registry into key/value storage.

One-directional: the registry is written out in full after every
mutation, and the stored snapshot is read back exactly once at startup to
merge user stations on top of the seed list.  A ``None`` store means storage
is unavailable; every operation then becomes a no-op.
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional

import aiosqlite

from radio_app.db import KeyValueStore
from radio_core.errors import CorruptedPersistence
from radio_core.models import Station
from radio_core.registry import add_from_external_record, serialize_registry

logger = logging.getLogger(__name__)

STATIONS_KEY = "stations"
VISUALIZER_KEY = "visualizer"


def _parse_snapshot(raw: str) -> list:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CorruptedPersistence(f"Stored stations are not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise CorruptedPersistence(f"Stored stations must be a JSON array, got {type(data).__name__}")
    return data


class StationSynchronizer:
    """Reads the stored snapshot once and writes it after every change."""

    def __init__(
        self,
        store: Optional[KeyValueStore],
        *,
        key: str = STATIONS_KEY,
        log: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.key = key
        self.log = log or logger

    @property
    def enabled(self) -> bool:
        return self.store is not None

    async def reconcile(self, registry: List[Station]) -> int:
        """Merge stored stations into the seeded *registry*.

        Seeded entries always win on id collisions.  Returns the number of
        stations merged in.  Never raises for bad stored data.
        """
        if self.store is None:
            return 0

        try:
            raw = await self.store.get(self.key)
        except aiosqlite.Error:
            self.log.exception("Could not read station snapshot from storage")
            return 0
        if raw is None:
            return 0

        try:
            records = _parse_snapshot(raw)
        except CorruptedPersistence as exc:
            self.log.error("Could not parse station config from storage: %s", exc)
            await self._erase()
            return 0

        self.log.debug("Loaded %d station record(s) from storage", len(records))
        merged = 0
        for record in records:
            if add_from_external_record(registry, record, log=self.log) is not None:
                merged += 1
        return merged

    async def save(self, registry: List[Station]) -> None:
        """Write the whole registry.  Storage errors are logged, not raised."""
        if self.store is None:
            return
        try:
            await self.store.set(self.key, serialize_registry(registry))
        except aiosqlite.Error:
            self.log.exception("Could not write station snapshot to storage")

    async def _erase(self) -> None:
        try:
            await self.store.remove(self.key)  # type: ignore[union-attr]
        except aiosqlite.Error:
            self.log.exception("Could not erase corrupted station snapshot")


class PreferenceStore:
    """Player preferences (currently only the visualizer toggle)."""

    def __init__(self, store: Optional[KeyValueStore]):
        self.store = store

    async def load_visualizer(self, default: bool = True) -> bool:
        if self.store is None:
            return default
        try:
            raw = await self.store.get(VISUALIZER_KEY)
        except aiosqlite.Error:
            logger.exception("Could not read visualizer preference")
            return default
        if raw is None:
            return default
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            value = None
        if not isinstance(value, bool):
            logger.warning("Ignoring invalid visualizer preference %r", raw)
            return default
        return value

    async def save_visualizer(self, enabled: bool) -> None:
        if self.store is None:
            return
        try:
            await self.store.set(VISUALIZER_KEY, json.dumps(enabled))
        except aiosqlite.Error:
            logger.exception("Could not write visualizer preference")
