"""Application state: the single owner of the station registry.

Wires the registry to the synchronizer, the session and the editor, and
runs the startup sequence: seed → reconcile with storage → initial station.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from radio_app.config import Settings
from radio_app.db import KeyValueStore
from radio_app.editor import StationEditor
from radio_app.persistence import PreferenceStore, StationSynchronizer
from radio_app.session import Player, PlayerState, StationSession
from radio_core.models import Station
from radio_core.registry import seed_registry

logger = logging.getLogger(__name__)


class RadioState:
    """Everything one player session needs, created once at startup."""

    def __init__(
        self,
        registry: List[Station],
        *,
        settings: Settings,
        store: Optional[KeyValueStore],
        player: Optional[Player] = None,
    ):
        self.registry = registry
        self.settings = settings
        self.player = player if player is not None else PlayerState()
        self.synchronizer = StationSynchronizer(store)
        self.preferences = PreferenceStore(store)
        self.session = StationSession(
            registry,
            self.player,
            default_station=settings.default_station,
            app_title=settings.app_title,
        )
        self.editor = StationEditor(
            registry,
            self.registry_changed,
            title_max_length=settings.title_max_length,
            replace_all_spaces=settings.replace_all_spaces_in_ids,
        )
        self.failed_stations: list[Any] = []

    @classmethod
    async def startup(
        cls,
        seed: Sequence[Any],
        *,
        settings: Settings,
        store: Optional[KeyValueStore],
        player: Optional[Player] = None,
    ) -> RadioState:
        """Seed, reconcile with storage and pick the initial station."""
        registry, failed = seed_registry(seed)
        state = cls(registry, settings=settings, store=store, player=player)
        state.failed_stations = failed

        merged = await state.synchronizer.reconcile(registry)
        logger.info("Registry ready: %d station(s), %d from storage", len(registry), merged)

        corrected = await state.session.start(settings.start_path)
        if corrected:
            logger.debug("Initial route corrected to %s", corrected)
        return state

    async def registry_changed(self) -> None:
        """Persist the registry and keep the current station consistent."""
        await self.synchronizer.save(self.registry)
        await self.session.resync()
