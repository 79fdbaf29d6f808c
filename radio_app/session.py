"""Station session: which station is current, driven by routing.

Holds at most one active station (a reference into the registry, never a
copy).  After every switch the player is told to reload, but only once the
observers have seen the new station and one scheduling tick has passed.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol, Sequence
from urllib.parse import quote

from radio_core.errors import UnknownStation
from radio_core.models import Station, StreamSource, normalize_id
from radio_core.registry import NOT_FOUND, find_index

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Player port
# ---------------------------------------------------------------------------

class Player(Protocol):
    def reload(self, sources: Sequence[StreamSource], play: bool) -> None:
        ...


class PlayerState:
    """Player collaborator for the web page: records what it was told.

    The page polls it and (re)loads its audio element whenever
    ``reload_count`` changes.
    """

    __slots__ = ("sources", "play", "reload_count")

    def __init__(self) -> None:
        self.sources: tuple[StreamSource, ...] = ()
        self.play = False
        self.reload_count = 0

    def reload(self, sources: Sequence[StreamSource], play: bool) -> None:
        self.sources = tuple(sources)
        self.play = play
        self.reload_count += 1


# ---------------------------------------------------------------------------
# Session states
# ---------------------------------------------------------------------------

class SessionState(str, Enum):
    NO_STATION = "no_station"
    ACTIVE = "active"


def station_id_from_path(path: str) -> str:
    """Last segment of an already-decoded path.  ``""`` for the root path."""
    return path.rstrip("/").rsplit("/", 1)[-1]


def station_path(station_id: str) -> str:
    return "/" + quote(station_id, safe="")


class StationSession:
    """Current-station state machine over a registry owned elsewhere."""

    def __init__(
        self,
        registry: List[Station],
        player: Player,
        *,
        default_station: str,
        app_title: str = "Liquid Radio",
    ):
        self.registry = registry
        self.player = player
        self.default_station = default_station
        self.app_title = app_title
        self.current: Optional[Station] = None
        self._started = False
        self._observers: list[Callable[[Optional[Station]], Any]] = []

    # -- queries ------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return SessionState.NO_STATION if self.current is None else SessionState.ACTIVE

    @property
    def page_title(self) -> str:
        if self.current is None:
            return self.app_title
        return f"{self.current.title} | {self.app_title}"

    def subscribe(self, callback: Callable[[Optional[Station]], Any]) -> None:
        """Call *callback* with the new current station after every change."""
        self._observers.append(callback)

    def to_status_dict(self) -> dict[str, Any]:
        """Serialize for the player API."""
        return {
            "state": self.state.value,
            "station": self.current.to_serialized() if self.current else None,
            "page_title": self.page_title,
        }

    # -- transitions --------------------------------------------------------

    async def switch_station(self, station_id: str, play: bool = True) -> None:
        """Make *station_id* current and reload the player.

        No-op if it is already current.  Raises ``UnknownStation`` (state
        unchanged) if the registry does not contain it.
        """
        if self.current is not None and normalize_id(self.current.id) == normalize_id(station_id):
            return

        index = find_index(self.registry, station_id)
        if index == NOT_FOUND:
            raise UnknownStation(station_id)

        await self._activate(self.registry[index], play)
        logger.debug("Switched station to %s", self.current.title)

    async def route_changed(self, path: str) -> Optional[str]:
        """Follow a navigation to *path* (already URL-decoded).

        Returns the corrected path when the route did not name a known
        station, else ``None``.  The session then falls back to the default
        station, or the first one if the default is gone.  With an empty
        registry the session has no station and the correction is ``/``.
        """
        logger.debug("Route changed to %s", path)
        station_id = station_id_from_path(path)
        try:
            await self.switch_station(station_id)
        except UnknownStation:
            logger.debug("Route %s doesn't contain a valid station id, fallback to default", path)
            fallback = self._fallback_id()
            if fallback is None:
                if self.current is not None:
                    self.current = None
                    self._notify()
                return "/" if station_id else None
            await self.switch_station(fallback)
            return station_path(fallback)
        return None

    async def start(self, initial_path: str = "/") -> Optional[str]:
        """The one startup transition, after reconciliation.  Never plays.

        Returns the corrected path if *initial_path* was not a known
        station.  Raises ``UnknownStation`` if even the default is missing.
        """
        if self._started:
            raise RuntimeError("Station session already started")
        self._started = True

        station_id = station_id_from_path(initial_path)
        if not station_id:
            await self.switch_station(self.default_station, play=False)
            return None
        try:
            await self.switch_station(station_id, play=False)
        except UnknownStation:
            logger.debug("Route url %s doesn't contain valid station id, fallback to default", initial_path)
            await self.switch_station(self.default_station, play=False)
            return station_path(self.current.id)
        return None

    async def resync(self) -> None:
        """Re-point the current station after the registry changed.

        A deleted current station falls back to the default (or the first
        remaining station); an edited one is rebound to its replacement.
        """
        if self.current is None:
            return

        index = find_index(self.registry, self.current.id)
        if index != NOT_FOUND:
            replacement = self.registry[index]
            if replacement is not self.current:
                await self._activate(replacement, play=False)
            return

        logger.info("Current station %s was removed", self.current.id)
        self.current = None
        fallback = self._fallback_id()
        if fallback is not None:
            await self.switch_station(fallback, play=False)
            return
        self._notify()

    # -- internals ----------------------------------------------------------

    def _fallback_id(self) -> Optional[str]:
        """Stored id of the default station, else of the first one, else ``None``."""
        for candidate in (self.default_station, *(s.id for s in self.registry[:1])):
            index = find_index(self.registry, candidate)
            if index != NOT_FOUND:
                return self.registry[index].id
        return None

    async def _activate(self, station: Station, play: bool) -> None:
        self.current = station
        self._notify()
        # Let dependents process the new station before the player reloads.
        await asyncio.sleep(0)
        self.player.reload(station.source, play)

    def _notify(self) -> None:
        for callback in self._observers:
            callback(self.current)
