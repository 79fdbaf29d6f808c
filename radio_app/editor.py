"""Station editor workflow: add / edit / delete.

Stages a draft (blank or a deep clone of an existing station), and turns
it into a validated registry mutation on commit.  A failed commit leaves
the editor open with the error message so the user can correct the input.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional

from radio_core.errors import InvalidTitle, StationError
from radio_core.models import Station, StationDraft, construct_station, derive_station_id
from radio_core.registry import add, get_station, remove, update

logger = logging.getLogger(__name__)


class StationEditor:
    """Interaction state over a registry it does not own."""

    def __init__(
        self,
        registry: List[Station],
        on_change: Callable[[], Awaitable[None]],
        *,
        title_max_length: int = 20,
        replace_all_spaces: bool = False,
    ):
        self.registry = registry
        self.on_change = on_change
        self.title_max_length = title_max_length
        self.replace_all_spaces = replace_all_spaces
        self.draft: Optional[StationDraft] = None
        self.error: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.draft is not None

    def open_for_new(self) -> StationDraft:
        """Stage a blank draft; nothing is validated yet."""
        self.error = None
        self.draft = StationDraft(is_new=True)
        return self.draft

    def open_for_edit(self, station_id: str) -> StationDraft:
        """Stage a deep copy of *station_id*.  Raises ``NotFound``."""
        self.error = None
        self.draft = StationDraft.from_station(get_station(self.registry, station_id))
        return self.draft

    def close(self) -> None:
        self.draft = None
        self.error = None

    async def commit_add(self, draft: StationDraft) -> Station:
        """Derive the id from the title and add the station."""
        self.draft = draft
        self.error = None
        try:
            self._check_title(draft.title)
            draft.id = derive_station_id(draft.title, replace_all_spaces=self.replace_all_spaces)
            station = add(self.registry, draft.id, draft.title, draft.description, draft.source)
        except StationError as exc:
            logger.error("User attempted to add station but it failed: %r: %s", draft, exc)
            self.error = str(exc)
            raise

        self.close()
        await self.on_change()
        return station

    async def commit_edit(self, draft: StationDraft) -> Station:
        """Replace the station with the draft's (unchanged) id."""
        self.draft = draft
        self.error = None
        try:
            self._check_title(draft.title)
            replacement = construct_station(draft.id, draft.title, draft.description, draft.source)
            station = update(self.registry, draft.id, replacement)
        except StationError as exc:
            logger.error("User attempted to edit station but it failed: %r: %s", draft, exc)
            self.error = str(exc)
            raise

        self.close()
        await self.on_change()
        return station

    async def commit_delete(self, station_id: str) -> bool:
        """Remove *station_id*; missing ids are a no-op."""
        removed = remove(self.registry, station_id)
        self.close()
        if removed:
            await self.on_change()
        return removed

    def _check_title(self, title: str) -> None:
        if not title:
            raise InvalidTitle("Station title must not be empty")
        if len(title) > self.title_max_length:
            raise InvalidTitle(f"Station title must be at most {self.title_max_length} characters")
