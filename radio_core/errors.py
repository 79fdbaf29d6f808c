"""Station error taxonomy.

Every error carries a human-readable message that the editor UI shows
verbatim, so messages are written for end users.
"""

from __future__ import annotations


class StationError(Exception):
    """Base class for all registry / session errors."""


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class ValidationFailure(StationError):
    """A station record violates a field invariant."""


class InvalidId(ValidationFailure):
    pass


class InvalidTitle(ValidationFailure):
    pass


class InvalidSource(ValidationFailure):
    pass


# ---------------------------------------------------------------------------
# Registry / routing
# ---------------------------------------------------------------------------

class DuplicateStation(StationError):
    """A station with the same id already exists in the registry."""

    def __init__(self, station_id: str):
        self.station_id = station_id
        super().__init__(f"Station with id '{station_id}' already exists")


class NotFound(StationError):
    """Registry lookup for an edit / open failed."""

    def __init__(self, station_id: str):
        self.station_id = station_id
        super().__init__(f"Station with id '{station_id}' not found")


class UnknownStation(StationError):
    """Routing asked for a station id the registry does not contain."""

    def __init__(self, station_id: str):
        self.station_id = station_id
        super().__init__(f"Attempted to switch to station with invalid station id '{station_id}'")


class CorruptedPersistence(StationError):
    """Stored snapshot could not be parsed. Internal, never user-facing."""
