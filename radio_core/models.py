"""Pydantic models for stations and editor drafts."""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from radio_core.errors import InvalidId, InvalidSource, InvalidTitle, ValidationFailure

# Characters that would make an id ambiguous as a URL path segment or
# storage key: path / query / fragment delimiters, escapes, control chars.
_UNSAFE_ID_CHARS = re.compile(r"[/?#%\x00-\x1f\x7f]")


class StreamSource(BaseModel):
    """One stream URL of a station, with an optional MIME-type hint."""

    model_config = ConfigDict(frozen=True)

    src: str
    type: str = ""  # e.g. "audio/mpeg"


class Station(BaseModel):
    """A playable radio station.

    Frozen once constructed. Build instances through ``construct_station``
    or ``Station.from_serialized`` so the field invariants are checked.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    source: Tuple[StreamSource, ...]

    def clone(self) -> Station:
        """Deep, independent copy."""
        return self.model_copy(deep=True)

    def to_serialized(self) -> dict[str, Any]:
        """Plain record, as written to storage."""
        return self.model_dump(mode="json")

    @classmethod
    def from_serialized(cls, record: Any) -> Station:
        """Rebuild a station from a plain record (e.g. loaded from storage).

        Raises ``ValidationFailure`` for anything that is not a well-formed
        station record.
        """
        if not isinstance(record, Mapping):
            raise ValidationFailure(f"Station record must be an object, got {type(record).__name__}")
        try:
            draft = StationDraft(
                id=record.get("id", ""),
                title=record.get("title", ""),
                description=record.get("description", ""),
                source=record.get("source", []),
            )
        except ValidationError as exc:
            raise ValidationFailure(f"Malformed station record: {exc.error_count()} invalid field(s)") from exc
        return construct_station(draft.id, draft.title, draft.description, draft.source)


class SourceDraft(BaseModel):
    """Editable source entry."""

    src: str = ""
    type: str = ""


class StationDraft(BaseModel):
    """Mutable, not-yet-validated station staged by the editor."""

    id: str = ""
    title: str = ""
    description: str = ""
    source: List[SourceDraft] = Field(default_factory=lambda: [SourceDraft()])
    is_new: bool = False

    @classmethod
    def from_station(cls, station: Station) -> StationDraft:
        copy = station.clone()
        return cls(
            id=copy.id,
            title=copy.title,
            description=copy.description,
            source=[SourceDraft(src=s.src, type=s.type) for s in copy.source],
        )


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def _coerce_source(item: Any) -> StreamSource:
    if isinstance(item, (StreamSource, SourceDraft)):
        src, mime = item.src, item.type
    elif isinstance(item, Mapping):
        src, mime = item.get("src", ""), item.get("type", "")
    else:
        raise InvalidSource("Each source must have a 'src' and a 'type'")
    if mime is None:
        mime = ""
    if not isinstance(src, str) or not isinstance(mime, str):
        raise InvalidSource("Source 'src' and 'type' must be text")
    if not src:
        raise InvalidSource("Source URL must not be empty")
    return StreamSource(src=src, type=mime)


def construct_station(
    station_id: str,
    title: str,
    description: str = "",
    source: Sequence[Any] = (),
) -> Station:
    """Validate the fields and build a ``Station``.

    Raises ``InvalidId``, ``InvalidTitle`` or ``InvalidSource``; never
    returns a partially formed station.
    """
    if not isinstance(station_id, str) or not station_id:
        raise InvalidId("Station id must not be empty")
    if _UNSAFE_ID_CHARS.search(station_id) or station_id != station_id.strip():
        raise InvalidId(f"Station id '{station_id}' contains characters not allowed in a URL path")
    if not isinstance(title, str) or not title:
        raise InvalidTitle("Station title must not be empty")
    if description is None:
        description = ""
    if not isinstance(description, str):
        raise ValidationFailure("Station description must be text")
    if isinstance(source, (str, bytes, Mapping)) or not source:
        raise InvalidSource("Station needs at least one source")

    sources = tuple(_coerce_source(item) for item in source)
    return Station(id=station_id, title=title, description=description, source=sources)


# ---------------------------------------------------------------------------
# Ids
# ---------------------------------------------------------------------------

def normalize_id(station_id: str) -> str:
    """Comparison key for ids; matching is case-insensitive."""
    return station_id.casefold()


def derive_station_id(title: str, *, replace_all_spaces: bool = False) -> str:
    """Derive an id from a title: lowercase, spaces to underscores.

    Only the first space is replaced unless *replace_all_spaces* is set;
    ids of already persisted stations depend on that rule.
    """
    if replace_all_spaces:
        return title.replace(" ", "_").lower()
    return title.replace(" ", "_", 1).lower()
