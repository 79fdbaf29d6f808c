"""Station routes: registry listing and the station editor."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from radio_app.state import RadioState
from radio_core.models import SourceDraft, StationDraft

router = APIRouter(prefix="/api", tags=["stations"])


def get_radio(request: Request) -> RadioState:
    """Application state created in the lifespan hook."""
    return request.app.state.radio


def _draft_dict(draft: StationDraft) -> dict:
    return draft.model_dump()


# ---------------------------------------------------------------------------
# GET /api/stations: ordered registry
# ---------------------------------------------------------------------------

@router.get("/stations")
async def list_stations(radio: RadioState = Depends(get_radio)):
    """All stations, in registry order."""
    return JSONResponse({"stations": [s.to_serialized() for s in radio.registry]})


# ---------------------------------------------------------------------------
# Editor drafts
# ---------------------------------------------------------------------------

@router.get("/editor")
async def editor_state(radio: RadioState = Depends(get_radio)):
    """Whether the dialog is open, its draft and the last commit error."""
    editor = radio.editor
    return JSONResponse(
        {
            "is_open": editor.is_open,
            "draft": _draft_dict(editor.draft) if editor.draft else None,
            "error": editor.error,
        }
    )


@router.get("/editor/new")
async def open_new_draft(radio: RadioState = Depends(get_radio)):
    """Blank draft for the 'Add Station' dialog."""
    return JSONResponse(_draft_dict(radio.editor.open_for_new()))


@router.get("/editor/{station_id}")
async def open_edit_draft(station_id: str, radio: RadioState = Depends(get_radio)):
    """Copy of an existing station for the 'Edit Station' dialog."""
    return JSONResponse(_draft_dict(radio.editor.open_for_edit(station_id)))


# ---------------------------------------------------------------------------
# POST /api/stations: add
# ---------------------------------------------------------------------------

@router.post("/stations", status_code=201)
async def add_station(draft: StationDraft, radio: RadioState = Depends(get_radio)):
    """Add a station; the id is derived from the title."""
    radio.editor.open_for_new()
    draft.is_new = True
    station = await radio.editor.commit_add(draft)
    return JSONResponse(station.to_serialized(), status_code=201)


# ---------------------------------------------------------------------------
# PUT /api/stations/{station_id}: edit
# ---------------------------------------------------------------------------

@router.put("/stations/{station_id}")
async def edit_station(
    station_id: str,
    draft: StationDraft,
    radio: RadioState = Depends(get_radio),
):
    """Save changes to an existing station.  The id never changes."""
    staged = radio.editor.open_for_edit(station_id)
    staged.title = draft.title
    staged.description = draft.description
    staged.source = [SourceDraft(src=s.src, type=s.type) for s in draft.source]
    station = await radio.editor.commit_edit(staged)
    return JSONResponse(station.to_serialized())


# ---------------------------------------------------------------------------
# DELETE /api/stations/{station_id}
# ---------------------------------------------------------------------------

@router.delete("/stations/{station_id}")
async def delete_station(station_id: str, radio: RadioState = Depends(get_radio)):
    """Delete a station.  Unknown ids are not an error."""
    removed = await radio.editor.commit_delete(station_id)
    return JSONResponse({"removed": removed})
