"""Player routes: the page per station, player status and preferences.

``GET /{station_id}`` is the router: every navigation switches the session
to the named station, or redirects to the default station if it is unknown.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from radio_app.routes_stations import get_radio
from radio_app.state import RadioState

router = APIRouter(tags=["player"])

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
templates = Jinja2Templates(directory=str(_TEMPLATES_DIR))


class Preferences(BaseModel):
    visualizer: bool


# ---------------------------------------------------------------------------
# GET /api/player: what the audio element should play
# ---------------------------------------------------------------------------

@router.get("/api/player")
async def player_status(radio: RadioState = Depends(get_radio)):
    """Current station, its sources and the pending reload signal."""
    status = radio.session.to_status_dict()
    player = radio.player
    status.update(
        {
            "sources": [s.model_dump() for s in getattr(player, "sources", ())],
            "play": getattr(player, "play", False),
            "reload_count": getattr(player, "reload_count", 0),
        }
    )
    return JSONResponse(status)


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------

@router.get("/api/preferences")
async def get_preferences(radio: RadioState = Depends(get_radio)):
    return JSONResponse({"visualizer": await radio.preferences.load_visualizer()})


@router.put("/api/preferences")
async def put_preferences(prefs: Preferences, radio: RadioState = Depends(get_radio)):
    await radio.preferences.save_visualizer(prefs.visualizer)
    return JSONResponse({"visualizer": prefs.visualizer})


# ---------------------------------------------------------------------------
# GET / and GET /{station_id}: routing
# ---------------------------------------------------------------------------

@router.get("/", response_class=HTMLResponse)
@router.get("/{station_id}", response_class=HTMLResponse)
async def station_page(request: Request, radio: RadioState = Depends(get_radio)):
    """Switch to the station named by the path and render the player."""
    # ASGI already percent-decoded this path; it must not be decoded again.
    corrected = await radio.session.route_changed(request.scope["path"])
    if corrected:
        return RedirectResponse(corrected, status_code=307)

    return templates.TemplateResponse(
        request,
        "player.html",
        {
            "title": radio.session.page_title,
            "app_title": radio.settings.app_title,
            "version": radio.settings.version,
            "current": radio.session.current,
            "stations": list(radio.registry),
            "visualizer": await radio.preferences.load_visualizer(),
        },
    )
