"""FastAPI application entry point."""

import logging
import sys
from contextlib import asynccontextmanager

import aiosqlite
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from radio_app.config import get_settings
from radio_app.db import KeyValueStore, close_db, init_db
from radio_app.seed import load_seed
from radio_app.state import RadioState
from radio_core.errors import DuplicateStation, NotFound, StationError, UnknownStation, ValidationFailure

logger = logging.getLogger("radio_app")


def configure_logging() -> None:
    logging.basicConfig(
        level=get_settings().effective_log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


async def _open_store() -> KeyValueStore | None:
    """Key/value storage, or None when it is disabled or cannot be opened."""
    settings = get_settings()
    if not settings.storage_enabled:
        logger.info("Storage disabled, stations live in memory only")
        return None
    try:
        db = await init_db()
    except (aiosqlite.Error, OSError):
        logger.exception("Storage unavailable, stations live in memory only")
        return None
    logger.debug("DB ready at %s", settings.db_abs_path)
    return KeyValueStore(db)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    configure_logging()
    settings = get_settings()
    store = await _open_store()
    app.state.radio = await RadioState.startup(
        load_seed(settings.stations_file),
        settings=settings,
        store=store,
    )
    yield
    await close_db()
    logger.debug("DB closed")


app = FastAPI(
    title="liquidradio",
    version=get_settings().version,
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Error mapping: messages are shown to the user verbatim
# ---------------------------------------------------------------------------

_STATUS_BY_ERROR = (
    (ValidationFailure, 400),
    (DuplicateStation, 409),
    (NotFound, 404),
    (UnknownStation, 404),
)


@app.exception_handler(StationError)
async def station_error_handler(request: Request, exc: StationError):
    status_code = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 500)
    return JSONResponse({"detail": str(exc)}, status_code=status_code)


@app.get("/health")
async def health():
    """Simple health-check endpoint."""
    return JSONResponse({"status": "ok", "version": app.version})


# Routers (the player router owns the catch-all station route, so it goes last)
from radio_app.routes_stations import router as stations_router  # noqa: E402
from radio_app.routes_player import router as player_router  # noqa: E402

app.include_router(stations_router)
app.include_router(player_router)
