"""Tests for the station session (radio_app/session.py).

The player collaborator is a ``MagicMock``; ordering of observer
notification vs. player reload is checked through a shared call log.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from radio_app.session import PlayerState, SessionState, StationSession, station_id_from_path
from radio_core.errors import UnknownStation
from radio_core.models import Station, construct_station
from radio_core.registry import remove, update

_SOURCE = [{"src": "http://x/stream", "type": "audio/mpeg"}]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _station(station_id: str, title: str = "") -> Station:
    return construct_station(station_id, title or station_id, "", _SOURCE)


def _session(*ids: str, default: str = "liquid_radio") -> StationSession:
    registry = [_station(i) for i in ids]
    return StationSession(registry, MagicMock(), default_station=default, app_title="Liquid Radio")


# ---------------------------------------------------------------------------
# station_id_from_path
# ---------------------------------------------------------------------------

class TestStationIdFromPath:
    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/", ""),
            ("", ""),
            ("/jazz_fm", "jazz_fm"),
            ("/jazz_fm/", "jazz_fm"),
            ("/stations/jazz_fm", "jazz_fm"),
            ("/jazz_fm radio", "jazz_fm radio"),
            ("/a%41", "a%41"),
        ],
    )
    def test_last_segment(self, path, expected):
        assert station_id_from_path(path) == expected


# ---------------------------------------------------------------------------
# switch_station
# ---------------------------------------------------------------------------

class TestSwitchStation:
    @pytest.mark.asyncio
    async def test_starts_with_no_station(self):
        session = _session("liquid_radio")
        assert session.state == SessionState.NO_STATION
        assert session.current is None
        assert session.page_title == "Liquid Radio"

    @pytest.mark.asyncio
    async def test_switch_activates_and_reloads(self):
        session = _session("liquid_radio", "jazz_fm")
        await session.switch_station("jazz_fm")
        assert session.state == SessionState.ACTIVE
        assert session.current is session.registry[1]
        session.player.reload.assert_called_once_with(session.registry[1].source, True)
        assert session.page_title == "jazz_fm | Liquid Radio"

    @pytest.mark.asyncio
    async def test_play_intent_forwarded(self):
        session = _session("liquid_radio")
        await session.switch_station("liquid_radio", play=False)
        session.player.reload.assert_called_once_with(session.registry[0].source, False)

    @pytest.mark.asyncio
    async def test_same_station_is_noop(self):
        session = _session("liquid_radio")
        await session.switch_station("liquid_radio")
        current = session.current
        session.player.reload.reset_mock()

        await session.switch_station("liquid_radio")
        await session.switch_station("LIQUID_RADIO")
        session.player.reload.assert_not_called()
        assert session.current is current

    @pytest.mark.asyncio
    async def test_unknown_station_keeps_state(self):
        session = _session("liquid_radio")
        await session.switch_station("liquid_radio")
        session.player.reload.reset_mock()

        with pytest.raises(UnknownStation):
            await session.switch_station("unknown_id")
        assert session.current.id == "liquid_radio"
        session.player.reload.assert_not_called()

    @pytest.mark.asyncio
    async def test_observers_notified_before_reload(self):
        calls: list[str] = []
        session = _session("liquid_radio")
        session.player.reload.side_effect = lambda *_: calls.append("reload")
        session.subscribe(lambda station: calls.append(f"observer:{station.id}"))

        await session.switch_station("liquid_radio")
        assert calls == ["observer:liquid_radio", "reload"]


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------

class TestRouteChanged:
    @pytest.mark.asyncio
    async def test_valid_route(self):
        session = _session("liquid_radio", "jazz_fm")
        assert await session.route_changed("/jazz_fm") is None
        assert session.current.id == "jazz_fm"

    @pytest.mark.asyncio
    async def test_invalid_route_falls_back_and_corrects(self):
        session = _session("liquid_radio", "jazz_fm")
        await session.switch_station("jazz_fm")
        assert await session.route_changed("/nope") == "/liquid_radio"
        assert session.current.id == "liquid_radio"

    @pytest.mark.asyncio
    async def test_following_the_correction_is_noop(self):
        session = _session("liquid_radio")
        await session.route_changed("/nope")
        session.player.reload.reset_mock()
        assert await session.route_changed("/liquid_radio") is None
        session.player.reload.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_default_falls_back_to_first(self):
        session = _session("jazz_fm", "rock")
        assert await session.route_changed("/unknown_id") == "/jazz_fm"
        assert session.current.id == "jazz_fm"
        assert await session.route_changed("/") == "/jazz_fm"

    @pytest.mark.asyncio
    async def test_percent_sign_is_not_decoded(self):
        session = _session("liquid_radio", "aa")
        assert await session.route_changed("/a%41") == "/liquid_radio"
        assert session.current.id == "liquid_radio"

    @pytest.mark.asyncio
    async def test_empty_registry(self):
        session = _session("liquid_radio")
        await session.switch_station("liquid_radio")
        remove(session.registry, "liquid_radio")
        assert await session.route_changed("/nope") == "/"
        assert session.state == SessionState.NO_STATION
        assert await session.route_changed("/") is None

    @pytest.mark.asyncio
    async def test_correction_quotes_id(self):
        session = _session("jazz_fm radio", default="jazz_fm radio")
        assert await session.route_changed("/nope") == "/jazz_fm%20radio"


# ---------------------------------------------------------------------------
# start
# ---------------------------------------------------------------------------

class TestStart:
    @pytest.mark.asyncio
    async def test_root_uses_default_without_playing(self):
        session = _session("liquid_radio", "jazz_fm")
        assert await session.start("/") is None
        assert session.current.id == "liquid_radio"
        session.player.reload.assert_called_once_with(session.registry[0].source, False)

    @pytest.mark.asyncio
    async def test_initial_path(self):
        session = _session("liquid_radio", "jazz_fm")
        assert await session.start("/jazz_fm") is None
        assert session.current.id == "jazz_fm"

    @pytest.mark.asyncio
    async def test_invalid_initial_path(self):
        session = _session("liquid_radio", "jazz_fm")
        assert await session.start("/nope") == "/liquid_radio"
        assert session.current.id == "liquid_radio"

    @pytest.mark.asyncio
    async def test_only_once(self):
        session = _session("liquid_radio")
        await session.start()
        with pytest.raises(RuntimeError):
            await session.start()

    @pytest.mark.asyncio
    async def test_missing_default_raises(self):
        session = _session("jazz_fm")
        with pytest.raises(UnknownStation):
            await session.start()
        assert session.state == SessionState.NO_STATION


# ---------------------------------------------------------------------------
# resync
# ---------------------------------------------------------------------------

class TestResync:
    @pytest.mark.asyncio
    async def test_deleted_current_falls_back_to_default(self):
        session = _session("liquid_radio", "jazz_fm")
        await session.switch_station("jazz_fm")
        remove(session.registry, "jazz_fm")
        await session.resync()
        assert session.current.id == "liquid_radio"

    @pytest.mark.asyncio
    async def test_deleted_default_falls_back_to_first(self):
        session = _session("liquid_radio", "jazz_fm", "rock")
        await session.switch_station("liquid_radio")
        remove(session.registry, "liquid_radio")
        await session.resync()
        assert session.current.id == "jazz_fm"

    @pytest.mark.asyncio
    async def test_empty_registry_means_no_station(self):
        session = _session("liquid_radio")
        await session.switch_station("liquid_radio")
        remove(session.registry, "liquid_radio")
        await session.resync()
        assert session.state == SessionState.NO_STATION

    @pytest.mark.asyncio
    async def test_edited_current_is_rebound(self):
        session = _session("liquid_radio")
        await session.switch_station("liquid_radio")
        session.player.reload.reset_mock()
        replacement = _station("liquid_radio", "Liquid Radio HD")
        update(session.registry, "liquid_radio", replacement)

        await session.resync()
        assert session.current is replacement
        session.player.reload.assert_called_once_with(replacement.source, False)

    @pytest.mark.asyncio
    async def test_unrelated_change_does_nothing(self):
        session = _session("liquid_radio", "jazz_fm")
        await session.switch_station("liquid_radio")
        session.player.reload.reset_mock()
        remove(session.registry, "jazz_fm")
        await session.resync()
        session.player.reload.assert_not_called()


# ---------------------------------------------------------------------------
# PlayerState
# ---------------------------------------------------------------------------

def test_player_state_records_reloads():
    player = PlayerState()
    station = _station("a")
    session = StationSession([station], player, default_station="a")
    assert player.reload_count == 0

    player.reload(station.source, True)
    assert player.sources == station.source
    assert player.play is True
    assert player.reload_count == 1
    assert session.to_status_dict()["state"] == "no_station"
