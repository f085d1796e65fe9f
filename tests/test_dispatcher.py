"""Tests for ActivationDispatcher (core/dispatcher.py).

Routing by result type, recency recording, unknown-action no-ops and
fire-and-forget collaborator failures.
"""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from tunepalette.commands import CommandCatalog
from tunepalette.core.dispatcher import ActivationDispatcher
from tunepalette.models import ResultType, SearchResult


@pytest.fixture
def catalog() -> CommandCatalog:
    return CommandCatalog()


def music(type: str, id: str = "x1", **data) -> SearchResult:
    return SearchResult(id=id, type=ResultType(type), title=f"{type} {id}", data=data)


class TestRouting:
    def test_track_goes_to_player_with_payload(self, recents, host):
        dispatcher = ActivationDispatcher(recents, player=host, navigator=host)
        result = SearchResult(
            id="t1",
            type=ResultType.TRACK,
            title="Arctic Waves",
            data={"id": "t1", "name": "Arctic Waves"},
        )

        assert dispatcher.activate(result) is True

        host.play_track.assert_called_once_with({"id": "t1", "name": "Arctic Waves"})
        host.navigate_to.assert_not_called()

    def test_track_without_payload_gets_minimal_track(self, recents, host):
        dispatcher = ActivationDispatcher(recents, player=host)
        dispatcher.activate(music("track", "t1"))
        host.play_track.assert_called_once_with({"id": "t1", "name": "track t1"})

    @pytest.mark.parametrize("type", ["album", "artist", "playlist"])
    def test_collections_go_to_navigator(self, recents, host, type):
        dispatcher = ActivationDispatcher(recents, player=host, navigator=host)
        dispatcher.activate(music(type, "c1"))
        host.navigate_to.assert_called_once_with(type, "c1")
        host.play_track.assert_not_called()

    def test_command_goes_to_registered_handler(self, recents, catalog):
        handler = MagicMock()
        dispatcher = ActivationDispatcher(recents, handlers={"toggle_setting": handler})
        result = catalog.get("settings.theme").to_result()

        assert dispatcher.activate(result) is True

        handler.assert_called_once_with(result)
        assert result.data["params"] == {"setting": "dark_mode"}

    def test_register_replaces_handler(self, recents, catalog):
        first, second = MagicMock(), MagicMock()
        dispatcher = ActivationDispatcher(recents, handlers={"navigate": first})
        dispatcher.register("navigate", second)

        dispatcher.activate(catalog.get("nav.home").to_result())

        first.assert_not_called()
        second.assert_called_once()

    def test_unknown_action_is_noop(self, recents, caplog):
        dispatcher = ActivationDispatcher(recents)
        result = SearchResult(
            id="mystery", type=ResultType.COMMAND, title="Mystery", data={"action": "warp"}
        )
        with caplog.at_level(logging.WARNING):
            assert dispatcher.activate(result) is False
        assert "Unknown command action" in caplog.text

    def test_missing_collaborator_is_noop(self, recents):
        dispatcher = ActivationDispatcher(recents)
        assert dispatcher.activate(music("track")) is False
        assert dispatcher.activate(music("album")) is False


class TestRecording:
    def test_activation_recorded(self, recents, host):
        dispatcher = ActivationDispatcher(recents, player=host, navigator=host)
        dispatcher.activate(music("track", "t1"))
        dispatcher.activate(music("album", "a1"))
        assert [e.key for e in recents.entries] == [("album", "a1"), ("track", "t1")]

    def test_recorded_even_without_collaborator(self, recents):
        ActivationDispatcher(recents).activate(music("track", "t1"))
        assert recents.entries[0].id == "t1"

    def test_persistent_commands_recorded(self, recents, catalog):
        dispatcher = ActivationDispatcher(recents, handlers={"navigate": MagicMock()})
        dispatcher.activate(catalog.get("nav.library").to_result())
        assert recents.entries[0].key == ("command", "nav.library")

    def test_transient_commands_not_recorded(self, recents, catalog):
        handler = MagicMock()
        dispatcher = ActivationDispatcher(recents, handlers={"help": handler})
        dispatcher.activate(catalog.get("help.shortcuts").to_result())
        handler.assert_called_once()
        assert recents.entries == []


class TestCollaboratorFailures:
    def test_sync_failure_logged_not_raised(self, recents, caplog):
        player = MagicMock()
        player.play_track.side_effect = RuntimeError("device offline")
        dispatcher = ActivationDispatcher(recents, player=player)

        with caplog.at_level(logging.ERROR):
            assert dispatcher.activate(music("track", "t1")) is True

        assert "device offline" in caplog.text
        assert recents.entries[0].id == "t1"

    async def test_async_collaborator_scheduled(self, recents):
        player = MagicMock()
        player.play_track = AsyncMock()
        dispatcher = ActivationDispatcher(recents, player=player)

        dispatcher.activate(music("track", "t1"))
        await asyncio.sleep(0.01)

        player.play_track.assert_awaited_once()

    async def test_async_failure_logged(self, recents, caplog):
        player = MagicMock()
        player.play_track = AsyncMock(side_effect=RuntimeError("stream error"))
        dispatcher = ActivationDispatcher(recents, player=player)

        with caplog.at_level(logging.ERROR):
            dispatcher.activate(music("track", "t1"))
            await asyncio.sleep(0.01)

        assert "stream error" in caplog.text

    def test_awaitable_without_loop_dropped(self, recents, caplog):
        async def play(track):
            raise AssertionError("never awaited")

        player = MagicMock()
        player.play_track = play
        dispatcher = ActivationDispatcher(recents, player=player)

        with caplog.at_level(logging.ERROR):
            dispatcher.activate(music("track", "t1"))

        assert "No running event loop" in caplog.text


def test_activation_span(recents, host, telemetry):
    tel, exporter = telemetry
    dispatcher = ActivationDispatcher(recents, player=host, telemetry=tel)
    dispatcher.activate(music("track", "t1"))

    (span,) = [s for s in exporter.get_finished_spans() if s.name == "palette.activate"]
    assert span.attributes["activate.type"] == "track"
    assert span.attributes["activate.routed"] is True
