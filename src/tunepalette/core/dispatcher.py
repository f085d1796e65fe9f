"""Activation dispatcher: route a selected result to its collaborator.

Tracks go to the player, albums/artists/playlists to the navigator, and
commands to the handler registered for their action tag. Collaborator
failures are logged and never surface as palette errors; the host app
reports them in its own UI.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Mapping, Protocol

from tunepalette.models import MUSIC_TYPES, ResultType, SearchResult
from tunepalette.recency import RecencyStore
from tunepalette.telemetry import Telemetry, get_telemetry

logger = logging.getLogger(__name__)

CommandHandler = Callable[[SearchResult], Any]


class Player(Protocol):
    """Playback capability supplied by the host app."""

    def play_track(self, track: Mapping[str, Any]) -> Any: ...


class Navigator(Protocol):
    """Navigation capability supplied by the host app."""

    def navigate_to(self, target_type: str, target_id: str) -> Any: ...


class ActivationDispatcher:
    """Dispatch activated results and record them as recent.

    Usage::

        dispatcher = ActivationDispatcher(store, player=app, navigator=app)
        dispatcher.register("toggle_setting", app.toggle_setting)
        dispatcher.activate(result)
    """

    def __init__(
        self,
        recents: RecencyStore,
        player: Player | None = None,
        navigator: Navigator | None = None,
        handlers: Mapping[str, CommandHandler] | None = None,
        telemetry: Telemetry | None = None,
    ) -> None:
        self._recents = recents
        self._player = player
        self._navigator = navigator
        self._handlers: dict[str, CommandHandler] = dict(handlers or {})
        self._telemetry = telemetry
        self._background: set[asyncio.Task] = set()

    @property
    def telemetry(self) -> Telemetry:
        return self._telemetry or get_telemetry()

    def register(self, action: str, handler: CommandHandler) -> None:
        """Register (or replace) the handler for a command action tag."""
        self._handlers[action] = handler

    def activate(self, result: SearchResult) -> bool:
        """Record *result* as recent and route it to its collaborator.

        Returns:
            True if a collaborator or handler was invoked.
        """
        with self.telemetry.activation(result) as span:
            if self._should_record(result):
                self._recents.record(result)

            if result.type is ResultType.TRACK:
                routed = self._play(result)
            elif result.type in MUSIC_TYPES:
                routed = self._navigate(result)
            elif result.type is ResultType.COMMAND:
                routed = self._run_command(result)
            else:
                routed = False
            span.set_attribute("activate.routed", routed)
            logger.info(
                "Activated %s %r routed=%s", result.type.value, result.id, routed
            )
        return routed

    def _should_record(self, result: SearchResult) -> bool:
        if result.type is ResultType.COMMAND:
            return not result.data.get("transient", False)
        return True

    def _play(self, result: SearchResult) -> bool:
        if self._player is None:
            logger.warning("No player available for track %s", result.id)
            return False
        track = dict(result.data) or {"id": result.id, "name": result.title}
        self._fire(lambda: self._player.play_track(track), f"play_track({result.id})")
        return True

    def _navigate(self, result: SearchResult) -> bool:
        if self._navigator is None:
            logger.warning("No navigator available for %s %s", result.type.value, result.id)
            return False
        self._fire(
            lambda: self._navigator.navigate_to(result.type.value, result.id),
            f"navigate_to({result.type.value}, {result.id})",
        )
        return True

    def _run_command(self, result: SearchResult) -> bool:
        action = result.data.get("action")
        handler = self._handlers.get(action) if action else None
        if handler is None:
            logger.warning(
                "Unknown command action %r for command %s; ignoring", action, result.id
            )
            return False
        self._fire(lambda: handler(result), f"command {result.id} ({action})")
        return True

    def _fire(self, call: Callable[[], Any], label: str) -> None:
        """Invoke a collaborator fire-and-forget.

        Awaitable return values are scheduled on the running loop; their
        failures are logged from a done callback.
        """
        try:
            outcome = call()
        except Exception:
            logger.exception("Collaborator call %s failed", label)
            return

        if not inspect.isawaitable(outcome):
            return
        try:
            loop = asyncio.get_running_loop()
            task = asyncio.ensure_future(outcome, loop=loop)
        except RuntimeError:
            logger.error("No running event loop for %s; dropping call", label)
            if inspect.iscoroutine(outcome):
                outcome.close()
            return

        self._background.add(task)

        def _done(t: asyncio.Task) -> None:
            self._background.discard(t)
            if t.cancelled():
                return
            exc = t.exception()
            if exc is not None:
                logger.error("Collaborator call %s failed: %r", label, exc)

        task.add_done_callback(_done)
