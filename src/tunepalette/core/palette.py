"""Command palette state holder.

Wires the query controller, classifier, selection model, activation
dispatcher, command catalog and recency store behind the palette's
input surface: ``on_query_change`` plus the four discrete commands
(move up, move down, confirm, close). Views subscribe for change
notifications and read the exposed state; they never mutate it.
"""

from __future__ import annotations

import logging
from typing import Callable

from tunepalette.commands import CommandCatalog
from tunepalette.config import PaletteConfig
from tunepalette.core.controller import QueryController
from tunepalette.core.dispatcher import ActivationDispatcher
from tunepalette.core.selection import SelectionModel
from tunepalette.models import PaletteCommand, ResultBuckets, SearchResult
from tunepalette.recency import RecencyStore
from tunepalette.search.classifier import classify
from tunepalette.services.search import SearchGateway
from tunepalette.telemetry import Telemetry

logger = logging.getLogger(__name__)

Listener = Callable[["CommandPalette"], None]


class CommandPalette:
    """Keyboard-driven search palette over commands, catalog and recents.

    All handlers are no-ops while the palette is closed and none of them
    raise; failures degrade to empty buckets plus ``error``.

    Usage::

        palette = CommandPalette(gateway, recents, dispatcher)
        palette.subscribe(view.refresh)
        palette.open()
        palette.on_query_change("arc")
        palette.move_down()
        palette.confirm()
    """

    def __init__(
        self,
        gateway: SearchGateway | None,
        recents: RecencyStore,
        dispatcher: ActivationDispatcher,
        catalog: CommandCatalog | None = None,
        config: PaletteConfig | None = None,
        on_close: Callable[[], None] | None = None,
        telemetry: Telemetry | None = None,
    ) -> None:
        self._config = config or PaletteConfig()
        self._recents = recents
        self._dispatcher = dispatcher
        self._catalog = catalog or CommandCatalog()
        self._on_close = on_close
        self._listeners: list[Listener] = []
        self._selection = SelectionModel()
        self._controller = QueryController(
            gateway,
            on_change=self._rebuild,
            debounce_seconds=self._config.debounce_seconds,
            telemetry=telemetry,
        )
        self._signature: tuple[int, int] | None = None
        self.is_open = False

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def query(self) -> str:
        return self._controller.query

    @property
    def generation(self) -> int:
        return self._controller.generation

    @property
    def is_loading(self) -> bool:
        return self._controller.is_loading

    @property
    def error(self) -> str | None:
        return self._controller.error

    @property
    def buckets(self) -> ResultBuckets:
        return self._selection.buckets

    @property
    def all_results(self) -> list[SearchResult]:
        return self._selection.items

    @property
    def selected_index(self) -> int:
        return self._selection.index

    @property
    def selected(self) -> SearchResult | None:
        return self._selection.selected

    @property
    def selection(self) -> SelectionModel:
        return self._selection

    @property
    def controller(self) -> QueryController:
        return self._controller

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Palette listener failed")

    # ------------------------------------------------------------------
    # Input surface
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Open with an empty query (recent items or quick access)."""
        self.is_open = True
        self._safe(lambda: self._controller.set_query(""), "open")

    def on_query_change(self, text: str) -> None:
        if not self.is_open:
            return
        self._safe(lambda: self._controller.set_query(text), "query change")

    def move_up(self) -> None:
        if not self.is_open or self._selection.is_idle:
            return
        self._selection.move_up()
        self._emit()

    def move_down(self) -> None:
        if not self.is_open or self._selection.is_idle:
            return
        self._selection.move_down()
        self._emit()

    def select(self, index: int) -> None:
        """Move the selection to *index* (pointer hover)."""
        if not self.is_open or self._selection.is_idle:
            return
        self._selection.select(index)
        self._emit()

    def confirm(self) -> None:
        """Activate the selected item, then close."""
        if not self.is_open:
            return
        selected = self._selection.selected
        if selected is None:
            return
        self.activate(selected)

    def activate(self, result: SearchResult) -> None:
        """Activate *result* (Enter or click) and close the palette."""
        if not self.is_open:
            return
        self._safe(lambda: self._dispatcher.activate(result), "activation")
        self.close()

    def close(self) -> None:
        """Cancel pending work and signal the container to hide the palette."""
        if not self.is_open:
            return
        self.is_open = False
        self._safe(self._controller.cancel, "close")
        self._emit()
        if self._on_close is not None:
            self._safe(self._on_close, "close callback")

    def handle(self, command: PaletteCommand) -> None:
        """Dispatch one of the four discrete palette commands."""
        if command is PaletteCommand.MOVE_UP:
            self.move_up()
        elif command is PaletteCommand.MOVE_DOWN:
            self.move_down()
        elif command is PaletteCommand.CONFIRM:
            self.confirm()
        elif command is PaletteCommand.CLOSE:
            self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _rebuild(self) -> None:
        """Reclassify from the controller's current state."""
        query = self._controller.query
        if self._controller.error:
            buckets = ResultBuckets()
        else:
            config = self._config
            buckets = classify(
                query,
                self._controller.results,
                self._catalog.match(query),
                self._recents.entries,
                max_exact=config.max_exact,
                max_recommendations=config.max_recommendations,
                max_results=config.max_results,
                recent_limit=config.recent_display_limit,
                quick_access=self._catalog.quick_access(),
            )
        # Only a new query or newly applied results reset the selection;
        # a loading flag flip keeps the user's position.
        signature = (self._controller.generation, self._controller.results_version)
        if signature == self._signature:
            self._selection.refresh(buckets)
        else:
            self._signature = signature
            self._selection.set_buckets(buckets)
        self._emit()

    def _safe(self, call: Callable[[], object], what: str) -> None:
        try:
            call()
        except Exception:
            logger.exception("Palette %s failed", what)
