"""Query controller: debounced, generation-stamped catalog searches.

Every ``set_query`` bumps the generation counter. A fetch is dispatched
only after the debounce window passes without further input, and its
response is applied only if its generation is still current. Older
responses that resolve late are dropped, so at most one generation's
results are ever visible.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from tunepalette.constants import DEBOUNCE_SECONDS
from tunepalette.models import RawResult
from tunepalette.rx_ops import from_task
from tunepalette.services.search import SearchGateway
from tunepalette.telemetry import Telemetry, get_telemetry

logger = logging.getLogger(__name__)


class QueryController:
    """Owns the query text, its generation, and the fetch lifecycle.

    State read by the palette:

    - ``query``: current text as typed
    - ``generation``: monotonic counter, bumped on every change
    - ``results``: raw results applied for the current generation
    - ``results_version``: bumped whenever ``results`` is replaced
    - ``is_loading``: True from fetch dispatch until the current
      generation's response (or failure) is applied
    - ``error``: message of the last gateway failure, cleared on the next
      successful apply or query change

    ``on_change`` is called after each of these changes.
    """

    def __init__(
        self,
        gateway: SearchGateway | None,
        on_change: Callable[[], None] | None = None,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        telemetry: Telemetry | None = None,
    ) -> None:
        self._gateway = gateway
        self._on_change = on_change
        self._debounce_seconds = debounce_seconds
        self._telemetry = telemetry

        self.query: str = ""
        self.generation: int = 0
        self.results: list[RawResult] = []
        self.results_version: int = 0
        self.is_loading: bool = False
        self.error: str | None = None

        self._timer: asyncio.TimerHandle | None = None
        self._inflight = None  # rx Disposable for the dispatched fetch

    @property
    def telemetry(self) -> Telemetry:
        return self._telemetry or get_telemetry()

    def set_query(self, text: str) -> None:
        """Replace the query, cancel pending work and schedule a fetch.

        Empty or whitespace-only text never reaches the gateway.
        """
        self.query = text
        self.generation += 1
        self._cancel_pending()
        self.results = []
        self.results_version += 1
        self.error = None
        self.is_loading = False

        if text.strip() and self._gateway is not None:
            self._schedule(text.strip(), self.generation)

        self._notify()

    def cancel(self) -> None:
        """Drop pending and in-flight work; the query itself is unchanged.

        Bumps the generation so a response already on its way is ignored.
        """
        had_work = self._timer is not None or self._inflight is not None
        self.generation += 1
        self._cancel_pending()
        if self.is_loading or had_work:
            self.is_loading = False
            self._notify()

    def close(self) -> None:
        """Cancel all work and detach the change listener."""
        self.cancel()
        self._on_change = None

    def _schedule(self, text: str, generation: int) -> None:
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(
            self._debounce_seconds, self._dispatch, text, generation
        )

    def _cancel_pending(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._inflight is not None:
            # Cancels the gateway task, retries included.
            self._inflight.dispose()
            self._inflight = None

    def _dispatch(self, text: str, generation: int) -> None:
        self._timer = None
        if generation != self.generation:
            return

        self.is_loading = True
        logger.info("Search dispatched generation=%d query_len=%d", generation, len(text))
        self._inflight = from_task(lambda: self._gateway.search(text)).subscribe(
            on_next=lambda results: self._apply(generation, results),
            on_error=lambda err: self._fail(generation, err),
        )
        self._notify()

    def _apply(self, generation: int, results: list[RawResult]) -> None:
        if generation != self.generation:
            logger.debug(
                "Dropping stale response generation=%d current=%d",
                generation,
                self.generation,
            )
            return
        self.telemetry.search_resolved(generation, self.query, len(results))
        self._inflight = None
        self.results = list(results)
        self.results_version += 1
        self.is_loading = False
        self.error = None
        self._notify()

    def _fail(self, generation: int, err: Exception) -> None:
        if generation != self.generation:
            logger.debug("Ignoring failure of stale generation=%d: %s", generation, err)
            return
        self.telemetry.search_resolved(generation, self.query, error=err)
        logger.warning(
            "Search failed generation=%d query=%r: %s", generation, self.query, err
        )
        self._inflight = None
        self.results = []
        self.results_version += 1
        self.is_loading = False
        self.error = str(err) or type(err).__name__
        self._notify()

    def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change()
        except Exception:
            logger.exception("Query change listener failed")
