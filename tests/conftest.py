"""Shared pytest fixtures for tunepalette tests.

Provides a scriptable fake search gateway, in-memory recency stores,
sample catalog results and a palette factory wired with a mock host.

asyncio_mode = "auto" in pyproject.toml means async test functions are
automatically discovered and run without explicit @pytest.mark.asyncio.
"""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

from tunepalette.commands import CommandCatalog
from tunepalette.config import PaletteConfig
from tunepalette.core.dispatcher import ActivationDispatcher
from tunepalette.core.palette import CommandPalette
from tunepalette.models import RawResult, ResultType
from tunepalette.recency import MemoryRecentsBackend, RecencyStore
from tunepalette.telemetry import Telemetry

# Small enough to keep tests fast, large enough to coalesce bursts.
TEST_DEBOUNCE = 0.02


class FakeGateway:
    """Search gateway double.

    ``responses`` maps a query to a result list or an exception instance.
    ``gates`` maps a query to an ``asyncio.Event`` the search awaits before
    returning, so tests control response ordering. Searches cancelled while
    held are listed in ``cancelled``.
    """

    def __init__(self, responses=None, default=None):
        self.responses = dict(responses or {})
        self.default = list(default or [])
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[str] = []
        self.cancelled: list[str] = []

    def hold(self, query: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[query] = gate
        return gate

    async def search(self, query: str) -> list[RawResult]:
        self.calls.append(query)
        gate = self.gates.get(query)
        if gate is not None:
            try:
                await gate.wait()
            except asyncio.CancelledError:
                self.cancelled.append(query)
                raise
        outcome = self.responses.get(query, self.default)
        if isinstance(outcome, Exception):
            raise outcome
        return list(outcome)


def raw(id, type, title, subtitle="", related=False, **payload) -> RawResult:
    """Shorthand RawResult factory."""
    return RawResult(
        id=id,
        type=ResultType(type),
        title=title,
        subtitle=subtitle,
        payload={"id": id, "name": title, **payload},
        related=related,
    )


async def settle(seconds: float = TEST_DEBOUNCE * 3) -> None:
    """Let debounce timers fire and pending tasks resolve."""
    await asyncio.sleep(seconds)


@pytest.fixture
def arctic_results() -> list[RawResult]:
    """Gateway results for "arc": two prefix hits, one subtitle hit, one related."""
    return [
        raw("t1", "track", "Arctic Waves", "Polar Sound", artists=[{"name": "Polar Sound"}]),
        raw("ar1", "artist", "Arcade Fire", "Indie Rock"),
        raw("t2", "track", "Northern Lights", "The Arcturians"),
        raw("p1", "playlist", "Cold Mornings", "By Frost", related=True),
    ]


@pytest.fixture
def memory_backend() -> MemoryRecentsBackend:
    return MemoryRecentsBackend()


@pytest.fixture
def recents(memory_backend) -> RecencyStore:
    """RecencyStore over an in-memory backend with a stepping clock."""
    ticks = iter(range(1, 10_000))
    return RecencyStore(memory_backend, capacity=10, clock=lambda: float(next(ticks)))


@pytest.fixture
def host() -> MagicMock:
    """Mock host app exposing play_track / navigate_to and command handlers."""
    return MagicMock()


@pytest.fixture
def telemetry():
    """In-memory OTel telemetry; yields (telemetry, exporter)."""
    return Telemetry.in_memory()


@pytest.fixture
def config() -> PaletteConfig:
    return PaletteConfig(debounce_seconds=TEST_DEBOUNCE)


@pytest.fixture
def make_palette(recents, host, config):
    """Factory building a CommandPalette around a gateway."""

    def _make(gateway=None, catalog=None, on_close=None) -> CommandPalette:
        dispatcher = ActivationDispatcher(
            recents,
            player=host,
            navigator=host,
            handlers={
                "navigate": host.run_navigate_command,
                "player": host.run_player_command,
                "toggle_setting": host.run_toggle_command,
                "help": host.run_help_command,
            },
        )
        return CommandPalette(
            gateway,
            recents,
            dispatcher,
            catalog=catalog or CommandCatalog(),
            config=config,
            on_close=on_close,
        )

    return _make
