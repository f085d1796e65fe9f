"""Tests for the debounced, generation-stamped QueryController.

Exercises the controller against FakeGateway on the real event loop with
a short debounce window: burst coalescing, stale-response dropping,
loading/error state and cancellation.
"""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

from conftest import TEST_DEBOUNCE, FakeGateway, raw, settle
from tunepalette.core.controller import QueryController
from tunepalette.exceptions import GatewayError


def make_controller(gateway, on_change=None, telemetry=None) -> QueryController:
    return QueryController(
        gateway,
        on_change=on_change,
        debounce_seconds=TEST_DEBOUNCE,
        telemetry=telemetry,
    )


async def test_burst_only_last_query_hits_gateway():
    gateway = FakeGateway(default=[raw("t1", "track", "Arctic Waves")])
    controller = make_controller(gateway)

    for text in ("a", "ar", "arc", "arct"):
        controller.set_query(text)
    await settle()

    assert gateway.calls == ["arct"]
    assert [r.title for r in controller.results] == ["Arctic Waves"]


async def test_generation_increments_on_every_change():
    controller = make_controller(FakeGateway())
    controller.set_query("a")
    controller.set_query("a")
    controller.set_query("")
    assert controller.generation == 3


async def test_empty_query_makes_no_call():
    gateway = FakeGateway()
    controller = make_controller(gateway)

    controller.set_query("")
    controller.set_query("   ")
    await settle()

    assert gateway.calls == []
    assert not controller.is_loading


async def test_clearing_query_cancels_pending_fetch():
    gateway = FakeGateway()
    controller = make_controller(gateway)

    controller.set_query("arc")
    controller.set_query("")
    await settle()

    assert gateway.calls == []
    assert controller.results == []


async def test_query_is_stripped_before_search():
    gateway = FakeGateway()
    controller = make_controller(gateway)
    controller.set_query("  arc  ")
    await settle()
    assert gateway.calls == ["arc"]
    assert controller.query == "  arc  "


async def test_loading_from_dispatch_until_resolution():
    gateway = FakeGateway(default=[raw("t1", "track", "Arctic Waves")])
    gate = gateway.hold("arc")
    controller = make_controller(gateway)

    controller.set_query("arc")
    assert not controller.is_loading  # still debouncing
    await settle()
    assert controller.is_loading

    gate.set()
    await settle()
    assert not controller.is_loading
    assert len(controller.results) == 1


async def test_newer_generation_wins_over_late_response():
    gateway = FakeGateway(
        responses={
            "arc": [raw("old", "track", "Arc Old")],
            "arctic": [raw("new", "track", "Arctic New")],
        }
    )
    slow = gateway.hold("arc")
    controller = make_controller(gateway)

    controller.set_query("arc")
    await settle()  # generation 1 in flight
    controller.set_query("arctic")
    await settle()  # generation 2 applied
    slow.set()
    await settle()

    assert gateway.calls == ["arc", "arctic"]
    assert [r.id for r in controller.results] == ["new"]


async def test_stale_apply_is_dropped():
    controller = make_controller(FakeGateway())
    controller.set_query("arc")
    stale = controller.generation
    controller.set_query("arctic")
    version = controller.results_version

    controller._apply(stale, [raw("old", "track", "Arc Old")])
    controller._fail(stale, GatewayError("late failure"))

    assert controller.results == []
    assert controller.error is None
    assert controller.results_version == version


async def test_gateway_failure_sets_error():
    gateway = FakeGateway(responses={"boom": GatewayError("HTTP 500", status=500)})
    controller = make_controller(gateway)

    controller.set_query("boom")
    await settle()

    assert controller.error == "HTTP 500"
    assert controller.results == []
    assert not controller.is_loading


async def test_error_cleared_by_next_query():
    gateway = FakeGateway(responses={"boom": GatewayError("HTTP 500", status=500)})
    controller = make_controller(gateway)
    controller.set_query("boom")
    await settle()

    controller.set_query("fine")
    assert controller.error is None
    await settle()
    assert controller.error is None


async def test_error_without_message_uses_type_name():
    gateway = FakeGateway(responses={"boom": TimeoutError()})
    controller = make_controller(gateway)
    controller.set_query("boom")
    await settle()
    assert controller.error == "TimeoutError"


async def test_superseded_fetch_task_is_cancelled():
    gateway = FakeGateway()
    gateway.hold("arc")
    controller = make_controller(gateway)

    controller.set_query("arc")
    await settle()
    controller.set_query("arctic")
    await asyncio.sleep(0.01)

    assert gateway.cancelled == ["arc"]
    await settle()
    assert gateway.calls == ["arc", "arctic"]


async def test_cancel_drops_pending_and_bumps_generation():
    gateway = FakeGateway()
    controller = make_controller(gateway)
    controller.set_query("arc")
    generation = controller.generation

    controller.cancel()
    await settle()

    assert gateway.calls == []
    assert controller.generation == generation + 1
    assert controller.query == "arc"


async def test_cancel_stops_loading():
    gateway = FakeGateway()
    gateway.hold("arc")
    controller = make_controller(gateway)
    controller.set_query("arc")
    await settle()
    assert controller.is_loading

    controller.cancel()
    assert not controller.is_loading


async def test_no_gateway_never_loads():
    listener = MagicMock()
    controller = make_controller(None, on_change=listener)
    controller.set_query("arc")
    await settle()
    assert listener.call_count == 1
    assert not controller.is_loading
    assert controller.results == []


async def test_listener_notified_and_failures_contained():
    listener = MagicMock(side_effect=RuntimeError("view exploded"))
    gateway = FakeGateway(default=[raw("t1", "track", "Arctic Waves")])
    controller = make_controller(gateway, on_change=listener)

    controller.set_query("arc")
    await settle()

    # set_query, dispatch, apply
    assert listener.call_count == 3


async def test_close_detaches_listener():
    listener = MagicMock()
    controller = make_controller(FakeGateway(), on_change=listener)
    controller.close()
    controller.set_query("")
    listener.assert_not_called()


async def test_search_span_recorded(telemetry):
    tel, exporter = telemetry
    gateway = FakeGateway(default=[raw("t1", "track", "Arctic Waves")])
    controller = make_controller(gateway, telemetry=tel)

    controller.set_query("arc")
    await settle()

    spans = [s for s in exporter.get_finished_spans() if s.name == "palette.search"]
    assert len(spans) == 1
    assert spans[0].attributes["search.result_count"] == 1
    assert spans[0].attributes["search.error"] is False
