"""Tests for _events.py — EventData, EventBus, register_event, emit_event."""

import pytest

from conduit._events import (
    ON_ERROR,
    ON_REQUEST,
    ON_RESPONSE,
    EventBus,
    EventData,
    emit_event,
    register_event,
    _global_bus,
)
from conduit._types import Request


# ---------------------------------------------------------------------------
# Isolation — reset global bus state between every test in this file
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def reset_global_bus():
    original = dict(_global_bus._handlers)
    _global_bus._handlers.clear()
    yield
    _global_bus._handlers.clear()
    _global_bus._handlers.update(original)


def _data(event=ON_REQUEST, **kwargs):
    return EventData(event=event, pipeline="test", request=Request(), **kwargs)


# ---------------------------------------------------------------------------
# EventData
# ---------------------------------------------------------------------------

class TestEventData:
    def test_required_fields(self):
        request = Request(path="/a")
        data = EventData(event=ON_REQUEST, pipeline="api", request=request)
        assert data.event == "on_request"
        assert data.pipeline == "api"
        assert data.request is request

    def test_optional_fields_default_none(self):
        data = _data()
        assert data.response is None
        assert data.error is None

    def test_metadata_is_independent_per_instance(self):
        a = _data()
        b = _data()
        a.metadata["key"] = "value"
        assert "key" not in b.metadata

    def test_error_field(self):
        exc = ValueError("bad")
        assert _data(ON_ERROR, error=exc).error is exc


# ---------------------------------------------------------------------------
# EventBus
# ---------------------------------------------------------------------------

class TestEventBus:
    def test_emit_without_handlers_is_noop(self):
        EventBus().emit(ON_REQUEST, _data())

    def test_handler_receives_data(self):
        bus = EventBus()
        received = []
        bus.on(ON_REQUEST, received.append)
        data = _data()
        bus.emit(ON_REQUEST, data)
        assert received == [data]

    def test_handlers_fire_in_registration_order(self):
        bus = EventBus()
        order = []
        bus.on(ON_REQUEST, lambda d: order.append(1))
        bus.on(ON_REQUEST, lambda d: order.append(2))
        bus.emit(ON_REQUEST, _data())
        assert order == [1, 2]

    def test_only_matching_event_fires(self):
        bus = EventBus()
        fired = []
        bus.on(ON_RESPONSE, lambda d: fired.append("response"))
        bus.emit(ON_REQUEST, _data())
        assert fired == []

    def test_buses_are_independent(self):
        a, b = EventBus(), EventBus()
        fired = []
        a.on(ON_REQUEST, lambda d: fired.append("a"))
        b.emit(ON_REQUEST, _data())
        assert fired == []

    def test_handler_registered_during_emit_waits_for_next_emit(self):
        bus = EventBus()
        fired = []

        def first(d):
            fired.append("first")
            bus.on(ON_REQUEST, lambda d: fired.append("late"))

        bus.on(ON_REQUEST, first)
        bus.emit(ON_REQUEST, _data())
        assert fired == ["first"]

    def test_handler_exception_propagates(self):
        bus = EventBus()

        def boom(d):
            raise RuntimeError("handler failed")

        bus.on(ON_REQUEST, boom)
        with pytest.raises(RuntimeError):
            bus.emit(ON_REQUEST, _data())


# ---------------------------------------------------------------------------
# register_event / emit_event
# ---------------------------------------------------------------------------

class TestGlobalBus:
    def test_register_event_returns_fn(self):
        def handler(data): pass

        assert register_event(ON_REQUEST)(handler) is handler

    def test_registered_handler_fires_on_emit(self):
        fired = []

        @register_event(ON_RESPONSE)
        def handler(data: EventData):
            fired.append(data.pipeline)

        emit_event(ON_RESPONSE, _data(ON_RESPONSE))
        assert fired == ["test"]

    def test_multiple_events_registered_separately(self):
        fired = []

        @register_event(ON_REQUEST)
        def h1(data): fired.append("request")

        @register_event(ON_ERROR)
        def h2(data): fired.append("error")

        emit_event(ON_ERROR, _data(ON_ERROR))
        assert fired == ["error"]
