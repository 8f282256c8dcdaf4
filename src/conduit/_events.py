"""Event system for pipeline lifecycle hooks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Literal

# ---------------------------------------------------------------------------
# Event name type
# ---------------------------------------------------------------------------

EventName = Literal[
    "on_request",        # before the chain starts
    "on_handle",         # terminal handler about to run (request = what it receives)
    "on_short_circuit",  # chain returned without reaching the handler
    "on_response",       # after the chain returned a response
    "on_error",          # an exception escaped the chain (re-raised afterwards)
]

# ---------------------------------------------------------------------------
# Event name constants
# ---------------------------------------------------------------------------

ON_REQUEST: EventName = "on_request"
ON_HANDLE: EventName = "on_handle"
ON_SHORT_CIRCUIT: EventName = "on_short_circuit"
ON_RESPONSE: EventName = "on_response"
ON_ERROR: EventName = "on_error"


# ---------------------------------------------------------------------------
# EventData
# ---------------------------------------------------------------------------

@dataclass
class EventData:
    """Data passed to every event handler.

    Handlers observe; they cannot change the request or the response. Use
    middleware for that.
    """

    event: EventName
    pipeline: str
    request: Any
    response: Any = None
    error: BaseException | None = None
    metadata: dict = field(default_factory=dict)


# ---------------------------------------------------------------------------
# EventBus
# ---------------------------------------------------------------------------

class EventBus:
    """Holds event handlers and dispatches events to them."""

    def __init__(self) -> None:
        self._handlers: dict[EventName, list[Callable[[EventData], None]]] = {}

    def on(self, event_name: EventName, handler: Callable[[EventData], None]) -> None:
        """Register a handler for an event name."""
        self._handlers.setdefault(event_name, []).append(handler)

    def emit(self, event_name: EventName, data: EventData) -> None:
        """Fire all handlers registered for event_name."""
        for handler in list(self._handlers.get(event_name, [])):
            handler(data)


# ---------------------------------------------------------------------------
# Global bus + public API
# ---------------------------------------------------------------------------

_global_bus = EventBus()


def register_event(event_name: EventName) -> Callable:
    """Decorator — registers a handler on the global event bus.

    Usage::

        @register_event("on_short_circuit")
        def count_rejections(data: EventData):
            rejected[data.pipeline] += 1
    """
    def decorator(fn: Callable[[EventData], None]) -> Callable[[EventData], None]:
        _global_bus.on(event_name, fn)
        return fn
    return decorator


def emit_event(event_name: EventName, data: EventData) -> None:
    """Internal helper — fires the global bus for event_name."""
    _global_bus.emit(event_name, data)
