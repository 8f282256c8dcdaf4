"""Pipeline: middleware stack plus terminal handler, dispatched as one call."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable

from conduit._events import (
    ON_ERROR,
    ON_HANDLE,
    ON_REQUEST,
    ON_RESPONSE,
    ON_SHORT_CIRCUIT,
    EventBus,
    EventData,
    EventName,
    emit_event,
)
from conduit._middleware import (
    HandlerLike,
    MiddlewareLike,
    RequestHandler,
    _global_middlewares,
    as_handler_fn,
    as_middleware_fn,
    run_chain,
)

logger = logging.getLogger(__name__)


class Pipeline(RequestHandler):
    """Runs requests through an ordered middleware stack and a handler.

    Usage::

        import conduit as c

        def hello(request):
            return c.Response(body=b"hello")

        pipeline = c.Pipeline(hello, [c.LoggingMiddleware()])

        @pipeline.middleware
        def require_token(request, next):
            if not request.has_header("authorization"):
                return c.Response(status=401)
            return next(request)

        response = pipeline.handle(c.Request(path="/"))

    A Pipeline is itself a RequestHandler, so one pipeline can be the
    terminal handler of another. Pipelines keep no per-dispatch state and can
    be shared between threads.
    """

    def __init__(
        self,
        handler: HandlerLike,
        middlewares: Iterable[MiddlewareLike] | None = None,
        *,
        name: str = "pipeline",
        use_global: bool = True,
    ):
        """Create a pipeline.

        Args:
            handler: Terminal handler (RequestHandler or ``fn(request)``).
            middlewares: Initial middleware, outermost first.
            name: Label used in events and log records.
            use_global: If True (default), middleware registered with
                ``register_middleware`` runs in front of this pipeline's own.

        Raises:
            TypeError: If the handler or any middleware is not usable.
        """
        as_handler_fn(handler)
        self._handler = handler
        self._middlewares: list[MiddlewareLike] = []
        for mw in middlewares or ():
            self.pipe(mw)
        self._name = name
        self._use_global = use_global
        self._event_bus = EventBus()

    # ------------------------------------------------------------------
    # Public decorator API
    # ------------------------------------------------------------------

    def pipe(self, middleware: MiddlewareLike) -> MiddlewareLike:
        """Append a middleware to the end of this pipeline's stack."""
        as_middleware_fn(middleware)
        self._middlewares.append(middleware)
        return middleware

    def middleware(self, fn: Callable) -> Callable:
        """Register a pipeline-level middleware.

        Usage::

            @pipeline.middleware
            def timing(request, next):
                start = time.perf_counter()
                response = next(request)
                return response.with_header("x-elapsed", f"{time.perf_counter() - start:.3f}")
        """
        return self.pipe(fn)

    def event(self, event_name: EventName) -> Callable:
        """Register a pipeline-level event handler.

        Usage::

            @pipeline.event("on_response")
            def log_status(data: EventData):
                print(f"status={data.response.status}")
        """
        def decorator(fn: Callable[[EventData], None]) -> Callable[[EventData], None]:
            self._event_bus.on(event_name, fn)
            return fn
        return decorator

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def middlewares(self) -> tuple[MiddlewareLike, ...]:
        return tuple(self._middlewares)

    def __len__(self) -> int:
        return len(self._middlewares)

    def _stack(self) -> list[MiddlewareLike]:
        if self._use_global:
            return _global_middlewares + self._middlewares
        return list(self._middlewares)

    def _emit(self, event_name: EventName, data: EventData) -> None:
        """Fire event on both the global bus and this pipeline's bus."""
        emit_event(event_name, data)
        self._event_bus.emit(event_name, data)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def handle(self, request: Any) -> Any:
        """Dispatch ``request`` and return the single resulting response.

        Raises:
            Exception: Whatever a middleware or the handler raised; it is
                re-raised unchanged after ``on_error`` fires.
        """
        stack = self._stack()
        final = as_handler_fn(self._handler)
        reached_handler = False
        dispatch_done = False

        def final_handler(req: Any) -> Any:
            nonlocal reached_handler
            # a worker abandoned by TimeoutMiddleware may get here late
            if dispatch_done:
                return final(req)
            reached_handler = True
            self._emit(ON_HANDLE, EventData(event=ON_HANDLE, pipeline=self._name, request=req))
            return final(req)

        self._emit(ON_REQUEST, EventData(event=ON_REQUEST, pipeline=self._name, request=request))
        logger.debug("%s: dispatching through %d middleware", self._name, len(stack))

        start = time.perf_counter()
        try:
            response = run_chain(stack, request, final_handler)
        except Exception as exc:
            dispatch_done = True
            logger.warning(
                "%s: %s escaped the chain: %s", self._name, type(exc).__name__, exc
            )
            self._emit(
                ON_ERROR,
                EventData(event=ON_ERROR, pipeline=self._name, request=request, error=exc),
            )
            raise
        dispatch_done = True
        elapsed_ms = (time.perf_counter() - start) * 1000

        if not reached_handler:
            logger.debug("%s: short-circuited before the handler", self._name)
            self._emit(
                ON_SHORT_CIRCUIT,
                EventData(
                    event=ON_SHORT_CIRCUIT,
                    pipeline=self._name,
                    request=request,
                    response=response,
                ),
            )

        self._emit(
            ON_RESPONSE,
            EventData(
                event=ON_RESPONSE,
                pipeline=self._name,
                request=request,
                response=response,
                metadata={"elapsed_ms": elapsed_ms, "reached_handler": reached_handler},
            ),
        )
        return response

    def __call__(self, request: Any) -> Any:
        return self.handle(request)
