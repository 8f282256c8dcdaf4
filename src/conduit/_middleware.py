"""Middleware contracts and the chain runner."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Sequence, Union

NextHandler = Callable[[Any], Any]


# ---------------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------------

class RequestHandler(ABC):
    """Terminal unit of a chain: turns a request into a response."""

    @abstractmethod
    def handle(self, request: Any) -> Any:
        """Produce a response for ``request``."""


class Middleware(ABC):
    """A unit of request processing placed in front of a handler."""

    @abstractmethod
    def process(self, request: Any, next: NextHandler) -> Any:
        """Process ``request``.

        Args:
            request: The request as seen at this position of the chain.
            next: Runs the rest of the chain. Call it (with this request or
                a derived one) to delegate; return without calling it to
                short-circuit.

        Returns:
            The response, either from ``next`` or produced here.
        """


MiddlewareLike = Union[Middleware, Callable[[Any, NextHandler], Any]]
HandlerLike = Union[RequestHandler, Callable[[Any], Any]]


def as_middleware_fn(middleware: MiddlewareLike) -> Callable[[Any, NextHandler], Any]:
    """Return the plain ``(request, next)`` callable behind ``middleware``.

    Raises:
        TypeError: If ``middleware`` is neither a Middleware nor callable.
    """
    if isinstance(middleware, Middleware):
        return middleware.process
    if callable(middleware):
        return middleware
    raise TypeError(
        f"Middleware must be a Middleware instance or a callable "
        f"(request, next), got {type(middleware).__name__}"
    )


def as_handler_fn(handler: HandlerLike) -> Callable[[Any], Any]:
    """Return the plain ``(request)`` callable behind ``handler``.

    Raises:
        TypeError: If ``handler`` is neither a RequestHandler nor callable.
    """
    if isinstance(handler, RequestHandler):
        return handler.handle
    if callable(handler):
        return handler
    raise TypeError(
        f"Handler must be a RequestHandler instance or a callable "
        f"(request), got {type(handler).__name__}"
    )


# ---------------------------------------------------------------------------
# Global middleware registry
# ---------------------------------------------------------------------------

_global_middlewares: list[MiddlewareLike] = []


def register_middleware(fn: MiddlewareLike) -> MiddlewareLike:
    """Register a middleware on the global stack.

    Global middleware runs in front of every pipeline's own middleware.
    Works both as a decorator and as a plain function call::

        # Decorator style
        @register_middleware
        def add_request_id(request, next):
            return next(request.with_attribute("request_id", uuid.uuid4().hex))

        # Functional style (e.g. from a third-party package)
        register_middleware(LoggingMiddleware())
    """
    as_middleware_fn(fn)
    _global_middlewares.append(fn)
    return fn


# ---------------------------------------------------------------------------
# Chain runner
# ---------------------------------------------------------------------------

def run_chain(
    middlewares: Sequence[MiddlewareLike],
    request: Any,
    handler: HandlerLike,
) -> Any:
    """Run ``request`` through the middleware chain and the terminal handler.

    Each middleware receives ``(request, next_fn)``. Calling
    ``next_fn(request)`` advances to the next middleware (or the handler)
    and returns its response. A middleware that returns without calling
    ``next_fn`` short-circuits the chain and its return value is the
    response.

    Exceptions are not caught here; they propagate to the caller.

    Args:
        middlewares: Ordered middleware. Snapshotted before dispatch.
        request: The original request.
        handler: Terminal handler, run only if every middleware delegates.

    Returns:
        The single response for this dispatch.
    """
    chain = [as_middleware_fn(mw) for mw in middlewares]
    final = as_handler_fn(handler)

    def make_next(index: int) -> NextHandler:
        def next_fn(req: Any) -> Any:
            if index >= len(chain):
                return final(req)
            return chain[index](req, make_next(index + 1))
        return next_fn

    return make_next(0)(request)
