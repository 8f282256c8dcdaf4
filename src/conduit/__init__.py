"""conduit - request/response middleware pipelines."""

from conduit._types import Request, Response
from conduit._middleware import (
    Middleware,
    NextHandler,
    RequestHandler,
    register_middleware,
    run_chain,
)
from conduit._events import register_event, EventData, EventName
from conduit.pipeline import Pipeline
from conduit.middlewares import (
    BUILTIN_MIDDLEWARES,
    AttributeMiddleware,
    ErrorResponseMiddleware,
    LoggingMiddleware,
    RequireHeaderMiddleware,
    ResponseHeaderMiddleware,
    TimeoutMiddleware,
    create_middleware,
)

__all__ = [
    "Request",
    "Response",
    "Middleware",
    "NextHandler",
    "RequestHandler",
    "Pipeline",
    "run_chain",
    "register_middleware",
    "register_event",
    "EventData",
    "EventName",
    "BUILTIN_MIDDLEWARES",
    "create_middleware",
    "LoggingMiddleware",
    "AttributeMiddleware",
    "ErrorResponseMiddleware",
    "RequireHeaderMiddleware",
    "ResponseHeaderMiddleware",
    "TimeoutMiddleware",
]
__version__ = "0.0.1"
