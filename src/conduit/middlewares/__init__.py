"""Built-in middleware, addressable by short name."""

from conduit._middleware import Middleware
from conduit.middlewares.access_log import LoggingMiddleware
from conduit.middlewares.attributes import AttributeMiddleware
from conduit.middlewares.errors import ErrorResponseMiddleware
from conduit.middlewares.headers import RequireHeaderMiddleware, ResponseHeaderMiddleware
from conduit.middlewares.timeout import TimeoutMiddleware

MIDDLEWARE_CLASSES: dict[str, type[Middleware]] = {
    "logging": LoggingMiddleware,
    "require_header": RequireHeaderMiddleware,
    "response_header": ResponseHeaderMiddleware,
    "attribute": AttributeMiddleware,
    "errors": ErrorResponseMiddleware,
    "timeout": TimeoutMiddleware,
}

BUILTIN_MIDDLEWARES = frozenset(MIDDLEWARE_CLASSES)


def create_middleware(name: str, **kwargs) -> Middleware:
    """Build a built-in middleware from its short name.

    Used by configuration-driven setups such as the HTTP bridge, where the
    stack arrives as a list of names.

    Raises:
        ValueError: If the name is not a built-in middleware.
        TypeError: If ``kwargs`` do not match the middleware's constructor.
    """
    try:
        cls = MIDDLEWARE_CLASSES[name]
    except KeyError:
        raise ValueError(
            f"Unknown middleware '{name}'. Built-in: {sorted(BUILTIN_MIDDLEWARES)}"
        ) from None
    return cls(**kwargs)


__all__ = [
    "BUILTIN_MIDDLEWARES",
    "MIDDLEWARE_CLASSES",
    "create_middleware",
    "LoggingMiddleware",
    "AttributeMiddleware",
    "ErrorResponseMiddleware",
    "RequireHeaderMiddleware",
    "ResponseHeaderMiddleware",
    "TimeoutMiddleware",
]
