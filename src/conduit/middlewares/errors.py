"""Convert exceptions raised downstream into error responses."""

from __future__ import annotations

import logging
from typing import Any

from conduit._middleware import Middleware, NextHandler
from conduit._types import Response

logger = logging.getLogger(__name__)


class ErrorResponseMiddleware(Middleware):
    """Catches exceptions from the rest of the chain and returns a response.

    Without this middleware a failure propagates to whoever dispatched the
    pipeline. Place it first to cover the whole chain.

    Args:
        status: Status code of the error response.
        expose_errors: If True, the body carries the exception type and
            message. Otherwise a generic message is used.
    """

    def __init__(self, status: int = 500, expose_errors: bool = False):
        self.status = status
        self.expose_errors = expose_errors

    def process(self, request: Any, next: NextHandler) -> Any:
        try:
            return next(request)
        except Exception as exc:
            logger.exception("Unhandled %s while processing request", type(exc).__name__)
            if self.expose_errors:
                body = f"{type(exc).__name__}: {exc}"
            else:
                body = "internal server error"
            return Response(
                status=self.status,
                headers={"content-type": "text/plain; charset=utf-8"},
                body=body.encode("utf-8"),
            )
