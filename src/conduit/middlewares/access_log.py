"""Access logging middleware."""

from __future__ import annotations

import logging
import time
from typing import Any

from conduit._middleware import Middleware, NextHandler


class LoggingMiddleware(Middleware):
    """Logs each request on entry and its outcome on exit. Always delegates."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO):
        self._logger = logger or logging.getLogger(__name__)
        self._level = level

    def process(self, request: Any, next: NextHandler) -> Any:
        method = getattr(request, "method", "-")
        path = getattr(request, "path", "-")
        self._logger.log(self._level, "-> %s %s", method, path)

        start = time.perf_counter()
        response = next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        status = getattr(response, "status", "-")
        self._logger.log(self._level, "<- %s %s %s (%.1fms)", method, path, status, elapsed_ms)
        return response
