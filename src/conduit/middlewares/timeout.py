"""Request timeout middleware."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any

from conduit._middleware import Middleware, NextHandler
from conduit._types import Response

logger = logging.getLogger(__name__)


class TimeoutMiddleware(Middleware):
    """Limits how long the rest of the chain may take.

    The continuation runs in a worker thread. If it has not returned after
    ``timeout`` seconds a timeout response is returned instead. The worker is
    not interrupted and its eventual result is discarded.

    The abandoned worker keeps running. If it reaches the terminal handler
    after the dispatch has returned, the handler still runs but the pipeline
    emits no ``on_handle`` for it; that dispatch already reported
    ``on_short_circuit`` and ``on_response`` for the timeout response.

    Args:
        timeout: Seconds to wait for the continuation.
        status: Status code of the timeout response.

    Raises:
        ValueError: If timeout is not positive.
    """

    def __init__(self, timeout: float = 30.0, status: int = 504):
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self.timeout = timeout
        self.status = status

    def process(self, request: Any, next: NextHandler) -> Any:
        start = time.perf_counter()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="conduit-timeout")
        future = executor.submit(next, request)
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError:
            # finished at the deadline, or raised TimeoutError itself
            if future.done():
                return future.result()
            elapsed = time.perf_counter() - start
            logger.warning("Request timed out after %.2f seconds", elapsed)
            return Response(
                status=self.status,
                headers={"content-type": "text/plain; charset=utf-8"},
                body=f"request timeout after {elapsed:.2f} seconds".encode("utf-8"),
            )
        finally:
            executor.shutdown(wait=False)
