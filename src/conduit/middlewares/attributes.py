"""Request attribute middleware."""

from __future__ import annotations

from typing import Any

from conduit._middleware import Middleware, NextHandler


class AttributeMiddleware(Middleware):
    """Passes a derived request carrying one extra attribute downstream.

    ``value`` may be a callable taking the request, evaluated per dispatch
    (e.g. to attach a fresh request id).
    """

    def __init__(self, key: str, value: Any):
        if not key:
            raise ValueError("key cannot be an empty string")
        self.key = key
        self.value = value

    def process(self, request: Any, next: NextHandler) -> Any:
        value = self.value(request) if callable(self.value) else self.value
        return next(request.with_attribute(self.key, value))
