"""Header-based middleware."""

from __future__ import annotations

from typing import Any

from conduit._middleware import Middleware, NextHandler
from conduit._types import Response


class RequireHeaderMiddleware(Middleware):
    """Short-circuits with a fixed response when a request header is missing.

    Args:
        header: Header name, matched case-insensitively.
        response: Returned when the header is absent. Defaults to a 400
            response naming the header.
    """

    def __init__(self, header: str, response: Any = None):
        if not header:
            raise ValueError("header cannot be an empty string")
        self.header = header.lower()
        self.response = (
            response if response is not None
            else Response(status=400, body=f"missing required header: {self.header}".encode())
        )

    def process(self, request: Any, next: NextHandler) -> Any:
        if not request.has_header(self.header):
            return self.response
        return next(request)


class ResponseHeaderMiddleware(Middleware):
    """Adds a header to every response coming back up the chain."""

    def __init__(self, name: str, value: str):
        if not name:
            raise ValueError("name cannot be an empty string")
        self.name = name
        self.value = value

    def process(self, request: Any, next: NextHandler) -> Any:
        response = next(request)
        return response.with_header(self.name, self.value)
