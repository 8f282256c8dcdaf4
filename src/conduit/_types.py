"""Immutable request and response values passed through a pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping


def _freeze_headers(headers: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType({k.lower(): v for k, v in (headers or {}).items()})


class _HeaderAccess:
    """Case-insensitive header helpers shared by Request and Response."""

    headers: Mapping[str, str]

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)

    def has_header(self, name: str) -> bool:
        return name.lower() in self.headers

    def with_header(self, name: str, value: str):
        """Return a copy with ``name`` set to ``value``."""
        headers = dict(self.headers)
        headers[name.lower()] = value
        return replace(self, headers=headers)

    def without_header(self, name: str):
        """Return a copy with ``name`` removed (no-op if absent)."""
        headers = {k: v for k, v in self.headers.items() if k != name.lower()}
        return replace(self, headers=headers)


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Request(_HeaderAccess):
    """An incoming request.

    Instances never change after construction. Middleware that wants to alter
    what downstream sees builds a derived copy with one of the ``with_*``
    methods and passes that copy to ``next``.

    Attributes:
        method: HTTP-style method name.
        path: Request path.
        headers: Read-only header mapping; names are stored lower-cased.
        body: Raw request body.
        attributes: Read-only bag for values computed by middleware
            (authenticated user, request id, ...).
    """

    method: str = "GET"
    path: str = "/"
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "headers", _freeze_headers(self.headers))
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))
        if isinstance(self.body, str):
            object.__setattr__(self, "body", self.body.encode("utf-8"))

    def attribute(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def with_attribute(self, key: str, value: Any) -> Request:
        attributes = dict(self.attributes)
        attributes[key] = value
        return replace(self, attributes=attributes)

    def with_body(self, body: bytes) -> Request:
        return replace(self, body=body)


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Response(_HeaderAccess):
    """A response produced by a handler or a short-circuiting middleware."""

    status: int = 200
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _freeze_headers(self.headers))
        if isinstance(self.body, str):
            object.__setattr__(self, "body", self.body.encode("utf-8"))

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def __str__(self) -> str:
        text = self.body.decode("utf-8", errors="replace")
        return (
            f"Response(status={self.status}, headers={len(self.headers)})\n"
            f"{text[:200]}{'...' if len(text) > 200 else ''}"
        )
