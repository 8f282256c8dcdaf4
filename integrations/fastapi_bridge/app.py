"""
HTTP bridge for conduit pipelines.

Serves every path through a conduit Pipeline: each incoming HTTP request is
converted to a ``conduit.Request``, dispatched, and the resulting
``conduit.Response`` is written back. The terminal handler echoes what it
received as JSON, which makes the effect of each middleware visible.

Environment variables (a ``.env`` file next to this module is loaded first)
---------------------
    CONDUIT_MIDDLEWARES      comma-separated built-in names, outermost first
                             (default: errors,logging)
                             available: attribute, errors, logging,
                             require_header, response_header, timeout
    CONDUIT_REQUIRED_HEADER  header checked by require_header (default: x-api-key)
    CONDUIT_TIMEOUT          seconds allowed by timeout (default: 30)

Network:
    CONDUIT_HOST             default: 127.0.0.1
    CONDUIT_PORT             default: 8765
    CONDUIT_LOG_LEVEL        default: warning
"""

import json
import logging
import os
import sys
import uuid
from pathlib import Path
from typing import List

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi import Request as HTTPRequest
from fastapi import Response as HTTPResponse
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field, ValidationError, field_validator

import conduit as c

load_dotenv(Path(__file__).parent / ".env")

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class BridgeSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=8765, ge=1, le=65535)
    middlewares: List[str] = ["errors", "logging"]
    required_header: str = "x-api-key"
    timeout: float = Field(default=30.0, gt=0)
    log_level: str = "warning"

    @field_validator("middlewares", mode="before")
    @classmethod
    def _split_names(cls, value):
        if isinstance(value, str):
            return [name.strip().lower() for name in value.split(",") if name.strip()]
        return value

    @field_validator("middlewares")
    @classmethod
    def _known_names(cls, value: List[str]) -> List[str]:
        unknown = [name for name in value if name not in c.BUILTIN_MIDDLEWARES]
        if unknown:
            raise ValueError(
                f"unknown middleware {unknown}; built-in: {sorted(c.BUILTIN_MIDDLEWARES)}"
            )
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.lower()
        if value not in ("critical", "error", "warning", "info", "debug"):
            raise ValueError(f"unknown log level '{value}'")
        return value


def _load_settings() -> BridgeSettings:
    """Read settings from the environment, exiting with a helpful message if invalid."""
    raw = {
        "host": os.environ.get("CONDUIT_HOST"),
        "port": os.environ.get("CONDUIT_PORT"),
        "middlewares": os.environ.get("CONDUIT_MIDDLEWARES"),
        "required_header": os.environ.get("CONDUIT_REQUIRED_HEADER"),
        "timeout": os.environ.get("CONDUIT_TIMEOUT"),
        "log_level": os.environ.get("CONDUIT_LOG_LEVEL"),
    }
    try:
        return BridgeSettings(**{k: v for k, v in raw.items() if v not in (None, "")})
    except ValidationError as exc:
        print(f"[conduit-bridge] ERROR: invalid configuration:\n{exc}", file=sys.stderr)
        sys.exit(1)


SETTINGS = _load_settings()
logging.basicConfig(level=SETTINGS.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")

# Constructor arguments for built-ins that need them
_MIDDLEWARE_KWARGS = {
    "require_header": {"header": SETTINGS.required_header},
    "timeout": {"timeout": SETTINGS.timeout},
    "attribute": {"key": "request_id", "value": lambda _request: uuid.uuid4().hex},
    "response_header": {"name": "x-served-by", "value": "conduit"},
}


# ---------------------------------------------------------------------------
# Build the pipeline at startup
# ---------------------------------------------------------------------------

def echo_handler(request: c.Request) -> c.Response:
    """Terminal handler: describe the request that reached it."""
    payload = {
        "method": request.method,
        "path": request.path,
        "headers": dict(request.headers),
        "attributes": {k: str(v) for k, v in request.attributes.items()},
        "body_bytes": len(request.body),
    }
    return c.Response(
        status=200,
        headers={"content-type": "application/json"},
        body=json.dumps(payload).encode("utf-8"),
    )


pipeline = c.Pipeline(
    echo_handler,
    [c.create_middleware(name, **_MIDDLEWARE_KWARGS.get(name, {})) for name in SETTINGS.middlewares],
    name="bridge",
)
print(f"[conduit-bridge] Pipeline: {SETTINGS.middlewares} -> echo_handler", file=sys.stderr)


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------

app = FastAPI(title="Conduit HTTP Bridge", version="1.0.0")


@app.get("/health")
def health():
    return {"status": "ok", "middlewares": SETTINGS.middlewares}


@app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def dispatch(path: str, http_request: HTTPRequest):
    request = c.Request(
        method=http_request.method,
        path="/" + path,
        headers=dict(http_request.headers),
        body=await http_request.body(),
    )
    # Pipelines are synchronous; keep them off the event loop.
    response = await run_in_threadpool(pipeline.handle, request)
    return HTTPResponse(
        content=response.body,
        status_code=response.status,
        headers=dict(response.headers),
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(app, host=SETTINGS.host, port=SETTINGS.port, log_level=SETTINGS.log_level)
