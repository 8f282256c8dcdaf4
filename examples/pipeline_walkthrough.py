"""pipeline_walkthrough.py — walkthrough of conduit's middleware pipeline.

Runs entirely in-process: no server, no network. Each section dispatches a
few requests and prints what every middleware and event saw.

Run:
    python examples/pipeline_walkthrough.py
"""

import logging

import conduit as c
from conduit import EventData, register_event

logging.basicConfig(level=logging.INFO, format="  [log] %(name)s: %(message)s")

# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

DIVIDER = "─" * 60

def section(title):
    print(f"\n{DIVIDER}")
    print(f"  {title}")
    print(DIVIDER)


def hello(request: c.Request) -> c.Response:
    print(f"  [handler]   path={request.path!r}  attributes={dict(request.attributes)}")
    return c.Response(body=b"hello from the handler")


# ===========================================================================
# 1. DELEGATE OR SHORT-CIRCUIT
# ===========================================================================

section("1. DELEGATE OR SHORT-CIRCUIT")

def announce(request, next):
    print(f"  [announce]  entering for {request.path!r}")
    response = next(request)
    print(f"  [announce]  leaving with status={response.status}")
    return response

pipeline = c.Pipeline(hello, [announce, c.RequireHeaderMiddleware("x-api-key")], name="demo")

print("\n  >>> request WITHOUT x-api-key\n")
response = pipeline.handle(c.Request(path="/private"))
print(f"\n  Response: status={response.status} body={response.text!r}")

print("\n  >>> request WITH x-api-key\n")
response = pipeline.handle(c.Request(path="/private", headers={"X-Api-Key": "secret"}))
print(f"\n  Response: status={response.status} body={response.text!r}")


# ===========================================================================
# 2. PASSING A DERIVED REQUEST DOWNSTREAM
# ===========================================================================

section("2. PASSING A DERIVED REQUEST DOWNSTREAM")

original = c.Request(path="/whoami")
tagged = c.Pipeline(
    hello,
    [c.AttributeMiddleware("user", "ada"), c.ResponseHeaderMiddleware("x-served-by", "conduit")],
)
response = tagged.handle(original)
print(f"\n  Response headers: {dict(response.headers)}")
print(f"  Original request attributes after dispatch: {dict(original.attributes)}")


# ===========================================================================
# 3. ERRORS AND EVENTS
# ===========================================================================

section("3. ERRORS AND EVENTS")

@register_event("on_short_circuit")
def on_short_circuit(data: EventData):
    print(f"  [on_short_circuit] pipeline={data.pipeline!r} status={data.response.status}")

def broken(request):
    raise RuntimeError("database unavailable")

guarded = c.Pipeline(broken, [c.ErrorResponseMiddleware(expose_errors=True)], name="guarded")
response = guarded.handle(c.Request(path="/orders"))
print(f"\n  Response: status={response.status} body={response.text!r}")

print("\n  >>> same handler without ErrorResponseMiddleware\n")
try:
    c.Pipeline(broken).handle(c.Request(path="/orders"))
except RuntimeError as exc:
    print(f"  Propagated to caller: {exc!r}")

print("\n  >>> short-circuit fires on_short_circuit\n")
pipeline.handle(c.Request(path="/private"))

print(DIVIDER)
print("  Done.")
print(DIVIDER)
