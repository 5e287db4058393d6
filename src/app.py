"""Dispatch FastAPI application.

Web server that processes commands synchronously via HTTP. Every request
under one of the Dispatch prefixes is wrapped in the dispatch domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - unset/"test" → in-memory providers
#   - "sqlite"     → local SQLite file
#   - "production" → PostgreSQL
from dispatch.domain import dispatch  # noqa: E402
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

dispatch.init()

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
_DOMAIN_PREFIXES = (
    "/requisitions",
    "/grns",
    "/invoices",
    "/logical-orders",
    "/shipping",
    "/shipments",
)


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    if path.startswith(_DOMAIN_PREFIXES):
        return dispatch
    return None


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Dispatch API",
    description="Order fulfillment workflow and shipment routing",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the Protean domain context for each request."""
    domain = _resolve_domain(request.url.path)
    if domain is not None:
        with domain.domain_context():
            response = await call_next(request)
        return response
    # No domain match — pass through (health check, docs, etc.)
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from dispatch.api import ROUTERS, register_error_handlers  # noqa: E402

for router in ROUTERS:
    app.include_router(router)

register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"dispatch": {"name": dispatch.name}},
        }
    )
