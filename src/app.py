"""Warehouse FastAPI application.

Web server for the warehouse domain; commands are processed synchronously
per request inside the warehouse domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay:
#   - unset/"test" → event_processing = "sync"  (projectors fire in the UoW)
#   - "production" → event_processing = "async" (outbox relayed by the Engine)
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers
from warehouse.domain import warehouse

warehouse.init()

_DOMAIN_PREFIXES = (
    "/inventory",
    "/reservations",
    "/bundles",
    "/purchase-orders",
    "/alerts",
    "/maintenance",
)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Warehouse API",
    description="Inventory reservations, purchase order receiving and grosir bundle checks",
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
    """Push the warehouse domain context for domain routes."""
    if request.url.path.startswith(_DOMAIN_PREFIXES):
        with warehouse.domain_context():
            return await call_next(request)
    # Health check, docs, etc.
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers and error mapping
# ---------------------------------------------------------------------------
from warehouse.api import register_warehouse_exception_handlers, routers  # noqa: E402

for router in routers:
    app.include_router(router)

register_exception_handlers(app)
register_warehouse_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": warehouse.name})
