"""parkzone API — FastAPI application for parking zone lookups.

Run:
    uvicorn parkzone.api.main:app --reload
    # or
    parkzone-api
"""

import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from parkzone.api.routes import router
from parkzone.config import settings
from parkzone.ingestion.loader import DatasetError
from parkzone.observability.logging import correlation_id, new_correlation_id, setup_logging
from parkzone.observability.tracing import configure_tracing
from parkzone.retrieval.datasets import load_indexes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the zone indexes once on startup; they are read-only afterwards."""
    setup_logging(json_format=settings.log_json, level=settings.log_level)
    configure_tracing(
        settings.mlflow_tracking_uri,
        settings.mlflow_experiment_name,
        enabled=settings.tracing_enabled,
    )

    start = time.monotonic()
    try:
        app.state.indexes = load_indexes(settings)
    except DatasetError:
        logger.exception("Zone datasets failed to load; serving degraded")
        app.state.indexes = None
    else:
        logger.info(
            "parkzone API ready",
            extra={"duration_ms": round((time.monotonic() - start) * 1000, 1)},
        )
    yield
    logger.info("Shutting down")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a correlation ID to the request and log its outcome.

    The ID comes from X-Request-ID when the client sends one and is echoed
    back on the response either way.
    """

    async def dispatch(self, request: Request, call_next):
        cid = new_correlation_id(request.headers.get("x-request-id"))
        token = correlation_id.set(cid)
        started = time.monotonic()
        try:
            response = await call_next(request)
        finally:
            elapsed_ms = round((time.monotonic() - started) * 1000, 1)
            correlation_id.reset(token)
        response.headers["x-request-id"] = cid
        logger.debug(
            "%s %s -> %d", request.method, request.url.path, response.status_code,
            extra={"duration_ms": elapsed_ms},
        )
        return response


app = FastAPI(
    title="parkzone",
    description="Which parking zone am I in, and where should I park near my destination? "
    "Paid downtown meter zones and residential permit areas.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)

app.include_router(router)


@app.get("/health")
async def health(request: Request):
    """Health check: reports whether the zone indexes loaded and their sizes."""
    indexes = getattr(request.app.state, "indexes", None)
    if indexes is None:
        return {"status": "degraded", "checks": {"datasets": "not loaded"}}

    checks = {
        "datasets": "ok",
        "paid_zones": len(indexes.paid),
        "residential_zones": len(indexes.residential),
    }
    status = "healthy" if len(indexes.paid) else "degraded"
    return {"status": status, "checks": checks}


def run():
    """Entry point for parkzone-api console script."""
    uvicorn.run("parkzone.api.main:app", host=settings.api_host, port=settings.api_port, reload=settings.api_reload)
