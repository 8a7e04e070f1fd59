"""
FastAPI application factory for the mock PMIS API.

Usage:
    python main.py serve                 # Dev server on PMIS_API_HOST:PMIS_API_PORT
    uvicorn api.app:app --reload

OpenAPI docs available at http://localhost:8000/docs after starting.

Serves the station-management list endpoints the admin screens page
through (complaints, staff deployments, journals) from an in-memory SQLite
store seeded with sample records. Error bodies follow DRF conventions:
``{"detail": ...}`` for request-level errors and ``{field: [messages]}``
for invalid bodies.
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.database import TABLES, RecordStore
from api.routes import station
from utils.config import ClientConfig

_logger = logging.getLogger("pmis_mock_api")


def _drf_validation_body(exc: RequestValidationError) -> dict[str, list[str]]:
    """Regroup pydantic errors as DRF's ``{field: [messages]}``."""
    body: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) if loc else "non_field_errors"
        body.setdefault(field, []).append(error.get("msg", "Invalid value."))
    return body


def create_app(store: RecordStore | None = None, cfg: ClientConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Record store to serve (a freshly seeded one when None).
        cfg: Settings; read from the environment when None.

    Returns:
        Configured FastAPI application instance.
    """
    cfg = cfg or ClientConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _logger.info(
            "mock api ready: %s",
            ", ".join(f"{name}={app.state.store.count(name)}" for name in TABLES),
        )
        yield

    app = FastAPI(
        title="PMIS Mock API",
        summary="Development stand-in for the PMIS station-management REST API.",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {"name": "complaints", "description": "Prisoner complaints raised at a station."},
            {"name": "staff-deployments", "description": "Officers deployed to stations."},
            {"name": "journals", "description": "Station occurrence journal entries."},
            {"name": "meta", "description": "Health check."},
        ],
    )
    app.state.store = store if store is not None else RecordStore()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # ── Request logging middleware ────────────────────────────────────────────

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log each request with a short request ID."""
        request_id = str(uuid.uuid4())[:8]
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - start) * 1000
        response.headers["X-Request-ID"] = request_id

        if cfg.log_format == "json":
            _logger.info(
                "request",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": round(duration_ms, 1),
                    "request_id": request_id,
                },
            )
        else:
            _logger.info(
                "method=%s path=%s status=%d duration_ms=%.1f rid=%s",
                request.method, request.url.path, response.status_code,
                duration_ms, request_id,
            )
        return response

    # ── Error handling ────────────────────────────────────────────────────────

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Catch unhandled exceptions and return JSON instead of HTML traceback."""
        _logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error."})

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=_drf_validation_body(exc))

    # ── Health check ──────────────────────────────────────────────────────────

    @app.get("/health", tags=["meta"], summary="Health check")
    def health():
        """Return 200 OK with per-resource record counts."""
        counts = {name: app.state.store.count(name) for name in TABLES}
        return {"status": "ok", "records": counts}

    # ── Register routers ──────────────────────────────────────────────────────

    for router in station.routers:
        app.include_router(router)

    return app


# Instance for ``uvicorn api.app:app``
app = create_app()
