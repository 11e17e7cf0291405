# fleet_ledger/main.py
"""
FastAPI application entry point.

Wires the fleet routers under /api/v1, the optional API-key gate, request
timing and the FleetError → JSON mapping ({"detail": ..., "error": ...}).
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from fleet_ledger.routers import audit, expenses, health, reports, session, tolls, trips, vehicles
from fleet_ledger.routers.deps import get_registry
from fleet_ledger.database import create_tables
from fleet_ledger.config import settings
from fleet_ledger.utils.errors import FleetError
from fleet_ledger.utils.logger import get_logger
import time

logger = get_logger(__name__)

API_PREFIX = "/api/v1"
AUDIT_PROCEDURE_PATH = f"{API_PREFIX}/functions/create-audit-log"
PUBLIC_PATHS = {f"{API_PREFIX}/health", "/docs", "/redoc", "/openapi.json"}

app = FastAPI(
    title="Fleet Ledger API",
    description="Vehicles, trips, expenses and tolls, with an audit entry for every change.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to the dashboard origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Shared-secret gate, enabled when API_KEY is set.
    The audit procedure also accepts AUDIT_FUNCTION_KEY, the key the
    AuditLogger sends with every entry.
    """
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path in PUBLIC_PATHS:
            return await call_next(request)

        accepted = {settings.API_KEY}
        if path == AUDIT_PROCEDURE_PATH and settings.AUDIT_FUNCTION_KEY:
            accepted.add(settings.AUDIT_FUNCTION_KEY)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key not in accepted:
            logger.warning(f"Rejected {request.method} {path}: bad API key")
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key", "error": "invalid_api_key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


@app.middleware("http")
async def time_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
    response.headers["X-Process-Time-Ms"] = str(elapsed_ms)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({elapsed_ms}ms)")
    return response


@app.exception_handler(FleetError)
async def fleet_error_handler(request: Request, exc: FleetError):
    logger.info(f"{request.method} {request.url.path} rejected ({exc.code}): {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.user_message, "error": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = [f"{'.'.join(str(p) for p in err['loc'][1:])}: {err['msg']}" for err in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": "; ".join(problems), "error": "validation_error"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "error": "internal"},
    )


for module, tag in (
    (session, "Session"),
    (vehicles, "Vehicles"),
    (trips, "Trips"),
    (expenses, "Expenses"),
    (tolls, "Tolls"),
    (reports, "Reports"),
    (audit, "Audit"),
    (health, "Health"),
):
    app.include_router(module.router, prefix=API_PREFIX, tags=[tag])


@app.on_event("startup")
async def startup():
    create_tables()
    logger.info(f"Fleet Ledger ready on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT} (docs at /docs)")
    if not settings.AUDIT_FUNCTION_URL:
        logger.warning("AUDIT_FUNCTION_URL not set: audit entries go straight to audit_logs")


@app.on_event("shutdown")
async def shutdown():
    registry = get_registry()
    logger.info(f"Fleet Ledger shutting down, closing {len(registry.active_actors())} session(s)")
    await registry.close()
