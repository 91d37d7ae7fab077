"""FastAPI application for the fleet maintenance API."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fleet.app.api.routes.health import router as health_router
from fleet.app.api.routes.maintenance import router as maintenance_router
from fleet.app.api.routes.me import router as me_router
from fleet.app.api.routes.metrics import router as metrics_router
from fleet.app.api.routes.policy import router as policy_router
from fleet.app.api.routes.vehicles import router as vehicles_router
from fleet.app.config import get_settings
from fleet.app.errors import BackendUnavailableError, error_response
from fleet.app.utils.logging import configure_logging

logger = logging.getLogger(__name__)

configure_logging(get_settings().log_level)

app = FastAPI(title="Fleet Maintenance API", version="0.1.0")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as {"error": message}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(BackendUnavailableError)
async def backend_error_handler(request: Request, exc: BackendUnavailableError) -> JSONResponse:
    """Map data-store failures to 502 without leaking store details."""
    logger.error(f"[{request.method} {request.url.path}] backend failure: {exc.detail}")
    return error_response(exc.to_context_error())


# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(me_router)
app.include_router(policy_router)
app.include_router(maintenance_router)
app.include_router(vehicles_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Fleet Maintenance API", "version": "0.1.0"}
