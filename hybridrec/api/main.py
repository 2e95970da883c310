"""FastAPI application main module.

This module defines the main FastAPI application instance, error handlers
and the service-level endpoints (health, status and metrics). It is the
entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from hybridrec import __version__
from hybridrec.api.exceptions import HybridRecException
from hybridrec.api.logging_config import RequestLoggingMiddleware, setup_logging
from hybridrec.api.metrics import metrics_service
from hybridrec.api.routes import interactions, recommend
from hybridrec.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level)
    try:
        recommend.load_store_if_needed(settings.data_dir)
    except HybridRecException as e:
        # The service still answers /ping and /status without data
        logger.warning(
            "Data not loaded at startup",
            extra={"error": type(e).__name__, "details": e.details},
        )
    yield


# Create FastAPI application instance
app = FastAPI(
    title="HybridRec API",
    description="Hybrid product recommendation service",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(recommend.router)
app.include_router(interactions.router)


@app.exception_handler(HybridRecException)
async def hybridrec_exception_handler(
    request: Request, exc: HybridRecException
) -> JSONResponse:
    logger.warning(
        "Request rejected",
        extra={
            "path": str(request.url.path),
            "status_code": exc.status_code,
            "error": type(exc).__name__,
            "details": exc.details,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "details": {"errors": jsonable_encoder(exc.errors())},
        },
    )


@app.get("/ping")
def ping() -> Dict[str, str]:
    """Health check endpoint.

    Returns:
        Dictionary with status key set to "ok".
    """
    return {"status": "ok"}


@app.get("/status")
def get_status() -> Dict[str, Any]:
    """Report whether data is loaded and how much of it there is."""
    return {"version": __version__, **recommend.get_cache_status()}


@app.get("/metrics")
def get_metrics() -> Dict[str, Any]:
    """Recommendation request counts and latency statistics."""
    return metrics_service.get_metrics()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "hybridrec.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
