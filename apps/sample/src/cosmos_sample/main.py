"""Main FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import HTTPException
from fastapi.responses import JSONResponse

from cosmos_data import get_cosmos_config
from cosmos_data.exceptions import (
    ConfigurationError,
    CosmosDataError,
    DatabaseCreationError,
    DocumentAlreadyExistsError,
    IllegalQueryError,
    OptimisticLockingError,
    ThrottledError,
)
from cosmos_sample.config import get_settings
from cosmos_sample.routes import api_router
from cosmos_sample.services import close_services
from cosmos_sample.services.cosmos_db_init import initialize_cosmos_db

# Initialize settings
settings = get_settings()

# Configure logging
logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

# Most specific first
_ERROR_STATUS: tuple[tuple[type[CosmosDataError], int], ...] = (
    (DocumentAlreadyExistsError, status.HTTP_409_CONFLICT),
    (OptimisticLockingError, status.HTTP_412_PRECONDITION_FAILED),
    (ThrottledError, status.HTTP_429_TOO_MANY_REQUESTS),
    (IllegalQueryError, status.HTTP_400_BAD_REQUEST),
    (ConfigurationError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (DatabaseCreationError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def error_status(exc: CosmosDataError) -> int:
    """HTTP status code reported for a persistence error."""
    for error_cls, status_code in _ERROR_STATUS:
        if isinstance(exc, error_cls):
            return status_code
    return status.HTTP_502_BAD_GATEWAY


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Handle application lifespan events."""
    # Startup
    logger.info("%s v%s started", settings.app_name, settings.app_version)
    logger.info("Environment: %s", settings.environment)
    logger.info("Log level: %s", settings.log_level)

    logger.info("Initializing Cosmos DB...")
    await initialize_cosmos_db(settings, get_cosmos_config())

    yield

    # Shutdown
    await close_services()
    logger.info("%s shutting down", settings.app_name)


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Users stored in Azure Cosmos DB through cosmos_data repositories",
    version=settings.app_version,
    lifespan=lifespan,
    redirect_slashes=False,
)


@app.exception_handler(CosmosDataError)
async def cosmos_data_exception_handler(request: Request, exc: CosmosDataError) -> JSONResponse:
    """Map persistence errors to HTTP responses."""
    status_code = error_status(exc)
    if status_code >= 500:
        logger.error("Cosmos DB error on %s %s: %s", request.method, request.url.path, exc)
    else:
        logger.warning("Cosmos DB error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler returning a JSON body for unexpected errors."""
    # Let FastAPI handle HTTPException normally
    if isinstance(exc, HTTPException):
        raise exc

    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )


# Include routers
app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cosmos_sample.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
