"""
Sensor Data API - Backend
=========================
FastAPI application serving indoor air quality readings from MySQL.

ARCHITECTURE:
    Sensors POST their readings here, the dashboard GETs them back out.

    [IAQ Sensors] --POST--> [This Backend] <--GET-- [Dashboard]
                                  |
                                  v
                          [MySQL: IAQ_SEN55]

HOW TO RUN:
    # Install
    pip install -e .

    # Copy environment config and fill in MYSQL_HOST, MYSQL_USER, ...
    cp .env.example .env

    # Run the server (listens on $PORT, default 8080)
    sensor-api

    # ...or with auto-reload while developing
    uvicorn sensor_api.main:app --reload --port 8080

API DOCUMENTATION:
    After starting the server, visit:
    - Swagger UI: http://localhost:8080/docs
    - ReDoc: http://localhost:8080/redoc
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from sensor_api import __version__
from sensor_api.errors import SensorApiError, StorageError, ValidationError
from sensor_api.models import HealthResponse
from sensor_api.routers import sensor_data_router
from sensor_api.services import (
    DatabaseConfig,
    SensorDataRepository,
    SensorDataService,
    create_db_engine,
)


# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back to default."""
    try:
        return int(os.getenv(name, ""))
    except ValueError:
        return default


class Config:
    """
    Application configuration loaded from environment variables.

    Environment Variables:
        PORT: Port to listen on (default: 8080)
        LOG_LEVEL: DEBUG, INFO, WARNING, ... (default: INFO)

    Database settings (MYSQL_*) are read by DatabaseConfig.from_env().
    """

    PORT = _env_int("PORT", 8080)

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # CORS is a fixed policy: any origin, with credentials
    CORS_ORIGINS = ["*"]
    CORS_METHODS = ["GET", "POST", "PUT", "DELETE"]
    CORS_HEADERS = ["Content-Type", "Authorization"]


def setup_logging(level: str = Config.LOG_LEVEL) -> None:
    """Configure logging for the whole process (once, at startup)."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


# Configure at import so `uvicorn sensor_api.main:app` gets our log format too
setup_logging()


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(repository: Optional[SensorDataRepository] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        repository: Use this repository instead of connecting to MySQL from
            the environment. The caller keeps ownership of it (tests pass
            one backed by SQLite).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        STARTUP:
            1. Build the pooled engine from the environment (unless injected)
            2. Check the database answers. If it doesn't, we don't start
            3. Put the service on app.state for the routers

        SHUTDOWN:
            1. Dispose of the pool (only if we created it)
        """
        owns_repository = repository is None
        repo = repository
        if repo is None:
            repo = SensorDataRepository(create_db_engine(DatabaseConfig.from_env()))

        try:
            repo.ping()
        except StorageError as e:
            logger.critical(f"Failed to connect to database: {e.cause}")
            if owns_repository:
                repo.close()
            raise

        app.state.sensor_data_service = SensorDataService(repo)
        logger.info(f"Sensor Data API v{__version__} ready")

        yield  # Application runs here

        logger.info("Shutting down...")
        if owns_repository:
            repo.close()

    app = FastAPI(
        title="Sensor Data API",
        description="Store and query indoor air quality readings (IAQ_SEN55).",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # =========================================================================
    # CORS MIDDLEWARE
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=Config.CORS_METHODS,
        allow_headers=Config.CORS_HEADERS,
    )

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.exception_handler(SensorApiError)
    async def sensor_api_error_handler(request: Request, exc: SensorApiError):
        """Map our errors to a status code and a short plain-text message."""
        if isinstance(exc, ValidationError):
            logger.info(f"{request.method} {request.url.path} rejected: {exc.cause}")
        else:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}: {exc.cause}")
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        """FastAPI couldn't parse the body or a parameter - that's a 400 for us."""
        message = "Invalid request body" if request.method == "POST" else "Invalid query parameters"
        logger.info(f"{request.method} {request.url.path} rejected: {exc.errors()}")
        return PlainTextResponse(message, status_code=400)

    # =========================================================================
    # ROUTERS
    # =========================================================================

    app.include_router(sensor_data_router)

    # =========================================================================
    # ROOT ENDPOINTS
    # =========================================================================

    @app.get(
        "/",
        summary="API Information",
        description="Get basic API information and available endpoints.",
    )
    async def root():
        """Root endpoint with API overview."""
        return {
            "name": "Sensor Data API",
            "version": __version__,
            "documentation": {
                "swagger": "/docs",
                "redoc": "/redoc",
                "openapi": "/openapi.json",
            },
            "endpoints": {
                "history": "GET /api/sensor-data?startDate=&endDate=&limit=",
                "latest": "GET /api/sensor-data/latest?limit=",
                "insert": "POST /api/sensor-data",
                "health": "GET /health",
            },
        }

    @app.get(
        "/health",
        summary="Health Check",
        description="Check that the backend is running and can reach the database.",
        response_model=HealthResponse,
    )
    def health(request: Request):
        """Health check endpoint."""
        service: SensorDataService = request.app.state.sensor_data_service
        try:
            service.repository.ping()
        except StorageError as e:
            logger.warning(f"Health check failed: {e.cause}")
            body = HealthResponse(status="unhealthy", database="unreachable", version=__version__)
            return JSONResponse(status_code=503, content=body.model_dump())
        return HealthResponse(status="healthy", database="connected", version=__version__)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve on Config.PORT."""
    logger.info(f"Starting sensor API server on port {Config.PORT}...")
    uvicorn.run(app, host="0.0.0.0", port=Config.PORT)


if __name__ == "__main__":
    run()
