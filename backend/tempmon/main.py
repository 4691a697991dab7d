"""
TempMon - Measurement API
=========================
FastAPI application that ingests temperature/humidity readings from
networked sensors and serves them to the dashboard.

ARCHITECTURE:

    [Sensor] --POST /request--> [Ingestion] --> [Measurement Store] --> [Database]
                                                        ^
    [Dashboard] --GET /measurements, /rooms, ...--------+

    Each request runs on its own worker thread and opens its own database
    connection. No state is kept between requests.

HOW TO RUN:
    # Install
    pip install -e .

    # Copy environment config
    cp env.example.txt .env
    # Edit .env with your settings

    # Run the server
    tempmon
    # or
    uvicorn tempmon.main:create_app --factory --port 9247

API DOCUMENTATION:
    After starting the server, visit:
    - Swagger UI: http://localhost:9247/docs
    - ReDoc: http://localhost:9247/redoc
    - OpenAPI JSON: http://localhost:9247/openapi.json
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from tempmon import __version__
from tempmon.config import Settings
from tempmon.errors import StoreError
from tempmon.routers import devices_router, ingest_router, measurements_router
from tempmon.routers.errors import request_validation_handler
from tempmon.services import IngestionService, MeasurementStore

logger = logging.getLogger(__name__)


# =============================================================================
# LOGGING
# =============================================================================

def configure_logging(settings: Settings) -> None:
    """Send log records to stderr. Does nothing if logging is already set up."""
    logging.basicConfig(
        level=settings.log_level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


# =============================================================================
# APPLICATION LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    STARTUP:
        1. Create the measurements table / add missing columns
        2. Log the configuration

    SHUTDOWN:
        1. Dispose of the engine
    """
    settings: Settings = app.state.settings
    store: MeasurementStore = app.state.store

    logger.info("Starting TempMon backend")
    store.initialize()
    logger.info(f"Database: {store.engine.url.render_as_string(hide_password=True)}")
    logger.info(f"CORS origins: {', '.join(settings.cors_origin_list)}")

    yield  # Application runs here

    logger.info("Shutting down...")
    store.engine.dispose()


# =============================================================================
# CREATE FASTAPI APPLICATION
# =============================================================================

def create_app(settings: Optional[Settings] = None, store: Optional[MeasurementStore] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration (default: Settings.from_env())
        store: Measurement store (default: one built from settings)

    Returns:
        A FastAPI app with the store and ingestion service on `app.state`
    """
    settings = settings or Settings.from_env()
    configure_logging(settings)

    app = FastAPI(
        title="Tempmon API",
        description="""
## Overview

Collects temperature and humidity readings from sensors on the network
and serves them to the dashboard.

## How It Works

1. **Sensors submit** - `POST /request` with a `type` of
   `TEMPERATURE_HUMIDITY`, `HUMIDITY` or `TEMPERATURE`
2. **Readings are stored** - one row per submission
3. **Dashboard reads** - pages, time windows, averages, latest per device,
   devices and rooms
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    store = store or MeasurementStore(settings)
    app.state.settings = settings
    app.state.store = store
    app.state.ingestion = IngestionService(store)

    # =========================================================================
    # CORS MIDDLEWARE
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # =========================================================================
    # INCLUDE ROUTERS
    # =========================================================================

    app.include_router(ingest_router)
    app.include_router(measurements_router)
    app.include_router(devices_router)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # =========================================================================
    # ROOT ENDPOINTS
    # =========================================================================

    @app.get("/", summary="API Information")
    async def root():
        """Root endpoint with API overview."""
        return {
            "name": "Tempmon API",
            "version": __version__,
            "documentation": {
                "swagger": "/docs",
                "redoc": "/redoc",
                "openapi": "/openapi.json",
            },
            "endpoints": {
                "submit": "POST /request",
                "measurements": {
                    "page": "GET /measurements",
                    "device": "GET /measurements/device?deviceMac=",
                    "timerange": "GET /measurements/timerange",
                    "avg_temperature": "GET /measurements/avgTemperature",
                    "avg_humidity": "GET /measurements/avgHumidity",
                    "latest": "GET /measurements/latest",
                },
                "devices": "GET /devices",
                "rooms": {
                    "list": "GET /rooms",
                    "measurements": "GET /rooms/measurements?room=",
                },
            },
        }

    @app.get("/health", summary="Health Check")
    def health():
        """Check the backend is running and the database answers."""
        try:
            app.state.store.ping()
        except StoreError as e:
            logger.warning(f"Health check failed: {e}")
            return {"status": "degraded", "database": str(e)}
        return {"status": "healthy", "database": "ok"}

    return app


def main() -> None:
    """Console entry point: build the app once and serve it with uvicorn."""
    settings = Settings.from_env()
    app = create_app(settings)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
