"""
Weather Readings API - Backend
==============================
FastAPI application serving weather station readings to API key holders.

ARCHITECTURE:
    [Client] --ApiKey header--> [Role gate] ---> [Routers] ---> [Services]
                                                                    |
                                                                    v
                                                          [Document store (JSON file)]

ROLES:
    Admin > Teacher > Student. Students read and bulk-insert readings;
    Teachers also manage readings and accounts.

HOW TO RUN:
    # Install
    pip install -e .

    # Copy environment config
    cp env.example.txt .env
    # Edit .env (set BOOTSTRAP_ADMIN_USERNAME / BOOTSTRAP_ADMIN_PASSWORD
    # the first time so there is someone to log in as)

    # Run the server
    cd backend
    uvicorn weather_api.main:app --reload --port 8000

API DOCUMENTATION:
    After starting the server, visit:
    - Swagger UI: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from weather_api.config import Config
from weather_api.errors import WeatherApiError
from weather_api.routers import accounts_router, readings_router, set_services
from weather_api.services import AccountService, AuthenticationGate, DocumentStore, ReadingService


logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    STARTUP:
        1. Open the document store (loads the JSON file if there is one)
        2. Build the account and reading services and the role gate
        3. Seed the bootstrap admin if no accounts exist
        4. Inject everything into the routers
    """
    # ========== STARTUP ==========
    logger.info("Weather Readings API starting")

    store = DocumentStore(Config.DATABASE_FILE or None)
    accounts = AccountService(store)
    readings = ReadingService(store, precipitation_window_months=Config.PRECIPITATION_WINDOW_MONTHS)
    gate = AuthenticationGate(accounts)

    accounts.ensure_bootstrap_admin(Config.BOOTSTRAP_ADMIN_USERNAME, Config.BOOTSTRAP_ADMIN_PASSWORD)

    set_services(accounts, readings, gate)

    logger.info(f"Database: {Config.DATABASE_FILE or 'in memory'}")
    logger.info(f"Precipitation window: {Config.PRECIPITATION_WINDOW_MONTHS} months")
    logger.info(f"Bulk account creation: {'on' if Config.ENABLE_BULK_ACCOUNT_CREATE else 'off'}")
    logger.info(f"CORS origins: {len(Config.CORS_ORIGINS)} configured")

    yield  # Application runs here

    # ========== SHUTDOWN ==========
    logger.info("Shutting down")


# =============================================================================
# CREATE FASTAPI APPLICATION
# =============================================================================

app = FastAPI(
    title="Weather Readings API",
    description="""
## Overview

Weather station readings and the accounts allowed to use them.

## Authentication

1. `POST /api/accounts/login` with a username and password
2. Send the returned `credential` as the `ApiKey` header on every other request

| Role | Can |
|------|-----|
| **Student** | Read readings, run reports, bulk insert readings |
| **Teacher** | Everything a Student can, plus change/delete readings and manage accounts |
| **Admin** | Everything |

## Errors

Every error comes back as `{"detail": "..."}`. A missing key is 401; an
unknown key or a role that is too low is 403.
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# ERROR HANDLING
# =============================================================================

@app.exception_handler(WeatherApiError)
async def weather_api_error_handler(request: Request, exc: WeatherApiError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# =============================================================================
# INCLUDE ROUTERS
# =============================================================================

app.include_router(accounts_router)
app.include_router(readings_router)


# =============================================================================
# ROOT ENDPOINTS
# =============================================================================

@app.get(
    "/",
    summary="API Information",
    description="Get basic API information and available endpoints."
)
async def root():
    """Root endpoint with API overview."""
    return {
        "name": "Weather Readings API",
        "version": "1.0.0",
        "documentation": {
            "swagger": "/docs",
            "redoc": "/redoc",
            "openapi": "/openapi.json"
        },
        "endpoints": {
            "accounts": {
                "login": "POST /api/accounts/login",
                "me": "GET /api/accounts",
                "create": "POST /api/accounts",
                "by_id": "GET /api/accounts/by-id?id=",
                "replace": "PUT /api/accounts/{id}",
                "patch": "PATCH /api/accounts/patch-many",
                "delete_inactive": "DELETE /api/accounts/inactive?days=",
                "delete": "DELETE /api/accounts/{id}"
            },
            "readings": {
                "list": "GET /api/readings",
                "get": "GET /api/readings/{id}",
                "create": "POST /api/readings",
                "create_many": "POST /api/readings/create-many",
                "replace": "PUT /api/readings/{id}",
                "patch": "PATCH /api/readings",
                "patch_precipitation": "PATCH /api/readings/{id}/precipitation",
                "delete": "DELETE /api/readings/{id}",
                "delete_matching": "POST /api/readings/delete-matching"
            },
            "reports": {
                "max_temperature": "GET /api/readings/max-temperature?time_from=&time_to=",
                "hour": "GET /api/readings/hour?hour=",
                "max_precipitation": "GET /api/readings/max-precipitation?device_name="
            }
        }
    }


@app.get(
    "/health",
    summary="Health Check",
    description="Check if the backend is running."
)
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "database": Config.DATABASE_FILE or "memory",
        "precipitation_window_months": Config.PRECIPITATION_WINDOW_MONTHS
    }
