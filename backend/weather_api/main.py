"""
Weather Data API - Backend
==========================
FastAPI application serving weather sensor readings and user accounts
from MongoDB.

ARCHITECTURE:
    Every endpoint except / and /health needs an API key.

    [Client] --apiKey header--> [ApiKeyGate] --> [Authorizer] --> [CredentialStore]
                                     |                                   |
                                     v                                   v
                                [Endpoint] --> [TelemetryRepository]  [MongoDB "Users"]
                                                      |
                                                      v
                                         [MongoDB "WeatherSensorReadings"]

ROLES:
    STUDENT  - read readings
    TEACHER  - read, add and change readings; manage accounts
    SENSOR   - add readings

HOW TO RUN:
    # Install
    pip install -e .

    # Copy environment config
    cp backend/env.example.txt backend/.env
    # Edit .env with your settings

    # Run the server (from backend/)
    uvicorn weather_api.main:app --reload --port 8000

API DOCUMENTATION:
    After starting the server, visit:
    - Swagger UI: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
    - OpenAPI JSON: http://localhost:8000/openapi.json
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.database import Database

from weather_api.database import connect, ensure_indexes, ping
from weather_api.routers import create_datapoints_router, create_users_router
from weather_api.services import Authorizer, CredentialStore, TelemetryRepository


# Load environment variables from .env file
load_dotenv()


# =============================================================================
# CONFIGURATION
# =============================================================================

class Config:
    """
    Application configuration loaded from environment variables.

    Environment Variables:
        MONGO_CONNECTION_STRING: MongoDB connection string
        MONGO_DATABASE_NAME: Database holding Users and WeatherSensorReadings
        MAX_PRECIPITATION_WINDOW_MONTHS: How far back max-precipitation looks (default: 50)
        FRONTEND_URL: URL of the frontend for CORS
        LOG_LEVEL: Logging level (default: INFO)

    Defaults are set for local development against a local mongod.
    """

    MONGO_CONNECTION_STRING = os.getenv("MONGO_CONNECTION_STRING", "mongodb://localhost:27017")
    MONGO_DATABASE_NAME = os.getenv("MONGO_DATABASE_NAME", "WeatherData")

    # The sample data is old, so "recent" reaches back about four years.
    # Shrink this once live data is flowing.
    MAX_PRECIPITATION_WINDOW_MONTHS = int(os.getenv("MAX_PRECIPITATION_WINDOW_MONTHS", "50"))

    # Frontend URL for CORS
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

    # Allowed CORS origins
    CORS_ORIGINS = [
        FRONTEND_URL,
        "https://www.google.com",
        "https://www.google.com.au",
        "http://localhost:5173",    # Vite dev server
        "http://localhost:3000",    # Create React App
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


logging.basicConfig(
    level=Config.LOG_LEVEL,
    format='[%(asctime)s] %(message)s',
    datefmt='%H:%M:%S',
    handlers=[logging.StreamHandler(sys.stderr)]
)
logger = logging.getLogger(__name__)


# =============================================================================
# CREATE FASTAPI APPLICATION
# =============================================================================

def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    Args:
        database: Database to serve from. Defaults to the one named in
            Config. Tests pass a mongomock database here.
    """
    if database is None:
        database = connect(Config.MONGO_CONNECTION_STRING, Config.MONGO_DATABASE_NAME)

    credential_store = CredentialStore(database)
    authorizer = Authorizer(credential_store)
    readings = TelemetryRepository(
        database,
        precipitation_window_months=Config.MAX_PRECIPITATION_WINDOW_MONTHS,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        STARTUP:
            1. Make sure the unique indexes exist
            2. Print startup information

        SHUTDOWN:
            1. Close the MongoDB client
        """
        # ========== STARTUP ==========
        print("=" * 60)
        print("WEATHER DATA API - Starting Backend")
        print("=" * 60)

        ensure_indexes(database)

        print(f"   Database: {database.name}")
        print(f"   Max precipitation window: {Config.MAX_PRECIPITATION_WINDOW_MONTHS} months")
        print(f"   CORS origins: {len(Config.CORS_ORIGINS)} configured")
        print()
        print("API Documentation: http://localhost:8000/docs")
        print("=" * 60)

        yield  # Application runs here

        # ========== SHUTDOWN ==========
        print()
        print("Shutting down...")
        database.client.close()
        print("Shutdown complete")

    app = FastAPI(
        title="Weather Data API",
        description="""
## Overview

Weather sensor readings and the accounts allowed to read and write them.

## Authentication

Send your API key in the `apiKey` header on every request
(`{...}` around the key is fine). Keys are issued when a TEACHER creates
your account.

| Role | Can |
|------|-----|
| **STUDENT** | Read readings |
| **TEACHER** | Read, add and change readings; manage accounts |
| **SENSOR** | Add readings |

- No key: `401`
- Key not allowed for that endpoint: `403`
        """,
        version="1.0.0",
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
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # INCLUDE ROUTERS
    # =========================================================================

    app.include_router(create_datapoints_router(authorizer, readings))
    app.include_router(create_users_router(authorizer, credential_store))

    # =========================================================================
    # ROOT ENDPOINTS
    # =========================================================================

    @app.get(
        "/",
        summary="API Information",
        description="Get basic API information and available endpoints."
    )
    async def root():
        """Root endpoint with API overview."""
        return {
            "name": "Weather Data API",
            "version": "1.0.0",
            "documentation": {
                "swagger": "/docs",
                "redoc": "/redoc",
                "openapi": "/openapi.json"
            },
            "authentication": "apiKey header required on /api/*",
            "endpoints": {
                "readings": {
                    "range": "GET /api/DataPoint/range",
                    "device_range": "GET /api/DataPoint/{deviceName}/range",
                    "max_temperature": "GET /api/DataPoint/max-temperature",
                    "max_precipitation": "GET /api/DataPoint/max-precipitation",
                    "snapshot": "GET /api/DataPoint/snapshot/{deviceName}",
                    "get": "GET /api/DataPoint/{id}",
                    "add": "POST /api/DataPoint/record",
                    "add_many": "POST /api/DataPoint/multiple-records",
                    "replace": "PUT /api/DataPoint/{id}",
                    "precipitation": "PATCH /api/DataPoint/{id}/precipitation"
                },
                "accounts": {
                    "list": "GET /api/UserData",
                    "create": "POST /api/UserData",
                    "get": "GET /api/UserData/{id}",
                    "delete": "DELETE /api/UserData/{id}",
                    "delete_by_role": "DELETE /api/UserData/delete-by-role/{role}/from/{startDate}/to/{endDate}",
                    "update_access_level": "PATCH /api/UserData/update-access-level/from/{startDate}/to/{endDate}/to-role/{newRole}"
                }
            }
        }

    @app.get(
        "/health",
        summary="Health Check",
        description="Check if the backend is running and can reach MongoDB."
    )
    def health():
        """Health check endpoint."""
        database_ok = ping(database)
        return {
            "status": "healthy" if database_ok else "degraded",
            "database": database.name,
            "database_reachable": database_ok
        }

    return app


app = create_app()
