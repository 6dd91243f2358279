"""
FastAPI application entry point for the Coaching Trends API.

Configures logging, CORS and the database pool lifecycle, and registers the
coaching trend router. Endpoints receive their collaborators through
coaching_trends.core.dependencies, so tests override those rather than
patching modules.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coaching_trends import __version__
from coaching_trends.api import api_router
from coaching_trends.core.database import init_db, close_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    On startup:
        - Initialize database connection pool

    On shutdown:
        - Close database connection pool
    """
    logger.info("Coaching Trends API starting")
    try:
        await init_db()
        logger.info("Database connection pool initialized")
    except Exception as e:
        # Health and docs stay up; data endpoints fail until the pool exists
        logger.error(f"Failed to initialize database: {e}")

    yield

    logger.info("Coaching Trends API shutting down")
    try:
        await close_db()
        logger.info("Database connection pool closed")
    except Exception as e:
        logger.error(f"Error closing database pool: {e}")


# Create FastAPI application
app = FastAPI(
    title="Coaching Trends API",
    version=__version__,
    description=(
        "Tiered AI trend analysis over sales call evaluations for reps, "
        "teams and the organization, plus statistical coaching summaries."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """API name, version and documentation links."""
    return {
        "name": "Coaching Trends API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "coaching_trends.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
