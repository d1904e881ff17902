"""
FastAPI Application Configuration

This module contains the main FastAPI application setup with:
- CORS middleware
- API routes
- Error handling
"""

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from .. import __version__
from ..config import get_settings

settings = get_settings()

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger(__name__)


# =============================================================================
# Application Lifespan
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events"""
    logger.info("Starting NetSpike API...")
    logger.info("Session limit: %d, default modifier: %s",
                settings.MAX_SESSIONS, settings.DEFAULT_MODIFIER or "NONE")

    yield

    logger.info("Shutting down...")


# =============================================================================
# Create FastAPI Application
# =============================================================================

app = FastAPI(
    title="NetSpike API",
    description="""
    API for NetSpike - a turn-based hacking game played through typed commands.

    ## Features
    - Create and manage game sessions, optionally seeded
    - Submit command lines and receive typed log entries
    - Pick one of the rule modifiers at creation
    - Game-over summaries and log history
    """,
    version=__version__,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)


# =============================================================================
# CORS Configuration
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Import and Include Routers
# =============================================================================

from .routes import games

app.include_router(games.router, prefix="/api/games", tags=["Games"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """API root endpoint with welcome message and links"""
    return {
        "message": "Welcome to the NetSpike API",
        "version": __version__,
        "documentation": "/api/docs",
        "health": "/health",
        "endpoints": {
            "games": "/api/games",
            "modifiers": "/api/games/modifiers",
        }
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for monitoring"""
    return {
        "status": "healthy",
        "service": "netspike-api",
        "version": __version__,
        "sessions": len(games.games_store),
    }


# =============================================================================
# Error Handlers
# =============================================================================

@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Custom HTTP exception handler"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "status_code": exc.status_code
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    """Malformed request bodies are client errors"""
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request",
            "details": [e.get("msg", "") for e in exc.errors()],
            "status_code": 400
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Handle all unhandled exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "status_code": 500
        }
    )


def run():
    """Serve the API with uvicorn using the configured host and port"""
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
