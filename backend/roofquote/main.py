"""Roof Quotes API: FastAPI application entry point.

Mounts the quote routes, configures CORS and serves uploads/output as
static files. /uploads must be publicly reachable so the image API can
fetch before photos.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from roofquote import __version__
from roofquote.api.router import api_router
from roofquote.config import get_settings
from roofquote.services.llm_client import close_client

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _warn_missing_config() -> None:
    if not settings.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY not set")
    if not settings.NANO_BANANA_API_KEY:
        logger.warning("NANO_BANANA_API_KEY not set")
    if not settings.PUBLIC_BASE_URL:
        logger.warning("PUBLIC_BASE_URL not set (required for NanoBanana to fetch your images)")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: prepare storage on startup, close clients on shutdown."""
    logger.info("%s starting up...", settings.APP_NAME)
    _warn_missing_config()

    os.makedirs(settings.UPLOADS_DIR, exist_ok=True)
    os.makedirs(settings.OUTPUT_DIR, exist_ok=True)

    if settings.PUBLIC_BASE_URL:
        logger.info("Public base URL: %s", settings.PUBLIC_BASE_URL)
        logger.info("BEFORE images: %s/uploads/<file>", settings.PUBLIC_BASE_URL.rstrip("/"))
    logger.info(
        "Default response mode: %s (override per request with ?response=buffer|file)",
        settings.default_response_mode,
    )

    yield

    await close_client()
    logger.info("%s shut down", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    description="Dakrenovatie-offertes met AI voor/na-impressie als PDF",
    version=__version__,
    lifespan=lifespan,
    redirect_slashes=False,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount API routes
app.include_router(api_router)

# Mount static files
os.makedirs(settings.UPLOADS_DIR, exist_ok=True)
os.makedirs(settings.OUTPUT_DIR, exist_ok=True)
app.mount("/output", StaticFiles(directory=settings.OUTPUT_DIR), name="output")
app.mount("/uploads", StaticFiles(directory=settings.UPLOADS_DIR), name="uploads")
