"""Master API router that mounts all sub-routers."""

from __future__ import annotations

from fastapi import APIRouter

from roofquote.api.quotes import router as quotes_router

api_router = APIRouter(redirect_slashes=False)

api_router.include_router(quotes_router)
