"""
AnimeTrack API - FastAPI application entry point.

Routers are registered here. Each service lives in animetrack/api/.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from animetrack.api import auth, catalog, custom_lists, profile, watchlist
from animetrack.core.config import settings
from animetrack.core.logging import configure_logging

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="AnimeTrack API",
    description="Backend for the AnimeTrack watchlist app.",
    version="0.1.0",
    docs_url="/docs" if settings.ENABLE_DOCS else None,
    redoc_url="/redoc" if settings.ENABLE_DOCS else None,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(auth.router,                prefix="/auth",      tags=["auth"])
app.include_router(catalog.router,             prefix="/catalog",   tags=["catalog"])
app.include_router(watchlist.router,           prefix="/watchlist", tags=["watchlist"])
app.include_router(custom_lists.router,        prefix="/lists",     tags=["custom-lists"])
app.include_router(custom_lists.shared_router, prefix="/shared",    tags=["custom-lists"])
app.include_router(profile.router,             prefix="/profile",   tags=["profile"])

logger.info("AnimeTrack API configured (env=%s)", settings.APP_ENV)


# ── Health check ──────────────────────────────────────────────────────────────
@app.get("/health", tags=["system"])
def health_check() -> dict:
    """Liveness probe. Returns 200 when the server is up."""
    return {"status": "ok", "version": app.version, "env": settings.APP_ENV}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("animetrack.main:app", host="0.0.0.0", port=settings.PORT)
