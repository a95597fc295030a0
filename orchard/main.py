"""FastAPI application entrypoint — lifespan, routers, middleware."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from orchard import __version__
from orchard.config import get_settings
from orchard.middleware.logging import RequestLoggingMiddleware, configure_structured_logging
from orchard.routes import insights, profiles
from orchard.services.profiles import ProfileRegistry

logger = structlog.get_logger("orchard")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application startup / shutdown lifecycle.

    Startup:
      1. Initialize structured logging
      2. Warm the plot profile table
    """
    settings = get_settings()
    configure_structured_logging(settings)
    logger.info(
        "orchard_starting",
        log_level=settings.log_level,
        timezone=settings.engine_timezone,
        default_plot=settings.default_plot_slug,
    )

    resolver = await app.state.profile_registry.get_resolver()
    logger.info("profile_table_ready", count=len(resolver.profiles), source=app.state.profile_registry.source)

    yield

    logger.info("orchard_shutting_down")


def _build_registry() -> ProfileRegistry:
    settings = get_settings()
    return ProfileRegistry(
        default_slug=settings.default_plot_slug,
        ttl_seconds=settings.profile_cache_ttl_seconds,
    )


app = FastAPI(
    title="Orchard Sight API",
    description=(
        "Agronomic insight engine — turns orchard weather forecasts and field "
        "activity logs into per-plot advisories and a headless visual manifest."
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)
app.state.profile_registry = _build_registry()

# ── Middleware ──────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


# ── Health check ────────────────────────────────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Basic health check — verifies the API process is alive."""
    return {
        "status": "ok",
        "service": "orchard-sight",
        "version": __version__,
        "profiles": app.state.profile_registry.source,
    }


# ── Router registration ────────────────────────────────────────────────────
app.include_router(insights.router, prefix="/api/v1")
app.include_router(profiles.router, prefix="/api/v1")
