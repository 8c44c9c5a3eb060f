"""
Main FastAPI application for the basketball stats tracker.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text
from sqlalchemy.orm import Session

from hoopstats.core.auth import get_api_key
from hoopstats.core.config import settings
from hoopstats.core.database import get_db, init_db
from hoopstats.core.errors import GameRuleError
from hoopstats.core.logging import configure_logging, get_correlation_id, get_logger
from hoopstats.core.middleware import CorrelationIdMiddleware
from hoopstats.api.routes import games, players, stats, teams

# Configure structured logging (JSON in production, colored console otherwise)
configure_logging(
    level=settings.LOG_LEVEL,
    json_output=settings.LOG_JSON
)
logger = get_logger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """
    Get the rate limit key for a request.

    Uses IP address, with fallback to X-Forwarded-For for proxied requests.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=["120/minute"],
    storage_uri=settings.REDIS_URL if settings.RATE_LIMIT_STORAGE == "redis" else "memory://",
    enabled=settings.RATE_LIMIT_ENABLED
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan events."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")
    init_db()
    logger.info("Application started")

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Live basketball game tracking: rosters, lineups, substitutions, box scores and career stats",
    lifespan=lifespan
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Correlation ID middleware (must be added before CORS)
app.add_middleware(CorrelationIdMiddleware)

# Prometheus metrics must be wired before routes are added
instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# ROUTE REGISTRATION
# ============================================================================
# All resource routers are versioned under /api/v1 and require X-API-Key
# (skipped outside production when API_KEY is unset).
api_dependencies = [Depends(get_api_key)]

app.include_router(teams.router, prefix="/api/v1", dependencies=api_dependencies)
app.include_router(players.router, prefix="/api/v1", dependencies=api_dependencies)
app.include_router(games.router, prefix="/api/v1", dependencies=api_dependencies)
app.include_router(stats.router, prefix="/api/v1", dependencies=api_dependencies)


@app.get("/")
@limiter.limit("60/minute")
async def root(request: Request):
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "endpoints": {
            "api_version": "v1",
            "teams": "/api/v1/teams",
            "players": "/api/v1/players",
            "games": "/api/v1/games",
            "stats": "/api/v1/stats",
            "docs": "/docs",
            "health": "/health",
            "metrics": "/metrics"
        }
    }


@app.get("/health")
@limiter.limit("120/minute")
async def health_check(request: Request):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION
    }


@app.get("/api/health")
@limiter.limit("60/minute")
async def api_health(request: Request, db: Session = Depends(get_db)):
    """Detailed health check with database connectivity and row counts."""
    from hoopstats.models import Game, GameStats, Player, Team

    health_status = {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "components": {}
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["components"]["database"] = {
            "status": "connected",
            "counts": {
                "teams": db.query(Team).count(),
                "players": db.query(Player).count(),
                "games": db.query(Game).count(),
                "live_games": db.query(Game).filter(Game.status == "in_progress").count(),
                "game_stats": db.query(GameStats).count(),
            }
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status["status"] = "unhealthy"
        health_status["components"]["database"] = {"status": "error", "error": str(e)}

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JSONResponse(status_code=status_code, content=health_status)


# Exception handlers
@app.exception_handler(GameRuleError)
async def game_rule_exception_handler(request: Request, exc: GameRuleError):
    """Map a rule violation to its HTTP status with the error kind in the body."""
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc),
            "correlation_id": get_correlation_id(),
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "hoopstats.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
    )
