"""
FastAPI application for the Sports League API.

Serves:
- REST endpoints for teams, players, games and score events under /api
- A WebSocket live feed at /ws/live
- Health checks and an endpoint index at /api
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import msgspec
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from ..broadcast import LiveHub, drain_pending
from ..core.config import get_settings
from ..errors import LeagueError
from ..pg_async import AsyncPostgresDB
from .errors import (
    APIError,
    api_error_handler,
    error_envelope,
    http_exception_handler,
    league_error_handler,
    request_validation_handler,
)
from .rate_limit import RateLimitMiddleware, get_rate_limiters
from .routers import events, games, live, players, teams

logger = logging.getLogger(__name__)


class MSGSpecResponse(Response):
    """Custom response class using msgspec for fast JSON serialization."""

    media_type = "application/json"

    def render(self, content: Any) -> bytes:
        if content is None:
            return b""
        return msgspec.json.encode(content)


API_ENDPOINTS: dict[str, dict[str, str]] = {
    "teams": {
        "GET /api/teams": "Get all teams",
        "GET /api/teams/:id": "Get team by ID",
        "GET /api/teams/:id/stats": "Get team statistics",
        "POST /api/teams": "Create new team",
        "PUT /api/teams/:id": "Update team",
        "DELETE /api/teams/:id": "Delete team",
    },
    "players": {
        "GET /api/players": "Get all players (optional team_id filter)",
        "GET /api/players/:id": "Get player by ID",
        "GET /api/players/:id/stats": "Get player statistics (optional game_id filter)",
        "POST /api/players": "Create new player",
        "PUT /api/players/:id": "Update player",
        "PUT /api/players/:id/stats/:gameId": "Update player stats",
        "DELETE /api/players/:id": "Delete player",
    },
    "games": {
        "GET /api/games": "Get all games (optional status and sport filters)",
        "GET /api/games/live": "Get live games",
        "GET /api/games/upcoming": "Get upcoming games",
        "GET /api/games/finished": "Get finished games",
        "GET /api/games/:id": "Get game by ID",
        "GET /api/games/:id/info": "Get detailed game info",
        "POST /api/games": "Create new game",
        "PUT /api/games/:id/score": "Update game score",
        "PUT /api/games/:id/status": "Update game status",
        "DELETE /api/games/:id": "Delete game",
    },
    "events": {
        "GET /api/events": "Get score events (optional game_id, team_id, limit)",
        "GET /api/events/recent": "Get recent events",
        "POST /api/events": "Create score event",
        "DELETE /api/events/:id": "Delete score event",
    },
    "websocket": {
        "/ws/live": "WebSocket endpoint for live updates",
    },
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle.

    Startup:
    - Open the database connection pool (unless one was provided)

    Shutdown:
    - Let in-flight broadcasts finish
    - Close the pool if it was opened here
    """
    settings = get_settings()
    logger.info("Starting %s...", settings.app_name)

    owned_db = None
    if app.state.db is None:
        try:
            owned_db = AsyncPostgresDB(
                settings.db_url or None,
                min_pool_size=settings.database_pool_min_size,
                max_pool_size=settings.database_pool_size,
                pool_timeout=settings.database_pool_timeout,
            )
            await owned_db.initialize()
            app.state.db = owned_db
            logger.info(
                "Database connection pool opened (max_size=%d, timeout=%ss)",
                settings.database_pool_size,
                settings.database_pool_timeout,
            )
        except Exception as e:
            # Requests that need the store answer 503 until restart
            logger.error("Failed to initialize database: %s", e)
            owned_db = None

    yield

    logger.info("Shutting down %s...", settings.app_name)
    await drain_pending()
    if owned_db is not None:
        await owned_db.close()
        app.state.db = None


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Teams, players, games and live score events with WebSocket updates",
        version=settings.app_version,
        default_response_class=MSGSpecResponse,
        lifespan=lifespan,
    )
    app.state.db = None
    app.state.hub = LiveHub()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        allow_credentials=settings.cors_allow_credentials,
        expose_headers=settings.cors_expose_headers,
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RateLimitMiddleware)

    @app.middleware("http")
    async def add_process_time(request: Request, call_next):
        """Add timing header to all responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000
        response.headers["X-Process-Time"] = f"{process_time:.2f}ms"
        return response

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(LeagueError, league_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions with consistent format."""
        logger.error("Unhandled exception: %s", exc, exc_info=True)
        show_detail = settings.debug and settings.environment != "production"
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_envelope("Internal Server Error", str(exc) if show_detail else None),
        )

    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check endpoint."""
        return {
            "success": True,
            "message": "Sports League API is running",
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
            "version": settings.app_version,
        }

    @app.get("/health/db", tags=["health"])
    async def health_check_db(request: Request):
        """Database connectivity health check."""
        db = request.app.state.db
        try:
            if db is None or not await db.ping():
                raise LeagueError("Database not initialized")
        except LeagueError as e:
            logger.error("Database health check failed: %s", e.message)
            return JSONResponse(
                status_code=503,
                content=error_envelope("Database connection failed"),
            )
        return {
            "success": True,
            "message": "Database connected",
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        }

    @app.get("/health/rate-limit", tags=["health"])
    async def health_check_rate_limit():
        """Rate limiter status per policy."""
        return {
            "success": True,
            "data": {
                "enabled": settings.rate_limit_enabled,
                "policies": {name: limiter.get_stats() for name, limiter in get_rate_limiters().items()},
            },
        }

    @app.get("/health/live", tags=["health"])
    async def health_check_live(request: Request):
        """Live feed room membership counts."""
        return {"success": True, "data": request.app.state.hub.get_stats()}

    @app.get("/api", tags=["root"])
    async def api_index():
        """API documentation: every endpoint with a short description."""
        return {
            "success": True,
            "message": f"{settings.app_name} v{settings.app_version}",
            "endpoints": API_ENDPOINTS,
        }

    prefix = settings.api_prefix
    app.include_router(teams.router, prefix=f"{prefix}/teams", tags=["teams"])
    app.include_router(players.router, prefix=f"{prefix}/players", tags=["players"])
    app.include_router(games.router, prefix=f"{prefix}/games", tags=["games"])
    app.include_router(events.router, prefix=f"{prefix}/events", tags=["events"])
    app.include_router(live.router, tags=["live"])

    return app


app = create_app()
