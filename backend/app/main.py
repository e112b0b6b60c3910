"""
Chirp Backend — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn app.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │ Req ID   │→│  Logging        │→│  CORS        │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────────┐ ┌─────────────────┐   │
    │  │ POST/GET /graphql        │ │ GET /health     │   │
    │  │ (context: db + tokens)   │ └─────────────────┘   │
    │  └──────────────────────────┘                       │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from strawberry.fastapi import GraphQLRouter

from app import __version__
from app.config import Settings, settings as default_settings
from app.database import dispose_engine, get_db_session
from app.exceptions import ChirpError
from app.graphql.context import GraphQLContext
from app.graphql.schema import create_schema
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import health
from app.services.token_service import TokenCodec

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request noise from libraries; our own middleware covers access logs
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    # Strawberry logs every resolver error with a traceback; ChirpSchema
    # already logs them at the right level
    logging.getLogger("strawberry.execution").setLevel(logging.CRITICAL)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    logger.info("Chirp backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: development setups run on the default secret
        logger.error("Configuration error: %s", str(e))

    logger.info(
        "GraphQL endpoint ready at http://%s:%d%s",
        settings.backend_host,
        settings.backend_port,
        settings.graphql_path,
    )

    yield

    logger.info("Chirp backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


async def get_graphql_context(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> GraphQLContext:
    """
    Context getter for the GraphQL router.

    A FastAPI dependency, so each GraphQL request gets its own session from
    get_db_session (committed after the response, rolled back on error).
    """
    return GraphQLContext(db=db, tokens=request.app.state.token_codec)


def register_exception_handlers(app: FastAPI) -> None:
    """
    JSON error responses for the REST routes.

    GraphQL errors never reach these handlers; Strawberry turns them into
    the `errors` list of a 200 response.
    """

    @app.exception_handler(ChirpError)
    async def handle_chirp_error(request: Request, exc: ChirpError):
        rid = request_id_var.get("")
        logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=400,
            content={"error": type(exc).__name__, "message": exc.message, "request_id": rid},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Overrides the process-wide settings (tests build apps
                  with a different permission fallback, for example).
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Chirp API",
        description="GraphQL API for users, profiles and tweets.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.token_codec = TokenCodec.from_settings(settings)

    # Middleware executes in reverse order of addition
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware, graphql_path=settings.graphql_path)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    graphql_router = GraphQLRouter(
        create_schema(settings),
        context_getter=get_graphql_context,
        graphql_ide="graphiql" if settings.graphiql_enabled else None,
    )
    app.include_router(graphql_router, prefix=settings.graphql_path)
    app.include_router(health.router)

    return app


app = create_app()
