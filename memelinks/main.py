# memelinks/main.py

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from memelinks import config
from memelinks.config import Settings, get_settings
from memelinks.db.base import create_engine_from_url, create_session_factory, init_schema
from memelinks.jobs.session_sweeper import run_session_sweeper
from memelinks.middleware.error_handler import ErrorHandlerMiddleware, setup_exception_handlers
from memelinks.middleware.rate_limiter import RateLimitMiddleware
from memelinks.observability.logger import configure_logging
from memelinks.repositories.link_repository import LinkRepository
from memelinks.routers.health import router as health_router
from memelinks.routers.links import router as links_router
from memelinks.routers.pages import router as pages_router
from memelinks.routers.records import router as records_router
from memelinks.services.api_key import ApiKeyGate
from memelinks.services.link_service import LinkService
from memelinks.services.session_registry import SessionRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """ Build the store, registry and sweeper; tear them down on shutdown. """
    settings: Settings = app.state.settings
    configure_logging(settings)

    # 1. Database engine and schema
    engine = create_engine_from_url(settings.DB_URL, echo=settings.DEBUG)
    if settings.AUTO_CREATE_SCHEMA:
        await init_schema(engine)
    repository = LinkRepository(create_session_factory(engine))

    # 2. Request-scoped collaborators live on app.state
    app.state.repository = repository
    app.state.link_service = LinkService(
        repository,
        max_url_length=settings.MAX_URL_LENGTH,
        clear_url_on_complete=settings.CLEAR_URL_ON_COMPLETE,
    )
    sessions = SessionRegistry(
        ttl_seconds=settings.SESSION_TTL_SECONDS,
        max_tokens=settings.SESSION_MAX_TOKENS,
    )
    app.state.sessions = sessions
    app.state.api_key_gate = ApiKeyGate(settings.API_KEY)
    if not settings.API_KEY:
        logger.warning("API_KEY is not set; worker endpoints will reject every request")

    # 3. Background tasks
    stop_event = asyncio.Event()
    sweeper = asyncio.create_task(
        run_session_sweeper(sessions, settings.SESSION_SWEEP_INTERVAL_SECONDS, stop_event)
    )
    logger.info("Server ready", extra={"host": settings.HOST, "port": settings.PORT})

    yield

    logger.info("Starting graceful shutdown...")
    stop_event.set()
    sweeper.cancel()
    try:
        await sweeper
    except asyncio.CancelledError:
        pass
    sessions.clear()
    await engine.dispose()
    logger.info("Shutdown complete.")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Meme Links",
        description="Collects submitted links and hands them to a polling worker",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Add middleware (order matters: last added = outermost)
    app.add_middleware(
        RateLimitMiddleware,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
    )
    # Error handler should be outermost to catch all errors
    app.add_middleware(ErrorHandlerMiddleware, debug=settings.DEBUG)

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(pages_router)
    app.include_router(links_router, prefix="/api")
    app.include_router(records_router, prefix="/api")

    app.mount("/static", StaticFiles(directory=config.STATIC_PATH), name="static")

    return app
