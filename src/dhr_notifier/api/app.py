"""FastAPI application factory."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest
from starlette.responses import Response

from dhr_notifier import __version__
from dhr_notifier.api.middleware.cors import setup_cors
from dhr_notifier.api.routes import api_router
from dhr_notifier.config.settings import AppConfig
from dhr_notifier.engine.client import NotifierEngine
from dhr_notifier.errors.notifier_errors import NotifierError
from dhr_notifier.metrics.middleware import PrometheusMiddleware

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


def _log_unhandled(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
    """Log exceptions from tasks nobody awaited instead of losing them."""
    exc = context.get("exception")
    logger.error("Unhandled error: %s", context.get("message"), exc_info=exc)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle hooks.

    Loads persisted state and starts the poll loop on startup; stops the
    loop and flushes the ledger on exit.
    """
    asyncio.get_running_loop().set_exception_handler(_log_unhandled)
    engine: NotifierEngine = app.state.engine

    try:
        await engine.initialize()
        logger.info("Notifier engine initialized")
        yield
    finally:
        await engine.close()
        logger.info("Notifier engine shut down")


def create_app(
    *,
    config: AppConfig | None = None,
    engine: NotifierEngine | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        config: Optional AppConfig. If *None*, a default config is created
            from environment variables.
        engine: Optional pre-built engine (tests inject one with mock
            HTTP transports). Built from *config* when omitted.
    """
    if config is None:
        config = engine.config if engine is not None else AppConfig()
    if engine is None:
        engine = NotifierEngine(config)

    app = FastAPI(
        title="dhr-notifier",
        version=__version__,
        description="Relays DHR payment events to webhook subscribers",
        lifespan=_lifespan,
    )

    app.state.config = config
    app.state.engine = engine

    # -- Middleware --
    setup_cors(app)
    app.add_middleware(PrometheusMiddleware, registry=engine.metrics.registry)

    # -- Error handler --
    @app.exception_handler(NotifierError)
    async def _notifier_error_handler(request: Request, exc: NotifierError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "message": exc.message, "error": exc.message},
        )

    # -- Base routes --
    @app.get("/health", tags=["base"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/metrics", tags=["base"], include_in_schema=False)
    async def metrics_endpoint() -> Response:
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_latest(engine.metrics.registry),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    app.include_router(api_router)

    return app
