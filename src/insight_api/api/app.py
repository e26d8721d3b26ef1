"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest
from starlette.responses import Response

from insight_api import __version__
from insight_api.api.middleware.cors import setup_cors
from insight_api.api.routes import explorer_router
from insight_api.config.settings import AppConfig
from insight_api.engine.client import ExplorerEngine
from insight_api.errors.insight_errors import InsightError
from insight_api.metrics.collector import ExplorerMetrics
from insight_api.metrics.middleware import PrometheusMiddleware

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from insight_api.chain.source import ChainDataSource

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle hooks.

    Connects the chain source and starts notifications on startup and
    gracefully shuts down on exit.
    """
    config: AppConfig = app.state.config
    engine = ExplorerEngine(config, chain=app.state.chain, metrics=app.state.metrics)

    try:
        await engine.initialize()
        app.state.engine = engine
        logger.info("Explorer engine initialized")
        yield
    finally:
        await engine.close()
        logger.info("Explorer engine shut down")


def create_app(
    *,
    config: AppConfig | None = None,
    chain: ChainDataSource | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        config: Optional AppConfig. If *None*, a default config is created
            from environment variables.
        chain: Optional chain-data source; defaults to the HTTP client for
            ``config.chain.url``.
    """
    if config is None:
        config = AppConfig()

    app = FastAPI(
        title="py-insight",
        version=__version__,
        description="Block explorer API for the Dash network",
        lifespan=_lifespan,
    )

    # Store config on app.state for lifespan access
    app.state.config = config
    app.state.chain = chain
    app.state.metrics = ExplorerMetrics()

    # -- Middleware --
    setup_cors(app)
    if config.metrics.enabled:
        app.add_middleware(PrometheusMiddleware, registry=app.state.metrics.registry)

    # -- Error handler --
    @app.exception_handler(InsightError)
    async def _insight_error_handler(request: Request, exc: InsightError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "message": exc.message},
        )

    # -- Base routes --
    @app.get("/health", tags=["base"])
    async def health() -> dict[str, str]:
        engine: ExplorerEngine | None = getattr(app.state, "engine", None)
        if engine is None:
            return {"status": "ok"}
        return {"status": "ok", **await engine.health_check()}

    if config.metrics.enabled:

        @app.get("/metrics", tags=["base"], include_in_schema=False)
        async def metrics_endpoint() -> Response:
            """Prometheus metrics endpoint."""
            return Response(
                content=generate_latest(app.state.metrics.registry),
                media_type="text/plain; version=0.0.4; charset=utf-8",
            )

    # -- Mount explorer API --
    app.include_router(explorer_router, prefix=config.api.route_prefix)

    return app
