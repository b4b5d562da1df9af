"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_forward
from core.config import Config
from core.protocols import RequestLogger
from core.reconcile import ResponseReconciler
from core.targets import ForwardRoute, TargetResolver
from services.duplicator import RequestDuplicator


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.limits.max_connections,
            max_keepalive_connections=config.limits.max_keepalive_connections,
        )
        client = httpx.AsyncClient(
            timeout=config.limits.backend_timeout,
            limits=limits,
            verify=config.tls.verify_backends,
            transport=transport,
        )
        app.state.target_resolver = TargetResolver.from_config(config)
        app.state.duplicator = RequestDuplicator(client)
        app.state.reconciler = ResponseReconciler(logger)
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(
        title="Request Duplicator",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.post(ForwardRoute.DATA.path)
    async def forward_data(request: Request):
        return await handle_forward(request, ForwardRoute.DATA, config, logger)

    @app.post(ForwardRoute.ERROR.path)
    async def forward_error(request: Request):
        return await handle_forward(request, ForwardRoute.ERROR, config, logger)

    return app
