"""Shared fixtures for request duplicator tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
import pytest
import respx
from fastapi import FastAPI

from app import create_app
from core.config import Config, DevSettings, StableSettings, TLSSettings
from core.request_types import ForwardOutcome, ForwardRequest


class RecordingLogger:
    """RequestLogger that keeps every event in memory."""

    def __init__(self) -> None:
        self.forwards: list[ForwardRequest] = []
        self.outcomes: list[dict[str, Any]] = []
        self.divergences: list[tuple[ForwardOutcome, ForwardOutcome]] = []
        self.errors: list[tuple[str, int, str]] = []

    def log_forward(self, request: ForwardRequest, headers: dict[str, str]) -> None:
        self.forwards.append(request)

    def log_outcomes(
        self,
        request: ForwardRequest,
        stable: ForwardOutcome,
        dev: ForwardOutcome,
        *,
        status: int,
        elapsed: float,
    ) -> None:
        self.outcomes.append(
            {"request": request, "stable": stable, "dev": dev, "status": status, "elapsed": elapsed}
        )

    def log_divergence(
        self,
        request: ForwardRequest,
        stable: ForwardOutcome,
        dev: ForwardOutcome,
    ) -> None:
        self.divergences.append((stable, dev))

    def log_error(self, route: str, status: int, message: str) -> None:
        self.errors.append((route, status, message))


@pytest.fixture
def config() -> Config:
    """Config pointing both backends at mockable plain-HTTP hosts."""
    return Config(
        stable=StableSettings(scheme="http", host="stable.test", port=443),
        dev=DevSettings(scheme="http", host="dev.test", port=8443),
        tls=TLSSettings(enabled=False),
    )


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def backends() -> Iterator[respx.MockRouter]:
    """Mock both backends; routes are declared per test."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@asynccontextmanager
async def serve(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    """Run the app lifespan and yield a client bound to it."""
    async with app.router.lifespan_context(app):
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://duplicator"
        ) as client:
            yield client


@pytest.fixture
async def client(
    config: Config, logger: RecordingLogger, backends: respx.MockRouter
) -> AsyncIterator[httpx.AsyncClient]:
    """Client for the duplicator app, with backends mocked by respx."""
    async with serve(create_app(config, logger)) as c:
        yield c


@pytest.fixture
def serve_with_transport(config: Config, logger: RecordingLogger):
    """Serve the app with an explicit outbound transport."""

    def factory(transport: httpx.AsyncBaseTransport):
        return serve(create_app(config, logger, transport=transport))

    return factory
