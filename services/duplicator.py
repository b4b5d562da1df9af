"""Concurrent duplication of one request body to the stable and dev backends."""

import asyncio
import time

import httpx

from core.request_types import ForwardOutcome
from core.targets import BackendTargets, Endpoint, ForwardRoute

STABLE = "stable"
DEV = "dev"

# Upstream error bodies kept on the outcome for logging
DETAIL_LIMIT = 200


class RequestDuplicator:
    """Send the same body to both backends and wait for both to finish."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def duplicate(
        self,
        route: ForwardRoute,
        body: bytes,
        targets: BackendTargets,
    ) -> tuple[ForwardOutcome, ForwardOutcome]:
        """Forward ``body`` to both backends concurrently.

        Returns ``(stable, dev)``. Both calls are awaited; a failure on one side
        is captured in its outcome and does not affect the other.
        """
        async with asyncio.TaskGroup() as group:
            stable = group.create_task(self._forward(STABLE, targets.stable, route, body))
            dev = group.create_task(self._forward(DEV, targets.dev, route, body))
        return stable.result(), dev.result()

    async def _forward(
        self,
        backend: str,
        endpoint: Endpoint,
        route: ForwardRoute,
        body: bytes,
    ) -> ForwardOutcome:
        """Execute one outbound POST and capture its outcome. Never raises."""
        url = endpoint.url_for(route.path)
        started = time.perf_counter()
        try:
            response = await self._client.post(url, content=body)
        except httpx.HTTPStatusError as e:
            # Raised by response hooks; the status is still known
            return ForwardOutcome.failed(
                backend,
                str(e),
                status_code=e.response.status_code,
                elapsed=time.perf_counter() - started,
            )
        except httpx.TimeoutException:
            return ForwardOutcome.failed(
                backend,
                f"Upstream timeout: {url}",
                elapsed=time.perf_counter() - started,
            )
        except httpx.HTTPError as e:
            return ForwardOutcome.failed(
                backend,
                f"Upstream connection error: {e!r}",
                elapsed=time.perf_counter() - started,
            )
        except Exception as e:
            return ForwardOutcome.failed(
                backend,
                f"Unexpected error: {e!r}",
                elapsed=time.perf_counter() - started,
            )

        detail = response.text[:DETAIL_LIMIT] if response.status_code >= 400 else ""
        return ForwardOutcome.received(
            backend,
            response.status_code,
            elapsed=time.perf_counter() - started,
            detail=detail,
        )
