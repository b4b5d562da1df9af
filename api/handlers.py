"""FastAPI route handlers."""

import time

from fastapi import Request, Response

from core.config import Config
from core.exceptions import RequestTooLarge
from core.protocols import RequestLogger
from core.request_types import ForwardRequest
from core.targets import ForwardRoute, TargetResolver


async def _read_body(request: Request, limit: int) -> bytes:
    """Read the request body, refusing anything larger than ``limit``.

    A declared Content-Length over the limit is refused before reading; an
    undeclared or understated body is refused once the stream passes it.
    """
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise RequestTooLarge(limit, int(declared))

    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise RequestTooLarge(limit, received)
        chunks.append(chunk)
    return b"".join(chunks)


async def handle_forward(
    request: Request,
    route: ForwardRoute,
    config: Config,
    logger: RequestLogger,
) -> Response:
    """Duplicate the body to both backends and relay the stable status."""
    try:
        body = await _read_body(request, config.limits.max_body_size)
    except RequestTooLarge as e:
        logger.log_error(route.path, 413, f"Request body too large: {e.size} > {e.limit} bytes")
        return Response(status_code=413)

    forward = ForwardRequest(route=route, body=body)
    logger.log_forward(forward, dict(request.headers))

    resolver: TargetResolver = request.app.state.target_resolver
    duplicator = request.app.state.duplicator
    reconciler = request.app.state.reconciler

    started = time.perf_counter()
    stable, dev = await duplicator.duplicate(route, forward.body, resolver.resolve())
    status = reconciler.reconcile(stable)
    reconciler.observe(forward, stable, dev)
    logger.log_outcomes(
        forward,
        stable,
        dev,
        status=status,
        elapsed=time.perf_counter() - started,
    )
    return Response(status_code=status)
