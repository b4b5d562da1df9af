"""Shared protocol definitions."""

from typing import Protocol

from core.request_types import ForwardOutcome, ForwardRequest


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard)."""

    def log_forward(self, request: ForwardRequest, headers: dict[str, str]) -> None: ...
    def log_outcomes(
        self,
        request: ForwardRequest,
        stable: ForwardOutcome,
        dev: ForwardOutcome,
        *,
        status: int,
        elapsed: float,
    ) -> None: ...
    def log_divergence(
        self,
        request: ForwardRequest,
        stable: ForwardOutcome,
        dev: ForwardOutcome,
    ) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
