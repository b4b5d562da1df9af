"""Shared request and outcome data types."""

import hashlib
from dataclasses import dataclass
from functools import cached_property

from core.targets import ForwardRoute


@dataclass(frozen=True)
class ForwardRequest:
    """An inbound body bound for both backends."""

    route: ForwardRoute
    body: bytes

    @property
    def size(self) -> int:
        return len(self.body)

    @cached_property
    def digest(self) -> str:
        return hashlib.sha256(self.body).hexdigest()


@dataclass(frozen=True)
class ForwardOutcome:
    """Result of one outbound call.

    Either a received HTTP status (``error`` is None) or a transport-level
    failure, which may still carry a status code surfaced by the client.
    """

    backend: str
    status_code: int | None
    error: str | None = None
    elapsed: float = 0.0
    detail: str = ""

    @classmethod
    def received(
        cls,
        backend: str,
        status_code: int,
        elapsed: float = 0.0,
        detail: str = "",
    ) -> "ForwardOutcome":
        return cls(backend=backend, status_code=status_code, elapsed=elapsed, detail=detail)

    @classmethod
    def failed(
        cls,
        backend: str,
        error: str,
        status_code: int | None = None,
        elapsed: float = 0.0,
    ) -> "ForwardOutcome":
        return cls(backend=backend, status_code=status_code, error=error, elapsed=elapsed)

    @property
    def ok(self) -> bool:
        return self.error is None

    def describe(self) -> str:
        """Short human-readable form for logs."""
        if self.ok:
            return str(self.status_code)
        if self.status_code is not None:
            return f"{self.status_code} ({self.error})"
        return f"failed ({self.error})"
