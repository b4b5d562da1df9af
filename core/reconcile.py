"""Derive the caller-visible status from the backend outcomes."""

from core.protocols import RequestLogger
from core.request_types import ForwardOutcome, ForwardRequest

INTERNAL_SERVER_ERROR = 500


class ResponseReconciler:
    """Relay the stable backend's status; observe the dev backend's."""

    def __init__(self, logger: RequestLogger) -> None:
        self._logger = logger

    def reconcile(self, stable: ForwardOutcome) -> int:
        """Return the status for the original caller.

        Any status the stable backend produced is relayed verbatim, even when
        the client reported it alongside a failure. A failure without a status
        maps to 500.
        """
        if stable.status_code is not None:
            return stable.status_code
        return INTERNAL_SERVER_ERROR

    def observe(
        self,
        request: ForwardRequest,
        stable: ForwardOutcome,
        dev: ForwardOutcome,
    ) -> None:
        """Report backend errors and stable/dev divergence. Never affects the reply."""
        for outcome in (stable, dev):
            route = f"{outcome.backend} {request.route.path}"
            if not outcome.ok:
                self._logger.log_error(
                    route,
                    outcome.status_code or INTERNAL_SERVER_ERROR,
                    outcome.error or "",
                )
            elif outcome.status_code is not None and outcome.status_code >= 400:
                self._logger.log_error(route, outcome.status_code, outcome.detail)
        if self.diverged(stable, dev):
            self._logger.log_divergence(request, stable, dev)

    @staticmethod
    def diverged(stable: ForwardOutcome, dev: ForwardOutcome) -> bool:
        """Check whether the two backends answered differently."""
        return stable.ok != dev.ok or stable.status_code != dev.status_code
