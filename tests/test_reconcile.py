"""Tests for deriving the caller status from backend outcomes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from core.reconcile import ResponseReconciler
from core.request_types import ForwardOutcome, ForwardRequest
from core.targets import ForwardRoute

if TYPE_CHECKING:
    from tests.conftest import RecordingLogger


@pytest.fixture
def reconciler(logger: RecordingLogger) -> ResponseReconciler:
    return ResponseReconciler(logger)


@pytest.fixture
def request_() -> ForwardRequest:
    return ForwardRequest(route=ForwardRoute.DATA, body=b"payload")


@pytest.mark.parametrize("status", [200, 201, 204, 400, 404, 429, 500, 503])
def test_received_status_is_relayed_verbatim(reconciler: ResponseReconciler, status: int) -> None:
    assert reconciler.reconcile(ForwardOutcome.received("stable", status)) == status


def test_failure_with_status_uses_that_status(reconciler: ResponseReconciler) -> None:
    outcome = ForwardOutcome.failed("stable", "Server error '502 Bad Gateway'", status_code=502)

    assert reconciler.reconcile(outcome) == 502


def test_failure_without_status_is_internal_error(reconciler: ResponseReconciler) -> None:
    outcome = ForwardOutcome.failed("stable", "Upstream connection error: ConnectError()")

    assert reconciler.reconcile(outcome) == 500


def test_observe_logs_dev_failure(
    reconciler: ResponseReconciler, logger: RecordingLogger, request_: ForwardRequest
) -> None:
    stable = ForwardOutcome.received("stable", 200)
    dev = ForwardOutcome.failed("dev", "Upstream timeout: http://dev.test:8443/post_data")

    reconciler.observe(request_, stable, dev)

    assert logger.errors == [("dev /post_data", 500, dev.error)]
    assert logger.divergences == [(stable, dev)]


def test_observe_is_quiet_when_backends_agree(
    reconciler: ResponseReconciler, logger: RecordingLogger, request_: ForwardRequest
) -> None:
    reconciler.observe(
        request_,
        ForwardOutcome.received("stable", 200),
        ForwardOutcome.received("dev", 200),
    )

    assert logger.errors == []
    assert logger.divergences == []


def test_status_mismatch_counts_as_divergence() -> None:
    assert ResponseReconciler.diverged(
        ForwardOutcome.received("stable", 200),
        ForwardOutcome.received("dev", 500),
    )
    assert not ResponseReconciler.diverged(
        ForwardOutcome.failed("stable", "refused"),
        ForwardOutcome.failed("dev", "refused"),
    )


def test_observe_never_changes_the_reply(
    reconciler: ResponseReconciler, request_: ForwardRequest
) -> None:
    stable = ForwardOutcome.received("stable", 200)
    dev = ForwardOutcome.received("dev", 500)

    reconciler.observe(request_, stable, dev)

    assert reconciler.reconcile(stable) == 200


def test_observe_logs_http_error_detail_from_either_backend(
    reconciler: ResponseReconciler, logger: RecordingLogger, request_: ForwardRequest
) -> None:
    stable = ForwardOutcome.received("stable", 503, detail="maintenance")
    dev = ForwardOutcome.received("dev", 503, detail="maintenance")

    reconciler.observe(request_, stable, dev)

    assert logger.errors == [
        ("stable /post_data", 503, "maintenance"),
        ("dev /post_data", 503, "maintenance"),
    ]
    assert logger.divergences == []
