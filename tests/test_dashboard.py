"""Tests for the dashboard request logger."""

from __future__ import annotations

from typing import Any

import pytest
from rich.layout import Layout

import ui.dashboard as dashboard_module
from core.config import Config
from core.request_types import ForwardOutcome, ForwardRequest
from core.targets import ForwardRoute
from ui.dashboard import Dashboard


@pytest.fixture
def written(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, Any]]:
    """Capture file log writes instead of touching ./logs."""
    calls: list[tuple[str, Any]] = []
    monkeypatch.setattr(dashboard_module, "write_forward_log", lambda *a, **k: calls.append(("forward", a)))
    monkeypatch.setattr(dashboard_module, "write_outcome_log", lambda *a, **k: calls.append(("outcome", k)))
    monkeypatch.setattr(dashboard_module, "write_cli_log", lambda *a, **k: calls.append(("cli", a)))
    return calls


def test_dashboard_tracks_requests_and_divergence(written: list[tuple[str, Any]]) -> None:
    dashboard = Dashboard(Config())
    request = ForwardRequest(route=ForwardRoute.DATA, body=b"payload")
    stable = ForwardOutcome.received("stable", 200, elapsed=0.01)
    dev = ForwardOutcome.received("dev", 500, elapsed=0.02)

    dashboard.log_forward(request, {})
    dashboard.log_outcomes(request, stable, dev, status=200, elapsed=0.02)
    dashboard.log_divergence(request, stable, dev)
    dashboard.log_error("dev /post_data", 500, "x" * 80)

    assert dashboard._request_count == {"post_data": 1, "post_error": 0}
    assert dashboard._divergences == 1
    assert dashboard._recent[0].stable == "200"
    assert dashboard._recent[0].dev == "500"
    assert dashboard._errors[0].endswith("...")
    assert [kind for kind, _ in written] == ["forward", "cli", "outcome", "cli", "cli"]
    assert isinstance(dashboard._build_layout(), Layout)


def test_dashboard_keeps_only_recent_entries(written: list[tuple[str, Any]]) -> None:
    dashboard = Dashboard(Config())
    request = ForwardRequest(route=ForwardRoute.ERROR, body=b"")
    outcome = ForwardOutcome.received("stable", 200)

    for _ in range(15):
        dashboard.log_outcomes(request, outcome, outcome, status=200, elapsed=0.0)

    assert len(dashboard._recent) == 10
