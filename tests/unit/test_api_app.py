"""Unit tests for niabridge.api.app application factory.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_app.py

"""

from __future__ import annotations

import falcon
import falcon.asgi
import falcon.testing
import pytest

from niabridge.api.app import AppDependencies, create_app
from niabridge.relay.service import RelayService
from tests.helpers.relay_fakes import REPOSITORY, issue_body


@pytest.fixture
def health_client() -> falcon.testing.TestClient:
    """Build a test client for health-only mode."""
    return falcon.testing.TestClient(create_app())


@pytest.fixture
def full_client(relay_service: RelayService) -> falcon.testing.TestClient:
    """Build a test client with a relay attached."""
    return falcon.testing.TestClient(
        create_app(AppDependencies(relay=relay_service, manage_lifespan=False))
    )


class TestCreateAppHealthOnly:
    """Tests for create_app() without a relay."""

    def test_returns_falcon_app(self) -> None:
        """Create_app() returns a Falcon ASGI App."""
        assert isinstance(create_app(), falcon.asgi.App), "expected Falcon ASGI App"

    def test_has_health_route(self, health_client: falcon.testing.TestClient) -> None:
        """Health-only app reports a bare liveness status."""
        result = health_client.simulate_get("/health")
        assert result.status == falcon.HTTP_200, "expected HTTP 200 from /health"
        assert result.json == {"status": "ok"}, "wrong /health body"

    def test_has_ready_route(self, health_client: falcon.testing.TestClient) -> None:
        """Health-only app responds to /ready."""
        result = health_client.simulate_get("/ready")
        assert result.status == falcon.HTTP_200, "expected HTTP 200 from /ready"
        assert result.json == {"status": "ready"}, "wrong /ready body"

    def test_webhook_not_registered(
        self, health_client: falcon.testing.TestClient
    ) -> None:
        """Without a relay the webhook endpoint returns 404."""
        result = health_client.simulate_post("/webhook", body=issue_body())
        assert result.status == falcon.HTTP_404, "expected HTTP 404"


class TestCreateAppWithRelay:
    """Tests for create_app() with a relay attached."""

    def test_health_reports_relay_state(
        self,
        full_client: falcon.testing.TestClient,
        relay_service: RelayService,
    ) -> None:
        """Health includes repository, cache size and tracked issue count."""
        relay_service.tracker.mark("X1")

        result = full_client.simulate_get("/health")

        assert result.status == falcon.HTTP_200
        assert result.json == {
            "status": "ok",
            "repository": REPOSITORY,
            "cache_size": 0,
            "tracked_issues": 1,
        }

    def test_webhook_registered(
        self, full_client: falcon.testing.TestClient
    ) -> None:
        """Ignored deliveries are still acknowledged with 200."""
        result = full_client.simulate_post(
            "/webhook", body=issue_body(event_type="Comment")
        )

        assert result.status == falcon.HTTP_200
        assert result.json == {"result": "ignored"}

