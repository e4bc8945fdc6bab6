"""Tests for the FastAPI rate limit dependency."""

from unittest.mock import Mock, patch

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from storefront.adapters.rate_limit.base import RateLimitDecision
from storefront.core.errors import ConfigurationError, StoreUnavailableError
from storefront.core.exception_handlers import setup_exception_handlers
from storefront.core.rate_limit import (
    build_rate_limit_headers,
    require_rate_limit,
    resolve_client_identifier,
)


@pytest.fixture
def app_settings():
    with patch("storefront.core.rate_limit.settings") as mock_settings:
        mock_settings.app.rate_limit_enabled = True
        mock_settings.app.rate_limit_include_headers = True
        mock_settings.app.rate_limit_fail_open = True
        mock_settings.app.trusted_ip_header = None
        yield mock_settings.app


@pytest.fixture
def client(app_settings) -> TestClient:
    app = FastAPI()
    setup_exception_handlers(app)

    @app.post("/contact", dependencies=[Depends(require_rate_limit("contact"))])
    async def contact() -> dict:
        return {"sent": True}

    @app.post("/newsletter", dependencies=[Depends(require_rate_limit("newsletter"))])
    async def newsletter() -> dict:
        return {"subscribed": True}

    return TestClient(app)


def test_allows_until_limit_then_returns_429(client) -> None:
    remaining = []
    for _ in range(3):
        resp = client.post("/contact")
        assert resp.status_code == 200
        remaining.append(resp.headers["X-RateLimit-Remaining"])

    assert remaining == ["2", "1", "0"]

    blocked = client.post("/contact")
    assert blocked.status_code == 429
    assert blocked.json()["detail"] == "Rate limit exceeded. Try again later."
    retry_after = int(blocked.headers["Retry-After"])
    assert 3590 <= retry_after <= 3600
    assert blocked.headers["X-RateLimit-Limit"] == "3"
    assert blocked.headers["X-RateLimit-Remaining"] == "0"


def test_policies_are_counted_separately(client) -> None:
    assert client.post("/newsletter").status_code == 200
    assert client.post("/newsletter").status_code == 429
    assert client.post("/contact").status_code == 200


def test_trusted_header_separates_clients(client, app_settings) -> None:
    app_settings.trusted_ip_header = "CF-Connecting-IP"

    assert client.post("/newsletter", headers={"CF-Connecting-IP": "10.0.0.1"}).status_code == 200
    assert client.post("/newsletter", headers={"CF-Connecting-IP": "10.0.0.2"}).status_code == 200
    assert client.post("/newsletter", headers={"CF-Connecting-IP": "10.0.0.1"}).status_code == 429


def test_headers_omitted_when_disabled(client, app_settings) -> None:
    app_settings.rate_limit_include_headers = False

    ok = client.post("/newsletter")
    blocked = client.post("/newsletter")

    assert "X-RateLimit-Remaining" not in ok.headers
    assert blocked.status_code == 429
    assert "Retry-After" not in blocked.headers


def test_disabled_rate_limit_admits_everything(client, app_settings) -> None:
    app_settings.rate_limit_enabled = False

    for _ in range(5):
        assert client.post("/newsletter").status_code == 200


def test_store_outage_fails_open_when_configured(client) -> None:
    limiter = Mock()
    limiter.check.side_effect = StoreUnavailableError(code="store_unavailable", message="down")

    with patch("storefront.core.rate_limit.get_rate_limiter", return_value=limiter):
        resp = client.post("/contact")

    assert resp.status_code == 200


def test_store_outage_fails_closed_when_configured(client, app_settings) -> None:
    app_settings.rate_limit_fail_open = False
    limiter = Mock()
    limiter.check.side_effect = StoreUnavailableError(code="store_unavailable", message="down")

    with patch("storefront.core.rate_limit.get_rate_limiter", return_value=limiter):
        resp = client.post("/contact")

    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "store_unavailable"


def test_unknown_policy_fails_at_configuration_time() -> None:
    with pytest.raises(ConfigurationError):
        require_rate_limit("checkout")


class TestResolveClientIdentifier:
    def _request(self, host: str | None, headers: dict[str, str] | None = None) -> Mock:
        request = Mock()
        request.client = Mock(host=host) if host else None
        request.headers = headers or {}
        return request

    def test_uses_peer_address(self, app_settings) -> None:
        assert resolve_client_identifier(self._request("203.0.113.9")) == "203.0.113.9"

    def test_unknown_without_client(self, app_settings) -> None:
        assert resolve_client_identifier(self._request(None)) == "unknown"

    def test_trusted_header_takes_first_hop(self, app_settings) -> None:
        app_settings.trusted_ip_header = "X-Forwarded-For"
        request = self._request("10.0.0.1", {"X-Forwarded-For": "198.51.100.7, 10.0.0.1"})

        assert resolve_client_identifier(request) == "198.51.100.7"

    def test_trusted_header_missing_falls_back_to_peer(self, app_settings) -> None:
        app_settings.trusted_ip_header = "CF-Connecting-IP"

        assert resolve_client_identifier(self._request("10.0.0.1")) == "10.0.0.1"


def test_build_headers_for_denial() -> None:
    decision = RateLimitDecision(
        allowed=False, limit=5, remaining=0, reset_at=1_700_000_000_500, retry_after_seconds=42
    )

    assert build_rate_limit_headers(decision) == {
        "X-RateLimit-Limit": "5",
        "X-RateLimit-Remaining": "0",
        "X-RateLimit-Reset": "1700000001",
        "Retry-After": "42",
    }


def test_build_headers_for_admission_has_no_retry_after() -> None:
    decision = RateLimitDecision(allowed=True, limit=5, remaining=4, reset_at=1_700_000_000_000)

    assert "Retry-After" not in build_rate_limit_headers(decision)
