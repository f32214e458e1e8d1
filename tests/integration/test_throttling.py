"""Integration tests for anonymous request throttling."""

from __future__ import annotations

import pytest
from rest_framework.throttling import AnonRateThrottle

pytestmark = pytest.mark.integration


@pytest.fixture()
def low_rate(monkeypatch):
    monkeypatch.setattr(AnonRateThrottle, "THROTTLE_RATES", {"anon": "3/minute"})


def test_product_listing_is_throttled(api_client, low_rate):
    for _ in range(3):
        response = api_client.get("/api/products")
        assert response.status_code == 200

    response = api_client.get("/api/products")

    assert response.status_code == 429
    body = response.json()
    assert body["success"] is False
    assert body["error"].startswith("Request was throttled")
