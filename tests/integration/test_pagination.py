"""Integration tests for paginated product listing."""

from __future__ import annotations

import pytest

from modules.products.models import Product

pytestmark = pytest.mark.integration

PRODUCTS_URL = "/api/products"


@pytest.fixture()
def product_batch(product_repository):
    """Insert 120 products, P001 oldest and P120 newest."""
    for idx in range(1, 121):
        product_repository.insert(
            Product(
                productId=f"P{idx:03d}",
                name=f"Product {idx:03d}",
                mrpPrice=9.99,
                stock=idx % 3,
                category="Grocery" if idx % 2 else "Snacks",
            )
        )


class TestPagination:
    def test_default_page_size(self, api_client, product_batch):
        response = api_client.get(PRODUCTS_URL)

        body = response.json()
        assert len(body["data"]) == 50
        assert body["pagination"] == {"page": 1, "limit": 50, "total": 120, "pages": 3}
        assert body["data"][0]["productId"] == "P120"

    def test_explicit_page_and_limit(self, api_client, product_batch):
        response = api_client.get(PRODUCTS_URL, {"page": 2, "limit": 25})

        body = response.json()
        assert len(body["data"]) == 25
        assert body["data"][0]["productId"] == "P095"
        assert body["pagination"]["pages"] == 5

    def test_last_partial_page(self, api_client, product_batch):
        response = api_client.get(PRODUCTS_URL, {"page": 3, "limit": 50})
        assert len(response.json()["data"]) == 20

    def test_page_past_end_is_empty(self, api_client, product_batch):
        response = api_client.get(PRODUCTS_URL, {"page": 99})

        assert response.status_code == 200
        body = response.json()
        assert body["data"] == []
        assert body["pagination"]["total"] == 120

    def test_huge_page_is_empty(self, api_client, product_batch):
        response = api_client.get(PRODUCTS_URL, {"page": "1" + "0" * 20})

        assert response.status_code == 200
        body = response.json()
        assert body["data"] == []
        assert body["pagination"]["total"] == 120

    def test_limit_capped(self, api_client, product_batch):
        response = api_client.get(PRODUCTS_URL, {"limit": 1000})

        body = response.json()
        assert len(body["data"]) == 100
        assert body["pagination"]["limit"] == 100

    @pytest.mark.parametrize("params", [{"page": 0}, {"page": "abc"}, {"limit": -5}])
    def test_invalid_values_use_defaults(self, api_client, product_batch, params):
        response = api_client.get(PRODUCTS_URL, params)

        assert response.status_code == 200
        pagination = response.json()["pagination"]
        assert pagination["page"] == 1
        assert pagination["limit"] == 50

    def test_filters_apply_to_total(self, api_client, product_batch):
        response = api_client.get(PRODUCTS_URL, {"category": "Snacks", "inStock": "true"})

        body = response.json()
        assert all(p["category"] == "Snacks" for p in body["data"])
        assert all(p["stock"] > 0 for p in body["data"])
        assert body["pagination"]["total"] == 40
