"""Product URL configuration.

Paths carry no trailing slash, matching what the grocery client calls.
"""

from __future__ import annotations

from django.urls import path

from modules.products.views import ProductViewSet

product_list = ProductViewSet.as_view({"get": "list", "post": "create"})
product_detail = ProductViewSet.as_view(
    {"get": "retrieve", "put": "update", "delete": "destroy"}
)

urlpatterns = [
    path("products", product_list, name="product-list"),
    path("products/<str:product_id>", product_detail, name="product-detail"),
]
