"""Product API views.

Exposes the ``ProductService`` via HTTP using a DRF ViewSet.  Views are
thin: they sanitise the input, call exactly one service operation and
turn its ``ServiceResult`` into a response.  The status code comes from
``STATUS_BY_KIND``, a plain lookup table; views never inspect domain
exceptions themselves.
"""

from __future__ import annotations

from typing import Any, Optional

from django.conf import settings
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.core.sanitizers import sanitize_query, sanitize_value
from modules.products.dtos import ProductListParams
from modules.products.repositories import get_product_repository
from modules.products.serializers import (
    ProductEnvelopeSerializer,
    ProductPageEnvelopeSerializer,
    ProductSerializer,
)
from modules.products.services import ProductService, ResultKind, ServiceResult

STATUS_BY_KIND: dict[ResultKind, int] = {
    ResultKind.OK: status.HTTP_200_OK,
    ResultKind.CREATED: status.HTTP_201_CREATED,
    ResultKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ResultKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ResultKind.CONFLICT: status.HTTP_409_CONFLICT,
    ResultKind.SERVER_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

LIST_PARAMETERS = [
    OpenApiParameter("category", str, description="Exact category match"),
    OpenApiParameter("inStock", bool, description="Only products with stock > 0"),
    OpenApiParameter("search", str, description="Free text over name and category"),
    OpenApiParameter("page", int, description="1-based page number (default 1)"),
    OpenApiParameter("limit", int, description="Page size (default 50, max 100)"),
]


def _serialize(data: Any) -> Any:
    return ProductSerializer(data, many=isinstance(data, list)).data


def render_result(result: ServiceResult) -> Response:
    return Response(result.to_envelope(render=_serialize), status=STATUS_BY_KIND[result.kind])


class ProductViewSet(ViewSet):
    """ViewSet for Product CRUD operations.

    Uses ``ProductService`` with the MongoDB-backed repository (DIP).
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(
            repository=get_product_repository(),
            expose_errors=settings.DEBUG,
        )

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    @extend_schema(parameters=LIST_PARAMETERS, responses=ProductPageEnvelopeSerializer)
    def list(self, request: Request) -> Response:
        """GET /api/products"""
        params = ProductListParams.from_query(
            sanitize_query(request.query_params),
            default_limit=settings.DEFAULT_PAGE_SIZE,
            max_limit=settings.MAX_PAGE_SIZE,
        )
        return render_result(self._service.list_products(params))

    @extend_schema(responses=ProductEnvelopeSerializer)
    def retrieve(self, request: Request, product_id: Optional[str] = None) -> Response:
        """GET /api/products/{product_id}"""
        return render_result(self._service.get_product(product_id))

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    @extend_schema(request=ProductSerializer, responses=ProductEnvelopeSerializer)
    def create(self, request: Request) -> Response:
        """POST /api/products"""
        return render_result(self._service.create_product(sanitize_value(request.data)))

    @extend_schema(request=ProductSerializer, responses=ProductEnvelopeSerializer)
    def update(self, request: Request, product_id: Optional[str] = None) -> Response:
        """PUT /api/products/{product_id}

        Partial: fields absent from the body keep their stored values.
        """
        return render_result(
            self._service.update_product(product_id, sanitize_value(request.data))
        )

    @extend_schema(responses=ProductEnvelopeSerializer)
    def destroy(self, request: Request, product_id: Optional[str] = None) -> Response:
        """DELETE /api/products/{product_id}"""
        return render_result(self._service.delete_product(product_id))
