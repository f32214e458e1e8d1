"""Product DRF serializers for API output.

The serializer operates at the Interface layer (API Views).  It renders a
``Product`` record in the camelCase shape the grocery client expects and
evaluates the derived attributes on every call, so ``isInStock`` and
``isExpired`` always reflect the current record and clock.

Input validation is *not* done here; it lives in
``modules.products.validators`` and runs inside the Service Layer.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import formatted_price, is_expired, is_in_stock


class ProductSerializer(serializers.Serializer):
    """Read-only representation of the Product resource."""

    id = serializers.CharField(source="object_id", read_only=True, allow_null=True)
    productId = serializers.CharField(source="product_id", read_only=True)
    name = serializers.CharField(read_only=True)
    mrpPrice = serializers.FloatField(source="mrp_price", read_only=True)
    image = serializers.CharField(read_only=True)
    stock = serializers.IntegerField(read_only=True)
    category = serializers.CharField(read_only=True)
    discounts = serializers.CharField(read_only=True)
    expiryDate = serializers.CharField(source="expiry_date", read_only=True, allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True, allow_null=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True, allow_null=True)
    formattedPrice = serializers.SerializerMethodField()
    isInStock = serializers.SerializerMethodField()
    isExpired = serializers.SerializerMethodField()

    def get_formattedPrice(self, obj) -> str:
        return formatted_price(obj)

    def get_isInStock(self, obj) -> bool:
        return is_in_stock(obj)

    def get_isExpired(self, obj) -> bool:
        return is_expired(obj)


class ProductEnvelopeSerializer(serializers.Serializer):
    """Schema-only description of the response envelope (OpenAPI docs)."""

    success = serializers.BooleanField()
    data = ProductSerializer(required=False)
    error = serializers.CharField(required=False)
    message = serializers.CharField(required=False)
    details = serializers.ListField(child=serializers.CharField(), required=False)


class PaginationSerializer(serializers.Serializer):
    page = serializers.IntegerField()
    limit = serializers.IntegerField()
    total = serializers.IntegerField()
    pages = serializers.IntegerField()


class ProductPageEnvelopeSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    data = ProductSerializer(many=True)
    pagination = PaginationSerializer()
