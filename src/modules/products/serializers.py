"""Product DRF serializer for API output.

Input validation lives in the Pydantic DTOs (``dtos.py``); this
serializer only renders products in the storefront's camelCase shape.
``price`` is kept as a Decimal internally and emitted as a JSON number.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Read-only representation of the Product resource."""

    price = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        coerce_to_string=False,
        read_only=True,
    )
    inStock = serializers.BooleanField(source="in_stock", read_only=True)
    imageUrl = serializers.CharField(source="image_url", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "sku",
            "category",
            "inStock",
            "quantity",
            "imageUrl",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields
