"""Product model with SKU uniqueness and stock control.

Invariants enforced here and in the database:
- SKU is unique (UNIQUE index; the final authority under races).
- Price must be greater than zero (check constraint).
- Quantity cannot be negative (PositiveIntegerField).
- ``in_stock`` always equals ``quantity > 0``: recomputed on every save
  and guarded by a check constraint, so bulk ``UPDATE`` statements that
  forget it fail loudly instead of drifting.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.products.constants import (
    CATEGORY_MAX_LENGTH,
    IMAGE_URL_MAX_LENGTH,
    NAME_MAX_LENGTH,
    SKU_MAX_LENGTH,
)

logger = structlog.get_logger(__name__)


class Product(BaseModel):
    """The catalog's only aggregate.

    ``in_stock`` is derived and not editable: callers change ``quantity``
    and the flag follows.
    """

    name = models.CharField(max_length=NAME_MAX_LENGTH)
    description = models.TextField(null=True, blank=True)  # noqa: DJ001
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    sku = models.CharField(max_length=SKU_MAX_LENGTH, unique=True)
    category = models.CharField(max_length=CATEGORY_MAX_LENGTH)
    in_stock = models.BooleanField(default=False, editable=False)
    quantity = models.PositiveIntegerField(default=0)
    image_url = models.URLField(  # noqa: DJ001
        max_length=IMAGE_URL_MAX_LENGTH, null=True, blank=True
    )

    class Meta:
        db_table = "products"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["category"], name="products_category_idx"),
            models.Index(fields=["quantity"], name="products_quantity_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(quantity__gt=0, in_stock=True)
                    | models.Q(quantity=0, in_stock=False)
                ),
                name="products_in_stock_matches_quantity",
            ),
        ]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.sku:
            self.sku = self.sku.strip()
        if self.price is not None and self.price <= 0:
            raise ValidationError({"price": "Price must be greater than zero."})
        if self.quantity is not None and self.quantity < 0:
            raise ValidationError({"quantity": "Quantity cannot be negative."})
        if self.quantity is not None:
            self.in_stock = self.quantity > 0

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.sku:
            self.sku = self.sku.strip()
        self.in_stock = self.quantity > 0

        update_fields = kwargs.get("update_fields")
        if (
            update_fields is not None
            and "quantity" in update_fields
            and "in_stock" not in update_fields
        ):
            kwargs["update_fields"] = list(update_fields) + ["in_stock"]

        super().save(*args, **kwargs)
        if is_new:
            logger.debug(
                "product_row_inserted",
                product_id=str(self.id),
                sku=self.sku,
            )

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.sku} - {self.name}"
