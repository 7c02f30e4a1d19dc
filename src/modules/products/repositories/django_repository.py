"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Missing rows follow the Null Object pattern: look-ups return ``None``
and mutations return ``False`` instead of raising, and the Service Layer
decides what a missing product means.

Storage failures are classified before they leave this module:

- a unique-index violation on ``sku`` -> ``ProductAlreadyExists``
  (the index is the final authority when two creates race);
- any other integrity / data error, or a value the driver cannot
  convert -> ``ProductValidationError``;
- a lost or unreachable connection -> ``StorageUnavailable``.

Stock mutations are single conditional ``UPDATE`` statements that set
``quantity`` and ``in_stock`` together, so the row lock taken by the
statement serialises concurrent callers without an application mutex.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar
from uuid import UUID

import structlog
from django.db import (
    DataError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    transaction,
)
from django.db.models import Case, F, Value, When
from django.utils import timezone

from modules.core.exceptions import StorageUnavailable
from modules.products.constants import MAX_QUANTITY
from modules.products.exceptions import ProductAlreadyExists, ProductValidationError
from modules.products.filters import ProductFilter
from modules.products.models import Product
from modules.products.queries import ProductQuery
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

F_ = TypeVar("F_", bound=Callable[..., Any])


def classify_storage_errors(func: F_) -> F_:
    """Translate database exceptions into the catalog's error kinds."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except IntegrityError as exc:
            if "sku" in str(exc).lower():
                logger.warning("product.sku_conflict", operation=func.__name__)
                raise ProductAlreadyExists() from exc
            logger.warning(
                "product.integrity_violation",
                operation=func.__name__,
                error=str(exc),
            )
            raise ProductValidationError(
                "Product violates a storage constraint."
            ) from exc
        except (DataError, OverflowError) as exc:
            logger.warning(
                "product.data_error", operation=func.__name__, error=str(exc)
            )
            raise ProductValidationError("Product data is out of range.") from exc
        except (OperationalError, InterfaceError) as exc:
            logger.error(
                "product.storage_unavailable",
                operation=func.__name__,
                error=str(exc),
            )
            raise StorageUnavailable() from exc

    return wrapper  # type: ignore[return-value]


def _parse_id(id: Any) -> Optional[UUID]:
    if isinstance(id, UUID):
        return id
    try:
        return UUID(str(id))
    except (TypeError, ValueError):
        return None


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @classify_storage_errors
    def get_by_id(self, id: str) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or malformed IDs.
        """
        pk = _parse_id(id)
        if pk is None:
            return None
        return Product.objects.filter(id=pk).first()

    @classify_storage_errors
    def get_by_sku(self, sku: str) -> Optional[Product]:
        return Product.objects.filter(sku=sku.strip()).first()

    @classify_storage_errors
    def get_for_update(self, id: str) -> Optional[Product]:
        pk = _parse_id(id)
        if pk is None:
            return None
        return Product.objects.select_for_update().filter(id=pk).first()

    @classify_storage_errors
    def get_many(self, ids: Sequence[str]) -> List[Product]:
        pks = list(dict.fromkeys(pk for pk in map(_parse_id, ids) if pk is not None))
        found = {p.id: p for p in Product.objects.filter(id__in=pks)}
        return [found[pk] for pk in pks if pk in found]

    @classify_storage_errors
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Product]:
        """List products with optional Django ORM look-ups.

        Examples of valid filters::

            {"category": "Tools"}
            {"name__icontains": "widget"}
        """
        queryset = Product.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @classify_storage_errors
    def find_page(self, query: ProductQuery) -> Tuple[List[Product], int]:
        filterset = ProductFilter(data=query.filters, queryset=Product.objects.all())
        if not filterset.is_valid():
            raise ProductValidationError(
                "Invalid listing filters.",
                errors=[
                    {"field": field, "message": " ".join(messages)}
                    for field, messages in filterset.errors.items()
                ],
            )
        queryset = filterset.qs
        total = queryset.count()
        window = queryset.order_by(*query.ordering)[
            query.offset : query.offset + query.limit
        ]
        return list(window), total

    @classify_storage_errors
    def search(self, term: str) -> List[Product]:
        filterset = ProductFilter(data={"search": term}, queryset=Product.objects.all())
        return list(filterset.qs.order_by("-created_at", "-id"))

    @classify_storage_errors
    def find_low_stock(self, threshold: int) -> List[Product]:
        return list(
            Product.objects.filter(quantity__lte=threshold).order_by("quantity", "name")
        )

    @classify_storage_errors
    def find_out_of_stock(self) -> List[Product]:
        return list(Product.objects.filter(quantity=0).order_by("-updated_at", "-id"))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @classify_storage_errors
    @transaction.atomic
    def save(self, entity: Product) -> Product:
        """Persist (create or update) a product."""
        entity.save()
        logger.info(
            "product.saved",
            product_id=str(entity.id),
            sku=entity.sku,
        )
        return entity

    @classify_storage_errors
    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Hard-delete a product by ID.

        Returns ``True`` if a row was removed, ``False`` if no product
        exists with the given ID.
        """
        pk = _parse_id(id)
        if pk is None:
            return False
        deleted, _ = Product.objects.filter(id=pk).delete()
        if deleted:
            logger.info("product.deleted", product_id=str(pk))
        return deleted > 0

    @classify_storage_errors
    @transaction.atomic
    def set_quantity(self, id: str, quantity: int) -> bool:
        pk = _parse_id(id)
        if pk is None:
            return False
        rows = Product.objects.filter(id=pk).update(
            in_stock=quantity > 0,
            quantity=quantity,
            updated_at=timezone.now(),
        )
        return rows > 0

    @classify_storage_errors
    @transaction.atomic
    def increment_quantity(self, id: str, amount: int) -> bool:
        """Add ``amount`` units unless the total would exceed ``MAX_QUANTITY``.

        Returns ``False`` for a missing product or an overflowing total.
        """
        pk = _parse_id(id)
        if pk is None:
            return False
        values: Dict[str, Any] = {
            "quantity": F("quantity") + amount,
            "updated_at": timezone.now(),
        }
        if amount > 0:
            values["in_stock"] = True
        rows = Product.objects.filter(
            id=pk, quantity__lte=MAX_QUANTITY - amount
        ).update(**values)
        return rows > 0

    @classify_storage_errors
    @transaction.atomic
    def decrement_quantity(self, id: str, amount: int) -> bool:
        pk = _parse_id(id)
        if pk is None:
            return False
        # in_stock is listed before quantity so it is computed from the
        # pre-update row on every backend (MySQL assigns left to right).
        rows = Product.objects.filter(id=pk, quantity__gte=amount).update(
            in_stock=Case(
                When(quantity__gt=amount, then=Value(True)),
                default=Value(False),
            ),
            quantity=F("quantity") - amount,
            updated_at=timezone.now(),
        )
        return rows > 0
