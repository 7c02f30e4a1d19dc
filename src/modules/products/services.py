"""Product service layer (Use Cases).

Orchestrates the catalog's business logic, delegating persistence to the
injected ``IProductRepository`` and listing composition to the
``ProductQueryComposer``.

Rules enforced here:
- SKU must be unique (pre-checked here, re-checked by the unique index).
- ``in_stock`` is never taken from the caller; it follows ``quantity``.
- Stock never goes negative: a change that would do so is rejected in
  full, never clamped.
- Reservations either decrement atomically or report ``False`` and leave
  stock untouched.
- Delete is a hard delete; deleting twice reports ``ProductNotFound``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

import structlog
from django.db import transaction

from modules.products.constants import MAX_QUANTITY, StockOperation
from modules.products.exceptions import (
    InsufficientStock,
    ProductAlreadyExists,
    ProductNotFound,
    ProductValidationError,
)
from modules.products.models import Product
from modules.products.queries import ProductPage, ProductQueryComposer, build_pagination

if TYPE_CHECKING:
    from modules.products.dtos import (
        CreateProductDTO,
        ProductListQueryDTO,
        StockUpdateDTO,
        UpdateProductDTO,
    )
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    """

    def __init__(
        self,
        repository: IProductRepository,
        composer: Optional[ProductQueryComposer] = None,
    ) -> None:
        self._repo = repository
        self._composer = composer or ProductQueryComposer()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        """Create a new product after enforcing SKU uniqueness.

        Raises:
            ProductAlreadyExists: if the SKU is already taken, either by
                the pre-check or by the unique index during insert.
        """
        log = logger.bind(sku=dto.sku)

        if self._repo.get_by_sku(dto.sku):
            log.warning("product.duplicate_sku")
            raise ProductAlreadyExists(f"SKU '{dto.sku}' already registered.")

        product = Product(
            name=dto.name,
            description=dto.description,
            price=dto.price,
            sku=dto.sku,
            category=dto.category,
            quantity=dto.quantity,
            image_url=dto.image_url,
        )
        product.in_stock = product.quantity > 0
        try:
            product = self._repo.save(product)
        except ProductAlreadyExists as exc:
            log.warning("product.duplicate_sku", detected_by="unique_index")
            raise ProductAlreadyExists(f"SKU '{dto.sku}' already registered.") from exc
        log.info("product.created", product_id=str(product.id))
        return product

    @transaction.atomic
    def update_product(self, id: str, dto: UpdateProductDTO) -> Product:
        """Apply a partial update to an existing product.

        The row is locked for the duration of the transaction so a
        concurrent stock change cannot interleave with a quantity edit.

        Raises:
            ProductNotFound: if the product does not exist.
            ProductAlreadyExists: if the new SKU belongs to another product.
        """
        product = self._repo.get_for_update(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")

        log = logger.bind(product_id=str(product.id))
        changes = dto.changes()

        new_sku = changes.get("sku")
        if new_sku is not None and new_sku != product.sku:
            other = self._repo.get_by_sku(new_sku)
            if other and other.id != product.id:
                log.warning("product.duplicate_sku", sku=new_sku)
                raise ProductAlreadyExists(f"SKU '{new_sku}' already registered.")

        for field, value in changes.items():
            setattr(product, field, value)
        if "quantity" in changes:
            product.in_stock = product.quantity > 0

        product = self._repo.save(product)
        log.info("product.updated", fields=sorted(changes))
        return product

    @transaction.atomic
    def delete_product(self, id: str) -> None:
        """Hard-delete a product.

        Raises:
            ProductNotFound: if the product does not exist (including a
                second delete of the same id).
        """
        if not self._repo.delete(id):
            raise ProductNotFound(f"Product {id} not found.")
        logger.info("product.deleted", product_id=str(id))

    @transaction.atomic
    def update_stock(self, id: str, dto: StockUpdateDTO) -> Product:
        """Set, add to, or subtract from a product's stock.

        Raises:
            ProductNotFound: if the product does not exist.
            InsufficientStock: if the result would be negative; stock is
                left unchanged.
            ProductValidationError: if an ``add`` would exceed
                ``MAX_QUANTITY``; stock is left unchanged.
        """
        log = logger.bind(
            product_id=str(id),
            operation=dto.operation.value,
            quantity=dto.quantity,
        )

        if dto.quantity < 0:
            raise ProductValidationError(
                "Quantity cannot be negative.",
                errors=[{"field": "quantity", "message": "Quantity cannot be negative."}],
            )

        if dto.operation == StockOperation.SET:
            applied = self._repo.set_quantity(id, dto.quantity)
        elif dto.operation == StockOperation.ADD:
            applied = self._repo.increment_quantity(id, dto.quantity)
        else:
            applied = self._repo.decrement_quantity(id, dto.quantity)

        if not applied:
            current = self._repo.get_by_id(id)
            if not current:
                raise ProductNotFound(f"Product {id} not found.")
            log.warning("product.stock_update_rejected", current=current.quantity)
            if dto.operation == StockOperation.ADD:
                message = (
                    f"Cannot add {dto.quantity} to {current.quantity} units: "
                    f"stock is limited to {MAX_QUANTITY}."
                )
                raise ProductValidationError(
                    message, errors=[{"field": "quantity", "message": message}]
                )
            raise InsufficientStock(
                errors=[
                    {
                        "field": "quantity",
                        "message": (
                            f"Cannot subtract {dto.quantity} from "
                            f"{current.quantity} units in stock."
                        ),
                    }
                ],
            )

        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        log.info("product.stock_updated", new_quantity=product.quantity)
        return product

    @transaction.atomic
    def reserve_stock(self, id: str, quantity: int) -> bool:
        """Reserve ``quantity`` units by decrementing stock atomically.

        Insufficient stock is a normal business outcome: it returns
        ``False`` and leaves stock unchanged instead of raising.

        Raises:
            ProductValidationError: if ``quantity`` is not positive.
            ProductNotFound: if the product does not exist.
        """
        if quantity < 1:
            raise ProductValidationError(
                "Quantity must be at least 1.",
                errors=[{"field": "quantity", "message": "Quantity must be at least 1."}],
            )

        log = logger.bind(product_id=str(id), quantity=quantity)

        if self._repo.decrement_quantity(id, quantity):
            log.info("product.stock_reserved")
            return True

        current = self._repo.get_by_id(id)
        if not current:
            raise ProductNotFound(f"Product {id} not found.")
        log.info("product.reservation_rejected", available=current.quantity)
        return False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_product(self, id: str) -> Product:
        """Retrieve a single product by ID.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._repo.get_by_id(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        logger.info("product.retrieved", product_id=str(id))
        return product

    def get_product_by_sku(self, sku: str) -> Product:
        product = self._repo.get_by_sku(sku)
        if not product:
            raise ProductNotFound(f"Product with SKU '{sku}' not found.")
        return product

    def get_products_by_ids(self, ids: Sequence[str]) -> List[Product]:
        return self._repo.get_many(ids)

    def list_products(self, dto: ProductListQueryDTO) -> ProductPage:
        """Return one page of products matching the listing request."""
        query = self._composer.compose(dto)
        items, total = self._repo.find_page(query)
        return ProductPage(
            items=items,
            pagination=build_pagination(dto.page, dto.limit, total),
        )

    def find_by_category(self, category: str) -> List[Product]:
        return self._repo.list({"category": category.strip()})

    def search_products(self, term: str) -> List[Product]:
        return self._repo.search(term)

    def find_low_stock(self, threshold: int) -> List[Product]:
        if threshold < 0:
            raise ProductValidationError(
                "Threshold cannot be negative.",
                errors=[{"field": "threshold", "message": "Threshold cannot be negative."}],
            )
        return self._repo.find_low_stock(threshold)

    def find_out_of_stock(self) -> List[Product]:
        return self._repo.find_out_of_stock()

    def check_availability(self, id: str, quantity: int) -> bool:
        """Whether at least ``quantity`` units are currently in stock.

        Read-only: use ``reserve_stock`` to actually claim units.
        """
        return self.get_product(id).quantity >= quantity
