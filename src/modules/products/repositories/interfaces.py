"""Product repository interface.

Extends ``IRepository[Product]`` with the look-ups the catalog needs
(SKU uniqueness, paged listings, search) and with stock mutations that
are applied as single conditional updates, so concurrent callers on the
same product never lose an update.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product
    from modules.products.queries import ProductQuery


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a product by SKU (exact match)."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Product]:
        """Retrieve a product with a row-level lock (SELECT FOR UPDATE).

        Must be called inside a transaction.  Returns ``None`` if the
        product does not exist.
        """

    @abstractmethod
    def get_many(self, ids: Sequence[str]) -> List[Product]:
        """Retrieve the products whose ids are given, in input order."""

    @abstractmethod
    def find_page(self, query: ProductQuery) -> Tuple[List[Product], int]:
        """Return one page of matching products and the total match count."""

    @abstractmethod
    def search(self, term: str) -> List[Product]:
        """Case-insensitive substring search over name/description/sku/category."""

    @abstractmethod
    def find_low_stock(self, threshold: int) -> List[Product]:
        """Products with ``quantity <= threshold``, lowest quantity first."""

    @abstractmethod
    def find_out_of_stock(self) -> List[Product]:
        """Products with no stock, most recently updated first."""

    # ------------------------------------------------------------------
    # Atomic stock mutations: each keeps ``in_stock`` in step with
    # ``quantity`` and returns ``True`` only if a row was changed.
    # ------------------------------------------------------------------

    @abstractmethod
    def set_quantity(self, id: str, quantity: int) -> bool:
        """Overwrite the stock quantity."""

    @abstractmethod
    def increment_quantity(self, id: str, amount: int) -> bool:
        """Add ``amount`` units, only while the total stays within ``MAX_QUANTITY``."""

    @abstractmethod
    def decrement_quantity(self, id: str, amount: int) -> bool:
        """Remove ``amount`` units, only where at least ``amount`` are in stock."""
