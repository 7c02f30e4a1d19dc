"""Unit tests for ProductService.

Covers:
- create_product: happy path, duplicate SKU (pre-check and unique index).
- update_product: partial changes, SKU collision, in_stock recompute.
- delete_product: happy path, not found.
- update_stock: set / add / subtract, insufficient stock, overflow,
  not found.
- reserve_stock: success, insufficient, not found, invalid quantity.
- Queries: get, by SKU, bulk, listing, category, low / out of stock,
  availability.
"""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from modules.products.constants import MAX_QUANTITY, StockOperation
from modules.products.dtos import (
    CreateProductDTO,
    ProductListQueryDTO,
    StockUpdateDTO,
    UpdateProductDTO,
)
from modules.products.exceptions import (
    InsufficientStock,
    ProductAlreadyExists,
    ProductNotFound,
    ProductValidationError,
)
from modules.products.models import Product
from modules.products.services import ProductService

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_repo():
    return MagicMock()


@pytest.fixture()
def service(mock_repo):
    return ProductService(repository=mock_repo)


def _make_product(**overrides) -> Product:
    """Unsaved Product with sane defaults."""
    defaults = {
        "name": "Widget",
        "price": Decimal("19.99"),
        "sku": "SKU-001",
        "category": "Tools",
        "quantity": 10,
        "in_stock": True,
    }
    defaults.update(overrides)
    return Product(**defaults)


def _create_dto(**overrides) -> CreateProductDTO:
    data = {"name": "Widget", "price": "19.99", "sku": "SKU-001", "category": "Tools"}
    data.update(overrides)
    return CreateProductDTO.model_validate(data)


# ===========================================================================
# create_product
# ===========================================================================


class TestCreateProduct:
    def test_success(self, service, mock_repo):
        mock_repo.get_by_sku.return_value = None
        mock_repo.save.side_effect = lambda p: p

        product = service.create_product(_create_dto(quantity=4))

        assert product.sku == "SKU-001"
        assert product.price == Decimal("19.99")
        assert product.quantity == 4
        assert product.in_stock is True
        mock_repo.save.assert_called_once()

    def test_zero_quantity_not_in_stock(self, service, mock_repo):
        mock_repo.get_by_sku.return_value = None
        mock_repo.save.side_effect = lambda p: p

        product = service.create_product(_create_dto())

        assert product.in_stock is False

    def test_duplicate_sku_raises(self, service, mock_repo):
        mock_repo.get_by_sku.return_value = _make_product()

        with pytest.raises(ProductAlreadyExists, match="SKU-001"):
            service.create_product(_create_dto())
        mock_repo.save.assert_not_called()

    def test_unique_index_conflict_reported_as_duplicate(self, service, mock_repo):
        mock_repo.get_by_sku.return_value = None
        mock_repo.save.side_effect = ProductAlreadyExists()

        with pytest.raises(ProductAlreadyExists, match="SKU-001"):
            service.create_product(_create_dto())


# ===========================================================================
# update_product
# ===========================================================================


class TestUpdateProduct:
    def test_applies_only_supplied_fields(self, service, mock_repo):
        existing = _make_product(description="Old")
        mock_repo.get_for_update.return_value = existing
        mock_repo.save.side_effect = lambda p: p

        dto = UpdateProductDTO.model_validate({"name": "Renamed"})
        product = service.update_product(str(existing.id), dto)

        assert product.name == "Renamed"
        assert product.description == "Old"
        assert product.price == Decimal("19.99")

    def test_quantity_change_recomputes_in_stock(self, service, mock_repo):
        existing = _make_product(quantity=5, in_stock=True)
        mock_repo.get_for_update.return_value = existing
        mock_repo.save.side_effect = lambda p: p

        dto = UpdateProductDTO.model_validate({"quantity": 0})
        product = service.update_product(str(existing.id), dto)

        assert product.in_stock is False

    def test_not_found(self, service, mock_repo):
        mock_repo.get_for_update.return_value = None

        with pytest.raises(ProductNotFound):
            service.update_product("missing", UpdateProductDTO())

    def test_sku_taken_by_other_product(self, service, mock_repo):
        existing = _make_product()
        mock_repo.get_for_update.return_value = existing
        mock_repo.get_by_sku.return_value = _make_product(sku="TAKEN")

        dto = UpdateProductDTO.model_validate({"sku": "TAKEN"})
        with pytest.raises(ProductAlreadyExists):
            service.update_product(str(existing.id), dto)
        mock_repo.save.assert_not_called()

    def test_same_sku_skips_uniqueness_check(self, service, mock_repo):
        existing = _make_product()
        mock_repo.get_for_update.return_value = existing
        mock_repo.save.side_effect = lambda p: p

        dto = UpdateProductDTO.model_validate({"sku": "SKU-001"})
        service.update_product(str(existing.id), dto)

        mock_repo.get_by_sku.assert_not_called()


# ===========================================================================
# delete_product
# ===========================================================================


class TestDeleteProduct:
    def test_success(self, service, mock_repo):
        mock_repo.delete.return_value = True
        service.delete_product("some-id")
        mock_repo.delete.assert_called_once_with("some-id")

    def test_not_found(self, service, mock_repo):
        mock_repo.delete.return_value = False
        with pytest.raises(ProductNotFound):
            service.delete_product("some-id")


# ===========================================================================
# update_stock
# ===========================================================================


class TestUpdateStock:
    @pytest.mark.parametrize(
        "operation, method",
        [
            (StockOperation.SET, "set_quantity"),
            (StockOperation.ADD, "increment_quantity"),
            (StockOperation.SUBTRACT, "decrement_quantity"),
        ],
    )
    def test_dispatches_operation(self, service, mock_repo, operation, method):
        getattr(mock_repo, method).return_value = True
        mock_repo.get_by_id.return_value = _make_product(quantity=3)

        product = service.update_stock(
            "pid", StockUpdateDTO(quantity=3, operation=operation)
        )

        getattr(mock_repo, method).assert_called_once_with("pid", 3)
        assert product.quantity == 3

    def test_insufficient_stock_on_subtract(self, service, mock_repo):
        mock_repo.decrement_quantity.return_value = False
        mock_repo.get_by_id.return_value = _make_product(quantity=2)

        with pytest.raises(InsufficientStock) as exc_info:
            service.update_stock(
                "pid", StockUpdateDTO(quantity=5, operation=StockOperation.SUBTRACT)
            )
        assert exc_info.value.errors[0]["field"] == "quantity"
        assert "2 units" in exc_info.value.errors[0]["message"]

    def test_add_beyond_maximum_rejected(self, service, mock_repo):
        mock_repo.increment_quantity.return_value = False
        mock_repo.get_by_id.return_value = _make_product(quantity=MAX_QUANTITY)

        with pytest.raises(ProductValidationError) as exc_info:
            service.update_stock(
                "pid", StockUpdateDTO(quantity=1, operation=StockOperation.ADD)
            )
        assert not isinstance(exc_info.value, InsufficientStock)
        assert exc_info.value.errors[0]["field"] == "quantity"

    def test_insufficient_stock_is_a_validation_failure(self):
        assert issubclass(InsufficientStock, ProductValidationError)

    def test_not_found(self, service, mock_repo):
        mock_repo.set_quantity.return_value = False
        mock_repo.get_by_id.return_value = None

        with pytest.raises(ProductNotFound):
            service.update_stock("pid", StockUpdateDTO(quantity=1))


# ===========================================================================
# reserve_stock
# ===========================================================================


class TestReserveStock:
    def test_success(self, service, mock_repo):
        mock_repo.decrement_quantity.return_value = True

        assert service.reserve_stock("pid", 2) is True
        mock_repo.decrement_quantity.assert_called_once_with("pid", 2)

    def test_insufficient_returns_false(self, service, mock_repo):
        mock_repo.decrement_quantity.return_value = False
        mock_repo.get_by_id.return_value = _make_product(quantity=1)

        assert service.reserve_stock("pid", 2) is False

    def test_not_found(self, service, mock_repo):
        mock_repo.decrement_quantity.return_value = False
        mock_repo.get_by_id.return_value = None

        with pytest.raises(ProductNotFound):
            service.reserve_stock("pid", 1)

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_non_positive_quantity_rejected(self, service, mock_repo, quantity):
        with pytest.raises(ProductValidationError):
            service.reserve_stock("pid", quantity)
        mock_repo.decrement_quantity.assert_not_called()


# ===========================================================================
# Queries
# ===========================================================================


class TestQueries:
    def test_get_product(self, service, mock_repo):
        product = _make_product()
        mock_repo.get_by_id.return_value = product
        assert service.get_product("pid") is product

    def test_get_product_not_found(self, service, mock_repo):
        mock_repo.get_by_id.return_value = None
        with pytest.raises(ProductNotFound):
            service.get_product("pid")

    def test_get_product_by_sku_not_found(self, service, mock_repo):
        mock_repo.get_by_sku.return_value = None
        with pytest.raises(ProductNotFound, match="NOPE"):
            service.get_product_by_sku("NOPE")

    def test_get_products_by_ids(self, service, mock_repo):
        mock_repo.get_many.return_value = []
        assert service.get_products_by_ids(["a", "b"]) == []
        mock_repo.get_many.assert_called_once_with(["a", "b"])

    def test_list_products_builds_page(self, service, mock_repo):
        items = [_make_product(), _make_product(sku="SKU-002")]
        mock_repo.find_page.return_value = (items, 12)

        page = service.list_products(
            ProductListQueryDTO.model_validate({"page": 2, "limit": 5})
        )

        query = mock_repo.find_page.call_args.args[0]
        assert query.offset == 5
        assert query.limit == 5
        assert page.items == items
        assert page.pagination.total == 12
        assert page.pagination.total_pages == 3
        assert page.pagination.has_next is True
        assert page.pagination.has_prev is True

    def test_find_by_category_trims(self, service, mock_repo):
        mock_repo.list.return_value = []
        service.find_by_category(" Books ")
        mock_repo.list.assert_called_once_with({"category": "Books"})

    def test_find_low_stock(self, service, mock_repo):
        mock_repo.find_low_stock.return_value = []
        service.find_low_stock(10)
        mock_repo.find_low_stock.assert_called_once_with(10)

    def test_find_low_stock_negative_threshold(self, service, mock_repo):
        with pytest.raises(ProductValidationError):
            service.find_low_stock(-1)

    def test_find_out_of_stock(self, service, mock_repo):
        mock_repo.find_out_of_stock.return_value = []
        assert service.find_out_of_stock() == []

    @pytest.mark.parametrize("requested, expected", [(4, True), (5, False)])
    def test_check_availability(self, service, mock_repo, requested, expected):
        mock_repo.get_by_id.return_value = _make_product(quantity=4)
        assert service.check_availability("pid", requested) is expected
