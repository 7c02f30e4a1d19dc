from __future__ import annotations

from enum import Enum

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

DEFAULT_LOW_STOCK_THRESHOLD = 10

# Largest value a PositiveIntegerField column holds on every backend.
MAX_QUANTITY = 2147483647

NAME_MAX_LENGTH = 255
SKU_MAX_LENGTH = 100
CATEGORY_MAX_LENGTH = 100
IMAGE_URL_MAX_LENGTH = 2048


class StockOperation(str, Enum):
    SET = "set"
    ADD = "add"
    SUBTRACT = "subtract"


class SortField(str, Enum):
    NAME = "name"
    PRICE = "price"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    CATEGORY = "category"
    QUANTITY = "quantity"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# API sort keys -> model columns
SORT_COLUMNS = {
    SortField.NAME: "name",
    SortField.PRICE: "price",
    SortField.CREATED_AT: "created_at",
    SortField.UPDATED_AT: "updated_at",
    SortField.CATEGORY: "category",
    SortField.QUANTITY: "quantity",
}

# Suggested storefront categories. Not enforced: category stays free-form.
SUGGESTED_CATEGORIES = (
    "Electronics",
    "Clothing",
    "Books",
    "Home & Garden",
    "Sports",
    "Toys",
    "Health & Beauty",
    "Automotive",
    "Food & Beverages",
    "Other",
)
