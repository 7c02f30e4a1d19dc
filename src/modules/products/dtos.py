"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  They are
the single validation set for the catalog: the API layer builds them
from untrusted request data, the services only re-check what needs a
storage round-trip (SKU uniqueness, stock arithmetic).  DTOs are
immutable (``frozen=True``) and accept the API's camelCase names as
well as snake_case ones.

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: input for partial product updates.
- ``StockUpdateDTO`` / ``StockQuantityDTO``: stock changes and reservations.
- ``ProductListQueryDTO``: filter / sort / page request for listings.

Unknown keys are ignored.  In particular a caller-supplied ``inStock``
never reaches the services: stock state is derived from ``quantity``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from modules.products.constants import (
    CATEGORY_MAX_LENGTH,
    DEFAULT_LOW_STOCK_THRESHOLD,
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    IMAGE_URL_MAX_LENGTH,
    MAX_PAGE_SIZE,
    MAX_QUANTITY,
    NAME_MAX_LENGTH,
    SKU_MAX_LENGTH,
    SortField,
    SortOrder,
    StockOperation,
)

_HTTP_URL = TypeAdapter(HttpUrl)

_DTO_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    str_strip_whitespace=True,
)


def _check_image_url(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return None
    if len(v) > IMAGE_URL_MAX_LENGTH:
        raise ValueError("Image URL too long.")
    try:
        _HTTP_URL.validate_python(v)
    except ValidationError as exc:
        raise ValueError("Invalid image URL.") from exc
    return v


def _check_price(v: Decimal) -> Decimal:
    if v <= 0:
        raise ValueError("Price must be greater than zero.")
    return v


# SKUs travel as a single URL path segment in `sku/{sku}/`.
def _check_sku(v: str) -> str:
    if "/" in v:
        raise ValueError("SKU cannot contain '/'.")
    return v


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``name``, ``sku`` and ``category`` are non-empty after trimming.
    - ``sku`` contains no ``/``.
    - ``price`` is a Decimal greater than zero with at most two decimals.
    - ``quantity`` is a non-negative integer (defaults to 0).
    - ``image_url`` is an http(s) URL when present.
    """

    model_config = _DTO_CONFIG

    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    price: Decimal = Field(max_digits=10, decimal_places=2)
    sku: str = Field(min_length=1, max_length=SKU_MAX_LENGTH)
    category: str = Field(min_length=1, max_length=CATEGORY_MAX_LENGTH)
    description: Optional[str] = None
    quantity: int = Field(default=0, ge=0, le=MAX_QUANTITY)
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    @field_validator("price")
    @classmethod
    def price_must_be_positive(cls, v: Decimal) -> Decimal:
        return _check_price(v)

    @field_validator("sku")
    @classmethod
    def sku_must_fit_url(cls, v: str) -> str:
        return _check_sku(v)

    @field_validator("image_url")
    @classmethod
    def image_url_must_be_http(cls, v: Optional[str]) -> Optional[str]:
        return _check_image_url(v)


class UpdateProductDTO(BaseModel):
    """Immutable DTO for partial product updates.

    Only fields present in the input are applied (see
    ``changes()``); absent fields keep their stored value.  ``description``
    and ``image_url`` may be explicitly cleared with ``null``; the other
    fields reject ``null``.
    """

    model_config = _DTO_CONFIG

    name: Optional[str] = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    price: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    sku: Optional[str] = Field(default=None, min_length=1, max_length=SKU_MAX_LENGTH)
    category: Optional[str] = Field(
        default=None, min_length=1, max_length=CATEGORY_MAX_LENGTH
    )
    description: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=0, le=MAX_QUANTITY)
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    @field_validator("name", "price", "sku", "category", "quantity")
    @classmethod
    def must_not_be_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null.")
        return v

    @field_validator("price")
    @classmethod
    def price_must_be_positive(cls, v: Decimal) -> Decimal:
        return _check_price(v)

    @field_validator("sku")
    @classmethod
    def sku_must_fit_url(cls, v: str) -> str:
        return _check_sku(v)

    @field_validator("image_url")
    @classmethod
    def image_url_must_be_http(cls, v: Optional[str]) -> Optional[str]:
        return _check_image_url(v)

    def changes(self) -> dict:
        """Field -> value for every field the caller actually supplied."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class StockUpdateDTO(BaseModel):
    """Stock change: ``set`` to, ``add`` or ``subtract`` a quantity."""

    model_config = _DTO_CONFIG

    quantity: int = Field(ge=0, le=MAX_QUANTITY)
    operation: StockOperation = StockOperation.SET


class StockQuantityDTO(BaseModel):
    """A positive number of units (reservations, availability checks)."""

    model_config = _DTO_CONFIG

    quantity: int = Field(ge=1, le=MAX_QUANTITY)


class LowStockQueryDTO(BaseModel):
    model_config = _DTO_CONFIG

    threshold: int = Field(default=DEFAULT_LOW_STOCK_THRESHOLD, ge=0)


class SearchQueryDTO(BaseModel):
    model_config = _DTO_CONFIG

    q: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)


class BulkProductIdsDTO(BaseModel):
    model_config = _DTO_CONFIG

    product_ids: List[str] = Field(min_length=1, max_length=MAX_PAGE_SIZE, alias="productIds")


class ProductListQueryDTO(BaseModel):
    """Filter / sort / page request for product listings.

    Values outside their range are rejected rather than clamped, so a
    caller never silently receives a different page size than requested.
    """

    model_config = _DTO_CONFIG

    page: int = Field(default=DEFAULT_PAGE, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    category: Optional[str] = Field(default=None, max_length=CATEGORY_MAX_LENGTH)
    search: Optional[str] = Field(default=None, max_length=NAME_MAX_LENGTH)
    min_price: Optional[Decimal] = Field(default=None, gt=0, alias="minPrice")
    max_price: Optional[Decimal] = Field(default=None, gt=0, alias="maxPrice")
    in_stock: Optional[bool] = Field(default=None, alias="inStock")
    sort_by: SortField = Field(default=SortField.CREATED_AT, alias="sortBy")
    sort_order: SortOrder = Field(default=SortOrder.DESC, alias="sortOrder")

    @model_validator(mode="after")
    def price_range_must_be_ordered(self) -> ProductListQueryDTO:
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("minPrice cannot be greater than maxPrice.")
        return self
