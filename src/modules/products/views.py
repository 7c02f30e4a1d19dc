"""Product API views.

Exposes the ``ProductService`` via HTTP using a DRF ``GenericViewSet``.
Request data is validated by the Pydantic DTOs; domain and validation
errors propagate to ``api_exception_handler``, which renders the
``{success: false, message, errors?}`` envelope.
"""

from __future__ import annotations

from typing import Any, Dict

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.responses import error_response, success_response
from modules.products.dtos import (
    BulkProductIdsDTO,
    CreateProductDTO,
    LowStockQueryDTO,
    ProductListQueryDTO,
    SearchQueryDTO,
    StockQuantityDTO,
    StockUpdateDTO,
    UpdateProductDTO,
)
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer
from modules.products.services import ProductService


def _payload(request: Request) -> Dict[str, Any]:
    data = request.data
    if hasattr(data, "dict"):
        return data.dict()
    return data if isinstance(data, dict) else {}


def _query(request: Request) -> Dict[str, Any]:
    # Blank query parameters count as absent.
    return {k: v for k, v in request.query_params.dict().items() if v != ""}


class ProductViewSet(GenericViewSet):
    """ViewSet for the product catalog.

    Uses ``ProductService`` with ``ProductDjangoRepository`` (DIP).
    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    serializer_class = ProductSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    def _render(self, products) -> Response:
        return success_response(ProductSerializer(products, many=True).data)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/products/"""
        dto = ProductListQueryDTO.model_validate(_query(request))
        page = self._service.list_products(dto)
        return success_response(
            ProductSerializer(page.items, many=True).data,
            pagination=page.pagination.to_dict(),
        )

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/products/{pk}/"""
        product = self._service.get_product(pk)
        return success_response(ProductSerializer(product).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/products/"""
        dto = CreateProductDTO.model_validate(_payload(request))
        product = self._service.create_product(dto)
        return success_response(
            ProductSerializer(product).data,
            status_code=status.HTTP_201_CREATED,
            message="Product created successfully",
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/products/{pk}/

        Both verbs apply only the supplied fields.
        """
        dto = UpdateProductDTO.model_validate(_payload(request))
        product = self._service.update_product(pk, dto)
        return success_response(
            ProductSerializer(product).data,
            message="Product updated successfully",
        )

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/products/{pk}/"""
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/products/{pk}/"""
        self._service.delete_product(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Look-ups
    # ------------------------------------------------------------------

    @action(detail=False, methods=["get"], url_path=r"sku/(?P<sku>[^/]+)")
    def by_sku(self, request: Request, sku: str) -> Response:
        """GET /api/products/sku/{sku}/"""
        product = self._service.get_product_by_sku(sku)
        return success_response(ProductSerializer(product).data)

    @action(detail=False, methods=["get"], url_path=r"category/(?P<category>[^/]+)")
    def by_category(self, request: Request, category: str) -> Response:
        """GET /api/products/category/{category}/"""
        return self._render(self._service.find_by_category(category))

    @action(detail=False, methods=["get"])
    def search(self, request: Request) -> Response:
        """GET /api/products/search/?q=term"""
        dto = SearchQueryDTO.model_validate(_query(request))
        return self._render(self._service.search_products(dto.q))

    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request: Request) -> Response:
        """GET /api/products/low-stock/?threshold=N"""
        dto = LowStockQueryDTO.model_validate(_query(request))
        return self._render(self._service.find_low_stock(dto.threshold))

    @action(detail=False, methods=["get"], url_path="out-of-stock")
    def out_of_stock(self, request: Request) -> Response:
        """GET /api/products/out-of-stock/"""
        return self._render(self._service.find_out_of_stock())

    @action(detail=False, methods=["post"])
    def bulk(self, request: Request) -> Response:
        """POST /api/products/bulk/  ``{"productIds": [...]}``"""
        dto = BulkProductIdsDTO.model_validate(_payload(request))
        return self._render(self._service.get_products_by_ids(dto.product_ids))

    # ------------------------------------------------------------------
    # Stock
    # ------------------------------------------------------------------

    @action(detail=True, methods=["patch", "post"])
    def stock(self, request: Request, pk: str | None = None) -> Response:
        """PATCH/POST /api/products/{pk}/stock/

        Accepts ``{"quantity": N, "operation": "set" | "add" | "subtract"}``;
        ``operation`` defaults to ``set``.
        """
        dto = StockUpdateDTO.model_validate(_payload(request))
        product = self._service.update_stock(pk, dto)
        return success_response(
            ProductSerializer(product).data,
            message="Stock updated successfully",
        )

    @action(detail=True, methods=["post"])
    def reserve(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/products/{pk}/reserve/  ``{"quantity": N}``

        A reservation that cannot be met is still a 200 with
        ``success: false``; stock is left unchanged.
        """
        dto = StockQuantityDTO.model_validate(_payload(request))
        if self._service.reserve_stock(pk, dto.quantity):
            return success_response(message="Stock reserved successfully")
        return error_response("Insufficient stock", status.HTTP_200_OK)

    @action(detail=True, methods=["get"])
    def availability(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/products/{pk}/availability/?quantity=N"""
        dto = StockQuantityDTO.model_validate(_query(request))
        available = self._service.check_availability(pk, dto.quantity)
        return success_response({"available": available})
