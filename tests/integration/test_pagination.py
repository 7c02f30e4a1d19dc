"""Integration tests for listing: filters, sorting and pagination metadata."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.products.models import Product

pytestmark = pytest.mark.integration

URL = "/api/products/"


@pytest.fixture()
def product_batch():
    """120 products; every third one is out of stock."""
    products = []
    for idx in range(1, 121):
        quantity = 0 if idx % 3 == 0 else idx
        products.append(
            Product(
                sku=f"SKU-{idx:03d}",
                name=f"Product {idx:03d}",
                description="Batch product",
                price=Decimal(idx),
                category="Books" if idx % 2 else "Toys",
                quantity=quantity,
                in_stock=quantity > 0,
            )
        )
    Product.objects.bulk_create(products)
    return products


@pytest.fixture()
def small_catalog(make_product):
    return [
        make_product(sku="ELEC-1", name="Blue Lamp", price=Decimal("25.00")),
        make_product(sku="ELEC-2", name="Red Lamp", price=Decimal("75.00"), quantity=0),
        make_product(
            sku="BOOK-1",
            name="Django Book",
            price=Decimal("40.00"),
            category="Books",
            description="Covers lamps of knowledge",
        ),
        make_product(
            sku="TOYS-1", name="Kite", price=Decimal("120.00"), category="Toys"
        ),
    ]


class TestPagination:
    def test_default_page_size(self, api_client, product_batch):
        response = api_client.get(URL)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert len(body["data"]) == 10
        assert body["pagination"] == {
            "page": 1,
            "limit": 10,
            "total": 120,
            "totalPages": 12,
            "hasNext": True,
            "hasPrev": False,
        }

    def test_custom_page_and_limit(self, api_client, product_batch):
        response = api_client.get(URL, {"page": 3, "limit": 50})
        body = response.json()
        assert len(body["data"]) == 20
        assert body["pagination"]["totalPages"] == 3
        assert body["pagination"]["hasNext"] is False
        assert body["pagination"]["hasPrev"] is True

    def test_max_limit_accepted(self, api_client, product_batch):
        response = api_client.get(URL, {"limit": 100})
        assert response.status_code == 200
        assert len(response.json()["data"]) == 100

    @pytest.mark.parametrize(
        "params", [{"limit": 101}, {"limit": 0}, {"page": 0}, {"page": "x"}]
    )
    def test_out_of_range_paging_rejected(self, api_client, params):
        response = api_client.get(URL, params)
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_page_past_the_end_is_empty(self, api_client, product_batch):
        response = api_client.get(URL, {"page": 99})
        body = response.json()
        assert response.status_code == 200
        assert body["data"] == []
        assert body["pagination"]["total"] == 120
        assert body["pagination"]["hasNext"] is False

    def test_empty_catalog_metadata(self, api_client):
        body = api_client.get(URL).json()
        assert body["data"] == []
        assert body["pagination"] == {
            "page": 1,
            "limit": 10,
            "total": 0,
            "totalPages": 0,
            "hasNext": False,
            "hasPrev": False,
        }

    def test_pages_do_not_overlap(self, api_client, product_batch):
        first = {p["id"] for p in api_client.get(URL, {"page": 1}).json()["data"]}
        second = {p["id"] for p in api_client.get(URL, {"page": 2}).json()["data"]}
        assert len(first) == len(second) == 10
        assert first.isdisjoint(second)

    def test_blank_parameters_ignored(self, api_client, product_batch):
        response = api_client.get(URL, {"page": "", "category": ""})
        assert response.status_code == 200
        assert response.json()["pagination"]["total"] == 120


class TestFiltering:
    def test_filter_by_category(self, api_client, small_catalog):
        body = api_client.get(URL, {"category": "Electronics"}).json()
        assert {p["sku"] for p in body["data"]} == {"ELEC-1", "ELEC-2"}
        assert body["pagination"]["total"] == 2

    def test_category_filter_is_exact(self, api_client, small_catalog):
        body = api_client.get(URL, {"category": "Electro"}).json()
        assert body["data"] == []

    def test_search_matches_name_and_description(self, api_client, small_catalog):
        body = api_client.get(URL, {"search": "LAMP"}).json()
        assert {p["sku"] for p in body["data"]} == {"ELEC-1", "ELEC-2", "BOOK-1"}

    def test_search_matches_sku(self, api_client, small_catalog):
        body = api_client.get(URL, {"search": "toys-1"}).json()
        assert [p["sku"] for p in body["data"]] == ["TOYS-1"]

    def test_price_range_inclusive(self, api_client, small_catalog):
        body = api_client.get(URL, {"minPrice": "40", "maxPrice": "75"}).json()
        assert {p["sku"] for p in body["data"]} == {"ELEC-2", "BOOK-1"}

    def test_inverted_price_range_rejected(self, api_client):
        response = api_client.get(URL, {"minPrice": "80", "maxPrice": "10"})
        assert response.status_code == 400
        assert response.json()["message"] == "Validation failed."

    def test_filter_in_stock(self, api_client, small_catalog):
        body = api_client.get(URL, {"inStock": "false"}).json()
        assert [p["sku"] for p in body["data"]] == ["ELEC-2"]

    def test_filters_combine_and_total_matches(self, api_client, product_batch):
        params = {"category": "Toys", "inStock": "true", "limit": 100}
        body = api_client.get(URL, params).json()
        expected = [p for p in product_batch if p.category == "Toys" and p.quantity > 0]
        assert body["pagination"]["total"] == len(expected)
        assert len(body["data"]) == len(expected)
        assert all(p["category"] == "Toys" and p["inStock"] for p in body["data"])


class TestSorting:
    def test_default_is_newest_first(self, api_client, small_catalog):
        body = api_client.get(URL).json()
        skus = [p["sku"] for p in body["data"]]
        assert skus == ["TOYS-1", "BOOK-1", "ELEC-2", "ELEC-1"]

    def test_sort_by_price_ascending(self, api_client, small_catalog):
        body = api_client.get(URL, {"sortBy": "price", "sortOrder": "asc"}).json()
        prices = [p["price"] for p in body["data"]]
        assert prices == sorted(prices)
        assert prices[0] == 25.0

    def test_sort_by_name_descending(self, api_client, small_catalog):
        body = api_client.get(URL, {"sortBy": "name", "sortOrder": "desc"}).json()
        names = [p["name"] for p in body["data"]]
        assert names == sorted(names, reverse=True)

    def test_unknown_sort_field_rejected(self, api_client):
        response = api_client.get(URL, {"sortBy": "password"})
        assert response.status_code == 400
        errors = response.json()["errors"]
        assert errors[0]["field"] == "sortBy"
