from __future__ import annotations

import random
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from modules.products.constants import SUGGESTED_CATEGORIES
from modules.products.models import Product

CATALOG = [
    ("ELEC-001", 'Monitor 27"', "Electronics", Decimal("329.90")),
    ("ELEC-002", "Mechanical Keyboard", "Electronics", Decimal("89.90")),
    ("ELEC-003", "Wireless Mouse", "Electronics", Decimal("24.90")),
    ("ELEC-004", "Noise Cancelling Headset", "Electronics", Decimal("149.00")),
    ("CLTH-001", "Cotton T-Shirt", "Clothing", Decimal("14.90")),
    ("CLTH-002", "Rain Jacket", "Clothing", Decimal("79.00")),
    ("BOOK-001", "Practical Django", "Books", Decimal("39.90")),
    ("BOOK-002", "Gardening for Beginners", "Books", Decimal("19.90")),
    ("HOME-001", "Ceramic Plant Pot", "Home & Garden", Decimal("12.50")),
    ("HOME-002", "Garden Hose 20m", "Home & Garden", Decimal("34.90")),
    ("SPRT-001", "Yoga Mat", "Sports", Decimal("29.90")),
    ("SPRT-002", "Running Bottle", "Sports", Decimal("9.90")),
    ("TOYS-001", "Wooden Puzzle", "Toys", Decimal("17.90")),
    ("HLTH-001", "Sunscreen SPF 50", "Health & Beauty", Decimal("11.90")),
    ("AUTO-001", "Tyre Pressure Gauge", "Automotive", Decimal("15.00")),
    ("FOOD-001", "Arabica Coffee Beans 1kg", "Food & Beverages", Decimal("22.00")),
]


class Command(BaseCommand):
    help = "Seed the catalog with sample products for local development."

    def add_arguments(self, parser):
        parser.add_argument(
            "--out-of-stock",
            type=int,
            default=3,
            help="How many of the seeded products start with no stock.",
        )
        parser.add_argument("--seed", type=int, default=42)

    def handle(self, *args, **options):
        random.seed(options["seed"])
        self.stdout.write("Seeding catalog...")

        unknown = {c for _, _, c, _ in CATALOG} - set(SUGGESTED_CATEGORIES)
        if unknown:
            self.stdout.write(
                self.style.WARNING(f"Non-standard categories: {sorted(unknown)}")
            )

        empty_count = min(options["out_of_stock"], len(CATALOG))
        empty = set(random.sample(range(len(CATALOG)), empty_count))
        created = 0
        with transaction.atomic():
            for index, (sku, name, category, price) in enumerate(CATALOG):
                quantity = 0 if index in empty else random.randint(1, 200)
                _, was_created = Product.objects.get_or_create(
                    sku=sku,
                    defaults={
                        "name": name,
                        "description": f"{name} ({category})",
                        "price": price,
                        "category": category,
                        "quantity": quantity,
                    },
                )
                created += int(was_created)

        self.stdout.write(
            self.style.SUCCESS(
                f"Seed completed: products={created} created, "
                f"{len(CATALOG) - created} already present"
            )
        )
