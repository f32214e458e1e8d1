from __future__ import annotations

from typing import Any

from django.core.management.base import BaseCommand, CommandError

from modules.core.mongo import close_client
from modules.products.exceptions import ProductPersistenceError
from modules.products.models import Product
from modules.products.repositories import get_product_repository
from modules.products.validators import validate_product

SAMPLE_PRODUCTS: list[dict[str, Any]] = [
    {
        "productId": "P001",
        "name": "Amul Milk (1L)",
        "mrpPrice": 65.0,
        "stock": 50,
        "category": "Dairy",
        "discounts": "10% off",
        "expiryDate": "2025-08-15",
    },
    {
        "productId": "P002",
        "name": "Fresh Apples (1kg)",
        "mrpPrice": 180.0,
        "stock": 30,
        "category": "Fruits",
        "discounts": "5% off",
        "expiryDate": "2025-08-10",
    },
    {
        "productId": "P003",
        "name": "Fresh Broccoli (500g)",
        "mrpPrice": 70.0,
        "stock": 20,
        "category": "Vegetables",
        "discounts": "15% off",
        "expiryDate": "2025-08-12",
    },
    {
        "productId": "P004",
        "name": "Fortune Sunflower Oil (1L)",
        "mrpPrice": 160.0,
        "stock": 40,
        "category": "Grocery",
        "discounts": "10% cashback",
        "expiryDate": "2026-06-30",
    },
    {
        "productId": "P005",
        "name": "Britannia Bread (400g)",
        "mrpPrice": 50.0,
        "stock": 60,
        "category": "Bakery",
        "discounts": "Buy 1 Get 1 Free",
        "expiryDate": "2025-08-28",
    },
    {
        "productId": "P006",
        "name": "Coca Cola (500ml)",
        "mrpPrice": 40.0,
        "stock": 100,
        "category": "Beverages",
        "discounts": "5% off",
        "expiryDate": "2025-12-31",
    },
    {
        "productId": "P007",
        "name": "Lays Chips (50g)",
        "mrpPrice": 20.0,
        "stock": 80,
        "category": "Snacks",
        "discounts": "Buy 2 Get 1 Free",
        "expiryDate": "2025-06-15",
    },
    {
        "productId": "P008",
        "name": "Basmati Rice (5kg)",
        "mrpPrice": 450.0,
        "stock": 25,
        "category": "Grocery",
        "discounts": "8% off",
        "expiryDate": "2026-01-01",
    },
]


class Command(BaseCommand):
    help = "Replace the products collection with the sample grocery catalogue."

    def add_arguments(self, parser) -> None:
        parser.add_argument(
            "--keep-existing",
            action="store_true",
            help="Do not clear the collection before inserting.",
        )

    def handle(self, *args, **options):
        repository = get_product_repository()
        self.stdout.write("Seeding products...")

        try:
            repository.ensure_indexes()
            if not options["keep_existing"]:
                removed = repository.delete_all()
                self.stdout.write(f"Removed {removed} existing products")
            products = self._valid_products()
            inserted = repository.insert_many(products)
        except ProductPersistenceError as exc:
            raise CommandError(f"Seeding failed: {exc}") from exc
        finally:
            close_client()

        self.stdout.write(self.style.SUCCESS(f"Seed completed: products={inserted}"))
        if products:
            categories = sorted({p.category for p in products})
            prices = [p.mrp_price for p in products]
            self.stdout.write(f"Categories: {', '.join(categories)}")
            self.stdout.write(f"Price range: ₹{min(prices):.2f} - ₹{max(prices):.2f}")

    def _valid_products(self) -> list[Product]:
        products: list[Product] = []
        for data in SAMPLE_PRODUCTS:
            result = validate_product(data)
            if not result.is_valid:
                self.stdout.write(
                    self.style.WARNING(
                        f"Skipping {data.get('productId')}: {'; '.join(result.errors)}"
                    )
                )
                continue
            products.append(Product.model_validate(result.cleaned))
        return products
