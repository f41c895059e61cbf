"""Faker-based data generators for Locust load test scenarios.

Payloads match the field names of the Warehouse API's Pydantic request
schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

SIZES = ("S", "M", "L", "XL")


def unique_product_id() -> str:
    return f"prod-lt-{uuid.uuid4().hex[:10]}"


def sku_for(product_id: str, size: str | None = None) -> str:
    base = product_id.split("-")[-1][:6].upper()
    return f"LT-{base}-{size}" if size else f"LT-{base}"


def inventory_data(product_id: str, variant_id: str | None = None, quantity: int | None = None) -> dict:
    return {
        "product_id": product_id,
        "variant_id": variant_id,
        "sku": sku_for(product_id, variant_id),
        "quantity": quantity if quantity is not None else random.randint(20, 200),
        "min_stock_level": random.randint(2, 10),
        "location": f"Rack {fake.random_uppercase_letter()}{random.randint(1, 40)}",
        "zone": random.choice(["A", "B", "C"]),
    }


def reservation_data(product_id: str, variant_id: str | None = None, quantity: int | None = None) -> dict:
    return {
        "product_id": product_id,
        "variant_id": variant_id,
        "quantity": quantity or random.randint(1, 3),
        "order_id": f"ord-lt-{uuid.uuid4().hex[:10]}",
        "order_item_id": f"item-lt-{uuid.uuid4().hex[:8]}",
    }


def bundle_data(sizes=SIZES, units_per_size: int = 4) -> dict:
    breakdown = {size: units_per_size for size in sizes}
    total = sum(breakdown.values())
    return {
        "bundle_name": f"{fake.color_name()} grosir pack",
        "total_units": total,
        "size_breakdown": breakdown,
        "bundle_cost": round(total * random.uniform(20_000, 60_000), 2),
    }


def purchase_order_data(product_id: str, sizes=SIZES) -> dict:
    return {
        "supplier_id": f"sup-{uuid.uuid4().hex[:8]}",
        "supplier_name": fake.company()[:255],
        "items": [
            {
                "product_id": product_id,
                "variant_id": size,
                "sku": sku_for(product_id, size),
                "product_name": fake.catch_phrase()[:255],
                "bundle_quantity": random.randint(1, 3),
                "units_per_bundle": 4,
                "unit_cost": round(random.uniform(20_000, 60_000), 2),
            }
            for size in sizes
        ],
        "shipping_cost": round(random.uniform(10_000, 50_000), 2),
        "notes": fake.sentence(),
    }
