"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state; nothing is shared across
users except the contended product id, which is a constant.
"""

from dataclasses import dataclass, field


@dataclass
class InventoryState:
    product_id: str | None = None
    variant_id: str | None = None
    inventory_id: str | None = None
    reservation_ids: list[str] = field(default_factory=list)


@dataclass
class PurchaseOrderState:
    purchase_order_id: str | None = None
    item_ids: list[str] = field(default_factory=list)
    item_units: dict[str, int] = field(default_factory=dict)
    status: str = "draft"


@dataclass
class ContentionStats:
    """Outcome counts for one contention user."""

    reserved: int = 0
    rejected: int = 0
    conflicts: int = 0
