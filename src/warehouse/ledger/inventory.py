"""InventoryRecord aggregate (CQRS) — the stock ledger row for one product variant.

``quantity`` is the physical count on the shelf. It is always split into
``available_quantity`` (sellable) and ``reserved_quantity`` (held for orders
that are not yet confirmed). Every persisted mutation bumps the aggregate
version, which the repository checks on save: a stale copy cannot overwrite
a newer one.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from warehouse.domain import warehouse
from warehouse.errors import NegativeQuantityGuard
from warehouse.ledger.events import (
    InventoryAdjusted,
    InventoryConfirmed,
    InventoryCreated,
    InventoryLowStock,
    InventoryOutOfStock,
    InventoryReleased,
    InventoryReserved,
    InventoryRestocked,
)


def _variant(value):
    return str(value) if value is not None else None


@warehouse.aggregate
class InventoryRecord:
    product_id = Identifier(required=True)
    variant_id = Identifier()  # None for products without variants
    sku = String(required=True, max_length=100)
    quantity = Integer(default=0)
    reserved_quantity = Integer(default=0)
    available_quantity = Integer(default=0)
    min_stock_level = Integer(default=0)
    max_stock_level = Integer()
    reorder_point = Integer(default=0)
    reorder_quantity = Integer(default=0)
    location = String(max_length=100)
    zone = String(max_length=50)
    last_restocked_at = DateTime()
    last_sold_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def stock_counters_must_balance(self):
        if (self.available_quantity or 0) + (self.reserved_quantity or 0) != (self.quantity or 0):
            raise ValidationError(
                {
                    "quantity": [
                        f"available ({self.available_quantity}) + reserved ({self.reserved_quantity}) "
                        f"must equal quantity ({self.quantity})"
                    ]
                }
            )

    @invariant.post
    def stock_counters_cannot_be_negative(self):
        for field_name in ("quantity", "reserved_quantity", "available_quantity"):
            if (getattr(self, field_name) or 0) < 0:
                raise ValidationError({field_name: ["Stock counters cannot be negative"]})

    @property
    def version(self) -> int:
        """Optimistic-lock counter, incremented by the repository on every save."""
        return self._version

    def _ids(self):
        return {
            "inventory_id": str(self.id),
            "product_id": str(self.product_id),
            "variant_id": _variant(self.variant_id),
        }

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        product_id,
        sku,
        variant_id=None,
        quantity=0,
        min_stock_level=0,
        max_stock_level=None,
        reorder_point=0,
        reorder_quantity=0,
        location=None,
        zone=None,
    ):
        if quantity is None or quantity < 0:
            raise ValidationError({"quantity": ["Initial quantity cannot be negative"]})
        if min_stock_level < 0:
            raise ValidationError({"min_stock_level": ["Minimum stock level cannot be negative"]})
        if max_stock_level is not None and max_stock_level < min_stock_level:
            raise ValidationError({"max_stock_level": ["Maximum stock level cannot be below the minimum"]})

        now = datetime.now(UTC)
        record = cls(
            product_id=product_id,
            variant_id=variant_id,
            sku=sku,
            quantity=quantity,
            reserved_quantity=0,
            available_quantity=quantity,
            min_stock_level=min_stock_level,
            max_stock_level=max_stock_level,
            reorder_point=reorder_point,
            reorder_quantity=reorder_quantity,
            location=location,
            zone=zone,
            last_restocked_at=now if quantity > 0 else None,
            created_at=now,
            updated_at=now,
        )
        record.raise_(
            InventoryCreated(
                **record._ids(),
                sku=sku,
                quantity=quantity,
                min_stock_level=min_stock_level,
                created_at=now,
            )
        )
        return record

    # -------------------------------------------------------------------
    # Stock status
    # -------------------------------------------------------------------
    @property
    def stock_status(self) -> str:
        if self.available_quantity <= 0:
            return "out_of_stock"
        if self.available_quantity <= self.min_stock_level:
            return "low_stock"
        return "in_stock"

    def _check_stock_level(self, now):
        """Raise at most one stock alert for the current available quantity."""
        status = self.stock_status
        if status == "in_stock":
            return

        alert_cls = InventoryOutOfStock if status == "out_of_stock" else InventoryLowStock
        self.raise_(
            alert_cls(
                **self._ids(),
                sku=self.sku,
                available_quantity=self.available_quantity,
                min_stock_level=self.min_stock_level,
                detected_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Reservations
    # -------------------------------------------------------------------
    def reserve(self, reservation_id, order_id, quantity, expires_at):
        """Move ``quantity`` units from available to reserved."""
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Reservation quantity must be positive"]})
        if quantity > self.available_quantity:
            raise NegativeQuantityGuard("available_quantity", self.available_quantity, -quantity)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.available_quantity -= quantity
            self.reserved_quantity += quantity
            self.updated_at = now

        self.raise_(
            InventoryReserved(
                **self._ids(),
                reservation_id=str(reservation_id),
                order_id=str(order_id),
                quantity=quantity,
                available_after=self.available_quantity,
                reserved_after=self.reserved_quantity,
                expires_at=expires_at,
                reserved_at=now,
            )
        )
        self._check_stock_level(now)

    def release(self, reservation_id, order_id, quantity, reason):
        """Return ``quantity`` reserved units to available."""
        if quantity > self.reserved_quantity:
            raise NegativeQuantityGuard("reserved_quantity", self.reserved_quantity, -quantity)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.reserved_quantity -= quantity
            self.available_quantity += quantity
            self.updated_at = now

        self.raise_(
            InventoryReleased(
                **self._ids(),
                reservation_id=str(reservation_id),
                order_id=str(order_id),
                quantity=quantity,
                reason=reason,
                available_after=self.available_quantity,
                released_at=now,
            )
        )

    def confirm_sale(self, reservation_id, order_id, quantity):
        """Ship reserved units: physical quantity and the reservation hold both drop."""
        if quantity > self.reserved_quantity:
            raise NegativeQuantityGuard("reserved_quantity", self.reserved_quantity, -quantity)

        now = datetime.now(UTC)
        quantity_before = self.quantity
        with atomic_change(self):
            self.quantity -= quantity
            self.reserved_quantity -= quantity
            self.last_sold_at = now
            self.updated_at = now

        self.raise_(
            InventoryConfirmed(
                **self._ids(),
                reservation_id=str(reservation_id),
                order_id=str(order_id),
                quantity=quantity,
                quantity_before=quantity_before,
                quantity_after=self.quantity,
                confirmed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Receiving and corrections
    # -------------------------------------------------------------------
    def restock(self, quantity, purchase_order_id=None):
        """Add received goods to physical and available stock."""
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Restock quantity must be positive"]})

        now = datetime.now(UTC)
        quantity_before = self.quantity
        with atomic_change(self):
            self.quantity += quantity
            self.available_quantity += quantity
            self.last_restocked_at = now
            self.updated_at = now

        self.raise_(
            InventoryRestocked(
                **self._ids(),
                purchase_order_id=str(purchase_order_id) if purchase_order_id else None,
                quantity_added=quantity,
                quantity_before=quantity_before,
                quantity_after=self.quantity,
                available_after=self.available_quantity,
                min_stock_level=self.min_stock_level,
                restocked_at=now,
            )
        )

    def adjust(self, quantity_change, reason, adjusted_by=None):
        """Apply a signed manual correction to physical and available stock.

        Reserved units are never touched; a negative adjustment can only
        remove units that are still available.
        """
        if not quantity_change:
            raise ValidationError({"quantity_change": ["Adjustment cannot be zero"]})
        if not reason or not reason.strip():
            raise ValidationError({"reason": ["Adjustment reason is required"]})
        if self.quantity + quantity_change < 0:
            raise NegativeQuantityGuard("quantity", self.quantity, quantity_change)
        if self.available_quantity + quantity_change < 0:
            raise NegativeQuantityGuard("available_quantity", self.available_quantity, quantity_change)

        now = datetime.now(UTC)
        quantity_before = self.quantity
        with atomic_change(self):
            self.quantity += quantity_change
            self.available_quantity += quantity_change
            self.updated_at = now

        self.raise_(
            InventoryAdjusted(
                **self._ids(),
                quantity_change=quantity_change,
                quantity_before=quantity_before,
                quantity_after=self.quantity,
                available_after=self.available_quantity,
                min_stock_level=self.min_stock_level,
                reason=reason,
                adjusted_by=adjusted_by,
                adjusted_at=now,
            )
        )
        if quantity_change < 0:
            self._check_stock_level(now)
