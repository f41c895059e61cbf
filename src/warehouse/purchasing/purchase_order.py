"""PurchaseOrder aggregate (CQRS) — a bundle order placed with a factory.

Deliveries are booked cumulatively: receiving the same item twice adds up,
and both item and order status are re-derived from the cumulative counts
after every delivery, so repeated or out-of-order receipts stay correct.
"""

import json
import secrets
import string
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from warehouse.domain import warehouse
from warehouse.purchasing.events import (
    PurchaseOrderCancelled,
    PurchaseOrderCreated,
    PurchaseOrderReceived,
)


class PurchaseOrderStatus(Enum):
    DRAFT = "draft"
    PARTIALLY_RECEIVED = "partially_received"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class ItemStatus(Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    RECEIVED = "received"


def generate_po_number(now=None):
    now = now or datetime.now(UTC)
    suffix = "".join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(5))
    return f"PO-{now:%Y%m%d}-{suffix}"


@warehouse.entity(part_of="PurchaseOrder")
class PurchaseOrderItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    sku = String(required=True, max_length=100)
    product_name = String(max_length=255)
    bundle_quantity = Integer(required=True, min_value=1)
    units_per_bundle = Integer(required=True, min_value=1)
    total_units = Integer(required=True)
    unit_cost = Float(default=0.0)
    received_units = Integer(default=0)
    damaged_units = Integer(default=0)
    status = String(choices=ItemStatus, default=ItemStatus.PENDING.value)


@warehouse.aggregate
class PurchaseOrder:
    po_number = String(required=True, max_length=50)
    supplier_id = Identifier(required=True)
    supplier_name = String(required=True, max_length=255)
    status = String(choices=PurchaseOrderStatus, default=PurchaseOrderStatus.DRAFT.value)
    items = HasMany(PurchaseOrderItem)
    total_items = Integer(default=0)
    total_units = Integer(default=0)
    subtotal = Float(default=0.0)
    shipping_cost = Float(default=0.0)
    total_cost = Float(default=0.0)
    notes = Text()
    created_at = DateTime()
    updated_at = DateTime()
    received_at = DateTime()
    cancelled_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, supplier_id, supplier_name, items, shipping_cost=0.0, notes=None):
        if not items:
            raise ValidationError({"items": ["A purchase order needs at least one item"]})

        now = datetime.now(UTC)
        po_items = []
        for line in items:
            bundle_quantity = line.get("bundle_quantity") or 0
            units_per_bundle = line.get("units_per_bundle") or 0
            if bundle_quantity <= 0 or units_per_bundle <= 0:
                raise ValidationError({"items": ["Bundle quantity and units per bundle must be positive"]})
            po_items.append(
                PurchaseOrderItem(
                    product_id=line["product_id"],
                    variant_id=line.get("variant_id"),
                    sku=line["sku"],
                    product_name=line.get("product_name"),
                    bundle_quantity=bundle_quantity,
                    units_per_bundle=units_per_bundle,
                    total_units=bundle_quantity * units_per_bundle,
                    unit_cost=line.get("unit_cost") or 0.0,
                )
            )

        subtotal = sum(i.total_units * i.unit_cost for i in po_items)
        shipping_cost = shipping_cost or 0.0
        po = cls(
            po_number=generate_po_number(now),
            supplier_id=supplier_id,
            supplier_name=supplier_name,
            status=PurchaseOrderStatus.DRAFT.value,
            total_items=len(po_items),
            total_units=sum(i.total_units for i in po_items),
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            total_cost=subtotal + shipping_cost,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        po.add_items(po_items)
        po.raise_(
            PurchaseOrderCreated(
                purchase_order_id=str(po.id),
                po_number=po.po_number,
                supplier_id=str(supplier_id),
                supplier_name=supplier_name,
                total_items=po.total_items,
                total_units=po.total_units,
                total_cost=po.total_cost,
                created_at=now,
            )
        )
        return po

    # -------------------------------------------------------------------
    # Receiving
    # -------------------------------------------------------------------
    def get_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def _validate_delivery(self, deliveries):
        if self.status == PurchaseOrderStatus.CANCELLED.value:
            raise ValidationError({"status": ["Cannot receive a cancelled purchase order"]})
        if not deliveries:
            raise ValidationError({"items": ["Nothing to receive"]})

        for delivery in deliveries:
            item_id = delivery.get("item_id")
            received = delivery.get("received_units") or 0
            damaged = delivery.get("damaged_units") or 0
            if self.get_item(item_id) is None:
                raise ValidationError({"item_id": [f"Item {item_id} is not on purchase order {self.po_number}"]})
            if received < 0 or damaged < 0:
                raise ValidationError({"received_units": ["Received and damaged units cannot be negative"]})
            if damaged > received:
                raise ValidationError({"damaged_units": ["Damaged units cannot exceed received units"]})

    def receive(self, deliveries):
        """Book a delivery against the order.

        ``deliveries`` is a list of ``{item_id, received_units, damaged_units}``.
        Returns ``[(item, good_units)]`` for the stock that should be credited.
        The whole delivery is validated before anything changes.
        """
        self._validate_delivery(deliveries)

        now = datetime.now(UTC)
        credited = []
        total_received = 0
        total_damaged = 0
        for delivery in deliveries:
            item = self.get_item(delivery["item_id"])
            received = delivery.get("received_units") or 0
            damaged = delivery.get("damaged_units") or 0

            item.received_units += received
            item.damaged_units += damaged
            item.status = (
                ItemStatus.RECEIVED.value if item.received_units >= item.total_units else ItemStatus.PARTIAL.value
            )

            total_received += received
            total_damaged += damaged
            if received - damaged > 0:
                credited.append((item, received - damaged))

        self._rederive_status(now)
        self.updated_at = now

        self.raise_(
            PurchaseOrderReceived(
                purchase_order_id=str(self.id),
                po_number=self.po_number,
                total_received=total_received,
                total_damaged=total_damaged,
                status=self.status,
                items=json.dumps(
                    [
                        {
                            "item_id": str(d["item_id"]),
                            "received_units": d.get("received_units") or 0,
                            "damaged_units": d.get("damaged_units") or 0,
                        }
                        for d in deliveries
                    ]
                ),
                received_at=now,
            )
        )
        return credited

    def _rederive_status(self, now):
        if all(i.received_units >= i.total_units for i in self.items):
            self.status = PurchaseOrderStatus.RECEIVED.value
            self.received_at = self.received_at or now
        elif any(i.received_units > 0 for i in self.items):
            self.status = PurchaseOrderStatus.PARTIALLY_RECEIVED.value
        else:
            self.status = PurchaseOrderStatus.DRAFT.value

    def cancel(self, reason=None):
        if self.status == PurchaseOrderStatus.CANCELLED.value:
            raise ValidationError({"status": ["Purchase order is already cancelled"]})
        if any(i.received_units > 0 for i in self.items):
            raise ValidationError({"status": ["Cannot cancel a purchase order that has received goods"]})

        now = datetime.now(UTC)
        self.status = PurchaseOrderStatus.CANCELLED.value
        self.cancelled_at = now
        self.updated_at = now
        self.raise_(
            PurchaseOrderCancelled(
                purchase_order_id=str(self.id),
                po_number=self.po_number,
                reason=reason,
                cancelled_at=now,
            )
        )
