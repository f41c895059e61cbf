"""Inventory movement log — append-only audit trail of physical stock changes.

Reservations and releases only move units between available and reserved,
so they are not movements; everything that changes ``quantity`` is.
"""

import uuid

from protean.core.projector import on
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from warehouse.domain import warehouse
from warehouse.ledger.events import (
    InventoryAdjusted,
    InventoryConfirmed,
    InventoryCreated,
    InventoryRestocked,
)
from warehouse.ledger.inventory import InventoryRecord


class MovementType:
    INITIAL_STOCK = "initial_stock"
    ORDER_FULFILLED = "order_fulfilled"
    PURCHASE_ORDER_RECEIVED = "purchase_order_received"
    ADJUSTMENT_IN = "adjustment_in"
    ADJUSTMENT_OUT = "adjustment_out"


@warehouse.projection
class InventoryMovement:
    movement_id = Identifier(identifier=True, required=True)
    inventory_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    movement_type = String(required=True, max_length=50)
    quantity_before = Integer(default=0)
    quantity_change = Integer(default=0)
    quantity_after = Integer(default=0)
    reference_type = String(max_length=50)
    reference_id = Identifier()
    reason = String(max_length=500)
    performed_by = String(max_length=100)
    occurred_at = DateTime(required=True)


def _record_movement(event, movement_type, quantity_before, quantity_change, quantity_after, occurred_at, **extra):
    current_domain.repository_for(InventoryMovement).add(
        InventoryMovement(
            movement_id=str(uuid.uuid4()),
            inventory_id=event.inventory_id,
            product_id=event.product_id,
            variant_id=event.variant_id,
            movement_type=movement_type,
            quantity_before=quantity_before,
            quantity_change=quantity_change,
            quantity_after=quantity_after,
            occurred_at=occurred_at,
            **extra,
        )
    )


@warehouse.projector(projector_for=InventoryMovement, aggregates=[InventoryRecord])
class InventoryMovementProjector:
    @on(InventoryCreated)
    def on_inventory_created(self, event):
        if event.quantity <= 0:
            return
        _record_movement(
            event,
            MovementType.INITIAL_STOCK,
            0,
            event.quantity,
            event.quantity,
            event.created_at,
            reason="Initial stock",
        )

    @on(InventoryConfirmed)
    def on_inventory_confirmed(self, event):
        _record_movement(
            event,
            MovementType.ORDER_FULFILLED,
            event.quantity_before,
            -event.quantity,
            event.quantity_after,
            event.confirmed_at,
            reference_type="order",
            reference_id=event.order_id,
            reason=f"Reservation {event.reservation_id} confirmed",
        )

    @on(InventoryRestocked)
    def on_inventory_restocked(self, event):
        _record_movement(
            event,
            MovementType.PURCHASE_ORDER_RECEIVED,
            event.quantity_before,
            event.quantity_added,
            event.quantity_after,
            event.restocked_at,
            reference_type="purchase_order" if event.purchase_order_id else None,
            reference_id=event.purchase_order_id,
        )

    @on(InventoryAdjusted)
    def on_inventory_adjusted(self, event):
        _record_movement(
            event,
            MovementType.ADJUSTMENT_IN if event.quantity_change > 0 else MovementType.ADJUSTMENT_OUT,
            event.quantity_before,
            event.quantity_change,
            event.quantity_after,
            event.adjusted_at,
            reason=event.reason,
            performed_by=event.adjusted_by,
        )


def movement_history(inventory_id, limit=50):
    """Movements of one inventory record, newest first."""
    movements = (
        current_domain.repository_for(InventoryMovement)
        ._dao.query.filter(inventory_id=str(inventory_id))
        .order_by("-occurred_at")
        .limit(limit)
        .all()
        .items
    )
    return list(movements)
