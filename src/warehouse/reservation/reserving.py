"""Stock reservation — commands and handler for reserve, release, confirm and expire.

Each command touches the InventoryRecord and the StockReservation in a
single unit of work, so the ledger change, the reservation row and the
outbox events commit together or not at all. Callers go through
``process_with_retry`` so a lost optimistic-lock race re-runs the command.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from warehouse.config import reservation_ttl
from warehouse.domain import warehouse
from warehouse.grosir.lookup import find_tolerance
from warehouse.grosir.tolerance import GrosirTolerance
from warehouse.ledger.inventory import InventoryRecord
from warehouse.ledger.lookup import get_inventory
from warehouse.reservation.reservation import ORDER_CANCELLED, StockReservation

logger = structlog.get_logger(__name__)


@warehouse.command(part_of="StockReservation")
class ReserveInventory:
    """Hold stock of a product (variant) for an order line."""

    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=1)
    order_id = Identifier(required=True)
    order_item_id = Identifier()
    expires_at = DateTime()  # Optional; defaults to now + configured TTL


@warehouse.command(part_of="StockReservation")
class ReleaseReservation:
    reservation_id = Identifier(required=True)
    reason = String(default=ORDER_CANCELLED, max_length=255)


@warehouse.command(part_of="StockReservation")
class ConfirmReservation:
    reservation_id = Identifier(required=True)


@warehouse.command(part_of="StockReservation")
class ExpireReservation:
    """Release a reservation whose TTL has passed, marking it expired."""

    reservation_id = Identifier(required=True)


def insufficient_stock(record, quantity) -> dict:
    """Business outcome for a reservation that cannot be satisfied; not an error."""
    return {
        "success": False,
        "reserved": False,
        "inventory_id": str(record.id),
        "quantity": quantity,
        "available_quantity": record.available_quantity,
        "shortage": quantity - record.available_quantity,
        "message": f"Insufficient stock: requested {quantity}, available {record.available_quantity}",
    }


@warehouse.command_handler(part_of=StockReservation)
class ReservationHandler:
    @handle(ReserveInventory)
    def reserve_inventory(self, command):
        record = get_inventory(command.product_id, command.variant_id)

        if record.available_quantity < command.quantity:
            logger.info(
                "Insufficient stock for reservation",
                inventory_id=str(record.id),
                order_id=str(command.order_id),
                requested=command.quantity,
                available=record.available_quantity,
            )
            return insufficient_stock(record, command.quantity)

        expires_at = command.expires_at or datetime.now(UTC) + reservation_ttl()
        reservation = StockReservation.place(
            inventory_id=str(record.id),
            product_id=command.product_id,
            variant_id=command.variant_id,
            order_id=command.order_id,
            order_item_id=command.order_item_id,
            quantity=command.quantity,
            expires_at=expires_at,
        )
        record.reserve(
            reservation_id=reservation.id,
            order_id=command.order_id,
            quantity=command.quantity,
            expires_at=expires_at,
        )

        current_domain.repository_for(InventoryRecord).add(record)
        current_domain.repository_for(StockReservation).add(reservation)

        logger.info(
            "Inventory reserved",
            reservation_id=str(reservation.id),
            inventory_id=str(record.id),
            order_id=str(command.order_id),
            quantity=command.quantity,
            available_after=record.available_quantity,
        )
        return {
            "success": True,
            "reserved": True,
            "reservation_id": str(reservation.id),
            "inventory_id": str(record.id),
            "quantity": command.quantity,
            "available_after": record.available_quantity,
            "expires_at": expires_at,
        }

    @handle(ReleaseReservation)
    def release_reservation(self, command):
        reason = command.reason or ORDER_CANCELLED
        reservation, record = self._load(command.reservation_id)

        reservation.release(reason)
        record.release(
            reservation_id=reservation.id,
            order_id=reservation.order_id,
            quantity=reservation.quantity,
            reason=reason,
        )
        self._save(reservation, record)

        logger.info("Reservation released", reservation_id=str(reservation.id), reason=reason)
        return {
            "success": True,
            "quantity": reservation.quantity,
            "available_after": record.available_quantity,
        }

    @handle(ExpireReservation)
    def expire_reservation(self, command):
        reservation, record = self._load(command.reservation_id)

        reservation.expire()
        record.release(
            reservation_id=reservation.id,
            order_id=reservation.order_id,
            quantity=reservation.quantity,
            reason=reservation.release_reason,
        )
        self._save(reservation, record)
        return {
            "success": True,
            "quantity": reservation.quantity,
            "available_after": record.available_quantity,
        }

    @handle(ConfirmReservation)
    def confirm_reservation(self, command):
        reservation, record = self._load(command.reservation_id)

        reservation.confirm()
        record.confirm_sale(
            reservation_id=reservation.id,
            order_id=reservation.order_id,
            quantity=reservation.quantity,
        )
        self._save(reservation, record)

        # A confirmed sale eats into the size's bundle surplus
        tolerance = find_tolerance(reservation.product_id, reservation.variant_id)
        if tolerance is not None:
            tolerance.consume(reservation.quantity)
            current_domain.repository_for(GrosirTolerance).add(tolerance)

        logger.info(
            "Reservation confirmed",
            reservation_id=str(reservation.id),
            order_id=str(reservation.order_id),
            quantity=reservation.quantity,
        )
        return {
            "success": True,
            "quantity": reservation.quantity,
            "quantity_after": record.quantity,
        }

    @staticmethod
    def _load(reservation_id):
        reservation = current_domain.repository_for(StockReservation).get(reservation_id)
        record = current_domain.repository_for(InventoryRecord).get(reservation.inventory_id)
        return reservation, record

    @staticmethod
    def _save(reservation, record):
        current_domain.repository_for(InventoryRecord).add(record)
        current_domain.repository_for(StockReservation).add(reservation)
