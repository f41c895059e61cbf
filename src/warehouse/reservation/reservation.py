"""StockReservation aggregate (CQRS) — a time-limited hold on stock for one order line.

A reservation is created ``reserved`` and leaves that state exactly once:
to ``confirmed`` (sold), ``released`` (cancelled) or ``expired`` (swept
after its TTL). Every other state is terminal.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from warehouse.domain import warehouse
from warehouse.errors import InvalidStateTransition


class ReservationStatus(Enum):
    RESERVED = "reserved"
    CONFIRMED = "confirmed"
    RELEASED = "released"
    EXPIRED = "expired"


_VALID_TRANSITIONS = {
    ReservationStatus.RESERVED: {
        ReservationStatus.CONFIRMED,
        ReservationStatus.RELEASED,
        ReservationStatus.EXPIRED,
    },
    ReservationStatus.CONFIRMED: set(),
    ReservationStatus.RELEASED: set(),
    ReservationStatus.EXPIRED: set(),
}

# Release reasons
ORDER_CANCELLED = "order_cancelled"
RESERVATION_EXPIRED = "reservation_expired"


@warehouse.aggregate
class StockReservation:
    inventory_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    order_id = Identifier(required=True)
    order_item_id = Identifier()
    quantity = Integer(required=True, min_value=1)
    status = String(choices=ReservationStatus, default=ReservationStatus.RESERVED.value)
    expires_at = DateTime(required=True)
    reserved_at = DateTime()
    confirmed_at = DateTime()
    released_at = DateTime()
    expired_at = DateTime()
    release_reason = String(max_length=255)

    @classmethod
    def place(cls, inventory_id, product_id, order_id, quantity, expires_at, variant_id=None, order_item_id=None):
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Reservation quantity must be positive"]})
        return cls(
            inventory_id=inventory_id,
            product_id=product_id,
            variant_id=variant_id,
            order_id=order_id,
            order_item_id=order_item_id,
            quantity=quantity,
            status=ReservationStatus.RESERVED.value,
            expires_at=expires_at,
            reserved_at=datetime.now(UTC),
        )

    @property
    def is_active(self) -> bool:
        return self.status == ReservationStatus.RESERVED.value

    def _assert_can_transition(self, target: ReservationStatus) -> None:
        current = ReservationStatus(self.status)
        if target not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidStateTransition(str(self.id), current.value, target.value)

    def confirm(self):
        self._assert_can_transition(ReservationStatus.CONFIRMED)
        self.status = ReservationStatus.CONFIRMED.value
        self.confirmed_at = datetime.now(UTC)

    def release(self, reason):
        self._assert_can_transition(ReservationStatus.RELEASED)
        self.status = ReservationStatus.RELEASED.value
        self.released_at = datetime.now(UTC)
        self.release_reason = reason

    def expire(self):
        self._assert_can_transition(ReservationStatus.EXPIRED)
        now = datetime.now(UTC)
        self.status = ReservationStatus.EXPIRED.value
        self.released_at = now
        self.expired_at = now
        self.release_reason = RESERVATION_EXPIRED
