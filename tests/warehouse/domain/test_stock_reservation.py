"""Tests for the StockReservation lifecycle — reserved leaves exactly once."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import InvalidOperationError, ValidationError
from warehouse.errors import InvalidStateTransition
from warehouse.reservation.reservation import (
    RESERVATION_EXPIRED,
    ReservationStatus,
    StockReservation,
)


def _make_reservation(**overrides):
    defaults = {
        "inventory_id": "inv-001",
        "product_id": "prod-001",
        "variant_id": "var-m",
        "order_id": "ord-001",
        "quantity": 2,
        "expires_at": datetime.now(UTC) + timedelta(hours=24),
    }
    defaults.update(overrides)
    return StockReservation.place(**defaults)


class TestPlaceReservation:
    def test_starts_reserved(self):
        reservation = _make_reservation()
        assert reservation.status == ReservationStatus.RESERVED.value
        assert reservation.is_active
        assert reservation.reserved_at is not None

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            _make_reservation(quantity=0)
        assert "quantity" in exc_info.value.messages


class TestTransitions:
    def test_confirm(self):
        reservation = _make_reservation()
        reservation.confirm()
        assert reservation.status == ReservationStatus.CONFIRMED.value
        assert reservation.confirmed_at is not None
        assert not reservation.is_active

    def test_release_records_reason(self):
        reservation = _make_reservation()
        reservation.release("order_cancelled")
        assert reservation.status == ReservationStatus.RELEASED.value
        assert reservation.release_reason == "order_cancelled"
        assert reservation.released_at is not None

    def test_expire(self):
        reservation = _make_reservation()
        reservation.expire()
        assert reservation.status == ReservationStatus.EXPIRED.value
        assert reservation.release_reason == RESERVATION_EXPIRED
        assert reservation.expired_at is not None


class TestTerminalStates:
    @pytest.mark.parametrize("first", ["confirm", "release", "expire"])
    @pytest.mark.parametrize("second", ["confirm", "release", "expire"])
    def test_terminal_states_cannot_transition(self, first, second):
        reservation = _make_reservation()
        _apply(reservation, first)
        with pytest.raises(InvalidStateTransition):
            _apply(reservation, second)

    def test_error_carries_current_status(self):
        reservation = _make_reservation()
        reservation.confirm()
        with pytest.raises(InvalidStateTransition) as exc_info:
            reservation.release("order_cancelled")
        assert exc_info.value.current_status == "confirmed"
        assert exc_info.value.target_status == "released"
        assert exc_info.value.reservation_id == str(reservation.id)

    def test_is_an_invalid_operation(self):
        reservation = _make_reservation()
        reservation.release("order_cancelled")
        with pytest.raises(InvalidOperationError):
            reservation.confirm()

    def test_failed_transition_leaves_state_unchanged(self):
        reservation = _make_reservation()
        reservation.release("order_cancelled")
        with pytest.raises(InvalidStateTransition):
            reservation.expire()
        assert reservation.status == ReservationStatus.RELEASED.value
        assert reservation.release_reason == "order_cancelled"


def _apply(reservation, action):
    if action == "release":
        reservation.release("order_cancelled")
    else:
        getattr(reservation, action)()
