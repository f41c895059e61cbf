"""Tests for GrosirTolerance — excess tracking and the derived lock flag."""

import pytest
from protean.exceptions import ValidationError
from warehouse.grosir.events import ToleranceConfigured, VariantLocked, VariantUnlocked
from warehouse.grosir.tolerance import GrosirTolerance


def _make_tolerance(**overrides):
    defaults = {
        "product_id": "prod-kaos",
        "variant_id": "var-s",
        "size": "S",
        "max_excess_units": 8,
    }
    defaults.update(overrides)
    return GrosirTolerance.configure(**defaults)


def _events_of(tolerance, event_cls):
    return [e for e in tolerance._events if isinstance(e, event_cls)]


class TestConfigureTolerance:
    def test_starts_unlocked_with_no_excess(self):
        tolerance = _make_tolerance()
        assert tolerance.current_excess == 0
        assert tolerance.is_locked is False
        assert len(_events_of(tolerance, ToleranceConfigured)) == 1

    def test_negative_maximum_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            _make_tolerance(max_excess_units=-1)
        assert "max_excess_units" in exc_info.value.messages

    def test_label_falls_back_to_variant(self):
        assert _make_tolerance(size=None).label == "var-s"


class TestAbsorb:
    def test_excess_up_to_maximum_stays_unlocked(self):
        tolerance = _make_tolerance(max_excess_units=8)
        tolerance.absorb(8, reference="PO-20260101-AAAAA")
        assert tolerance.current_excess == 8
        assert tolerance.is_locked is False
        assert _events_of(tolerance, VariantLocked) == []

    def test_excess_above_maximum_locks(self):
        tolerance = _make_tolerance(max_excess_units=8)
        tolerance.absorb(9, reference="PO-20260101-AAAAA")
        assert tolerance.is_locked is True
        assert "PO-20260101-AAAAA" in tolerance.locked_reason
        assert tolerance.locked_at is not None
        assert len(_events_of(tolerance, VariantLocked)) == 1

    def test_locking_twice_raises_one_event(self):
        tolerance = _make_tolerance(max_excess_units=8)
        tolerance.absorb(9)
        tolerance.absorb(4)
        assert len(_events_of(tolerance, VariantLocked)) == 1

    def test_negative_units_rejected(self):
        tolerance = _make_tolerance()
        with pytest.raises(ValidationError):
            tolerance.absorb(-1)


class TestConsume:
    def test_selling_below_maximum_unlocks(self):
        tolerance = _make_tolerance(max_excess_units=8)
        tolerance.absorb(10)
        tolerance.consume(2)
        assert tolerance.current_excess == 8
        assert tolerance.is_locked is False
        assert tolerance.locked_reason is None
        assert len(_events_of(tolerance, VariantUnlocked)) == 1

    def test_excess_never_goes_negative(self):
        tolerance = _make_tolerance()
        tolerance.absorb(3)
        tolerance.consume(10)
        assert tolerance.current_excess == 0

    def test_consuming_while_unlocked_raises_no_unlock_event(self):
        tolerance = _make_tolerance()
        tolerance.absorb(3)
        tolerance.consume(1)
        assert _events_of(tolerance, VariantUnlocked) == []


class TestChangeMaximum:
    def test_lowering_maximum_below_excess_locks(self):
        tolerance = _make_tolerance(max_excess_units=8)
        tolerance.absorb(6)
        tolerance.change_maximum(4)
        assert tolerance.is_locked is True

    def test_raising_maximum_unlocks(self):
        tolerance = _make_tolerance(max_excess_units=4)
        tolerance.absorb(6)
        tolerance.change_maximum(10)
        assert tolerance.is_locked is False

    def test_lock_always_matches_counters(self):
        tolerance = _make_tolerance(max_excess_units=5)
        for step in (3, 3, -4, 6, -10):
            if step > 0:
                tolerance.absorb(step)
            else:
                tolerance.consume(-step)
            assert tolerance.is_locked == (tolerance.current_excess > tolerance.max_excess_units)
