"""Tests for the PurchaseOrder aggregate — creation, cumulative receiving, cancellation."""

import json
import re
from datetime import UTC, datetime

import pytest
from protean.exceptions import ValidationError
from warehouse.purchasing.events import PurchaseOrderCancelled, PurchaseOrderCreated, PurchaseOrderReceived
from warehouse.purchasing.purchase_order import (
    ItemStatus,
    PurchaseOrder,
    PurchaseOrderStatus,
    generate_po_number,
)


def _line(size, bundles=1, units=4, unit_cost=30_000.0):
    return {
        "product_id": "prod-kaos",
        "variant_id": f"var-{size.lower()}",
        "sku": f"KAOS-{size}",
        "product_name": "Kaos polos",
        "bundle_quantity": bundles,
        "units_per_bundle": units,
        "unit_cost": unit_cost,
    }


def _make_po(**overrides):
    defaults = {
        "supplier_id": "sup-001",
        "supplier_name": "Konveksi Bandung",
        "items": [_line("S"), _line("M")],
        "shipping_cost": 15_000.0,
    }
    defaults.update(overrides)
    return PurchaseOrder.create(**defaults)


def _item_id(po, sku):
    return str(next(i for i in po.items if i.sku == sku).id)


class TestPoNumber:
    def test_format(self):
        number = generate_po_number(datetime(2026, 3, 9, tzinfo=UTC))
        assert re.fullmatch(r"PO-20260309-[A-Z0-9]{5}", number)


class TestCreatePurchaseOrder:
    def test_totals(self):
        po = _make_po()
        assert po.status == PurchaseOrderStatus.DRAFT.value
        assert po.total_items == 2
        assert po.total_units == 8
        assert po.subtotal == 240_000.0
        assert po.total_cost == 255_000.0

    def test_item_units_are_bundles_times_units(self):
        po = _make_po(items=[_line("S", bundles=3, units=4)])
        assert po.items[0].total_units == 12
        assert po.items[0].status == ItemStatus.PENDING.value

    def test_raises_created_event(self):
        po = _make_po()
        event = po._events[0]
        assert isinstance(event, PurchaseOrderCreated)
        assert event.po_number == po.po_number
        assert event.total_units == 8

    def test_needs_items(self):
        with pytest.raises(ValidationError) as exc_info:
            _make_po(items=[])
        assert "items" in exc_info.value.messages

    def test_bundle_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            _make_po(items=[_line("S", bundles=0)])


class TestReceive:
    def test_full_receipt_completes_order(self):
        po = _make_po()
        credited = po.receive(
            [
                {"item_id": _item_id(po, "KAOS-S"), "received_units": 4},
                {"item_id": _item_id(po, "KAOS-M"), "received_units": 4},
            ]
        )
        assert po.status == PurchaseOrderStatus.RECEIVED.value
        assert po.received_at is not None
        assert [units for _, units in credited] == [4, 4]

    def test_partial_receipt(self):
        po = _make_po()
        po.receive([{"item_id": _item_id(po, "KAOS-S"), "received_units": 2}])
        assert po.status == PurchaseOrderStatus.PARTIALLY_RECEIVED.value
        item = po.get_item(_item_id(po, "KAOS-S"))
        assert item.status == ItemStatus.PARTIAL.value

    def test_deliveries_accumulate(self):
        po = _make_po()
        s_id = _item_id(po, "KAOS-S")
        m_id = _item_id(po, "KAOS-M")
        po.receive([{"item_id": s_id, "received_units": 2}])
        po.receive([{"item_id": s_id, "received_units": 2}, {"item_id": m_id, "received_units": 4}])
        assert po.get_item(s_id).received_units == 4
        assert po.status == PurchaseOrderStatus.RECEIVED.value

    def test_damaged_units_are_not_credited(self):
        po = _make_po()
        credited = po.receive([{"item_id": _item_id(po, "KAOS-S"), "received_units": 4, "damaged_units": 1}])
        assert credited[0][1] == 3
        assert po.get_item(_item_id(po, "KAOS-S")).damaged_units == 1

    def test_fully_damaged_line_is_not_credited(self):
        po = _make_po()
        credited = po.receive([{"item_id": _item_id(po, "KAOS-S"), "received_units": 2, "damaged_units": 2}])
        assert credited == []

    def test_raises_received_event(self):
        po = _make_po()
        s_id = _item_id(po, "KAOS-S")
        po.receive([{"item_id": s_id, "received_units": 4, "damaged_units": 1}])
        event = [e for e in po._events if isinstance(e, PurchaseOrderReceived)][0]
        assert event.total_received == 4
        assert event.total_damaged == 1
        assert json.loads(event.items) == [{"item_id": s_id, "received_units": 4, "damaged_units": 1}]

    def test_unknown_item_rejected_before_any_change(self):
        po = _make_po()
        s_id = _item_id(po, "KAOS-S")
        with pytest.raises(ValidationError) as exc_info:
            po.receive([{"item_id": s_id, "received_units": 4}, {"item_id": "nope", "received_units": 1}])
        assert "item_id" in exc_info.value.messages
        assert po.get_item(s_id).received_units == 0

    def test_damaged_cannot_exceed_received(self):
        po = _make_po()
        with pytest.raises(ValidationError) as exc_info:
            po.receive([{"item_id": _item_id(po, "KAOS-S"), "received_units": 1, "damaged_units": 2}])
        assert "damaged_units" in exc_info.value.messages

    def test_empty_delivery_rejected(self):
        po = _make_po()
        with pytest.raises(ValidationError):
            po.receive([])

    def test_cancelled_order_cannot_be_received(self):
        po = _make_po()
        po.cancel("Supplier out of fabric")
        with pytest.raises(ValidationError) as exc_info:
            po.receive([{"item_id": _item_id(po, "KAOS-S"), "received_units": 4}])
        assert "status" in exc_info.value.messages


class TestCancel:
    def test_cancel_draft(self):
        po = _make_po()
        po.cancel("Supplier out of fabric")
        assert po.status == PurchaseOrderStatus.CANCELLED.value
        assert po.cancelled_at is not None
        event = [e for e in po._events if isinstance(e, PurchaseOrderCancelled)][0]
        assert event.reason == "Supplier out of fabric"

    def test_cannot_cancel_after_receiving(self):
        po = _make_po()
        po.receive([{"item_id": _item_id(po, "KAOS-S"), "received_units": 1}])
        with pytest.raises(ValidationError):
            po.cancel()

    def test_cannot_cancel_twice(self):
        po = _make_po()
        po.cancel()
        with pytest.raises(ValidationError):
            po.cancel()
