"""Application tests for stock alerts raised from ledger events."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from warehouse.alerting.ledger_events import open_alerts_for
from warehouse.alerting.management import AcknowledgeAlert, ResolveAlert, list_active_alerts
from warehouse.alerting.stock_alert import AlertStatus, AlertType, StockAlert
from warehouse.ledger.adjustment import AdjustInventory
from warehouse.ledger.provisioning import CreateInventory
from warehouse.reservation.reserving import ReserveInventory


def _create_inventory(quantity=10, min_stock_level=3):
    return current_domain.process(
        CreateInventory(
            product_id="prod-001",
            variant_id="var-m",
            sku="KAOS-M",
            quantity=quantity,
            min_stock_level=min_stock_level,
        ),
        asynchronous=False,
    )


def _reserve(quantity, order_id="ord-001"):
    return current_domain.process(
        ReserveInventory(product_id="prod-001", variant_id="var-m", quantity=quantity, order_id=order_id),
        asynchronous=False,
    )


def _adjust(change, reason="Stock count"):
    return current_domain.process(
        AdjustInventory(product_id="prod-001", variant_id="var-m", quantity_change=change, reason=reason),
        asynchronous=False,
    )


class TestAlertsFromLedgerEvents:
    def test_low_stock_opens_alert(self):
        inventory_id = _create_inventory(quantity=10, min_stock_level=3)
        _reserve(7)

        [alert] = open_alerts_for(inventory_id)
        assert alert.alert_type == AlertType.LOW_STOCK.value
        assert alert.current_stock == 3
        assert alert.threshold == 3

    def test_repeated_signal_refreshes_the_same_alert(self):
        inventory_id = _create_inventory(quantity=10, min_stock_level=3)
        _reserve(7)
        _reserve(1, order_id="ord-002")

        [alert] = open_alerts_for(inventory_id)
        assert alert.current_stock == 2

    def test_out_of_stock_is_a_separate_alert(self):
        inventory_id = _create_inventory(quantity=10, min_stock_level=3)
        _reserve(7)
        _reserve(3, order_id="ord-002")

        types = sorted(a.alert_type for a in open_alerts_for(inventory_id))
        assert types == [AlertType.LOW_STOCK.value, AlertType.OUT_OF_STOCK.value]

    def test_upward_adjustment_resolves_alerts(self):
        inventory_id = _create_inventory(quantity=10, min_stock_level=3)
        _reserve(8)
        assert open_alerts_for(inventory_id)

        _adjust(5, reason="Found carton")

        assert open_alerts_for(inventory_id) == []

    def test_adjustment_that_stays_low_keeps_alert(self):
        inventory_id = _create_inventory(quantity=10, min_stock_level=3)
        _reserve(8)
        _adjust(1, reason="Found one")
        assert len(open_alerts_for(inventory_id)) == 1


class TestAlertManagement:
    def _open_alert_id(self):
        inventory_id = _create_inventory(quantity=10, min_stock_level=3)
        _reserve(8)
        return str(open_alerts_for(inventory_id)[0].id)

    def test_acknowledge(self):
        alert_id = self._open_alert_id()
        status = current_domain.process(
            AcknowledgeAlert(alert_id=alert_id, acknowledged_by="ops-1"),
            asynchronous=False,
        )
        assert status == AlertStatus.ACKNOWLEDGED.value
        assert list_active_alerts() == []

    def test_acknowledge_twice_rejected(self):
        alert_id = self._open_alert_id()
        current_domain.process(AcknowledgeAlert(alert_id=alert_id, acknowledged_by="ops-1"), asynchronous=False)
        with pytest.raises(ValidationError):
            current_domain.process(AcknowledgeAlert(alert_id=alert_id, acknowledged_by="ops-2"), asynchronous=False)

    def test_resolve(self):
        alert_id = self._open_alert_id()
        status = current_domain.process(ResolveAlert(alert_id=alert_id), asynchronous=False)
        assert status == AlertStatus.RESOLVED.value
        alert = current_domain.repository_for(StockAlert).get(alert_id)
        assert alert.resolved_at is not None

    def test_list_active_alerts(self):
        self._open_alert_id()
        [alert] = list_active_alerts()
        assert alert.sku == "KAOS-M"
