"""Alerting reacts to stock-level events on the inventory ledger stream.

Low/out-of-stock signals open (or refresh) an alert per inventory record
and alert type; a restock or upward adjustment that lifts available stock
above the minimum resolves the record's open alerts.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from warehouse.alerting.stock_alert import AlertType, StockAlert
from warehouse.domain import warehouse
from warehouse.ledger.events import (
    InventoryAdjusted,
    InventoryLowStock,
    InventoryOutOfStock,
    InventoryRestocked,
)

logger = structlog.get_logger(__name__)


def open_alerts_for(inventory_id):
    alerts = (
        current_domain.repository_for(StockAlert)._dao.query.filter(inventory_id=str(inventory_id)).all().items
    )
    return [a for a in alerts if a.is_open]


@warehouse.event_handler(part_of=StockAlert, stream_category="warehouse::inventory_record")
class StockLevelAlertHandler:
    @handle(InventoryLowStock)
    def on_low_stock(self, event: InventoryLowStock) -> None:
        self._raise_alert(event, AlertType.LOW_STOCK.value)

    @handle(InventoryOutOfStock)
    def on_out_of_stock(self, event: InventoryOutOfStock) -> None:
        self._raise_alert(event, AlertType.OUT_OF_STOCK.value)

    @handle(InventoryRestocked)
    def on_restocked(self, event: InventoryRestocked) -> None:
        self._resolve_if_recovered(event.inventory_id, event.available_after, event.min_stock_level)

    @handle(InventoryAdjusted)
    def on_adjusted(self, event: InventoryAdjusted) -> None:
        if event.quantity_change > 0:
            self._resolve_if_recovered(event.inventory_id, event.available_after, event.min_stock_level)

    def _raise_alert(self, event, alert_type):
        repo = current_domain.repository_for(StockAlert)
        existing = next((a for a in open_alerts_for(event.inventory_id) if a.alert_type == alert_type), None)

        if existing is not None:
            existing.refresh(event.available_quantity)
            repo.add(existing)
            return

        alert = StockAlert.trigger(
            inventory_id=event.inventory_id,
            product_id=event.product_id,
            variant_id=event.variant_id,
            sku=event.sku,
            alert_type=alert_type,
            current_stock=event.available_quantity,
            threshold=event.min_stock_level,
        )
        repo.add(alert)
        logger.warning(
            "Stock alert raised",
            alert_type=alert_type,
            inventory_id=str(event.inventory_id),
            sku=event.sku,
            available=event.available_quantity,
        )

    def _resolve_if_recovered(self, inventory_id, available, min_stock_level):
        if available <= min_stock_level:
            return

        repo = current_domain.repository_for(StockAlert)
        for alert in open_alerts_for(inventory_id):
            alert.resolve()
            repo.add(alert)
            logger.info("Stock alert resolved by restock", alert_id=str(alert.id), inventory_id=str(inventory_id))
