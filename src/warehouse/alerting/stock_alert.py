"""StockAlert aggregate (CQRS) — an operator-facing low/out-of-stock notice."""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from warehouse.domain import warehouse


class AlertType(Enum):
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class AlertStatus(Enum):
    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


@warehouse.aggregate
class StockAlert:
    inventory_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    sku = String(max_length=100)
    alert_type = String(choices=AlertType, required=True)
    current_stock = Integer(default=0)
    threshold = Integer(default=0)
    message = String(max_length=500)
    status = String(choices=AlertStatus, default=AlertStatus.ACTIVE.value)
    triggered_at = DateTime()
    acknowledged_at = DateTime()
    acknowledged_by = String(max_length=100)
    resolved_at = DateTime()

    @classmethod
    def trigger(cls, inventory_id, product_id, alert_type, current_stock, threshold, sku=None, variant_id=None):
        label = sku or product_id
        if alert_type == AlertType.OUT_OF_STOCK.value:
            message = f"{label} is out of stock"
        else:
            message = f"{label} is low on stock: {current_stock} available (minimum {threshold})"
        return cls(
            inventory_id=inventory_id,
            product_id=product_id,
            variant_id=variant_id,
            sku=sku,
            alert_type=alert_type,
            current_stock=current_stock,
            threshold=threshold,
            message=message,
            status=AlertStatus.ACTIVE.value,
            triggered_at=datetime.now(UTC),
        )

    @property
    def is_open(self) -> bool:
        return self.status != AlertStatus.RESOLVED.value

    def refresh(self, current_stock):
        self.current_stock = current_stock

    def acknowledge(self, acknowledged_by):
        if self.status != AlertStatus.ACTIVE.value:
            raise ValidationError({"status": [f"Only active alerts can be acknowledged (alert is {self.status})"]})
        self.status = AlertStatus.ACKNOWLEDGED.value
        self.acknowledged_by = acknowledged_by
        self.acknowledged_at = datetime.now(UTC)

    def resolve(self):
        if self.status == AlertStatus.RESOLVED.value:
            raise ValidationError({"status": ["Alert is already resolved"]})
        self.status = AlertStatus.RESOLVED.value
        self.resolved_at = datetime.now(UTC)
