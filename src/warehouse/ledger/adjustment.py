"""Manual stock adjustment — command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from warehouse.domain import warehouse
from warehouse.ledger.inventory import InventoryRecord
from warehouse.ledger.lookup import get_inventory

logger = structlog.get_logger(__name__)


@warehouse.command(part_of="InventoryRecord")
class AdjustInventory:
    """Correct physical stock by a signed delta (stock count, damage, found goods)."""

    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity_change = Integer(required=True)
    reason = String(required=True, max_length=500)
    adjusted_by = String(max_length=100)


@warehouse.command_handler(part_of=InventoryRecord)
class AdjustmentHandler:
    @handle(AdjustInventory)
    def adjust_inventory(self, command):
        record = get_inventory(command.product_id, command.variant_id)
        quantity_before = record.quantity

        record.adjust(
            quantity_change=command.quantity_change,
            reason=command.reason,
            adjusted_by=command.adjusted_by,
        )
        current_domain.repository_for(InventoryRecord).add(record)

        logger.info(
            "Inventory adjusted",
            inventory_id=str(record.id),
            quantity_change=command.quantity_change,
            quantity_after=record.quantity,
        )
        return {
            "inventory_id": str(record.id),
            "quantity_before": quantity_before,
            "quantity_after": record.quantity,
            "available_quantity": record.available_quantity,
        }
