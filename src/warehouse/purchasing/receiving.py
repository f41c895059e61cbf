"""Purchase order lifecycle — create, receive and cancel commands and handler.

Receiving is the only inbound path for bundle stock: good units are credited
to the inventory ledger and counted as excess on the size's grosir
tolerance, which may lock the size.
"""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from warehouse.domain import warehouse
from warehouse.grosir.lookup import find_tolerance
from warehouse.grosir.tolerance import GrosirTolerance
from warehouse.ledger.inventory import InventoryRecord
from warehouse.ledger.lookup import get_inventory
from warehouse.purchasing.purchase_order import PurchaseOrder

logger = structlog.get_logger(__name__)


@warehouse.command(part_of="PurchaseOrder")
class CreatePurchaseOrder:
    supplier_id = Identifier(required=True)
    supplier_name = String(required=True, max_length=255)
    items = Text(required=True)  # JSON array of order lines
    shipping_cost = Float(default=0.0)
    notes = Text()


@warehouse.command(part_of="PurchaseOrder")
class ReceivePurchaseOrder:
    purchase_order_id = Identifier(required=True)
    items = Text(required=True)  # JSON array of {item_id, received_units, damaged_units}


@warehouse.command(part_of="PurchaseOrder")
class CancelPurchaseOrder:
    purchase_order_id = Identifier(required=True)
    reason = String(max_length=500)


def _loads(value):
    return json.loads(value) if isinstance(value, str) else value


@warehouse.command_handler(part_of=PurchaseOrder)
class PurchaseOrderHandler:
    @handle(CreatePurchaseOrder)
    def create_purchase_order(self, command):
        po = PurchaseOrder.create(
            supplier_id=command.supplier_id,
            supplier_name=command.supplier_name,
            items=_loads(command.items),
            shipping_cost=command.shipping_cost,
            notes=command.notes,
        )
        current_domain.repository_for(PurchaseOrder).add(po)
        logger.info("Purchase order created", purchase_order_id=str(po.id), po_number=po.po_number)
        return str(po.id)

    @handle(ReceivePurchaseOrder)
    def receive_purchase_order(self, command):
        po_repo = current_domain.repository_for(PurchaseOrder)
        po = po_repo.get(command.purchase_order_id)
        deliveries = _loads(command.items)

        credited = po.receive(deliveries)

        records = {}
        tolerances = {}
        for item, good_units in credited:
            key = (str(item.product_id), str(item.variant_id) if item.variant_id else None)

            if key not in records:
                records[key] = get_inventory(item.product_id, item.variant_id)
            records[key].restock(good_units, purchase_order_id=po.id)

            if key not in tolerances:
                tolerances[key] = find_tolerance(item.product_id, item.variant_id)
            if tolerances[key] is not None:
                tolerances[key].absorb(good_units, reference=po.po_number)

        po_repo.add(po)
        for record in records.values():
            current_domain.repository_for(InventoryRecord).add(record)
        for tolerance in tolerances.values():
            if tolerance is not None:
                current_domain.repository_for(GrosirTolerance).add(tolerance)

        total_received = sum(d.get("received_units") or 0 for d in deliveries)
        total_damaged = sum(d.get("damaged_units") or 0 for d in deliveries)
        logger.info(
            "Purchase order received",
            purchase_order_id=str(po.id),
            total_received=total_received,
            total_damaged=total_damaged,
            status=po.status,
        )
        return {
            "success": True,
            "total_received": total_received,
            "total_damaged": total_damaged,
            "status": po.status,
        }

    @handle(CancelPurchaseOrder)
    def cancel_purchase_order(self, command):
        repo = current_domain.repository_for(PurchaseOrder)
        po = repo.get(command.purchase_order_id)
        po.cancel(reason=command.reason)
        repo.add(po)
        return po.status
