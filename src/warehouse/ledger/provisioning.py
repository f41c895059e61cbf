"""Inventory provisioning — command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from warehouse.domain import warehouse
from warehouse.ledger.inventory import InventoryRecord
from warehouse.ledger.lookup import find_inventory


@warehouse.command(part_of="InventoryRecord")
class CreateInventory:
    """Provision the stock ledger row for a product (variant)."""

    product_id = Identifier(required=True)
    variant_id = Identifier()
    sku = String(required=True, max_length=100)
    quantity = Integer(default=0)
    min_stock_level = Integer(default=0)
    max_stock_level = Integer()
    reorder_point = Integer(default=0)
    reorder_quantity = Integer(default=0)
    location = String(max_length=100)
    zone = String(max_length=50)


@warehouse.command_handler(part_of=InventoryRecord)
class ProvisioningHandler:
    @handle(CreateInventory)
    def create_inventory(self, command):
        if find_inventory(command.product_id, command.variant_id) is not None:
            raise ValidationError({"product_id": ["Inventory already exists for this product/variant"]})

        record = InventoryRecord.create(
            product_id=command.product_id,
            variant_id=command.variant_id,
            sku=command.sku,
            quantity=command.quantity or 0,
            min_stock_level=command.min_stock_level or 0,
            max_stock_level=command.max_stock_level,
            reorder_point=command.reorder_point or 0,
            reorder_quantity=command.reorder_quantity or 0,
            location=command.location,
            zone=command.zone,
        )
        current_domain.repository_for(InventoryRecord).add(record)
        return str(record.id)
