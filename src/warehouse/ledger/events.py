"""Domain events for the InventoryRecord aggregate.

Every event is written to the outbox in the same unit of work as the stock
change it describes, and relayed to the broker by the Engine.
"""

from protean.fields import DateTime, Identifier, Integer, String

from warehouse.domain import warehouse


@warehouse.event(part_of="InventoryRecord")
class InventoryCreated:
    """An inventory record was provisioned for a product variant."""

    __version__ = 1

    inventory_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    sku = String(required=True)
    quantity = Integer(required=True)
    min_stock_level = Integer(required=True)
    created_at = DateTime(required=True)


@warehouse.event(part_of="InventoryRecord")
class InventoryReserved:
    """Stock was held for an order, moving units from available to reserved."""

    __version__ = 1

    inventory_id = Identifier(required=True)
    reservation_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    order_id = Identifier(required=True)
    quantity = Integer(required=True)
    available_after = Integer(required=True)
    reserved_after = Integer(required=True)
    expires_at = DateTime(required=True)
    reserved_at = DateTime(required=True)


@warehouse.event(part_of="InventoryRecord")
class InventoryReleased:
    """A reservation was released (cancelled or expired), returning units to available."""

    __version__ = 1

    inventory_id = Identifier(required=True)
    reservation_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    order_id = Identifier(required=True)
    quantity = Integer(required=True)
    reason = String(required=True)  # order_cancelled, reservation_expired, ...
    available_after = Integer(required=True)
    released_at = DateTime(required=True)


@warehouse.event(part_of="InventoryRecord")
class InventoryConfirmed:
    """A reservation turned into a sale; the units physically leave stock."""

    __version__ = 1

    inventory_id = Identifier(required=True)
    reservation_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    order_id = Identifier(required=True)
    quantity = Integer(required=True)
    quantity_before = Integer(required=True)
    quantity_after = Integer(required=True)
    confirmed_at = DateTime(required=True)


@warehouse.event(part_of="InventoryRecord")
class InventoryLowStock:
    __version__ = 1

    inventory_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    sku = String(required=True)
    available_quantity = Integer(required=True)
    min_stock_level = Integer(required=True)
    detected_at = DateTime(required=True)


@warehouse.event(part_of="InventoryRecord")
class InventoryOutOfStock:
    __version__ = 1

    inventory_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    sku = String(required=True)
    available_quantity = Integer(required=True)
    min_stock_level = Integer(required=True)
    detected_at = DateTime(required=True)


@warehouse.event(part_of="InventoryRecord")
class InventoryRestocked:
    """Goods were received from a purchase order."""

    __version__ = 1

    inventory_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    purchase_order_id = Identifier()
    quantity_added = Integer(required=True)
    quantity_before = Integer(required=True)
    quantity_after = Integer(required=True)
    available_after = Integer(required=True)
    min_stock_level = Integer(required=True)
    restocked_at = DateTime(required=True)


@warehouse.event(part_of="InventoryRecord")
class InventoryAdjusted:
    """A manual correction of physical stock (count, damage, found goods)."""

    __version__ = 1

    inventory_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity_change = Integer(required=True)
    quantity_before = Integer(required=True)
    quantity_after = Integer(required=True)
    available_after = Integer(required=True)
    min_stock_level = Integer(required=True)
    reason = String(required=True)
    adjusted_by = String()
    adjusted_at = DateTime(required=True)
