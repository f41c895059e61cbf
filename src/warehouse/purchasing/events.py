"""Domain events for the PurchaseOrder aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from warehouse.domain import warehouse


@warehouse.event(part_of="PurchaseOrder")
class PurchaseOrderCreated:
    __version__ = 1

    purchase_order_id = Identifier(required=True)
    po_number = String(required=True)
    supplier_id = Identifier(required=True)
    supplier_name = String(required=True)
    total_items = Integer(required=True)
    total_units = Integer(required=True)
    total_cost = Float(required=True)
    created_at = DateTime(required=True)


@warehouse.event(part_of="PurchaseOrder")
class PurchaseOrderReceived:
    """A (possibly partial) delivery was booked against the purchase order."""

    __version__ = 1

    purchase_order_id = Identifier(required=True)
    po_number = String(required=True)
    total_received = Integer(required=True)
    total_damaged = Integer(required=True)
    status = String(required=True)
    items = Text(required=True)  # JSON array of {item_id, received_units, damaged_units}
    received_at = DateTime(required=True)


@warehouse.event(part_of="PurchaseOrder")
class PurchaseOrderCancelled:
    __version__ = 1

    purchase_order_id = Identifier(required=True)
    po_number = String(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)
