"""Read-side helpers for locating inventory records by product/variant."""

from protean.utils.globals import current_domain

from warehouse.errors import NotConfigured
from warehouse.ledger.inventory import InventoryRecord


def _same_variant(record, variant_id) -> bool:
    recorded = str(record.variant_id) if record.variant_id is not None else None
    wanted = str(variant_id) if variant_id else None
    return recorded == wanted


def find_inventory(product_id, variant_id=None):
    """Return the InventoryRecord for a product/variant pair, or None."""
    records = (
        current_domain.repository_for(InventoryRecord)._dao.query.filter(product_id=str(product_id)).all().items
    )
    return next((r for r in records if _same_variant(r, variant_id)), None)


def get_inventory(product_id, variant_id=None):
    """Like find_inventory, but an unknown product/variant is an error."""
    record = find_inventory(product_id, variant_id)
    if record is None:
        raise NotConfigured(product_id, variant_id)
    return record


def describe_inventory(record) -> dict:
    return {
        "inventory_id": str(record.id),
        "product_id": str(record.product_id),
        "variant_id": str(record.variant_id) if record.variant_id is not None else None,
        "sku": record.sku,
        "status": record.stock_status,
        "quantity": record.quantity,
        "available_quantity": record.available_quantity,
        "reserved_quantity": record.reserved_quantity,
        "min_stock_level": record.min_stock_level,
        "max_stock_level": record.max_stock_level,
        "version": record.version,
    }


def inventory_status(product_id, variant_id=None) -> dict:
    record = find_inventory(product_id, variant_id)
    if record is None:
        return {
            "product_id": str(product_id),
            "variant_id": variant_id,
            "status": "not_configured",
            "quantity": 0,
            "available_quantity": 0,
            "reserved_quantity": 0,
            "min_stock_level": 0,
            "max_stock_level": None,
        }
    return describe_inventory(record)


def list_inventory(status=None, low_stock=False, page=1, limit=20):
    """One page of inventory records, ordered by SKU, plus the unpaged total.

    ``low_stock`` keeps records at or below their minimum level, which
    includes those that are out of stock.
    """
    records = current_domain.repository_for(InventoryRecord)._dao.query.all().items
    if status:
        records = [r for r in records if r.stock_status == status]
    if low_stock:
        records = [r for r in records if r.stock_status != "in_stock"]

    records = sorted(records, key=lambda r: r.sku)
    start = (page - 1) * limit
    return records[start : start + limit], len(records)
