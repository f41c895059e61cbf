"""Repository lookups for purchase orders."""

from protean.utils.globals import current_domain

from warehouse.purchasing.purchase_order import PurchaseOrder


def list_purchase_orders(status=None, supplier_id=None, page=1, limit=20):
    """One page of purchase orders, newest first, plus the unpaged total."""
    criteria = {}
    if status:
        criteria["status"] = status
    if supplier_id:
        criteria["supplier_id"] = str(supplier_id)

    orders = current_domain.repository_for(PurchaseOrder)._dao.query.filter(**criteria).all().items
    orders = sorted(orders, key=lambda po: po.created_at, reverse=True)
    start = (page - 1) * limit
    return orders[start : start + limit], len(orders)
