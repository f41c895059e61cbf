from warehouse.api.errors import register_warehouse_exception_handlers
from warehouse.api.routes import (
    alert_router,
    bundle_router,
    inventory_router,
    maintenance_router,
    purchase_order_router,
    reservation_router,
)

routers = [
    inventory_router,
    reservation_router,
    bundle_router,
    purchase_order_router,
    alert_router,
    maintenance_router,
]

__all__ = [
    "alert_router",
    "bundle_router",
    "inventory_router",
    "maintenance_router",
    "purchase_order_router",
    "register_warehouse_exception_handlers",
    "reservation_router",
    "routers",
]
