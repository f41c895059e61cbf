"""Pydantic request/response schemas for the Warehouse API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------
class CreateInventoryRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    sku: str
    quantity: int = Field(ge=0, default=0)
    min_stock_level: int = Field(ge=0, default=0)
    max_stock_level: int | None = Field(default=None, ge=0)
    reorder_point: int = Field(ge=0, default=0)
    reorder_quantity: int = Field(ge=0, default=0)
    location: str | None = None
    zone: str | None = None


class InventoryIdResponse(BaseModel):
    inventory_id: str


class InventoryStatusResponse(BaseModel):
    product_id: str
    variant_id: str | None = None
    inventory_id: str | None = None
    sku: str | None = None
    status: str
    quantity: int
    available_quantity: int
    reserved_quantity: int
    min_stock_level: int
    max_stock_level: int | None = None
    version: int | None = None


class InventoryListResponse(BaseModel):
    inventory: list[InventoryStatusResponse]
    total: int
    page: int
    limit: int


class AdjustInventoryRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity_change: int
    reason: str = Field(min_length=1)
    adjusted_by: str | None = None


class AdjustInventoryResponse(BaseModel):
    success: bool = True
    inventory_id: str
    quantity_before: int
    quantity_after: int
    available_quantity: int


class MovementSchema(BaseModel):
    movement_id: str
    movement_type: str
    quantity_before: int
    quantity_change: int
    quantity_after: int
    reference_type: str | None = None
    reference_id: str | None = None
    reason: str | None = None
    performed_by: str | None = None
    occurred_at: datetime


class MovementHistoryResponse(BaseModel):
    movements: list[MovementSchema]


# ---------------------------------------------------------------------------
# Reservations
# ---------------------------------------------------------------------------
class ReserveRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(ge=1)
    order_id: str
    order_item_id: str | None = None


class ReserveResponse(BaseModel):
    success: bool
    reserved: bool
    reservation_id: str | None = None
    inventory_id: str | None = None
    quantity: int
    available_after: int | None = None
    available_quantity: int | None = None
    shortage: int | None = None
    expires_at: datetime | None = None
    message: str | None = None


class ReleaseRequest(BaseModel):
    reason: str = "order_cancelled"


class ReleaseResponse(BaseModel):
    success: bool
    quantity: int
    available_after: int


class ConfirmResponse(BaseModel):
    success: bool
    quantity: int
    quantity_after: int


# ---------------------------------------------------------------------------
# Bundles / grosir
# ---------------------------------------------------------------------------
class ConfigureBundleRequest(BaseModel):
    supplier_id: str | None = None
    bundle_name: str | None = None
    total_units: int = Field(ge=1)
    size_breakdown: dict[str, int]
    bundle_cost: float = Field(ge=0)
    min_bundle_order: int = Field(ge=1, default=1)


class BundleConfigIdResponse(BaseModel):
    bundle_config_id: str


class SetToleranceRequest(BaseModel):
    variant_id: str | None = None
    size: str | None = None
    max_excess_units: int = Field(ge=0)


class ToleranceIdResponse(BaseModel):
    tolerance_id: str


class BundleOverflowResponse(BaseModel):
    is_locked: bool
    can_order: bool
    reason: str
    available_quantity: int | None = None
    overflow_variants: list[str] | None = None


class VariantOverflowSchema(BaseModel):
    size: str
    variant_id: str | None = None
    is_locked: bool
    can_order: bool
    reason: str
    available_quantity: int
    overflow_variants: list[str] | None = None


class AllVariantsOverflowResponse(BaseModel):
    product_id: str
    bundle_name: str | None = None
    total_units_per_bundle: int | None = None
    variants: list[VariantOverflowSchema]
    message: str | None = None


class BundlePlanResponse(BaseModel):
    requested_quantity: int
    bundle_size: int
    tolerance_percent: float
    bundles_needed: int
    quantity_received: int
    wastage: int
    available_bundles: int | None = None
    can_fulfill: bool | None = None


# ---------------------------------------------------------------------------
# Purchase orders
# ---------------------------------------------------------------------------
class PurchaseOrderItemRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    sku: str
    product_name: str | None = None
    bundle_quantity: int = Field(ge=1)
    units_per_bundle: int = Field(ge=1)
    unit_cost: float = Field(ge=0, default=0.0)


class CreatePurchaseOrderRequest(BaseModel):
    supplier_id: str
    supplier_name: str
    items: list[PurchaseOrderItemRequest] = Field(min_length=1)
    shipping_cost: float = Field(ge=0, default=0.0)
    notes: str | None = None


class PurchaseOrderIdResponse(BaseModel):
    purchase_order_id: str


class ReceiveItemRequest(BaseModel):
    item_id: str
    received_units: int = Field(ge=0)
    damaged_units: int = Field(ge=0, default=0)


class ReceivePurchaseOrderRequest(BaseModel):
    items: list[ReceiveItemRequest] = Field(min_length=1)


class ReceivePurchaseOrderResponse(BaseModel):
    success: bool
    total_received: int
    total_damaged: int
    status: str


class PurchaseOrderItemSchema(BaseModel):
    item_id: str
    product_id: str
    variant_id: str | None = None
    sku: str
    total_units: int
    received_units: int
    damaged_units: int
    status: str


class PurchaseOrderResponse(BaseModel):
    purchase_order_id: str
    po_number: str
    supplier_id: str
    supplier_name: str
    status: str
    total_items: int
    total_units: int
    subtotal: float
    shipping_cost: float
    total_cost: float
    items: list[PurchaseOrderItemSchema]


class PurchaseOrderSummarySchema(BaseModel):
    purchase_order_id: str
    po_number: str
    supplier_id: str
    supplier_name: str
    status: str
    total_units: int
    total_cost: float
    created_at: datetime | None = None


class PurchaseOrderListResponse(BaseModel):
    purchase_orders: list[PurchaseOrderSummarySchema]
    total: int
    page: int
    limit: int


class CancelPurchaseOrderRequest(BaseModel):
    reason: str | None = None


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------
class AlertSchema(BaseModel):
    alert_id: str
    inventory_id: str
    product_id: str
    variant_id: str | None = None
    sku: str | None = None
    alert_type: str
    current_stock: int
    threshold: int
    message: str | None = None
    status: str
    triggered_at: datetime | None = None


class AlertListResponse(BaseModel):
    alerts: list[AlertSchema]


class AcknowledgeAlertRequest(BaseModel):
    acknowledged_by: str


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class ExpireReservationsResponse(BaseModel):
    expired_count: int
