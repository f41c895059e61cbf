"""FastAPI routes for the Warehouse domain."""

import json

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from warehouse.alerting.management import AcknowledgeAlert, ResolveAlert, list_active_alerts
from warehouse.api.schemas import (
    AcknowledgeAlertRequest,
    AdjustInventoryRequest,
    AdjustInventoryResponse,
    AlertListResponse,
    AlertSchema,
    AllVariantsOverflowResponse,
    BundleConfigIdResponse,
    BundleOverflowResponse,
    BundlePlanResponse,
    CancelPurchaseOrderRequest,
    ConfigureBundleRequest,
    ConfirmResponse,
    CreateInventoryRequest,
    CreatePurchaseOrderRequest,
    ExpireReservationsResponse,
    InventoryIdResponse,
    InventoryListResponse,
    InventoryStatusResponse,
    MovementHistoryResponse,
    MovementSchema,
    PurchaseOrderIdResponse,
    PurchaseOrderItemSchema,
    PurchaseOrderListResponse,
    PurchaseOrderResponse,
    PurchaseOrderSummarySchema,
    ReceivePurchaseOrderRequest,
    ReceivePurchaseOrderResponse,
    ReleaseRequest,
    ReleaseResponse,
    ReserveRequest,
    ReserveResponse,
    SetToleranceRequest,
    StatusResponse,
    ToleranceIdResponse,
)
from warehouse.concurrency import process_with_retry
from warehouse.grosir.calculation import (
    calculate_actual_quantity_received,
    calculate_bundles_needed,
    calculate_wastage,
    can_fulfill_demand,
)
from warehouse.grosir.configuration import ConfigureBundle, SetTolerance
from warehouse.grosir.overflow import check_all_variants_overflow, check_bundle_overflow
from warehouse.ledger.adjustment import AdjustInventory
from warehouse.ledger.lookup import describe_inventory, find_inventory, inventory_status, list_inventory
from warehouse.ledger.provisioning import CreateInventory
from warehouse.projections.inventory_movement import movement_history
from warehouse.purchasing.lookup import list_purchase_orders
from warehouse.purchasing.purchase_order import PurchaseOrder
from warehouse.purchasing.receiving import CancelPurchaseOrder, CreatePurchaseOrder, ReceivePurchaseOrder
from warehouse.reservation.expiry import ExpireStaleReservations
from warehouse.reservation.reserving import ConfirmReservation, ReleaseReservation, ReserveInventory

# ---------------------------------------------------------------------------
# Inventory Router
# ---------------------------------------------------------------------------
inventory_router = APIRouter(prefix="/inventory", tags=["inventory"])


@inventory_router.post("", status_code=201, response_model=InventoryIdResponse)
async def create_inventory(body: CreateInventoryRequest) -> InventoryIdResponse:
    command = CreateInventory(**body.model_dump())
    result = current_domain.process(command, asynchronous=False)
    return InventoryIdResponse(inventory_id=result)


@inventory_router.get("", response_model=InventoryListResponse)
async def get_inventory_list(
    status: str | None = Query(default=None, pattern="^(in_stock|low_stock|out_of_stock)$"),
    low_stock: bool = False,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> InventoryListResponse:
    records, total = list_inventory(status=status, low_stock=low_stock, page=page, limit=limit)
    return InventoryListResponse(
        inventory=[InventoryStatusResponse(**describe_inventory(r)) for r in records],
        total=total,
        page=page,
        limit=limit,
    )


@inventory_router.get("/status", response_model=InventoryStatusResponse)
async def get_inventory_status(product_id: str, variant_id: str | None = None) -> InventoryStatusResponse:
    return InventoryStatusResponse(**inventory_status(product_id, variant_id))


@inventory_router.put("/adjust", response_model=AdjustInventoryResponse)
async def adjust_inventory(body: AdjustInventoryRequest) -> AdjustInventoryResponse:
    result = process_with_retry(AdjustInventory(**body.model_dump()))
    return AdjustInventoryResponse(**result)


@inventory_router.get("/movements", response_model=MovementHistoryResponse)
async def get_movement_history(
    product_id: str,
    variant_id: str | None = None,
    limit: int = Query(default=50, ge=1, le=500),
) -> MovementHistoryResponse:
    record = find_inventory(product_id, variant_id)
    if record is None:
        return MovementHistoryResponse(movements=[])

    return MovementHistoryResponse(
        movements=[
            MovementSchema(
                movement_id=str(m.movement_id),
                movement_type=m.movement_type,
                quantity_before=m.quantity_before,
                quantity_change=m.quantity_change,
                quantity_after=m.quantity_after,
                reference_type=m.reference_type,
                reference_id=str(m.reference_id) if m.reference_id else None,
                reason=m.reason,
                performed_by=m.performed_by,
                occurred_at=m.occurred_at,
            )
            for m in movement_history(record.id, limit=limit)
        ]
    )


# ---------------------------------------------------------------------------
# Reservation Router
# ---------------------------------------------------------------------------
reservation_router = APIRouter(prefix="/reservations", tags=["reservations"])


@reservation_router.post("", response_model=ReserveResponse)
async def reserve_inventory(body: ReserveRequest) -> ReserveResponse:
    result = process_with_retry(ReserveInventory(**body.model_dump()))
    return ReserveResponse(**result)


@reservation_router.put("/{reservation_id}/release", response_model=ReleaseResponse)
async def release_reservation(reservation_id: str, body: ReleaseRequest | None = None) -> ReleaseResponse:
    reason = body.reason if body else "order_cancelled"
    result = process_with_retry(ReleaseReservation(reservation_id=reservation_id, reason=reason))
    return ReleaseResponse(**result)


@reservation_router.put("/{reservation_id}/confirm", response_model=ConfirmResponse)
async def confirm_reservation(reservation_id: str) -> ConfirmResponse:
    result = process_with_retry(ConfirmReservation(reservation_id=reservation_id))
    return ConfirmResponse(**result)


# ---------------------------------------------------------------------------
# Bundle Router
# ---------------------------------------------------------------------------
bundle_router = APIRouter(prefix="/bundles", tags=["bundles"])


@bundle_router.get("/plan", response_model=BundlePlanResponse)
async def plan_bundles(
    requested_quantity: int = Query(ge=0),
    bundle_size: int = Query(ge=1),
    tolerance_percent: float = Query(default=0.0, ge=0),
    available_bundles: int | None = Query(default=None, ge=0),
) -> BundlePlanResponse:
    bundles = calculate_bundles_needed(requested_quantity, bundle_size, tolerance_percent)
    can_fulfill = None
    if available_bundles is not None:
        can_fulfill = can_fulfill_demand(requested_quantity, bundle_size, available_bundles, tolerance_percent)

    return BundlePlanResponse(
        requested_quantity=requested_quantity,
        bundle_size=bundle_size,
        tolerance_percent=tolerance_percent,
        bundles_needed=bundles,
        quantity_received=calculate_actual_quantity_received(bundles, bundle_size),
        wastage=calculate_wastage(requested_quantity, bundles, bundle_size),
        available_bundles=available_bundles,
        can_fulfill=can_fulfill,
    )


@bundle_router.put("/{product_id}", response_model=BundleConfigIdResponse)
async def configure_bundle(product_id: str, body: ConfigureBundleRequest) -> BundleConfigIdResponse:
    command = ConfigureBundle(
        product_id=product_id,
        supplier_id=body.supplier_id,
        bundle_name=body.bundle_name,
        total_units=body.total_units,
        size_breakdown=json.dumps(body.size_breakdown),
        bundle_cost=body.bundle_cost,
        min_bundle_order=body.min_bundle_order,
    )
    result = current_domain.process(command, asynchronous=False)
    return BundleConfigIdResponse(bundle_config_id=result)


@bundle_router.put("/{product_id}/tolerances", response_model=ToleranceIdResponse)
async def set_tolerance(product_id: str, body: SetToleranceRequest) -> ToleranceIdResponse:
    command = SetTolerance(product_id=product_id, **body.model_dump())
    result = process_with_retry(command)
    return ToleranceIdResponse(tolerance_id=result)


@bundle_router.get("/{product_id}/overflow", response_model=BundleOverflowResponse)
async def get_bundle_overflow(product_id: str, variant_id: str | None = None) -> BundleOverflowResponse:
    return BundleOverflowResponse(**check_bundle_overflow(product_id, variant_id))


@bundle_router.get("/{product_id}/variants", response_model=AllVariantsOverflowResponse)
async def get_all_variants_overflow(product_id: str) -> AllVariantsOverflowResponse:
    return AllVariantsOverflowResponse(**check_all_variants_overflow(product_id))


# ---------------------------------------------------------------------------
# Purchase Order Router
# ---------------------------------------------------------------------------
purchase_order_router = APIRouter(prefix="/purchase-orders", tags=["purchase-orders"])


@purchase_order_router.post("", status_code=201, response_model=PurchaseOrderIdResponse)
async def create_purchase_order(body: CreatePurchaseOrderRequest) -> PurchaseOrderIdResponse:
    command = CreatePurchaseOrder(
        supplier_id=body.supplier_id,
        supplier_name=body.supplier_name,
        items=json.dumps([item.model_dump() for item in body.items]),
        shipping_cost=body.shipping_cost,
        notes=body.notes,
    )
    result = current_domain.process(command, asynchronous=False)
    return PurchaseOrderIdResponse(purchase_order_id=result)


@purchase_order_router.get("", response_model=PurchaseOrderListResponse)
async def get_purchase_order_list(
    status: str | None = None,
    supplier_id: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> PurchaseOrderListResponse:
    orders, total = list_purchase_orders(status=status, supplier_id=supplier_id, page=page, limit=limit)
    return PurchaseOrderListResponse(
        purchase_orders=[
            PurchaseOrderSummarySchema(
                purchase_order_id=str(po.id),
                po_number=po.po_number,
                supplier_id=str(po.supplier_id),
                supplier_name=po.supplier_name,
                status=po.status,
                total_units=po.total_units,
                total_cost=po.total_cost,
                created_at=po.created_at,
            )
            for po in orders
        ],
        total=total,
        page=page,
        limit=limit,
    )


@purchase_order_router.get("/{purchase_order_id}", response_model=PurchaseOrderResponse)
async def get_purchase_order(purchase_order_id: str) -> PurchaseOrderResponse:
    po = current_domain.repository_for(PurchaseOrder).get(purchase_order_id)
    return PurchaseOrderResponse(
        purchase_order_id=str(po.id),
        po_number=po.po_number,
        supplier_id=str(po.supplier_id),
        supplier_name=po.supplier_name,
        status=po.status,
        total_items=po.total_items,
        total_units=po.total_units,
        subtotal=po.subtotal,
        shipping_cost=po.shipping_cost,
        total_cost=po.total_cost,
        items=[
            PurchaseOrderItemSchema(
                item_id=str(item.id),
                product_id=str(item.product_id),
                variant_id=str(item.variant_id) if item.variant_id else None,
                sku=item.sku,
                total_units=item.total_units,
                received_units=item.received_units,
                damaged_units=item.damaged_units,
                status=item.status,
            )
            for item in po.items
        ],
    )


@purchase_order_router.put("/{purchase_order_id}/receive", response_model=ReceivePurchaseOrderResponse)
async def receive_purchase_order(
    purchase_order_id: str, body: ReceivePurchaseOrderRequest
) -> ReceivePurchaseOrderResponse:
    command = ReceivePurchaseOrder(
        purchase_order_id=purchase_order_id,
        items=json.dumps([item.model_dump() for item in body.items]),
    )
    result = process_with_retry(command)
    return ReceivePurchaseOrderResponse(**result)


@purchase_order_router.put("/{purchase_order_id}/cancel", response_model=StatusResponse)
async def cancel_purchase_order(purchase_order_id: str, body: CancelPurchaseOrderRequest) -> StatusResponse:
    command = CancelPurchaseOrder(purchase_order_id=purchase_order_id, reason=body.reason)
    status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=status)


# ---------------------------------------------------------------------------
# Alert Router
# ---------------------------------------------------------------------------
alert_router = APIRouter(prefix="/alerts", tags=["alerts"])


@alert_router.get("", response_model=AlertListResponse)
async def get_active_alerts() -> AlertListResponse:
    return AlertListResponse(
        alerts=[
            AlertSchema(
                alert_id=str(alert.id),
                inventory_id=str(alert.inventory_id),
                product_id=str(alert.product_id),
                variant_id=str(alert.variant_id) if alert.variant_id else None,
                sku=alert.sku,
                alert_type=alert.alert_type,
                current_stock=alert.current_stock,
                threshold=alert.threshold,
                message=alert.message,
                status=alert.status,
                triggered_at=alert.triggered_at,
            )
            for alert in list_active_alerts()
        ]
    )


@alert_router.put("/{alert_id}/acknowledge", response_model=StatusResponse)
async def acknowledge_alert(alert_id: str, body: AcknowledgeAlertRequest) -> StatusResponse:
    command = AcknowledgeAlert(alert_id=alert_id, acknowledged_by=body.acknowledged_by)
    status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=status)


@alert_router.put("/{alert_id}/resolve", response_model=StatusResponse)
async def resolve_alert(alert_id: str) -> StatusResponse:
    status = current_domain.process(ResolveAlert(alert_id=alert_id), asynchronous=False)
    return StatusResponse(status=status)


# ---------------------------------------------------------------------------
# Maintenance Router (scheduler-triggered jobs)
# ---------------------------------------------------------------------------
maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@maintenance_router.post("/expire-reservations", response_model=ExpireReservationsResponse)
async def expire_reservations() -> ExpireReservationsResponse:
    expired_count = current_domain.process(ExpireStaleReservations(), asynchronous=False)
    return ExpireReservationsResponse(expired_count=expired_count or 0)
