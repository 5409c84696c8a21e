import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_ledger, unwrap
from app.models.order import ItemType
from app.schemas.order import (
    DepartmentStatusUpdate,
    ItemStatusUpdate,
    NotesUpdate,
    OrderCreateRequest,
    OrderLineRequest,
    OrderStatusUpdate,
    PaymentRequest,
    QuantityUpdate,
)
from app.schemas.response import SuccessResponse
from app.services.order_ledger import OrderLedger

router = APIRouter()
log = logging.getLogger("uvicorn")


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_order_endpoint(request_data: OrderCreateRequest, ledger: OrderLedger = Depends(get_ledger)):
    """
    Seats a table with its first round of items. The table becomes occupied.
    """
    if not request_data.items:
        raise HTTPException(status_code=400, detail="Order must contain items.")
    try:
        order = unwrap(await ledger.create_order(request_data.table_id, request_data.items))
    except ValueError as e:
        log.error(f"Value error placing order: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    log.info(f"Order {order.id} placed for table {order.table_number}.")
    return SuccessResponse(data=order)


@router.get("/", response_model=SuccessResponse)
async def list_orders_endpoint(
    department: Optional[ItemType] = None,
    table_id: Optional[UUID] = None,
    active: bool = False,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    ledger: OrderLedger = Depends(get_ledger),
):
    """
    Lists orders. `department=food|drink` is the kitchen/bar dashboard feed,
    `table_id` (optionally with `active=true`) the waiter view, and
    `start`/`end` the reporting range.
    """
    filters = [
        name for name, value in (("department", department), ("table_id", table_id), ("start/end", start or end))
        if value is not None
    ]
    if len(filters) > 1:
        raise HTTPException(status_code=400, detail=f"Filters cannot be combined: {', '.join(filters)}.")
    if active and table_id is None:
        raise HTTPException(status_code=400, detail="active=true requires table_id.")

    if department is not None:
        orders = await ledger.orders_for_department(department)
    elif table_id is not None and active:
        order = await ledger.active_order_for_table(table_id)
        orders = [order] if order else []
    elif table_id is not None:
        orders = await ledger.orders_for_table(table_id)
    elif start is not None or end is not None:
        if start is None or end is None:
            raise HTTPException(status_code=400, detail="Both start and end are required for a date range.")
        orders = await ledger.orders_in_range(start, end)
    else:
        orders = await ledger.list_orders()
    return SuccessResponse(data=orders)


@router.get("/{order_id}", response_model=SuccessResponse)
async def get_order_endpoint(order_id: UUID, ledger: OrderLedger = Depends(get_ledger)):
    """Fetches details for a specific order."""
    return SuccessResponse(data=await ledger.get_order(order_id))


@router.delete("/{order_id}", response_model=SuccessResponse)
async def delete_order_endpoint(order_id: UUID, ledger: OrderLedger = Depends(get_ledger)):
    """Administrative removal; frees the table."""
    return SuccessResponse(data=unwrap(await ledger.delete_order(order_id)))


# --- Waiter amendments ---

@router.post("/{order_id}/items", response_model=SuccessResponse)
async def add_item_endpoint(order_id: UUID, payload: OrderLineRequest, ledger: OrderLedger = Depends(get_ledger)):
    return SuccessResponse(data=unwrap(await ledger.add_item(order_id, payload)))


@router.patch("/{order_id}/items/{item_id}/quantity", response_model=SuccessResponse)
async def update_quantity_endpoint(order_id: UUID, item_id: UUID, payload: QuantityUpdate, ledger: OrderLedger = Depends(get_ledger)):
    return SuccessResponse(data=unwrap(await ledger.update_item_quantity(order_id, item_id, payload.quantity)))


@router.patch("/{order_id}/items/{item_id}/notes", response_model=SuccessResponse)
async def update_notes_endpoint(order_id: UUID, item_id: UUID, payload: NotesUpdate, ledger: OrderLedger = Depends(get_ledger)):
    return SuccessResponse(data=unwrap(await ledger.update_item_notes(order_id, item_id, payload.notes)))


@router.delete("/{order_id}/items/{item_id}", response_model=SuccessResponse)
async def remove_item_endpoint(order_id: UUID, item_id: UUID, ledger: OrderLedger = Depends(get_ledger)):
    return SuccessResponse(data=unwrap(await ledger.remove_item(order_id, item_id)))


# --- Kitchen / bar ---

@router.patch("/{order_id}/items/{item_id}/status", response_model=SuccessResponse)
async def update_item_status_endpoint(order_id: UUID, item_id: UUID, payload: ItemStatusUpdate, ledger: OrderLedger = Depends(get_ledger)):
    """Marks a single line served (kitchen or bar)."""
    return SuccessResponse(data=unwrap(await ledger.update_item_status(order_id, item_id, payload.status)))


@router.patch("/{order_id}/departments/{department}/status", response_model=SuccessResponse)
async def update_department_status_endpoint(
    order_id: UUID,
    department: ItemType,
    payload: DepartmentStatusUpdate,
    ledger: OrderLedger = Depends(get_ledger),
):
    """Bulk 'mark all served' from the kitchen/bar dashboards."""
    try:
        result = await ledger.update_department_status(order_id, department, payload.status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return SuccessResponse(data=unwrap(result))


# --- Cashier ---

@router.patch("/{order_id}/status", response_model=SuccessResponse)
async def update_status_endpoint(order_id: UUID, payload: OrderStatusUpdate, ledger: OrderLedger = Depends(get_ledger)):
    """
    Generic status update. Only 'paid' (with a payment method) is accepted;
    pending and served follow from the items.
    """
    try:
        result = await ledger.update_order_status(order_id, payload.status, payload.payment_method)
    except ValueError as e:
        log.error(f"Value error updating order status: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    return SuccessResponse(data=unwrap(result))


@router.post("/{order_id}/payment", response_model=SuccessResponse)
async def payment_endpoint(order_id: UUID, payload: PaymentRequest, ledger: OrderLedger = Depends(get_ledger)):
    """Closes the order as paid and frees the table. Repeating the call is harmless."""
    order = unwrap(await ledger.finalize_payment(order_id, payload.payment_method))
    log.info(f"Order {order.id} paid by {order.payment_method.value}.")
    return SuccessResponse(data=order)


@router.post("/{order_id}/print", status_code=status.HTTP_202_ACCEPTED, response_model=SuccessResponse)
async def reprint_endpoint(order_id: UUID, ledger: OrderLedger = Depends(get_ledger)):
    """Queues kitchen/bar tickets for the order again."""
    return SuccessResponse(data=unwrap(await ledger.reprint_order(order_id)))
