import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from uuid import UUID

from tortoise.transactions import in_transaction

from app.core.config import REOPEN_REVERTS_TABLE
from app.core.exceptions import MenuItemNotFoundError, OrderItemNotFoundError, OrderNotFoundError
from app.events.outbox_utility import (
    ORDER_AMENDED,
    ORDER_PLACED,
    PAYMENT_COMPLETED,
    PRINT_REQUESTED,
    create_outbox_event,
)
from app.models.menu import MenuItem
from app.models.order import ItemStatus, ItemType, Order, OrderItem, OrderStatus, PaymentMethod
from app.models.table import ORDER_BOUND_STATUSES, TableStatus
from app.schemas.order import OrderDetailResponse, OrderLineRequest
from app.schemas.response import RejectionCode, ServiceResult
from app.services.status import department_field, derive
from app.services.table_registry import TableRegistry

log = logging.getLogger(__name__)

EntityId = Union[UUID, str]


class OrderLedger:
    """
    Owns orders and their line items, and keeps the three status axes
    (item, department, order) and the owning table consistent.

    Every mutation loads the order, changes its items, re-derives totals and
    statuses from the full item list, moves the table if the aggregate status
    crossed a boundary, and queues the print notification. All of that
    happens in one transaction under the writer lock.
    """

    def __init__(
        self,
        tables: TableRegistry,
        lock: Optional[asyncio.Lock] = None,
        reopen_reverts_table: bool = REOPEN_REVERTS_TABLE,
    ):
        self._tables = tables
        self._lock = lock or asyncio.Lock()
        self._reopen_reverts_table = reopen_reverts_table

    # ------------------------------------------------------------------
    # Queries (read side for waiter, kitchen, bar and cashier views)
    # ------------------------------------------------------------------

    async def get_order(self, order_id: EntityId) -> OrderDetailResponse:
        order = await Order.get_or_none(id=order_id).prefetch_related("items")
        if not order:
            raise OrderNotFoundError(order_id)
        return OrderDetailResponse.from_order(order, order.items)

    async def list_orders(self) -> List[OrderDetailResponse]:
        return await self._details(Order.all())

    async def orders_for_table(self, table_id: EntityId) -> List[OrderDetailResponse]:
        return await self._details(Order.filter(table_id=table_id))

    async def active_order_for_table(self, table_id: EntityId) -> Optional[OrderDetailResponse]:
        orders = await self._details(Order.filter(table_id=table_id).exclude(status=OrderStatus.PAID))
        return orders[0] if orders else None

    async def orders_for_department(self, item_type: ItemType) -> List[OrderDetailResponse]:
        """Unpaid orders that still have unserved items for the kitchen (food) or bar (drink)."""
        pending = {department_field(item_type): OrderStatus.PENDING}
        return await self._details(Order.filter(**pending).exclude(status=OrderStatus.PAID))

    async def orders_in_range(self, start: datetime, end: datetime) -> List[OrderDetailResponse]:
        """Orders created within [start, end], both ends inclusive."""
        return await self._details(Order.filter(created_at__gte=start, created_at__lte=end))

    async def can_modify_order(self, order_id: EntityId) -> bool:
        order = await Order.get_or_none(id=order_id)
        if not order:
            raise OrderNotFoundError(order_id)
        return not order.is_paid

    # ------------------------------------------------------------------
    # Waiter: order creation and amendments
    # ------------------------------------------------------------------

    async def create_order(
        self,
        table_id: EntityId,
        lines: Sequence[OrderLineRequest],
        table_number: Optional[int] = None,
    ) -> ServiceResult:
        """
        Seats a table with a first round of items and marks the table occupied.
        Rejected when the table already has an unpaid order.
        """
        if not lines:
            raise ValueError("Order must contain items.")

        async with self._lock:
            async with in_transaction() as conn:
                table = await self._tables.get_table(table_id, conn=conn)
                active = await Order.filter(table_id=table.id).exclude(status=OrderStatus.PAID).using_db(conn).exists()
                if active or table.status in ORDER_BOUND_STATUSES:
                    log.warning(f"Rejected order for table {table.number}: table already has an active order.")
                    return ServiceResult.fail(
                        RejectionCode.TABLE_HAS_ACTIVE_ORDER,
                        f"Table {table.number} already has an open order.",
                    )

                menu_items = {}
                for line in lines:
                    menu = await self._menu_item(line.menu_item_id, conn)
                    if not menu.available:
                        return _unavailable(menu)
                    menu_items[line.menu_item_id] = menu

                order = await Order.create(
                    table_id=table.id,
                    table_number=table_number if table_number is not None else table.number,
                    using_db=conn,
                )
                items: List[OrderItem] = []
                for line in lines:
                    await self._merge_or_append(order, items, menu_items[line.menu_item_id], line, conn)

                derive(order, items)
                await order.save(using_db=conn)
                await self._tables.transition_table(table.id, TableStatus.OCCUPIED, order_id=order.id, conn=conn)
                detail = await self._publish(order, items, ORDER_PLACED, conn)

        log.info(f"Order {order.id} placed for table {order.table_number}: {len(items)} line(s), total {order.total}.")
        return ServiceResult.ok(detail)

    async def add_item(self, order_id: EntityId, line: OrderLineRequest) -> ServiceResult:
        """
        Adds a menu item to an open order. A line for the same menu item is
        merged by quantity; adding to a served department reopens it.
        """
        async with self._lock:
            async with in_transaction() as conn:
                order, items = await self._load(order_id, conn)
                if order.is_paid:
                    return _paid(order)
                menu = await self._menu_item(line.menu_item_id, conn)
                if not menu.available:
                    return _unavailable(menu)
                await self._merge_or_append(order, items, menu, line, conn)
                return await self._commit(order, items, conn, event_type=ORDER_AMENDED)

    async def update_item_quantity(self, order_id: EntityId, item_id: EntityId, quantity: int) -> ServiceResult:
        """Sets a line's quantity, clamped to at least 1. Item statuses are unaffected."""
        async with self._lock:
            async with in_transaction() as conn:
                order, items = await self._load(order_id, conn)
                if order.is_paid:
                    return _paid(order)
                item = _find_item(items, item_id)
                item.quantity = max(1, int(quantity))
                await item.save(using_db=conn)
                return await self._commit(order, items, conn, event_type=ORDER_AMENDED)

    async def update_item_notes(self, order_id: EntityId, item_id: EntityId, notes: Optional[str]) -> ServiceResult:
        async with self._lock:
            async with in_transaction() as conn:
                order, items = await self._load(order_id, conn)
                if order.is_paid:
                    return _paid(order)
                item = _find_item(items, item_id)
                item.notes = notes or None
                await item.save(using_db=conn)
                return await self._commit(order, items, conn, event_type=ORDER_AMENDED)

    async def remove_item(self, order_id: EntityId, item_id: EntityId) -> ServiceResult:
        """Deletes a line. A department left without items is vacuously served."""
        async with self._lock:
            async with in_transaction() as conn:
                order, items = await self._load(order_id, conn)
                if order.is_paid:
                    return _paid(order)
                item = _find_item(items, item_id)
                await item.delete(using_db=conn)
                items.remove(item)
                return await self._commit(order, items, conn, event_type=ORDER_AMENDED)

    # ------------------------------------------------------------------
    # Kitchen / bar: fulfillment
    # ------------------------------------------------------------------

    async def update_item_status(self, order_id: EntityId, item_id: EntityId, status: ItemStatus) -> ServiceResult:
        """Marks a single line served. Served lines never go back to pending here."""
        async with self._lock:
            async with in_transaction() as conn:
                order, items = await self._load(order_id, conn)
                if order.is_paid:
                    return _paid(order)
                item = _find_item(items, item_id)
                if item.status == ItemStatus.SERVED and status == ItemStatus.PENDING:
                    return ServiceResult.fail(
                        RejectionCode.INVALID_TRANSITION,
                        f"Item '{item.name}' is already served.",
                    )
                if item.status != status:
                    item.status = status
                    await item.save(using_db=conn)
                    log.info(f"Order {order.id}: item '{item.name}' -> {status.value}")
                return await self._commit(order, items, conn)

    async def update_department_status(self, order_id: EntityId, item_type: ItemType, status: OrderStatus) -> ServiceResult:
        """Bulk kitchen/bar update: every line of the department takes `status`."""
        if status == OrderStatus.PAID:
            raise ValueError("A department can only be pending or served; use finalize_payment to pay.")
        item_status = ItemStatus(status.value)

        async with self._lock:
            async with in_transaction() as conn:
                order, items = await self._load(order_id, conn)
                if order.is_paid:
                    return _paid(order)
                for item in items:
                    if item.type == item_type and item.status != item_status:
                        item.status = item_status
                        await item.save(using_db=conn)
                log.info(f"Order {order.id}: all {item_type.value} items -> {status.value}")
                return await self._commit(order, items, conn)

    # ------------------------------------------------------------------
    # Cashier: payment
    # ------------------------------------------------------------------

    async def update_order_status(
        self,
        order_id: EntityId,
        status: OrderStatus,
        payment_method: Optional[PaymentMethod] = None,
    ) -> ServiceResult:
        """Generic status entry point. Pending/served are derived, so only 'paid' is accepted."""
        if status != OrderStatus.PAID:
            return ServiceResult.fail(
                RejectionCode.INVALID_TRANSITION,
                f"Order status '{status.value}' is derived from its items and cannot be set directly.",
            )
        return await self.finalize_payment(order_id, payment_method)

    async def finalize_payment(self, order_id: EntityId, payment_method: Optional[PaymentMethod]) -> ServiceResult:
        """
        Closes the order as paid from any unpaid status, frees the table and
        queues the receipt. Paying an already paid order succeeds without effect.
        """
        if payment_method is None:
            raise ValueError("A payment method is required to finalize an order.")

        async with self._lock:
            async with in_transaction() as conn:
                order, items = await self._load(order_id, conn)
                if order.is_paid:
                    log.info(f"Order {order.id} already paid; payment request ignored.")
                    return ServiceResult.ok(OrderDetailResponse.from_order(order, items))

                order.status = OrderStatus.PAID
                order.payment_method = PaymentMethod(payment_method)
                await order.save(using_db=conn)
                await self._release_table(order, conn)
                detail = await self._publish(order, items, PAYMENT_COMPLETED, conn)

        log.info(f"Order {order.id} paid by {order.payment_method.value}: {order.total}.")
        return ServiceResult.ok(detail)

    # ------------------------------------------------------------------
    # Administrative
    # ------------------------------------------------------------------

    async def delete_order(self, order_id: EntityId) -> ServiceResult:
        """Removes an order and its lines, freeing the table if it still points at it."""
        async with self._lock:
            async with in_transaction() as conn:
                order, items = await self._load(order_id, conn)
                detail = OrderDetailResponse.from_order(order, items)
                await OrderItem.filter(order_id=order.id).using_db(conn).delete()
                await order.delete(using_db=conn)
                await self._release_table(order, conn)

        log.warning(f"Order {detail.id} for table {detail.table_number} deleted.")
        return ServiceResult.ok(detail)

    async def reprint_order(self, order_id: EntityId) -> ServiceResult:
        """Queues kitchen and bar tickets for the current state of the order."""
        async with self._lock:
            async with in_transaction() as conn:
                order, items = await self._load(order_id, conn)
                detail = await self._publish(order, items, PRINT_REQUESTED, conn)
        return ServiceResult.ok(detail)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _details(self, query) -> List[OrderDetailResponse]:
        orders = await query.prefetch_related("items").order_by("created_at")
        return [OrderDetailResponse.from_order(o, o.items) for o in orders]

    async def _load(self, order_id: EntityId, conn: Any) -> Tuple[Order, List[OrderItem]]:
        # Row lock on backends that support it; SQLite serializes writers anyway
        order = await Order.filter(id=order_id).using_db(conn).select_for_update().first()
        if not order:
            raise OrderNotFoundError(order_id)
        items = await OrderItem.filter(order_id=order.id).using_db(conn).order_by("position")
        return order, list(items)

    async def _menu_item(self, menu_item_id: EntityId, conn: Any) -> MenuItem:
        menu = await MenuItem.get_or_none(id=menu_item_id).using_db(conn)
        if not menu:
            raise MenuItemNotFoundError(menu_item_id)
        return menu

    async def _merge_or_append(
        self,
        order: Order,
        items: List[OrderItem],
        menu: MenuItem,
        line: OrderLineRequest,
        conn: Any,
    ) -> OrderItem:
        existing = next((i for i in items if str(i.menu_item_id) == str(menu.id)), None)
        if existing:
            existing.quantity += line.quantity
            if line.notes:
                existing.notes = line.notes
            # The added units still have to go out
            existing.status = ItemStatus.PENDING
            await existing.save(using_db=conn)
            return existing

        item = await OrderItem.create(
            order=order,
            menu_item_id=menu.id,
            name=menu.name,
            price=menu.price,
            type=menu.type,
            quantity=line.quantity,
            status=ItemStatus.PENDING,
            notes=line.notes,
            position=max((i.position for i in items), default=-1) + 1,
            using_db=conn,
        )
        items.append(item)
        return item

    async def _commit(
        self,
        order: Order,
        items: List[OrderItem],
        conn: Any,
        event_type: Optional[str] = None,
    ) -> ServiceResult:
        """Re-derives the order from its items, saves it and cascades to the table."""
        previous = derive(order, items)
        await order.save(using_db=conn)
        await self._sync_table(order, previous, conn)
        if event_type:
            detail = await self._publish(order, items, event_type, conn)
        else:
            detail = OrderDetailResponse.from_order(order, items)
        return ServiceResult.ok(detail)

    async def _sync_table(self, order: Order, previous: OrderStatus, conn: Any) -> None:
        if order.status == previous:
            return
        table = await self._tables.find_table(order.table_id, conn=conn)
        if not table or str(table.order_id) != str(order.id):
            log.warning(f"Order {order.id} is {order.status.value} but table {order.table_number} no longer tracks it.")
            return

        if order.status == OrderStatus.SERVED and table.status == TableStatus.OCCUPIED:
            await self._tables.transition_table(table.id, TableStatus.READY_TO_PAY, order_id=order.id, conn=conn)
        elif (
            order.status == OrderStatus.PENDING
            and table.status == TableStatus.READY_TO_PAY
            and self._reopen_reverts_table
        ):
            await self._tables.transition_table(table.id, TableStatus.OCCUPIED, order_id=order.id, conn=conn)

    async def _release_table(self, order: Order, conn: Any) -> None:
        table = await self._tables.find_table(order.table_id, conn=conn)
        if table and str(table.order_id) == str(order.id):
            await self._tables.transition_table(table.id, TableStatus.AVAILABLE, conn=conn)

    async def _publish(self, order: Order, items: List[OrderItem], event_type: str, conn: Any) -> OrderDetailResponse:
        detail = OrderDetailResponse.from_order(order, items)
        payload: Dict[str, Any] = detail.model_dump(mode="json")
        await create_outbox_event(
            aggregate_type="order",
            aggregate_id=order.id,
            event_type=event_type,
            payload=payload,
            conn=conn,
        )
        return detail


def _find_item(items: List[OrderItem], item_id: EntityId) -> OrderItem:
    wanted = str(item_id)
    for item in items:
        if str(item.id) == wanted:
            return item
    raise OrderItemNotFoundError(item_id)


def _paid(order: Order) -> ServiceResult:
    log.warning(f"Rejected change to order {order.id}: order is already paid.")
    return ServiceResult.fail(RejectionCode.ORDER_PAID, f"Order {order.id} is paid and can no longer be changed.")


def _unavailable(menu: MenuItem) -> ServiceResult:
    return ServiceResult.fail(RejectionCode.MENU_ITEM_UNAVAILABLE, f"'{menu.name}' is not available.")
