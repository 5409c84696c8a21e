import asyncio
import logging
from typing import Any, List, Optional, Union
from uuid import UUID

from app.core.exceptions import TableNotFoundError
from app.models.table import DiningTable, TableStatus, ORDER_BOUND_STATUSES
from app.schemas.response import RejectionCode, ServiceResult

log = logging.getLogger(__name__)

TableId = Union[UUID, str]


def _apply_status(table: DiningTable, status: TableStatus, order_id: Optional[TableId]) -> None:
    """Keeps order reference and reservation metadata consistent with the status."""
    if status in ORDER_BOUND_STATUSES:
        order_ref = order_id if order_id is not None else table.order_id
        if order_ref is None:
            raise ValueError(f"Table {table.number} cannot become {status.value} without an order")
        table.order_id = order_ref
    else:
        table.order_id = None
    if status != TableStatus.RESERVED:
        table.reservation_name = None
        table.reservation_time = None
    table.status = status


class TableRegistry:
    """
    Owns the dining tables and their occupancy status.

    Status changes driven by orders go through `transition_table`, which the
    order ledger calls inside its own transaction. Staff actions (create,
    renumber, delete, reserve) take the shared writer lock.
    """

    def __init__(self, lock: Optional[asyncio.Lock] = None):
        self._lock = lock or asyncio.Lock()

    # --- Queries ---

    async def get_table(self, table_id: TableId, conn: Any = None) -> DiningTable:
        table = await self.find_table(table_id, conn=conn)
        if not table:
            raise TableNotFoundError(table_id)
        return table

    async def find_table(self, table_id: TableId, conn: Any = None) -> Optional[DiningTable]:
        return await DiningTable.get_or_none(id=table_id).using_db(conn)

    async def get_table_by_number(self, number: int) -> Optional[DiningTable]:
        return await DiningTable.get_or_none(number=number)

    async def list_tables(self, status: Optional[TableStatus] = None) -> List[DiningTable]:
        query = DiningTable.all()
        if status is not None:
            query = query.filter(status=status)
        return await query.order_by("number")

    # --- Staff actions ---

    async def create_table(self, number: int, seats: int) -> ServiceResult:
        _check_dimensions(number, seats)
        async with self._lock:
            if await DiningTable.filter(number=number).exists():
                log.warning(f"Rejected table creation: number {number} already in use.")
                return ServiceResult.fail(RejectionCode.TABLE_NUMBER_TAKEN, f"Table {number} already exists.")
            table = await DiningTable.create(number=number, seats=seats, status=TableStatus.AVAILABLE)
        log.info(f"Table {number} created with {seats} seats.")
        return ServiceResult.ok(table)

    async def update_table(self, table_id: TableId, number: int, seats: int) -> ServiceResult:
        """Renumber/reseat a table. Status and order reference are untouched."""
        _check_dimensions(number, seats)
        async with self._lock:
            table = await self.get_table(table_id)
            if await DiningTable.filter(number=number).exclude(id=table.id).exists():
                log.warning(f"Rejected renumbering table {table.number} to {number}: number in use.")
                return ServiceResult.fail(RejectionCode.TABLE_NUMBER_TAKEN, f"Table {number} already exists.")
            table.number = number
            table.seats = seats
            await table.save(update_fields=["number", "seats", "updated_at"])
        return ServiceResult.ok(table)

    async def delete_table(self, table_id: TableId) -> ServiceResult:
        async with self._lock:
            table = await self.get_table(table_id)
            if table.status in (TableStatus.OCCUPIED, TableStatus.RESERVED):
                return ServiceResult.fail(
                    RejectionCode.TABLE_IN_USE,
                    f"Table {table.number} is {table.status.value} and cannot be deleted.",
                )
            await table.delete()
        log.info(f"Table {table.number} deleted.")
        return ServiceResult.ok(table)

    async def reserve_table(self, table_id: TableId, name: str, time: str) -> ServiceResult:
        async with self._lock:
            table = await self.get_table(table_id)
            if table.status != TableStatus.AVAILABLE:
                return ServiceResult.fail(
                    RejectionCode.TABLE_NOT_AVAILABLE,
                    f"Table {table.number} is {table.status.value} and cannot be reserved.",
                )
            _apply_status(table, TableStatus.RESERVED, None)
            table.reservation_name = name
            table.reservation_time = time
            await table.save()
        log.info(f"Table {table.number} reserved for {name} at {time}.")
        return ServiceResult.ok(table)

    async def cancel_reservation(self, table_id: TableId) -> ServiceResult:
        async with self._lock:
            table = await self.get_table(table_id)
            if table.status != TableStatus.RESERVED:
                return ServiceResult.fail(
                    RejectionCode.INVALID_TRANSITION,
                    f"Table {table.number} has no reservation to cancel.",
                )
            _apply_status(table, TableStatus.AVAILABLE, None)
            await table.save()
        return ServiceResult.ok(table)

    # --- Order-driven transitions ---

    async def transition_table(
        self,
        table_id: TableId,
        status: TableStatus,
        order_id: Optional[TableId] = None,
        conn: Any = None,
    ) -> Optional[DiningTable]:
        """
        Moves a table to `status`. The caller sequences transitions and holds
        the writer lock; pass its `conn` to join its transaction.
        Returns None when the table no longer exists.
        """
        table = await self.find_table(table_id, conn=conn)
        if not table:
            log.warning(f"Transition to {status.value} skipped: table {table_id} no longer exists.")
            return None
        old_status = table.status
        _apply_status(table, status, order_id)
        await table.save(using_db=conn)
        log.info(f"Table {table.number}: {old_status.value} -> {status.value}")
        return table


def _check_dimensions(number: int, seats: int) -> None:
    if number <= 0 or seats <= 0:
        raise ValueError("Table number and seat count must be positive integers.")
