from typing import Any, List, Optional, Tuple
from unittest.mock import AsyncMock

from app.models.table import TableStatus
from app.services.table_registry import TableRegistry

# We expose the official AsyncMock as a utility for mocking sinks and ORM calls.
AsyncMockUtil = AsyncMock


class RecordingTableRegistry(TableRegistry):
    """Real registry that also records every transition the ledger asks for."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.transitions: List[Tuple[str, TableStatus, Optional[str]]] = []

    async def transition_table(self, table_id, status: TableStatus, order_id=None, conn: Any = None):
        self.transitions.append((str(table_id), status, str(order_id) if order_id else None))
        return await super().transition_table(table_id, status, order_id=order_id, conn=conn)

    def statuses(self) -> List[TableStatus]:
        return [status for _, status, _ in self.transitions]


class RecordingPrintSink:
    """Print sink that keeps what would have been printed."""

    def __init__(self):
        self.kitchen: List[dict] = []
        self.bar: List[dict] = []
        self.receipts: List[dict] = []

    async def print_kitchen_ticket(self, order, items):
        self.kitchen.append({"order": order, "items": items})

    async def print_bar_ticket(self, order, items):
        self.bar.append({"order": order, "items": items})

    async def print_receipt(self, order):
        self.receipts.append(order)
