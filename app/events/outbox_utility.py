from typing import Dict, Any
from app.models.outbox import OutboxEvent
from uuid import UUID

# Event types consumed by the print sink
ORDER_PLACED = "order.placed.v1"
ORDER_AMENDED = "order.amended.v1"
PAYMENT_COMPLETED = "payment.completed.v1"
PRINT_REQUESTED = "order.print_requested.v1"


async def create_outbox_event(
    aggregate_type: str,
    aggregate_id: UUID,
    event_type: str,
    payload: Dict[str, Any],
    conn: Any = None
) -> OutboxEvent:
    """
    Creates a new Outbox event record using the provided database connection (transaction).

    Passing 'conn' ensures the event is created atomically with the order change;
    printing happens later in the poller and can never roll that change back.
    """
    return await OutboxEvent.create(
        aggregate_type=aggregate_type,
        aggregate_id=aggregate_id,
        event_type=event_type,
        payload=payload,
        published=False,
        attempts=0,
        using_db=conn
    )
