import logging
from typing import Any, Dict, Optional
from uuid import UUID

from app.consumers.print_sink import LoggingPrintSink, PrintSink
from app.events.outbox_utility import ORDER_AMENDED, ORDER_PLACED, PAYMENT_COMPLETED, PRINT_REQUESTED
from app.models.processed_event import ProcessedEvent

log = logging.getLogger("print_consumer")

# Events that produce kitchen/bar tickets
TICKET_EVENTS = (ORDER_PLACED, ORDER_AMENDED, PRINT_REQUESTED)

_default_sink: Optional[PrintSink] = None


def get_print_sink() -> PrintSink:
    global _default_sink
    if _default_sink is None:
        _default_sink = LoggingPrintSink()
    return _default_sink


async def send_tickets(order: Dict[str, Any], sink: PrintSink) -> None:
    """Routes food lines to the kitchen printer and drink lines to the bar printer."""
    food = [i for i in order.get("items", []) if i["type"] == "food"]
    drinks = [i for i in order.get("items", []) if i["type"] == "drink"]
    if food:
        await sink.print_kitchen_ticket(order, food)
    if drinks:
        await sink.print_bar_ticket(order, drinks)


async def handle_order_event(event_type: str, order: Dict[str, Any], event_id: UUID, sink: Optional[PrintSink] = None) -> bool:
    """
    Consumer logic for order notifications. Returns False when the event was
    already printed. Printer errors propagate so the poller can retry.
    """
    sink = sink or get_print_sink()
    event_id_str = str(event_id)

    # Idempotency Check
    if await ProcessedEvent.filter(event_id=event_id_str).exists():
        log.info(f"Idempotency: Event {event_id_str} already printed.")
        return False

    if event_type in TICKET_EVENTS:
        await send_tickets(order, sink)
    elif event_type == PAYMENT_COMPLETED:
        await sink.print_receipt(order)
    else:
        log.warning(f"No print handler for event type: {event_type}")

    await ProcessedEvent.create(event_id=event_id_str)
    return True
