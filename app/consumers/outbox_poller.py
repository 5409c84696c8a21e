import asyncio
import logging
from typing import Optional

from app.models.outbox import OutboxEvent
from app.consumers.print_consumer import handle_order_event
from app.consumers.print_sink import PrintSink
from app.core.db import init_db
from app.core.config import POLLING_INTERVAL, MAX_ATTEMPTS, BATCH_SIZE

log = logging.getLogger("outbox_poller")


async def dispatch_event(event: OutboxEvent, sink: Optional[PrintSink] = None):
    """
    Routes an OutboxEvent to its consumer.
    This simulates a message broker dispatcher in front of the printers.
    """
    log.info(f"Poller DISPATCHING: {event.event_type} (ID: {event.id.hex[:8]}...)")

    if event.aggregate_type == "order":
        await handle_order_event(event.event_type, event.payload, event.id, sink=sink)
    else:
        log.warning(f"No handler found for aggregate type: {event.aggregate_type}")


async def poll_outbox_for_new_events(sink: Optional[PrintSink] = None) -> int:
    """
    Queries the Outbox table for unpublished events and attempts to dispatch them.
    Returns the number of events delivered in this pass.
    """
    # Select events that haven't been published and haven't exceeded max attempts
    events = await OutboxEvent.filter(published=False, attempts__lt=MAX_ATTEMPTS).limit(BATCH_SIZE).order_by('created_at')

    delivered = 0
    for event in events:
        try:
            # 1. Dispatch the event (calls the printer consumer)
            await dispatch_event(event, sink=sink)

            # 2. Mark the event as published on success
            event.published = True
            await event.save(update_fields=['published'])
            delivered += 1

        except Exception:
            # 3. The order change is already committed; only the delivery is retried
            event.attempts += 1
            await event.save(update_fields=['attempts'])
            log.exception(f"Print delivery failed for {event.event_type} (attempt {event.attempts}/{MAX_ATTEMPTS}).")
    return delivered

async def start_outbox_poller():
    """Main loop for the poller service."""
    await init_db()
    log.info("--- Outbox Poller Service Started ---")

    while True:
        try:
            await poll_outbox_for_new_events()
        except Exception as e:
            log.error(f"Poller encountered a critical DB error: {e}.")

        await asyncio.sleep(POLLING_INTERVAL)

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    try:
        asyncio.run(start_outbox_poller())
    except KeyboardInterrupt:
        log.info("Poller service stopped.")
