"""
Printer endpoints for kitchen tickets, bar tickets and cashier receipts.

Formatting and physical dispatch belong to the printer integration; the
default sink renders plain text tickets to the log so a deployment without
printers still shows what would have been printed.
"""
import logging
from typing import Any, Dict, List, Protocol

log = logging.getLogger("print_sink")

Snapshot = Dict[str, Any]


class PrintSink(Protocol):
    async def print_kitchen_ticket(self, order: Snapshot, items: List[Snapshot]) -> None: ...

    async def print_bar_ticket(self, order: Snapshot, items: List[Snapshot]) -> None: ...

    async def print_receipt(self, order: Snapshot) -> None: ...


def render_ticket(title: str, order: Snapshot, items: List[Snapshot]) -> str:
    lines = [f"== {title} == Table {order['table_number']}"]
    for item in items:
        lines.append(f"{item['quantity']} x {item['name']}")
        if item.get("notes"):
            lines.append(f"    {item['notes']}")
    return "\n".join(lines)


def render_receipt(order: Snapshot) -> str:
    lines = [f"== RECEIPT == Table {order['table_number']}"]
    for item in order["items"]:
        line_total = float(item["price"]) * item["quantity"]
        lines.append(f"{item['quantity']} x {item['name']:<24} {line_total:>8.2f}")
    lines.append(f"TOTAL {float(order['total']):>29.2f}")
    if order.get("payment_method"):
        lines.append(f"Paid by {order['payment_method']}")
    return "\n".join(lines)


class LoggingPrintSink:
    """Writes every ticket to the log instead of a physical printer."""

    async def print_kitchen_ticket(self, order: Snapshot, items: List[Snapshot]) -> None:
        log.info("\n" + render_ticket("KITCHEN", order, items))

    async def print_bar_ticket(self, order: Snapshot, items: List[Snapshot]) -> None:
        log.info("\n" + render_ticket("BAR", order, items))

    async def print_receipt(self, order: Snapshot) -> None:
        log.info("\n" + render_receipt(order))
