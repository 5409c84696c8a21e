"""
Pure status derivations shared by the order ledger.

Every mutation of an order's items re-runs these over the full item list
inside the same transaction; department and aggregate statuses are never
set from anywhere else.
"""
from decimal import Decimal
from typing import Iterable, Sequence

from app.models.order import Order, OrderItem, OrderStatus, ItemStatus, ItemType


def order_total(items: Iterable[OrderItem]) -> Decimal:
    """Sum of unit price x quantity over the current lines."""
    return sum((Decimal(item.price) * item.quantity for item in items), Decimal("0"))


def department_status(items: Iterable[OrderItem], item_type: ItemType) -> OrderStatus:
    """Served iff every item of the type is served; vacuously served when there are none."""
    if all(item.status == ItemStatus.SERVED for item in items if item.type == item_type):
        return OrderStatus.SERVED
    return OrderStatus.PENDING


def aggregate_status(food_status: OrderStatus, drink_status: OrderStatus, paid: bool = False) -> OrderStatus:
    if paid:
        return OrderStatus.PAID
    if food_status == OrderStatus.SERVED and drink_status == OrderStatus.SERVED:
        return OrderStatus.SERVED
    return OrderStatus.PENDING


def derive(order: Order, items: Sequence[OrderItem]) -> OrderStatus:
    """
    Rewrites total, department statuses and aggregate status of `order`
    from `items`. Returns the aggregate status the order had before.
    """
    previous = order.status
    order.total = order_total(items)
    order.food_status = department_status(items, ItemType.FOOD)
    order.drink_status = department_status(items, ItemType.DRINK)
    order.status = aggregate_status(order.food_status, order.drink_status, paid=order.is_paid)
    return previous


def department_field(item_type: ItemType) -> str:
    return "food_status" if item_type == ItemType.FOOD else "drink_status"
