# app/models/__init__.py
from .order import Order, OrderItem, OrderStatus, ItemStatus, ItemType, PaymentMethod
from .table import DiningTable, TableStatus
from .menu import Category, MenuItem
from .outbox import OutboxEvent
from .processed_event import ProcessedEvent

# Export all models
__all__ = [
    "Category",
    "DiningTable",
    "ItemStatus",
    "ItemType",
    "MenuItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OutboxEvent",
    "PaymentMethod",
    "ProcessedEvent",
    "TableStatus",
]
