from pydantic import BaseModel, Field
from typing import Iterable, List, Optional
from datetime import datetime
from decimal import Decimal
import uuid

from app.models.order import Order, OrderItem, OrderStatus, ItemStatus, ItemType, PaymentMethod


class OrderLineRequest(BaseModel):
    """Schema for a single menu item added to an order."""
    menu_item_id: uuid.UUID
    quantity: int = Field(1, ge=1)
    notes: Optional[str] = None

class OrderCreateRequest(BaseModel):
    """Schema for seating a table with its first round of items."""
    table_id: uuid.UUID
    items: List[OrderLineRequest]

class QuantityUpdate(BaseModel):
    # Values below 1 are clamped to 1 by the ledger
    quantity: int

class NotesUpdate(BaseModel):
    notes: Optional[str] = None

class ItemStatusUpdate(BaseModel):
    status: ItemStatus

class DepartmentStatusUpdate(BaseModel):
    """Bulk kitchen/bar update; only pending or served are meaningful."""
    status: OrderStatus

class PaymentRequest(BaseModel):
    payment_method: PaymentMethod

class OrderStatusUpdate(BaseModel):
    """Schema for the generic status entry point (only 'paid' is accepted)."""
    status: OrderStatus
    payment_method: Optional[PaymentMethod] = None


class OrderItemResponse(BaseModel):
    """Schema for an item inside the detailed order response."""
    id: uuid.UUID
    menu_item_id: uuid.UUID
    name: str
    price: Decimal
    type: ItemType
    quantity: int
    status: ItemStatus
    notes: Optional[str] = None

    @classmethod
    def from_item(cls, item: OrderItem) -> "OrderItemResponse":
        return cls(
            id=item.id,
            menu_item_id=item.menu_item_id,
            name=item.name,
            price=item.price,
            type=item.type,
            quantity=item.quantity,
            status=item.status,
            notes=item.notes,
        )

class OrderDetailResponse(BaseModel):
    """Full order snapshot, also used as the print sink payload."""
    id: uuid.UUID
    table_id: uuid.UUID
    table_number: int
    status: OrderStatus
    food_status: OrderStatus
    drink_status: OrderStatus
    total: Decimal
    payment_method: Optional[PaymentMethod] = None
    items: List[OrderItemResponse]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_order(cls, order: Order, items: Iterable[OrderItem]) -> "OrderDetailResponse":
        return cls(
            id=order.id,
            table_id=order.table_id,
            table_number=order.table_number,
            status=order.status,
            food_status=order.food_status,
            drink_status=order.drink_status,
            total=order.total,
            payment_method=order.payment_method,
            items=[OrderItemResponse.from_item(i) for i in sorted(items, key=lambda i: i.position)],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )

    def items_of(self, item_type: ItemType) -> List[OrderItemResponse]:
        return [i for i in self.items if i.type == item_type]
