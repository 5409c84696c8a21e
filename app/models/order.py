from enum import Enum
from tortoise import fields, models
import uuid


class OrderStatus(str, Enum):
    PENDING = "pending"  # At least one department still has unserved items
    SERVED = "served"    # Food and drink departments are both served
    PAID = "paid"        # Finalized by the cashier; the order is frozen


class ItemStatus(str, Enum):
    PENDING = "pending"
    SERVED = "served"


class ItemType(str, Enum):
    """The department an item is fulfilled by: kitchen (food) or bar (drink)."""
    FOOD = "food"
    DRINK = "drink"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"


class Order(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    # Weak reference: deleting a table must not delete its order history
    table_id = fields.UUIDField()
    table_number = fields.IntField()
    # Derived from items, rewritten in the same transaction as every item change
    total = fields.DecimalField(max_digits=14, decimal_places=2, default=0)
    status = fields.CharEnumField(OrderStatus, default=OrderStatus.PENDING)
    food_status = fields.CharEnumField(OrderStatus, default=OrderStatus.PENDING)
    drink_status = fields.CharEnumField(OrderStatus, default=OrderStatus.PENDING)
    payment_method = fields.CharEnumField(PaymentMethod, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "orders"
        indexes = [
            ("table_id",),               # Orders of a table
            ("status",),                 # Active (non-paid) lookups
            ("created_at",),             # Date range reporting
            ("table_id", "status"),      # Composite: active order of a table
        ]

    @property
    def is_paid(self) -> bool:
        return self.status == OrderStatus.PAID


class OrderItem(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    order = fields.ForeignKeyField("models.Order", related_name="items")
    # Name/price/type are copied from the menu when the line is added
    menu_item_id = fields.UUIDField()
    name = fields.CharField(max_length=255)
    price = fields.DecimalField(max_digits=12, decimal_places=2)
    type = fields.CharEnumField(ItemType)
    quantity = fields.IntField(default=1)
    status = fields.CharEnumField(ItemStatus, default=ItemStatus.PENDING)
    notes = fields.TextField(null=True)
    position = fields.IntField(default=0)

    class Meta:
        table = "order_items"
        ordering = ["position"]
        indexes = [
            ("order_id",),                 # Order line items
            ("order_id", "menu_item_id"),  # Merge lookup on add
        ]
