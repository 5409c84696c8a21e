from enum import Enum
from tortoise import fields, models
import uuid


class TableStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"
    READY_TO_PAY = "readyToPay"


# Statuses in which a table points at its active order
ORDER_BOUND_STATUSES = (TableStatus.OCCUPIED, TableStatus.READY_TO_PAY)


class DiningTable(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    number = fields.IntField(unique=True)
    seats = fields.IntField()
    status = fields.CharEnumField(TableStatus, default=TableStatus.AVAILABLE)
    # Lookup only; the order ledger owns the order's lifetime
    order_id = fields.UUIDField(null=True)
    reservation_name = fields.CharField(max_length=255, null=True)
    reservation_time = fields.CharField(max_length=64, null=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "dining_tables"
        ordering = ["number"]
        indexes = [
            ("status",),
        ]
