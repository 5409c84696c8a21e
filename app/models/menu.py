from tortoise import fields, models
import uuid

from app.models.order import ItemType


class Category(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    name = fields.CharField(max_length=255)
    type = fields.CharEnumField(ItemType)
    sort_order = fields.IntField(default=0)

    class Meta:
        table = "categories"
        ordering = ["sort_order"]


class MenuItem(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    category = fields.ForeignKeyField("models.Category", related_name="menu_items", null=True)
    name = fields.CharField(max_length=255)
    description = fields.TextField(default="")
    price = fields.DecimalField(max_digits=12, decimal_places=2)
    type = fields.CharEnumField(ItemType)
    available = fields.BooleanField(default=True)

    class Meta:
        table = "menu_items"
        indexes = [
            ("type",),
            ("available",),
        ]
