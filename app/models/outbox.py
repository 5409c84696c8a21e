from tortoise import fields, models
import uuid


class OutboxEvent(models.Model):
    """
    Notifications for the print sink, stored atomically with the order change
    that produced them. The poller delivers them after the transaction commits.
    """
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    aggregate_type = fields.CharField(max_length=64) # e.g., 'order'
    aggregate_id = fields.UUIDField(null=True) # ID of the entity that generated the event
    event_type = fields.CharField(max_length=128) # e.g., 'order.placed.v1'
    payload = fields.JSONField() # Full order snapshot
    published = fields.BooleanField(default=False)
    attempts = fields.IntField(default=0)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "outbox_events"
