from tortoise import fields, models
import uuid


class ProcessedEvent(models.Model):
    """
    Idempotency ledger for consumers: an OutboxEvent id stored here has
    already been printed and is skipped on redelivery.
    """
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    event_id = fields.CharField(max_length=128, unique=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "processed_events"
