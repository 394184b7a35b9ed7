from tortoise import fields, models
import uuid


class Notification(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    user = fields.ForeignKeyField("models.User", related_name="notifications")
    type = fields.CharField(max_length=64) # e.g., 'new_order', 'order_update'
    title = fields.CharField(max_length=255)
    message = fields.TextField()
    is_read = fields.BooleanField(default=False)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "notifications"
        indexes = [
            ("user_id", "is_read"),  # Unread counts
        ]
