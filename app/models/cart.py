from tortoise import fields, models
import uuid


class CartItem(models.Model):
    """A pending selection; price is captured when the item is first added."""
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    user = fields.ForeignKeyField("models.User", related_name="cart_items")
    menu_item = fields.ForeignKeyField("models.MenuItem", related_name="cart_items")
    quantity = fields.IntField(default=1)
    price = fields.DecimalField(max_digits=12, decimal_places=2)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "cart_items"
        unique_together = (("user", "menu_item"),)
