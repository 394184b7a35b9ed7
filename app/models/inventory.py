from tortoise import fields, models
import uuid


class Inventory(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    # One-to-one link to ensure a single inventory record per menu item
    menu_item = fields.OneToOneField("models.MenuItem", related_name="inventory")
    quantity = fields.IntField(default=0)
    low_stock_threshold = fields.IntField(default=10) # For low stock alert
    last_restocked = fields.DatetimeField(null=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "inventory"

    @property
    def low_stock(self) -> bool:
        return self.quantity <= self.low_stock_threshold

    @property
    def out_of_stock(self) -> bool:
        return self.quantity == 0
