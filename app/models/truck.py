from enum import Enum
from tortoise import fields, models
import uuid


class TruckStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class TruckOrderStatus(str, Enum):
    """Whether the truck is currently accepting orders."""
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    BUSY = "busy"


class MenuItemStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class Truck(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    name = fields.CharField(max_length=255, unique=True)
    logo = fields.CharField(max_length=512, null=True)
    owner = fields.ForeignKeyField("models.User", related_name="trucks")
    truck_status = fields.CharEnumField(TruckStatus, default=TruckStatus.AVAILABLE)
    order_status = fields.CharEnumField(TruckOrderStatus, default=TruckOrderStatus.AVAILABLE)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "trucks"
        indexes = [
            ("owner_id",),  # Owner dashboard queries
        ]


class MenuItem(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    truck = fields.ForeignKeyField("models.Truck", related_name="menu_items")
    name = fields.CharField(max_length=255)
    description = fields.TextField(null=True)
    price = fields.DecimalField(max_digits=12, decimal_places=2)
    category = fields.CharField(max_length=100, default="main")
    status = fields.CharEnumField(MenuItemStatus, default=MenuItemStatus.AVAILABLE)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "menu_items"
        indexes = [
            ("truck_id",),              # Fast truck menu queries
            ("truck_id", "category"),   # Composite: truck menu by category
        ]
