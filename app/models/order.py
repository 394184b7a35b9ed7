from enum import Enum
from tortoise import fields, models
import uuid


class OrderStatus(str, Enum):
    PENDING = "pending"      # Placed, awaiting payment/confirmation
    CONFIRMED = "confirmed"  # Paid or accepted by the truck
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

    def can_transition_to(self, new_status: "OrderStatus") -> bool:
        return new_status in ORDER_TRANSITIONS[self]


ORDER_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.READY, OrderStatus.CANCELLED},
    OrderStatus.READY: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}


class PickupStatus(str, Enum):
    SCHEDULED = "scheduled"
    READY = "ready"
    PICKED_UP = "picked_up"
    CANCELLED = "cancelled"

    def can_transition_to(self, new_status: "PickupStatus") -> bool:
        return new_status in PICKUP_TRANSITIONS[self]


PICKUP_TRANSITIONS = {
    PickupStatus.SCHEDULED: {PickupStatus.READY, PickupStatus.PICKED_UP, PickupStatus.CANCELLED},
    PickupStatus.READY: {PickupStatus.PICKED_UP, PickupStatus.CANCELLED},
    PickupStatus.PICKED_UP: set(),
    PickupStatus.CANCELLED: set(),
}


class PaymentStatus(str, Enum):
    """Derived from the order status; no payment rows are stored."""
    PENDING = "pending"
    COMPLETED = "completed"
    REFUNDED = "refunded"

    @classmethod
    def for_order(cls, order_status: OrderStatus) -> "PaymentStatus":
        if order_status == OrderStatus.CANCELLED:
            return cls.REFUNDED
        if order_status == OrderStatus.PENDING:
            return cls.PENDING
        return cls.COMPLETED


class Order(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    user = fields.ForeignKeyField("models.User", related_name="orders")
    truck = fields.ForeignKeyField("models.Truck", related_name="orders")
    status = fields.CharEnumField(OrderStatus, default=OrderStatus.PENDING)
    total_price = fields.DecimalField(max_digits=14, decimal_places=2, default=0)
    scheduled_pickup_time = fields.DatetimeField(null=True)
    estimated_earliest_pickup = fields.DatetimeField()
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "orders"
        indexes = [
            ("truck_id",),               # Truck order queries
            ("status",),                 # Status-based filtering
            ("user_id",),                # User order history
            ("created_at",),             # Time-based queries
            ("truck_id", "created_at"),  # Composite: owner dashboard
        ]


class OrderItem(models.Model):
    """Frozen copy of a cart line taken at checkout."""
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    order = fields.ForeignKeyField("models.Order", related_name="items", on_delete=fields.CASCADE)
    menu_item = fields.ForeignKeyField("models.MenuItem", related_name="order_items")
    quantity = fields.IntField()
    price = fields.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        table = "order_items"
        indexes = [
            ("order_id",),              # Order line items
            ("menu_item_id",),          # Menu item popularity
        ]


class Pickup(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    order = fields.OneToOneField("models.Order", related_name="pickup", on_delete=fields.CASCADE)
    status = fields.CharEnumField(PickupStatus, default=PickupStatus.SCHEDULED)
    scheduled_time = fields.DatetimeField()
    notes = fields.TextField(null=True)
    completed_at = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "pickups"
