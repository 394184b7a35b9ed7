# app/models/__init__.py
from .user import User, UserRole, Session
from .truck import Truck, TruckStatus, TruckOrderStatus, MenuItem, MenuItemStatus
from .inventory import Inventory
from .cart import CartItem
from .order import Order, OrderItem, OrderStatus, Pickup, PickupStatus, PaymentStatus
from .notification import Notification

# Export all models
__all__ = [
    "CartItem",
    "Inventory",
    "MenuItem",
    "MenuItemStatus",
    "Notification",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "Pickup",
    "PickupStatus",
    "Session",
    "Truck",
    "TruckOrderStatus",
    "TruckStatus",
    "User",
    "UserRole",
]
