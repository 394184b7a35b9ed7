from enum import Enum
from tortoise import fields, models
import uuid


class UserRole(str, Enum):
    CUSTOMER = "customer"
    TRUCK_OWNER = "truck_owner"
    ADMIN = "admin"


class User(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    name = fields.CharField(max_length=255)
    email = fields.CharField(max_length=255, unique=True) # Stored lower-cased
    password_hash = fields.CharField(max_length=255)
    role = fields.CharEnumField(UserRole, default=UserRole.CUSTOMER)
    birth_date = fields.DateField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "users"
        indexes = [
            ("role",),
        ]


class Session(models.Model):
    """Login session looked up by the opaque token the client presents."""
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    user = fields.ForeignKeyField("models.User", related_name="sessions")
    token = fields.CharField(max_length=64, unique=True)
    expires_at = fields.DatetimeField()
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "sessions"
