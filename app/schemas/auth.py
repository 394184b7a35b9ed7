import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.models.user import User, UserRole


def _check_email(value: str) -> str:
    value = value.strip().lower()
    local, _, domain = value.partition("@")
    if not local or "." not in domain:
        raise ValueError("A valid email address is required")
    return value


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Display name.")
    email: str = Field(..., description="Login email, stored lower-cased.")
    password: str = Field(..., min_length=1)
    role: Optional[str] = Field(None, description="'customer' (default) or 'truck_owner'.")
    birth_date: Optional[date] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _check_email(value)


class LoginRequest(BaseModel):
    email: str
    password: str


class ProfileUpdateRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    birth_date: Optional[date] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return _check_email(value) if value is not None else None


class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    role: UserRole
    birth_date: Optional[date] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            birth_date=user.birth_date,
            created_at=user.created_at,
        )


class LoginResponse(BaseModel):
    user: UserResponse
    token: str
    expires_at: datetime
