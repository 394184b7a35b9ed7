import uuid
from typing import Optional

from pydantic import BaseModel, Field

from app.models.truck import Truck
from app.models.user import UserRole
from app.schemas.truck import TruckResponse


class StatsResponse(BaseModel):
    total_users: int
    total_trucks: int
    total_orders: int


class RoleUpdateRequest(BaseModel):
    role: UserRole


class AdminTruckCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Name of the truck.")
    owner_id: uuid.UUID = Field(..., description="User who will own and run the truck.")
    logo: Optional[str] = None


class AdminTruckResponse(TruckResponse):
    owner_name: str
    owner_email: str

    @classmethod
    def from_model(cls, truck: Truck) -> "AdminTruckResponse":
        base = TruckResponse.from_model(truck).model_dump()
        return cls(**base, owner_name=truck.owner.name, owner_email=truck.owner.email)
