import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.deps import require_roles
from app.models.user import UserRole
from app.schemas.admin import AdminTruckCreateRequest, AdminTruckResponse, RoleUpdateRequest, StatsResponse
from app.schemas.auth import UserResponse
from app.schemas.response import MessageResponse, SuccessResponse
from app.services import admin_service

log = logging.getLogger("uvicorn")

router = APIRouter(dependencies=[Depends(require_roles(UserRole.ADMIN))])


@router.get("/stats", response_model=SuccessResponse)
async def stats_endpoint():
    stats = await admin_service.get_stats()
    return SuccessResponse(data=StatsResponse(**stats).model_dump())


@router.get("/users", response_model=SuccessResponse)
async def list_users_endpoint():
    users = await admin_service.list_users()
    return SuccessResponse(data=[UserResponse.from_model(u).model_dump(mode="json") for u in users])


@router.put("/users/{user_id}/role", response_model=SuccessResponse)
async def set_role_endpoint(user_id: UUID, payload: RoleUpdateRequest):
    user = await admin_service.set_user_role(user_id, payload.role)
    log.info(f"User {user.id} role set to {user.role.value}")
    return SuccessResponse(data=UserResponse.from_model(user).model_dump(mode="json"))


@router.get("/trucks", response_model=SuccessResponse)
async def list_trucks_endpoint():
    trucks = await admin_service.list_trucks()
    return SuccessResponse(data=[AdminTruckResponse.from_model(t).model_dump(mode="json") for t in trucks])


@router.post("/trucks", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_truck_endpoint(payload: AdminTruckCreateRequest):
    truck = await admin_service.create_truck(payload.name, payload.owner_id, logo=payload.logo)
    log.info(f"Truck {truck.id} created for owner {truck.owner_id}")
    return SuccessResponse(data=AdminTruckResponse.from_model(truck).model_dump(mode="json"))


@router.delete("/trucks/{truck_id}", response_model=SuccessResponse)
async def delete_truck_endpoint(truck_id: UUID):
    await admin_service.delete_truck(truck_id)
    return SuccessResponse(data=MessageResponse(message="Truck deleted").model_dump())
