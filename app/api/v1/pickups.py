from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.deps import get_current_user
from app.models.user import User
from app.schemas.order import PickupCreateRequest, PickupResponse, PickupUpdateRequest
from app.schemas.response import SuccessResponse
from app.services import pickup_service

router = APIRouter()


@router.get("", response_model=SuccessResponse)
async def list_pickups_endpoint(user: User = Depends(get_current_user)):
    pickups = await pickup_service.list_pickups(user)
    return SuccessResponse(data=[PickupResponse.from_model(p).model_dump(mode="json") for p in pickups])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def schedule_pickup_endpoint(payload: PickupCreateRequest, user: User = Depends(get_current_user)):
    pickup = await pickup_service.schedule_pickup(
        user, payload.order_id, scheduled_time=payload.scheduled_time, notes=payload.notes
    )
    return SuccessResponse(data=PickupResponse.from_model(pickup).model_dump(mode="json"))


@router.get("/{pickup_id}", response_model=SuccessResponse)
async def get_pickup_endpoint(pickup_id: UUID, user: User = Depends(get_current_user)):
    pickup = await pickup_service.get_pickup(user, pickup_id)
    return SuccessResponse(data=PickupResponse.from_model(pickup).model_dump(mode="json"))


@router.put("/{pickup_id}", response_model=SuccessResponse)
async def update_pickup_endpoint(pickup_id: UUID, payload: PickupUpdateRequest, user: User = Depends(get_current_user)):
    pickup = await pickup_service.update_pickup(
        user, pickup_id, status=payload.status, scheduled_time=payload.scheduled_time, notes=payload.notes
    )
    return SuccessResponse(data=PickupResponse.from_model(pickup).model_dump(mode="json"))


@router.delete("/{pickup_id}", response_model=SuccessResponse)
async def cancel_pickup_endpoint(pickup_id: UUID, user: User = Depends(get_current_user)):
    pickup = await pickup_service.cancel_pickup(user, pickup_id)
    return SuccessResponse(data=PickupResponse.from_model(pickup).model_dump(mode="json"))
