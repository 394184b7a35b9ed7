import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_current_user
from app.core.errors import AppError
from app.models.user import User
from app.schemas.habits import (
    FavouriteTruckResponse,
    HabitsResponse,
    HistoryOrderResponse,
    LastOrderResponse,
    OrderHistoryResponse,
    QuickReorderResponse,
    RankedItemResponse,
    ReorderLineResponse,
)
from app.schemas.order import OrderItemResponse
from app.schemas.response import SuccessResponse
from app.schemas.truck import ListedMenuItemResponse
from app.services import habits_service

log = logging.getLogger("uvicorn")

router = APIRouter()


@router.get("", response_model=SuccessResponse)
async def get_habits_endpoint(user: User = Depends(get_current_user)):
    """Favourites and recommendations built from the caller's order history."""
    try:
        habits = await habits_service.get_habits(user)
        data = HabitsResponse(
            favourite_items=[RankedItemResponse.from_model(item, **counts) for item, counts in habits["favourite_items"]],
            favourite_trucks=[FavouriteTruckResponse.from_model(truck, **totals) for truck, totals in habits["favourite_trucks"]],
            you_might_like=[
                ListedMenuItemResponse.from_model(item, order_count=item.order_count) for item in habits["you_might_like"]
            ],
            category_recommendations=[ListedMenuItemResponse.from_model(item) for item in habits["category_recommendations"]],
            favourite_category=habits["favourite_category"],
            has_history=habits["has_history"],
            message=(
                "Recommendations based on your order history"
                if habits["has_history"]
                else "Start ordering to get personalized recommendations!"
            ),
        ).model_dump(mode="json")
        return SuccessResponse(data=data)
    except AppError:
        raise
    except Exception as e:
        log.error(f"Error computing habits for user {user.id}: {e}")
        raise HTTPException(status_code=500, detail="Server failed to compute habits.")


@router.get("/quick-reorder", response_model=SuccessResponse)
async def quick_reorder_endpoint(user: User = Depends(get_current_user)):
    last_order, frequent = await habits_service.quick_reorder(user)
    data = QuickReorderResponse(
        last_order=LastOrderResponse.from_model(
            last_order, items=[ReorderLineResponse.from_model(line) for line in last_order.items]
        ) if last_order else None,
        frequent_items=[RankedItemResponse.from_model(item, **counts) for item, counts in frequent],
    ).model_dump(mode="json")
    return SuccessResponse(data=data)


@router.get("/history", response_model=SuccessResponse)
async def order_history_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_current_user),
):
    history = await habits_service.order_history(user, page=page, limit=limit)
    data = OrderHistoryResponse(
        stats=history["stats"],
        orders=[
            HistoryOrderResponse.from_model(order, items=[OrderItemResponse.from_model(line) for line in order.items])
            for order in history["orders"]
        ],
        pagination=history["pagination"],
    ).model_dump(mode="json")
    return SuccessResponse(data=data)


@router.get("/top-items", response_model=SuccessResponse)
async def top_items_endpoint(limit: int = Query(10, ge=1, le=50), user: User = Depends(get_current_user)):
    items = await habits_service.top_items(user, limit=limit)
    return SuccessResponse(
        data=[RankedItemResponse.from_model(item, **counts).model_dump(mode="json") for item, counts in items]
    )
