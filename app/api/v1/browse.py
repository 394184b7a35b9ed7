import logging

from fastapi import APIRouter, Query

from app.schemas.response import SuccessResponse
from app.schemas.truck import ListedMenuItemResponse, SearchResponse, TruckResponse
from app.services import truck_service

log = logging.getLogger("uvicorn")

router = APIRouter()


@router.get("/search", response_model=SuccessResponse)
async def search_endpoint(q: str = Query("", description="At least 2 characters.")):
    """Searches serving trucks by name and their available items by name, description or category."""
    trucks, items = await truck_service.search(q)
    data = SearchResponse(
        query=q,
        trucks=[TruckResponse.from_model(t) for t in trucks],
        menu_items=[ListedMenuItemResponse.from_model(item) for item in items],
        total_results=len(trucks) + len(items),
    ).model_dump(mode="json")
    return SuccessResponse(data=data)


@router.get("/categories", response_model=SuccessResponse)
async def list_categories_endpoint():
    return SuccessResponse(data=await truck_service.list_categories())


@router.get("/popular", response_model=SuccessResponse)
async def popular_items_endpoint():
    """Top ten items across all customers."""
    items = await truck_service.popular_items(limit=10)
    return SuccessResponse(
        data=[
            ListedMenuItemResponse.from_model(item, order_count=item.order_count).model_dump(mode="json")
            for item in items
        ]
    )
