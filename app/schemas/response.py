from decimal import Decimal
from pydantic import BaseModel, Field, PlainSerializer
from typing import Annotated, Any, Optional
import uuid


def _rid():
    return uuid.uuid4().hex


# Currency amounts are rendered with exactly two decimals in JSON
Money = Annotated[Decimal, PlainSerializer(lambda v: f"{v:.2f}", return_type=str, when_used="json")]


class SuccessResponse(BaseModel):
    """Simple success response wrapper with just data, success, and request_id"""
    success: Optional[bool] = Field(default=True)
    request_id: str = Field(default_factory=_rid)
    data: Optional[Any] = None


class MessageResponse(BaseModel):
    message: str
    count: Optional[int] = None
