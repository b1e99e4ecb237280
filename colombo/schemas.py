"""
Pydantic Schemas for Request/Response Validation

The same request schema validates both the HTML order form and the
JSON order API.
"""

from datetime import date as Date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Largest id a 64-bit INTEGER primary key can hold
MAX_DISH_ID = 2**63 - 1


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class OrderCreate(BaseModel):
    """Request schema for placing an order."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255, examples=["Nimal Perera"])
    main_dish: int = Field(..., ge=1, le=MAX_DISH_ID, examples=[1])
    side_dish: int = Field(..., ge=1, le=MAX_DISH_ID, examples=[2])
    dessert: Optional[int] = Field(None, ge=1, le=MAX_DISH_ID, examples=[1])

    @field_validator("dessert", mode="before")
    @classmethod
    def blank_dessert_is_none(cls, v: Any) -> Any:
        # The order form submits "" when no dessert is picked
        if isinstance(v, str) and not v.strip():
            return None
        return v


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class DishResponse(BaseModel):
    """A catalog item."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float


class CatalogResponse(BaseModel):
    """All catalog items grouped by course."""
    main_dishes: List[DishResponse]
    side_dishes: List[DishResponse]
    desserts: List[DishResponse]


class OrderResponse(BaseModel):
    """Response schema for a single order with its dishes resolved."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_name: str
    main_dish: DishResponse
    side_dish: DishResponse
    dessert: Optional[DishResponse]
    total_price: float
    created_at: datetime


class OrderCreateResponse(BaseModel):
    """Response after successfully placing an order."""
    success: bool
    message: str
    order_id: int
    total_price: float


class OrderListResponse(BaseModel):
    """Response for listing orders."""
    total: int
    orders: List[OrderResponse]


class DailyStatisticResponse(BaseModel):
    """One day's sales summary."""
    model_config = ConfigDict(from_attributes=True)

    date: Date
    daily_sales_revenue: float
    most_famous_main_dish_id: Optional[int]
    most_famous_side_dish_id: Optional[int]


class HighlightsResponse(BaseModel):
    """All-time most popular dishes."""
    model_config = ConfigDict(from_attributes=True)

    most_famous_main_dish_id: Optional[int]
    most_famous_main_dish_name: Optional[str]
    most_famous_side_dish_id: Optional[int]
    most_famous_side_dish_name: Optional[str]
    most_consumed_side_dish_id: Optional[int]
    most_consumed_side_dish_name: Optional[str]


class StatisticsResponse(BaseModel):
    """Statistics page payload."""
    today: DailyStatisticResponse
    daily_statistics: List[DailyStatisticResponse]
    highlights: HighlightsResponse


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    message: str
    errors: Optional[dict[str, List[str]]] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    timestamp: datetime
