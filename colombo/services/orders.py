"""
Order Service

Validates incoming orders against the catalog, snapshots the total price
and persists the order in a single transaction.
"""

import logging
from typing import Any, Mapping

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from colombo.models import Order, MainDish, SideDish, Dessert
from colombo.schemas import OrderCreate
from colombo.services.catalog import get_dish

logger = logging.getLogger(__name__)

ORDER_FAILED_MESSAGE = "Place order failed. Please try again."

FIELD_LABELS = {
    "name": "name",
    "main_dish": "main dish",
    "side_dish": "side dish",
    "dessert": "dessert",
}


class OrderValidationError(Exception):
    """The order request was rejected; ``errors`` maps field -> messages."""

    def __init__(self, errors: dict[str, list[str]]):
        super().__init__("The given data was invalid.")
        self.errors = errors


class OrderCreationError(Exception):
    """Persisting a valid order failed unexpectedly."""

    def __init__(self, error: str):
        super().__init__(ORDER_FAILED_MESSAGE)
        self.message = ORDER_FAILED_MESSAGE
        self.error = error

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message, "error": self.error}


def parse_order_form(data: Mapping[str, Any]) -> OrderCreate:
    """
    Build an ``OrderCreate`` from raw form or JSON data.

    Raises:
        OrderValidationError: With pydantic's messages keyed by field
    """
    try:
        return OrderCreate.model_validate(dict(data))
    except ValidationError as e:
        errors: dict[str, list[str]] = {}
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else "__all__"
            label = FIELD_LABELS.get(field, field)
            errors.setdefault(field, []).append(f"The {label} field: {err['msg']}")
        raise OrderValidationError(errors) from e


async def submit_order(db: AsyncSession, order_data: OrderCreate) -> Order:
    """
    Place an order.

    Every referenced dish must exist; the stored total is
    main + side + dessert (0 without dessert) at the current prices.

    Raises:
        OrderValidationError: Unknown dish id(s); nothing is written
        OrderCreationError: The insert failed; the transaction is rolled back
    """
    main_dish = await get_dish(db, MainDish, order_data.main_dish)
    side_dish = await get_dish(db, SideDish, order_data.side_dish)
    dessert = await get_dish(db, Dessert, order_data.dessert)

    errors: dict[str, list[str]] = {}
    if main_dish is None:
        errors["main_dish"] = ["The selected main dish is invalid."]
    if side_dish is None:
        errors["side_dish"] = ["The selected side dish is invalid."]
    if order_data.dessert is not None and dessert is None:
        errors["dessert"] = ["The selected dessert is invalid."]
    if errors:
        logger.info(f"Order rejected for {order_data.name!r}: {sorted(errors)}")
        raise OrderValidationError(errors)

    total_price = round(
        main_dish.price + side_dish.price + (dessert.price if dessert else 0.0), 2
    )

    new_order = Order(
        customer_name=order_data.name,
        main_dish_id=main_dish.id,
        side_dish_id=side_dish.id,
        dessert_id=dessert.id if dessert else None,
        total_price=total_price,
    )

    try:
        db.add(new_order)
        await db.commit()
        await db.refresh(new_order)
    except Exception as e:
        await db.rollback()
        logger.exception(f"Error creating order for {order_data.name!r}: {e}")
        raise OrderCreationError(str(e)) from e

    logger.info(f"Order #{new_order.id} placed by {new_order.customer_name} ({total_price:.2f})")
    return new_order


async def list_orders(db: AsyncSession) -> list[Order]:
    """All orders with their dishes loaded, oldest first."""
    result = await db.execute(
        select(Order)
        .options(
            selectinload(Order.main_dish),
            selectinload(Order.side_dish),
            selectinload(Order.dessert),
        )
        .order_by(Order.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())
