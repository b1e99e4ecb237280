"""
Catalog Service

Read access to the three menu tables and the startup seeding of the
default menu.
"""

import logging
from typing import Optional, Type, Union

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from colombo.models import MainDish, SideDish, Dessert

logger = logging.getLogger(__name__)

Dish = Union[MainDish, SideDish, Dessert]

DEFAULT_MENU: dict[Type[Dish], list[tuple[str, float]]] = {
    MainDish: [
        ("Chicken Fried Rice", 950.00),
        ("Seafood Kottu", 1200.00),
        ("Vegetable Biriyani", 850.00),
        ("Devilled Beef Noodles", 1100.00),
    ],
    SideDish: [
        ("Chicken Curry", 450.00),
        ("Dhal Tempered", 250.00),
        ("Pol Sambol", 150.00),
        ("Cashew Curry", 400.00),
    ],
    Dessert: [
        ("Watalappan", 300.00),
        ("Curd and Treacle", 350.00),
        ("Fruit Salad", 250.00),
    ],
}


async def list_dishes(db: AsyncSession, model: Type[Dish]) -> list[Dish]:
    """Return every dish of one course, ordered by id."""
    result = await db.execute(select(model).order_by(model.id))
    return list(result.scalars().all())


async def get_catalog(db: AsyncSession) -> dict[str, list[Dish]]:
    """Return the full menu keyed the way the order page expects it."""
    return {
        "main_dishes": await list_dishes(db, MainDish),
        "side_dishes": await list_dishes(db, SideDish),
        "desserts": await list_dishes(db, Dessert),
    }


async def get_dish(db: AsyncSession, model: Type[Dish], dish_id: Optional[int]) -> Optional[Dish]:
    if dish_id is None:
        return None
    return await db.get(model, dish_id)


async def seed_catalog(
    db: AsyncSession,
    menu: Optional[dict[Type[Dish], list[tuple[str, float]]]] = None,
) -> int:
    """
    Insert the default menu into catalog tables that are still empty.

    Tables that already hold rows are left alone, so this is safe to run
    on every startup.

    Returns:
        Number of dishes inserted
    """
    menu = menu or DEFAULT_MENU
    inserted = 0

    for model, dishes in menu.items():
        existing = (await db.execute(select(func.count(model.id)))).scalar() or 0
        if existing:
            continue
        db.add_all(model(name=name, price=price) for name, price in dishes)
        inserted += len(dishes)
        logger.info(f"Seeded {len(dishes)} rows into {model.__tablename__}")

    if inserted:
        await db.commit()

    return inserted
