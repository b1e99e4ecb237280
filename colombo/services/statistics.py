"""
Statistics Service

Daily sales summaries and all-time dish popularity.

Popularity is always "highest order count first, lowest dish id on a
tie", so repeated runs over the same orders give the same answer.
"""

import logging
from dataclasses import dataclass, asdict
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

from sqlalchemy import select, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from colombo.models import Order, MainDish, SideDish, DailyStatistic
from colombo.services.catalog import get_dish

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass
class AllTimeHighlights:
    """
    All-time most popular dishes.

    Attributes:
        most_famous_main_dish_id: Most ordered main dish
        most_famous_side_dish_id: Most ordered side dish, over all orders
        most_consumed_side_dish_id: Most ordered side dish among orders
            of the most famous main dish
        *_name: Display names; "N/A" when the dish row is gone,
            None when there are no orders at all
    """
    most_famous_main_dish_id: Optional[int] = None
    most_famous_main_dish_name: Optional[str] = None
    most_famous_side_dish_id: Optional[int] = None
    most_famous_side_dish_name: Optional[str] = None
    most_consumed_side_dish_id: Optional[int] = None
    most_consumed_side_dish_name: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open ``[start, end)`` datetime range covering one calendar date."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


async def most_frequent(db: AsyncSession, column, *criteria) -> Optional[int]:
    """
    Return the value of ``column`` occurring in the most orders.

    Args:
        column: Order column to group by (e.g. ``Order.main_dish_id``)
        criteria: Optional WHERE clauses restricting the orders counted

    Returns:
        Winning value, lowest value first among equal counts; None when no
        order matches
    """
    order_count = func.count(Order.id).label("order_count")
    query = select(column, order_count)
    if criteria:
        query = query.where(*criteria)
    query = (
        query.group_by(column)
        .order_by(order_count.desc(), column.asc())
        .limit(1)
    )

    row = (await db.execute(query)).first()
    return row[0] if row else None


async def _dish_name(db: AsyncSession, model, dish_id: Optional[int]) -> Optional[str]:
    if dish_id is None:
        return None
    dish = await get_dish(db, model, dish_id)
    return dish.name if dish else NOT_AVAILABLE


def _upsert_statement(dialect_name: str, values: dict[str, Any]):
    # Settings only accept the backends listed here
    statement = UPSERT_DIALECTS[dialect_name](DailyStatistic).values(**values)
    return statement.on_conflict_do_update(
        index_elements=[DailyStatistic.date],
        set_={
            "daily_sales_revenue": statement.excluded.daily_sales_revenue,
            "most_famous_main_dish_id": statement.excluded.most_famous_main_dish_id,
            "most_famous_side_dish_id": statement.excluded.most_famous_side_dish_id,
        },
    )


async def recompute_daily_statistic(
    db: AsyncSession,
    day: Optional[date] = None,
) -> DailyStatistic:
    """
    Recompute and store the summary row for ``day`` (default: today).

    Revenue is the sum of that day's order totals (0 without orders);
    the most famous main and side dish are None without orders. The row
    is written with a single insert-on-conflict-update on ``date``, so
    repeated calls leave exactly one row with the latest values.
    """
    day = day or date.today()
    start, end = day_bounds(day)
    on_day = (Order.created_at >= start, Order.created_at < end)

    revenue_result = await db.execute(
        select(func.coalesce(func.sum(Order.total_price), 0.0)).where(*on_day)
    )
    daily_sales_revenue = round(float(revenue_result.scalar() or 0.0), 2)

    values = {
        "date": day,
        "daily_sales_revenue": daily_sales_revenue,
        "most_famous_main_dish_id": await most_frequent(db, Order.main_dish_id, *on_day),
        "most_famous_side_dish_id": await most_frequent(db, Order.side_dish_id, *on_day),
    }

    await db.execute(_upsert_statement(db.get_bind().dialect.name, values))
    await db.commit()

    logger.info(
        f"Daily statistic {day}: revenue={daily_sales_revenue:.2f} "
        f"main={values['most_famous_main_dish_id']} side={values['most_famous_side_dish_id']}"
    )

    result = await db.execute(
        select(DailyStatistic)
        .where(DailyStatistic.date == day)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def compute_all_time_highlights(db: AsyncSession) -> AllTimeHighlights:
    """
    Most famous main dish, most famous side dish, and the most consumed
    side dish among orders of that main dish.

    The conditional ranking runs as a second grouped count filtered to
    the winning main dish. With no orders every field stays None.
    """
    main_id = await most_frequent(db, Order.main_dish_id)
    if main_id is None:
        return AllTimeHighlights()

    side_id = await most_frequent(db, Order.side_dish_id)
    paired_side_id = await most_frequent(
        db, Order.side_dish_id, Order.main_dish_id == main_id
    )

    return AllTimeHighlights(
        most_famous_main_dish_id=main_id,
        most_famous_main_dish_name=await _dish_name(db, MainDish, main_id),
        most_famous_side_dish_id=side_id,
        most_famous_side_dish_name=await _dish_name(db, SideDish, side_id),
        most_consumed_side_dish_id=paired_side_id,
        most_consumed_side_dish_name=await _dish_name(db, SideDish, paired_side_id),
    )


async def list_daily_statistics(db: AsyncSession) -> list[DailyStatistic]:
    """Every stored daily statistic, oldest date first."""
    result = await db.execute(
        select(DailyStatistic)
        .options(
            selectinload(DailyStatistic.most_famous_main_dish),
            selectinload(DailyStatistic.most_famous_side_dish),
        )
        .order_by(DailyStatistic.date)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())
