"""
SQLAlchemy Database Models

- Catalog tables: main dishes, side dishes, desserts
- Orders placed by customers (price snapshot at creation)
- One statistics row per calendar date
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, Float, DateTime, Date, ForeignKey
from sqlalchemy.orm import relationship

from colombo.database import Base


class DishMixin:
    """Columns shared by every catalog table."""
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)

    def __repr__(self):
        return f"<{type(self).__name__} #{self.id} - {self.name} - {self.price:.2f}>"


class MainDish(DishMixin, Base):
    __tablename__ = "main_dishes"


class SideDish(DishMixin, Base):
    __tablename__ = "side_dishes"


class Dessert(DishMixin, Base):
    __tablename__ = "desserts"


class Order(Base):
    """
    One placed order.

    ``total_price`` is computed once from the catalog prices at creation
    time and never recomputed, so later menu price changes leave
    historical orders untouched.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    customer_name = Column(String(255), nullable=False)

    # =========================================================================
    # CHOSEN DISHES
    # =========================================================================
    main_dish_id = Column(Integer, ForeignKey("main_dishes.id"), nullable=False, index=True)
    side_dish_id = Column(Integer, ForeignKey("side_dishes.id"), nullable=False, index=True)
    dessert_id = Column(Integer, ForeignKey("desserts.id"), nullable=True)

    main_dish = relationship(MainDish)
    side_dish = relationship(SideDish)
    dessert = relationship(Dessert)

    # =========================================================================
    # PRICING
    # =========================================================================
    total_price = Column(Float, nullable=False)

    # =========================================================================
    # TIMESTAMPS
    # =========================================================================
    # Server local time; daily statistics bucket by the local calendar date
    created_at = Column(DateTime, default=datetime.now, nullable=False, index=True)

    def __repr__(self):
        return f"<Order #{self.id} - {self.customer_name} - {self.total_price:.2f}>"


class DailyStatistic(Base):
    """
    Sales summary for one calendar date.

    Rows are written with an insert-on-conflict-update keyed by ``date``,
    so there is never more than one row per day.
    """
    __tablename__ = "daily_statistics"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    date = Column(Date, nullable=False, unique=True)
    daily_sales_revenue = Column(Float, nullable=False, default=0.0)

    most_famous_main_dish_id = Column(Integer, ForeignKey("main_dishes.id"), nullable=True)
    most_famous_side_dish_id = Column(Integer, ForeignKey("side_dishes.id"), nullable=True)

    most_famous_main_dish = relationship(MainDish)
    most_famous_side_dish = relationship(SideDish)

    def __repr__(self):
        return f"<DailyStatistic {self.date} - {self.daily_sales_revenue:.2f}>"
