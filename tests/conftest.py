import os

# Must be set before colombo modules build the settings and engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SEED_CATALOG", "false")

from datetime import datetime

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from colombo.database import get_db, init_db
from colombo.main import app, get_report_exporter
from colombo.models import Dessert, MainDish, Order, SideDish
from colombo.services.report_export import StatisticsReportExporter


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def menu(db):
    """Two mains, two sides and one dessert with ids 1, 2 / 1, 2 / 1."""
    dishes = {
        "rice": MainDish(name="Chicken Fried Rice", price=10.00),
        "kottu": MainDish(name="Seafood Kottu", price=12.50),
        "curry": SideDish(name="Chicken Curry", price=3.00),
        "dhal": SideDish(name="Dhal Tempered", price=4.50),
        "watalappan": Dessert(name="Watalappan", price=2.25),
    }
    db.add_all(dishes.values())
    await db.commit()
    return dishes


@pytest.fixture
def add_order(db):
    """Insert an order row directly, with an explicit creation time."""

    async def _add(main, side, dessert=None, created_at=None, customer_name="Test Customer"):
        order = Order(
            customer_name=customer_name,
            main_dish_id=main.id,
            side_dish_id=side.id,
            dessert_id=dessert.id if dessert else None,
            total_price=main.price + side.price + (dessert.price if dessert else 0.0),
            created_at=created_at or datetime.now(),
        )
        db.add(order)
        await db.commit()
        return order

    return _add


@pytest.fixture
def report_path(tmp_path):
    return tmp_path / "reports" / "statistics.xlsx"


@pytest.fixture
async def client(session_maker, report_path):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_report_exporter] = lambda: StatisticsReportExporter(
        report_path, lock_timeout=5
    )

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c

    app.dependency_overrides.clear()
