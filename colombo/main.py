"""
FastAPI Application Entry Point

Colombo Restaurant ordering system.

Pages:
    - GET  /: Place an order (menu + flash messages)
    - POST /: Submit the order form
    - GET  /orders: All placed orders
    - GET  /statistics: Daily statistics and all-time highlights
    - GET  /statistics/export: Excel statistics report

API:
    - GET  /api/dishes: Menu
    - GET  /api/orders: List orders
    - POST /api/orders: Place an order
    - GET  /api/statistics: Statistics as JSON
    - GET  /health: System health check
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Depends, Request, Body
from fastapi.responses import JSONResponse, HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from starlette.concurrency import run_in_threadpool
from starlette.middleware.sessions import SessionMiddleware

from colombo.core.config import get_settings, setup_logging
from colombo.database import get_db, init_db, engine, async_session_maker
from colombo.schemas import (
    CatalogResponse,
    DailyStatisticResponse,
    ErrorResponse,
    HealthResponse,
    HighlightsResponse,
    OrderCreateResponse,
    OrderListResponse,
    OrderResponse,
    StatisticsResponse,
)
from colombo.services.catalog import get_catalog, seed_catalog
from colombo.services.orders import (
    OrderCreationError,
    OrderValidationError,
    list_orders,
    parse_order_form,
    submit_order,
)
from colombo.services.report_export import StatisticsReportExporter
from colombo.services.statistics import (
    compute_all_time_highlights,
    list_daily_statistics,
    recompute_daily_statistic,
)

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

# Template configuration
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

FLASH_KEY = "_flash"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()
    logger.info("Database initialized")

    if settings.seed_catalog:
        async with async_session_maker() as session:
            seeded = await seed_catalog(session)
        logger.info(f"Catalog ready ({seeded} dishes seeded)")

    missing = settings.validate_production_config()
    if missing:
        logger.warning(f"Missing production config: {missing}")

    logger.info("Application ready!")

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await engine.dispose()
    logger.info("Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Restaurant ordering with daily and all-time sales statistics.",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Signed cookie session, used for flash messages
app.add_middleware(SessionMiddleware, secret_key=settings.secret_key)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def flash(request: Request, **messages: Any) -> None:
    """Store messages for the next page render."""
    request.session[FLASH_KEY] = messages


def pop_flash(request: Request) -> dict[str, Any]:
    """Read and clear pending flash messages."""
    return request.session.pop(FLASH_KEY, None) or {}


def get_report_exporter() -> StatisticsReportExporter:
    return StatisticsReportExporter()


async def build_statistics(db: AsyncSession) -> dict[str, Any]:
    """Recompute today's row, then gather everything the statistics views show."""
    today = await recompute_daily_statistic(db)
    return {
        "today": today,
        "statistics": await list_daily_statistics(db),
        "highlights": await compute_all_time_highlights(db),
    }


# =============================================================================
# HEALTH ENDPOINT
# =============================================================================

@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db)
) -> HealthResponse:
    """Verify the database is reachable."""

    db_status = "healthy"
    try:
        await db.execute(select(func.now()))
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    return HealthResponse(
        status="operational" if db_status == "healthy" else "degraded",
        database=db_status,
        timestamp=datetime.now(),
    )


# =============================================================================
# PAGES
# =============================================================================

@app.get("/", response_class=HTMLResponse, tags=["Pages"])
async def order_page(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> HTMLResponse:
    """Render the place-order page with the current menu."""
    context = await get_catalog(db)
    context["flash"] = pop_flash(request)
    context["restaurant_name"] = settings.app_name
    return templates.TemplateResponse(request, "home.html", context)


@app.post("/", tags=["Pages"])
async def place_order(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> RedirectResponse:
    """Handle the order form and redirect back to it with the outcome."""
    form = await request.form()

    try:
        order_data = parse_order_form(form)
        await submit_order(db, order_data)
        flash(request, success="Order placed successfully!")

    except OrderValidationError as e:
        flash(request, errors=e.errors, old=dict(form))

    except OrderCreationError as e:
        flash(request, errors={"order": [e.message]}, error=e.error, old=dict(form))

    return RedirectResponse(url="/", status_code=303)


@app.get("/orders", response_class=HTMLResponse, tags=["Pages"])
async def orders_page(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> HTMLResponse:
    """Render every order with its dishes."""
    orders = await list_orders(db)
    return templates.TemplateResponse(
        request,
        "orders.html",
        {"orders": orders, "restaurant_name": settings.app_name},
    )


@app.get("/statistics", response_class=HTMLResponse, tags=["Pages"])
async def statistics_page(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> HTMLResponse:
    """Recompute today's statistic and render the statistics page."""
    context = await build_statistics(db)
    context["restaurant_name"] = settings.app_name
    return templates.TemplateResponse(request, "statistics.html", context)


@app.get("/statistics/export", tags=["Pages"])
async def export_statistics(
    db: AsyncSession = Depends(get_db),
    exporter: StatisticsReportExporter = Depends(get_report_exporter),
) -> Response:
    """Download the statistics report as an Excel workbook."""
    data = await build_statistics(db)

    # Lock wait and workbook write are blocking
    result = await run_in_threadpool(exporter.export, data["statistics"], data["highlights"])
    if not result["success"]:
        raise HTTPException(status_code=500, detail=result["message"])

    # Read the finished workbook now; a later export replaces the file
    content = await run_in_threadpool(exporter.path.read_bytes)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{exporter.path.name}"'},
    )


# =============================================================================
# JSON API
# =============================================================================

@app.get(
    "/api/dishes",
    response_model=CatalogResponse,
    tags=["Catalog"],
)
async def api_dishes(db: AsyncSession = Depends(get_db)) -> CatalogResponse:
    """Menu grouped by course."""
    return CatalogResponse.model_validate(await get_catalog(db), from_attributes=True)


@app.get(
    "/api/orders",
    response_model=OrderListResponse,
    tags=["Orders"],
    summary="List Orders",
)
async def api_list_orders(db: AsyncSession = Depends(get_db)) -> OrderListResponse:
    """Every order, oldest first, with dishes resolved."""
    orders = await list_orders(db)
    return OrderListResponse(
        total=len(orders),
        orders=[OrderResponse.model_validate(order) for order in orders],
    )


@app.post(
    "/api/orders",
    response_model=OrderCreateResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Place Order",
)
async def api_create_order(
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
) -> OrderCreateResponse:
    """Place an order from a JSON body with the same fields as the form."""
    try:
        order_data = parse_order_form(payload)
        order = await submit_order(db, order_data)

    except OrderValidationError as e:
        raise HTTPException(
            status_code=400,
            detail=ErrorResponse(message=str(e), errors=e.errors).model_dump(),
        )

    except OrderCreationError as e:
        raise HTTPException(
            status_code=500,
            detail=ErrorResponse(message=e.message, error=e.error).model_dump(),
        )

    return OrderCreateResponse(
        success=True,
        message="Order placed successfully!",
        order_id=order.id,
        total_price=order.total_price,
    )


@app.get(
    "/api/statistics",
    response_model=StatisticsResponse,
    tags=["Statistics"],
)
async def api_statistics(db: AsyncSession = Depends(get_db)) -> StatisticsResponse:
    """Recompute today's statistic and return all statistics."""
    data = await build_statistics(db)
    return StatisticsResponse(
        today=DailyStatisticResponse.model_validate(data["today"]),
        daily_statistics=[
            DailyStatisticResponse.model_validate(stat) for stat in data["statistics"]
        ],
        highlights=HighlightsResponse.model_validate(data["highlights"]),
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("colombo.main:app", host=settings.api_host, port=settings.api_port)
