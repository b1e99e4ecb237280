from datetime import date, datetime

import pandas as pd
from filelock import FileLock

from colombo.services.report_export import StatisticsReportExporter
from colombo.services.statistics import (
    AllTimeHighlights,
    compute_all_time_highlights,
    list_daily_statistics,
    recompute_daily_statistic,
)

DAY = date(2026, 3, 14)
NOON = datetime(2026, 3, 14, 12, 0)


async def test_export_writes_daily_and_highlight_sheets(db, menu, add_order, report_path):
    await add_order(menu["rice"], menu["curry"], created_at=NOON)
    await add_order(menu["rice"], menu["dhal"], created_at=NOON)
    await recompute_daily_statistic(db, DAY)

    exporter = StatisticsReportExporter(report_path, lock_timeout=5)
    result = exporter.export(
        await list_daily_statistics(db), await compute_all_time_highlights(db)
    )

    assert result["success"] is True
    assert result["rows"] == 1
    assert report_path.exists()

    daily = pd.read_excel(report_path, sheet_name=exporter.DAILY_SHEET, engine="openpyxl")
    assert list(daily.columns) == exporter.DAILY_COLUMNS
    assert daily.loc[0, "date"] == DAY.isoformat()
    assert daily.loc[0, "daily_sales_revenue"] == 13.00 + 14.50
    assert daily.loc[0, "most_famous_main_dish"] == "Chicken Fried Rice"
    assert daily.loc[0, "most_famous_side_dish"] == "Chicken Curry"

    summary = pd.read_excel(report_path, sheet_name=exporter.HIGHLIGHTS_SHEET, engine="openpyxl")
    assert summary["dish"].tolist() == ["Chicken Fried Rice", "Chicken Curry", "Chicken Curry"]


async def test_export_without_orders_uses_placeholders(db, menu, report_path):
    await recompute_daily_statistic(db, DAY)

    exporter = StatisticsReportExporter(report_path, lock_timeout=5)
    result = exporter.export(await list_daily_statistics(db), AllTimeHighlights())

    assert result["success"] is True
    daily = pd.read_excel(report_path, sheet_name=exporter.DAILY_SHEET, engine="openpyxl")
    assert daily.loc[0, "most_famous_main_dish"] == "N/A"
    summary = pd.read_excel(report_path, sheet_name=exporter.HIGHLIGHTS_SHEET, engine="openpyxl")
    assert summary["dish"].tolist() == ["N/A", "N/A", "N/A"]


def test_export_reports_lock_timeout(report_path):
    exporter = StatisticsReportExporter(report_path, lock_timeout=0)
    exporter._ensure_data_dir()

    with FileLock(str(exporter.lock_path)):
        result = exporter.export([], AllTimeHighlights())

    assert result["success"] is False
    assert result["message"] == "Lock timeout (0s)"
    assert not report_path.exists()


async def test_export_replaces_previous_report_in_one_step(db, menu, report_path):
    await recompute_daily_statistic(db, DAY)
    exporter = StatisticsReportExporter(report_path, lock_timeout=5)

    exporter.export(await list_daily_statistics(db), AllTimeHighlights())
    first = report_path.read_bytes()

    await recompute_daily_statistic(db, date(2026, 3, 15))
    result = exporter.export(await list_daily_statistics(db), AllTimeHighlights())

    assert result["rows"] == 2
    assert report_path.read_bytes() != first
    assert not exporter.tmp_path.exists()
