"""
Statistics Report Verification Script

Checks the exported statistics workbook for consistency.
Run from project root after downloading /statistics/export:
    python scripts/verify.py [path/to/statistics.xlsx]
"""

import os
import sys
from datetime import datetime

import pandas as pd

from colombo.core.config import get_settings
from colombo.services.report_export import StatisticsReportExporter


def verify_report(path: str) -> bool:
    """Verify the statistics workbook written by the export endpoint."""

    print("=" * 60)
    print("STATISTICS REPORT VERIFICATION")
    print("=" * 60)
    print(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"File: {path}")
    print("=" * 60)

    if not os.path.exists(path):
        print("\nReport not found!")
        print("   Download it first: GET /statistics/export")
        return False

    try:
        daily = pd.read_excel(path, sheet_name=StatisticsReportExporter.DAILY_SHEET, engine="openpyxl")
        summary = pd.read_excel(path, sheet_name=StatisticsReportExporter.HIGHLIGHTS_SHEET, engine="openpyxl")
    except (OSError, ValueError) as e:
        print(f"\nCould not read report: {e}")
        return False

    ok = True

    missing = [c for c in StatisticsReportExporter.DAILY_COLUMNS if c not in daily.columns]
    if missing:
        print(f"\nMissing Columns: {missing}")
        ok = False
    else:
        print("\nAll required columns present")

    if "date" in daily.columns:
        duplicates = daily["date"].duplicated().sum()
        if duplicates:
            print(f"{duplicates} duplicate dates found!")
            ok = False
        else:
            print("One row per date")

    if "daily_sales_revenue" in daily.columns:
        negative = (daily["daily_sales_revenue"] < 0).sum()
        if negative:
            print(f"{negative} days with negative revenue!")
            ok = False
        print(f"\nREVENUE:")
        print(f"   Days: {len(daily)}")
        print(f"   Total: {daily['daily_sales_revenue'].sum():.2f}")

    print(f"\nALL-TIME HIGHLIGHTS:")
    print("-" * 60)
    print(summary.to_string(index=False))

    print("\n" + "=" * 60)
    print("VERIFICATION PASSED" if ok else "VERIFICATION FAILED")
    print("=" * 60)

    return ok


if __name__ == "__main__":
    report = sys.argv[1] if len(sys.argv) > 1 else str(get_settings().statistics_report_path)
    sys.exit(0 if verify_report(report) else 1)
