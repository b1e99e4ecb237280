"""
Statistics Report Export

Writes the daily statistics and all-time highlights to an Excel workbook.
A file lock guards the workbook so concurrent exports never interleave
writes, and each export is written to a temporary file that replaces the
workbook in one step, so readers never see a half-written report.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Optional

import pandas as pd
from filelock import FileLock, Timeout

from colombo.core.config import get_settings
from colombo.models import DailyStatistic
from colombo.services.statistics import AllTimeHighlights, NOT_AVAILABLE

logger = logging.getLogger(__name__)


class StatisticsReportExporter:
    """Lock-protected Excel writer for the statistics report."""

    DAILY_SHEET = "Daily statistics"
    HIGHLIGHTS_SHEET = "All-time highlights"

    DAILY_COLUMNS = [
        "date",
        "daily_sales_revenue",
        "most_famous_main_dish",
        "most_famous_side_dish",
    ]

    HIGHLIGHT_LABELS = {
        "most_famous_main_dish_name": "Most famous main dish",
        "most_famous_side_dish_name": "Most famous side dish",
        "most_consumed_side_dish_name": "Most consumed side dish with the most famous main dish",
    }

    def __init__(self, path: Optional[Path] = None, lock_timeout: Optional[int] = None):
        settings = get_settings()
        self.path = Path(path or settings.statistics_report_path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.tmp_path = self.path.with_name(f"{self.path.stem}.tmp{self.path.suffix}")
        self.lock_timeout = lock_timeout if lock_timeout is not None else settings.export_lock_timeout

    def _ensure_data_dir(self) -> None:
        """Create data directory if needed."""
        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {self.path.parent}")

    def build_daily_frame(self, statistics: Iterable[DailyStatistic]) -> pd.DataFrame:
        rows = [
            {
                "date": stat.date.isoformat(),
                "daily_sales_revenue": stat.daily_sales_revenue,
                "most_famous_main_dish": (
                    stat.most_famous_main_dish.name if stat.most_famous_main_dish else NOT_AVAILABLE
                ),
                "most_famous_side_dish": (
                    stat.most_famous_side_dish.name if stat.most_famous_side_dish else NOT_AVAILABLE
                ),
            }
            for stat in statistics
        ]
        return pd.DataFrame(rows, columns=self.DAILY_COLUMNS)

    def build_highlights_frame(self, highlights: AllTimeHighlights) -> pd.DataFrame:
        values = highlights.to_dict()
        return pd.DataFrame(
            [
                {"highlight": label, "dish": values[key] or NOT_AVAILABLE}
                for key, label in self.HIGHLIGHT_LABELS.items()
            ],
            columns=["highlight", "dish"],
        )

    def export(
        self,
        statistics: Iterable[DailyStatistic],
        highlights: AllTimeHighlights,
    ) -> dict[str, Any]:
        """Write the report, replacing any previous workbook."""
        self._ensure_data_dir()

        result = {
            "success": False,
            "message": "",
            "path": str(self.path),
            "rows": 0,
            "exported_at": None,
        }

        try:
            daily = self.build_daily_frame(statistics)
            summary = self.build_highlights_frame(highlights)

            with FileLock(str(self.lock_path), timeout=self.lock_timeout):
                logger.debug(f"Lock acquired for {self.path}")

                try:
                    with pd.ExcelWriter(self.tmp_path, engine="openpyxl") as writer:
                        daily.to_excel(writer, sheet_name=self.DAILY_SHEET, index=False)
                        summary.to_excel(writer, sheet_name=self.HIGHLIGHTS_SHEET, index=False)
                    os.replace(self.tmp_path, self.path)
                finally:
                    if self.tmp_path.exists():
                        self.tmp_path.unlink()

            logger.info(f"Statistics report exported ({len(daily)} days) to {self.path}")

            result["success"] = True
            result["message"] = f"Exported {len(daily)} daily statistics"
            result["rows"] = len(daily)
            result["exported_at"] = datetime.now().isoformat()

        except Timeout:
            result["message"] = f"Lock timeout ({self.lock_timeout}s)"
            logger.error(f"Lock timeout exporting {self.path}")

        except Exception as e:
            result["message"] = str(e)
            logger.exception(f"Error exporting statistics report to {self.path}")

        return result
