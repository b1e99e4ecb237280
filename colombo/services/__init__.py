"""
                        Services Module

Business logic shared by the HTML pages and the JSON API.

Services:
    - catalog: menu reads and default menu seeding
    - orders: order validation, pricing and persistence
    - statistics: daily summaries and all-time dish popularity
    - report_export: lock-protected Excel statistics report
"""

from colombo.services.report_export import StatisticsReportExporter

__all__ = ["StatisticsReportExporter"]
