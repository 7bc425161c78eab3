"""
Services package for Reports module
"""

from .dashboard import DashboardReportService
from .revenue import RevenueReportService

__all__ = [
    "DashboardReportService",
    "RevenueReportService"
]
