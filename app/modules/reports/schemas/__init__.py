"""
Pydantic schemas for Reports module

Response models for the dashboard endpoints (camelCase JSON).
"""

from typing import List
from uuid import UUID

from app.common.schemas import CamelModel, Money


class DashboardSummary(CamelModel):
    total_clients: int
    total_products: int
    inventory_value: Money
    low_stock_products: int
    total_invoices: int


class MonthlyRevenue(CamelModel):
    month: str
    revenue: Money


class DailyRevenue(CamelModel):
    date: str
    day: str
    revenue: Money


class WeeklyRevenue(CamelModel):
    week: str
    revenue: Money


class DailyWeeklyRevenue(CamelModel):
    daily: List[DailyRevenue]
    weekly: List[WeeklyRevenue]


class TopSellingProduct(CamelModel):
    product_id: UUID
    product_name: str
    total_quantity: int
    total_revenue: Money
