"""
Routers package for Reports module
"""

from .dashboard import router as reports_router

__all__ = ["reports_router"]
