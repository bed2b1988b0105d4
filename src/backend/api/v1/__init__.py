"""
API v1 routes.
"""

from fastapi import APIRouter

from .endpoints import customers, facilities, orders, tasks, year_end

api_router = APIRouter()

api_router.include_router(customers.router, prefix="/customers", tags=["customers"])

api_router.include_router(facilities.router, prefix="/facilities", tags=["facilities"])

api_router.include_router(orders.router, prefix="/orders", tags=["orders"])

api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])

api_router.include_router(year_end.router, prefix="/year-end", tags=["year-end"])
