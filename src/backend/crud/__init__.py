"""
CRUD layer for database operations.

This package contains all data access logic isolated from business logic.

Pattern:
    await FacilityCRUD.read(db, facility_id)
"""

from .base_repository import BaseCRUD
from .customer_crud import CustomerCRUD
from .facility_crud import FacilityCRUD
from .order_crud import OrderCRUD
from .task_crud import TaskCRUD
from .technician_crud import TechnicianCRUD

__all__ = [
    "BaseCRUD",
    "CustomerCRUD",
    "FacilityCRUD",
    "OrderCRUD",
    "TaskCRUD",
    "TechnicianCRUD",
]
