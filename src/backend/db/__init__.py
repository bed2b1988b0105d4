"""
Database models using SQLModel.

Customer, Technician, Facility, Order and Task tables plus the enums they use.
"""
from .enums import (
    ControlCategory,
    DependentDisposition,
    FacilityDisposition,
    FacilityStatus,
    ORDER_TERMINAL_STATUSES,
    OrderStatus,
    TASK_TERMINAL_STATUSES,
    TaskPriority,
    TaskStatus,
    TaskType,
)
from .models import (
    Customer,
    Facility,
    Order,
    TableModel,
    Task,
    Technician,
    UUIDField,
    utc_now,
)

__all__ = [
    "ControlCategory",
    "DependentDisposition",
    "FacilityDisposition",
    "FacilityStatus",
    "ORDER_TERMINAL_STATUSES",
    "OrderStatus",
    "TASK_TERMINAL_STATUSES",
    "TaskPriority",
    "TaskStatus",
    "TaskType",
    "Customer",
    "Facility",
    "Order",
    "TableModel",
    "Task",
    "Technician",
    "UUIDField",
    "utc_now",
]
