"""
Enums for database models.

These replace lookup tables that:
- Have a fixed, small set of values
- Are never modified at runtime
- Don't require admin management

All are str enums persisted by value.
"""
from enum import Enum


class ControlCategory(str, Enum):
    """
    Control-service categories a facility can subscribe to.

    Closed set. Used by Facility.categories, Facility.completion keys and
    Order.categories.
    """
    FIRE_ALARM = "fire_alarm"
    EMERGENCY_LIGHTING = "emergency_lighting"
    EXTINGUISHING_EQUIPMENT = "extinguishing_equipment"
    SMOKE_VENTS = "smoke_vents"
    EXTERNAL = "external"


class FacilityStatus(str, Enum):
    """
    Operator-set facility status.

    Stored separately from the completion flags; a blank (NULL) status means
    the operator has not picked one yet (e.g. after the year-end reset).
    """
    NOT_STARTED = "not_started"
    COMPLETED = "completed"
    PLANNED = "planned"
    POSTPONED = "postponed"
    TERMINATED = "terminated"


class OrderStatus(str, Enum):
    """
    Order pipeline status.

    INVOICED is only reachable from COMPLETED when the order's invoice task
    is marked done.
    """
    NEW = "new"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    INVOICED = "invoiced"


ORDER_TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.INVOICED})


class TaskStatus(str, Enum):
    """Task status."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    DONE = "done"


TASK_TERMINAL_STATUSES = frozenset({TaskStatus.DONE})


class TaskPriority(str, Enum):
    """Task priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskType(str, Enum):
    """
    Task type tag.

    INVOICE drives the billing handoff of a completed order; the other
    values are informational.
    """
    INVOICE = "invoice"
    ACCOUNTING = "accounting"
    INTERNAL = "internal"
    PURCHASE = "purchase"
    SITE_SURVEY = "site_survey"
    REGISTRATION = "registration"
    DOCUMENTATION = "documentation"
    FOLLOW_UP = "follow_up"


class FacilityDisposition(str, Enum):
    """What happens to a customer's facilities when the customer is deactivated."""
    KEEP_LINKED = "keep_linked"
    UNLINK = "unlink"
    MOVE = "move"


class DependentDisposition(str, Enum):
    """What happens to a customer's active orders or tasks when it is deactivated."""
    LEAVE_UNCHANGED = "leave_unchanged"
    FORCE_COMPLETE = "force_complete"
