"""
Business logic services.
"""
from .customer_deactivation_service import CustomerDeactivationService
from .facility_completion_service import FacilityCompletionService
from .facility_portal_client import FacilityPortalClient
from .facility_service import FacilityService
from .order_lifecycle_service import OrderLifecycleService
from .task_service import TaskService
from .year_end_service import YearEndService

__all__ = [
    "CustomerDeactivationService",
    "FacilityCompletionService",
    "FacilityPortalClient",
    "FacilityService",
    "OrderLifecycleService",
    "TaskService",
    "YearEndService",
]
