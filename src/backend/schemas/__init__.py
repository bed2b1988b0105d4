"""
Schemas package for API validation and serialization.

These complement the SQLModel tables with API-specific shapes: create and
update payloads, read models with computed fields, and workflow results.
"""
from .customer import CustomerListItem, CustomerRead
from .facility import (CategoryCompletionUpdate, CompletionSummary,
                       CustomerChangeResult, FacilityCreate,
                       FacilityCreateResult, FacilityCustomerUpdate,
                       FacilityRead, OperatorStatusUpdate, PortalSyncResult)
from .order import OrderCompletionRequest, OrderCreate, OrderRead, OrderUpdate
from .task import TaskCreate, TaskRead, TaskUpdate
from .workflow import (CascadeReport, DeactivationPlan, DeactivationPreview,
                       OrderCompletionResult, OrderUpdateResult, StepOutcome,
                       StepResult, TaskUpdateResult, WorkflowStep)
from .year_end import YearEndResetResult, YearEndSummary

__all__ = [
    # Customer
    "CustomerRead",
    "CustomerListItem",
    # Facility
    "CategoryCompletionUpdate",
    "CompletionSummary",
    "CustomerChangeResult",
    "FacilityCreate",
    "FacilityCreateResult",
    "FacilityCustomerUpdate",
    "FacilityRead",
    "OperatorStatusUpdate",
    "PortalSyncResult",
    # Order
    "OrderCompletionRequest",
    "OrderCreate",
    "OrderUpdate",
    "OrderRead",
    # Task
    "TaskCreate",
    "TaskUpdate",
    "TaskRead",
    # Workflow results
    "CascadeReport",
    "DeactivationPlan",
    "DeactivationPreview",
    "OrderCompletionResult",
    "OrderUpdateResult",
    "StepOutcome",
    "StepResult",
    "TaskUpdateResult",
    "WorkflowStep",
    # Year end
    "YearEndResetResult",
    "YearEndSummary",
]
