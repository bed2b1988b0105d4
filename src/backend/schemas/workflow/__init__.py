"""Workflow result schemas package."""
from schemas.facility import CompletionSummary, CustomerChangeResult

from .workflow import (CASCADE_DEPENDENT_STEPS, CascadeReport,
                       DeactivationPlan, DeactivationPreview,
                       OrderCompletionResult, OrderUpdateResult, StepOutcome,
                       StepResult, TaskUpdateResult, WorkflowStep)

__all__ = [
    "CASCADE_DEPENDENT_STEPS",
    "CascadeReport",
    "CompletionSummary",
    "CustomerChangeResult",
    "DeactivationPlan",
    "DeactivationPreview",
    "OrderCompletionResult",
    "OrderUpdateResult",
    "StepOutcome",
    "StepResult",
    "TaskUpdateResult",
    "WorkflowStep",
]
