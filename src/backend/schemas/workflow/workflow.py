"""
Workflow result schemas.

Multi-write workflows do not run in one transaction. Each write is recorded
as a StepOutcome so callers can see exactly which records were changed,
which were left alone and which failed.
"""
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import Field, computed_field

from core.exceptions import PartialCascadeFailure
from core.schema_base import HTTPSchemaModel
from db.enums import DependentDisposition, FacilityDisposition
from schemas.customer import CustomerListItem
from schemas.order import OrderRead
from schemas.task import TaskRead


class StepResult(str, Enum):
    """Outcome of a single workflow step."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PRESERVED = "preserved"
    SKIPPED = "skipped"


class WorkflowStep(str, Enum):
    """Named steps of the order completion and customer deactivation workflows."""
    ORDER_STATUS = "order_status"
    INVOICE_TASK = "invoice_task"
    ORDER_INVOICED = "order_invoiced"
    FACILITIES = "facilities"
    ORDERS = "orders"
    TASKS = "tasks"
    CUSTOMER = "customer"


CASCADE_DEPENDENT_STEPS = frozenset(
    {WorkflowStep.FACILITIES, WorkflowStep.ORDERS, WorkflowStep.TASKS}
)


class StepOutcome(HTTPSchemaModel):
    """One attempted (or deliberately skipped) write against one record."""
    step: WorkflowStep
    entity: str
    entity_id: Optional[UUID] = None
    action: str
    result: StepResult
    detail: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.result == StepResult.FAILED


class OrderCompletionResult(HTTPSchemaModel):
    """
    Result of closing an order.

    The status write is committed before the invoice task is attempted, so
    a failed task step leaves the order completed.
    """
    order: OrderRead
    invoice_task: Optional[TaskRead] = None
    steps: List[StepOutcome] = Field(default_factory=list)

    @computed_field
    @property
    def succeeded(self) -> bool:
        return not any(step.failed for step in self.steps)


class OrderUpdateResult(HTTPSchemaModel):
    """Result of an order edit; `completion` is set when the edit closed the order."""
    order: OrderRead
    completion: Optional[OrderCompletionResult] = None


class TaskUpdateResult(HTTPSchemaModel):
    """Updated task plus the effect on its order, if the update triggered one."""
    task: TaskRead
    order_outcome: Optional[StepOutcome] = None


class DeactivationPlan(HTTPSchemaModel):
    """Operator choices for the dependents of a customer being deactivated."""
    facilities: FacilityDisposition = FacilityDisposition.KEEP_LINKED
    orders: DependentDisposition = DependentDisposition.LEAVE_UNCHANGED
    tasks: DependentDisposition = DependentDisposition.LEAVE_UNCHANGED
    move_to_customer_id: Optional[UUID] = None


class DeactivationPreview(HTTPSchemaModel):
    """Dependent counts shown before a customer is deactivated."""
    customer_id: UUID
    customer_name: str
    facility_count: int
    active_order_count: int
    active_task_count: int
    terminal_order_count: int
    done_task_count: int
    move_candidates: List[CustomerListItem] = Field(default_factory=list)


class CascadeReport(HTTPSchemaModel):
    """Every outcome of a customer deactivation, in execution order."""
    customer_id: UUID
    plan: DeactivationPlan
    outcomes: List[StepOutcome] = Field(default_factory=list)
    customer_hidden: bool = False

    @computed_field
    @property
    def succeeded(self) -> bool:
        return not any(outcome.failed for outcome in self.outcomes)

    def failures(self) -> List[StepOutcome]:
        return [o for o in self.outcomes if o.failed]

    def partial_failure(self) -> Optional[PartialCascadeFailure]:
        """
        Failures of the dependent steps (facilities, orders, tasks) as one error.

        A failure to hide the customer is reported only as its own outcome.
        """
        dependent_failures = [
            o for o in self.outcomes
            if o.failed and o.step in CASCADE_DEPENDENT_STEPS
        ]
        if not dependent_failures:
            return None
        return PartialCascadeFailure(
            self.customer_id,
            failures=dependent_failures,
            succeeded=[o for o in self.outcomes if o.result == StepResult.SUCCEEDED],
        )
