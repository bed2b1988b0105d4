"""
Error taxonomy for the workflow core.

- ValidationError: a precondition failed; raised before any write.
- StoreError: the persistence layer rejected or could not complete a call;
  earlier writes of the same workflow may already be durable.
- PartialCascadeFailure: per-record failures collected by the customer
  deactivation cascade, reported together with what succeeded.

None of these are process-fatal.
"""

from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

if TYPE_CHECKING:
    from schemas.workflow import StepOutcome


class WorkflowError(Exception):
    """Base exception for workflow errors."""

    def __init__(
        self,
        detail: str,
        *,
        operation: Optional[str] = None,
        entity: Optional[str] = None,
        entity_id: Optional[UUID] = None,
    ):
        super().__init__(detail)
        self.detail = detail
        self.operation = operation
        self.entity = entity
        self.entity_id = entity_id

    def __str__(self) -> str:
        context = []
        if self.operation:
            context.append(f"operation={self.operation}")
        if self.entity:
            context.append(f"{self.entity}={self.entity_id}")
        if not context:
            return self.detail
        return f"{self.detail} ({', '.join(context)})"

    def to_dict(self) -> dict:
        return {
            "detail": self.detail,
            "operation": self.operation,
            "entity": self.entity,
            "entityId": str(self.entity_id) if self.entity_id else None,
        }


class ValidationError(WorkflowError):
    """Raised when a precondition is not met. Guarantees zero side effects."""

    pass


class InvalidCategoryError(ValidationError):
    """Raised when a control category is not subscribed by the facility."""

    def __init__(self, facility_id: UUID, category: str, operation: str = "set_category_complete"):
        super().__init__(
            f"Category '{category}' is not subscribed by this facility",
            operation=operation,
            entity="facility",
            entity_id=facility_id,
        )
        self.category = category


class NotFoundError(ValidationError):
    """Raised when a referenced record does not exist."""

    def __init__(self, entity: str, entity_id: UUID, operation: Optional[str] = None):
        super().__init__(
            f"{entity.capitalize()} not found",
            operation=operation,
            entity=entity,
            entity_id=entity_id,
        )


class StoreError(WorkflowError):
    """Raised when the store rejected or could not complete a call."""

    pass


class ConcurrentModificationError(StoreError):
    """Raised when a compare-and-swap write found a newer revision."""

    def __init__(self, entity: str, entity_id: UUID, expected_revision: int, operation: Optional[str] = None):
        super().__init__(
            f"{entity.capitalize()} was modified concurrently "
            f"(expected revision {expected_revision})",
            operation=operation,
            entity=entity,
            entity_id=entity_id,
        )
        self.expected_revision = expected_revision


class PartialCascadeFailure(WorkflowError):
    """Per-record failures encountered while cascading a customer deactivation."""

    def __init__(
        self,
        customer_id: UUID,
        failures: List["StepOutcome"],
        succeeded: List["StepOutcome"],
    ):
        super().__init__(
            f"{len(failures)} dependent update(s) failed during deactivation",
            operation="deactivate_customer",
            entity="customer",
            entity_id=customer_id,
        )
        self.failures = failures
        self.succeeded = succeeded

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["failures"] = [f.model_dump(by_alias=True, mode="json") for f in self.failures]
        return payload
