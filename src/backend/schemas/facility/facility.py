"""
Facility schemas for API validation and serialization.
"""
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from core.schema_base import HTTPSchemaModel
from db.enums import ControlCategory, FacilityStatus


class CompletionSummary(HTTPSchemaModel):
    """Per-category completion rollup of a facility ("N of M categories complete")."""
    completed: int = Field(..., ge=0, description="Subscribed categories marked complete")
    total: int = Field(..., ge=0, description="Number of subscribed categories")
    pending_categories: List[ControlCategory] = Field(default_factory=list)
    is_fully_complete: bool
    label: str


class FacilityCreate(HTTPSchemaModel):
    """Schema for creating a facility."""
    name: str = Field(..., min_length=1, max_length=200)
    address: Optional[str] = Field(None, max_length=300)
    customer_id: Optional[UUID] = None
    categories: List[ControlCategory] = Field(default_factory=list)
    operator_status: Optional[FacilityStatus] = None
    control_month: Optional[str] = Field(None, max_length=20)

    @field_validator("categories")
    @classmethod
    def dedupe_categories(cls, v: List[ControlCategory]) -> List[ControlCategory]:
        """Drop repeated categories, keeping the first occurrence."""
        return list(dict.fromkeys(v))


class CategoryCompletionUpdate(HTTPSchemaModel):
    """Body for setting one category's service-complete flag."""
    complete: bool


class OperatorStatusUpdate(HTTPSchemaModel):
    """Body for setting the operator status. None clears it."""
    operator_status: Optional[FacilityStatus] = None


class FacilityCustomerUpdate(HTTPSchemaModel):
    """Body for changing the facility's owning customer. None unlinks it."""
    customer_id: Optional[UUID] = None


class FacilityRead(HTTPSchemaModel):
    """
    Schema for reading facility data.

    operator_status is stored; completion_summary is computed from the flags.
    status_conflict is true when the two disagree.
    """
    id: UUID
    name: str
    address: Optional[str] = None
    customer_id: Optional[UUID] = None
    categories: List[ControlCategory]
    completion: Dict[str, bool]
    operator_status: Optional[FacilityStatus] = None
    control_month: Optional[str] = None
    hidden: bool
    completion_summary: CompletionSummary
    status_conflict: bool = False
    created_at: datetime
    updated_at: datetime
    updated_by: Optional[UUID] = None


class PortalSyncResult(HTTPSchemaModel):
    """Outcome of notifying the facility portal about a new facility."""
    attempted: bool
    succeeded: bool = False
    status_code: Optional[int] = None
    detail: Optional[str] = None


class FacilityCreateResult(HTTPSchemaModel):
    """Created facility together with the portal notification outcome."""
    facility: FacilityRead
    portal_sync: PortalSyncResult


class CustomerChangeResult(HTTPSchemaModel):
    """
    Result of changing a facility's owning customer.

    orphaned_customer_id is set when the previous owner has no facilities
    and no active orders or tasks left; the caller may offer to remove it.
    """
    facility: FacilityRead
    previous_customer_id: Optional[UUID] = None
    orphaned_customer_id: Optional[UUID] = None
