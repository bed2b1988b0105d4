"""
Order schemas for API validation and serialization.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from core.schema_base import HTTPSchemaModel
from db.enums import ControlCategory, OrderStatus


class OrderCompletionRequest(HTTPSchemaModel):
    """
    Operator decision when closing an order.

    already_invoiced=False requires invoice_technician_id: the technician
    who receives the generated invoice task.
    """
    already_invoiced: bool
    invoice_technician_id: Optional[UUID] = None


class OrderCreate(HTTPSchemaModel):
    """Schema for creating an order. New orders start as pending."""
    order_number: str = Field(..., min_length=1, max_length=50)
    work_type: str = Field(..., min_length=1, max_length=200)
    customer_id: Optional[UUID] = None
    facility_id: Optional[UUID] = None
    technician_id: Optional[UUID] = None
    categories: Optional[List[ControlCategory]] = None
    comment: Optional[str] = None


class OrderUpdate(HTTPSchemaModel):
    """
    Schema for the order edit form.

    Moving the status into completed requires `completion`.
    """
    work_type: Optional[str] = Field(None, min_length=1, max_length=200)
    technician_id: Optional[UUID] = None
    categories: Optional[List[ControlCategory]] = None
    status: Optional[OrderStatus] = None
    comment: Optional[str] = None
    completion: Optional[OrderCompletionRequest] = None


class OrderRead(HTTPSchemaModel):
    """Schema for reading order data."""
    id: UUID
    order_number: str
    work_type: str
    customer_id: Optional[UUID] = None
    facility_id: Optional[UUID] = None
    technician_id: Optional[UUID] = None
    categories: Optional[List[ControlCategory]] = None
    status: OrderStatus
    comment: Optional[str] = None
    revision: int
    created_at: datetime
    updated_at: datetime
    updated_by: Optional[UUID] = None
