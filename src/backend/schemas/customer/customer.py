"""
Customer schemas for API validation and serialization.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from core.schema_base import HTTPSchemaModel


class CustomerRead(HTTPSchemaModel):
    """Schema for reading customer data."""
    id: UUID
    name: str
    customer_number: Optional[str] = None
    hidden: bool
    created_at: datetime
    updated_at: datetime
    updated_by: Optional[UUID] = None


class CustomerListItem(HTTPSchemaModel):
    """Lightweight schema for customer pickers."""
    id: UUID
    name: str
    customer_number: Optional[str] = None
