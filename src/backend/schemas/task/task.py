"""
Task schemas for API validation and serialization.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from core.schema_base import HTTPSchemaModel, to_naive_utc
from db.enums import TaskPriority, TaskStatus, TaskType


class TaskCreate(HTTPSchemaModel):
    """Schema for creating a task."""
    task_type: TaskType
    customer_id: Optional[UUID] = None
    facility_id: Optional[UUID] = None
    order_id: Optional[UUID] = None
    technician_id: Optional[UUID] = Field(None, description="Assignee")
    status: TaskStatus = TaskStatus.NOT_STARTED
    priority: TaskPriority = TaskPriority.MEDIUM
    description: Optional[str] = Field(None, max_length=2000)
    due_date: Optional[datetime] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class TaskUpdate(HTTPSchemaModel):
    """Schema for updating a task. Only provided fields are written."""
    task_type: Optional[TaskType] = None
    technician_id: Optional[UUID] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    description: Optional[str] = Field(None, max_length=2000)
    due_date: Optional[datetime] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class TaskRead(HTTPSchemaModel):
    """Schema for reading task data."""
    id: UUID
    task_type: TaskType
    customer_id: Optional[UUID] = None
    facility_id: Optional[UUID] = None
    order_id: Optional[UUID] = None
    technician_id: Optional[UUID] = None
    status: TaskStatus
    priority: TaskPriority
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    updated_by: Optional[UUID] = None
