"""
Database models for the operations console.

Customer, Facility, Order and Task are referenced by opaque UUIDs. Orders and
tasks hold references (never ownership) to customers and facilities; only a
facility owns its per-category completion flags.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.types import CHAR, TypeDecorator
from sqlmodel import Field, SQLModel

from db.enums import (
    FacilityStatus,
    OrderStatus,
    TaskPriority,
    TaskStatus,
    TaskType,
)


def utc_now():
    """
    Get current time in UTC (timezone-naive) for database storage.

    The API layer serializes these with a 'Z' suffix.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _enum_column(enum_cls, *, nullable: bool, default=None) -> Column:
    return Column(
        SAEnum(
            enum_cls,
            native_enum=False,
            length=32,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=nullable,
        default=default,
    )


class TableModel(SQLModel):
    """Base table model with common functionality."""

    pass


class UUIDField(TypeDecorator):
    """Platform-independent UUID type stored as 36-character text."""

    impl = CHAR(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, UUID):
            return value
        return UUID(value)


class Customer(TableModel, table=True):
    """Billable entity owning facilities, orders and tasks. Hidden = soft-deleted."""

    __tablename__ = "customers"

    id: Optional[UUID] = Field(
        default_factory=uuid4,
        sa_column=Column(UUIDField(), primary_key=True, nullable=False),
    )
    name: str = Field(
        sa_column=Column(String(200), nullable=False),
        description="Display name",
    )
    customer_number: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
        description="Accounting customer number",
    )
    hidden: bool = Field(
        default=False,
        sa_column=Column(Boolean, default=False, nullable=False),
        description="Soft-deleted customers are hidden from default listings",
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime, nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime, nullable=False),
    )
    updated_by: Optional[UUID] = Field(
        default=None,
        sa_column=Column(UUIDField(), nullable=True),
        description="Operator who made the last write; NULL for system writes",
    )

    __table_args__ = (
        Index("ix_customers_name", "name"),
        Index("ix_customers_hidden", "hidden"),
    )


class Technician(TableModel, table=True):
    """Technician who can be responsible for orders and assigned tasks."""

    __tablename__ = "technicians"

    id: Optional[UUID] = Field(
        default_factory=uuid4,
        sa_column=Column(UUIDField(), primary_key=True, nullable=False),
    )
    name: str = Field(sa_column=Column(String(200), nullable=False))
    email: Optional[str] = Field(
        default=None, sa_column=Column(String(200), nullable=True)
    )
    is_active: bool = Field(
        default=True,
        sa_column=Column(Boolean, default=True, nullable=False),
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime, nullable=False),
    )


class Facility(TableModel, table=True):
    """
    Physical site under service contract.

    categories is the subscribed set of ControlCategory values; completion
    maps each subscribed category to its "service complete" flag and never
    carries keys for unsubscribed categories. operator_status is set by
    operators independently of the flags.
    """

    __tablename__ = "facilities"

    id: Optional[UUID] = Field(
        default_factory=uuid4,
        sa_column=Column(UUIDField(), primary_key=True, nullable=False),
    )
    name: str = Field(sa_column=Column(String(200), nullable=False))
    address: Optional[str] = Field(
        default=None, sa_column=Column(String(300), nullable=True)
    )
    customer_id: Optional[UUID] = Field(
        default=None,
        sa_column=Column(UUIDField(), ForeignKey("customers.id"), nullable=True),
        description="Owning customer; cleared when the facility is unlinked",
    )
    categories: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="Subscribed control-service categories",
    )
    completion: Dict[str, bool] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
        description="Per-category service-complete flags",
    )
    operator_status: Optional[FacilityStatus] = Field(
        default=None,
        sa_column=_enum_column(FacilityStatus, nullable=True),
    )
    control_month: Optional[str] = Field(
        default=None,
        sa_column=Column(String(20), nullable=True),
        description="Month of the annual control; 'NA' marks non-contract facilities",
    )
    hidden: bool = Field(
        default=False,
        sa_column=Column(Boolean, default=False, nullable=False),
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime, nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime, nullable=False),
    )
    updated_by: Optional[UUID] = Field(
        default=None,
        sa_column=Column(UUIDField(), nullable=True),
        description="Operator who made the last write; NULL for system writes",
    )

    __table_args__ = (
        Index("ix_facilities_customer_id", "customer_id"),
        Index("ix_facilities_operator_status", "operator_status"),
    )


class Order(TableModel, table=True):
    """
    One instance of work performed against a facility.

    revision is incremented by every status write and is compared before
    each status change.
    """

    __tablename__ = "orders"

    id: Optional[UUID] = Field(
        default_factory=uuid4,
        sa_column=Column(UUIDField(), primary_key=True, nullable=False),
    )
    order_number: str = Field(sa_column=Column(String(50), nullable=False))
    work_type: str = Field(
        sa_column=Column(String(200), nullable=False),
        description="Kind of work, used in generated task descriptions",
    )
    customer_id: Optional[UUID] = Field(
        default=None,
        sa_column=Column(UUIDField(), ForeignKey("customers.id"), nullable=True),
    )
    facility_id: Optional[UUID] = Field(
        default=None,
        sa_column=Column(UUIDField(), ForeignKey("facilities.id"), nullable=True),
    )
    technician_id: Optional[UUID] = Field(
        default=None,
        sa_column=Column(UUIDField(), ForeignKey("technicians.id"), nullable=True),
    )
    categories: Optional[List[str]] = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Subset of the facility's categories covered by this order",
    )
    status: OrderStatus = Field(
        default=OrderStatus.PENDING,
        sa_column=_enum_column(OrderStatus, nullable=False, default=OrderStatus.PENDING),
    )
    comment: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    revision: int = Field(
        default=0,
        sa_column=Column(Integer, default=0, nullable=False),
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime, nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime, nullable=False),
    )
    updated_by: Optional[UUID] = Field(
        default=None,
        sa_column=Column(UUIDField(), nullable=True),
        description="Operator who made the last write; NULL for system writes",
    )

    __table_args__ = (
        Index("ix_orders_customer_id", "customer_id"),
        Index("ix_orders_facility_id", "facility_id"),
        Index("ix_orders_status", "status"),
    )


class Task(TableModel, table=True):
    """Follow-up unit of work. INVOICE tasks drive the billing handoff."""

    __tablename__ = "tasks"

    id: Optional[UUID] = Field(
        default_factory=uuid4,
        sa_column=Column(UUIDField(), primary_key=True, nullable=False),
    )
    task_type: TaskType = Field(
        sa_column=_enum_column(TaskType, nullable=False),
    )
    customer_id: Optional[UUID] = Field(
        default=None,
        sa_column=Column(UUIDField(), ForeignKey("customers.id"), nullable=True),
    )
    facility_id: Optional[UUID] = Field(
        default=None,
        sa_column=Column(UUIDField(), ForeignKey("facilities.id"), nullable=True),
    )
    order_id: Optional[UUID] = Field(
        default=None,
        sa_column=Column(UUIDField(), ForeignKey("orders.id"), nullable=True),
    )
    technician_id: Optional[UUID] = Field(
        default=None,
        sa_column=Column(UUIDField(), ForeignKey("technicians.id"), nullable=True),
        description="Assignee",
    )
    status: TaskStatus = Field(
        default=TaskStatus.NOT_STARTED,
        sa_column=_enum_column(TaskStatus, nullable=False, default=TaskStatus.NOT_STARTED),
    )
    priority: TaskPriority = Field(
        default=TaskPriority.MEDIUM,
        sa_column=_enum_column(TaskPriority, nullable=False, default=TaskPriority.MEDIUM),
    )
    description: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    due_date: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime, nullable=True)
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime, nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime, nullable=False),
    )
    updated_by: Optional[UUID] = Field(
        default=None,
        sa_column=Column(UUIDField(), nullable=True),
        description="Operator who made the last write; NULL for system writes",
    )

    __table_args__ = (
        Index("ix_tasks_customer_id", "customer_id"),
        Index("ix_tasks_order_id", "order_id"),
        Index("ix_tasks_status", "status"),
    )
