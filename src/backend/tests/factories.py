"""
Test data factories for generating realistic test data.

Usage:
    customer = CustomerFactory.create()
    facility = FacilityFactory.create(customer_id=customer.id)
    facility = await save(db_session, facility)
"""

import uuid
from typing import Dict, Iterable, List, Optional
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from db import (
    ControlCategory,
    Customer,
    Facility,
    FacilityStatus,
    Order,
    OrderStatus,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
    Technician,
)


def _unique_suffix() -> str:
    """Generate a unique suffix for test data."""
    return uuid.uuid4().hex[:8]


def _category_values(categories: Optional[Iterable]) -> Optional[List[str]]:
    if categories is None:
        return None
    return [c.value if isinstance(c, ControlCategory) else str(c) for c in categories]


async def save(db_session: AsyncSession, record):
    """Add a record, commit and refresh it."""
    db_session.add(record)
    await db_session.commit()
    await db_session.refresh(record)
    return record


class CustomerFactory:
    """Factory for creating Customer instances."""

    @classmethod
    def create(
        cls,
        name: Optional[str] = None,
        customer_number: Optional[str] = None,
        hidden: bool = False,
    ) -> Customer:
        suffix = _unique_suffix()
        return Customer(
            id=uuid4(),
            name=name or f"Customer {suffix}",
            customer_number=customer_number or f"K-{suffix}",
            hidden=hidden,
        )


class TechnicianFactory:
    """Factory for creating Technician instances."""

    @classmethod
    def create(
        cls,
        name: Optional[str] = None,
        is_active: bool = True,
    ) -> Technician:
        suffix = _unique_suffix()
        name = name or f"Technician {suffix}"
        return Technician(
            id=uuid4(),
            name=name,
            email=f"{suffix}@brannservice.no",
            is_active=is_active,
        )


class FacilityFactory:
    """Factory for creating Facility instances."""

    @classmethod
    def create(
        cls,
        name: Optional[str] = None,
        customer_id: Optional[UUID] = None,
        categories: Optional[Iterable] = None,
        completion: Optional[Dict[str, bool]] = None,
        operator_status: Optional[FacilityStatus] = None,
        control_month: Optional[str] = "March",
        hidden: bool = False,
        address: Optional[str] = None,
    ) -> Facility:
        """Create a Facility; completion defaults to every category pending."""
        suffix = _unique_suffix()
        values = _category_values(categories)
        if values is None:
            values = [ControlCategory.FIRE_ALARM.value]
        if completion is None:
            completion = {c: False for c in values}

        return Facility(
            id=uuid4(),
            name=name or f"Facility {suffix}",
            address=address or f"Storgata {len(suffix)}, Oslo",
            customer_id=customer_id,
            categories=values,
            completion=completion,
            operator_status=operator_status,
            control_month=control_month,
            hidden=hidden,
        )


class OrderFactory:
    """Factory for creating Order instances."""

    @classmethod
    def create(
        cls,
        customer_id: Optional[UUID] = None,
        facility_id: Optional[UUID] = None,
        technician_id: Optional[UUID] = None,
        status: OrderStatus = OrderStatus.PENDING,
        work_type: str = "Annual fire alarm control",
        categories: Optional[Iterable] = None,
        order_number: Optional[str] = None,
    ) -> Order:
        suffix = _unique_suffix()
        return Order(
            id=uuid4(),
            order_number=order_number or f"O-{suffix}",
            work_type=work_type,
            customer_id=customer_id,
            facility_id=facility_id,
            technician_id=technician_id,
            categories=_category_values(categories),
            status=status,
            revision=0,
        )


class TaskFactory:
    """Factory for creating Task instances."""

    @classmethod
    def create(
        cls,
        task_type: TaskType = TaskType.INTERNAL,
        customer_id: Optional[UUID] = None,
        facility_id: Optional[UUID] = None,
        order_id: Optional[UUID] = None,
        technician_id: Optional[UUID] = None,
        status: TaskStatus = TaskStatus.NOT_STARTED,
        priority: TaskPriority = TaskPriority.MEDIUM,
        description: Optional[str] = None,
    ) -> Task:
        return Task(
            id=uuid4(),
            task_type=task_type,
            customer_id=customer_id,
            facility_id=facility_id,
            order_id=order_id,
            technician_id=technician_id,
            status=status,
            priority=priority,
            description=description or f"Follow-up {_unique_suffix()}",
        )

    @classmethod
    def create_invoice_task(cls, order: Order, technician_id: UUID, **kwargs) -> Task:
        """Create an invoice task referencing an order."""
        return cls.create(
            task_type=TaskType.INVOICE,
            customer_id=order.customer_id,
            facility_id=order.facility_id,
            order_id=order.id,
            technician_id=technician_id,
            priority=TaskPriority.HIGH,
            **kwargs,
        )


# Helper functions for common test scenarios

async def create_customer_with_dependents(
    db_session: AsyncSession,
    *,
    name: str,
    facilities: int = 0,
    active_orders: int = 0,
    completed_orders: int = 0,
    active_tasks: int = 0,
    done_tasks: int = 0,
) -> Customer:
    """Create a customer owning the given numbers of dependents."""
    customer = await save(db_session, CustomerFactory.create(name=name))

    facility_ids = []
    for _ in range(facilities):
        facility = await save(db_session, FacilityFactory.create(customer_id=customer.id))
        facility_ids.append(facility.id)

    facility_id = facility_ids[0] if facility_ids else None
    for _ in range(active_orders):
        await save(
            db_session,
            OrderFactory.create(
                customer_id=customer.id,
                facility_id=facility_id,
                status=OrderStatus.IN_PROGRESS,
            ),
        )
    for _ in range(completed_orders):
        await save(
            db_session,
            OrderFactory.create(
                customer_id=customer.id,
                facility_id=facility_id,
                status=OrderStatus.COMPLETED,
            ),
        )
    for _ in range(active_tasks):
        await save(db_session, TaskFactory.create(customer_id=customer.id))
    for _ in range(done_tasks):
        await save(
            db_session,
            TaskFactory.create(customer_id=customer.id, status=TaskStatus.DONE),
        )

    return customer
