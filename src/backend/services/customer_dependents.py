"""
Customer dependents.

A customer's dependents are its facilities, its active orders and its
active tasks. The same check decides whether a facility edit leaves the
previous owner orphaned and feeds the deactivation preview.
"""

from dataclasses import dataclass, field
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from crud import FacilityCRUD, OrderCRUD, TaskCRUD
from db import (
    ORDER_TERMINAL_STATUSES,
    TASK_TERMINAL_STATUSES,
    Facility,
    Order,
    Task,
)


@dataclass
class DependentsSnapshot:
    """Records referencing a customer, split into active and terminal."""

    customer_id: UUID
    facilities: List[Facility] = field(default_factory=list)
    active_orders: List[Order] = field(default_factory=list)
    terminal_orders: List[Order] = field(default_factory=list)
    active_tasks: List[Task] = field(default_factory=list)
    done_tasks: List[Task] = field(default_factory=list)

    @property
    def has_dependents(self) -> bool:
        return bool(self.facilities or self.active_orders or self.active_tasks)


async def collect(db: AsyncSession, customer_id: UUID) -> DependentsSnapshot:
    """Load every facility, order and task referencing the customer."""
    facilities = await FacilityCRUD.query(
        db, filters={"customer_id": customer_id}, order_by=FacilityCRUD.model.name
    )
    orders = await OrderCRUD.query(
        db, filters={"customer_id": customer_id}, order_by=OrderCRUD.model.created_at
    )
    tasks = await TaskCRUD.query(
        db, filters={"customer_id": customer_id}, order_by=TaskCRUD.model.created_at
    )

    return DependentsSnapshot(
        customer_id=customer_id,
        facilities=facilities,
        active_orders=[o for o in orders if o.status not in ORDER_TERMINAL_STATUSES],
        terminal_orders=[o for o in orders if o.status in ORDER_TERMINAL_STATUSES],
        active_tasks=[t for t in tasks if t.status not in TASK_TERMINAL_STATUSES],
        done_tasks=[t for t in tasks if t.status in TASK_TERMINAL_STATUSES],
    )


async def has_no_remaining_dependents(
    db: AsyncSession,
    customer_id: UUID,
) -> bool:
    """
    True when the customer has no facilities and no active orders or tasks.

    Args:
        db: Database session
        customer_id: Customer to check
    """
    if await FacilityCRUD.count(db, filters={"customer_id": customer_id}):
        return False

    if await OrderCRUD.count(
        db,
        filters={"customer_id": customer_id},
        exclude={"status": list(ORDER_TERMINAL_STATUSES)},
    ):
        return False

    active_tasks = await TaskCRUD.count(
        db,
        filters={"customer_id": customer_id},
        exclude={"status": list(TASK_TERMINAL_STATUSES)},
    )
    return active_tasks == 0
