"""
Task service.

Task creation is shared by direct user action and by the order lifecycle
(invoice tasks). Marking an invoice task done hands over to the order
lifecycle, which may advance the order to invoiced.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from core.decorators import log_database_operation
from core.exceptions import NotFoundError
from crud import CustomerCRUD, FacilityCRUD, OrderCRUD, TaskCRUD, TechnicianCRUD
from db import Task, TaskStatus
from schemas.task import TaskCreate, TaskRead, TaskUpdate
from schemas.workflow import TaskUpdateResult

# Module-level logger using __name__
logger = logging.getLogger(__name__)


class TaskService:
    """Service for creating and updating tasks."""

    @staticmethod
    async def validate_references(
        db: AsyncSession,
        *,
        operation: str,
        customer_id: Optional[UUID] = None,
        facility_id: Optional[UUID] = None,
        order_id: Optional[UUID] = None,
        technician_id: Optional[UUID] = None,
    ) -> None:
        """
        Check that every given reference points at an existing record.

        Raises:
            NotFoundError: First missing reference
        """
        checks = (
            (CustomerCRUD, customer_id),
            (FacilityCRUD, facility_id),
            (OrderCRUD, order_id),
            (TechnicianCRUD, technician_id),
        )
        for crud, ref_id in checks:
            if ref_id is None:
                continue
            if await crud.find_by_id(db, ref_id) is None:
                raise NotFoundError(crud.entity_name, ref_id, operation=operation)

    @staticmethod
    @log_database_operation("task creation", level="debug")
    async def create_task(
        db: AsyncSession,
        task_data: TaskCreate,
        *,
        actor_id: Optional[UUID] = None,
    ) -> Task:
        """
        Create a task after validating its references.

        Args:
            db: Database session
            task_data: Task creation data
            actor_id: Operator creating the task

        Returns:
            Created task
        """
        await TaskService.validate_references(
            db,
            operation="create_task",
            customer_id=task_data.customer_id,
            facility_id=task_data.facility_id,
            order_id=task_data.order_id,
            technician_id=task_data.technician_id,
        )

        task = await TaskCRUD.insert(db, Task(**task_data.model_dump(), updated_by=actor_id))
        logger.info(
            f"Task created | Task ID: {task.id} | Type: {task.task_type.value} | "
            f"Order ID: {task.order_id} | Actor: {actor_id or 'system'}"
        )
        return task

    @staticmethod
    @log_database_operation("task update", level="debug")
    async def update_task(
        db: AsyncSession,
        task_id: UUID,
        patch: TaskUpdate,
        *,
        actor_id: Optional[UUID] = None,
    ) -> TaskUpdateResult:
        """
        Write a task patch; a transition into done notifies the order lifecycle.

        The task write is committed before the order is considered, and an
        order failure is reported in the result without undoing it.

        Args:
            db: Database session
            task_id: Task to update
            patch: Fields to change (unset fields are left alone)
            actor_id: Operator performing the update

        Returns:
            Updated task and, when triggered, the outcome for its order
        """
        from services.order_lifecycle_service import OrderLifecycleService

        task = await TaskCRUD.read(db, task_id)
        previous_status = task.status

        changes = patch.model_dump(exclude_unset=True)
        if changes.get("technician_id") is not None:
            await TaskService.validate_references(
                db, operation="update_task", technician_id=changes["technician_id"]
            )

        if changes:
            task = await TaskCRUD.write(db, task_id, changes, actor_id=actor_id)

        task_read = TaskRead.model_validate(task)

        order_outcome = None
        if task.status == TaskStatus.DONE and previous_status != TaskStatus.DONE:
            logger.debug(f"Task {task_id} marked done by {actor_id or 'system'}")
            order_outcome = await OrderLifecycleService.on_task_done(
                db, task, previous_status, actor_id=actor_id
            )

        return TaskUpdateResult(task=task_read, order_outcome=order_outcome)

    @staticmethod
    async def complete_task(
        db: AsyncSession,
        task_id: UUID,
        *,
        actor_id: Optional[UUID] = None,
    ) -> TaskUpdateResult:
        """Mark a task done."""
        return await TaskService.update_task(
            db, task_id, TaskUpdate(status=TaskStatus.DONE), actor_id=actor_id
        )
