"""
Order lifecycle.

Pending -> In progress -> Completed -> Invoiced. Operators may set any
status through the edit form except Invoiced, which is only reached when the
order's invoice task is marked done. Closing an order writes the status
first and creates the invoice task second; a failed task insert never
rolls back the status.

Every status write is a compare-and-swap on Order.revision.
"""

import logging
from datetime import timedelta
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.decorators import log_database_operation
from core.exceptions import (
    InvalidCategoryError,
    NotFoundError,
    StoreError,
    ValidationError,
    WorkflowError,
)
from core.logging_config import WorkflowLogger
from crud import FacilityCRUD, OrderCRUD, TechnicianCRUD
from db import (
    ORDER_TERMINAL_STATUSES,
    Order,
    OrderStatus,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
    utc_now,
)
from schemas.order import OrderCreate, OrderRead, OrderUpdate
from schemas.task import TaskCreate, TaskRead
from schemas.workflow import (
    OrderCompletionResult,
    OrderUpdateResult,
    StepOutcome,
    StepResult,
    WorkflowStep,
)
from services.task_service import TaskService

logger = logging.getLogger(__name__)
workflow_logger = WorkflowLogger("order")


class OrderLifecycleService:
    """Service governing order status progression and the invoice handoff."""

    @staticmethod
    def is_active(order: Order) -> bool:
        """Orders that are neither completed nor invoiced are active."""
        return order.status not in ORDER_TERMINAL_STATUSES

    @staticmethod
    async def _validate_categories(
        db: AsyncSession,
        facility_id: Optional[UUID],
        categories: Iterable,
        operation: str,
    ) -> List[str]:
        values = [c.value if hasattr(c, "value") else str(c) for c in categories]
        if not values:
            return values
        if facility_id is None:
            raise ValidationError(
                "Order categories require a facility",
                operation=operation,
                entity="order",
            )

        facility = await FacilityCRUD.read(db, facility_id)
        for value in values:
            if value not in (facility.categories or []):
                raise InvalidCategoryError(facility_id, value, operation=operation)
        return values

    @staticmethod
    async def _validate_completion(
        db: AsyncSession,
        order: Order,
        already_invoiced: bool,
        invoice_technician_id: Optional[UUID],
        operation: str,
    ) -> None:
        if order.status == OrderStatus.INVOICED:
            raise ValidationError(
                "Order is already invoiced",
                operation=operation,
                entity="order",
                entity_id=order.id,
            )

        if already_invoiced:
            return

        if invoice_technician_id is None:
            raise ValidationError(
                "A technician must be chosen for the invoice task when the order is not yet invoiced",
                operation=operation,
                entity="order",
                entity_id=order.id,
            )
        if await TechnicianCRUD.find_by_id(db, invoice_technician_id) is None:
            raise NotFoundError("technician", invoice_technician_id, operation=operation)

    @staticmethod
    @log_database_operation("order creation", level="debug")
    async def create_order(
        db: AsyncSession,
        order_data: OrderCreate,
        *,
        actor_id: Optional[UUID] = None,
    ) -> Order:
        """
        Create an order in pending status.

        Raises:
            NotFoundError: A referenced record does not exist
            InvalidCategoryError: A category is not subscribed by the facility
        """
        await TaskService.validate_references(
            db,
            operation="create_order",
            customer_id=order_data.customer_id,
            facility_id=order_data.facility_id,
            technician_id=order_data.technician_id,
        )

        data = order_data.model_dump()
        if order_data.categories is not None:
            data["categories"] = await OrderLifecycleService._validate_categories(
                db, order_data.facility_id, order_data.categories, "create_order"
            )

        order = await OrderCRUD.insert(
            db, Order(**data, status=OrderStatus.PENDING, revision=0, updated_by=actor_id)
        )
        logger.info(
            f"Order created | Order ID: {order.id} | Number: {order.order_number} | "
            f"Actor: {actor_id or 'system'}"
        )
        return order

    @staticmethod
    @log_database_operation("order completion", level="info")
    async def complete_order(
        db: AsyncSession,
        order_id: UUID,
        *,
        already_invoiced: bool,
        invoice_technician_id: Optional[UUID] = None,
        actor_id: Optional[UUID] = None,
    ) -> OrderCompletionResult:
        """
        Close an order and, unless it was invoiced elsewhere, create its invoice task.

        All preconditions are checked before the first write. The status write
        is committed before the task insert; if the insert fails the order
        stays completed and the failed step is reported in the result.

        Args:
            db: Database session
            order_id: Order to close
            already_invoiced: Operator's answer to "is the order invoiced?"
            invoice_technician_id: Assignee of the invoice task (required
                when already_invoiced is False)
            actor_id: Operator closing the order

        Returns:
            Order after the status write, the invoice task if created, and
            the outcome of each step

        Raises:
            NotFoundError: Order or technician does not exist
            ValidationError: Order is invoiced, or no technician was chosen
            ConcurrentModificationError: Another closer changed the order first
        """
        order = await OrderCRUD.read(db, order_id)
        await OrderLifecycleService._validate_completion(
            db, order, already_invoiced, invoice_technician_id, "complete_order"
        )

        customer_id = order.customer_id
        facility_id = order.facility_id
        work_type = order.work_type

        order = await OrderCRUD.compare_and_set_status(
            db, order_id, order.revision, OrderStatus.COMPLETED, actor_id=actor_id
        )
        order_read = OrderRead.model_validate(order)
        workflow_logger.order_completed(order_id, already_invoiced, order_read.revision, actor_id)

        steps = [
            StepOutcome(
                step=WorkflowStep.ORDER_STATUS,
                entity="order",
                entity_id=order_id,
                action="set_completed",
                result=StepResult.SUCCEEDED,
            )
        ]

        if already_invoiced:
            steps.append(
                StepOutcome(
                    step=WorkflowStep.INVOICE_TASK,
                    entity="task",
                    action="create_invoice_task",
                    result=StepResult.SKIPPED,
                    detail="Order was invoiced outside the system",
                )
            )
            return OrderCompletionResult(order=order_read, steps=steps)

        task_data = TaskCreate(
            task_type=TaskType.INVOICE,
            customer_id=customer_id,
            facility_id=facility_id,
            order_id=order_id,
            technician_id=invoice_technician_id,
            status=TaskStatus.NOT_STARTED,
            priority=TaskPriority.HIGH,
            description=f"Invoice for order: {work_type}",
            due_date=utc_now() + timedelta(days=settings.workflow.invoice_due_offset_days),
        )

        try:
            task: Task = await TaskService.create_task(db, task_data, actor_id=actor_id)
        except WorkflowError as e:
            workflow_logger.error_occurred("complete_order", "order", order_id, str(e))
            steps.append(
                StepOutcome(
                    step=WorkflowStep.INVOICE_TASK,
                    entity="task",
                    action="create_invoice_task",
                    result=StepResult.FAILED,
                    detail=str(e),
                )
            )
            return OrderCompletionResult(order=order_read, steps=steps)

        workflow_logger.invoice_task_created(order_id, task.id, invoice_technician_id)
        steps.append(
            StepOutcome(
                step=WorkflowStep.INVOICE_TASK,
                entity="task",
                entity_id=task.id,
                action="create_invoice_task",
                result=StepResult.SUCCEEDED,
            )
        )
        return OrderCompletionResult(
            order=order_read,
            invoice_task=TaskRead.model_validate(task),
            steps=steps,
        )

    @staticmethod
    @log_database_operation("order update", level="debug")
    async def update_order(
        db: AsyncSession,
        order_id: UUID,
        patch: OrderUpdate,
        *,
        actor_id: Optional[UUID] = None,
    ) -> OrderUpdateResult:
        """
        Apply an order edit.

        Setting the status to invoiced is rejected. Moving a non-completed
        order into completed requires patch.completion and is handed to
        complete_order after the other fields are written. Every other status
        change is a compare-and-swap write.

        Raises:
            ValidationError: Invoiced requested, missing completion decision,
                or invalid categories; raised before any write
        """
        order = await OrderCRUD.read(db, order_id)
        read_revision = order.revision

        changes = patch.model_dump(exclude_unset=True, exclude={"completion"})
        new_status = changes.pop("status", None)
        if new_status == order.status:
            new_status = None

        if new_status == OrderStatus.INVOICED:
            raise ValidationError(
                "Orders become invoiced only when their invoice task is done",
                operation="update_order",
                entity="order",
                entity_id=order_id,
            )

        closing = new_status == OrderStatus.COMPLETED
        completion = patch.completion
        if closing:
            if completion is None:
                raise ValidationError(
                    "Closing an order requires an invoicing decision",
                    operation="update_order",
                    entity="order",
                    entity_id=order_id,
                )
            await OrderLifecycleService._validate_completion(
                db,
                order,
                completion.already_invoiced,
                completion.invoice_technician_id,
                "update_order",
            )

        if changes.get("categories") is not None:
            changes["categories"] = await OrderLifecycleService._validate_categories(
                db, order.facility_id, changes["categories"], "update_order"
            )
        if changes.get("technician_id") is not None:
            await TaskService.validate_references(
                db, operation="update_order", technician_id=changes["technician_id"]
            )

        if changes:
            order = await OrderCRUD.write(db, order_id, changes, actor_id=actor_id)

        if closing:
            result = await OrderLifecycleService.complete_order(
                db,
                order_id,
                already_invoiced=completion.already_invoiced,
                invoice_technician_id=completion.invoice_technician_id,
                actor_id=actor_id,
            )
            return OrderUpdateResult(order=result.order, completion=result)

        if new_status is not None:
            order = await OrderCRUD.compare_and_set_status(
                db, order_id, read_revision, new_status, actor_id=actor_id
            )
            logger.info(
                f"Order status changed | Order ID: {order_id} | Status: {new_status.value} | "
                f"Actor: {actor_id or 'system'}"
            )

        return OrderUpdateResult(order=OrderRead.model_validate(order))

    @staticmethod
    async def on_task_done(
        db: AsyncSession,
        task: Task,
        previous_status: TaskStatus,
        *,
        actor_id: Optional[UUID] = None,
    ) -> Optional[StepOutcome]:
        """
        Advance a completed order to invoiced when its invoice task is done.

        Only a transition of an invoice task into done counts. Orders in
        any status other than completed are left alone. A failure is
        returned as a failed outcome; the task write stays in place.

        Returns:
            Outcome for the referenced order, or None when the task does
            not trigger anything
        """
        if task.task_type != TaskType.INVOICE or task.order_id is None:
            return None
        if task.status != TaskStatus.DONE or previous_status == TaskStatus.DONE:
            return None

        task_id = task.id
        order_id = task.order_id

        try:
            order = await OrderCRUD.find_by_id(db, order_id)
            if order is None:
                return StepOutcome(
                    step=WorkflowStep.ORDER_INVOICED,
                    entity="order",
                    entity_id=order_id,
                    action="set_invoiced",
                    result=StepResult.SKIPPED,
                    detail="Order no longer exists",
                )
            if order.status != OrderStatus.COMPLETED:
                return StepOutcome(
                    step=WorkflowStep.ORDER_INVOICED,
                    entity="order",
                    entity_id=order_id,
                    action="set_invoiced",
                    result=StepResult.SKIPPED,
                    detail=f"Order is {order.status.value}; only completed orders are invoiced",
                )

            await OrderCRUD.compare_and_set_status(
                db, order_id, order.revision, OrderStatus.INVOICED, actor_id=actor_id
            )
        except StoreError as e:
            workflow_logger.error_occurred("on_task_done", "order", order_id, str(e))
            return StepOutcome(
                step=WorkflowStep.ORDER_INVOICED,
                entity="order",
                entity_id=order_id,
                action="set_invoiced",
                result=StepResult.FAILED,
                detail=str(e),
            )

        workflow_logger.order_invoiced(order_id, task_id)
        return StepOutcome(
            step=WorkflowStep.ORDER_INVOICED,
            entity="order",
            entity_id=order_id,
            action="set_invoiced",
            result=StepResult.SUCCEEDED,
        )
