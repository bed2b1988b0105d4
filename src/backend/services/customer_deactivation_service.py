"""
Customer deactivation cascade.

Hiding a customer applies the operator's chosen disposition to its
facilities, active orders and active tasks, one record at a time, then hides
the customer. Steps do not abort each other: every failure is collected in
the report and the customer is hidden regardless.
"""

import logging
from typing import Any, Awaitable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from core.decorators import log_database_operation
from core.exceptions import NotFoundError, ValidationError, WorkflowError
from core.logging_config import WorkflowLogger
from crud import CustomerCRUD, FacilityCRUD, OrderCRUD, TaskCRUD
from db import (
    Customer,
    DependentDisposition,
    FacilityDisposition,
    OrderStatus,
    TaskStatus,
)
from schemas.customer import CustomerListItem
from schemas.workflow import (
    CascadeReport,
    DeactivationPlan,
    DeactivationPreview,
    StepOutcome,
    StepResult,
    WorkflowStep,
)
from services import customer_dependents

logger = logging.getLogger(__name__)
workflow_logger = WorkflowLogger("customer")


class CustomerDeactivationService:
    """Service for soft-removing customers together with their dependents."""

    @staticmethod
    async def move_candidates(db: AsyncSession, customer_id: UUID) -> List[Customer]:
        """Visible customers other than the given one, ordered by name."""
        return await CustomerCRUD.list_customers(db, exclude_id=customer_id)

    @staticmethod
    async def preview(db: AsyncSession, customer_id: UUID) -> DeactivationPreview:
        """Counts of the records a deactivation would touch."""
        customer = await CustomerCRUD.read(db, customer_id)
        snapshot = await customer_dependents.collect(db, customer_id)
        candidates = await CustomerDeactivationService.move_candidates(db, customer_id)

        return DeactivationPreview(
            customer_id=customer.id,
            customer_name=customer.name,
            facility_count=len(snapshot.facilities),
            active_order_count=len(snapshot.active_orders),
            active_task_count=len(snapshot.active_tasks),
            terminal_order_count=len(snapshot.terminal_orders),
            done_task_count=len(snapshot.done_tasks),
            move_candidates=[CustomerListItem.model_validate(c) for c in candidates],
        )

    @staticmethod
    async def _validate_plan(
        db: AsyncSession, customer: Customer, plan: DeactivationPlan
    ) -> None:
        if customer.hidden:
            raise ValidationError(
                "Customer is already deactivated",
                operation="deactivate_customer",
                entity="customer",
                entity_id=customer.id,
            )

        if plan.facilities != FacilityDisposition.MOVE:
            return

        destination_id = plan.move_to_customer_id
        if destination_id is None:
            raise ValidationError(
                "Choose the customer the facilities should be moved to",
                operation="deactivate_customer",
                entity="customer",
                entity_id=customer.id,
            )
        if destination_id == customer.id:
            raise ValidationError(
                "Facilities cannot be moved to the customer being deactivated",
                operation="deactivate_customer",
                entity="customer",
                entity_id=customer.id,
            )

        destination = await CustomerCRUD.find_by_id(db, destination_id)
        if destination is None:
            raise NotFoundError("customer", destination_id, operation="deactivate_customer")
        if destination.hidden:
            raise ValidationError(
                "Facilities cannot be moved to a deactivated customer",
                operation="deactivate_customer",
                entity="customer",
                entity_id=destination_id,
            )

    @staticmethod
    async def _attempt(
        customer_id: UUID,
        step: WorkflowStep,
        entity: str,
        entity_id: UUID,
        action: str,
        write: Awaitable[Any],
    ) -> StepOutcome:
        try:
            await write
        except WorkflowError as e:
            workflow_logger.cascade_step_failed(customer_id, step.value, entity, entity_id, str(e))
            return StepOutcome(
                step=step,
                entity=entity,
                entity_id=entity_id,
                action=action,
                result=StepResult.FAILED,
                detail=str(e),
            )
        return StepOutcome(
            step=step,
            entity=entity,
            entity_id=entity_id,
            action=action,
            result=StepResult.SUCCEEDED,
        )

    @staticmethod
    @log_database_operation("customer deactivation", level="info")
    async def deactivate_customer(
        db: AsyncSession,
        customer_id: UUID,
        plan: DeactivationPlan,
        *,
        actor_id: Optional[UUID] = None,
    ) -> CascadeReport:
        """
        Deactivate a customer and apply the plan to its dependents.

        Steps, each record written on its own:
        1. facilities: keep_linked hides them, unlink clears the customer,
           move repoints them to plan.move_to_customer_id
        2. active orders: force_complete sets them completed
        3. active tasks: force_complete sets them done (no invoicing)
        4. the customer is hidden, even when earlier steps failed

        Completed/invoiced orders and done tasks are preserved untouched.

        Args:
            db: Database session
            customer_id: Customer to deactivate
            plan: Operator's dispositions
            actor_id: Operator performing the deactivation

        Returns:
            Report with one outcome per record; report.partial_failure()
            returns the collected dependent failures, if any

        Raises:
            NotFoundError: Customer or move destination does not exist
            ValidationError: Customer already hidden or move destination invalid
        """
        customer = await CustomerCRUD.read(db, customer_id)
        await CustomerDeactivationService._validate_plan(db, customer, plan)

        snapshot = await customer_dependents.collect(db, customer_id)
        # Plain values only: a failed write rolls the session back and expires loaded rows
        facility_ids = [f.id for f in snapshot.facilities]
        active_orders = [(o.id, o.revision) for o in snapshot.active_orders]
        terminal_order_ids = [o.id for o in snapshot.terminal_orders]
        active_task_ids = [t.id for t in snapshot.active_tasks]
        done_task_ids = [t.id for t in snapshot.done_tasks]

        report = CascadeReport(customer_id=customer_id, plan=plan)
        attempt = CustomerDeactivationService._attempt

        # Step 1: facilities
        if plan.facilities == FacilityDisposition.KEEP_LINKED:
            facility_patch = {"hidden": True}
        elif plan.facilities == FacilityDisposition.UNLINK:
            facility_patch = {"customer_id": None}
        else:
            facility_patch = {"customer_id": plan.move_to_customer_id}

        for facility_id in facility_ids:
            report.outcomes.append(
                await attempt(
                    customer_id,
                    WorkflowStep.FACILITIES,
                    "facility",
                    facility_id,
                    plan.facilities.value,
                    FacilityCRUD.write(
                        db, facility_id, facility_patch, actor_id=actor_id
                    ),
                )
            )

        # Step 2: orders
        for order_id, revision in active_orders:
            if plan.orders == DependentDisposition.FORCE_COMPLETE:
                report.outcomes.append(
                    await attempt(
                        customer_id,
                        WorkflowStep.ORDERS,
                        "order",
                        order_id,
                        plan.orders.value,
                        OrderCRUD.compare_and_set_status(
                            db, order_id, revision, OrderStatus.COMPLETED, actor_id=actor_id
                        ),
                    )
                )
            else:
                report.outcomes.append(
                    StepOutcome(
                        step=WorkflowStep.ORDERS,
                        entity="order",
                        entity_id=order_id,
                        action=plan.orders.value,
                        result=StepResult.SKIPPED,
                    )
                )
        for order_id in terminal_order_ids:
            report.outcomes.append(
                StepOutcome(
                    step=WorkflowStep.ORDERS,
                    entity="order",
                    entity_id=order_id,
                    action=plan.orders.value,
                    result=StepResult.PRESERVED,
                    detail="Order is already completed or invoiced",
                )
            )

        # Step 3: tasks
        for task_id in active_task_ids:
            if plan.tasks == DependentDisposition.FORCE_COMPLETE:
                report.outcomes.append(
                    await attempt(
                        customer_id,
                        WorkflowStep.TASKS,
                        "task",
                        task_id,
                        plan.tasks.value,
                        TaskCRUD.write(
                            db, task_id, {"status": TaskStatus.DONE}, actor_id=actor_id
                        ),
                    )
                )
            else:
                report.outcomes.append(
                    StepOutcome(
                        step=WorkflowStep.TASKS,
                        entity="task",
                        entity_id=task_id,
                        action=plan.tasks.value,
                        result=StepResult.SKIPPED,
                    )
                )
        for task_id in done_task_ids:
            report.outcomes.append(
                StepOutcome(
                    step=WorkflowStep.TASKS,
                    entity="task",
                    entity_id=task_id,
                    action=plan.tasks.value,
                    result=StepResult.PRESERVED,
                    detail="Task is already done",
                )
            )

        # Step 4: customer
        hide_outcome = await attempt(
            customer_id,
            WorkflowStep.CUSTOMER,
            "customer",
            customer_id,
            "hide",
            CustomerCRUD.write(db, customer_id, {"hidden": True}, actor_id=actor_id),
        )
        report.outcomes.append(hide_outcome)
        report.customer_hidden = not hide_outcome.failed

        counts = {result: 0 for result in StepResult}
        for outcome in report.outcomes:
            counts[outcome.result] += 1
        workflow_logger.customer_deactivated(
            customer_id,
            succeeded=counts[StepResult.SUCCEEDED],
            failed=counts[StepResult.FAILED],
            preserved=counts[StepResult.PRESERVED],
            actor_id=actor_id,
        )
        return report

    @staticmethod
    @log_database_operation("orphaned customer removal", level="info")
    async def delete_orphaned_customer(
        db: AsyncSession,
        customer_id: UUID,
        *,
        actor_id: Optional[UUID] = None,
    ) -> Customer:
        """
        Hide a customer that was reported as having no remaining dependents.

        The check is repeated, since dependents may have been added since
        the offer was made.

        Raises:
            ValidationError: The customer has dependents again
        """
        customer = await CustomerCRUD.read(db, customer_id)
        if customer.hidden:
            return customer

        if not await customer_dependents.has_no_remaining_dependents(db, customer_id):
            raise ValidationError(
                "Customer still has facilities or active orders or tasks",
                operation="delete_orphaned_customer",
                entity="customer",
                entity_id=customer_id,
            )

        customer = await CustomerCRUD.write(
            db, customer_id, {"hidden": True}, actor_id=actor_id
        )
        logger.info(
            f"Orphaned customer removed | Customer ID: {customer_id} | "
            f"Actor: {actor_id or 'system'}"
        )
        return customer
