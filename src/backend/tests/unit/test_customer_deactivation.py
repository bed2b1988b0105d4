"""
Unit tests for customer deactivation and orphan handling.

Tests:
- Dependents check (facilities, active orders, active tasks)
- Deactivation preview and move candidates
- Facility dispositions: keep linked, unlink, move
- Force-completing active orders and tasks, terminal records preserved
- Per-record failures collected without aborting the cascade
- Removal of an orphaned customer
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from core.exceptions import (
    NotFoundError,
    PartialCascadeFailure,
    StoreError,
    ValidationError,
)
from crud import CustomerCRUD, FacilityCRUD, OrderCRUD, TaskCRUD
from db import (
    DependentDisposition,
    FacilityDisposition,
    OrderStatus,
    TaskStatus,
)
from schemas.workflow import DeactivationPlan, StepResult, WorkflowStep
from services import customer_dependents
from services.customer_deactivation_service import CustomerDeactivationService
from tests.factories import (
    CustomerFactory,
    FacilityFactory,
    OrderFactory,
    TaskFactory,
    create_customer_with_dependents,
    save,
)


class TestCustomerDependents:
    """Tests for the remaining-dependents check."""

    @pytest.mark.asyncio
    async def test_customer_without_dependents(self, db_session, sample_customer):
        assert await customer_dependents.has_no_remaining_dependents(
            db_session, sample_customer.id
        )

    @pytest.mark.asyncio
    async def test_facility_counts_as_dependent(self, db_session, sample_facility):
        customer_id = sample_facility.customer_id

        assert not await customer_dependents.has_no_remaining_dependents(db_session, customer_id)

    @pytest.mark.asyncio
    async def test_terminal_orders_and_done_tasks_do_not_count(self, db_session):
        customer = await create_customer_with_dependents(
            db_session, name="Bergen Eiendom", completed_orders=2, done_tasks=1
        )

        assert await customer_dependents.has_no_remaining_dependents(db_session, customer.id)

    @pytest.mark.asyncio
    async def test_active_task_counts_as_dependent(self, db_session):
        customer = await create_customer_with_dependents(
            db_session, name="Bergen Eiendom", active_tasks=1
        )

        assert not await customer_dependents.has_no_remaining_dependents(
            db_session, customer.id
        )

    @pytest.mark.asyncio
    async def test_collect_splits_active_and_terminal(self, db_session):
        customer = await create_customer_with_dependents(
            db_session,
            name="Bergen Eiendom",
            facilities=1,
            active_orders=2,
            completed_orders=1,
            active_tasks=1,
            done_tasks=3,
        )

        snapshot = await customer_dependents.collect(db_session, customer.id)

        assert len(snapshot.facilities) == 1
        assert len(snapshot.active_orders) == 2
        assert len(snapshot.terminal_orders) == 1
        assert len(snapshot.active_tasks) == 1
        assert len(snapshot.done_tasks) == 3
        assert snapshot.has_dependents is True


class TestDeactivationPreview:
    """Tests for the deactivation dialog data."""

    @pytest.mark.asyncio
    async def test_preview_counts(self, db_session, other_customer):
        customer = await create_customer_with_dependents(
            db_session,
            name="Nordbygg AS",
            facilities=2,
            active_orders=1,
            completed_orders=1,
            active_tasks=2,
        )
        await save(db_session, CustomerFactory.create(name="Skjult AS", hidden=True))

        preview = await CustomerDeactivationService.preview(db_session, customer.id)

        assert preview.customer_name == "Nordbygg AS"
        assert preview.facility_count == 2
        assert preview.active_order_count == 1
        assert preview.terminal_order_count == 1
        assert preview.active_task_count == 2
        assert preview.done_task_count == 0
        assert [c.id for c in preview.move_candidates] == [other_customer.id]


class TestDeactivateCustomer:
    """Tests for the deactivation cascade."""

    @pytest.mark.asyncio
    async def test_unlink_and_force_complete(self, db_session):
        """Nordbygg AS: facility unlinked, pending order completed, customer hidden."""
        customer = await save(db_session, CustomerFactory.create(name="Nordbygg AS"))
        facility = await save(
            db_session,
            FacilityFactory.create(name="Nordbygg Kjeller", customer_id=customer.id),
        )
        order = await save(
            db_session,
            OrderFactory.create(
                customer_id=customer.id,
                facility_id=facility.id,
                status=OrderStatus.PENDING,
            ),
        )

        report = await CustomerDeactivationService.deactivate_customer(
            db_session,
            customer.id,
            DeactivationPlan(
                facilities=FacilityDisposition.UNLINK,
                orders=DependentDisposition.FORCE_COMPLETE,
            ),
        )

        assert report.succeeded is True
        assert report.customer_hidden is True
        assert report.partial_failure() is None

        stored_facility = await FacilityCRUD.read(db_session, facility.id, refresh=True)
        assert stored_facility.customer_id is None
        stored_order = await OrderCRUD.read(db_session, order.id, refresh=True)
        assert stored_order.status == OrderStatus.COMPLETED
        stored_customer = await CustomerCRUD.read(db_session, customer.id, refresh=True)
        assert stored_customer.hidden is True

    @pytest.mark.asyncio
    async def test_move_facilities_preserves_invoiced_order(self, db_session):
        """Sameiet Lia: both facilities repointed, invoiced order untouched."""
        customer = await save(db_session, CustomerFactory.create(name="Sameiet Lia"))
        destination = await save(db_session, CustomerFactory.create(name="Sameiet Lia 2"))
        facilities = [
            await save(db_session, FacilityFactory.create(name=name, customer_id=customer.id))
            for name in ("Lia Blokk A", "Lia Blokk B")
        ]
        order = await save(
            db_session,
            OrderFactory.create(customer_id=customer.id, status=OrderStatus.INVOICED),
        )

        report = await CustomerDeactivationService.deactivate_customer(
            db_session,
            customer.id,
            DeactivationPlan(
                facilities=FacilityDisposition.MOVE,
                orders=DependentDisposition.FORCE_COMPLETE,
                move_to_customer_id=destination.id,
            ),
        )

        assert report.succeeded is True
        for facility in facilities:
            stored = await FacilityCRUD.read(db_session, facility.id, refresh=True)
            assert stored.customer_id == destination.id

        stored_order = await OrderCRUD.read(db_session, order.id, refresh=True)
        assert stored_order.status == OrderStatus.INVOICED
        assert stored_order.revision == 0

        order_outcomes = [o for o in report.outcomes if o.step == WorkflowStep.ORDERS]
        assert [o.result for o in order_outcomes] == [StepResult.PRESERVED]

    @pytest.mark.asyncio
    async def test_keep_linked_hides_facilities(self, db_session):
        customer = await create_customer_with_dependents(
            db_session, name="Nordbygg AS", facilities=2
        )

        await CustomerDeactivationService.deactivate_customer(
            db_session, customer.id, DeactivationPlan()
        )

        facilities = await FacilityCRUD.query(db_session, filters={"customer_id": customer.id})
        assert len(facilities) == 2
        assert all(f.hidden for f in facilities)

    @pytest.mark.asyncio
    async def test_actor_recorded_on_every_write(self, db_session):
        customer = await create_customer_with_dependents(
            db_session, name="Nordbygg AS", facilities=1, active_orders=1, active_tasks=1
        )
        actor_id = uuid4()

        await CustomerDeactivationService.deactivate_customer(
            db_session,
            customer.id,
            DeactivationPlan(
                orders=DependentDisposition.FORCE_COMPLETE,
                tasks=DependentDisposition.FORCE_COMPLETE,
            ),
            actor_id=actor_id,
        )

        filters = {"customer_id": customer.id}
        records = [
            await CustomerCRUD.read(db_session, customer.id, refresh=True),
            *await FacilityCRUD.query(db_session, filters=filters),
            *await OrderCRUD.query(db_session, filters=filters),
            *await TaskCRUD.query(db_session, filters=filters),
        ]
        assert len(records) == 4
        assert all(r.updated_by == actor_id for r in records)

    @pytest.mark.asyncio
    async def test_leave_unchanged_skips_active_records(self, db_session):
        customer = await create_customer_with_dependents(
            db_session, name="Nordbygg AS", active_orders=1, active_tasks=1
        )

        report = await CustomerDeactivationService.deactivate_customer(
            db_session, customer.id, DeactivationPlan()
        )

        skipped = [o for o in report.outcomes if o.result == StepResult.SKIPPED]
        assert {o.step for o in skipped} == {WorkflowStep.ORDERS, WorkflowStep.TASKS}

        orders = await OrderCRUD.query(db_session, filters={"customer_id": customer.id})
        assert orders[0].status == OrderStatus.IN_PROGRESS
        tasks = await TaskCRUD.query(db_session, filters={"customer_id": customer.id})
        assert tasks[0].status == TaskStatus.NOT_STARTED

    @pytest.mark.asyncio
    async def test_force_complete_tasks_without_invoicing(self, db_session, sample_customer):
        """A force-completed invoice task does not invoice its order."""
        order = await save(
            db_session,
            OrderFactory.create(customer_id=sample_customer.id, status=OrderStatus.COMPLETED),
        )
        task = await save(
            db_session,
            TaskFactory.create_invoice_task(order, technician_id=None),
        )

        await CustomerDeactivationService.deactivate_customer(
            db_session,
            sample_customer.id,
            DeactivationPlan(tasks=DependentDisposition.FORCE_COMPLETE),
        )

        stored_task = await TaskCRUD.read(db_session, task.id, refresh=True)
        assert stored_task.status == TaskStatus.DONE
        stored_order = await OrderCRUD.read(db_session, order.id, refresh=True)
        assert stored_order.status == OrderStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_failure_does_not_abort_cascade(self, db_session):
        """One facility write fails; the rest proceed and the customer is hidden."""
        customer = await create_customer_with_dependents(
            db_session, name="Nordbygg AS", facilities=2, active_orders=1
        )
        facilities = await FacilityCRUD.query(
            db_session, filters={"customer_id": customer.id}, order_by=FacilityCRUD.model.name
        )
        failing_id = facilities[0].id
        original_write = FacilityCRUD.write

        async def flaky_write(db, facility_id, values, actor_id=None):
            if facility_id == failing_id:
                raise StoreError("lock timeout", entity="facility", entity_id=facility_id)
            return await original_write(db, facility_id, values, actor_id=actor_id)

        with patch.object(FacilityCRUD, "write", AsyncMock(side_effect=flaky_write)):
            report = await CustomerDeactivationService.deactivate_customer(
                db_session,
                customer.id,
                DeactivationPlan(
                    facilities=FacilityDisposition.UNLINK,
                    orders=DependentDisposition.FORCE_COMPLETE,
                ),
            )

        assert report.succeeded is False
        assert report.customer_hidden is True
        assert [f.entity_id for f in report.failures()] == [failing_id]

        failure = report.partial_failure()
        assert isinstance(failure, PartialCascadeFailure)
        assert failure.failures[0].step == WorkflowStep.FACILITIES
        assert len(failure.succeeded) == 3

        orders = await OrderCRUD.query(db_session, filters={"customer_id": customer.id})
        assert orders[0].status == OrderStatus.COMPLETED
        stored_customer = await CustomerCRUD.read(db_session, customer.id, refresh=True)
        assert stored_customer.hidden is True

    @pytest.mark.asyncio
    async def test_move_requires_destination(self, db_session, sample_facility):
        with pytest.raises(ValidationError):
            await CustomerDeactivationService.deactivate_customer(
                db_session,
                sample_facility.customer_id,
                DeactivationPlan(facilities=FacilityDisposition.MOVE),
            )

        stored = await CustomerCRUD.read(db_session, sample_facility.customer_id, refresh=True)
        assert stored.hidden is False

    @pytest.mark.asyncio
    async def test_move_to_self_rejected(self, db_session, sample_customer):
        with pytest.raises(ValidationError):
            await CustomerDeactivationService.deactivate_customer(
                db_session,
                sample_customer.id,
                DeactivationPlan(
                    facilities=FacilityDisposition.MOVE,
                    move_to_customer_id=sample_customer.id,
                ),
            )

    @pytest.mark.asyncio
    async def test_move_to_hidden_customer_rejected(self, db_session, sample_customer):
        hidden = await save(db_session, CustomerFactory.create(hidden=True))

        with pytest.raises(ValidationError):
            await CustomerDeactivationService.deactivate_customer(
                db_session,
                sample_customer.id,
                DeactivationPlan(
                    facilities=FacilityDisposition.MOVE,
                    move_to_customer_id=hidden.id,
                ),
            )

    @pytest.mark.asyncio
    async def test_move_to_unknown_customer(self, db_session, sample_customer):
        with pytest.raises(NotFoundError):
            await CustomerDeactivationService.deactivate_customer(
                db_session,
                sample_customer.id,
                DeactivationPlan(
                    facilities=FacilityDisposition.MOVE,
                    move_to_customer_id=uuid4(),
                ),
            )

    @pytest.mark.asyncio
    async def test_already_hidden_customer_rejected(self, db_session):
        customer = await save(db_session, CustomerFactory.create(hidden=True))

        with pytest.raises(ValidationError):
            await CustomerDeactivationService.deactivate_customer(
                db_session, customer.id, DeactivationPlan()
            )


class TestDeleteOrphanedCustomer:
    """Tests for removing a customer left without dependents."""

    @pytest.mark.asyncio
    async def test_orphan_is_hidden(self, db_session, sample_customer):
        customer = await CustomerDeactivationService.delete_orphaned_customer(
            db_session, sample_customer.id
        )

        assert customer.hidden is True

    @pytest.mark.asyncio
    async def test_customer_with_dependents_is_kept(self, db_session, sample_facility):
        with pytest.raises(ValidationError):
            await CustomerDeactivationService.delete_orphaned_customer(
                db_session, sample_facility.customer_id
            )

        stored = await CustomerCRUD.read(db_session, sample_facility.customer_id, refresh=True)
        assert stored.hidden is False

    @pytest.mark.asyncio
    async def test_already_hidden_is_a_no_op(self, db_session):
        customer = await save(db_session, CustomerFactory.create(hidden=True))

        result = await CustomerDeactivationService.delete_orphaned_customer(
            db_session, customer.id
        )

        assert result.hidden is True
