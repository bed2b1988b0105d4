"""
Facility service.

Creation (with portal notification), operator status, and changes of the
owning customer. Completion flags are handled by FacilityCompletionService.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from core.decorators import log_database_operation
from core.exceptions import NotFoundError, ValidationError
from core.logging_config import WorkflowLogger
from crud import CustomerCRUD, FacilityCRUD
from db import Facility, FacilityStatus
from schemas.facility import (
    CustomerChangeResult,
    FacilityCreate,
    FacilityCreateResult,
    FacilityRead,
)
from services import customer_dependents
from services.facility_completion_service import FacilityCompletionService
from services.facility_portal_client import FacilityPortalClient

logger = logging.getLogger(__name__)
workflow_logger = WorkflowLogger("facility")


class FacilityService:
    """Service for facility records."""

    @staticmethod
    def to_read(facility: Facility) -> FacilityRead:
        """
        Build the facility view with its completion rollup.

        The operator status is reported as-is; status_conflict flags a status
        of completed while categories are pending, or not_started while all
        categories are complete.
        """
        summary = FacilityCompletionService.completion_summary(facility)
        status = facility.operator_status
        conflict = (
            (status == FacilityStatus.COMPLETED and not summary.is_fully_complete)
            or (status == FacilityStatus.NOT_STARTED and summary.is_fully_complete)
        )

        return FacilityRead(
            id=facility.id,
            name=facility.name,
            address=facility.address,
            customer_id=facility.customer_id,
            categories=facility.categories or [],
            completion=facility.completion or {},
            operator_status=status,
            control_month=facility.control_month,
            hidden=facility.hidden,
            completion_summary=summary,
            status_conflict=conflict,
            created_at=facility.created_at,
            updated_at=facility.updated_at,
            updated_by=facility.updated_by,
        )

    @staticmethod
    async def _require_visible_customer(
        db: AsyncSession, customer_id: UUID, operation: str
    ) -> None:
        customer = await CustomerCRUD.find_by_id(db, customer_id)
        if customer is None:
            raise NotFoundError("customer", customer_id, operation=operation)
        if customer.hidden:
            raise ValidationError(
                "Customer is deactivated",
                operation=operation,
                entity="customer",
                entity_id=customer_id,
            )

    @staticmethod
    async def get_facility(db: AsyncSession, facility_id: UUID) -> FacilityRead:
        facility = await FacilityCRUD.read(db, facility_id)
        return FacilityService.to_read(facility)

    @staticmethod
    @log_database_operation("facility creation", level="debug")
    async def create_facility(
        db: AsyncSession,
        facility_data: FacilityCreate,
        *,
        actor_id: Optional[UUID] = None,
    ) -> FacilityCreateResult:
        """
        Create a facility with every subscribed category flagged incomplete,
        then notify the facility portal.

        The portal outcome is returned alongside the facility; a portal
        failure does not affect the created record.
        """
        if facility_data.customer_id is not None:
            await FacilityService._require_visible_customer(
                db, facility_data.customer_id, "create_facility"
            )

        categories = [c.value for c in facility_data.categories]
        facility = Facility(
            name=facility_data.name,
            address=facility_data.address,
            customer_id=facility_data.customer_id,
            categories=categories,
            completion={c: False for c in categories},
            operator_status=facility_data.operator_status,
            control_month=facility_data.control_month,
            updated_by=actor_id,
        )
        facility = await FacilityCRUD.insert(db, facility)
        facility_read = FacilityService.to_read(facility)
        logger.info(
            f"Facility created | Facility ID: {facility.id} | Name: {facility.name} | "
            f"Actor: {actor_id or 'system'}"
        )

        portal_sync = await FacilityPortalClient.sync_facility(
            facility_data.name, facility_data.address
        )
        return FacilityCreateResult(facility=facility_read, portal_sync=portal_sync)

    @staticmethod
    @log_database_operation("operator status update", level="debug")
    async def set_operator_status(
        db: AsyncSession,
        facility_id: UUID,
        status: Optional[FacilityStatus],
        *,
        actor_id: Optional[UUID] = None,
    ) -> FacilityRead:
        """Write the operator status. It is not checked against the completion flags."""
        facility = await FacilityCRUD.write(
            db, facility_id, {"operator_status": status}, actor_id=actor_id
        )
        facility_read = FacilityService.to_read(facility)
        if facility_read.status_conflict:
            logger.warning(
                f"Facility {facility_id} status '{status.value}' disagrees with "
                f"'{facility_read.completion_summary.label}'"
            )
        logger.info(
            f"Operator status set | Facility ID: {facility_id} | "
            f"Status: {status.value if status else None} | Actor: {actor_id or 'system'}"
        )
        return facility_read

    @staticmethod
    @log_database_operation("facility customer change", level="debug")
    async def change_customer(
        db: AsyncSession,
        facility_id: UUID,
        new_customer_id: Optional[UUID],
        *,
        actor_id: Optional[UUID] = None,
    ) -> CustomerChangeResult:
        """
        Change the facility's owning customer.

        After the write the previous owner is checked for remaining
        dependents; when it has none, its id is returned as
        orphaned_customer_id so the operator can be offered its removal.
        Nothing is deleted here.

        Raises:
            NotFoundError: Facility or new customer does not exist
            ValidationError: New customer is deactivated
        """
        facility = await FacilityCRUD.read(db, facility_id)
        previous_customer_id = facility.customer_id

        if new_customer_id == previous_customer_id:
            return CustomerChangeResult(
                facility=FacilityService.to_read(facility),
                previous_customer_id=previous_customer_id,
            )

        if new_customer_id is not None:
            await FacilityService._require_visible_customer(
                db, new_customer_id, "change_customer"
            )

        facility = await FacilityCRUD.write(
            db, facility_id, {"customer_id": new_customer_id}, actor_id=actor_id
        )
        facility_read = FacilityService.to_read(facility)
        logger.info(
            f"Facility customer changed | Facility ID: {facility_id} | "
            f"From: {previous_customer_id} | To: {new_customer_id} | "
            f"Actor: {actor_id or 'system'}"
        )

        orphaned_customer_id = None
        if previous_customer_id is not None and await customer_dependents.has_no_remaining_dependents(
            db, previous_customer_id
        ):
            orphaned_customer_id = previous_customer_id
            workflow_logger.orphan_detected(previous_customer_id, facility_id)

        return CustomerChangeResult(
            facility=facility_read,
            previous_customer_id=previous_customer_id,
            orphaned_customer_id=orphaned_customer_id,
        )
