"""
Facility API endpoints.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_session
from core.dependencies import get_actor_id
from schemas.facility import (
    CategoryCompletionUpdate,
    CompletionSummary,
    CustomerChangeResult,
    FacilityCreate,
    FacilityCreateResult,
    FacilityCustomerUpdate,
    FacilityRead,
    OperatorStatusUpdate,
)
from services.facility_completion_service import FacilityCompletionService
from services.facility_service import FacilityService

router = APIRouter()


@router.post("", response_model=FacilityCreateResult, status_code=201)
async def create_facility(
    facility_data: FacilityCreate,
    db: AsyncSession = Depends(get_session),
    actor_id: Optional[UUID] = Depends(get_actor_id),
):
    """
    Create a facility and notify the facility portal.

    All subscribed categories start incomplete. The portal outcome is
    returned in `portalSync`; a portal failure does not fail the request.
    """
    return await FacilityService.create_facility(db, facility_data, actor_id=actor_id)


@router.get("/{facility_id}", response_model=FacilityRead)
async def get_facility(
    facility_id: UUID,
    db: AsyncSession = Depends(get_session),
):
    """Get a facility with its completion summary."""
    return await FacilityService.get_facility(db, facility_id)


@router.put("/{facility_id}/categories/{category}", response_model=CompletionSummary)
async def set_category_complete(
    facility_id: UUID,
    category: str,
    update_data: CategoryCompletionUpdate,
    db: AsyncSession = Depends(get_session),
    actor_id: Optional[UUID] = Depends(get_actor_id),
):
    """
    Set a control category's service-complete flag.

    Returns 422 when the facility does not subscribe to the category.
    """
    return await FacilityCompletionService.set_category_complete(
        db, facility_id, category, update_data.complete, actor_id=actor_id
    )


@router.put("/{facility_id}/status", response_model=FacilityRead)
async def set_operator_status(
    facility_id: UUID,
    update_data: OperatorStatusUpdate,
    db: AsyncSession = Depends(get_session),
    actor_id: Optional[UUID] = Depends(get_actor_id),
):
    """Set the operator status. Disagreement with the flags is reported as `statusConflict`."""
    return await FacilityService.set_operator_status(
        db, facility_id, update_data.operator_status, actor_id=actor_id
    )


@router.put("/{facility_id}/customer", response_model=CustomerChangeResult)
async def change_customer(
    facility_id: UUID,
    update_data: FacilityCustomerUpdate,
    db: AsyncSession = Depends(get_session),
    actor_id: Optional[UUID] = Depends(get_actor_id),
):
    """
    Change the facility's owning customer.

    `orphanedCustomerId` is set when the previous owner has nothing left;
    removing it is a separate call to the customers API.
    """
    return await FacilityService.change_customer(
        db, facility_id, update_data.customer_id, actor_id=actor_id
    )
