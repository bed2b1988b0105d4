"""
Customer API endpoints.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_session
from core.dependencies import get_actor_id
from crud import CustomerCRUD
from schemas.customer import CustomerListItem, CustomerRead
from schemas.workflow import CascadeReport, DeactivationPlan, DeactivationPreview
from services.customer_deactivation_service import CustomerDeactivationService

router = APIRouter()


@router.get("", response_model=List[CustomerListItem])
async def list_customers(
    include_hidden: bool = False,
    db: AsyncSession = Depends(get_session),
):
    """
    List customers ordered by name.

    - **include_hidden**: Include deactivated customers (default: false)
    """
    return await CustomerCRUD.list_customers(db, include_hidden=include_hidden)


@router.get("/{customer_id}", response_model=CustomerRead)
async def get_customer(
    customer_id: UUID,
    db: AsyncSession = Depends(get_session),
):
    """Get a customer by ID, hidden or not."""
    return await CustomerCRUD.read(db, customer_id)


@router.get("/{customer_id}/deactivation-preview", response_model=DeactivationPreview)
async def deactivation_preview(
    customer_id: UUID,
    db: AsyncSession = Depends(get_session),
):
    """Dependent counts and move destinations for the deactivation dialog."""
    return await CustomerDeactivationService.preview(db, customer_id)


@router.get("/{customer_id}/move-candidates", response_model=List[CustomerListItem])
async def move_candidates(
    customer_id: UUID,
    db: AsyncSession = Depends(get_session),
):
    """Visible customers the facilities can be moved to."""
    return await CustomerDeactivationService.move_candidates(db, customer_id)


@router.post(
    "/{customer_id}/deactivate",
    response_model=CascadeReport,
    responses={207: {"model": CascadeReport}},
)
async def deactivate_customer(
    customer_id: UUID,
    plan: DeactivationPlan,
    db: AsyncSession = Depends(get_session),
    actor_id: Optional[UUID] = Depends(get_actor_id),
):
    """
    Deactivate a customer and apply the chosen dispositions.

    - **facilities**: keep_linked, unlink or move (requires moveToCustomerId)
    - **orders** / **tasks**: leave_unchanged or force_complete

    Returns 207 with the full report when any record could not be updated.
    """
    report = await CustomerDeactivationService.deactivate_customer(
        db, customer_id, plan, actor_id=actor_id
    )
    if not report.succeeded:
        content = report.model_dump(by_alias=True, mode="json")
        failure = report.partial_failure()
        if failure is not None:
            content["error"] = failure.to_dict()
        return JSONResponse(status_code=207, content=content)
    return report


@router.post("/{customer_id}/delete-orphaned", response_model=CustomerRead)
async def delete_orphaned_customer(
    customer_id: UUID,
    db: AsyncSession = Depends(get_session),
    actor_id: Optional[UUID] = Depends(get_actor_id),
):
    """
    Remove a customer left without facilities or active work.

    Returns 422 if dependents were added since the offer was made.
    """
    return await CustomerDeactivationService.delete_orphaned_customer(
        db, customer_id, actor_id=actor_id
    )
