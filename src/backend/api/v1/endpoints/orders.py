"""
Order API endpoints.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_session
from core.dependencies import get_actor_id
from crud import OrderCRUD
from schemas.order import OrderCompletionRequest, OrderCreate, OrderRead, OrderUpdate
from schemas.workflow import OrderCompletionResult, OrderUpdateResult
from services.order_lifecycle_service import OrderLifecycleService

router = APIRouter()


@router.post("", response_model=OrderRead, status_code=201)
async def create_order(
    order_data: OrderCreate,
    db: AsyncSession = Depends(get_session),
    actor_id: Optional[UUID] = Depends(get_actor_id),
):
    """Create an order in pending status."""
    return await OrderLifecycleService.create_order(db, order_data, actor_id=actor_id)


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(
    order_id: UUID,
    db: AsyncSession = Depends(get_session),
):
    """Get an order by ID."""
    return await OrderCRUD.read(db, order_id)


@router.patch(
    "/{order_id}",
    response_model=OrderUpdateResult,
    responses={502: {"model": OrderUpdateResult}},
)
async def update_order(
    order_id: UUID,
    update_data: OrderUpdate,
    db: AsyncSession = Depends(get_session),
    actor_id: Optional[UUID] = Depends(get_actor_id),
):
    """
    Edit an order.

    - **status=invoiced** is rejected (422)
    - moving into **completed** requires `completion`
    """
    result = await OrderLifecycleService.update_order(
        db, order_id, update_data, actor_id=actor_id
    )
    if result.completion is not None and not result.completion.succeeded:
        return JSONResponse(
            status_code=502, content=result.model_dump(by_alias=True, mode="json")
        )
    return result


@router.post(
    "/{order_id}/complete",
    response_model=OrderCompletionResult,
    responses={502: {"model": OrderCompletionResult}},
)
async def complete_order(
    order_id: UUID,
    completion: OrderCompletionRequest,
    db: AsyncSession = Depends(get_session),
    actor_id: Optional[UUID] = Depends(get_actor_id),
):
    """
    Close an order.

    - **alreadyInvoiced=true**: the order is completed, no task is created
    - **alreadyInvoiced=false**: an invoice task is created for
      **invoiceTechnicianId** (required)

    Returns 502 with every step outcome when the order was completed but the
    invoice task could not be created.
    """
    result = await OrderLifecycleService.complete_order(
        db,
        order_id,
        already_invoiced=completion.already_invoiced,
        invoice_technician_id=completion.invoice_technician_id,
        actor_id=actor_id,
    )
    if not result.succeeded:
        return JSONResponse(
            status_code=502, content=result.model_dump(by_alias=True, mode="json")
        )
    return result
