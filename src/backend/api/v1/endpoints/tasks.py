"""
Task API endpoints.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_session
from core.dependencies import get_actor_id
from crud import TaskCRUD
from schemas.task import TaskCreate, TaskRead, TaskUpdate
from schemas.workflow import TaskUpdateResult
from services.task_service import TaskService

router = APIRouter()


@router.post("", response_model=TaskRead, status_code=201)
async def create_task(
    task_data: TaskCreate,
    db: AsyncSession = Depends(get_session),
    actor_id: Optional[UUID] = Depends(get_actor_id),
):
    """Create a task."""
    return await TaskService.create_task(db, task_data, actor_id=actor_id)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_session),
):
    """Get a task by ID."""
    return await TaskCRUD.read(db, task_id)


@router.patch(
    "/{task_id}",
    response_model=TaskUpdateResult,
    responses={502: {"model": TaskUpdateResult}},
)
async def update_task(
    task_id: UUID,
    update_data: TaskUpdate,
    db: AsyncSession = Depends(get_session),
    actor_id: Optional[UUID] = Depends(get_actor_id),
):
    """
    Update a task.

    Marking an invoice task done moves its completed order to invoiced; the
    effect is reported in `orderOutcome`. Returns 502 when the task was
    saved but the order could not be updated.
    """
    result = await TaskService.update_task(db, task_id, update_data, actor_id=actor_id)
    if result.order_outcome is not None and result.order_outcome.failed:
        return JSONResponse(
            status_code=502, content=result.model_dump(by_alias=True, mode="json")
        )
    return result
