"""
Order CRUD for database operations.

Status changes go through compare_and_set_status, which only updates the
row when the caller's revision is still current.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.decorators import handle_database_exceptions
from core.exceptions import ConcurrentModificationError, NotFoundError
from crud.base_repository import BaseCRUD
from db import Order, OrderStatus, utc_now


class OrderCRUD(BaseCRUD[Order]):
    """CRUD for Order database operations."""

    model = Order
    entity_name = "order"

    @classmethod
    @handle_database_exceptions("compare_and_set_status")
    async def compare_and_set_status(
        cls,
        db: AsyncSession,
        order_id: UUID,
        expected_revision: int,
        status: OrderStatus,
        actor_id: Optional[UUID] = None,
    ) -> Order:
        """
        Set the order status if its revision still matches.

        The revision is incremented with the status write and committed.

        Args:
            db: Database session
            order_id: Order to update
            expected_revision: Revision the caller read the order at
            status: New status
            actor_id: Operator performing the write, stored in updated_by

        Returns:
            The order as stored after the write

        Raises:
            NotFoundError: The order does not exist
            ConcurrentModificationError: Another writer changed the order first
        """
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.revision == expected_revision)
            .values(
                status=status,
                revision=Order.revision + 1,
                updated_at=utc_now(),
                updated_by=actor_id,
            )
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)

        if result.rowcount == 0:
            exists = await db.execute(select(Order.id).where(Order.id == order_id))
            if exists.scalar_one_or_none() is None:
                raise NotFoundError(
                    cls.entity_name, order_id, operation="compare_and_set_status"
                )
            raise ConcurrentModificationError(
                cls.entity_name,
                order_id,
                expected_revision,
                operation="compare_and_set_status",
            )

        await db.commit()
        return await cls.read(db, order_id, refresh=True)
