"""
Customer CRUD for database operations.
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.decorators import handle_database_exceptions
from crud.base_repository import BaseCRUD
from db import Customer


class CustomerCRUD(BaseCRUD[Customer]):
    """CRUD for Customer database operations."""

    model = Customer
    entity_name = "customer"

    @classmethod
    @handle_database_exceptions("list_customers")
    async def list_customers(
        cls,
        db: AsyncSession,
        *,
        include_hidden: bool = False,
        exclude_id: Optional[UUID] = None,
    ) -> List[Customer]:
        """
        List customers ordered by name.

        Args:
            db: Database session
            include_hidden: Include soft-deleted customers
            exclude_id: Leave this customer out of the result
        """
        stmt = select(Customer)
        if not include_hidden:
            stmt = stmt.where(Customer.hidden.is_(False))
        if exclude_id is not None:
            stmt = stmt.where(Customer.id != exclude_id)
        stmt = stmt.order_by(Customer.name)

        result = await db.execute(stmt)
        return list(result.scalars().all())
