"""
Facility CRUD for database operations.

Handles the facility queries used by the year-end reset, including
batched bulk updates.
"""
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.decorators import handle_database_exceptions
from crud.base_repository import BaseCRUD
from db import Facility, utc_now

NON_CONTRACT_MONTH = "NA"


class FacilityCRUD(BaseCRUD[Facility]):
    """CRUD for Facility database operations."""

    model = Facility
    entity_name = "facility"

    @classmethod
    def _contract_scope(cls, stmt):
        # Visible facilities with a control month other than "NA"
        return stmt.where(
            Facility.hidden.is_(False),
            Facility.control_month != NON_CONTRACT_MONTH,
        )

    @classmethod
    @handle_database_exceptions("list_contract_facilities")
    async def list_contract_facilities(cls, db: AsyncSession) -> List[Facility]:
        """List every visible facility under an annual control contract."""
        stmt = cls._contract_scope(select(Facility)).order_by(Facility.name)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @classmethod
    @handle_database_exceptions("find_contract_ids")
    async def find_contract_ids(
        cls,
        db: AsyncSession,
        *,
        operator_statuses: List[Any],
    ) -> List[UUID]:
        """Find ids of contract facilities whose operator status is in the given list."""
        stmt = cls._contract_scope(select(Facility.id)).where(
            Facility.operator_status.in_(operator_statuses)
        ).order_by(Facility.id)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @classmethod
    @handle_database_exceptions("bulk_write")
    async def bulk_write(
        cls,
        db: AsyncSession,
        ids: List[UUID],
        values: Dict[str, Any],
        actor_id: Optional[UUID] = None,
    ) -> int:
        """
        Apply the same values to a batch of facilities and commit.

        Returns:
            Number of rows updated
        """
        if not ids:
            return 0

        stmt = (
            update(Facility)
            .where(Facility.id.in_(ids))
            .values(**values, updated_at=utc_now(), updated_by=actor_id)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        await db.commit()
        return result.rowcount
