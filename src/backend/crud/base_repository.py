"""
Base CRUD with generic store operations.

Provides reusable database operations that can be inherited by specific
repositories. Every write commits on its own; callers that perform several
writes get no rollback across them.
"""
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from core.decorators import handle_database_exceptions
from core.exceptions import NotFoundError
from db.models import utc_now

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseCRUD(Generic[ModelType]):
    """
    Generic repository providing common store operations.

    Usage:
        class CustomerCRUD(BaseCRUD[Customer]):
            model = Customer
            entity_name = "customer"
    """

    model: Type[ModelType] = None
    entity_name: str = "record"

    @classmethod
    def _apply_filters(
        cls,
        stmt,
        filters: Optional[Dict[str, Any]] = None,
        exclude: Optional[Dict[str, Any]] = None,
    ):
        """
        Add WHERE clauses for equality and inequality maps.

        A list/tuple/set value means IN (or NOT IN for exclude), None means
        IS NULL (or IS NOT NULL).
        """
        for field, value in (filters or {}).items():
            column = getattr(cls.model, field)
            if value is None:
                stmt = stmt.where(column.is_(None))
            elif isinstance(value, (list, tuple, set, frozenset)):
                stmt = stmt.where(column.in_(list(value)))
            else:
                stmt = stmt.where(column == value)

        for field, value in (exclude or {}).items():
            column = getattr(cls.model, field)
            if value is None:
                stmt = stmt.where(column.is_not(None))
            elif isinstance(value, (list, tuple, set, frozenset)):
                stmt = stmt.where(column.not_in(list(value)))
            else:
                stmt = stmt.where(column != value)

        return stmt

    @classmethod
    @handle_database_exceptions("find_by_id")
    async def find_by_id(
        cls,
        db: AsyncSession,
        id_value: UUID,
    ) -> Optional[ModelType]:
        """
        Find a single record by ID.

        Returns:
            Model instance or None if not found
        """
        stmt = select(cls.model).where(cls.model.id == id_value)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @classmethod
    @handle_database_exceptions("read")
    async def read(
        cls,
        db: AsyncSession,
        id_value: UUID,
        *,
        refresh: bool = False,
    ) -> ModelType:
        """
        Read a single record by ID.

        Args:
            db: Database session
            id_value: The ID value to search for
            refresh: Overwrite attributes already loaded in the session

        Raises:
            NotFoundError: No record with this ID
        """
        stmt = select(cls.model).where(cls.model.id == id_value)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)

        result = await db.execute(stmt)
        record = result.scalar_one_or_none()
        if record is None:
            raise NotFoundError(cls.entity_name, id_value, operation="read")
        return record

    @classmethod
    @handle_database_exceptions("query")
    async def query(
        cls,
        db: AsyncSession,
        *,
        filters: Optional[Dict[str, Any]] = None,
        exclude: Optional[Dict[str, Any]] = None,
        order_by: Optional[Any] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[ModelType]:
        """
        Find all records matching filters.

        Args:
            db: Database session
            filters: Dictionary of field:value equality filters
            exclude: Dictionary of field:value inequality filters
            order_by: Column to order by
            limit: Maximum number of records
            offset: Number of records to skip

        Returns:
            List of model instances
        """
        stmt = cls._apply_filters(select(cls.model), filters, exclude)

        if order_by is not None:
            stmt = stmt.order_by(order_by)

        if offset:
            stmt = stmt.offset(offset)

        if limit:
            stmt = stmt.limit(limit)

        result = await db.execute(stmt)
        return list(result.scalars().all())

    @classmethod
    @handle_database_exceptions("count")
    async def count(
        cls,
        db: AsyncSession,
        *,
        filters: Optional[Dict[str, Any]] = None,
        exclude: Optional[Dict[str, Any]] = None,
    ) -> int:
        """Count records matching filters."""
        stmt = cls._apply_filters(select(func.count(cls.model.id)), filters, exclude)
        result = await db.execute(stmt)
        return result.scalar() or 0

    @classmethod
    @handle_database_exceptions("insert")
    async def insert(
        cls,
        db: AsyncSession,
        record: ModelType,
    ) -> ModelType:
        """
        Insert a new record and commit.

        Returns:
            The refreshed record with generated fields populated
        """
        db.add(record)
        await db.commit()
        await db.refresh(record)
        return record

    @classmethod
    @handle_database_exceptions("write")
    async def write(
        cls,
        db: AsyncSession,
        id_value: UUID,
        patch: Dict[str, Any],
        actor_id: Optional[UUID] = None,
    ) -> ModelType:
        """
        Apply a field patch to an existing record and commit.

        updated_at is bumped and updated_by set to actor_id when the model
        carries them.

        Raises:
            NotFoundError: No record with this ID
        """
        stmt = select(cls.model).where(cls.model.id == id_value)
        result = await db.execute(stmt)
        db_obj = result.scalar_one_or_none()
        if db_obj is None:
            raise NotFoundError(cls.entity_name, id_value, operation="write")

        for field, value in patch.items():
            setattr(db_obj, field, value)

        if hasattr(db_obj, "updated_at"):
            db_obj.updated_at = utc_now()
        if hasattr(db_obj, "updated_by"):
            db_obj.updated_by = actor_id

        await db.commit()
        await db.refresh(db_obj)
        return db_obj
