"""
Facility completion rollup.

A facility owns one "service complete" flag per subscribed control
category. The rollup keeps those flags and reports "N of M categories
complete"; it never writes the operator-set facility status.
"""

import logging
from typing import Optional, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from core.decorators import log_database_operation
from core.exceptions import InvalidCategoryError
from core.logging_config import WorkflowLogger
from crud import FacilityCRUD
from db import ControlCategory, Facility
from schemas.facility import CompletionSummary

logger = logging.getLogger(__name__)
workflow_logger = WorkflowLogger("facility")


class FacilityCompletionService:
    """Service for per-category completion flags and their rollup."""

    @staticmethod
    def completion_summary(facility: Facility) -> CompletionSummary:
        """
        Compute the completion rollup of a facility.

        Only subscribed categories count; a flag without a subscription is
        ignored and a subscribed category without a flag counts as pending.
        """
        completion = facility.completion or {}
        subscribed = list(facility.categories or [])

        pending = [c for c in subscribed if completion.get(c) is not True]
        completed = len(subscribed) - len(pending)
        total = len(subscribed)

        return CompletionSummary(
            completed=completed,
            total=total,
            pending_categories=[ControlCategory(c) for c in pending],
            is_fully_complete=total > 0 and completed == total,
            label=f"{completed} of {total} categories complete",
        )

    @staticmethod
    async def get_summary(db: AsyncSession, facility_id: UUID) -> CompletionSummary:
        """Read a facility and return its completion rollup."""
        facility = await FacilityCRUD.read(db, facility_id)
        return FacilityCompletionService.completion_summary(facility)

    @staticmethod
    @log_database_operation("category completion update", level="debug")
    async def set_category_complete(
        db: AsyncSession,
        facility_id: UUID,
        category: Union[ControlCategory, str],
        complete: bool,
        *,
        actor_id: Optional[UUID] = None,
    ) -> CompletionSummary:
        """
        Set one category's service-complete flag.

        Setting the value the flag already has issues no write.

        Args:
            db: Database session
            facility_id: Facility owning the flag
            category: Control category to set
            complete: New flag value
            actor_id: Operator performing the change

        Returns:
            Completion rollup after the change

        Raises:
            NotFoundError: Facility does not exist
            InvalidCategoryError: Category is unknown or not subscribed
        """
        facility = await FacilityCRUD.read(db, facility_id)
        key = category.value if isinstance(category, ControlCategory) else str(category)

        if key not in (facility.categories or []):
            raise InvalidCategoryError(facility_id, key)

        complete = bool(complete)
        completion = dict(facility.completion or {})
        if bool(completion.get(key, False)) == complete:
            logger.debug(f"Flag {key} on facility {facility_id} already {complete}, no write")
            return FacilityCompletionService.completion_summary(facility)

        completion[key] = complete
        facility = await FacilityCRUD.write(
            db, facility_id, {"completion": completion}, actor_id=actor_id
        )

        summary = FacilityCompletionService.completion_summary(facility)
        workflow_logger.flag_changed(facility_id, key, complete, summary.label, actor_id)
        return summary
