"""
Year-end reset of the annual control cycle.

Applies to visible facilities whose control month is not "NA". Completed
facilities get their operator status cleared and every subscribed flag
reset to incomplete; not-started, planned and postponed facilities only
get their status cleared. Terminated facilities are left alone.
"""

import logging
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.decorators import log_database_operation
from crud import FacilityCRUD
from db import ControlCategory, FacilityStatus
from schemas.year_end import BLANK_STATUS_KEY, YearEndResetResult, YearEndSummary

logger = logging.getLogger(__name__)

OTHER_RESET_STATUSES = [
    FacilityStatus.NOT_STARTED,
    FacilityStatus.PLANNED,
    FacilityStatus.POSTPONED,
]


def _batches(items: List, size: int):
    for start in range(0, len(items), size):
        yield items[start:start + size]


class YearEndService:
    """Service for the annual facility status reset."""

    @staticmethod
    async def summary(db: AsyncSession) -> YearEndSummary:
        """Count contract facilities per operator status and completed categories."""
        facilities = await FacilityCRUD.list_contract_facilities(db)

        status_counts: Dict[str, int] = {BLANK_STATUS_KEY: 0}
        status_counts.update({status.value: 0 for status in FacilityStatus})
        category_counts: Dict[str, int] = {c.value: 0 for c in ControlCategory}

        for facility in facilities:
            status = facility.operator_status
            status_counts[status.value if status else BLANK_STATUS_KEY] += 1

            if status != FacilityStatus.COMPLETED:
                continue
            completion = facility.completion or {}
            for category in facility.categories or []:
                if completion.get(category) is True:
                    category_counts[category] = category_counts.get(category, 0) + 1

        return YearEndSummary(
            total=len(facilities),
            status_counts=status_counts,
            completed_category_counts=category_counts,
        )

    @staticmethod
    @log_database_operation("year-end reset of completed facilities", level="info")
    async def reset_completed(
        db: AsyncSession, *, actor_id: Optional[UUID] = None
    ) -> YearEndResetResult:
        """
        Clear the status of completed facilities and mark every subscribed
        category incomplete.

        Each facility keeps its own category set, so flags are rebuilt per
        facility; writes are committed one batch at a time.
        """
        facilities = [
            f for f in await FacilityCRUD.list_contract_facilities(db)
            if f.operator_status == FacilityStatus.COMPLETED
        ]
        resets = [
            (f.id, {category: False for category in f.categories or []})
            for f in facilities
        ]

        batch_size = settings.workflow.year_end_batch_size
        updated = 0
        batches = 0
        for batch in _batches(resets, batch_size):
            for facility_id, completion in batch:
                await FacilityCRUD.write(
                    db,
                    facility_id,
                    {"operator_status": None, "completion": completion},
                    actor_id=actor_id,
                )
                updated += 1
            batches += 1
            logger.info(f"Year-end reset: batch {batches} done ({updated}/{len(resets)})")

        return YearEndResetResult(updated=updated, batches=batches)

    @staticmethod
    @log_database_operation("year-end reset of other statuses", level="info")
    async def reset_other_statuses(
        db: AsyncSession, *, actor_id: Optional[UUID] = None
    ) -> YearEndResetResult:
        """Clear the status of not-started, planned and postponed facilities."""
        ids = await FacilityCRUD.find_contract_ids(
            db, operator_statuses=OTHER_RESET_STATUSES
        )

        updated = 0
        batches = 0
        for batch in _batches(ids, settings.workflow.year_end_batch_size):
            updated += await FacilityCRUD.bulk_write(
                db, batch, {"operator_status": None}, actor_id=actor_id
            )
            batches += 1

        logger.info(f"Year-end reset: cleared status on {updated} facilities in {batches} batches")
        return YearEndResetResult(updated=updated, batches=batches)
