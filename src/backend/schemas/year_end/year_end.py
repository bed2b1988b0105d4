"""
Year-end reset schemas.
"""
from typing import Dict

from core.schema_base import HTTPSchemaModel

BLANK_STATUS_KEY = "blank"


class YearEndSummary(HTTPSchemaModel):
    """
    Status overview of contract facilities before the annual reset.

    status_counts is keyed by operator status value, with "blank" for
    facilities without one. completed_category_counts counts, among
    completed facilities, how many have each category flagged complete.
    """
    total: int
    status_counts: Dict[str, int]
    completed_category_counts: Dict[str, int]


class YearEndResetResult(HTTPSchemaModel):
    """Number of facilities updated by a reset and how many batches it took."""
    updated: int
    batches: int
