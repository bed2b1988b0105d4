"""Year-end schemas package."""
from .year_end import BLANK_STATUS_KEY, YearEndResetResult, YearEndSummary

__all__ = [
    "BLANK_STATUS_KEY",
    "YearEndResetResult",
    "YearEndSummary",
]
