"""Facility schemas package."""
from .facility import (CategoryCompletionUpdate, CompletionSummary,
                       CustomerChangeResult, FacilityCreate,
                       FacilityCreateResult, FacilityCustomerUpdate,
                       FacilityRead, OperatorStatusUpdate, PortalSyncResult)

__all__ = [
    "CategoryCompletionUpdate",
    "CompletionSummary",
    "CustomerChangeResult",
    "FacilityCreate",
    "FacilityCreateResult",
    "FacilityCustomerUpdate",
    "FacilityRead",
    "OperatorStatusUpdate",
    "PortalSyncResult",
]
