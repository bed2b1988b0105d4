"""
Request dependencies for FastAPI.

Authentication is handled upstream of this service. The operator performing
an action is passed explicitly through the X-Actor-ID header and threaded
into every workflow call as actor_id.
"""

from typing import Optional
from uuid import UUID

from fastapi import Header


async def get_actor_id(
    x_actor_id: Optional[UUID] = Header(
        default=None,
        alias="X-Actor-ID",
        description="Technician performing the action",
    ),
) -> Optional[UUID]:
    """Operator id from the X-Actor-ID header, or None for system actions."""
    return x_actor_id
