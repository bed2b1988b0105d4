"""
Facility portal client.

Notifies the external facility-management portal when a facility is
created. The call is best effort: without an API key it is skipped, and
failures are logged and returned to the caller, never raised.
"""

import logging
from typing import Optional

import httpx

from core.config import settings
from schemas.facility import PortalSyncResult

logger = logging.getLogger(__name__)

CREATE_FACILITY_PATH = "/api/anlegg/opprett-fra-firebase"


class FacilityPortalClient:
    """HTTP client for the facility portal."""

    _client: Optional[httpx.AsyncClient] = None

    @classmethod
    async def get_client(cls) -> httpx.AsyncClient:
        """Get or create the shared async HTTP client."""
        if cls._client is None or cls._client.is_closed:
            cls._client = httpx.AsyncClient(
                base_url=settings.portal.base_url,
                timeout=httpx.Timeout(settings.portal.timeout_seconds),
                headers={"Content-Type": "application/json"},
            )
        return cls._client

    @classmethod
    async def close(cls) -> None:
        """Close the shared client (call during shutdown)."""
        if cls._client is not None and not cls._client.is_closed:
            await cls._client.aclose()
        cls._client = None

    @classmethod
    async def sync_facility(cls, name: str, address: Optional[str]) -> PortalSyncResult:
        """
        Register a new facility with the portal.

        Args:
            name: Facility name
            address: Facility address, if known

        Returns:
            Outcome of the call; attempted=False when no API key is configured
        """
        if not settings.portal.api_key:
            logger.warning("Portal API key not configured, skipping facility sync")
            return PortalSyncResult(attempted=False, detail="Portal API key not configured")

        client = await cls.get_client()
        try:
            response = await client.post(
                CREATE_FACILITY_PATH,
                json={"navn": name, "adresse": address},
                headers={"x-api-key": settings.portal.api_key},
            )
        except httpx.HTTPError as e:
            logger.error(f"Facility portal sync failed for '{name}': {e}")
            return PortalSyncResult(attempted=True, detail=str(e))

        if response.is_error:
            detail = _error_detail(response)
            logger.error(
                f"Facility portal rejected '{name}' "
                f"(status={response.status_code}): {detail}"
            )
            return PortalSyncResult(
                attempted=True, status_code=response.status_code, detail=detail
            )

        logger.info(f"Facility '{name}' synced to portal (status={response.status_code})")
        return PortalSyncResult(
            attempted=True, succeeded=True, status_code=response.status_code
        )


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.reason_phrase
