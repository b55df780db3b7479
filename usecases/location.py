from __future__ import annotations

import asyncio
import logging

from core.exceptions import LocationQueryFailedError, MapViewerError
from domain.location import (
    GateStep,
    LocationService,
    UnavailableReason,
    permission_step,
    service_step,
)
from domain.models import Coordinate

logger = logging.getLogger(__name__)

LOCATION_TIMEOUT = 10.0


class LocationAcquirer:
    """
    Resolves the current location once: service gate, permission gate,
    then the actual query.
    Returns ``None`` when a gate stays closed and raises
    ``LocationQueryFailedError`` when the service itself fails.
    """

    def __init__(self, service: LocationService, timeout: float = LOCATION_TIMEOUT):
        self.service = service
        self.timeout = timeout
        self.last_unavailable_reason: UnavailableReason | None = None

    # ─────────────────────────────────────────────────────── step 1: service
    async def _service_ready(self) -> bool:
        step = service_step(await self.service.is_service_enabled(), prompted=False)
        if step is GateStep.REQUEST_SERVICE:
            step = service_step(await self.service.request_enable_service(), prompted=True)
        return step is GateStep.CHECK_PERMISSION

    # ──────────────────────────────────────────────────── step 2: permission
    async def _permission_granted(self) -> bool:
        step = permission_step(await self.service.get_permission_status(), prompted=False)
        if step is GateStep.REQUEST_PERMISSION:
            step = permission_step(await self.service.request_permission(), prompted=True)
        return step is GateStep.QUERY_LOCATION

    # ───────────────────────────────────────────────────────── step 3: query
    async def _query(self) -> Coordinate:
        return await asyncio.wait_for(self.service.get_current_location(), self.timeout)

    async def acquire(self) -> Coordinate | None:
        self.last_unavailable_reason = None
        try:
            if not await self._service_ready():
                return self._unavailable(UnavailableReason.SERVICE_DISABLED)
            if not await self._permission_granted():
                return self._unavailable(UnavailableReason.PERMISSION_DENIED)
            coordinate = await self._query()

        except MapViewerError:
            raise
        except asyncio.TimeoutError as exc:
            raise LocationQueryFailedError(
                f"Location query timed out after {self.timeout}s"
            ) from exc
        except Exception as exc:
            raise LocationQueryFailedError(f"Location query failed: {exc}") from exc

        logger.info("Location resolved at %s, %s", coordinate.latitude, coordinate.longitude)
        return coordinate

    def _unavailable(self, reason: UnavailableReason) -> None:
        logger.warning("Location unavailable: %s", reason.value)
        self.last_unavailable_reason = reason
        return None
