from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, Tuple

from core.exceptions import MarkerFetchFailedError
from core.observable import Observable
from domain.models import Coordinate, Marker
from domain.repositories import MarkerRepository, parse_markers

logger = logging.getLogger(__name__)

MARKERS_TIMEOUT = 10.0


class RefreshOutcome(str, Enum):
    APPLIED = "applied"
    DISCARDED = "discarded"


class MarkerRefresher:
    """
    Owns the displayed marker collection and refreshes it for a map center.

    Every call to ``refresh`` takes the next generation number before it
    suspends. Only the response of the latest generation may touch the
    collection; responses of superseded calls are dropped, whether they
    succeeded or failed, so the collection never goes back to an older
    center when responses arrive out of order.
    """

    def __init__(self, repository: MarkerRepository, timeout: float = MARKERS_TIMEOUT):
        self.repository = repository
        self.timeout = timeout
        self.state: Observable[Tuple[Marker, ...]] = Observable(())
        self._issued = 0

    @property
    def markers(self) -> Tuple[Marker, ...]:
        return self.state.value

    @property
    def generation(self) -> int:
        return self._issued

    def subscribe(self, callback: Callable[[Tuple[Marker, ...]], None]) -> Callable[[], None]:
        return self.state.subscribe(callback)

    async def _load(self, center: Coordinate) -> Tuple[Marker, ...]:
        try:
            payload = await asyncio.wait_for(self.repository.fetch(center), self.timeout)
        except MarkerFetchFailedError:
            raise
        except asyncio.TimeoutError as exc:
            raise MarkerFetchFailedError(
                f"Markers request timed out after {self.timeout}s"
            ) from exc
        except Exception as exc:
            raise MarkerFetchFailedError(f"Markers request failed: {exc}") from exc
        return tuple(parse_markers(payload))

    async def refresh(self, center: Coordinate) -> RefreshOutcome:
        self._issued += 1
        generation = self._issued

        error: MarkerFetchFailedError | None = None
        try:
            markers = await self._load(center)
        except MarkerFetchFailedError as exc:
            error = exc

        if generation != self._issued:
            logger.debug(
                "Discarding markers response %s, superseded by %s", generation, self._issued
            )
            return RefreshOutcome.DISCARDED

        if error is not None:
            raise error

        self.state.replace(markers)
        logger.info(
            "Applied %s markers for %s, %s", len(markers), center.latitude, center.longitude
        )
        return RefreshOutcome.APPLIED
