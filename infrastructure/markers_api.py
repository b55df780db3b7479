from __future__ import annotations

import asyncio
import logging
from typing import Any

import requests

from core.exceptions import MarkerFetchFailedError
from domain.models import Coordinate
from domain.repositories import MarkerRepository
from infrastructure.constants import MARKERS_HEADERS, TIMEOUT

logger = logging.getLogger(__name__)


class HttpMarkerRepository(MarkerRepository):
    """Markers repository backed by ``GET <endpoint>?lat=..&lng=..``."""

    def __init__(
        self,
        endpoint: str,
        session: requests.Session | None = None,
        timeout: float = TIMEOUT,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(MARKERS_HEADERS)

    async def fetch(self, center: Coordinate) -> Any:
        # requests is blocking; keep the event loop free while it runs
        return await asyncio.to_thread(self._get, center)

    def _get(self, center: Coordinate) -> Any:
        params = {"lat": center.latitude, "lng": center.longitude}
        logger.debug("GET %s params=%s", self.endpoint, params)

        try:
            r = self.session.get(self.endpoint, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise MarkerFetchFailedError(f"Markers request failed: {exc}") from exc

        if not 200 <= r.status_code < 300:
            raise MarkerFetchFailedError(
                f"Failed to load markers (HTTP {r.status_code})",
                status_code=r.status_code,
            )

        try:
            return r.json()
        except ValueError as exc:
            raise MarkerFetchFailedError("Markers response is not valid JSON") from exc

    def close(self):
        if self.session is not None:
            self.session.close()
            self.session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
