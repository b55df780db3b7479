from __future__ import annotations

import logging
from typing import Tuple

from core.exceptions import (
    LocationQueryFailedError,
    LocationUnavailableError,
    MarkerFetchFailedError,
)
from core.observable import Observable
from domain.map_view import MapView
from domain.models import Coordinate, LocationState, LocationStatus, MapEvent, Marker
from usecases.location import LocationAcquirer
from usecases.markers import MarkerRefresher, RefreshOutcome

logger = logging.getLogger(__name__)

DEFAULT_ZOOM = 13


class MapScreen:
    """
    Wires the location lookup, the marker refresher and a map view.

    ``start`` runs the location lookup once and, when it yields a coordinate,
    centers the map there and loads the first markers. After that every
    settled map movement reloads the markers for the new center.
    Failures end up in ``location`` and ``fetch_error``; none is raised.
    """

    def __init__(
        self,
        acquirer: LocationAcquirer,
        refresher: MarkerRefresher,
        map_view: MapView,
        zoom: int = DEFAULT_ZOOM,
    ):
        self.acquirer = acquirer
        self.refresher = refresher
        self.map_view = map_view
        self.zoom = zoom
        self.location: Observable[LocationState] = Observable(LocationState.pending())
        self.fetch_error: Observable[MarkerFetchFailedError | None] = Observable(None)
        self._started = False
        refresher.subscribe(map_view.render_markers)

    @property
    def markers(self) -> Tuple[Marker, ...]:
        return self.refresher.markers

    def _settle(self, state: LocationState) -> None:
        if self.location.value.is_settled:
            raise RuntimeError("Location state is already settled for this screen")
        self.location.replace(state)

    async def start(self) -> Coordinate | None:
        if self._started:
            raise RuntimeError("MapScreen.start() may only run once")
        self._started = True

        try:
            coordinate = await self.acquirer.acquire()
        except LocationQueryFailedError as exc:
            logger.warning("Location query failed: %s", exc.message)
            self._settle(LocationState.failed(exc))
            return None

        if coordinate is None:
            reason = self.acquirer.last_unavailable_reason
            self._settle(LocationState.unavailable(
                LocationUnavailableError(reason.value if reason else None)
            ))
            return None

        self._settle(LocationState.resolved(coordinate))
        self.map_view.set_center(coordinate, self.zoom)
        self.map_view.show_user_location(coordinate)
        await self.on_movement_settled(coordinate)
        return coordinate

    async def on_movement_settled(self, center: Coordinate) -> RefreshOutcome | None:
        if self.location.value.status is not LocationStatus.RESOLVED:
            logger.debug("Ignoring map movement before the location is resolved")
            return None

        try:
            outcome = await self.refresher.refresh(center)
        except MarkerFetchFailedError as exc:
            logger.warning("Marker fetch failed: %s", exc.message)
            self.fetch_error.replace(exc)
            return None

        if outcome is RefreshOutcome.APPLIED and self.fetch_error.value is not None:
            self.fetch_error.replace(None)
        return outcome

    async def handle_map_event(self, event: MapEvent) -> RefreshOutcome | None:
        if not event.is_settled:
            return None
        return await self.on_movement_settled(event.center)

    def status_message(self) -> str | None:
        """Text to show instead of, or above, the map; ``None`` if all is well."""
        state = self.location.value
        if state.status is LocationStatus.PENDING:
            return "Locating…"
        if state.status is LocationStatus.UNAVAILABLE:
            return "Could not determine your location."
        if state.status is LocationStatus.FAILED:
            return f"An error occurred: {state.error.message}"
        if self.fetch_error.value is not None:
            return f"Could not load markers: {self.fetch_error.value.message}"
        return None
