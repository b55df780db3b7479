from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Sequence

import folium

from core.config import Settings
from domain.distance import distance_m
from domain.map_view import MapView
from domain.models import Coordinate, MapEvent, MapEventKind, Marker
from infrastructure.location import build_location_service
from infrastructure.markers_api import HttpMarkerRepository
from usecases.location import LocationAcquirer
from usecases.map_screen import MapScreen
from usecases.markers import MarkerRefresher

# st_folium reports the center on every rerun; smaller shifts are float noise
MOVE_THRESHOLD_M = 1.0


class FoliumMapView(MapView):
    """Map view that keeps what to draw and builds a folium map from it."""

    def __init__(self, tiles: str = "OpenStreetMap"):
        self.tiles = tiles
        self.center: Coordinate | None = None
        self.zoom: int = 13
        self.user_location: Coordinate | None = None
        self.markers: tuple[Marker, ...] = ()
        self.last_settled: Coordinate | None = None

    def set_center(self, center: Coordinate, zoom: int) -> None:
        self.center = center
        self.zoom = zoom
        self.last_settled = center

    def show_user_location(self, location: Coordinate) -> None:
        self.user_location = location

    def render_markers(self, markers: Sequence[Marker]) -> None:
        self.markers = tuple(markers)

    def follow(self, event: MapEvent) -> None:
        """Keep the viewport where the user left it on the next render."""
        self.center = event.center
        if event.zoom is not None:
            self.zoom = event.zoom
        if event.is_settled:
            self.last_settled = event.center

    def build_map(self) -> folium.Map:
        location = [self.center.latitude, self.center.longitude] if self.center else None
        fmap = folium.Map(
            location=location,
            zoom_start=self.zoom,
            tiles=self.tiles,
            control_scale=True,
        )
        if self.user_location is not None:
            folium.Marker(
                [self.user_location.latitude, self.user_location.longitude],
                tooltip="You",
                icon=folium.Icon(color="blue", icon="user"),
            ).add_to(fmap)
        for marker in self.markers:
            folium.Marker(
                [marker.coordinate.latitude, marker.coordinate.longitude],
                icon=folium.Icon(color=marker.color, icon=marker.icon),
            ).add_to(fmap)
        return fmap


def settled_event(output: Mapping[str, Any] | None) -> MapEvent | None:
    """Turn the dict returned by ``st_folium`` into a move-end event."""
    if not output:
        return None
    center = output.get("center")
    if not center or center.get("lat") is None or center.get("lng") is None:
        return None
    zoom = output.get("zoom")
    return MapEvent(
        kind=MapEventKind.MOVE_END,
        center=Coordinate(float(center["lat"]), float(center["lng"])),
        zoom=int(zoom) if zoom is not None else None,
    )


def has_moved(previous: Coordinate | None, current: Coordinate,
              threshold_m: float = MOVE_THRESHOLD_M) -> bool:
    if previous is None:
        return True
    return distance_m(previous, current) > threshold_m


def marker_rows(markers: Sequence[Marker], origin: Coordinate | None) -> list[dict]:
    rows = []
    for marker in markers:
        row = {
            "Latitude": marker.coordinate.latitude,
            "Longitude": marker.coordinate.longitude,
        }
        if origin is not None:
            row["Distance (m)"] = round(distance_m(origin, marker.coordinate))
        rows.append(row)
    return rows


def needs_consent(settings: Settings) -> bool:
    """The IP lookup shares the address with a third party; ask first."""
    return settings.location_provider == "ip" and not settings.location_consent


def with_consent(settings: Settings, consent: bool) -> Settings:
    return replace(settings, location_consent=consent)


def build_screen(settings: Settings, view: MapView) -> MapScreen:
    repository = HttpMarkerRepository(
        settings.markers_endpoint, timeout=settings.markers_timeout
    )
    acquirer = LocationAcquirer(
        build_location_service(settings), timeout=settings.location_timeout
    )
    refresher = MarkerRefresher(repository, timeout=settings.markers_timeout)
    return MapScreen(acquirer, refresher, view, zoom=settings.map_zoom)
