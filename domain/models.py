from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from core.exceptions import MapViewerError


@dataclass(frozen=True, slots=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class Marker:
    coordinate: Coordinate
    icon: str = "map-marker"
    color: str = "red"
    width: int = 80
    height: int = 80


class MapEventKind(str, Enum):
    MOVE_START = "move_start"
    MOVE = "move"
    MOVE_END = "move_end"


@dataclass(frozen=True, slots=True)
class MapEvent:
    kind: MapEventKind
    center: Coordinate
    zoom: int | None = None

    @property
    def is_settled(self) -> bool:
        return self.kind is MapEventKind.MOVE_END


class LocationStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    UNAVAILABLE = "unavailable"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class LocationState:
    """Outcome of the one-shot location lookup of a screen session."""

    status: LocationStatus = LocationStatus.PENDING
    coordinate: Coordinate | None = None
    error: MapViewerError | None = None

    @classmethod
    def pending(cls) -> "LocationState":
        return cls()

    @classmethod
    def resolved(cls, coordinate: Coordinate) -> "LocationState":
        return cls(LocationStatus.RESOLVED, coordinate=coordinate)

    @classmethod
    def unavailable(cls, error: MapViewerError) -> "LocationState":
        return cls(LocationStatus.UNAVAILABLE, error=error)

    @classmethod
    def failed(cls, error: MapViewerError) -> "LocationState":
        return cls(LocationStatus.FAILED, error=error)

    @property
    def is_settled(self) -> bool:
        return self.status is not LocationStatus.PENDING
