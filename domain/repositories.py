from __future__ import annotations
import math
from abc import ABC, abstractmethod
from numbers import Real
from typing import Any, List, Mapping

from core.exceptions import MarkerFetchFailedError
from domain.models import Coordinate, Marker


class MarkerRepository(ABC):
    """Abstraction for the markers API."""

    @abstractmethod
    async def fetch(self, center: Coordinate) -> Any:
        """
        Return the decoded response body for markers around ``center``.
        Raises ``MarkerFetchFailedError`` when the request does not succeed.
        """
        raise NotImplementedError


_LIMITS = {"latitude": 90.0, "longitude": 180.0}


def _number(item: Mapping, key: str, index: int) -> float:
    value = item.get(key)
    if isinstance(value, bool) or not isinstance(value, Real):
        raise MarkerFetchFailedError(
            f"Malformed marker at index {index}: {key!r} is not a number"
        )
    value = float(value)
    # json decodes NaN and Infinity
    if not math.isfinite(value) or abs(value) > _LIMITS[key]:
        raise MarkerFetchFailedError(
            f"Malformed marker at index {index}: {key!r} out of range ({value})"
        )
    return value


def parse_markers(payload: Any) -> List[Marker]:
    """Map a markers response body onto ``Marker`` objects, keeping order."""
    if not isinstance(payload, list):
        raise MarkerFetchFailedError(
            f"Malformed markers response: expected a list, got {type(payload).__name__}"
        )

    markers = []
    for index, item in enumerate(payload):
        if not isinstance(item, Mapping):
            raise MarkerFetchFailedError(f"Malformed marker at index {index}: not an object")
        markers.append(
            Marker(
                coordinate=Coordinate(
                    latitude=_number(item, "latitude", index),
                    longitude=_number(item, "longitude", index),
                )
            )
        )
    return markers
