from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Sequence

from domain.models import Coordinate, Marker


class MapView(ABC):
    """Abstraction for the widget that draws the map."""

    @abstractmethod
    def set_center(self, center: Coordinate, zoom: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def show_user_location(self, location: Coordinate) -> None:
        raise NotImplementedError

    @abstractmethod
    def render_markers(self, markers: Sequence[Marker]) -> None:
        """Replace the drawn marker overlay with ``markers``."""
        raise NotImplementedError
