from __future__ import annotations
from enum import Enum


class ErrorCode(str, Enum):
    OK = "OK"
    LOCATION_UNAVAILABLE = "LOCATION_UNAVAILABLE"
    LOCATION_QUERY_FAILED = "LOCATION_QUERY_FAILED"
    MARKER_FETCH_FAILED = "MARKER_FETCH_FAILED"
    INTERNAL = "INTERNAL"


class MapViewerError(Exception):
    """Base class for all map-viewer related errors."""

    def __init__(self, code: ErrorCode, message: str):
        super().__init__(message)
        self.code: ErrorCode = code
        self.message: str = message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, msg={self.message})"


class LocationUnavailableError(MapViewerError):
    """Location service disabled or permission refused after prompting."""

    def __init__(self, reason: str | None = None) -> None:
        message = "Location unavailable"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(ErrorCode.LOCATION_UNAVAILABLE, message)
        self.reason = reason


class LocationQueryFailedError(MapViewerError):
    def __init__(self, msg: str):
        super().__init__(ErrorCode.LOCATION_QUERY_FAILED, msg)


class MarkerFetchFailedError(MapViewerError):
    def __init__(self, msg: str, status_code: int | None = None):
        super().__init__(ErrorCode.MARKER_FETCH_FAILED, msg)
        self.status_code = status_code
