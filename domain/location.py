"""
Location service port and the gate decisions of the location lookup.

The decision functions are pure: they take what the service reported and
whether the user was already prompted, and say what to do next. The
acquirer performs the actual service calls.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from domain.models import Coordinate


class PermissionStatus(str, Enum):
    GRANTED = "granted"
    GRANTED_LIMITED = "granted_limited"
    DENIED = "denied"
    DENIED_FOREVER = "denied_forever"

    @property
    def is_granted(self) -> bool:
        return self in (PermissionStatus.GRANTED, PermissionStatus.GRANTED_LIMITED)


class GateStep(str, Enum):
    REQUEST_SERVICE = "request_service"
    CHECK_PERMISSION = "check_permission"
    REQUEST_PERMISSION = "request_permission"
    QUERY_LOCATION = "query_location"
    UNAVAILABLE = "unavailable"


class UnavailableReason(str, Enum):
    SERVICE_DISABLED = "service disabled"
    PERMISSION_DENIED = "permission denied"


def service_step(enabled: bool, prompted: bool) -> GateStep:
    if enabled:
        return GateStep.CHECK_PERMISSION
    if not prompted:
        return GateStep.REQUEST_SERVICE
    return GateStep.UNAVAILABLE


def permission_step(status: PermissionStatus, prompted: bool) -> GateStep:
    if status.is_granted:
        return GateStep.QUERY_LOCATION
    # DENIED_FOREVER can no longer be prompted for
    if status is PermissionStatus.DENIED and not prompted:
        return GateStep.REQUEST_PERMISSION
    return GateStep.UNAVAILABLE


class LocationService(ABC):
    """Abstraction for a device or network location provider."""

    @abstractmethod
    async def is_service_enabled(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def request_enable_service(self) -> bool:
        """Ask the user to enable the service; ``True`` if it is now enabled."""
        raise NotImplementedError

    @abstractmethod
    async def get_permission_status(self) -> PermissionStatus:
        raise NotImplementedError

    @abstractmethod
    async def request_permission(self) -> PermissionStatus:
        raise NotImplementedError

    @abstractmethod
    async def get_current_location(self) -> Coordinate:
        raise NotImplementedError
