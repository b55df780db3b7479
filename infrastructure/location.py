from __future__ import annotations

import asyncio

import requests

from core.config import Settings
from domain.location import LocationService, PermissionStatus
from domain.models import Coordinate
from infrastructure.constants import IP_LOCATION_HEADERS, TIMEOUT


class StaticLocationService(LocationService):
    """
    Location fixed by configuration.
    The service counts as enabled only when a coordinate is configured;
    there is nothing the user could switch on, so a request to enable it
    cannot change the answer.
    """

    def __init__(self, coordinate: Coordinate | None):
        self.coordinate = coordinate

    async def is_service_enabled(self) -> bool:
        return self.coordinate is not None

    async def request_enable_service(self) -> bool:
        return self.coordinate is not None

    async def get_permission_status(self) -> PermissionStatus:
        return PermissionStatus.GRANTED

    async def request_permission(self) -> PermissionStatus:
        return PermissionStatus.GRANTED

    async def get_current_location(self) -> Coordinate:
        if self.coordinate is None:
            raise RuntimeError("No static location configured")
        return self.coordinate


class IpLocationService(LocationService):
    """
    Approximate location from an IP geolocation endpoint.
    Looking the address up sends it to a third party, so permission is only
    granted once the user has consented. The page asks before the lookup
    runs; there is nothing to prompt for from here.
    """

    def __init__(
        self,
        url: str,
        session: requests.Session | None = None,
        consent: bool = False,
        timeout: float = TIMEOUT,
    ):
        self.url = url
        self.consent = consent
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(IP_LOCATION_HEADERS)

    async def is_service_enabled(self) -> bool:
        return True

    async def request_enable_service(self) -> bool:
        return True

    async def get_permission_status(self) -> PermissionStatus:
        return PermissionStatus.GRANTED if self.consent else PermissionStatus.DENIED

    async def request_permission(self) -> PermissionStatus:
        return await self.get_permission_status()

    async def get_current_location(self) -> Coordinate:
        return await asyncio.to_thread(self._lookup)

    def _lookup(self) -> Coordinate:
        r = self.session.get(self.url, timeout=self.timeout)
        r.raise_for_status()
        data = r.json()
        if data.get("status", "success") != "success":
            raise RuntimeError(f"IP lookup failed: {data.get('message', 'unknown error')}")
        return Coordinate(latitude=float(data["lat"]), longitude=float(data["lon"]))

    def close(self):
        if self.session is not None:
            self.session.close()
            self.session = None


def build_location_service(settings: Settings) -> LocationService:
    if settings.location_provider == "ip":
        return IpLocationService(
            settings.ip_location_url,
            consent=settings.location_consent,
            timeout=settings.location_timeout,
        )

    coordinate = None
    if settings.static_latitude is not None and settings.static_longitude is not None:
        coordinate = Coordinate(settings.static_latitude, settings.static_longitude)
    return StaticLocationService(coordinate)
