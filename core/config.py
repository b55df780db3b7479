"""Runtime configuration for the map viewer.

Values come from the process environment; a local ``.env`` file is loaded
first so the Streamlit page and the scripts share one set of settings.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_MARKERS_ENDPOINT = "https://example.com/api/markers"
DEFAULT_IP_LOCATION_URL = "http://ip-api.com/json"
DEFAULT_TILES = "OpenStreetMap"
LOCATION_PROVIDERS = ("static", "ip")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

_TRUTHY = {"1", "true", "yes", "on"}


def _float_env(name: str, default: float | None) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True, slots=True)
class Settings:
    markers_endpoint: str = DEFAULT_MARKERS_ENDPOINT
    markers_timeout: float = 10.0
    location_timeout: float = 10.0
    location_provider: str = "static"
    static_latitude: float | None = None
    static_longitude: float | None = None
    ip_location_url: str = DEFAULT_IP_LOCATION_URL
    location_consent: bool = False
    map_zoom: int = 13
    tiles: str = DEFAULT_TILES
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()

        provider = os.getenv("LOCATION_PROVIDER", "static").strip().lower()
        if provider not in LOCATION_PROVIDERS:
            raise ValueError(
                f"LOCATION_PROVIDER must be one of {LOCATION_PROVIDERS}, got {provider!r}"
            )

        return cls(
            markers_endpoint=os.getenv("MARKERS_ENDPOINT", DEFAULT_MARKERS_ENDPOINT),
            markers_timeout=_float_env("MARKERS_TIMEOUT", 10.0),
            location_timeout=_float_env("LOCATION_TIMEOUT", 10.0),
            location_provider=provider,
            static_latitude=_float_env("STATIC_LATITUDE", None),
            static_longitude=_float_env("STATIC_LONGITUDE", None),
            ip_location_url=os.getenv("IP_LOCATION_URL", DEFAULT_IP_LOCATION_URL),
            location_consent=os.getenv("LOCATION_CONSENT", "").strip().lower() in _TRUTHY,
            map_zoom=_int_env("MAP_ZOOM", 13),
            tiles=os.getenv("TILE_URL", DEFAULT_TILES),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
