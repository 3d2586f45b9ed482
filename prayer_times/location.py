"""Location resolution with a fixed fallback, plus manual location config."""

import enum
import json
import logging
import os
from dataclasses import dataclass
from typing import NamedTuple

import requests

logger = logging.getLogger(__name__)

IPAPI_URL = "http://ip-api.com/json/"

CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".prayertime")
CONFIG_FILE = os.path.join(CONFIG_DIR, "location.json")

MANUAL_LOCATION_KEYS = ("lat", "lon")


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


# Mecca, Saudi Arabia
FALLBACK_LOCATION = Coordinate(latitude=21.4225, longitude=39.8262)


class PermissionStatus(enum.Enum):
    GRANTED = "granted"
    DENIED = "denied"


class Accuracy(enum.Enum):
    LOW = "low"
    BALANCED = "balanced"
    HIGH = "high"


class LocationUnavailable(Exception):
    """The provider could not report a position."""


class LocationResult(NamedTuple):
    coordinate: Coordinate
    used_fallback: bool


class LocationProvider:
    """Source of the current position, asked for permission before each read."""

    def request_permission(self) -> PermissionStatus:
        raise NotImplementedError

    def get_current_position(self, accuracy: Accuracy = Accuracy.BALANCED, timeout: float = 10.0) -> Coordinate:
        """Return the current position or raise LocationUnavailable."""
        raise NotImplementedError


class IPLocationProvider(LocationProvider):
    """Approximate position from IP geolocation (ip-api.com)."""

    def __init__(self, consent: bool = True):
        self.consent = consent

    def request_permission(self) -> PermissionStatus:
        return PermissionStatus.GRANTED if self.consent else PermissionStatus.DENIED

    def get_current_position(self, accuracy: Accuracy = Accuracy.BALANCED, timeout: float = 10.0) -> Coordinate:
        # IP geolocation has a single accuracy tier
        resp = requests.get(
            IPAPI_URL,
            params={"fields": "status,message,lat,lon"},
            timeout=timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        if data.get("status") != "success":
            raise LocationUnavailable(data.get("message") or "IP geolocation failed")
        try:
            return Coordinate(latitude=float(data["lat"]), longitude=float(data["lon"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise LocationUnavailable(f"IP geolocation returned no coordinates: {exc}") from exc


class ManualLocationProvider(LocationProvider):
    """Position taken from the location saved with save_manual_location()."""

    def request_permission(self) -> PermissionStatus:
        if load_manual_location() is None:
            return PermissionStatus.DENIED
        return PermissionStatus.GRANTED

    def get_current_position(self, accuracy: Accuracy = Accuracy.BALANCED, timeout: float = 10.0) -> Coordinate:
        location = load_manual_location()
        if location is None:
            raise LocationUnavailable("No manual location saved")
        return Coordinate(latitude=float(location["lat"]), longitude=float(location["lon"]))


def default_provider(settings: dict) -> LocationProvider:
    """Saved manual location first, otherwise IP geolocation if consented."""
    if load_manual_location() is not None:
        return ManualLocationProvider()
    return IPLocationProvider(consent=bool(settings.get("use_ip_location", True)))


def get_fallback_location() -> Coordinate:
    return FALLBACK_LOCATION


def resolve_location(provider: LocationProvider, timeout: float = 10.0) -> LocationResult:
    """
    Resolve the current coordinate through ``provider``.

    Never raises: a refused or failed permission request, or a failed
    position read, yields FALLBACK_LOCATION with used_fallback=True.
    """
    try:
        permission = provider.request_permission()
    except Exception:
        logger.exception("Error requesting location permission")
        permission = PermissionStatus.DENIED

    if permission != PermissionStatus.GRANTED:
        logger.warning("Location permission denied, using fallback location (Mecca)")
        return LocationResult(FALLBACK_LOCATION, True)

    try:
        coordinate = provider.get_current_position(Accuracy.BALANCED, timeout)
    except Exception as exc:
        logger.warning("Error getting current location (%s), using fallback location (Mecca)", exc)
        return LocationResult(FALLBACK_LOCATION, True)

    logger.debug("Resolved location %s", coordinate)
    return LocationResult(coordinate, False)


def save_manual_location(location: dict) -> None:
    """Save a manually-set location to the config file."""
    os.makedirs(CONFIG_DIR, exist_ok=True)
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(location, f, indent=2)


def load_manual_location() -> dict | None:
    """Load a previously saved manual location, or return None."""
    if not os.path.isfile(CONFIG_FILE):
        return None
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable manual location %s: %s", CONFIG_FILE, exc)
        return None
    if isinstance(data, dict) and all(k in data for k in MANUAL_LOCATION_KEYS):
        return data
    logger.warning("Ignoring incomplete manual location %s", CONFIG_FILE)
    return None


def clear_manual_location() -> None:
    """Remove the saved manual location config."""
    if os.path.isfile(CONFIG_FILE):
        os.remove(CONFIG_FILE)
