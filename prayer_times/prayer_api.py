"""Fetch prayer times and Hijri date from the Aladhan API."""

import datetime
import enum
import logging
import time
from dataclasses import dataclass
from typing import NamedTuple, Optional

import pytz
import requests

from prayer_times.location import Coordinate, LocationProvider, resolve_location

logger = logging.getLogger(__name__)

ALADHAN_BASE = "https://api.aladhan.com/v1"

PRAYER_NAMES = ["Fajr", "Sunrise", "Dhuhr", "Asr", "Maghrib", "Isha"]


class CalculationMethod(enum.Enum):
    MWL = "MWL"
    ISNA = "ISNA"
    Egyptian = "Egyptian"
    Makkah = "Makkah"
    Karachi = "Karachi"
    Tehran = "Tehran"
    Jafari = "Jafari"

    @property
    def code(self) -> int:
        """Integer understood by the Aladhan ``method`` query parameter."""
        return METHOD_CODES[self]

    @property
    def description(self) -> str:
        return METHOD_DESCRIPTIONS[self]

    @classmethod
    def from_name(cls, name: str) -> "CalculationMethod":
        for method in cls:
            if method.value.lower() == str(name).strip().lower():
                return method
        raise ValueError(f"Unknown calculation method: {name}")


METHOD_CODES = {
    CalculationMethod.MWL: 3,
    CalculationMethod.ISNA: 2,
    CalculationMethod.Egyptian: 5,
    CalculationMethod.Makkah: 4,
    CalculationMethod.Karachi: 1,
    CalculationMethod.Tehran: 7,
    CalculationMethod.Jafari: 0,
}

METHOD_DESCRIPTIONS = {
    CalculationMethod.MWL: "Muslim World League",
    CalculationMethod.ISNA: "Islamic Society of North America",
    CalculationMethod.Egyptian: "Egyptian General Authority of Survey",
    CalculationMethod.Makkah: "Umm Al-Qura University, Makkah",
    CalculationMethod.Karachi: "University of Islamic Sciences, Karachi",
    CalculationMethod.Tehran: "Institute of Geophysics, University of Tehran",
    CalculationMethod.Jafari: "Shia Ithna-Ashari, Leva Institute, Qum",
}

DEFAULT_METHOD = CalculationMethod.MWL


@dataclass(frozen=True)
class PrayerTimings:
    Fajr: str
    Sunrise: str
    Dhuhr: str
    Asr: str
    Maghrib: str
    Isha: str

    @classmethod
    def from_dict(cls, raw: dict) -> "PrayerTimings":
        """Parse the six timings, raising ValueError for any value that is not HH:MM."""
        timings = {}
        for name in PRAYER_NAMES:
            value = raw[name]
            if not isinstance(value, str):
                raise ValueError(f"{name} timing is not a string: {value!r}")
            # Aladhan may append a zone label, e.g. "04:30 (PKT)"
            value = value[:5]
            datetime.datetime.strptime(value, "%H:%M")
            timings[name] = value
        return cls(**timings)

    def get(self, name: str) -> str:
        return getattr(self, name)

    def items(self) -> list:
        """(name, "HH:MM") pairs in canonical prayer order."""
        return [(name, self.get(name)) for name in PRAYER_NAMES]


@dataclass(frozen=True)
class HijriDate:
    date: str
    day: str
    month_en: str
    month_ar: str
    year: str


@dataclass(frozen=True)
class PrayerMeta:
    latitude: float
    longitude: float
    timezone: str
    method_name: Optional[str] = None


@dataclass(frozen=True)
class PrayerTimeRecord:
    timings: PrayerTimings
    readable_date: str
    hijri: HijriDate
    meta: PrayerMeta

    @classmethod
    def from_api(cls, data: dict) -> "PrayerTimeRecord":
        """
        Build a record from the ``data`` object of an Aladhan timings response.

        Raises KeyError, TypeError or ValueError when a required field is
        missing or has the wrong shape.
        """
        date = data["date"]
        hijri = date["hijri"]
        meta = data["meta"]
        return cls(
            timings=PrayerTimings.from_dict(data["timings"]),
            readable_date=date["readable"],
            hijri=HijriDate(
                date=hijri["date"],
                day=str(hijri.get("day", hijri["date"].split("-")[0])),
                month_en=hijri["month"]["en"],
                month_ar=hijri["month"]["ar"],
                year=str(hijri["year"]),
            ),
            meta=PrayerMeta(
                latitude=float(meta["latitude"]),
                longitude=float(meta["longitude"]),
                timezone=meta["timezone"],
                method_name=(meta.get("method") or {}).get("name"),
            ),
        )


@dataclass(frozen=True)
class FetchOutcome:
    record: PrayerTimeRecord
    used_fallback_location: bool


class NextPrayer(NamedTuple):
    name: str
    time: str
    tomorrow: bool = False


def fetch_timings(
    coordinate: Coordinate,
    method: CalculationMethod = DEFAULT_METHOD,
    timestamp: Optional[int] = None,
    timeout: float = 10,
) -> Optional[PrayerTimeRecord]:
    """
    Fetch today's prayer times for a coordinate.

    Returns None instead of raising on transport errors, non-success HTTP
    statuses, a payload whose ``code`` is not 200, or a payload that cannot
    be parsed into a full record.
    """
    if timestamp is None:
        timestamp = int(time.time())
    url = f"{ALADHAN_BASE}/timings/{timestamp}"
    params = {
        "latitude": coordinate.latitude,
        "longitude": coordinate.longitude,
        "method": method.code,
    }
    try:
        resp = requests.get(url, params=params, timeout=timeout)
    except (requests.RequestException, ValueError) as exc:
        # ValueError: urllib3 rejects a timeout that is not a number
        logger.error("Error fetching prayer times: %s", exc)
        return None

    if not resp.ok:
        logger.error("Error fetching prayer times: HTTP status %s", resp.status_code)
        return None

    try:
        body = resp.json()
    except ValueError:
        logger.error("Error fetching prayer times: response is not JSON")
        return None

    if not isinstance(body, dict) or body.get("code") != 200 or not body.get("data"):
        logger.error("Invalid Aladhan API response: %.200r", body)
        return None

    try:
        return PrayerTimeRecord.from_api(body["data"])
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        logger.error("Malformed Aladhan API response: %r", exc)
        return None


def get_prayer_times_for_current_location(
    provider: LocationProvider,
    method: CalculationMethod = DEFAULT_METHOD,
    timeout: float = 10,
) -> Optional[FetchOutcome]:
    """Resolve the location (with fallback) and fetch its prayer times."""
    location = resolve_location(provider, timeout=timeout)
    record = fetch_timings(location.coordinate, method, timeout=timeout)
    if record is None:
        return None
    return FetchOutcome(record=record, used_fallback_location=location.used_fallback)


def to_minutes(time_str: str) -> int:
    """Convert 'HH:MM' to minutes since midnight."""
    hour, minute = time_str.split(":")
    return int(hour) * 60 + int(minute)


def next_prayer(timings: PrayerTimings, now) -> NextPrayer:
    """
    Return the next prayer after ``now`` (anything with hour and minute).

    A prayer whose time equals ``now`` has already passed. After Isha the
    result is tomorrow's Fajr, carrying today's Fajr time string.
    """
    current = now.hour * 60 + now.minute
    for name, time_str in timings.items():
        if to_minutes(time_str) > current:
            return NextPrayer(name, time_str)
    return NextPrayer("Fajr", timings.Fajr, tomorrow=True)


def format_12_hour(time_str: str) -> str:
    """Format 'HH:MM' as 'H:MM AM|PM'."""
    hours, minutes = time_str.split(":")
    hour = int(hours)
    ampm = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minutes} {ampm}"


def local_now(record: PrayerTimeRecord) -> datetime.datetime:
    """Current time in the record's timezone, or the local clock if unknown."""
    try:
        tz = pytz.timezone(record.meta.timezone)
    except pytz.UnknownTimeZoneError:
        logger.warning("Unknown timezone %r, using local time", record.meta.timezone)
        return datetime.datetime.now()
    return datetime.datetime.now(tz)


def time_str_to_today_dt(time_str: str, now: datetime.datetime = None) -> datetime.datetime:
    """
    Convert 'HH:MM' string to a datetime on the same day as ``now``.
    Without ``now``, returns a naive datetime for today.
    """
    if now is None:
        now = datetime.datetime.now()
    hour, minute = map(int, time_str.split(":"))
    return now.replace(hour=hour, minute=minute, second=0, microsecond=0)


def next_prayer_datetime(upcoming: NextPrayer, now: datetime.datetime) -> datetime.datetime:
    """Datetime of ``upcoming`` relative to ``now``, on the next day for tomorrow's Fajr."""
    dt = time_str_to_today_dt(upcoming.time, now=now)
    if upcoming.tomorrow:
        naive = dt.replace(tzinfo=None) + datetime.timedelta(days=1)
        if hasattr(now.tzinfo, "localize"):
            # pytz zones need localize() to pick tomorrow's UTC offset
            dt = now.tzinfo.localize(naive)
        else:
            dt = naive.replace(tzinfo=now.tzinfo)
    return dt


def seconds_until(target_dt: datetime.datetime, now: datetime.datetime = None) -> int:
    """Return seconds from now until target_dt (can be negative if past)."""
    if now is None:
        now = datetime.datetime.now(target_dt.tzinfo)
    delta = target_dt - now
    return int(delta.total_seconds())


def format_countdown(seconds: int) -> str:
    """Format seconds into HH:MM:SS countdown string."""
    if seconds < 0:
        return "00:00:00"
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{h:02d}:{m:02d}:{s:02d}"
