"""Value types passed between the resolver, fetcher, clock and UI."""

import datetime
from dataclasses import dataclass, field
from typing import Optional

PRAYER_NAMES = ("Fajr", "Dhuhr", "Asr", "Maghrib", "Isha")


@dataclass(frozen=True)
class GeoCandidate:
    """One ranked place-search hit offered to the user."""

    name: str
    country: str
    region: str
    latitude: float
    longitude: float
    priority: float = 0.0
    place_type: str = ""
    place_class: str = ""
    importance: float = 0.0
    display_name: str = ""

    @property
    def subtitle(self) -> str:
        return ", ".join(p for p in (self.region, self.country) if p) or "Location"

    def as_hit(self) -> dict:
        """Return the candidate in the raw search-hit shape so it can be ranked again."""
        return {
            "name": self.name,
            "type": self.place_type,
            "class": self.place_class,
            "importance": self.importance,
            "lat": self.latitude,
            "lon": self.longitude,
            "display_name": self.display_name,
            "address": {"country": self.country, "state": self.region},
        }


@dataclass(frozen=True)
class ResolvedLocation:
    latitude: float
    longitude: float
    city_name: str
    resolved_at: float  # epoch seconds


@dataclass(frozen=True)
class HijriDate:
    day: str
    month_name: str
    year: str

    def __str__(self) -> str:
        return f"{self.day} {self.month_name} {self.year} AH"


@dataclass(frozen=True)
class PrayerSchedule:
    """
    One day's timings for a location.

    prayers is always the five daily prayers in canonical order, each paired
    with an "HH:MM" wall-clock time. Replaced wholesale on every fetch.
    """

    prayers: tuple
    timezone: str
    hijri: Optional[HijriDate] = None
    location_label: Optional[str] = None
    calc_method: Optional[int] = None
    fetched_for: Optional[datetime.date] = None

    def __post_init__(self):
        names = tuple(name for name, _ in self.prayers)
        if names != PRAYER_NAMES:
            raise ValueError(f"prayers must be {PRAYER_NAMES}, got {names}")

    def time_of(self, name: str) -> str:
        return dict(self.prayers)[name]

    @property
    def display_name(self) -> str:
        if self.location_label:
            return self.location_label
        return self.timezone.split("/")[-1].replace("_", " ")


@dataclass(frozen=True)
class ClockState:
    next_prayer_name: str
    next_prayer_at: datetime.datetime
    seconds_until_next: int
    countdown: str
    active_index: int
    active_prayer_name: str
    last_third_of_night: str


@dataclass
class SessionState:
    """Everything the orchestration layer knows at a given moment."""

    calc_method: int
    location: Optional[ResolvedLocation] = None
    schedule: Optional[PrayerSchedule] = None
    suggestions: list = field(default_factory=list)
    dark_mode: bool = False
    last_error: Optional[str] = None

    @property
    def timezone(self) -> Optional[str]:
        return self.schedule.timezone if self.schedule else None
